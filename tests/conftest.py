import io

import pytest
from reportlab.lib.pagesizes import letter
from reportlab.pdfgen import canvas

from tests.fakes import FakeNavigator


@pytest.fixture()
def sample_pdf_bytes() -> bytes:
    """Generate a minimal single-page PDF with known text content."""
    buf = io.BytesIO()
    c = canvas.Canvas(buf, pagesize=letter)
    c.drawString(72, 720, "4 - CONDICIONAMENTO")
    c.drawString(72, 700, "Texto extraido.")
    c.save()
    return buf.getvalue()


@pytest.fixture()
def fake_navigator() -> FakeNavigator:
    return FakeNavigator()
