"""End-to-end runs through JobRunner with a scripted portal and the example AI adapter."""

import asyncio
import base64
from pathlib import Path
from types import SimpleNamespace
from unittest.mock import MagicMock

import pytest

from sga_worker.download.capture import DownloadCapture
from sga_worker.inference.challenge_solver import ChallengeSolver
from sga_worker.inference.document_interpreter import DocumentInterpreter
from sga_worker.inference.example_client_adapter import ExampleClientAdapter
from sga_worker.worker.job_runner import JobRunner
from sga_worker.workflow.engine import WorkflowEngine
from sga_worker.workflow.models import Job, WorkflowState
from sga_worker.workflow.portal import PortalLayout
from tests.fakes import FakeNavigator

LAYOUT = PortalLayout()


class ProtocolEchoNavigator(FakeNavigator):
    """Serves a document whose bytes name the protocol typed in that session."""

    async def type_text(self, session: SimpleNamespace, selector: str, text: str) -> None:
        await super().type_text(session, selector, text)
        if selector == LAYOUT.protocol_input:
            session.protocol = text

    async def click_by_label(self, session: SimpleNamespace, tag: str, label: str) -> None:
        self._record("click_by_label", tag, label)
        await asyncio.sleep(0.01)
        session.download_started.set()
        (session.download_dir / "doc.pdf").write_bytes(f"%PDF {session.protocol}".encode())


def _make_runner(
    navigator: FakeNavigator, download_root: Path, download_timeout: float = 1.0
) -> tuple[JobRunner, ExampleClientAdapter]:
    client = ExampleClientAdapter()
    engine = WorkflowEngine(
        navigator=navigator,
        capture=DownloadCapture(settle_delay_seconds=0.01, poll_interval_seconds=0.01),
        solver=ChallengeSolver(client=client, model="example", temperature=0.0),
        interpreter=DocumentInterpreter(client=client, model="example", temperature=0.0),
        layout=LAYOUT,
        download_timeout_seconds=download_timeout,
        job_deadline_seconds=5.0,
    )
    settings = MagicMock()
    settings.download_root = download_root
    return JobRunner(engine, settings), client


@pytest.mark.asyncio
class TestWorkflowIntegration:
    async def test_full_run_returns_document_and_text(
        self, tmp_path: Path, sample_pdf_bytes: bytes
    ) -> None:
        navigator = FakeNavigator(download=("licenca.pdf", sample_pdf_bytes))
        runner, client = _make_runner(navigator, tmp_path)

        result = await runner.run(Job(job_id="job-1", protocol_number="17.120.535-2"))

        assert result.success is True
        assert result.extracted_text == "Texto de exemplo."
        assert base64.b64decode(result.document_base64) == sample_pdf_bytes
        assert navigator.typed(LAYOUT.challenge_answer_input) == ["ABC123"]
        assert [mime for _prompt, mime in client.calls] == ["image/png", "application/pdf"]
        assert list(tmp_path.iterdir()) == []

    async def test_concurrent_jobs_do_not_share_downloads(self, tmp_path: Path) -> None:
        navigator = ProtocolEchoNavigator()
        runner, _client = _make_runner(navigator, tmp_path)

        first, second = await asyncio.gather(
            runner.run(Job(job_id="a", protocol_number="111")),
            runner.run(Job(job_id="b", protocol_number="222")),
        )

        assert base64.b64decode(first.document_base64) == b"%PDF 111"
        assert base64.b64decode(second.document_base64) == b"%PDF 222"
        assert navigator.opened == 2
        assert navigator.closed == 2
        assert list(tmp_path.iterdir()) == []

    async def test_missing_download_fails_after_submit(self, tmp_path: Path) -> None:
        navigator = FakeNavigator(download=None)
        runner, client = _make_runner(navigator, tmp_path, download_timeout=0.05)

        result = await runner.run(Job(job_id="job-2", protocol_number="17.120.535-2"))

        assert result.success is False
        assert result.error is not None
        assert result.error.code == "DownloadTimeout"
        assert result.error.state is WorkflowState.SUBMITTED
        assert navigator.closed == 1
        assert [mime for _prompt, mime in client.calls] == ["image/png"]
        assert list(tmp_path.iterdir()) == []
