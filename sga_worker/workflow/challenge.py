"""Helpers for turning the portal's challenge image into solver input and back."""

import base64
import binascii
import re

from sga_worker.exceptions import ElementNotFound
from sga_worker.workflow.models import ChallengeImage

DEFAULT_IMAGE_MIME_TYPE = "image/jpeg"

_DATA_URL_RE = re.compile(
    r"^data:(?P<mime>[\w.+-]+/[\w.+-]+)?(?:;[\w=-]+)*;base64,", re.IGNORECASE
)
_NON_ALPHANUMERIC_RE = re.compile(r"[^A-Za-z0-9]")


def decode_challenge_image(src: str) -> ChallengeImage:
    """Decode an inline image attribute into raw bytes.

    Accepts a base64 data URL (`data:image/png;base64,...`) or a bare base64
    payload. The data-URL prefix is stripped; the declared mime type is kept,
    defaulting to JPEG.

    Raises:
        ElementNotFound: if the attribute does not hold inline image data.
    """
    payload = src.strip()
    mime_type = DEFAULT_IMAGE_MIME_TYPE
    match = _DATA_URL_RE.match(payload)
    if match:
        mime_type = (match.group("mime") or DEFAULT_IMAGE_MIME_TYPE).lower()
        payload = payload[match.end():]
    payload = "".join(payload.split())
    try:
        data = base64.b64decode(payload, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise ElementNotFound(f"Challenge image has no inline data: {src[:60]!r}") from exc
    if not data:
        raise ElementNotFound("Challenge image is empty")
    return ChallengeImage(data=data, mime_type=mime_type)


def sanitize_challenge_text(text: str) -> str:
    """Keep only ASCII letters and digits from a solver answer."""
    return _NON_ALPHANUMERIC_RE.sub("", text)
