import asyncio
import mimetypes
from pathlib import Path

from sga_worker.browser.session import Session
from sga_worker.exceptions import DownloadTimeout
from sga_worker.logging.logger import Log
from sga_worker.workflow.models import RetrievedDocument

DEFAULT_DOCUMENT_MIME_TYPE = "application/pdf"
TEMPORARY_SUFFIXES = frozenset({".part", ".crdownload", ".tmp"})


class DownloadCapture:
    """Waits for a transfer to land in a staging directory and reads it once.

    The session's download event is treated as a hint only. The directory is
    inspected after the settle delay, and a file is read only when its size
    has not changed between two polls.
    """

    def __init__(
        self,
        settle_delay_seconds: float = 2.0,
        poll_interval_seconds: float = 0.25,
    ) -> None:
        self._settle_delay = settle_delay_seconds
        self._poll_interval = poll_interval_seconds

    async def capture(
        self, session: Session, directory: Path, timeout: float
    ) -> RetrievedDocument:
        """Return the first complete file in `directory`, deleting it after reading.

        Raises:
            DownloadTimeout: if no complete file is present by the deadline.
        """
        loop = asyncio.get_running_loop()
        deadline = loop.time() + max(timeout, self._settle_delay)

        await asyncio.sleep(self._settle_delay)
        if session.download_started.is_set():
            Log.debug("Browser reported a download, checking staging directory")

        seen_sizes: dict[Path, int] = {}
        while True:
            path = self._first_settled_file(directory, seen_sizes)
            if path is not None:
                return self._read_and_discard(path)
            if loop.time() >= deadline:
                raise DownloadTimeout(
                    f"No file appeared in {directory} within {timeout}s"
                )
            await asyncio.sleep(self._poll_interval)

    @staticmethod
    def _first_settled_file(directory: Path, seen_sizes: dict[Path, int]) -> Path | None:
        if not directory.is_dir():
            return None
        candidates = sorted(
            p for p in directory.iterdir()
            if p.is_file() and p.suffix.lower() not in TEMPORARY_SUFFIXES
        )
        if not candidates:
            return None
        first = candidates[0]
        try:
            size = first.stat().st_size
        except FileNotFoundError:
            return None
        previous = seen_sizes.get(first)
        seen_sizes[first] = size
        if previous is None or previous != size or size == 0:
            return None
        return first

    @staticmethod
    def _read_and_discard(path: Path) -> RetrievedDocument:
        try:
            data = path.read_bytes()
        finally:
            path.unlink(missing_ok=True)
        mime_type, _ = mimetypes.guess_type(path.name)
        Log.info(f"Captured download {path.name} ({len(data)} bytes)")
        return RetrievedDocument(
            filename=path.name,
            data=data,
            mime_type=mime_type or DEFAULT_DOCUMENT_MIME_TYPE,
        )
