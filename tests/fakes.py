import asyncio
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from pathlib import Path
from types import SimpleNamespace

IMG1_DATA_URL = "data:image/png;base64,SU1HMQ=="


class FakeNavigator:
    """Stand-in for Navigator that records every primitive call.

    `fail_at` injects `error` at the n-th primitive call (0-based). The
    submit click drops `download` into the session's staging directory.
    """

    def __init__(
        self,
        *,
        challenge_src: str = IMG1_DATA_URL,
        download: tuple[str, bytes] | None = ("doc.pdf", b"%PDF-1.4 fake"),
        fail_at: int | None = None,
        error: BaseException | None = None,
        navigate_delay: float = 0.0,
    ) -> None:
        self.challenge_src = challenge_src
        self.download = download
        self.fail_at = fail_at
        self.error = error
        self.navigate_delay = navigate_delay
        self.calls: list[tuple[object, ...]] = []
        self.opened = 0
        self.closed = 0

    @asynccontextmanager
    async def session(self, download_dir: Path) -> AsyncIterator[SimpleNamespace]:
        self.opened += 1
        session = SimpleNamespace(download_dir=download_dir, download_started=asyncio.Event())
        try:
            yield session
        finally:
            self.closed += 1

    async def navigate(
        self, session: SimpleNamespace, url: str, timeout: float | None = None
    ) -> None:
        self._record("navigate", url)
        if self.navigate_delay:
            await asyncio.sleep(self.navigate_delay)

    async def wait_for(
        self, session: SimpleNamespace, selector: str, timeout: float | None = None
    ) -> None:
        self._record("wait_for", selector)

    async def type_text(self, session: SimpleNamespace, selector: str, text: str) -> None:
        self._record("type_text", selector, text)

    async def click(self, session: SimpleNamespace, selector: str) -> None:
        self._record("click", selector)

    async def read_attribute(self, session: SimpleNamespace, selector: str, attribute: str) -> str:
        self._record("read_attribute", selector, attribute)
        return self.challenge_src

    async def click_by_label(self, session: SimpleNamespace, tag: str, label: str) -> None:
        self._record("click_by_label", tag, label)
        if self.download is not None:
            name, data = self.download
            session.download_started.set()
            (session.download_dir / name).write_bytes(data)

    def _record(self, action: str, *args: object) -> None:
        if self.fail_at is not None and len(self.calls) == self.fail_at:
            self.calls.append((action, *args))
            assert self.error is not None
            raise self.error
        self.calls.append((action, *args))

    def typed(self, selector: str) -> list[str]:
        return [c[2] for c in self.calls if c[0] == "type_text" and c[1] == selector]
