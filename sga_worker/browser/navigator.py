from collections.abc import AsyncIterator, Iterator
from contextlib import asynccontextmanager, contextmanager
from pathlib import Path
from urllib.parse import urlsplit

from playwright.async_api import Download, Route, async_playwright
from playwright.async_api import Error as PlaywrightError
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from sga_worker.browser.session import Session
from sga_worker.exceptions import ElementNotFound, NavigationTimeout, SessionError
from sga_worker.logging.logger import Log

SECURE_SCHEMES = frozenset({"https", "wss"})

# The portal serves mixed content; these keep Chromium from upgrading or
# refusing plain-HTTP resources.
LAUNCH_ARGS = [
    "--no-sandbox",
    "--disable-setuid-sandbox",
    "--disable-web-security",
    "--disable-features=IsolateOrigins,BlockInsecurePrivateNetworkRequests",
    "--disable-site-isolation-trials",
    "--disable-hsts",
    "--ignore-certificate-errors",
    "--allow-running-insecure-content",
]

PARTIAL_SUFFIX = ".part"


def is_secure_url(url: str) -> bool:
    """True when the URL declares an encrypted scheme."""
    return urlsplit(url).scheme.lower() in SECURE_SCHEMES


class Navigator:
    """Owns browser sessions and exposes timeout-bounded page primitives."""

    def __init__(
        self,
        *,
        headless: bool = True,
        executable_path: str | None = None,
        navigation_timeout_seconds: float = 30.0,
        element_timeout_seconds: float = 30.0,
    ) -> None:
        self._headless = headless
        self._executable_path = executable_path
        self._navigation_timeout = navigation_timeout_seconds
        self._element_timeout = element_timeout_seconds

    @asynccontextmanager
    async def session(self, download_dir: Path) -> AsyncIterator[Session]:
        """Open a session for the duration of the block and always close it."""
        session = await self.open(download_dir)
        try:
            yield session
        finally:
            await self.close(session)

    async def open(self, download_dir: Path) -> Session:
        """Launch a browser with the network policy and download staging installed.

        Raises:
            SessionError: if the browser cannot be started or configured.
        """
        download_dir.mkdir(parents=True, exist_ok=True)
        playwright = None
        browser = None
        try:
            playwright = await async_playwright().start()
            browser = await playwright.chromium.launch(
                headless=self._headless,
                executable_path=self._executable_path,
                args=LAUNCH_ARGS,
            )
            context = await browser.new_context(accept_downloads=True, ignore_https_errors=True)
            page = await context.new_page()
        except PlaywrightError as exc:
            if browser is not None:
                await browser.close()
            if playwright is not None:
                await playwright.stop()
            raise SessionError(f"Browser could not be started: {exc}") from exc

        session = Session(
            playwright=playwright,
            browser=browser,
            context=context,
            page=page,
            download_dir=download_dir,
        )
        try:
            await self.configure_network_policy(session)
        except PlaywrightError as exc:
            await self.close(session)
            raise SessionError(f"Network policy could not be installed: {exc}") from exc
        self._install_download_handler(session)
        Log.debug(f"Browser session opened, staging downloads in {download_dir}")
        return session

    async def configure_network_policy(self, session: Session) -> None:
        """Abort every request with a secure scheme and let the rest through."""
        await session.context.route("**/*", self._apply_network_policy)

    @staticmethod
    async def _apply_network_policy(route: Route) -> None:
        if is_secure_url(route.request.url):
            Log.debug(f"Blocked secure request: {route.request.url}")
            await route.abort()
        else:
            await route.continue_()

    def _install_download_handler(self, session: Session) -> None:
        async def on_download(download: Download) -> None:
            session.download_started.set()
            Log.info(f"Download started: {download.suggested_filename}")
            await self._stage_download(download, session.download_dir)

        session.page.on("download", on_download)

    @staticmethod
    async def _stage_download(download: Download, directory: Path) -> None:
        """Save under a temporary name and rename once the copy is complete."""
        name = Path(download.suggested_filename).name or "download"
        partial = directory / f"{name}{PARTIAL_SUFFIX}"
        try:
            await download.save_as(partial)
        except PlaywrightError as exc:
            Log.warning(f"Download {name} could not be staged: {exc}")
            return
        partial.rename(directory / name)

    async def close(self, session: Session) -> None:
        """Close the browser and stop the driver. Safe to call more than once."""
        if session.closed:
            return
        session.closed = True
        try:
            await session.browser.close()
        except PlaywrightError as exc:
            Log.warning(f"Browser did not close cleanly: {exc}")
        finally:
            await session.playwright.stop()
        Log.debug("Browser session closed")

    async def navigate(self, session: Session, url: str, timeout: float | None = None) -> None:
        """Load a URL and wait for network idle.

        Raises:
            NavigationTimeout: if network idle is not reached within the timeout.
            SessionError: if the browser fails to load the page at all.
        """
        timeout = timeout if timeout is not None else self._navigation_timeout
        try:
            await session.page.goto(url, wait_until="networkidle", timeout=_ms(timeout))
        except PlaywrightTimeoutError as exc:
            raise NavigationTimeout(f"{url} did not settle within {timeout}s") from exc
        except PlaywrightError as exc:
            raise SessionError(f"Navigation to {url} failed: {exc}") from exc

    async def wait_for(self, session: Session, selector: str, timeout: float | None = None) -> None:
        timeout = timeout if timeout is not None else self._element_timeout
        with self._element_errors("wait", selector, timeout):
            await session.page.wait_for_selector(selector, state="visible", timeout=_ms(timeout))

    async def type_text(self, session: Session, selector: str, text: str) -> None:
        # Key by key: the portal's form widgets only register keyboard input.
        with self._element_errors("type", selector, self._element_timeout):
            await session.page.locator(selector).first.press_sequentially(
                text, timeout=_ms(self._element_timeout)
            )

    async def click(self, session: Session, selector: str) -> None:
        with self._element_errors("click", selector, self._element_timeout):
            await session.page.locator(selector).first.click(timeout=_ms(self._element_timeout))

    async def click_by_label(self, session: Session, tag: str, label: str) -> None:
        """Click the first `tag` element whose visible text contains `label`."""
        locator = session.page.locator(tag).filter(has_text=label).first
        try:
            with self._element_errors("click", f"{tag}:{label}", self._element_timeout):
                await locator.click(timeout=_ms(self._element_timeout))
        except ElementNotFound:
            Log.warning(f"No <{tag}> labelled '{label}' found; the portal layout may have changed")
            raise

    async def read_attribute(self, session: Session, selector: str, attribute: str) -> str:
        with self._element_errors("read", selector, self._element_timeout):
            value = await session.page.locator(selector).first.get_attribute(
                attribute, timeout=_ms(self._element_timeout)
            )
        if value is None:
            raise ElementNotFound(f"'{selector}' has no '{attribute}' attribute")
        return value

    @staticmethod
    @contextmanager
    def _element_errors(action: str, selector: str, timeout: float) -> Iterator[None]:
        try:
            yield
        except PlaywrightTimeoutError as exc:
            raise ElementNotFound(
                f"{action}: '{selector}' not found within {timeout}s"
            ) from exc
        except PlaywrightError as exc:
            raise SessionError(f"{action} on '{selector}' failed: {exc}") from exc


def _ms(seconds: float) -> float:
    return seconds * 1000
