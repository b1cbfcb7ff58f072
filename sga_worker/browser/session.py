import asyncio
from dataclasses import dataclass, field
from pathlib import Path

from playwright.async_api import Browser, BrowserContext, Page, Playwright


@dataclass
class Session:
    """One browser instance with its single page, owned by one workflow run."""

    playwright: Playwright
    browser: Browser
    context: BrowserContext
    page: Page
    download_dir: Path
    # Set when the page reports a download; a hint only, never proof of a file.
    download_started: asyncio.Event = field(default_factory=asyncio.Event)
    closed: bool = False
