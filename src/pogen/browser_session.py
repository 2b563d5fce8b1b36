from __future__ import annotations

import logging
from pathlib import Path
from types import TracebackType
from typing import TYPE_CHECKING

from .errors import BrowserError

if TYPE_CHECKING:
    from playwright.sync_api import Browser, BrowserContext, Page, Playwright

_MISSING_BROWSER_ERROR_HINTS = (
    "executable doesn't exist",
    "executable does not exist",
    "download new browsers",
    "playwright install",
    "could not find browser",
    "failed to launch chromium because executable",
)


def is_missing_browser_error(exc: Exception) -> bool:
    message = str(exc).lower()
    return any(hint in message for hint in _MISSING_BROWSER_ERROR_HINTS)


def normalize_url(raw_url: str) -> str:
    url = raw_url.strip()
    if not url:
        return ""
    if "://" not in url and not url.startswith(("about:", "data:", "file:")):
        url = f"https://{url}"
    return url


class BrowserSession:
    """Headless Chromium page used to discover elements on one URL."""

    def __init__(self, headless: bool = True, viewport: tuple[int, int] = (1280, 720)) -> None:
        self.headless = headless
        self.viewport = viewport
        self.logger = logging.getLogger("pogen.browser")
        self._playwright: Playwright | None = None
        self._browser: Browser | None = None
        self._context: BrowserContext | None = None
        self._page: Page | None = None

    def __enter__(self) -> BrowserSession:
        self.start()
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        traceback: TracebackType | None,
    ) -> None:
        self.close()

    @property
    def page(self) -> Page:
        if self._page is None:
            raise BrowserError("Page not initialized; call start() first.")
        return self._page

    def start(self) -> None:
        if self._page is not None:
            return
        try:
            from playwright.sync_api import sync_playwright
        except ImportError as exc:
            raise BrowserError(f"Playwright is not available: {exc}") from exc

        try:
            self._playwright = sync_playwright().start()
            self._browser = self._playwright.chromium.launch(headless=self.headless)
            width, height = self.viewport
            self._context = self._browser.new_context(viewport={"width": width, "height": height})
            self._page = self._context.new_page()
        except Exception as exc:
            self.close()
            if is_missing_browser_error(exc):
                raise BrowserError(
                    "Chromium is not installed for Playwright. Run `playwright install chromium`.",
                    missing_browser=True,
                ) from exc
            raise BrowserError(f"Could not launch browser: {exc}") from exc
        self.logger.info("Browser launched (headless=%s)", self.headless)

    def navigate(self, raw_url: str) -> str:
        url = normalize_url(raw_url)
        if not url:
            raise BrowserError("Please enter a URL.")
        try:
            self.page.goto(url, wait_until="networkidle")
        except BrowserError:
            raise
        except Exception as exc:
            raise BrowserError(f"Navigation to {url} failed: {exc}", url=url) from exc
        self.logger.info("Navigated to %s", self.page.url)
        return self.page.url

    def screenshot(self, path: Path | str) -> Path:
        target = Path(path)
        target.parent.mkdir(parents=True, exist_ok=True)
        try:
            self.page.screenshot(path=str(target), full_page=True)
        except BrowserError:
            raise
        except Exception as exc:
            raise BrowserError(f"Screenshot failed: {exc}") from exc
        self.logger.info("Screenshot saved to %s", target)
        return target

    def close(self) -> None:
        for closable in (self._context, self._browser):
            if closable is None:
                continue
            try:
                closable.close()
            except Exception as exc:
                self.logger.warning("Ignoring error while closing browser: %s", exc)
        if self._playwright is not None:
            try:
                self._playwright.stop()
            except Exception as exc:
                self.logger.warning("Ignoring error while stopping Playwright: %s", exc)
        self._page = None
        self._context = None
        self._browser = None
        self._playwright = None
