"""Browser session lifecycle built on Playwright."""

import logging
from typing import Any, Dict, List, Optional

from playwright.sync_api import Browser, BrowserContext, Page, Playwright, sync_playwright

logger = logging.getLogger(__name__)

USER_AGENT = (
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7; rv:120.0) Gecko/20100101 Firefox/120.0"
)


class BrowserDriver:
    """Launches Firefox, seeds the context with cookies, and hands out one page."""

    def __init__(self, headless: bool = False, cookies: Optional[List[Dict[str, Any]]] = None):
        self.headless = headless
        self.cookies = cookies or []
        self._playwright: Optional[Playwright] = None
        self._browser: Optional[Browser] = None
        self._context: Optional[BrowserContext] = None

    def launch(self) -> BrowserContext:
        self._playwright = sync_playwright().start()
        self._browser = self._playwright.firefox.launch(headless=self.headless)
        self._context = self._browser.new_context(user_agent=USER_AGENT)
        if self.cookies:
            self.inject_cookies(self.cookies)
        logger.info("browser launched headless=%s cookies=%d", self.headless, len(self.cookies))
        return self._context

    def inject_cookies(self, cookies: List[Dict[str, Any]]) -> None:
        if self._context is None:
            raise RuntimeError("browser is not launched")
        self._context.add_cookies(cookies)

    def new_page(self) -> Page:
        if self._context is None:
            self.launch()
        return self._context.new_page()

    def close(self) -> None:
        """Close the browser and stop Playwright. Safe to call more than once."""
        try:
            if self._browser is not None:
                self._browser.close()
        finally:
            self._browser = None
            self._context = None
            if self._playwright is not None:
                self._playwright.stop()
                self._playwright = None
        logger.info("browser closed")

    def __enter__(self) -> "BrowserDriver":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()
