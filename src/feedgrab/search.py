"""Search box interaction for the gallery page."""

import logging

from playwright.sync_api import Page, TimeoutError as PlaywrightTimeout

from .errors import ElementNotFound

logger = logging.getLogger(__name__)

SEARCH_INPUT_SELECTOR = 'input[type="search"].c-tag-input__input[placeholder="Start searching…"]'
SEARCH_SUBMIT_SELECTOR = ".c-tag-input__slot pf-icon"
SELECTOR_TIMEOUT = 30000


class SearchBoxInput:
    """Types a query into the site's tag search box and submits it."""

    def __init__(self, selector_timeout: int = SELECTOR_TIMEOUT):
        self.selector_timeout = selector_timeout

    def submit(self, page: Page, query: str) -> None:
        try:
            search_input = page.wait_for_selector(SEARCH_INPUT_SELECTOR, timeout=self.selector_timeout)
        except PlaywrightTimeout:
            raise ElementNotFound(SEARCH_INPUT_SELECTOR) from None
        if search_input is None:
            raise ElementNotFound(SEARCH_INPUT_SELECTOR)

        search_input.scroll_into_view_if_needed()
        page.wait_for_timeout(500)
        search_input.click()
        search_input.fill("")
        search_input.fill(query)
        page.keyboard.press("Enter")
        page.wait_for_timeout(1000)

        try:
            page.click(SEARCH_SUBMIT_SELECTOR, timeout=self.selector_timeout)
        except PlaywrightTimeout:
            raise ElementNotFound(SEARCH_SUBMIT_SELECTOR) from None
        page.wait_for_timeout(2000)
        logger.info("query submitted term=%s", query)
