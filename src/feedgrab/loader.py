"""Drive the feed's scroll / "load more" cycle for one search term."""

import logging
from typing import Any, Callable, List, Optional

from playwright.sync_api import Error as PlaywrightError, Page, TimeoutError as PlaywrightTimeout

from .checkpoint import CheckpointStore
from .collector import ResponseCollector
from .config import HarvestConfig
from .convergence import ConvergenceDetector, Decision

logger = logging.getLogger(__name__)

LOAD_MORE_SELECTOR = "div[load-more-btn] button.place-view-btn"

SCROLL_TO_BOTTOM_JS = "() => window.scrollTo(0, document.body.scrollHeight)"
FEED_HEIGHT_JS = "() => document.body.scrollHeight"

# Resolves on the first DOM mutation, or after `timeout` ms if the page is still.
QUIESCENCE_JS = """
(timeout) => new Promise((resolve) => {
    const observer = new MutationObserver((mutations, obs) => {
        obs.disconnect();
        resolve(true);
    });
    observer.observe(document.body, {childList: true, subtree: true, attributes: true});
    setTimeout(() => {
        observer.disconnect();
        resolve(false);
    }, timeout);
})
"""


class ProgressiveLoader:
    """Loads a feed until it stops growing and checkpoints the captured URLs."""

    def __init__(
        self,
        page: Page,
        config: HarvestConfig,
        store: CheckpointStore,
        detector_factory: Optional[Callable[[str], ConvergenceDetector]] = None,
    ):
        self.page = page
        self.config = config
        self.store = store
        self.detector_factory = detector_factory or (
            lambda term: ConvergenceDetector(config.max_stall_count, label=term)
        )

    def run(self, term: str, prepare: Optional[Callable[[Page, str], Any]] = None) -> List[str]:
        """Collect asset URLs for ``term`` and write its checkpoint.

        ``prepare`` runs after the collector is attached, so responses
        triggered by navigating and submitting the query are captured too.
        """
        with ResponseCollector(self.config.asset_url_prefix) as collector:
            collector.attach(self.page)
            if prepare is not None:
                prepare(self.page, term)
            detector = self.detector_factory(term)
            cycles = 0
            while True:
                cycles += 1
                decision = self._cycle(detector)
                if decision is Decision.STOP:
                    break
            urls = collector.snapshot()

        logger.info(
            "stop term=%s reason=%s cycles=%d urls=%d", term, detector.stop_reason, cycles, len(urls)
        )
        self.store.write(term, urls)
        return urls

    def _cycle(self, detector: ConvergenceDetector) -> Decision:
        page = self.page
        try:
            page.evaluate(SCROLL_TO_BOTTOM_JS)
            page.wait_for_timeout(self.config.settle_delay_ms)

            load_more = page.query_selector(LOAD_MORE_SELECTOR)
            if load_more is None:
                return detector.update(0, has_more=False)

            load_more.click()
            page.wait_for_timeout(self.config.settle_delay_ms)
            self.wait_for_new_content()

            height = page.evaluate(FEED_HEIGHT_JS)
            return detector.update(height)
        except PlaywrightError as exc:
            logger.warning("load cycle fault term=%s error=%s", detector.label, exc)
            return detector.record_fault()

    def wait_for_new_content(self) -> None:
        """Wait for network idle, then for one DOM mutation, each bounded by a timeout."""
        try:
            self.page.wait_for_load_state("networkidle", timeout=self.config.network_idle_timeout_ms)
        except PlaywrightTimeout:
            logger.warning(
                "settle timeout wait=networkidle timeout_ms=%d, proceeding",
                self.config.network_idle_timeout_ms,
            )

        mutated = self.page.evaluate(QUIESCENCE_JS, self.config.quiescence_timeout_ms)
        if not mutated:
            logger.debug("no dom mutation within %d ms", self.config.quiescence_timeout_ms)
