"""Top-level collect-then-download run."""

from __future__ import annotations

import logging
from collections import Counter
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional

from .browser import BrowserDriver
from .checkpoint import CheckpointStore
from .config import HarvestConfig, load_cookies
from .downloader import Downloader
from .loader import ProgressiveLoader
from .search import SearchBoxInput
from .storage import initialize_directories

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_ERROR = 1


@dataclass
class RunReport:
    terms: List[str]
    captured: Dict[str, int] = field(default_factory=dict)
    counts: Counter = field(default_factory=Counter)
    failed: List[str] = field(default_factory=list)
    error: Optional[str] = None


def build_summary(report: RunReport) -> List[str]:
    lines = [
        "--- Run Summary ---",
        f"terms: {','.join(report.terms)}",
        "captured:",
    ]
    if report.captured:
        for term in report.terms:
            if term in report.captured:
                lines.append(f"  {term}: {report.captured[term]}")
    else:
        lines.append("  (collection skipped)")
    lines.append(f"OK: {report.counts['OK']}")
    lines.append(f"DOWNLOAD_FAIL: {report.counts['DOWNLOAD_FAIL']}")
    lines.append(f"SKIPPED_TERM: {report.counts['SKIPPED_TERM']}")
    lines.append(f"BAD_CHECKPOINT: {report.counts['BAD_CHECKPOINT']}")
    for name in report.failed:
        lines.append(f"  failed: {name}")
    if report.error:
        lines.append(f"error: {report.error}")
    return lines


class SessionRunner:
    """Runs the load loop for every term in order, then downloads every checkpoint."""

    def __init__(
        self,
        config: HarvestConfig,
        driver_factory: Optional[Callable[[], Any]] = None,
        query_input: Optional[Any] = None,
        store: Optional[CheckpointStore] = None,
        downloader: Optional[Downloader] = None,
    ):
        self.config = config
        self.driver_factory = driver_factory or self._default_driver
        self.query_input = query_input or SearchBoxInput()
        self.store = store or CheckpointStore(config.output_dir)
        self.downloader = downloader or Downloader(config, self.store)
        self.report = RunReport(terms=list(config.search_terms))

    def _default_driver(self) -> BrowserDriver:
        return BrowserDriver(headless=self.config.headless, cookies=load_cookies(self.config.cookies_file))

    def _open_search(self, page: Any, term: str) -> None:
        page.goto(self.config.target_url, wait_until="networkidle")
        page.wait_for_load_state("domcontentloaded")
        self.query_input.submit(page, term)

    def collect(self) -> Dict[str, int]:
        """Collection phase. Any exception escaping here is fatal for the run."""
        self.config.require_collection_settings()
        with self.driver_factory() as driver:
            page = driver.new_page()
            loader = ProgressiveLoader(page, self.config, self.store)
            for term in self.config.search_terms:
                logger.info("collecting term=%s", term)
                urls = loader.run(term, prepare=self._open_search)
                self.report.captured[term] = len(urls)
                page.wait_for_timeout(self.config.post_query_delay_ms)
        logger.info("url collection completed terms=%d", len(self.report.captured))
        return self.report.captured

    def download(self) -> Counter:
        with self.downloader:
            outcomes = self.downloader.run(self.config.search_terms)
        self.report.failed.extend(o.task.filename for o in outcomes if not o.ok)
        self.report.counts.update(self.downloader.counts)
        return self.report.counts

    def run(self, collect: bool = True, download: bool = True) -> int:
        initialize_directories(self.config.output_dir, self.config.images_dir, self.config.search_terms)
        try:
            if collect:
                self.collect()
            if download:
                self.download()
        except Exception as exc:  # noqa: BLE001
            logger.exception("fatal error, aborting run")
            self.report.error = f"{type(exc).__name__}: {exc}"
            self._print_summary()
            return EXIT_ERROR

        self._print_summary()
        return EXIT_OK

    def _print_summary(self) -> None:
        print("\n".join(build_summary(self.report)))
