"""Capture asset URLs from a page's network responses."""

import logging
from typing import Any, Dict, List, Optional

logger = logging.getLogger(__name__)


class ResponseCollector:
    """Accumulates response URLs that start with a configured prefix.

    URLs are kept once each, in the order they were first seen. A collector
    observes one page between ``attach`` and ``detach`` so that a collector
    created for one search term stops receiving events once the next term
    starts.
    """

    def __init__(self, url_prefix: str):
        self.url_prefix = url_prefix
        self._urls: Dict[str, None] = {}  # insertion-ordered set
        self._page: Optional[Any] = None

    def observe(self, response: Any) -> None:
        """Record ``response.url`` if it matches the prefix. Duplicates are ignored."""
        url = response.url
        if not url.startswith(self.url_prefix):
            return
        if url in self._urls:
            return
        self._urls[url] = None
        logger.debug("captured url=%s total=%d", url, len(self._urls))

    def snapshot(self) -> List[str]:
        return list(self._urls)

    def __len__(self) -> int:
        return len(self._urls)

    @property
    def attached(self) -> bool:
        return self._page is not None

    def attach(self, page: Any) -> None:
        if self._page is not None:
            raise RuntimeError("collector is already attached to a page")
        page.on("response", self.observe)
        self._page = page

    def detach(self) -> None:
        if self._page is None:
            return
        self._page.remove_listener("response", self.observe)
        self._page = None

    def __enter__(self) -> "ResponseCollector":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.detach()
