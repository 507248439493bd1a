"""Replay checkpoints into image files on disk."""

import logging
import time
from collections import Counter
from dataclasses import dataclass
from pathlib import Path, PurePosixPath
from typing import Callable, Iterable, List, Optional
from urllib.parse import urlparse

import requests

from .checkpoint import CheckpointStore
from .config import HarvestConfig
from .errors import CheckpointCorrupt, CheckpointNotFound, DownloadError

logger = logging.getLogger(__name__)

CHUNK_SIZE = 8192
DEFAULT_EXTENSION = "png"
IMAGE_EXTENSIONS = {"png", "jpg", "jpeg", "gif", "webp", "bmp", "tiff", "avif"}


def image_dir_for(images_dir: Path, term: str) -> Path:
    return Path(images_dir) / f"images_{term}"


def guess_extension(url: str) -> str:
    """Extension from the URL path if it looks like an image, else ``png``."""
    suffix = PurePosixPath(urlparse(url).path).suffix.lower().lstrip(".")
    if suffix in IMAGE_EXTENSIONS:
        return suffix
    return DEFAULT_EXTENSION


@dataclass(frozen=True)
class DownloadTask:
    term: str
    url: str
    ordinal: int
    directory: Path

    @property
    def filename(self) -> str:
        return f"{self.term}-{self.ordinal}.{guess_extension(self.url)}"

    @property
    def path(self) -> Path:
        return self.directory / self.filename


@dataclass
class DownloadOutcome:
    task: DownloadTask
    ok: bool
    reason: Optional[str] = None


class Downloader:
    """Fetches every URL of every checkpoint, one at a time.

    Items are numbered by their position in the checkpoint, starting at 1,
    so a failed item leaves a gap instead of shifting later file names.
    """

    def __init__(
        self,
        config: HarvestConfig,
        store: CheckpointStore,
        session: Optional[requests.Session] = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.config = config
        self.store = store
        self._owns_session = session is None
        self.session = session or requests.Session()
        self.sleep = sleep
        self.counts: Counter = Counter()

    def run(self, terms: Iterable[str]) -> List[DownloadOutcome]:
        outcomes: List[DownloadOutcome] = []
        for term in terms:
            try:
                urls = self.store.read(term)
            except CheckpointNotFound:
                logger.info("no checkpoint term=%s, skipping", term)
                self.counts["SKIPPED_TERM"] += 1
                continue
            except CheckpointCorrupt as exc:
                logger.error("unreadable checkpoint term=%s reason=%s, skipping", term, exc.reason)
                self.counts["BAD_CHECKPOINT"] += 1
                continue
            outcomes.extend(self.download_term(term, urls))
        return outcomes

    def close(self) -> None:
        """Close the HTTP session if this downloader created it."""
        if self._owns_session:
            self.session.close()

    def __enter__(self) -> "Downloader":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def download_term(self, term: str, urls: List[str]) -> List[DownloadOutcome]:
        directory = image_dir_for(self.config.images_dir, term)
        directory.mkdir(parents=True, exist_ok=True)
        logger.info("downloading term=%s urls=%d", term, len(urls))

        outcomes = []
        for ordinal, url in enumerate(urls, start=1):
            task = DownloadTask(term=term, url=url, ordinal=ordinal, directory=directory)
            outcomes.append(self.download(task))
            self.sleep(self.config.inter_download_delay_ms / 1000)
        return outcomes

    def download(self, task: DownloadTask) -> DownloadOutcome:
        """Attempt one task, retrying up to ``download_attempts`` times in total."""
        reason = None
        for attempt in range(1, self.config.download_attempts + 1):
            try:
                self._fetch_to_file(task.url, task.path)
            except DownloadError as exc:
                reason = exc.reason
                if attempt < self.config.download_attempts:
                    logger.debug("retrying file=%s attempt=%d reason=%s", task.filename, attempt, reason)
                    self.sleep(self.config.inter_download_delay_ms / 1000)
                continue
            logger.info("download ok term=%s file=%s", task.term, task.filename)
            self.counts["OK"] += 1
            return DownloadOutcome(task, ok=True)

        logger.error(
            "download failed term=%s file=%s url=%s reason=%s", task.term, task.filename, task.url, reason
        )
        self.counts["DOWNLOAD_FAIL"] += 1
        return DownloadOutcome(task, ok=False, reason=reason)

    def _fetch_to_file(self, url: str, path: Path) -> None:
        try:
            response = self.session.get(url, timeout=self.config.download_timeout_s, stream=True)
        except requests.RequestException as exc:
            raise DownloadError(url, f"{type(exc).__name__}: {exc}") from exc

        try:
            if not 200 <= response.status_code < 300:
                raise DownloadError(url, f"Request Failed: {response.status_code}")
            with open(path, "wb") as f:
                for chunk in response.iter_content(chunk_size=CHUNK_SIZE):
                    f.write(chunk)
        except (requests.RequestException, OSError) as exc:
            path.unlink(missing_ok=True)
            raise DownloadError(url, f"{type(exc).__name__}: {exc}") from exc
        finally:
            response.close()
