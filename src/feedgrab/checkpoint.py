"""Per-term checkpoints of captured URLs."""

import json
import logging
import os
from pathlib import Path
from typing import List, Sequence

from .errors import CheckpointCorrupt, CheckpointNotFound

logger = logging.getLogger(__name__)

CHECKPOINT_PREFIX = "captured_urls_"


class CheckpointStore:
    """Stores one JSON array of URLs per search term.

    A write replaces whatever was stored for the term before; nothing is
    merged across runs.
    """

    def __init__(self, directory):
        self.directory = Path(directory)

    def path_for(self, term: str) -> Path:
        return self.directory / f"{CHECKPOINT_PREFIX}{term}.json"

    def write(self, term: str, urls: Sequence[str]) -> Path:
        self.directory.mkdir(parents=True, exist_ok=True)
        path = self.path_for(term)
        tmp_path = path.with_name(path.name + ".tmp")
        tmp_path.write_text(json.dumps(list(urls), indent=2), encoding="utf-8")
        os.replace(tmp_path, path)
        logger.info("checkpoint written term=%s urls=%d path=%s", term, len(urls), path)
        return path

    def read(self, term: str) -> List[str]:
        path = self.path_for(term)
        try:
            text = path.read_text(encoding="utf-8")
        except FileNotFoundError:
            raise CheckpointNotFound(term) from None
        try:
            urls = json.loads(text)
        except json.JSONDecodeError as exc:
            raise CheckpointCorrupt(term, f"invalid JSON: {exc}") from exc
        if not isinstance(urls, list):
            raise CheckpointCorrupt(term, "not a JSON array")
        if not all(isinstance(url, str) for url in urls):
            raise CheckpointCorrupt(term, "entries must be URL strings")
        return urls

    def exists(self, term: str) -> bool:
        return self.path_for(term).exists()
