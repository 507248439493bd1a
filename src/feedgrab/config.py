"""Run configuration for feedgrab."""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, Dict, List, Optional

from .errors import ConfigError

logger = logging.getLogger(__name__)

DEFAULT_SEARCH_TERMS = ["carrot", "apple"]
DEFAULT_MAX_STALL_COUNT = 10
SETTLE_DELAY_MS = 2000
NETWORK_IDLE_TIMEOUT_MS = 5000
QUIESCENCE_TIMEOUT_MS = 1000
POST_QUERY_DELAY_MS = 2000
INTER_DOWNLOAD_DELAY_MS = 1000
DOWNLOAD_TIMEOUT_S = 30
OUTPUT_DIR = "output"
IMAGES_DIR = "images"
COOKIES_FILE = "cookies.json"

ENV_TARGET_URL = "BASE_URL"
ENV_ASSET_URL_PREFIX = "GALLERY_URL_PREFIX"


@dataclass
class HarvestConfig:
    target_url: Optional[str] = None
    asset_url_prefix: Optional[str] = None
    search_terms: List[str] = field(default_factory=lambda: list(DEFAULT_SEARCH_TERMS))

    # Load loop
    max_stall_count: int = DEFAULT_MAX_STALL_COUNT
    settle_delay_ms: int = SETTLE_DELAY_MS
    network_idle_timeout_ms: int = NETWORK_IDLE_TIMEOUT_MS
    quiescence_timeout_ms: int = QUIESCENCE_TIMEOUT_MS
    post_query_delay_ms: int = POST_QUERY_DELAY_MS

    # Downloader
    inter_download_delay_ms: int = INTER_DOWNLOAD_DELAY_MS
    download_timeout_s: float = DOWNLOAD_TIMEOUT_S
    download_attempts: int = 1  # >1 enables a bounded per-item retry

    # Storage / browser
    output_dir: Path = Path(OUTPUT_DIR)
    images_dir: Path = Path(IMAGES_DIR)
    cookies_file: Path = Path(COOKIES_FILE)
    headless: bool = False

    def __post_init__(self) -> None:
        self.output_dir = Path(self.output_dir)
        self.images_dir = Path(self.images_dir)
        self.cookies_file = Path(self.cookies_file)
        self.validate()

    def validate(self) -> None:
        if self.max_stall_count < 1:
            raise ConfigError(f"max_stall_count must be >= 1, got {self.max_stall_count}")
        if self.download_attempts < 1:
            raise ConfigError(f"download_attempts must be >= 1, got {self.download_attempts}")
        for name in (
            "settle_delay_ms",
            "network_idle_timeout_ms",
            "quiescence_timeout_ms",
            "post_query_delay_ms",
            "inter_download_delay_ms",
            "download_timeout_s",
        ):
            if getattr(self, name) < 0:
                raise ConfigError(f"{name} must be >= 0, got {getattr(self, name)}")

    def require_collection_settings(self) -> None:
        """Raise ConfigError unless the settings a browser run needs are present."""
        missing = []
        if not self.target_url:
            missing.append(ENV_TARGET_URL)
        if not self.asset_url_prefix:
            missing.append(ENV_ASSET_URL_PREFIX)
        if missing:
            raise ConfigError(f"missing required setting(s): {', '.join(missing)}")

    def with_overrides(self, **changes: Any) -> "HarvestConfig":
        """Return a copy with the non-None values of ``changes`` applied."""
        return replace(self, **{k: v for k, v in changes.items() if v is not None})

    @classmethod
    def from_env(cls, environ: Optional[Dict[str, str]] = None, **overrides: Any) -> "HarvestConfig":
        """Build a config from environment variables.

        Only ``BASE_URL`` and ``GALLERY_URL_PREFIX`` come from the
        environment; everything else keeps its default unless overridden.
        """
        env = os.environ if environ is None else environ
        config = cls(
            target_url=env.get(ENV_TARGET_URL) or None,
            asset_url_prefix=env.get(ENV_ASSET_URL_PREFIX) or None,
        )
        return config.with_overrides(**overrides)


def load_cookies(path: Path) -> List[Dict[str, Any]]:
    """Read the ``{"cookies": [...]}`` document used to seed the browser context."""
    path = Path(path)
    if not path.exists():
        logger.warning("cookies file not found path=%s, continuing without cookies", path)
        return []

    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise ConfigError(f"malformed cookies file {path}: {exc}") from exc

    cookies = data.get("cookies") if isinstance(data, dict) else None
    if not isinstance(cookies, list):
        raise ConfigError(f"cookies file {path} has no 'cookies' list")
    return cookies
