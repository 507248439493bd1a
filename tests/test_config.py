"""Tests for configuration loading."""

import json
import tempfile
from pathlib import Path

import pytest

from feedgrab.config import HarvestConfig, load_cookies
from feedgrab.errors import ConfigError


def test_defaults():
    config = HarvestConfig()

    assert config.search_terms == ["carrot", "apple"]
    assert config.max_stall_count == 10
    assert config.settle_delay_ms == 2000
    assert config.inter_download_delay_ms == 1000
    assert config.download_attempts == 1
    assert config.output_dir == Path("output")


def test_from_env():
    env = {"BASE_URL": "https://feed.example.com/", "GALLERY_URL_PREFIX": "https://cdn.example.com/g/"}
    config = HarvestConfig.from_env(env, search_terms=["kiwi"], max_stall_count=None)

    assert config.target_url == "https://feed.example.com/"
    assert config.asset_url_prefix == "https://cdn.example.com/g/"
    assert config.search_terms == ["kiwi"]
    assert config.max_stall_count == 10
    config.require_collection_settings()


def test_missing_collection_settings():
    config = HarvestConfig.from_env({})

    with pytest.raises(ConfigError) as excinfo:
        config.require_collection_settings()
    assert "BASE_URL" in str(excinfo.value)
    assert "GALLERY_URL_PREFIX" in str(excinfo.value)


def test_validation():
    with pytest.raises(ConfigError):
        HarvestConfig(max_stall_count=0)
    with pytest.raises(ConfigError):
        HarvestConfig(settle_delay_ms=-1)
    with pytest.raises(ConfigError):
        HarvestConfig().with_overrides(download_attempts=0)


def test_load_cookies():
    with tempfile.TemporaryDirectory() as tmpdir:
        path = Path(tmpdir) / "cookies.json"
        cookies = [{"name": "session", "value": "abc", "domain": ".example.com", "path": "/"}]
        path.write_text(json.dumps({"cookies": cookies}), encoding="utf-8")

        assert load_cookies(path) == cookies
        assert load_cookies(Path(tmpdir) / "absent.json") == []

        path.write_text("{not json", encoding="utf-8")
        with pytest.raises(ConfigError):
            load_cookies(path)

        path.write_text(json.dumps({"other": []}), encoding="utf-8")
        with pytest.raises(ConfigError):
            load_cookies(path)
