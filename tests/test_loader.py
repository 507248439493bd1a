"""Tests for the progressive feed loader."""

import logging
import tempfile
from pathlib import Path

from fakes import FakePage, PREFIX
from feedgrab.checkpoint import CheckpointStore
from feedgrab.config import HarvestConfig
from feedgrab.loader import FEED_HEIGHT_JS, QUIESCENCE_JS, ProgressiveLoader


def make_loader(tmpdir, page, max_stall_count=3):
    config = HarvestConfig(
        target_url="https://feed.example.com/",
        asset_url_prefix=PREFIX,
        max_stall_count=max_stall_count,
        settle_delay_ms=10,
        output_dir=Path(tmpdir) / "output",
    )
    store = CheckpointStore(config.output_dir)
    return ProgressiveLoader(page, config, store), store


def test_loads_until_height_stops_growing():
    """Three growth cycles, then three stalls end the loop."""
    page = FakePage(
        heights=[100, 200, 300],
        batches=[
            [PREFIX + "1.png", PREFIX + "2.png"],
            [PREFIX + "2.png", "https://feed.example.com/app.js", PREFIX + "3.png"],
            [PREFIX + "1.png"],
        ],
    )
    with tempfile.TemporaryDirectory() as tmpdir:
        loader, store = make_loader(tmpdir, page)
        urls = loader.run("carrot")

        assert urls == [PREFIX + "1.png", PREFIX + "2.png", PREFIX + "3.png"]
        assert store.read("carrot") == urls
        assert page.clicks == 6


def test_missing_load_more_stops():
    page = FakePage(heights=[100, 200, 300, 400], max_clicks=2)
    with tempfile.TemporaryDirectory() as tmpdir:
        loader, _ = make_loader(tmpdir, page, max_stall_count=10)
        loader.run("carrot")

        assert page.clicks == 2


def test_action_fault_is_a_stall_not_an_error():
    """A click failure counts toward the stall bound and the loop carries on."""
    page = FakePage(heights=[100, 100, 200], faults={2})
    with tempfile.TemporaryDirectory() as tmpdir:
        loader, store = make_loader(tmpdir, page, max_stall_count=2)
        loader.run("carrot")

        # 1: grow, 2: fault, 3: grow, 4-5: stalls
        assert page.clicks == 5
        assert store.exists("carrot")


def test_network_idle_timeout_is_not_fatal(caplog):
    page = FakePage(heights=[100], idle_timeout=True)
    with tempfile.TemporaryDirectory() as tmpdir:
        loader, store = make_loader(tmpdir, page, max_stall_count=2)
        with caplog.at_level(logging.WARNING, logger="feedgrab.loader"):
            loader.run("carrot")

        assert "settle timeout wait=networkidle" in caplog.text
        assert store.read("carrot") == []


def test_settle_delay_after_scroll_and_click():
    page = FakePage(heights=[100], max_clicks=1)
    with tempfile.TemporaryDirectory() as tmpdir:
        loader, _ = make_loader(tmpdir, page)
        loader.run("carrot")

        # cycle 1: scroll + click; cycle 2: scroll, then no button
        assert page.waits == [10, 10, 10]


def test_prepare_runs_inside_observation_window():
    """Responses triggered while submitting the query are captured."""
    page = FakePage(heights=[100], max_clicks=0)
    submitted = []

    def prepare(p, term):
        submitted.append(term)
        p.emit_response(PREFIX + "first-page.png")

    with tempfile.TemporaryDirectory() as tmpdir:
        loader, _ = make_loader(tmpdir, page)
        urls = loader.run("carrot", prepare=prepare)

    assert submitted == ["carrot"]
    assert urls == [PREFIX + "first-page.png"]


def test_collector_detached_between_terms():
    """Events after a term finishes do not leak into that term or the next."""
    page = FakePage(heights=[100], max_clicks=1, batches=[[PREFIX + "a.png"]])
    with tempfile.TemporaryDirectory() as tmpdir:
        loader, store = make_loader(tmpdir, page)
        first = loader.run("carrot")
        page.emit_response(PREFIX + "stray.png")

        page.clicks = 0
        page.batches = [[PREFIX + "b.png"]]
        second = loader.run("apple")

        assert first == [PREFIX + "a.png"]
        assert second == [PREFIX + "b.png"]
        assert store.read("carrot") == first
        assert page.listeners["response"] == []


class RecordingPage(FakePage):
    """FakePage that logs the settle waits and height readings in call order."""

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.calls = []

    def wait_for_load_state(self, state, timeout=None):
        self.calls.append(state)
        super().wait_for_load_state(state, timeout)

    def evaluate(self, script, arg=None):
        if script == QUIESCENCE_JS:
            self.calls.append("quiescence")
        elif script == FEED_HEIGHT_JS:
            self.calls.append("measure")
        return super().evaluate(script, arg)


def test_height_measured_after_page_settles():
    """Each cycle waits for network idle and a DOM change before reading the height."""
    page = RecordingPage(heights=[100], max_clicks=1)
    with tempfile.TemporaryDirectory() as tmpdir:
        loader, _ = make_loader(tmpdir, page)
        loader.run("carrot")

    assert page.calls == ["networkidle", "quiescence", "measure"]
