"""
Loader Tests - Fetching the table and gating the entry control.
"""

import urllib.error

import pytest

from visual_novel.adapters import loader as loader_module
from visual_novel.adapters.loader import (
    ENTRY_LABELS,
    EntryControl,
    LoadStatus,
    NovelSession,
    StoryLoader,
    fetch_text,
    is_url,
)
from visual_novel.config import Config
from visual_novel.errors import LoadError
from visual_novel.runtime.scheduler import ManualScheduler
from visual_novel.runtime.sequencer import SequencerState
from visual_novel.testing import SAMPLE_TABLES


class FakeResponse:
    """Minimal urlopen() response."""

    def __init__(self, body: bytes, status: int = 200):
        self._body = body
        self.status = status

    def read(self):
        return self._body

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        return False


@pytest.fixture
def story_file(tmp_path):
    path = tmp_path / "story.csv"
    path.write_text(SAMPLE_TABLES["branching"], encoding="utf-8")
    return path


class TestEntryControl:
    """Tests for the start control labels."""

    def test_starts_loading(self):
        entry = EntryControl()

        assert entry.status is LoadStatus.LOADING
        assert entry.label == "Loading data..."
        assert not entry.enabled

    @pytest.mark.parametrize("status,label,enabled", [
        (LoadStatus.READY, "START GAME", True),
        (LoadStatus.EMPTY, "Error: CSV is empty or formatted wrong", False),
        (LoadStatus.FAILED, "Error", False),
    ])
    def test_labels(self, status, label, enabled):
        entry = EntryControl(status)

        assert entry.label == label
        assert entry.enabled is enabled

    def test_every_status_labelled(self):
        assert set(ENTRY_LABELS) == set(LoadStatus)


class TestFetchText:
    """Tests for fetch_text()."""

    def test_is_url(self):
        assert is_url("https://example.com/story.csv")
        assert is_url("http://example.com/story.csv")
        assert not is_url("story.csv")

    def test_file(self, story_file):
        assert fetch_text(story_file).startswith("id,text")

    def test_byte_order_mark_dropped(self, tmp_path):
        path = tmp_path / "bom.csv"
        path.write_bytes(b"\xef\xbb\xbfid,text\nstart,Hi\n")

        assert fetch_text(path).startswith("id,")

    def test_missing_file(self, tmp_path):
        with pytest.raises(LoadError) as exc_info:
            fetch_text(tmp_path / "nope.csv")

        assert exc_info.value.source.endswith("nope.csv")

    def test_not_utf8(self, tmp_path):
        path = tmp_path / "latin.csv"
        path.write_bytes(b"id,text\nstart,caf\xe9\n")

        with pytest.raises(LoadError, match="not valid UTF-8"):
            fetch_text(path)

    def test_url(self, monkeypatch):
        seen = []

        def fake_urlopen(req, timeout):
            seen.append((req.full_url, timeout))
            return FakeResponse(b"id,text\nstart,Hi\n")

        monkeypatch.setattr(loader_module.urllib.request, "urlopen", fake_urlopen)

        text = fetch_text("https://example.com/story.csv")

        assert text == "id,text\nstart,Hi\n"
        assert seen == [("https://example.com/story.csv", loader_module.FETCH_TIMEOUT)]

    def test_url_http_error(self, monkeypatch):
        def fake_urlopen(req, timeout):
            raise urllib.error.HTTPError(req.full_url, 404, "Not Found", None, None)

        monkeypatch.setattr(loader_module.urllib.request, "urlopen", fake_urlopen)

        with pytest.raises(LoadError, match="HTTP error 404") as exc_info:
            fetch_text("https://example.com/story.csv")

        assert exc_info.value.details == {"status": 404}

    def test_url_unreachable(self, monkeypatch):
        def fake_urlopen(req, timeout):
            raise urllib.error.URLError("Name or service not known")

        monkeypatch.setattr(loader_module.urllib.request, "urlopen", fake_urlopen)

        with pytest.raises(LoadError, match="Name or service not known"):
            fetch_text("https://nowhere.invalid/story.csv")


class TestStoryLoader:
    """Tests for StoryLoader.load()."""

    def test_ready(self, story_file):
        loader = StoryLoader()
        result = loader.load(story_file)

        assert result.ok
        assert result.status is LoadStatus.READY
        assert len(result.graph) == 3
        assert loader.entry.enabled
        assert loader.entry.label == "START GAME"

    def test_empty_table(self, tmp_path):
        path = tmp_path / "story.csv"
        path.write_text("id,text,option1,target1\n", encoding="utf-8")
        alerts = []
        loader = StoryLoader(on_alert=alerts.append)

        result = loader.load(path)

        assert result.status is LoadStatus.EMPTY
        assert not result.ok
        assert len(result.graph) == 0
        assert loader.entry.label == "Error: CSV is empty or formatted wrong"
        assert not loader.entry.enabled
        assert alerts == []

    def test_missing_file(self, tmp_path):
        alerts = []
        loader = StoryLoader(on_alert=alerts.append)

        result = loader.load(tmp_path / "story.csv")

        assert result.status is LoadStatus.FAILED
        assert loader.entry.label == "Error"
        assert not loader.entry.enabled
        assert len(alerts) == 1
        assert alerts[0].startswith("Error loading story.csv: ")

    def test_failure_does_not_raise(self, monkeypatch):
        def fake_urlopen(req, timeout):
            raise urllib.error.URLError("timed out")

        monkeypatch.setattr(loader_module.urllib.request, "urlopen", fake_urlopen)

        result = StoryLoader().load("https://example.com/data/story.csv")

        assert result.status is LoadStatus.FAILED
        assert result.error == "timed out"

    def test_skipped_rows_reported(self, tmp_path):
        path = tmp_path / "story.csv"
        path.write_text("id,text\nbroken\nstart,Hi\n", encoding="utf-8")

        result = StoryLoader().load(path)

        assert result.ok
        assert result.skipped_rows == 1


class TestNovelSession:
    """Tests for loading and starting a story."""

    def test_start_before_load(self):
        session = NovelSession(ManualScheduler())

        assert not session.start()
        assert not session.started

    def test_start_after_failed_load(self, tmp_path):
        session = NovelSession(ManualScheduler(), config=Config(story_root=tmp_path))
        session.load()

        assert session.entry.label == "Error"
        assert not session.start()

    def test_default_source_under_root(self, tmp_path):
        (tmp_path / "story.csv").write_text(SAMPLE_TABLES["minimal"], encoding="utf-8")
        session = NovelSession(ManualScheduler(), config=Config(story_root=tmp_path))

        result = session.load()

        assert result.ok
        assert result.source == str(tmp_path / "story.csv")

    def test_entry_scene_after_start_delay(self, tmp_path):
        (tmp_path / "story.csv").write_text(SAMPLE_TABLES["minimal"], encoding="utf-8")
        scheduler = ManualScheduler()
        session = NovelSession(scheduler, config=Config(story_root=tmp_path))
        session.load()

        assert session.start()
        assert session.started

        scheduler.advance(99)
        assert session.sequencer.current is None

        scheduler.advance(1)
        state = session.sequencer.current
        assert state.scene_id == "start"
        assert state.state is SequencerState.PRESENTING

        scheduler.advance(500)
        assert session.sequencer.panel.revealed
        assert session.sequencer.panel.text == "Hello"
