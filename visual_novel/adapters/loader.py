"""
Story Loader - fetch the table once and gate the start control.

The loader is thin glue: fetch, parse, build the graph, and tell the
player whether the story can start. Failures never raise out of load();
they disable the entry control, relabel it, and raise an alert.
"""

from __future__ import annotations

import logging
import urllib.error
import urllib.request
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Callable

from visual_novel.config import Config
from visual_novel.errors import LoadError
from visual_novel.monitoring.logging import StructuredLogger, get_logger
from visual_novel.runtime.scheduler import Scheduler
from visual_novel.runtime.sequencer import PresentationSequencer, PresentationState
from visual_novel.story.graph import SceneGraph
from visual_novel.story.parser import TableParser

logger = logging.getLogger(__name__)

DEFAULT_STORY_FILE = "story.csv"
FETCH_TIMEOUT = 30


class LoadStatus(Enum):
    """Entry control states."""
    LOADING = "loading"
    READY = "ready"
    EMPTY = "empty"
    FAILED = "failed"


ENTRY_LABELS: dict[LoadStatus, str] = {
    LoadStatus.LOADING: "Loading data...",
    LoadStatus.READY: "START GAME",
    LoadStatus.EMPTY: "Error: CSV is empty or formatted wrong",
    LoadStatus.FAILED: "Error",
}


@dataclass
class EntryControl:
    """The start button: disabled until the story has loaded."""
    status: LoadStatus = LoadStatus.LOADING

    @property
    def enabled(self) -> bool:
        return self.status is LoadStatus.READY

    @property
    def label(self) -> str:
        return ENTRY_LABELS[self.status]


@dataclass
class LoadResult:
    """Outcome of a load."""
    source: str
    status: LoadStatus
    graph: SceneGraph = field(default_factory=SceneGraph)
    skipped_rows: int = 0
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.status is LoadStatus.READY


def is_url(source: str) -> bool:
    return source.startswith(("http://", "https://"))


def fetch_text(source: str | Path, timeout: float = FETCH_TIMEOUT) -> str:
    """Read the story table from a path or http(s) URL.

    Raises:
        LoadError: On any I/O, HTTP or decoding failure.
    """
    source = str(source)
    try:
        if is_url(source):
            req = urllib.request.Request(source, method="GET")
            with urllib.request.urlopen(req, timeout=timeout) as response:
                status = getattr(response, "status", 200)
                if status != 200:
                    raise LoadError(source, f"HTTP error {status}", {"status": status})
                raw = response.read()
        else:
            raw = Path(source).read_bytes()
    except urllib.error.HTTPError as e:
        raise LoadError(source, f"HTTP error {e.code}", {"status": e.code}) from e
    except (urllib.error.URLError, OSError) as e:
        raise LoadError(source, str(getattr(e, "reason", e))) from e

    try:
        # utf-8-sig drops a leading byte-order mark
        return raw.decode("utf-8-sig")
    except UnicodeDecodeError as e:
        raise LoadError(source, f"not valid UTF-8: {e}") from e


class StoryLoader:
    """Loads the story table once and updates the entry control.

    Example:
        loader = StoryLoader(on_alert=print)
        result = loader.load("story.csv")

        if loader.entry.enabled:
            ...  # wire up the start button
    """

    def __init__(
        self,
        parser: TableParser | None = None,
        entry: EntryControl | None = None,
        on_alert: Callable[[str], None] | None = None,
        events: StructuredLogger | None = None,
    ):
        self.parser = parser or TableParser()
        self.entry = entry or EntryControl()
        self.on_alert = on_alert
        self._events = events

    @property
    def events(self) -> StructuredLogger:
        return self._events or get_logger()

    def load(self, source: str | Path = DEFAULT_STORY_FILE) -> LoadResult:
        """Fetch, parse and build the scene graph.

        Returns:
            LoadResult; `graph` is empty unless status is READY.
        """
        source = str(source)
        self.entry.status = LoadStatus.LOADING

        try:
            text = fetch_text(source)
        except LoadError as e:
            return self._fail(source, e)

        records = self.parser.parse(text)
        if not records:
            self.entry.status = LoadStatus.EMPTY
            logger.warning("Story table %s has no usable rows", source)
            self.events.story_load_failed(source, "empty or unparseable table")
            return LoadResult(
                source=source,
                status=LoadStatus.EMPTY,
                skipped_rows=self.parser.skipped_rows,
                error="empty or unparseable table",
            )

        graph = SceneGraph.from_records(records)
        self.entry.status = LoadStatus.READY
        self.events.story_loaded(source, len(graph), skipped_rows=self.parser.skipped_rows)
        return LoadResult(
            source=source,
            status=LoadStatus.READY,
            graph=graph,
            skipped_rows=self.parser.skipped_rows,
        )

    def _fail(self, source: str, error: LoadError) -> LoadResult:
        self.entry.status = LoadStatus.FAILED
        logger.error("Error loading %s: %s", source, error)
        self.events.story_load_failed(source, error)
        if self.on_alert is not None:
            self.on_alert(f"Error loading {Path(source).name}: {error.message}")
        return LoadResult(source=source, status=LoadStatus.FAILED, error=error.message)


class NovelSession:
    """Load a story and start it on demand.

    Example:
        session = NovelSession(scheduler, config=Config(story_root=root))
        session.load(root / "story.csv")
        session.start()            # entry scene after start_delay_ms
    """

    def __init__(
        self,
        scheduler: Scheduler,
        config: Config | None = None,
        loader: StoryLoader | None = None,
        sequencer_factory: Callable[..., PresentationSequencer] | None = None,
    ):
        self.scheduler = scheduler
        self.config = config or Config()
        self.loader = loader or StoryLoader()
        self._factory = sequencer_factory or PresentationSequencer.headless
        self.result: LoadResult | None = None
        self.sequencer: PresentationSequencer | None = None
        self.started = False

    @property
    def entry(self) -> EntryControl:
        return self.loader.entry

    def load(self, source: str | Path | None = None) -> LoadResult:
        if source is None:
            source = self.config.story_root / DEFAULT_STORY_FILE
        self.result = self.loader.load(source)
        if self.result.ok:
            self.sequencer = self._factory(
                self.result.graph, self.scheduler, config=self.config
            )
        return self.result

    def start(self) -> bool:
        """Activate the entry control.

        Returns:
            False if the story is not ready (control disabled).
        """
        if not self.entry.enabled or self.sequencer is None:
            return False
        self.started = True
        self.scheduler.call_later(self.config.start_delay_ms, self._show_entry)
        return True

    def _show_entry(self) -> PresentationState:
        return self.sequencer.start()


__all__ = [
    "DEFAULT_STORY_FILE",
    "LoadStatus",
    "ENTRY_LABELS",
    "EntryControl",
    "LoadResult",
    "StoryLoader",
    "NovelSession",
    "fetch_text",
    "is_url",
]
