"""
Visual Novel - Branching stories written as spreadsheets.

Architecture:
    Table -> TableParser -> SceneGraph -> PresentationSequencer -> Stage

Public API (stable):
    NovelSession           - Load a story and start it
    PresentationSequencer  - Scene transitions (background, audio, text, reveal)
    SceneGraph             - Read-only scenes keyed by id
    Config                 - Engine configuration
    duck                   - Effect/music volume interaction

Modules:
    story          - Table parsing, scene records, scene graph
    runtime        - Ducking, scheduling, the sequencer
    stage          - Layers, audio channels, image preloading, content panel
    monitoring     - Structured event logging
    testing        - Recording handles and fixtures
    adapters       - Loader, asset checks, CLI

Example:
    from visual_novel import NovelSession, Config
    from visual_novel.runtime import ManualScheduler

    scheduler = ManualScheduler()
    session = NovelSession(scheduler, config=Config(story_root="my_story"))
    session.load()
    session.start()
    scheduler.run_until_idle()
    print(session.sequencer.panel.text)
"""

__version__ = "1.0.0"

from visual_novel.config import Config
from visual_novel.errors import NovelError, LoadError, SceneNotFoundError, PlaybackError
from visual_novel.runtime.ducking import DuckResult, duck
from visual_novel.runtime.sequencer import (
    PresentationSequencer,
    PresentationState,
    SequencerState,
)
from visual_novel.story import SceneGraph, SceneRecord, TableParser, parse_table
from visual_novel.adapters.loader import NovelSession, StoryLoader, LoadStatus

__all__ = [
    "__version__",
    "Config",
    # Errors
    "NovelError",
    "LoadError",
    "SceneNotFoundError",
    "PlaybackError",
    # Story
    "SceneGraph",
    "SceneRecord",
    "TableParser",
    "parse_table",
    # Runtime
    "DuckResult",
    "duck",
    "PresentationSequencer",
    "PresentationState",
    "SequencerState",
    # Loading
    "NovelSession",
    "StoryLoader",
    "LoadStatus",
]
