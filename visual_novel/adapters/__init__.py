"""
Adapters module - I/O surfaces.

Adapters are thin wrappers around the loader and the sequencer.
They fetch, print and prompt; scene logic lives in runtime.
"""

from visual_novel.adapters.loader import (
    DEFAULT_STORY_FILE,
    LoadStatus,
    ENTRY_LABELS,
    EntryControl,
    LoadResult,
    StoryLoader,
    NovelSession,
    fetch_text,
)
from visual_novel.adapters.asset_validator import (
    AssetResult,
    StoryReport,
    validate_story,
    generate_story_report,
)

__all__ = [
    "DEFAULT_STORY_FILE",
    "LoadStatus",
    "ENTRY_LABELS",
    "EntryControl",
    "LoadResult",
    "StoryLoader",
    "NovelSession",
    "fetch_text",
    # Checks
    "AssetResult",
    "StoryReport",
    "validate_story",
    "generate_story_report",
]
