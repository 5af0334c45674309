"""
Engine Errors - Domain-specific error types.

Error hierarchy:
    NovelError (base)
    ├── LoadError           (story table could not be fetched or used)
    ├── SceneNotFoundError  (a requested scene id is not in the graph)
    └── PlaybackError       (an audio channel refused to play)

None of these is fatal to the process. A failed load disables the
entry control, a missing scene halts one transition, and a playback
failure is recovered where it happens.
"""

from __future__ import annotations

from typing import Any


class NovelError(Exception):
    """Base error for all engine errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class LoadError(NovelError):
    """Raised when the story table cannot be fetched or decoded."""

    def __init__(
        self,
        source: str,
        message: str,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message, details)
        self.source = source


class SceneNotFoundError(NovelError, LookupError):
    """
    Raised when a scene id has no matching record.

    The sequencer turns this into the terminal NOT_FOUND state and an
    inline diagnostic; it never escapes a transition.
    """

    def __init__(self, scene_id: str, details: dict[str, Any] | None = None):
        super().__init__(f"Scene '{scene_id}' not found", details)
        self.scene_id = scene_id


class PlaybackError(NovelError):
    """
    Raised by an audio channel that cannot start playback.

    Examples:
    - Asset file missing or unreadable
    - Host refused playback (autoplay policy)
    """

    def __init__(
        self,
        source: str | None,
        message: str,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message, details)
        self.source = source


__all__ = [
    "NovelError",
    "LoadError",
    "SceneNotFoundError",
    "PlaybackError",
]
