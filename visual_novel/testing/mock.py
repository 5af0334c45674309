"""
Stage Mocks - Recording handles for testing the sequencer.

Features:
    - Call recording
    - Failure injection
    - Manual completion (effects end and images load when the test says so)
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable

from visual_novel.errors import PlaybackError


@dataclass
class CallRecord:
    """Record of a mock handle call."""

    method: str
    args: tuple = field(default_factory=tuple)
    error: Exception | None = None


class RecordingAudioChannel:
    """
    Audio channel that records every call and never plays anything.

    Example:
        effect = RecordingAudioChannel("sfx")
        sequencer = PresentationSequencer(graph, effect=effect, ...)

        sequencer.show_scene("door")
        assert effect.source.endswith("creak.wav")
        effect.end()                      # completion fires on_ended

        # Inject failures
        effect.fail_play = True
    """

    def __init__(self, name: str = "", fail_play: bool = False):
        self.name = name
        self.fail_play = fail_play
        self.volume = 1.0
        self._source: str | None = None
        self._paused = True
        self._on_ended: Callable[[], None] | None = None
        self._calls: list[CallRecord] = []

    @property
    def source(self) -> str | None:
        return self._source

    @property
    def paused(self) -> bool:
        return self._paused

    @property
    def calls(self) -> list[CallRecord]:
        """Get all call records."""
        return self._calls

    @property
    def methods(self) -> list[str]:
        """Names of the calls made, in order."""
        return [c.method for c in self._calls]

    def count(self, method: str) -> int:
        return sum(1 for c in self._calls if c.method == method)

    def load(self, source: str) -> None:
        self._calls.append(CallRecord("load", (str(source),)))
        self._source = str(source)
        self._paused = True

    def play(self) -> None:
        if self.fail_play:
            error = PlaybackError(self._source, f"{self.name or 'channel'}: playback refused")
            self._calls.append(CallRecord("play", (self._source,), error=error))
            raise error
        self._calls.append(CallRecord("play", (self._source,)))
        self._paused = False

    def pause(self) -> None:
        self._calls.append(CallRecord("pause"))
        self._paused = True

    def rewind(self) -> None:
        self._calls.append(CallRecord("rewind"))

    def on_ended(self, callback: Callable[[], None] | None) -> None:
        self._calls.append(CallRecord("on_ended", (callback is not None,)))
        self._on_ended = callback

    def end(self) -> None:
        """Finish playback now, as if the clip ran out."""
        self._paused = True
        if self._on_ended is not None:
            self._on_ended()


@dataclass
class PendingImage:
    """An image preload waiting for the test to settle it."""

    path: str
    on_load: Callable[[str], None] = field(repr=False)
    on_error: Callable[[str, str], None] = field(repr=False)


class ManualImageLoader:
    """
    Image loader whose preloads complete only when told to.

    Example:
        images = ManualImageLoader()
        sequencer.show_scene("hall")
        images.complete()                 # oldest pending load succeeds
        images.fail("images/x.png")       # or fail a specific one
    """

    def __init__(self):
        self.pending: list[PendingImage] = []
        self.requested: list[str] = []

    def load(self, path: str, on_load: Callable[[str], None], on_error: Callable[[str, str], None]) -> None:
        self.requested.append(path)
        self.pending.append(PendingImage(path, on_load, on_error))

    def _take(self, path: str | None) -> PendingImage:
        if not self.pending:
            raise LookupError("no pending image loads")
        if path is None:
            return self.pending.pop(0)
        for i, pending in enumerate(self.pending):
            if pending.path == path:
                return self.pending.pop(i)
        raise LookupError(f"no pending load for {path!r}")

    def complete(self, path: str | None = None) -> Any:
        pending = self._take(path)
        return pending.on_load(pending.path)

    def fail(self, path: str | None = None, reason: str = "failed to load") -> Any:
        pending = self._take(path)
        return pending.on_error(pending.path, reason)


__all__ = [
    "CallRecord",
    "RecordingAudioChannel",
    "PendingImage",
    "ManualImageLoader",
]
