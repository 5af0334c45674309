"""
Audio channels - music bed and one-shot effect handles.

The sequencer owns two channels (music and effect) and drives them
through the AudioChannel protocol. SoundfileChannel is the headless
implementation: it reads the file header with soundfile to learn the
duration, and reports completion through the scheduler when that much
time has passed. It produces no sound.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Callable, Protocol

import soundfile as sf

from visual_novel.errors import PlaybackError
from visual_novel.runtime.scheduler import Scheduler, TimerHandle

logger = logging.getLogger(__name__)


class AudioChannel(Protocol):
    """A single playable source, modelled on a media element."""

    @property
    def source(self) -> str | None: ...

    @property
    def paused(self) -> bool: ...

    volume: float

    def load(self, source: str) -> None: ...

    def play(self) -> None:
        """Start or resume playback.

        Raises:
            PlaybackError: If playback cannot start.
        """
        ...

    def pause(self) -> None: ...

    def rewind(self) -> None: ...

    def on_ended(self, callback: Callable[[], None] | None) -> None:
        """Set (or clear) the completion handler."""
        ...


def _check_volume(volume: float) -> float:
    if not 0.0 <= volume <= 1.0:
        raise ValueError(f"volume must be 0.0-1.0, got {volume}")
    return float(volume)


class SoundfileChannel:
    """Headless audio channel with real durations.

    Example:
        channel = SoundfileChannel(scheduler, name="sfx")
        channel.load("audio/door.wav")
        channel.volume = 0.8
        channel.on_ended(lambda: print("done"))
        channel.play()
    """

    def __init__(self, scheduler: Scheduler, name: str = ""):
        self.name = name
        self._scheduler = scheduler
        self._source: str | None = None
        self._volume = 1.0
        self._paused = True
        self._position_ms = 0.0
        self._started_at_ms = 0.0
        self._duration_ms: float | None = None
        self._timer: TimerHandle | None = None
        self._on_ended: Callable[[], None] | None = None

    @property
    def source(self) -> str | None:
        return self._source

    @property
    def paused(self) -> bool:
        return self._paused

    @property
    def volume(self) -> float:
        return self._volume

    @volume.setter
    def volume(self, value: float) -> None:
        self._volume = _check_volume(value)

    @property
    def duration_ms(self) -> float | None:
        return self._duration_ms

    @property
    def position_ms(self) -> float:
        if self._paused:
            return self._position_ms
        return self._position_ms + (self._scheduler.now_ms() - self._started_at_ms)

    def load(self, source: str | Path) -> None:
        """Switch to a new source; playback stops and rewinds."""
        self._stop_timer()
        self._source = str(source)
        self._paused = True
        self._position_ms = 0.0
        self._duration_ms = None

    def play(self) -> None:
        if self._source is None:
            raise PlaybackError(None, f"{self.name or 'channel'}: no source loaded")
        if not self._paused:
            return

        if self._duration_ms is None:
            self._duration_ms = self._read_duration(self._source)
        if self._position_ms >= self._duration_ms:
            self._position_ms = 0.0

        self._paused = False
        self._started_at_ms = self._scheduler.now_ms()
        self._schedule_end()

    def pause(self) -> None:
        if self._paused:
            return
        self._position_ms = self.position_ms
        self._paused = True
        self._stop_timer()

    def rewind(self) -> None:
        self._position_ms = 0.0
        self._started_at_ms = self._scheduler.now_ms()
        if not self._paused:
            self._stop_timer()
            self._schedule_end()

    def on_ended(self, callback: Callable[[], None] | None) -> None:
        self._on_ended = callback

    def _read_duration(self, source: str) -> float:
        try:
            info = sf.info(source)
        except (OSError, RuntimeError) as e:
            raise PlaybackError(source, f"Cannot play {source}: {e}") from e
        return info.frames * 1000 / info.samplerate

    def _schedule_end(self) -> None:
        remaining = max(0.0, (self._duration_ms or 0.0) - self._position_ms)
        self._timer = self._scheduler.call_later(remaining, self._finished)

    def _stop_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def _finished(self) -> None:
        self._timer = None
        self._position_ms = self._duration_ms or 0.0
        self._paused = True
        logger.debug("%s finished: %s", self.name or "channel", self._source)
        if self._on_ended is not None:
            self._on_ended()


__all__ = [
    "AudioChannel",
    "SoundfileChannel",
]
