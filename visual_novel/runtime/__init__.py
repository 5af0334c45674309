"""
Runtime module - Ducking and cooperative scheduling.

The sequencer lives in visual_novel.runtime.sequencer; it is not
re-exported here because it depends on the engine configuration.
"""

from visual_novel.runtime.ducking import (
    BASE_MUSIC_VOLUME,
    FULL_SCALE_PERCENT,
    DuckResult,
    duck,
)

from visual_novel.runtime.scheduler import (
    Scheduler,
    TimerHandle,
    ManualScheduler,
    AsyncioScheduler,
)

__all__ = [
    # Ducking
    "BASE_MUSIC_VOLUME",
    "FULL_SCALE_PERCENT",
    "DuckResult",
    "duck",
    # Scheduling
    "Scheduler",
    "TimerHandle",
    "ManualScheduler",
    "AsyncioScheduler",
]
