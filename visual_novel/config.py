"""
Engine configuration.

Defaults can be overridden per process with VISUAL_NOVEL_* environment
variables, or per instance by passing fields explicitly.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

from visual_novel.runtime.ducking import BASE_MUSIC_VOLUME


def _env_float(name: str, default: float) -> float:
    value = os.environ.get(name)
    if value is None or not value.strip():
        return default
    try:
        return float(value)
    except ValueError:
        raise ValueError(f"{name} must be a number, got {value!r}") from None


@dataclass
class Config:
    """Visual novel engine configuration.

    Timing values are in milliseconds. `settle_ms` defaults to
    `transition_ms` so the old layer is cleared once the crossfade ends.
    """
    story_root: Path = field(default_factory=lambda: Path(os.environ.get("VISUAL_NOVEL_ROOT", ".")))
    image_dir: str = "images"
    audio_dir: str = "audio"

    base_music_volume: float = field(
        default_factory=lambda: _env_float("VISUAL_NOVEL_MUSIC_VOLUME", BASE_MUSIC_VOLUME)
    )
    transition_ms: float = field(
        default_factory=lambda: _env_float("VISUAL_NOVEL_TRANSITION_MS", 1500.0)
    )
    settle_ms: float | None = None
    reveal_delay_ms: float = field(
        default_factory=lambda: _env_float("VISUAL_NOVEL_REVEAL_DELAY_MS", 500.0)
    )
    start_delay_ms: float = 100.0

    fallback_fill: str = "#2b2d42"
    randomize_focus: bool = True

    def __post_init__(self):
        self.story_root = Path(self.story_root)

        if not 0.0 <= self.base_music_volume <= 1.0:
            raise ValueError(
                f"base_music_volume must be 0.0-1.0, got {self.base_music_volume}"
            )
        for name in ("transition_ms", "reveal_delay_ms", "start_delay_ms"):
            if getattr(self, name) < 0:
                raise ValueError(f"{name} must be >= 0, got {getattr(self, name)}")

        if self.settle_ms is None:
            self.settle_ms = self.transition_ms
        elif self.settle_ms < 0:
            raise ValueError(f"settle_ms must be >= 0, got {self.settle_ms}")


__all__ = ["Config"]
