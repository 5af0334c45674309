"""
Ducking - Volume interaction between a scene's effect and its music bed.

A scene may ask for its sound effect at more than 100%. The effect
channel cannot play louder than full scale, so the overdrive is spent
on the music instead: the music bed is lowered in inverse proportion,
which makes the effect sound louder by contrast.

Semantics:
    - Absent or non-numeric request -> effect 1.0, music at base
    - 0 <= p <= 100                 -> effect p/100, music at base
    - p > 100                       -> effect 1.0, music base * 100/p
    - Both outputs are floored at 0

Example:
    duck(200, 0.2)   -> DuckResult(effect_volume=1.0, music_volume=0.1)
    duck(400, 0.2)   -> DuckResult(effect_volume=1.0, music_volume=0.05)

This is a pure function: it never touches a channel. The sequencer
applies the result.
"""

from __future__ import annotations

from dataclasses import dataclass

from visual_novel.story.records import parse_percent


# Music level when no ducking is active
BASE_MUSIC_VOLUME = 0.2

# Requests above this percentage duck the music
FULL_SCALE_PERCENT = 100.0


@dataclass(frozen=True)
class DuckResult:
    """Channel volumes for one scene.

    Fields:
        effect_volume: Effect channel volume (0.0 - 1.0).
        music_volume: Music channel volume (0.0 - base).
    """
    effect_volume: float = 1.0
    music_volume: float = BASE_MUSIC_VOLUME
    base_music_volume: float = BASE_MUSIC_VOLUME

    def __iter__(self):
        # Unpacks as (effect_volume, music_volume)
        return iter((self.effect_volume, self.music_volume))

    @property
    def is_ducked(self) -> bool:
        """True if the music was lowered below its base level."""
        return self.music_volume < self.base_music_volume


def duck(
    requested_percent: float | str | None,
    base_music_volume: float = BASE_MUSIC_VOLUME,
) -> DuckResult:
    """Compute effect and music volumes for a requested effect level.

    Args:
        requested_percent: Effect volume in percent. None, blank, NaN or
            non-numeric values mean "not requested".
        base_music_volume: Music level when nothing is ducked.

    Returns:
        DuckResult with both volumes.
    """
    percent = parse_percent(requested_percent)

    effect_volume = 1.0
    music_volume = base_music_volume

    if percent is not None:
        if percent > FULL_SCALE_PERCENT:
            effect_volume = 1.0
            music_volume = base_music_volume * (FULL_SCALE_PERCENT / percent)
        else:
            effect_volume = percent / FULL_SCALE_PERCENT
            music_volume = base_music_volume

    # Explicit floor
    effect_volume = max(0.0, effect_volume)
    music_volume = max(0.0, music_volume)

    return DuckResult(
        effect_volume=effect_volume,
        music_volume=music_volume,
        base_music_volume=base_music_volume,
    )


__all__ = [
    "BASE_MUSIC_VOLUME",
    "FULL_SCALE_PERCENT",
    "DuckResult",
    "duck",
]
