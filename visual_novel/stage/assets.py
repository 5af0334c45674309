"""
Asset resolution.

Images live under `<root>/images/`, music and effects under
`<root>/audio/`. Names come straight from the story table.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class AssetResolver:
    """Maps declared asset names to file paths."""

    root: Path = Path(".")
    image_dir: str = "images"
    audio_dir: str = "audio"

    def image_path(self, name: str) -> str:
        return str(Path(self.root) / self.image_dir / name)

    def audio_path(self, name: str) -> str:
        return str(Path(self.root) / self.audio_dir / name)

    @classmethod
    def from_config(cls, config) -> "AssetResolver":
        return cls(
            root=Path(config.story_root),
            image_dir=config.image_dir,
            audio_dir=config.audio_dir,
        )


__all__ = ["AssetResolver"]
