"""
Asset Validator - Check a story's links and referenced files.

Reports, never repairs:
- Choices whose target scene does not exist
- Images missing under images/
- Music and effects missing or unreadable under audio/
- Audio that clips (peak at full scale)

Usage:
    visual-novel check story.csv
    # ✅ audio/theme.ogg: 2ch, 44100Hz, 93.20s (music)
    # ❌ images/castle.png: file not found (used by: gate, hall)
    # ❌ start -> "Open the door" -> cellar: target scene not found
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path

import numpy as np
import soundfile as sf

from visual_novel.stage.assets import AssetResolver
from visual_novel.story.graph import MissingTarget, SceneGraph

logger = logging.getLogger(__name__)


# Peak level treated as clipping
CLIP_THRESHOLD = 0.999


@dataclass
class AssetResult:
    """Result of validating one referenced asset."""
    kind: str  # "image", "music" or "sfx"
    name: str
    path: Path
    scenes: list[str] = field(default_factory=list)
    valid: bool = True
    issues: list[str] = field(default_factory=list)

    # Audio properties (if readable)
    channels: int = 0
    sample_rate: int = 0
    duration: float = 0.0
    peak: float = 0.0


@dataclass
class StoryReport:
    """Everything `check` found for one story."""
    scenes: int
    missing_targets: list[MissingTarget] = field(default_factory=list)
    assets: list[AssetResult] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.missing_targets and all(a.valid for a in self.assets)


def validate_image(path: Path) -> AssetResult:
    """Check that an image file exists."""
    result = AssetResult(kind="image", name=path.name, path=path)
    if not path.is_file():
        result.valid = False
        result.issues.append("file not found")
    return result


def validate_audio(path: Path, kind: str = "sfx") -> AssetResult:
    """Check that an audio file exists, decodes, and does not clip.

    Args:
        path: Path to audio file
        kind: "music" or "sfx"

    Returns:
        AssetResult with issues list
    """
    result = AssetResult(kind=kind, name=path.name, path=path)

    if not path.is_file():
        result.valid = False
        result.issues.append("file not found")
        return result

    try:
        info = sf.info(str(path))
        result.channels = info.channels
        result.sample_rate = int(info.samplerate)
        result.duration = info.duration

        data, _ = sf.read(str(path), dtype="float32", always_2d=True)
        result.peak = float(np.max(np.abs(data))) if data.size else 0.0

        if result.duration <= 0:
            result.valid = False
            result.issues.append("empty audio")

        if result.peak >= CLIP_THRESHOLD:
            result.issues.append(f"peak {result.peak:.3f} (clipping)")

    except (OSError, RuntimeError) as e:
        result.valid = False
        result.issues.append(f"Failed to read: {e}")

    return result


def validate_story(graph: SceneGraph, resolver: AssetResolver) -> StoryReport:
    """Validate links and assets of a loaded story.

    Each distinct asset is checked once; `scenes` lists who uses it.
    """
    report = StoryReport(scenes=len(graph), missing_targets=graph.missing_targets())

    seen: dict[tuple[str, str], AssetResult] = {}

    def check(kind: str, name: str | None, scene_id: str) -> None:
        if name is None:
            return
        key = (kind, name)
        if key not in seen:
            if kind == "image":
                seen[key] = validate_image(Path(resolver.image_path(name)))
            else:
                seen[key] = validate_audio(Path(resolver.audio_path(name)), kind=kind)
        seen[key].scenes.append(scene_id)

    for record in graph:
        check("image", record.image, record.scene_id)
        check("music", record.audio, record.scene_id)
        check("sfx", record.sfx, record.scene_id)

    report.assets = list(seen.values())
    invalid = sum(1 for a in report.assets if not a.valid)
    logger.info(
        "Checked %d assets (%d invalid), %d missing targets",
        len(report.assets), invalid, len(report.missing_targets),
    )
    return report


def generate_story_report(report: StoryReport) -> str:
    """Generate a validation report.

    Args:
        report: Result of validate_story

    Returns:
        Formatted report string
    """
    lines = ["# Story Check", ""]

    valid_assets = sum(1 for a in report.assets if a.valid)
    lines.extend([
        "## Summary",
        f"- Scenes: {report.scenes}",
        f"- Missing targets: {len(report.missing_targets)}",
        f"- Assets: {len(report.assets)} ({valid_assets} valid)",
        "",
    ])

    if report.missing_targets:
        lines.extend(["## Missing Targets", ""])
        for missing in report.missing_targets:
            lines.append(f"- ❌ {missing.scene_id} -> \"{missing.label}\" -> {missing.target}")
        lines.append("")

    if report.assets:
        lines.extend(["## Assets", ""])
        for asset in report.assets:
            status = "✅" if asset.valid else "❌"
            detail = ""
            if asset.sample_rate:
                detail = f" {asset.channels}ch, {asset.sample_rate}Hz, {asset.duration:.2f}s"
            lines.append(f"- {status} {asset.path} ({asset.kind}){detail}")
            for issue in asset.issues:
                lines.append(f"  - {issue}")
            lines.append(f"  - used by: {', '.join(asset.scenes)}")
        lines.append("")

    return "\n".join(lines)


__all__ = [
    "CLIP_THRESHOLD",
    "AssetResult",
    "StoryReport",
    "validate_image",
    "validate_audio",
    "validate_story",
    "generate_story_report",
]
