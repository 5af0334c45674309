"""
Test Fixtures - Common fixtures for testing.

Provides:
    - Sample story tables
    - Test audio generation
    - Story graph creation
    - A sequencer wired to recording handles
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any

import numpy as np
import soundfile as sf

from visual_novel.config import Config
from visual_novel.runtime.scheduler import ManualScheduler
from visual_novel.runtime.sequencer import PresentationSequencer
from visual_novel.stage.panel import ContentPanel
from visual_novel.story.graph import SceneGraph
from visual_novel.testing.mock import ManualImageLoader, RecordingAudioChannel


# Sample tables for testing
SAMPLE_TABLES = {
    "minimal": "id,text\nstart,Hello\n",
    "branching": (
        "id,text,image,audio,sfx,sfx_vol,option1,target1,option2,target2\n"
        "start,You wake up.,room.png,theme.wav,,,Open the door,hall,Sleep,start\n"
        "hall,\"A long hall, dimly lit.\",hall.png,,creak.wav,200,Go back,start,,\n"
        "end,The end.,,,,,,,,\n"
    ),
    "semicolon": (
        "id;text;option1;target1\n"
        "start;\"Hi; there\";Next;b\n"
        "b;Bye;;\n"
    ),
    "broken_link": (
        "id,text,option1,target1\n"
        "start,Go,Onward,missing\n"
    ),
}


def make_story(table: str | list[dict[str, str]] = "branching") -> SceneGraph:
    """
    Build a SceneGraph for tests.

    Args:
        table: A SAMPLE_TABLES key, raw table text, or a list of rows
            (dicts from column name to value).
    """
    if isinstance(table, list):
        headers: list[str] = []
        for row in table:
            for name in row:
                if name not in headers:
                    headers.append(name)
        lines = [",".join(headers)]
        for row in table:
            lines.append(",".join(_quote(row.get(h, "")) for h in headers))
        return SceneGraph.from_text("\n".join(lines))

    return SceneGraph.from_text(SAMPLE_TABLES.get(table, table))


def _quote(value: str) -> str:
    if "," in value or '"' in value:
        return '"' + value.replace('"', '""') + '"'
    return value


def create_test_audio(
    duration: float = 0.5,
    sample_rate: int = 22050,
    frequency: float = 440.0,
    amplitude: float = 0.5,
    channels: int = 1,
) -> np.ndarray:
    """
    Create a sine tone.

    Returns:
        Float32 array of shape (frames, channels)
    """
    num_samples = int(duration * sample_rate)
    t = np.arange(num_samples, dtype=np.float32) / sample_rate
    tone = (np.sin(2 * np.pi * frequency * t) * amplitude).astype(np.float32)
    return np.repeat(tone[:, None], channels, axis=1)


def write_test_audio(path: str | Path, duration: float = 0.5, sample_rate: int = 22050, **kwargs: Any) -> Path:
    """Write a tone to a WAV file and return its path."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    sf.write(str(path), create_test_audio(duration, sample_rate, **kwargs), sample_rate)
    return path


@dataclass
class SequencerRig:
    """A sequencer and the handles it was built with."""

    sequencer: PresentationSequencer
    scheduler: ManualScheduler
    music: RecordingAudioChannel
    effect: RecordingAudioChannel
    images: ManualImageLoader

    @property
    def panel(self) -> ContentPanel:
        return self.sequencer.panel


def create_test_sequencer(
    graph: SceneGraph | str = "branching",
    config: Config | None = None,
    **kwargs: Any,
) -> SequencerRig:
    """
    Build a sequencer on a virtual clock with recording handles.

    Example:
        rig = create_test_sequencer()
        rig.sequencer.show_scene("start")
        rig.images.complete()
        rig.scheduler.advance(500)
        assert rig.panel.revealed
    """
    if not isinstance(graph, SceneGraph):
        graph = make_story(graph)

    scheduler = ManualScheduler()
    music = RecordingAudioChannel("music")
    effect = RecordingAudioChannel("sfx")
    images = ManualImageLoader()
    sequencer = PresentationSequencer(
        graph,
        scheduler=scheduler,
        music=music,
        effect=effect,
        images=images,
        config=config or Config(story_root=Path("story")),
        **kwargs,
    )
    return SequencerRig(sequencer, scheduler, music, effect, images)


__all__ = [
    "SAMPLE_TABLES",
    "make_story",
    "create_test_audio",
    "write_test_audio",
    "SequencerRig",
    "create_test_sequencer",
]
