"""
Testing Utilities - Fakes and fixtures for engine tests.

Components:
    RecordingAudioChannel  - Audio channel that records calls
    ManualImageLoader      - Image preloads completed on demand
    make_story             - SceneGraph from a sample or inline table
    create_test_sequencer  - Sequencer on a virtual clock

Usage:
    from visual_novel.testing import create_test_sequencer

    rig = create_test_sequencer()
    rig.sequencer.show_scene("hall")
    rig.effect.end()
    assert rig.panel.revealed
"""

from visual_novel.testing.mock import (
    CallRecord,
    RecordingAudioChannel,
    PendingImage,
    ManualImageLoader,
)

from visual_novel.testing.fixtures import (
    SAMPLE_TABLES,
    make_story,
    create_test_audio,
    write_test_audio,
    SequencerRig,
    create_test_sequencer,
)

__all__ = [
    # Mocks
    "CallRecord",
    "RecordingAudioChannel",
    "PendingImage",
    "ManualImageLoader",
    # Fixtures
    "SAMPLE_TABLES",
    "make_story",
    "create_test_audio",
    "write_test_audio",
    "SequencerRig",
    "create_test_sequencer",
]
