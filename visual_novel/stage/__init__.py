"""
Stage Module - handles the sequencer drives.

Components:
    Layer, Stage         - Two alternating background layers
    AudioChannel         - Music / effect channel protocol
    SoundfileChannel     - Headless channel with real file durations
    ImageLoader          - Asynchronous image preload protocol
    FileImageLoader      - Preload by checking the file on disk
    ContentPanel         - Scene text, choices and reveal state
    AssetResolver        - images/ and audio/ path resolution
"""

from visual_novel.stage.layers import Layer, Stage

from visual_novel.stage.audio import AudioChannel, SoundfileChannel

from visual_novel.stage.images import ImageLoader, FileImageLoader

from visual_novel.stage.panel import ChoiceControl, ContentPanel

from visual_novel.stage.assets import AssetResolver

__all__ = [
    # Layers
    "Layer",
    "Stage",
    # Audio
    "AudioChannel",
    "SoundfileChannel",
    # Images
    "ImageLoader",
    "FileImageLoader",
    # Panel
    "ChoiceControl",
    "ContentPanel",
    # Assets
    "AssetResolver",
]
