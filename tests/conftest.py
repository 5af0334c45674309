"""
Shared test fixtures.

Every test starts from default configuration and a fresh event logger.
"""

import pytest

from visual_novel.monitoring import logging as event_logging

ENV_VARS = (
    "VISUAL_NOVEL_ROOT",
    "VISUAL_NOVEL_MUSIC_VOLUME",
    "VISUAL_NOVEL_TRANSITION_MS",
    "VISUAL_NOVEL_REVEAL_DELAY_MS",
)


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setattr(event_logging, "_global_logger", None)
