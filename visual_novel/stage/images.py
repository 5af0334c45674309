"""
Image preloading.

A preload is asynchronous: the loader is handed success and failure
callbacks and calls exactly one of them later, through the scheduler.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Callable, Protocol

from visual_novel.runtime.scheduler import Scheduler

logger = logging.getLogger(__name__)

OnLoad = Callable[[str], None]
OnError = Callable[[str, str], None]


class ImageLoader(Protocol):
    """Preloads an image and reports back."""

    def load(self, path: str, on_load: OnLoad, on_error: OnError) -> None: ...


class FileImageLoader:
    """Preload by checking the file on disk.

    Success is reported on the next scheduler turn so callers always see
    the same ordering, whether or not the file exists.
    """

    def __init__(self, scheduler: Scheduler):
        self._scheduler = scheduler

    def load(self, path: str, on_load: OnLoad, on_error: OnError) -> None:
        def check() -> None:
            file_path = Path(path)
            if file_path.is_file():
                on_load(path)
            else:
                logger.debug("Image not found: %s", path)
                on_error(path, "file not found")

        self._scheduler.call_soon(check)


__all__ = [
    "ImageLoader",
    "FileImageLoader",
    "OnLoad",
    "OnError",
]
