"""
Structured logging for the visual novel engine.

Event records describe what the player saw and heard: scenes shown,
missing scenes, playback failures, story loads. Developer diagnostics
stay on the standard `logging` module.
"""

from __future__ import annotations

import json
import logging
import sys
import time
from dataclasses import dataclass, field, asdict
from enum import Enum
from typing import Any, TextIO


class LogLevel(Enum):
    """Log levels."""

    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"

    @property
    def numeric(self) -> int:
        """Get numeric log level."""
        return {
            "debug": logging.DEBUG,
            "info": logging.INFO,
            "warning": logging.WARNING,
            "error": logging.ERROR,
        }[self.value]


@dataclass
class LogRecord:
    """A structured log record.

    Attributes:
        level: Log level.
        event: Event name/type.
        message: Human-readable message.
        timestamp: Unix timestamp.
        data: Additional structured data.
    """

    level: str
    event: str
    message: str = ""
    timestamp: float = field(default_factory=time.time)
    data: dict[str, Any] = field(default_factory=dict)
    logger_name: str = ""

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        d = asdict(self)
        d.update(d.pop("data", {}))
        return d

    def to_json(self) -> str:
        """Convert to JSON string."""
        return json.dumps(self.to_dict(), default=str)


class StructuredLogger:
    """Structured event logging with JSON output.

    Example:
        logger = StructuredLogger("visual_novel")

        logger.scene_shown("start", generation=1, choices=2)
        # {"level": "info", "event": "scene_shown", "scene_id": "start", ...}

        # Bind context to every record
        scene_logger = logger.bind(generation=3)
        scene_logger.playback_error("audio/door.wav", error)
    """

    def __init__(
        self,
        name: str = "visual_novel",
        level: LogLevel = LogLevel.INFO,
        output: TextIO | None = None,
        json_format: bool = True,
    ):
        """Initialize the logger.

        Args:
            name: Logger name.
            level: Minimum log level.
            output: Output stream (default: stderr).
            json_format: Output as JSON (vs. human-readable).
        """
        self.name = name
        self._level = level
        self._output = output
        self._json_format = json_format
        self._context: dict[str, Any] = {}

    @property
    def output(self) -> TextIO:
        # Resolved late so pytest's capsys sees the records
        return self._output or sys.stderr

    def bind(self, **context: Any) -> "StructuredLogger":
        """Create a new logger with bound context."""
        new_logger = StructuredLogger(
            name=self.name,
            level=self._level,
            output=self._output,
            json_format=self._json_format,
        )
        new_logger._context = {**self._context, **context}
        return new_logger

    def _log(self, level: LogLevel, event: str, message: str = "", **data: Any) -> None:
        if level.numeric < self._level.numeric:
            return

        record = LogRecord(
            level=level.value,
            event=event,
            message=message,
            data={**self._context, **data},
            logger_name=self.name,
        )
        self._emit(record)

    def _emit(self, record: LogRecord) -> None:
        if self._json_format:
            line = record.to_json()
        else:
            line = self._format_human(record)
        print(line, file=self.output)

    def _format_human(self, record: LogRecord) -> str:
        timestamp = time.strftime("%H:%M:%S", time.localtime(record.timestamp))

        parts = [
            f"[{timestamp}]",
            f"[{record.level.upper()}]",
            f"[{record.event}]",
        ]
        if record.message:
            parts.append(record.message)
        if record.data:
            data_str = " ".join(f"{k}={v}" for k, v in record.data.items())
            parts.append(f"({data_str})")

        return " ".join(parts)

    def debug(self, event: str, message: str = "", **data: Any) -> None:
        self._log(LogLevel.DEBUG, event, message, **data)

    def info(self, event: str, message: str = "", **data: Any) -> None:
        self._log(LogLevel.INFO, event, message, **data)

    def warning(self, event: str, message: str = "", **data: Any) -> None:
        self._log(LogLevel.WARNING, event, message, **data)

    def error(self, event: str, message: str = "", **data: Any) -> None:
        self._log(LogLevel.ERROR, event, message, **data)

    # Convenience methods for engine events

    def story_loaded(self, source: str, scenes: int, **extra: Any) -> None:
        self.info(
            "story_loaded",
            f"Loaded {scenes} scenes",
            source=source,
            scenes=scenes,
            **extra,
        )

    def story_load_failed(self, source: str, error: Exception | str, **extra: Any) -> None:
        self.error(
            "story_load_failed",
            str(error),
            source=source,
            error_type=type(error).__name__ if isinstance(error, Exception) else "",
            **extra,
        )

    def scene_shown(self, scene_id: str, **extra: Any) -> None:
        self.info("scene_shown", scene_id=scene_id, **extra)

    def scene_not_found(self, scene_id: str, **extra: Any) -> None:
        self.error(
            "scene_not_found",
            f"Scene not found: {scene_id}",
            scene_id=scene_id,
            **extra,
        )

    def playback_error(self, source: str | None, error: Exception, **extra: Any) -> None:
        self.warning(
            "playback_error",
            str(error),
            source=source,
            error_type=type(error).__name__,
            **extra,
        )

    def volumes(self, effect_volume: float, music_volume: float, **extra: Any) -> None:
        self.debug(
            "volumes",
            f"Effect at {effect_volume * 100:.0f}% | music at {music_volume * 100:.0f}%",
            effect_volume=effect_volume,
            music_volume=music_volume,
            **extra,
        )


# Global logger instance
_global_logger: StructuredLogger | None = None


def configure_logging(
    level: LogLevel | str = LogLevel.INFO,
    output: TextIO | None = None,
    json_format: bool = True,
) -> StructuredLogger:
    """Configure global event logging.

    Args:
        level: Log level.
        output: Output stream.
        json_format: Use JSON format.

    Returns:
        Configured logger.
    """
    global _global_logger

    if isinstance(level, str):
        level = LogLevel(level.lower())

    _global_logger = StructuredLogger(
        name="visual_novel",
        level=level,
        output=output,
        json_format=json_format,
    )
    return _global_logger


def get_logger() -> StructuredLogger:
    """Get the global event logger, creating it on first use."""
    global _global_logger

    if _global_logger is None:
        _global_logger = StructuredLogger()

    return _global_logger


__all__ = [
    "LogLevel",
    "LogRecord",
    "StructuredLogger",
    "configure_logging",
    "get_logger",
]
