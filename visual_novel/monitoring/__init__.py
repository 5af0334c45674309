"""
Monitoring - structured event logging.

Example:
    from visual_novel.monitoring import configure_logging

    logger = configure_logging("debug", json_format=False)
    logger.scene_shown("start")
"""

from visual_novel.monitoring.logging import (
    StructuredLogger,
    LogLevel,
    LogRecord,
    configure_logging,
    get_logger,
)

__all__ = [
    "StructuredLogger",
    "LogLevel",
    "LogRecord",
    "configure_logging",
    "get_logger",
]
