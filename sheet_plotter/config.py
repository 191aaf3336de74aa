"""Runtime configuration for the Sheet Plotter project."""

from __future__ import annotations

import os
from dataclasses import dataclass


@dataclass(frozen=True)
class AppConfig:
    """High level runtime configuration values."""

    max_upload_size_mb: int = 25
    allowed_sheet_extensions: tuple[str, ...] = ("csv", "xlsx")
    history_depth: int = 20
    min_points: int = 2
    document_name: str = "Sheet Plotter Results"
    export_basename: str = "sheet_plotter_results"
    fit_bounds_padding: float = 0.1
    max_sessions: int = 200
    session_idle_minutes: int = 60

    @property
    def max_upload_bytes(self) -> int:
        """Maximum upload payload in bytes."""
        return self.max_upload_size_mb * 1024 * 1024


@dataclass(frozen=True)
class QueueConfig:
    """Configuration for the Redis-backed task queue."""

    redis_url: str = "redis://localhost:6379/0"
    queue_name: str = "sheet-plotter"
    default_timeout: int = 60 * 10  # seconds


APP_CONFIG = AppConfig(
    max_upload_size_mb=int(
        os.environ.get("SHEET_PLOTTER_MAX_UPLOAD_MB", AppConfig.max_upload_size_mb)
    ),
    history_depth=int(os.environ.get("SHEET_PLOTTER_HISTORY_DEPTH", AppConfig.history_depth)),
    document_name=os.environ.get("SHEET_PLOTTER_DOCUMENT_NAME", AppConfig.document_name),
    export_basename=os.environ.get("SHEET_PLOTTER_EXPORT_BASENAME", AppConfig.export_basename),
    max_sessions=int(os.environ.get("SHEET_PLOTTER_MAX_SESSIONS", AppConfig.max_sessions)),
    session_idle_minutes=int(
        os.environ.get("SHEET_PLOTTER_SESSION_IDLE_MINUTES", AppConfig.session_idle_minutes)
    ),
)
QUEUE_CONFIG = QueueConfig(
    redis_url=os.environ.get("SHEET_PLOTTER_REDIS_URL", QueueConfig.redis_url),
    queue_name=os.environ.get("SHEET_PLOTTER_QUEUE", QueueConfig.queue_name),
    default_timeout=int(
        os.environ.get("SHEET_PLOTTER_QUEUE_TIMEOUT", QueueConfig.default_timeout)
    ),
)
