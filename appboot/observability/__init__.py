from __future__ import annotations

from .logging import ALWAYS, ScopedLogger, configure_logging, get_logger

__all__ = ["ALWAYS", "ScopedLogger", "configure_logging", "get_logger"]
