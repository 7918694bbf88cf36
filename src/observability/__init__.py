"""Structured logging package."""

from src.observability.logger import LedgerEventLogger, configure_logging, get_logger

__all__ = ["LedgerEventLogger", "configure_logging", "get_logger"]
