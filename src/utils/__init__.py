"""Utility functions for Atomica."""
from .logger import configure_logging, get_logger, GameLogger, MetricsTracker

__all__ = [
    "configure_logging",
    "get_logger",
    "GameLogger",
    "MetricsTracker",
]
