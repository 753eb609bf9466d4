"""
Shared utilities module

Domain-agnostic helpers used across the application.
"""

from .logger import ColoredFormatter, JSONFormatter, build_formatter, configure_logging

__all__ = [
    "ColoredFormatter",
    "JSONFormatter",
    "build_formatter",
    "configure_logging",
]
