"""Core utilities and shared components for arti-objectstore."""

from .config import settings
from .exceptions import ArtiObjectStoreError, ConfigurationError, ValidationError
from .observability import get_logger, get_tracer

__all__ = [
    "settings",
    "ArtiObjectStoreError",
    "ConfigurationError",
    "ValidationError",
    "get_logger",
    "get_tracer",
]
