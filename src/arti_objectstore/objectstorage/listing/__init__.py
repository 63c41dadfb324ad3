"""Object storage listing operations."""

from .prefix_contents import CommonPrefixLister

__all__ = ["CommonPrefixLister"]
