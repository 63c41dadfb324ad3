"""Object-store operations backed by an artifact repository."""

from .listing import CommonPrefixLister
from .object_store import ObjectStore
from .signed_url import build_signed_url

__all__ = ["CommonPrefixLister", "ObjectStore", "build_signed_url"]
