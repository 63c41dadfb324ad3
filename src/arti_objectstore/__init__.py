"""Object-store adapter for path-addressed artifact repositories.

This package exposes a bucket/key object-storage contract (put, get, list,
delete, exists, signed URL) while the data lives in an artifact repository
service reached over HTTP. Buckets map to repositories and keys map to
paths inside them. Configured labels are attached as properties to every
upload and scope every search, so several adapters can share one service.

Recommended Usage:
    >>> from arti_objectstore import ObjectStore
    >>> store = ObjectStore()
    >>> store.init({"url": "https://repo.example.com/artifactory/", "user": "backup"})
    >>> store.list_objects("backups", "daily/")

Advanced Usage:
    Import specific modules to work with the pieces directly:

    >>> from arti_objectstore.objectstorage import CommonPrefixLister
    >>> from arti_objectstore.repository import ArtifactoryClient
"""

__version__ = "0.1.0"

from .core.exceptions import (
    ArtiObjectStoreError,
    BackendError,
    ConfigurationError,
    ObjectNotFoundError,
    ValidationError,
)
from .labels import format_props, parse_labels
from .objectstorage import CommonPrefixLister, ObjectStore, build_signed_url
from .repository import ArtifactoryClient, RepositoryBackend
from .schemas import (
    ConnectionDescriptor,
    ResilienceSettings,
    SearchResult,
    TransferResult,
)
from .storage_config import resolve_connection, resolve_resilience

__all__ = [
    # Object store
    "ObjectStore",
    "CommonPrefixLister",
    "build_signed_url",
    # Repository
    "ArtifactoryClient",
    "RepositoryBackend",
    # Configuration
    "ConnectionDescriptor",
    "ResilienceSettings",
    "resolve_connection",
    "resolve_resilience",
    "parse_labels",
    "format_props",
    # Results
    "SearchResult",
    "TransferResult",
    # Errors
    "ArtiObjectStoreError",
    "BackendError",
    "ConfigurationError",
    "ObjectNotFoundError",
    "ValidationError",
]
