"""Repository service clients."""

from .backend import RepositoryBackend
from .client import ArtifactoryClient

__all__ = ["ArtifactoryClient", "RepositoryBackend"]
