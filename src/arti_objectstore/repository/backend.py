"""Capability interface the object store requires from a repository service."""

from pathlib import Path
from typing import Protocol, Sequence

from arti_objectstore.labels import Label
from arti_objectstore.schemas import ConnectionDescriptor, SearchResult, TransferResult


class RepositoryBackend(Protocol):
    """Protocol for repository services addressed by ``<repo>/<path>`` patterns.

    ``props`` arguments use the ``name=value;name=value`` filter syntax and
    restrict the operation to files carrying every listed property.
    """

    def upload(
        self, source: Path, target: str, properties: Sequence[Label] = ()
    ) -> TransferResult:
        """Deploy a local file (or every file under a directory) to ``target``."""
        ...

    def download(self, pattern: str, target: Path, props: str = "") -> TransferResult:
        """Fetch files matching ``pattern`` into the local ``target`` path."""
        ...

    def search(
        self, pattern: str, props: str = "", recursive: bool = True
    ) -> list[SearchResult]:
        """Return files matching ``pattern``."""
        ...

    def resolve_delete_set(self, pattern: str, props: str = "") -> tuple[str, ...]:
        """Pin the ``<repo>/<path>/<name>`` identities a delete would remove."""
        ...

    def delete_files(self, paths: Sequence[str]) -> TransferResult:
        """Delete exactly the given identities."""
        ...

    def describe_connection(self) -> ConnectionDescriptor:
        """Return the connection descriptor the backend was built from."""
        ...
