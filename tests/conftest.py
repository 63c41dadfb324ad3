"""Test configuration and fixtures for arti-objectstore."""

import fnmatch
from pathlib import Path
from typing import Optional, Sequence

import pytest

from arti_objectstore.labels import Label, parse_labels
from arti_objectstore.objectstorage import ObjectStore
from arti_objectstore.schemas import (
    ConnectionDescriptor,
    ResilienceSettings,
    SearchResult,
    TransferResult,
)

BASE_CONFIG = {
    "url": "https://repo.example.com/artifactory/",
    "user": "backup",
}


class FakeRepositoryBackend:
    """In-memory repository backend matching patterns with shell globs."""

    def __init__(self, connection: Optional[ConnectionDescriptor] = None):
        self.connection = connection or ConnectionDescriptor(**BASE_CONFIG)
        self.resilience = ResilienceSettings()
        self.objects: dict[str, bytes] = {}
        self.properties: dict[str, dict[str, str]] = {}
        self.searches: list[tuple[str, str, bool]] = []

    def add(
        self, identity: str, content: bytes = b"", properties: Sequence[Label] = ()
    ) -> None:
        self.objects[identity] = content
        self.properties[identity] = dict(properties)

    def _matches(self, identity: str, pattern: str, props: str, recursive: bool) -> bool:
        wanted = parse_labels(props)
        if any(self.properties[identity].get(name) != value for name, value in wanted):
            return False
        if fnmatch.fnmatchcase(identity, pattern):
            return True
        return recursive and fnmatch.fnmatchcase(identity, pattern + "/*")

    def _matching(self, pattern: str, props: str, recursive: bool) -> list[str]:
        return [
            identity
            for identity in self.objects
            if self._matches(identity, pattern, props, recursive)
        ]

    def upload(
        self, source: Path, target: str, properties: Sequence[Label] = ()
    ) -> TransferResult:
        source = Path(source)
        if source.is_dir():
            files = [path for path in sorted(source.rglob("*")) if path.is_file()]
            for path in files:
                identity = f"{target}/{path.relative_to(source).as_posix()}"
                self.add(identity, path.read_bytes(), properties)
            return TransferResult(succeeded=len(files))
        self.add(target, source.read_bytes(), properties)
        return TransferResult(succeeded=1)

    def download(self, pattern: str, target: Path, props: str = "") -> TransferResult:
        matched = self._matching(pattern, props, recursive=False)
        for identity in matched:
            Path(target).parent.mkdir(parents=True, exist_ok=True)
            Path(target).write_bytes(self.objects[identity])
        return TransferResult(succeeded=len(matched))

    def search(
        self, pattern: str, props: str = "", recursive: bool = True
    ) -> list[SearchResult]:
        self.searches.append((pattern, props, recursive))
        results = []
        for identity in self._matching(pattern, props, recursive):
            repo, _, rest = identity.partition("/")
            path, _, name = rest.rpartition("/")
            results.append(SearchResult(repo=repo, path=path or ".", name=name))
        return results

    def resolve_delete_set(self, pattern: str, props: str = "") -> tuple[str, ...]:
        return tuple(self._matching(pattern, props, recursive=True))

    def delete_files(self, paths: Sequence[str]) -> TransferResult:
        deleted = 0
        for identity in paths:
            if self.objects.pop(identity, None) is not None:
                self.properties.pop(identity, None)
                deleted += 1
        return TransferResult(succeeded=deleted, failed=len(paths) - deleted)

    def describe_connection(self) -> ConnectionDescriptor:
        return self.connection


@pytest.fixture
def temp_dir(tmp_path):
    """Create a temporary directory for testing."""
    return tmp_path


@pytest.fixture
def fake_backend():
    """Empty in-memory repository backend."""
    return FakeRepositoryBackend()


@pytest.fixture
def listing_backend(fake_backend):
    """Backend holding the keys x/1/a, x/1/b, x/2/c and y/3/d in test-bucket."""
    for key in ("x/1/a", "x/1/b", "x/2/c", "y/3/d"):
        fake_backend.add(f"test-bucket/{key}", key.encode())
    return fake_backend


@pytest.fixture
def make_store(temp_dir, fake_backend):
    """Build an initialized ObjectStore wired to the fake backend."""

    def factory(config=None, environ=None):
        def client_factory(connection, resilience):
            fake_backend.connection = connection
            fake_backend.resilience = resilience
            return fake_backend

        store = ObjectStore(
            client_factory=client_factory, staging_root=temp_dir / "staging"
        )
        store.init({**BASE_CONFIG, **(config or {})}, environ=environ or {})
        return store

    return factory


@pytest.fixture
def object_store(make_store):
    """Initialized ObjectStore without labels or credentials."""
    return make_store()
