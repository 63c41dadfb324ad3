"""Bucket/key object store backed by a path-addressed artifact repository.

This is the surface the backup host talks to. Every call is synchronous
and independent; the object store keeps no state besides the repository
client built by ``init`` and the label set.

Local staging:
    Put and Get spill object bytes under ``<staging_root>/<bucket>/<key>``.
    The staged copy is not removed afterwards. Staging paths are shared by
    every caller, so concurrent Put/Get of the same bucket and key race on
    the local file; serializing such calls is the caller's responsibility.
"""

import functools
import shutil
from contextlib import contextmanager
from datetime import timedelta
from pathlib import Path
from typing import BinaryIO, Callable, Iterator, Mapping, Optional

from arti_objectstore.core import get_logger, get_tracer, settings
from arti_objectstore.core.exceptions import (
    ArtiObjectStoreError,
    BackendError,
    ConfigurationError,
    ObjectNotFoundError,
    ValidationError,
)
from arti_objectstore.labels import Label, format_props, parse_labels
from arti_objectstore.paths import (
    object_pattern,
    staging_path,
    upload_target,
)
from arti_objectstore.repository.backend import RepositoryBackend
from arti_objectstore.repository.client import ArtifactoryClient
from arti_objectstore.schemas import (
    ConnectionDescriptor,
    ResilienceSettings,
    TransferResult,
)
from arti_objectstore.storage_config import resolve_connection, resolve_resilience

from .listing import CommonPrefixLister
from .signed_url import build_signed_url

logger = get_logger(__name__)
tracer = get_tracer(__name__)

ClientFactory = Callable[[ConnectionDescriptor, ResilienceSettings], RepositoryBackend]


def _traced(func):
    """Run the wrapped operation inside an ``object_store.<name>`` span."""

    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        with tracer.start_as_current_span(f"object_store.{func.__name__}"):
            return func(*args, **kwargs)

    return wrapper


@contextmanager
def _backend_call(description: str) -> Iterator[None]:
    """Wrap unexpected backend exceptions in BackendError."""
    try:
        yield
    except ArtiObjectStoreError:
        raise
    except Exception as e:
        error_msg = f"Failed to {description}: {e}"
        logger.error(error_msg, error=str(e))
        raise BackendError(error_msg) from e


def _validate_identity(bucket: str, key: Optional[str] = None) -> None:
    if not bucket:
        raise ValidationError("bucket must not be empty")
    if key is not None and not key.strip("/"):
        raise ValidationError("key must not be empty")


def _resolve_settings(
    config: Mapping[str, str], environ: Optional[Mapping[str, str]]
) -> tuple[ConnectionDescriptor, ResilienceSettings, list[Label]]:
    """Resolve connection, resilience and labels, reporting all errors at once."""
    errors: list[str] = []
    resolved = []
    for resolve, args in (
        (resolve_connection, (config, environ)),
        (resolve_resilience, (config,)),
        (parse_labels, (config.get("labels", ""),)),
    ):
        try:
            resolved.append(resolve(*args))
        except ConfigurationError as e:
            errors.extend(e.errors)

    if errors:
        logger.error("ObjectStore configuration invalid", errors=errors)
        raise ConfigurationError(errors)

    connection, resilience, labels = resolved
    return connection, resilience, labels


class ObjectStore:
    """Object-store contract (put, get, list, delete, exists, signed URL)."""

    def __init__(
        self,
        client_factory: ClientFactory = ArtifactoryClient,
        staging_root: Optional[Path] = None,
    ):
        """Create an uninitialized object store.

        Args:
            client_factory: Builds the repository backend from resolved settings
            staging_root: Local spill directory (defaults to settings.staging_root)
        """
        self._client_factory = client_factory
        self.staging_root = Path(staging_root or settings.staging_root)
        self._backend: Optional[RepositoryBackend] = None
        self.labels: list[Label] = []
        self.props = ""

    def init(
        self, config: Mapping[str, str], environ: Optional[Mapping[str, str]] = None
    ) -> None:
        """Prepare the object store from the plugin configuration map.

        Connection, resilience and label settings are all resolved before
        the repository client is built. Every problem found is reported
        together.

        Raises:
            ConfigurationError: If any setting is missing or malformed
        """
        logger.info("ObjectStore.init called")

        connection, resilience, labels = _resolve_settings(config, environ)

        self.labels = labels
        self.props = format_props(labels)
        self._backend = self._client_factory(connection, resilience)
        logger.info("ObjectStore initialized", url=connection.url, labels=self.props)

    @property
    def backend(self) -> RepositoryBackend:
        """The repository backend; only available after ``init``."""
        if self._backend is None:
            raise ConfigurationError("object store is not initialized, call init()")
        return self._backend

    @_traced
    def put_object(self, bucket: str, key: str, body: BinaryIO) -> TransferResult:
        """Store the bytes read from ``body`` under ``bucket``/``key``.

        The stream is staged to a local file first, then uploaded with the
        configured labels as properties. Partial failure is reported in the
        returned counts; only a failing backend call raises.

        Raises:
            BackendError: If the upload request cannot be executed
        """
        _validate_identity(bucket, key)
        path = staging_path(self.staging_root, bucket, key)
        log = logger.bind(bucket=bucket, key=key, path=str(path))
        log.info("PutObject")

        log.debug("Staging object locally")
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "wb") as fh:
            shutil.copyfileobj(body, fh)

        log.info("Uploading staged object")
        with _backend_call(f"upload '{key}' to '{bucket}'"):
            result = self.backend.upload(
                path, upload_target(bucket, key), properties=self.labels
            )
        log.debug("Files uploaded", uploaded=result.succeeded, failed=result.failed)
        return result

    @_traced
    def get_object(self, bucket: str, key: str) -> BinaryIO:
        """Return a readable binary stream with the object's content.

        Raises:
            ObjectNotFoundError: If the download retrieved zero files
            BackendError: If the download request cannot be executed
        """
        _validate_identity(bucket, key)
        path = staging_path(self.staging_root, bucket, key)
        log = logger.bind(bucket=bucket, key=key, path=str(path))
        log.info("GetObject")

        with _backend_call(f"download '{key}' from '{bucket}'"):
            result = self.backend.download(
                object_pattern(bucket, key), path, props=self.props
            )
        log.debug(
            "Files downloaded", downloaded=result.succeeded, failed=result.failed
        )
        if result.succeeded == 0:
            raise ObjectNotFoundError(bucket, key)

        return open(path, "rb")

    @_traced
    def object_exists(self, bucket: str, key: str) -> bool:
        """Check whether an object with ``key`` exists in ``bucket``.

        Backend errors are raised, never reported as absence.
        """
        _validate_identity(bucket, key)
        logger.info("ObjectExists", bucket=bucket, key=key)

        with _backend_call(f"search '{key}' in '{bucket}'"):
            results = self.backend.search(
                object_pattern(bucket, key), props=self.props, recursive=True
            )
        return len(results) > 0

    @_traced
    def list_common_prefixes(
        self, bucket: str, prefix: str, delimiter: str
    ) -> list[str]:
        """List key prefixes under ``prefix`` up to the next ``delimiter``."""
        logger.info(
            "ListCommonPrefixes", bucket=bucket, prefix=prefix, delimiter=delimiter
        )
        lister = CommonPrefixLister(self.backend, props=self.props)
        return lister.list_common_prefixes(bucket, prefix, delimiter)

    @_traced
    def list_objects(self, bucket: str, prefix: str) -> list[str]:
        """List keys under ``prefix``, grouped one ``/`` level deep."""
        logger.info("ListObjects", bucket=bucket, prefix=prefix)
        return self.list_common_prefixes(bucket, prefix, "/")

    @_traced
    def delete_object(self, bucket: str, key: str) -> TransferResult:
        """Remove the object with ``key`` from ``bucket``.

        The set of paths to delete is resolved first and then deleted as
        resolved, so objects appearing between the two steps are untouched.

        Raises:
            BackendError: If resolving or deleting cannot be executed
        """
        _validate_identity(bucket, key)
        log = logger.bind(bucket=bucket, key=key)
        log.info("DeleteObject")

        with _backend_call(f"delete '{key}' from '{bucket}'"):
            paths = self.backend.resolve_delete_set(
                object_pattern(bucket, key), props=self.props
            )
            log.debug("Paths resolved for deletion", paths=list(paths))
            result = self.backend.delete_files(paths)
        log.debug("Files deleted", deleted=result.succeeded, failed=result.failed)
        return result

    @_traced
    def create_signed_url(self, bucket: str, key: str, ttl: timedelta) -> str:
        """Create a directly fetchable URL for ``bucket``/``key``.

        The URL embeds the repository credential. ``ttl`` is not enforced:
        the URL remains usable for as long as that credential is valid.
        """
        _validate_identity(bucket, key)
        logger.info("CreateSignedURL", bucket=bucket, key=key)
        return build_signed_url(self.backend.describe_connection(), bucket, key, ttl)
