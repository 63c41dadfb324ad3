"""Common-prefix listing on top of a flat recursive repository search."""

from arti_objectstore.core import get_logger
from arti_objectstore.core.exceptions import (
    ArtiObjectStoreError,
    BackendError,
    ValidationError,
)
from arti_objectstore.paths import artifact_identity, prefix_pattern, sub_key
from arti_objectstore.repository.backend import RepositoryBackend

logger = get_logger(__name__)


class CommonPrefixLister:
    """Lists common prefixes (virtual folders) under a bucket prefix."""

    def __init__(self, backend: RepositoryBackend, props: str = ""):
        """Initialize the lister.

        Args:
            backend: Repository backend to search
            props: Property filter scoping every search
        """
        self.backend = backend
        self.props = props

    def list_common_prefixes(
        self, bucket: str, prefix: str, delimiter: str = "/"
    ) -> list[str]:
        """List key prefixes one delimiter level below ``prefix``.

        For example, if the bucket contains the keys:
        - a-prefix/foo-1/bar
        - a-prefix/foo-1/baz
        - a-prefix/foo-2/baz
        - some-other-prefix/foo-3/bar

        listing with prefix ``"a-prefix/"`` and delimiter ``"/"`` returns
        ``["a-prefix/foo-1/", "a-prefix/foo-2/"]``.

        Only the first segment after the prefix is kept; call again with a
        returned prefix to descend. A key without the delimiter after the
        prefix becomes its own entry (``prefix + rest + delimiter``).
        The result has no duplicates. Its order follows the backend's
        result order and carries no meaning.

        Args:
            bucket: Bucket (repository) name
            prefix: Key prefix, may be empty
            delimiter: Segment delimiter

        Returns:
            Distinct common prefixes

        Raises:
            ValidationError: If bucket or delimiter is empty
            BackendError: If the search cannot be executed
        """
        if not bucket:
            raise ValidationError("bucket must not be empty")
        if not delimiter:
            raise ValidationError("delimiter must not be empty")

        pattern = prefix_pattern(bucket, prefix)
        try:
            results = self.backend.search(pattern, props=self.props, recursive=True)
        except ArtiObjectStoreError:
            raise
        except Exception as e:
            error_msg = f"Failed to search '{pattern}': {e}"
            logger.error(error_msg, error=str(e))
            raise BackendError(error_msg) from e

        common_prefixes: dict[str, None] = {}
        for result in results:
            identity = artifact_identity(result.repo, result.path, result.name)
            remainder = sub_key(identity, bucket, prefix)
            if remainder is None:
                logger.warning(
                    "Skipping search result outside requested prefix",
                    artifact=identity,
                    bucket=bucket,
                    prefix=prefix,
                )
                continue
            first_segment = remainder.split(delimiter, 1)[0]
            common_prefixes.setdefault(f"{prefix}{first_segment}{delimiter}")

        logger.info(
            "Common prefixes listed",
            bucket=bucket,
            prefix=prefix,
            result_count=len(results),
            prefix_count=len(common_prefixes),
        )
        return list(common_prefixes)
