"""Translation between object-store identities and repository patterns.

A bucket is a repository name and a key is a slash-delimited path inside
it. Keys are stripped of leading and trailing slashes before any pattern
is built, so ``"/a/b"``, ``"a/b/"`` and ``"a/b"`` address the same object.
"""

from pathlib import Path
from typing import Optional


def normalize_key(key: str) -> str:
    """Strip leading and trailing slashes from a key."""
    return key.strip("/")


def upload_target(bucket: str, key: str) -> str:
    """Repository target for an upload: ``<bucket>/<key>``."""
    return f"{bucket}/{normalize_key(key)}"


def object_pattern(bucket: str, key: str) -> str:
    """Pattern addressing a single object for download, search and delete."""
    return f"{bucket}/{normalize_key(key)}"


def prefix_pattern(bucket: str, prefix: str) -> str:
    """Wildcard search pattern matching every object under ``prefix``."""
    return f"{bucket}/{prefix}*"


def artifact_identity(repo: str, path: str, name: str) -> str:
    """Reconstruct ``<repo>/<path>/<name>`` from a search result.

    Files at the repository root are reported with path ``"."`` and map
    to ``<repo>/<name>``.
    """
    if path in ("", "."):
        return f"{repo}/{name}"
    return f"{repo}/{path}/{name}"


def sub_key(identity: str, bucket: str, prefix: str) -> Optional[str]:
    """Remove the literal ``<bucket>/<prefix>`` from the start of an identity.

    Returns None when the identity does not start with it.
    """
    beginning = f"{bucket}/{prefix}"
    if not identity.startswith(beginning):
        return None
    return identity[len(beginning):]


def staging_path(root: Path, bucket: str, key: str) -> Path:
    """Local spill path for an object, derived only from bucket and key."""
    return Path(root) / bucket / normalize_key(key)
