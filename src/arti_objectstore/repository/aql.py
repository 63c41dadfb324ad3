"""Artifactory Query Language (AQL) construction for pattern searches."""

import json
from typing import Any

from arti_objectstore.core.exceptions import ValidationError
from arti_objectstore.labels import parse_labels


def split_pattern(pattern: str) -> tuple[str, str]:
    """Split ``<repo>/<path-pattern>`` into its repository and path parts.

    An empty path part matches everything in the repository.
    """
    repo, _, path = pattern.partition("/")
    if not repo or "*" in repo:
        raise ValidationError(f"Pattern must start with a repository name: {pattern}")
    return repo, path or "*"


def path_name_clauses(path_pattern: str, recursive: bool = True) -> list[dict[str, Any]]:
    """Build the ``path``/``name`` alternatives matching a path pattern.

    The pattern is tried as a file (directory part + name part). A recursive
    search also matches every file below a folder matching the pattern.
    AQL ``$match`` wildcards span slashes.
    """
    if "/" in path_pattern:
        directory, name = path_pattern.rsplit("/", 1)
    else:
        directory, name = ".", path_pattern

    clauses: list[dict[str, Any]] = [
        {"path": {"$match": directory}, "name": {"$match": name or "*"}}
    ]
    if recursive:
        clauses.append({"path": {"$match": path_pattern}, "name": {"$match": "*"}})
        clauses.append(
            {"path": {"$match": f"{path_pattern}/*"}, "name": {"$match": "*"}}
        )
    return clauses


def property_criteria(props: str) -> list[dict[str, Any]]:
    """Turn a ``name=value;...`` filter into AQL property criteria."""
    return [{f"@{name}": {"$eq": value}} for name, value in parse_labels(props)]


def build_find_query(pattern: str, props: str = "", recursive: bool = True) -> str:
    """Build an ``items.find`` query for files matching ``pattern``.

    Args:
        pattern: Search pattern in ``<repo>/<path-pattern>`` form
        props: Property filter in ``name=value;...`` form
        recursive: Also match files below folders matching the pattern

    Returns:
        AQL query text ready to POST to ``api/search/aql``
    """
    repo, path_pattern = split_pattern(pattern)
    criteria: list[dict[str, Any]] = [
        {"repo": repo},
        {"type": "file"},
        {"$or": path_name_clauses(path_pattern, recursive)},
    ]
    criteria.extend(property_criteria(props))

    query = json.dumps({"$and": criteria}, separators=(",", ":"))
    return f'items.find({query}).include("repo","path","name")'
