"""Label parsing and property-filter serialization.

Labels come from a single ``name=value;name=value`` configuration string.
They are attached as properties to every upload and passed back to the
repository as a property filter on every search, download and delete,
so an adapter instance only ever sees objects carrying its own labels.
"""

from typing import Sequence
from urllib.parse import quote

from arti_objectstore.core.exceptions import ConfigurationError

Label = tuple[str, str]


def parse_labels(raw: str) -> list[Label]:
    """Parse a semicolon separated label string into ordered pairs.

    Args:
        raw: Label string, e.g. ``"env=prod;team=core"``

    Returns:
        List of ``(name, value)`` pairs in input order. Empty input yields
        an empty list.

    Raises:
        ConfigurationError: If any entry has no ``=`` or an empty name
    """
    if not raw:
        return []

    labels: list[Label] = []
    errors: list[str] = []
    for entry in raw.split(";"):
        name, sep, value = entry.partition("=")
        if not sep:
            errors.append(f"label entry {entry!r} is not of the form name=value")
        elif not name:
            errors.append(f"label entry {entry!r} has an empty name")
        else:
            labels.append((name, value))

    if errors:
        raise ConfigurationError(errors)
    return labels


def format_props(labels: Sequence[Label]) -> str:
    """Serialize labels into the repository's ``name=value;...`` filter syntax."""
    return ";".join(f"{name}={value}" for name, value in labels)


def matrix_params(labels: Sequence[Label]) -> str:
    """Serialize labels as URL matrix parameters for deploy requests."""
    return "".join(
        f";{quote(name, safe='')}={quote(value, safe='')}" for name, value in labels
    )
