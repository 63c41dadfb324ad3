"""Exception hierarchy for arti-objectstore."""

from typing import Optional, Sequence


class ArtiObjectStoreError(Exception):
    """Base exception for all arti-objectstore errors."""

    pass


class ConfigurationError(ArtiObjectStoreError):
    """Raised when plugin configuration is missing or malformed.

    Every problem found while resolving a configuration map is collected
    into ``errors`` so the caller sees all of them at once.
    """

    def __init__(self, errors: Sequence[str] | str):
        if isinstance(errors, str):
            errors = [errors]
        self.errors = list(errors)
        super().__init__("Invalid configuration: " + "; ".join(self.errors))


class ValidationError(ArtiObjectStoreError):
    """Raised when an operation is called with invalid arguments."""

    pass


class BackendError(ArtiObjectStoreError):
    """Raised when the repository service cannot execute a request."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class ObjectNotFoundError(ArtiObjectStoreError):
    """Raised when a download retrieves zero files."""

    def __init__(self, bucket: str, key: str):
        super().__init__(f"Object '{key}' not found in bucket '{bucket}'")
        self.bucket = bucket
        self.key = key
