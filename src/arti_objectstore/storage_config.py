"""Resolution of plugin configuration into connection and resilience settings.

The host hands the plugin a flat ``str -> str`` map. This module turns it,
together with the process environment, into the immutable models the
repository client is built from. Resolution is all-or-nothing: every
problem is collected and reported in a single ``ConfigurationError``
before any network client exists.

Recognized keys:
    url, user, labels, dry_run, threads, dial_timeout, request_timeout, retries

Unrecognized keys are ignored.
"""

import os
import re
from dataclasses import dataclass
from datetime import timedelta
from typing import Any, Callable, Mapping, Optional

from pydantic import ValidationError as PydanticValidationError

from arti_objectstore.core import get_logger
from arti_objectstore.core.exceptions import ConfigurationError
from arti_objectstore.schemas import ConnectionDescriptor, ResilienceSettings

logger = get_logger(__name__)

# Environment variables holding credential material, keyed by descriptor field
CREDENTIAL_ENV_VARS = {
    "password": "ARTIFACTORY_PASSWORD",
    "api_key": "ARTIFACTORY_API_KEY",
    "access_token": "ARTIFACTORY_ACCESS_TOKEN",
    "ssh_key_path": "ARTIFACTORY_SSH_KEY_PATH",
    "client_cert_path": "ARTIFACTORY_CLIENT_CERT_PATH",
    "client_cert_key_path": "ARTIFACTORY_CLIENT_CERT_KEY_PATH",
}

_TRUE_VALUES = frozenset({"1", "t", "T", "TRUE", "true", "True"})
_FALSE_VALUES = frozenset({"0", "f", "F", "FALSE", "false", "False"})
_INT_RE = re.compile(r"[+-]?[0-9]+")


def parse_bool(value: str) -> bool:
    """Parse a boolean string strictly."""
    if value in _TRUE_VALUES:
        return True
    if value in _FALSE_VALUES:
        return False
    raise ValueError(f"invalid boolean {value!r}")


def parse_int(value: str) -> int:
    """Parse an integer string strictly (no whitespace, no decimals)."""
    if not _INT_RE.fullmatch(value):
        raise ValueError(f"invalid integer {value!r}")
    return int(value)


def parse_seconds(value: str) -> timedelta:
    """Parse an integer number of seconds into a duration."""
    return timedelta(seconds=parse_int(value))


@dataclass(frozen=True)
class SettingDef:
    """Declarative description of one optional configuration key."""

    key: str
    default: Any
    parser: Callable[[str], Any]


RESILIENCE_SCHEMA: tuple[SettingDef, ...] = (
    SettingDef("dry_run", False, parse_bool),
    SettingDef("threads", 3, parse_int),
    SettingDef("dial_timeout", timedelta(seconds=30), parse_seconds),
    SettingDef("request_timeout", timedelta(minutes=10), parse_seconds),
    SettingDef("retries", 3, parse_int),
)


def _format_pydantic_errors(exc: PydanticValidationError) -> list[str]:
    messages = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error["loc"]) or "config"
        messages.append(f"{location}: {error['msg']}")
    return messages


def resolve_resilience(config: Mapping[str, str]) -> ResilienceSettings:
    """Resolve timeouts, retries, threads and dry-run from configuration.

    Absent or empty keys take their schema default. Present values must
    parse as the expected type.

    Args:
        config: Plugin configuration map

    Returns:
        Fully populated resilience settings

    Raises:
        ConfigurationError: Listing every key that failed to parse or validate
    """
    values: dict[str, Any] = {}
    errors: list[str] = []

    for setting in RESILIENCE_SCHEMA:
        raw = config.get(setting.key, "")
        if raw == "":
            values[setting.key] = setting.default
            continue
        try:
            values[setting.key] = setting.parser(raw)
        except ValueError as e:
            errors.append(f"{setting.key}: {e}")

    if errors:
        raise ConfigurationError(errors)

    try:
        resilience = ResilienceSettings(**values)
    except PydanticValidationError as e:
        raise ConfigurationError(_format_pydantic_errors(e)) from e

    logger.debug(
        "Resilience settings resolved",
        dry_run=resilience.dry_run,
        threads=resilience.threads,
        dial_timeout=resilience.dial_timeout.total_seconds(),
        request_timeout=resilience.request_timeout.total_seconds(),
        retries=resilience.retries,
    )
    return resilience


def resolve_connection(
    config: Mapping[str, str], environ: Optional[Mapping[str, str]] = None
) -> ConnectionDescriptor:
    """Build the connection descriptor from configuration and environment.

    ``url`` and ``user`` come from the configuration map and are required.
    Credential material comes from the environment and is entirely optional;
    with none present the client connects anonymously and the service
    decides whether to accept the requests.

    Args:
        config: Plugin configuration map
        environ: Environment to read credentials from (defaults to os.environ)

    Returns:
        Immutable connection descriptor

    Raises:
        ConfigurationError: If url or user is missing, or url is malformed
    """
    if environ is None:
        environ = os.environ

    errors = [
        f"{key}: required key is missing or empty"
        for key in ("url", "user")
        if not config.get(key)
    ]
    if errors:
        raise ConfigurationError(errors)

    credentials = {
        field: environ.get(env_var) or None
        for field, env_var in CREDENTIAL_ENV_VARS.items()
    }

    try:
        connection = ConnectionDescriptor(
            url=config["url"], user=config["user"], **credentials
        )
    except PydanticValidationError as e:
        raise ConfigurationError(_format_pydantic_errors(e)) from e

    logger.info(
        "Connection resolved",
        url=connection.url,
        user=connection.user,
        auth=connection.credential_kind or "anonymous",
    )
    return connection
