"""Shared CLI parameter definitions.

Every command talks to the same repository service, so the connection
options are declared once here and reused by each command signature.
Values are kept as strings so that they are parsed by the same strict
configuration rules the plugin host's configuration map goes through.

Credentials are never passed as options; they are read from the
``ARTIFACTORY_*`` environment variables.
"""

from pathlib import Path
from typing import Annotated, Optional

import typer

UrlOption = Annotated[
    str,
    typer.Option("--url", envvar="ARTI_OBJECTSTORE_URL", help="Repository service URL"),
]

UserOption = Annotated[
    str,
    typer.Option("--user", envvar="ARTI_OBJECTSTORE_USER", help="Repository user"),
]

LabelsOption = Annotated[
    Optional[str],
    typer.Option(
        "--labels", help="Labels as name=value;name=value scoping every operation"
    ),
]

ThreadsOption = Annotated[
    Optional[str], typer.Option("--threads", help="Parallel transfers (default 3)")
]

RetriesOption = Annotated[
    Optional[str], typer.Option("--retries", help="HTTP retry count (default 3)")
]

DialTimeoutOption = Annotated[
    Optional[str],
    typer.Option("--dial-timeout", help="Connect timeout in seconds (default 30)"),
]

RequestTimeoutOption = Annotated[
    Optional[str],
    typer.Option(
        "--request-timeout", help="Overall request timeout in seconds (default 600)"
    ),
]

DryRunOption = Annotated[
    bool, typer.Option("--dry-run", help="Do not upload or delete anything")
]

StagingRootOption = Annotated[
    Optional[Path],
    typer.Option("--staging-root", help="Local spill directory for transfers"),
]

BucketArgument = Annotated[str, typer.Argument(help="Bucket (repository) name")]

KeyArgument = Annotated[str, typer.Argument(help="Object key")]
