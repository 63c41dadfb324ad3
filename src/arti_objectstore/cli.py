"""Command-line interface for arti-objectstore.

Commands:
    - put: Upload a file (or stdin) as an object
    - get: Download an object to a file (or stdout)
    - exists: Check whether an object exists
    - list: List common prefixes under a prefix
    - rm: Delete an object
    - sign-url: Print a direct download URL for an object
"""

import shutil
from datetime import timedelta
from pathlib import Path
from typing import Annotated, Optional

import typer

from . import __version__
from .cli_params import (
    BucketArgument,
    DialTimeoutOption,
    DryRunOption,
    KeyArgument,
    LabelsOption,
    RequestTimeoutOption,
    RetriesOption,
    StagingRootOption,
    ThreadsOption,
    UrlOption,
    UserOption,
)
from .objectstorage import ObjectStore

app = typer.Typer(
    name="arti-objectstore",
    help="Bucket/key object storage on top of an artifact repository.",
    no_args_is_help=True,
)


def version_callback(value: bool) -> None:
    """Display version information."""
    if value:
        typer.echo(f"arti-objectstore {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: Annotated[
        Optional[bool],
        typer.Option("--version", callback=version_callback, help="Show version."),
    ] = None,
) -> None:
    """
    arti-objectstore: object storage operations against an artifact repository.

    Credentials are read from ARTIFACTORY_PASSWORD, ARTIFACTORY_API_KEY or
    ARTIFACTORY_ACCESS_TOKEN.
    """
    pass


def _build_store(
    url: str,
    user: str,
    labels: Optional[str] = None,
    threads: Optional[str] = None,
    retries: Optional[str] = None,
    dial_timeout: Optional[str] = None,
    request_timeout: Optional[str] = None,
    dry_run: bool = False,
    staging_root: Optional[Path] = None,
) -> ObjectStore:
    """Create and initialize an object store from CLI options."""
    options = {
        "url": url,
        "user": user,
        "labels": labels,
        "threads": threads,
        "retries": retries,
        "dial_timeout": dial_timeout,
        "request_timeout": request_timeout,
        "dry_run": "true" if dry_run else None,
    }
    config = {key: value for key, value in options.items() if value is not None}

    store = ObjectStore(staging_root=staging_root)
    store.init(config)
    return store


@app.command("put")
def put_cmd(
    bucket: BucketArgument,
    key: KeyArgument,
    source: Annotated[
        str, typer.Argument(help="File to upload, or '-' to read stdin")
    ],
    url: UrlOption,
    user: UserOption,
    labels: LabelsOption = None,
    threads: ThreadsOption = None,
    retries: RetriesOption = None,
    dial_timeout: DialTimeoutOption = None,
    request_timeout: RequestTimeoutOption = None,
    dry_run: DryRunOption = False,
    staging_root: StagingRootOption = None,
) -> None:
    """
    Upload a file as an object.

    Example:
        arti-objectstore put backups daily/db.tar.gz ./db.tar.gz \
            --url https://repo.example.com/artifactory/ --user backup
    """
    try:
        store = _build_store(
            url, user, labels, threads, retries, dial_timeout, request_timeout,
            dry_run, staging_root,
        )
        if source == "-":
            result = store.put_object(bucket, key, typer.get_binary_stream("stdin"))
        else:
            with open(source, "rb") as body:
                result = store.put_object(bucket, key, body)

        typer.echo(f"Uploaded: {result.succeeded}")
        typer.echo(f"Failed: {result.failed}")

    except Exception as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)


@app.command("get")
def get_cmd(
    bucket: BucketArgument,
    key: KeyArgument,
    url: UrlOption,
    user: UserOption,
    output: Annotated[
        Optional[Path],
        typer.Option("--output", "-o", help="Write to this file instead of stdout"),
    ] = None,
    labels: LabelsOption = None,
    threads: ThreadsOption = None,
    retries: RetriesOption = None,
    dial_timeout: DialTimeoutOption = None,
    request_timeout: RequestTimeoutOption = None,
    staging_root: StagingRootOption = None,
) -> None:
    """Download an object."""
    try:
        store = _build_store(
            url, user, labels, threads, retries, dial_timeout, request_timeout,
            staging_root=staging_root,
        )
        with store.get_object(bucket, key) as stream:
            if output is None:
                shutil.copyfileobj(stream, typer.get_binary_stream("stdout"))
            else:
                with open(output, "wb") as fh:
                    shutil.copyfileobj(stream, fh)

    except Exception as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)


@app.command("exists")
def exists_cmd(
    bucket: BucketArgument,
    key: KeyArgument,
    url: UrlOption,
    user: UserOption,
    labels: LabelsOption = None,
    retries: RetriesOption = None,
    dial_timeout: DialTimeoutOption = None,
    request_timeout: RequestTimeoutOption = None,
) -> None:
    """Check whether an object exists. Exits with status 1 when it does not."""
    try:
        store = _build_store(
            url, user, labels, retries=retries, dial_timeout=dial_timeout,
            request_timeout=request_timeout,
        )
        found = store.object_exists(bucket, key)

    except Exception as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)

    if not found:
        typer.echo(f"✗ Not found: {bucket}/{key}", err=True)
        raise typer.Exit(1)
    typer.echo(f"✓ Exists: {bucket}/{key}")


@app.command("list")
def list_cmd(
    bucket: BucketArgument,
    url: UrlOption,
    user: UserOption,
    prefix: Annotated[str, typer.Argument(help="Key prefix to list under")] = "",
    delimiter: Annotated[
        str, typer.Option("--delimiter", help="Segment delimiter")
    ] = "/",
    labels: LabelsOption = None,
    retries: RetriesOption = None,
    dial_timeout: DialTimeoutOption = None,
    request_timeout: RequestTimeoutOption = None,
) -> None:
    """
    List common prefixes one level below PREFIX.

    Example:
        arti-objectstore list backups daily/ --url https://repo.example.com/artifactory/
    """
    try:
        store = _build_store(
            url, user, labels, retries=retries, dial_timeout=dial_timeout,
            request_timeout=request_timeout,
        )
        prefixes = store.list_common_prefixes(bucket, prefix, delimiter)

        if prefixes:
            typer.echo(f"Found {len(prefixes)} prefixes:")
            for item in sorted(prefixes):
                typer.echo(f"  {item}")
        else:
            typer.echo("No prefixes found.")

    except Exception as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)


@app.command("rm")
def rm_cmd(
    bucket: BucketArgument,
    key: KeyArgument,
    url: UrlOption,
    user: UserOption,
    labels: LabelsOption = None,
    threads: ThreadsOption = None,
    retries: RetriesOption = None,
    dial_timeout: DialTimeoutOption = None,
    request_timeout: RequestTimeoutOption = None,
    dry_run: DryRunOption = False,
) -> None:
    """Delete an object."""
    try:
        store = _build_store(
            url, user, labels, threads, retries, dial_timeout, request_timeout,
            dry_run,
        )
        result = store.delete_object(bucket, key)

        typer.echo(f"Deleted: {result.succeeded}")
        typer.echo(f"Failed: {result.failed}")

    except Exception as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)


@app.command("sign-url")
def sign_url_cmd(
    bucket: BucketArgument,
    key: KeyArgument,
    url: UrlOption,
    user: UserOption,
    ttl: Annotated[
        int,
        typer.Option(
            "--ttl", help="Requested lifetime in seconds (advisory, not enforced)"
        ),
    ] = 3600,
) -> None:
    """
    Print a URL that downloads the object directly.

    The URL embeds the configured credential in cleartext. It does not
    expire on its own; it works for as long as the credential does.
    """
    try:
        store = _build_store(url, user)
        typer.echo(store.create_signed_url(bucket, key, timedelta(seconds=ttl)))

    except Exception as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)


if __name__ == "__main__":
    app()
