"""HTTP client for an Artifactory-style repository service.

The client is built once from a connection descriptor and resilience
settings and is safe to share between threads afterwards. Retries,
backoff and timeouts are applied at the transport level; callers above
this module never retry.

Timeouts:
    ``dial_timeout`` bounds connection setup. ``request_timeout`` bounds each
    transfer as a whole: upload bodies and download streams are checked
    against a deadline taken when the request starts, so a peer trickling
    bytes cannot hold a transfer open past it.

Authentication:
    The authoritative credential is sent as basic auth (password), an
    ``X-JFrog-Art-Api`` header (API key) or a bearer token (access token).
    A client certificate pair is attached to the session when configured.
"""

from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from time import monotonic
from typing import Any, BinaryIO, Callable, Iterable, Sequence, TypeVar
from urllib.parse import quote

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from arti_objectstore.core import get_logger
from arti_objectstore.core.exceptions import BackendError
from arti_objectstore.labels import Label, matrix_params
from arti_objectstore.paths import artifact_identity
from arti_objectstore.schemas import (
    ConnectionDescriptor,
    ResilienceSettings,
    SearchResult,
    TransferResult,
)

from .aql import build_find_query

logger = get_logger(__name__)

T = TypeVar("T")

_AUTH_FAILURE_CODES = (401, 403)
_CHUNK_SIZE = 64 * 1024


def _deadline_exceeded(description: str, limit: float) -> BackendError:
    error_msg = f"{description} exceeded the request timeout of {limit:g}s"
    logger.error(error_msg, request_timeout=limit)
    return BackendError(error_msg)


class _DeadlineReader:
    """File wrapper that fails reads once the transfer deadline has passed.

    ``__len__`` lets requests send a Content-Length instead of chunking.
    """

    def __init__(
        self,
        body: BinaryIO,
        size: int,
        deadline: float,
        limit: float,
        description: str,
    ):
        self._body = body
        self._size = size
        self._deadline = deadline
        self._limit = limit
        self._description = description

    def __len__(self) -> int:
        return self._size

    def read(self, size: int = -1) -> bytes:
        if monotonic() > self._deadline:
            raise _deadline_exceeded(self._description, self._limit)
        return self._body.read(size)


class ArtifactoryClient:
    """Repository backend speaking the Artifactory REST API."""

    def __init__(self, connection: ConnectionDescriptor, resilience: ResilienceSettings):
        """Initialize the client and its HTTP session.

        Args:
            connection: Resolved endpoint and credentials
            resilience: Timeouts, retries, thread count and dry-run flag
        """
        self.connection = connection
        self.resilience = resilience
        self.session = self._create_session()
        logger.info(
            "Repository client initialized",
            url=connection.url,
            threads=resilience.threads,
            retries=resilience.retries,
            dry_run=resilience.dry_run,
        )

    def _create_session(self) -> requests.Session:
        """Create a requests session with auth, retries and pooling configured."""
        session = requests.Session()

        retry_strategy = Retry(
            total=self.resilience.retries,
            backoff_factor=1,
            status_forcelist=[500, 502, 503, 504],
            allowed_methods=["HEAD", "GET", "PUT", "DELETE", "POST"],
        )
        adapter = HTTPAdapter(
            max_retries=retry_strategy,
            pool_connections=self.resilience.threads,
            pool_maxsize=self.resilience.threads,
        )
        session.mount("http://", adapter)
        session.mount("https://", adapter)

        kind = self.connection.credential_kind
        credential = self.connection.credential
        if kind == "password":
            session.auth = (self.connection.user, credential)
        elif kind == "api_key":
            session.headers["X-JFrog-Art-Api"] = credential
        elif kind == "access_token":
            session.headers["Authorization"] = f"Bearer {credential}"
        else:
            logger.info("No credential configured, using anonymous access")

        if self.connection.client_cert_path:
            if self.connection.client_cert_key_path:
                session.cert = (
                    self.connection.client_cert_path,
                    self.connection.client_cert_key_path,
                )
            else:
                session.cert = self.connection.client_cert_path

        if self.connection.ssh_key_path:
            logger.warning(
                "SSH key authentication is not available over HTTP, ignoring key",
                ssh_key_path=self.connection.ssh_key_path,
            )

        return session

    @property
    def timeout(self) -> tuple[float, float]:
        """(connect, read) timeout in seconds for every request."""
        return (
            self.resilience.dial_timeout.total_seconds(),
            self.resilience.request_timeout.total_seconds(),
        )

    def _url(self, artifact_path: str) -> str:
        return self.connection.url + quote(artifact_path, safe="/")

    def _request(self, method: str, url: str, **kwargs: Any) -> requests.Response:
        """Send a request, raising BackendError on transport or auth failure."""
        try:
            response = self.session.request(method, url, timeout=self.timeout, **kwargs)
        except requests.RequestException as e:
            error_msg = f"{method} {url} failed: {e}"
            logger.error(error_msg, error=str(e))
            raise BackendError(error_msg) from e

        if response.status_code in _AUTH_FAILURE_CODES:
            error_msg = (
                f"{method} {url} rejected with status {response.status_code}: "
                f"{response.text}"
            )
            logger.error(error_msg, status_code=response.status_code)
            raise BackendError(error_msg, status_code=response.status_code)
        return response

    def _run_parallel(self, func: Callable[[T], bool], items: Iterable[T]) -> TransferResult:
        """Apply ``func`` to each item on the thread pool and count outcomes."""
        items = list(items)
        if not items:
            return TransferResult(succeeded=0, failed=0)

        with ThreadPoolExecutor(max_workers=self.resilience.threads) as executor:
            outcomes = list(executor.map(func, items))

        succeeded = sum(1 for outcome in outcomes if outcome)
        return TransferResult(succeeded=succeeded, failed=len(outcomes) - succeeded)

    def search(
        self, pattern: str, props: str = "", recursive: bool = True
    ) -> list[SearchResult]:
        """Search files matching ``pattern`` with an AQL query.

        Raises:
            BackendError: If the query cannot be executed or parsed
        """
        query = build_find_query(pattern, props=props, recursive=recursive)
        logger.debug("Executing search", pattern=pattern, props=props, query=query)

        response = self._request(
            "POST",
            self._url("api/search/aql"),
            data=query,
            headers={"Content-Type": "text/plain"},
        )
        if not response.ok:
            error_msg = (
                f"Search for '{pattern}' failed with status "
                f"{response.status_code}: {response.text}"
            )
            logger.error(error_msg, status_code=response.status_code)
            raise BackendError(error_msg, status_code=response.status_code)

        try:
            payload = response.json()
            if not isinstance(payload, dict):
                raise TypeError(f"expected a JSON object, got {type(payload).__name__}")
            results = [
                SearchResult(repo=item["repo"], path=item["path"], name=item["name"])
                for item in payload.get("results", [])
            ]
        except (ValueError, KeyError, TypeError) as e:
            raise BackendError(f"Malformed search response for '{pattern}': {e}") from e

        logger.debug("Search completed", pattern=pattern, result_count=len(results))
        return results

    def upload(
        self, source: Path, target: str, properties: Sequence[Label] = ()
    ) -> TransferResult:
        """Deploy ``source`` to ``target``.

        A file is deployed to ``target`` itself. A directory deploys every
        file beneath it to ``target/<relative path>``. Individual file
        failures are counted, not raised.
        """
        source = Path(source)
        if source.is_dir():
            pairs = [
                (path, f"{target.rstrip('/')}/{path.relative_to(source).as_posix()}")
                for path in sorted(source.rglob("*"))
                if path.is_file()
            ]
        elif source.is_file():
            pairs = [(source, target)]
        else:
            raise BackendError(f"Upload source does not exist: {source}")

        params = matrix_params(properties)

        def deploy(pair: tuple[Path, str]) -> bool:
            local_path, artifact_path = pair
            if self.resilience.dry_run:
                logger.info(
                    "Dry run, skipping upload", source=str(local_path), target=artifact_path
                )
                return True
            limit = self.resilience.request_timeout.total_seconds()
            deadline = monotonic() + limit
            with open(local_path, "rb") as body:
                reader = _DeadlineReader(
                    body,
                    local_path.stat().st_size,
                    deadline,
                    limit,
                    f"Upload of '{artifact_path}'",
                )
                response = self._request(
                    "PUT", self._url(artifact_path) + params, data=reader
                )
            if not response.ok:
                logger.warning(
                    "Upload failed",
                    target=artifact_path,
                    status_code=response.status_code,
                )
            return response.ok

        return self._run_parallel(deploy, pairs)

    def download(self, pattern: str, target: Path, props: str = "") -> TransferResult:
        """Download files matching ``pattern`` to ``target``.

        With a single match ``target`` is the file path. With several
        matches, or when ``target`` is an existing directory, each file is
        written to ``target/<name>``.
        """
        target = Path(target)
        results = self.search(pattern, props=props, recursive=False)
        into_directory = target.is_dir() or len(results) > 1

        def fetch(result: SearchResult) -> bool:
            identity = artifact_identity(result.repo, result.path, result.name)
            destination = target / result.name if into_directory else target
            deadline = monotonic() + self.resilience.request_timeout.total_seconds()
            response = self._request("GET", self._url(identity), stream=True)
            with response:
                if not response.ok:
                    logger.warning(
                        "Download failed",
                        artifact=identity,
                        status_code=response.status_code,
                    )
                    return False
                destination.parent.mkdir(parents=True, exist_ok=True)
                try:
                    self._write_body(response, destination, deadline, identity)
                except BackendError:
                    destination.unlink(missing_ok=True)
                    raise
            return True

        return self._run_parallel(fetch, results)

    def _write_body(
        self,
        response: requests.Response,
        destination: Path,
        deadline: float,
        identity: str,
    ) -> None:
        """Stream the response body to ``destination`` until ``deadline``."""
        with open(destination, "wb") as fh:
            for chunk in response.iter_content(chunk_size=_CHUNK_SIZE):
                if monotonic() > deadline:
                    raise _deadline_exceeded(
                        f"Download of '{identity}'",
                        self.resilience.request_timeout.total_seconds(),
                    )
                if chunk:
                    fh.write(chunk)

    def resolve_delete_set(self, pattern: str, props: str = "") -> tuple[str, ...]:
        """Resolve the identities a delete of ``pattern`` would remove."""
        results = self.search(pattern, props=props, recursive=True)
        return tuple(
            dict.fromkeys(
                artifact_identity(result.repo, result.path, result.name)
                for result in results
            )
        )

    def delete_files(self, paths: Sequence[str]) -> TransferResult:
        """Delete each identity in ``paths``; failures are counted."""

        def remove(artifact_path: str) -> bool:
            if self.resilience.dry_run:
                logger.info("Dry run, skipping delete", artifact=artifact_path)
                return True
            response = self._request("DELETE", self._url(artifact_path))
            if not response.ok:
                logger.warning(
                    "Delete failed",
                    artifact=artifact_path,
                    status_code=response.status_code,
                )
            return response.ok

        return self._run_parallel(remove, paths)

    def describe_connection(self) -> ConnectionDescriptor:
        """Return the connection descriptor this client was built from."""
        return self.connection
