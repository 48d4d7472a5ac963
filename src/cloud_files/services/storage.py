"""Cloud Files storage client.

Provides upload, download and deletion of objects in a single container,
plus lookup of the container's CDN URLs. Every object operation reports
failure through a sentinel return value (``False``, ``None`` or ``""``) and a
log entry instead of raising, so a storage outage never takes the caller
down with it.
"""

import logging
import mimetypes
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Any, Dict, Optional, Union

import requests
from tenacity import (
    RetryCallState,
    Retrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_fixed,
)

from cloud_files.services.identity import (
    CDN_SERVICE,
    STORAGE_SERVICE,
    CloudFilesError,
    authenticate,
    resolve_endpoint,
)
from cloud_files.services.naming import encode_uri_component, transliterate_name
from cloud_files.services.transport import Transport

logger = logging.getLogger(__name__)

# Pause before the single retry of a failed delete or fetch.
RETRY_DELAY_SECONDS = 0.0001

CORS_HEADERS = MappingProxyType(
    {
        "X-Container-Meta-Access-Control-Allow-Origin": "*",
        "Access-Control-Allow-Methods": "*",
        "Access-Control-Allow-Origin": "*",
        "Access-Control-Expose-Headers": (
            "Origin, X-Requested-With, Content-Type, Accept, Authorization"
        ),
        "Access-Control-Request-Headers": (
            "Origin, X-Requested-With, Content-Type, Accept, Authorization"
        ),
    }
)

CDN_SSL_URI_HEADER = "X-Cdn-Ssl-Uri"
CDN_URI_HEADER = "X-Cdn-Uri"


def _log_retry(state: RetryCallState) -> None:
    exc = state.outcome.exception() if state.outcome else None
    logger.debug(
        f"Cloud Files request failed, retrying once "
        f"(attempt={state.attempt_number}): {exc}"
    )


@dataclass(frozen=True)
class Session:
    """Authenticated session bound to one container.

    Attributes:
        token: Bearer token (expires after 24 hours, never refreshed)
        storage_url: Cloud Files endpoint for the region
        cdn_url: Cloud Files CDN management endpoint for the region
        container: Container name
    """

    token: str
    storage_url: str
    cdn_url: str
    container: str


@dataclass
class CdnUrlCache:
    """Container CDN URLs, probed at most once.

    Attributes:
        https_url: HTTPS CDN base URL, None if the container is not CDN-enabled
        http_url: HTTP CDN base URL, None if the container is not CDN-enabled
        probed: Whether the HEAD probe has completed
    """

    https_url: Optional[str] = None
    http_url: Optional[str] = None
    probed: bool = False


@dataclass
class UploadRequest:
    """A single PUT of an object body."""

    remote_name: str
    payload: Any
    content_type: Optional[str] = None
    extra_headers: Dict[str, str] = field(default_factory=dict)

    def headers(self) -> Dict[str, str]:
        headers = dict(self.extra_headers)
        if self.content_type:
            headers["Content-Type"] = self.content_type
        return headers


class StorageClient:
    """Client for one Cloud Files container.

    Build it through :func:`connect`, which authenticates first. A client
    created without a session is degraded: every operation logs and returns
    its failure sentinel.

    Attributes:
        retry_delay: Seconds to wait before retrying a delete or fetch
    """

    def __init__(
        self,
        session: Optional[Session],
        transport: Optional[Transport] = None,
        retry_delay: float = RETRY_DELAY_SECONDS,
    ):
        """Initialize the client.

        Args:
            session: Authenticated session, or None for a degraded client
            transport: HTTP transport (a default one is created if omitted)
            retry_delay: Seconds to wait before the single retry
        """
        self._session = session
        self._transport = transport if transport is not None else Transport()
        self.retry_delay = retry_delay
        self._cdn = CdnUrlCache()

    @property
    def session(self) -> Optional[Session]:
        return self._session

    @property
    def authenticated(self) -> bool:
        return self._session is not None

    @property
    def container(self) -> Optional[str]:
        return self._session.container if self._session else None

    def object_url(self, name: str) -> str:
        """Build the storage URL of an object in the container."""
        return f"{self._session.storage_url}/{self._session.container}/{name}"

    def _send(self, method: str, url: str, **kwargs: Any) -> requests.Response:
        return self._transport.request(
            method, url, token=self._session.token, **kwargs
        )

    def _put(self, request: UploadRequest) -> requests.Response:
        """PUT an object body. Any non-2xx reply raises HTTPError."""
        response = self._send(
            "PUT",
            self.object_url(request.remote_name),
            headers=request.headers(),
            data=request.payload,
        )
        if not 200 <= response.status_code < 300:
            raise requests.exceptions.HTTPError(
                f"Upload not accepted: {response.status_code}", response=response
            )
        return response

    def _send_with_retry(self, method: str, url: str) -> requests.Response:
        retrying = Retrying(
            stop=stop_after_attempt(2),
            wait=wait_fixed(self.retry_delay),
            retry=retry_if_exception_type(requests.exceptions.RequestException),
            before_sleep=_log_retry,
            reraise=True,
        )
        return retrying(self._send, method, url)

    def _require_session(self, operation: str) -> bool:
        if self._session is None:
            logger.error(f"Cannot {operation}: Cloud Files client is not authenticated")
            return False
        return True

    def upload_from_local_file(
        self, remote_name: str, local_path: Union[str, Path]
    ) -> bool:
        """Upload a local file, then delete the local copy.

        The object always carries the CORS headers, plus a Content-Type
        guessed from the local file name when one can be guessed. The local
        file is removed only after a successful upload.

        Args:
            remote_name: Object name in the container (transliterated to UTF-7)
            local_path: File to upload

        Returns:
            True on success, False on any failure (which is logged)
        """
        if not self._require_session("upload file"):
            return False

        local_path = Path(local_path)
        remote_name = transliterate_name(remote_name)
        content_type, _ = mimetypes.guess_type(str(local_path))

        try:
            with open(local_path, "rb") as handle:
                request = UploadRequest(
                    remote_name=remote_name,
                    payload=handle,
                    content_type=content_type,
                    extra_headers=dict(CORS_HEADERS),
                )
                self._put(request)
        except (requests.exceptions.RequestException, OSError) as e:
            logger.error(
                f"Error uploading file to Cloud Files from a file: {e} "
                f"(file: {local_path}, container: {self.container})"
            )
            return False

        try:
            local_path.unlink()
        except OSError as e:
            logger.warning(f"Uploaded {remote_name} but could not remove {local_path}: {e}")
        return True

    def upload_from_string(
        self, remote_name: str, content: str, include_cors_headers: bool = False
    ) -> bool:
        """Upload a string as an object.

        Args:
            remote_name: Object name in the container (transliterated to UTF-7)
            content: Object body
            include_cors_headers: Attach the CORS header set to the object

        Returns:
            True on success, False on any failure (which is logged)
        """
        if not self._require_session("upload string"):
            return False

        request = UploadRequest(
            remote_name=transliterate_name(remote_name),
            payload=content.encode("utf-8") if isinstance(content, str) else content,
            extra_headers=dict(CORS_HEADERS) if include_cors_headers else {},
        )
        try:
            self._put(request)
            return True
        except requests.exceptions.RequestException as e:
            logger.error(
                f"Error uploading file to Cloud Files from a string: {e} "
                f"(container: {self.container})"
            )
            return False

    def delete(self, filename: str) -> Optional[requests.Response]:
        """Delete an object, retrying once on failure.

        Args:
            filename: Object name in the container

        Returns:
            The DELETE response, or None if both attempts failed. A missing
            object and a network failure are indistinguishable here.
        """
        if not self._require_session("delete object"):
            return None

        try:
            return self._send_with_retry("DELETE", self.object_url(filename))
        except requests.exceptions.RequestException as e:
            status = getattr(e.response, "status_code", None)
            logger.error(
                f"Error deleting Cloud Files object. Code: {status} message: {e} "
                f"file name: {filename} Container name: {self.container}"
            )
            return None

    def get_object_as_string(self, filename: str) -> str:
        """Fetch an object body, retrying once on failure.

        Args:
            filename: Object name in the container

        Returns:
            The object body decoded as UTF-8, or "" if both attempts failed.
            An empty object and a failed fetch are indistinguishable here.
        """
        if not self._require_session("get object"):
            return ""

        try:
            response = self._send_with_retry("GET", self.object_url(filename))
        except requests.exceptions.RequestException as e:
            status = getattr(e.response, "status_code", None)
            logger.error(
                f"Error getting Cloud Files object. Code: {status} message: {e} "
                f"file name: {filename} Container name: {self.container}"
            )
            return ""
        # Bodies are UTF-8; response.text assumes Latin-1 for text/* without charset
        return response.content.decode("utf-8", errors="replace")

    def container_cdn_urls(self) -> CdnUrlCache:
        """Return the container's CDN URLs, probing them on first use.

        One HEAD request fills both URLs. When the container is not
        CDN-enabled (or does not exist) both stay None and the probe is not
        repeated.
        """
        if self._cdn.probed or self._session is None:
            return self._cdn

        url = f"{self._session.cdn_url}/{self._session.container}"
        try:
            response = self._send("HEAD", url, raise_on_error=False)
        except requests.exceptions.RequestException as e:
            logger.warning(f"CDN probe of container {self.container} failed: {e}")
            return self._cdn

        self._cdn = CdnUrlCache(
            https_url=response.headers.get(CDN_SSL_URI_HEADER),
            http_url=response.headers.get(CDN_URI_HEADER),
            probed=True,
        )
        if self._cdn.https_url is None and self._cdn.http_url is None:
            logger.info(f"Container {self.container} is not CDN-enabled")
        return self._cdn

    def get_https_url(self, filename: str) -> Optional[str]:
        """HTTPS CDN URL of an object, or None if the container has no CDN."""
        base = self.container_cdn_urls().https_url
        if base is None:
            return None
        return f"{base}/{encode_uri_component(filename)}"

    def get_http_url(self, filename: str) -> Optional[str]:
        """HTTP CDN URL of an object, or None if the container has no CDN."""
        base = self.container_cdn_urls().http_url
        if base is None:
            return None
        return f"{base}/{encode_uri_component(filename)}"

    def close(self) -> None:
        self._transport.close()

    def __enter__(self) -> "StorageClient":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()


@dataclass
class ConnectResult:
    """Outcome of :func:`connect`.

    Attributes:
        client: The storage client, degraded if authentication failed
        error: Why authentication failed, None on success
    """

    client: StorageClient
    error: Optional[str] = None

    @property
    def authenticated(self) -> bool:
        return self.error is None and self.client.authenticated


def connect(
    container: str,
    username: str,
    api_key: str,
    region: str,
    identity: str = "US",
    *,
    transport: Optional[Transport] = None,
    retry_delay: float = RETRY_DELAY_SECONDS,
) -> ConnectResult:
    """Authenticate and build a client for one container.

    Never raises for authentication or transport failures: they are logged
    and returned as a degraded client with ``error`` set.

    Args:
        container: Container name
        username: Rackspace username
        api_key: Rackspace API key
        region: Region code of the endpoints to use (e.g. "DFW")
        identity: Identity endpoint, "US" or "UK"
        transport: HTTP transport (a default one is created if omitted)
        retry_delay: Seconds to wait before retrying a delete or fetch

    Returns:
        ConnectResult wrapping the client
    """
    if transport is None:
        transport = Transport()
    if not container:
        logger.warning("No container name given; object operations will fail")

    try:
        auth = authenticate(transport, username, api_key, identity)
    except (CloudFilesError, requests.exceptions.RequestException) as e:
        logger.error(f"Exception with Rackspace Cloud Files: {e}")
        return ConnectResult(
            client=StorageClient(None, transport, retry_delay), error=str(e)
        )

    storage_url = resolve_endpoint(auth.catalog, STORAGE_SERVICE, region)
    cdn_url = resolve_endpoint(auth.catalog, CDN_SERVICE, region)
    if not storage_url:
        logger.warning(f"No {STORAGE_SERVICE} endpoint for region {region}")
    if not cdn_url:
        logger.warning(f"No {CDN_SERVICE} endpoint for region {region}")

    session = Session(
        token=auth.token,
        storage_url=storage_url,
        cdn_url=cdn_url,
        container=container,
    )
    return ConnectResult(client=StorageClient(session, transport, retry_delay))
