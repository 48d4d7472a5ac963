"""HTTP transport shared by the identity and storage calls.

A single ``requests.Session`` serves both call modes: ``raise_on_error=True``
turns 4xx/5xx responses into ``requests.exceptions.HTTPError``, while
``raise_on_error=False`` hands every response back to the caller.
"""

import logging
from typing import Any, Dict, Optional

import requests

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30


class Transport:
    """Thin wrapper over ``requests.Session``.

    Attributes:
        timeout: Request timeout in seconds (None waits indefinitely)
    """

    def __init__(
        self,
        timeout: Optional[float] = DEFAULT_TIMEOUT,
        session: Optional[requests.Session] = None,
    ):
        """Initialize the transport.

        Args:
            timeout: Request timeout in seconds
            session: Pre-built session to reuse, mainly for tests
        """
        self.timeout = timeout
        self._session = session if session is not None else requests.Session()

    @staticmethod
    def build_headers(
        token: Optional[str] = None, headers: Optional[Dict[str, str]] = None
    ) -> Dict[str, str]:
        """Merge the default control headers with per-request headers.

        Args:
            token: Bearer token sent as X-Auth-Token
            headers: Extra headers; these override the defaults

        Returns:
            Header dictionary for the request
        """
        merged = {"Content-Type": "application/json"}
        if token:
            merged["X-Auth-Token"] = token
        if headers:
            merged.update(headers)
        return merged

    def request(
        self,
        method: str,
        url: str,
        *,
        token: Optional[str] = None,
        raise_on_error: bool = True,
        headers: Optional[Dict[str, str]] = None,
        data: Any = None,
        json: Any = None,
    ) -> requests.Response:
        """Send a request.

        Args:
            method: HTTP method
            url: Fully qualified URL
            token: Bearer token, omitted for the identity call
            raise_on_error: Raise HTTPError on 4xx/5xx instead of returning
            headers: Extra headers
            data: Request body (str, bytes or file object)
            json: JSON-serializable body

        Returns:
            The response

        Raises:
            requests.exceptions.RequestException: On transport failure, or on
                an error status when raise_on_error is set
        """
        logger.debug(f"{method} {url}")
        response = self._session.request(
            method,
            url,
            headers=self.build_headers(token, headers),
            data=data,
            json=json,
            timeout=self.timeout,
        )
        if raise_on_error:
            response.raise_for_status()
        return response

    def close(self) -> None:
        """Close the underlying session."""
        self._session.close()
