"""Shared fixtures for cloud-files tests."""

import json
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import pytest
import requests
from requests.structures import CaseInsensitiveDict
from requests.utils import get_encoding_from_headers

from cloud_files.services.storage import Session, StorageClient
from cloud_files.services.transport import Transport

STORAGE_URL = "https://storage101.dfw1.clouddrive.com/v1/MossoCloudFS_abc"
CDN_URL = "https://cdn1.clouddrive.com/v1/MossoCloudFS_abc"


def make_response(
    status_code: int = 200,
    body: bytes = b"",
    headers: Optional[Dict[str, str]] = None,
    url: str = "",
) -> requests.Response:
    """Build a real requests.Response without touching the network."""
    response = requests.Response()
    response.status_code = status_code
    response._content = body
    response.headers = CaseInsensitiveDict(headers or {})
    response.encoding = get_encoding_from_headers(response.headers)
    response.url = url
    return response


def auth_body(region: str = "DFW") -> Dict[str, Any]:
    """Token response with storage and CDN endpoints in DFW and ORD."""
    return {
        "access": {
            "token": {"id": "token-123", "expires": "2026-10-20T12:00:00Z"},
            "serviceCatalog": [
                {
                    "name": "cloudServersOpenStack",
                    "endpoints": [
                        {"region": "DFW", "publicURL": "https://dfw.servers.example.com"}
                    ],
                },
                {
                    "name": "cloudFiles",
                    "endpoints": [
                        {"region": "DFW", "publicURL": STORAGE_URL},
                        {"region": "ORD", "publicURL": "https://storage101.ord1.clouddrive.com/v1/MossoCloudFS_abc"},
                    ],
                },
                {
                    "name": "cloudFilesCDN",
                    "endpoints": [
                        {"region": "DFW", "publicURL": CDN_URL},
                        {"region": "ORD", "publicURL": "https://cdn2.clouddrive.com/v1/MossoCloudFS_abc"},
                    ],
                },
            ],
        }
    }


@dataclass
class RecordedCall:
    method: str
    url: str
    token: Optional[str]
    raise_on_error: bool
    headers: Dict[str, str]
    body: Any
    json: Any


class FakeTransport:
    """In-memory stand-in for Transport.

    Stores PUT bodies by URL and echoes them back on GET. Failures can be
    injected per HTTP method.
    """

    def __init__(self):
        self.calls: List[RecordedCall] = []
        self.objects: Dict[str, bytes] = {}
        self.content_types: Dict[str, str] = {}
        self.failures: Dict[str, int] = {}
        self.status_overrides: Dict[str, int] = {}
        self.auth_status = 200
        self.auth_payload: Any = auth_body()
        self.cdn_headers: Dict[str, str] = {}
        self.closed = False

    def calls_for(self, method: str) -> List[RecordedCall]:
        return [call for call in self.calls if call.method == method]

    def request(
        self,
        method,
        url,
        *,
        token=None,
        raise_on_error=True,
        headers=None,
        data=None,
        json=None,
    ):
        body = data.read() if hasattr(data, "read") else data
        self.calls.append(
            RecordedCall(
                method=method,
                url=url,
                token=token,
                raise_on_error=raise_on_error,
                headers=Transport.build_headers(token, headers),
                body=body,
                json=json,
            )
        )

        if self.failures.get(method, 0) > 0:
            self.failures[method] -= 1
            raise requests.exceptions.ConnectionError("Connection reset by peer")

        response = self._respond(method, url, body, self.calls[-1].headers)
        if method in self.status_overrides:
            response.status_code = self.status_overrides[method]
        if raise_on_error:
            response.raise_for_status()
        return response

    def _respond(self, method, url, body, headers):
        if method == "POST":
            payload = self.auth_payload
            raw = payload if isinstance(payload, bytes) else _dumps(payload)
            return make_response(self.auth_status, raw, url=url)
        if method == "PUT":
            self.objects[url] = body if isinstance(body, bytes) else str(body).encode("utf-8")
            self.content_types[url] = headers.get("Content-Type", "application/json")
            return make_response(201, url=url)
        if method == "GET":
            if url not in self.objects:
                return make_response(404, b"Not Found", url=url)
            return make_response(
                200,
                self.objects[url],
                headers={"Content-Type": self.content_types[url]},
                url=url,
            )
        if method == "DELETE":
            if self.objects.pop(url, None) is None:
                return make_response(404, url=url)
            return make_response(204, url=url)
        if method == "HEAD":
            return make_response(204, headers=self.cdn_headers, url=url)
        return make_response(405, url=url)

    def close(self):
        self.closed = True


def _dumps(payload: Any) -> bytes:
    return json.dumps(payload).encode("utf-8")


@pytest.fixture
def fake_transport():
    """A fresh in-memory transport."""
    return FakeTransport()


@pytest.fixture
def session():
    """Authenticated session for the "assets" container in DFW."""
    return Session(
        token="token-123",
        storage_url=STORAGE_URL,
        cdn_url=CDN_URL,
        container="assets",
    )


@pytest.fixture
def client(session, fake_transport):
    """StorageClient wired to the fake transport."""
    return StorageClient(session, fake_transport, retry_delay=0)
