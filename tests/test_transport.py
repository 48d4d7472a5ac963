"""Tests for the HTTP transport."""

from unittest.mock import MagicMock

import pytest
import requests

from cloud_files.services.transport import DEFAULT_TIMEOUT, Transport
from tests.conftest import make_response


@pytest.fixture
def mock_session():
    """MagicMock standing in for requests.Session."""
    return MagicMock(spec=requests.Session)


class TestBuildHeaders:
    """Tests for Transport.build_headers."""

    def test_defaults_without_token(self):
        """Only the JSON content type is sent without a token."""
        assert Transport.build_headers() == {"Content-Type": "application/json"}

    def test_token_added(self):
        """The bearer token is sent as X-Auth-Token."""
        headers = Transport.build_headers("tok")
        assert headers["X-Auth-Token"] == "tok"
        assert headers["Content-Type"] == "application/json"

    def test_request_headers_override_defaults(self):
        """Per-request headers replace the default content type."""
        headers = Transport.build_headers("tok", {"Content-Type": "image/png"})
        assert headers["Content-Type"] == "image/png"
        assert headers["X-Auth-Token"] == "tok"


class TestRequest:
    """Tests for Transport.request."""

    def test_passes_arguments_to_session(self, mock_session):
        """Method, URL, headers, body and timeout reach the session."""
        mock_session.request.return_value = make_response(200)
        transport = Transport(timeout=5, session=mock_session)

        transport.request("PUT", "https://x/c/o", token="tok", data=b"body")

        mock_session.request.assert_called_once_with(
            "PUT",
            "https://x/c/o",
            headers={"Content-Type": "application/json", "X-Auth-Token": "tok"},
            data=b"body",
            json=None,
            timeout=5,
        )

    def test_default_timeout(self, mock_session):
        """The default timeout is applied."""
        assert Transport(session=mock_session).timeout == DEFAULT_TIMEOUT

    def test_raise_on_error_mode(self, mock_session):
        """An error status raises HTTPError by default."""
        mock_session.request.return_value = make_response(500, url="https://x")
        transport = Transport(session=mock_session)

        with pytest.raises(requests.exceptions.HTTPError):
            transport.request("GET", "https://x")

    def test_return_status_mode(self, mock_session):
        """raise_on_error=False hands back error responses."""
        mock_session.request.return_value = make_response(404)
        transport = Transport(session=mock_session)

        response = transport.request("HEAD", "https://x", raise_on_error=False)

        assert response.status_code == 404

    def test_transport_errors_propagate(self, mock_session):
        """Connection errors are not swallowed by the transport."""
        mock_session.request.side_effect = requests.exceptions.ConnectionError("down")
        transport = Transport(session=mock_session)

        with pytest.raises(requests.exceptions.ConnectionError):
            transport.request("GET", "https://x", raise_on_error=False)

    def test_close_closes_session(self, mock_session):
        """close() closes the underlying session."""
        Transport(session=mock_session).close()
        mock_session.close.assert_called_once()
