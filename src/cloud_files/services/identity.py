"""Identity service client.

Exchanges a username/API key pair for a bearer token and a service catalog,
then resolves the Cloud Files endpoints for a region from that catalog.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from cloud_files.services.transport import Transport

logger = logging.getLogger(__name__)

US_IDENTITY_ENDPOINT = "https://identity.api.rackspacecloud.com/v2.0/"
UK_IDENTITY_ENDPOINT = "https://lon.identity.api.rackspacecloud.com/v2.0/"

IDENTITY_ENDPOINTS = {
    "US": US_IDENTITY_ENDPOINT,
    "UK": UK_IDENTITY_ENDPOINT,
}

STORAGE_SERVICE = "cloudFiles"
CDN_SERVICE = "cloudFilesCDN"


class CloudFilesError(Exception):
    """Error communicating with Cloud Files or its identity service."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class AuthenticationError(CloudFilesError):
    """The identity service answered with something other than 200."""


class UnexpectedResponseError(CloudFilesError):
    """The identity response is missing fields the client relies on."""


@dataclass(frozen=True)
class ServiceCatalogEntry:
    """One regional endpoint of a service in the catalog.

    Attributes:
        service_name: Catalog service name (e.g. "cloudFiles")
        region: Region code (e.g. "DFW")
        public_url: Public endpoint URL
    """

    service_name: str
    region: str
    public_url: str


@dataclass(frozen=True)
class AuthResponse:
    """Parsed token response.

    Attributes:
        token: Bearer token, valid for 24 hours
        catalog: Flattened service catalog
    """

    token: str
    catalog: List[ServiceCatalogEntry]

    @classmethod
    def from_dict(cls, data: Any) -> "AuthResponse":
        """Parse the JSON body of a token response.

        Args:
            data: Decoded JSON body

        Returns:
            AuthResponse

        Raises:
            UnexpectedResponseError: If the token or the catalog is missing
        """
        access = data.get("access") if isinstance(data, dict) else None
        if not isinstance(access, dict):
            raise UnexpectedResponseError("Auth response has no 'access' object")

        token = access.get("token")
        token_id = token.get("id") if isinstance(token, dict) else None
        if not token_id:
            raise UnexpectedResponseError("Auth response has no 'access.token.id'")

        services = access.get("serviceCatalog")
        if not isinstance(services, list):
            raise UnexpectedResponseError(
                "Auth response has no 'access.serviceCatalog' list"
            )

        catalog = []
        for service in services:
            if not isinstance(service, dict):
                continue
            name = service.get("name", "")
            for endpoint in service.get("endpoints") or []:
                if not isinstance(endpoint, dict):
                    continue
                region = endpoint.get("region")
                public_url = endpoint.get("publicURL")
                if region is None or public_url is None:
                    continue
                catalog.append(
                    ServiceCatalogEntry(
                        service_name=name, region=region, public_url=public_url
                    )
                )

        return cls(token=str(token_id), catalog=catalog)


def build_auth_payload(username: str, api_key: str) -> Dict[str, Any]:
    """Build the API-key credential body for the tokens call."""
    return {
        "auth": {
            "RAX-KSKEY:apiKeyCredentials": {
                "username": username,
                "apiKey": api_key,
            }
        }
    }


def identity_endpoint(identity: str) -> str:
    """Pick the identity endpoint; anything but "UK" means US."""
    if identity == "UK":
        return UK_IDENTITY_ENDPOINT
    return US_IDENTITY_ENDPOINT


def resolve_endpoint(
    catalog: List[ServiceCatalogEntry], service_name: str, region: str
) -> str:
    """Find the public URL of a service in a region.

    Args:
        catalog: Parsed service catalog
        service_name: Service to look for
        region: Region code, matched case-sensitively

    Returns:
        Public URL of the last matching entry, or "" when none matches
    """
    url = ""
    for entry in catalog:
        if entry.service_name == service_name and entry.region == region:
            url = entry.public_url
    return url


def authenticate(
    transport: Transport, username: str, api_key: str, identity: str = "US"
) -> AuthResponse:
    """Request a token from the identity service.

    Args:
        transport: HTTP transport
        username: Rackspace username
        api_key: Rackspace API key
        identity: "US" or "UK"

    Returns:
        AuthResponse with token and catalog

    Raises:
        AuthenticationError: On a non-200 response
        UnexpectedResponseError: If the body cannot be parsed
        requests.exceptions.RequestException: On transport failure
    """
    url = identity_endpoint(identity) + "tokens"
    logger.info(f"Authenticating {username} against {url}")

    response = transport.request(
        "POST",
        url,
        raise_on_error=False,
        json=build_auth_payload(username, api_key),
    )
    if response.status_code != 200:
        raise AuthenticationError(
            f"Unhandled response {response.status_code}",
            status_code=response.status_code,
        )

    try:
        data = response.json()
    except ValueError as e:
        raise UnexpectedResponseError(f"Auth response is not JSON: {e}")

    return AuthResponse.from_dict(data)
