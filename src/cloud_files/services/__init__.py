"""Services for cloud-files.

Provides the identity and storage clients and the HTTP transport they share.
"""

from cloud_files.services.identity import (
    AuthenticationError,
    CloudFilesError,
    UnexpectedResponseError,
)
from cloud_files.services.storage import (
    CORS_HEADERS,
    ConnectResult,
    StorageClient,
    connect,
)
from cloud_files.services.transport import Transport

__all__ = [
    "AuthenticationError",
    "CORS_HEADERS",
    "CloudFilesError",
    "ConnectResult",
    "StorageClient",
    "Transport",
    "UnexpectedResponseError",
    "connect",
]
