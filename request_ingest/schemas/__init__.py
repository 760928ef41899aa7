"""
Pydantic schemas package.

Exports the Canonical Request Record and API schemas.
"""

from .record import (
    Auth,
    ApiKeyAuth,
    BasicAuth,
    BearerAuth,
    BodyData,
    CanonicalRequest,
    CustomAuth,
    DigestAuth,
    FormDataBody,
    FormItem,
    KeyValue,
    NoAuth,
    NoBody,
    OAuth2Auth,
    RawBody,
    UrlEncodedBody,
)

from .api import (
    CurlImportRequest,
    ImportResponse,
    HistoryListResponse,
    FolderAssignment,
    BulkImportResponse,
)

__all__ = [
    # Record schemas
    "Auth",
    "ApiKeyAuth",
    "BasicAuth",
    "BearerAuth",
    "BodyData",
    "CanonicalRequest",
    "CustomAuth",
    "DigestAuth",
    "FormDataBody",
    "FormItem",
    "KeyValue",
    "NoAuth",
    "NoBody",
    "OAuth2Auth",
    "RawBody",
    "UrlEncodedBody",
    # API schemas
    "CurlImportRequest",
    "ImportResponse",
    "HistoryListResponse",
    "FolderAssignment",
    "BulkImportResponse",
]
