"""
Pydantic schemas for the HTTP API.

Defines request and response bodies for import, history and saved-request
endpoints. Records themselves use the Canonical Request Record schema.
"""

from pydantic import BaseModel

from .record import CamelModel, CanonicalRequest


class CurlImportRequest(BaseModel):
    """Schema for importing a curl command."""
    command: str


class ImportResponse(CamelModel):
    """Schema for the records produced by an importer."""
    requests: list[CanonicalRequest]
    warnings: list[str] = []


class HistoryListResponse(CamelModel):
    """Schema for the history list response."""
    items: list[CanonicalRequest]
    total: int


class FolderAssignment(CamelModel):
    """Schema for moving a saved request into (or out of) a folder."""
    folder_id: str | None = None


class BulkImportResponse(CamelModel):
    """Schema for the result of a bulk import."""
    imported: int
    total: int
