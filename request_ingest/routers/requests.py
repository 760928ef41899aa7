"""
Saved-request API routes.

Provides CRUD operations, folder assignment, and JSON export/import for
explicitly saved requests.
"""

from typing import Any

from fastapi import APIRouter, Body, Depends, Response, status
from fastapi.exceptions import RequestValidationError
from pydantic import ValidationError

from ..deps import Stores, get_stores
from ..exceptions import ErrorResponse, ResourceNotFoundError
from ..schemas.api import BulkImportResponse, FolderAssignment
from ..schemas.record import CanonicalRequest, time_id


router = APIRouter(prefix="/api/requests", tags=["requests"])


@router.get("", response_model=list[CanonicalRequest])
def list_requests(stores: Stores = Depends(get_stores)):
    """List all saved requests, newest first."""
    return stores.saved.get_all()


@router.get("/export")
def export_requests(stores: Stores = Depends(get_stores)):
    """
    Export the full saved collection as a JSON document.

    Returns:
        The collection serialized with camelCase field names
    """
    return Response(content=stores.saved.export_json(), media_type="application/json")


@router.post(
    "/import",
    response_model=BulkImportResponse,
    responses={400: {"model": ErrorResponse}},
)
def import_requests(payload: Any = Body(...), stores: Stores = Depends(get_stores)):
    """
    Bulk import previously exported requests.

    Raises:
        InvalidImportPayloadError: 400 if the payload is not a list of requests
    """
    with stores.saved_lock:
        imported = stores.saved.import_records(payload)
        total = len(stores.saved.get_all())
    return BulkImportResponse(imported=imported, total=total)


@router.get("/folder/{folder_id}", response_model=list[CanonicalRequest])
def list_requests_in_folder(folder_id: str, stores: Stores = Depends(get_stores)):
    """List saved requests belonging to one folder."""
    return stores.saved.by_folder(folder_id)


@router.post("", response_model=CanonicalRequest, status_code=status.HTTP_201_CREATED)
def save_request(record: dict = Body(...), stores: Stores = Depends(get_stores)):
    """
    Save a request, replacing any saved request with the same id.

    A time-based id is assigned when the body carries none.

    Returns:
        The stored request
    """
    if not record.get("id"):
        record = {**record, "id": time_id()}
    try:
        request = CanonicalRequest.model_validate(record)
    except ValidationError as e:
        raise RequestValidationError(e.errors()) from e
    with stores.saved_lock:
        return stores.saved.save(request)


@router.get("/{request_id}", response_model=CanonicalRequest)
def get_request(request_id: str, stores: Stores = Depends(get_stores)):
    """
    Get a single saved request by ID.

    Raises:
        ResourceNotFoundError: 404 if the request does not exist
    """
    record = stores.saved.get(request_id)
    if record is None:
        raise ResourceNotFoundError("Request", request_id)
    return record


@router.put("/{request_id}/folder", response_model=CanonicalRequest)
def move_request(
    request_id: str,
    assignment: FolderAssignment,
    stores: Stores = Depends(get_stores)
):
    """
    Move a saved request into a folder, or out of any folder.

    Raises:
        ResourceNotFoundError: 404 if the request does not exist
    """
    with stores.saved_lock:
        record = stores.saved.move_to_folder(request_id, assignment.folder_id)
    if record is None:
        raise ResourceNotFoundError("Request", request_id)
    return record


@router.delete("/{request_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_request(request_id: str, stores: Stores = Depends(get_stores)):
    """
    Delete a saved request by ID.

    Raises:
        ResourceNotFoundError: 404 if the request does not exist
    """
    with stores.saved_lock:
        deleted = stores.saved.delete(request_id)
    if not deleted:
        raise ResourceNotFoundError("Request", request_id)
    return None


@router.delete("", status_code=status.HTTP_204_NO_CONTENT)
def clear_requests(stores: Stores = Depends(get_stores)):
    """Clear all saved requests."""
    with stores.saved_lock:
        stores.saved.clear()
    return None
