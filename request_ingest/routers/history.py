"""
History API routes.

Provides endpoints for viewing and managing the request history. Adding a
request that duplicates an existing entry moves that entry to the front.
"""

from fastapi import APIRouter, Depends, status

from ..deps import Stores, get_stores
from ..exceptions import ResourceNotFoundError
from ..schemas.api import HistoryListResponse
from ..schemas.record import CanonicalRequest


router = APIRouter(prefix="/api/history", tags=["history"])


@router.get("", response_model=HistoryListResponse)
def list_history(stores: Stores = Depends(get_stores)):
    """
    Get history entries, most recent first.

    Returns:
        HistoryListResponse with items and total count
    """
    items = stores.history.get_all()
    return HistoryListResponse(items=items, total=len(items))


@router.post("", response_model=CanonicalRequest, status_code=status.HTTP_201_CREATED)
def add_history(record: CanonicalRequest, stores: Stores = Depends(get_stores)):
    """
    Add an executed request to history.

    Args:
        record: The request as it was executed

    Returns:
        The stored entry, stamped with the current time
    """
    with stores.history_lock:
        return stores.history.add(record)


@router.get("/{history_id}", response_model=CanonicalRequest)
def get_history(history_id: str, stores: Stores = Depends(get_stores)):
    """
    Get a single history entry by ID.

    Raises:
        ResourceNotFoundError: 404 if the entry does not exist
    """
    record = stores.history.find(history_id)
    if record is None:
        raise ResourceNotFoundError("History entry", history_id)
    return record


@router.delete("/{history_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_history(history_id: str, stores: Stores = Depends(get_stores)):
    """
    Delete a single history entry by ID.

    Raises:
        ResourceNotFoundError: 404 if the entry does not exist
    """
    with stores.history_lock:
        deleted = stores.history.delete(history_id)
    if not deleted:
        raise ResourceNotFoundError("History entry", history_id)
    return None


@router.delete("", status_code=status.HTTP_204_NO_CONTENT)
def clear_all_history(stores: Stores = Depends(get_stores)):
    """Clear all history entries."""
    with stores.history_lock:
        stores.history.clear()
    return None
