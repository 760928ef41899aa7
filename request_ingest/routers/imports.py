"""
Import API routes.

Converts curl commands, Postman collections and Insomnia exports into
Canonical Request Records. Records are returned to the caller, which decides
whether to add them to history or save them.
"""

from typing import Any

from fastapi import APIRouter, Body

from ..exceptions import ErrorResponse
from ..schemas.api import CurlImportRequest, ImportResponse
from ..services import insomnia_importer, postman_importer
from ..services.curl_interpreter import parse_curl


router = APIRouter(prefix="/api/import", tags=["import"])


@router.post(
    "/curl",
    response_model=ImportResponse,
    responses={422: {"model": ErrorResponse}},
)
def import_curl(payload: CurlImportRequest):
    """
    Interpret a curl command line.

    Args:
        payload: The command as pasted by the user

    Returns:
        ImportResponse with one request and any manual-action warnings

    Raises:
        NoUrlFoundError: 422 if no URL can be found in the command
    """
    result = parse_curl(payload.command)
    return ImportResponse(requests=[result.record], warnings=result.warnings)


@router.post(
    "/postman",
    response_model=ImportResponse,
    responses={400: {"model": ErrorResponse}},
)
def import_postman(document: Any = Body(...)):
    """Import every request of a Postman v2 collection."""
    return ImportResponse(requests=postman_importer.parse(document))


@router.post(
    "/insomnia",
    response_model=ImportResponse,
    responses={400: {"model": ErrorResponse}},
)
def import_insomnia(document: Any = Body(...)):
    """Import every request resource of an Insomnia export."""
    return ImportResponse(requests=insomnia_importer.parse(document))
