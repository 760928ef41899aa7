"""
Insomnia export importer.

Insomnia exports are a flat ``resources`` list; only entries whose ``_type``
is ``request`` become Canonical Request Records.
"""

import logging
from typing import Any

from pydantic import ValidationError

from ..exceptions import MalformedCollectionError
from ..schemas.record import (
    Auth,
    BasicAuth,
    BearerAuth,
    BodyData,
    CanonicalRequest,
    FormDataBody,
    FormItem,
    KeyValue,
    NoAuth,
    NoBody,
    RawBody,
    UrlEncodedBody,
    default_name,
    now_ms,
    random_id,
)
from ._json_access import as_dict, as_list, as_str, is_disabled
from .url_tools import split_query

logger = logging.getLogger(__name__)

REQUEST_TYPE = "request"
FORM_DATA_MIME = "multipart/form-data"
URLENCODED_MIME = "application/x-www-form-urlencoded"
DEFAULT_MIME = "text/plain"


def _named_rows(rows: Any) -> list[KeyValue]:
    result = []
    for row in as_list(rows):
        row = as_dict(row)
        result.append(KeyValue(
            key=as_str(row.get("name")),
            value=as_str(row.get("value")),
            checked=not is_disabled(row),
        ))
    return result


def _params(rows: Any, allow_files: bool) -> list[FormItem]:
    items = []
    for row in as_list(rows):
        row = as_dict(row)
        is_file = allow_files and row.get("type") == "file"
        file_name = as_str(row.get("fileName"))
        items.append(FormItem(
            key=as_str(row.get("name")),
            value=as_str(row.get("value")) or file_name,
            checked=not is_disabled(row),
            type="file" if is_file else "text",
            filename=(file_name.replace("\\", "/").rsplit("/", 1)[-1] or "file") if is_file else None,
        ))
    return items


def _parse_body(raw_body: Any) -> tuple[BodyData, str]:
    body = as_dict(raw_body)
    mime = as_str(body.get("mimeType"))

    if mime == FORM_DATA_MIME:
        return FormDataBody(items=_params(body.get("params"), True)), mime
    if mime == URLENCODED_MIME:
        return UrlEncodedBody(items=_params(body.get("params"), False)), mime
    if "text" in body:
        content_type = mime or DEFAULT_MIME
        return RawBody(value=as_str(body.get("text")), content_type=content_type), content_type
    return NoBody(), mime or DEFAULT_MIME


def _parse_auth(raw_auth: Any) -> Auth:
    auth = as_dict(raw_auth)
    auth_type = auth.get("type")

    if auth_type == "bearer":
        return BearerAuth(
            token=as_str(auth.get("token")),
            prefix=as_str(auth.get("prefix")) or "Bearer",
        )
    if auth_type == "basic":
        return BasicAuth(
            username=as_str(auth.get("username")),
            password=as_str(auth.get("password")),
        )
    return NoAuth()


def convert_resource(resource: dict) -> CanonicalRequest:
    """Convert one Insomnia ``request`` resource to a record."""
    url, embedded_params = split_query(as_str(resource.get("url")))
    body_data, content_type = _parse_body(resource.get("body"))

    return CanonicalRequest(
        id=random_id(),
        name=as_str(resource.get("name")) or default_name(url),
        method=as_str(resource.get("method")) or "GET",
        url=url,
        headers=_named_rows(resource.get("headers")),
        query_params=embedded_params + _named_rows(resource.get("parameters")),
        content_type=content_type,
        body_data=body_data,
        auth=_parse_auth(resource.get("authentication")),
        created_at=now_ms(),
    )


def parse(document: Any) -> list[CanonicalRequest]:
    """
    Import every request resource of an Insomnia export.

    Args:
        document: Parsed export JSON

    Returns:
        Records in resource order

    Raises:
        MalformedCollectionError: If the document is not an object or its
            ``resources`` field is present but not a list
    """
    if not isinstance(document, dict):
        raise MalformedCollectionError("Insomnia export must be a JSON object")
    resources = document.get("resources", [])
    if not isinstance(resources, list):
        raise MalformedCollectionError("Insomnia export 'resources' must be a list")

    records: list[CanonicalRequest] = []
    for resource in resources:
        if not isinstance(resource, dict) or resource.get("_type") != REQUEST_TYPE:
            continue
        try:
            records.append(convert_resource(resource))
        except (ValidationError, TypeError, ValueError) as e:
            logger.warning("Skipping malformed Insomnia resource %r: %s", resource.get("_id"), e)

    logger.info("Imported %d request(s) from Insomnia export", len(records))
    return records
