"""
Postman Collection v2 importer.

Walks the nested ``item`` tree of a collection, flattening folders, and maps
every leaf request onto a Canonical Request Record.
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

JSON_CONTENT_TYPE = "application/json"
TEXT_CONTENT_TYPE = "text/plain"
FORM_DATA_CONTENT_TYPE = "multipart/form-data"
URLENCODED_CONTENT_TYPE = "application/x-www-form-urlencoded"


def _key_values(rows: Any) -> list[KeyValue]:
    result = []
    for row in as_list(rows):
        row = as_dict(row)
        result.append(KeyValue(
            key=as_str(row.get("key")),
            value=as_str(row.get("value")),
            checked=not is_disabled(row),
        ))
    return result


def _parse_url(raw_url: Any) -> tuple[str, list[KeyValue]]:
    """Postman URLs are either a plain string or an object with ``raw``/``query``."""
    if isinstance(raw_url, str):
        return split_query(raw_url)

    url_obj = as_dict(raw_url)
    raw = as_str(url_obj.get("raw"))
    base, embedded = split_query(raw)
    if "query" in url_obj:
        return base, _key_values(url_obj.get("query"))
    return base, embedded


def _file_name(src: str) -> str:
    return src.replace("\\", "/").rsplit("/", 1)[-1] or "file"


def _form_items(rows: Any, allow_files: bool) -> list[FormItem]:
    items = []
    for row in as_list(rows):
        row = as_dict(row)
        is_file = allow_files and row.get("type") == "file"
        src = as_str(row.get("src"))
        value = as_str(row.get("value")) or src
        items.append(FormItem(
            key=as_str(row.get("key")),
            value=value,
            checked=not is_disabled(row),
            type="file" if is_file else "text",
            filename=_file_name(src or value) if is_file else None,
        ))
    return items


def _parse_body(raw_body: Any) -> tuple[BodyData, str]:
    """Map Postman body modes onto a body variant and content type."""
    body = as_dict(raw_body)
    mode = body.get("mode")

    if mode == "raw":
        language = as_str(as_dict(as_dict(body.get("options")).get("raw")).get("language"))
        content_type = JSON_CONTENT_TYPE if language == "json" else TEXT_CONTENT_TYPE
        return RawBody(value=as_str(body.get("raw")), content_type=content_type), content_type
    if mode == "formdata":
        return FormDataBody(items=_form_items(body.get("formdata"), True)), FORM_DATA_CONTENT_TYPE
    if mode == "urlencoded":
        return (
            UrlEncodedBody(items=_form_items(body.get("urlencoded"), False)),
            URLENCODED_CONTENT_TYPE,
        )
    return NoBody(), TEXT_CONTENT_TYPE


def _auth_value(rows: Any, key: str) -> str:
    for row in as_list(rows):
        row = as_dict(row)
        if row.get("key") == key:
            return as_str(row.get("value"))
    return ""


def _parse_auth(raw_auth: Any) -> Auth:
    auth = as_dict(raw_auth)
    auth_type = auth.get("type")

    if auth_type == "bearer":
        rows = as_list(auth.get("bearer"))
        token = _auth_value(rows, "token")
        if not token and rows:
            token = as_str(as_dict(rows[0]).get("value"))
        return BearerAuth(token=token, prefix="Bearer")
    if auth_type == "basic":
        rows = auth.get("basic")
        return BasicAuth(
            username=_auth_value(rows, "username"),
            password=_auth_value(rows, "password"),
        )
    return NoAuth()


def convert_item(item: dict) -> CanonicalRequest:
    """Convert one Postman leaf item (one holding ``request``) to a record."""
    request = item.get("request")
    if isinstance(request, str):
        # Postman allows a bare URL string as shorthand for a GET request
        request = {"url": request}
    request = as_dict(request)

    url, query_params = _parse_url(request.get("url"))
    body_data, content_type = _parse_body(request.get("body"))

    return CanonicalRequest(
        id=random_id(),
        name=as_str(item.get("name")) or default_name(url),
        method=as_str(request.get("method")) or "GET",
        url=url,
        headers=_key_values(request.get("header")),
        query_params=query_params,
        content_type=content_type,
        body_data=body_data,
        auth=_parse_auth(request.get("auth")),
        created_at=now_ms(),
    )


def _walk(items: list, records: list[CanonicalRequest]) -> None:
    for item in items:
        if not isinstance(item, dict):
            logger.warning("Skipping Postman item that is not an object: %r", item)
            continue
        if "request" in item:
            try:
                records.append(convert_item(item))
            except (ValidationError, TypeError, ValueError) as e:
                logger.warning("Skipping malformed Postman item %r: %s", item.get("name"), e)
        elif isinstance(item.get("item"), list):
            _walk(item["item"], records)


def parse(document: Any) -> list[CanonicalRequest]:
    """
    Import every request of a Postman collection.

    Args:
        document: Parsed collection JSON

    Returns:
        Records in document order, folders flattened

    Raises:
        MalformedCollectionError: If the document is not an object or its
            ``item`` field is present but not a list
    """
    if not isinstance(document, dict):
        raise MalformedCollectionError("Postman collection must be a JSON object")
    items = document.get("item", [])
    if not isinstance(items, list):
        raise MalformedCollectionError("Postman collection 'item' must be a list")

    records: list[CanonicalRequest] = []
    _walk(items, records)
    logger.info("Imported %d request(s) from Postman collection", len(records))
    return records
