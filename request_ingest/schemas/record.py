"""
Pydantic schemas for the Canonical Request Record.

Every importer (curl, Postman, Insomnia) and both stores produce and consume
this single shape. Python attributes are snake_case; the JSON form uses the
camelCase names (``queryParams``, ``bodyData``, ``createdAt`` ...).
"""

import secrets
import time
from typing import Annotated, Literal, Union
from urllib.parse import urlencode, urlsplit

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel


DEFAULT_METHOD = "GET"
DEFAULT_CONTENT_TYPE = "application/json"


def now_ms() -> int:
    """Current time as epoch milliseconds."""
    return int(time.time() * 1000)


def random_id() -> str:
    """Random opaque token used for imported records."""
    return secrets.token_hex(5)


def time_id() -> str:
    """Time-based token used for records saved by the user."""
    return str(now_ms())


def default_name(url: str) -> str:
    """
    Derive a display label from a URL.

    Example:
        >>> default_name("https://api.example.com/v1/users")
        '/v1/users'
        >>> default_name("https://api.example.com/")
        'api.example.com'
    """
    try:
        parts = urlsplit(url or "")
    except ValueError:
        return "Untitled"
    if parts.path and parts.path != "/":
        return parts.path
    return parts.hostname or parts.netloc or "Untitled"


class CamelModel(BaseModel):
    """Base model serializing to camelCase while accepting either spelling."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class KeyValue(CamelModel):
    """A header or query-parameter row; ``checked=False`` keeps it but disables it."""
    key: str = ""
    value: str = ""
    checked: bool = True


class FormItem(CamelModel):
    """A form-data or urlencoded body row."""
    key: str = ""
    value: str = ""
    checked: bool = True
    type: Literal["text", "file"] = "text"
    filename: str | None = None


# Body variants

class NoBody(CamelModel):
    type: Literal["none"] = "none"


class RawBody(CamelModel):
    type: Literal["raw"] = "raw"
    value: str = ""
    content_type: str = "text/plain"


class FormDataBody(CamelModel):
    type: Literal["form-data"] = "form-data"
    items: list[FormItem] = Field(default_factory=list)


class UrlEncodedBody(CamelModel):
    type: Literal["urlencoded"] = "urlencoded"
    items: list[FormItem] = Field(default_factory=list)


BodyData = Annotated[
    Union[NoBody, RawBody, FormDataBody, UrlEncodedBody],
    Field(discriminator="type"),
]


# Auth variants

class NoAuth(CamelModel):
    type: Literal["none"] = "none"


class BearerAuth(CamelModel):
    type: Literal["bearer"] = "bearer"
    token: str = ""
    prefix: str = "Bearer"


class BasicAuth(CamelModel):
    type: Literal["basic"] = "basic"
    username: str = ""
    password: str = ""


class ApiKeyAuth(CamelModel):
    type: Literal["apikey"] = "apikey"
    key: str = ""
    value: str = ""
    add_to: Literal["header", "query"] = "header"


class DigestAuth(CamelModel):
    type: Literal["digest"] = "digest"
    username: str = ""
    password: str = ""


class OAuth2Auth(CamelModel):
    type: Literal["oauth2"] = "oauth2"
    token: str = ""
    prefix: str = "Bearer"
    add_to: Literal["header", "query"] = "header"


class CustomAuth(CamelModel):
    type: Literal["custom"] = "custom"
    key: str = ""
    value: str = ""


Auth = Annotated[
    Union[NoAuth, BearerAuth, BasicAuth, ApiKeyAuth, DigestAuth, OAuth2Auth, CustomAuth],
    Field(discriminator="type"),
]


class CanonicalRequest(CamelModel):
    """
    The normalized, format-agnostic description of one HTTP request.

    Attributes:
        id: Opaque identifier, immutable once assigned
        name: Display label
        method: Uppercase HTTP verb
        url: Request URL without its query string
        headers: Ordered header rows
        query_params: Ordered query-parameter rows, independent of the URL
        content_type: Best-effort MIME type of the body
        body: Flat textual body, kept in sync with body_data
        body_data: Structured body variant
        auth: Structured auth variant
        created_at: Epoch milliseconds of first persistence
        folder_id: Weak reference to a containing folder
        body_file: Path of an unresolved ``-d @FILE`` body, if any
    """
    id: str = Field(default_factory=random_id)
    name: str = ""
    method: str = DEFAULT_METHOD
    url: str = ""
    headers: list[KeyValue] = Field(default_factory=list)
    query_params: list[KeyValue] = Field(default_factory=list)
    content_type: str = DEFAULT_CONTENT_TYPE
    body: str = ""
    body_data: BodyData = Field(default_factory=NoBody)
    auth: Auth = Field(default_factory=NoAuth)
    created_at: int | None = None
    folder_id: str | None = None
    body_file: str | None = None

    @model_validator(mode="after")
    def _sync_body(self) -> "CanonicalRequest":
        self.method = (self.method or DEFAULT_METHOD).upper()
        if not self.name:
            self.name = default_name(self.url)
        body_data = self.body_data
        if isinstance(body_data, RawBody):
            self.content_type = body_data.content_type
            self.body = body_data.value
        elif isinstance(body_data, UrlEncodedBody):
            self.body = urlencode(
                [(item.key, item.value) for item in body_data.items if item.checked]
            )
        return self

    def without_blank_rows(self) -> "CanonicalRequest":
        """Return a copy with empty-key header and query rows removed."""
        return self.model_copy(update={
            "headers": [h for h in self.headers if h.key],
            "query_params": [q for q in self.query_params if q.key],
        })

    def to_json_dict(self) -> dict:
        """Serialize to the camelCase JSON form used by the stores."""
        return self.model_dump(mode="json", by_alias=True)
