"""
Curl interpreter: turns tokenized curl flags into a Canonical Request Record.

Each recognized flag has one handler in ``FLAG_HANDLERS`` that updates a parse
state; ``interpret`` then finalizes the state in a fixed order (body, method,
implied headers, URL, query) so flag precedence is explicit.
"""

import base64
import logging
import re
from dataclasses import dataclass, field
from typing import Callable
from urllib.parse import quote

from ..exceptions import NoUrlFoundError
from ..schemas.record import (
    DEFAULT_CONTENT_TYPE,
    CanonicalRequest,
    FormDataBody,
    FormItem,
    KeyValue,
    NoBody,
    RawBody,
    default_name,
    now_ms,
    random_id,
)
from .tokenizer import Token, TokenizedCommand, tokenize
from .url_tools import split_query

logger = logging.getLogger(__name__)

MULTIPART_FORM_DATA = "multipart/form-data"
DEFAULT_ACCEPT_ENCODING = "gzip, deflate, br"

# Data flags for which a bare @path means "read the body from a file"
FILE_DATA_FLAGS = frozenset({"data", "data-binary"})

_QUOTED_URL = re.compile(r"""['"](https?://[^'"]+)['"]""", re.IGNORECASE)
_BARE_URL = re.compile(r"""https?://[^\s'"]+""", re.IGNORECASE)
_TRAILING_JUNK = re.compile(r"""['"\\]+$""")

# encodeURIComponent leaves these unescaped besides alphanumerics and -_.~
_URI_COMPONENT_SAFE = "!*'()"


@dataclass
class CurlImport:
    """An interpreted curl command and any warnings the caller should surface."""
    record: CanonicalRequest
    warnings: list[str] = field(default_factory=list)


@dataclass
class _CurlState:
    method: str | None = None
    headers: list[KeyValue] = field(default_factory=list)
    content_type: str = DEFAULT_CONTENT_TYPE
    data_parts: list[str] = field(default_factory=list)
    file_paths: list[str] = field(default_factory=list)
    form_items: list[FormItem] = field(default_factory=list)
    url: str | None = None
    compressed: bool = False
    user_agent: str | None = None
    user: str | None = None
    cookie: str | None = None

    def find_header(self, key: str) -> int:
        wanted = key.lower()
        for index, row in enumerate(self.headers):
            if row.key.lower() == wanted:
                return index
        return -1

    def set_header(self, key: str, value: str) -> None:
        """Replace a header in place (case-insensitive), or append it."""
        index = self.find_header(key)
        if index >= 0:
            self.headers[index] = KeyValue(key=key, value=value)
        else:
            self.headers.append(KeyValue(key=key, value=value))

    def ensure_header(self, key: str, value: str) -> None:
        """Append a header only when no header of that name exists yet."""
        if self.find_header(key) < 0:
            self.headers.append(KeyValue(key=key, value=value))


def _basename(path: str) -> str:
    return re.split(r"[/\\]", path)[-1] or "file"


def _encode_component(value: str) -> str:
    return quote(value, safe=_URI_COMPONENT_SAFE)


def _on_request(state: _CurlState, token: Token) -> None:
    method = (token.value or "").strip()
    if method:
        state.method = method.upper()


def _on_header(state: _CurlState, token: Token) -> None:
    raw = token.value or ""
    colon = raw.find(":")
    if colon <= 0:
        logger.debug("Ignoring header without name: %r", raw)
        return
    key = raw[:colon].strip()
    value = raw[colon + 1:].strip()
    state.set_header(key, value)
    if key.lower() == "content-type":
        state.content_type = value.split(";")[0].strip()


def _on_data(state: _CurlState, token: Token) -> None:
    value = token.value or ""
    state.data_parts.append(value)
    if token.flag in FILE_DATA_FLAGS and value.startswith("@") and len(value) > 1:
        state.file_paths.append(value[1:])


def _on_data_urlencode(state: _CurlState, token: Token) -> None:
    value = token.value or ""
    if "=" in value:
        key, _, content = value.partition("=")
        encoded = _encode_component(content)
        state.data_parts.append(f"{key}={encoded}" if key else encoded)
    else:
        state.data_parts.append(_encode_component(value))


def _on_form(state: _CurlState, token: Token) -> None:
    raw = token.value or ""
    equals = raw.find("=")
    if equals <= 0:
        logger.debug("Ignoring form field without name: %r", raw)
        return
    key = raw[:equals].strip()
    value = raw[equals + 1:].strip()
    if value.startswith(("@", "<")):
        path = value[1:].split(";")[0]
        state.form_items.append(
            FormItem(key=key, value=path, type="file", filename=_basename(path))
        )
    else:
        state.form_items.append(FormItem(key=key, value=value, type="text"))


def _on_url(state: _CurlState, token: Token) -> None:
    state.url = token.value


def _on_user_agent(state: _CurlState, token: Token) -> None:
    state.user_agent = token.value


def _on_user(state: _CurlState, token: Token) -> None:
    state.user = token.value


def _on_cookie(state: _CurlState, token: Token) -> None:
    state.cookie = token.value


def _on_compressed(state: _CurlState, token: Token) -> None:
    state.compressed = True


FLAG_HANDLERS: dict[str, Callable[[_CurlState, Token], None]] = {
    "request": _on_request,
    "header": _on_header,
    "data": _on_data,
    "data-raw": _on_data,
    "data-binary": _on_data,
    "data-urlencode": _on_data_urlencode,
    "form": _on_form,
    "url": _on_url,
    "user-agent": _on_user_agent,
    "user": _on_user,
    "cookie": _on_cookie,
    "compressed": _on_compressed,
}


def _clean_url(url: str) -> str:
    return _TRAILING_JUNK.sub("", url.strip())


def resolve_url(state_url: str | None, command: str, residual: str) -> str | None:
    """
    Isolate the request URL.

    Tried in order: the ``--url`` value, the first quoted http(s) URL anywhere
    in the command, then the first bare http(s) URL among positional
    arguments.
    """
    if state_url and state_url.strip():
        return _clean_url(state_url)

    match = _QUOTED_URL.search(command)
    if match:
        return _clean_url(match.group(1))

    match = _BARE_URL.search(residual)
    if match:
        return _clean_url(match.group(0))

    return None


def _build_body(state: _CurlState, warnings: list[str]) -> tuple[str, str | None]:
    body = ""
    if state.data_parts:
        is_json = any(p.lstrip().startswith(("{", "[")) for p in state.data_parts)
        body = state.data_parts[-1] if is_json else "&".join(state.data_parts)

    body_file = None
    if len(state.data_parts) == 1 and len(state.file_paths) == 1:
        body_file = state.file_paths[0]
        body = f"@[File: {body_file}]"
        warnings.append(
            f"Request body references local file '{body_file}'; attach its contents manually"
        )
    return body, body_file


def _apply_implied_headers(state: _CurlState) -> None:
    if state.compressed:
        state.ensure_header("Accept-Encoding", DEFAULT_ACCEPT_ENCODING)
    if state.user_agent:
        state.ensure_header("User-Agent", state.user_agent)
    if state.user:
        token = base64.b64encode(state.user.encode("utf-8")).decode("ascii")
        state.ensure_header("Authorization", f"Basic {token}")
    if state.cookie:
        state.ensure_header("Cookie", state.cookie)


def interpret(tokenized: TokenizedCommand) -> CurlImport:
    """
    Build a Canonical Request Record from a tokenized curl command.

    Args:
        tokenized: Output of ``tokenize``

    Returns:
        CurlImport with the record and user-facing warnings

    Raises:
        NoUrlFoundError: If no URL can be isolated from the command
    """
    state = _CurlState()
    warnings: list[str] = []

    for token in tokenized.tokens:
        if token.ignored:
            logger.debug("Ignoring curl option %s", token.flag)
            continue
        FLAG_HANDLERS[token.flag](state, token)
    for flag in tokenized.unknown_flags:
        logger.debug("Ignoring unsupported curl flag %s", flag)

    body, body_file = _build_body(state, warnings)

    has_payload = bool(state.data_parts or state.form_items)
    method = state.method or "GET"
    if has_payload and method == "GET":
        method = "POST"

    if state.form_items:
        state.content_type = MULTIPART_FORM_DATA
        if state.data_parts:
            warnings.append("Both form and data flags given; the data body was dropped")
            body, body_file = "", None

    _apply_implied_headers(state)

    url = resolve_url(state.url, tokenized.command, tokenized.residual)
    if not url:
        raise NoUrlFoundError()
    url, query_params = split_query(url)

    if state.form_items:
        body_data = FormDataBody(items=state.form_items)
    elif body:
        body_data = RawBody(value=body, content_type=state.content_type)
    else:
        body_data = NoBody()

    record = CanonicalRequest(
        id=random_id(),
        name=default_name(url),
        method=method,
        url=url,
        headers=state.headers,
        query_params=query_params,
        content_type=state.content_type,
        body=body,
        body_data=body_data,
        created_at=now_ms(),
        body_file=body_file,
    )
    return CurlImport(record=record, warnings=warnings)


def parse_curl(command: str) -> CurlImport:
    """
    Tokenize and interpret a curl command line.

    Example:
        >>> result = parse_curl("curl https://x/y -d '{\\"a\\":1}'")
        >>> result.record.method, result.record.body
        ('POST', '{"a":1}')
    """
    return interpret(tokenize(command))
