"""
Tests for the curl interpreter.

Covers method inference, header override, body construction, form fields,
implied headers, URL resolution and query extraction.
"""

import base64

import pytest

from request_ingest.exceptions import NoUrlFoundError
from request_ingest.schemas.record import FormDataBody, NoAuth, NoBody, RawBody
from request_ingest.services.curl_interpreter import parse_curl
from request_ingest.services.url_tools import join_query


def headers_of(record) -> list[tuple[str, str]]:
    return [(h.key, h.value) for h in record.headers]


class TestMethodInference:
    """Default method and body-implied POST."""

    def test_defaults_to_get(self):
        record = parse_curl("curl https://example.com/items").record
        assert record.method == "GET"
        assert isinstance(record.body_data, NoBody)

    def test_json_data_forces_post(self):
        record = parse_curl("curl https://x/y -d '{\"a\":1}'").record
        assert record.method == "POST"
        assert record.body == '{"a":1}'
        assert record.content_type == "application/json"
        assert record.body_data == RawBody(value='{"a":1}', content_type="application/json")

    def test_content_type_header_sets_content_type(self):
        record = parse_curl(
            "curl https://x -H 'Content-Type: text/plain; charset=utf-8' -d hello"
        ).record
        assert record.content_type == "text/plain"
        assert record.body_data.content_type == "text/plain"

    def test_explicit_method_is_kept_with_data(self):
        record = parse_curl("curl -X put https://x -d 'a=1'").record
        assert record.method == "PUT"

    @pytest.mark.parametrize("payload", ["-d a=1", "--data-raw '{}'", "-F f=1"])
    def test_explicit_get_with_payload_becomes_post(self, payload):
        record = parse_curl(f"curl -X GET https://x/y {payload}").record
        assert record.method == "POST"

    def test_later_method_overrides_earlier(self):
        record = parse_curl("curl -X POST --request DELETE https://x").record
        assert record.method == "DELETE"


class TestHeaders:
    """Header parsing and override-not-append."""

    def test_duplicate_header_replaces_value(self):
        record = parse_curl('curl https://x -H "X: 1" -H "X: 2"').record
        assert headers_of(record) == [("X", "2")]

    def test_replacement_keeps_original_position(self):
        record = parse_curl('curl https://x -H "X: 1" -H "Y: 0" -H "X: 2"').record
        assert headers_of(record) == [("X", "2"), ("Y", "0")]

    def test_case_insensitive_override(self):
        record = parse_curl('curl https://x -H "Accept: a" -H "accept: b"').record
        assert len(record.headers) == 1
        assert record.headers[0].value == "b"

    def test_value_split_on_first_colon(self):
        record = parse_curl('curl https://x -H "Authorization: Bearer a:b"').record
        assert headers_of(record) == [("Authorization", "Bearer a:b")]

    def test_header_without_colon_is_ignored(self):
        record = parse_curl('curl https://x -H "broken"').record
        assert record.headers == []


class TestDataBody:
    """Collected data values, JSON detection and url-encoding."""

    def test_form_style_values_are_joined(self):
        record = parse_curl("curl https://x -d a=1 --data b=2 --data-raw c=3").record
        assert record.body == "a=1&b=2&c=3"
        assert record.method == "POST"

    def test_json_uses_last_value(self):
        record = parse_curl("curl https://x -d '{\"a\":1}' -d '{\"b\":2}'").record
        assert record.body == '{"b":2}'

    def test_json_array_detected_after_whitespace(self):
        record = parse_curl("curl https://x -d 'x=1' -d ' [1,2]'").record
        assert record.body == " [1,2]"

    def test_data_urlencode_encodes_value_only(self):
        record = parse_curl("curl https://x --data-urlencode 'q=hello world&more'").record
        assert record.body == "q=hello%20world%26more"

    def test_data_urlencode_bare_value(self):
        record = parse_curl("curl https://x --data-urlencode 'a b' -d c=1").record
        assert record.body == "a%20b&c=1"

    def test_ansi_c_data(self):
        record = parse_curl("curl https://x --data-binary $'{\"a\":\"it\\'s\"}'").record
        assert record.body == '{"a":"it\'s"}'

    def test_file_reference(self):
        result = parse_curl("curl https://x -d @payload.json")
        assert result.record.body == "@[File: payload.json]"
        assert result.record.body_file == "payload.json"
        assert result.record.method == "POST"
        assert result.warnings

    def test_data_raw_at_sign_is_literal(self):
        result = parse_curl("curl https://x --data-raw @handle")
        assert result.record.body == "@handle"
        assert result.record.body_file is None
        assert result.warnings == []


class TestFormFields:
    """Multipart form detection."""

    def test_form_data_detection(self):
        record = parse_curl('curl https://x -F "file=@photo.png" -F "name=bob"').record
        assert record.content_type == "multipart/form-data"
        assert record.method == "POST"
        assert isinstance(record.body_data, FormDataBody)
        file_item, text_item = record.body_data.items
        assert (file_item.key, file_item.type, file_item.filename) == ("file", "file", "photo.png")
        assert (text_item.key, text_item.value, text_item.type) == ("name", "bob", "text")

    def test_file_path_basename_and_type_suffix(self):
        record = parse_curl(
            "curl https://x -F 'doc=@/tmp/reports/q1.pdf;type=application/pdf' -F 'raw=<C:\\notes\\a.txt'"
        ).record
        doc, raw = record.body_data.items
        assert doc.filename == "q1.pdf"
        assert raw.type == "file"
        assert raw.filename == "a.txt"

    def test_form_wins_over_data(self):
        result = parse_curl("curl https://x -d a=1 -F b=2")
        assert isinstance(result.record.body_data, FormDataBody)
        assert result.record.body == ""
        assert result.warnings


class TestImpliedHeaders:
    """Headers added by --compressed, -A, -u and -b."""

    def test_compressed_adds_accept_encoding(self):
        record = parse_curl("curl https://x --compressed").record
        assert headers_of(record) == [("Accept-Encoding", "gzip, deflate, br")]

    def test_compressed_respects_explicit_header(self):
        record = parse_curl("curl --compressed https://x -H 'accept-encoding: identity'").record
        assert headers_of(record) == [("accept-encoding", "identity")]

    def test_user_agent(self):
        record = parse_curl("curl -A 'Mozilla/5.0 (X11)' https://x").record
        assert headers_of(record) == [("User-Agent", "Mozilla/5.0 (X11)")]

    def test_user_agent_does_not_override_header(self):
        record = parse_curl("curl -A agent -H 'User-Agent: mine' https://x").record
        assert headers_of(record) == [("User-Agent", "mine")]

    def test_basic_auth_is_header_only(self):
        record = parse_curl("curl -u user:pass https://x").record
        expected = base64.b64encode(b"user:pass").decode()
        assert headers_of(record) == [("Authorization", f"Basic {expected}")]
        assert isinstance(record.auth, NoAuth)

    def test_cookie(self):
        record = parse_curl("curl -b 'a=1; b=2' https://x").record
        assert headers_of(record) == [("Cookie", "a=1; b=2")]

    def test_implied_header_order(self):
        record = parse_curl("curl -b c=1 -u u:p -A ua --compressed https://x").record
        assert [h.key for h in record.headers] == [
            "Accept-Encoding", "User-Agent", "Authorization", "Cookie",
        ]


class TestUrlResolution:
    """--url, quoted URLs, bare URLs and the NoUrlFound failure."""

    def test_no_url_found(self):
        with pytest.raises(NoUrlFoundError):
            parse_curl('curl -X GET -H "A: 1"')

    def test_non_http_positional_is_not_a_url(self):
        with pytest.raises(NoUrlFoundError):
            parse_curl("curl ftp://files.example.com/a")

    def test_url_flag_wins(self):
        record = parse_curl("curl https://b.example --url https://a.example/x").record
        assert record.url == "https://a.example/x"

    def test_quoted_url_preferred_over_bare(self):
        record = parse_curl("curl https://bare.example 'https://quoted.example/p'").record
        assert record.url == "https://quoted.example/p"

    def test_bare_url_after_flags(self):
        record = parse_curl("curl -s -X POST -H 'A: 1' http://localhost:8080/api").record
        assert record.url == "http://localhost:8080/api"

    def test_quoted_url_anywhere_in_command_wins(self):
        record = parse_curl("curl -d \"https://a.example/cb\" https://b.example").record
        assert record.url == "https://a.example/cb"

    def test_bare_urls_inside_flag_values_are_ignored(self):
        record = parse_curl(
            "curl -H 'Referer: https://ref.example' -e https://other.example https://right.example"
        ).record
        assert record.url == "https://right.example"

    def test_trailing_backslash_removed(self):
        record = parse_curl("curl https://x/y\\").record
        assert record.url == "https://x/y"

    def test_name_defaults_to_path(self):
        record = parse_curl("curl https://api.example.com/v1/users").record
        assert record.name == "/v1/users"

    def test_name_defaults_to_host(self):
        record = parse_curl("curl https://api.example.com").record
        assert record.name == "api.example.com"


class TestQueryExtraction:
    """Query parameters are split out of the URL."""

    def test_query_round_trip(self):
        record = parse_curl('curl "https://x/y?a=1&b=2"').record
        assert record.url == "https://x/y"
        assert [(q.key, q.value, q.checked) for q in record.query_params] == [
            ("a", "1", True), ("b", "2", True),
        ]
        assert join_query(record.url, record.query_params) == "https://x/y?a=1&b=2"

    def test_values_are_percent_decoded(self):
        record = parse_curl("curl 'https://x/search?q=hello%20world&tag=a%26b'").record
        assert [(q.key, q.value) for q in record.query_params] == [
            ("q", "hello world"), ("tag", "a&b"),
        ]

    def test_fragment_is_preserved(self):
        record = parse_curl("curl 'https://x/y?a=1#section'").record
        assert record.url == "https://x/y#section"
        assert [(q.key, q.value) for q in record.query_params] == [("a", "1")]

    def test_url_without_query_unchanged(self):
        record = parse_curl("curl https://x/y#frag").record
        assert record.url == "https://x/y#frag"
        assert record.query_params == []


class TestRecordIdentity:
    """Imported records get fresh identifiers and timestamps."""

    def test_fresh_id_and_created_at(self):
        first = parse_curl("curl https://x").record
        second = parse_curl("curl https://x").record
        assert first.id != second.id
        assert first.created_at is not None
