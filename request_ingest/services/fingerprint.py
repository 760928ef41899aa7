"""
Content fingerprint used to de-duplicate history entries.

The digest covers what a request would send: method, URL, enabled headers
and query parameters (as sets, header names case-insensitive),
the body and the auth. Disabled rows and row order do not contribute.
This is a de-duplication key, not a security primitive.
"""

import hashlib
import json

from ..schemas.record import CanonicalRequest, KeyValue


def _enabled_pairs(rows: list[KeyValue]) -> list[str]:
    return sorted({f"{row.key.lower()}:{row.value}" for row in rows if row.checked})


def fingerprint_payload(record: CanonicalRequest) -> dict:
    """The canonical document hashed by ``fingerprint``."""
    return {
        "method": record.method,
        "url": record.url,
        "headers": _enabled_pairs(record.headers),
        "query": _enabled_pairs(record.query_params),
        "body": record.body,
        "bodyData": record.body_data.model_dump(mode="json", by_alias=True),
        "auth": record.auth.model_dump(mode="json", by_alias=True),
    }


def fingerprint(record: CanonicalRequest) -> str:
    """
    Deterministic digest of a record's semantic content.

    Example:
        >>> a = CanonicalRequest(url="https://x", headers=[KeyValue(key="A", value="1")])
        >>> b = CanonicalRequest(url="https://x", headers=[KeyValue(key="a", value="1")])
        >>> fingerprint(a) == fingerprint(b)
        True
    """
    canonical = json.dumps(
        fingerprint_payload(record),
        sort_keys=True,
        separators=(",", ":"),
        ensure_ascii=False,
    )
    return hashlib.sha256(canonical.encode("utf-8")).hexdigest()
