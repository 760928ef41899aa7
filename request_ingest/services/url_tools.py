"""
URL helpers for keeping a base URL and its query parameters separable.
"""

from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

from ..schemas.record import KeyValue


def split_query(url: str) -> tuple[str, list[KeyValue]]:
    """
    Extract the query string of a URL into ordered parameter rows.

    The fragment, if any, is preserved on the returned URL. URLs without
    parameters or that cannot be parsed are returned unchanged.

    Example:
        >>> base, params = split_query("https://x/y?a=1&b=2#top")
        >>> base
        'https://x/y#top'
        >>> [(p.key, p.value) for p in params]
        [('a', '1'), ('b', '2')]
    """
    if not url:
        return url, []

    head, hash_sign, fragment = url.partition("#")
    try:
        parts = urlsplit(head)
    except ValueError:
        return url, []

    pairs = parse_qsl(parts.query, keep_blank_values=True)
    if not pairs:
        return url, []

    base = urlunsplit((parts.scheme, parts.netloc, parts.path, "", ""))
    if hash_sign:
        base += "#" + fragment
    return base, [KeyValue(key=k, value=v) for k, v in pairs]


def join_query(url: str, params: list[KeyValue]) -> str:
    """
    Re-attach enabled query parameters to a base URL, before any fragment.

    Example:
        >>> join_query("https://x/y#top", [KeyValue(key="a", value="1 2")])
        'https://x/y?a=1+2#top'
    """
    enabled = [(p.key, p.value) for p in params if p.checked and p.key]
    if not enabled:
        return url

    head, hash_sign, fragment = url.partition("#")
    separator = "&" if "?" in head else "?"
    result = head + separator + urlencode(enabled)
    if hash_sign:
        result += "#" + fragment
    return result
