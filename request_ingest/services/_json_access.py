"""
Forgiving accessors for loosely-shaped JSON documents.

Importers read third-party exports whose optional fields may be missing or of
the wrong type; these helpers degrade every access to an empty default.
"""

from typing import Any


def as_dict(value: Any) -> dict:
    return value if isinstance(value, dict) else {}


def as_list(value: Any) -> list:
    return value if isinstance(value, list) else []


def as_str(value: Any, default: str = "") -> str:
    """Coerce scalars to ``str``; containers and ``None`` yield ``default``."""
    if value is None or isinstance(value, (dict, list)):
        return default
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def is_disabled(row: dict) -> bool:
    return bool(row.get("disabled", False))
