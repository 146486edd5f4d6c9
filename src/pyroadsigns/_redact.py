"""Masking of credential material before it reaches a DEBUG log.

Credential records, login arguments and the configuration (secret salt)
all carry values that must not end up in log files, even encoded.
"""

from __future__ import annotations

import dataclasses
from collections.abc import Mapping
from pathlib import PurePath
from typing import Any

from pydantic import BaseModel

REDACTED = "<redacted>"

_SENSITIVE_KEYS: frozenset[str] = frozenset(
    {
        "secret",
        "password",
        "encodedsecret",
        "encoded_secret",
        "salt",
        "secret_salt",
        "token",
        "authorization",
        "cookie",
    }
)

_MAX_DEPTH = 20


def is_sensitive_key(key: object) -> bool:
    return str(key).lower() in _SENSITIVE_KEYS


def _as_mapping(value: Any) -> Mapping[str, Any] | None:
    if isinstance(value, Mapping):
        return value
    if isinstance(value, BaseModel):
        return value.model_dump(mode="python")
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return {f.name: getattr(value, f.name) for f in dataclasses.fields(value)}
    return None


def redact_for_log(value: Any, *, max_string: int = 512, _depth: int = 0) -> Any:
    """Return a log-safe copy of *value*.

    Mappings, pydantic models and dataclasses become dicts with sensitive
    keys masked; lists and tuples become lists; long strings are cut at
    *max_string* characters. Anything else is shown by ``repr``.
    """
    if _depth > _MAX_DEPTH:
        return "<max-depth>"

    if value is None or isinstance(value, (bool, int, float)):
        return value
    if isinstance(value, str):
        return value if len(value) <= max_string else f"{value[:max_string]}…<truncated>"
    if isinstance(value, (bytes, bytearray)):
        return f"<bytes:{len(value)}b>"
    if isinstance(value, PurePath):
        return str(value)

    mapping = _as_mapping(value)
    if mapping is not None:
        return {
            str(key): REDACTED if is_sensitive_key(key) else redact_for_log(item, max_string=max_string, _depth=_depth + 1)
            for key, item in mapping.items()
        }

    if isinstance(value, (list, tuple, set, frozenset)):
        return [redact_for_log(item, max_string=max_string, _depth=_depth + 1) for item in value]

    return repr(value)
