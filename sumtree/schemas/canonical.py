"""
Schemas & Canonicalization
File: canonical.py

Purpose: One byte-exact JSON form for root statements and proof bundles.
A statement published twice, or a bundle re-sent to the same entity,
must serialize to identical text.

Canonical form:
- object keys sorted, separators "," and ":" with no whitespace
- None members omitted
- bytes as 0x-prefixed lowercase hex
- Enum members as their value
- integers only; a float anywhere is an error in both directions, since
  amounts wider than 53 bits do not survive a float round trip
"""

import json
from enum import Enum
from typing import Any

from pydantic import BaseModel

from .errors import CanonicalizationException

CANONICAL_JSON_SEPARATORS: tuple[str, str] = (",", ":")


def _float_error(path: str, value: Any) -> CanonicalizationException:
    return CanonicalizationException(
        message=f"Float value at '{path or '$'}': amounts must be integers",
        details={"path": path, "value": repr(value)},
    )


def canonicalize_value(value: Any, path: str = "") -> Any:
    """
    Reduce a value to JSON-native types in canonical shape.

    Args:
        value: Value to reduce (models, dicts, lists, bytes, enums, scalars)
        path: Dotted location used in error details

    Raises:
        CanonicalizationException: On floats or unsupported types
    """
    if isinstance(value, Enum):
        return canonicalize_value(value.value, path)
    # bool before int: bool is an int subclass
    if value is None or isinstance(value, (bool, str)):
        return value
    if isinstance(value, int):
        return int(value)
    if isinstance(value, float):
        raise _float_error(path, value)
    if isinstance(value, (bytes, bytearray)):
        return "0x" + bytes(value).hex()
    if isinstance(value, BaseModel):
        return canonicalize_value(value.model_dump(mode="python", exclude_none=True), path)
    if isinstance(value, dict):
        reduced = {}
        for key, item in value.items():
            if item is None:
                continue
            if not isinstance(key, str):
                raise CanonicalizationException(
                    message=f"Non-string key {key!r} at '{path or '$'}'",
                    details={"path": path, "key": repr(key)},
                )
            reduced[key] = canonicalize_value(item, f"{path}.{key}" if path else key)
        return reduced
    if isinstance(value, (list, tuple)):
        return [canonicalize_value(item, f"{path}[{i}]") for i, item in enumerate(value)]

    raise CanonicalizationException(
        message=f"Cannot canonicalize value of type {type(value).__name__}",
        details={"path": path, "type": type(value).__name__},
    )


def dumps_canonical(obj: Any) -> str:
    """
    Serialize to canonical JSON text.

    Example:
        >>> dumps_canonical({"digest": b"\\x01", "amount": 5})
        '{"amount":5,"digest":"0x01"}'
    """
    return json.dumps(
        canonicalize_value(obj),
        sort_keys=True,
        separators=CANONICAL_JSON_SEPARATORS,
        ensure_ascii=False,
    )


def loads_canonical(text: str) -> Any:
    """
    Parse JSON text, refusing floats.

    Raises:
        json.JSONDecodeError: If the text is not JSON
        CanonicalizationException: If the text holds a float literal
    """

    def _reject(literal: str) -> Any:
        raise _float_error("", literal)

    return json.loads(text, parse_float=_reject, parse_constant=_reject)


def canonical_equals(obj1: Any, obj2: Any) -> bool:
    """True if both values have the same canonical text."""
    try:
        return dumps_canonical(obj1) == dumps_canonical(obj2)
    except CanonicalizationException:
        return False
