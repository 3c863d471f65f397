"""
Unwrap protobuf Struct/Value encodings into plain Python values.

Discovery Engine returns per-document metadata (derivedStructData) as a Struct.
Depending on the transport it arrives either already decoded (REST JSON) or in
the tagged form {"fields": {"title": {"stringValue": "..."}}}. Both shapes are
accepted; anything unrecognised is passed through untouched.
"""

from typing import Any

_SCALAR_KINDS = ("stringValue", "numberValue", "integerValue", "boolValue")


def unwrap_value(value: Any) -> Any:
    """Convert one tagged Value into its native scalar, dict or list."""
    if not value:
        return None
    if not isinstance(value, dict):
        return value
    for kind in _SCALAR_KINDS:
        if kind in value:
            return value[kind]
    if "nullValue" in value:
        return None
    if "structValue" in value:
        return unwrap_struct(value["structValue"])
    if "listValue" in value:
        return [unwrap_value(v) for v in (value["listValue"] or {}).get("values") or []]
    return value


def unwrap_struct(data: Any) -> Any:
    """Convert a tagged Struct ({"fields": {...}}) into a dict; other values pass through."""
    if data is None:
        return None
    if isinstance(data, dict) and isinstance(data.get("fields"), dict):
        return {key: unwrap_value(v) for key, v in data["fields"].items()}
    return data
