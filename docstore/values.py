"""
Typed value codec for the Firestore REST wire format.

Every native value is first classified into exactly one ``ValueKind`` and then
encoded by the encoder registered for that kind:

    None                         -> {"nullValue": None}
    True                         -> {"booleanValue": True}
    45                           -> {"integerValue": "45"}
    1.5                          -> {"doubleValue": 1.5}
    datetime(2025, 1, 1, 9, 30)  -> {"timestampValue": "2025-01-01T09:30:00Z"}
    ["a", "b"]                   -> {"arrayValue": {"values": [...]}}
    {"k": "v"}                   -> {"mapValue": {"fields": {...}}}
    "text"                       -> {"stringValue": "text"}

Anything that is not one of those kinds falls back to ``stringValue`` with
``str(value)``, so ``encode`` never fails. ``decode`` is the inverse and is strict:
malformed wire values raise ``WireFormatError``.
"""

from __future__ import annotations

import base64
import dataclasses
import math
import numbers
import re
from collections.abc import Mapping
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Any, Callable

from pydantic import BaseModel

WireValue = dict[str, Any]

TIMESTAMP_RE = re.compile(
    r"^(\d{4})-(\d{2})-(\d{2})T(\d{2}):(\d{2}):(\d{2})(?:\.(\d+))?(Z|[+-]\d{2}:\d{2})$"
)

# integerValue is an int64 on the server side.
INT64_MIN = -(2**63)
INT64_MAX = 2**63 - 1

_SPECIAL_DOUBLES = {"NaN": math.nan, "Infinity": math.inf, "-Infinity": -math.inf}


class WireFormatError(ValueError):
    """Raised when a value received from the store is not a valid wire value."""


class ValueKind(str, Enum):
    NULL = "nullValue"
    BOOLEAN = "booleanValue"
    INTEGER = "integerValue"
    DOUBLE = "doubleValue"
    TIMESTAMP = "timestampValue"
    ARRAY = "arrayValue"
    MAP = "mapValue"
    STRING = "stringValue"


def classify(value: Any) -> ValueKind:
    """
    Decide which wire kind a native value is encoded as.

    Order matters: bool before int (bool is an int subclass). Any real number that
    is a whole number counts as an integer as long as it fits in int64; this
    covers ints, integral floats, ``Fraction`` and numpy scalars alike.
    ``Decimal`` is not a ``numbers.Real`` and falls through to the string kind.
    """
    if value is None:
        return ValueKind.NULL
    if isinstance(value, bool):
        return ValueKind.BOOLEAN
    if isinstance(value, numbers.Integral):
        return ValueKind.INTEGER
    if isinstance(value, numbers.Real):
        return _classify_real(value)
    if isinstance(value, datetime):
        return ValueKind.TIMESTAMP
    if isinstance(value, (list, tuple)):
        return ValueKind.ARRAY
    if isinstance(value, (Mapping, BaseModel)):
        return ValueKind.MAP
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return ValueKind.MAP
    return ValueKind.STRING


def _classify_real(value: numbers.Real) -> ValueKind:
    try:
        integral = value == int(value)
    except (OverflowError, ValueError):
        # inf / nan
        integral = False
    if integral and INT64_MIN <= value <= INT64_MAX:
        return ValueKind.INTEGER
    try:
        float(value)
    except OverflowError:
        # e.g. Fraction(10**400): no double can hold it
        return ValueKind.STRING
    return ValueKind.DOUBLE


def format_timestamp(value: datetime) -> str:
    """
    UTC ISO-8601 with whole seconds and a trailing Z. Naive datetimes are taken as UTC.

    Years are always four digits (strftime drops the padding below 1000 on glibc).
    Aware values whose UTC equivalent falls outside year 1..9999 are clamped to the
    nearest representable instant.
    """
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    try:
        utc = value.astimezone(timezone.utc)
    except OverflowError:
        utc = datetime.min if value.year == datetime.min.year else datetime.max.replace(microsecond=0)
    return (
        f"{utc.year:04d}-{utc.month:02d}-{utc.day:02d}"
        f"T{utc.hour:02d}:{utc.minute:02d}:{utc.second:02d}Z"
    )


def parse_timestamp(raw: str) -> datetime:
    """
    Parse an RFC 3339 timestamp as returned by the store.

    The store reports up to nanosecond precision; digits past microseconds are dropped.
    """
    m = TIMESTAMP_RE.match(raw.strip()) if isinstance(raw, str) else None
    if m is None:
        raise WireFormatError(f"Invalid timestampValue: {raw!r}")
    year, month, day, hour, minute, second, fraction, offset = m.groups()
    micros = int((fraction or "0")[:6].ljust(6, "0"))
    if offset == "Z":
        tz = timezone.utc
    else:
        sign = -1 if offset[0] == "-" else 1
        hh, mm = offset[1:].split(":")
        tz = timezone(sign * timedelta(hours=int(hh), minutes=int(mm)))
    try:
        dt = datetime(
            int(year), int(month), int(day), int(hour), int(minute), int(second), micros, tzinfo=tz
        )
    except ValueError as e:
        raise WireFormatError(f"Invalid timestampValue: {raw!r}") from e
    return dt.astimezone(timezone.utc)


def _object_items(value: Any) -> list[tuple[Any, Any]]:
    if isinstance(value, BaseModel):
        return [(name, getattr(value, name)) for name in type(value).model_fields]
    if isinstance(value, Mapping):
        return list(value.items())
    return [(f.name, getattr(value, f.name)) for f in dataclasses.fields(value)]


def _encode_double(value: float) -> WireValue:
    if math.isnan(value):
        return {"doubleValue": "NaN"}
    if math.isinf(value):
        return {"doubleValue": "Infinity" if value > 0 else "-Infinity"}
    return {"doubleValue": value}


_ENCODERS: dict[ValueKind, Callable[[Any], WireValue]] = {
    ValueKind.NULL: lambda v: {"nullValue": None},
    ValueKind.BOOLEAN: lambda v: {"booleanValue": v},
    ValueKind.INTEGER: lambda v: {"integerValue": str(int(v))},
    ValueKind.DOUBLE: lambda v: _encode_double(float(v)),
    ValueKind.TIMESTAMP: lambda v: {"timestampValue": format_timestamp(v)},
    ValueKind.ARRAY: lambda v: {"arrayValue": {"values": [encode(x) for x in v]}},
    ValueKind.MAP: lambda v: {"mapValue": encode_fields(_object_items(v))},
    ValueKind.STRING: lambda v: {"stringValue": v if isinstance(v, str) else str(v)},
}


def encode(value: Any) -> WireValue:
    return _ENCODERS[classify(value)](value)


def encode_fields(items: Mapping[str, Any] | list[tuple[Any, Any]]) -> dict[str, Any]:
    """Encode key/value pairs into a ``{"fields": {...}}`` body, keys kept verbatim and in order."""
    pairs = items.items() if isinstance(items, Mapping) else items
    return {"fields": {str(k): encode(v) for k, v in pairs}}


def encode_record(record: Mapping[str, Any]) -> dict[str, Any]:
    """Wire document body for a record. No field-name validation; {} -> {"fields": {}}."""
    return encode_fields(record)


# -------------------------------------------------------------------
# Decoding
# -------------------------------------------------------------------
def _decode_integer(payload: Any) -> int:
    if isinstance(payload, bool):
        raise WireFormatError(f"Invalid integerValue: {payload!r}")
    try:
        return int(payload)
    except (TypeError, ValueError) as e:
        raise WireFormatError(f"Invalid integerValue: {payload!r}") from e


def _decode_double(payload: Any) -> float:
    if isinstance(payload, str) and payload in _SPECIAL_DOUBLES:
        return _SPECIAL_DOUBLES[payload]
    if isinstance(payload, bool) or not isinstance(payload, (int, float)):
        raise WireFormatError(f"Invalid doubleValue: {payload!r}")
    return float(payload)


def _decode_array(payload: Any) -> list[Any]:
    if not isinstance(payload, Mapping):
        raise WireFormatError(f"Invalid arrayValue: {payload!r}")
    # The store omits "values" for an empty array.
    values = payload.get("values", [])
    if not isinstance(values, list):
        raise WireFormatError(f"Invalid arrayValue.values: {values!r}")
    return [decode(v) for v in values]


def _decode_map(payload: Any) -> dict[str, Any]:
    if not isinstance(payload, Mapping):
        raise WireFormatError(f"Invalid mapValue: {payload!r}")
    return decode_fields(payload.get("fields") or {})


def _decode_geo_point(payload: Any) -> dict[str, float]:
    if not isinstance(payload, Mapping):
        raise WireFormatError(f"Invalid geoPointValue: {payload!r}")
    return {
        "latitude": float(payload.get("latitude", 0.0)),
        "longitude": float(payload.get("longitude", 0.0)),
    }


def _decode_bytes(payload: Any) -> bytes:
    try:
        return base64.b64decode(payload, validate=True)
    except (TypeError, ValueError) as e:
        raise WireFormatError(f"Invalid bytesValue: {payload!r}") from e


def _decode_string(payload: Any) -> str:
    if not isinstance(payload, str):
        raise WireFormatError(f"Invalid string payload: {payload!r}")
    return payload


def _decode_boolean(payload: Any) -> bool:
    if not isinstance(payload, bool):
        raise WireFormatError(f"Invalid booleanValue: {payload!r}")
    return payload


_DECODERS: dict[str, Callable[[Any], Any]] = {
    "nullValue": lambda p: None,
    "booleanValue": _decode_boolean,
    "integerValue": _decode_integer,
    "doubleValue": _decode_double,
    "timestampValue": parse_timestamp,
    "arrayValue": _decode_array,
    "mapValue": _decode_map,
    "stringValue": _decode_string,
    # Only ever produced by the store.
    "referenceValue": _decode_string,
    "geoPointValue": _decode_geo_point,
    "bytesValue": _decode_bytes,
}


def decode(wire: Any) -> Any:
    if not isinstance(wire, Mapping) or len(wire) != 1:
        raise WireFormatError(f"Expected a single-kind wire value, got {wire!r}")
    ((kind, payload),) = wire.items()
    decoder = _DECODERS.get(kind)
    if decoder is None:
        raise WireFormatError(f"Unknown wire value kind: {kind!r}")
    return decoder(payload)


def decode_fields(fields: Mapping[str, Any]) -> dict[str, Any]:
    if not isinstance(fields, Mapping):
        raise WireFormatError(f"Invalid fields mapping: {fields!r}")
    return {str(k): decode(v) for k, v in fields.items()}
