"""
ABI-driven witness encoder.

Turns a named collection of high-level input values into the ordered,
densely indexed witness map a proving backend consumes:

    >>> params = parse_abi([{"name": "x", "type": {"kind": "field"}}])
    >>> encode({"x": 255}, params)
    {0: '0xff'}

Index assignment follows schema declaration order only; the insertion order
of ``inputs`` never matters. Each recursive step returns the ordered list of
values it produced and the caller composes them, so no counter is shared
between calls. Indices are assigned once, at the top, from ``start_index``.

Value conventions
-----------------
  field / integer : number  → "0x" + lowercase hex of floor(value)
                    "0x…"   → used verbatim
  string          : one "0x"-hex code point per character
  array           : flattened depth-first, strings zero-padded, structs inlined
  struct          : fields in declaration order
"""

from __future__ import annotations

import enum
import math
from numbers import Real
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple, Union

from .abi import (DEFAULT_LIMITS, AbiType, ArrayType, EncodingLimits,
                  FieldType, IntegerType, Parameter, StringType, StructType,
                  UnknownType, join_path, parse_abi, total_length)
from .errors import (LengthMismatch, LimitExceeded, MissingParameter,
                     TypeMismatch, UnsupportedType, UnsupportedWidth)

__all__ = [
    "WitnessMap",
    "ValueKind",
    "classify",
    "encode",
    "encode_values",
    "encode_from_circuit",
    "witness_to_json",
    "MAX_LITERAL_WIDTH",
]

WitnessMap = Dict[int, str]

# Widths above this must be supplied as hex strings: float literals lose
# precision past 2**53 and callers are expected to pre-encode wide values.
MAX_LITERAL_WIDTH = 64


class ValueKind(enum.Enum):
    NUMBER = "number"
    HEX = "hex string"
    TEXT = "string"
    SEQUENCE = "array"
    MAPPING = "object"
    OTHER = "other"


def classify(value: Any) -> ValueKind:
    """Tag a dynamically typed input value with its shape."""
    if isinstance(value, bool) or value is None:
        return ValueKind.OTHER
    if isinstance(value, Real):
        return ValueKind.NUMBER
    if isinstance(value, str):
        return ValueKind.HEX if value.startswith("0x") else ValueKind.TEXT
    if isinstance(value, Mapping):
        return ValueKind.MAPPING
    if isinstance(value, Sequence) and not isinstance(value, (bytes, bytearray)):
        return ValueKind.SEQUENCE
    return ValueKind.OTHER


def _describe(value: Any) -> str:
    kind = classify(value)
    if kind is ValueKind.OTHER:
        return "null" if value is None else type(value).__name__
    return kind.value


# ──────────────────────────────────────────────────────────────────────────────
# Scalars
# ──────────────────────────────────────────────────────────────────────────────

ScalarType = Union[FieldType, IntegerType]


def _number_to_hex(value: Real, t: Optional[ScalarType], path: str) -> str:
    try:
        n = math.floor(value)
    except (OverflowError, ValueError):
        raise TypeMismatch(path, expected="finite number", actual=repr(value)) from None
    if n < 0:
        if isinstance(t, IntegerType) and t.signed and t.width:
            if n < -(1 << (t.width - 1)):
                raise TypeMismatch(path, expected=f"i{t.width} value", actual=str(n))
            # two's complement within the declared width
            n += 1 << t.width
        else:
            raise TypeMismatch(path, expected="non-negative number", actual=str(n))
    return f"0x{n:x}"


def _encode_scalar(value: Any, t: Optional[ScalarType], path: str) -> str:
    kind = classify(value)
    if kind is ValueKind.NUMBER:
        if t is not None and t.width and t.width > MAX_LITERAL_WIDTH:
            raise UnsupportedWidth(path, t.width)
        return _number_to_hex(value, t, path)
    if kind is ValueKind.HEX:
        return value
    if kind is ValueKind.TEXT:
        raise TypeMismatch(path, expected="hexadecimal number", actual="non-hex string")
    raise TypeMismatch(path, expected="integer", actual=_describe(value))


# ──────────────────────────────────────────────────────────────────────────────
# Arrays
# ──────────────────────────────────────────────────────────────────────────────

# (path, raw value, scalar type or None for already-encoded/char units)
_Unit = Tuple[str, Any, Optional[ScalarType]]


def _flatten(
    items: Sequence[Any],
    element: AbiType,
    path: str,
    depth: int,
    limits: EncodingLimits,
) -> List[_Unit]:
    if depth > limits.max_depth:
        raise LimitExceeded(path, limit="depth", maximum=limits.max_depth, actual=depth)

    units: List[_Unit] = []
    for i, item in enumerate(items):
        ipath = f"{path}[{i}]"
        kind = classify(item)
        if isinstance(element, ArrayType):
            if kind is not ValueKind.SEQUENCE:
                raise TypeMismatch(ipath, expected="array", actual=_describe(item))
            units.extend(_flatten(item, element.element, ipath, depth + 1, limits))
        elif isinstance(element, StringType):
            if kind not in (ValueKind.TEXT, ValueKind.HEX):
                raise TypeMismatch(ipath, expected="string", actual=_describe(item))
            if len(item) > element.length:
                raise LengthMismatch(ipath, expected=element.length, actual=len(item), what="string")
            for pos in range(element.length):
                code = ord(item[pos]) if pos < len(item) else 0
                units.append((f"{ipath}[{pos}]", code, None))
        elif isinstance(element, StructType):
            if kind is not ValueKind.MAPPING:
                raise TypeMismatch(ipath, expected="struct", actual=_describe(item))
            encoded = _encode_parameters(item, element.fields, ipath, depth + 1, limits)
            units.extend((ipath, v, None) for v in encoded)
        elif isinstance(element, (FieldType, IntegerType)):
            if kind is ValueKind.SEQUENCE:
                raise TypeMismatch(ipath, expected=element.kind, actual="array")
            units.append((ipath, item, element))
        elif isinstance(element, UnknownType):
            raise UnsupportedType(ipath, element.descriptor)
        else:
            raise UnsupportedType(ipath, element)
    return units


def _encode_array(value: Any, t: ArrayType, path: str, depth: int, limits: EncodingLimits) -> List[str]:
    if classify(value) is not ValueKind.SEQUENCE:
        raise TypeMismatch(path, expected="array", actual=_describe(value))
    expected = total_length(t, path=path)
    if expected > limits.max_length:
        raise LimitExceeded(path, limit="length", maximum=limits.max_length, actual=expected)

    units = _flatten(value, t.element, path, depth + 1, limits)
    if len(units) != expected:
        raise LengthMismatch(path, expected=expected, actual=len(units))
    return [_encode_scalar(v, st, upath) for upath, v, st in units]


# ──────────────────────────────────────────────────────────────────────────────
# Dispatch
# ──────────────────────────────────────────────────────────────────────────────


def _encode_value(value: Any, t: AbiType, path: str, depth: int, limits: EncodingLimits) -> List[str]:
    if depth > limits.max_depth:
        raise LimitExceeded(path, limit="depth", maximum=limits.max_depth, actual=depth)

    if isinstance(t, (FieldType, IntegerType)):
        return [_encode_scalar(value, t, path)]
    if isinstance(t, ArrayType):
        return _encode_array(value, t, path, depth, limits)
    if isinstance(t, StructType):
        if classify(value) is not ValueKind.MAPPING:
            raise TypeMismatch(path, expected="struct", actual=_describe(value))
        return _encode_parameters(value, t.fields, path, depth + 1, limits)
    if isinstance(t, StringType):
        if classify(value) not in (ValueKind.TEXT, ValueKind.HEX):
            raise TypeMismatch(path, expected="string", actual=_describe(value))
        if len(value) != t.length:
            raise LengthMismatch(path, expected=t.length, actual=len(value), what="string")
        return [f"0x{ord(ch):x}" for ch in value]
    if isinstance(t, UnknownType):
        raise UnsupportedType(path, t.descriptor)
    raise UnsupportedType(path, t)


def _encode_parameters(
    inputs: Mapping[str, Any],
    parameters: Sequence[Parameter],
    prefix: str,
    depth: int,
    limits: EncodingLimits,
) -> List[str]:
    values: List[str] = []
    for p in parameters:
        path = join_path(prefix, p.name)
        if p.name not in inputs:
            raise MissingParameter(path)
        values.extend(_encode_value(inputs[p.name], p.type, path, depth, limits))
        if len(values) > limits.max_length:
            raise LimitExceeded(path, limit="length", maximum=limits.max_length, actual=len(values))
    return values


def _as_parameters(parameters: Any, limits: EncodingLimits) -> Sequence[Parameter]:
    if parameters is None:
        raise ValueError("Parameters must be provided to generate witness map")
    if isinstance(parameters, Sequence) and all(isinstance(p, Parameter) for p in parameters):
        return parameters
    return parse_abi(parameters, limits=limits)


# ──────────────────────────────────────────────────────────────────────────────
# Public API
# ──────────────────────────────────────────────────────────────────────────────


def encode_values(
    inputs: Mapping[str, Any],
    parameters: Any,
    *,
    limits: EncodingLimits = DEFAULT_LIMITS,
) -> List[str]:
    """Encode ``inputs`` against ``parameters`` and return the ordered values only."""
    params = _as_parameters(parameters, limits)
    if classify(inputs) is not ValueKind.MAPPING:
        raise TypeMismatch("", expected="object", actual=_describe(inputs))
    return _encode_parameters(inputs, params, "", 0, limits)


def encode(
    inputs: Mapping[str, Any],
    parameters: Any,
    start_index: int = 0,
    *,
    limits: EncodingLimits = DEFAULT_LIMITS,
) -> WitnessMap:
    """
    Build the witness map for ``inputs``.

    ``parameters`` may be parsed :class:`Parameter` objects or any raw ABI shape
    accepted by :func:`parse_abi`. Indices run contiguously from ``start_index``
    in schema order. Raises an :class:`EncodingError` subclass on the first
    mismatch.
    """
    if start_index < 0:
        raise ValueError("start_index must be non-negative")
    values = encode_values(inputs, parameters, limits=limits)
    return {start_index + i: v for i, v in enumerate(values)}


def encode_from_circuit(
    inputs: Mapping[str, Any],
    circuit: Mapping[str, Any],
    start_index: int = 0,
    *,
    limits: EncodingLimits = DEFAULT_LIMITS,
) -> WitnessMap:
    """Encode against the ABI embedded in a compiled circuit artifact."""
    return encode(inputs, parse_abi(circuit, limits=limits), start_index, limits=limits)


def witness_to_json(witness: WitnessMap) -> Dict[str, str]:
    """Render a witness map with string keys (JSON objects cannot key by int)."""
    return {str(k): v for k, v in sorted(witness.items())}
