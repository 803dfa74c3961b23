"""
Circuit ABI type descriptors.

A circuit ABI is an ordered list of named parameters. Each parameter carries a
type descriptor drawn from a small closed set:

  - field                      : one field element
  - integer (width, sign)      : one field element, optionally bounded width
  - array (length, type)       : fixed-length homogeneous array (nests freely)
  - string (length)            : fixed-length character string
  - struct (fields)            : ordered named fields

Descriptors are parsed from the JSON ABI emitted by the circuit compiler:

    {"parameters": [
        {"name": "x", "type": {"kind": "field"}, "visibility": "private"},
        {"name": "xs", "type": {"kind": "array", "length": 2,
                                "type": {"kind": "integer", "sign": "unsigned", "width": 32}}},
        ...
    ]}

Kinds outside the closed set are kept as :class:`UnknownType` so that the
encoder reports them (as ``UnsupportedType``) only when traversal reaches them,
after earlier parameters have been checked.

This module only describes shapes; value handling lives in
:mod:`prover_service.witness.encoder`.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple, Union

from .errors import LimitExceeded, SchemaError, UnsupportedType

__all__ = [
    "FieldType",
    "IntegerType",
    "ArrayType",
    "StringType",
    "StructType",
    "UnknownType",
    "AbiType",
    "Parameter",
    "EncodingLimits",
    "DEFAULT_LIMITS",
    "parse_abi",
    "parse_type",
    "total_length",
    "schema_length",
    "join_path",
]


# ──────────────────────────────────────────────────────────────────────────────
# Limits
# ──────────────────────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class EncodingLimits:
    max_depth: int = 32
    max_length: int = 1_000_000


DEFAULT_LIMITS = EncodingLimits()


# ──────────────────────────────────────────────────────────────────────────────
# Type descriptors
# ──────────────────────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class FieldType:
    width: Optional[int] = None

    @property
    def kind(self) -> str:
        return "field"


@dataclass(frozen=True)
class IntegerType:
    width: Optional[int] = None
    sign: str = "unsigned"

    @property
    def kind(self) -> str:
        return "integer"

    @property
    def signed(self) -> bool:
        return self.sign == "signed"


@dataclass(frozen=True)
class ArrayType:
    length: int
    element: "AbiType"

    @property
    def kind(self) -> str:
        return "array"


@dataclass(frozen=True)
class StringType:
    length: int

    @property
    def kind(self) -> str:
        return "string"


@dataclass(frozen=True)
class StructType:
    fields: Tuple["Parameter", ...]
    path: Optional[str] = None

    @property
    def kind(self) -> str:
        return "struct"


@dataclass(frozen=True)
class UnknownType:
    descriptor: Dict[str, Any] = field(default_factory=dict, hash=False, compare=False)

    @property
    def kind(self) -> str:
        return str(self.descriptor.get("kind"))


AbiType = Union[FieldType, IntegerType, ArrayType, StringType, StructType, UnknownType]


@dataclass(frozen=True)
class Parameter:
    name: str
    type: AbiType
    visibility: Optional[str] = None


def join_path(prefix: str, name: str) -> str:
    return f"{prefix}.{name}" if prefix else name


# ──────────────────────────────────────────────────────────────────────────────
# Parsing
# ──────────────────────────────────────────────────────────────────────────────


def _require_length(desc: Mapping[str, Any], path: str) -> int:
    length = desc.get("length")
    # bool is an int subclass; reject it explicitly
    if not isinstance(length, int) or isinstance(length, bool) or length < 0:
        raise SchemaError(f"{desc.get('kind')} requires a non-negative integer length", path=path)
    return length


def _optional_width(desc: Mapping[str, Any], path: str) -> Optional[int]:
    width = desc.get("width")
    if width is None:
        return None
    if not isinstance(width, int) or isinstance(width, bool) or width <= 0:
        raise SchemaError("width must be a positive integer", path=path)
    return width


def parse_type(desc: Any, *, path: str = "", depth: int = 0, limits: EncodingLimits = DEFAULT_LIMITS) -> AbiType:
    """Parse one JSON type descriptor into an :data:`AbiType`."""
    if depth > limits.max_depth:
        raise LimitExceeded(path, limit="depth", maximum=limits.max_depth, actual=depth)
    if not isinstance(desc, Mapping):
        raise SchemaError("type descriptor must be an object", path=path)
    kind = desc.get("kind")
    if not isinstance(kind, str) or not kind:
        raise SchemaError("type descriptor requires a 'kind'", path=path)

    if kind == "field":
        return FieldType(width=_optional_width(desc, path))
    if kind == "integer":
        sign = str(desc.get("sign") or "unsigned")
        if sign not in ("signed", "unsigned"):
            raise SchemaError(f"integer sign must be 'signed' or 'unsigned', got {sign!r}", path=path)
        return IntegerType(width=_optional_width(desc, path), sign=sign)
    if kind == "array":
        length = _require_length(desc, path)
        if "type" not in desc:
            raise SchemaError("array requires an element 'type'", path=path)
        element = parse_type(desc["type"], path=f"{path}[]", depth=depth + 1, limits=limits)
        return ArrayType(length=length, element=element)
    if kind == "string":
        return StringType(length=_require_length(desc, path))
    if kind == "struct":
        fields = _parse_parameters(desc.get("fields"), prefix=path, depth=depth + 1, limits=limits)
        struct_path = desc.get("path")
        return StructType(fields=fields, path=str(struct_path) if struct_path else None)
    return UnknownType(descriptor=dict(desc))


def _parse_parameters(
    items: Any,
    *,
    prefix: str,
    depth: int,
    limits: EncodingLimits,
) -> Tuple[Parameter, ...]:
    if not isinstance(items, Sequence) or isinstance(items, (str, bytes)):
        raise SchemaError("parameters/fields must be a list", path=prefix)
    seen = set()
    out: List[Parameter] = []
    for i, item in enumerate(items):
        if not isinstance(item, Mapping):
            raise SchemaError(f"entry {i} must be an object", path=prefix)
        name = item.get("name")
        if not isinstance(name, str) or not name:
            raise SchemaError(f"entry {i} requires a non-empty name", path=prefix)
        path = join_path(prefix, name)
        if name in seen:
            raise SchemaError(f"duplicate name {name!r}", path=path)
        seen.add(name)
        if "type" not in item:
            raise SchemaError("entry requires a 'type'", path=path)
        ptype = parse_type(item["type"], path=path, depth=depth, limits=limits)
        visibility = item.get("visibility")
        out.append(Parameter(name=name, type=ptype, visibility=str(visibility) if visibility else None))
    return tuple(out)


def parse_abi(obj: Any, *, limits: EncodingLimits = DEFAULT_LIMITS) -> Tuple[Parameter, ...]:
    """
    Parse an ABI into parameters.

    Accepts any of:
      - a list of parameter objects
      - ``{"parameters": [...]}``                (an ABI)
      - ``{"abi": {"parameters": [...]}, ...}``  (a compiled circuit artifact)

    ``return_type`` and other ABI members are ignored.
    """
    if isinstance(obj, Mapping):
        if "abi" in obj and isinstance(obj["abi"], Mapping):
            obj = obj["abi"]
        if "parameters" not in obj:
            raise SchemaError("ABI object has no 'parameters'")
        obj = obj["parameters"]
    return _parse_parameters(obj, prefix="", depth=0, limits=limits)


# ──────────────────────────────────────────────────────────────────────────────
# Flattened sizes
# ──────────────────────────────────────────────────────────────────────────────


def total_length(t: AbiType, *, path: str = "") -> int:
    """
    Number of scalar witness entries a value of type ``t`` occupies.

    Computed from the schema alone; the encoder uses it to validate flattened
    arrays before assigning any index.
    """
    if isinstance(t, (FieldType, IntegerType)):
        return 1
    if isinstance(t, StringType):
        return t.length
    if isinstance(t, ArrayType):
        return t.length * total_length(t.element, path=f"{path}[]")
    if isinstance(t, StructType):
        return sum(total_length(f.type, path=join_path(path, f.name)) for f in t.fields)
    if isinstance(t, UnknownType):
        raise UnsupportedType(path, t.descriptor)
    raise UnsupportedType(path, t)


def schema_length(parameters: Sequence[Parameter]) -> int:
    """Total flattened length of a whole parameter list."""
    return sum(total_length(p.type, path=p.name) for p in parameters)
