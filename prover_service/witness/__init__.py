"""
Witness encoding: circuit ABI types, the witness-map encoder, and its errors.

Pure computation only; nothing here touches the filesystem, the network, or
child processes.
"""

from __future__ import annotations

from .abi import (DEFAULT_LIMITS, ArrayType, EncodingLimits, FieldType,
                  IntegerType, Parameter, StringType, StructType, UnknownType,
                  parse_abi, schema_length, total_length)
from .encoder import (WitnessMap, encode, encode_from_circuit, encode_values,
                      witness_to_json)
from .errors import (EncodingError, LengthMismatch, LimitExceeded,
                     MissingParameter, SchemaError, TypeMismatch,
                     UnsupportedType, UnsupportedWidth)

__all__ = [
    "ArrayType",
    "DEFAULT_LIMITS",
    "EncodingError",
    "EncodingLimits",
    "FieldType",
    "IntegerType",
    "LengthMismatch",
    "LimitExceeded",
    "MissingParameter",
    "Parameter",
    "SchemaError",
    "StringType",
    "StructType",
    "TypeMismatch",
    "UnknownType",
    "UnsupportedType",
    "UnsupportedWidth",
    "WitnessMap",
    "encode",
    "encode_from_circuit",
    "encode_values",
    "parse_abi",
    "schema_length",
    "total_length",
    "witness_to_json",
]
