from __future__ import annotations

import pytest

from prover_service.witness import (ArrayType, EncodingLimits, FieldType,
                                    IntegerType, LimitExceeded, SchemaError,
                                    StringType, StructType, UnknownType,
                                    UnsupportedType, parse_abi, schema_length,
                                    total_length)
from prover_service.witness.abi import parse_type

PARAMS = [
    {"name": "x", "type": {"kind": "field"}, "visibility": "private"},
    {
        "name": "xs",
        "type": {"kind": "array", "length": 2, "type": {"kind": "integer", "sign": "unsigned", "width": 32}},
        "visibility": "public",
    },
]


@pytest.mark.parametrize(
    "shape",
    [
        PARAMS,
        {"parameters": PARAMS, "return_type": None},
        {"abi": {"parameters": PARAMS, "return_type": None, "error_types": {}}, "bytecode": "H4sI"},
    ],
    ids=["list", "abi", "circuit"],
)
def test_parse_abi_accepts_all_shapes(shape):
    params = parse_abi(shape)
    assert [p.name for p in params] == ["x", "xs"]
    assert params[0].type == FieldType()
    assert params[1].type == ArrayType(length=2, element=IntegerType(width=32, sign="unsigned"))
    assert params[1].visibility == "public"


def test_parse_struct_and_string():
    t = parse_type(
        {
            "kind": "struct",
            "path": "main::Point",
            "fields": [
                {"name": "label", "type": {"kind": "string", "length": 4}},
                {"name": "v", "type": {"kind": "integer", "sign": "signed", "width": 8}},
            ],
        }
    )
    assert isinstance(t, StructType)
    assert t.path == "main::Point"
    assert [f.name for f in t.fields] == ["label", "v"]
    assert t.fields[0].type == StringType(length=4)
    assert t.fields[1].type.signed


def test_unknown_kind_is_deferred():
    t = parse_type({"kind": "tuple", "fields": []})
    assert isinstance(t, UnknownType)
    assert t.kind == "tuple"


@pytest.mark.parametrize(
    "desc",
    [
        {"kind": "array", "type": {"kind": "field"}},
        {"kind": "array", "length": -1, "type": {"kind": "field"}},
        {"kind": "array", "length": 2},
        {"kind": "string"},
        {"kind": "string", "length": True},
        {"kind": "integer", "width": "wide"},
        {"kind": "integer", "width": 8, "sign": "maybe"},
        {"kind": "struct"},
        {"length": 3},
        "field",
    ],
)
def test_malformed_descriptors_are_schema_errors(desc):
    with pytest.raises(SchemaError):
        parse_type(desc, path="p")


def test_duplicate_names_are_rejected():
    with pytest.raises(SchemaError) as ei:
        parse_abi([{"name": "a", "type": {"kind": "field"}}, {"name": "a", "type": {"kind": "field"}}])
    assert ei.value.path == "a"


def test_duplicate_struct_field_path():
    desc = {
        "kind": "struct",
        "fields": [{"name": "f", "type": {"kind": "field"}}, {"name": "f", "type": {"kind": "field"}}],
    }
    with pytest.raises(SchemaError) as ei:
        parse_abi([{"name": "s", "type": desc}])
    assert ei.value.path == "s.f"


def test_abi_object_without_parameters():
    with pytest.raises(SchemaError):
        parse_abi({"return_type": None})


def test_parameter_without_name_or_type():
    with pytest.raises(SchemaError):
        parse_abi([{"type": {"kind": "field"}}])
    with pytest.raises(SchemaError):
        parse_abi([{"name": "x"}])


def test_depth_limit():
    desc = {"kind": "field"}
    for _ in range(4):
        desc = {"kind": "array", "length": 1, "type": desc}
    with pytest.raises(LimitExceeded) as ei:
        parse_abi([{"name": "deep", "type": desc}], limits=EncodingLimits(max_depth=2))
    assert ei.value.limit == "depth"
    # default limits are generous enough
    assert len(parse_abi([{"name": "deep", "type": desc}])) == 1


def test_total_length():
    assert total_length(FieldType()) == 1
    assert total_length(StringType(length=5)) == 5
    grid = ArrayType(length=2, element=ArrayType(length=3, element=FieldType()))
    assert total_length(grid) == 6
    assert total_length(ArrayType(length=2, element=StringType(length=4))) == 8

    params = parse_abi(
        [
            {
                "name": "ps",
                "type": {
                    "kind": "array",
                    "length": 3,
                    "type": {
                        "kind": "struct",
                        "fields": [
                            {"name": "a", "type": {"kind": "field"}},
                            {"name": "s", "type": {"kind": "string", "length": 2}},
                        ],
                    },
                },
            },
            {"name": "z", "type": {"kind": "field"}},
        ]
    )
    assert total_length(params[0].type) == 9
    assert schema_length(params) == 10


def test_total_length_of_unknown_kind():
    with pytest.raises(UnsupportedType):
        total_length(ArrayType(length=2, element=UnknownType({"kind": "tuple"})), path="t")


def test_error_module_is_documented():
    from prover_service.witness import errors

    assert errors.__doc__ and "EncodingError" in errors.__doc__
