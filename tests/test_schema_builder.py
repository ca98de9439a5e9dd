"""Tests for tool definitions and their JSON Schema."""

import json

import pytest
from pydantic import ValidationError

from aido.tools.definition import (
    Arg,
    ArgType,
    ToolDefinition,
    to_openai_tool,
)


def _my_tool() -> ToolDefinition:
    return ToolDefinition(
        name="my_tool",
        description="some test tool",
        args=[
            Arg(
                name="myArgument",
                description="Some description of my argument",
                type=ArgType.STRING,
                required=True,
            ),
            Arg(name="myOtherArgument", description="Some other argument", type=ArgType.NUMBER),
        ],
    )


def test_tool_schema() -> None:
    """The schema lists every argument and the required ones, in declaration order."""
    expected = {
        "type": "object",
        "properties": {
            "myArgument": {
                "type": "string",
                "description": "Some description of my argument",
            },
            "myOtherArgument": {
                "type": "number",
                "description": "Some other argument",
            },
        },
        "required": ["myArgument"],
    }

    schema = _my_tool().json_schema()

    assert json.dumps(schema) == json.dumps(expected)


def test_enum_only_when_present() -> None:
    """Restricted arguments carry an ``enum`` array; others do not."""
    tool = ToolDefinition(
        name="format",
        args=[
            Arg(name="style", type=ArgType.STRING, enum=["short", "long"]),
            Arg(name="width", type=ArgType.INTEGER),
        ],
    )

    properties = tool.json_schema()["properties"]

    assert properties["style"]["enum"] == ["short", "long"]
    assert "enum" not in properties["width"]


def test_required_order_follows_declaration() -> None:
    """Required names keep declaration order, not alphabetical order."""
    tool = ToolDefinition(
        name="t",
        args=[
            Arg(name="zeta", required=True),
            Arg(name="alpha"),
            Arg(name="beta", type=ArgType.BOOLEAN, required=True),
        ],
    )

    assert tool.json_schema()["required"] == ["zeta", "beta"]


def test_all_arg_types() -> None:
    """Every argument type maps to its JSON Schema name."""
    tool = ToolDefinition(name="t", args=[Arg(name=kind.value, type=kind) for kind in ArgType])

    properties = tool.json_schema()["properties"]

    assert {name: prop["type"] for name, prop in properties.items()} == {
        "string": "string",
        "number": "number",
        "integer": "integer",
        "boolean": "boolean",
        "object": "object",
        "array": "array",
    }


def test_no_args() -> None:
    """A tool without arguments still produces a complete object schema."""
    assert ToolDefinition(name="t").json_schema() == {
        "type": "object",
        "properties": {},
        "required": [],
    }


def test_duplicate_arg_names_rejected() -> None:
    """Two arguments with the same name are an error, not a merge."""
    with pytest.raises(ValidationError, match="duplicate argument name 'path'"):
        ToolDefinition(name="t", args=[Arg(name="path"), Arg(name="path", required=True)])


def test_definition_is_frozen() -> None:
    """Definitions cannot be changed after construction."""
    tool = _my_tool()
    with pytest.raises(ValidationError):
        tool.name = "other"  # type: ignore[misc]


def test_openai_envelope() -> None:
    """The wire form wraps the schema in a function envelope."""
    wire = to_openai_tool(_my_tool())

    assert wire["type"] == "function"
    assert wire["function"]["name"] == "my_tool"
    assert wire["function"]["description"] == "some test tool"
    assert wire["function"]["parameters"] == _my_tool().json_schema()
