"""
Declarative tool descriptions and their JSON Schema.

A :class:`ToolDefinition` is what a tool tells the model about itself: a name, a free-text
description and an ordered list of :class:`Arg`.  :meth:`ToolDefinition.json_schema` turns it into
the ``parameters`` object of the chat-completion protocol, and :func:`to_openai_tool` wraps that
in the ``{"type": "function", ...}`` envelope sent with every request.
"""

from enum import Enum
from typing import (
    Any,
    Dict,
    List,
    Optional,
)

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
)


class ArgType(str, Enum):
    """JSON primitive that best represents an argument."""

    STRING = "string"
    NUMBER = "number"
    INTEGER = "integer"
    BOOLEAN = "boolean"
    OBJECT = "object"
    ARRAY = "array"


class Arg(BaseModel):
    """One function argument ("parameter" in the schema)."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., description="Argument name as the model must spell it")
    description: str = ""
    type: ArgType = ArgType.STRING
    enum: Optional[List[str]] = Field(None, description="Allowed values, if restricted")
    required: bool = False


class ToolDefinition(BaseModel):
    """Name, description and arguments of a tool. Immutable once built."""

    model_config = ConfigDict(frozen=True)

    name: str
    description: str = ""
    args: List[Arg] = Field(default_factory=list)

    @field_validator("args")
    @classmethod
    def _unique_arg_names(cls, args: List[Arg]) -> List[Arg]:
        seen: set[str] = set()
        for arg in args:
            if arg.name in seen:
                raise ValueError(f"duplicate argument name '{arg.name}'")
            seen.add(arg.name)
        return args

    def json_schema(self) -> Dict[str, Any]:
        """
        Build the JSON Schema object describing this tool's arguments.

        Returns
        -------
        dict
            ``{"type": "object", "properties": {...}, "required": [...]}`` with one property per
            argument, in declaration order.  ``enum`` is only emitted for restricted arguments.
        """
        properties: Dict[str, Any] = {}
        required: List[str] = []

        for arg in self.args:
            if arg.required:
                required.append(arg.name)
            entry: Dict[str, Any] = {"type": arg.type.value, "description": arg.description}
            if arg.enum is not None:
                entry["enum"] = list(arg.enum)
            properties[arg.name] = entry

        return {"type": "object", "properties": properties, "required": required}


def to_openai_tool(definition: ToolDefinition) -> Dict[str, Any]:
    """Convert a tool definition to the OpenAI ``tools`` list entry."""
    return {
        "type": "function",
        "function": {
            "name": definition.name,
            "description": definition.description,
            "parameters": definition.json_schema(),
        },
    }
