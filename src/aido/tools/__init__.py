"""
Tool registry for aido.

A tool is anything implementing :class:`Tool`: it exposes a :class:`ToolDefinition` and an
``execute`` method taking the parsed JSON arguments and returning a string.  The agent loop only
ever talks to this interface; concrete tools live in their own modules and register themselves
with the :func:`register_tool` class decorator:

    @register_tool
    class MyTool(Tool):
        definition = ToolDefinition(name="my_tool", description="...")

        def execute(self, arguments):
            return "result"

Registering two tools with the same name raises ``ValueError``.
"""

import logging
from abc import (
    ABC,
    abstractmethod,
)
from typing import (
    Any,
    Dict,
    List,
    Mapping,
    Sequence,
    Type,
    TypeVar,
)

from aido.tools.definition import (
    Arg,
    ArgType,
    ToolDefinition,
    to_openai_tool,
)

logger = logging.getLogger(__name__)

__all__ = [
    "Arg",
    "ArgType",
    "TOOL_REGISTRY",
    "Tool",
    "ToolDefinition",
    "register_tool",
    "select_tools",
    "to_openai_tool",
]


class Tool(ABC):
    """A local capability the model can invoke."""

    definition: ToolDefinition

    @property
    def name(self) -> str:
        """Name the model uses to request this tool."""
        return self.definition.name

    @abstractmethod
    def execute(self, arguments: Mapping[str, Any]) -> str:
        """Run the tool with the parsed JSON *arguments*; raise on failure."""

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.definition.name!r})"


TOOL_REGISTRY: Dict[str, Tool] = {}
"""Global registry of tool instances, keyed by tool name."""

_T = TypeVar("_T", bound=Type[Tool])


def register_tool(cls: _T) -> _T:
    """
    Instantiate *cls* and add it to :data:`TOOL_REGISTRY` under its definition's name.

    Raises
    ------
    ValueError
        If a tool with the same name is already registered.
    """
    tool = cls()
    name = tool.definition.name
    if name in TOOL_REGISTRY:
        raise ValueError(f"Tool '{name}' is already registered.")
    logger.debug("Registering tool '%s'", name)
    TOOL_REGISTRY[name] = tool
    return cls


def select_tools(allowed: Sequence[str] | None = None) -> List[Tool]:
    """
    Return the registered tools, optionally restricted to the names in *allowed*.

    The result follows registry order.  Names in *allowed* that are not registered are logged and
    ignored.
    """
    if allowed is None:
        return list(TOOL_REGISTRY.values())

    for name in allowed:
        if name not in TOOL_REGISTRY:
            logger.warning("Allowed tool '%s' is not registered; ignoring it", name)
    wanted = set(allowed)
    return [tool for name, tool in TOOL_REGISTRY.items() if name in wanted]


# Built-in tools register themselves on import.
from aido.tools import ls  # noqa: E402,F401  pylint: disable=wrong-import-position
