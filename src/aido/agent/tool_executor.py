"""Dispatches model-requested tool calls to :class:`aido.tools.Tool` instances and wraps errors."""

import json
import logging
from typing import (
    Any,
    Dict,
    Mapping,
)

from aido.core.errors import (
    ToolArgumentParseError,
    ToolExecutionError,
    ToolNotFoundError,
)
from aido.core.schema import ToolCall
from aido.tools import Tool

logger = logging.getLogger(__name__)


def parse_arguments(call: ToolCall) -> Dict[str, Any]:
    """
    Decode the JSON arguments of *call*.

    An empty argument string means "no arguments".  Anything else must decode to a JSON object.

    Raises
    ------
    ToolArgumentParseError
        If the arguments are not valid JSON or not an object.
    """
    if not call.arguments.strip():
        return {}
    try:
        parsed = json.loads(call.arguments)
    except json.JSONDecodeError as exc:
        raise ToolArgumentParseError(call.name, call.id, call.arguments, str(exc)) from exc
    if not isinstance(parsed, dict):
        raise ToolArgumentParseError(
            call.name, call.id, call.arguments, f"expected an object, got {type(parsed).__name__}"
        )
    return parsed


def execute_tool_call(call: ToolCall, tools: Mapping[str, Tool]) -> str:
    """
    Look up ``call.name`` in *tools* and invoke it with the decoded arguments.

    Parameters
    ----------
    call:
        The tool call emitted by the model.
    tools:
        Available tools keyed by name.  Matching is exact.

    Returns
    -------
    str
        The tool's output.

    Raises
    ------
    ToolNotFoundError
        If no tool has that name.
    ToolArgumentParseError
        If the arguments cannot be decoded.
    ToolExecutionError
        If the tool raises.
    """
    tool = tools.get(call.name)
    if tool is None:
        raise ToolNotFoundError(call.name, call.id, list(tools))

    arguments = parse_arguments(call)

    try:
        logger.debug("Executing tool '%s' (call %s) with args=%s", call.name, call.id, arguments)
        result = tool.execute(arguments)
    except Exception as exc:  # noqa: BLE001
        logger.exception("Unhandled error in tool '%s'", call.name)
        raise ToolExecutionError(call.name, call.id, exc) from exc

    return result if isinstance(result, str) else str(result)
