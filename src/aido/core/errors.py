"""Error types raised by aido.

Every failure of the agent engine is surfaced to the caller as one of these; none of them is
retried or skipped inside the engine.
"""

from __future__ import annotations

from typing import (
    Any,
    Sequence,
)


class AidoError(Exception):
    """Base exception for all aido errors."""


# ---------------------------------------------------------------------------
# Agent engine
# ---------------------------------------------------------------------------
class AgentError(AidoError):
    """Base class for errors that abort an exchange.

    ``step`` is the loop state the exchange was in when the error was raised. The agent loop fills
    it in if the raiser did not.
    """

    def __init__(self, message: str, *, step: Any = None):
        super().__init__(message)
        self.step = step

    def __str__(self) -> str:
        message = super().__str__()
        if self.step is None:
            return message
        step = getattr(self.step, "value", self.step)
        return f"[{step}] {message}"


class TransportError(AgentError):
    """Raised when the completion endpoint cannot be reached or reports a failure."""

    def __init__(self, cause: Exception, *, step: Any = None):
        super().__init__(f"Completion request failed: {cause}", step=step)
        self.cause = cause


class MalformedFragmentError(AgentError):
    """Raised when the stream yields a chunk with no choices (and no usage)."""

    def __init__(self, chunk_id: str | None = None, *, step: Any = None):
        super().__init__(f"Invalid response: no choices in stream chunk {chunk_id!r}", step=step)
        self.chunk_id = chunk_id


class IncompleteStreamError(AgentError):
    """Raised when the stream closed before a single fragment was received."""

    def __init__(self, *, step: Any = None):
        super().__init__("Missing data: no response received from stream", step=step)


class ToolNotFoundError(AgentError):
    """Raised when the model requests a tool that is not in the available set."""

    def __init__(
        self, name: str, call_id: str, available: Sequence[str] = (), *, step: Any = None
    ):
        super().__init__(
            f"Tool '{name}' (call {call_id}) not found. Available tools: {list(available)}",
            step=step,
        )
        self.name = name
        self.call_id = call_id
        self.available = tuple(available)


class ToolArgumentParseError(AgentError):
    """Raised when the arguments of a tool call are not a JSON object."""

    def __init__(self, name: str, call_id: str, arguments: str, reason: str, *, step: Any = None):
        super().__init__(
            f"Invalid arguments for tool '{name}' (call {call_id}): {reason}. "
            f"Raw arguments: {arguments!r}",
            step=step,
        )
        self.name = name
        self.call_id = call_id
        self.arguments = arguments


class ToolExecutionError(AgentError):
    """Raised when a tool fails while running."""

    def __init__(self, name: str, call_id: str, cause: Exception, *, step: Any = None):
        super().__init__(f"Tool '{name}' (call {call_id}) raised an error: {cause}", step=step)
        self.name = name
        self.call_id = call_id
        self.cause = cause


class IterationLimitError(AgentError):
    """Raised when the loop hits its configured request limit without a final answer."""

    def __init__(self, limit: int, *, step: Any = None):
        super().__init__(f"No final answer after {limit} requests", step=step)
        self.limit = limit


# ---------------------------------------------------------------------------
# Recipes
# ---------------------------------------------------------------------------
class RecipeError(AidoError):
    """Base class for recipe loading errors."""


class RecipeEmptyError(RecipeError):
    """Raised when a recipe document is empty or whitespace only."""

    def __init__(self) -> None:
        super().__init__("Recipe content is empty")


class RecipeNotFoundError(RecipeError):
    """Raised when no recipe file exists for the requested name."""

    def __init__(self, name: str):
        super().__init__(f"Recipe '{name}' not found")
        self.name = name
