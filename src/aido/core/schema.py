"""
Schema definitions for the conversation <-> completion endpoint <-> tool contract.

These data models are shared by the agent loop, the stream aggregator and the completion client.
We keep them separate from runtime logic so they can be imported anywhere without side-effects.
"""

from typing import (
    Annotated,
    Any,
    Dict,
    List,
    Literal,
    Optional,
    Union,
)

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
)

from aido.tools.definition import ToolDefinition


class ToolCall(BaseModel):
    """A completed tool invocation requested by the model."""

    id: str = Field(..., description="Opaque id used to correlate the tool's answer")
    name: str = Field(..., description="Name of the requested tool")
    arguments: str = Field("", description="Raw JSON-encoded arguments")

    def to_wire(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "type": "function",
            "function": {"name": self.name, "arguments": self.arguments},
        }


class Usage(BaseModel):
    """Token counters reported by the endpoint."""

    prompt_tokens: int = 0
    completion_tokens: int = 0
    total_tokens: int = 0


# ---------------------------------------------------------------------------
# Messages
# ---------------------------------------------------------------------------
class SystemMessage(BaseModel):
    """Instructions that frame the conversation (e.g. a recipe body)."""

    role: Literal["system"] = "system"
    content: str

    def to_wire(self) -> Dict[str, Any]:
        return {"role": self.role, "content": self.content}


class UserMessage(BaseModel):
    """Text typed by the user."""

    role: Literal["user"] = "user"
    content: str

    def to_wire(self) -> Dict[str, Any]:
        return {"role": self.role, "content": self.content}


class AssistantMessage(BaseModel):
    """A model reply, echoed back with the tool calls it requested."""

    role: Literal["assistant"] = "assistant"
    content: str = ""
    tool_calls: Optional[List[ToolCall]] = None

    def to_wire(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"role": self.role, "content": self.content}
        if self.tool_calls:
            data["tool_calls"] = [call.to_wire() for call in self.tool_calls]
        return data


class ToolMessage(BaseModel):
    """Output of a tool, correlated with the call that requested it."""

    role: Literal["tool"] = "tool"
    content: str
    tool_call_id: str

    def to_wire(self) -> Dict[str, Any]:
        return {"role": self.role, "content": self.content, "tool_call_id": self.tool_call_id}


Message = Annotated[
    Union[SystemMessage, UserMessage, AssistantMessage, ToolMessage],
    Field(discriminator="role"),
]


# ---------------------------------------------------------------------------
# Requests / responses
# ---------------------------------------------------------------------------
class CompletionRequest(BaseModel):
    """One request to the completion endpoint: the history so far plus the available tools."""

    model_config = ConfigDict(frozen=True)

    messages: List[Message] = Field(default_factory=list)
    tools: List[ToolDefinition] = Field(default_factory=list)


class ToolCallFragment(BaseModel):
    """Partial tool call carried by one stream fragment; every field but ``index`` is optional."""

    index: int
    id: Optional[str] = None
    type: Optional[str] = None
    name: Optional[str] = None
    arguments: Optional[str] = None


class CompletionFragment(BaseModel):
    """One incremental unit ("delta") of a streamed completion."""

    content: Optional[str] = None
    tool_calls: List[ToolCallFragment] = Field(default_factory=list)
    finish_reason: Optional[str] = None
    usage: Optional[Usage] = None


class LlmResponse(BaseModel):
    """The complete response folded from a fragment stream."""

    text: str = ""
    usage: Usage = Field(default_factory=Usage)
    tool_calls: List[ToolCall] = Field(default_factory=list)
    finish_reason: Optional[str] = None
