"""
Completion client for aido.

This module is the only place that *directly* calls an LLM.  Everything else (agent loop, tools,
recipes) stays transport-agnostic and talks to a :class:`CompletionTransport`.

:class:`LlmClient` speaks the OpenAI chat-completions protocol to any compatible endpoint (the
``API_URL`` setting), always in streaming mode, and turns each SDK chunk into a
:class:`CompletionFragment`.
"""

from __future__ import annotations

import json
import logging
from typing import (
    Any,
    AsyncIterator,
    Dict,
    Protocol,
)

import httpx
import openai
from openai.types.chat import ChatCompletionChunk

from aido.config import Settings
from aido.core.errors import (
    MalformedFragmentError,
    TransportError,
)
from aido.core.schema import (
    CompletionFragment,
    CompletionRequest,
    ToolCallFragment,
    Usage,
)
from aido.tools.definition import to_openai_tool

logger = logging.getLogger(__name__)

DEFAULT_TEMPERATURE = 0.7


class CompletionTransport(Protocol):
    """Anything that can stream a completion for a request."""

    def stream(self, request: CompletionRequest) -> AsyncIterator[CompletionFragment]:
        """Yield the fragments of the completion, in emission order."""
        ...


# ---------------------------------------------------------------------------
# Chunk conversion
# ---------------------------------------------------------------------------
def fragment_from_chunk(chunk: ChatCompletionChunk) -> CompletionFragment:
    """
    Convert one SDK stream chunk into a fragment.

    Only the first choice is used.  A chunk without choices is accepted if it carries usage (the
    trailing chunk sent when ``include_usage`` is on) and becomes a usage-only fragment.

    Raises
    ------
    MalformedFragmentError
        If the chunk has neither choices nor usage.
    """
    usage = None
    if chunk.usage is not None:
        usage = Usage(
            prompt_tokens=chunk.usage.prompt_tokens,
            completion_tokens=chunk.usage.completion_tokens,
            total_tokens=chunk.usage.total_tokens,
        )

    if not chunk.choices:
        if usage is None:
            raise MalformedFragmentError(chunk.id)
        return CompletionFragment(usage=usage)

    choice = chunk.choices[0]
    tool_calls = []
    for call in choice.delta.tool_calls or []:
        function = call.function
        tool_calls.append(
            ToolCallFragment(
                index=call.index,
                id=call.id,
                type=call.type,
                name=function.name if function else None,
                arguments=function.arguments if function else None,
            )
        )

    return CompletionFragment(
        content=choice.delta.content,
        tool_calls=tool_calls,
        finish_reason=choice.finish_reason,
        usage=usage,
    )


# ---------------------------------------------------------------------------
# Client
# ---------------------------------------------------------------------------
class LlmClient:
    """Streaming client for an OpenAI-compatible chat-completions endpoint."""

    def __init__(
        self,
        model_name: str,
        api_key: str,
        base_url: str,
        *,
        timeout: float = 60.0,
        temperature: float = DEFAULT_TEMPERATURE,
    ):
        self.model_name = model_name
        self.temperature = temperature
        self._client = openai.AsyncOpenAI(
            api_key=api_key,
            base_url=base_url,
            timeout=httpx.Timeout(timeout),
            http_client=httpx.AsyncClient(timeout=timeout),
        )

    @classmethod
    def from_settings(cls, settings: Settings) -> "LlmClient":
        """Build a client from the connection parameters in *settings*."""
        return cls(
            model_name=settings.MODEL_NAME,
            api_key=settings.API_KEY,
            base_url=settings.API_URL,
            timeout=settings.TIMEOUT,
            temperature=settings.TEMPERATURE,
        )

    async def aclose(self) -> None:
        await self._client.close()

    async def __aenter__(self) -> "LlmClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    def build_payload(self, request: CompletionRequest) -> Dict[str, Any]:
        """Translate *request* into chat-completions keyword arguments."""
        payload: Dict[str, Any] = {
            "model": self.model_name,
            "temperature": self.temperature,
            "messages": [message.to_wire() for message in request.messages],
            "stream": True,
            "stream_options": {"include_usage": True},
        }
        if request.tools:
            payload["tools"] = [to_openai_tool(tool) for tool in request.tools]
        return payload

    async def stream(self, request: CompletionRequest) -> AsyncIterator[CompletionFragment]:
        payload = self.build_payload(request)
        if logger.isEnabledFor(logging.DEBUG):
            logger.debug("Completion request: %s", json.dumps(payload))

        try:
            response = await self._client.chat.completions.create(**payload)
            async for chunk in response:
                logger.debug("Received chunk: %s", chunk.model_dump_json(exclude_none=True))
                yield fragment_from_chunk(chunk)
        except (openai.OpenAIError, httpx.HTTPError) as exc:
            logger.error("Error in completion stream: %s", exc)
            raise TransportError(exc) from exc
