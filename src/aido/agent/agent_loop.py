"""Main orchestration loop for aido."""

from __future__ import annotations

import asyncio
import logging
from enum import Enum
from typing import (
    Callable,
    Dict,
    List,
    Optional,
    Sequence,
)

from aido.agent.llm_client import (
    CompletionTransport,
    LlmClient,
)
from aido.agent.stream_aggregator import StreamAggregator
from aido.agent.tool_executor import execute_tool_call
from aido.config import Settings
from aido.core.errors import (
    AgentError,
    IterationLimitError,
)
from aido.core.schema import (
    AssistantMessage,
    CompletionRequest,
    LlmResponse,
    Message,
    ToolMessage,
)
from aido.tools import Tool

logger = logging.getLogger(__name__)

ChunkCallback = Callable[[str], None]


class LoopState(str, Enum):
    """Where an exchange currently is."""

    REQUESTING = "requesting"
    STREAMING = "streaming"
    TOOL_DISPATCH = "tool_dispatch"
    DONE = "done"
    FAILED = "failed"


# ---------------------------------------------------------------------------
# Agent Loop
# ---------------------------------------------------------------------------
class AgentLoop:
    """
    Drive one conversation until the model answers without requesting a tool.

    Each iteration sends the whole history plus the schema of every available tool, folds the
    streamed reply with a fresh :class:`StreamAggregator`, and either returns the reply or runs
    the *first* requested tool and appends its output to the history.

    Parameters
    ----------
    transport:
        Source of completion streams, usually an :class:`LlmClient`.
    tools:
        The tools the model may call.  Fixed for the whole run; names must be unique.
    on_chunk:
        Called synchronously with every non-empty text increment, in arrival order.
    max_iterations:
        Optional bound on the number of requests.  ``None`` means unbounded.
    """

    def __init__(
        self,
        transport: CompletionTransport,
        tools: Sequence[Tool] = (),
        *,
        on_chunk: Optional[ChunkCallback] = None,
        max_iterations: Optional[int] = None,
    ):
        self._transport = transport
        self._tools: Dict[str, Tool] = {}
        for tool in tools:
            if tool.name in self._tools:
                raise ValueError(f"Duplicate tool name: {tool.name}")
            self._tools[tool.name] = tool
        self._on_chunk = on_chunk
        self._max_iterations = max_iterations
        self.state = LoopState.REQUESTING
        self.request_count = 0

    async def run(self, history: List[Message]) -> LlmResponse:
        """
        Run exchanges against *history* until the model produces a tool-free answer.

        *history* is extended in place with an assistant message and a tool message for every
        tool round-trip.  The final answer is returned, not appended.  On failure the history is
        left as it was after the last completed step.

        Raises
        ------
        AgentError
            Any transport, stream, tool or iteration-limit failure.  ``step`` records the state
            the loop was in.
        """
        try:
            while True:
                self.state = LoopState.REQUESTING
                if self._max_iterations is not None and self.request_count >= self._max_iterations:
                    raise IterationLimitError(self._max_iterations)

                request = CompletionRequest(
                    messages=history,
                    tools=[tool.definition for tool in self._tools.values()],
                )
                response = await self._exchange(request)

                if not response.tool_calls:
                    self.state = LoopState.DONE
                    logger.info("Exchange complete after %d request(s)", self.request_count)
                    return response

                self.state = LoopState.TOOL_DISPATCH
                history.append(
                    AssistantMessage(content=response.text, tool_calls=response.tool_calls)
                )

                call = response.tool_calls[0]
                if len(response.tool_calls) > 1:
                    logger.info(
                        "Model requested %d tool calls; running only '%s'",
                        len(response.tool_calls),
                        call.name,
                    )
                output = execute_tool_call(call, self._tools)
                logger.info("Tool '%s' returned %d characters", call.name, len(output))
                history.append(ToolMessage(content=output, tool_call_id=call.id))
        except AgentError as exc:
            if exc.step is None:
                exc.step = self.state
            self.state = LoopState.FAILED
            raise
        except Exception:
            self.state = LoopState.FAILED
            raise

    async def _exchange(self, request: CompletionRequest) -> LlmResponse:
        self.request_count += 1
        logger.debug(
            "Sending request #%d with %d message(s)", self.request_count, len(request.messages)
        )

        aggregator = StreamAggregator()
        self.state = LoopState.STREAMING
        async for fragment in self._transport.stream(request):
            aggregator.merge(fragment)
            if fragment.content and self._on_chunk is not None:
                self._on_chunk(fragment.content)

        response = aggregator.finalize()
        logger.info(
            "Usage: prompt=%d completion=%d total=%d",
            response.usage.prompt_tokens,
            response.usage.completion_tokens,
            response.usage.total_tokens,
        )
        return response


def run_conversation(
    history: List[Message],
    tools: Sequence[Tool],
    settings: Settings,
    *,
    on_chunk: Optional[ChunkCallback] = None,
) -> LlmResponse:
    """
    Run one conversation to completion, blocking the caller.

    A fresh event loop is created for the run and closed afterwards, together with the client.
    """

    async def _run() -> LlmResponse:
        async with LlmClient.from_settings(settings) as client:
            agent = AgentLoop(
                client, tools, on_chunk=on_chunk, max_iterations=settings.MAX_ITERATIONS
            )
            return await agent.run(history)

    return asyncio.run(_run())
