"""
Fold a streamed completion back into one response.

The endpoint streams a reply as a sequence of :class:`CompletionFragment` objects.  Each fragment
carries *some* of the reply: a text increment, partial tool calls keyed by an integer index,
maybe the finish reason, and (once, at the end) the usage counters.  :class:`StreamAggregator`
merges them in arrival order; :meth:`StreamAggregator.finalize` produces the
:class:`LlmResponse` once the stream is exhausted.

Merge rules, one per field:

=================  ==========================================================
field              rule
=================  ==========================================================
text               append the increment
finish_reason      last write wins (absent never overwrites)
usage              captured verbatim when present
tool_calls[i]      pad the list with placeholders up to ``i + 1``, then:
  .id              set if not yet set
  .type            set if not yet set
  .name            set if not yet set
  .arguments       append the substring
=================  ==========================================================
"""

from __future__ import annotations

import logging
from dataclasses import (
    dataclass,
    field,
)
from typing import (
    Callable,
    List,
    Optional,
    Tuple,
)

from aido.core.errors import IncompleteStreamError
from aido.core.schema import (
    CompletionFragment,
    LlmResponse,
    ToolCall,
    ToolCallFragment,
    Usage,
)

logger = logging.getLogger(__name__)


@dataclass
class PendingToolCall:
    """A tool call being assembled; a placeholder has neither id nor name."""

    id: Optional[str] = None
    type: Optional[str] = None
    name: Optional[str] = None
    arguments: str = ""

    @property
    def is_complete(self) -> bool:
        return bool(self.id) and bool(self.name)


def _set_if_absent(current: Optional[str], incoming: str) -> Optional[str]:
    return current if current is not None else incoming


def _append(current: Optional[str], incoming: str) -> str:
    return (current or "") + incoming


_Rule = Callable[[Optional[str], str], Optional[str]]

_TOOL_CALL_RULES: Tuple[Tuple[str, _Rule], ...] = (
    ("id", _set_if_absent),
    ("type", _set_if_absent),
    ("name", _set_if_absent),
    ("arguments", _append),
)


@dataclass
class StreamAggregator:
    """Accumulator for one streamed completion.  Use a fresh instance per request."""

    text: str = ""
    tool_calls: List[PendingToolCall] = field(default_factory=list)
    finish_reason: Optional[str] = None
    usage: Optional[Usage] = None
    fragment_count: int = 0

    @property
    def is_empty(self) -> bool:
        """True until the first fragment has been merged."""
        return self.fragment_count == 0

    def merge(self, fragment: CompletionFragment) -> None:
        """Fold *fragment* into the aggregate."""
        if fragment.content is not None:
            self.text += fragment.content

        for tool_fragment in fragment.tool_calls:
            self._merge_tool_call(tool_fragment)

        if fragment.finish_reason is not None:
            self.finish_reason = fragment.finish_reason

        if fragment.usage is not None:
            self.usage = fragment.usage

        self.fragment_count += 1

    def _merge_tool_call(self, fragment: ToolCallFragment) -> None:
        while len(self.tool_calls) <= fragment.index:
            self.tool_calls.append(PendingToolCall())

        target = self.tool_calls[fragment.index]
        for name, rule in _TOOL_CALL_RULES:
            incoming = getattr(fragment, name)
            if incoming is not None:
                setattr(target, name, rule(getattr(target, name), incoming))

    def finalize(self) -> LlmResponse:
        """
        Build the response from everything merged so far.

        Entries that never received both an id and a name are dropped; the remaining calls keep
        their stream order.

        Raises
        ------
        IncompleteStreamError
            If no fragment was ever merged.
        """
        if self.is_empty:
            raise IncompleteStreamError()

        tool_calls = [
            ToolCall(id=pending.id, name=pending.name, arguments=pending.arguments)
            for pending in self.tool_calls
            if pending.is_complete
        ]
        dropped = len(self.tool_calls) - len(tool_calls)
        if dropped:
            logger.debug("Dropped %d unresolved tool-call entries", dropped)

        return LlmResponse(
            text=self.text,
            usage=self.usage or Usage(),
            tool_calls=tool_calls,
            finish_reason=self.finish_reason,
        )
