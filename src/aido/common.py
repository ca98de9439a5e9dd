"""Terminal output helpers."""

import sys
from enum import Enum
from typing import (
    Any,
    TextIO,
)


class AnsiColors(Enum):
    """
    ANSI color codes for terminal output.
    """

    RED = "\033[91m"
    YELLOW = "\033[33m"


_RESET = "\033[0m"


def colored_print(text: str, color: AnsiColors, *args: Any, **kwargs: Any) -> None:
    """
    Print text in color.

    Color codes are only emitted when the target stream is a terminal.

    Args:
        text: The text to print
        color: The color to use (AnsiColors enum)
        args: Additional positional arguments for print
        kwargs: Additional keyword arguments for print
    """
    stream = kwargs.get("file") or sys.stdout
    if stream.isatty():
        text = f"{color.value}{text}{_RESET}"
    print(text, *args, **kwargs)


class StreamPrinter:
    """Write streamed text increments as they arrive."""

    def __init__(self, stream: TextIO | None = None):
        self._stream = stream or sys.stdout
        self.printed = False
        self._ends_with_newline = True

    def __call__(self, chunk: str) -> None:
        self._stream.write(chunk)
        self._stream.flush()
        self.printed = True
        self._ends_with_newline = chunk.endswith("\n")

    def finish(self) -> None:
        """Terminate the streamed output with a newline if it lacks one."""
        if self.printed and not self._ends_with_newline:
            self._stream.write("\n")
            self._stream.flush()
