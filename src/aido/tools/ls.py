"""Built-in directory listing tool."""

import logging
from pathlib import Path
from typing import (
    Any,
    Mapping,
)

from aido.tools import (
    Tool,
    register_tool,
)
from aido.tools.definition import (
    Arg,
    ToolDefinition,
)

logger = logging.getLogger(__name__)


@register_tool
class Ls(Tool):
    """List the entries of a directory, one per line; directories end with ``/``."""

    definition = ToolDefinition(
        name="ls",
        description="List the files and directories inside a directory.",
        args=[
            Arg(
                name="path",
                description="Directory to list. Defaults to the current directory.",
            ),
        ],
    )

    def execute(self, arguments: Mapping[str, Any]) -> str:
        path = Path(str(arguments.get("path") or "."))
        logger.debug("Listing %s", path)
        entries = sorted(path.iterdir(), key=lambda p: p.name)
        return "\n".join(f"{p.name}/" if p.is_dir() else p.name for p in entries)
