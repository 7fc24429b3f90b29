"""
Handler Registry - Maps tool names to handler functions

Routes tool calls to their handler functions. Handlers are organized by
category matching the tools/ directory structure.

Architecture:
- Each handler module exports async functions: handle_<tool_name>(db, arguments)
- Registry maps tool names to (handler, needs_db) tuples
- Both transports (stdio server.py, transport/http.py) call dispatch_tool_call()

Usage:
    from handlers import dispatch_tool_call

    result = await dispatch_tool_call(db, "create_table", arguments)
"""

import logging
from typing import Any, Callable, Optional, Tuple

from mcp import types

from . import table_handlers

logger = logging.getLogger(__name__)


# Handler registry: {tool_name: (handler_function, needs_db)}
HANDLER_REGISTRY = {
    "create_table": (
        table_handlers.handle_create_table,
        True,  # needs_db
    ),
}


def get_handler(tool_name: str) -> Optional[Tuple[Callable, bool]]:
    """
    Get handler info for a tool.

    Returns:
        (handler_function, needs_db) or None if the tool is unknown
    """
    return HANDLER_REGISTRY.get(tool_name)


async def dispatch_tool_call(db, name: str, arguments: Optional[dict[str, Any]]) -> list[types.TextContent]:
    """Look up and run a tool handler; unknown tools yield a text error"""
    handler_info = get_handler(name)

    if not handler_info:
        logger.warning(f"⚠️  Unknown tool requested: {name}")
        return [types.TextContent(
            type="text",
            text=f"Unknown tool: {name}"
        )]

    handler, needs_db = handler_info
    arguments = arguments if arguments is not None else {}

    if needs_db:
        return await handler(db, arguments)
    return await handler(arguments)


__all__ = [
    'HANDLER_REGISTRY',
    'get_handler',
    'dispatch_tool_call',
]
