"""
MCP Tools Package

Tool definitions (name, description, input schema) exposed by the server.
Handlers live in handlers/ under the same tool names.
"""

from .table_tools import create_table


def get_core_tool_catalog():
    """
    Get MCP tools.

    DDL OPERATIONS:
    - create_table: Create a table (and its schema, if missing)
    """
    return [create_table()]


__all__ = [
    'get_core_tool_catalog',
    'create_table',
]
