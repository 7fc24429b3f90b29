"""
Table MCP Tools
DDL tools for creating tables in SQL Server.
"""

from mcp import types


def create_table() -> types.Tool:
    """
    Returns the create_table tool.
    Identifiers are validated and bracket-quoted; column types are sent as given.
    """
    return types.Tool(
        name="create_table",
        description="Creates a new table in the MSSQL Database with the specified columns. Accepts 'table' or 'schema.table' (brackets allowed, e.g. '[app].[users]'); a missing schema is created first. Table, schema and column names must start with a letter or underscore and contain only letters, digits and underscores.",
        inputSchema={
            "type": "object",
            "properties": {
                "tableName": {
                    "type": "string",
                    "description": "Name of the table to create, optionally schema-qualified (e.g. 'users' or 'app.users')"
                },
                "columns": {
                    "type": "array",
                    "description": "Array of column definitions (e.g., [{ name: 'id', type: 'INT PRIMARY KEY' }, ...])",
                    "items": {
                        "type": "object",
                        "properties": {
                            "name": {
                                "type": "string",
                                "description": "Column name"
                            },
                            "type": {
                                "type": "string",
                                "description": "SQL type and constraints (e.g., 'INT PRIMARY KEY', 'NVARCHAR(255) NOT NULL')"
                            }
                        },
                        "required": ["name", "type"]
                    }
                }
            },
            "required": ["tableName", "columns"]
        }
    )
