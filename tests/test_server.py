"""
Tests for the stdio MCP server

Requests go through the handlers registered on server.app, the same path the
stdio transport takes, with a stub database in place of the pool.
"""

import json
import sys

import pytest
from mcp import types

import server


@pytest.fixture
def server_db(monkeypatch, stub_db):
    monkeypatch.setattr(server, "db", stub_db)
    return stub_db


async def call_tool(name: str, arguments: dict) -> types.CallToolResult:
    handler = server.app.request_handlers[types.CallToolRequest]
    response = await handler(types.CallToolRequest(
        method="tools/call",
        params=types.CallToolRequestParams(name=name, arguments=arguments),
    ))
    return response.root


def payload_of(result: types.CallToolResult) -> dict:
    assert result.isError is False
    return json.loads(result.content[0].text)


class TestListTools:

    @pytest.mark.asyncio
    async def test_handle_list_tools(self):
        tools = await server.handle_list_tools()
        assert [tool.name for tool in tools] == ["create_table"]

    @pytest.mark.asyncio
    async def test_list_tools_request(self):
        handler = server.app.request_handlers[types.ListToolsRequest]
        response = await handler(types.ListToolsRequest(method="tools/list"))

        assert [tool.name for tool in response.root.tools] == ["create_table"]


class TestCallTool:

    @pytest.mark.asyncio
    async def test_create_table(self, server_db):
        result = await call_tool("create_table", {
            "tableName": "[app].[users]",
            "columns": [{"name": "id", "type": "INT PRIMARY KEY"}],
        })

        assert payload_of(result) == {
            "success": True,
            "message": "Table '[app].[users]' created successfully.",
            "schemaCreated": True,
        }
        assert server_db.stub_session.statements[-1] == "CREATE TABLE [app].[users] ([id] INT PRIMARY KEY)"

    @pytest.mark.asyncio
    async def test_missing_column_type_is_structured_rejection(self, server_db):
        result = await call_tool("create_table", {"tableName": "users", "columns": [{"name": "id"}]})

        payload = payload_of(result)
        assert payload["success"] is False
        assert payload["schemaCreated"] is False
        assert payload["error"] == {
            "kind": "InvalidArgument",
            "detail": "Column 'id' is missing a valid type string.",
        }
        assert server_db.sessions_opened == 0

    @pytest.mark.asyncio
    async def test_non_string_table_name_is_structured_rejection(self, server_db):
        result = await call_tool("create_table", {"tableName": 42, "columns": [{"name": "id", "type": "INT"}]})

        payload = payload_of(result)
        assert payload["error"]["kind"] == "InvalidArgument"
        assert payload["message"] == "Failed to create table: 'tableName' must be a non-empty string"
        assert server_db.sessions_opened == 0

    @pytest.mark.asyncio
    async def test_empty_columns_is_structured_rejection(self, server_db):
        result = await call_tool("create_table", {"tableName": "users", "columns": []})

        assert payload_of(result)["error"]["detail"] == "'columns' must be a non-empty array"

    @pytest.mark.asyncio
    async def test_unknown_tool(self, server_db):
        result = await call_tool("drop_table", {"tableName": "users"})

        assert result.content[0].text == "Unknown tool: drop_table"
        assert server_db.sessions_opened == 0


class TestCliEntry:

    def test_version(self, monkeypatch, capsys):
        monkeypatch.setattr(sys, "argv", ["mssql-mcp-server", "--version"])

        with pytest.raises(SystemExit) as exc_info:
            server.cli_entry()

        assert exc_info.value.code == 0
        assert server.__version__ in capsys.readouterr().out
