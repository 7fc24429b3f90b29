"""
Tests for the Streamable HTTP transport's JSON-RPC routing

handle_mcp_request is exercised directly with a stub database, so no server
socket or SQL Server is involved.
"""

import asyncio
import json

import pytest

import transport.http as http_transport
from utils.jsonrpc import JsonRpcError, create_error_response, is_notification, is_valid_jsonrpc
from tests.stubs import StubDatabase


@pytest.fixture
def http_db(monkeypatch):
    db = StubDatabase()
    monkeypatch.setattr(http_transport, "db", db)
    return db


class TestHandleMcpRequest:

    @pytest.mark.asyncio
    async def test_initialize(self, http_db):
        response = await http_transport.handle_mcp_request({
            "jsonrpc": "2.0", "id": 1, "method": "initialize",
            "params": {"protocolVersion": "2025-03-26"},
        })

        assert response["id"] == 1
        assert response["result"]["protocolVersion"] == "2025-03-26"
        assert response["result"]["serverInfo"]["name"] == "mssql-mcp-server"

    @pytest.mark.asyncio
    async def test_initialize_unknown_version_gets_default(self, http_db):
        response = await http_transport.handle_mcp_request({
            "jsonrpc": "2.0", "id": 1, "method": "initialize",
            "params": {"protocolVersion": "1999-01-01"},
        })

        assert response["result"]["protocolVersion"] == "2024-11-05"

    @pytest.mark.asyncio
    async def test_tools_list(self, http_db):
        response = await http_transport.handle_mcp_request({"jsonrpc": "2.0", "id": 2, "method": "tools/list"})

        tools = response["result"]["tools"]
        assert [tool["name"] for tool in tools] == ["create_table"]
        assert "inputSchema" in tools[0]

    @pytest.mark.asyncio
    async def test_tools_call_create_table(self, http_db):
        response = await http_transport.handle_mcp_request({
            "jsonrpc": "2.0", "id": 3, "method": "tools/call",
            "params": {
                "name": "create_table",
                "arguments": {"tableName": "app.users", "columns": [{"name": "id", "type": "INT"}]},
            },
        })

        content = response["result"]["content"]
        assert content[0]["type"] == "text"
        assert json.loads(content[0]["text"]) == {
            "success": True,
            "message": "Table '[app].[users]' created successfully.",
            "schemaCreated": True,
        }
        assert len(http_db.stub_session.calls) == 2

    @pytest.mark.asyncio
    async def test_tools_call_without_name(self, http_db):
        response = await http_transport.handle_mcp_request({
            "jsonrpc": "2.0", "id": 4, "method": "tools/call", "params": {},
        })

        assert response["error"]["code"] == JsonRpcError.INVALID_PARAMS

    @pytest.mark.asyncio
    async def test_unknown_method(self, http_db):
        response = await http_transport.handle_mcp_request({"jsonrpc": "2.0", "id": 5, "method": "resources/list"})

        assert response["error"]["code"] == JsonRpcError.METHOD_NOT_FOUND

    @pytest.mark.asyncio
    async def test_initialized_notification_has_no_response(self, http_db):
        assert await http_transport.handle_mcp_request({"jsonrpc": "2.0", "method": "notifications/initialized"}) is None


class TestNotifications:

    @pytest.mark.asyncio
    async def test_notification_task_tracked_until_done(self, http_db):
        task = http_transport.schedule_notification({"jsonrpc": "2.0", "method": "notifications/initialized"})

        assert task in http_transport._background_tasks
        assert await task is None
        await asyncio.sleep(0)
        assert task not in http_transport._background_tasks


class TestJsonRpcHelpers:

    def test_is_valid_jsonrpc(self):
        assert is_valid_jsonrpc({"jsonrpc": "2.0", "method": "ping", "id": 1})
        assert not is_valid_jsonrpc({"jsonrpc": "1.0", "method": "ping"})
        assert not is_valid_jsonrpc({"jsonrpc": "2.0"})
        assert not is_valid_jsonrpc(["not", "a", "dict"])

    def test_is_notification(self):
        assert is_notification({"jsonrpc": "2.0", "method": "notifications/initialized"})
        assert not is_notification({"jsonrpc": "2.0", "method": "ping", "id": 0})

    def test_error_response_data_is_optional(self):
        assert "data" not in create_error_response(1, JsonRpcError.INTERNAL_ERROR, "boom")["error"]
        assert create_error_response(1, JsonRpcError.INTERNAL_ERROR, "boom", data={"x": 1})["error"]["data"] == {"x": 1}
