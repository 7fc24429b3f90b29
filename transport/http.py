"""
Streamable HTTP transport for MCP (Model Context Protocol).

Implements the MCP Streamable HTTP transport:
- Single /mcp endpoint for all JSON-RPC communication
- POST /mcp: accepts JSON-RPC requests, responds with JSON
- GET /mcp: optional persistent SSE stream for server notifications
- /healthz: health check endpoint (separate from /mcp)

Tool calls go through the same handler registry as the stdio server.
"""

import asyncio
import json
import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request, Response, Header
from fastapi.responses import JSONResponse, StreamingResponse
from fastapi.middleware.cors import CORSMiddleware
from starlette.status import HTTP_202_ACCEPTED, HTTP_400_BAD_REQUEST, HTTP_500_INTERNAL_SERVER_ERROR
import uvicorn

from database import DatabaseConnection, init_database, close_database
from config import DatabaseConfig
from utils.jsonrpc import (
    is_valid_jsonrpc, is_notification,
    create_success_response, create_error_response,
    validate_mcp_protocol_version, JsonRpcError,
    SUPPORTED_PROTOCOL_VERSIONS,
)

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

SERVER_NAME = "mssql-mcp-server"
SERVER_VERSION = "1.0.0"

# Global state (initialized at startup)
db: Optional[DatabaseConnection] = None

# Notification tasks in flight; the event loop only keeps weak references
_background_tasks: set[asyncio.Task] = set()


def _on_background_task_done(task: asyncio.Task):
    _background_tasks.discard(task)
    if not task.cancelled() and task.exception() is not None:
        logger.error(f"Notification handler failed: {task.exception()}", exc_info=task.exception())


def schedule_notification(request_data: dict) -> asyncio.Task:
    """Handle a JSON-RPC notification in the background"""
    task = asyncio.create_task(handle_mcp_request(request_data))
    _background_tasks.add(task)
    task.add_done_callback(_on_background_task_done)
    return task


async def initialize_server():
    """Initialize the database pool"""
    global db

    config = DatabaseConfig.from_environment()
    db = await init_database(config)

    logger.info(f"Connected to database: {config.database} at {config.server}")


async def shutdown_server():
    """Cleanup on shutdown"""
    global db
    if db:
        await close_database()
        db = None
        logger.info("Database connection closed")


@asynccontextmanager
async def lifespan(_app: FastAPI):
    await initialize_server()
    try:
        yield
    finally:
        await shutdown_server()


app = FastAPI(title="MSSQL MCP Server - Streamable HTTP", lifespan=lifespan)

# CORS middleware handles OPTIONS preflight requests
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Allow all origins (adjust for production)
    allow_credentials=True,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["*"],
    expose_headers=["MCP-Protocol-Version"],
)


async def get_tools_list() -> list:
    """Get list of available MCP tools as JSON-ready dicts"""
    from tools import get_core_tool_catalog

    return [
        {
            "name": tool.name,
            "description": tool.description,
            "inputSchema": tool.inputSchema
        }
        for tool in get_core_tool_catalog()
    ]


async def handle_mcp_request(request_data: dict) -> Optional[dict]:
    """
    Handle a single MCP JSON-RPC request.
    Routes to appropriate handler based on method.

    Returns JSON-RPC response dict, or None for notifications.
    """
    from handlers import dispatch_tool_call

    method = request_data.get("method")
    params = request_data.get("params") or {}
    request_id = request_data.get("id")

    try:
        if method == "initialize":
            requested = params.get("protocolVersion")
            result = {
                "protocolVersion": requested if requested in SUPPORTED_PROTOCOL_VERSIONS else SUPPORTED_PROTOCOL_VERSIONS[0],
                "capabilities": {
                    "tools": {}
                },
                "serverInfo": {
                    "name": SERVER_NAME,
                    "version": SERVER_VERSION
                }
            }
            return create_success_response(request_id, result)

        elif method == "ping":
            return create_success_response(request_id, {})

        elif method == "tools/list":
            tools = await get_tools_list()
            return create_success_response(request_id, {"tools": tools})

        elif method == "tools/call":
            tool_name = params.get("name")
            tool_args = params.get("arguments") or {}

            if not tool_name:
                return create_error_response(
                    request_id, JsonRpcError.INVALID_PARAMS, "Missing tool name"
                )

            logger.info(f"[TOOL_CALL] {tool_name}")
            result = await dispatch_tool_call(db, tool_name, tool_args)

            content_list = [{"type": item.type, "text": item.text} for item in result]
            return create_success_response(request_id, {"content": content_list})

        elif method == "notifications/initialized":
            # Client notification that it's ready - no response needed
            return None

        else:
            return create_error_response(
                request_id, JsonRpcError.METHOD_NOT_FOUND, f"Unknown method: {method}"
            )

    except Exception as e:
        logger.error(f"Error handling method {method}: {e}", exc_info=True)
        return create_error_response(
            request_id, JsonRpcError.INTERNAL_ERROR, str(e)
        )


@app.post("/mcp")
async def mcp_post_endpoint(
    request: Request,
    mcp_protocol_version: Optional[str] = Header(None, alias="MCP-Protocol-Version")
):
    """
    POST /mcp - Main MCP endpoint for JSON-RPC requests.

    Returns:
    - 202 Accepted (for notifications - no response body)
    - 200 OK with Content-Type: application/json
    - 400 for malformed JSON, malformed JSON-RPC or an unsupported protocol version
    """
    if mcp_protocol_version and not validate_mcp_protocol_version(mcp_protocol_version):
        return JSONResponse(
            status_code=HTTP_400_BAD_REQUEST,
            content=create_error_response(
                None, JsonRpcError.INVALID_REQUEST,
                f"Unsupported MCP protocol version: {mcp_protocol_version}"
            )
        )

    try:
        body = await request.json()
    except json.JSONDecodeError as e:
        return JSONResponse(
            status_code=HTTP_400_BAD_REQUEST,
            content=create_error_response(
                None, JsonRpcError.PARSE_ERROR, f"Invalid JSON: {str(e)}"
            )
        )

    if not is_valid_jsonrpc(body):
        request_id = body.get("id") if isinstance(body, dict) else None
        return JSONResponse(
            status_code=HTTP_400_BAD_REQUEST,
            content=create_error_response(
                request_id, JsonRpcError.INVALID_REQUEST, "Invalid JSON-RPC request"
            )
        )

    if is_notification(body):
        # Handle notification asynchronously, return 202 immediately
        schedule_notification(body)
        return Response(status_code=HTTP_202_ACCEPTED)

    response = await handle_mcp_request(body)

    if response is None:
        return Response(status_code=HTTP_202_ACCEPTED)

    return JSONResponse(content=response)


@app.get("/mcp")
async def mcp_get_endpoint():
    """
    GET /mcp - Optional persistent SSE stream for server-initiated notifications.

    The server sends no notifications yet; the stream only carries keepalives.
    """
    async def event_generator():
        while True:
            yield ": keepalive\n\n"
            await asyncio.sleep(30)

    return StreamingResponse(
        event_generator(),
        media_type="text/event-stream",
        headers={
            "Cache-Control": "no-cache",
            "Connection": "keep-alive"
        }
    )


@app.get("/healthz")
async def health_check():
    """Health check endpoint (separate from /mcp)"""
    if db is None or db.pool is None:
        return JSONResponse(
            status_code=HTTP_500_INTERNAL_SERVER_ERROR,
            content={"status": "unhealthy", "error": "Database not initialized"}
        )

    if await db.check_connection():
        return JSONResponse(content={
            "status": "healthy",
            "database": "connected",
            "pool": await db.get_pool_stats()
        })

    return JSONResponse(
        status_code=HTTP_500_INTERNAL_SERVER_ERROR,
        content={"status": "unhealthy", "error": "Database check failed"}
    )


def run_http_server(host: str = "127.0.0.1", port: int = 3333):
    """
    Run the MCP server with Streamable HTTP transport.

    Args:
        host: Host to bind to
        port: Port to listen on
    """
    logger.info(f"MSSQL MCP Server (HTTP) starting on http://{host}:{port}/mcp")
    uvicorn.run(app, host=host, port=port, log_level="info")
