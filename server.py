"""
MCP Server Entry Point for SQL Server DDL tools
Run with: python server.py
"""

import asyncio
import logging
import os
import sys
from typing import Any
from mcp.server.models import InitializationOptions
from mcp.server import NotificationOptions, Server
from mcp.server.stdio import stdio_server
from mcp import types

from database import DatabaseConnection, init_database, close_database
from config import DatabaseConfig

__version__ = "1.0.0"

# Initialize logging (stderr; stdout carries the stdio protocol)
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

# Initialize server
app = Server("mssql-mcp-server")
db: DatabaseConnection = None


@app.list_tools()
async def handle_list_tools() -> list[types.Tool]:
    """
    List available MCP tools.

    - create_table: validated, bracket-quoted CREATE TABLE (and CREATE SCHEMA if missing)
    """
    from tools import get_core_tool_catalog
    return get_core_tool_catalog()


# Arguments are checked by the tool handlers, which report rejections as
# structured results rather than SDK schema errors
@app.call_tool(validate_input=False)
async def handle_call_tool(
    name: str, arguments: dict[str, Any]
) -> list[types.TextContent]:
    """
    Handle tool execution.

    Tool calls are not coordinated with each other; each one checks out its
    own connection from the pool. All tool handlers are organized in the
    handlers/ directory by category.
    """
    try:
        from handlers import dispatch_tool_call
        return await dispatch_tool_call(db, name, arguments)

    except Exception as e:
        logger.error(f"Error executing tool {name}: {e}", exc_info=True)
        from utils.error_messages import enhance_error_message
        return [types.TextContent(
            type="text",
            text=f"Error executing {name}: {enhance_error_message(e)}"
        )]


async def main():
    """Main entry point for MCP server"""
    global db

    try:
        # Load database configuration (environment-aware)
        # Note: config.py handles loading .env.{mode} based on APP_ENV
        config = DatabaseConfig.from_environment()
        env_mode = os.getenv('APP_ENV', 'development')

        db = await init_database(config)

        logger.info("MSSQL MCP Server starting...")
        logger.info(f"Environment: {env_mode}")
        logger.info(f"Connected to database: {config.database} at {config.server}")

        async with stdio_server() as (read_stream, write_stream):
            await app.run(
                read_stream,
                write_stream,
                InitializationOptions(
                    server_name="mssql-mcp-server",
                    server_version=__version__,
                    capabilities=app.get_capabilities(
                        notification_options=NotificationOptions(),
                        experimental_capabilities={}
                    )
                )
            )
    except Exception as e:
        logger.error(f"Failed to start MCP server: {e}", exc_info=True)
        raise
    finally:
        if db:
            await close_database()
            db = None
            logger.info("Database connection closed")


def cli_entry():
    """Entry point for console script - wraps async main()"""
    import argparse

    parser = argparse.ArgumentParser(description="MSSQL MCP Server")
    parser.add_argument('--version', '-v', action='store_true', help='Show version')
    parser.add_argument('--http', action='store_true', help='Run in HTTP mode (Streamable HTTP transport)')
    parser.add_argument('--port', type=int, default=3333, help='Port for HTTP mode (default: 3333)')
    parser.add_argument('--host', type=str, default='127.0.0.1', help='Host for HTTP mode (default: 127.0.0.1)')

    args = parser.parse_args()

    # Handle --version flag
    if args.version:
        print(f"mssql-mcp-server version {__version__}")
        sys.exit(0)

    # Handle --http flag for HTTP server mode (Streamable HTTP per MCP spec)
    if args.http:
        logger.info(f"Starting in HTTP mode (Streamable HTTP) on {args.host}:{args.port}/mcp")
        from transport.http import run_http_server
        run_http_server(host=args.host, port=args.port)
    else:
        # Default: stdio mode
        logger.info("Starting in stdio mode...")
        asyncio.run(main())


if __name__ == "__main__":
    cli_entry()
