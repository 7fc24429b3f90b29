"""
Table Handlers
Handles: create_table
"""

import json
import logging
from typing import Any

from mcp import types

from database import DatabaseSession
from ddl import TableStatementPlan, plan_create_table, validate_request
from models import ErrorKind, InvalidArgumentError, ToolResult
from utils.error_messages import enhance_error_message

logger = logging.getLogger(__name__)


def prepare_create_table(arguments: dict[str, Any]) -> TableStatementPlan:
    """Validate create_table input and build its statements (raises InvalidArgumentError)"""
    name, request = validate_request(arguments)
    return plan_create_table(name, request.columns)


def reject(error: InvalidArgumentError) -> ToolResult:
    logger.warning(f"🚫 create_table rejected: {error}")
    return ToolResult.failed(ErrorKind.INVALID_ARGUMENT, str(error))


async def execute_create_table(session: DatabaseSession, plan: TableStatementPlan) -> ToolResult:
    """
    Run a prepared plan: schema batch first (if any), then CREATE TABLE.

    Statements run strictly in order. A failure stops the pipeline and is not
    retried; a schema created just before a failed CREATE TABLE stays.
    """
    schema_created = False

    try:
        if plan.schema_statement:
            schema_created = True
            await session.execute_batch(plan.schema_statement)

        await session.execute_query(plan.table_statement)

    except Exception as e:
        logger.error(f"❌ Error creating table {plan.qualified_name}: {e}", exc_info=True)
        return ToolResult.failed(ErrorKind.EXECUTION_FAILURE, enhance_error_message(e), schema_created)

    logger.info(f"✅ Created table {plan.qualified_name}")
    return ToolResult.created(plan.qualified_name, schema_created)


async def create_table(session: DatabaseSession, arguments: dict[str, Any]) -> ToolResult:
    """
    Validate the request, create the schema if needed, then create the table.

    Never raises: every failure becomes a ToolResult with success=False.
    Invalid input is rejected before the session is touched.
    """
    try:
        plan = prepare_create_table(arguments)
    except InvalidArgumentError as e:
        return reject(e)

    return await execute_create_table(session, plan)


async def handle_create_table(db, arguments: dict[str, Any]) -> list[types.TextContent]:
    """
    MCP entry point for create_table.

    Validates first, then runs both statements on one request-scoped session
    from the pool. Invalid input never checks out a connection.
    """
    try:
        plan = prepare_create_table(arguments)
    except InvalidArgumentError as e:
        result = reject(e)
    else:
        try:
            async with db.session() as session:
                result = await execute_create_table(session, plan)
        except Exception as e:
            # Database not connected, pool exhausted, login failed...
            logger.error(f"❌ Could not open a database session: {e}", exc_info=True)
            result = ToolResult.failed(ErrorKind.EXECUTION_FAILURE, enhance_error_message(e))

    return [types.TextContent(
        type="text",
        text=json.dumps(result.to_payload(), indent=2)
    )]
