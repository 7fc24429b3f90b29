"""
Database connection management and utilities
Async SQL Server operations using aioodbc (pyodbc underneath)
"""

import asyncio
import logging
from typing import Optional, List, Dict, Any, Protocol
from contextlib import asynccontextmanager

from config import DatabaseConfig

logger = logging.getLogger(__name__)


class DatabaseSession(Protocol):
    """
    The two calls create_table needs from the database.

    Implementations run on an already-open, authenticated connection and own
    timeouts; callers never retry.
    """

    async def execute_batch(self, statement: str) -> int:
        """Run a statement that returns no rows; returns the affected row count"""
        ...

    async def execute_query(self, statement: str) -> List[Dict[str, Any]]:
        """Run a statement that may return rows"""
        ...


class ConnectionSession:
    """
    DatabaseSession bound to one pooled connection.

    Statements issued through one session run on the same connection, in
    call order. A statement that outlives command_timeout closes the
    connection, so the pool discards it instead of handing a connection with
    a statement still running to the next request.
    """

    def __init__(self, connection, command_timeout: Optional[float] = None):
        self.connection = connection
        self.command_timeout = command_timeout

    async def _with_timeout(self, statement: str, fetch: bool):
        try:
            return await asyncio.wait_for(self._run(statement, fetch), timeout=self.command_timeout)
        except asyncio.TimeoutError:
            logger.warning(f"Statement exceeded {self.command_timeout}s, closing its connection")
            try:
                await self.connection.close()
            except Exception as e:
                logger.error(f"Error closing timed-out connection: {e}", exc_info=True)
            raise

    async def _run(self, statement: str, fetch: bool):
        async with self.connection.cursor() as cursor:
            await cursor.execute(statement)
            if fetch and cursor.description is not None:
                columns = [col[0] for col in cursor.description]
                rows = await cursor.fetchall()
                return [dict(zip(columns, row)) for row in rows]
            if fetch:
                return []
            return cursor.rowcount

    async def execute_batch(self, statement: str) -> int:
        return await self._with_timeout(statement, fetch=False)

    async def execute_query(self, statement: str) -> List[Dict[str, Any]]:
        return await self._with_timeout(statement, fetch=True)


class DatabaseConnection:
    """
    Manages the SQL Server connection pool and provides database operations
    """

    def __init__(self, config: DatabaseConfig):
        self.config = config
        self.pool = None  # aioodbc.Pool once connected

    async def connect(self):
        """Initialize connection pool"""
        if self.pool is not None:
            logger.warning("Connection pool already initialized")
            return

        # Imported here: pyodbc needs the unixODBC driver manager at import
        # time, and nothing but the pool itself depends on it
        import aioodbc

        try:
            # autocommit: each DDL statement commits on its own, there is no
            # enclosing transaction to roll back
            self.pool = await aioodbc.create_pool(
                dsn=self.config.odbc_connection_string,
                minsize=self.config.min_pool_size,
                maxsize=self.config.max_pool_size,
                autocommit=True,
                timeout=self.config.connect_timeout,
                after_created=self._apply_query_timeout,
            )

            logger.info(f"✅ Connected to SQL Server at {self.config.server}:{self.config.port}")

        except Exception as e:
            logger.error(f"❌ Failed to connect to database: {e}")
            raise

    async def _apply_query_timeout(self, raw_connection):
        """
        Called with each new pyodbc connection: SQL Server cancels statements
        running longer than command_timeout on its side as well.
        """
        raw_connection.timeout = self.config.command_timeout

    async def disconnect(self):
        """Close connection pool"""
        if self.pool is not None:
            self.pool.close()
            await self.pool.wait_closed()
            self.pool = None
            logger.info("Database connection pool closed")

    @asynccontextmanager
    async def acquire(self):
        """
        Acquire a connection from the pool with automatic error handling.

        Usage:
            async with db.acquire() as conn:
                async with conn.cursor() as cur:
                    await cur.execute("SELECT 1")

        The connection goes back to the pool even if an exception occurs.
        """
        if self.pool is None:
            raise RuntimeError("Database not connected. Call connect() first.")

        async with self.pool.acquire() as connection:
            try:
                yield connection
            except Exception as e:
                # Log the error but let it propagate
                logger.error(f"Error during database operation: {e}", exc_info=True)
                raise

    @asynccontextmanager
    async def session(self):
        """
        Request-scoped DatabaseSession on a single pooled connection.

        Usage:
            async with db.session() as session:
                await session.execute_batch("...")
                await session.execute_query("...")
        """
        async with self.acquire() as connection:
            yield ConnectionSession(connection, command_timeout=self.config.command_timeout)

    async def execute_batch(self, statement: str) -> int:
        """
        Execute a statement that returns no rows

        Args:
            statement: T-SQL batch

        Returns:
            Affected row count (-1 for DDL)
        """
        async with self.session() as session:
            return await session.execute_batch(statement)

    async def execute_query(self, statement: str) -> List[Dict[str, Any]]:
        """
        Execute a statement and fetch any rows it returns

        Args:
            statement: T-SQL query

        Returns:
            List of rows as dicts (empty when the statement returns no result set)
        """
        async with self.session() as session:
            return await session.execute_query(statement)

    async def check_connection(self) -> bool:
        """
        Check if database connection is healthy

        Returns:
            True if connection is healthy
        """
        try:
            rows = await self.execute_query("SELECT 1 AS ok")
            return bool(rows) and rows[0].get("ok") == 1
        except Exception as e:
            logger.error(f"Connection check failed: {e}")
            return False

    async def get_pool_stats(self) -> Dict[str, Any]:
        """
        Get connection pool statistics for monitoring.

        Returns:
            Dictionary with pool stats (size, free connections, etc.)
        """
        if self.pool is None:
            return {
                'status': 'disconnected',
                'size': 0,
                'freesize': 0
            }

        return {
            'status': 'connected',
            'size': self.pool.size,
            'freesize': self.pool.freesize,
            'min_size': self.config.min_pool_size,
            'max_size': self.config.max_pool_size
        }


# Singleton instance
_db_instance: Optional[DatabaseConnection] = None


def get_database(config: Optional[DatabaseConfig] = None) -> DatabaseConnection:
    """
    Get or create database connection instance

    Args:
        config: Database configuration (uses environment if not provided)

    Returns:
        DatabaseConnection instance
    """
    global _db_instance

    if _db_instance is None:
        if config is None:
            config = DatabaseConfig.from_environment()
        _db_instance = DatabaseConnection(config)

    return _db_instance


async def init_database(config: Optional[DatabaseConfig] = None):
    """
    Initialize database connection

    Args:
        config: Database configuration (uses environment if not provided)
    """
    db = get_database(config)
    await db.connect()
    return db


async def close_database():
    """Close database connection"""
    global _db_instance

    if _db_instance is not None:
        await _db_instance.disconnect()
        _db_instance = None
