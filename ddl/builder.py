"""
DDL Statement Builder

Turns a validated QualifiedName and column list into T-SQL.

TRUST BOUNDARY
- Schema, table and column names are interpolated into the statement text.
  They MUST have passed ddl.validators first; they are then bracket-quoted.
- Column type fragments ('INT PRIMARY KEY', 'NVARCHAR(255) NOT NULL', ...)
  are interpolated verbatim and are NOT validated here. Their correctness
  (and safety) is the caller's responsibility; SQL Server rejects malformed
  types when the statement runs.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from models import ColumnSpec, QualifiedName
from .identifiers import quote_identifier

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TableStatementPlan:
    """Statements for one create_table call, in execution order"""
    qualified_name: str
    table_statement: str
    schema_statement: Optional[str] = None


def build_create_schema_statement(schema: str) -> str:
    """
    Idempotent schema creation batch.

    CREATE SCHEMA must be the only statement in its batch, hence the EXEC.
    """
    return (
        f"IF NOT EXISTS (SELECT 1 FROM sys.schemas WHERE name = N'{schema}') "
        f"EXEC('CREATE SCHEMA {quote_identifier(schema)}');"
    )


def build_column_definitions(columns: list[ColumnSpec]) -> str:
    """`[name] type` for each column, comma separated, input order"""
    return ", ".join(f"{quote_identifier(col.name)} {col.type}" for col in columns)


def build_create_table_statement(name: QualifiedName, columns: list[ColumnSpec]) -> str:
    return f"CREATE TABLE {name.quoted} ({build_column_definitions(columns)})"


def plan_create_table(name: QualifiedName, columns: list[ColumnSpec]) -> TableStatementPlan:
    """Build every statement needed to create the table"""
    schema_statement = None
    if name.schema_name:
        schema_statement = build_create_schema_statement(name.schema_name)

    plan = TableStatementPlan(
        qualified_name=name.quoted,
        table_statement=build_create_table_statement(name, columns),
        schema_statement=schema_statement,
    )
    logger.debug(f"Planned DDL for {plan.qualified_name}: {plan.table_statement}")
    return plan
