"""
Tests for DDL statement synthesis
"""

from ddl.builder import (
    build_column_definitions,
    build_create_schema_statement,
    build_create_table_statement,
    plan_create_table,
)
from models import ColumnSpec, QualifiedName


COLUMNS = [
    ColumnSpec(name="id", type="INT PRIMARY KEY"),
    ColumnSpec(name="email", type="NVARCHAR(255) NOT NULL"),
]


def test_schema_statement_is_conditional():
    assert build_create_schema_statement("app") == (
        "IF NOT EXISTS (SELECT 1 FROM sys.schemas WHERE name = N'app') "
        "EXEC('CREATE SCHEMA [app]');"
    )


def test_column_definitions_keep_input_order():
    assert build_column_definitions(COLUMNS) == "[id] INT PRIMARY KEY, [email] NVARCHAR(255) NOT NULL"


def test_column_type_passed_through_verbatim():
    columns = [ColumnSpec(name="price", type="DECIMAL(10, 2) CHECK (price >= 0)")]
    assert build_column_definitions(columns) == "[price] DECIMAL(10, 2) CHECK (price >= 0)"


def test_create_table_without_schema():
    statement = build_create_table_statement(QualifiedName(table="users"), COLUMNS[:1])
    assert statement == "CREATE TABLE [users] ([id] INT PRIMARY KEY)"


def test_create_table_with_schema():
    statement = build_create_table_statement(QualifiedName(schema_name="app", table="users"), COLUMNS)
    assert statement == "CREATE TABLE [app].[users] ([id] INT PRIMARY KEY, [email] NVARCHAR(255) NOT NULL)"


class TestPlanCreateTable:

    def test_plan_without_schema_has_no_schema_statement(self):
        plan = plan_create_table(QualifiedName(table="users"), COLUMNS[:1])

        assert plan.schema_statement is None
        assert plan.qualified_name == "[users]"
        assert plan.table_statement == "CREATE TABLE [users] ([id] INT PRIMARY KEY)"

    def test_plan_with_schema(self):
        plan = plan_create_table(QualifiedName(schema_name="app", table="users"), COLUMNS[:1])

        assert plan.schema_statement == build_create_schema_statement("app")
        assert plan.qualified_name == "[app].[users]"
        assert plan.table_statement == "CREATE TABLE [app].[users] ([id] INT PRIMARY KEY)"
