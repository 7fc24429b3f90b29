"""
DDL synthesis for the create_table tool

Parses and validates identifiers, then builds bracket-quoted T-SQL.
"""

from .identifiers import IDENTIFIER_PATTERN, is_valid_identifier, parse_table_name, quote_identifier
from .validators import validate_identifier, validate_columns, validate_request
from .builder import (
    TableStatementPlan,
    build_create_schema_statement,
    build_column_definitions,
    build_create_table_statement,
    plan_create_table,
)

__all__ = [
    'IDENTIFIER_PATTERN',
    'is_valid_identifier',
    'parse_table_name',
    'quote_identifier',
    'validate_identifier',
    'validate_columns',
    'validate_request',
    'TableStatementPlan',
    'build_create_schema_statement',
    'build_column_definitions',
    'build_create_table_statement',
    'plan_create_table',
]
