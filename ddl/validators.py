"""
Input Validators

Validates create_table input before any SQL is built. Schema, table and
column names cannot be bound as parameters in DDL, so this grammar check is
the only thing standing between the request and string interpolation.

The first violation aborts the request; the error names the offending part
and value.
"""

from typing import Any

from models import ColumnSpec, InvalidArgumentError, QualifiedName, TableCreationRequest
from .identifiers import is_valid_identifier, parse_table_name

IDENTIFIER_RULE = "Use letters, digits and underscores, starting with a letter or underscore."


def validate_identifier(value: Any, part: str) -> str:
    """
    Check one identifier against the grammar.

    Args:
        value: Candidate name
        part: 'schema', 'table' or 'column' (used in the error message)

    Returns:
        The identifier, unchanged
    """
    if not is_valid_identifier(value):
        raise InvalidArgumentError(f"Invalid {part} name '{value}'. {IDENTIFIER_RULE}")
    return value


def validate_columns(columns: Any) -> list[ColumnSpec]:
    """Validate column descriptors in request order"""
    if not isinstance(columns, list) or not columns:
        raise InvalidArgumentError("'columns' must be a non-empty array")

    validated = []
    for column in columns:
        if not isinstance(column, dict):
            raise InvalidArgumentError(f"Invalid column definition '{column}'. Expected an object with 'name' and 'type'.")

        name = validate_identifier(column.get("name"), "column")

        # The type fragment is passed through verbatim; only its presence is checked
        col_type = column.get("type")
        if not isinstance(col_type, str) or not col_type.strip():
            raise InvalidArgumentError(f"Column '{name}' is missing a valid type string.")

        validated.append(ColumnSpec(name=name, type=col_type))

    return validated


def validate_request(arguments: dict[str, Any]) -> tuple[QualifiedName, TableCreationRequest]:
    """
    Validate the full create_table input.

    Order: tableName presence, columns presence, name parsing, schema part,
    table part, then each column.
    """
    if not isinstance(arguments, dict):
        raise InvalidArgumentError("Arguments must be an object with 'tableName' and 'columns'")

    table_name = arguments.get("tableName")
    if not isinstance(table_name, str) or not table_name.strip():
        raise InvalidArgumentError("'tableName' must be a non-empty string")

    columns = arguments.get("columns")
    if not isinstance(columns, list) or not columns:
        raise InvalidArgumentError("'columns' must be a non-empty array")

    name = parse_table_name(table_name)
    if name.schema_name is not None:
        validate_identifier(name.schema_name, "schema")
    validate_identifier(name.table, "table")

    request = TableCreationRequest(tableName=table_name, columns=validate_columns(columns))
    return name, request
