"""
Identifier Parsing

Splits a requested table name into an optional schema part and a table part.
Accepts plain (`users`), schema-qualified (`app.users`) and bracket-decorated
(`[app].[users]`, `app.[users`) input; all of these normalise to the same
QualifiedName.
"""

import re
from typing import Any

from models import InvalidArgumentError, QualifiedName

# Grammar shared by schema, table and column names. ASCII only: \w would admit
# Unicode letters and digits.
IDENTIFIER_PATTERN = re.compile(r"[A-Za-z_][A-Za-z0-9_]*")


def is_valid_identifier(value: Any) -> bool:
    """True if value matches ^[A-Za-z_][A-Za-z0-9_]*$ exactly"""
    return isinstance(value, str) and IDENTIFIER_PATTERN.fullmatch(value) is not None


def quote_identifier(name: str) -> str:
    """Bracket-quote an identifier that has already passed is_valid_identifier()"""
    return f"[{name}]"


def split_table_name(table_name: str) -> list[str]:
    """
    Normalise and split a raw table name.

    - every `]` is removed
    - the rest is split on `.`
    - each part loses every `[` and surrounding whitespace
    - parts left empty are dropped
    """
    parts = []
    for part in table_name.replace("]", "").split("."):
        part = part.replace("[", "").strip()
        if part:
            parts.append(part)
    return parts


def parse_table_name(table_name: Any) -> QualifiedName:
    """
    Parse `table` or `schema.table` into a QualifiedName.

    Names with three or more parts (database- or server-qualified) are
    rejected rather than truncated.

    Raises:
        InvalidArgumentError: empty input, no usable part, or too many parts
    """
    if not isinstance(table_name, str) or not table_name.strip():
        raise InvalidArgumentError("'tableName' must be a non-empty string")

    parts = split_table_name(table_name)

    if not parts:
        raise InvalidArgumentError(
            f"Invalid table name '{table_name}'. No table name found after removing brackets and dots."
        )
    if len(parts) > 2:
        raise InvalidArgumentError(
            f"Invalid table name '{table_name}'. Use 'table' or 'schema.table'; "
            f"names with {len(parts)} parts are not supported."
        )

    if len(parts) == 2:
        return QualifiedName(schema_name=parts[0], table=parts[1])
    return QualifiedName(table=parts[0])
