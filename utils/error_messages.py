"""
Error Message Utilities

Reduces SQL Server / ODBC driver errors to the server's own message text and
adds a short hint for the failures create_table runs into most often.
"""

import asyncio
import re
from typing import Optional

# Leading "[42S01] [Microsoft][ODBC Driver 18 for SQL Server][SQL Server]" tags
_DRIVER_PREFIX_RE = re.compile(r"^(?:\s*\[[^\]]*\])+\s*")
# Trailing "(2714) (SQLExecDirectW)"; also marks the end of the first message
_NATIVE_SUFFIX_RE = re.compile(r"\s*\((\d+)\)\s*\(SQL\w+\)")
_SQLSTATE_RE = re.compile(r"^[0-9A-Z]{5}$")

# Hints keyed by SQL Server native error number
ERROR_HINTS = {
    102: "Check the column type strings; they are sent to SQL Server verbatim.",
    173: "Check the column type strings; they are sent to SQL Server verbatim.",
    262: "The login needs CREATE TABLE permission in this database.",
    2714: "Choose another table name or drop the existing object first.",
    2715: "Check the column type strings; the data type is not recognised.",
    2760: "The schema does not exist or the login cannot use it.",
    15247: "The login does not have permission to perform this action.",
    18456: "Check DB_USER and DB_PASSWORD.",
}


def parse_database_error(error: BaseException) -> tuple[str, Optional[int]]:
    """
    Split a driver error into (message text, native error number).

    pyodbc errors carry (sqlstate, message) in args; anything else is
    described by str(error).
    """
    if isinstance(error, asyncio.TimeoutError):
        return "Statement timed out waiting for SQL Server.", None

    args = getattr(error, "args", ())
    if not (len(args) >= 2 and isinstance(args[0], str) and isinstance(args[1], str) and _SQLSTATE_RE.match(args[0])):
        # Not a driver error: its text is kept as is
        return str(error) or type(error).__name__, None

    raw = args[1]
    if not raw:
        return type(error).__name__, None

    native = None
    suffix = _NATIVE_SUFFIX_RE.search(raw)
    if suffix:
        native = int(suffix.group(1))
        raw = raw[:suffix.start()]

    text = _DRIVER_PREFIX_RE.sub("", raw).strip()
    return text or raw.strip(), native


def describe_database_error(error: BaseException) -> str:
    """SQL Server message text without driver decoration"""
    text, _ = parse_database_error(error)
    return text


def enhance_error_message(error: BaseException) -> str:
    """
    Describe an execution error and append a hint for known error numbers.

    Returns the described text unchanged when no hint applies.
    """
    text, native = parse_database_error(error)
    hint = ERROR_HINTS.get(native) if native is not None else None
    if hint:
        return f"{text} {hint}"
    return text
