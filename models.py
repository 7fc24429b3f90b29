"""
Data models for the create_table tool
Using Pydantic for validation and serialization

Every model lives for a single tool invocation; nothing here is persisted.
"""

from enum import Enum
from typing import Optional, List
from pydantic import BaseModel, ConfigDict, Field


# ============================================================================
# Errors
# ============================================================================

class ErrorKind(str, Enum):
    """Failure classes reported back to the calling agent"""
    INVALID_ARGUMENT = "InvalidArgument"     # Rejected locally, before any database call
    EXECUTION_FAILURE = "ExecutionFailure"   # Raised by the database session


class InvalidArgumentError(ValueError):
    """A request value failed validation (missing field or malformed identifier)"""


# ============================================================================
# Request
# ============================================================================

class ColumnSpec(BaseModel):
    """A column definition: validated name plus an opaque SQL type fragment"""
    model_config = ConfigDict(frozen=True)

    name: str
    type: str = Field(..., description="SQL type and constraints, e.g. 'NVARCHAR(255) NOT NULL'")


class TableCreationRequest(BaseModel):
    """Validated create_table input"""
    model_config = ConfigDict(frozen=True)

    tableName: str
    columns: List[ColumnSpec]


class QualifiedName(BaseModel):
    """Table name split into an optional schema part and a required table part"""
    model_config = ConfigDict(frozen=True)

    schema_name: Optional[str] = None
    table: str = Field(..., min_length=1)

    @property
    def quoted(self) -> str:
        """Bracket-quoted name, safe to interpolate once both parts are validated"""
        if self.schema_name:
            return f"[{self.schema_name}].[{self.table}]"
        return f"[{self.table}]"


# ============================================================================
# Result
# ============================================================================

class ToolError(BaseModel):
    """Structured error value: a kind for callers, a detail for humans"""
    model_config = ConfigDict(frozen=True)

    kind: ErrorKind
    detail: str


class ToolResult(BaseModel):
    """create_table outcome returned across the tool boundary"""
    model_config = ConfigDict(frozen=True)

    success: bool
    message: str
    schemaCreated: bool = False
    error: Optional[ToolError] = None

    @classmethod
    def created(cls, qualified_name: str, schema_created: bool) -> "ToolResult":
        return cls(
            success=True,
            message=f"Table '{qualified_name}' created successfully.",
            schemaCreated=schema_created,
        )

    @classmethod
    def failed(cls, kind: ErrorKind, detail: str, schema_created: bool = False) -> "ToolResult":
        return cls(
            success=False,
            message=f"Failed to create table: {detail}",
            schemaCreated=schema_created,
            error=ToolError(kind=kind, detail=detail),
        )

    def to_payload(self) -> dict:
        """JSON-ready dict; the error field is omitted on success"""
        return self.model_dump(mode="json", exclude_none=True)
