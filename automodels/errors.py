"""Error types for automodels."""

from typing import Any, Dict, Optional


class AutoModelsError(Exception):
    """Base exception for automodels errors."""

    def __init__(self, message: str, code: str = "AUTOMODELS_ERROR", details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.code = code
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        """Convert error to a plain dictionary (used by the CLI JSON output)."""
        return {
            "code": self.code,
            "message": self.message,
            "details": self.details,
        }


class UnsupportedDriverError(AutoModelsError):
    """No Schema implementation is registered for a connection's driver type."""

    def __init__(self, driver: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(
            f"There is no Schema registered for [{driver}] connections.",
            code="UNSUPPORTED_DRIVER",
            details={"driver": driver, **(details or {})},
        )
        self.driver = driver


class ConnectivityError(AutoModelsError):
    """A call to the underlying database driver failed."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, code="CONNECTIVITY_ERROR", details=details)


class MalformedTypeError(AutoModelsError):
    """A column's raw type string could not be tokenized."""

    def __init__(self, column: Optional[str], raw_type: Any, reason: str = ""):
        message = f"Cannot parse type [{raw_type}] of column [{column}]"
        if reason:
            message += f": {reason}"
        super().__init__(
            message,
            code="MALFORMED_TYPE",
            details={"column": column, "type": raw_type},
        )
        self.column = column
        self.raw_type = raw_type


class MalformedForeignKeyError(AutoModelsError):
    """A foreign key's local and referenced column lists do not line up."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, code="MALFORMED_FOREIGN_KEY", details=details)


class DuplicateColumnError(AutoModelsError):
    """A column name was added twice to the same table."""

    def __init__(self, table: str, column: str):
        super().__init__(
            f"Column [{column}] is declared twice on table [{table}]",
            code="DUPLICATE_COLUMN",
            details={"table": table, "column": column},
        )


class UnknownTableError(AutoModelsError, LookupError):
    """The requested table does not belong to the schema."""

    def __init__(self, schema: str, table: str):
        super().__init__(
            f"Table [{table}] does not belong to schema [{schema}]",
            code="UNKNOWN_TABLE",
            details={"schema": schema, "table": table},
        )
        self.schema = schema
        self.table = table


class UnknownColumnError(AutoModelsError, LookupError):
    """The requested column does not belong to the table."""

    def __init__(self, table: str, column: str):
        super().__init__(
            f"Column [{column}] does not belong to table [{table}]",
            code="UNKNOWN_COLUMN",
            details={"table": table, "column": column},
        )
        self.table = table
        self.column = column
