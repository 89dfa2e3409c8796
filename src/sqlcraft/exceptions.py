"""
Exception hierarchy for sqlcraft.

Contract violations signal programmer error while assembling a statement
tree or misusing the internal metric API. They are not expected to be caught
and retried. Decode failures are per-row and travel through ``Result``
values before failing the enclosing future. Driver errors are never wrapped.
"""

from typing import Optional


class SQLCraftError(Exception):
    """Base exception for all sqlcraft errors."""

    pass


class ContractViolationError(SQLCraftError):
    """Raised when a structurally invalid tree or metric operation is detected."""

    pass


class InsertRowWidthError(ContractViolationError):
    """
    Raised when an INSERT row does not have one value per column.

    Args:
        expected: Number of columns declared on the statement
        actual: Number of values found in the offending row
        row_index: Position of the offending row in the VALUES list
    """

    def __init__(self, expected: int, actual: int, row_index: int):
        self.expected = expected
        self.actual = actual
        self.row_index = row_index
        super().__init__(
            f"INSERT row has {actual} values but {expected} columns were given "
            f"(row_index={row_index})"
        )


class MetricKindMismatchError(ContractViolationError):
    """Raised when metric arithmetic is attempted across different value kinds."""

    pass


class UnsupportedFeatureError(SQLCraftError):
    """
    Raised when a dialect cannot express a feature and the configured policy
    forbids degrading.

    Args:
        feature: Short feature name (e.g. ``multirow_insert``)
        dialect: Name of the dialect in use
    """

    def __init__(self, feature: str, dialect: str):
        self.feature = feature
        self.dialect = dialect
        super().__init__(f"Dialect '{dialect}' does not support {feature}")


class RowDecodingError(SQLCraftError):
    """
    Raised when a result row cannot be decoded into the requested model.

    Args:
        message: Error description
        model: Name of the target model type (optional)
        column: Column name involved in the failure (optional)
    """

    def __init__(
        self,
        message: str,
        model: Optional[str] = None,
        column: Optional[str] = None,
    ):
        self.model = model
        self.column = column

        context_parts = []
        if model:
            context_parts.append(f"model='{model}'")
        if column:
            context_parts.append(f"column='{column}'")

        if context_parts:
            full_message = f"{message} ({', '.join(context_parts)})"
        else:
            full_message = message

        super().__init__(full_message)


class UnknownDialectError(SQLCraftError, KeyError):
    """Raised when a dialect name is not present in the registry."""

    def __init__(self, name: str, available: str):
        self.name = name
        message = f"Unknown dialect '{name}'. Available: {available}"
        self.message = message
        super().__init__(message)

    def __str__(self) -> str:
        return self.message


class DialectProfileError(SQLCraftError):
    """Raised when a dialect profile file cannot be loaded or validated."""

    pass
