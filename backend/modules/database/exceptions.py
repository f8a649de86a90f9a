"""
Database module exceptions.
"""

from shared.exceptions import NotFoundError, ValidationError


class NoRowsFoundError(NotFoundError):
    """Raised when single() matches zero rows."""

    def __init__(self, table: str):
        super().__init__(
            "No rows found",
            code="NO_ROWS",
            details={"table": table},
        )


class MultipleRowsFoundError(ValidationError):
    """Raised when single() or maybe_single() matches more than one row."""

    def __init__(self, table: str, count: int):
        super().__init__(
            "Multiple rows found",
            code="MULTIPLE_ROWS",
            details={"table": table, "count": count},
        )


class RecordNotFoundError(NotFoundError):
    """Raised by the document store when a get() id is unknown."""

    def __init__(self, table: str, record_id: str):
        super().__init__(
            "Record not found",
            code="RECORD_NOT_FOUND",
            details={"table": table, "id": record_id},
        )


class NoMatchingRecordError(NotFoundError):
    """Raised by the document store when update()/delete() match nothing."""

    def __init__(self, table: str):
        super().__init__(
            "No matching record found",
            code="NO_MATCHING_RECORD",
            details={"table": table},
        )


class InvalidQueryError(ValidationError):
    """Raised when a builder is used with an incompatible statement."""

    def __init__(self, message: str, table: str):
        super().__init__(message, code="INVALID_QUERY", details={"table": table})
