"""
Database module data models.
"""

from enum import Enum
from typing import Any, Literal, Optional
from pydantic import BaseModel, Field

from shared.models import JsonDict, OperationResult


class QueryMethod(str, Enum):
    """Statement kind a query builder was created for."""

    SELECT = "select"
    INSERT = "insert"
    UPDATE = "update"
    UPSERT = "upsert"
    DELETE = "delete"


class FilterOperator(str, Enum):
    """Filter operators understood by the query engine."""

    EQ = "eq"
    NEQ = "neq"
    GT = "gt"
    GTE = "gte"
    LT = "lt"
    LTE = "lte"
    LIKE = "like"
    ILIKE = "ilike"
    IN = "in"
    IS = "is"
    CONTAINS = "contains"


CountMethod = Literal["exact", "planned", "estimated"]


class QueryResponse(OperationResult):
    """
    Result of executing a query builder.

    ``data`` is a list of rows, except after single()/maybe_single()
    where it is one row or None.
    """

    data: Any = None
    count: Optional[int] = None


# -----------------------------------------------------------------------------
# Document-store flavour
# -----------------------------------------------------------------------------


class DocumentFilter(BaseModel):
    """One predicate for DocumentStore.query, update and delete."""

    column: str
    operator: FilterOperator = FilterOperator.EQ
    value: Any = None


class DocumentOrder(BaseModel):
    column: str
    ascending: bool = True


class QueryOptions(BaseModel):
    """Filters, ordering and pagination for DocumentStore.query."""

    filters: list[DocumentFilter] = Field(default_factory=list)
    order_by: list[DocumentOrder] = Field(default_factory=list)
    limit: Optional[int] = None
    offset: int = 0


class DocumentResult(OperationResult):
    """Result of a DocumentStore call."""

    data: Any = None
    count: Optional[int] = None


Row = JsonDict
