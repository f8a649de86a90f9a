"""
Database module.

In-memory tables with a chainable, lazily evaluated query builder, plus a
document-store compatibility flavour.

Public API:
- ITableStore: Interface for table access
- TableStore: Emulator implementation
- TableQuery, QueryBuilder: Statement builders
- QueryResponse: Result of execute()
- DocumentStore: First-match document engine
"""

from .interfaces import ITableStore
from .service import TableStore
from .query import QueryBuilder, TableQuery
from .document_store import DocumentStore
from .filters import Filter, OrderSpec
from .models import (
    DocumentFilter,
    DocumentOrder,
    DocumentResult,
    FilterOperator,
    QueryMethod,
    QueryOptions,
    QueryResponse,
)
from .exceptions import (
    InvalidQueryError,
    MultipleRowsFoundError,
    NoMatchingRecordError,
    NoRowsFoundError,
    RecordNotFoundError,
)

__all__ = [
    # Interface
    "ITableStore",
    # Implementation
    "TableStore",
    "TableQuery",
    "QueryBuilder",
    "DocumentStore",
    "Filter",
    "OrderSpec",
    # Models
    "DocumentFilter",
    "DocumentOrder",
    "DocumentResult",
    "FilterOperator",
    "QueryMethod",
    "QueryOptions",
    "QueryResponse",
    # Exceptions
    "InvalidQueryError",
    "MultipleRowsFoundError",
    "NoMatchingRecordError",
    "NoRowsFoundError",
    "RecordNotFoundError",
]
