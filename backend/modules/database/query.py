"""
Chainable query builder.

Builders only accumulate predicates and modifiers; nothing touches the
table until ``await builder.execute()``. This lets callers attach filters
across several statements before running the query:

    query = client.from_("todos").select("*").eq("user_id", uid)
    if only_open:
        query = query.is_("completed_at", None)
    response = await query.order("created_at", desc=True).limit(20).execute()
"""

from typing import TYPE_CHECKING, Any, Optional, Union

from .filters import Filter, OrderSpec
from .models import CountMethod, FilterOperator, QueryMethod, QueryResponse, Row

if TYPE_CHECKING:
    from .service import TableStore


class QueryBuilder:
    """Accumulated state of one statement against one table."""

    def __init__(
        self,
        store: "TableStore",
        table: str,
        method: QueryMethod,
        *,
        columns: str = "*",
        values: Optional[Union[Row, list[Row]]] = None,
        count: Optional[CountMethod] = None,
        on_conflict: str = "id",
        ignore_duplicates: bool = False,
    ):
        self._store = store
        self.table = table
        self.method = method
        self.columns = columns
        self.values = values
        self.count = count
        self.on_conflict = on_conflict
        self.ignore_duplicates = ignore_duplicates

        self.filters: list[Filter] = []
        self.orders: list[OrderSpec] = []
        self.limit_count: Optional[int] = None
        self.range_bounds: Optional[tuple[int, int]] = None
        self.single_mode: Optional[str] = None

    def __repr__(self) -> str:
        return f"<QueryBuilder {self.method.value} {self.table} filters={len(self.filters)}>"

    def _add(self, column: str, operator: FilterOperator, value: Any) -> "QueryBuilder":
        self.filters.append(Filter(column, operator, value))
        return self

    # Filters

    def eq(self, column: str, value: Any) -> "QueryBuilder":
        return self._add(column, FilterOperator.EQ, value)

    def neq(self, column: str, value: Any) -> "QueryBuilder":
        return self._add(column, FilterOperator.NEQ, value)

    def gt(self, column: str, value: Any) -> "QueryBuilder":
        return self._add(column, FilterOperator.GT, value)

    def gte(self, column: str, value: Any) -> "QueryBuilder":
        return self._add(column, FilterOperator.GTE, value)

    def lt(self, column: str, value: Any) -> "QueryBuilder":
        return self._add(column, FilterOperator.LT, value)

    def lte(self, column: str, value: Any) -> "QueryBuilder":
        return self._add(column, FilterOperator.LTE, value)

    def like(self, column: str, pattern: str) -> "QueryBuilder":
        return self._add(column, FilterOperator.LIKE, pattern)

    def ilike(self, column: str, pattern: str) -> "QueryBuilder":
        return self._add(column, FilterOperator.ILIKE, pattern)

    def in_(self, column: str, values: list[Any]) -> "QueryBuilder":
        return self._add(column, FilterOperator.IN, list(values))

    def is_(self, column: str, value: Optional[bool]) -> "QueryBuilder":
        return self._add(column, FilterOperator.IS, value)

    def contains(self, column: str, value: Any) -> "QueryBuilder":
        return self._add(column, FilterOperator.CONTAINS, value)

    def match(self, query: dict[str, Any]) -> "QueryBuilder":
        """Shorthand for one eq() per key."""
        for column, value in query.items():
            self.eq(column, value)
        return self

    # Modifiers

    def order(
        self,
        column: str,
        *,
        desc: bool = False,
        nulls_first: Optional[bool] = None,
    ) -> "QueryBuilder":
        """Add a sort key. Repeated calls sort by each key in call order."""
        self.orders.append(OrderSpec(column, desc, nulls_first))
        return self

    def limit(self, count: int) -> "QueryBuilder":
        self.limit_count = count
        return self

    def range(self, start: int, end: int) -> "QueryBuilder":
        """Inclusive row bounds; takes precedence over limit()."""
        self.range_bounds = (start, end)
        return self

    def single(self) -> "QueryBuilder":
        """Expect exactly one row; data becomes that row."""
        self.single_mode = "single"
        return self

    def maybe_single(self) -> "QueryBuilder":
        """Expect zero or one row; data becomes that row or None."""
        self.single_mode = "maybe_single"
        return self

    async def execute(self) -> QueryResponse:
        return await self._store.execute(self)


class TableQuery:
    """Entry point returned by ``client.from_(table)``."""

    def __init__(self, store: "TableStore", table: str):
        self._store = store
        self.table = table

    def select(self, columns: str = "*", *, count: Optional[CountMethod] = None) -> QueryBuilder:
        return QueryBuilder(self._store, self.table, QueryMethod.SELECT, columns=columns, count=count)

    def insert(self, values: Union[Row, list[Row]], *, count: Optional[CountMethod] = None) -> QueryBuilder:
        return QueryBuilder(self._store, self.table, QueryMethod.INSERT, values=values, count=count)

    def update(self, values: Row, *, count: Optional[CountMethod] = None) -> QueryBuilder:
        return QueryBuilder(self._store, self.table, QueryMethod.UPDATE, values=values, count=count)

    def upsert(
        self,
        values: Union[Row, list[Row]],
        *,
        on_conflict: str = "id",
        ignore_duplicates: bool = False,
        count: Optional[CountMethod] = None,
    ) -> QueryBuilder:
        return QueryBuilder(
            self._store,
            self.table,
            QueryMethod.UPSERT,
            values=values,
            count=count,
            on_conflict=on_conflict,
            ignore_duplicates=ignore_duplicates,
        )

    def delete(self, *, count: Optional[CountMethod] = None) -> QueryBuilder:
        return QueryBuilder(self._store, self.table, QueryMethod.DELETE, count=count)
