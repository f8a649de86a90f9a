"""
Query engine implementation.

Tables are in-memory maps of row id -> row, persisted as one JSON
document after every mutation. Statements are built with TableQuery /
QueryBuilder and evaluated here.
"""

import asyncio
import logging
from typing import Any, Optional

from shared.config import Settings, get_settings
from shared.faults import FaultInjector
from shared.ids import generate_id
from shared.latency import READ_DELAY_MS, WRITE_DELAY_MS, Latency
from shared.models import utc_now_iso
from shared.persistence import EmulatorPersistence

from .exceptions import InvalidQueryError, MultipleRowsFoundError, NoRowsFoundError
from .filters import apply_filters, paginate, parse_columns, project, sort_rows, values_equal
from .models import QueryMethod, QueryResponse, Row
from .query import QueryBuilder, TableQuery

logger = logging.getLogger(__name__)


class TableStore:
    """
    In-memory tables with a lazy query pipeline.

    update() and delete() affect every matching row.
    """

    def __init__(
        self,
        persistence: EmulatorPersistence,
        settings: Optional[Settings] = None,
        latency: Optional[Latency] = None,
        faults: Optional[FaultInjector] = None,
    ):
        self._settings = settings or get_settings()
        self._persistence = persistence
        self._latency = latency or Latency(self._settings)
        self._faults = faults or FaultInjector()
        self._tables: dict[str, dict[str, Row]] = {}
        self._hydrated = False
        self._hydrate_lock = asyncio.Lock()

    async def hydrate(self) -> None:
        """Restore tables from the key-value store once."""
        if self._hydrated:
            return
        async with self._hydrate_lock:
            if self._hydrated:
                return
            saved = await self._persistence.load_database()
            for name, rows in (saved or {}).items():
                if isinstance(rows, dict):
                    self._tables[name] = {str(k): v for k, v in rows.items() if isinstance(v, dict)}
            if self._tables:
                logger.debug(f"[Database] Restored {len(self._tables)} tables")
            self._hydrated = True

    async def persist(self) -> None:
        await self._persistence.save_database(self._tables)

    def from_(self, table: str) -> TableQuery:
        """Start a statement against ``table``, creating it if needed."""
        self._tables.setdefault(table, {})
        return TableQuery(self, table)

    table = from_

    @property
    def table_names(self) -> list[str]:
        return list(self._tables)

    # -------------------------------------------------------------------------
    # Execution
    # -------------------------------------------------------------------------

    async def execute(self, query: QueryBuilder) -> QueryResponse:
        """
        Run a built statement.

        Waits the simulated read or write delay, then evaluates the
        statement in one step so concurrent callers never see a
        half-applied mutation.
        """
        await self.hydrate()
        is_read = query.method == QueryMethod.SELECT
        await self._latency.wait(READ_DELAY_MS if is_read else WRITE_DELAY_MS)
        logger.debug(f"[Database] {query.method.value.upper()} {query.table}")

        error = self._faults.get("database", f"{query.table}.{query.method.value}")
        if error:
            return QueryResponse(error=error)

        table = self._tables.setdefault(query.table, {})
        count: Optional[int] = None

        if query.method == QueryMethod.SELECT:
            rows = apply_filters(table.values(), query.filters)
            count = len(rows)
            rows = sort_rows(rows, query.orders)
            rows = paginate(rows, query.limit_count, query.range_bounds)
            columns = parse_columns(query.columns)
            rows = [project(row, columns) for row in rows]
        elif query.method == QueryMethod.INSERT:
            rows = self._insert(table, query)
        elif query.method == QueryMethod.UPSERT:
            rows = self._upsert(table, query)
        elif query.method == QueryMethod.UPDATE:
            if not isinstance(query.values, dict):
                return QueryResponse(error=InvalidQueryError("update() expects a single row", query.table))
            rows = self._update(table, query)
        else:
            rows = self._delete(table, query)

        if not is_read:
            count = len(rows)
            await self.persist()
            logger.debug(f"[Database] {query.method.value} affected {count} rows in {query.table}")

        return self._respond(query, rows, count if query.count else None)

    @staticmethod
    def _respond(query: QueryBuilder, rows: list[Row], count: Optional[int]) -> QueryResponse:
        if query.single_mode is None:
            return QueryResponse(data=rows, count=count)
        if len(rows) > 1:
            return QueryResponse(error=MultipleRowsFoundError(query.table, len(rows)), count=count)
        if not rows:
            if query.single_mode == "single":
                return QueryResponse(error=NoRowsFoundError(query.table), count=count)
            return QueryResponse(data=None, count=count)
        return QueryResponse(data=rows[0], count=count)

    @staticmethod
    def _as_rows(values: Any) -> list[Row]:
        if values is None:
            return []
        return list(values) if isinstance(values, list) else [values]

    def _insert(self, table: dict[str, Row], query: QueryBuilder) -> list[Row]:
        inserted = []
        for item in self._as_rows(query.values):
            row_id = item.get("id") or generate_id()
            record = {**item, "id": row_id, "created_at": item.get("created_at") or utc_now_iso()}
            table[str(row_id)] = record
            inserted.append(dict(record))
        return inserted

    def _find_conflict(self, table: dict[str, Row], column: str, item: Row) -> Optional[str]:
        if column == "id":
            row_id = item.get("id")
            return str(row_id) if row_id is not None and str(row_id) in table else None
        if column not in item:
            return None
        for key, row in table.items():
            if values_equal(row.get(column), item[column]):
                return key
        return None

    def _upsert(self, table: dict[str, Row], query: QueryBuilder) -> list[Row]:
        upserted = []
        now = utc_now_iso()
        for item in self._as_rows(query.values):
            key = self._find_conflict(table, query.on_conflict, item)
            existing = table.get(key) if key is not None else None
            if existing is not None and query.ignore_duplicates:
                continue

            if existing is not None:
                row_id = existing.get("id", key)
            else:
                row_id = item.get("id") or generate_id()
                key = str(row_id)

            record = {
                **(existing or {}),
                **item,
                "id": row_id,
                "created_at": (existing or {}).get("created_at") or item.get("created_at") or now,
                "updated_at": now,
            }
            table[key] = record
            upserted.append(dict(record))
        return upserted

    def _matching_keys(self, table: dict[str, Row], query: QueryBuilder) -> list[str]:
        return [key for key, row in table.items() if apply_filters([row], query.filters)]

    def _update(self, table: dict[str, Row], query: QueryBuilder) -> list[Row]:
        updated = []
        now = utc_now_iso()
        for key in self._matching_keys(table, query):
            record = {**table[key], **query.values, "updated_at": now}
            table[key] = record
            updated.append(dict(record))
        return updated

    def _delete(self, table: dict[str, Row], query: QueryBuilder) -> list[Row]:
        return [table.pop(key) for key in self._matching_keys(table, query)]

    # -------------------------------------------------------------------------
    # Emulator control
    # -------------------------------------------------------------------------

    async def seed(self, table: str, rows: list[Row]) -> None:
        """Replace a table's contents, generating ids where absent."""
        await self.hydrate()
        seeded: dict[str, Row] = {}
        for item in rows:
            row_id = item.get("id") or generate_id()
            seeded[str(row_id)] = {**item, "id": row_id}
        self._tables[table] = seeded
        await self.persist()

    def get_table_data(self, table: str) -> list[Row]:
        return [dict(row) for row in self._tables.get(table, {}).values()]

    async def delete_rows_for_user(self, user_id: str) -> int:
        """Remove rows in any table whose id or user_id is ``user_id``."""
        await self.hydrate()
        removed = 0
        for rows in self._tables.values():
            doomed = [
                key for key, row in rows.items()
                if row.get("id") == user_id or row.get("user_id") == user_id
            ]
            for key in doomed:
                del rows[key]
            removed += len(doomed)
        if removed:
            await self.persist()
        return removed

    def reset(self) -> None:
        self._tables.clear()
        self._hydrated = False
