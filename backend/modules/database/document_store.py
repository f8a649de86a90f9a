"""
Document-store compatibility flavour.

A second, simpler table engine for callers written against a
document database: rows carry ``_id`` and ``_creationTime`` (epoch ms),
update() and delete() touch only the FIRST matching row, and nothing is
persisted or delayed. Its matching rules intentionally differ from
TableStore: like/ilike are plain substring tests and comparisons are
numeric only.
"""

import logging
import time
from typing import Any, Optional, Union

from shared.ids import generate_id

from .exceptions import NoMatchingRecordError, RecordNotFoundError
from .filters import OrderSpec, sort_rows, values_equal
from .models import DocumentFilter, DocumentResult, FilterOperator, QueryOptions, Row

logger = logging.getLogger(__name__)


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def document_matches(record: Row, flt: DocumentFilter) -> bool:
    value = record.get(flt.column)
    expected = flt.value
    op = flt.operator

    if op == FilterOperator.EQ:
        return values_equal(value, expected)
    if op == FilterOperator.NEQ:
        return not values_equal(value, expected)
    if op in (FilterOperator.GT, FilterOperator.GTE, FilterOperator.LT, FilterOperator.LTE):
        if not (_is_number(value) and _is_number(expected)):
            return False
        return {
            FilterOperator.GT: value > expected,
            FilterOperator.GTE: value >= expected,
            FilterOperator.LT: value < expected,
            FilterOperator.LTE: value <= expected,
        }[op]
    if op in (FilterOperator.LIKE, FilterOperator.ILIKE):
        if not isinstance(value, str) or not isinstance(expected, str):
            return False
        needle = expected.replace("%", "")
        if op == FilterOperator.ILIKE:
            return needle.lower() in value.lower()
        return needle in value
    if op == FilterOperator.IN:
        return isinstance(expected, list) and any(values_equal(value, v) for v in expected)
    if op == FilterOperator.CONTAINS:
        return (
            isinstance(value, list)
            and isinstance(expected, list)
            and all(any(values_equal(v, item) for v in value) for item in expected)
        )
    return True


def _matches_all(record: Row, filters: list[DocumentFilter]) -> bool:
    return all(document_matches(record, f) for f in filters)


class DocumentStore:
    """In-memory document tables keyed by ``_id``."""

    def __init__(self) -> None:
        self._tables: dict[str, dict[str, Row]] = {}

    def _table(self, name: str) -> dict[str, Row]:
        return self._tables.setdefault(name, {})

    @staticmethod
    def _new_document(record: Row) -> Row:
        doc_id = generate_id("mock")
        return {"_id": doc_id, "_creationTime": int(time.time() * 1000), **record}

    async def query(self, table: str, options: Optional[QueryOptions] = None) -> DocumentResult:
        options = options or QueryOptions()
        results = [r for r in self._table(table).values() if _matches_all(r, options.filters)]
        if options.order_by:
            orders = [OrderSpec(o.column, desc=not o.ascending) for o in options.order_by]
            results = sort_rows(results, orders)
        end = options.offset + options.limit if options.limit is not None else None
        results = [dict(r) for r in results[options.offset:end]]
        return DocumentResult(data=results, count=len(results))

    async def get(self, table: str, record_id: str) -> DocumentResult:
        record = self._table(table).get(record_id)
        if record is None:
            return DocumentResult(error=RecordNotFoundError(table, record_id))
        return DocumentResult(data=dict(record))

    async def insert(self, table: str, data: Union[Row, list[Row]]) -> DocumentResult:
        """Insert one or many documents; data mirrors the input's shape."""
        rows = self._table(table)
        records = data if isinstance(data, list) else [data]
        inserted = []
        for record in records:
            document = self._new_document(record)
            rows[document["_id"]] = document
            inserted.append(dict(document))
        logger.debug(f"[Documents] Inserted {len(inserted)} into {table}")
        return DocumentResult(data=inserted if isinstance(data, list) else inserted[0])

    async def update(self, table: str, data: Row, filters: list[DocumentFilter]) -> DocumentResult:
        """Merge ``data`` into the first matching document only."""
        rows = self._table(table)
        for doc_id, record in rows.items():
            if _matches_all(record, filters):
                updated = {**record, **data}
                rows[doc_id] = updated
                return DocumentResult(data=dict(updated))
        return DocumentResult(error=NoMatchingRecordError(table))

    async def delete(self, table: str, filters: list[DocumentFilter]) -> DocumentResult:
        """Delete the first matching document only."""
        rows = self._table(table)
        for doc_id, record in rows.items():
            if _matches_all(record, filters):
                del rows[doc_id]
                return DocumentResult(data=record)
        return DocumentResult(error=NoMatchingRecordError(table))

    async def upsert(
        self,
        table: str,
        data: Union[Row, list[Row]],
        on_conflict: str = "_id",
    ) -> DocumentResult:
        rows = self._table(table)
        records = data if isinstance(data, list) else [data]
        upserted = []
        for record in records:
            conflict_value = record.get(on_conflict)
            existing_id = None
            if conflict_value:
                existing_id = next(
                    (
                        doc_id for doc_id, doc in rows.items()
                        if values_equal(doc.get(on_conflict), conflict_value)
                    ),
                    None,
                )
            if existing_id is not None:
                document = {**rows[existing_id], **record}
                rows[existing_id] = document
            else:
                document = self._new_document(record)
                rows[document["_id"]] = document
            upserted.append(dict(document))
        return DocumentResult(data=upserted if isinstance(data, list) else upserted[0])

    async def rpc(self, function_name: str, params: Optional[dict[str, Any]] = None) -> DocumentResult:
        logger.info(f"[Documents] RPC called: {function_name} {params or {}}")
        return DocumentResult()

    # Test utilities

    def seed(self, table: str, records: list[Row]) -> None:
        rows = self._table(table)
        for record in records:
            doc_id = record.get("_id") or generate_id("mock")
            rows[doc_id] = {"_id": doc_id, "_creationTime": int(time.time() * 1000), **record}

    def get_all(self, table: str) -> list[Row]:
        return [dict(r) for r in self._table(table).values()]

    def clear(self) -> None:
        self._tables.clear()
