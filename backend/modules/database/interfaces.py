"""
Database module interface.

Repository code should depend on ITableStore so that the emulator and a
hosted client are interchangeable.
"""

from typing import Protocol, runtime_checkable

from .models import QueryResponse, Row
from .query import QueryBuilder, TableQuery


@runtime_checkable
class ITableStore(Protocol):
    """
    Interface for table access.

    Statements are built lazily and only evaluated by execute().
    """

    def from_(self, table: str) -> TableQuery:
        """
        Start a statement against a table.

        Args:
            table: Table name; unknown tables are created empty

        Returns:
            TableQuery exposing select/insert/update/upsert/delete
        """
        ...

    async def execute(self, query: QueryBuilder) -> QueryResponse:
        ...

    async def seed(self, table: str, rows: list[Row]) -> None:
        ...

    def get_table_data(self, table: str) -> list[Row]:
        ...
