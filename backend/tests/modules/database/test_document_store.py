import pytest

from modules.database.document_store import DocumentStore
from modules.database.exceptions import NoMatchingRecordError, RecordNotFoundError
from modules.database.models import (
    DocumentFilter,
    DocumentOrder,
    FilterOperator,
    QueryOptions,
)


class TestDocumentStore:
    @pytest.fixture
    def store(self):
        store = DocumentStore()
        store.seed("tasks", [
            {"_id": "t1", "title": "Buy milk", "owner": "ann", "points": 3},
            {"_id": "t2", "title": "Walk dog", "owner": "ann", "points": 1},
            {"_id": "t3", "title": "Milk cow", "owner": "bob", "points": 5},
        ])
        return store

    @pytest.mark.asyncio
    async def test_insert_single_returns_single(self, store):
        response = await store.insert("tasks", {"title": "New"})
        assert isinstance(response.data, dict)
        assert response.data["_id"].startswith("mock-")
        assert isinstance(response.data["_creationTime"], int)

    @pytest.mark.asyncio
    async def test_insert_many_returns_list(self, store):
        response = await store.insert("tasks", [{"title": "A"}, {"title": "B"}])
        assert [doc["title"] for doc in response.data] == ["A", "B"]

    @pytest.mark.asyncio
    async def test_query_with_filter_order_and_page(self, store):
        options = QueryOptions(
            filters=[DocumentFilter(column="owner", value="ann")],
            order_by=[DocumentOrder(column="points", ascending=False)],
            limit=1,
        )
        response = await store.query("tasks", options)
        assert [doc["_id"] for doc in response.data] == ["t1"]
        assert response.count == 1

    @pytest.mark.asyncio
    async def test_like_is_substring_match(self, store):
        options = QueryOptions(filters=[DocumentFilter(column="title", operator=FilterOperator.ILIKE, value="%milk%")])
        response = await store.query("tasks", options)
        assert {doc["_id"] for doc in response.data} == {"t1", "t3"}

    @pytest.mark.asyncio
    async def test_comparisons_are_numeric_only(self, store):
        options = QueryOptions(filters=[DocumentFilter(column="title", operator=FilterOperator.GT, value="A")])
        assert (await store.query("tasks", options)).data == []

    @pytest.mark.asyncio
    async def test_get(self, store):
        assert (await store.get("tasks", "t2")).data["title"] == "Walk dog"
        assert isinstance((await store.get("tasks", "nope")).error, RecordNotFoundError)

    @pytest.mark.asyncio
    async def test_update_touches_first_match_only(self, store):
        response = await store.update("tasks", {"done": True}, [DocumentFilter(column="owner", value="ann")])

        assert response.data["_id"] == "t1"
        done = [doc["_id"] for doc in store.get_all("tasks") if doc.get("done")]
        assert done == ["t1"]

    @pytest.mark.asyncio
    async def test_delete_touches_first_match_only(self, store):
        response = await store.delete("tasks", [DocumentFilter(column="owner", value="ann")])

        assert response.data["_id"] == "t1"
        assert [doc["_id"] for doc in store.get_all("tasks")] == ["t2", "t3"]

    @pytest.mark.asyncio
    async def test_update_without_match(self, store):
        response = await store.update("tasks", {"x": 1}, [DocumentFilter(column="owner", value="zed")])
        assert isinstance(response.error, NoMatchingRecordError)

    @pytest.mark.asyncio
    async def test_upsert_by_column(self, store):
        await store.upsert("tasks", {"title": "Walk dog", "points": 7}, on_conflict="title")
        await store.upsert("tasks", {"title": "Brand new"}, on_conflict="title")

        docs = {doc["title"]: doc for doc in store.get_all("tasks")}
        assert docs["Walk dog"]["points"] == 7
        assert docs["Walk dog"]["_id"] == "t2"
        assert "Brand new" in docs

    @pytest.mark.asyncio
    async def test_rpc_is_a_noop(self, store):
        response = await store.rpc("recalculate", {"owner": "ann"})
        assert response.ok
        assert response.data is None

    def test_clear(self, store):
        store.clear()
        assert store.get_all("tasks") == []
