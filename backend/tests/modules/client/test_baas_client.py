import asyncio
import logging
import pytest

from modules.client.service import BaasClient, get_emulator_client, reset_emulator_client
from modules.client.interfaces import IBackendClient
from modules.client.exceptions import RpcNotImplementedError
from modules.client.models import RpcResponse
from shared.exceptions import CapabilityError


class TestBaasClient:
    def test_implements_interface(self, client):
        assert isinstance(client, IBackendClient)

    @pytest.mark.asyncio
    async def test_end_to_end_todo_flow(self, client):
        """Sign up, write rows scoped to the user, read them back newest first."""
        user = (await client.auth.sign_up("jane.doe@example.com", "password123")).user

        await client.from_("todos").insert({"id": 1, "title": "first", "user_id": user.id}).execute()
        await client.from_("todos").insert({"id": 2, "title": "second", "user_id": user.id}).execute()
        await client.from_("todos").insert({"id": 3, "title": "theirs", "user_id": "someone-else"}).execute()

        response = await client.from_("todos").select().eq("user_id", user.id).order("id", desc=True).execute()

        assert [row["title"] for row in response.data] == ["second", "first"]

    @pytest.mark.asyncio
    async def test_state_survives_new_client_on_same_store(self, settings, kv_store):
        first = BaasClient(settings, kv_store)
        await first.auth.sign_up("a@example.com", "password123")
        await first.table("notes").insert({"id": "n1", "body": "hi"}).execute()

        second = BaasClient(settings, kv_store)
        await second.hydrate()

        assert second.auth.current_session.user.email == "a@example.com"
        assert second.helpers.get_table_data("notes")[0]["body"] == "hi"

    @pytest.mark.asyncio
    async def test_uploads_are_tagged_with_signed_in_user(self, client):
        user = (await client.auth.sign_up("a@example.com", "password123")).user
        await client.storage.from_("uploads").upload("doc.txt", "x")
        assert client.storage.get_files()[0].user_id == user.id

    @pytest.mark.asyncio
    async def test_channel_round_trip(self, client):
        received = []
        channel = client.channel("todos").on_postgres_changes("INSERT", received.append, table="todos")

        client.helpers.trigger_realtime_event("todos", "INSERT", {"id": 1})
        await client.remove_channel(channel)
        client.helpers.trigger_realtime_event("todos", "INSERT", {"id": 2})

        assert [p.new["id"] for p in received] == [1]

    # RPC

    @pytest.mark.asyncio
    async def test_rpc_unregistered(self, client):
        response = await client.rpc("missing_fn")

        assert isinstance(response.error, RpcNotImplementedError)
        assert isinstance(response.error, CapabilityError)
        assert response.error.message == "RPC function 'missing_fn' not implemented in mock"

    @pytest.mark.asyncio
    async def test_rpc_sync_handler(self, client):
        client.helpers.register_rpc_handler("add", lambda params: params["a"] + params["b"])
        response = await client.rpc("add", {"a": 2, "b": 3})
        assert response.data == 5

    @pytest.mark.asyncio
    async def test_rpc_async_handler(self, client):
        async def slow_echo(params):
            await asyncio.sleep(0)
            return {"echo": params}

        client.helpers.register_rpc_handler("echo", slow_echo)
        response = await client.rpc("echo", {"x": 1})
        assert response.data == {"echo": {"x": 1}}

    @pytest.mark.asyncio
    async def test_rpc_handler_may_return_response(self, client):
        error = ValueError("bad input")
        client.helpers.register_rpc_handler("validate", lambda params: RpcResponse(error=error))
        assert (await client.rpc("validate")).error is error

    @pytest.mark.asyncio
    async def test_rpc_handler_exception_becomes_error(self, client):
        def broken(params):
            raise RuntimeError("boom")

        client.helpers.register_rpc_handler("broken", broken)
        response = await client.rpc("broken")

        assert isinstance(response.error, RuntimeError)
        assert response.data is None

    @pytest.mark.asyncio
    async def test_rpc_unregister(self, client):
        client.helpers.register_rpc_handler("f", lambda params: 1)
        client.helpers.unregister_rpc_handler("f")
        assert isinstance((await client.rpc("f")).error, RpcNotImplementedError)

    @pytest.mark.asyncio
    async def test_reset(self, client):
        await client.auth.sign_up("a@example.com", "password123")
        client.helpers.register_rpc_handler("f", lambda params: 1)
        client.helpers.simulate_error("database", "todos.select", RuntimeError("x"))

        client.reset()

        assert client.auth.list_users() == []
        assert client.rpc_handlers.names == []
        assert len(client.faults) == 0


class TestDebugLogging:
    def test_debug_setting_enables_emulator_logs(self, settings_factory):
        logger = logging.getLogger("modules")
        previous = logger.level
        try:
            BaasClient(settings_factory(debug=True))
            assert logger.level == logging.DEBUG
        finally:
            logger.setLevel(previous)


class TestEmulatorSingleton:
    def test_get_emulator_client_is_cached(self):
        assert get_emulator_client() is get_emulator_client()

    def test_reset_emulator_client(self):
        first = get_emulator_client()
        reset_emulator_client()
        assert get_emulator_client() is not first
