"""Tests for RecordStoreClient against a local fake of the REST interface."""

import uuid

import pytest
from aiohttp import web
from aiohttp.test_utils import TestServer

from sanity.core.exceptions import NotFound, StoreError
from sanity.core.record_store import RecordStoreClient
from sanity.core.resource_controller import ResourceController
from sanity.core.schemas import DECISIONS, PROMISES

API_KEY = "anon-key"
TOKEN = "user-token"


class FakeRestBackend:
    """Just enough of a PostgREST table endpoint: eq filters, ordering, representation."""

    def __init__(self):
        self.tables = {}
        self.requests = []
        self.fail_with = None

    def app(self) -> web.Application:
        app = web.Application()
        app.router.add_route("*", "/rest/v1/{table}", self.handle)
        return app

    async def handle(self, request: web.Request) -> web.Response:
        body = await request.json() if request.can_read_body else None
        self.requests.append((request.method, request.match_info["table"], dict(request.query),
                              dict(request.headers), body))
        if self.fail_with:
            status, message = self.fail_with
            return web.json_response({"message": message}, status=status)

        rows = self.tables.setdefault(request.match_info["table"], [])
        filters = {k: v[3:] for k, v in request.query.items() if v.startswith("eq.")}
        matched = [row for row in rows if all(str(row.get(k)) == v for k, v in filters.items())]

        if request.method == "GET":
            order = request.query.get("order", "")
            if order:
                column, _, direction = order.partition(".")
                matched.sort(key=lambda row: row.get(column) or "", reverse=direction == "desc")
            return web.json_response(matched)
        if request.method == "POST":
            created = []
            for i, item in enumerate(body):
                row = dict(item, id=str(uuid.uuid4()), created_at=f"2024-01-0{i + 1}T00:00:00",
                           date_created=f"2024-01-0{i + 1}T00:00:00")
                rows.append(row)
                created.append(row)
            return web.json_response(created, status=201)
        if request.method == "PATCH":
            for row in matched:
                row.update(body)
            return web.json_response(matched)
        if request.method == "DELETE":
            for row in matched:
                rows.remove(row)
            return web.json_response(matched)
        return web.json_response({"message": "method not allowed"}, status=405)


async def start_backend():
    backend = FakeRestBackend()
    server = TestServer(backend.app())
    await server.start_server()
    return backend, server


def make_client(server, schema=PROMISES, token=TOKEN):
    rest_url = str(server.make_url("/rest/v1"))
    return RecordStoreClient(schema, rest_url, API_KEY, token_provider=lambda: token, timeout=5)


class TestRecordStoreClient:
    """Requests, scoping and error mapping."""

    @pytest.mark.asyncio
    async def test_list_is_scoped_and_ordered(self):
        backend, server = await start_backend()
        try:
            backend.tables["feature_promises"] = [
                {"id": "1", "user_id": "u1", "title": "Old", "date_created": "2024-01-01"},
                {"id": "2", "user_id": "u1", "title": "New", "date_created": "2024-02-01"},
                {"id": "3", "user_id": "u2", "title": "Other", "date_created": "2024-03-01"},
            ]
            client = make_client(server)

            records = await client.list("u1")

            assert [r.get("title") for r in records] == ["New", "Old"]
            assert records[0].created_at == "2024-02-01"
            method, table, query, headers, _ = backend.requests[0]
            assert (method, table) == ("GET", "feature_promises")
            assert query["user_id"] == "eq.u1"
            assert query["order"] == "date_created.desc"
            assert headers["apikey"] == API_KEY
            assert headers["Authorization"] == f"Bearer {TOKEN}"
        finally:
            await server.close()

    @pytest.mark.asyncio
    async def test_decisions_order_by_created_at(self):
        backend, server = await start_backend()
        try:
            await make_client(server, schema=DECISIONS).list("u1")
            assert backend.requests[0][2]["order"] == "created_at.desc"
        finally:
            await server.close()

    @pytest.mark.asyncio
    async def test_create_returns_stored_record(self):
        backend, server = await start_backend()
        try:
            client = make_client(server)

            record = await client.create({"title": "Dark mode", "promised_to": "Acme", "user_id": "u1"})

            assert record.id
            assert record.owner == "u1"
            assert record.get("title") == "Dark mode"
            _, _, _, headers, body = backend.requests[0]
            assert headers["Prefer"] == "return=representation"
            assert body == [{"title": "Dark mode", "promised_to": "Acme", "user_id": "u1"}]
        finally:
            await server.close()

    @pytest.mark.asyncio
    async def test_update_is_scoped_to_owner(self):
        backend, server = await start_backend()
        try:
            backend.tables["feature_promises"] = [{"id": "1", "user_id": "u2", "title": "Theirs"}]
            client = make_client(server)

            with pytest.raises(NotFound):
                await client.update("1", {"title": "Hijacked", "user_id": "u1"}, owner="u1")

            assert backend.tables["feature_promises"][0]["title"] == "Theirs"
        finally:
            await server.close()

    @pytest.mark.asyncio
    async def test_update_overwrites_fields(self):
        backend, server = await start_backend()
        try:
            backend.tables["feature_promises"] = [{"id": "1", "user_id": "u1", "title": "Old", "status": "Pending"}]
            client = make_client(server)

            record = await client.update("1", {"id": "ignored", "title": "New", "status": "Shipped"}, owner="u1")

            assert record.id == "1"
            assert record.get("status") == "Shipped"
            assert "id" not in backend.requests[0][4]
        finally:
            await server.close()

    @pytest.mark.asyncio
    async def test_delete_missing_record_raises_not_found(self):
        backend, server = await start_backend()
        try:
            backend.tables["feature_promises"] = [{"id": "1", "user_id": "u1"}]
            client = make_client(server)

            await client.delete("1", owner="u1")
            with pytest.raises(NotFound):
                await client.delete("1", owner="u1")
        finally:
            await server.close()

    @pytest.mark.asyncio
    async def test_backend_error_becomes_store_error(self):
        backend, server = await start_backend()
        try:
            backend.fail_with = (401, "JWT expired")
            client = make_client(server)

            with pytest.raises(StoreError) as exc_info:
                await client.list("u1")

            assert exc_info.value.status == 401
            assert "JWT expired" in str(exc_info.value)
            assert not isinstance(exc_info.value, NotFound)
        finally:
            await server.close()

    @pytest.mark.asyncio
    async def test_unreachable_backend_becomes_store_error(self):
        backend, server = await start_backend()
        client = make_client(server)
        await server.close()

        with pytest.raises(StoreError, match="Could not reach"):
            await client.list("u1")

    @pytest.mark.asyncio
    async def test_anon_key_used_without_session(self):
        backend, server = await start_backend()
        try:
            await make_client(server, token=None).list("u1")
            assert backend.requests[0][3]["Authorization"] == f"Bearer {API_KEY}"
        finally:
            await server.close()


def html_app(status=200, body="<html>captive portal</html>"):
    async def handle(request):
        return web.Response(status=status, text=body, content_type="text/html")

    app = web.Application()
    app.router.add_route("*", "/rest/v1/{table}", handle)
    return app


class TestMalformedResponses:
    """Non-JSON bodies and broken rows surface as StoreError."""

    @pytest.mark.asyncio
    async def test_html_body_on_success_status(self):
        server = TestServer(html_app())
        await server.start_server()
        try:
            with pytest.raises(StoreError, match="Malformed response") as exc_info:
                await make_client(server).list("u1")
            assert exc_info.value.status == 200
        finally:
            await server.close()

    @pytest.mark.asyncio
    async def test_row_without_id(self):
        backend, server = await start_backend()
        try:
            backend.tables["feature_promises"] = [{"user_id": "u1", "title": "No id"}]
            with pytest.raises(StoreError, match="Malformed row"):
                await make_client(server).list("u1")
        finally:
            await server.close()

    @pytest.mark.asyncio
    async def test_controller_stays_usable_after_html_response(self, event_bus):
        server = TestServer(html_app())
        await server.start_server()
        try:
            controller = ResourceController(PROMISES, make_client(server), "u1", event_bus)

            assert await controller.refresh() is False
            assert "Malformed response" in controller.load_error
            assert controller.loading is False

            controller.open_create()
            controller.set_field("title", "Dark mode")
            controller.set_field("promised_to", "Acme")
            assert await controller.save() is False

            assert controller.saving is False
            assert controller.modal_open is True
            assert controller.error.startswith("Could not create promise")
        finally:
            await server.close()
