"""Tests for SessionProvider against a local fake of the auth API."""

import json
import time

import pytest
from aiohttp import web
from aiohttp.test_utils import TestServer

from sanity.core.exceptions import AuthError
from sanity.core.session_provider import SessionHandle, SessionProvider

API_KEY = "anon-key"


class FakeAuthBackend:
    """Password grant, signup and logout endpoints."""

    def __init__(self, confirm_email=False, logout_status=204):
        self.users = {"ada@example.com": "secret123"}
        self.confirm_email = confirm_email
        self.logout_status = logout_status
        self.requests = []

    def app(self) -> web.Application:
        app = web.Application()
        app.router.add_post("/auth/v1/token", self.token)
        app.router.add_post("/auth/v1/signup", self.signup)
        app.router.add_post("/auth/v1/logout", self.logout)
        return app

    def _session(self, email):
        return {
            "access_token": f"token-{email}",
            "refresh_token": "refresh",
            "expires_in": 3600,
            "user": {"id": f"id-{email}", "email": email},
        }

    async def token(self, request):
        body = await request.json()
        self.requests.append(("token", dict(request.query), body))
        if self.users.get(body["email"]) != body["password"]:
            return web.json_response(
                {"error": "invalid_grant", "error_description": "Invalid login credentials"}, status=400)
        return web.json_response(self._session(body["email"]))

    async def signup(self, request):
        body = await request.json()
        self.requests.append(("signup", dict(request.query), body))
        if body["email"] in self.users:
            return web.json_response({"msg": "User already registered"}, status=422)
        self.users[body["email"]] = body["password"]
        if self.confirm_email:
            return web.json_response({"id": f"id-{body['email']}", "email": body["email"]})
        return web.json_response(self._session(body["email"]))

    async def logout(self, request):
        self.requests.append(("logout", dict(request.query), request.headers.get("Authorization")))
        if self.logout_status >= 400:
            return web.json_response({"msg": "boom"}, status=self.logout_status)
        return web.Response(status=self.logout_status)


async def start_backend(**kwargs):
    backend = FakeAuthBackend(**kwargs)
    server = TestServer(backend.app())
    await server.start_server()
    return backend, server


def make_provider(server, session_file=None):
    return SessionProvider(str(server.make_url("/auth/v1")), API_KEY, session_file=session_file, timeout=5)


class TestSignIn:
    """Password sign-in."""

    @pytest.mark.asyncio
    async def test_sign_in_sets_session_and_notifies(self, tmp_path):
        backend, server = await start_backend()
        try:
            provider = make_provider(server, tmp_path / "session.json")
            changes = []
            provider.subscribe(changes.append)

            session = await provider.sign_in_with_password("ada@example.com", "secret123")

            assert session.user_id == "id-ada@example.com"
            assert session.expires_at > time.time()
            assert provider.get_current_session() == session
            assert provider.access_token() == "token-ada@example.com"
            assert changes == [session]
            assert backend.requests[0][1] == {"grant_type": "password"}
        finally:
            await server.close()

    @pytest.mark.asyncio
    async def test_bad_credentials_raise_auth_error(self):
        backend, server = await start_backend()
        try:
            provider = make_provider(server)

            with pytest.raises(AuthError, match="Invalid login credentials") as exc_info:
                await provider.sign_in_with_password("ada@example.com", "wrong")

            assert exc_info.value.status == 400
            assert provider.get_current_session() is None
        finally:
            await server.close()

    @pytest.mark.asyncio
    async def test_empty_email_is_rejected_locally(self):
        provider = SessionProvider("http://127.0.0.1:9/auth/v1", API_KEY)
        with pytest.raises(AuthError, match="Email is required"):
            await provider.sign_in_with_password("  ", "secret123")


class TestSignUp:
    """Account creation."""

    @pytest.mark.asyncio
    async def test_sign_up_with_confirmation_keeps_user_signed_out(self):
        backend, server = await start_backend(confirm_email=True)
        try:
            provider = make_provider(server)

            assert await provider.sign_up("new@example.com", "hunter22") is True
            assert provider.get_current_session() is None
        finally:
            await server.close()

    @pytest.mark.asyncio
    async def test_sign_up_without_confirmation_signs_in(self):
        backend, server = await start_backend()
        try:
            provider = make_provider(server)

            assert await provider.sign_up("new@example.com", "hunter22") is False
            assert provider.get_current_session().email == "new@example.com"
        finally:
            await server.close()

    @pytest.mark.asyncio
    async def test_short_password_is_rejected_before_any_request(self):
        backend, server = await start_backend()
        try:
            provider = make_provider(server)

            with pytest.raises(AuthError, match="at least 6"):
                await provider.sign_up("new@example.com", "12345")

            assert backend.requests == []
        finally:
            await server.close()

    @pytest.mark.asyncio
    async def test_existing_user_error_message_is_surfaced(self):
        backend, server = await start_backend()
        try:
            provider = make_provider(server)
            with pytest.raises(AuthError, match="User already registered"):
                await provider.sign_up("ada@example.com", "secret123")
        finally:
            await server.close()


class TestSignOut:
    """Sign-out and session persistence."""

    @pytest.mark.asyncio
    async def test_sign_out_clears_session_and_file(self, tmp_path):
        backend, server = await start_backend()
        try:
            session_file = tmp_path / "session.json"
            provider = make_provider(server, session_file)
            await provider.sign_in_with_password("ada@example.com", "secret123")
            assert session_file.exists()
            changes = []
            provider.subscribe(changes.append)

            await provider.sign_out()

            assert provider.get_current_session() is None
            assert not session_file.exists()
            assert changes == [None]
            assert backend.requests[-1][2] == "Bearer token-ada@example.com"
        finally:
            await server.close()

    @pytest.mark.asyncio
    async def test_sign_out_clears_locally_when_backend_fails(self):
        backend, server = await start_backend(logout_status=500)
        try:
            provider = make_provider(server)
            await provider.sign_in_with_password("ada@example.com", "secret123")

            await provider.sign_out()

            assert provider.get_current_session() is None
        finally:
            await server.close()

    @pytest.mark.asyncio
    async def test_unsubscribe_stops_notifications(self):
        backend, server = await start_backend()
        try:
            provider = make_provider(server)
            changes = []
            unsubscribe = provider.subscribe(changes.append)
            unsubscribe()

            await provider.sign_in_with_password("ada@example.com", "secret123")

            assert changes == []
        finally:
            await server.close()


class TestStoredSession:
    """Restoring sessions from disk."""

    def test_valid_stored_session_is_restored(self, tmp_path):
        session_file = tmp_path / "session.json"
        stored = SessionHandle("u1", "ada@example.com", "tok", expires_at=time.time() + 600)
        session_file.write_text(json.dumps(stored.to_dict()), encoding="utf-8")

        provider = SessionProvider("http://127.0.0.1:9/auth/v1", API_KEY, session_file=session_file)

        assert provider.get_current_session() == stored

    def test_expired_stored_session_is_discarded(self, tmp_path):
        session_file = tmp_path / "session.json"
        stored = SessionHandle("u1", "ada@example.com", "tok", expires_at=time.time() - 1)
        session_file.write_text(json.dumps(stored.to_dict()), encoding="utf-8")

        provider = SessionProvider("http://127.0.0.1:9/auth/v1", API_KEY, session_file=session_file)

        assert provider.get_current_session() is None
        assert not session_file.exists()

    def test_corrupt_session_file_is_ignored(self, tmp_path):
        session_file = tmp_path / "session.json"
        session_file.write_text("{not json", encoding="utf-8")

        provider = SessionProvider("http://127.0.0.1:9/auth/v1", API_KEY, session_file=session_file)

        assert provider.get_current_session() is None

    def test_session_expiring_while_running_notifies_listeners(self):
        provider = SessionProvider("http://127.0.0.1:9/auth/v1", API_KEY)
        changes = []
        provider.subscribe(changes.append)
        provider._session = SessionHandle("u1", "ada@example.com", "tok", expires_at=time.time() - 1)

        assert provider.access_token() is None
        assert changes == [None]
