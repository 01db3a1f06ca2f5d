# src/sanity/services/auth_service.py
from sanity.core.app_state import AuthView
from sanity.core.event_bus import EventBus
from sanity.core.exceptions import AuthError
from sanity.core.session_provider import SessionProvider
from sanity.services.app_state_service import AppStateService


class AuthService:
    """
    Handles the auth form's actions: sign in, sign up and sign out.
    Failures are reported as 'auth_error' events for the form to show inline.
    """

    def __init__(self, event_bus: EventBus, session_provider: SessionProvider,
                 app_state_service: AppStateService):
        self.event_bus = event_bus
        self.session_provider = session_provider
        self.app_state_service = app_state_service

    async def handle_login(self, email: str, password: str) -> bool:
        self.event_bus.emit("auth_busy_changed", True)
        try:
            await self.session_provider.sign_in_with_password(email, password)
            return True
        except AuthError as e:
            self.log("warning", f"Sign-in failed: {e}")
            self.event_bus.emit("auth_error", str(e))
            return False
        finally:
            self.event_bus.emit("auth_busy_changed", False)

    async def handle_signup(self, email: str, password: str) -> bool:
        self.event_bus.emit("auth_busy_changed", True)
        try:
            needs_confirmation = await self.session_provider.sign_up(email, password)
        except AuthError as e:
            self.log("warning", f"Sign-up failed: {e}")
            self.event_bus.emit("auth_error", str(e))
            return False
        finally:
            self.event_bus.emit("auth_busy_changed", False)
        if needs_confirmation:
            self.event_bus.emit("signup_confirmation_required", email)
        return True

    async def handle_logout(self):
        self.log("info", "Signing out...")
        await self.session_provider.sign_out()

    def handle_switch_auth_view(self, view: AuthView):
        self.app_state_service.set_auth_view(view)

    def log(self, level: str, message: str):
        self.event_bus.emit("log_message_received", "AuthService", level, message)
