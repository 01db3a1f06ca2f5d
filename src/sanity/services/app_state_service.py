# src/sanity/services/app_state_service.py
from typing import Optional

from sanity.core.app_state import AppState, AuthView
from sanity.core.event_bus import EventBus
from sanity.core.session_provider import SessionHandle


class AppStateService:
    """
    A centralized service to manage the application's global state.
    This acts as the single source of truth for who is signed in and which auth form is shown.
    """

    def __init__(self, event_bus: EventBus):
        self.event_bus = event_bus
        self._app_state: AppState = AppState.LOADING
        self._auth_view: AuthView = AuthView.LOGIN
        self._session: Optional[SessionHandle] = None

    def get_app_state(self) -> AppState:
        return self._app_state

    def get_auth_view(self) -> AuthView:
        return self._auth_view

    def get_session(self) -> Optional[SessionHandle]:
        return self._session

    def handle_session_changed(self, session: Optional[SessionHandle]):
        """Session provider listener. Moves between SIGNED_IN and SIGNED_OUT."""
        previous = self._session
        self._session = session
        new_state = AppState.SIGNED_IN if session else AppState.SIGNED_OUT
        if session and previous and previous.user_id != session.user_id:
            # A different user signed in without a sign-out in between.
            self._set_app_state(AppState.SIGNED_OUT)
        self._set_app_state(new_state)
        if new_state == AppState.SIGNED_OUT:
            self.set_auth_view(AuthView.LOGIN)

    def set_auth_view(self, new_view: AuthView):
        """
        Sets the auth view and emits an event to notify listeners.
        This is the ONLY place where the auth view should be changed.
        """
        if self._auth_view != new_view:
            self._auth_view = new_view
            self.log("info", f"Auth view changed to: {new_view.name}")
            self.event_bus.emit("auth_view_changed", new_view)

    def _set_app_state(self, new_state: AppState):
        if self._app_state != new_state:
            self._app_state = new_state
            self.log("info", f"Application state changed to: {new_state.name}")
            self.event_bus.emit("app_state_changed", new_state, self._session)

    def log(self, level: str, message: str):
        self.event_bus.emit("log_message_received", "AppStateService", level, message)
