# src/sanity/core/managers/event_coordinator.py
from __future__ import annotations

from typing import TYPE_CHECKING, Optional

from sanity.core.app_state import AppState
from sanity.core.event_bus import EventBus
from sanity.core.logging_config import forward_log_message
from sanity.core.managers.service_manager import ServiceManager
from sanity.core.managers.task_manager import TaskManager
from sanity.core.resource_controller import ResourceController
from sanity.core.session_provider import SessionHandle

if TYPE_CHECKING:
    from sanity.core.managers.window_manager import WindowManager


class EventCoordinator:
    """
    Coordinates events between different components of the application.
    Single responsibility: Event routing and component integration.
    """

    def __init__(self, event_bus: EventBus):
        self.event_bus = event_bus
        self.service_manager: ServiceManager = None
        self.window_manager: "WindowManager" = None
        self.task_manager: TaskManager = None

    def set_managers(self, service_manager: ServiceManager, window_manager: "WindowManager",
                     task_manager: TaskManager):
        """Set references to other managers."""
        self.service_manager = service_manager
        self.window_manager = window_manager
        self.task_manager = task_manager

    def wire_all_events(self):
        """Wire all events between components."""
        self._wire_logging_events()
        self._wire_auth_events()
        self._wire_session_events()
        self._wire_record_events()
        self._wire_effect_events()
        self.log("info", "All events wired successfully.")

    def _wire_logging_events(self):
        self.event_bus.subscribe("log_message_received", forward_log_message)

    def _wire_auth_events(self):
        auth_service = self.service_manager.get_auth_service()
        if not auth_service:
            self.log("warning", "Auth Event Wiring: AuthService not available.")
            return
        self.event_bus.subscribe(
            "login_requested",
            lambda email, password: self.task_manager.start_task(auth_service.handle_login(email, password), "login")
        )
        self.event_bus.subscribe(
            "signup_requested",
            lambda email, password: self.task_manager.start_task(auth_service.handle_signup(email, password), "signup")
        )
        self.event_bus.subscribe(
            "logout_requested",
            lambda: self.task_manager.start_task(auth_service.handle_logout(), "logout")
        )
        self.event_bus.subscribe("auth_view_change_requested", auth_service.handle_switch_auth_view)

    def _wire_session_events(self):
        self.event_bus.subscribe("app_state_changed", self.handle_app_state_change)

    def _wire_record_events(self):
        self.event_bus.subscribe("record_create_requested", lambda key: self._with_controller(key, "open_create"))
        self.event_bus.subscribe("record_edit_requested",
                                 lambda key, record: self._with_controller(key, "open_edit", record))
        self.event_bus.subscribe("record_modal_close_requested",
                                 lambda key: self._with_controller(key, "close_modal"))
        self.event_bus.subscribe("record_field_changed",
                                 lambda key, name, value: self._with_controller(key, "set_field", name, value))
        self.event_bus.subscribe("record_search_changed",
                                 lambda key, text: self._with_controller(key, "set_search_query", text))
        self.event_bus.subscribe("record_status_filter_changed",
                                 lambda key, status: self._with_controller(key, "set_status_filter", status))
        self.event_bus.subscribe("record_error_dismissed", lambda key: self._with_controller(key, "clear_error"))
        self.event_bus.subscribe("record_save_requested", self._handle_save_requested)
        self.event_bus.subscribe("record_delete_requested", self._handle_delete_requested)
        self.event_bus.subscribe("record_refresh_requested", self._handle_refresh_requested)

    def _wire_effect_events(self):
        notifier = self.service_manager.get_shipped_notifier()
        if notifier:
            self.event_bus.subscribe("promise_shipped", notifier.handle_promise_shipped)
        else:
            self.log("warning", "Effect Event Wiring: ShippedNotifier not available.")

    # --- Handlers ---
    def handle_app_state_change(self, new_state: AppState, session: Optional[SessionHandle]):
        """Builds the dashboard for a new session and tears it down on sign-out."""
        if new_state == AppState.SIGNED_IN and session:
            controllers = self.service_manager.create_controllers(session.user_id)
            if self.window_manager:
                self.window_manager.show_dashboard(controllers, session)
            for key, controller in controllers.items():
                self.task_manager.start_task(controller.mount(), f"mount:{key}")
        elif new_state == AppState.SIGNED_OUT:
            self.service_manager.dispose_controllers()
            if self.window_manager:
                self.window_manager.show_auth_window()

    def _handle_save_requested(self, key: str):
        controller = self._controller(key)
        if controller:
            self.task_manager.start_task(controller.save(), f"save:{key}")

    def _handle_delete_requested(self, key: str, record_id: str):
        controller = self._controller(key)
        if controller:
            self.task_manager.start_task(controller.delete(record_id), f"delete:{key}")

    def _handle_refresh_requested(self, key: str):
        controller = self._controller(key)
        if controller:
            self.task_manager.start_task(controller.refresh(), f"refresh:{key}")

    def _controller(self, key: str) -> Optional[ResourceController]:
        controller = self.service_manager.get_controller(key) if self.service_manager else None
        if controller is None:
            self.log("warning", f"No controller for '{key}'. Is a user signed in?")
        return controller

    def _with_controller(self, key: str, method: str, *args):
        controller = self._controller(key)
        if controller:
            getattr(controller, method)(*args)

    def log(self, level: str, message: str):
        self.event_bus.emit("log_message_received", "EventCoordinator", level, message)
