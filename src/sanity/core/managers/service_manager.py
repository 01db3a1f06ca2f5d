# src/sanity/core/managers/service_manager.py
from __future__ import annotations

from typing import Dict, Optional

from sanity.core.config import Settings
from sanity.core.event_bus import EventBus
from sanity.core.record_store import RecordStoreClient
from sanity.core.resource_controller import Confirmer, ResourceController
from sanity.core.schemas import ALL_SCHEMAS
from sanity.core.session_provider import SessionProvider
from sanity.core.shipped_notifier import ShippedNotifier
from sanity.services import AppStateService, AuthService


class ServiceManager:
    """
    Manages all application services and their dependencies.
    Single responsibility: Service lifecycle and dependency injection.
    """

    def __init__(self, event_bus: EventBus, settings: Settings):
        self.event_bus = event_bus
        self.settings = settings

        self.session_provider: SessionProvider = None
        self.app_state_service: AppStateService = None
        self.auth_service: AuthService = None
        self.shipped_notifier: ShippedNotifier = None
        self.confirmer: Optional[Confirmer] = None
        self.controllers: Dict[str, ResourceController] = {}
        self._unsubscribe_session = None

        self.log_to_event_bus("info", "[ServiceManager] Initialized")

    def log_to_event_bus(self, level: str, message: str):
        """Helper to send logs through the event bus."""
        self.event_bus.emit("log_message_received", "ServiceManager", level, message)

    def initialize_services(self, session_provider: Optional[SessionProvider] = None):
        """Initialize services with proper dependency order."""
        self.log_to_event_bus("info", "[ServiceManager] Initializing services...")
        self.session_provider = session_provider or SessionProvider(
            self.settings.auth_url,
            self.settings.supabase_anon_key,
            session_file=self.settings.session_file,
            timeout=self.settings.request_timeout,
        )
        self.app_state_service = AppStateService(self.event_bus)
        self.auth_service = AuthService(self.event_bus, self.session_provider, self.app_state_service)
        self.shipped_notifier = ShippedNotifier(self.event_bus)
        self._unsubscribe_session = self.session_provider.subscribe(self.app_state_service.handle_session_changed)
        self.log_to_event_bus("info", "[ServiceManager] Services initialized")

    def set_confirmer(self, confirmer: Confirmer):
        """The shell's yes/no prompt, used by controllers before deleting."""
        self.confirmer = confirmer
        for controller in self.controllers.values():
            controller.confirmer = confirmer

    def create_store_client(self, schema) -> RecordStoreClient:
        return RecordStoreClient(
            schema,
            self.settings.rest_url,
            self.settings.supabase_anon_key,
            token_provider=self.session_provider.access_token,
            timeout=self.settings.request_timeout,
        )

    def create_controllers(self, owner: str) -> Dict[str, ResourceController]:
        """Builds one controller per record kind for the signed-in user."""
        self.dispose_controllers()
        for schema in ALL_SCHEMAS:
            self.controllers[schema.key] = ResourceController(
                schema,
                self.create_store_client(schema),
                owner,
                self.event_bus,
                confirmer=self.confirmer,
            )
        self.log_to_event_bus("info", f"[ServiceManager] Created controllers: {', '.join(self.controllers)}")
        return dict(self.controllers)

    def dispose_controllers(self):
        if self.controllers:
            self.log_to_event_bus("info", "[ServiceManager] Disposing controllers")
        self.controllers.clear()

    def restore_session(self):
        """Pushes the stored session (or its absence) through the normal change path."""
        self.app_state_service.handle_session_changed(self.session_provider.get_current_session())

    async def shutdown(self):
        self.log_to_event_bus("info", "[ServiceManager] Shutting down services...")
        if self._unsubscribe_session:
            self._unsubscribe_session()
            self._unsubscribe_session = None
        self.dispose_controllers()
        self.log_to_event_bus("info", "[ServiceManager] Services shutdown complete")

    def get_controller(self, key: str) -> Optional[ResourceController]:
        return self.controllers.get(key)

    def get_session_provider(self) -> SessionProvider:
        return self.session_provider

    def get_app_state_service(self) -> AppStateService:
        return self.app_state_service

    def get_auth_service(self) -> AuthService:
        return self.auth_service

    def get_shipped_notifier(self) -> ShippedNotifier:
        return self.shipped_notifier

    def is_fully_initialized(self) -> bool:
        return all([
            self.session_provider, self.app_state_service, self.auth_service, self.shipped_notifier
        ])
