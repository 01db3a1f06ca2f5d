# src/sanity/core/application.py

import asyncio
import logging
from typing import Optional

from sanity.core.config import Settings
from sanity.core.event_bus import EventBus
from sanity.core.managers import (
    ServiceManager,
    EventCoordinator,
    TaskManager
)
from sanity.core.managers.window_manager import WindowManager

logger = logging.getLogger("Application")


class Application:
    """
    Main application class that coordinates all components.
    """

    def __init__(self, settings: Settings):
        """
        Initialize the application with its loaded settings.

        Args:
            settings: Backend location, local config directory and timeouts.
        """
        self.settings = settings
        logger.info("Initializing against %s", settings.supabase_url)

        self.event_bus = EventBus()
        self.window_manager = WindowManager(self.event_bus)
        self.service_manager = ServiceManager(self.event_bus, self.settings)
        self.task_manager = TaskManager(self.event_bus)
        self.event_coordinator = EventCoordinator(self.event_bus)
        self._initialization_complete = False
        self._shutdown_task: Optional[asyncio.Task] = None
        self._connect_events()

    def _connect_events(self):
        """Set up event connections between components."""
        self.event_bus.subscribe("application_shutdown", self._request_shutdown)

    def _request_shutdown(self):
        if self._shutdown_task is None:
            self._shutdown_task = asyncio.create_task(self.shutdown())

    async def initialize_async(self):
        """Perform async initialization of components."""
        logger.info("Starting async initialization...")
        try:
            self.service_manager.initialize_services()
            self.window_manager.initialize_windows()
            self.service_manager.set_confirmer(self.window_manager.confirm)
            self.event_coordinator.set_managers(self.service_manager, self.window_manager, self.task_manager)
            self.event_coordinator.wire_all_events()
            self._initialization_complete = True
            logger.info("Async initialization complete")
        except Exception:
            logger.exception("CRITICAL ERROR during initialization")
            raise

    def show(self):
        """Shows the dashboard or the sign-in window, depending on the stored session."""
        self.service_manager.restore_session()

    async def shutdown(self):
        logger.info("Shutting down application components...")
        if self.task_manager:
            await self.task_manager.cancel_all_tasks()
        if self.service_manager:
            await self.service_manager.shutdown()
        logger.info("All components shut down.")

    def is_fully_initialized(self) -> bool:
        return (self._initialization_complete and
                self.service_manager.is_fully_initialized() and
                self.window_manager.is_fully_initialized())
