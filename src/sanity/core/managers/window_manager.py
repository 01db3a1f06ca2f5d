# src/sanity/core/managers/window_manager.py
from typing import Dict

from PySide6.QtWidgets import QMessageBox

from sanity.gui.auth_window import AuthWindow
from sanity.gui.main_window import MainWindow
from sanity.gui.log_viewer import LogViewerWindow

from sanity.core.event_bus import EventBus
from sanity.core.resource_controller import ResourceController
from sanity.core.session_provider import SessionHandle


class WindowManager:
    """
    Creates and manages all GUI windows.
    Single responsibility: Window lifecycle and access management.
    """

    def __init__(self, event_bus: EventBus):
        self.event_bus = event_bus

        self.auth_window: AuthWindow = None
        self.main_window: MainWindow = None
        self.log_viewer: LogViewerWindow = None

        self.log("info", "Initialized")

    def initialize_windows(self):
        """Initialize all GUI windows."""
        self.auth_window = AuthWindow(self.event_bus)
        self.main_window = MainWindow(self.event_bus)
        self.log_viewer = LogViewerWindow(self.event_bus)
        self.event_bus.subscribe("show_log_viewer_requested", self.show_log_viewer)
        self.log("info", "Windows initialized")

    # --- Window Getters ---
    def get_auth_window(self) -> AuthWindow:
        return self.auth_window

    def get_main_window(self) -> MainWindow:
        return self.main_window

    def get_log_viewer(self) -> LogViewerWindow:
        return self.log_viewer

    # --- Show Window Methods ---
    def show_auth_window(self):
        if self.main_window:
            self.main_window.clear_dashboard()
            self.main_window.hide()
        if self.auth_window:
            self.auth_window.reset()
            self.auth_window.show()

    def show_dashboard(self, controllers: Dict[str, ResourceController], session: SessionHandle):
        if self.auth_window:
            self.auth_window.hide()
        if self.main_window:
            self.main_window.load_dashboard(controllers, session)
            self.main_window.show()

    def show_log_viewer(self):
        if self.log_viewer: self.log_viewer.show()

    def confirm(self, prompt: str) -> bool:
        """Blocking yes/no prompt parented to the dashboard."""
        answer = QMessageBox.question(
            self.main_window,
            "Please confirm",
            prompt,
            QMessageBox.StandardButton.Yes | QMessageBox.StandardButton.No,
            QMessageBox.StandardButton.No,
        )
        return answer == QMessageBox.StandardButton.Yes

    def is_fully_initialized(self) -> bool:
        """Check if all windows are initialized."""
        return all([
            self.auth_window,
            self.main_window,
            self.log_viewer,
        ])

    def log(self, level: str, message: str):
        self.event_bus.emit("log_message_received", "WindowManager", level, message)
