# src/sanity/gui/status_bar.py
from PySide6.QtWidgets import QStatusBar, QLabel
import qtawesome as qta

from .components import Colors, Typography


class StatusBar(QStatusBar):
    """
    An event-driven status bar showing the sync state of the record tabs
    and the most recent store error.
    """

    def __init__(self, event_bus):
        super().__init__()
        self.event_bus = event_bus
        self.setObjectName("StatusBar")
        self.setStyleSheet(f"""
            #StatusBar {{
                background-color: {Colors.SECONDARY_BG.name()};
                color: {Colors.TEXT_SECONDARY.name()};
                border-top: 1px solid {Colors.BORDER_DEFAULT.name()};
                padding: 2px 8px;
            }}
            QLabel {{
                color: {Colors.TEXT_SECONDARY.name()};
                padding: 0 5px;
            }}
        """)
        self.setFont(Typography.body())

        self.sync_icon = QLabel()
        self.sync_label = QLabel("Ready")
        self.addPermanentWidget(self.sync_icon)
        self.addPermanentWidget(self.sync_label)
        self._set_icon("fa5s.check-circle", Colors.ACCENT_GREEN.name())

        self._connect_events()

    def _connect_events(self):
        self.event_bus.subscribe("resource_error", self.on_resource_error)
        self.event_bus.subscribe("log_message_received", self.on_log_message)

    def on_resource_error(self, key: str, message: str):
        self.sync_label.setText(message)
        self._set_icon("fa5s.exclamation-triangle", Colors.ACCENT_RED.name())

    def on_log_message(self, source: str, msg_type: str, content: str):
        """Mirrors controller successes so the bar recovers after an error."""
        if source.endswith("Controller") and msg_type in ("success", "info"):
            self.sync_label.setText(content)
            self._set_icon("fa5s.check-circle", Colors.ACCENT_GREEN.name())

    def _set_icon(self, icon_name: str, color: str):
        self.sync_icon.setPixmap(qta.icon(icon_name, color=color).pixmap(12, 12))
