# src/sanity/gui/main_window.py
from typing import Dict

from PySide6.QtWidgets import (
    QMainWindow, QWidget, QHBoxLayout, QVBoxLayout, QLabel, QStackedWidget, QButtonGroup, QApplication
)
from PySide6.QtCore import QTimer
from PySide6.QtGui import QCloseEvent
import qtawesome as qta

from sanity.core.event_bus import EventBus
from sanity.core.resource_controller import ResourceController
from sanity.core.session_provider import SessionHandle
from sanity.core.shipped_notifier import ConfettiBurst
from sanity.gui.components import Colors, Typography, ModernButton
from sanity.gui.confetti_overlay import ConfettiOverlay
from sanity.gui.record_page import RecordPage
from sanity.gui.status_bar import StatusBar

TAB_ICONS = {
    "promises": "fa5s.handshake",
    "decisions": "fa5s.balance-scale",
    "exceptions": "fa5s.exclamation-circle",
}


class MainWindow(QMainWindow):
    """
    Main window of the dashboard: a sidebar with one tab per record kind,
    the active tab's page, and the status bar.
    """

    def __init__(self, event_bus: EventBus):
        super().__init__()
        self.event_bus = event_bus
        self.pages: Dict[str, RecordPage] = {}
        self._closing = False

        self.setWindowTitle("SanityDashboard")
        self.resize(1200, 800)
        self.setMinimumSize(800, 600)

        central_widget = QWidget()
        central_widget.setStyleSheet(f"background-color: {Colors.PRIMARY_BG.name()};")
        self.setCentralWidget(central_widget)
        main_layout = QHBoxLayout(central_widget)
        main_layout.setContentsMargins(0, 0, 0, 0)
        main_layout.setSpacing(0)

        main_layout.addWidget(self._create_sidebar())
        self.stack = QStackedWidget()
        main_layout.addWidget(self.stack, 1)

        self.status_bar = StatusBar(self.event_bus)
        self.setStatusBar(self.status_bar)

        self.confetti_overlay = ConfettiOverlay(central_widget)
        self.event_bus.subscribe("confetti_burst_requested", self.play_confetti)

    def _create_sidebar(self) -> QWidget:
        sidebar = QWidget()
        sidebar.setFixedWidth(240)
        sidebar.setStyleSheet(f"background-color: {Colors.SECONDARY_BG.name()};")
        layout = QVBoxLayout(sidebar)
        layout.setContentsMargins(12, 16, 12, 16)
        layout.setSpacing(8)

        header = QLabel("SanityDashboard")
        header.setFont(Typography.heading_large())
        header.setStyleSheet(f"color: {Colors.TEXT_PRIMARY.name()}; padding-bottom: 12px;")
        layout.addWidget(header)

        self.nav_layout = QVBoxLayout()
        self.nav_group = QButtonGroup(self)
        self.nav_group.setExclusive(True)
        layout.addLayout(self.nav_layout)
        layout.addStretch()

        self.email_label = QLabel()
        self.email_label.setWordWrap(True)
        self.email_label.setFont(Typography.body())
        self.email_label.setStyleSheet(f"color: {Colors.TEXT_SECONDARY.name()};")
        layout.addWidget(self.email_label)

        logs_button = ModernButton("Logs", "secondary")
        logs_button.setIcon(qta.icon("fa5s.terminal", color=Colors.TEXT_PRIMARY.name()))
        logs_button.clicked.connect(lambda: self.event_bus.emit("show_log_viewer_requested"))
        layout.addWidget(logs_button)

        logout_button = ModernButton("Logout", "secondary")
        logout_button.setIcon(qta.icon("fa5s.sign-out-alt", color=Colors.TEXT_PRIMARY.name()))
        logout_button.clicked.connect(lambda: self.event_bus.emit("logout_requested"))
        layout.addWidget(logout_button)
        return sidebar

    def load_dashboard(self, controllers: Dict[str, ResourceController], session: SessionHandle):
        """Builds one page per controller for a freshly signed-in user."""
        self.clear_dashboard()
        self.email_label.setText(session.email)
        for key, controller in controllers.items():
            page = RecordPage(controller, self.event_bus)
            self.pages[key] = page
            index = self.stack.addWidget(page)

            button = ModernButton(controller.schema.plural, "secondary")
            button.setCheckable(True)
            button.setIcon(qta.icon(TAB_ICONS.get(key, "fa5s.list"), color=Colors.TEXT_PRIMARY.name()))
            button.clicked.connect(lambda _, i=index: self.stack.setCurrentIndex(i))
            self.nav_group.addButton(button)
            self.nav_layout.addWidget(button)
            if index == 0:
                button.setChecked(True)
        self.stack.setCurrentIndex(0)

    def clear_dashboard(self):
        for page in self.pages.values():
            page.detach()
            self.stack.removeWidget(page)
            page.deleteLater()
        self.pages.clear()
        for button in self.nav_group.buttons():
            self.nav_group.removeButton(button)
            self.nav_layout.removeWidget(button)
            button.deleteLater()
        self.email_label.clear()

    def play_confetti(self, burst: ConfettiBurst):
        self.confetti_overlay.play(burst)

    def resizeEvent(self, event):
        super().resizeEvent(event)
        self.confetti_overlay.setGeometry(self.centralWidget().rect())

    def closeEvent(self, event: QCloseEvent):
        """
        Handle window close event with proper async cleanup.
        """
        if self._closing:
            event.accept()
            return

        self._closing = True
        self.event_bus.emit("application_shutdown")
        event.ignore()
        QTimer.singleShot(500, QApplication.instance().quit)
