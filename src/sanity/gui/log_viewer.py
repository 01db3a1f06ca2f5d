# src/sanity/gui/log_viewer.py
import qasync
from collections import deque
from PySide6.QtWidgets import QMainWindow, QTextEdit, QWidget, QVBoxLayout, QHBoxLayout, QComboBox, QLabel
from PySide6.QtGui import QTextCharFormat, QFont
from sanity.core.event_bus import EventBus
from .components import Colors, Typography, input_style
from datetime import datetime

ALL_SOURCES = "All"
RECORDS = "Records"
AUTH = "Auth"
SYSTEM = "System"
SOURCE_GROUPS = (ALL_SOURCES, RECORDS, AUTH, SYSTEM)

AUTH_SOURCES = {"AuthService", "AppStateService"}
CONTROLLER_SUFFIX = "Controller"
MAX_ENTRIES = 2000


def source_label(source: str) -> str:
    """'PromisesController' reads as 'Promises'; everything else is shown as-is."""
    if source.endswith(CONTROLLER_SUFFIX) and source != CONTROLLER_SUFFIX:
        return source[:-len(CONTROLLER_SUFFIX)]
    return source


def source_group(source: str) -> str:
    if source.endswith(CONTROLLER_SUFFIX) or source == "ShippedNotifier":
        return RECORDS
    if source in AUTH_SOURCES:
        return AUTH
    return SYSTEM


class LogViewerWindow(QMainWindow):
    def __init__(self, event_bus: EventBus):
        super().__init__()
        self.event_bus = event_bus
        self.entries = deque(maxlen=MAX_ENTRIES)
        self.group_filter = ALL_SOURCES
        self.setWindowTitle("SanityDashboard - Activity Log")
        self.setGeometry(200, 200, 800, 500)

        self.source_filter = QComboBox()
        self.source_filter.addItems(SOURCE_GROUPS)
        self.source_filter.setStyleSheet(f"QComboBox {{ {input_style()} }}")
        self.source_filter.currentTextChanged.connect(self.set_group_filter)

        filter_row = QHBoxLayout()
        filter_row.setContentsMargins(10, 8, 10, 0)
        filter_label = QLabel("Show:")
        filter_label.setStyleSheet(f"color: {Colors.TEXT_SECONDARY.name()};")
        filter_row.addWidget(filter_label)
        filter_row.addWidget(self.source_filter)
        filter_row.addStretch()

        self.log_view = QTextEdit()
        self.log_view.setReadOnly(True)
        self.log_view.setFont(Typography.get_font(10, family="JetBrains Mono"))
        self.log_view.setStyleSheet(f"""
            QTextEdit {{
                background-color: {Colors.PRIMARY_BG.name()};
                color: {Colors.TEXT_SECONDARY.name()};
                border: none;
                padding: 10px;
            }}
        """)

        central_widget = QWidget()
        central_widget.setStyleSheet(f"background-color: {Colors.PRIMARY_BG.name()};")
        layout = QVBoxLayout(central_widget)
        layout.setContentsMargins(0, 0, 0, 0)
        layout.addLayout(filter_row)
        layout.addWidget(self.log_view)
        self.setCentralWidget(central_widget)

        self.event_bus.subscribe("log_message_received", self.append_log)

    @qasync.Slot(str, str, str)
    def append_log(self, source: str, msg_type: str, content: str):
        entry = (datetime.now().strftime("[%H:%M:%S]"), source, msg_type, content)
        self.entries.append(entry)
        if self._is_shown(source):
            self._render(*entry)

    def set_group_filter(self, group: str):
        """Re-renders the retained entries that belong to the chosen source group."""
        self.group_filter = group if group in SOURCE_GROUPS else ALL_SOURCES
        self.log_view.clear()
        for entry in self.entries:
            if self._is_shown(entry[1]):
                self._render(*entry)

    def _is_shown(self, source: str) -> bool:
        return self.group_filter == ALL_SOURCES or source_group(source) == self.group_filter

    def _render(self, timestamp: str, source: str, msg_type: str, content: str):
        color_map = {
            "info": Colors.TEXT_SECONDARY,
            "success": Colors.ACCENT_GREEN,
            "error": Colors.ACCENT_RED,
            "warning": Colors.ACCENT_YELLOW,
            "debug": Colors.ACCENT_BLUE,
        }
        color = color_map.get(msg_type.lower(), Colors.TEXT_PRIMARY)

        cursor = self.log_view.textCursor()
        cursor.movePosition(cursor.MoveOperation.End)

        time_format = QTextCharFormat()
        time_format.setForeground(Colors.TEXT_SECONDARY)
        cursor.insertText(f"{timestamp} ", time_format)

        source_format = QTextCharFormat()
        source_format.setForeground(color)
        source_format.setFontWeight(QFont.Weight.Bold)
        cursor.insertText(f"[{source_label(source)}] ", source_format)

        content_format = QTextCharFormat()
        content_format.setForeground(color)
        cursor.insertText(f"{content}\n", content_format)

        self.log_view.ensureCursorVisible()

    def show(self):
        super().show()
        self.activateWindow()
        self.raise_()
