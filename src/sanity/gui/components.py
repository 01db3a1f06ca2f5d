from PySide6.QtGui import QColor, QFont
from PySide6.QtWidgets import QPushButton, QLabel, QLineEdit, QTextEdit
from PySide6.QtCore import Qt


class Colors:
    """
    A modern, professional color palette inspired by tools like GitHub and VS Code.
    This creates a consistent look and feel across the entire application.
    """
    PRIMARY_BG = QColor("#0d1117")  # Near-black, for main backgrounds
    SECONDARY_BG = QColor("#161b22")  # Dark grey, for sidebars and panels
    ELEVATED_BG = QColor("#21262d")  # Lighter grey, for buttons/inputs
    BORDER_DEFAULT = QColor("#30363d")

    TEXT_PRIMARY = QColor("#f0f6fc")
    TEXT_SECONDARY = QColor("#8b949e")

    # --- Accent Colors ---
    ACCENT_BLUE = QColor("#ffa500")  # The app's orange accent
    ACCENT_GREEN = QColor("#3fb950")  # For success states
    ACCENT_RED = QColor("#f85149")  # For error states
    ACCENT_YELLOW = QColor("#d29922")  # For pending/warning states


STATUS_COLORS = {
    "Pending": Colors.ACCENT_YELLOW,
    "Shipped": Colors.ACCENT_GREEN,
    "Canceled": Colors.TEXT_SECONDARY,
}


class Typography:
    """A central place for defining font styles."""

    @staticmethod
    def get_font(size=12, weight=QFont.Weight.Normal, family="Segoe UI"):
        return QFont(family, size, weight)

    @staticmethod
    def heading_large():
        return Typography.get_font(18, QFont.Weight.Bold)

    @staticmethod
    def heading_small():
        return Typography.get_font(12, QFont.Weight.Bold)

    @staticmethod
    def body():
        return Typography.get_font(11, QFont.Weight.Normal)


class ModernButton(QPushButton):
    """A custom-styled button that fits our application's theme."""

    def __init__(self, text="", button_type="primary"):
        super().__init__(text)
        self.setMinimumHeight(32)
        self.setFont(Typography.body())
        self.setCursor(Qt.PointingHandCursor)

        if button_type == "primary":
            bg_color, hover_color = Colors.ACCENT_BLUE, Colors.ACCENT_BLUE.lighter(110)
        elif button_type == "danger":
            bg_color, hover_color = Colors.ELEVATED_BG, Colors.ACCENT_RED.darker(130)
        else:
            bg_color, hover_color = Colors.ELEVATED_BG, QColor("#30363d")

        self.setStyleSheet(f"""
            QPushButton {{
                background-color: {bg_color.name()};
                color: {Colors.TEXT_PRIMARY.name()};
                border: 1px solid {Colors.BORDER_DEFAULT.name()};
                border-radius: 6px;
                padding: 5px 15px;
            }}
            QPushButton:hover {{
                background-color: {hover_color.name()};
                border-color: {Colors.ACCENT_BLUE.name()};
            }}
            QPushButton:checked {{
                background-color: {Colors.ACCENT_BLUE.darker(120).name()};
            }}
            QPushButton:disabled {{
                color: {Colors.TEXT_SECONDARY.name()};
            }}
        """)


class StatusBadge(QLabel):
    """A rounded pill showing a promise status in its color."""

    def __init__(self, status: str, parent=None):
        super().__init__(status, parent)
        color = STATUS_COLORS.get(status, Colors.TEXT_SECONDARY)
        self.setAlignment(Qt.AlignmentFlag.AlignCenter)
        self.setFont(Typography.get_font(10, QFont.Weight.Bold))
        self.setStyleSheet(f"""
            QLabel {{
                color: {color.name()};
                border: 1px solid {color.name()};
                border-radius: 9px;
                padding: 1px 8px;
            }}
        """)


def input_style(invalid: bool = False) -> str:
    """Stylesheet for line/text edits; invalid inputs get a red border."""
    border = Colors.ACCENT_RED if invalid else Colors.BORDER_DEFAULT
    return f"""
        background-color: {Colors.ELEVATED_BG.name()};
        color: {Colors.TEXT_PRIMARY.name()};
        border: 1px solid {border.name()};
        border-radius: 4px;
        padding: 5px;
    """


def styled_line_edit(placeholder: str = "") -> QLineEdit:
    edit = QLineEdit()
    edit.setPlaceholderText(placeholder)
    edit.setFont(Typography.body())
    edit.setStyleSheet(input_style())
    return edit


def styled_text_edit(placeholder: str = "") -> QTextEdit:
    edit = QTextEdit()
    edit.setPlaceholderText(placeholder)
    edit.setFont(Typography.body())
    edit.setAcceptRichText(False)
    edit.setFixedHeight(80)
    edit.setStyleSheet(input_style())
    return edit


def error_label() -> QLabel:
    label = QLabel()
    label.setWordWrap(True)
    label.setFont(Typography.body())
    label.setStyleSheet(f"""
        color: {Colors.ACCENT_RED.name()};
        background-color: {Colors.ACCENT_RED.darker(400).name()};
        border: 1px solid {Colors.ACCENT_RED.name()};
        border-radius: 4px;
        padding: 6px;
    """)
    label.hide()
    return label
