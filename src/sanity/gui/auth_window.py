# src/sanity/gui/auth_window.py
from PySide6.QtWidgets import QWidget, QVBoxLayout, QLabel, QFrame, QHBoxLayout, QPushButton, QLineEdit
from PySide6.QtCore import Qt

from sanity.core.app_state import AuthView
from sanity.core.event_bus import EventBus
from sanity.core.session_provider import MIN_PASSWORD_LENGTH
from sanity.gui.components import Colors, Typography, ModernButton, styled_line_edit, error_label


class AuthWindow(QWidget):
    """
    The sign-in / sign-up screen. It only emits requests and shows what the
    auth service reports back; it never talks to the backend itself.
    """

    def __init__(self, event_bus: EventBus):
        super().__init__()
        self.event_bus = event_bus
        self._view = AuthView.LOGIN
        self.setWindowTitle("SanityDashboard")
        self.setFixedSize(420, 460)
        self.setStyleSheet(f"background-color: {Colors.PRIMARY_BG.name()};")

        outer = QVBoxLayout(self)
        outer.setAlignment(Qt.AlignmentFlag.AlignCenter)

        box = QFrame()
        box.setStyleSheet(f"""
            QFrame {{
                background-color: {Colors.SECONDARY_BG.name()};
                border: 1px solid {Colors.BORDER_DEFAULT.name()};
                border-radius: 8px;
            }}
        """)
        layout = QVBoxLayout(box)
        layout.setContentsMargins(24, 24, 24, 24)
        layout.setSpacing(12)

        self.title_label = QLabel()
        self.title_label.setFont(Typography.heading_large())
        self.title_label.setStyleSheet(f"color: {Colors.TEXT_PRIMARY.name()}; border: none;")
        self.subtitle_label = QLabel()
        self.subtitle_label.setWordWrap(True)
        self.subtitle_label.setFont(Typography.body())
        self.subtitle_label.setStyleSheet(f"color: {Colors.TEXT_SECONDARY.name()}; border: none;")

        self.error_label = error_label()
        self.email_input = styled_line_edit("Email")
        self.password_input = styled_line_edit("Password")
        self.password_input.setEchoMode(QLineEdit.EchoMode.Password)
        self.password_input.returnPressed.connect(self._submit)

        self.submit_button = ModernButton("", "primary")
        self.submit_button.clicked.connect(self._submit)

        switch_row = QHBoxLayout()
        self.switch_label = QLabel()
        self.switch_label.setStyleSheet(f"color: {Colors.TEXT_SECONDARY.name()}; border: none;")
        self.switch_button = QPushButton()
        self.switch_button.setCursor(Qt.PointingHandCursor)
        self.switch_button.setStyleSheet(f"color: {Colors.ACCENT_BLUE.name()}; border: none; background: none;")
        self.switch_button.clicked.connect(self._switch_view)
        switch_row.addWidget(self.switch_label)
        switch_row.addWidget(self.switch_button)
        switch_row.addStretch()

        layout.addWidget(self.title_label)
        layout.addWidget(self.subtitle_label)
        layout.addWidget(self.error_label)
        layout.addWidget(self.email_input)
        layout.addWidget(self.password_input)
        layout.addWidget(self.submit_button)
        layout.addLayout(switch_row)
        outer.addWidget(box)

        self._connect_events()
        self.set_view(AuthView.LOGIN)

    def _connect_events(self):
        self.event_bus.subscribe("auth_view_changed", self.set_view)
        self.event_bus.subscribe("auth_error", self.show_error)
        self.event_bus.subscribe("auth_busy_changed", self.set_busy)
        self.event_bus.subscribe("signup_confirmation_required", self.show_confirmation_notice)

    def set_view(self, view: AuthView):
        self._view = view
        self.error_label.hide()
        self.email_input.show()
        self.password_input.show()
        self.submit_button.show()
        if view == AuthView.LOGIN:
            self.title_label.setText("Welcome Back")
            self.subtitle_label.setText("Sign in to your SanityDashboard account")
            self.password_input.setPlaceholderText("Password")
            self.submit_button.setText("Sign In")
            self.switch_label.setText("Don't have an account?")
            self.switch_button.setText("Sign up")
        else:
            self.title_label.setText("Create Account")
            self.subtitle_label.setText("Start tracking your promises today")
            self.password_input.setPlaceholderText(f"Password (min {MIN_PASSWORD_LENGTH} characters)")
            self.submit_button.setText("Sign Up")
            self.switch_label.setText("Already have an account?")
            self.switch_button.setText("Sign in")

    def show_error(self, message: str):
        self.error_label.setText(message)
        self.error_label.show()

    def set_busy(self, busy: bool):
        self.submit_button.setEnabled(not busy)
        if busy:
            self.submit_button.setText("Signing in..." if self._view == AuthView.LOGIN else "Creating account...")
        else:
            self.submit_button.setText("Sign In" if self._view == AuthView.LOGIN else "Sign Up")

    def show_confirmation_notice(self, email: str):
        self.title_label.setText("Check Your Email")
        self.subtitle_label.setText(
            f"We've sent a confirmation link to {email}. Click it to activate your account.")
        self.error_label.hide()
        self.email_input.hide()
        self.password_input.hide()
        self.submit_button.hide()
        self.switch_label.setText("")
        self.switch_button.setText("Back to Login")
        self._view = AuthView.SIGNUP

    def _submit(self):
        self.error_label.hide()
        email = self.email_input.text().strip()
        password = self.password_input.text()
        if self._view == AuthView.LOGIN:
            self.event_bus.emit("login_requested", email, password)
        else:
            self.event_bus.emit("signup_requested", email, password)

    def _switch_view(self):
        target = AuthView.SIGNUP if self._view == AuthView.LOGIN else AuthView.LOGIN
        self.event_bus.emit("auth_view_change_requested", target)
        # The service only announces real changes; re-render in case the view was already current.
        self.set_view(target)

    def reset(self):
        self.password_input.clear()
        self.set_view(AuthView.LOGIN)
