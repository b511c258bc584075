"""Sign-in and sign-up screens."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from PySide6.QtCore import Qt, Signal
from PySide6.QtWidgets import (
    QHBoxLayout,
    QLabel,
    QLineEdit,
    QPushButton,
    QVBoxLayout,
    QWidget,
)
from result import Err, Ok

from teampad.models.identity import FEDERATED_PROVIDERS, AuthProvider
from teampad.services.forms import CredentialsForm
from teampad.services.navigation import Route
from teampad.ui.async_bridge import async_slot
from teampad.ui.widgets.banner import MessageBanner

if TYPE_CHECKING:
    from result import Result

    from teampad.models.errors import AuthError, ValidationError
    from teampad.models.identity import Identity
    from teampad.services.container import ServiceContainer
    from teampad.services.protocols import SessionControllerProtocol

logger = logging.getLogger(__name__)

SUCCESS_MESSAGES: dict[Route, str] = {
    Route.SIGN_IN: "👋 Welcome back! Signed in successfully!",
    Route.SIGN_UP: "🎉 Welcome to TeamPad! Account created successfully!",
}


async def submit_credentials(
    session: SessionControllerProtocol, route: Route, form: CredentialsForm
) -> Result[Identity, ValidationError | AuthError]:
    """Run the password command behind an auth screen."""
    match route:
        case Route.SIGN_UP:
            return await session.sign_up(form.email, form.password)
        case Route.SIGN_IN:
            return await session.sign_in(form.email, form.password)
    msg = f"{route} is not a credentials screen"
    raise ValueError(msg)


class _CredentialsPage(QWidget):
    """Email/password card shared by both auth screens."""

    navigate_requested = Signal(str)

    _subtitle = ""
    _submit_label = ""
    _busy_label = ""
    _switch_text = ""
    _route = Route.SIGN_IN
    _switch_route = Route.SIGN_UP

    def __init__(self, parent: QWidget | None = None) -> None:
        super().__init__(parent)
        self._services: ServiceContainer | None = None
        self._form = CredentialsForm()
        self._busy = False

        layout = QVBoxLayout(self)
        layout.setContentsMargins(48, 32, 48, 32)
        layout.setSpacing(12)
        layout.addStretch()

        title = QLabel("TeamPad")
        title.setObjectName("title")
        title.setAlignment(Qt.AlignmentFlag.AlignCenter)
        layout.addWidget(title)

        subtitle = QLabel(self._subtitle)
        subtitle.setObjectName("subtitle")
        subtitle.setAlignment(Qt.AlignmentFlag.AlignCenter)
        layout.addWidget(subtitle)

        self._banner = MessageBanner(parent=self)
        layout.addWidget(self._banner)

        layout.addWidget(QLabel("Email Address"))
        self._email = QLineEdit()
        self._email.setPlaceholderText("your@example.com")
        self._email.textChanged.connect(self._on_email_changed)
        layout.addWidget(self._email)

        layout.addWidget(QLabel("Password"))
        password_row = QHBoxLayout()
        self._password = QLineEdit()
        self._password.setEchoMode(QLineEdit.EchoMode.Password)
        self._password.setPlaceholderText("Enter your password")
        self._password.textChanged.connect(self._on_password_changed)
        self._password.returnPressed.connect(self._on_submit)
        password_row.addWidget(self._password)
        self._reveal = QPushButton("Show")
        self._reveal.setCheckable(True)
        self._reveal.toggled.connect(self._on_reveal_toggled)
        password_row.addWidget(self._reveal)
        layout.addLayout(password_row)

        self._submit = QPushButton(self._submit_label)
        self._submit.setObjectName("primary")
        self._submit.setCursor(Qt.CursorShape.PointingHandCursor)
        self._submit.clicked.connect(lambda: self._on_submit())
        layout.addWidget(self._submit)

        self._federated_row = QHBoxLayout()
        for provider in FEDERATED_PROVIDERS:
            btn = QPushButton(provider.label)
            btn.setCursor(Qt.CursorShape.PointingHandCursor)
            btn.clicked.connect(lambda _checked, p=provider: self._on_federated(p))
            self._federated_row.addWidget(btn)
        layout.addLayout(self._federated_row)

        switch = QPushButton(self._switch_text)
        switch.setObjectName("link")
        switch.setCursor(Qt.CursorShape.PointingHandCursor)
        switch.clicked.connect(lambda: self.navigate_requested.emit(self._switch_route.value))
        layout.addWidget(switch, alignment=Qt.AlignmentFlag.AlignCenter)
        layout.addStretch()

    def set_services(self, services: ServiceContainer) -> None:
        self._services = services
        self._banner.setVisible(False)
        self._banner.set_duration(services.config.banner_seconds)

    def reset(self) -> None:
        """Clear fields and messages when the screen is shown again."""
        self._form.clear()
        self._email.clear()
        self._password.clear()
        self._banner.clear_message()

    @async_slot
    async def _on_submit(self) -> None:
        if self._services is None or self._busy:
            return
        self._banner.clear_message()
        self._set_busy(True)
        try:
            result = await submit_credentials(self._services.session, self._route, self._form)
        finally:
            self._set_busy(False)
        self._show_result(result)

    @async_slot
    async def _on_federated(self, provider: AuthProvider) -> None:
        if self._services is None or self._busy:
            return
        self._banner.clear_message()
        self._set_busy(True)
        try:
            result = await self._services.session.sign_in_federated(provider)
        finally:
            self._set_busy(False)
        self._show_result(result)

    def _show_result(self, result: Result[Identity, ValidationError | AuthError]) -> None:
        match result:
            case Ok(_):
                self._form.clear()
                self._email.clear()
                self._password.clear()
                self._banner.show_success(SUCCESS_MESSAGES[self._route])
            case Err(error):
                self._banner.show_error(str(error))

    def _set_busy(self, busy: bool) -> None:
        self._busy = busy
        self._submit.setEnabled(not busy)
        self._submit.setText(self._busy_label if busy else self._submit_label)

    def _on_email_changed(self, text: str) -> None:
        self._form.email = text

    def _on_password_changed(self, text: str) -> None:
        self._form.password = text

    def _on_reveal_toggled(self, checked: bool) -> None:
        mode = QLineEdit.EchoMode.Normal if checked else QLineEdit.EchoMode.Password
        self._password.setEchoMode(mode)
        self._reveal.setText("Hide" if checked else "Show")


class SignInPage(_CredentialsPage):
    """Sign in with email/password or a federated provider."""

    _subtitle = "Sign in to your account"
    _submit_label = "Sign In"
    _busy_label = "Signing In..."
    _switch_text = "Don't have an account? Sign Up"
    _route = Route.SIGN_IN
    _switch_route = Route.SIGN_UP


class SignUpPage(_CredentialsPage):
    """Create a password account."""

    _subtitle = "Join the future of collaboration"
    _submit_label = "Create Account"
    _busy_label = "Creating Account..."
    _switch_text = "Already have an account? Log in"
    _route = Route.SIGN_UP
    _switch_route = Route.SIGN_IN
