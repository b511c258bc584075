"""Home screen for a signed-in identity."""

from __future__ import annotations

from typing import TYPE_CHECKING

from PySide6.QtCore import Qt, Signal
from PySide6.QtWidgets import QLabel, QPushButton, QVBoxLayout, QWidget

from teampad.services.navigation import Route
from teampad.ui.async_bridge import async_slot

if TYPE_CHECKING:
    from teampad.services.container import ServiceContainer


class HomePage(QWidget):
    navigate_requested = Signal(str)

    def __init__(self, parent: QWidget | None = None) -> None:
        super().__init__(parent)
        self._services: ServiceContainer | None = None

        layout = QVBoxLayout(self)
        layout.setContentsMargins(48, 32, 48, 32)
        layout.setSpacing(14)
        layout.addStretch()

        self._welcome = QLabel("Welcome to TeamPad")
        self._welcome.setObjectName("title")
        self._welcome.setAlignment(Qt.AlignmentFlag.AlignCenter)
        self._welcome.setWordWrap(True)
        layout.addWidget(self._welcome)

        self._provider = QLabel("")
        self._provider.setObjectName("subtitle")
        self._provider.setAlignment(Qt.AlignmentFlag.AlignCenter)
        layout.addWidget(self._provider)

        projects_btn = QPushButton("Projects")
        projects_btn.setObjectName("primary")
        projects_btn.setCursor(Qt.CursorShape.PointingHandCursor)
        projects_btn.clicked.connect(lambda: self.navigate_requested.emit(Route.PROJECTS.value))
        layout.addWidget(projects_btn)

        self._sign_out_btn = QPushButton("Sign Out")
        self._sign_out_btn.setCursor(Qt.CursorShape.PointingHandCursor)
        self._sign_out_btn.clicked.connect(lambda: self._on_sign_out())
        layout.addWidget(self._sign_out_btn)
        layout.addStretch()

    def set_services(self, services: ServiceContainer) -> None:
        self._services = services

    def refresh(self) -> None:
        if self._services is None:
            return
        identity = self._services.session.require_identity()
        self._welcome.setText(f"Welcome to TeamPad, {identity.greeting_name}")
        self._provider.setText(f"Signed in with {identity.provider.label}")
        self._sign_out_btn.setEnabled(True)

    @async_slot
    async def _on_sign_out(self) -> None:
        if self._services is None:
            return
        self._sign_out_btn.setEnabled(False)
        await self._services.session.sign_out()
