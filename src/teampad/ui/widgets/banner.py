"""Transient success/error banner."""

from __future__ import annotations

from PySide6.QtCore import Qt, QTimer
from PySide6.QtWidgets import QLabel, QWidget

from teampad.ui.theme import banner_style


class MessageBanner(QLabel):
    """Shows one message at a time and hides it after ``seconds``."""

    def __init__(self, seconds: float = 4.0, parent: QWidget | None = None) -> None:
        super().__init__(parent)
        self.setWordWrap(True)
        self.setAlignment(Qt.AlignmentFlag.AlignCenter)
        self.setVisible(False)
        self._timer = QTimer(self)
        self._timer.setSingleShot(True)
        self._timer.setInterval(int(seconds * 1000))
        self._timer.timeout.connect(self.clear_message)

    def set_duration(self, seconds: float) -> None:
        self._timer.setInterval(int(seconds * 1000))

    def show_success(self, message: str) -> None:
        self._show(message, "success")

    def show_error(self, message: str) -> None:
        # Errors stay until the next submit.
        self._show(f"⚠️ {message}", "error", auto_hide=False)

    def show_warning(self, message: str) -> None:
        self._show(message, "warning")

    def clear_message(self) -> None:
        self._timer.stop()
        self.setText("")
        self.setVisible(False)

    def _show(self, message: str, kind: str, *, auto_hide: bool = True) -> None:
        self.setStyleSheet(banner_style(kind))
        self.setText(message)
        self.setVisible(True)
        if auto_hide:
            self._timer.start()
        else:
            self._timer.stop()
