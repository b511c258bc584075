"""Interactive consent step for federated sign-in."""

from __future__ import annotations

import asyncio

from PySide6.QtWidgets import (
    QDialog,
    QDialogButtonBox,
    QFormLayout,
    QLabel,
    QLineEdit,
    QVBoxLayout,
    QWidget,
)

from teampad.models.identity import AuthProvider
from teampad.providers.base import ConsentFlow, FederatedCredential


class ConsentDialog(QDialog):
    """Collects the federated account to sign in with.

    The ID token field is only shown for backends that exchange a real
    provider token (Firebase).
    """

    def __init__(
        self,
        provider: AuthProvider,
        *,
        needs_token: bool,
        parent: QWidget | None = None,
    ) -> None:
        super().__init__(parent)
        self._provider = provider
        self.setWindowTitle(f"Continue with {provider.label}")
        self.setModal(True)

        layout = QVBoxLayout(self)
        layout.addWidget(QLabel(f"TeamPad wants to use your {provider.label} account."))
        form = QFormLayout()
        self._email = QLineEdit()
        self._email.setPlaceholderText("you@example.com")
        form.addRow("Account email", self._email)
        self._name = QLineEdit()
        form.addRow("Display name", self._name)
        self._token = QLineEdit()
        if needs_token:
            form.addRow("ID token", self._token)
        layout.addLayout(form)

        buttons = QDialogButtonBox(
            QDialogButtonBox.StandardButton.Ok | QDialogButtonBox.StandardButton.Cancel
        )
        buttons.accepted.connect(self.accept)
        buttons.rejected.connect(self.reject)
        layout.addWidget(buttons)

    def credential(self) -> FederatedCredential:
        return FederatedCredential(
            provider=self._provider,
            email=self._email.text().strip(),
            display_name=self._name.text().strip() or None,
            id_token=self._token.text().strip(),
        )


def make_consent_flow(parent: QWidget, *, needs_token: bool) -> ConsentFlow:
    """Consent flow that shows a ``ConsentDialog``; closing it means cancelled."""

    async def consent(provider: AuthProvider) -> FederatedCredential | None:
        dialog = ConsentDialog(provider, needs_token=needs_token, parent=parent)
        future: asyncio.Future[FederatedCredential | None] = (
            asyncio.get_running_loop().create_future()
        )

        def on_finished(code: int) -> None:
            if future.done():
                return
            accepted = code == QDialog.DialogCode.Accepted.value
            future.set_result(dialog.credential() if accepted else None)

        dialog.finished.connect(on_finished)
        dialog.open()
        try:
            return await future
        finally:
            dialog.deleteLater()

    return consent
