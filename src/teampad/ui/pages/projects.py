"""Project area: choice, notice, create form and list dialogs."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from PySide6.QtCore import Qt, Signal
from PySide6.QtGui import QTextCursor
from PySide6.QtWidgets import (
    QHBoxLayout,
    QLabel,
    QLineEdit,
    QListWidget,
    QListWidgetItem,
    QPlainTextEdit,
    QPushButton,
    QStackedWidget,
    QVBoxLayout,
    QWidget,
)
from result import Err, Ok

from teampad.services.forms import ProjectForm
from teampad.services.project_flow import FlowState, ProjectFlow
from teampad.ui.async_bridge import async_slot
from teampad.ui.widgets.banner import MessageBanner

if TYPE_CHECKING:
    from teampad.models.identity import Identity
    from teampad.models.projects import Project
    from teampad.services.container import ServiceContainer

logger = logging.getLogger(__name__)


def _button(label: str, *, primary: bool = False) -> QPushButton:
    btn = QPushButton(label)
    btn.setCursor(Qt.CursorShape.PointingHandCursor)
    if primary:
        btn.setObjectName("primary")
    return btn


def _heading(text: str, hint: str = "") -> QWidget:
    box = QWidget()
    layout = QVBoxLayout(box)
    layout.setContentsMargins(0, 0, 0, 8)
    title = QLabel(text)
    title.setStyleSheet("font-size: 22px; font-weight: 700;")
    title.setAlignment(Qt.AlignmentFlag.AlignCenter)
    layout.addWidget(title)
    if hint:
        sub = QLabel(hint)
        sub.setObjectName("subtitle")
        sub.setWordWrap(True)
        sub.setAlignment(Qt.AlignmentFlag.AlignCenter)
        layout.addWidget(sub)
    return box


class ProjectsPage(QWidget):
    """Drives a ``ProjectFlow``; emits ``exit_requested`` when the flow exits."""

    exit_requested = Signal()
    project_created = Signal(str)

    def __init__(self, parent: QWidget | None = None) -> None:
        super().__init__(parent)
        self._services: ServiceContainer | None = None
        self._identity: Identity | None = None
        self._projects: list[Project] = []
        self._flow = ProjectFlow()
        self._remove_flow_listener = self._flow.add_listener(self._on_flow_changed)
        self._form = ProjectForm()
        self._submitting = False

        outer = QVBoxLayout(self)
        outer.setContentsMargins(32, 24, 32, 24)

        header = QHBoxLayout()
        back = _button("←")
        back.setFixedWidth(48)
        back.clicked.connect(self._on_back)
        header.addWidget(back)
        title = QLabel("Projects")
        title.setStyleSheet("font-size: 24px; font-weight: 700;")
        title.setAlignment(Qt.AlignmentFlag.AlignCenter)
        header.addWidget(title, stretch=1)
        header.addSpacing(48)
        outer.addLayout(header)

        self._banner = MessageBanner(parent=self)
        outer.addWidget(self._banner)

        self._stack = QStackedWidget()
        outer.addWidget(self._stack, stretch=1)
        self._panels: dict[FlowState, QWidget] = {
            FlowState.INITIAL_CHOICE: self._build_choice_panel(),
            FlowState.NO_EXISTING_PROJECTS_NOTICE: self._build_notice_panel(),
            FlowState.CREATE_FORM: self._build_form_panel(),
            FlowState.PROJECTS_LIST: self._build_list_panel(),
        }
        for panel in self._panels.values():
            self._stack.addWidget(panel)

    # ── Panels ──

    def _build_choice_panel(self) -> QWidget:
        panel = QWidget()
        layout = QVBoxLayout(panel)
        layout.addStretch()
        layout.addWidget(_heading("Project Options", "What would you like to do?"))
        create = _button("✨ Create New Project", primary=True)
        create.clicked.connect(lambda: self._flow.choose_create())
        layout.addWidget(create)
        self._open_btn = _button("📂 Open Existing Project")
        self._open_btn.clicked.connect(self._on_open_existing)
        layout.addWidget(self._open_btn)
        cancel = _button("Cancel")
        cancel.clicked.connect(lambda: self._flow.cancel())
        layout.addWidget(cancel)
        layout.addStretch()
        return panel

    def _build_notice_panel(self) -> QWidget:
        panel = QWidget()
        layout = QVBoxLayout(panel)
        layout.addStretch()
        layout.addWidget(
            _heading(
                "📭 No Projects Found",
                "You don't have any existing projects yet. "
                "Would you like to create your first project?",
            )
        )
        create = _button("✨ Create New Project", primary=True)
        create.clicked.connect(lambda: self._flow.create_from_notice())
        layout.addWidget(create)
        cancel = _button("Cancel")
        cancel.clicked.connect(lambda: self._flow.cancel())
        layout.addWidget(cancel)
        layout.addStretch()
        return panel

    def _build_form_panel(self) -> QWidget:
        panel = QWidget()
        layout = QVBoxLayout(panel)
        layout.addWidget(_heading("Create New Project"))
        layout.addWidget(QLabel("Project Title"))
        self._title_input = QLineEdit()
        self._title_input.setPlaceholderText("Enter project title...")
        self._title_input.textChanged.connect(self._on_title_changed)
        layout.addWidget(self._title_input)

        label_row = QHBoxLayout()
        label_row.addWidget(QLabel("Project Description"))
        self._counter = QLabel(self._form.counter_text)
        self._counter.setObjectName("subtitle")
        label_row.addWidget(self._counter)
        label_row.addStretch()
        layout.addLayout(label_row)
        self._description_input = QPlainTextEdit()
        self._description_input.setPlaceholderText("Describe your project...")
        self._description_input.textChanged.connect(self._on_description_changed)
        layout.addWidget(self._description_input)

        buttons = QHBoxLayout()
        self._cancel_btn = _button("Cancel")
        self._cancel_btn.clicked.connect(lambda: self._flow.cancel())
        buttons.addWidget(self._cancel_btn)
        self._submit_btn = _button("Create Project", primary=True)
        self._submit_btn.setEnabled(False)
        self._submit_btn.clicked.connect(lambda: self._on_submit())
        buttons.addWidget(self._submit_btn)
        layout.addLayout(buttons)
        return panel

    def _build_list_panel(self) -> QWidget:
        panel = QWidget()
        layout = QVBoxLayout(panel)
        row = QHBoxLayout()
        heading = QLabel("Your Projects")
        heading.setStyleSheet("font-size: 20px; font-weight: 700;")
        row.addWidget(heading)
        row.addStretch()
        new_btn = _button("+ New Project", primary=True)
        new_btn.clicked.connect(lambda: self._flow.create_from_list())
        row.addWidget(new_btn)
        layout.addLayout(row)
        self._list = QListWidget()
        self._list.setWordWrap(True)
        layout.addWidget(self._list, stretch=1)
        self._empty_label = QLabel("📝 No projects yet. Create your first project!")
        self._empty_label.setAlignment(Qt.AlignmentFlag.AlignCenter)
        layout.addWidget(self._empty_label)
        return panel

    # ── Lifecycle ──

    def set_services(self, services: ServiceContainer) -> None:
        self._services = services
        self._banner.set_duration(services.config.banner_seconds)

    @async_slot
    async def enter(self) -> None:
        """Start a fresh flow for the signed-in identity."""
        if self._services is None:
            return
        self._identity = self._services.session.require_identity()
        self._remove_flow_listener()
        self._flow = ProjectFlow()
        self._remove_flow_listener = self._flow.add_listener(self._on_flow_changed)
        self._reset_form()
        self._banner.clear_message()
        self._open_btn.setEnabled(False)
        self._projects = await self._services.projects.list(self._identity.key)
        self._open_btn.setEnabled(True)
        self._render_list()
        self._on_flow_changed(self._flow.state)

    # ── Handlers ──

    def _on_flow_changed(self, state: FlowState) -> None:
        if state is FlowState.EXITED:
            self.exit_requested.emit()
            return
        if state is FlowState.CREATE_FORM:
            self._reset_form()
        self._stack.setCurrentWidget(self._panels[state])

    def _on_open_existing(self) -> None:
        self._flow.choose_open(collection_empty=not self._projects)

    def _on_back(self) -> None:
        if self._flow.exited:
            self.exit_requested.emit()
            return
        self._flow.back()

    def _on_title_changed(self, text: str) -> None:
        self._form.title = text
        self._submit_btn.setEnabled(self._form.can_submit and not self._submitting)

    def _on_description_changed(self) -> None:
        value = self._description_input.toPlainText()
        if not self._form.set_description(value):
            # Over the cap: put the previous text back instead of truncating.
            self._description_input.blockSignals(True)
            self._description_input.setPlainText(self._form.description)
            self._description_input.moveCursor(QTextCursor.MoveOperation.End)
            self._description_input.blockSignals(False)
        self._counter.setText(self._form.counter_text)
        self._submit_btn.setEnabled(self._form.can_submit and not self._submitting)

    @async_slot
    async def _on_submit(self) -> None:
        if self._services is None or self._identity is None or self._submitting:
            return
        if not self._form.can_submit:
            return
        flow = self._flow
        self._submitting = True
        self._submit_btn.setEnabled(False)
        self._cancel_btn.setEnabled(False)
        try:
            result = await self._services.projects.create(
                self._identity.key, self._form.title, self._form.description
            )
        finally:
            self._submitting = False
            self._cancel_btn.setEnabled(True)
        match result:
            case Ok(project):
                self._projects = await self._services.projects.list(self._identity.key)
                self._render_list()
                self.project_created.emit(project.title)
                # the user may have left the form while the write was pending
                if flow is self._flow and flow.accepts_submit:
                    flow.submit_succeeded()
            case Err(error):
                self._banner.show_error(str(error))
                self._submit_btn.setEnabled(self._form.can_submit)

    def _reset_form(self) -> None:
        self._form.clear()
        self._title_input.clear()
        self._description_input.clear()
        self._counter.setText(self._form.counter_text)
        self._submit_btn.setEnabled(False)

    def _render_list(self) -> None:
        self._list.clear()
        for project in self._projects:
            created = project.created_at.astimezone().strftime("%x")
            item = QListWidgetItem(f"{project.title}\n{project.description}\nCreated: {created}")
            item.setData(Qt.ItemDataRole.UserRole, project.id)
            self._list.addItem(item)
        self._empty_label.setVisible(not self._projects)
        self._list.setVisible(bool(self._projects))
