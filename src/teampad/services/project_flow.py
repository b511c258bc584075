"""Dialog sequencing for the project area."""

from __future__ import annotations

import logging
from collections.abc import Callable
from enum import StrEnum

from teampad.models.errors import InvalidTransitionError

logger = logging.getLogger(__name__)


class FlowState(StrEnum):
    INITIAL_CHOICE = "initial_choice"
    NO_EXISTING_PROJECTS_NOTICE = "no_existing_projects_notice"
    CREATE_FORM = "create_form"
    PROJECTS_LIST = "projects_list"
    EXITED = "exited"


type FlowListener = Callable[[FlowState], None]


class ProjectFlow:
    """Which project dialog is showing.

    Cancel leaves the project area from every dialog except the create
    form opened from the "no projects" notice, which goes back to that
    notice. ``EXITED`` is terminal; the caller returns to its home screen.
    """

    def __init__(self) -> None:
        self._state = FlowState.INITIAL_CHOICE
        self._form_origin: FlowState | None = None
        self._listeners: list[FlowListener] = []

    @property
    def state(self) -> FlowState:
        return self._state

    @property
    def exited(self) -> bool:
        return self._state is FlowState.EXITED

    @property
    def accepts_submit(self) -> bool:
        """Whether a finished create may still move the flow to the list."""
        return self._state is FlowState.CREATE_FORM

    def add_listener(self, listener: FlowListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def remove() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return remove

    def choose_create(self) -> FlowState:
        self._expect("create", FlowState.INITIAL_CHOICE)
        return self._open_form(FlowState.INITIAL_CHOICE)

    def choose_open(self, collection_empty: bool) -> FlowState:
        self._expect("open", FlowState.INITIAL_CHOICE)
        if collection_empty:
            return self._move(FlowState.NO_EXISTING_PROJECTS_NOTICE)
        return self._move(FlowState.PROJECTS_LIST)

    def create_from_notice(self) -> FlowState:
        self._expect("create", FlowState.NO_EXISTING_PROJECTS_NOTICE)
        return self._open_form(FlowState.NO_EXISTING_PROJECTS_NOTICE)

    def create_from_list(self) -> FlowState:
        self._expect("create", FlowState.PROJECTS_LIST)
        return self._open_form(FlowState.PROJECTS_LIST)

    def submit_succeeded(self) -> FlowState:
        self._expect("submit", FlowState.CREATE_FORM)
        self._form_origin = None
        return self._move(FlowState.PROJECTS_LIST)

    def cancel(self) -> FlowState:
        self._expect(
            "cancel",
            FlowState.INITIAL_CHOICE,
            FlowState.NO_EXISTING_PROJECTS_NOTICE,
            FlowState.CREATE_FORM,
            FlowState.PROJECTS_LIST,
        )
        if (
            self._state is FlowState.CREATE_FORM
            and self._form_origin is FlowState.NO_EXISTING_PROJECTS_NOTICE
        ):
            self._form_origin = None
            return self._move(FlowState.NO_EXISTING_PROJECTS_NOTICE)
        return self._move(FlowState.EXITED)

    def back(self) -> FlowState:
        """Header back button: the list exits, dialogs return to the first choice."""
        self._expect(
            "back",
            FlowState.INITIAL_CHOICE,
            FlowState.NO_EXISTING_PROJECTS_NOTICE,
            FlowState.CREATE_FORM,
            FlowState.PROJECTS_LIST,
        )
        self._form_origin = None
        if self._state is FlowState.PROJECTS_LIST:
            return self._move(FlowState.EXITED)
        return self._move(FlowState.INITIAL_CHOICE)

    def _open_form(self, origin: FlowState) -> FlowState:
        self._form_origin = origin
        return self._move(FlowState.CREATE_FORM)

    def _expect(self, event: str, *allowed: FlowState) -> None:
        if self._state not in allowed:
            msg = f"Project flow event '{event}' is not valid in state {self._state}"
            raise InvalidTransitionError(msg)

    def _move(self, state: FlowState) -> FlowState:
        logger.debug("Project flow %s -> %s", self._state, state)
        self._state = state
        for listener in list(self._listeners):
            listener(state)
        return state
