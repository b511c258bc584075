"""Top-level route gating driven by the session subscription."""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from enum import StrEnum

from teampad.models.errors import GatedRouteError
from teampad.models.session import SessionState, SignedIn, SignedOut

logger = logging.getLogger(__name__)


class Route(StrEnum):
    SIGN_UP = "sign-up"
    SIGN_IN = "sign-in"
    HOME = "home"
    PROJECTS = "projects"


SIGNED_OUT_ROUTES = frozenset({Route.SIGN_UP, Route.SIGN_IN})
SIGNED_IN_ROUTES = frozenset({Route.HOME, Route.PROJECTS})


@dataclass(frozen=True)
class NavigationView:
    """What the shell should show: a route, or the loading indicator."""

    route: Route | None = None
    loading: bool = True


type NavigationListener = Callable[[NavigationView], None]


class Navigator:
    """Moves between route groups only when the session state says so.

    ``on_session_change`` is meant to be the one session subscription that
    drives navigation. Screens may call ``go`` to move within the current
    group (sign-in <-> sign-up, home <-> projects); crossing into the other
    group raises ``GatedRouteError``.
    """

    def __init__(self) -> None:
        self._view = NavigationView()
        self._listeners: list[NavigationListener] = []

    @property
    def view(self) -> NavigationView:
        return self._view

    @property
    def route(self) -> Route | None:
        return self._view.route

    def add_listener(self, listener: NavigationListener) -> Callable[[], None]:
        self._listeners.append(listener)
        listener(self._view)

        def remove() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return remove

    def on_session_change(self, state: SessionState) -> None:
        match state:
            case SignedIn():
                self._show(NavigationView(route=Route.HOME, loading=False))
            case SignedOut():
                self._show(NavigationView(route=Route.SIGN_IN, loading=False))
            case _:
                self._show(NavigationView(route=None, loading=True))

    def go(self, route: Route | str) -> None:
        target = Route(route)
        current = self._view.route
        if self._view.loading or current is None:
            msg = f"Cannot navigate to {target} before the session is resolved"
            raise GatedRouteError(msg)
        group = SIGNED_IN_ROUTES if current in SIGNED_IN_ROUTES else SIGNED_OUT_ROUTES
        if target not in group:
            msg = f"Route {target} is gated; only a session change can leave {current}"
            raise GatedRouteError(msg)
        self._show(NavigationView(route=target, loading=False))

    def _show(self, view: NavigationView) -> None:
        if view == self._view:
            return
        logger.info("Navigate: %s", view.route or "loading")
        self._view = view
        for listener in list(self._listeners):
            listener(view)
