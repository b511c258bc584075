"""Main window, service start-up and run_app()."""

from __future__ import annotations

import logging
import sys
from typing import TYPE_CHECKING

from PySide6.QtCore import QSettings, Qt
from PySide6.QtGui import QCloseEvent
from PySide6.QtWidgets import (
    QApplication,
    QLabel,
    QMainWindow,
    QStackedWidget,
    QStatusBar,
    QVBoxLayout,
    QWidget,
)

from teampad.models.errors import GatedRouteError
from teampad.services.container import ServiceContainer
from teampad.services.navigation import NavigationView, Route
from teampad.ui.async_bridge import cancel_all_tasks, create_event_loop, schedule
from teampad.ui.pages.auth import SignInPage, SignUpPage
from teampad.ui.pages.home import HomePage
from teampad.ui.pages.projects import ProjectsPage
from teampad.ui.theme import build_stylesheet
from teampad.ui.widgets.consent_dialog import make_consent_flow

if TYPE_CHECKING:
    from collections.abc import Callable

    from teampad.config import Config
    from teampad.models.errors import StorageFault

logger = logging.getLogger(__name__)


class TeamPadMainWindow(QMainWindow):
    """Stacked screens; which one is visible is decided by the Navigator."""

    def __init__(self, config: Config) -> None:
        super().__init__()
        self._config = config
        self._services: ServiceContainer | None = None
        self._remove_nav_listener: Callable[[], None] | None = None
        self._shutdown_in_progress = False

        self.setWindowTitle("TeamPad")
        self.setMinimumSize(460, 640)

        self._stack = QStackedWidget()
        self.setCentralWidget(self._stack)

        self._loading = QWidget()
        loading_layout = QVBoxLayout(self._loading)
        loading_label = QLabel("Getting things ready...")
        loading_label.setAlignment(Qt.AlignmentFlag.AlignCenter)
        loading_layout.addWidget(loading_label)
        self._stack.addWidget(self._loading)

        self._sign_in = SignInPage()
        self._sign_up = SignUpPage()
        self._home = HomePage()
        self._projects = ProjectsPage()
        self._pages: dict[Route, QWidget] = {
            Route.SIGN_IN: self._sign_in,
            Route.SIGN_UP: self._sign_up,
            Route.HOME: self._home,
            Route.PROJECTS: self._projects,
        }
        for page in self._pages.values():
            self._stack.addWidget(page)

        self._status_bar = QStatusBar()
        self.setStatusBar(self._status_bar)

        # ── Wire signals ──
        self._sign_in.navigate_requested.connect(self._on_navigate_requested)
        self._sign_up.navigate_requested.connect(self._on_navigate_requested)
        self._home.navigate_requested.connect(self._on_navigate_requested)
        self._projects.exit_requested.connect(lambda: self._on_navigate_requested(Route.HOME))
        self._projects.project_created.connect(
            lambda title: self._status_bar.showMessage(f"New project created: {title}", 4000)
        )

        self._restore_state()

    async def initialize(self) -> None:
        """Build services, resolve the session and start following navigation."""
        try:
            logger.info("Starting TeamPad with the %s backend", self._config.backend)
            consent = make_consent_flow(self, needs_token=self._config.backend == "firebase")
            self._services = await ServiceContainer.create(self._config, consent=consent)
            self._services.projects.set_storage_fault_callback(self._on_storage_fault)
            for page in (self._sign_in, self._sign_up, self._home, self._projects):
                page.set_services(self._services)
            self._remove_nav_listener = self._services.navigator.add_listener(self._show_view)
        except Exception:
            logger.exception("Application startup failed")
            self._status_bar.showMessage("Startup failed. Check terminal logs.")

    def _show_view(self, view: NavigationView) -> None:
        if view.loading or view.route is None:
            self._stack.setCurrentWidget(self._loading)
            return
        page = self._pages[view.route]
        if view.route in (Route.SIGN_IN, Route.SIGN_UP):
            page.reset()  # type: ignore[attr-defined]
        elif view.route is Route.HOME:
            self._home.refresh()
        elif view.route is Route.PROJECTS:
            self._projects.enter()
        self._stack.setCurrentWidget(page)

    def _on_navigate_requested(self, route: str) -> None:
        if self._services is None:
            return
        try:
            self._services.navigator.go(route)
        except GatedRouteError:
            logger.warning("Ignoring navigation to %s outside the current route group", route)

    def _on_storage_fault(self, fault: StorageFault) -> None:
        self._status_bar.showMessage(
            f"Could not save to local storage ({fault.message}). "
            "Changes are kept for this session only.",
            8000,
        )

    def _restore_state(self) -> None:
        geometry = _settings().value("geometry")
        if geometry:
            self.restoreGeometry(geometry)  # type: ignore[arg-type]

    def _save_state(self) -> None:
        settings = _settings()
        settings.setValue("geometry", self.saveGeometry())
        settings.sync()

    def closeEvent(self, event: QCloseEvent) -> None:
        """Close services before quitting; the second close goes straight through."""
        self._save_state()
        if self._shutdown_in_progress or self._services is None:
            event.accept()
            _quit()
            return

        self._shutdown_in_progress = True
        event.ignore()
        self._status_bar.showMessage("Shutting down...")
        schedule(self._shutdown_and_quit())

    async def _shutdown_and_quit(self) -> None:
        """Best-effort cleanup before quitting the Qt app."""
        try:
            cancel_all_tasks()
            if self._remove_nav_listener is not None:
                self._remove_nav_listener()
            if self._services is not None:
                await self._services.close()
                self._services = None
        except Exception:
            logger.exception("Error while shutting down services")
        finally:
            _quit()


def _settings() -> QSettings:
    return QSettings("TeamPad", "TeamPad")


def _quit() -> None:
    app = QApplication.instance()
    if app is not None:
        app.quit()


def run_app(config: Config) -> None:
    """Entry point: create QApplication, event loop, main window, and run."""
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")

    app = QApplication(sys.argv)
    app.setApplicationName("TeamPad")
    app.setOrganizationName("TeamPad")
    app.setStyleSheet(build_stylesheet())

    loop = create_event_loop(app)

    window = TeamPadMainWindow(config)
    window.show()

    schedule(window.initialize())

    with loop:
        loop.run_forever()
