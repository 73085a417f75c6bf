"""
Main Application Window
=======================
Host shell around the graph: header, graph view, controls, menus and the
status bar used as the notification sink.

Why is this file needed?
------------------------
1. Layout: It organizes the high-level visual structure of the application.
2. Routing: It connects the controls (strength slider, reset button, theme
   toggle) to the GraphSession and shows its notifications.
"""
import logging
from typing import Optional, Sequence

from PySide6.QtCore import Qt
from PySide6.QtGui import QAction, QCloseEvent
from PySide6.QtWidgets import QLabel, QMainWindow, QVBoxLayout, QWidget

from bordergraph.config import SUBTITLE, VISIBLE_APP_NAME, Preferences, save_preferences
from bordergraph.controller.session import GraphSession
from bordergraph.model import notifications
from bordergraph.model.notifications import Notification, NotificationKind
from bordergraph.model.simulation import SimulationConfig
from bordergraph.model.styling import Theme, tokens
from bordergraph.view.controls import GraphControls
from bordergraph.view.graph_view import GraphView

logger = logging.getLogger(__name__)

MESSAGE_TIMEOUT_MS = 4000


class MainWindow(QMainWindow):
    def __init__(self, pairs: Sequence[Sequence[str]], preferences: Optional[Preferences] = None) -> None:
        super().__init__()
        self.preferences: Preferences = preferences or Preferences()
        self._loading_key: Optional[str] = None

        self.setWindowTitle(VISIBLE_APP_NAME)
        self.resize(1200, 800)

        # --- MAIN CONTAINER ---
        main_widget = QWidget()
        self.setCentralWidget(main_widget)
        main_layout = QVBoxLayout(main_widget)
        main_layout.setContentsMargins(0, 0, 0, 0)
        main_layout.setSpacing(0)

        # --- 1. HEADER ---
        self.lbl_title = QLabel(VISIBLE_APP_NAME)
        self.lbl_title.setAlignment(Qt.AlignmentFlag.AlignCenter)
        self.lbl_subtitle = QLabel(SUBTITLE)
        self.lbl_subtitle.setAlignment(Qt.AlignmentFlag.AlignCenter)
        main_layout.addWidget(self.lbl_title)
        main_layout.addWidget(self.lbl_subtitle)

        # --- 2. GRAPH ---
        self.graph_view = GraphView()
        main_layout.addWidget(self.graph_view, stretch=1)

        # --- 3. CONTROLS ---
        self.controls = GraphControls(strength=int(self.preferences.strength))
        main_layout.addWidget(self.controls)

        # --- SESSION ---
        self.session = GraphSession(
            config=SimulationConfig(strength=self.preferences.strength),
            theme=self.preferences.theme,
            parent=self,
        )

        # --- SIGNAL CONNECTIONS ---
        self.session.notified.connect(self.on_notification)
        self.controls.strength_changed.connect(self.on_strength_changed)
        self.controls.reset_requested.connect(self.on_reset_view)
        self.graph_view.reset_requested.connect(self.on_reset_view)
        self.graph_view.theme_changed.connect(self.on_system_theme_changed)

        # --- ACTIONS & MENUS ---
        self._create_actions()
        self._create_menus()
        self._apply_header_style()

        # --- MOUNT & BUILD ---
        self.graph_view.attach(self.session)
        self.session.build(pairs)

    def _create_actions(self) -> None:
        self.act_reset = QAction("Reset View", self)
        self.act_reset.setShortcut("Ctrl+R")
        self.act_reset.triggered.connect(self.on_reset_view)

        self.act_dark = QAction("Dark Theme", self)
        self.act_dark.setCheckable(True)
        self.act_dark.setChecked(self.preferences.theme == Theme.DARK)
        self.act_dark.toggled.connect(self.on_dark_toggled)

        self.act_exit = QAction("Exit", self)
        self.act_exit.triggered.connect(self.close)

    def _create_menus(self) -> None:
        menu_bar = self.menuBar()

        file_menu = menu_bar.addMenu("&File")
        file_menu.addAction(self.act_exit)

        view_menu = menu_bar.addMenu("&View")
        view_menu.addAction(self.act_reset)
        view_menu.addSeparator()
        view_menu.addAction(self.act_dark)

    # --- SLOTS ---

    def on_notification(self, notification: Notification) -> None:
        """Status bar acts as the toast area."""
        bar = self.statusBar()
        match notification.kind:
            case NotificationKind.LOADING:
                self._loading_key = notification.key
                bar.showMessage(notification.title)
            case NotificationKind.DISMISS:
                if notification.key == self._loading_key:
                    self._loading_key = None
                    bar.clearMessage()
            case _:
                text = notification.title
                if notification.description:
                    text += f": {notification.description}"
                bar.showMessage(text, MESSAGE_TIMEOUT_MS)

    def on_strength_changed(self, value: int) -> None:
        self.preferences.strength = float(value)
        self.session.set_strength(value)

    def on_reset_view(self) -> None:
        self.session.reset_view()
        self.on_notification(notifications.view_reset())

    def on_dark_toggled(self, checked: bool) -> None:
        theme = Theme.DARK if checked else Theme.LIGHT
        self.preferences.theme = theme
        self.session.set_theme(theme)
        self._apply_header_style()

    def on_system_theme_changed(self, theme: Theme) -> None:
        # keeps the menu in sync; the view already re-themed the session
        self.act_dark.setChecked(theme == Theme.DARK)

    def _apply_header_style(self) -> None:
        t = tokens(self.preferences.theme)
        self.lbl_title.setStyleSheet(f"font-size: 20px; font-weight: bold; padding-top: 12px; color: {t.text};")
        self.lbl_subtitle.setStyleSheet(f"font-size: 12px; padding-bottom: 8px; color: {t.link};")

    def closeEvent(self, event: QCloseEvent, /) -> None:
        """Release the graph before the window goes away."""
        self.graph_view.detach()
        save_preferences(self.preferences)
        event.accept()
