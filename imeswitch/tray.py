"""System tray icon with context menu for imeswitch."""
import logging
from PyQt5.QtWidgets import (
    QSystemTrayIcon, QMenu, QAction, QApplication,
)
from PyQt5.QtGui import QIcon, QPixmap, QPainter, QColor, QFont
from PyQt5.QtCore import Qt, pyqtSignal

from imeswitch.detector import LangContext

logger = logging.getLogger(__name__)

_LABELS = {
    LangContext.ZH: "中",
    LangContext.EN: "EN",
}


def status_text(enabled: bool, lang) -> str:
    """Short status label: 中文 / EN / IME, or off when disabled."""
    if not enabled:
        return "IME off"
    if lang == LangContext.ZH:
        return "中文"
    if lang == LangContext.EN:
        return "EN"
    return "IME"


def _create_icon(enabled: bool, lang) -> QIcon:
    """Create a simple colored icon showing the current input mode."""
    size = 64
    pixmap = QPixmap(size, size)
    pixmap.fill(Qt.transparent)
    painter = QPainter(pixmap)
    painter.setRenderHint(QPainter.Antialiasing)

    # Circle background
    if not enabled:
        color = QColor(0x9E, 0x9E, 0x9E)
    elif lang == LangContext.ZH:
        color = QColor(0xE5, 0x39, 0x35)
    else:
        color = QColor(0x1E, 0x88, 0xE5)
    painter.setBrush(color)
    painter.setPen(Qt.NoPen)
    painter.drawEllipse(4, 4, size - 8, size - 8)

    painter.setPen(QColor(255, 255, 255))
    font = QFont("Sans", 24, QFont.Bold)
    painter.setFont(font)
    painter.drawText(pixmap.rect(), Qt.AlignCenter, _LABELS.get(lang, "IME"))

    painter.end()
    return QIcon(pixmap)


class TrayIcon(QSystemTrayIcon):
    """Tray status display: current mode, toggle, manual switching."""

    # Coordinator callbacks arrive on its worker thread; signals bring them
    # over to the GUI thread.
    state_changed = pyqtSignal(object)
    helper_missing = pyqtSignal()

    def __init__(self, config, coordinator, parent=None):
        super().__init__(parent)
        self.config = config
        self.coordinator = coordinator
        self._settings_window = None

        self._build_menu()
        self._refresh(coordinator.last_switched_lang)

        self.state_changed.connect(self._refresh)
        self.helper_missing.connect(self._show_helper_missing)
        coordinator.add_state_listener(self.state_changed.emit)
        coordinator.add_helper_unavailable_listener(self.helper_missing.emit)

        self.activated.connect(self._on_activated)

    def _build_menu(self):
        menu = QMenu()

        # Enable / Disable toggle
        self._toggle_action = QAction("Disable auto switch", menu)
        self._toggle_action.triggered.connect(self.coordinator.toggle_enabled)
        menu.addAction(self._toggle_action)

        menu.addSeparator()

        zh_action = QAction("Switch to Chinese (中文)", menu)
        zh_action.triggered.connect(lambda: self.coordinator.manual_switch(LangContext.ZH))
        menu.addAction(zh_action)

        en_action = QAction("Switch to English (EN)", menu)
        en_action.triggered.connect(lambda: self.coordinator.manual_switch(LangContext.EN))
        menu.addAction(en_action)

        menu.addSeparator()

        # Settings
        settings_action = QAction("Settings...", menu)
        settings_action.triggered.connect(self._open_settings)
        menu.addAction(settings_action)

        menu.addSeparator()

        # Quit
        quit_action = QAction("Quit", menu)
        quit_action.triggered.connect(self._quit)
        menu.addAction(quit_action)

        self.setContextMenu(menu)

    def _refresh(self, lang):
        enabled = self.config.enabled
        self._toggle_action.setText("Disable auto switch" if enabled else "Enable auto switch")
        self.setIcon(_create_icon(enabled, lang))
        self.setToolTip("imeswitch: " + status_text(enabled, lang))

    def _show_helper_missing(self):
        self.showMessage(
            "imeswitch: ime-switcher not found",
            "Set the helper path in Settings, or put ime-switcher.exe into the bin/ directory.",
            QSystemTrayIcon.Warning,
        )

    def _open_settings(self):
        from imeswitch.settings_ui import SettingsWindow
        if self._settings_window is None:
            self._settings_window = SettingsWindow(self.config, self.coordinator)
        self._settings_window.refresh()
        self._settings_window.show()
        self._settings_window.raise_()
        self._settings_window.activateWindow()

    def _quit(self):
        # The coordinator is disposed once the event loop has stopped
        QApplication.quit()

    def _on_activated(self, reason):
        if reason == QSystemTrayIcon.Trigger:  # left click
            self.coordinator.toggle_enabled()
