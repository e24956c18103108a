"""Settings window (Qt) for imeswitch."""
import logging
from PyQt5.QtWidgets import (
    QMainWindow, QWidget, QVBoxLayout, QHBoxLayout,
    QGroupBox, QLabel, QCheckBox, QLineEdit, QSpinBox,
    QPushButton, QFormLayout, QStatusBar, QComboBox, QFileDialog,
)

from imeswitch.config import TOGGLE_KEYS
from imeswitch.tray import status_text

logger = logging.getLogger(__name__)


class SettingsWindow(QMainWindow):
    """Settings window with all configuration options."""

    def __init__(self, config, coordinator, parent=None):
        super().__init__(parent)
        self.config = config
        self.coordinator = coordinator

        self.setWindowTitle("imeswitch Settings")
        self.setMinimumWidth(450)

        central = QWidget()
        self.setCentralWidget(central)
        layout = QVBoxLayout(central)

        # === On/Off ===
        self._enabled_cb = QCheckBox("Switch input method automatically")
        self._enabled_cb.setChecked(config.enabled)
        self._enabled_cb.toggled.connect(self._on_enabled_changed)
        layout.addWidget(self._enabled_cb)

        # === Timing ===
        timing_group = QGroupBox("Timing")
        timing_layout = QFormLayout(timing_group)

        self._delay_spin = QSpinBox()
        self._delay_spin.setRange(0, 5000)
        self._delay_spin.setSuffix(" ms")
        self._delay_spin.setValue(config.delay_ms)
        timing_layout.addRow("Detection delay:", self._delay_spin)

        self._pause_spin = QSpinBox()
        self._pause_spin.setRange(0, 60000)
        self._pause_spin.setSuffix(" ms")
        self._pause_spin.setValue(config.pause_after_manual_switch_ms)
        timing_layout.addRow("Pause after manual switch:", self._pause_spin)

        layout.addWidget(timing_group)

        # === Document kinds ===
        kinds_group = QGroupBox("Document kinds")
        kinds_layout = QFormLayout(kinds_group)

        self._deny_input = QLineEdit(", ".join(config.deny_list))
        self._deny_input.setPlaceholderText("plaintext, markdown")
        kinds_layout.addRow("Never switch in:", self._deny_input)

        self._allow_input = QLineEdit(", ".join(config.allow_list))
        self._allow_input.setPlaceholderText("(empty = everywhere)")
        kinds_layout.addRow("Only switch in:", self._allow_input)

        layout.addWidget(kinds_group)

        # === Helper ===
        helper_group = QGroupBox("Helper")
        helper_layout = QFormLayout(helper_group)

        exe_row = QHBoxLayout()
        self._exe_input = QLineEdit(config.executable_path)
        self._exe_input.setPlaceholderText("(bundled ime-switcher.exe)")
        exe_row.addWidget(self._exe_input)
        browse_btn = QPushButton("Browse...")
        browse_btn.clicked.connect(self._browse_executable)
        exe_row.addWidget(browse_btn)
        helper_layout.addRow("Executable:", exe_row)

        self._key_combo = QComboBox()
        self._key_combo.addItems(TOGGLE_KEYS)
        self._key_combo.setCurrentText(config.toggle_key)
        helper_layout.addRow("Toggle key:", self._key_combo)

        self._log_cb = QCheckBox("Enable verbose logging")
        self._log_cb.setChecked(config.log_enabled)
        helper_layout.addRow(self._log_cb)

        layout.addWidget(helper_group)

        # === Status ===
        self._status_label = QLabel()
        layout.addWidget(self._status_label)

        # === Buttons ===
        btn_row = QHBoxLayout()
        save_btn = QPushButton("Save")
        save_btn.clicked.connect(self._save)
        btn_row.addWidget(save_btn)

        close_btn = QPushButton("Close")
        close_btn.clicked.connect(self.close)
        btn_row.addWidget(close_btn)

        layout.addLayout(btn_row)

        # Status bar
        self._statusbar = QStatusBar()
        self.setStatusBar(self._statusbar)

        self.refresh()

    def refresh(self):
        """Refresh displayed status."""
        enabled = self.config.enabled
        self._enabled_cb.blockSignals(True)
        self._enabled_cb.setChecked(enabled)
        self._enabled_cb.blockSignals(False)

        parts = [f"Mode: {status_text(enabled, self.coordinator.last_switched_lang)}"]
        if self.coordinator.manually_paused:
            parts.append("paused after manual switch")
        self._status_label.setText(" | ".join(parts))

    def _on_enabled_changed(self, checked):
        # Goes through the coordinator so a pending detection is cancelled
        if checked != self.config.enabled:
            self.coordinator.toggle_enabled()

    def _browse_executable(self):
        path, _ = QFileDialog.getOpenFileName(
            self, "Select ime-switcher", self._exe_input.text(),
            "Executables (*.exe *.ps1);;All files (*)",
        )
        if path:
            self._exe_input.setText(path)

    def _save(self):
        try:
            self.config.set("delay_ms", self._delay_spin.value())
            self.config.set("pause_after_manual_switch_ms", self._pause_spin.value())
            self.config.deny_list = self._deny_input.text()
            self.config.allow_list = self._allow_input.text()
            self.config.executable_path = self._exe_input.text()
            self.config.toggle_key = self._key_combo.currentText()
            self.config.log_enabled = self._log_cb.isChecked()
        except (OSError, ValueError) as e:
            logger.warning("Failed to save settings: %s", e)
            self._statusbar.showMessage(f"Failed to save settings: {e}", 5000)
            return
        logging.getLogger().setLevel(logging.DEBUG if self.config.log_enabled else logging.INFO)
        self._statusbar.showMessage("Settings saved.", 3000)
        self.refresh()
