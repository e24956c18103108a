"""Qt host adapter. Feeds cursor movements of a Qt text editor to the coordinator.

The coordinator reads the cursor snapshot from its worker thread, but Qt
widgets may only be touched on the GUI thread. snapshot() therefore hops to
the GUI thread with a blocking queued invocation when called from elsewhere.
"""
import logging
import threading
from typing import Optional

from PyQt5 import sip
from PyQt5.QtCore import QEvent, QMetaObject, QObject, Qt, QThread, pyqtSlot

from imeswitch.coordinator import CursorSnapshot

logger = logging.getLogger(__name__)


def utf16_offset_to_index(text: str, offset: int) -> int:
    """Convert a Qt (UTF-16 code unit) offset into a Python str index."""
    units = 0
    for index, ch in enumerate(text):
        if units >= offset:
            return index
        units += 2 if ord(ch) > 0xFFFF else 1
    return len(text)


class EditorBridge(QObject):
    """Connects a QPlainTextEdit / QTextEdit to a SwitchCoordinator.

    Must be created on the GUI thread.
    """

    def __init__(self, editor, coordinator, document_kind: str, parent=None):
        super().__init__(parent)
        self._editor = editor
        self._coordinator = coordinator
        self._document_kind = document_kind
        self._captured: Optional[CursorSnapshot] = None
        self._capture_lock = threading.Lock()

        editor.cursorPositionChanged.connect(self._on_cursor_moved)
        editor.selectionChanged.connect(self._on_cursor_moved)
        editor.installEventFilter(self)

    @property
    def document_kind(self) -> str:
        return self._document_kind

    def set_document_kind(self, kind: str):
        self._document_kind = kind

    def detach(self):
        if self._editor is None:
            return
        if not sip.isdeleted(self._editor):
            try:
                self._editor.cursorPositionChanged.disconnect(self._on_cursor_moved)
                self._editor.selectionChanged.disconnect(self._on_cursor_moved)
            except TypeError:
                pass
            self._editor.removeEventFilter(self)
        self._editor = None

    def eventFilter(self, obj, event):
        # Switching into the editor counts as a cursor event
        if event.type() == QEvent.FocusIn:
            self._on_cursor_moved()
        return False

    def _on_cursor_moved(self):
        self._coordinator.schedule_detect(self._document_kind, self.snapshot)

    def snapshot(self) -> Optional[CursorSnapshot]:
        """Current line and column, or None. Safe to call from any thread."""
        if QThread.currentThread() == self.thread():
            return self._read_editor()
        if self._editor is None:
            return None
        with self._capture_lock:
            self._captured = None
            QMetaObject.invokeMethod(self, "_capture", Qt.BlockingQueuedConnection)
            return self._captured

    @pyqtSlot()
    def _capture(self):
        self._captured = self._read_editor()

    def _read_editor(self) -> Optional[CursorSnapshot]:
        editor = self._editor
        if editor is None or sip.isdeleted(editor):
            return None
        cursor = editor.textCursor()
        if cursor.hasSelection():
            return None
        text = cursor.block().text()
        column = utf16_offset_to_index(text, cursor.positionInBlock())
        return CursorSnapshot(text, column)
