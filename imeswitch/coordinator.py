"""Switch coordinator: debounce, manual pause and dedup around the detector.

The coordinator is the only component that invokes the external switch.
Every public method hands its work to a single Worker, so state is only
ever touched from that one thread and helper calls never overlap.

State machine:
    Idle ──cursor event──▶ Pending ──delay_ms──▶ Executing ──▶ Idle
    A newer cursor event cancels Pending (last write wins).
    manual_switch() bypasses the debounce and pauses automatic
    detection for pause_after_manual_switch_ms.
"""
import logging
from dataclasses import dataclass
from typing import Callable, List, Optional

from imeswitch.config import Config
from imeswitch.detector import LangContext, detect
from imeswitch.mode import ModeKnown, ModeProvider
from imeswitch.scheduler import ScheduledTask, Worker

logger = logging.getLogger(__name__)

SWITCH_TARGETS = (LangContext.ZH, LangContext.EN)


@dataclass(frozen=True)
class CursorSnapshot:
    line_text: str
    column: int
    has_selection: bool = False


SnapshotSupplier = Callable[[], Optional[CursorSnapshot]]


@dataclass
class CoordinatorState:
    # Last language the helper confirmed; dedup key
    last_switched_lang: Optional[LangContext] = None
    manually_paused: bool = False
    pending_debounce: Optional[ScheduledTask] = None
    pause_timer: Optional[ScheduledTask] = None
    # notify_helper_unavailable is one-shot
    helper_notified: bool = False


class SwitchCoordinator:
    """Decides whether and when to switch the input method."""

    def __init__(self, config: Config, switcher, worker: Optional[Worker] = None,
                 mode_provider: Optional[ModeProvider] = None, look_around: int = 1):
        self.config = config
        self._switcher = switcher
        self._worker = worker if worker is not None else Worker()
        self._mode_provider = mode_provider or ModeProvider()
        self._look_around = look_around
        self._state = CoordinatorState()
        self._disposed = False
        self._state_listeners: List[Callable[[Optional[LangContext]], None]] = []
        self._helper_listeners: List[Callable[[], None]] = []

    # --- read surface ---------------------------------------------------

    @property
    def enabled(self) -> bool:
        return self.config.enabled

    @property
    def last_switched_lang(self) -> Optional[LangContext]:
        return self._state.last_switched_lang

    @property
    def manually_paused(self) -> bool:
        return self._state.manually_paused

    @property
    def state(self) -> CoordinatorState:
        return self._state

    @property
    def disposed(self) -> bool:
        return self._disposed

    def add_state_listener(self, callback: Callable[[Optional[LangContext]], None]):
        """Register callback(lang) run on the worker after state changes."""
        self._state_listeners.append(callback)

    def add_helper_unavailable_listener(self, callback: Callable[[], None]):
        self._helper_listeners.append(callback)

    # --- inbound ----------------------------------------------------------

    def on_cursor_moved(self, line_text: str, column: int, document_kind: str,
                        has_selection: bool = False):
        """Cursor moved; the given line and column are evaluated after the debounce."""
        snapshot = CursorSnapshot(line_text, column, has_selection)
        self.schedule_detect(document_kind, lambda: snapshot)

    def schedule_detect(self, document_kind: str, supplier: SnapshotSupplier):
        """Cursor moved; ``supplier`` is called when the debounce expires.

        The supplier returns the live CursorSnapshot, or None when there is
        nothing to evaluate (editor gone, selection active).
        """
        self._submit(lambda: self._handle_cursor_event(document_kind, supplier))

    def manual_switch(self, lang: LangContext):
        """Switch immediately and pause automatic detection for a while."""
        if lang not in SWITCH_TARGETS:
            raise ValueError(f"manual switch target must be zh or en, got {lang!r}")
        self._submit(lambda: self._manual_switch(lang))

    def toggle_enabled(self):
        self._submit(self._toggle_enabled)

    def check_helper(self):
        """Notify listeners (once) if the helper cannot be found."""
        self._submit(self._check_helper)

    def dispose(self):
        if self._disposed:
            return
        self._disposed = True
        self._worker.submit(self._cancel_timers)
        self._worker.shutdown()
        logger.debug("Coordinator disposed")

    # --- worker side ------------------------------------------------------

    def _submit(self, fn: Callable[[], None]):
        if self._disposed:
            logger.debug("Coordinator disposed, ignoring request")
            return
        self._worker.submit(fn)

    def _handle_cursor_event(self, document_kind: str, supplier: SnapshotSupplier):
        if not self.config.enabled:
            return

        mode = self._mode_provider.current_mode()
        if isinstance(mode, ModeKnown) and not mode.is_insert_like:
            # Command-like mode: typed keys are commands, force English
            self._cancel_debounce()
            if self._state.last_switched_lang != LangContext.EN:
                logger.debug("Editor in command mode, forcing EN")
                self._manual_switch(LangContext.EN)
            return

        if self._state.manually_paused:
            return
        if not self.config.is_allowed(document_kind):
            logger.debug("Document kind %r not allowed, skipping", document_kind)
            return

        self._cancel_debounce()
        self._state.pending_debounce = self._worker.schedule(
            self.config.delay_ms, lambda: self._run_detection(supplier))

    def _run_detection(self, supplier: SnapshotSupplier):
        self._state.pending_debounce = None
        if not self.config.enabled or self._state.manually_paused:
            return

        snapshot = self._read_snapshot(supplier)
        if snapshot is None:
            return

        ctx = detect(snapshot.line_text, snapshot.column, self._look_around)
        logger.debug("Detected %s (column %d, line %r)",
                     ctx.value, snapshot.column, snapshot.line_text[:40])
        if ctx in SWITCH_TARGETS:
            self._perform_switch(ctx)

    def _read_snapshot(self, supplier: SnapshotSupplier) -> Optional[CursorSnapshot]:
        try:
            snapshot = supplier()
        except Exception as e:
            logger.debug("Cursor snapshot unavailable: %s", e)
            return None
        if snapshot is None or snapshot.has_selection:
            return None
        if not isinstance(snapshot.line_text, str):
            return None
        if isinstance(snapshot.column, bool) or not isinstance(snapshot.column, int):
            return None
        if snapshot.column < 0:
            return None
        return snapshot

    def _manual_switch(self, lang: LangContext):
        self._cancel_pause()
        self._state.manually_paused = True
        self._state.pause_timer = self._worker.schedule(
            self.config.pause_after_manual_switch_ms, self._end_pause)
        # A stale detection must not undo the user's choice
        self._cancel_debounce()
        self._state.last_switched_lang = None  # force the switch through
        self._perform_switch(lang)

    def _end_pause(self):
        self._state.manually_paused = False
        self._state.pause_timer = None
        logger.debug("Manual pause expired")

    def _toggle_enabled(self):
        enabled = not self.config.enabled
        self.config.enabled = enabled
        if not enabled:
            self._cancel_debounce()
        logger.info("Toggled: %s", "enabled" if enabled else "disabled")
        self._notify_state(self._state.last_switched_lang)

    def _check_helper(self):
        if not self._switcher.available():
            self._notify_helper_unavailable()

    def _perform_switch(self, lang: LangContext):
        if lang == self._state.last_switched_lang:
            return

        if not self._switcher.available():
            logger.warning("IME helper not available, cannot switch to %s", lang.value)
            self._notify_helper_unavailable()
            return

        try:
            ok = self._switcher.switch(lang, self.config.toggle_key)
        except Exception as e:
            logger.warning("IME switch raised (target=%s): %s", lang.value, e)
            ok = False

        if not ok:
            logger.warning("IME switch failed, target=%s", lang.value)
            return

        self._state.last_switched_lang = lang
        if self.config.log_enabled:
            logger.info("IME switched to %s", lang.value)
        self._notify_state(lang)

    def _cancel_debounce(self):
        if self._state.pending_debounce is not None:
            self._state.pending_debounce.cancel()
            self._state.pending_debounce = None

    def _cancel_pause(self):
        if self._state.pause_timer is not None:
            self._state.pause_timer.cancel()
            self._state.pause_timer = None

    def _cancel_timers(self):
        self._cancel_debounce()
        self._cancel_pause()

    def _notify_state(self, lang: Optional[LangContext]):
        for callback in list(self._state_listeners):
            try:
                callback(lang)
            except Exception:
                logger.exception("State listener failed")

    def _notify_helper_unavailable(self):
        if self._state.helper_notified:
            return
        self._state.helper_notified = True
        for callback in list(self._helper_listeners):
            try:
                callback()
            except Exception:
                logger.exception("Helper-unavailable listener failed")
