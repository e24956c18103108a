"""Optional editor-mode capability (vim-style insert vs. command modes).

Hosts that embed a modal editing layer can report whether the editor is in
an insert-like mode. Hosts without one use the base ModeProvider, which
always answers UNAVAILABLE. Querying never raises.
"""
import logging
from dataclasses import dataclass
from typing import Any, Callable, Union

logger = logging.getLogger(__name__)

# Mode names that accept typed text
INSERT_LIKE_PREFIXES = ("INSERT", "REPLACE")


class ModeUnavailable:
    """No mode information: the capability is absent or failed."""

    def __repr__(self):
        return "UNAVAILABLE"


UNAVAILABLE = ModeUnavailable()


@dataclass(frozen=True)
class ModeKnown:
    is_insert_like: bool


EditorMode = Union[ModeUnavailable, ModeKnown]


class ModeProvider:
    def current_mode(self) -> EditorMode:
        return UNAVAILABLE


class CallableModeProvider(ModeProvider):
    """Adapts a host callable to ModeProvider.

    The callable may return a mode name ("INSERT", "NORMAL", "VISUAL"...),
    a bool (True = insert-like) or None (unknown).
    """

    def __init__(self, query: Callable[[], Any]):
        self._query = query
        self._failed_once = False

    def current_mode(self) -> EditorMode:
        try:
            raw = self._query()
        except Exception as e:
            if not self._failed_once:
                self._failed_once = True
                logger.warning("Mode provider failed, treating mode as unavailable: %s", e)
            else:
                logger.debug("Mode provider failed: %s", e)
            return UNAVAILABLE
        return mode_from_value(raw)


def mode_from_value(raw: Any) -> EditorMode:
    if raw is None:
        return UNAVAILABLE
    if isinstance(raw, bool):
        return ModeKnown(is_insert_like=raw)
    name = str(raw).strip().upper()
    if not name:
        return UNAVAILABLE
    return ModeKnown(is_insert_like=name.startswith(INSERT_LIKE_PREFIXES))
