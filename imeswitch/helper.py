"""Input method switching via the external ime-switcher helper.

Helper protocol:
    ime-switcher.exe set zh|en --key=shift|ctrl|auto
    ime-switcher.exe query          → prints "zh" or "en"
    exit code 0 = success

When only the PowerShell variant (ime-switcher.ps1) is bundled it is run
through powershell.exe with the same subcommands.

CRITICAL RULE: nothing in this module raises. Every subprocess call is
wrapped; failure is logged and reported as False / None.
"""
import logging
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, List, Optional, Union

from imeswitch.detector import LangContext

logger = logging.getLogger(__name__)

HELPER_EXE = "ime-switcher.exe"
HELPER_PS1 = "ime-switcher.ps1"

_POWERSHELL = [
    "powershell.exe", "-NoProfile", "-NonInteractive",
    "-ExecutionPolicy", "Bypass", "-File",
]

DEFAULT_TIMEOUT_S = 5.0


@dataclass(frozen=True)
class Helper:
    kind: str  # "exe" or "ps1"
    path: str

    def set_command(self, lang: LangContext, toggle_key: str) -> List[str]:
        if self.kind == "ps1":
            return _POWERSHELL + [self.path, "set", lang.value, "-Key", toggle_key]
        return [self.path, "set", lang.value, f"--key={toggle_key}"]

    def query_command(self) -> List[str]:
        if self.kind == "ps1":
            return _POWERSHELL + [self.path, "query"]
        return [self.path, "query"]


def resolve_helper(base_dir: Optional[Union[str, Path]], custom_path: str = "") -> Optional[Helper]:
    """Find the helper: custom path first, then bin/ exe, then bin/ ps1."""
    if custom_path and custom_path.strip():
        return Helper("exe", custom_path.strip())
    if base_dir is None:
        return None

    bin_dir = Path(base_dir) / "bin"
    exe = bin_dir / HELPER_EXE
    if exe.exists():
        return Helper("exe", str(exe.absolute()))
    ps1 = bin_dir / HELPER_PS1
    if ps1.exists():
        return Helper("ps1", str(ps1.absolute()))
    return None


class HelperSwitcher:
    """Runs the helper to switch the IME between Chinese and English modes.

    ``custom_path`` is a callable so a path edited in the settings takes
    effect without rebuilding the switcher.
    """

    def __init__(self, base_dir: Optional[Union[str, Path]] = None,
                 custom_path: Callable[[], str] = lambda: "",
                 timeout_s: float = DEFAULT_TIMEOUT_S):
        self._base_dir = base_dir
        self._custom_path = custom_path
        self._timeout_s = timeout_s

    def resolve(self) -> Optional[Helper]:
        try:
            return resolve_helper(self._base_dir, self._custom_path() or "")
        except Exception as e:
            logger.warning("Helper resolution failed (non-fatal): %s", e)
            return None

    def available(self) -> bool:
        return self.resolve() is not None

    def switch(self, lang: LangContext, toggle_key: str = "auto") -> bool:
        """Switch to ``lang`` (ZH or EN). Returns True on exit code 0."""
        if lang not in (LangContext.ZH, LangContext.EN):
            logger.warning("Refusing to switch to %s", lang)
            return False

        helper = self.resolve()
        if helper is None:
            logger.warning("%s / %s not found, cannot switch IME", HELPER_EXE, HELPER_PS1)
            return False

        cmd = helper.set_command(lang, toggle_key)
        logger.debug("Running helper: %s", " ".join(cmd))
        try:
            result = subprocess.run(
                cmd, capture_output=True, text=True, timeout=self._timeout_s,
            )
        except subprocess.TimeoutExpired:
            logger.warning("Helper timed out after %.1fs (target=%s)", self._timeout_s, lang.value)
            return False
        except (FileNotFoundError, OSError) as e:
            logger.warning("Failed to start helper %s: %s", helper.path, e)
            return False

        output = (result.stdout or "").strip()
        if result.returncode != 0:
            logger.warning("Helper exited with %d (target=%s): %s",
                           result.returncode, lang.value,
                           (result.stderr or output).strip())
            return False
        logger.debug("Helper output: %s", output)
        return True

    def query(self) -> Optional[LangContext]:
        """Ask the helper for the current IME mode. None when unknown."""
        helper = self.resolve()
        if helper is None:
            return None
        try:
            result = subprocess.run(
                helper.query_command(), capture_output=True, text=True,
                timeout=self._timeout_s,
            )
        except (FileNotFoundError, subprocess.TimeoutExpired, OSError) as e:
            logger.warning("IME query failed: %s", e)
            return None

        output = (result.stdout or "").strip().lower()
        if result.returncode != 0:
            return None
        if output == LangContext.ZH.value:
            return LangContext.ZH
        if output == LangContext.EN.value:
            return LangContext.EN
        return None
