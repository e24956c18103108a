"""Tests for helper resolution and invocation (subprocess mocked)."""
import sys
import os
import subprocess
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from unittest.mock import patch, MagicMock

from imeswitch.detector import LangContext
from imeswitch.helper import Helper, HelperSwitcher, resolve_helper


def completed(returncode=0, stdout="", stderr=""):
    result = MagicMock()
    result.returncode = returncode
    result.stdout = stdout
    result.stderr = stderr
    return result


def make_bin(tmp_path, *names):
    bin_dir = tmp_path / "bin"
    bin_dir.mkdir()
    for name in names:
        (bin_dir / name).write_text("")
    return tmp_path


def test_resolve_custom_path_first(tmp_path):
    base = make_bin(tmp_path, "ime-switcher.exe")
    helper = resolve_helper(base, "  C:/tools/ime.exe ")
    assert helper == Helper("exe", "C:/tools/ime.exe")


def test_resolve_prefers_bundled_exe(tmp_path):
    base = make_bin(tmp_path, "ime-switcher.exe", "ime-switcher.ps1")
    helper = resolve_helper(base)
    assert helper.kind == "exe"
    assert helper.path.endswith("ime-switcher.exe")


def test_resolve_falls_back_to_ps1(tmp_path):
    base = make_bin(tmp_path, "ime-switcher.ps1")
    helper = resolve_helper(base)
    assert helper.kind == "ps1"


def test_resolve_nothing(tmp_path):
    assert resolve_helper(tmp_path) is None
    assert resolve_helper(None) is None


def test_exe_command_line():
    helper = Helper("exe", "/x/ime-switcher.exe")
    assert helper.set_command(LangContext.ZH, "shift") == [
        "/x/ime-switcher.exe", "set", "zh", "--key=shift"]
    assert helper.query_command() == ["/x/ime-switcher.exe", "query"]


def test_ps1_command_line():
    helper = Helper("ps1", "/x/ime-switcher.ps1")
    cmd = helper.set_command(LangContext.EN, "auto")
    assert cmd[0] == "powershell.exe"
    assert cmd[-5:] == ["/x/ime-switcher.ps1", "set", "en", "-Key", "auto"]
    assert "-File" in cmd and "Bypass" in cmd


def test_switch_success(tmp_path):
    base = make_bin(tmp_path, "ime-switcher.exe")
    switcher = HelperSwitcher(base)
    with patch("imeswitch.helper.subprocess.run", return_value=completed(0, "ok")) as run:
        assert switcher.switch(LangContext.ZH, "ctrl") is True
    args = run.call_args[0][0]
    assert args[1:] == ["set", "zh", "--key=ctrl"]
    assert run.call_args[1]["timeout"] > 0


def test_switch_nonzero_exit(tmp_path):
    switcher = HelperSwitcher(make_bin(tmp_path, "ime-switcher.exe"))
    with patch("imeswitch.helper.subprocess.run", return_value=completed(1, "", "no ime")):
        assert switcher.switch(LangContext.EN) is False


def test_switch_spawn_error(tmp_path):
    switcher = HelperSwitcher(make_bin(tmp_path, "ime-switcher.exe"))
    with patch("imeswitch.helper.subprocess.run", side_effect=OSError("not a valid win32 app")):
        assert switcher.switch(LangContext.EN) is False


def test_switch_timeout(tmp_path):
    switcher = HelperSwitcher(make_bin(tmp_path, "ime-switcher.exe"), timeout_s=0.1)
    with patch("imeswitch.helper.subprocess.run",
               side_effect=subprocess.TimeoutExpired("ime-switcher.exe", 0.1)):
        assert switcher.switch(LangContext.ZH) is False


def test_switch_without_helper(tmp_path):
    switcher = HelperSwitcher(tmp_path)
    assert not switcher.available()
    with patch("imeswitch.helper.subprocess.run") as run:
        assert switcher.switch(LangContext.ZH) is False
    run.assert_not_called()


def test_switch_rejects_non_target(tmp_path):
    switcher = HelperSwitcher(make_bin(tmp_path, "ime-switcher.exe"))
    with patch("imeswitch.helper.subprocess.run") as run:
        assert switcher.switch(LangContext.MIXED) is False
    run.assert_not_called()


def test_custom_path_read_on_each_call(tmp_path):
    path = {"value": ""}
    switcher = HelperSwitcher(tmp_path, custom_path=lambda: path["value"])
    assert not switcher.available()
    path["value"] = "/opt/ime-switcher.exe"
    assert switcher.available()


def test_query(tmp_path):
    switcher = HelperSwitcher(make_bin(tmp_path, "ime-switcher.exe"))
    with patch("imeswitch.helper.subprocess.run", return_value=completed(0, "ZH\n")):
        assert switcher.query() is LangContext.ZH
    with patch("imeswitch.helper.subprocess.run", return_value=completed(0, "en")):
        assert switcher.query() is LangContext.EN
    with patch("imeswitch.helper.subprocess.run", return_value=completed(0, "??")):
        assert switcher.query() is None
    with patch("imeswitch.helper.subprocess.run", return_value=completed(1, "zh")):
        assert switcher.query() is None
    with patch("imeswitch.helper.subprocess.run", side_effect=FileNotFoundError()):
        assert switcher.query() is None
