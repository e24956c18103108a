"""Entry point for imeswitch.

Usage:
    python -m imeswitch.main                   # tray + scratch editor
    python -m imeswitch.main --tray            # tray only (manual switching)
    python -m imeswitch.main --switch zh       # one-shot switch via the helper
    python -m imeswitch.main --query           # print current IME mode
    python -m imeswitch.main --detect TEXT COL # print detected context
"""
import sys
import signal
import logging
import argparse
from pathlib import Path

# The helper is looked up in <this directory>/bin/
BUNDLE_DIR = Path(__file__).resolve().parent


def setup_logging(debug: bool = False):
    level = logging.DEBUG if debug else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(name)s] %(levelname)s: %(message)s",
        datefmt="%H:%M:%S",
    )


def build_switcher(config):
    from imeswitch.helper import HelperSwitcher
    return HelperSwitcher(BUNDLE_DIR, custom_path=lambda: config.executable_path)


def build_coordinator(config, switcher=None, worker=None, mode_provider=None):
    """Wire the coordinator with its collaborators (composition root)."""
    from imeswitch.coordinator import SwitchCoordinator
    if switcher is None:
        switcher = build_switcher(config)
    return SwitchCoordinator(config, switcher, worker=worker, mode_provider=mode_provider)


def _make_app():
    from PyQt5.QtWidgets import QApplication

    app = QApplication(sys.argv)
    app.setApplicationName("imeswitch")
    app.setQuitOnLastWindowClosed(False)
    return app


def run_full(document_kind: str):
    """Run tray + a scratch editor window in a single process (default mode)."""
    from PyQt5.QtWidgets import QPlainTextEdit
    from imeswitch.config import Config
    from imeswitch.editor_bridge import EditorBridge
    from imeswitch.tray import TrayIcon

    app = _make_app()

    config = Config()
    setup_logging(config.log_enabled)

    coordinator = build_coordinator(config)
    tray = TrayIcon(config, coordinator)
    tray.show()

    editor = QPlainTextEdit()
    editor.setWindowTitle(f"imeswitch: scratch ({document_kind})")
    editor.resize(640, 400)
    bridge = EditorBridge(editor, coordinator, document_kind)
    editor.show()

    coordinator.check_helper()

    exit_code = app.exec_()
    bridge.detach()
    # Release a worker blocked on a snapshot request before joining it
    app.processEvents()
    coordinator.dispose()
    sys.exit(exit_code)


def run_tray():
    """Run tray GUI only: status display and manual switching."""
    from imeswitch.config import Config
    from imeswitch.tray import TrayIcon

    app = _make_app()

    config = Config()
    setup_logging(config.log_enabled)

    coordinator = build_coordinator(config)
    tray = TrayIcon(config, coordinator)
    tray.show()
    coordinator.check_helper()

    exit_code = app.exec_()
    coordinator.dispose()
    sys.exit(exit_code)


def run_switch(lang_arg: str) -> int:
    from imeswitch.config import Config
    from imeswitch.detector import LangContext

    config = Config()
    setup_logging(config.log_enabled)
    switcher = build_switcher(config)
    ok = switcher.switch(LangContext(lang_arg), config.toggle_key)
    return 0 if ok else 1


def run_query() -> int:
    from imeswitch.config import Config

    config = Config()
    setup_logging(config.log_enabled)
    lang = build_switcher(config).query()
    if lang is None:
        print("unknown")
        return 1
    print(lang.value)
    return 0


def run_detect(text: str, column: int, look_around: int) -> int:
    from imeswitch.detector import detect

    print(detect(text, column, look_around).value)
    return 0


def main(argv=None):
    signal.signal(signal.SIGINT, signal.SIG_DFL)

    parser = argparse.ArgumentParser(description="imeswitch")
    group = parser.add_mutually_exclusive_group()
    group.add_argument("--tray", action="store_true",
                       help="Run tray GUI only")
    group.add_argument("--switch", choices=("zh", "en"),
                       help="Switch the input method once and exit")
    group.add_argument("--query", action="store_true",
                       help="Print the current input mode and exit")
    group.add_argument("--detect", nargs=2, metavar=("TEXT", "COLUMN"),
                       help="Print the language context at COLUMN of TEXT")
    parser.add_argument("--look-around", type=int, default=1,
                        help="Characters inspected on each side of the cursor (--detect)")
    parser.add_argument("--kind", default="scratch",
                        help="Document kind reported by the scratch editor")
    args = parser.parse_args(argv)

    if args.switch:
        return run_switch(args.switch)
    if args.query:
        return run_query()
    if args.detect:
        text, column = args.detect
        try:
            column = int(column)
        except ValueError:
            parser.error("COLUMN must be an integer")
        return run_detect(text, column, args.look_around)
    if args.tray:
        run_tray()
    else:
        run_full(args.kind)
    return 0


if __name__ == "__main__":
    sys.exit(main())
