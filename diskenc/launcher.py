#!/usr/bin/env python3
"""
Disk Encryption Events Launcher
===============================

Starts the client that follows the encryption daemon: progress windows,
result notices, reboot prompts and the device-password hook.

Usage:
    diskenc-events
    python -m diskenc --config ~/.config/diskenc/config.json --verbose
"""

import argparse
import logging
import sys
import traceback
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any, Dict, List, Optional

from diskenc.core.config import dbus_endpoint, load_or_create_config, stale_progress_window
from diskenc.core.constants import ConfigKeys
from diskenc.core.limits import Limits
from diskenc.core.paths import Paths
from diskenc.core.version import VERSION
from diskenc.errors import ConfigError
from diskenc.i18n import AVAILABLE_LANGUAGES

# ============================================================
# GLOBAL EXCEPTION HANDLING AND LOGGING
# ============================================================


def setup_logging(log_dir: Optional[Path] = None, level: str = "INFO") -> logging.Logger:
    """
    Set up rotating log file plus stderr output.

    Args:
        log_dir: Directory for the log file (default: XDG cache dir)
        level: Log level name for the file handler

    Returns:
        Configured logger instance
    """
    log_file = Paths.log_file(log_dir)
    log_file.parent.mkdir(parents=True, exist_ok=True)

    handler = RotatingFileHandler(
        str(log_file), maxBytes=Limits.MAX_LOG_FILE_SIZE, backupCount=Limits.LOG_BACKUP_COUNT, encoding="utf-8"
    )
    handler.setFormatter(
        logging.Formatter("%(asctime)s - %(levelname)s - %(name)s - %(message)s", datefmt="%Y-%m-%d %H:%M:%S")
    )
    handler.setLevel(getattr(logging, str(level).upper(), logging.INFO))

    logger = logging.getLogger("DiskEnc")
    logger.setLevel(logging.DEBUG)
    logger.addHandler(handler)

    stderr_handler = logging.StreamHandler(sys.stderr)
    stderr_handler.setFormatter(logging.Formatter("%(levelname)s: %(message)s"))
    stderr_handler.setLevel(logging.WARNING)
    logger.addHandler(stderr_handler)

    return logger


def create_exception_hook(logger: logging.Logger):
    """
    Create a global exception hook that logs unhandled exceptions.

    Returns:
        Exception hook function
    """

    def exception_hook(exc_type, exc_value, exc_traceback):
        if issubclass(exc_type, KeyboardInterrupt):
            # Allow Ctrl+C to exit normally
            sys.__excepthook__(exc_type, exc_value, exc_traceback)
            return

        logger.critical("Unhandled exception", exc_info=(exc_type, exc_value, exc_traceback))
        tb_text = "".join(traceback.format_exception(exc_type, exc_value, exc_traceback))
        print(f"FATAL ERROR:\n{tb_text}", file=sys.stderr)

    return exception_hook


def qt_message_handler(msg_type, context, message):
    """Forward Qt output into the log, tagged with its source location when Qt reports one."""
    from PyQt6.QtCore import QtMsgType

    logger = logging.getLogger("DiskEnc.Qt")
    where = f" [{context.file}:{context.line}]" if context is not None and context.file else ""
    levels = {
        QtMsgType.QtDebugMsg: logging.DEBUG,
        QtMsgType.QtInfoMsg: logging.INFO,
        QtMsgType.QtWarningMsg: logging.WARNING,
        QtMsgType.QtCriticalMsg: logging.ERROR,
        QtMsgType.QtFatalMsg: logging.CRITICAL,
    }
    logger.log(levels.get(msg_type, logging.WARNING), f"Qt{where}: {message}")


# ============================================================
# CONTEXT CONSTRUCTION
# ============================================================


def build_context(config: Dict[str, Any], lang: str):
    """Create the Qt/D-Bus collaborators and the orchestration context."""
    from diskenc.context import EncryptEventsContext
    from diskenc.dbus_bridge import DaemonDeviceInfo, SessionManagerReboot
    from diskenc.gui import QtBusyCursor, QtNotifier, QtProgressView, QtRebootPrompt, QtSecretPrompt
    from diskenc.tpm import Tpm2Unsealer

    daemon_service, daemon_path, daemon_iface = dbus_endpoint(config, ConfigKeys.DAEMON)
    session_service, session_path, session_iface = dbus_endpoint(config, ConfigKeys.SESSION)
    tpm = config.get(ConfigKeys.TPM) or {}

    progress_view = QtProgressView(lang=lang)
    ctx = EncryptEventsContext(
        device_info=DaemonDeviceInfo(daemon_service, daemon_path, daemon_iface),
        unsealer=Tpm2Unsealer(
            object_dir=tpm[ConfigKeys.OBJECT_DIR],
            tool=tpm[ConfigKeys.UNSEAL_TOOL],
            timeout=float(tpm[ConfigKeys.TIMEOUT]),
        ),
        prompt=QtSecretPrompt(lang=lang),
        notifier=QtNotifier(),
        reboot_prompt=QtRebootPrompt(lang=lang),
        session=SessionManagerReboot(session_service, session_path, session_iface),
        progress_view=progress_view,
        cursor=QtBusyCursor(),
        lang=lang,
        stale_window=stale_progress_window(config),
    )
    progress_view.on_dismissed = ctx.on_progress_dismissed
    return ctx


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="diskenc-events", description="Disk encryption event client")
    parser.add_argument("--config", type=Path, default=None, help="Path to config.json")
    parser.add_argument("--log-dir", type=Path, default=None, help="Directory for log files")
    parser.add_argument("--lang", choices=sorted(AVAILABLE_LANGUAGES), default=None, help="UI language")
    parser.add_argument("--verbose", action="store_true", help="Log debug output")
    parser.add_argument("--version", action="version", version=f"%(prog)s {VERSION}")
    return parser.parse_args(argv)


# ============================================================
# MAIN ENTRY POINT
# ============================================================


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)

    config_path = args.config or Paths.config_file()
    try:
        config, created = load_or_create_config(config_path)
    except (ConfigError, OSError) as e:
        print(f"Cannot load config {config_path}: {e}", file=sys.stderr)
        return 2

    log_dir = args.log_dir or config.get(ConfigKeys.LOG_DIR)
    level = "DEBUG" if args.verbose else config.get(ConfigKeys.LOG_LEVEL, "INFO")
    logger = setup_logging(Path(log_dir) if log_dir else None, level)
    sys.excepthook = create_exception_hook(logger)

    logger.info(f"diskenc-events {VERSION} starting")
    logger.info(f"Config: {config_path}{' (created)' if created else ''}")

    from PyQt6.QtCore import qInstallMessageHandler
    from PyQt6.QtWidgets import QApplication

    from diskenc.dbus_bridge import DaemonSignalBridge

    qInstallMessageHandler(qt_message_handler)

    app = QApplication.instance() or QApplication(sys.argv if argv is None else ["diskenc-events"])
    app.setQuitOnLastWindowClosed(False)

    lang = args.lang or config.get(ConfigKeys.LANGUAGE, "en")
    ctx = build_context(config, lang)

    daemon_service, daemon_path, daemon_iface = dbus_endpoint(config, ConfigKeys.DAEMON)
    ctx.start(
        bridge_factory=lambda dispatcher: DaemonSignalBridge(dispatcher, daemon_service, daemon_path, daemon_iface)
    )
    try:
        return app.exec()
    finally:
        ctx.stop()
        logger.info("diskenc-events stopped")


if __name__ == "__main__":
    sys.exit(main())
