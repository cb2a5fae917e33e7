#!/usr/bin/env python3
"""
Canvas Editor - Main Entry Point

A vector drawing editor that exports its shapes as a runnable Tkinter
Canvas script.

Usage:
    python main.py
    python main.py --debug              # Enable debug logging
    python main.py --log-file edit.log  # Also write the log to a file
    python main.py --config PATH        # Use an alternate settings file
"""

import sys
import logging
import argparse
from typing import List, Optional

from PyQt6.QtWidgets import QApplication
from PyQt6.QtCore import Qt
from PyQt6.QtGui import QFont, QPalette, QColor

from services import get_settings
from views import MainWindow

APP_NAME = "Canvas Editor"
APP_VERSION = "0.1.0"

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'

# Light UI palette; the drawing page itself uses the canvas background setting
PALETTE = {
    QPalette.ColorRole.Window: "#F3F4F6",
    QPalette.ColorRole.WindowText: "#111827",
    QPalette.ColorRole.Base: "#FFFFFF",
    QPalette.ColorRole.AlternateBase: "#F9FAFB",
    QPalette.ColorRole.Text: "#374151",
    QPalette.ColorRole.Button: "#FFFFFF",
    QPalette.ColorRole.ButtonText: "#374151",
    QPalette.ColorRole.Highlight: "#6366F1",
    QPalette.ColorRole.HighlightedText: "#FFFFFF",
}


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="tk-canvas-editor",
        description="Draw shapes and export them as a Tkinter Canvas script",
    )
    parser.add_argument('--debug', action='store_true', help='Enable debug logging')
    parser.add_argument('--log-file', metavar='PATH', help='Also write log records to PATH')
    parser.add_argument('--config', metavar='PATH', help='Settings file to use instead of the default')
    return parser.parse_args(argv)


def setup_logging(debug: bool = False, log_file: Optional[str] = None):
    """
    Configure the root logger.

    Records go to the console, and to ``log_file`` as well when one is given.
    """
    level = logging.DEBUG if debug else logging.INFO
    formatter = logging.Formatter(LOG_FORMAT, datefmt='%H:%M:%S')

    handlers: List[logging.Handler] = [logging.StreamHandler()]
    if log_file:
        handlers.append(logging.FileHandler(log_file, encoding="utf-8"))

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    for handler in handlers:
        handler.setLevel(level)
        handler.setFormatter(formatter)
        root_logger.addHandler(handler)

    logger = logging.getLogger(__name__)
    logger.info(f"Logging initialized at {logging.getLevelName(level)} level")
    if log_file:
        logger.info(f"Writing log to {log_file}")


def setup_application(argv: List[str]) -> QApplication:
    """Create the Qt application with the editor's font and palette."""
    QApplication.setHighDpiScaleFactorRoundingPolicy(
        Qt.HighDpiScaleFactorRoundingPolicy.PassThrough
    )

    app = QApplication(argv)
    app.setApplicationName(APP_NAME)
    app.setApplicationVersion(APP_VERSION)
    app.setOrganizationName("tk-canvas-editor")

    font = QFont("Segoe UI", 10)
    if not font.exactMatch():
        font = QFont("Helvetica Neue", 10)
    app.setFont(font)

    palette = QPalette()
    for role, color in PALETTE.items():
        palette.setColor(role, QColor(color))
    app.setPalette(palette)

    return app


def main():
    """Main entry point."""
    args = parse_args()
    setup_logging(debug=args.debug, log_file=args.log_file)

    # First call fixes the settings location for the session
    settings = get_settings(args.config)
    logging.getLogger(__name__).debug(f"Settings file: {settings.settings_path}")

    app = setup_application(sys.argv[:1])
    window = MainWindow()
    window.show()

    sys.exit(app.exec())


if __name__ == "__main__":
    main()
