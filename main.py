# main.py

from __future__ import annotations

import argparse
import sys

from PyQt6 import QtWidgets

from initwindow.controller import AppController
from initwindow.core.autostart import AUTO_START_FLAG
from initwindow.core.config import default_data_dir
from initwindow.core.discovery import use_system_collation
from initwindow.core.lifecycle import LifecycleState
from initwindow.core.logger import setup_logging
from initwindow.core.services import build_services
from initwindow.ui import InitWindow


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="InitWindow - relaunch groups of apps")
    parser.add_argument(
        AUTO_START_FLAG,
        dest="auto_start",
        action="store_true",
        help="started at login: stay in the tray and run the auto-start collection",
    )
    return parser.parse_args(argv)


def main():
    args = parse_args()

    data_dir = default_data_dir()
    logger = setup_logging(data_dir / "logs")
    use_system_collation(logger)
    services = build_services(data_dir, logger=logger)

    app = QtWidgets.QApplication(sys.argv)
    # Closing the window only hides it to the tray
    app.setQuitOnLastWindowClosed(False)

    lifecycle = LifecycleState()
    window = InitWindow(lifecycle, lambda: services.settings().minimize_to_tray)
    controller = AppController(window, services, lifecycle, auto_start=args.auto_start)

    if not args.auto_start:
        window.show()

    # Make sure controller isn't garbage-collected
    window.controller = controller  # type: ignore

    sys.exit(app.exec())


if __name__ == "__main__":
    main()
