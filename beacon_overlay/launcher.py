from __future__ import annotations

import argparse
import logging
import os
import sys
from pathlib import Path
from typing import Optional

from PyQt6.QtWidgets import QApplication, QGridLayout, QLabel, QPushButton, QWidget

from beacon_overlay.beacons import Beacons
from beacon_overlay.handlers import ClickHandlerRegistry
from beacon_overlay.logging_utils import configure_logging
from beacon_overlay.options import BeaconOptions, load_options

_LOGGER = logging.getLogger("BeaconOverlay.Launcher")

DEMO_STYLESHEET = """
QWidget[class~="gc-beacon"] {
    background-color: rgba(230, 60, 60, 200);
    border-radius: 8px;
}
QWidget[class~="gc-beacon-fixed"] {
    background-color: rgba(60, 120, 230, 200);
}
"""


def resolve_options_path(args_config: Optional[str]) -> Optional[Path]:
    if args_config:
        return Path(args_config).expanduser().resolve()
    env_override = os.getenv("BEACON_OVERLAY_OPTIONS")
    if env_override:
        return Path(env_override).expanduser().resolve()
    return None


def build_demo_window(options: BeaconOptions) -> QWidget:
    """A small form whose widgets declare beacons through dynamic properties."""
    prefix = options.data_prefix
    window = QWidget()
    window.setObjectName("demo-root")
    window.setWindowTitle("Beacon overlay demo")
    window.resize(480, 240)
    layout = QGridLayout(window)

    title = QLabel("Click a beacon to log it", window)
    title.setObjectName("title")
    title.setProperty(prefix, "intro")
    title.setProperty(f"{prefix}-position", "left")
    title.setProperty(f"{prefix}-boundary", "outer")
    layout.addWidget(title, 0, 0, 1, 2)

    save = QPushButton("Save", window)
    save.setObjectName("save")
    save.setProperty(prefix, "save,shortcut")
    save.setProperty(f"{prefix}-position", "top-right")
    save.setProperty(f"{prefix}-shortcut-position", "bottom-left")
    save.setProperty(f"{prefix}-onclick", "log-beacon")
    layout.addWidget(save, 1, 0)

    cancel = QPushButton("Cancel", window)
    cancel.setObjectName("cancel")
    cancel.setProperty(prefix, "cancel")
    cancel.setProperty(f"{prefix}-position", "bottom")
    cancel.setProperty(f"{prefix}-onclick", "log-beacon")
    layout.addWidget(cancel, 1, 1)
    return window


def main(argv: Optional[list[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Beacon overlay demo")
    parser.add_argument("--config", help="Path to a JSON file with beacon options")
    parser.add_argument("--ids", help="Comma-separated beacon ids to register (default: all)")
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")
    parser.add_argument("--log-dir", help="Directory for the rotating log file")
    args = parser.parse_args(argv)

    configure_logging(debug=args.debug, log_dir=Path(args.log_dir).expanduser() if args.log_dir else None)

    options_path = resolve_options_path(args.config)
    options = load_options(options_path) if options_path is not None else BeaconOptions()
    _LOGGER.info("Starting beacon overlay demo (pid=%s)", os.getpid())
    _LOGGER.debug("Resolved options path to %s: %s", options_path, options)

    handlers = ClickHandlerRegistry()

    @handlers.register("log-beacon")
    def _log_beacon(event, descriptor) -> None:
        _LOGGER.info("Beacon %r clicked at %s", descriptor.id, event.position().toPoint())

    app = QApplication(sys.argv)
    app.setStyleSheet(DEMO_STYLESHEET)
    window = build_demo_window(options)
    window.show()

    beacons = Beacons(window, args.ids or None, options, handlers=handlers)
    beacons.refresh().show_all()

    exit_code = app.exec()
    beacons.remove_all()
    _LOGGER.info("Beacon overlay demo exiting with code %s", exit_code)
    return int(exit_code)


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
