"""
Application Initialization
==========================
Parses the command line, sets up logging, builds the state and the main
window and starts the Qt Event Loop.

Why is this file needed?
------------------------
It acts as the "Dependency Injection" root. It:
1. Instantiates the application state (AppState).
2. Instantiates the Main Window (View) and passes the state into it.
3. Prevents circular import errors by being the orchestrator.
"""
import argparse
import os
import logging
import sys
from typing import Optional, Sequence

from PySide6.QtWidgets import QApplication

from seismicwatch import config
from seismicwatch.logging_config import parse_level, setup_logging
from seismicwatch.model.events import TimeRange
from seismicwatch.model.state import AppState, ViewMode
from seismicwatch.view.main_window import MainWindow, VISIBLE_APP_NAME

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="seismicwatch", description="Interactive map and globe of recent earthquakes.")
    parser.add_argument("--log-level", default="INFO", help="Logging level (DEBUG, INFO, WARNING, ...).")
    parser.add_argument("--log-file", default=None, help="Also write the log to this file.")
    parser.add_argument("--topology", default=None, help="Read the TopoJSON world map from a local file (default: bundled copy if present).")
    parser.add_argument("--events", default=None, help="Read a GeoJSON event feed from a local file.")
    parser.add_argument(
        "--range",
        dest="time_range",
        default=TimeRange.DAY.value,
        choices=[r.value for r in TimeRange],
        help="Initial feed window.",
    )
    parser.add_argument("--globe", action="store_true", help="Start in the globe view.")
    return parser


def main(argv: Optional[Sequence[str]] = None) -> None:
    args = build_parser().parse_args(argv)

    # 1. Setup Logging (Console + Optional File)
    try:
        level = parse_level(args.log_level)
    except ValueError as e:
        raise SystemExit(str(e))
    setup_logging(level=level, log_file=args.log_file)

    # 2. Create the Qt Application
    app = QApplication.instance() or QApplication(sys.argv[:1])
    app.setApplicationName(VISIBLE_APP_NAME)

    # 3. Initialize the Data Model
    state = AppState(
        time_range=TimeRange(args.time_range),
        view_mode=ViewMode.GLOBE if args.globe else ViewMode.MAP,
    )

    topology_path = args.topology
    if topology_path is None and os.path.exists(config.DEFAULT_TOPOLOGY_PATH):
        logger.info(f"Using bundled topology: {config.DEFAULT_TOPOLOGY_PATH}")
        topology_path = config.DEFAULT_TOPOLOGY_PATH

    # 4. Initialize the Main Window, passing the model
    window = MainWindow(state, events_path=args.events, topology_path=topology_path)
    window.show()

    # 5. Start Event Loop
    sys.exit(app.exec())


if __name__ == "__main__":
    main()
