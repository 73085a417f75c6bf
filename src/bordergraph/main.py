"""
Application Initialization
==========================
This module parses the command line, loads the dataset and starts the Qt
Event Loop.

Why is this file needed?
------------------------
It acts as the "Dependency Injection" root. It:
1. Sets up logging and the QApplication.
2. Loads the stored preferences and applies command-line overrides.
3. Loads the border dataset (bundled or from a file).
4. Instantiates the Main Window (View) with the data.
"""
import argparse
import logging
from typing import List, Optional

from PySide6.QtWidgets import QMessageBox

from bordergraph.application import create_app
from bordergraph.config import VISIBLE_APP_NAME, load_preferences
from bordergraph.logging_config import setup_logging
from bordergraph.model.io import DatasetError, load_border_pairs
from bordergraph.model.simulation import clamp_strength
from bordergraph.model.styling import Theme
from bordergraph.view.main_window import MainWindow

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="bordergraph", description=VISIBLE_APP_NAME)
    parser.add_argument("--dataset", help="JSON file with [country, country] pairs (default: bundled dataset)")
    parser.add_argument("--theme", choices=[t.value for t in Theme], help="Colour theme override")
    parser.add_argument("--strength", type=float, help="Initial repulsion strength (10-300)")
    parser.add_argument("--debug", action="store_true", help="Verbose logging")
    parser.add_argument("--log-file", help="Also write the log to this file")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    # 1. Setup Logging (Console + Optional File)
    setup_logging(level=logging.DEBUG if args.debug else logging.INFO, log_file=args.log_file)

    # 2. Create the Qt Application
    app = create_app()

    # 3. Preferences, overridden from the command line
    preferences = load_preferences()
    if args.theme:
        preferences.theme = Theme(args.theme)
    if args.strength is not None:
        preferences.strength = clamp_strength(args.strength)

    # 4. Load the dataset
    try:
        pairs = load_border_pairs(args.dataset)
    except DatasetError as e:
        logger.error(f"Could not load dataset: {e}")
        QMessageBox.critical(None, VISIBLE_APP_NAME, f"Could not load dataset:\n{e}")
        return 1

    # 5. Initialize the Main Window, passing the data
    window = MainWindow(pairs, preferences)
    window.show()

    # 6. Start Event Loop
    return app.exec()


if __name__ == "__main__":
    raise SystemExit(main())
