"""
Photomark - draw annotations on a photo and save a flattened copy.

This is the main entry point for the application.
Run with: python -m photomark IMAGE
"""

import argparse
import logging
import signal
import sys
from pathlib import Path
from typing import List, Optional

from PySide6.QtCore import QTimer
from PySide6.QtWidgets import QApplication

from photomark import __version__
from photomark.core.app_core import AppCore
from photomark.services.logging_service import get_logger, setup_logging
from photomark.services.photo_storage import PhotoStorageError

# Set from signal handlers, polled from the Qt event loop
_should_quit = False


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="photomark",
        description="Annotate a photo with arrows, shapes, freehand strokes and text.",
    )
    parser.add_argument("image", type=Path, help="photo to annotate")
    parser.add_argument(
        "--annotations",
        type=Path,
        default=None,
        help="annotation JSON to load instead of the photo's sidecar",
    )
    parser.add_argument(
        "--output-dir",
        type=Path,
        default=None,
        help="where annotated copies are written (default: from config)",
    )
    parser.add_argument("--read-only", action="store_true", help="open for viewing only")
    parser.add_argument("--debug", action="store_true", help="enable debug logging")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def request_quit(signum, frame) -> None:
    global _should_quit
    _should_quit = True


def check_for_quit(app: QApplication) -> None:
    """Timer callback: Python signal handlers only run while the interpreter has control."""
    if _should_quit:
        get_logger(__name__).info("Signal received, quitting...")
        app.quit()


def main(argv: Optional[List[str]] = None) -> int:
    """
    Main entry point for Photomark.

    Returns:
        Exit code (0 for success, non-zero for error).
    """
    args = build_parser().parse_args(argv)

    setup_logging(log_level=logging.DEBUG if args.debug else logging.INFO)
    logger = get_logger(__name__)

    try:
        logger.info(f"Starting Photomark {__version__}...")

        app = QApplication.instance() or QApplication(sys.argv[:1])
        app.setApplicationName("Photomark")
        app.setOrganizationName("Photomark")
        app.setApplicationVersion(__version__)

        signal.signal(signal.SIGINT, request_quit)
        signal.signal(signal.SIGTERM, request_quit)

        quit_timer = QTimer()
        quit_timer.timeout.connect(lambda: check_for_quit(app))
        quit_timer.start(100)

        app_core = AppCore(
            app,
            image_path=args.image,
            annotations_path=args.annotations,
            output_dir=args.output_dir,
            read_only=args.read_only,
        )
        logger.debug(f"Editing {args.image} (output: {app_core.storage.output_folder})")

        exit_code = app.exec()

        logger.info(f"Photomark exiting with code {exit_code}")
        return exit_code

    except PhotoStorageError as e:
        logger.error(str(e))
        return 2

    except Exception as e:
        logger.critical(f"Fatal error during startup: {e}", exc_info=True)
        return 1


if __name__ == "__main__":
    sys.exit(main())
