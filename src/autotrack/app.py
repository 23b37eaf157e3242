"""Command line entry point for autotrack."""

from __future__ import annotations

import argparse
import json
import time
from pathlib import Path
from typing import Optional

from loguru import logger
from PySide6.QtCore import QCoreApplication

from .config.manager import ConfigManager
from .core.page import Page
from .core.session import AutoTracking
from .core.tracker import AmplitudeTracker
from .infra.logging import setup_logging


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="autotrack", description="Name and track clicks on an HTML page.")
    parser.add_argument("page", type=Path, help="HTML file to load")
    parser.add_argument("--url", default="", help="URL the page is served from (resolves relative links)")
    parser.add_argument("--click", action="append", default=[], metavar="CSS", help="selector to click after startup")
    parser.add_argument("--config", type=Path, default=None, help="configuration file path")
    parser.add_argument("--wait", type=float, default=10.0, help="seconds to wait for the initial translation")
    parser.add_argument("--log-level", default="INFO")
    return parser


def wait_for_translations(app: QCoreApplication, session: AutoTracking, timeout: float) -> bool:
    """Process Qt events until no translation request is pending or ``timeout`` expires."""
    deadline = time.monotonic() + timeout
    while session.translator.pending_requests and time.monotonic() < deadline:
        app.processEvents()
        time.sleep(0.01)
    app.processEvents()
    return session.translator.pending_requests == 0


def main(argv: Optional[list[str]] = None) -> int:
    """Load a page, start automatic tracking and replay the requested clicks.

    Args:
        argv: Optional command line arguments.

    Returns:
        Process exit code.
    """
    args = build_parser().parse_args(argv)
    setup_logging(level=args.log_level)

    app = QCoreApplication.instance() or QCoreApplication([])

    config_manager = ConfigManager(config_path=args.config) if args.config else ConfigManager()
    config = config_manager.effective_config()

    page = Page.from_file(args.page, url=args.url)
    session = AutoTracking.from_config(page, config)
    session.start()

    if not wait_for_translations(app, session, args.wait):
        logger.warning("Translation still pending after {}s, clicks use cached names only", args.wait)

    exit_code = 0
    for selector in args.click:
        element = page.select_one(selector)
        if element is None:
            logger.error("No element matches {}", selector)
            exit_code = 1
            continue
        page.click(element)

    tracker = session.tracker
    if isinstance(tracker, AmplitudeTracker):
        tracker.flush()
        tracker.shutdown()

    print(json.dumps(session.cache.snapshot(), ensure_ascii=False, indent=2))
    return exit_code


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
