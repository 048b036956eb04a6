#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""Application entrypoint for Journalicious.

This file is intentionally minimal. It prepares storage, opens the session
and boots the Textual UI app. Exit status is 1 when the data directory
cannot be used, 0 otherwise.
"""
from __future__ import annotations

from typing import List, Optional
import asyncio
import logging
import sys

from journalicious.config import load_config, resolve_paths, setup_logging
from journalicious.errors import StorageError
from journalicious.session import bootstrap
from journalicious.ui import JournaliciousApp

logger = logging.getLogger("journalicious.app")


async def run(argv: List[str]) -> int:
    """Bootstrap storage, then run the UI until it exits."""
    try:
        cfg = load_config()
        paths = resolve_paths(cfg)
    except (OSError, ValueError) as exc:
        # file logging lives in the data dir, which the config names
        print(f"journalicious: cannot load configuration: {exc}", file=sys.stderr)
        return 1
    try:
        setup_logging(paths, str(cfg.get("log_level", "INFO")))
        if argv:
            logger.debug("Command-line arguments passed through untouched: %s", argv)
        session, journals = await bootstrap(paths)
    except (StorageError, OSError) as exc:
        logger.exception("Startup failed")
        print(f"journalicious: cannot open data directory {paths.data_dir}: {exc}", file=sys.stderr)
        return 1

    app = JournaliciousApp(session, journals, theme_key=str(cfg.get("active_theme", "ink")))
    try:
        await app.run_async()
    finally:
        session.close()
    return app.return_code or 0


def main(argv: Optional[List[str]] = None) -> int:
    """Run the Textual application."""
    return asyncio.run(run(sys.argv[1:] if argv is None else list(argv)))


if __name__ == "__main__":
    sys.exit(main())
