#!/usr/bin/env python3
# -*- coding: utf-8 -*-
from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from .app import TermNewsApp
from .config import config_candidates, load_config, setup_logging

logger = logging.getLogger("termnews")


# --- Entrypoint ---
def main() -> None:
    parser = argparse.ArgumentParser(description="Terminal feed reader")
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")
    parser.add_argument(
        "--config",
        type=Path,
        help="Read feeds from this TOML file before the usual locations",
    )
    args = parser.parse_args()

    debug_path = setup_logging(args.debug)
    if debug_path:
        print(f"Debug logging enabled: {debug_path}", file=sys.stderr)

    groups = load_config(config_candidates(args.config))
    logger.info("Starting with %d feed groups", len(groups))

    try:
        app = TermNewsApp(groups)
        app.run()
    except Exception as e:
        logger.exception("Application crashed: %s", e)
        print(f"Application crashed: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
