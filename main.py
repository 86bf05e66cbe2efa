from __future__ import annotations

import argparse
from pathlib import Path

from waymaps.config import APP_TITLE, DEFAULT_STORE_PATH, LOG_LEVEL
from waymaps.logging_config import configure
from waymaps.gui.app import run_app


def main() -> int:
    parser = argparse.ArgumentParser(description="Edit routes and waypoints on a web map.")
    parser.add_argument(
        "--store",
        default=None,
        help=f"Path to the map store JSON (default: {DEFAULT_STORE_PATH})",
    )
    parser.add_argument(
        "--log-level",
        default=LOG_LEVEL,
        help="Logging level (default: WAYMAPS_LOG_LEVEL or INFO).",
    )
    parser.add_argument(
        "--no-locate",
        action="store_true",
        help="Skip centering the map on the IP-derived local position.",
    )
    args = parser.parse_args()

    configure(args.log_level)
    store_path = Path(args.store) if args.store else DEFAULT_STORE_PATH
    return run_app(store_path, locate=not args.no_locate, title=APP_TITLE)


if __name__ == "__main__":
    raise SystemExit(main())
