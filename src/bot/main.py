"""
BananaMoney Lite — Entry Point

Loads the config, sets up logging, and runs the console app.

Usage:
    python -m src.bot.main                         # uses ./config.json
    python -m src.bot.main --config bots/alt.json
    python -m src.bot.main --log-file bot.log -v   # debug log to file too
"""

from __future__ import annotations

import argparse
import logging
import sys

from src.console.app import BananaConsole
from src.data.config import DEFAULT_CONFIG_PATH, ConfigError, ConfigStore

log = logging.getLogger("banana")

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def setup_logging(verbose: bool = False, log_file: str | None = None) -> int:
    """Configure the root logger. Returns the console level."""
    level = logging.DEBUG if verbose else logging.INFO
    root = logging.getLogger()
    root.setLevel(level)
    if log_file:
        handler = logging.FileHandler(log_file, encoding="utf-8")
        handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt="%H:%M:%S"))
        root.addHandler(handler)
    # The JS bridge is chatty at DEBUG
    logging.getLogger("javascript").setLevel(logging.WARNING)
    return level


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="BananaMoney Lite: Minecraft auto-sell and bone collector bot",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--config", default=str(DEFAULT_CONFIG_PATH),
                        help="Config file (created with defaults if missing)")
    parser.add_argument("--log-file", default=None,
                        help="Also write the log to this file")
    parser.add_argument("-v", "--verbose", action="store_true",
                        help="Enable debug logging")
    return parser


def main(argv: list[str] | None = None) -> None:
    args = build_parser().parse_args(argv)
    level = setup_logging(args.verbose, args.log_file)

    store = ConfigStore(args.config)
    try:
        config = store.load()
    except ConfigError as e:
        print(f"Config error: {e}", file=sys.stderr)
        sys.exit(1)

    log.info("config loaded from %s", store.path)
    BananaConsole(config, store, log_level=level).run()


if __name__ == "__main__":
    main()
