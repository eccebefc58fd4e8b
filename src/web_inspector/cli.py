"""
Command line entry point.

web-inspector [-config PATH] [-n]

-config  INI configuration file, default /etc/desk/inspector.conf
-n       dry run, print versions instead of saving them

Exit status is 0 on success and 1 when the pass failed.
"""

from __future__ import annotations

import argparse
from pathlib import Path
from typing import Sequence

import structlog

from web_inspector.config import DEFAULT_CONFIG_PATH, load_config
from web_inspector.core.errors import InspectorError
from web_inspector.core.logging import setup_logging
from web_inspector.runner import InspectorRunner

logger = structlog.get_logger()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="web-inspector",
        description="Record deployed web service versions for this host.",
    )
    parser.add_argument(
        "-config",
        "--config",
        dest="config",
        type=Path,
        default=DEFAULT_CONFIG_PATH,
        help=f"path of the inspector.conf config file (default: {DEFAULT_CONFIG_PATH})",
    )
    parser.add_argument(
        "-n",
        dest="dry_run",
        action="store_true",
        help="only output, no save",
    )
    parser.add_argument(
        "--log-level",
        default="info",
        help="log level for stderr output (default: info)",
    )
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(args.log_level)

    try:
        config = load_config(args.config)
        InspectorRunner(config=config, dry_run=args.dry_run).run()
    except InspectorError as exc:
        logger.error("inspection_failed", error=str(exc), error_type=type(exc).__name__)
        return 1
    return 0
