"""Command-line entry point for rokcalendar.

Run with ``python -m rokcalendar`` to start the calendar server.
"""

from __future__ import annotations

import argparse
import sys
from typing import NoReturn

from . import run_server


def _create_parser() -> argparse.ArgumentParser:
    """Create argument parser for the rokcalendar CLI.

    Returns:
        Configured argument parser
    """
    parser = argparse.ArgumentParser(
        prog="rokcalendar",
        description="Rise of Kingdoms event calendar server",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m rokcalendar                          # Built-in catalog on the default port (8888)
  python -m rokcalendar --port 3000              # Start server on port 3000
  python -m rokcalendar --source remote          # Load the catalog from the upstream API
        """,
    )

    parser.add_argument(
        "--port",
        type=int,
        metavar="PORT",
        help="Port number for the web server (default: 8888, or from ROKCAL_WEB_PORT env var)",
    )
    parser.add_argument(
        "--source",
        choices=("static", "remote"),
        help="Event catalog source (default: static, or from ROKCAL_SOURCE env var)",
    )
    parser.add_argument(
        "--config",
        metavar="PATH",
        help="Path to a YAML/JSON config file (default: ./rokcalendar.yaml)",
    )

    return parser


def main(argv: list[str] | None = None) -> NoReturn:
    """Run the rokcalendar CLI."""
    parser = _create_parser()
    args = parser.parse_args(argv)
    run_server(args)
    sys.exit(0)


if __name__ == "__main__":
    main()
