#!/usr/bin/env python3
"""Entry point for running the coming-soon page in a terminal."""

import argparse
import asyncio
import sys

from blessed import Terminal

from comingsoon.config import ConfigError, configure_logging, load_config
from comingsoon.page import ComingSoonPage
from comingsoon.view import ComingSoonView


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='comingsoon',
        description='Coming-soon countdown and email signup in your terminal',
    )
    parser.add_argument('config', nargs='?',
                        help='Optional config file (.yaml, .yml or .json)')
    parser.add_argument('--backend-url',
                        help='Subscription API base URL (default: http://localhost:8000)')
    parser.add_argument('--launch-date',
                        help="Pinned launch date, e.g. '2026-12-01 20:00' or 'in 30 days'")
    parser.add_argument('--log-level', help='Logging level (default: info)')
    parser.add_argument('--log-file', help='Log file path (default: comingsoon.log)')
    parser.add_argument('--snapshot', action='store_true',
                        help='Print a single plain-text frame and exit')
    return parser


def main(argv=None):
    """Main entry point for the coming-soon application."""
    args = build_parser().parse_args(argv)

    try:
        config = load_config(args.config).with_overrides(
            backend_url=args.backend_url,
            launch_date=args.launch_date,
            log_level=args.log_level,
            log_file=args.log_file,
        )
        level = config.level
    except ConfigError as e:
        print(f'Error loading config: {e}', file=sys.stderr)
        sys.exit(1)

    configure_logging(level, config.log_file)

    try:
        page = ComingSoonPage.from_config(config)
    except ValueError as e:
        print(f'Invalid launch date: {e}', file=sys.stderr)
        sys.exit(1)

    if args.snapshot:
        view = ComingSoonView(page, term=Terminal(force_styling=None), width=80)
        for line in asyncio.run(view.snapshot()):
            print(line.rstrip())
        return

    view = ComingSoonView(page)
    try:
        asyncio.run(view.run())
    except KeyboardInterrupt:
        print('\nShutting down...')


if __name__ == '__main__':
    main()
