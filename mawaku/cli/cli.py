#!/usr/bin/env python3
"""Main CLI entry point for mawaku."""

import argparse
import logging
import os
import sys

from dotenv import load_dotenv

from mawaku.cli.generate.generate_command import generate_command

LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR"]


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="mawaku",
        description="Generate video-call backgrounds by describing a place.",
    )
    parser.add_argument(
        "--location",
        required=True,
        help="Place to depict (e.g., 'Hakone, Japan')",
    )
    parser.add_argument(
        "--season",
        help="Optional season for the scene (e.g., 'spring')",
    )
    parser.add_argument(
        "--time-of-day",
        help="Optional time of day for the lighting (e.g., 'golden hour')",
    )
    parser.add_argument(
        "--set-api-key-env-var",
        metavar="NAME",
        help="Persist the name of the environment variable holding the Gemini API key",
    )
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=LOG_LEVELS,
        help="Diagnostic log level written to stderr (default: WARNING)",
    )
    return parser


def main(argv: list[str] | None = None):
    """Main CLI dispatcher."""
    load_dotenv(dotenv_path=os.path.join(os.getcwd(), ".env"))

    try:
        args = build_parser().parse_args(argv)

        logging.basicConfig(
            level=getattr(logging, args.log_level),
            format="%(asctime)s %(levelname)s %(name)s: %(message)s",
            stream=sys.stderr,
        )

        return generate_command(args)

    except KeyboardInterrupt:
        print("\n\nInterrupted by user", file=sys.stderr)
        return 130


if __name__ == "__main__":
    sys.exit(main() or 0)
