#!/usr/bin/env python3
"""
Main entry point for the Twitch bot pool
"""

import argparse
import asyncio
import sys

from pydantic import ValidationError

from botpool.config import settings_from_env
from botpool.config.loader import read_text_file
from botpool.bot import NameCounter, parse_credentials
from botpool.errors import log_error
from botpool.logs.logger import logger
from botpool.runner import run_botpool


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Send chat messages into a Twitch channel through a pool of bots."
    )
    parser.add_argument("--bots", dest="bots_file", help="credential file (token|name per line)")
    parser.add_argument("--messages", dest="messages_file", help="message pool file")
    parser.add_argument("--channel", help="target channel, with or without '#'")
    parser.add_argument("--mode", choices=["random", "all", "subset"], help="scheduled send mode")
    parser.add_argument("--subset-count", type=int, help="bots per scheduled send in subset mode")
    parser.add_argument("--min-interval", type=float, help="minimum seconds between scheduled sends")
    parser.add_argument("--max-interval", type=float, help="maximum seconds between scheduled sends")
    parser.add_argument(
        "--staggered",
        action="store_true",
        default=None,
        help="stagger multi-bot sends instead of sending simultaneously",
    )
    parser.add_argument("--min-delay", type=float, help="minimum stagger step in seconds")
    parser.add_argument("--max-delay", type=float, help="maximum stagger step in seconds")
    parser.add_argument("--send", dest="send_text", help="send this text from every bot once and exit")
    parser.add_argument("--probe-only", action="store_true", default=None, help="only check bot logins")
    parser.add_argument("--watch", action="store_true", default=None, help="reload files when they change")
    parser.add_argument("--health-check", action="store_true", help="validate configuration and exit")
    return parser


def overrides_from_args(args: argparse.Namespace) -> dict:
    return {
        "bots_file": args.bots_file,
        "messages_file": args.messages_file,
        "channel": args.channel,
        "send_text": args.send_text,
        "probe_only": args.probe_only,
        "watch": args.watch,
        "schedule": {
            "mode": args.mode,
            "subset_count": args.subset_count,
            "min_interval": args.min_interval,
            "max_interval": args.max_interval,
        },
        "delay": {
            "simultaneous": None if args.staggered is None else not args.staggered,
            "min_delay": args.min_delay,
            "max_delay": args.max_delay,
        },
    }


def health_check(settings) -> int:
    logger.log_event("app", "health_check")
    if not settings.bots_file:
        logger.log_event("app", "health_check_failed", reason="no credential file configured")
        return 1
    bots = parse_credentials(read_text_file(settings.bots_file), NameCounter())
    if not bots:
        logger.log_event("app", "health_check_failed", reason="no bots in credential file")
        return 1
    logger.log_event("app", "health_check_passed", bots=len(bots))
    return 0


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    try:
        settings = settings_from_env(overrides_from_args(args))
    except ValidationError as e:
        log_error("Invalid configuration", e)
        return 2
    if args.health_check:
        return health_check(settings)
    logger.log_event("app", "start", channel=settings.channel or None)
    try:
        return asyncio.run(run_botpool(settings))
    except KeyboardInterrupt:
        logger.log_event("app", "interrupted")
        return 0
    finally:
        logger.log_event("app", "shutdown_complete")


if __name__ == "__main__":
    sys.exit(main())
