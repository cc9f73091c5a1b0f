#!/usr/bin/env python3
"""
Command line front end for CodePulse.
Sends a single heartbeat or prints today's coding time through the
configured transport, mostly useful for checking a setup.
"""

import argparse
import sys
import time
from pathlib import Path
from typing import List, Optional

from .config import get_config
from .engine import create_transport
from .logger import LogLevel, PluginLogger
from .models import DispatchStatus, HeartbeatEvent


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="codepulse", description="Report editor activity to CodePulse"
    )
    parser.add_argument("--debug", action="store_true", help="Verbose logging")
    sub = parser.add_subparsers(dest="command")

    beat = sub.add_parser("heartbeat", help="Send one heartbeat for a file")
    beat.add_argument("file", help="File the activity happened in")
    beat.add_argument("--write", action="store_true", help="The file was saved")
    beat.add_argument("--line", type=int, default=1)
    beat.add_argument("--column", type=int, default=1)
    beat.add_argument("--lines", type=int, default=0, help="Lines in file")
    beat.add_argument("--project", default=None)
    beat.add_argument("--language", default=None)

    sub.add_parser("today", help="Print today's coding time")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 1

    config = get_config()
    logger = PluginLogger(LogLevel.DEBUG if args.debug or config.debug else LogLevel.INFO)
    transport = create_transport(config, logger, editor_name="codepulse-cli")

    if not transport.is_available():
        print(f"Error: {transport.name} transport is not available.")
        return 1

    if args.command == "heartbeat":
        event = HeartbeatEvent(
            file_path=str(Path(args.file).resolve()),
            timestamp=time.time(),
            cursor_line=args.line,
            cursor_column=args.column,
            total_lines=args.lines,
            is_write=args.write,
            project_name=args.project,
            language=args.language,
        )
        outcome = transport.send_heartbeat(event)
        code = "" if outcome.code is None else f" ({outcome.code})"
        print(f"Heartbeat {outcome.status.value}{code}")
        return 0 if outcome.status in (DispatchStatus.ACCEPTED, DispatchStatus.OFFLINE) else 1

    outcome = transport.fetch_today()
    if outcome.ok:
        text = outcome.data.text if outcome.data else ""
        print(text or "Calculating time spent today in background...")
        return 0
    print(f"Error fetching today's coding time: {outcome.status.value}")
    return 1


if __name__ == "__main__":
    sys.exit(main())
