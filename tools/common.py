from __future__ import annotations

"""
Shared argparse helpers for the check scripts under tools/.
"""

import argparse
import json
from datetime import date
from typing import Tuple

from koyomi.core.civil import InvalidDate, require_civil_date
from koyomi.core.config import DEFAULT_TZ


def add_range_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--date", help="YYYY-MM-DD (single day)")
    parser.add_argument("--start", help="YYYY-MM-DD (with --end)")
    parser.add_argument("--end", help="YYYY-MM-DD (inclusive)")
    parser.add_argument("--json", action="store_true")
    parser.add_argument("--verbose", action="store_true")


def add_moon_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--moon", action="store_true", help="include moon phase (needs ephemeris)")
    parser.add_argument("--tz", default=DEFAULT_TZ)
    parser.add_argument("--ephemeris", default="", help="falls back to $KOYOMI_EPHEMERIS")
    parser.add_argument("--ephemeris-path", default="", help="falls back to $KOYOMI_EPHEMERIS_PATH")


def date_range(parser: argparse.ArgumentParser, args: argparse.Namespace) -> Tuple[date, date]:
    """
    --date か --start/--end から [start, end] を決める。不正な指定は parser.error。
    """
    try:
        if args.start or args.end:
            if not (args.start and args.end):
                parser.error("--start and --end must be given together")
            start = require_civil_date(args.start, "--start")
            end = require_civil_date(args.end, "--end")
        elif args.date:
            start = end = require_civil_date(args.date, "--date")
        else:
            parser.error("--date or --start/--end required")
    except InvalidDate as e:
        parser.error(str(e))

    if end < start:
        parser.error("--end must be >= --start")
    return start, end


def dump_json(obj: object) -> None:
    print(json.dumps(obj, ensure_ascii=False, indent=2, default=str))
