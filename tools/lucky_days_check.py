from __future__ import annotations

"""
Lucky days (吉日) check script.

Uses:
- koyomi.api.public.get_calendar_day
- koyomi.features.lucky_days.fmt_with_lucky_days

Moon phase is optional (--moon) and needs an ephemeris file; without one
the script prints SKIP and exits 0.
"""

import argparse

from fastapi import HTTPException

from koyomi.api.public import get_calendar_day
from koyomi.core.civil import iter_days
from koyomi.features.lucky_days import fmt_with_lucky_days

from tools.common import add_moon_args, add_range_args, date_range, dump_json


def main() -> None:
    parser = argparse.ArgumentParser(description="Lucky days (吉日) check")
    add_range_args(parser)
    add_moon_args(parser)
    parser.add_argument("--only-lucky", action="store_true", help="print only days with at least one tag")
    args = parser.parse_args()
    start, end = date_range(parser, args)

    def day_for(d):
        return get_calendar_day(
            d,
            moon=args.moon,
            tz=args.tz,
            ephemeris=args.ephemeris or None,
            ephemeris_path=args.ephemeris_path or None,
        )

    if args.moon:
        try:
            day_for(start)
        except HTTPException as e:
            print(f"SKIP: {e.detail}")
            return

    rows = []
    for cur in iter_days(start, end):
        day = day_for(cur)
        if args.only_lucky and not day["lucky_days"]:
            continue

        if args.json:
            rows.append(day)
        elif args.verbose:
            line = fmt_with_lucky_days(cur)
            line += f"  season={day['season_label']} sekki={day['sekki']}"
            if day["moon"] is not None:
                m = day["moon"]
                line += f"  moon={m['degrees']:.1f}deg age={m['age']} {m['phase_name'] or ''}"
            print(line.rstrip())
        else:
            print(fmt_with_lucky_days(cur))

    if args.json:
        dump_json({"rows": rows})


if __name__ == "__main__":
    main()
