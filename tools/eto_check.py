from __future__ import annotations

"""
Eto (日干支) check script.

Uses:
- koyomi.core.eto.classify

Examples:
  python -m tools.eto_check --date 2024-01-01
  python -m tools.eto_check --start 2025-12-01 --end 2025-12-31 --json
"""

import argparse

from koyomi.core.civil import iter_days
from koyomi.core.eto import classify

from tools.common import add_range_args, date_range, dump_json


def main() -> None:
    parser = argparse.ArgumentParser(description="Eto (日干支) check")
    add_range_args(parser)
    args = parser.parse_args()
    start, end = date_range(parser, args)

    rows = []
    for cur in iter_days(start, end):
        eto = classify(cur)
        if args.json:
            rows.append({"date": cur.isoformat(), **eto.as_dict()})
        elif args.verbose:
            print(
                f"{cur.isoformat()}  {eto.label}  "
                f"idx={eto.cycle_index:02d} stem={eto.stem_index} branch={eto.branch_index}"
            )
        else:
            print(f"{cur.isoformat()}  {eto.label}")

    if args.json:
        dump_json({"rows": rows})


if __name__ == "__main__":
    main()
