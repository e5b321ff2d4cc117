from __future__ import annotations

"""
Ichiryumanbai (一粒万倍日) check script.

Lists the days the solar-month rule produces for a year and, when a
published listing is given (--listing file, JSON array or one date per
line), reports where the rule and the listing disagree.

Uses:
- koyomi.features.ichiryumanbai.ichiryumanbai_days_between
- koyomi.features.ichiryumanbai.diff_against_listing
"""

import argparse
import json
from datetime import date
from pathlib import Path
from typing import List

from koyomi.features.ichiryumanbai import (
    diff_against_listing,
    ichiryumanbai_days_between,
    ichiryumanbai_info,
)

from tools.common import dump_json


def _load_listing(path: Path) -> List[str]:
    text = path.read_text(encoding="utf-8").strip()
    if text.startswith("["):
        return [str(x) for x in json.loads(text)]
    return [line.strip() for line in text.splitlines() if line.strip() and not line.startswith("#")]


def main() -> None:
    parser = argparse.ArgumentParser(description="Ichiryumanbai (一粒万倍日) check")
    parser.add_argument("--year", type=int, required=True)
    parser.add_argument("--listing", help="published dates for --year (JSON array or one per line)")
    parser.add_argument("--json", action="store_true")
    args = parser.parse_args()

    if args.listing:
        p = Path(args.listing).expanduser()
        if not p.exists():
            parser.error(f"listing not found: {p}")
        diff = diff_against_listing(args.year, _load_listing(p))
        if args.json:
            dump_json({k: ([d.isoformat() for d in v] if isinstance(v, list) else v) for k, v in diff.items()})
            return
        print(f"year={diff['year']} agreed={len(diff['agreed'])}")
        for d in diff["rule_only"]:
            print(f"  rule only  : {d.isoformat()}  {ichiryumanbai_info(d).branch}")
        for d in diff["listed_only"]:
            print(f"  listed only: {d.isoformat()}  {ichiryumanbai_info(d).branch}")
        return

    days = ichiryumanbai_days_between(date(args.year, 1, 1), date(args.year, 12, 31))
    if args.json:
        dump_json({"year": args.year, "days": [d.isoformat() for d in days]})
        return
    for d in days:
        info = ichiryumanbai_info(d)
        print(f"{d.isoformat()}  {info.month_branch}月  {info.branch}")


if __name__ == "__main__":
    main()
