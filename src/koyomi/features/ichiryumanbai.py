# src/koyomi/features/ichiryumanbai.py
from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import FrozenSet, Iterable, List, Optional

from koyomi.core.civil import DateLike, iter_days, require_civil_date
from koyomi.core.eto import EtoCalculator, SexagenaryDesignation, classify
from koyomi.features.config import (
    ICHIRYUMANBAI_BRANCHES,
    SOLAR_MONTH_BOUNDARIES,
    solar_month_for,
)


@dataclass(frozen=True)
class IchiryumanbaiResult:
    """
    一粒万倍日の判定結果（デバッグ/テストしやすいように構造体で持たせる）。

    - solar_month: 節月 (1..12)
    - month_branch: その節月の月支
    - branches: 吉となる日支 2つ
    - branch: 対象日の日支
    """
    solar_month: int
    month_branch: str
    branches: FrozenSet[str]
    branch: str

    @property
    def matched(self) -> bool:
        return self.branch in self.branches

    def __bool__(self) -> bool:
        return self.matched


def branches_for_solar_month(solar_month: int) -> FrozenSet[str]:
    m = int(solar_month)
    try:
        return ICHIRYUMANBAI_BRANCHES[m]
    except KeyError as e:
        raise ValueError(f"invalid solar_month: {solar_month}") from e


def ichiryumanbai_info(
    d: DateLike,
    *,
    designation: Optional[SexagenaryDesignation] = None,
) -> IchiryumanbaiResult:
    """
    節月 (SOLAR_MONTH_BOUNDARIES) と日支から一粒万倍日を判定する。

    `designation` を渡せば干支の再計算を省く（同じ日付のものに限る）。
    """
    dd = require_civil_date(d)
    eto = designation if designation is not None else classify(dd)
    sm = solar_month_for(dd.month, dd.day)
    return IchiryumanbaiResult(
        solar_month=sm,
        month_branch=SOLAR_MONTH_BOUNDARIES[sm].branch,
        branches=branches_for_solar_month(sm),
        branch=eto.branch,
    )


def is_ichiryumanbai(
    d: DateLike,
    *,
    designation: Optional[SexagenaryDesignation] = None,
) -> bool:
    return ichiryumanbai_info(d, designation=designation).matched


def ichiryumanbai_days_between(
    start: date,
    end: date,
    *,
    calculator: Optional[EtoCalculator] = None,
) -> List[date]:
    """
    [start, end] (両端含む) の一粒万倍日を列挙する。
    """
    s = require_civil_date(start, "start")
    e = require_civil_date(end, "end")
    if e < s:
        raise ValueError("end must be >= start")

    out: List[date] = []
    for cur in iter_days(s, e):
        eto = calculator.classify(cur) if calculator is not None else classify(cur)
        if is_ichiryumanbai(cur, designation=eto):
            out.append(cur)
    return out


def diff_against_listing(year: int, listed: Iterable[DateLike]) -> dict:
    """
    外部の一粒万倍日リスト（ある1年分）と、節月ルールの結果を突き合わせる。
    リストは検証用の入力でしかなく、判定の根拠にはしない。

    Returns:
      dict with keys:
        - year
        - rule_only: ルールのみが一粒万倍日とする日
        - listed_only: リストのみに載っている日
        - agreed: 両方が一致する日
    """
    y = int(year)
    listed_days = {require_civil_date(x, "listed") for x in listed}
    outside = sorted(d for d in listed_days if d.year != y)
    if outside:
        raise ValueError(f"listed dates outside {y}: {[d.isoformat() for d in outside]}")

    rule_days = set(ichiryumanbai_days_between(date(y, 1, 1), date(y, 12, 31)))
    return {
        "year": y,
        "rule_only": sorted(rule_days - listed_days),
        "listed_only": sorted(listed_days - rule_days),
        "agreed": sorted(rule_days & listed_days),
    }
