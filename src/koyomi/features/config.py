# src/koyomi/features/config.py
from __future__ import annotations

"""
Feature-level configuration / constants.

- 季節の境界 (天赦日用): 立春/立夏/立秋/立冬 の概算日
- 節月の境界 (一粒万倍日用): 12節 の概算日
- 一粒万倍日: 節月 -> 支 2つ
- 吉日タグ: ラベル / 説明文

Design goals:
- All tables are frozen at import time (MappingProxyType / tuples).
- Every threshold is inclusive of the onset day:
    onset <= (month, day) < next onset
"""

from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Dict, FrozenSet, Mapping, Tuple

from koyomi.core.civil import InvalidDate, days_in_month

# ============================================================
# 季節 (Tensha-bi)
#   spring: 立春 2/4 .. 5/4
#   summer: 立夏 5/5 .. 8/6
#   autumn: 立秋 8/7 .. 11/6
#   winter: 立冬 11/7 .. 2/3   (年をまたぐ)
# ============================================================

SEASONS: Tuple[str, ...] = ("spring", "summer", "autumn", "winter")

SEASON_BOUNDARIES: Mapping[str, Tuple[int, int]] = MappingProxyType(
    {
        "spring": (2, 4),
        "summer": (5, 5),
        "autumn": (8, 7),
        "winter": (11, 7),
    }
)

SEASON_LABELS: Mapping[str, str] = MappingProxyType(
    {
        "spring": "春",
        "summer": "夏",
        "autumn": "秋",
        "winter": "冬",
    }
)

# 天赦日: 季節 -> (干, 支)
TENSHA_RULES: Mapping[str, Tuple[str, str]] = MappingProxyType(
    {
        "spring": ("戊", "寅"),
        "summer": ("甲", "午"),
        "autumn": ("戊", "申"),
        "winter": ("甲", "子"),
    }
)


def _validate_month_day(month: int, day: int) -> Tuple[int, int]:
    m = int(month)
    d = int(day)
    # leap year: 2/29 is a valid (month, day)
    if not (1 <= d <= days_in_month(2000, m)):
        raise InvalidDate(f"day out of range for month {m}: {d}")
    return m, d


def season_for(month: int, day: int) -> str:
    """
    (month, day) が属する季節を返す。
    開始日は含む。立春より前の 1/1..2/3 は冬。
    """
    md = _validate_month_day(month, day)
    current = "winter"
    for name in SEASONS:
        if md >= SEASON_BOUNDARIES[name]:
            current = name
    return current


# ============================================================
# 節月 (Ichiryumanbai-bi)
#   Gregorian month m -> onset day of the solar month that starts in m.
#   A date belongs to solar month m if day >= onset, else m - 1
#   (January before 小寒 belongs to 12).
# ============================================================


@dataclass(frozen=True)
class SolarMonthBoundary:
    day: int
    sekki: str
    branch: str   # 月支


SOLAR_MONTH_BOUNDARIES: Mapping[int, SolarMonthBoundary] = MappingProxyType(
    {
        1:  SolarMonthBoundary(5, "小寒", "丑"),
        2:  SolarMonthBoundary(4, "立春", "寅"),
        3:  SolarMonthBoundary(6, "啓蟄", "卯"),
        4:  SolarMonthBoundary(5, "清明", "辰"),
        5:  SolarMonthBoundary(5, "立夏", "巳"),
        6:  SolarMonthBoundary(6, "芒種", "午"),
        7:  SolarMonthBoundary(7, "小暑", "未"),
        8:  SolarMonthBoundary(7, "立秋", "申"),
        9:  SolarMonthBoundary(8, "白露", "酉"),
        10: SolarMonthBoundary(8, "寒露", "戌"),
        11: SolarMonthBoundary(7, "立冬", "亥"),
        12: SolarMonthBoundary(7, "大雪", "子"),
    }
)

SOLAR_MONTH_THRESHOLDS: Mapping[int, int] = MappingProxyType(
    {m: b.day for m, b in SOLAR_MONTH_BOUNDARIES.items()}
)

# 一粒万倍日: 節月 -> 支
#   NOTE:
#     Revisions of the old table disagreed (e.g. 6月). This is the
#     standard table keyed by 月支:
#       寅月 丑午 / 卯月 寅酉 / 辰月 子卯 / 巳月 卯辰 / 午月 巳午 / 未月 午酉
#       申月 子未 / 酉月 卯申 / 戌月 午酉 / 亥月 酉戌 / 子月 亥子 / 丑月 子卯
ICHIRYUMANBAI_BRANCHES: Mapping[int, FrozenSet[str]] = MappingProxyType(
    {
        1:  frozenset({"子", "卯"}),
        2:  frozenset({"丑", "午"}),
        3:  frozenset({"寅", "酉"}),
        4:  frozenset({"子", "卯"}),
        5:  frozenset({"卯", "辰"}),
        6:  frozenset({"巳", "午"}),
        7:  frozenset({"午", "酉"}),
        8:  frozenset({"子", "未"}),
        9:  frozenset({"卯", "申"}),
        10: frozenset({"午", "酉"}),
        11: frozenset({"酉", "戌"}),
        12: frozenset({"亥", "子"}),
    }
)


def solar_month_for(month: int, day: int) -> int:
    """
    (month, day) が属する節月 (1..12) を返す。開始日は含む。
    """
    m, d = _validate_month_day(month, day)
    if d >= SOLAR_MONTH_THRESHOLDS[m]:
        return m
    return 12 if m == 1 else m - 1


# ============================================================
# 吉日タグ
# ============================================================


class LuckyDayTag(str, Enum):
    TENSHA = "tensha"
    ICHIRYUMANBAI = "ichiryumanbai"
    TORA = "tora"
    MI = "mi"
    SUPER_MI = "super-mi"

    @property
    def label(self) -> str:
        return LUCKY_DAY_LABELS[self]

    @property
    def description(self) -> str:
        return LUCKY_DAY_DESCRIPTIONS[self]


LUCKY_DAY_ORDER: Tuple[LuckyDayTag, ...] = (
    LuckyDayTag.TENSHA,
    LuckyDayTag.ICHIRYUMANBAI,
    LuckyDayTag.TORA,
    LuckyDayTag.MI,
    LuckyDayTag.SUPER_MI,
)

LUCKY_DAY_LABELS: Dict[LuckyDayTag, str] = {
    LuckyDayTag.TENSHA: "天赦日",
    LuckyDayTag.ICHIRYUMANBAI: "一粒万倍日",
    LuckyDayTag.TORA: "寅の日",
    LuckyDayTag.MI: "巳の日",
    LuckyDayTag.SUPER_MI: "己巳の日",
}

LUCKY_DAY_DESCRIPTIONS: Dict[LuckyDayTag, str] = {
    LuckyDayTag.TENSHA: "天が万物の罪を赦す日。最上の吉日。新しいことを始めるのに最適。",
    LuckyDayTag.ICHIRYUMANBAI: "一粒の籾が万倍に実る日。種まき、開店、出資に吉。",
    LuckyDayTag.TORA: "「千里行って千里帰る」俊足の虎。旅行や金運に良い日。結婚は「出戻る」ため不向きとも。",
    LuckyDayTag.MI: "弁財天の使い、蛇の日。金運・芸術運が上昇する日。",
    LuckyDayTag.SUPER_MI: "60日に一度の最強金運日。弁財天への参拝が特におすすめ。",
}

NO_LUCKY_DAY_MESSAGE = "特筆すべき吉日はありません"
