# src/koyomi/core/eto.py
from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from functools import lru_cache
from typing import Tuple

from .civil import DateLike, require_civil_date
from .config import DEFAULT_ANCHOR, SexagenaryAnchor

# 十干
JIKKAN: Tuple[str, ...] = ("甲", "乙", "丙", "丁", "戊", "己", "庚", "辛", "壬", "癸")
# 十二支
JUNISHI: Tuple[str, ...] = ("子", "丑", "寅", "卯", "辰", "巳", "午", "未", "申", "酉", "戌", "亥")

CYCLE_LENGTH = 60


@dataclass(frozen=True)
class SexagenaryDesignation:
    """
    日の干支。

    - cycle_index: 0..59 (0 = 甲子)
    - stem_index: 0..9, branch_index: 0..11（偶奇は常に一致）
    - label: 干 + 支（例: "甲子"）
    """
    cycle_index: int
    stem_index: int
    branch_index: int
    stem: str
    branch: str
    label: str

    def __str__(self) -> str:
        return self.label

    def as_dict(self) -> dict:
        return {
            "cycle_index": self.cycle_index,
            "stem_index": self.stem_index,
            "branch_index": self.branch_index,
            "stem": self.stem,
            "branch": self.branch,
            "label": self.label,
        }


def designation_for_index(cycle_index: int) -> SexagenaryDesignation:
    """
    60干支の番号から干支を組み立てる。範囲外は mod 60 で正規化。
    """
    i = int(cycle_index) % CYCLE_LENGTH
    s = i % 10
    b = i % 12
    return SexagenaryDesignation(
        cycle_index=i,
        stem_index=s,
        branch_index=b,
        stem=JIKKAN[s],
        branch=JUNISHI[b],
        label=JIKKAN[s] + JUNISHI[b],
    )


# only 60 distinct values
_DESIGNATIONS: Tuple[SexagenaryDesignation, ...] = tuple(
    designation_for_index(i) for i in range(CYCLE_LENGTH)
)


@dataclass(frozen=True)
class EtoCalculator:
    """
    Gregorian civil date -> 日干支.

    The result depends only on the whole-day offset from the anchor
    (`date.toordinal()` difference), so there are no clocks, time zones
    or DST transitions involved.
    """
    anchor: SexagenaryAnchor = DEFAULT_ANCHOR

    def cycle_index(self, d: DateLike) -> int:
        dd = require_civil_date(d)
        delta = dd.toordinal() - self.anchor.day.toordinal()
        return (self.anchor.cycle_index + delta) % CYCLE_LENGTH

    def classify(self, d: DateLike) -> SexagenaryDesignation:
        return _DESIGNATIONS[self.cycle_index(d)]


_DEFAULT_CALCULATOR = EtoCalculator()


@lru_cache(maxsize=4096)
def _classify_cached(d: date) -> SexagenaryDesignation:
    return _DEFAULT_CALCULATOR.classify(d)


def classify(d: DateLike) -> SexagenaryDesignation:
    """
    日干支を返す（既定の基準日: 2024-01-01 = 甲子）。
    """
    return _classify_cached(require_civil_date(d))


def cycle_index(d: DateLike) -> int:
    return classify(d).cycle_index
