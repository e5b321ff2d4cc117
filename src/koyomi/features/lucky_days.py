# src/koyomi/features/lucky_days.py
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Callable, List, Optional, Tuple

from koyomi.core.civil import DateLike, require_civil_date
from koyomi.core.eto import EtoCalculator, SexagenaryDesignation
from koyomi.features.config import (
    NO_LUCKY_DAY_MESSAGE,
    TENSHA_RULES,
    LuckyDayTag,
    season_for,
)
from koyomi.features.ichiryumanbai import is_ichiryumanbai

TORA_BRANCH_INDEX = 2   # 寅
MI_BRANCH_INDEX = 5     # 巳
TSUCHINOTO_STEM_INDEX = 5  # 己


@dataclass(frozen=True)
class LuckyDay:
    """
    吉日タグ 1件。

    - tag: LuckyDayTag
    - label: 表示ラベル（天赦日 など）
    - description: 説明文
    """
    tag: LuckyDayTag
    label: str
    description: str

    @classmethod
    def from_tag(cls, tag: LuckyDayTag) -> "LuckyDay":
        return cls(tag=tag, label=tag.label, description=tag.description)

    def __str__(self) -> str:
        return self.label

    def as_dict(self) -> dict:
        return {"tag": self.tag.value, "label": self.label, "description": self.description}


# ------------------------------------------------------------
# predicates (date, designation) -> bool
# ------------------------------------------------------------
def is_tensha(d: date, eto: SexagenaryDesignation) -> bool:
    stem, branch = TENSHA_RULES[season_for(d.month, d.day)]
    return eto.stem == stem and eto.branch == branch


def _is_ichiryumanbai(d: date, eto: SexagenaryDesignation) -> bool:
    return is_ichiryumanbai(d, designation=eto)


def is_tora(d: date, eto: SexagenaryDesignation) -> bool:
    return eto.branch_index == TORA_BRANCH_INDEX


def is_mi(d: date, eto: SexagenaryDesignation) -> bool:
    return eto.branch_index == MI_BRANCH_INDEX


def is_super_mi(d: date, eto: SexagenaryDesignation) -> bool:
    # 己巳: 巳の日の中でも 60日に一度
    return is_mi(d, eto) and eto.stem_index == TSUCHINOTO_STEM_INDEX


Predicate = Callable[[date, SexagenaryDesignation], bool]

PREDICATES: Tuple[Tuple[LuckyDayTag, Predicate], ...] = (
    (LuckyDayTag.TENSHA, is_tensha),
    (LuckyDayTag.ICHIRYUMANBAI, _is_ichiryumanbai),
    (LuckyDayTag.TORA, is_tora),
    (LuckyDayTag.MI, is_mi),
    (LuckyDayTag.SUPER_MI, is_super_mi),
)


@dataclass(frozen=True)
class LuckyDayEvaluator:
    """
    日付 -> 吉日タグ列。

    Tags are emitted in the fixed order
    天赦日 -> 一粒万倍日 -> 寅の日 -> 巳の日 -> 己巳の日.
    Stateless: every call depends only on the input date.
    """
    calculator: EtoCalculator = field(default_factory=EtoCalculator)

    def tags(self, d: DateLike) -> Tuple[LuckyDayTag, ...]:
        dd = require_civil_date(d)
        eto = self.calculator.classify(dd)
        return tuple(tag for tag, pred in PREDICATES if pred(dd, eto))

    def evaluate(self, d: DateLike) -> Tuple[LuckyDay, ...]:
        return tuple(LuckyDay.from_tag(t) for t in self.tags(d))

    def has(self, d: DateLike, tag: LuckyDayTag) -> bool:
        return tag in self.tags(d)


_DEFAULT_EVALUATOR = LuckyDayEvaluator()


def evaluate(d: DateLike, *, evaluator: Optional[LuckyDayEvaluator] = None) -> Tuple[LuckyDay, ...]:
    """
    吉日タグを返す（該当なしなら空タプル）。
    """
    ev = evaluator if evaluator is not None else _DEFAULT_EVALUATOR
    return ev.evaluate(d)


def lucky_day_labels(d: DateLike) -> List[str]:
    return [x.label for x in evaluate(d)]


def lucky_day_summary(d: DateLike) -> str:
    """
    表示用の1行（例: "天赦日・一粒万倍日"）。該当なしなら NO_LUCKY_DAY_MESSAGE。
    """
    labels = lucky_day_labels(d)
    return "・".join(labels) if labels else NO_LUCKY_DAY_MESSAGE


def fmt_with_lucky_days(d: DateLike) -> str:
    """
    tools 側の行出力用ユーティリティ。
    """
    dd = require_civil_date(d)
    eto = _DEFAULT_EVALUATOR.calculator.classify(dd)
    labels = lucky_day_labels(dd)
    return f"{dd.isoformat()}  {eto.label}  {', '.join(labels) if labels else '-'}"
