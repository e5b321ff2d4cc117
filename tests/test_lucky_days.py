from __future__ import annotations

from datetime import date, timedelta

import pytest

from koyomi.core.civil import InvalidDate
from koyomi.core.eto import classify
from koyomi.features.config import (
    LUCKY_DAY_ORDER,
    TENSHA_RULES,
    LuckyDayTag,
    NO_LUCKY_DAY_MESSAGE,
    season_for,
    solar_month_for,
)
from koyomi.features.lucky_days import (
    LuckyDayEvaluator,
    evaluate,
    fmt_with_lucky_days,
    lucky_day_labels,
    lucky_day_summary,
)

T = LuckyDayTag


def _tags(d: date):
    return [x.tag for x in evaluate(d)]


def _year(y: int):
    cur = date(y, 1, 1)
    while cur.year == y:
        yield cur
        cur = cur + timedelta(days=1)


@pytest.mark.parametrize(
    "d, expected",
    [
        # 甲子, winter, 子月 (亥子)
        (date(2024, 1, 1), [T.TENSHA, T.ICHIRYUMANBAI]),
        # 戊寅, spring, 卯月 (寅酉)
        (date(2024, 3, 15), [T.TENSHA, T.ICHIRYUMANBAI, T.TORA]),
        (date(2024, 5, 30), [T.TENSHA]),
        (date(2024, 8, 12), [T.TENSHA]),
        (date(2024, 10, 11), [T.TENSHA]),
        (date(2024, 12, 26), [T.TENSHA, T.ICHIRYUMANBAI]),
        # 戊寅 in winter: no 天赦日
        (date(2024, 1, 15), [T.TORA]),
        # 甲子 in spring: nothing
        (date(2024, 3, 1), []),
        # 己巳
        (date(2024, 1, 6), [T.MI, T.SUPER_MI]),
        # 辛巳
        (date(2024, 1, 18), [T.MI]),
        # 丙子, 丑月 (子卯)
        (date(2025, 1, 7), [T.ICHIRYUMANBAI]),
        # 芒種 onset day: 丙午 in 午月 (巳午); the day before is 乙巳 in 巳月 (卯辰)
        (date(2025, 6, 6), [T.ICHIRYUMANBAI]),
        (date(2025, 6, 5), [T.MI]),
    ],
)
def test_known_days(d, expected):
    assert _tags(d) == expected


def test_tensha_days_2024():
    got = [d for d in _year(2024) if T.TENSHA in _tags(d)]
    assert got == [
        date(2024, 1, 1),
        date(2024, 3, 15),
        date(2024, 5, 30),
        date(2024, 7, 29),
        date(2024, 8, 12),
        date(2024, 10, 11),
        date(2024, 12, 26),
    ]


def test_tensha_matches_season_rule():
    for d in _year(2025):
        eto = classify(d)
        stem, branch = TENSHA_RULES[season_for(d.month, d.day)]
        assert (T.TENSHA in _tags(d)) == (eto.stem == stem and eto.branch == branch)


def test_same_pair_other_season_is_not_tensha():
    # 戊寅 every 60 days; only the spring occurrences are 天赦日
    d = date(2024, 3, 15)
    for k in range(-6, 7):
        x = d + timedelta(days=60 * k)
        assert classify(x).label == "戊寅"
        is_spring = season_for(x.month, x.day) == "spring"
        assert (T.TENSHA in _tags(x)) == is_spring


def test_super_mi_implies_mi_and_order():
    seen_super = 0
    for y in (2024, 2025, 2026):
        for d in _year(y):
            tags = _tags(d)
            assert len(tags) == len(set(tags))
            positions = [LUCKY_DAY_ORDER.index(t) for t in tags]
            assert positions == sorted(positions)
            if T.SUPER_MI in tags:
                seen_super += 1
                assert T.MI in tags
                assert tags.index(T.MI) < tags.index(T.SUPER_MI)
                assert classify(d).label == "己巳"
    assert seen_super >= 18


def test_tora_and_mi_follow_branch():
    for d in _year(2024):
        eto = classify(d)
        tags = _tags(d)
        assert (T.TORA in tags) == (eto.branch == "寅")
        assert (T.MI in tags) == (eto.branch == "巳")


def test_labels_and_descriptions():
    result = evaluate(date(2024, 3, 15))
    assert [x.label for x in result] == ["天赦日", "一粒万倍日", "寅の日"]
    assert all(x.description for x in result)
    assert result[0].as_dict() == {
        "tag": "tensha",
        "label": "天赦日",
        "description": T.TENSHA.description,
    }
    assert lucky_day_labels(date(2024, 1, 6)) == ["巳の日", "己巳の日"]


def test_repeated_evaluation_is_identical():
    ev = LuckyDayEvaluator()
    for d in (date(2024, 1, 1), date(2024, 2, 4), date(2025, 6, 6)):
        assert ev.evaluate(d) == ev.evaluate(d) == evaluate(d)
        assert season_for(d.month, d.day) == season_for(d.month, d.day)
        assert solar_month_for(d.month, d.day) == solar_month_for(d.month, d.day)


def test_evaluator_has():
    ev = LuckyDayEvaluator()
    assert ev.has(date(2024, 3, 15), T.TORA)
    assert not ev.has(date(2024, 3, 15), T.MI)
    assert ev.tags("2024-01-06") == (T.MI, T.SUPER_MI)


@pytest.mark.parametrize(
    "md, season",
    [
        ((1, 1), "winter"),
        ((2, 3), "winter"),
        ((2, 4), "spring"),
        ((5, 4), "spring"),
        ((5, 5), "summer"),
        ((8, 6), "summer"),
        ((8, 7), "autumn"),
        ((11, 6), "autumn"),
        ((11, 7), "winter"),
        ((12, 31), "winter"),
    ],
)
def test_season_boundaries_inclusive(md, season):
    assert season_for(*md) == season


def test_season_rejects_bad_month():
    with pytest.raises(ValueError):
        season_for(13, 1)


def test_fmt_with_lucky_days():
    assert fmt_with_lucky_days(date(2024, 1, 1)) == "2024-01-01  甲子  天赦日, 一粒万倍日"
    assert fmt_with_lucky_days(date(2024, 3, 1)) == "2024-03-01  甲子  -"


@pytest.mark.parametrize("md", [(2, 30), (2, 31), (4, 31), (6, 31), (0, 1), (13, 1), (1, 0), (1, 32)])
def test_month_day_helpers_reject_impossible_pairs(md):
    with pytest.raises(InvalidDate):
        season_for(*md)
    with pytest.raises(InvalidDate):
        solar_month_for(*md)


def test_month_day_helpers_accept_leap_day():
    assert season_for(2, 29) == "spring"
    assert solar_month_for(2, 29) == 2


def test_lucky_day_summary():
    assert lucky_day_summary(date(2024, 1, 1)) == "天赦日・一粒万倍日"
    assert lucky_day_summary(date(2024, 3, 1)) == NO_LUCKY_DAY_MESSAGE
