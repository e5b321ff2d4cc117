from __future__ import annotations

from datetime import date, datetime, timedelta

import pytest
from zoneinfo import ZoneInfo

from koyomi.core.civil import InvalidDate, civil_date, iter_days
from koyomi.core.config import SexagenaryAnchor
from koyomi.core.eto import (
    JIKKAN,
    JUNISHI,
    EtoCalculator,
    classify,
    cycle_index,
    designation_for_index,
)


def _dates(start: date, n: int, step: int = 1):
    for i in range(n):
        yield start + timedelta(days=i * step)


def test_anchor_is_kinoe_ne():
    eto = classify(date(2024, 1, 1))
    assert eto.label == "甲子"
    assert eto.cycle_index == 0
    assert (eto.stem_index, eto.branch_index) == (0, 0)


def test_day_after_anchor():
    eto = classify(date(2024, 1, 2))
    assert eto.label == "乙丑"
    assert eto.cycle_index == 1


def test_day_before_anchor_wraps():
    eto = classify(date(2023, 12, 31))
    assert eto.cycle_index == 59
    assert eto.label == "癸亥"


@pytest.mark.parametrize(
    "d, label, idx",
    [
        # independent reference dates
        (date(2000, 1, 1), "戊午", 54),
        (date(1949, 10, 1), "甲子", 0),
        # 天赦日 2024
        (date(2024, 3, 15), "戊寅", 14),
        (date(2024, 5, 30), "甲午", 30),
        (date(2024, 8, 12), "戊申", 44),
        (date(2024, 12, 26), "甲子", 0),
    ],
)
def test_known_dates(d, label, idx):
    eto = classify(d)
    assert eto.label == label
    assert eto.cycle_index == idx


def test_sixty_day_periodicity():
    for d in _dates(date(1999, 12, 1), 200, step=7):
        assert classify(d + timedelta(days=60)) == classify(d)
        assert classify(d - timedelta(days=60)) == classify(d)


def test_successive_days_advance_by_one():
    prev = classify(date(2023, 11, 1))
    for d in _dates(date(2023, 11, 2), 400):
        cur = classify(d)
        assert cur.cycle_index == (prev.cycle_index + 1) % 60
        prev = cur


def test_parity_invariant_and_all_sixty_pairs():
    labels = set()
    for i in range(60):
        eto = designation_for_index(i)
        assert eto.stem_index % 2 == eto.branch_index % 2
        assert eto.stem == JIKKAN[eto.stem_index]
        assert eto.branch == JUNISHI[eto.branch_index]
        labels.add(eto.label)
    assert len(labels) == 60


def test_extreme_dates():
    for d in (date(1, 1, 1), date(1, 3, 1), date(9999, 12, 31)):
        eto = classify(d)
        assert 0 <= eto.cycle_index < 60
        assert eto.stem_index % 2 == eto.branch_index % 2
    assert classify(date(1, 1, 1) + timedelta(days=60)) == classify(date(1, 1, 1))


def test_depends_only_on_civil_date():
    expected = classify(date(2024, 1, 1))
    assert classify(datetime(2024, 1, 1, 0, 0)) == expected
    assert classify(datetime(2024, 1, 1, 23, 59, 59)) == expected
    # wall-clock date is kept (no UTC conversion)
    assert classify(datetime(2024, 1, 1, 0, 30, tzinfo=ZoneInfo("Asia/Tokyo"))) == expected
    assert classify(datetime(2024, 1, 1, 23, 30, tzinfo=ZoneInfo("America/New_York"))) == expected
    assert classify("2024-01-01") == expected


def test_idempotent():
    d = date(2025, 12, 9)
    assert classify(d) == classify(d) == classify(date(2025, 12, 9))
    assert cycle_index(d) == classify(d).cycle_index


@pytest.mark.parametrize(
    "bad",
    ["2024-13-01", "2024-02-30", "not-a-date", "20240101", "2024-W01-1", "2024-1-1", 20240101, None],
)
def test_invalid_input_raises(bad):
    with pytest.raises(InvalidDate):
        classify(bad)


def test_civil_date_fails_fast():
    with pytest.raises(InvalidDate):
        civil_date(2024, 13, 1)
    with pytest.raises(InvalidDate):
        civil_date(2023, 2, 29)
    assert civil_date(2024, 2, 29) == date(2024, 2, 29)


def test_alternate_anchor_calculator():
    # index 50 for 2024-01-01 (甲寅) disagrees with the 2000-01-01 reference
    legacy = EtoCalculator(anchor=SexagenaryAnchor(day=date(2024, 1, 1), cycle_index=50))
    assert legacy.classify(date(2024, 1, 1)).label == "甲寅"
    assert legacy.classify(date(2000, 1, 1)).label != "戊午"

    shifted = EtoCalculator(anchor=SexagenaryAnchor(day=date(2000, 1, 1), cycle_index=54))
    for d in _dates(date(2020, 1, 1), 50, step=13):
        assert shifted.classify(d) == classify(d)


def test_anchor_index_range():
    with pytest.raises(ValueError):
        SexagenaryAnchor(day=date(2024, 1, 1), cycle_index=60)


def test_iter_days_inclusive_and_ends_on_date_max():
    assert list(iter_days(date(2024, 2, 28), date(2024, 3, 1))) == [
        date(2024, 2, 28),
        date(2024, 2, 29),
        date(2024, 3, 1),
    ]
    assert list(iter_days(date(2024, 1, 1), date(2024, 1, 1))) == [date(2024, 1, 1)]
    assert list(iter_days(date(2024, 1, 2), date(2024, 1, 1))) == []

    tail = list(iter_days(date(9999, 12, 29), date.max))
    assert tail == [date(9999, 12, 29), date(9999, 12, 30), date(9999, 12, 31)]
