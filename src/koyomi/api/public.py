from __future__ import annotations

import logging
import os
from datetime import date, timedelta
from functools import lru_cache
from pathlib import Path
from typing import List, Optional, Tuple

from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from fastapi import APIRouter, HTTPException, Query
from pydantic import BaseModel, Field

from koyomi.core.civil import InvalidDate, civil_date, days_in_month, iter_days, require_civil_date
from koyomi.core.config import (
    DEFAULT_EPHEMERIS,
    DEFAULT_TZ,
    ENV_EPHEMERIS,
    ENV_EPHEMERIS_PATH,
    MoonConfig,
)
from koyomi.core.eto import classify
from koyomi.core.moon import MoonPhaseProvider
from koyomi.core.providers.skyfield_provider import SkyfieldMoonProvider
from koyomi.features.config import (
    SEASON_LABELS,
    SOLAR_MONTH_BOUNDARIES,
    LuckyDayTag,
    season_for,
    solar_month_for,
)
from koyomi.features.lucky_days import evaluate, lucky_day_summary

router = APIRouter(prefix="/api/v1", tags=["public"])

log = logging.getLogger("koyomi.api.public")


# ============================================================
# Response Models
# ============================================================
class Eto(BaseModel):
    cycle_index: int = Field(ge=0, le=59)
    stem_index: int = Field(ge=0, le=9)
    branch_index: int = Field(ge=0, le=11)
    stem: str
    branch: str
    label: str


class LuckyDay(BaseModel):
    tag: LuckyDayTag
    label: str
    description: str


class Moon(BaseModel):
    degrees: float = Field(description="月相角 [0, 360)")
    illumination: float = Field(description="輝面比 (%)")
    age: float = Field(description="概算の月齢 (日)")
    phase_name: Optional[str] = Field(default=None, description="新月/上弦の月/満月/下弦の月")


class CalendarDay(BaseModel):
    date: date
    weekday: int = Field(ge=0, le=6, description="0=日 .. 6=土")
    weekday_label: str
    eto: Eto
    season: str
    season_label: str
    solar_month: int = Field(ge=1, le=12)
    sekki: str = Field(description="節月の始まりの節気（概算）")
    lucky_days: List[LuckyDay] = Field(default_factory=list)
    lucky_day_summary: str
    moon: Optional[Moon] = None


class CalendarMonth(BaseModel):
    year: int
    month: int
    label: str
    leading_blanks: int = Field(ge=0, le=6, description="1日の前の空セル数（日曜始まり）")
    days: List[CalendarDay]


class LuckyDaySearch(BaseModel):
    start: date
    end: date
    tag: Optional[LuckyDayTag] = None
    days: List[CalendarDay]


# =========================================================
# Public JSON API (function-style, HTTP-ready)
# =========================================================
WEEKDAYS = ["日", "月", "火", "水", "木", "金", "土"]


def _weekday_sunday_first(d: date) -> int:
    # date.weekday(): Mon=0 .. Sun=6
    return (d.weekday() + 1) % 7


def _parse_date_any(x: str | date) -> date:
    try:
        return require_civil_date(x)
    except InvalidDate as e:
        raise HTTPException(status_code=422, detail=str(e)) from e


def _get_tzinfo(tz: str) -> ZoneInfo:
    try:
        return ZoneInfo(tz)
    except (ZoneInfoNotFoundError, ValueError) as e:
        raise HTTPException(status_code=422, detail=f"Unknown timezone: {tz}") from e


def _resolve_ephemeris(
    ephemeris: Optional[str],
    ephemeris_path: Optional[str | Path],
) -> Tuple[str, Optional[Path]]:
    ephem = (ephemeris or "").strip()
    if not ephem:
        ephem = os.environ.get(ENV_EPHEMERIS, DEFAULT_EPHEMERIS).strip() or DEFAULT_EPHEMERIS

    path_raw: Optional[str] = None
    if isinstance(ephemeris_path, Path):
        path_raw = str(ephemeris_path)
    elif isinstance(ephemeris_path, str):
        path_raw = ephemeris_path.strip()

    if not path_raw:
        path_raw = os.environ.get(ENV_EPHEMERIS_PATH, "").strip() or None

    if path_raw:
        p = Path(path_raw).expanduser()
        if not p.exists():
            raise HTTPException(status_code=422, detail=f"ephemeris_path not found: {p}")
        return ephem, p

    return ephem, None


@lru_cache(maxsize=4)
def _provider_cached(ephemeris: str, ephemeris_path: str, tz: str) -> SkyfieldMoonProvider:
    cfg = MoonConfig(
        ephemeris=ephemeris.strip() or DEFAULT_EPHEMERIS,
        ephemeris_path=ephemeris_path or None,
        tz=tz,
    )
    return SkyfieldMoonProvider.from_config(cfg)


def _moon_provider(
    ephemeris: Optional[str],
    ephemeris_path: Optional[str | Path],
    tz: str,
) -> MoonPhaseProvider:
    _get_tzinfo(tz)
    ephem, ep_path = _resolve_ephemeris(ephemeris, ephemeris_path)
    try:
        return _provider_cached(ephem, str(ep_path) if ep_path else "", tz)
    except FileNotFoundError as e:
        raise HTTPException(status_code=422, detail=str(e).splitlines()[0]) from e


def _moon_for_day(d: date, provider: Optional[MoonPhaseProvider]) -> Optional[dict]:
    if provider is None:
        return None
    try:
        return provider.moon_phase_for_date(d).as_dict()
    except Exception:
        log.exception("moon phase calculation failed: date=%s", d)
        return None


def _day_payload(d: date, provider: Optional[MoonPhaseProvider]) -> dict:
    wd = _weekday_sunday_first(d)
    season = season_for(d.month, d.day)
    sm = solar_month_for(d.month, d.day)
    return {
        "date": d.isoformat(),
        "weekday": wd,
        "weekday_label": WEEKDAYS[wd],
        "eto": classify(d).as_dict(),
        "season": season,
        "season_label": SEASON_LABELS[season],
        "solar_month": sm,
        "sekki": SOLAR_MONTH_BOUNDARIES[sm].sekki,
        "lucky_days": [x.as_dict() for x in evaluate(d)],
        "lucky_day_summary": lucky_day_summary(d),
        "moon": _moon_for_day(d, provider),
    }


def get_eto(date_: str | date) -> dict:
    d = _parse_date_any(date_)
    return classify(d).as_dict()


def get_calendar_day(
    date_: str | date,
    *,
    moon: bool = False,
    tz: str = DEFAULT_TZ,
    ephemeris: Optional[str] = None,
    ephemeris_path: Optional[str | Path] = None,
    provider: Optional[MoonPhaseProvider] = None,
) -> dict:
    """
    1日分の干支・吉日（・月相）を返す。

    `provider` を渡した場合は ephemeris 解決を行わずそれを使う（テスト用）。
    """
    d = _parse_date_any(date_)
    if moon and provider is None:
        provider = _moon_provider(ephemeris, ephemeris_path, tz)
    return _day_payload(d, provider if moon else None)


def get_calendar_month(
    year: int,
    month: int,
    *,
    moon: bool = False,
    tz: str = DEFAULT_TZ,
    ephemeris: Optional[str] = None,
    ephemeris_path: Optional[str | Path] = None,
    provider: Optional[MoonPhaseProvider] = None,
) -> dict:
    """
    月グリッド用のデータを返す（日曜始まり）。
    """
    try:
        first = civil_date(year, month, 1)
        n_days = days_in_month(year, month)
    except InvalidDate as e:
        raise HTTPException(status_code=422, detail=str(e)) from e

    if moon and provider is None:
        provider = _moon_provider(ephemeris, ephemeris_path, tz)
    use = provider if moon else None

    days = [_day_payload(first + timedelta(days=i), use) for i in range(n_days)]
    return {
        "year": first.year,
        "month": first.month,
        "label": f"{first.year}年 {first.month}月",
        "leading_blanks": _weekday_sunday_first(first),
        "days": days,
    }


def find_lucky_days(
    start: str | date,
    end: str | date,
    *,
    tag: Optional[LuckyDayTag | str] = None,
    limit_days: int = 370,
) -> dict:
    """
    [start, end] の中で吉日タグを持つ日を列挙する。tag 指定時はそのタグのみ。
    """
    s = _parse_date_any(start)
    e = _parse_date_any(end)
    if e < s:
        raise HTTPException(status_code=422, detail="end must be >= start")

    days_count = (e - s).days + 1
    if days_count > limit_days:
        raise HTTPException(status_code=422, detail=f"range too large: {days_count} days (limit_days={limit_days})")

    want: Optional[LuckyDayTag] = None
    if tag is not None:
        try:
            want = LuckyDayTag(tag)
        except ValueError as ex:
            raise HTTPException(status_code=422, detail=f"unknown tag: {tag}") from ex

    days: List[dict] = []
    for cur in iter_days(s, e):
        tags = [x.tag for x in evaluate(cur)]
        if (want is None and tags) or (want is not None and want in tags):
            days.append(_day_payload(cur, None))

    return {
        "start": s.isoformat(),
        "end": e.isoformat(),
        "tag": want.value if want is not None else None,
        "days": days,
    }


# ============================================================
# Endpoints
# ============================================================
@router.get("/eto", response_model=Eto)
def get_eto_endpoint(
    date_str: str = Query(..., alias="date", description="YYYY-MM-DD"),
) -> dict:
    return get_eto(date_str)


@router.get("/calendar/day", response_model=CalendarDay)
def get_calendar_day_endpoint(
    date_str: str = Query(..., alias="date", description="YYYY-MM-DD"),
    moon: bool = Query(False, description="月相を含める（要 ephemeris）"),
    tz: str = Query(DEFAULT_TZ),
    ephemeris: str = Query(""),
    ephemeris_path: str = Query(""),
) -> dict:
    ep_path = ephemeris_path.strip() or None
    return get_calendar_day(
        date_str,
        moon=moon,
        tz=tz,
        ephemeris=ephemeris,
        ephemeris_path=ep_path,
    )


@router.get("/calendar/month", response_model=CalendarMonth)
def get_calendar_month_endpoint(
    year: int = Query(..., ge=1, le=9999),
    month: int = Query(..., ge=1, le=12),
    moon: bool = Query(False, description="月相を含める（要 ephemeris）"),
    tz: str = Query(DEFAULT_TZ),
    ephemeris: str = Query(""),
    ephemeris_path: str = Query(""),
) -> dict:
    ep_path = ephemeris_path.strip() or None
    return get_calendar_month(
        year,
        month,
        moon=moon,
        tz=tz,
        ephemeris=ephemeris,
        ephemeris_path=ep_path,
    )


@router.get("/lucky-days", response_model=LuckyDaySearch)
def find_lucky_days_endpoint(
    start_str: str = Query(..., alias="start", description="YYYY-MM-DD"),
    end_str: str = Query(..., alias="end", description="YYYY-MM-DD"),
    tag: Optional[str] = Query(None, description="tensha / ichiryumanbai / tora / mi / super-mi"),
    limit_days: int = Query(370, ge=1, le=2000, description="最大日数（DoS対策）"),
) -> dict:
    return find_lucky_days(start_str, end_str, tag=tag, limit_days=limit_days)
