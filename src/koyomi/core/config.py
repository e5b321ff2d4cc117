from __future__ import annotations
from dataclasses import dataclass
from datetime import date
from typing import Optional

from .moon import SYNODIC_DAYS

ENV_EPHEMERIS = "KOYOMI_EPHEMERIS"
ENV_EPHEMERIS_PATH = "KOYOMI_EPHEMERIS_PATH"

DEFAULT_TZ = "Asia/Tokyo"
DEFAULT_EPHEMERIS = "de440s.bsp"


@dataclass(frozen=True)
class SexagenaryAnchor:
    """
    干支の基準日。

    2024-01-01 は甲子 (cycle index 0)。
    独立した検算: 2000-01-01 = 戊午 (54), 1949-10-01 = 甲子 (0)。
    """
    day: date = date(2024, 1, 1)
    cycle_index: int = 0

    def __post_init__(self) -> None:
        if not (0 <= self.cycle_index < 60):
            raise ValueError(f"cycle_index out of range: {self.cycle_index}")


@dataclass(frozen=True)
class MoonConfig:
    """
    Moon phase sampling configuration.
    The phase for a civil date is sampled once, at `sample_hour` local time.
    """
    ephemeris: str = DEFAULT_EPHEMERIS
    ephemeris_path: Optional[str] = None
    tz: str = DEFAULT_TZ
    sample_hour: int = 12

    # mean synodic month (days), used for the approximate moon age
    synodic_days: float = SYNODIC_DAYS


DEFAULT_ANCHOR = SexagenaryAnchor()
