# src/koyomi/core/moon.py
from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Optional, Protocol, runtime_checkable

SYNODIC_DAYS = 29.53

NEW_MOON = "新月"
FIRST_QUARTER = "上弦の月"
FULL_MOON = "満月"
LAST_QUARTER = "下弦の月"


def norm360(deg: float) -> float:
    x = deg % 360.0
    return x + 360.0 if x < 0 else x


def phase_name_from_degrees(deg: float) -> Optional[str]:
    """
    月相角 (0=新月, 90=上弦, 180=満月, 270=下弦) から名前を返す。
    主要4相の前後5度以内のみ名前を付け、それ以外は None。
    """
    d = norm360(float(deg))
    if d < 5.0 or d > 355.0:
        return NEW_MOON
    if 85.0 <= d < 95.0:
        return FIRST_QUARTER
    if 175.0 <= d < 185.0:
        return FULL_MOON
    if 265.0 <= d < 275.0:
        return LAST_QUARTER
    return None


@dataclass(frozen=True)
class MoonPhase:
    """
    - degrees: 月相角 [0, 360)
    - illumination: 輝面比 (%)
    - age: 概算の月齢 (degrees / 360 * 朔望月)
    - phase_name: 主要4相の名前 or None
    """
    degrees: float
    illumination: float
    age: float
    phase_name: Optional[str] = None

    @classmethod
    def from_angle(
        cls,
        degrees: float,
        illuminated_fraction: float,
        *,
        synodic_days: float = SYNODIC_DAYS,
    ) -> "MoonPhase":
        deg = norm360(float(degrees))
        frac = float(illuminated_fraction)
        if not (0.0 <= frac <= 1.0):
            raise ValueError(f"illuminated_fraction out of range: {frac}")
        return cls(
            degrees=deg,
            illumination=frac * 100.0,
            age=deg / 360.0 * float(synodic_days),
            phase_name=phase_name_from_degrees(deg),
        )

    def as_dict(self) -> dict:
        return {
            "degrees": round(self.degrees, 6),
            "illumination": round(self.illumination, 1),
            "age": round(self.age, 1),
            "phase_name": self.phase_name,
        }


@runtime_checkable
class MoonPhaseProvider(Protocol):
    def moon_phase_for_date(self, d: date) -> MoonPhase: ...
