from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time as dt_time, timezone
from pathlib import Path
from typing import Optional, Tuple, Union
from zoneinfo import ZoneInfo
import logging

from skyfield.api import Loader
from skyfield import almanac

from ..config import DEFAULT_TZ, MoonConfig
from ..moon import SYNODIC_DAYS, MoonPhase

log = logging.getLogger(__name__)


# ----------------------------
# Ephemeris path resolution
# ----------------------------
def _project_data_dir() -> Path:
    return Path(__file__).resolve().parents[4] / "data"


def _default_ephemeris_path() -> Path:
    """
    Prefer de440s (longer coverage) if present; otherwise fall back to de421.
    """
    data_dir = _project_data_dir()
    p440s = data_dir / "de440s.bsp"
    p421 = data_dir / "de421.bsp"
    return p440s if p440s.exists() else p421


def _resolve_ephemeris_path(
    *,
    ephemeris_path: Optional[Path],
    ephemeris: Optional[Union[str, Path]],
) -> Path:
    """
    Resolution priority:
      1) ephemeris_path (Path) if provided
      2) ephemeris (str|Path) if provided:
         - absolute path -> use as is
         - relative path / filename -> resolve under project data dir
      3) default: prefer de440s if present else de421
    """
    if ephemeris_path is not None:
        return ephemeris_path

    if ephemeris is not None:
        p = ephemeris if isinstance(ephemeris, Path) else Path(ephemeris)
        if p.is_absolute():
            return p
        return _project_data_dir() / p

    return _default_ephemeris_path()


@dataclass(frozen=True)
class SkyfieldMoonProvider:
    """
    Skyfield-backed moon phase provider.

    The phase of a civil date is sampled at `sample_hour` local time
    in `tz` (default: 12:00 Asia/Tokyo).
    """

    ephemeris_path: Optional[Path] = None
    ephemeris: Optional[Union[str, Path]] = None
    tz: str = DEFAULT_TZ
    sample_hour: int = 12
    synodic_days: float = SYNODIC_DAYS

    def __post_init__(self) -> None:
        resolved = _resolve_ephemeris_path(
            ephemeris_path=self.ephemeris_path,
            ephemeris=self.ephemeris,
        )
        object.__setattr__(self, "ephemeris_path", resolved)

        if not (0 <= int(self.sample_hour) <= 23):
            raise ValueError(f"sample_hour out of range: {self.sample_hour}")

        if not self.ephemeris_path.exists():
            data_dir = _project_data_dir()
            candidates = [
                data_dir / "de440s.bsp",
                data_dir / "de421.bsp",
            ]
            cand_str = "\n".join(f"  - {p}" for p in candidates)
            raise FileNotFoundError(
                f"Ephemeris not found: {self.ephemeris_path}\n"
                f"Place one of the following files under {data_dir}:\n"
                f"{cand_str}\n"
                "Or pass ephemeris='de440s.bsp' / ephemeris_path=Path(...)."
            )

        log.debug("loading ephemeris: %s", self.ephemeris_path)
        loader = Loader(str(self.ephemeris_path.parent))
        eph = loader(self.ephemeris_path.name)
        ts = loader.timescale()

        object.__setattr__(self, "_eph", eph)
        object.__setattr__(self, "_ts", ts)
        object.__setattr__(self, "_tzinfo", ZoneInfo(self.tz))

        start_utc, end_utc = self._compute_ephemeris_utc_range()
        object.__setattr__(self, "_ephem_start_utc", start_utc)
        object.__setattr__(self, "_ephem_end_utc", end_utc)

    @classmethod
    def from_config(cls, config: MoonConfig) -> "SkyfieldMoonProvider":
        path = Path(config.ephemeris_path).expanduser() if config.ephemeris_path else None
        return cls(
            ephemeris_path=path,
            ephemeris=config.ephemeris,
            tz=config.tz,
            sample_hour=config.sample_hour,
            synodic_days=config.synodic_days,
        )

    def _compute_ephemeris_utc_range(self) -> Tuple[datetime, datetime]:
        """
        Compute coverage from SPK segments.
        Skyfield throws EphemerisRangeError deep inside; we surface a clearer error earlier.
        """
        segments = getattr(self._eph, "spk", None)
        if segments is None or not getattr(segments, "segments", None):
            return (
                datetime.min.replace(tzinfo=timezone.utc),
                datetime.max.replace(tzinfo=timezone.utc),
            )

        segs = segments.segments
        start_jd = min(s.start_jd for s in segs)
        end_jd = max(s.end_jd for s in segs)

        start_utc = self._ts.tt_jd(start_jd).utc_datetime().replace(tzinfo=timezone.utc)
        end_utc = self._ts.tt_jd(end_jd).utc_datetime().replace(tzinfo=timezone.utc)
        return start_utc, end_utc

    def _check_ephemeris_range(self, dt_utc: datetime) -> None:
        start = self._ephem_start_utc
        end = self._ephem_end_utc
        if dt_utc < start or dt_utc > end:
            raise ValueError(
                "Requested datetime is outside ephemeris coverage.\n"
                f"  requested: {dt_utc.isoformat()}\n"
                f"  ephemeris: {self.ephemeris_path}\n"
                f"  coverage : {start.isoformat()} .. {end.isoformat()}\n"
                "Hint: use de440s.bsp (place it under ./data or pass ephemeris='de440s.bsp')."
            )

    def sample_instant_utc(self, d: date) -> datetime:
        local = datetime.combine(d, dt_time(int(self.sample_hour), 0), tzinfo=self._tzinfo)
        return local.astimezone(timezone.utc)

    def moon_phase_for_date(self, d: date) -> MoonPhase:
        dt_utc = self.sample_instant_utc(d)
        self._check_ephemeris_range(dt_utc)
        t = self._ts.from_datetime(dt_utc)

        angle = almanac.moon_phase(self._eph, t)
        frac = almanac.fraction_illuminated(self._eph, "moon", t)

        # float rounding can push the fraction a hair outside [0, 1]
        frac = min(1.0, max(0.0, float(frac)))
        return MoonPhase.from_angle(
            float(angle.degrees),
            frac,
            synodic_days=self.synodic_days,
        )
