"""
Seismic Event Records
=====================
Immutable value types for the event feed plus the magnitude rules that drive
marker size and color.

Classes:
    GeoPoint: Longitude/latitude/depth triple.
    EventRecord: One seismic event of a feed snapshot.
    MagnitudeTier: The four color bands.
    TimeRange: The USGS summary feed windows.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
import math
from typing import Any, Optional

from seismicwatch import config


class TimeRange(str, Enum):
    """USGS summary feed windows (the value is the feed file stem)."""
    HOUR = "all_hour"
    DAY = "all_day"
    WEEK = "all_week"
    MONTH = "all_month"

    @property
    def label(self) -> str:
        return self.value.replace("all_", "").upper()


class MagnitudeTier(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    SEVERE = "severe"

    @property
    def color(self) -> str:
        return config.MAGNITUDE_COLORS[self.value]


@dataclass(frozen=True)
class GeoPoint:
    """A geographic position. Depth is informational only and never projected."""
    lon: float
    lat: float
    depth_km: float = 0.0

    @property
    def is_finite(self) -> bool:
        return math.isfinite(self.lon) and math.isfinite(self.lat)


@dataclass(frozen=True)
class EventRecord:
    """
    One event of a feed snapshot.

    `magnitude` is kept exactly as delivered by the feed (it may be None or
    even a string); use `effective_magnitude()` for anything visual.
    """
    id: str
    magnitude: Any
    geo: GeoPoint
    timestamp_ms: int = 0
    title: str = ""
    place_name: str = ""
    tsunami_flag: bool = False
    detail_url: str = ""
    url: str = ""
    magnitude_type: str = ""

    @property
    def effective_magnitude(self) -> float:
        return effective_magnitude(self.magnitude)

    @property
    def radius(self) -> float:
        return marker_radius(self.magnitude)

    @property
    def tier(self) -> MagnitudeTier:
        return magnitude_tier(self.effective_magnitude)


# ---- magnitude rules ----

def coerce_magnitude(value: Any) -> float:
    """
    Numeric coercion of a raw magnitude. Non-numeric values and NaN become 0.0,
    infinities are passed through (callers treat them as invalid geometry).
    """
    if isinstance(value, bool) or value is None:
        return 0.0
    try:
        mag = float(value)
    except (TypeError, ValueError):
        return 0.0
    if math.isnan(mag):
        return 0.0
    return mag


def effective_magnitude(value: Any) -> float:
    """Coerced magnitude clamped to >= 0."""
    return max(0.0, coerce_magnitude(value))


def marker_radius(value: Any) -> float:
    """radius = max(2, clamp(mag, 0, inf) ** 1.5)"""
    mag = effective_magnitude(value)
    return max(config.MIN_MARKER_RADIUS, mag ** config.MARKER_RADIUS_EXPONENT)


def magnitude_tier(mag: float) -> MagnitudeTier:
    if mag < 3:
        return MagnitudeTier.LOW
    if mag < 5:
        return MagnitudeTier.MEDIUM
    if mag < 7:
        return MagnitudeTier.HIGH
    return MagnitudeTier.SEVERE


def magnitude_color(value: Any) -> str:
    return magnitude_tier(effective_magnitude(value)).color


def is_renderable(record: EventRecord) -> bool:
    """False for records with non-finite coordinates or an infinite magnitude."""
    return record.geo.is_finite and math.isfinite(coerce_magnitude(record.magnitude))


def find_record(records: list[EventRecord], record_id: Optional[str]) -> Optional[EventRecord]:
    if record_id is None:
        return None
    for record in records:
        if record.id == record_id:
            return record
    return None
