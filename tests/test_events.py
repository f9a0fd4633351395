import math

import pytest

from seismicwatch.model.events import (
    MagnitudeTier,
    TimeRange,
    coerce_magnitude,
    effective_magnitude,
    find_record,
    is_renderable,
    magnitude_color,
    magnitude_tier,
    marker_radius,
)


@pytest.mark.parametrize(
    "raw, expected",
    [(6.8, 6.8), ("4.2", 4.2), (None, 0.0), ("n/a", 0.0), (math.nan, 0.0), (True, 0.0), (-1.5, -1.5)],
)
def test_coerce_magnitude(raw, expected):
    assert coerce_magnitude(raw) == pytest.approx(expected)


def test_effective_magnitude_clamps_negative():
    assert effective_magnitude(-0.4) == 0.0
    assert effective_magnitude("abc") == 0.0


def test_marker_radius_formula():
    assert marker_radius(6.8) == pytest.approx(6.8 ** 1.5)
    assert marker_radius(1.0) == 2.0
    assert marker_radius(math.nan) == 2.0
    assert marker_radius(-3) == 2.0
    assert marker_radius(None) == 2.0


@pytest.mark.parametrize(
    "mag, tier",
    [
        (0.0, MagnitudeTier.LOW),
        (2.999, MagnitudeTier.LOW),
        (3.0, MagnitudeTier.MEDIUM),
        (4.999, MagnitudeTier.MEDIUM),
        (5.0, MagnitudeTier.HIGH),
        (6.999, MagnitudeTier.HIGH),
        (7.0, MagnitudeTier.SEVERE),
        (9.5, MagnitudeTier.SEVERE),
    ],
)
def test_tier_boundaries(mag, tier):
    assert magnitude_tier(mag) is tier


def test_tier_colors():
    assert magnitude_color(6.8) == "#f97316"
    assert magnitude_color(None) == "#10b981"
    assert MagnitudeTier.SEVERE.color == "#ef4444"


def test_record_properties(record_factory):
    rec = record_factory(mag=6.8)
    assert rec.tier is MagnitudeTier.HIGH
    assert rec.radius == pytest.approx(17.732, abs=1e-3)


def test_is_renderable(record_factory):
    assert is_renderable(record_factory())
    assert is_renderable(record_factory(mag=None))
    assert not is_renderable(record_factory(lon=math.nan))
    assert not is_renderable(record_factory(lat=math.inf))
    assert not is_renderable(record_factory(mag=math.inf))


def test_find_record(record_factory):
    records = [record_factory("a"), record_factory("b")]
    assert find_record(records, "b") is records[1]
    assert find_record(records, "zzz") is None
    assert find_record(records, None) is None


def test_time_range_labels():
    assert TimeRange.DAY.value == "all_day"
    assert [r.label for r in TimeRange] == ["HOUR", "DAY", "WEEK", "MONTH"]
