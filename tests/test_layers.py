import math

import pytest

from seismicwatch.controller.layers import PointLayer, find_marker, paint_order, tooltip_text
from seismicwatch.controller.projection import PlanarProjector, SphericalProjector
from seismicwatch.model.events import MagnitudeTier
from seismicwatch.model.state import ProjectionKind


@pytest.fixture
def map_projector():
    return PlanarProjector(scale=800 / 6.5, translate=(400.0, 312.5))


def test_paint_order_largest_first(record_factory):
    records = [record_factory("s", 2.0), record_factory("l", 7.1), record_factory("m", 4.0), record_factory("n", None)]
    assert [r.id for r in paint_order(records)] == ["l", "m", "s", "n"]


def test_tooltip_depth_formatting(record_factory):
    rec = record_factory(depth=10.0, title="M 6.8 - Tokyo")
    assert tooltip_text(rec, ProjectionKind.PLANAR) == "M 6.8 - Tokyo\nDepth: 10 km"
    assert tooltip_text(rec, ProjectionKind.SPHERICAL) == "M 6.8 - Tokyo\nDepth: 10.00 km"

    odd = record_factory(depth=12.346, title="x")
    assert tooltip_text(odd, ProjectionKind.PLANAR) == "x\nDepth: 12.346 km"
    assert tooltip_text(odd, ProjectionKind.SPHERICAL) == "x\nDepth: 12.35 km"


def test_selected_tokyo_marker(tokyo, map_projector):
    markers = PointLayer(ProjectionKind.PLANAR).build([tokyo], map_projector, selected_id="a")
    assert len(markers) == 1
    marker = markers[0]
    assert marker.x == pytest.approx(700.1, abs=0.1)
    assert marker.tier is MagnitudeTier.HIGH
    assert marker.fill == "#f97316"
    assert marker.radius == pytest.approx(17.73, abs=0.01)
    assert marker.fill_opacity == 0.6
    assert marker.selected
    assert marker.outline_color == "#ffffff"
    assert marker.outline_width == 2.0


def test_unselected_marker_has_no_outline(tokyo, map_projector):
    marker = PointLayer(ProjectionKind.PLANAR).build([tokyo], map_projector)[0]
    assert not marker.selected
    assert marker.outline_color is None
    assert marker.outline_width == 0.0


def test_globe_opacity_and_clipping(record_factory):
    projector = SphericalProjector(scale=500 / 2.2, translate=(400.0, 250.0))
    near = record_factory("near", 3.5, 10.0, 10.0)
    far = record_factory("far", 5.5, 170.0, 0.0)
    markers = PointLayer(ProjectionKind.SPHERICAL).build([near, far], projector)
    assert [m.record.id for m in markers] == ["near"]
    assert markers[0].fill_opacity == 0.8


def test_invalid_records_are_skipped(record_factory, map_projector):
    records = [
        record_factory("ok", 3.0),
        record_factory("nan-lon", 3.0, lon=math.nan),
        record_factory("inf-mag", math.inf),
    ]
    markers = PointLayer(ProjectionKind.PLANAR).build(records, map_projector)
    assert [m.record.id for m in markers] == ["ok"]


def test_empty_dataset(map_projector):
    assert PointLayer(ProjectionKind.PLANAR).build([], map_projector) == []


def test_find_marker(record_factory, map_projector):
    markers = PointLayer(ProjectionKind.PLANAR).build(
        [record_factory("a"), record_factory("b", 2.0)], map_projector
    )
    assert find_marker(markers, "b").record.id == "b"
    assert find_marker(markers, "zzz") is None
    assert find_marker(markers, None) is None
