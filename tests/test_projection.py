import math

import numpy as np
import pytest

from seismicwatch.controller.projection import (
    PlanarProjector,
    SphericalProjector,
    make_projector,
    mercator_y,
    wrap_longitude,
)
from seismicwatch.model.state import ProjectionKind, ProjectionState, ViewportDimensions


def mercator(lon, lat, width, height):
    scale = width / 6.5
    x = width / 2 + scale * math.radians(lon)
    y = height / 1.6 - scale * math.log(math.tan(math.pi / 4 + math.radians(lat) / 2))
    return x, y


def planar(width=800, height=500):
    return make_projector(ProjectionState.for_viewport(ProjectionKind.PLANAR, ViewportDimensions(width, height)))


def spherical(width=800, height=500, rotation=(0.0, 0.0, 0.0)):
    state = ProjectionState.for_viewport(ProjectionKind.SPHERICAL, ViewportDimensions(width, height))
    state.rotation = rotation
    return make_projector(state)


# ---- planar ----

def test_planar_fit():
    proj = planar(800, 500)
    assert isinstance(proj, PlanarProjector)
    assert proj.scale == pytest.approx(800 / 6.5)
    assert proj.translate == (400.0, 312.5)


def test_planar_tokyo_position():
    x, y = planar().project(139.7, 35.7)
    ex, ey = mercator(139.7, 35.7, 800, 500)
    assert x == pytest.approx(ex)
    assert y == pytest.approx(ey)
    assert x == pytest.approx(700.1, abs=0.1)


def test_planar_origin_and_extremes_are_finite():
    proj = planar()
    assert proj.project(0, 0) == pytest.approx((400.0, 312.5))
    x, y = proj.project(0, 90)
    assert math.isfinite(y)
    assert proj.project(0, 90) == proj.project(0, 89.9999)


def test_planar_non_finite_is_none():
    assert planar().project(math.nan, 10) is None
    assert planar().project(10, math.inf) is None


def test_planar_longitude_wrapping():
    proj = planar()
    assert proj.project(190, 0) == pytest.approx(proj.project(-170, 0))
    assert proj.project(180, 0)[0] == pytest.approx(400 + math.pi * proj.scale)


def test_wrap_longitude_keeps_in_range_values():
    np.testing.assert_allclose(wrap_longitude([-180, 0, 180, 190, -540]), [-180, 0, 180, -170, -180])


def test_mercator_y_is_clamped():
    assert mercator_y(90) == pytest.approx(mercator_y(85.0511287798066))
    assert mercator_y(90) == pytest.approx(math.pi, abs=1e-6)


def test_world_bounds_is_square_for_mercator():
    x0, y0, x1, y1 = planar().world_bounds()
    assert x1 - x0 == pytest.approx(y1 - y0, rel=1e-6)


def test_resize_preserves_relative_position():
    small = planar(800, 500).project(139.7, 35.7)
    large = planar(1600, 1000).project(139.7, 35.7)
    assert large[0] / 1600 == pytest.approx(small[0] / 800)
    assert large[1] / 1000 == pytest.approx(small[1] / 500)


# ---- spherical ----

def test_spherical_fit():
    proj = spherical(800, 500)
    assert isinstance(proj, SphericalProjector)
    assert proj.scale == pytest.approx(500 / 2.2)
    assert proj.translate == (400.0, 250.0)
    assert proj.clip_angle == 90


def test_spherical_center_and_edges():
    proj = spherical()
    assert proj.project(0, 0) == pytest.approx((400.0, 250.0))
    # east of the center lies right, north lies up
    x, y = proj.project(30, 0)
    assert x > 400 and y == pytest.approx(250.0)
    x, y = proj.project(0, 30)
    assert y < 250 and x == pytest.approx(400.0)


def test_spherical_far_hemisphere_is_clipped():
    proj = spherical()
    assert proj.project(139.7, 35.7) is None
    assert proj.project(180, 0) is None
    assert proj.project(89, 0) is not None


def test_spherical_rotation_brings_point_to_center():
    proj = spherical(rotation=(-139.7, -35.7, 0.0))
    assert proj.project(139.7, 35.7) == pytest.approx((400.0, 250.0), abs=1e-6)
    assert proj.angular_distance(139.7, 35.7) == pytest.approx(0.0, abs=1e-6)
    assert proj.view_center == pytest.approx((139.7, 35.7))


def test_spherical_angular_distance_exceeding_clip():
    proj = spherical(rotation=(40.3, -35.7, 0.0))
    assert proj.angular_distance(139.7, 35.7) > 90
    assert proj.project(139.7, 35.7) is None


def test_project_many_mask():
    proj = spherical()
    xy, visible = proj.project_many([0, 100, -45], [0, 0, 10])
    assert xy.shape == (3, 2)
    assert visible.tolist() == [True, False, True]


def test_resize_preserves_relative_position_on_globe():
    rotation = (-139.7, -30.0, 0.0)
    a = spherical(800, 500, rotation).project(139.7, 35.7)
    b = spherical(1600, 1000, rotation).project(139.7, 35.7)
    assert b[0] / 1600 == pytest.approx(a[0] / 800)
    assert b[1] / 1000 == pytest.approx(a[1] / 500)


def test_unknown_kind_rejected():
    state = ProjectionState(kind="conic")
    with pytest.raises(ValueError):
        make_projector(state)
