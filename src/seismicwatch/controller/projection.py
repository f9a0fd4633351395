"""
Geographic Projectors
=====================
Pure mappings from (lon, lat) in degrees to screen pixels.

Two interchangeable variants share the `GeoProjector` contract:
    - PlanarProjector: spherical Mercator, never clips finite input.
    - SphericalProjector: orthographic globe with a rotation and a clip angle;
      points on the far hemisphere have no screen position.

Projectors are immutable. Any reconfiguration (resize, pan/zoom, rotation)
creates a new one via `make_projector`, which invalidates every previously
computed position.
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
import logging
import math
from typing import Optional, TYPE_CHECKING

import numpy as np

from seismicwatch import config
from seismicwatch.model.state import ProjectionKind, ProjectionState

if TYPE_CHECKING:
    import numpy.typing as npt

logger = logging.getLogger(__name__)

_HALF_PI = math.pi / 2.0
_QUARTER_PI = math.pi / 4.0


def wrap_longitude(lons: npt.ArrayLike) -> npt.NDArray[np.float64]:
    """Wrap longitudes outside [-180, 180] back into range; 180 itself is kept."""
    lons = np.asarray(lons, dtype=np.float64)
    return np.where(np.abs(lons) > 180.0, (lons + 180.0) % 360.0 - 180.0, lons)


def mercator_y(lat_deg: npt.ArrayLike) -> npt.NDArray[np.float64]:
    """Unscaled Mercator ordinate (y up) with latitude clamped to the Mercator limit."""
    limit = config.MERCATOR_MAX_LATITUDE
    phi = np.radians(np.clip(np.asarray(lat_deg, dtype=np.float64), -limit, limit))
    return np.log(np.tan(_QUARTER_PI + phi / 2.0))


class GeoProjector(ABC):
    """Common contract of the planar and spherical projectors."""
    kind: ProjectionKind
    scale: float
    translate: tuple[float, float]

    @abstractmethod
    def project_many(
        self,
        lons: npt.ArrayLike,
        lats: npt.ArrayLike,
    ) -> tuple[npt.NDArray[np.float64], npt.NDArray[np.bool_]]:
        """
        Project arrays of coordinates.

        Returns:
            (xy, visible): an (N, 2) array of screen positions and a boolean
            mask. Positions where `visible` is False are meaningless.
        """

    def project(self, lon: float, lat: float) -> Optional[tuple[float, float]]:
        """Screen position of one point, or None if it has none (clipped or non-finite)."""
        if not (math.isfinite(lon) and math.isfinite(lat)):
            return None
        xy, visible = self.project_many([lon], [lat])
        if not visible[0]:
            return None
        return float(xy[0, 0]), float(xy[0, 1])


@dataclass(frozen=True)
class PlanarProjector(GeoProjector):
    scale: float
    translate: tuple[float, float]
    kind: ProjectionKind = ProjectionKind.PLANAR

    def project_many(self, lons, lats, wrap: bool = True):
        lons = np.asarray(lons, dtype=np.float64)
        lats = np.asarray(lats, dtype=np.float64)
        if wrap:
            lons = wrap_longitude(lons)
        tx, ty = self.translate
        x = tx + self.scale * np.radians(lons)
        y = ty - self.scale * mercator_y(lats)
        xy = np.c_[x, y]
        return xy, np.isfinite(x) & np.isfinite(y)

    def world_bounds(self) -> tuple[float, float, float, float]:
        """(x0, y0, x1, y1) of the projected world rectangle, before pan/zoom."""
        tx, ty = self.translate
        half_w = math.pi * self.scale
        half_h = float(mercator_y(config.MERCATOR_MAX_LATITUDE)) * self.scale
        return tx - half_w, ty - half_h, tx + half_w, ty + half_h


@dataclass(frozen=True)
class SphericalProjector(GeoProjector):
    scale: float
    translate: tuple[float, float]
    rotation: tuple[float, float, float] = (0.0, 0.0, 0.0)
    clip_angle: float = config.CLIP_ANGLE_DEG
    kind: ProjectionKind = ProjectionKind.SPHERICAL

    def rotated_cartesian(
        self,
        lons: npt.ArrayLike,
        lats: npt.ArrayLike,
    ) -> tuple[npt.NDArray[np.float64], npt.NDArray[np.float64], npt.NDArray[np.float64]]:
        """
        Unit vectors after applying the view rotation.

        Returns:
            (depth, east, north): `depth` points at the viewer (1.0 at the view
            center, 0.0 on the horizon), `east`/`north` span the screen plane.
        """
        d_lambda, d_phi, d_gamma = np.radians(self.rotation)
        lam = np.radians(np.asarray(lons, dtype=np.float64)) + d_lambda
        phi = np.radians(np.asarray(lats, dtype=np.float64))

        cos_phi = np.cos(phi)
        x = np.cos(lam) * cos_phi
        y = np.sin(lam) * cos_phi
        z = np.sin(phi)

        # rotate about the east axis (phi), then about the view axis (gamma)
        cos_dp, sin_dp = math.cos(d_phi), math.sin(d_phi)
        cos_dg, sin_dg = math.cos(d_gamma), math.sin(d_gamma)
        depth = x * cos_dp - z * sin_dp
        k = z * cos_dp + x * sin_dp
        east = y * cos_dg - k * sin_dg
        north = k * cos_dg + y * sin_dg
        return depth, east, north

    @property
    def horizon_cos(self) -> float:
        return math.cos(math.radians(self.clip_angle))

    def screen_from_plane(self, east, north) -> npt.NDArray[np.float64]:
        tx, ty = self.translate
        return np.c_[tx + self.scale * np.asarray(east), ty - self.scale * np.asarray(north)]

    def project_many(self, lons, lats):
        depth, east, north = self.rotated_cartesian(lons, lats)
        xy = self.screen_from_plane(east, north)
        visible = (depth > self.horizon_cos) & np.isfinite(xy).all(axis=1)
        return xy, visible

    def angular_distance(self, lon: float, lat: float) -> float:
        """Degrees between the point and the current view center."""
        depth, _, _ = self.rotated_cartesian([lon], [lat])
        return math.degrees(math.acos(max(-1.0, min(1.0, float(depth[0])))))

    @property
    def view_center(self) -> tuple[float, float]:
        """Geographic (lon, lat) at the middle of the globe."""
        lam, phi, _ = self.rotation
        return float(wrap_longitude(-lam)), -phi


def make_projector(state: ProjectionState) -> GeoProjector:
    """Build the projector for the given view state."""
    if state.kind is ProjectionKind.PLANAR:
        return PlanarProjector(scale=state.scale, translate=tuple(state.translate))
    if state.kind is ProjectionKind.SPHERICAL:
        return SphericalProjector(
            scale=state.scale,
            translate=tuple(state.translate),
            rotation=tuple(state.rotation),
            clip_angle=state.clip_angle,
        )
    raise ValueError(f"Unknown projection kind: {state.kind!r}")
