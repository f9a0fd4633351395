"""
Scene Builder
=============
Turns the decoded topology into screen-space boundary rings for the current
projector. The topology is decoded once per load; rings are re-projected on
every projector change and always painted beneath the markers.
"""
from __future__ import annotations

from dataclasses import dataclass
import logging
import math
from typing import Any, Mapping, Optional, Union, TYPE_CHECKING

import numpy as np

from seismicwatch import config
from seismicwatch.controller.projection import GeoProjector, PlanarProjector, SphericalProjector
from seismicwatch.model.topology import Topology, decode_topology

if TYPE_CHECKING:
    import numpy.typing as npt

logger = logging.getLogger(__name__)

TopologySource = Union[Topology, Mapping[str, Any], None]


@dataclass(frozen=True)
class RegionPath:
    """Screen-space rings of one region, ready to be turned into a painter path."""
    region_id: str
    name: str
    rings: tuple[npt.NDArray[np.float64], ...]


@dataclass(frozen=True)
class SceneGeometry:
    """
    Everything the background layer draws for one projector configuration.

    Attributes:
        regions: Projected landmasses.
        clip_rect: (x0, y0, x1, y1) world rectangle for the planar view.
        sphere: (cx, cy, r) ocean disc for the spherical view.
    """
    regions: tuple[RegionPath, ...]
    clip_rect: Optional[tuple[float, float, float, float]] = None
    sphere: Optional[tuple[float, float, float]] = None


class SceneBuilder:
    def __init__(self, object_name: str = config.TOPOLOGY_OBJECT) -> None:
        self._object_name = object_name
        self._topology: Optional[Topology] = None

    @property
    def topology(self) -> Optional[Topology]:
        return self._topology

    @property
    def has_topology(self) -> bool:
        return self._topology is not None

    def set_topology(self, topology: TopologySource) -> None:
        """
        Accept a decoded topology or a raw TopoJSON mapping (decoded here, once).

        Raises:
            TopologyError: If a raw payload cannot be decoded.
        """
        if topology is None or isinstance(topology, Topology):
            self._topology = topology
            return
        self._topology = decode_topology(topology, self._object_name)

    def build(self, projector: GeoProjector) -> Optional[SceneGeometry]:
        """Project every region. Returns None while no topology is loaded."""
        if self._topology is None:
            return None

        if isinstance(projector, SphericalProjector):
            regions = self._build_regions(projector, self._spherical_rings)
            tx, ty = projector.translate
            rim = projector.scale * math.sin(math.radians(projector.clip_angle))
            return SceneGeometry(regions=regions, sphere=(tx, ty, rim))

        if isinstance(projector, PlanarProjector):
            regions = self._build_regions(projector, self._planar_rings)
            return SceneGeometry(regions=regions, clip_rect=projector.world_bounds())

        raise ValueError(f"Unsupported projector: {type(projector).__name__}")

    def _build_regions(self, projector, ring_fn) -> tuple[RegionPath, ...]:
        out: list[RegionPath] = []
        for region in self._topology.regions:
            rings: list[npt.NDArray[np.float64]] = []
            for ring in region.rings:
                rings.extend(ring_fn(ring, projector))
            if rings:
                out.append(RegionPath(region.id, region.name, tuple(rings)))
        return tuple(out)

    # ---- planar ----

    @staticmethod
    def _planar_rings(
        ring: npt.NDArray[np.float64],
        projector: PlanarProjector,
    ) -> list[npt.NDArray[np.float64]]:
        """
        Rings crossing the antimeridian are unwrapped into one continuous ring
        and drawn again shifted by 360 degrees; the world clip hides the overhang.
        """
        lons, lats = ring[:, 0], ring[:, 1]
        unwrapped = np.degrees(np.unwrap(np.radians(lons)))

        # A ring around a pole does not close once unwrapped; keep it as delivered
        if abs(unwrapped[-1] - unwrapped[0]) > 180.0:
            unwrapped = lons

        shifts = [0.0]
        if unwrapped.max() > 180.0:
            shifts.append(-360.0)
        if unwrapped.min() < -180.0:
            shifts.append(360.0)

        out = []
        for shift in shifts:
            xy, visible = projector.project_many(unwrapped + shift, lats, wrap=False)
            if visible.all():
                out.append(xy)
        return out

    # ---- spherical ----

    @staticmethod
    def _spherical_rings(
        ring: npt.NDArray[np.float64],
        projector: SphericalProjector,
    ) -> list[npt.NDArray[np.float64]]:
        """
        Clip a ring at the horizon.

        Hidden vertices are pushed radially onto the rim of the globe and the
        exact horizon crossings are inserted, so the visible part keeps its
        shape and the hidden part runs along the rim.
        """
        depth, east, north = projector.rotated_cartesian(ring[:, 0], ring[:, 1])
        horizon = projector.horizon_cos
        visible = depth > horizon

        if not visible.any():
            return []
        if visible.all():
            return [projector.screen_from_plane(east, north)]

        rim = math.sin(math.radians(projector.clip_angle))
        plane_e, plane_n = east, north
        east = east.copy()
        north = north.copy()
        keep = np.ones(len(depth), dtype=bool)

        hidden = ~visible
        norm = np.hypot(east[hidden], north[hidden])
        # the exact antipode of the view center has no direction on the rim
        safe = norm > 1e-12
        h_idx = np.nonzero(hidden)[0]
        keep[h_idx[~safe]] = False
        east[h_idx[safe]] = east[h_idx[safe]] / norm[safe] * rim
        north[h_idx[safe]] = north[h_idx[safe]] / norm[safe] * rim

        # horizon crossings between consecutive vertices
        cross = np.nonzero(visible[:-1] != visible[1:])[0]
        if len(cross):
            d0, d1 = depth[cross], depth[cross + 1]
            t = (d0 - horizon) / (d0 - d1)
            ce = plane_e[cross] + t * (plane_e[cross + 1] - plane_e[cross])
            cn = plane_n[cross] + t * (plane_n[cross + 1] - plane_n[cross])
            c_norm = np.hypot(ce, cn)
            c_norm[c_norm < 1e-12] = 1.0
            ce, cn = ce / c_norm * rim, cn / c_norm * rim

            east = np.insert(east, cross + 1, ce)
            north = np.insert(north, cross + 1, cn)
            keep = np.insert(keep, cross + 1, True)

        return [projector.screen_from_plane(east[keep], north[keep])]

