"""
Topology Decoding
=================
Decodes a TopoJSON topology (shared-arc, optionally quantized encoding of the
landmass outlines) into plain polygons of (N, 2) lon/lat numpy rings.

Decoding happens once per topology load; the resulting `Topology` is
immutable and reused for every projector configuration.
"""
from __future__ import annotations

from dataclasses import dataclass
import logging
from typing import Any, Mapping, Optional, Sequence, TYPE_CHECKING

import numpy as np

if TYPE_CHECKING:
    import numpy.typing as npt

logger = logging.getLogger(__name__)


class TopologyError(ValueError):
    """Raised for a payload that cannot be decoded into regions."""


@dataclass(frozen=True)
class Region:
    """
    A named landmass (usually a country).

    `polygons` is a tuple of polygons; each polygon is a tuple of rings where
    the first ring is the exterior and the rest are holes.
    """
    id: str
    name: str
    polygons: tuple[tuple[npt.NDArray[np.float64], ...], ...]

    @property
    def rings(self) -> list[npt.NDArray[np.float64]]:
        return [ring for polygon in self.polygons for ring in polygon]


@dataclass(frozen=True)
class Topology:
    regions: tuple[Region, ...]

    def __len__(self) -> int:
        return len(self.regions)

    @property
    def ring_count(self) -> int:
        return sum(len(region.rings) for region in self.regions)

    @classmethod
    def from_topojson(cls, payload: Mapping[str, Any], object_name: str = "countries") -> Topology:
        return decode_topology(payload, object_name)


# ---- arc decoding ----

def _decode_arcs(payload: Mapping[str, Any]) -> list[npt.NDArray[np.float64]]:
    """
    Absolute lon/lat coordinates of every arc.

    Quantized topologies store delta-encoded integer positions; the
    transform maps them back to degrees.
    """
    transform = payload.get("transform")
    arcs: list[npt.NDArray[np.float64]] = []

    for raw in payload.get("arcs", []):
        arr = np.asarray(raw, dtype=np.float64)[:, :2] if len(raw) else np.empty((0, 2))
        if transform is not None and arr.size:
            sx, sy = transform["scale"]
            tx, ty = transform["translate"]
            arr = np.cumsum(arr, axis=0)
            arr = np.c_[arr[:, 0] * sx + tx, arr[:, 1] * sy + ty]
        arcs.append(arr)

    return arcs


def _stitch_ring(indices: Sequence[int], arcs: list[npt.NDArray[np.float64]]) -> npt.NDArray[np.float64]:
    """
    Concatenate arcs into one ring. A negative index ~i means arc i reversed;
    the shared endpoint between consecutive arcs is kept once.
    """
    parts: list[npt.NDArray[np.float64]] = []
    for index in indices:
        arc = arcs[~index][::-1] if index < 0 else arcs[index]
        if parts and len(arc):
            arc = arc[1:]
        parts.append(arc)

    if not parts:
        return np.empty((0, 2), dtype=np.float64)
    return np.vstack(parts)


def _geometry_polygons(
    geometry: Mapping[str, Any],
    arcs: list[npt.NDArray[np.float64]],
) -> list[tuple[npt.NDArray[np.float64], ...]]:
    gtype = geometry.get("type")
    if gtype == "Polygon":
        polygon_arcs = [geometry.get("arcs", [])]
    elif gtype == "MultiPolygon":
        polygon_arcs = geometry.get("arcs", [])
    elif gtype == "GeometryCollection":
        polygons: list[tuple[npt.NDArray[np.float64], ...]] = []
        for child in geometry.get("geometries", []):
            polygons.extend(_geometry_polygons(child, arcs))
        return polygons
    else:
        # Points/lines carry no area; null geometries are legal TopoJSON
        return []

    polygons = []
    for rings_arcs in polygon_arcs:
        rings = tuple(
            ring for ring in (_stitch_ring(ring_arcs, arcs) for ring_arcs in rings_arcs)
            if len(ring) >= 3
        )
        if rings:
            polygons.append(rings)
    return polygons


def decode_topology(payload: Mapping[str, Any], object_name: str = "countries") -> Topology:
    """
    Decode the given object of a TopoJSON topology into regions.

    Args:
        payload: The parsed TopoJSON document.
        object_name: Key under `objects` to decode.

    Returns:
        The decoded, immutable topology.

    Raises:
        TopologyError: If the payload is not a topology or lacks the object.
    """
    if not isinstance(payload, Mapping) or payload.get("type") != "Topology":
        raise TopologyError("Payload is not a TopoJSON topology.")

    objects = payload.get("objects") or {}
    obj: Optional[Mapping[str, Any]] = objects.get(object_name)
    if obj is None:
        raise TopologyError(f"Topology has no object named '{object_name}'.")

    arcs = _decode_arcs(payload)
    geometries = obj.get("geometries") if obj.get("type") == "GeometryCollection" else [obj]

    regions: list[Region] = []
    for i, geometry in enumerate(geometries or []):
        polygons = _geometry_polygons(geometry, arcs)
        if not polygons:
            continue
        props = geometry.get("properties") or {}
        region_id = str(geometry.get("id", i))
        regions.append(Region(id=region_id, name=str(props.get("name", region_id)), polygons=tuple(polygons)))

    topology = Topology(regions=tuple(regions))
    logger.info(f"Decoded topology '{object_name}': {len(topology)} regions, {topology.ring_count} rings.")
    return topology
