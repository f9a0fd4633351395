"""
Point Layer
===========
Builds the styled marker list for one render pass from the dataset, the
current projector and the (read-only) selection.

The output is plain data (`MarkerSpec`) in paint order; the Qt widgets turn
each spec into a graphics item.
"""
from __future__ import annotations

from dataclasses import dataclass
import logging
from typing import Iterable, Optional

import numpy as np

from seismicwatch import config
from seismicwatch.controller.projection import GeoProjector
from seismicwatch.model.events import EventRecord, MagnitudeTier, is_renderable, magnitude_tier, marker_radius
from seismicwatch.model.state import ProjectionKind

logger = logging.getLogger(__name__)

FILL_OPACITY: dict[ProjectionKind, float] = {
    ProjectionKind.PLANAR: config.PLANAR_FILL_OPACITY,
    ProjectionKind.SPHERICAL: config.SPHERICAL_FILL_OPACITY,
}


@dataclass(frozen=True)
class MarkerSpec:
    record: EventRecord
    x: float
    y: float
    radius: float
    tier: MagnitudeTier
    fill: str
    fill_opacity: float
    selected: bool
    outline_color: Optional[str]
    outline_width: float
    tooltip: str


def _plain_number(value: float) -> str:
    """Shortest round-trip text of a number; integral floats print without '.0'."""
    if float(value).is_integer():
        return str(int(value))
    return repr(float(value))


def tooltip_text(record: EventRecord, kind: ProjectionKind) -> str:
    """
    "<title>\\nDepth: <depth> km". The globe rounds the depth to two decimals;
    the map prints it unrounded.
    """
    depth = record.geo.depth_km
    if kind is ProjectionKind.SPHERICAL:
        depth_text = f"{depth:.2f}"
    else:
        depth_text = _plain_number(depth)
    return f"{record.title}\nDepth: {depth_text} km"


def paint_order(records: Iterable[EventRecord]) -> list[EventRecord]:
    """Largest magnitude first, so smaller markers end up on top."""
    return sorted(records, key=lambda r: r.effective_magnitude, reverse=True)


class PointLayer:
    def __init__(self, kind: ProjectionKind) -> None:
        self.kind = kind
        self.fill_opacity = FILL_OPACITY[kind]

    def build(
        self,
        records: Iterable[EventRecord],
        projector: GeoProjector,
        selected_id: Optional[str] = None,
    ) -> list[MarkerSpec]:
        """
        Styled markers in paint order.

        Records with non-finite coordinates or magnitude are skipped, as are
        points the projector clips (far side of the globe).
        """
        records = list(records)
        renderable = [r for r in records if is_renderable(r)]
        if len(renderable) != len(records):
            logger.debug(f"Skipped {len(records) - len(renderable)} events with invalid geometry.")

        ordered = paint_order(renderable)
        if not ordered:
            return []

        lons = np.fromiter((r.geo.lon for r in ordered), dtype=np.float64, count=len(ordered))
        lats = np.fromiter((r.geo.lat for r in ordered), dtype=np.float64, count=len(ordered))
        xy, visible = projector.project_many(lons, lats)

        markers: list[MarkerSpec] = []
        for record, (x, y), is_visible in zip(ordered, xy, visible):
            if not is_visible:
                continue
            markers.append(self._style(record, float(x), float(y), record.id == selected_id))

        logger.debug(f"Point layer ({self.kind.value}): {len(markers)}/{len(ordered)} markers visible.")
        return markers

    def _style(self, record: EventRecord, x: float, y: float, selected: bool) -> MarkerSpec:
        tier = magnitude_tier(record.effective_magnitude)
        return MarkerSpec(
            record=record,
            x=x,
            y=y,
            radius=marker_radius(record.magnitude),
            tier=tier,
            fill=tier.color,
            fill_opacity=self.fill_opacity,
            selected=selected,
            outline_color=config.SELECTED_OUTLINE_COLOR if selected else None,
            outline_width=config.SELECTED_OUTLINE_WIDTH if selected else 0.0,
            tooltip=tooltip_text(record, self.kind),
        )


def find_marker(markers: list[MarkerSpec], record_id: Optional[str]) -> Optional[MarkerSpec]:
    if record_id is None:
        return None
    for marker in markers:
        if marker.record.id == record_id:
            return marker
    return None
