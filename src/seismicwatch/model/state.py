"""
Application & View State (Data Model)
=====================================
This module defines the state containers of the running viewer.

Why is this file needed?
------------------------
1. State Management: `AppState` holds the current dataset, topology and
   selection in one place; the main window is its only writer.
2. View isolation: `ProjectionState` is created per view instance, so the map
   and the globe never share pan/zoom or rotation.
3. Decoupling: Views read from these objects; controllers write to them.

Classes:
    ViewportDimensions: Observed container size.
    ZoomTransform: Planar pan/zoom affine transform.
    ProjectionState: Projector configuration of one view.
    AppState: The main container class.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
import logging
from typing import Optional

from seismicwatch import config
from seismicwatch.model.events import EventRecord, TimeRange
from seismicwatch.model.topology import Topology

logger = logging.getLogger(__name__)


class ProjectionKind(str, Enum):
    PLANAR = "planar"
    SPHERICAL = "spherical"


class ViewMode(str, Enum):
    MAP = "map"
    GLOBE = "globe"


@dataclass(frozen=True)
class ViewportDimensions:
    width: float = 800.0
    height: float = 500.0

    def __post_init__(self) -> None:
        if self.width < 0 or self.height < 0:
            raise ValueError(f"Viewport dimensions must be non-negative, got {self.width}x{self.height}.")

    @property
    def is_empty(self) -> bool:
        return self.width < 1 or self.height < 1


@dataclass(frozen=True)
class ZoomTransform:
    """x' = k * x + tx, y' = k * y + ty"""
    k: float = 1.0
    tx: float = 0.0
    ty: float = 0.0

    def apply(self, x: float, y: float) -> tuple[float, float]:
        return self.k * x + self.tx, self.k * y + self.ty


IDENTITY = ZoomTransform()


@dataclass
class ProjectionState:
    """
    Projector configuration of one view.

    Attributes:
        kind: Planar (Mercator) or spherical (orthographic).
        scale: Projection scale in pixels per radian.
        translate: Screen position of the projection origin.
        rotation: (lambda, phi, gamma) in degrees, spherical only.
        clip_angle: Horizon angle in degrees, spherical only.
        zoom: Pan/zoom layered on top of the planar projection.
    """
    kind: ProjectionKind
    scale: float = 1.0
    translate: tuple[float, float] = (0.0, 0.0)
    rotation: tuple[float, float, float] = (0.0, 0.0, 0.0)
    clip_angle: float = config.CLIP_ANGLE_DEG
    zoom: ZoomTransform = IDENTITY

    @classmethod
    def for_viewport(cls, kind: ProjectionKind, viewport: ViewportDimensions) -> ProjectionState:
        state = cls(kind=kind)
        state.scale, state.translate = fitted_scale_translate(kind, viewport)
        return state

    def signature(self) -> tuple:
        """Hashable summary used to scope animation tokens."""
        return (self.kind, self.scale, self.translate, self.rotation, self.clip_angle)


def fitted_scale_translate(
    kind: ProjectionKind,
    viewport: ViewportDimensions,
) -> tuple[float, tuple[float, float]]:
    """Scale and translate of a projection fitted to the viewport."""
    width, height = viewport.width, viewport.height
    if kind is ProjectionKind.PLANAR:
        return (
            width / config.PLANAR_SCALE_DIVISOR,
            (width / 2.0, height / config.PLANAR_TRANSLATE_Y_DIVISOR),
        )
    if kind is ProjectionKind.SPHERICAL:
        return min(width, height) / config.SPHERICAL_SCALE_DIVISOR, (width / 2.0, height / 2.0)
    raise ValueError(f"Unknown projection kind: {kind!r}")


@dataclass
class AppState:
    """
    Holds everything the shell shows. Pass this instance to the main window.

    The dataset is replaced wholesale on every refresh, never patched.
    """
    events: list[EventRecord] = field(default_factory=list)
    topology: Optional[Topology] = None
    selected_id: Optional[str] = None
    time_range: TimeRange = TimeRange.DAY
    view_mode: ViewMode = ViewMode.MAP
    loading: bool = False

    def replace_events(self, events: list[EventRecord]) -> None:
        ids = [e.id for e in events]
        if len(set(ids)) != len(ids):
            # Keep the first occurrence so ids stay unique per snapshot
            seen: set[str] = set()
            unique = []
            for e in events:
                if e.id not in seen:
                    seen.add(e.id)
                    unique.append(e)
            logger.warning(f"Dropped {len(events) - len(unique)} duplicate event ids from snapshot.")
            events = unique
        self.events = list(events)
        logger.info(f"Dataset replaced: {len(self.events)} events ({self.time_range.value}).")

    def select(self, record_id: Optional[str]) -> bool:
        """Returns True if the selection changed."""
        if record_id == self.selected_id:
            return False
        self.selected_id = record_id
        return True

    def clear_selection(self) -> bool:
        return self.select(None)
