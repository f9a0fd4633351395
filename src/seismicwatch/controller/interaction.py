"""
Interaction Controllers
=======================
Translate pointer drags and wheel steps into changes of a view's
`ProjectionState`. Each view owns its controller and its state.

Why is this file needed?
------------------------
1. Qt-agnostic: controllers receive plain numbers (pixel positions, wheel
   deltas), so the gesture math is testable without a widget.
2. Ownership: the controller is the only writer of the projection state;
   widgets merely ask it to `fit`, `drag_to` or `wheel` and re-render when a
   call reports a change.
"""
from __future__ import annotations

from abc import ABC, abstractmethod
import logging
import math
from typing import Optional

from seismicwatch import config
from seismicwatch.model.state import (
    ProjectionKind,
    ProjectionState,
    ViewportDimensions,
    ZoomTransform,
    fitted_scale_translate,
)

logger = logging.getLogger(__name__)

WHEEL_NOTCH = 120.0


class InteractionController(ABC):
    """Drag lifecycle shared by both views."""

    def __init__(self, state: ProjectionState) -> None:
        self.state = state
        self._last: Optional[tuple[float, float]] = None

    @property
    def dragging(self) -> bool:
        return self._last is not None

    def fit(self, viewport: ViewportDimensions) -> None:
        """Re-derive scale and translate for a new viewport; other fields are kept."""
        self.state.scale, self.state.translate = fitted_scale_translate(self.state.kind, viewport)
        logger.debug(f"Fitted {self.state.kind.value} projection to {viewport.width}x{viewport.height}.")

    def begin_drag(self, x: float, y: float) -> None:
        self._last = (x, y)

    def drag_to(self, x: float, y: float) -> bool:
        """Returns True when the projection state changed."""
        if self._last is None:
            return False
        last_x, last_y = self._last
        self._last = (x, y)
        dx, dy = x - last_x, y - last_y
        if dx == 0 and dy == 0:
            return False
        return self._apply_drag(dx, dy)

    def end_drag(self) -> None:
        self._last = None

    @abstractmethod
    def _apply_drag(self, dx: float, dy: float) -> bool:
        ...

    def wheel(self, x: float, y: float, angle_delta: float) -> bool:
        """Wheel step at pointer position (x, y). Returns True when the state changed."""
        return False


class MapInteraction(InteractionController):
    """
    Pan and zoom of the planar view.

    Drag and wheel compose into one `ZoomTransform` applied to the layer
    group. Scale is clamped to the zoom extent; translation is free.
    """

    def __init__(
        self,
        state: ProjectionState,
        scale_extent: tuple[float, float] = config.ZOOM_SCALE_EXTENT,
    ) -> None:
        super().__init__(state)
        self.scale_extent = scale_extent

    def _apply_drag(self, dx: float, dy: float) -> bool:
        zoom = self.state.zoom
        self.state.zoom = ZoomTransform(zoom.k, zoom.tx + dx, zoom.ty + dy)
        return True

    def wheel(self, x: float, y: float, angle_delta: float) -> bool:
        zoom = self.state.zoom
        factor = 2.0 ** (angle_delta / WHEEL_NOTCH * config.WHEEL_NOTCH_EXPONENT)
        low, high = self.scale_extent
        k = min(high, max(low, zoom.k * factor))
        if k == zoom.k:
            return False

        # keep the layer point under the pointer fixed
        px, py = (x - zoom.tx) / zoom.k, (y - zoom.ty) / zoom.k
        self.state.zoom = ZoomTransform(k, x - px * k, y - py * k)
        logger.debug(f"Map zoom k={k:.3f}")
        return True


class GlobeInteraction(InteractionController):
    """
    Drag-to-rotate of the spherical view.

    Sensitivity is `75 / scale` degrees per pixel. The angles are reduced
    modulo 360 but otherwise unclamped, so a long vertical drag can turn the
    globe upside down.
    """

    def __init__(self, state: ProjectionState, sensitivity: float = config.ROTATION_SENSITIVITY) -> None:
        super().__init__(state)
        self.sensitivity = sensitivity

    def _apply_drag(self, dx: float, dy: float) -> bool:
        if self.state.scale <= 0:
            return False
        k = self.sensitivity / self.state.scale
        lam, phi, gamma = self.state.rotation
        self.state.rotation = (
            math.fmod(lam + dx * k, 360.0),
            math.fmod(phi - dy * k, 360.0),
            gamma,
        )
        return True


def make_interaction(state: ProjectionState) -> InteractionController:
    if state.kind is ProjectionKind.PLANAR:
        return MapInteraction(state)
    if state.kind is ProjectionKind.SPHERICAL:
        return GlobeInteraction(state)
    raise ValueError(f"Unknown projection kind: {state.kind!r}")
