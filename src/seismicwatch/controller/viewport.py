"""
Viewport tracking.

Widgets report every observed container size; the tracker ignores repeats and
empty sizes (hidden or collapsed widgets) and fires `on_change` only for real
changes, which then trigger a full re-projection.
"""
from __future__ import annotations

import logging
from typing import Callable, Optional

from seismicwatch.model.state import ViewportDimensions

logger = logging.getLogger(__name__)


class ViewportTracker:
    def __init__(
        self,
        on_change: Callable[[ViewportDimensions], None],
        initial: Optional[ViewportDimensions] = None,
    ) -> None:
        self._on_change = on_change
        self.dimensions = initial or ViewportDimensions()

    def observe(self, width: float, height: float) -> bool:
        """Returns True when the size changed and `on_change` was called."""
        dims = ViewportDimensions(max(0.0, float(width)), max(0.0, float(height)))
        if dims.is_empty or dims == self.dimensions:
            return False
        self.dimensions = dims
        logger.debug(f"Viewport resized to {dims.width:g}x{dims.height:g}.")
        self._on_change(dims)
        return True
