"""
Selection Highlighter
=====================
Keeps one pulsing ring over the selected, currently visible marker.

The pulse is a self-rescheduling task: every frame asks the scheduler for a
single follow-up call. Each `sync` or `cancel` issues a new token; a frame
that wakes up with an older token stops without re-arming, so at most one
ring (and one pending frame) exists at any time.

States:
    IDLE     no selection
    VISIBLE  selection resolved to a screen position, ring animating
    HIDDEN   selection exists but has no position (clipped or not in dataset)
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
import logging
import time
from typing import Callable, Optional, Protocol

from seismicwatch import config

logger = logging.getLogger(__name__)


class HighlightState(str, Enum):
    IDLE = "idle"
    VISIBLE = "visible"
    HIDDEN = "hidden"


@dataclass(frozen=True)
class PulseAnchor:
    x: float
    y: float
    radius: float


class PulseRing(Protocol):
    def set_frame(self, x: float, y: float, radius: float, opacity: float) -> None: ...

    def dispose(self) -> None: ...


RingFactory = Callable[[], PulseRing]
Scheduler = Callable[[int, Callable[[], None]], None]
Clock = Callable[[], float]


def _monotonic_ms() -> float:
    return time.monotonic() * 1000.0


def pulse_frame(
    elapsed_ms: float,
    base_radius: float,
    duration_ms: float = config.PULSE_DURATION_MS,
    growth: float = config.PULSE_GROWTH,
) -> tuple[float, float]:
    """
    (radius, opacity) of the ring `elapsed_ms` into the animation.

    Within one cycle the radius grows linearly from r to growth * r while the
    opacity falls from 1 to 0; then the cycle restarts.
    """
    t = (elapsed_ms % duration_ms) / duration_ms
    return base_radius + (growth - 1.0) * base_radius * t, 1.0 - t


class SelectionHighlighter:
    """
    Args:
        ring_factory: Creates a fresh ring item for a new animation.
        scheduler: `scheduler(delay_ms, callback)` runs callback once, later.
        clock: Milliseconds from any fixed origin.
    """

    def __init__(
        self,
        ring_factory: RingFactory,
        scheduler: Scheduler,
        clock: Clock = _monotonic_ms,
        frame_interval_ms: int = config.PULSE_FRAME_INTERVAL_MS,
        duration_ms: float = config.PULSE_DURATION_MS,
    ) -> None:
        self._ring_factory = ring_factory
        self._scheduler = scheduler
        self._clock = clock
        self.frame_interval_ms = frame_interval_ms
        self.duration_ms = duration_ms

        self._token = 0
        self._state = HighlightState.IDLE
        self._ring: Optional[PulseRing] = None
        self._anchor: Optional[PulseAnchor] = None
        self._started_at = 0.0

    @property
    def state(self) -> HighlightState:
        return self._state

    @property
    def token(self) -> int:
        return self._token

    @property
    def ring(self) -> Optional[PulseRing]:
        return self._ring

    @property
    def anchor(self) -> Optional[PulseAnchor]:
        return self._anchor

    def sync(
        self,
        selected_id: Optional[str],
        anchor: Optional[PulseAnchor],
    ) -> HighlightState:
        """
        Bring the highlight in line with the current selection.

        Always cancels the running animation first. `anchor` is the selected
        marker's screen position, or None when it has none.
        """
        self.cancel()

        if selected_id is None:
            self._state = HighlightState.IDLE
        elif anchor is None:
            self._state = HighlightState.HIDDEN
        else:
            self._state = HighlightState.VISIBLE
            self._start(anchor)

        logger.debug(f"Highlight {self._state.value} (token {self._token}).")
        return self._state

    def cancel(self) -> None:
        """Invalidate the pending frame and remove the ring."""
        self._token += 1
        self._anchor = None
        if self._ring is not None:
            self._ring.dispose()
            self._ring = None

    def clear(self) -> None:
        self.cancel()
        self._state = HighlightState.IDLE

    def _start(self, anchor: PulseAnchor) -> None:
        self._anchor = anchor
        self._ring = self._ring_factory()
        self._started_at = self._clock()
        token = self._token
        self._draw()
        self._scheduler(self.frame_interval_ms, lambda: self._tick(token))

    def _draw(self) -> None:
        elapsed = self._clock() - self._started_at
        radius, opacity = pulse_frame(elapsed, self._anchor.radius, self.duration_ms)
        self._ring.set_frame(self._anchor.x, self._anchor.y, radius, opacity)

    def _tick(self, token: int) -> None:
        if token != self._token or self._ring is None:
            return
        self._draw()
        self._scheduler(self.frame_interval_ms, lambda: self._tick(token))
