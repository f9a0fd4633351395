"""
Summary statistics strip (total, strongest, significant).
"""
from dataclasses import dataclass
import math

from PySide6.QtCore import Qt
from PySide6.QtWidgets import QFrame, QHBoxLayout, QLabel, QVBoxLayout, QWidget

from seismicwatch import config
from seismicwatch.model.events import EventRecord, coerce_magnitude


@dataclass(frozen=True)
class EventStats:
    total: int = 0
    max_magnitude: float = 0.0
    significant: int = 0


def summarize(events: list[EventRecord], threshold: float = config.SIGNIFICANT_MAGNITUDE) -> EventStats:
    mags = [m for m in (coerce_magnitude(e.magnitude) for e in events) if math.isfinite(m)]
    return EventStats(
        total=len(events),
        max_magnitude=max(mags) if mags else 0.0,
        significant=sum(1 for m in mags if m >= threshold),
    )


class StatsPanel(QWidget):
    def __init__(self, parent=None):
        super().__init__(parent)
        layout = QHBoxLayout(self)
        layout.setContentsMargins(8, 4, 8, 4)

        self.lbl_total = self._add_card(layout, "Total Events")
        self.lbl_max = self._add_card(layout, "Max Magnitude")
        self.lbl_significant = self._add_card(layout, f"Significant ({config.SIGNIFICANT_MAGNITUDE}+)")
        self.set_events([])

    @staticmethod
    def _add_card(layout: QHBoxLayout, title: str) -> QLabel:
        card = QFrame()
        card.setFrameShape(QFrame.StyledPanel)
        box = QVBoxLayout(card)
        caption = QLabel(title.upper())
        caption.setStyleSheet("color: gray; font-size: 10px; font-weight: bold;")
        value = QLabel("0")
        value.setStyleSheet("font-size: 20px; font-weight: bold;")
        value.setAlignment(Qt.AlignLeft)
        box.addWidget(caption)
        box.addWidget(value)
        layout.addWidget(card)
        return value

    def set_events(self, events: list[EventRecord]) -> EventStats:
        stats = summarize(events)
        self.lbl_total.setText(str(stats.total))
        self.lbl_max.setText(f"{stats.max_magnitude:.1f}")
        self.lbl_significant.setText(str(stats.significant))
        return stats
