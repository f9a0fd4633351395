"""
Event Detail Panel
==================
Shows the selected event (magnitude, depth, time, coordinates, tsunami flag
and a link to the USGS event page). Closing it clears the selection.
"""
from datetime import datetime, timezone
from typing import Optional

from PySide6.QtCore import Qt, Signal
from PySide6.QtWidgets import QFormLayout, QGroupBox, QHBoxLayout, QLabel, QPushButton, QVBoxLayout, QWidget

from seismicwatch.model.events import EventRecord, coerce_magnitude


def format_utc(timestamp_ms: int) -> str:
    return datetime.fromtimestamp(timestamp_ms / 1000.0, tz=timezone.utc).strftime("%a, %d %b %Y %H:%M:%S GMT")


def format_local(timestamp_ms: int) -> str:
    return datetime.fromtimestamp(timestamp_ms / 1000.0, tz=timezone.utc).astimezone().strftime("%Y-%m-%d at %H:%M:%S")


def format_coordinates(record: EventRecord) -> str:
    return f"{record.geo.lat:.4f}° N, {record.geo.lon:.4f}° E"


class DetailPanel(QWidget):
    close_requested = Signal()

    def __init__(self, parent: Optional[QWidget] = None) -> None:
        super().__init__(parent)
        self.record: Optional[EventRecord] = None

        layout = QVBoxLayout(self)

        # --- Header ---
        header = QHBoxLayout()
        titles = QVBoxLayout()
        self.lbl_title = QLabel()
        self.lbl_title.setWordWrap(True)
        self.lbl_title.setStyleSheet("font-size: 15px; font-weight: bold;")
        self.lbl_id = QLabel()
        self.lbl_id.setStyleSheet("color: gray; font-family: monospace; font-size: 11px;")
        titles.addWidget(self.lbl_title)
        titles.addWidget(self.lbl_id)
        header.addLayout(titles, 1)

        self.btn_close = QPushButton("✕")
        self.btn_close.setFixedWidth(28)
        self.btn_close.setToolTip("Close")
        self.btn_close.clicked.connect(self.close_requested)
        header.addWidget(self.btn_close, 0, Qt.AlignTop)
        layout.addLayout(header)

        # --- Key stats ---
        grp = QGroupBox("Event")
        form = QFormLayout(grp)
        self.lbl_magnitude = QLabel()
        self.lbl_depth = QLabel()
        self.lbl_time = QLabel()
        self.lbl_time.setWordWrap(True)
        self.lbl_coords = QLabel()
        form.addRow("Magnitude:", self.lbl_magnitude)
        form.addRow("Depth:", self.lbl_depth)
        form.addRow("Time:", self.lbl_time)
        form.addRow("Coordinates:", self.lbl_coords)
        layout.addWidget(grp)

        # --- Tsunami warning ---
        self.lbl_tsunami = QLabel(
            "<b>Tsunami Warning</b><br>This event has been flagged for potential "
            "tsunami generation. Check local alerts."
        )
        self.lbl_tsunami.setWordWrap(True)
        self.lbl_tsunami.setStyleSheet(
            "color: #fecaca; background-color: rgba(127, 29, 29, 80); border: 1px solid #7f1d1d; padding: 6px;"
        )
        layout.addWidget(self.lbl_tsunami)

        layout.addStretch()

        self.lbl_link = QLabel()
        self.lbl_link.setOpenExternalLinks(True)
        layout.addWidget(self.lbl_link)

        self.set_record(None)

    def set_record(self, record: Optional[EventRecord]) -> None:
        self.record = record
        if record is None:
            for label in (self.lbl_title, self.lbl_id, self.lbl_magnitude, self.lbl_depth,
                          self.lbl_time, self.lbl_coords, self.lbl_link):
                label.clear()
            self.lbl_tsunami.setVisible(False)
            return

        mag = coerce_magnitude(record.magnitude)
        self.lbl_title.setText(record.title)
        self.lbl_id.setText(record.id)
        mag_type = f"  {record.magnitude_type.upper()}" if record.magnitude_type else ""
        self.lbl_magnitude.setText(f"<span style='color: {record.tier.color}; font-weight: bold;'>{mag:.2f}</span>{mag_type}")
        self.lbl_depth.setText(f"{record.geo.depth_km:.2f} km below surface")
        self.lbl_time.setText(f"{format_local(record.timestamp_ms)}\n({format_utc(record.timestamp_ms)})")
        self.lbl_coords.setText(format_coordinates(record))
        self.lbl_tsunami.setVisible(record.tsunami_flag)
        if record.url:
            self.lbl_link.setText(f"<a href='{record.url}'>View on USGS</a>")
        else:
            self.lbl_link.clear()
