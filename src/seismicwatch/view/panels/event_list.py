"""
Event List Sidebar
"""
from datetime import datetime, timezone
from typing import Optional

from PySide6.QtCore import Qt, Signal
from PySide6.QtGui import QColor
from PySide6.QtWidgets import QAbstractItemView, QLabel, QListWidget, QListWidgetItem, QVBoxLayout, QWidget

from seismicwatch.model.events import EventRecord, coerce_magnitude

RECORD_ROLE = Qt.UserRole


def newest_first(events: list[EventRecord]) -> list[EventRecord]:
    return sorted(events, key=lambda e: e.timestamp_ms, reverse=True)


def item_text(record: EventRecord) -> str:
    clock = datetime.fromtimestamp(record.timestamp_ms / 1000.0, tz=timezone.utc).astimezone().strftime("%H:%M")
    return (
        f"{coerce_magnitude(record.magnitude):.1f}    {clock}\n"
        f"{record.place_name}\n"
        f"{record.geo.depth_km:.2f} km depth"
    )


class EventListPanel(QWidget):
    # Emitted when the user picks an event in the list
    event_selected = Signal(object)

    def __init__(self, parent: Optional[QWidget] = None) -> None:
        super().__init__(parent)

        layout = QVBoxLayout(self)
        layout.setContentsMargins(0, 0, 0, 0)

        self.lbl_header = QLabel("<b>Recent Events</b>")
        self.lbl_count = QLabel("0 earthquakes in view")
        self.lbl_count.setStyleSheet("color: gray; font-size: 11px;")
        layout.addWidget(self.lbl_header)
        layout.addWidget(self.lbl_count)

        self.list = QListWidget()
        self.list.setSelectionMode(QAbstractItemView.SingleSelection)
        self.list.setWordWrap(True)
        self.list.itemClicked.connect(self.on_item_clicked)
        layout.addWidget(self.list, 1)

    def set_events(self, events: list[EventRecord], selected_id: Optional[str] = None) -> None:
        self.list.blockSignals(True)
        try:
            self.list.clear()
            for record in newest_first(events):
                item = QListWidgetItem(item_text(record))
                item.setData(RECORD_ROLE, record)
                item.setForeground(QColor(record.tier.color))
                self.list.addItem(item)
        finally:
            self.list.blockSignals(False)
        self.lbl_count.setText(f"{len(events)} earthquakes in view")
        self.set_selected_id(selected_id)

    def set_selected_id(self, selected_id: Optional[str]) -> None:
        self.list.blockSignals(True)
        try:
            self.list.clearSelection()
            for row in range(self.list.count()):
                item = self.list.item(row)
                if selected_id is not None and item.data(RECORD_ROLE).id == selected_id:
                    item.setSelected(True)
                    self.list.scrollToItem(item)
                    break
        finally:
            self.list.blockSignals(False)

    def on_item_clicked(self, item: QListWidgetItem) -> None:
        self.event_selected.emit(item.data(RECORD_ROLE))
