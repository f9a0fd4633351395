"""
Magnitude legend overlay shown in the bottom-left corner of both views.
"""
from PySide6.QtCore import Qt
from PySide6.QtWidgets import QFrame, QHBoxLayout, QLabel, QVBoxLayout, QWidget

from seismicwatch.model.events import MagnitudeTier

LEGEND_ROWS: list[tuple[MagnitudeTier, str]] = [
    (MagnitudeTier.LOW, "< 3.0"),
    (MagnitudeTier.MEDIUM, "3.0 - 4.9"),
    (MagnitudeTier.HIGH, "5.0 - 6.9"),
    (MagnitudeTier.SEVERE, "≥ 7.0"),
]


class MagnitudeLegend(QFrame):
    def __init__(self, parent=None):
        super().__init__(parent)
        self.setAttribute(Qt.WA_TransparentForMouseEvents, True)
        self.setStyleSheet("""
            QFrame { background-color: rgba(30, 41, 59, 204); border-radius: 4px; }
            QLabel { color: #cbd5e1; font-size: 11px; background: transparent; }
        """)

        layout = QVBoxLayout(self)
        layout.setContentsMargins(8, 8, 8, 8)
        layout.setSpacing(4)

        title = QLabel("Magnitude")
        title.setStyleSheet("font-weight: bold;")
        layout.addWidget(title)

        self.rows: list[QWidget] = []
        for tier, text in LEGEND_ROWS:
            row = QWidget()
            row_layout = QHBoxLayout(row)
            row_layout.setContentsMargins(0, 0, 0, 0)
            row_layout.setSpacing(6)

            dot = QLabel()
            dot.setFixedSize(12, 12)
            dot.setStyleSheet(f"background-color: {tier.color}; border-radius: 6px;")
            row_layout.addWidget(dot)
            row_layout.addWidget(QLabel(text))
            row_layout.addStretch(1)

            layout.addWidget(row)
            self.rows.append(row)
