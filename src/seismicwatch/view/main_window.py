"""
Main Application Window
=======================
The primary GUI container: toolbar, event list, stats strip, the stacked
map/globe views and the detail dock.

Why is this file needed?
------------------------
1. Layout: It organizes the high-level visual structure of the application.
2. Orchestration: It is the only writer of `AppState`. Feed results arrive
   from the background worker, selections arrive from the views and the list,
   and every change is pushed back out to all widgets.
"""
import logging
from typing import Optional

from PySide6.QtCore import Qt
from PySide6.QtGui import QAction, QActionGroup
from PySide6.QtWidgets import (
    QComboBox, QDockWidget, QLabel, QMainWindow, QMessageBox, QSplitter, QStackedWidget,
    QToolBar, QVBoxLayout, QWidget,
)

from seismicwatch.controller.workers import FeedWorker
from seismicwatch.model.events import EventRecord, TimeRange, find_record
from seismicwatch.model.state import AppState, ViewMode
from seismicwatch.model.topology import TopologyError, decode_topology
from seismicwatch.view.panels.detail import DetailPanel
from seismicwatch.view.panels.event_list import EventListPanel
from seismicwatch.view.panels.stats import StatsPanel
from seismicwatch.view.widgets.geo_view import GlobeView, MapView

logger = logging.getLogger(__name__)

VISIBLE_APP_NAME = "SeismicWatch"


class MainWindow(QMainWindow):
    def __init__(
        self,
        app_state: AppState,
        events_path: Optional[str] = None,
        topology_path: Optional[str] = None,
        auto_load: bool = True,
    ) -> None:
        super().__init__()
        self.state: AppState = app_state
        self.events_path = events_path
        self.topology_path = topology_path
        self.worker: Optional[FeedWorker] = None
        self._detail_record: Optional[EventRecord] = None
        self._first_load = True
        self._reload_pending = False
        self._fetching_range: Optional[TimeRange] = None

        self.setWindowTitle(VISIBLE_APP_NAME)
        self.resize(1400, 900)

        # --- MAIN CONTAINER ---
        splitter = QSplitter(Qt.Horizontal)
        self.setCentralWidget(splitter)

        # --- LEFT SIDE: Event list ---
        self.event_list = EventListPanel()
        splitter.addWidget(self.event_list)

        # --- RIGHT SIDE: Stats + views ---
        right = QWidget()
        right_layout = QVBoxLayout(right)
        right_layout.setContentsMargins(0, 0, 0, 0)
        right_layout.setSpacing(0)

        self.stats_panel = StatsPanel()
        right_layout.addWidget(self.stats_panel)

        self.views_stack = QStackedWidget()
        self.map_view = MapView()
        self.globe_view = GlobeView()
        self.views_stack.addWidget(self.map_view)    # Index 0
        self.views_stack.addWidget(self.globe_view)  # Index 1
        right_layout.addWidget(self.views_stack, 1)

        splitter.addWidget(right)
        splitter.setSizes([320, 1080])

        # --- DETAIL DOCK ---
        self.detail_panel = DetailPanel()
        self.detail_dock = QDockWidget("Event Detail", self)
        self.detail_dock.setWidget(self.detail_panel)
        self.detail_dock.setFeatures(QDockWidget.NoDockWidgetFeatures)
        self.addDockWidget(Qt.RightDockWidgetArea, self.detail_dock)
        self.detail_dock.hide()

        # --- ACTIONS & TOOLBAR ---
        self._create_actions()
        self._create_toolbar()
        self.lbl_status = QLabel("")
        self.statusBar().addPermanentWidget(self.lbl_status)

        # --- SIGNAL CONNECTIONS ---
        self.map_view.event_selected.connect(self.on_event_selected)
        self.globe_view.event_selected.connect(self.on_event_selected)
        self.event_list.event_selected.connect(self.on_event_selected)
        self.detail_panel.close_requested.connect(self.on_detail_closed)

        self.set_view_mode(self.state.view_mode)
        if self.state.topology is not None:
            self.map_view.set_topology(self.state.topology)
            self.globe_view.set_topology(self.state.topology)
        self.refresh_ui_from_state()

        if auto_load:
            self.load_data(include_topology=self.state.topology is None)

    def _create_actions(self) -> None:
        self.act_map = QAction("Map", self)
        self.act_map.setCheckable(True)
        self.act_map.setToolTip("Map View")
        self.act_map.triggered.connect(lambda: self.set_view_mode(ViewMode.MAP))

        self.act_globe = QAction("Globe", self)
        self.act_globe.setCheckable(True)
        self.act_globe.setToolTip("Globe View")
        self.act_globe.triggered.connect(lambda: self.set_view_mode(ViewMode.GLOBE))

        self.view_group = QActionGroup(self)
        self.view_group.addAction(self.act_map)
        self.view_group.addAction(self.act_globe)

        self.act_refresh = QAction("Refresh", self)
        self.act_refresh.setShortcut("F5")
        self.act_refresh.setToolTip("Refresh Data")
        self.act_refresh.triggered.connect(self.on_refresh)

    def _create_toolbar(self) -> None:
        toolbar = QToolBar("Main", self)
        toolbar.setMovable(False)
        self.addToolBar(toolbar)

        toolbar.addAction(self.act_map)
        toolbar.addAction(self.act_globe)
        toolbar.addSeparator()

        self.cb_range = QComboBox()
        for time_range in TimeRange:
            self.cb_range.addItem(time_range.label, time_range)
        self.cb_range.setCurrentIndex(list(TimeRange).index(self.state.time_range))
        self.cb_range.currentIndexChanged.connect(self.on_time_range_changed)
        toolbar.addWidget(self.cb_range)

        toolbar.addAction(self.act_refresh)

    # --- DATA LOADING ---

    def load_data(self, include_topology: bool = False) -> None:
        """
        Start a background fetch. While one is still running the request is
        queued and re-issued from `on_load_finished` if the time range moved.
        """
        if self.worker is not None and self.worker.isRunning():
            logger.info("Fetch already in progress, reload queued.")
            self._reload_pending = True
            return

        self._reload_pending = False
        self._fetching_range = self.state.time_range
        self.state.loading = True
        self.act_refresh.setEnabled(False)
        self.lbl_status.setText("Loading seismic data...")

        self.worker = FeedWorker(
            self._fetching_range,
            include_topology=include_topology,
            events_path=self.events_path,
            topology_path=self.topology_path,
            parent=self,
        )
        self.worker.topology_loaded.connect(self.on_topology_loaded)
        self.worker.events_loaded.connect(self.on_events_loaded)
        self.worker.error_occurred.connect(self.on_load_error)
        self.worker.finished.connect(self.on_load_finished)
        self.worker.start()

    def on_topology_loaded(self, payload: dict) -> None:
        try:
            topology = decode_topology(payload)
        except TopologyError as e:
            logger.error(f"Could not decode topology: {e}")
            self.statusBar().showMessage(f"Failed to load world map data: {e}", 10000)
            return
        self.state.topology = topology
        self.map_view.set_topology(topology)
        self.globe_view.set_topology(topology)

    def on_events_loaded(self, events: list) -> None:
        self.state.replace_events(events)
        if self._detail_record is not None:
            # keep showing the old record if the refreshed snapshot dropped it
            self._detail_record = find_record(self.state.events, self._detail_record.id) or self._detail_record
        self.refresh_ui_from_state()

    def on_load_error(self, message: str) -> None:
        self.statusBar().showMessage(f"Failed to fetch earthquake data: {message}", 10000)
        if self._first_load:
            QMessageBox.warning(self, "Error", f"Failed to load initial data:\n{message}")

    def on_load_finished(self) -> None:
        finished, self.worker = self.worker, None
        if finished is not None:
            finished.deleteLater()
        self.state.loading = False
        self._first_load = False
        self.act_refresh.setEnabled(True)
        fetched = self._fetching_range or self.state.time_range
        self.lbl_status.setText(f"{len(self.state.events)} events ({fetched.label})")

        if self._reload_pending and self.state.time_range is not fetched:
            logger.info(f"Time range moved to {self.state.time_range.value} during the fetch, reloading.")
            self.load_data(include_topology=self.state.topology is None)
        self._reload_pending = False

    # --- SLOTS ---

    def on_refresh(self) -> None:
        self.load_data(include_topology=self.state.topology is None)

    def on_time_range_changed(self, index: int) -> None:
        self.state.time_range = TimeRange(self.cb_range.itemData(index))
        logger.info(f"Time range changed to {self.state.time_range.value}")
        self.load_data(include_topology=self.state.topology is None)

    def on_event_selected(self, record: EventRecord) -> None:
        self._detail_record = record
        self.state.select(record.id)
        self.refresh_selection()

    def on_detail_closed(self) -> None:
        self._detail_record = None
        self.state.clear_selection()
        self.refresh_selection()

    def set_view_mode(self, mode: ViewMode) -> None:
        self.state.view_mode = ViewMode(mode)
        self.views_stack.setCurrentIndex(0 if self.state.view_mode is ViewMode.MAP else 1)
        self.act_map.setChecked(self.state.view_mode is ViewMode.MAP)
        self.act_globe.setChecked(self.state.view_mode is ViewMode.GLOBE)
        logger.debug(f"View mode: {self.state.view_mode.value}")

    # --- HELPER METHODS ---

    @property
    def active_view(self):
        return self.views_stack.currentWidget()

    def refresh_ui_from_state(self) -> None:
        """Push the dataset and the selection out to every widget."""
        self.stats_panel.set_events(self.state.events)
        self.event_list.set_events(self.state.events, self.state.selected_id)
        for view in (self.map_view, self.globe_view):
            view.set_data(self.state.events, self.state.selected_id)
        self._update_detail()

    def refresh_selection(self) -> None:
        self.event_list.set_selected_id(self.state.selected_id)
        self.map_view.set_selected_id(self.state.selected_id)
        self.globe_view.set_selected_id(self.state.selected_id)
        self._update_detail()

    def _update_detail(self) -> None:
        self.detail_panel.set_record(self._detail_record)
        self.detail_dock.setVisible(self._detail_record is not None)

    def closeEvent(self, event, /) -> None:
        if self.worker is not None and self.worker.isRunning():
            # results of a fetch that outlives the window are dropped
            self.worker.blockSignals(True)
            self.worker.wait()
        event.accept()
