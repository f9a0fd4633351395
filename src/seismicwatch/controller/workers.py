"""
Background Workers (Threading)
==============================
QThread subclasses for the network side of the viewer.

Why is this file needed?
------------------------
1. Responsiveness: Fetching the feed on the main thread would freeze the map
   and stop the pulse animation. The worker pushes the HTTP calls to a
   background thread.
2. Signals: Results and errors travel back to the GUI thread as Qt Signals;
   the worker never touches widgets or the application state.

Classes:
    FeedWorker: Fetches the event snapshot (and the topology when asked).
"""
import logging
from typing import Callable, Optional

from PySide6.QtCore import QObject, QThread, Signal

from seismicwatch.model.events import TimeRange
from seismicwatch.model.io import FeedClient, FeedError, load_events_file, load_topology_file

logger = logging.getLogger(__name__)


class FeedWorker(QThread):
    events_loaded = Signal(object)    # list[EventRecord]
    topology_loaded = Signal(object)  # raw TopoJSON dict
    error_occurred = Signal(str)

    def __init__(
        self,
        time_range: TimeRange,
        include_topology: bool = False,
        events_path: Optional[str] = None,
        topology_path: Optional[str] = None,
        client_factory: Callable[[], FeedClient] = FeedClient,
        parent: Optional[QObject] = None,
    ):
        super().__init__(parent)
        self.time_range = time_range
        self.include_topology = include_topology
        self.events_path = events_path
        self.topology_path = topology_path
        self._client_factory = client_factory

    def run(self):
        client: Optional[FeedClient] = None
        try:
            logger.info(f"Fetching feed ({self.time_range.value}) in background thread...")

            if self.include_topology:
                if self.topology_path:
                    topology = load_topology_file(self.topology_path)
                else:
                    client = client or self._client_factory()
                    topology = client.fetch_topology()
                self.topology_loaded.emit(topology)

            if self.events_path:
                events = load_events_file(self.events_path)
            else:
                client = client or self._client_factory()
                events = client.fetch_events(self.time_range)
            self.events_loaded.emit(events)

        except FeedError as e:
            logger.error(f"Error in FeedWorker: {e}")
            self.error_occurred.emit(str(e))
        except Exception as e:
            logger.exception(f"Unexpected error in FeedWorker: {e}")
            self.error_occurred.emit(f"Unexpected error: {e}")
        finally:
            if client is not None:
                client.close()
