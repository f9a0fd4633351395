"""
Map & Globe Views (QGraphicsView)
=================================
Interactive views that draw the topology and the event markers and keep the
selection pulse running.

Why is this file needed?
------------------------
1. Rendering: Each render pass builds a fresh item tree (background, markers,
   overlay) from the current state and swaps it in as one generation, so the
   user never sees a half-updated scene.
2. Interaction: Mouse gestures are forwarded to the view's interaction
   controller; marker clicks are turned into `event_selected`.
3. Isolation: Every view owns its projection state, scene builder, point
   layer and highlighter. The map and the globe share nothing but the data.

Scene coordinates equal viewport pixels (top-left origin, no scrollbars).

Classes:
    GeoView: Common base.
    MapView: Mercator map with pan/zoom.
    GlobeView: Orthographic globe with drag-to-rotate.
"""
from __future__ import annotations

import logging
from typing import Callable, Iterable, Optional

from PySide6.QtCore import Qt, QPointF, QRectF, QTimer, Signal
from PySide6.QtGui import QBrush, QColor, QPainter, QPainterPath, QPen, QPolygonF, QTransform
from PySide6.QtWidgets import (
    QFrame, QGraphicsEllipseItem, QGraphicsItem, QGraphicsPathItem, QGraphicsRectItem,
    QGraphicsScene, QGraphicsSimpleTextItem, QGraphicsView, QLabel, QWidget,
)

from seismicwatch import config
from seismicwatch.controller.arena import GenerationArena
from seismicwatch.controller.highlight import HighlightState, PulseAnchor, SelectionHighlighter
from seismicwatch.controller.interaction import InteractionController, make_interaction
from seismicwatch.controller.layers import MarkerSpec, PointLayer, find_marker
from seismicwatch.controller.projection import GeoProjector, make_projector
from seismicwatch.controller.scene import SceneBuilder, SceneGeometry, TopologySource
from seismicwatch.controller.viewport import ViewportTracker
from seismicwatch.model.events import EventRecord
from seismicwatch.model.state import ProjectionKind, ProjectionState, ViewportDimensions
from seismicwatch.view.widgets.legend import MagnitudeLegend

logger = logging.getLogger(__name__)

OVERLAY_MARGIN = 16


def _color(value: str, alpha: float = 1.0) -> QColor:
    color = QColor(value)
    color.setAlphaF(alpha)
    return color


# --- GRAPHICS ITEMS ---

class LayerItem(QGraphicsItem):
    """Invisible container; groups children and carries a transform."""

    def __init__(self, parent: Optional[QGraphicsItem] = None) -> None:
        super().__init__(parent)
        self.setFlag(QGraphicsItem.ItemHasNoContents, True)
        self.setAcceptedMouseButtons(Qt.NoButton)

    def boundingRect(self) -> QRectF:
        return QRectF()

    def paint(self, painter, option, widget=None) -> None:
        pass


class MarkerItem(QGraphicsEllipseItem):
    """
    One event marker. Accepts the press so the click never reaches the
    view's drag handling; a release inside the marker activates it.
    """

    def __init__(
        self,
        spec: MarkerSpec,
        on_click: Callable[[EventRecord], None],
        parent: Optional[QGraphicsItem] = None,
    ) -> None:
        r = spec.radius
        super().__init__(-r, -r, 2 * r, 2 * r, parent)
        self.spec = spec
        self._on_click = on_click

        self.setPos(spec.x, spec.y)
        self.setBrush(QBrush(_color(spec.fill, spec.fill_opacity)))
        if spec.selected:
            self.setPen(QPen(_color(spec.outline_color), spec.outline_width))
        else:
            self.setPen(QPen(Qt.NoPen))
        self.setToolTip(spec.tooltip)
        self.setCursor(Qt.PointingHandCursor)
        self.setAcceptedMouseButtons(Qt.LeftButton)

    @property
    def record(self) -> EventRecord:
        return self.spec.record

    def activate(self) -> None:
        self._on_click(self.spec.record)

    def mousePressEvent(self, event) -> None:
        event.accept()

    def mouseReleaseEvent(self, event) -> None:
        if self.contains(event.pos()):
            self.activate()
        event.accept()


class PulseRingItem(QGraphicsEllipseItem):
    """Expanding ring over the selected marker. Ignores the mouse."""

    def __init__(self, parent: Optional[QGraphicsItem] = None) -> None:
        super().__init__(parent)
        self.setBrush(QBrush(Qt.NoBrush))
        self.setPen(QPen(_color(config.SELECTED_OUTLINE_COLOR), config.SELECTED_OUTLINE_WIDTH))
        self.setAcceptedMouseButtons(Qt.NoButton)

    def set_frame(self, x: float, y: float, radius: float, opacity: float) -> None:
        self.setRect(x - radius, y - radius, 2 * radius, 2 * radius)
        self.setOpacity(opacity)

    def dispose(self) -> None:
        scene = self.scene()
        if scene is not None:
            scene.removeItem(self)


# --- VIEW CLASSES ---

class GeoView(QGraphicsView):
    """
    Base view. Subclasses provide the projection kind, background color and
    placeholder text, and decide how a projection change is applied.
    """
    event_selected = Signal(object)  # EventRecord

    KIND: ProjectionKind = ProjectionKind.PLANAR
    BACKGROUND: str = config.MAP_BACKGROUND
    PLACEHOLDER_TEXT: str = "Loading Topology..."

    def __init__(self, parent: Optional[QWidget] = None) -> None:
        super().__init__(parent)

        self._scene = QGraphicsScene(self)
        self._scene.setItemIndexMethod(QGraphicsScene.NoIndex)
        self.setScene(self._scene)
        self._init_view()

        # --- Data ---
        self._events: list[EventRecord] = []
        self._selected_id: Optional[str] = None

        # --- Projection & controllers ---
        self._tracker = ViewportTracker(self._on_viewport_changed)
        self.state = ProjectionState.for_viewport(self.KIND, self._tracker.dimensions)
        self.interaction: InteractionController = make_interaction(self.state)
        self._scene_builder = SceneBuilder()
        self._point_layer = PointLayer(self.KIND)
        self._scene.setSceneRect(0, 0, self._tracker.dimensions.width, self._tracker.dimensions.height)

        # --- Render generations ---
        self._arena: GenerationArena[QGraphicsItem] = GenerationArena(self._dispose_item)
        self._content: Optional[LayerItem] = None
        self._overlay: Optional[LayerItem] = None
        self._markers: list[MarkerSpec] = []
        self._marker_items: list[MarkerItem] = []
        self._deferred_clicks: list[EventRecord] = []
        self._retired: list[QGraphicsItem] = []

        # --- Pulse animation ---
        # One single-shot timer; re-arming it replaces any pending frame
        self._pulse_timer = QTimer(self)
        self._pulse_timer.setSingleShot(True)
        self._pulse_timer.timeout.connect(self._run_pulse_frame)
        self._pulse_callback: Optional[Callable[[], None]] = None
        self._highlighter = SelectionHighlighter(
            ring_factory=self._create_ring,
            scheduler=self._schedule_pulse,
        )

        self._legend = MagnitudeLegend(self)
        self._position_overlays()

    def _init_view(self) -> None:
        self.setRenderHints(self.renderHints() | QPainter.Antialiasing | QPainter.TextAntialiasing)
        self.setDragMode(QGraphicsView.NoDrag)
        self.setTransformationAnchor(QGraphicsView.NoAnchor)
        self.setResizeAnchor(QGraphicsView.NoAnchor)
        self.setAlignment(Qt.AlignLeft | Qt.AlignTop)
        self.setHorizontalScrollBarPolicy(Qt.ScrollBarAlwaysOff)
        self.setVerticalScrollBarPolicy(Qt.ScrollBarAlwaysOff)
        self.setFrameShape(QFrame.NoFrame)
        self.setBackgroundBrush(QBrush(QColor(self.BACKGROUND)))

    # ------------------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------------------

    @property
    def projector(self) -> GeoProjector:
        return make_projector(self.state)

    @property
    def viewport_dimensions(self) -> ViewportDimensions:
        return self._tracker.dimensions

    @property
    def highlighter(self) -> SelectionHighlighter:
        return self._highlighter

    @property
    def highlight_state(self) -> HighlightState:
        return self._highlighter.state

    @property
    def generation(self) -> int:
        return self._arena.generation

    @property
    def has_topology(self) -> bool:
        return self._scene_builder.has_topology

    def markers(self) -> list[MarkerSpec]:
        return list(self._markers)

    def marker_items(self) -> list[MarkerItem]:
        """Marker items of the current generation in paint order."""
        return list(self._marker_items)

    def set_events(self, events: Iterable[EventRecord]) -> None:
        """Replace the dataset wholesale and re-render."""
        self.set_data(events, self._selected_id)

    def set_data(self, events: Iterable[EventRecord], selected_id: Optional[str]) -> None:
        """Replace dataset and selection together in a single render pass."""
        self._events = list(events)
        self._selected_id = selected_id
        self.redraw()

    def set_topology(self, topology: TopologySource) -> None:
        """
        Raises:
            TopologyError: If a raw payload cannot be decoded.
        """
        self._scene_builder.set_topology(topology)
        self.redraw()

    def set_selected_id(self, selected_id: Optional[str]) -> None:
        if selected_id == self._selected_id:
            return
        self._selected_id = selected_id
        self.redraw()

    def set_viewport(self, width: float, height: float) -> bool:
        """Report a container size; a real change re-fits and re-renders."""
        return self._tracker.observe(width, height)

    def refresh_projection(self) -> None:
        """Apply a projection change made through `interaction`."""
        self.redraw()

    def redraw(self) -> None:
        """
        Full render pass from current state.

        The running pulse is cancelled first; the new item tree replaces the
        old one as a single generation; then the highlight is re-synced.
        """
        projector = self.projector
        self._highlighter.cancel()
        self._retired.clear()

        with self._arena.render_pass() as generation:
            root = LayerItem()
            self._content = LayerItem(root)
            background = LayerItem(self._content)
            markers_layer = LayerItem(self._content)
            self._overlay = LayerItem(self._content)

            geometry = self._scene_builder.build(projector)
            if geometry is None:
                self._add_placeholder(root)
                self._markers = []
            else:
                self._paint_background(background, geometry)
                self._markers = self._point_layer.build(self._events, projector, self._selected_id)
            self._marker_items = [
                MarkerItem(spec, self._on_marker_clicked, markers_layer) for spec in self._markers
            ]

            self._scene.addItem(root)
            self._arena.adopt(root, generation)

        self._apply_layer_transform()
        self._sync_highlight(geometry is not None)
        logger.debug(
            f"{type(self).__name__} rendered generation {generation}: "
            f"{len(self._markers)} markers, highlight {self._highlighter.state.value}."
        )
        self._flush_deferred_clicks()

    # ------------------------------------------------------------------------------
    # Render helpers
    # ------------------------------------------------------------------------------

    def _paint_background(self, layer: LayerItem, geometry: SceneGeometry) -> None:
        land_parent: QGraphicsItem = layer
        if geometry.sphere is not None:
            cx, cy, r = geometry.sphere
            ocean = QGraphicsEllipseItem(cx - r, cy - r, 2 * r, 2 * r, layer)
            ocean.setBrush(QBrush(QColor(config.OCEAN_FILL)))
            ocean.setPen(QPen(QColor(config.LAND_STROKE), 1.0))
            ocean.setAcceptedMouseButtons(Qt.NoButton)
        if geometry.clip_rect is not None:
            x0, y0, x1, y1 = geometry.clip_rect
            clip = QGraphicsRectItem(x0, y0, x1 - x0, y1 - y0, layer)
            clip.setPen(QPen(Qt.NoPen))
            clip.setBrush(QBrush(Qt.NoBrush))
            clip.setFlag(QGraphicsItem.ItemClipsChildrenToShape, True)
            clip.setAcceptedMouseButtons(Qt.NoButton)
            land_parent = clip

        fill = QBrush(QColor(config.LAND_FILL))
        stroke = QPen(QColor(config.LAND_STROKE), config.LAND_STROKE_WIDTH)
        for region in geometry.regions:
            path = QPainterPath()
            path.setFillRule(Qt.OddEvenFill)
            for ring in region.rings:
                path.addPolygon(QPolygonF([QPointF(x, y) for x, y in ring.tolist()]))
                path.closeSubpath()
            item = QGraphicsPathItem(path, land_parent)
            item.setBrush(fill)
            item.setPen(stroke)
            item.setToolTip(region.name)
            item.setAcceptedMouseButtons(Qt.NoButton)

    def _add_placeholder(self, root: LayerItem) -> None:
        text = QGraphicsSimpleTextItem(self.PLACEHOLDER_TEXT, root)
        text.setBrush(QBrush(QColor(config.PLACEHOLDER_COLOR)))
        rect = text.boundingRect()
        dims = self._tracker.dimensions
        text.setPos((dims.width - rect.width()) / 2, (dims.height - rect.height()) / 2)

    def _apply_layer_transform(self) -> None:
        """Hook for views that transform the content layer (map pan/zoom)."""

    def _sync_highlight(self, has_scene: bool) -> None:
        # a hidden view runs no pulse; showEvent redraws and re-syncs
        if not has_scene or not self.isVisible():
            self._highlighter.clear()
            return
        marker = find_marker(self._markers, self._selected_id)
        anchor = PulseAnchor(marker.x, marker.y, marker.radius) if marker is not None else None
        self._highlighter.sync(self._selected_id, anchor)

    def _dispose_item(self, item: QGraphicsItem) -> None:
        if item.scene() is self._scene:
            self._scene.removeItem(item)
        # kept alive until the next pass; a marker may still be inside its own mouse handler
        self._retired.append(item)

    # ---- pulse plumbing ----

    def _create_ring(self) -> PulseRingItem:
        return PulseRingItem(self._overlay)

    def _schedule_pulse(self, delay_ms: int, callback: Callable[[], None]) -> None:
        self._pulse_callback = callback
        self._pulse_timer.start(delay_ms)

    def _run_pulse_frame(self) -> None:
        callback, self._pulse_callback = self._pulse_callback, None
        if callback is not None:
            callback()

    # ---- selection ----

    def _on_marker_clicked(self, record: EventRecord) -> None:
        if self._arena.is_rendering:
            logger.debug(f"Click on '{record.id}' deferred until the render pass completes.")
            self._deferred_clicks.append(record)
            return
        logger.info(f"Event selected: {record.id}")
        self.event_selected.emit(record)

    def _flush_deferred_clicks(self) -> None:
        pending, self._deferred_clicks = self._deferred_clicks, []
        for record in pending:
            self._on_marker_clicked(record)

    # ---- viewport ----

    def _on_viewport_changed(self, dims: ViewportDimensions) -> None:
        self.interaction.fit(dims)
        self._scene.setSceneRect(0, 0, dims.width, dims.height)
        self.redraw()

    def _position_overlays(self) -> None:
        self._legend.adjustSize()
        self._legend.move(OVERLAY_MARGIN, self.height() - self._legend.height() - OVERLAY_MARGIN)

    # ------------------------------------------------------------------------------
    # Qt events
    # ------------------------------------------------------------------------------

    def resizeEvent(self, event) -> None:
        super().resizeEvent(event)
        self._position_overlays()
        self.set_viewport(self.viewport().width(), self.viewport().height())

    def showEvent(self, event) -> None:
        super().showEvent(event)
        self.redraw()

    def hideEvent(self, event) -> None:
        super().hideEvent(event)
        self._highlighter.clear()

    def mousePressEvent(self, event) -> None:
        super().mousePressEvent(event)
        # a marker took the press
        if event.isAccepted() or event.button() != Qt.LeftButton:
            return
        pos = event.position()
        self.interaction.begin_drag(pos.x(), pos.y())
        event.accept()

    def mouseMoveEvent(self, event) -> None:
        if not self.interaction.dragging:
            super().mouseMoveEvent(event)
            return
        pos = event.position()
        if self.interaction.drag_to(pos.x(), pos.y()):
            self.refresh_projection()
        event.accept()

    def mouseReleaseEvent(self, event) -> None:
        if not self.interaction.dragging:
            super().mouseReleaseEvent(event)
            return
        self.interaction.end_drag()
        event.accept()


class MapView(GeoView):
    """
    Mercator map. Pan and zoom only change the content layer transform; the
    projection itself (and the running pulse) is untouched.
    """
    KIND = ProjectionKind.PLANAR
    BACKGROUND = config.MAP_BACKGROUND
    PLACEHOLDER_TEXT = "Loading Map Topology..."

    def refresh_projection(self) -> None:
        self._apply_layer_transform()

    def _apply_layer_transform(self) -> None:
        if self._content is None:
            return
        zoom = self.state.zoom
        self._content.setTransform(QTransform(zoom.k, 0.0, 0.0, zoom.k, zoom.tx, zoom.ty))

    def wheelEvent(self, event) -> None:
        pos = event.position()
        if self.interaction.wheel(pos.x(), pos.y(), event.angleDelta().y()):
            self.refresh_projection()
        event.accept()


class GlobeView(GeoView):
    """Orthographic globe. Every rotation step is a full render pass."""
    KIND = ProjectionKind.SPHERICAL
    BACKGROUND = config.GLOBE_BACKGROUND
    PLACEHOLDER_TEXT = "Loading Globe Topology..."

    def __init__(self, parent: Optional[QWidget] = None) -> None:
        super().__init__(parent)
        self.viewport().setCursor(Qt.SizeAllCursor)

        self._hint = QLabel("Drag to rotate", self)
        self._hint.setStyleSheet(f"color: {config.PLACEHOLDER_COLOR}; font-size: 11px; background: transparent;")
        self._hint.setAttribute(Qt.WA_TransparentForMouseEvents, True)
        self._position_overlays()

    def _position_overlays(self) -> None:
        super()._position_overlays()
        hint = getattr(self, "_hint", None)
        if hint is not None:
            hint.adjustSize()
            hint.move(self.width() - hint.width() - OVERLAY_MARGIN, OVERLAY_MARGIN)

    def wheelEvent(self, event) -> None:
        # no zoom gesture on the globe
        event.accept()
