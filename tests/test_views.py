import pytest
from PySide6.QtCore import QEvent, QPoint, QPointF, Qt
from PySide6.QtGui import QMouseEvent
from PySide6.QtTest import QTest
from PySide6.QtWidgets import QApplication, QGraphicsSimpleTextItem

from seismicwatch.controller.highlight import HighlightState
from seismicwatch.view.widgets.geo_view import GlobeView, MapView, PulseRingItem
from seismicwatch.view.widgets.legend import MagnitudeLegend


def rings(view):
    return [item for item in view.scene().items() if isinstance(item, PulseRingItem)]


def top_level(view):
    return [item for item in view.scene().items() if item.parentItem() is None]


def shown(view):
    view.resize(800, 500)
    view.show()
    return view


def move_mouse(widget, x, y):
    # a move with the left button held, delivered like a real drag step
    pos = QPointF(x, y)
    event = QMouseEvent(QEvent.MouseMove, pos, QPointF(widget.mapToGlobal(pos.toPoint())),
                        Qt.NoButton, Qt.LeftButton, Qt.NoModifier)
    QApplication.sendEvent(widget, event)


@pytest.fixture
def map_view(qapp, topology_payload):
    view = MapView()
    view.set_topology(topology_payload)
    yield shown(view)
    view.deleteLater()


@pytest.fixture
def globe_view(qapp, topology_payload):
    view = GlobeView()
    view.set_topology(topology_payload)
    yield shown(view)
    view.deleteLater()


# ---- map ----

def test_selected_marker_pulses(map_view, tokyo):
    map_view.set_data([tokyo], "a")

    marker = map_view.markers()[0]
    assert marker.x == pytest.approx(700.1, abs=0.1)
    assert marker.radius == pytest.approx(17.73, abs=0.01)
    assert map_view.highlight_state is HighlightState.VISIBLE
    assert len(rings(map_view)) == 1
    assert map_view.highlighter.anchor.x == pytest.approx(marker.x)


def test_marker_click_emits_once(map_view, tokyo):
    picked = []
    map_view.event_selected.connect(picked.append)
    map_view.set_data([tokyo], None)

    item = map_view.marker_items()[0]
    assert item.toolTip() == "M 6.8 - event a\nDepth: 10 km"
    item.activate()
    assert picked == [tokyo]


def test_deselect_removes_ring(map_view, tokyo):
    map_view.set_data([tokyo], "a")
    map_view.set_selected_id(None)
    assert map_view.highlight_state is HighlightState.IDLE
    assert rings(map_view) == []
    assert map_view.highlighter.ring is None


def test_selection_outside_dataset_is_hidden(map_view, tokyo):
    map_view.set_data([tokyo], "gone")
    assert map_view.highlight_state is HighlightState.HIDDEN
    assert rings(map_view) == []


def test_redraw_swaps_whole_generation(map_view, record_factory):
    events = [record_factory("a", 6.8), record_factory("b", 2.0, lon=10, lat=10)]
    for _ in range(3):
        map_view.set_data(events, "b")
    assert len(top_level(map_view)) == 1
    assert len(map_view.marker_items()) == 2
    assert len(rings(map_view)) == 1


def test_hidden_view_runs_no_pulse(map_view, tokyo):
    map_view.set_data([tokyo], "a")
    map_view.hide()
    assert map_view.highlight_state is HighlightState.IDLE
    assert map_view.highlighter.ring is None
    assert rings(map_view) == []

    token = map_view.highlighter.token
    map_view.set_data([tokyo], "a")
    assert map_view.highlight_state is HighlightState.IDLE
    assert rings(map_view) == []

    map_view.show()
    assert map_view.highlight_state is HighlightState.VISIBLE
    assert map_view.highlighter.token > token
    assert len(rings(map_view)) == 1


def test_real_click_reselects_and_rerenders(map_view, tokyo):
    picked = []

    def select(record):
        picked.append(record)
        # re-render while the marker is still handling its release
        map_view.set_selected_id(record.id)

    map_view.event_selected.connect(select)
    map_view.set_data([tokyo], None)
    marker = map_view.markers()[0]
    at = QPoint(round(marker.x), round(marker.y))
    generation = map_view.generation

    QTest.mouseClick(map_view.viewport(), Qt.LeftButton, Qt.NoModifier, at)
    assert picked == [tokyo]
    assert map_view.generation == generation + 1
    assert map_view.highlight_state is HighlightState.VISIBLE

    QTest.mouseClick(map_view.viewport(), Qt.LeftButton, Qt.NoModifier, at)
    assert picked == [tokyo, tokyo]
    assert not map_view.interaction.dragging
    assert map_view.state.zoom.k == 1.0
    assert (map_view.state.zoom.tx, map_view.state.zoom.ty) == (0.0, 0.0)


def test_real_drag_on_empty_map_pans(map_view, tokyo):
    map_view.set_data([tokyo], "a")
    token = map_view.highlighter.token

    QTest.mousePress(map_view.viewport(), Qt.LeftButton, Qt.NoModifier, QPoint(100, 400))
    assert map_view.interaction.dragging
    move_mouse(map_view.viewport(), 115, 405)
    QTest.mouseRelease(map_view.viewport(), Qt.LeftButton, Qt.NoModifier, QPoint(115, 405))

    assert not map_view.interaction.dragging
    assert (map_view.state.zoom.tx, map_view.state.zoom.ty) == pytest.approx((15.0, 5.0))
    assert map_view.highlighter.token == token


def test_missing_topology_shows_placeholder(qapp, tokyo):
    view = MapView()
    view.set_data([tokyo], "a")
    texts = [i.text() for i in view.scene().items() if isinstance(i, QGraphicsSimpleTextItem)]
    assert texts == ["Loading Map Topology..."]
    assert view.markers() == []
    assert view.highlight_state is HighlightState.IDLE
    assert not view.has_topology


def test_pan_keeps_pulse_running(map_view, tokyo):
    map_view.set_data([tokyo], "a")
    token = map_view.highlighter.token
    generation = map_view.generation

    map_view.interaction.begin_drag(100, 100)
    assert map_view.interaction.drag_to(115, 105)
    map_view.refresh_projection()
    map_view.interaction.end_drag()

    assert map_view.highlighter.token == token
    assert map_view.generation == generation
    item = map_view.marker_items()[0]
    scene_pos = item.mapToScene(0, 0)
    marker = map_view.markers()[0]
    assert scene_pos.x() == pytest.approx(marker.x + 15)
    assert scene_pos.y() == pytest.approx(marker.y + 5)


def test_wheel_zoom_transforms_layer(map_view, tokyo):
    map_view.set_data([tokyo], "a")
    token = map_view.highlighter.token
    assert map_view.interaction.wheel(400, 250, 120)
    map_view.refresh_projection()
    assert map_view.highlighter.token == token
    assert map_view.marker_items()[0].sceneTransform().m11() == pytest.approx(2 ** 0.2)


def test_resize_reprojects_proportionally(map_view, tokyo):
    map_view.set_data([tokyo], "a")
    before = map_view.markers()[0]
    assert map_view.set_viewport(1600, 1000)
    assert not map_view.set_viewport(1600, 1000)
    assert map_view.viewport_dimensions.width == 1600
    after = map_view.markers()[0]
    assert after.x / 1600 == pytest.approx(before.x / 800)
    assert after.y / 1000 == pytest.approx(before.y / 500)
    assert map_view.highlight_state is HighlightState.VISIBLE


# ---- globe ----

def test_globe_hidden_then_visible(globe_view, tokyo):
    globe_view.set_data([tokyo], "a")
    assert globe_view.markers() == []
    assert globe_view.highlight_state is HighlightState.HIDDEN

    globe_view.state.rotation = (-139.7, -35.7, 0.0)
    globe_view.refresh_projection()
    marker = globe_view.markers()[0]
    assert (marker.x, marker.y) == pytest.approx((400.0, 250.0), abs=1e-6)
    assert marker.tooltip == "M 6.8 - event a\nDepth: 10.00 km"
    assert globe_view.highlight_state is HighlightState.VISIBLE
    assert len(rings(globe_view)) == 1

    globe_view.state.rotation = (40.3, -35.7, 0.0)
    globe_view.refresh_projection()
    assert globe_view.highlight_state is HighlightState.HIDDEN
    assert rings(globe_view) == []


def test_globe_drag_redraws(globe_view, tokyo):
    globe_view.set_data([tokyo], "a")
    token = globe_view.highlighter.token
    generation = globe_view.generation

    globe_view.interaction.begin_drag(0, 0)
    assert globe_view.interaction.drag_to(30, 0)
    globe_view.refresh_projection()

    assert globe_view.highlighter.token > token
    assert globe_view.generation == generation + 1
    assert globe_view.state.rotation[0] == pytest.approx(30 * 75 / globe_view.state.scale)


def test_real_drag_starting_on_marker_does_not_rotate(globe_view, tokyo):
    picked = []
    globe_view.event_selected.connect(picked.append)
    globe_view.set_data([tokyo], None)
    globe_view.state.rotation = (-139.7, -35.7, 0.0)
    globe_view.refresh_projection()

    QTest.mousePress(globe_view.viewport(), Qt.LeftButton, Qt.NoModifier, QPoint(400, 250))
    assert not globe_view.interaction.dragging
    move_mouse(globe_view.viewport(), 460, 250)
    QTest.mouseRelease(globe_view.viewport(), Qt.LeftButton, Qt.NoModifier, QPoint(460, 250))

    assert globe_view.state.rotation == (-139.7, -35.7, 0.0)
    # released outside the marker
    assert picked == []


def test_real_drag_on_empty_globe_rotates(globe_view):
    generation = globe_view.generation
    QTest.mousePress(globe_view.viewport(), Qt.LeftButton, Qt.NoModifier, QPoint(20, 20))
    assert globe_view.interaction.dragging
    move_mouse(globe_view.viewport(), 50, 20)
    QTest.mouseRelease(globe_view.viewport(), Qt.LeftButton, Qt.NoModifier, QPoint(50, 20))

    assert not globe_view.interaction.dragging
    assert globe_view.state.rotation[0] == pytest.approx(30 * 75 / globe_view.state.scale)
    assert globe_view.generation == generation + 1


def test_views_do_not_share_projection_state(map_view, globe_view):
    assert map_view.state is not globe_view.state
    globe_view.state.rotation = (10.0, 0.0, 0.0)
    assert map_view.state.rotation == (0.0, 0.0, 0.0)


def test_legend_rows(qapp):
    legend = MagnitudeLegend()
    assert len(legend.rows) == 4
