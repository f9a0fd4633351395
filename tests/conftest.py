import os

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

import pytest

from seismicwatch.model.events import EventRecord, GeoPoint


@pytest.fixture(scope="session")
def qapp():
    from PySide6.QtWidgets import QApplication

    app = QApplication.instance() or QApplication([])
    yield app


def make_record(record_id="a", mag=6.8, lon=139.7, lat=35.7, depth=10.0, **kwargs):
    kwargs.setdefault("title", f"M {mag} - event {record_id}")
    return EventRecord(id=record_id, magnitude=mag, geo=GeoPoint(lon=lon, lat=lat, depth_km=depth), **kwargs)


@pytest.fixture
def record_factory():
    return make_record


@pytest.fixture
def tokyo():
    return make_record("a", 6.8, 139.7, 35.7)


@pytest.fixture
def topology_payload():
    """Two square 'countries': one around Japan, one straddling the antimeridian."""
    return {
        "type": "Topology",
        "objects": {
            "countries": {
                "type": "GeometryCollection",
                "geometries": [
                    {"type": "Polygon", "id": "392", "properties": {"name": "Japan"}, "arcs": [[0]]},
                    {"type": "Polygon", "id": "242", "properties": {"name": "Fiji"}, "arcs": [[1]]},
                    {"type": None, "id": "000"},
                ],
            }
        },
        "arcs": [
            [[130, 30], [145, 30], [145, 45], [130, 45], [130, 30]],
            [[170, -20], [-170, -20], [-170, -10], [170, -10], [170, -20]],
        ],
    }


@pytest.fixture
def feed_payload():
    return {
        "type": "FeatureCollection",
        "metadata": {"count": 3},
        "features": [
            {
                "type": "Feature",
                "id": "us7000abcd",
                "properties": {
                    "mag": 6.8,
                    "place": "10 km E of Tokyo, Japan",
                    "time": 1700000000000,
                    "url": "https://earthquake.usgs.gov/earthquakes/eventpage/us7000abcd",
                    "detail": "https://earthquake.usgs.gov/detail/us7000abcd.geojson",
                    "tsunami": 1,
                    "magType": "mww",
                    "title": "M 6.8 - 10 km E of Tokyo, Japan",
                },
                "geometry": {"type": "Point", "coordinates": [139.7, 35.7, 24.5]},
            },
            {
                "type": "Feature",
                "id": "ci40000001",
                "properties": {"mag": None, "place": "Somewhere", "time": 1700000100000, "tsunami": 0,
                               "title": "M ? - Somewhere"},
                "geometry": {"type": "Point", "coordinates": [-118.2, 34.1, 5.0]},
            },
            {"type": "Feature", "id": "broken", "properties": {}, "geometry": None},
        ],
    }
