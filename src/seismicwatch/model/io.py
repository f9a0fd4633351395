"""
Feed Input/Output
=================
Fetches the USGS summary feed and the world-atlas topology over HTTP, or
reads the same documents from disk, and turns them into model objects.

Malformed features are skipped (logged at DEBUG); transport and payload
problems raise `FeedError`.
"""
from __future__ import annotations

import json
import logging
import math
from importlib.metadata import version, PackageNotFoundError
from typing import Any, Mapping, Optional

import requests

from seismicwatch import config
from seismicwatch.model.events import EventRecord, GeoPoint, TimeRange

logger = logging.getLogger(__name__)

try:
    APP_VERSION = version("seismicwatch")
except PackageNotFoundError:
    APP_VERSION = "0.0.0-dev"


class FeedError(RuntimeError):
    """The feed or topology could not be retrieved or understood."""


# ---- parsing ----

def _as_float(value: Any, default: float = math.nan) -> float:
    if value is None or isinstance(value, bool):
        return default
    try:
        return float(value)
    except (TypeError, ValueError):
        return default


def parse_feature(feature: Mapping[str, Any]) -> Optional[EventRecord]:
    """
    One GeoJSON feature of the summary feed as an `EventRecord`.

    Returns None for features without an id, a point geometry or a
    properties object. Non-finite coordinates are kept; the views exclude
    them at render time.
    """
    if not isinstance(feature, Mapping):
        return None
    record_id = feature.get("id")
    geometry = feature.get("geometry") or {}
    coords = geometry.get("coordinates") if isinstance(geometry, Mapping) else None
    if record_id is None or not isinstance(coords, (list, tuple)) or len(coords) < 2:
        return None

    props = feature.get("properties") or {}
    if not isinstance(props, Mapping):
        return None
    depth = _as_float(coords[2], 0.0) if len(coords) > 2 else 0.0
    time_ms = _as_float(props.get("time"), 0.0)
    return EventRecord(
        id=str(record_id),
        magnitude=props.get("mag"),
        geo=GeoPoint(lon=_as_float(coords[0]), lat=_as_float(coords[1]), depth_km=depth),
        timestamp_ms=int(time_ms) if math.isfinite(time_ms) else 0,
        title=str(props.get("title") or ""),
        place_name=str(props.get("place") or ""),
        tsunami_flag=bool(props.get("tsunami")),
        detail_url=str(props.get("detail") or ""),
        url=str(props.get("url") or ""),
        magnitude_type=str(props.get("magType") or ""),
    )


def parse_feature_collection(payload: Mapping[str, Any]) -> list[EventRecord]:
    """
    Raises:
        FeedError: If the payload is not a GeoJSON FeatureCollection.
    """
    if not isinstance(payload, Mapping) or payload.get("type") != "FeatureCollection":
        raise FeedError("Payload is not a GeoJSON FeatureCollection.")

    features = payload.get("features") or []
    records = []
    for feature in features:
        record = parse_feature(feature)
        if record is None:
            logger.debug(f"Skipping malformed feature: {str(feature)[:80]}")
            continue
        records.append(record)

    if len(records) != len(features):
        logger.info(f"Parsed {len(records)} of {len(features)} features.")
    return records


# ---- files ----

def _read_json(filepath: str) -> Any:
    try:
        with open(filepath, "r", encoding="utf-8") as f:
            return json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        raise FeedError(f"Could not read '{filepath}': {e}") from e


def load_events_file(filepath: str) -> list[EventRecord]:
    logger.info(f"Loading events from: {filepath}")
    return parse_feature_collection(_read_json(filepath))


def load_topology_file(filepath: str) -> dict[str, Any]:
    """The raw TopoJSON document; decoding is left to the scene builder."""
    logger.info(f"Loading topology from: {filepath}")
    payload = _read_json(filepath)
    if not isinstance(payload, dict) or payload.get("type") != "Topology":
        raise FeedError(f"'{filepath}' is not a TopoJSON topology.")
    return payload


# ---- network ----

class FeedClient:
    """
    Thin HTTP client for the two remote documents the viewer needs.

    Args:
        base_url: USGS summary feed base.
        topology_url: world-atlas TopoJSON URL.
        timeout: Seconds per request.
        session: Optional `requests.Session` (reused across calls).
    """

    def __init__(
        self,
        base_url: str = config.USGS_API_BASE,
        topology_url: str = config.WORLD_ATLAS_URL,
        timeout: float = config.REQUEST_TIMEOUT_S,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.topology_url = topology_url
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.setdefault("User-Agent", f"seismicwatch/{APP_VERSION}")

    def events_url(self, time_range: TimeRange) -> str:
        return f"{self.base_url}/{TimeRange(time_range).value}.geojson"

    def _get_json(self, url: str) -> Any:
        logger.debug(f"GET {url}")
        try:
            response = self.session.get(url, timeout=self.timeout)
            response.raise_for_status()
            return response.json()
        except requests.HTTPError as e:
            raise FeedError(f"Failed to fetch {url}: {e.response.status_code} {e.response.reason}") from e
        except requests.JSONDecodeError as e:
            raise FeedError(f"Invalid JSON from {url}: {e}") from e
        except requests.RequestException as e:
            raise FeedError(f"Failed to fetch {url}: {e}") from e

    def fetch_events(self, time_range: TimeRange = TimeRange.DAY) -> list[EventRecord]:
        records = parse_feature_collection(self._get_json(self.events_url(time_range)))
        logger.info(f"Fetched {len(records)} events ({TimeRange(time_range).value}).")
        return records

    def fetch_topology(self) -> dict[str, Any]:
        payload = self._get_json(self.topology_url)
        if not isinstance(payload, dict) or payload.get("type") != "Topology":
            raise FeedError("World map data is not a TopoJSON topology.")
        logger.info("Fetched world topology.")
        return payload

    def close(self) -> None:
        self.session.close()
