"""
Configuration & Constants
=========================
This module serves as the central registry for paths, feed endpoints and
the visual constants shared by the map and globe views.

Why is this file needed?
------------------------
1. Abstraction: It prevents magic numbers (projection divisors, colors,
   animation timings) from being scattered through the rendering code.
2. Deployment: It handles the logic required by PyInstaller (sys._MEIPASS) to
   find bundled assets (e.g. an offline topology file) when frozen.

Exports:
    ASSETS_PATH (str): Absolute path to the assets directory.
    USGS_API_BASE (str): Base URL of the USGS summary feeds.
    WORLD_ATLAS_URL (str): URL of the 110m world-atlas TopoJSON.
"""
import sys
import os
import logging
from pathlib import Path

logger = logging.getLogger(__name__)


def get_resource_path(relative_path: str) -> str:
    """
    Get absolute path to resource, works for dev and for PyInstaller.
    """
    if hasattr(sys, '_MEIPASS'):
        # PyInstaller temp folder
        base_path: str = getattr(sys, '_MEIPASS')
        return os.path.join(base_path, relative_path)

    # Development mode: resolve relative to this file
    # config.py is in src/seismicwatch/
    current_file_path: Path = Path(__file__)
    project_root: Path = current_file_path.parent.parent.parent
    return os.path.join(str(project_root), relative_path)


# --- Paths ---
ASSETS_PATH: str = get_resource_path("assets")
DEFAULT_TOPOLOGY_PATH: str = os.path.join(ASSETS_PATH, "countries-110m.json")

# --- Feeds ---
USGS_API_BASE: str = "https://earthquake.usgs.gov/earthquakes/feed/v1.0/summary"
WORLD_ATLAS_URL: str = "https://cdn.jsdelivr.net/npm/world-atlas@2/countries-110m.json"
TOPOLOGY_OBJECT: str = "countries"
REQUEST_TIMEOUT_S: float = 20.0

# --- Magnitude tiers ---
MAGNITUDE_COLORS: dict[str, str] = {
    "low": "#10b981",     # Emerald 500 (mag < 3)
    "medium": "#f59e0b",  # Amber 500 (3 <= mag < 5)
    "high": "#f97316",    # Orange 500 (5 <= mag < 7)
    "severe": "#ef4444",  # Red 500 (mag >= 7)
}
SIGNIFICANT_MAGNITUDE: float = 4.5

# --- Projection ---
PLANAR_SCALE_DIVISOR: float = 6.5
PLANAR_TRANSLATE_Y_DIVISOR: float = 1.6
MERCATOR_MAX_LATITUDE: float = 85.0511287798066
SPHERICAL_SCALE_DIVISOR: float = 2.2
CLIP_ANGLE_DEG: float = 90.0

# --- Interaction ---
ZOOM_SCALE_EXTENT: tuple[float, float] = (1.0, 8.0)
WHEEL_NOTCH_EXPONENT: float = 0.2  # one 120-unit notch scales by 2 ** 0.2
ROTATION_SENSITIVITY: float = 75.0  # k = ROTATION_SENSITIVITY / scale

# --- Markers ---
MIN_MARKER_RADIUS: float = 2.0
MARKER_RADIUS_EXPONENT: float = 1.5
PLANAR_FILL_OPACITY: float = 0.6
SPHERICAL_FILL_OPACITY: float = 0.8
SELECTED_OUTLINE_COLOR: str = "#ffffff"
SELECTED_OUTLINE_WIDTH: float = 2.0

# --- Pulse ---
PULSE_DURATION_MS: float = 1500.0
PULSE_GROWTH: float = 3.0
PULSE_FRAME_INTERVAL_MS: int = 16

# --- Scene colors ---
MAP_BACKGROUND: str = "#0f172a"     # Slate 900
GLOBE_BACKGROUND: str = "#020617"   # Slate 950
OCEAN_FILL: str = "#0f172a"         # Slate 900
LAND_FILL: str = "#1e293b"          # Slate 800
LAND_STROKE: str = "#334155"        # Slate 700
LAND_STROKE_WIDTH: float = 0.5
PLACEHOLDER_COLOR: str = "#64748b"  # Slate 500

if not os.path.exists(ASSETS_PATH):
    logger.debug(f"Assets path not found at {ASSETS_PATH}")
