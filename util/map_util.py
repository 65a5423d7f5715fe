"""
===============================================================================
MAP UTILITIES (FOLIUM) - BOUNDS, ZOOM STEPS, UI HELPERS
===============================================================================

Purpose:
    Helpers shared by the shape session, the renderer and the Streamlit page
    for computing map view parameters (bounds, zoom for a radius) and
    for decorating Folium maps with small UI controls.

Key behaviors:
    - UI controls:
        * add_small_geocoder(): adds a compact, collapsed geocoder search box.
        * add_bottom_message(): adds a persistent message bar at the bottom.
    - View calculations:
        * set_bounds_point(): bounds for a list of [lat, lon] vertices.
        * bounds_contains(): inclusive point-in-bounds test (shapely box).
        * zoom_level(): fixed step function from a circle radius (meters).

Input conventions:
    - Coordinates throughout this module are [lat, lon]. Output bounds are:
        [[min_lat, min_lon], [max_lat, max_lon]]

===============================================================================
"""

import html

import folium
from folium.plugins import Geocoder
from shapely.geometry import Point, box


# =============================================================================
# UI ENHANCEMENTS (FOLIUM CONTROLS / OVERLAYS)
# =============================================================================

def add_small_geocoder(fmap, position: str = "topright", width_px: int = 120, font_px: int = 12):
    """
    Add a small, collapsed geocoder search box to a Folium map.

    Parameters
    ----------
    fmap : folium.Map
        The Folium map object to modify.
    position : str, default "topright"
        Where the geocoder control appears on the map.
    width_px : int, default 120
        Width of the input box in pixels.
    font_px : int, default 12
        Font size of the input text in pixels.
    """
    # Collapsed, no marker on search result
    Geocoder(collapsed=True, position=position, add_marker=False).add_to(fmap)

    fmap.get_root().html.add_child(folium.Element(f"""
    <style>
      .leaflet-control-geocoder-form input {{
          width: {width_px}px !important;
          font-size: {font_px}px !important;
      }}
    </style>
    """))


def add_bottom_message(m, message: str):
    """
    Add a persistent bottom message bar to a Folium map.

    Parameters
    ----------
    m : folium.Map
        The map object to add the message to.
    message : str
        The text to display in the bottom message bar.
    """
    message_html = f"""
    <div style="
        position: fixed;
        bottom: 20px;
        left: 50%;
        transform: translateX(-50%);
        background-color: rgba(0,0,0,0.7);
        color: white;
        padding: 8px 16px;
        border-radius: 6px;
        font-size: 14px;
        z-index:9999;">
        {html.escape(message)}
    </div>
    """
    m.get_root().html.add_child(folium.Element(message_html))


# =============================================================================
# BOUNDS CALCULATION HELPERS
# =============================================================================

def set_bounds_point(points):
    """
    Compute a bounding box for:
      - A single point [lat, lon]
      - A list of points [[lat, lon], ...]

    Returns:
        [[min_lat, min_lon], [max_lat, max_lon]]

    Raises:
        ValueError: if input is empty or contains no valid coordinates.

    Notes:
        - Non-numeric entries are skipped rather than failing the whole operation.
        - No range filter: Leaflet reports longitudes past +-180 once the map
          is panned across the antimeridian, and those are real click points.
    """
    min_lat = float('inf')
    min_lon = float('inf')
    max_lat = float('-inf')
    max_lon = float('-inf')

    def process_point(pt):
        nonlocal min_lat, min_lon, max_lat, max_lon
        if not (isinstance(pt, (list, tuple)) and len(pt) == 2):
            return

        try:
            lat = float(pt[0])
            lon = float(pt[1])
        except (TypeError, ValueError):
            return

        min_lat = min(min_lat, lat)
        max_lat = max(max_lat, lat)
        min_lon = min(min_lon, lon)
        max_lon = max(max_lon, lon)

    if not points:
        raise ValueError("Empty point input.")

    # Single point vs flat list of points
    if len(points) == 2 and all(isinstance(x, (int, float)) for x in points):
        process_point(points)
    else:
        for pt in points:
            process_point(pt)

    if min_lat == float('inf'):
        raise ValueError("No valid coordinate data found.")

    return [[min_lat, min_lon], [max_lat, max_lon]]


def bounds_contains(bounds, lat, lon) -> bool:
    """
    Return True if [lat, lon] lies inside or on the edge of bounds.

    Matches Leaflet's LatLngBounds.contains(), which is inclusive.
    """
    (min_lat, min_lon), (max_lat, max_lon) = bounds
    # shapely works in (x, y) = (lon, lat)
    return box(min_lon, min_lat, max_lon, max_lat).covers(Point(lon, lat))


# =============================================================================
# VIEW HELPERS (ZOOM)
# =============================================================================

def zoom_level(radius) -> int:
    """
    Display zoom for a circle of the given radius in meters.

    Step function, non-increasing in radius:
        radius <= 500  -> 15
        radius <= 2000 -> 12
        radius <= 5000 -> 10
        otherwise      -> 8
    """
    if radius <= 500:
        return 15
    if radius <= 2000:
        return 12
    if radius <= 5000:
        return 10
    return 8
