"""
===============================================================================
SESSION INITIALIZATION (STREAMLIT) - DEFAULTS, MAP SETTINGS, SHAPE SESSION
===============================================================================

Purpose:
    Defines and initializes the Streamlit session_state keys used by the map
    page. This module centralizes:
      - Map settings (start location, zoom, tiles, attribution)
      - Shape styling and the default radius offered by the prompt
      - Construction of the one ShapeSession for this browser session

Key behaviors:
    - Idempotent initialization:
        * Uses `setdefault()` and conditional checks so Streamlit reruns do
          not overwrite an active drawing session.
    - Settings sourcing:
        * If a .env file exists, loads it via python-dotenv and reads
          MAP_* variables from the environment
        * Otherwise tries Streamlit secrets
        * Missing values fall back to the defaults below

Session-state keys created/initialized:
    - 'map_settings'     dict of resolved settings
    - 'shape_surface'    StreamlitSurface (prompt + alert queue)
    - 'shape_session'    ShapeSession wired to a FoliumRenderer
    - 'move_target'      (shape_id, vertex index) awaiting a map click, or None
    - 'map_reset_counter' suffix of the st_folium key; bumped to remount the map

===============================================================================
"""

import os

import streamlit as st

from shapes.records import DEFAULT_RADIUS, SHAPE_COLORS, Tool
from shapes.renderer import FoliumRenderer, OSM_ATTRIBUTION, OSM_TILES
from shapes.session import ShapeSession


# =============================================================================
# DEFAULTS
# =============================================================================
DEFAULT_SETTINGS = {
    "MAP_START_LAT": 11.0168,
    "MAP_START_LON": 76.9558,
    "MAP_START_ZOOM": 5,
    "MAP_TILES": OSM_TILES,
    "MAP_ATTRIBUTION": OSM_ATTRIBUTION,
    "MAP_DEFAULT_RADIUS": DEFAULT_RADIUS,
    "CIRCLE_COLOR": SHAPE_COLORS[Tool.CIRCLE],
    "TRIANGLE_COLOR": SHAPE_COLORS[Tool.TRIANGLE],
    "RECTANGLE_COLOR": SHAPE_COLORS[Tool.RECTANGLE],
}

_NUMERIC = {
    "MAP_START_LAT": float,
    "MAP_START_LON": float,
    "MAP_START_ZOOM": int,
    "MAP_DEFAULT_RADIUS": float,
}


def _secret(key):
    try:
        return st.secrets.get(key)
    except FileNotFoundError:
        # No secrets.toml in this deployment
        return None


def load_settings():
    """
    Resolve map settings.

    Precedence:
      1) .env file (python-dotenv) -> environment variables
      2) Streamlit secrets
      3) DEFAULT_SETTINGS
    """
    settings = dict(DEFAULT_SETTINGS)

    if os.path.exists(".env"):
        from dotenv import load_dotenv
        load_dotenv(".env")
        lookup = os.getenv
    else:
        lookup = _secret

    for key, default in DEFAULT_SETTINGS.items():
        value = lookup(key)
        if value in (None, ""):
            continue
        cast = _NUMERIC.get(key)
        if cast is None:
            settings[key] = value
            continue
        try:
            settings[key] = cast(value)
        except (TypeError, ValueError):
            # Keep the default rather than breaking the page on a bad value
            settings[key] = default
    return settings


# =============================================================================
# INPUT SURFACE
# =============================================================================
class StreamlitSurface:
    """
    Receives prompts and validation alerts from the ShapeSession.

    Alerts are queued and shown with st.error on the next run; prompts are read
    back from session.pending_input. prompt_version changes the form key per
    prompt so each prompt starts from its own default value.
    """

    def __init__(self):
        self.alerts = []
        self.prompt_version = 0

    def request_input(self, request):
        self.prompt_version += 1

    def alert(self, message):
        self.alerts.append(message)

    def pop_alerts(self):
        alerts, self.alerts = self.alerts, []
        return alerts


def build_session(settings, surface):
    """Construct the ShapeSession and its renderer from resolved settings."""
    renderer = FoliumRenderer(
        location=(settings["MAP_START_LAT"], settings["MAP_START_LON"]),
        zoom=settings["MAP_START_ZOOM"],
        tiles=settings["MAP_TILES"],
        attribution=settings["MAP_ATTRIBUTION"],
    )
    colors = {
        Tool.CIRCLE: settings["CIRCLE_COLOR"],
        Tool.TRIANGLE: settings["TRIANGLE_COLOR"],
        Tool.RECTANGLE: settings["RECTANGLE_COLOR"],
    }
    return ShapeSession(
        renderer,
        surface,
        default_radius=settings["MAP_DEFAULT_RADIUS"],
        colors=colors,
    )


# =============================================================================
# ENTRYPOINT: SESSION STATE INITIALIZATION
# =============================================================================
def init_session_state():
    """
    Initialize all session state values.

    The surface is stored so the same instance stays wired to the session
    across reruns.
    """
    if "map_settings" not in st.session_state:
        st.session_state["map_settings"] = load_settings()

    if "shape_surface" not in st.session_state:
        st.session_state["shape_surface"] = StreamlitSurface()

    if "shape_session" not in st.session_state:
        st.session_state["shape_session"] = build_session(
            st.session_state["map_settings"],
            st.session_state["shape_surface"],
        )

    defaults = {
        "move_target": None,
        "map_reset_counter": 0,
    }
    for key, value in defaults.items():
        st.session_state.setdefault(key, value)


# =============================================================================
# MAP CLICKS
# =============================================================================
def handle_map_click(state, session, output):
    """
    Forward the click in an st_folium result to the session.

    Every consumed click bumps state["map_reset_counter"], which is part of
    the map's widget key. The remounted map starts with no last_clicked, so
    a repeat click on the same point is forwarded again instead of being
    mistaken for the stale value. A pending move_target turns the click into
    a drag of that vertex.

    Returns True when a click was consumed.
    """
    click = output.get("last_clicked") if output else None
    if not click:
        return False

    state["map_reset_counter"] += 1
    lat, lng = click["lat"], click["lng"]

    target = state.get("move_target")
    if target is None:
        session.map_clicked(lat, lng)
        return True

    state["move_target"] = None
    shape_id, index = target
    record = session.get_shape(shape_id)
    if record is not None and index < len(record.markers):
        # Same path as a finished marker drag in the browser
        record.markers[index].drag_to(lat, lng)
    return True
