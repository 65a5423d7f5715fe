"""
===============================================================================
FOLIUM RENDERER - LAYER HANDLES + VIEW STATE
===============================================================================

Purpose:
    Gives the shape session the small slice of the Leaflet API it needs
    (create circle/polygon/marker, set radius/latlngs, bind popups, attach and
    detach layers, set/fly/fit the view, dragend callbacks) on top of Folium.

Key behaviors:
    - Handles outlive a single Streamlit run:
        Folium maps are rebuilt on every rerun, so a LayerHandle keeps the
        layer's state (locations, options, popup) and is materialized into a
        fresh folium element by FoliumRenderer.build_map().
    - Attached layers:
        The renderer keeps an ordered registry of attached handles. A handle
        that is not in the registry is never drawn.
    - View state:
        center/zoom or bounds, whichever was set last, applied to the next map.

Notes:
    - Geometry math (projection, circle extent) is left to Leaflet. The only
      computation done here is the lat/lng bounding box of a handle.

===============================================================================
"""

import folium

from util.map_util import set_bounds_point, bounds_contains


OSM_TILES = "https://{s}.tile.openstreetmap.org/{z}/{x}/{y}.png"
OSM_ATTRIBUTION = (
    '&copy; <a href="https://www.openstreetmap.org/copyright">OpenStreetMap</a> contributors'
)


# =============================================================================
# LAYER HANDLE
# =============================================================================

class LayerHandle:
    """
    A drawable layer: "circle", "polygon" or "marker".

    Circles and markers have a single location; polygons have a list.
    """

    def __init__(self, kind, locations, options=None):
        self.kind = kind
        self.locations = [tuple(pt) for pt in locations]
        self.options = dict(options or {})
        self.popup_html = None
        self.popup_open = False
        self._listeners = {}

    def __repr__(self):
        return f"LayerHandle({self.kind!r}, {self.locations!r})"

    # --- geometry -----------------------------------------------------------
    def get_latlng(self):
        return self.locations[0]

    def set_latlng(self, latlng):
        self.locations = [tuple(latlng)]
        return self

    def get_latlngs(self):
        return list(self.locations)

    def set_latlngs(self, latlngs):
        self.locations = [tuple(pt) for pt in latlngs]
        return self

    def get_radius(self):
        return self.options.get("radius")

    def set_radius(self, radius):
        self.options["radius"] = radius
        return self

    def bounds(self):
        """Lat/lng bounding box of the handle's locations."""
        return set_bounds_point(self.locations)

    def contains(self, lat, lng):
        return bounds_contains(self.bounds(), lat, lng)

    # --- popups -------------------------------------------------------------
    def bind_popup(self, content):
        self.popup_html = content
        return self

    def open_popup(self):
        self.popup_open = True
        return self

    # --- events -------------------------------------------------------------
    def on(self, event, callback):
        self._listeners.setdefault(event, []).append(callback)
        return self

    def off(self, event=None):
        if event is None:
            self._listeners.clear()
        else:
            self._listeners.pop(event, None)
        return self

    def listeners(self, event):
        return list(self._listeners.get(event, []))

    def fire(self, event, *args):
        for callback in self.listeners(event):
            callback(*args)
        return self

    def drag_to(self, lat, lng):
        """Move a marker and emit "dragend" like a finished Leaflet drag."""
        self.set_latlng((lat, lng))
        return self.fire("dragend", self)

    # --- folium -------------------------------------------------------------
    def to_folium(self):
        """Build the folium element for the current state of this handle."""
        popup = folium.Popup(self.popup_html, max_width=300) if self.popup_html else None

        if self.kind == "circle":
            lat, lng = self.get_latlng()
            options = {k: v for k, v in self.options.items() if k != "radius"}
            return folium.Circle(
                location=[lat, lng],
                radius=self.get_radius(),
                popup=popup,
                **options,
            )
        if self.kind == "polygon":
            return folium.Polygon(
                locations=[list(pt) for pt in self.locations],
                popup=popup,
                **self.options,
            )
        if self.kind == "marker":
            lat, lng = self.get_latlng()
            return folium.Marker(
                location=[lat, lng],
                popup=popup,
                draggable=self.options.get("draggable", False),
                tooltip=self.options.get("tooltip"),
            )
        raise ValueError(f"Unknown layer kind: {self.kind}")


# =============================================================================
# RENDERER
# =============================================================================

class FoliumRenderer:
    """
    Owns the attached layers and the view of one map.

    Parameters
    ----------
    location : [lat, lng]
        Initial view center.
    zoom : int
        Initial zoom.
    tiles, attribution : str
        Tile layer URL template and attribution HTML.
    """

    def __init__(self, location=(11.0168, 76.9558), zoom=5,
                 tiles=OSM_TILES, attribution=OSM_ATTRIBUTION):
        self.tiles = tiles
        self.attribution = attribution
        self.center = tuple(location)
        self.zoom = zoom
        self.bounds = None
        self._layers = []

    # --- factories ----------------------------------------------------------
    def circle(self, latlng, radius, **options):
        return LayerHandle("circle", [latlng], {**options, "radius": radius})

    def polygon(self, latlngs, **options):
        return LayerHandle("polygon", latlngs, options)

    def marker(self, latlng, draggable=False, **options):
        return LayerHandle("marker", [latlng], {**options, "draggable": draggable})

    # --- layers -------------------------------------------------------------
    def add_layer(self, handle):
        if not self.has_layer(handle):
            self._layers.append(handle)
        return handle

    def remove_layer(self, handle):
        self._layers = [h for h in self._layers if h is not handle]

    def has_layer(self, handle):
        return any(h is handle for h in self._layers)

    @property
    def layers(self):
        return list(self._layers)

    # --- view ---------------------------------------------------------------
    def set_view(self, latlng, zoom):
        self.center = tuple(latlng)
        self.zoom = zoom
        self.bounds = None

    def fly_to(self, latlng, zoom):
        # Folium has no animation state between reruns; flying ends where setView would.
        self.set_view(latlng, zoom)

    def fit_bounds(self, bounds):
        self.bounds = [list(bounds[0]), list(bounds[1])]

    # --- folium -------------------------------------------------------------
    def build_map(self):
        """Return a new folium.Map with the current view and every attached layer."""
        m = folium.Map(location=list(self.center), zoom_start=self.zoom, tiles=None)
        folium.TileLayer(tiles=self.tiles, attr=self.attribution).add_to(m)

        drawn_items = folium.FeatureGroup(name="drawn_items").add_to(m)
        for handle in self._layers:
            handle.to_folium().add_to(drawn_items)

        if self.bounds is not None:
            m.fit_bounds(self.bounds)
        return m
