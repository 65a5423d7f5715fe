"""
===============================================================================
SHAPE SESSION - TOOL SELECTION, VERTEX BUFFER, SHAPE LIFECYCLE
===============================================================================

Purpose:
    The controller behind the map page. It interprets map clicks according to
    the selected tool, commits circles and polygons through the renderer, and
    edits or removes committed shapes by their id.

States:
    - Idle                          tool = none
    - AwaitingCircleInput           tool = circle
    - AccumulatingPolygon(n/req)    tool = triangle | rectangle, n < req
    Orthogonal to these, at most one InputRequest (radius prompt) is pending.
    While it is pending, map clicks, edits and drags are ignored.

Collaborators (injected):
    - renderer: FoliumRenderer-like object (circle/polygon/marker factories,
      add_layer/remove_layer, fly_to/fit_bounds).
    - surface: InputSurface (request_input + alert).

Invariants:
    - A polygon keeps exactly tool.arity vertices for its whole lifetime.
    - Removing a shape detaches its geometry and every marker in one call.

===============================================================================
"""

import logging
from typing import Optional, Protocol

from shapes.popup import popup_content
from shapes.records import (
    DEFAULT_RADIUS,
    SHAPE_COLORS,
    InputPurpose,
    InputRequest,
    ShapeRecord,
    Tool,
)
from util.input_util import InvalidRadiusError, parse_radius
from util.map_util import set_bounds_point, zoom_level


class InputSurface(Protocol):
    """Where prompts and validation alerts go (a Streamlit page, or a test double)."""

    def request_input(self, request: InputRequest) -> None:
        ...

    def alert(self, message: str) -> None:
        ...


class ShapeSession:
    def __init__(self, renderer, surface: InputSurface, default_radius=DEFAULT_RADIUS,
                 colors=None):
        self.renderer = renderer
        self.surface = surface
        self.default_radius = default_radius
        self.colors = {**SHAPE_COLORS, **(colors or {})}

        self._tool = Tool.NONE
        self._buffer = []
        self._shapes = []
        self._pending = None

        self.logger = logging.getLogger("ShapeSession")

    # =========================================================================
    # READ-ONLY STATE
    # =========================================================================
    @property
    def tool(self) -> Tool:
        return self._tool

    @property
    def vertex_buffer(self) -> list:
        return list(self._buffer)

    @property
    def shapes(self) -> list:
        return list(self._shapes)

    @property
    def pending_input(self) -> Optional[InputRequest]:
        return self._pending

    @property
    def state(self) -> str:
        if self._tool == Tool.NONE:
            return "Idle"
        if self._tool == Tool.CIRCLE:
            return "AwaitingCircleInput"
        return f"AccumulatingPolygon({len(self._buffer)}/{self._tool.arity})"

    def get_shape(self, shape_id) -> Optional[ShapeRecord]:
        for record in self._shapes:
            if record.id == shape_id:
                return record
        return None

    # =========================================================================
    # TOOL SELECTION + MAP CLICKS
    # =========================================================================
    def select_tool(self, tool):
        """Arm a tool. Always clears the vertex buffer and any pending prompt."""
        self._tool = Tool(tool)
        self._buffer = []
        if self._pending is not None:
            self.logger.info("Discarding pending %s prompt", self._pending.purpose.value)
            self._pending = None
        self.logger.info("%s selected", self._tool.value)

    def map_clicked(self, lat, lng):
        """
        Interpret a map click with the current tool.

        Returns the InputRequest raised for a circle, the ShapeRecord committed
        by a polygon's last vertex, or None.
        """
        if self._pending is not None:
            self.logger.info("Click ignored while a prompt is open")
            return None

        if self._tool == Tool.NONE:
            self.logger.info("No shape selected")
            return None

        point = (float(lat), float(lng))

        if self._tool == Tool.CIRCLE:
            request = InputRequest(
                purpose=InputPurpose.PLACE_CIRCLE,
                message="Enter radius in meters:",
                default=self.default_radius,
                location=point,
            )
            self._open(request)
            return request

        self._buffer.append(point)
        if len(self._buffer) < self._tool.arity:
            return None

        vertices = list(self._buffer)
        self.renderer.fit_bounds(set_bounds_point(vertices))
        record = self._commit_polygon(self._tool, vertices)
        self._buffer = []
        return record

    # =========================================================================
    # PROMPT RESOLUTION
    # =========================================================================
    def resolve_input(self, value):
        """
        Answer the pending prompt with the raw value the user typed.

        Placement: an invalid value alerts the user and creates nothing.
        Edit: an invalid value is dropped silently.
        """
        request = self._pending
        if request is None:
            self.logger.warning("No prompt is waiting for input")
            return None
        self._pending = None

        try:
            radius = parse_radius(value)
        except InvalidRadiusError as e:
            if request.purpose == InputPurpose.PLACE_CIRCLE:
                self.logger.info("Rejected radius %r", value)
                self.surface.alert(str(e))
            else:
                self.logger.debug("Edit discarded, invalid radius %r", value)
            return None

        if request.purpose == InputPurpose.PLACE_CIRCLE:
            self.renderer.fly_to(request.location, zoom_level(radius))
            return self._commit_circle(request.location, radius)

        record = self.get_shape(request.shape_id)
        if record is None:
            self.logger.info("Shape %s no longer exists", request.shape_id)
            return None
        return self._set_radius(record, radius)

    def cancel_input(self):
        """Dismiss the pending prompt. Handled exactly like invalid input."""
        request = self._pending
        if request is None:
            return None
        self._pending = None
        if request.purpose == InputPurpose.PLACE_CIRCLE:
            self.surface.alert("Invalid input.")
        return None

    # =========================================================================
    # EDIT / REMOVE / DRAG
    # =========================================================================
    def edit_shape(self, shape_id):
        """
        Circle: open a radius prompt seeded with the current radius.
        Polygon: refit the view, re-arm vertex drag handlers and refresh the popup.
        """
        if self._pending is not None:
            self.logger.info("Edit ignored while a prompt is open")
            return None

        record = self.get_shape(shape_id)
        if record is None:
            self.logger.debug("Edit for unknown shape %s", shape_id)
            return None

        if record.tool == Tool.CIRCLE:
            request = InputRequest(
                purpose=InputPurpose.EDIT_CIRCLE,
                message="Enter new radius in meters:",
                default=record.geometry.get_radius(),
                location=record.anchor,
                shape_id=record.id,
            )
            self._open(request)
            return request

        self.renderer.fit_bounds(set_bounds_point(record.vertices))
        record.geometry.set_latlngs(record.vertices)
        self._register_drag_handlers(record)
        self._refresh_popup(record, open_popup=True)
        self.logger.info("Editing %s %s", record.tool.value, record.id)
        return record

    def remove_shape(self, shape_id):
        """Detach every handle of the shape and drop its record. Unknown ids are a no-op."""
        record = self.get_shape(shape_id)
        if record is None:
            self.logger.debug("Remove for unknown shape %s", shape_id)
            return None

        for handle in record.handles:
            self.renderer.remove_layer(handle)
            handle.off()
        self._shapes = [r for r in self._shapes if r is not record]

        if self._pending is not None and self._pending.shape_id == record.id:
            self._pending = None

        self.logger.info("Removed %s %s", record.tool.value, record.id)
        return record

    def remove_shape_at(self, tool, lat, lng):
        """
        Remove the shape of `tool` found at a map location.

        Circles match on their exact center. Polygons of the same tool match
        when the point is inside their bounding box. When several polygons'
        boxes overlap the point, the earliest committed one is removed.
        """
        tool = Tool(tool)
        point = (float(lat), float(lng))
        for record in self._shapes:
            if record.tool != tool:
                continue
            if tool == Tool.CIRCLE:
                matched = record.anchor == point
            else:
                matched = record.geometry.contains(*point)
            if matched:
                return self.remove_shape(record.id)
        return None

    def clear_shapes(self):
        for record in self.shapes:
            self.remove_shape(record.id)

    def on_vertex_dragged(self, shape_id, marker_index, latlng):
        """Move one vertex (or a circle's center) and refit the view."""
        record = self.get_shape(shape_id)
        if record is None:
            self.logger.warning("Drag for unknown shape %s", shape_id)
            return None
        if not 0 <= marker_index < len(record.vertices):
            self.logger.warning("Shape %s has no vertex %s", shape_id, marker_index)
            return None

        if self._pending is not None:
            # Marker snaps back onto the vertex it belongs to
            record.markers[marker_index].set_latlng(record.vertices[marker_index])
            self.logger.info("Drag ignored while a prompt is open")
            return None

        point = (float(latlng[0]), float(latlng[1]))
        record.vertices[marker_index] = point
        record.markers[marker_index].set_latlng(point)

        if record.tool == Tool.CIRCLE:
            record.geometry.set_latlng(point)
            self.renderer.fly_to(point, zoom_level(record.radius))
        else:
            record.geometry.set_latlngs(record.vertices)
            self.renderer.fit_bounds(set_bounds_point(record.vertices))

        self._refresh_popup(record)
        return record

    # =========================================================================
    # INTERNALS
    # =========================================================================
    def _open(self, request):
        self._pending = request
        self.surface.request_input(request)

    def _commit_circle(self, center, radius):
        geometry = self.renderer.circle(center, radius, color=self.colors[Tool.CIRCLE])
        marker = self.renderer.marker(center, draggable=True)
        record = ShapeRecord(
            tool=Tool.CIRCLE,
            vertices=[center],
            geometry=geometry,
            markers=[marker],
            radius=radius,
        )
        return self._commit(record)

    def _commit_polygon(self, tool, vertices):
        geometry = self.renderer.polygon(vertices, color=self.colors[tool])
        markers = [self.renderer.marker(pt, draggable=True) for pt in vertices]
        record = ShapeRecord(
            tool=tool,
            vertices=list(vertices),
            geometry=geometry,
            markers=markers,
        )
        return self._commit(record)

    def _commit(self, record):
        for handle in record.handles:
            self.renderer.add_layer(handle)
        self._register_drag_handlers(record)
        self._refresh_popup(record, open_popup=True)
        self._shapes.append(record)
        self.logger.info("Committed %s %s at %s", record.tool.value, record.id, record.vertices)
        return record

    def _set_radius(self, record, radius):
        record.radius = radius
        record.geometry.set_radius(radius)
        record.geometry.set_latlng(record.anchor)
        self.renderer.fly_to(record.anchor, zoom_level(radius))
        self._refresh_popup(record, open_popup=True)
        self.logger.info("Circle %s radius set to %s", record.id, radius)
        return record

    def _register_drag_handlers(self, record):
        for index, marker in enumerate(record.markers):
            marker.off("dragend")
            marker.on("dragend", self._drag_handler(record.id, index))

    def _drag_handler(self, shape_id, index):
        def handler(marker):
            self.on_vertex_dragged(shape_id, index, marker.get_latlng())
        return handler

    def _refresh_popup(self, record, open_popup=False):
        record.popup_html = popup_content(record)
        record.geometry.bind_popup(record.popup_html)
        if open_popup:
            record.geometry.open_popup()
