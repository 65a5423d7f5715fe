"""
===============================================================================
SHAPE RECORDS - TOOLS, COMMITTED SHAPES, INPUT REQUESTS
===============================================================================

Purpose:
    Plain data types shared by the shape session and the Streamlit page.

      - Tool:          the shape type a map click is interpreted as.
      - ShapeRecord:   a committed shape plus the renderer handles it owns.
      - InputRequest:  a pending radius prompt (placement or edit).

Coordinate convention:
    All coordinates are (lat, lng) tuples of floats.

===============================================================================
"""

from __future__ import annotations

import enum
import uuid
from dataclasses import dataclass, field
from typing import Optional


class Tool(str, enum.Enum):
    NONE = "none"
    CIRCLE = "circle"
    TRIANGLE = "triangle"
    RECTANGLE = "rectangle"

    @property
    def arity(self) -> int:
        """Vertices needed to commit a polygon of this type (0 for non-polygons)."""
        return POLYGON_ARITY.get(self, 0)

    @property
    def is_polygon(self) -> bool:
        return self in POLYGON_ARITY

    @property
    def label(self) -> str:
        return self.value.capitalize()


POLYGON_ARITY = {
    Tool.TRIANGLE: 3,
    Tool.RECTANGLE: 4,
}

SHAPE_COLORS = {
    Tool.CIRCLE: "green",
    Tool.TRIANGLE: "red",
    Tool.RECTANGLE: "blue",
}

DEFAULT_RADIUS = 200


def new_shape_id() -> str:
    """Opaque identifier carried by popups and UI callbacks."""
    return uuid.uuid4().hex


@dataclass
class ShapeRecord:
    """
    A committed shape.

    For circles `vertices` holds the single center and `radius` is in meters.
    For polygons `vertices` holds exactly `tool.arity` coordinates in click
    order and `radius` is None.

    `geometry` and `markers` are renderer handles owned by this record; they
    are detached from the map together when the record is removed.
    """

    tool: Tool
    vertices: list
    geometry: object
    markers: list = field(default_factory=list)
    radius: Optional[float] = None
    popup_html: str = ""
    id: str = field(default_factory=new_shape_id)

    @property
    def anchor(self):
        """Center for circles, first vertex for polygons."""
        return self.vertices[0]

    @property
    def handles(self) -> list:
        return [self.geometry, *self.markers]


class InputPurpose(str, enum.Enum):
    PLACE_CIRCLE = "place_circle"
    EDIT_CIRCLE = "edit_circle"


@dataclass
class InputRequest:
    """
    A radius prompt waiting for the user.

    Resolved with ShapeSession.resolve_input() or dismissed with
    ShapeSession.cancel_input(). `location` is the clicked point for
    placements; `shape_id` is set for edits.
    """

    purpose: InputPurpose
    message: str
    default: object = None
    location: Optional[tuple] = None
    shape_id: Optional[str] = None
