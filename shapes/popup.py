"""
Popup HTML for committed shapes.

The popup is read-only. Folium popups render inside the map iframe and
st_folium does not hand DOM events back to Python, so the Edit and Remove
controls live in the shape list on the page instead.
"""

import html

from shapes.records import Tool
from util.input_util import fmt_coord, fmt_radius


def popup_content(record):
    """Popup HTML for a shape record."""
    if record.tool == Tool.CIRCLE:
        lat, lng = record.anchor
        return f"""
        <b>Circle Information</b><br>
        <b>Radius:</b> {html.escape(fmt_radius(record.radius))} m<br>
        <b>Location:</b> {fmt_coord(lat, lng)}
        """
    coordinates_str = "<br>".join(fmt_coord(lat, lng) for lat, lng in record.vertices)
    return f"""
        <b>{html.escape(record.tool.label)} Information</b><br>
        <b>Coordinates:</b><br>
        {coordinates_str}
        """
