
# =============================================================================
# Street Map Shape Annotator (Streamlit App)
# =============================================================================
# PURPOSE:
#   Lets a user annotate a map with circles, triangles and rectangles:
#     1) Pick a tool (Circle / Triangle / Rectangle)
#     2) Click on the map to place the shape
#        - Circle: one click, then enter a radius in meters
#        - Triangle / Rectangle: click each corner (3 or 4 clicks)
#     3) Edit, move or remove shapes from the shape list
#
# IMPORTANT NOTES:
#   - The ShapeSession in session_state owns every shape and its map layers.
#     This page only forwards clicks/buttons to it and renders its renderer.
#   - Radius prompts are session InputRequests rendered as a small form.
#     While one is open, map clicks are ignored by the session.
# =============================================================================

import logging

import streamlit as st
from streamlit_folium import st_folium

from init_session import handle_map_click, init_session_state
from shapes.records import Tool
from util.input_util import fmt_coord, fmt_radius
from util.map_util import add_small_geocoder, add_bottom_message


logging.basicConfig(level=logging.INFO)


st.set_page_config(page_title="Street Map Shape Annotator", page_icon="🗺️", layout="centered")

init_session_state()

session = st.session_state["shape_session"]
surface = st.session_state["shape_surface"]


# --- Button callbacks ---
# Run before the script body on the rerun triggered by the click, so the map
# below is built from the updated session.
def select_tool(tool):
    st.session_state.move_target = None
    session.select_tool(tool)


def start_move(shape_id, index):
    st.session_state.move_target = (shape_id, index)


def clear_all():
    session.clear_shapes()
    st.session_state.move_target = None
    st.session_state.map_reset_counter += 1


# -----------------------------------------------------------------------------
# Header + tool buttons
# -----------------------------------------------------------------------------
st.title("🗺️ STREET MAP SHAPES")
st.markdown("##### SELECT A SHAPE, THEN CLICK ON THE MAP TO PLACE IT")

cols = st.columns(3)
for col, tool in zip(cols, (Tool.CIRCLE, Tool.TRIANGLE, Tool.RECTANGLE)):
    with col:
        st.button(
            tool.label,
            key=f"{tool.value}-btn",
            on_click=select_tool,
            args=(tool,),
            type="primary" if session.tool == tool else "secondary",
            use_container_width=True,
        )

for message in surface.pop_alerts():
    st.error(f"❌ {message}")


# -----------------------------------------------------------------------------
# Radius prompt
# -----------------------------------------------------------------------------
request = session.pending_input
if request is not None:
    with st.form(key=f"radius_prompt_{surface.prompt_version}"):
        value = st.text_input(request.message, value=fmt_radius(request.default))
        c1, c2 = st.columns(2)
        with c1:
            ok = st.form_submit_button("OK", type="primary", use_container_width=True)
        with c2:
            cancel = st.form_submit_button("Cancel", use_container_width=True)

    if ok:
        session.resolve_input(value)
        st.rerun()
    if cancel:
        session.cancel_input()
        st.rerun()


# -----------------------------------------------------------------------------
# Map
# -----------------------------------------------------------------------------
if st.session_state.move_target is not None:
    status = "Click the map to move the selected vertex"
elif session.tool == Tool.NONE:
    status = "No shape selected"
elif session.tool == Tool.CIRCLE:
    status = "Circle: click the center"
else:
    status = f"{session.tool.label}: {len(session.vertex_buffer)} of {session.tool.arity} points"

m = session.renderer.build_map()
add_small_geocoder(m)
add_bottom_message(m, status)

output = st_folium(
    m,
    width=700,
    height=500,
    key=f"shape_map_{st.session_state.map_reset_counter}",
    returned_objects=["last_clicked"],
)

# st_folium keeps returning the last click on every rerun; handle_map_click
# remounts the map under a new key so each click is forwarded once.
if handle_map_click(st.session_state, session, output):
    st.rerun()


# -----------------------------------------------------------------------------
# Shape list: edit / move / remove by shape id
# -----------------------------------------------------------------------------
st.write("")
st.markdown("###### Shapes")

if session.shapes:
    for record in session.shapes:
        with st.expander(f"{record.tool.label} · {fmt_coord(*record.anchor)}"):
            st.html(record.popup_html)

            c1, c2 = st.columns(2)
            with c1:
                st.button("Edit", key=f"edit_{record.id}",
                          on_click=session.edit_shape, args=(record.id,),
                          use_container_width=True)
            with c2:
                st.button("Remove", key=f"remove_{record.id}",
                          on_click=session.remove_shape, args=(record.id,),
                          use_container_width=True)

            labels = ["Center"] if record.tool == Tool.CIRCLE else [
                f"Vertex {i + 1}" for i in range(len(record.vertices))
            ]
            index = st.selectbox("Move", range(len(labels)),
                                 format_func=lambda i, labels=labels: labels[i],
                                 key=f"move_idx_{record.id}")
            st.button("Move on next click", key=f"move_{record.id}",
                      on_click=start_move, args=(record.id, index))
else:
    st.info("No shapes added yet.")

st.button("CLEAR", on_click=clear_all, use_container_width=True)
st.caption("Refresh will reset this session.")
