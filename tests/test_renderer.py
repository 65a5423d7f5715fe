"""
Unit tests for the folium renderer and its layer handles.
"""

import folium

from shapes.renderer import FoliumRenderer, LayerHandle


class TestLayerHandle:
    """Tests for handle state, events and bounds."""

    def test_circle_radius(self):
        handle = FoliumRenderer().circle((11.0, 77.0), 500, color="green")
        assert handle.get_radius() == 500
        handle.set_radius(750)
        assert handle.get_radius() == 750
        assert handle.options["color"] == "green"

    def test_polygon_latlngs(self):
        handle = LayerHandle("polygon", [[1, 2], [3, 4], [5, 6]])
        assert handle.get_latlngs() == [(1, 2), (3, 4), (5, 6)]
        handle.set_latlngs([(0, 0), (1, 1), (2, 0)])
        assert handle.bounds() == [[0.0, 0.0], [2.0, 1.0]]
        assert handle.contains(1.0, 0.5)
        assert not handle.contains(3.0, 0.5)

    def test_drag_to_fires_dragend(self):
        marker = FoliumRenderer().marker((0.0, 0.0), draggable=True)
        seen = []
        marker.on("dragend", lambda m: seen.append(m.get_latlng()))

        marker.drag_to(5.0, 6.0)

        assert marker.get_latlng() == (5.0, 6.0)
        assert seen == [(5.0, 6.0)]

    def test_off_clears_listeners(self):
        marker = LayerHandle("marker", [(0.0, 0.0)])
        marker.on("dragend", lambda m: None)
        marker.on("click", lambda m: None)
        marker.off("dragend")
        assert marker.listeners("dragend") == []
        assert len(marker.listeners("click")) == 1
        marker.off()
        assert marker.listeners("click") == []

    def test_popup(self):
        handle = LayerHandle("circle", [(0.0, 0.0)], {"radius": 10})
        handle.bind_popup("<b>hi</b>").open_popup()
        assert handle.popup_html == "<b>hi</b>"
        assert handle.popup_open


class TestFoliumRenderer:
    """Tests for layer registry, view state and map building."""

    def test_add_and_remove_layers(self):
        renderer = FoliumRenderer()
        a = renderer.add_layer(renderer.marker((0.0, 0.0)))
        b = renderer.add_layer(renderer.marker((1.0, 1.0)))
        renderer.add_layer(a)

        assert renderer.layers == [a, b]
        renderer.remove_layer(a)
        assert renderer.layers == [b]
        assert not renderer.has_layer(a)

    def test_view_state(self):
        renderer = FoliumRenderer(location=(11.0168, 76.9558), zoom=5)
        assert renderer.center == (11.0168, 76.9558)
        assert renderer.zoom == 5

        renderer.fit_bounds([[1.0, 2.0], [3.0, 4.0]])
        assert renderer.bounds == [[1.0, 2.0], [3.0, 4.0]]

        renderer.fly_to((11.0, 77.0), 12)
        assert renderer.center == (11.0, 77.0)
        assert renderer.zoom == 12
        assert renderer.bounds is None

    def test_build_map_draws_attached_layers(self):
        renderer = FoliumRenderer()
        circle = renderer.add_layer(renderer.circle((11.0, 77.0), 1000, color="green"))
        circle.bind_popup("<b>Circle Information</b>")
        renderer.add_layer(renderer.polygon([(1, 1), (2, 2), (1, 2)], color="red"))
        renderer.add_layer(renderer.marker((11.0, 77.0), draggable=True))
        renderer.fit_bounds([[1.0, 1.0], [2.0, 2.0]])

        m = renderer.build_map()
        assert isinstance(m, folium.Map)

        rendered = m.get_root().render()
        assert "L.circle(" in rendered
        assert "L.polygon(" in rendered
        assert "L.marker(" in rendered
        assert "Circle Information" in rendered
        assert "fitBounds" in rendered

    def test_removed_layers_not_drawn(self):
        renderer = FoliumRenderer()
        polygon = renderer.add_layer(renderer.polygon([(1, 1), (2, 2), (1, 2)]))
        renderer.remove_layer(polygon)

        rendered = renderer.build_map().get_root().render()
        assert "L.polygon(" not in rendered
