"""
Unit tests for settings loading and session construction.
"""

import os

import pytest

import init_session
from init_session import (
    DEFAULT_SETTINGS,
    StreamlitSurface,
    build_session,
    handle_map_click,
    load_settings,
)
from shapes.records import Tool


@pytest.fixture
def no_env(tmp_path, monkeypatch):
    """Run from an empty directory with no MAP_* variables set."""
    monkeypatch.chdir(tmp_path)
    for key in DEFAULT_SETTINGS:
        monkeypatch.delenv(key, raising=False)
    monkeypatch.setattr(init_session, "_secret", lambda key: None)
    return tmp_path


def test_defaults(no_env):
    settings = load_settings()
    assert settings == DEFAULT_SETTINGS
    assert settings["MAP_START_ZOOM"] == 5


def test_dotenv_overrides(no_env):
    (no_env / ".env").write_text(
        "MAP_START_LAT=64.2\n"
        "MAP_START_ZOOM=7\n"
        "CIRCLE_COLOR=purple\n"
        "MAP_DEFAULT_RADIUS=not-a-number\n"
    )
    try:
        settings = load_settings()
    finally:
        # load_dotenv writes straight into os.environ
        for key in DEFAULT_SETTINGS:
            os.environ.pop(key, None)

    assert settings["MAP_START_LAT"] == 64.2
    assert settings["MAP_START_ZOOM"] == 7
    assert settings["CIRCLE_COLOR"] == "purple"
    assert settings["MAP_DEFAULT_RADIUS"] == DEFAULT_SETTINGS["MAP_DEFAULT_RADIUS"]


def test_secrets_used_without_dotenv(no_env, monkeypatch):
    monkeypatch.setattr(init_session, "_secret", {"MAP_START_ZOOM": "9"}.get)
    assert load_settings()["MAP_START_ZOOM"] == 9


def test_build_session(surface):
    settings = dict(DEFAULT_SETTINGS, TRIANGLE_COLOR="orange", MAP_DEFAULT_RADIUS=350)
    session = build_session(settings, surface)

    assert session.surface is surface
    assert session.renderer.center == (11.0168, 76.9558)
    assert session.renderer.zoom == 5
    assert session.colors[Tool.TRIANGLE] == "orange"

    session.select_tool("circle")
    assert session.map_clicked(1.0, 2.0).default == 350


class TestStreamlitSurface:
    """Tests for the prompt/alert surface the page hands to the session."""

    def test_alerts_drain_once(self):
        surface = StreamlitSurface()
        surface.alert("Invalid input.")
        surface.alert("Invalid input.")
        assert surface.pop_alerts() == ["Invalid input.", "Invalid input."]
        assert surface.pop_alerts() == []

    def test_each_prompt_bumps_version(self):
        surface = StreamlitSurface()
        session = build_session(dict(DEFAULT_SETTINGS), surface)
        session.select_tool("circle")

        session.map_clicked(11.0, 77.0)
        assert surface.prompt_version == 1
        session.cancel_input()
        assert surface.alerts == ["Invalid input."]

        session.map_clicked(11.0, 77.0)
        assert surface.prompt_version == 2


class TestHandleMapClick:
    """Tests for forwarding st_folium clicks into the session."""

    @pytest.fixture
    def state(self):
        return {"move_target": None, "map_reset_counter": 0}

    def test_no_click(self, state, session):
        assert handle_map_click(state, session, None) is False
        assert handle_map_click(state, session, {"last_clicked": None}) is False
        assert state["map_reset_counter"] == 0

    def test_repeat_click_on_same_point_is_forwarded(self, state, session):
        """Two clicks at one spot both count, and the map key changes each time."""
        session.select_tool("triangle")
        output = {"last_clicked": {"lat": 10.0, "lng": 76.0}}

        assert handle_map_click(state, session, output)
        assert handle_map_click(state, session, output)

        assert session.vertex_buffer == [(10.0, 76.0), (10.0, 76.0)]
        assert state["map_reset_counter"] == 2

    def test_move_target_drags_vertex(self, state, session, triangle):
        state["move_target"] = (triangle.id, 2)
        output = {"last_clicked": {"lat": 14.0, "lng": 77.0}}

        assert handle_map_click(state, session, output)

        assert triangle.vertices[2] == (14.0, 77.0)
        assert state["move_target"] is None
        assert session.vertex_buffer == []

    def test_move_target_for_removed_shape(self, state, session, triangle):
        state["move_target"] = (triangle.id, 0)
        session.remove_shape(triangle.id)

        assert handle_map_click(state, session, {"last_clicked": {"lat": 1.0, "lng": 2.0}})
        assert state["move_target"] is None
        assert session.shapes == []
