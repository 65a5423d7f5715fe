"""
Pytest configuration and shared fixtures for the shape annotator tests.
"""

import pytest

from shapes.renderer import FoliumRenderer
from shapes.session import ShapeSession


class RecordingSurface:
    """Input surface double: remembers prompts and alerts instead of showing them."""

    def __init__(self):
        self.requests = []
        self.alerts = []

    def request_input(self, request):
        self.requests.append(request)

    def alert(self, message):
        self.alerts.append(message)


# ============== Collaborator Fixtures ==============

@pytest.fixture
def surface() -> RecordingSurface:
    return RecordingSurface()


@pytest.fixture
def renderer() -> FoliumRenderer:
    return FoliumRenderer()


@pytest.fixture
def session(renderer, surface) -> ShapeSession:
    """A fresh session with nothing selected."""
    return ShapeSession(renderer, surface)


# ============== Shape Fixtures ==============

@pytest.fixture
def circle(session):
    """A committed 1000 m circle at (11.0, 77.0)."""
    session.select_tool("circle")
    session.map_clicked(11.0, 77.0)
    return session.resolve_input("1000")


@pytest.fixture
def triangle(session):
    """A committed triangle."""
    session.select_tool("triangle")
    session.map_clicked(10.0, 76.0)
    session.map_clicked(10.0, 78.0)
    return session.map_clicked(12.0, 77.0)


@pytest.fixture
def rectangle_corners():
    return [(11.0, 77.0), (11.0, 78.0), (12.0, 78.0), (12.0, 77.0)]
