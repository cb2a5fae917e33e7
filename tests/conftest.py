"""
Pytest configuration and shared fixtures for canvas editor tests.
"""

import pytest
from pathlib import Path
from typing import Sequence

# Add parent directory to path for imports
import sys
sys.path.insert(0, str(Path(__file__).parent.parent))

from models import (
    ArcShape, ArcStyle, EllipseShape, LineShape, Point, PolygonShape,
    PolylineShape, RectangleShape, StarShape, TextShape, TriangleShape,
)
from services.interaction import InteractionContext
from services.settings_manager import SettingsManager, reset_settings_manager
from services.shape_store import ShapeStore
from services.text_layout import ApproximateTextMeasurer
from services.tkinter_generator import TkinterScriptGenerator


# ============== Settings Fixtures ==============

@pytest.fixture
def settings_file(tmp_path: Path) -> Path:
    """Path for a throwaway settings file."""
    return tmp_path / "config" / "settings.json"


@pytest.fixture
def settings_manager(settings_file: Path) -> SettingsManager:
    """Settings manager reading and writing a temporary file."""
    reset_settings_manager()
    manager = SettingsManager(config_override=str(settings_file))
    yield manager
    reset_settings_manager()


# ============== Interaction Fixtures ==============

@pytest.fixture
def context() -> InteractionContext:
    """Interaction context without snapping, at 1:1 zoom."""
    return InteractionContext(measurer=ApproximateTextMeasurer())


@pytest.fixture
def measurer() -> ApproximateTextMeasurer:
    return ApproximateTextMeasurer()


# ============== Shape Fixtures ==============

@pytest.fixture
def rectangle() -> RectangleShape:
    """100x50 rectangle at (10, 20)."""
    return RectangleShape(id="rect1", name="Rectangle", x=10, y=20, width=100, height=50,
                          fill="#ff0000", stroke="#000000")


@pytest.fixture
def ellipse() -> EllipseShape:
    return EllipseShape(id="ell1", name="Ellipse", cx=50, cy=50, rx=40, ry=20,
                        fill="#00ff00")


@pytest.fixture
def line() -> LineShape:
    return LineShape(id="line1", name="Line", points=(Point(0, 0), Point(100, 0)))


@pytest.fixture
def triangle() -> TriangleShape:
    return TriangleShape(id="tri1", name="Triangle", x=0, y=0, width=100, height=80,
                         fill="#0000ff")


@pytest.fixture
def polygon() -> PolygonShape:
    return PolygonShape(id="poly1", name="Polygon", cx=0, cy=0, radius=50, sides=6)


@pytest.fixture
def star() -> StarShape:
    return StarShape(id="star1", name="Star", cx=100, cy=100, radius=50, inner_radius=20, sides=5)


@pytest.fixture
def arc() -> ArcShape:
    return ArcShape(id="arc1", name="Pie Slice", x=0, y=0, width=100, height=100,
                    start=0, extent=90, style=ArcStyle.PIESLICE, fill="#ffaa00")


@pytest.fixture
def polyline() -> PolylineShape:
    return PolylineShape(id="pl1", name="Polyline",
                         points=(Point(0, 0), Point(50, 0), Point(50, 50)))


@pytest.fixture
def text() -> TextShape:
    return TextShape(id="txt1", name="Text", x=10, y=10, text="Hello", font_size=10)


@pytest.fixture
def store() -> ShapeStore:
    """Empty shape store."""
    return ShapeStore()


# ============== Generator Fixtures ==============

@pytest.fixture
def script_generator() -> TkinterScriptGenerator:
    """Create a Tkinter script generator."""
    return TkinterScriptGenerator()


# ============== Helper Functions ==============

def assert_valid_python(code: str, filename: str = "test.py"):
    """Assert that code is valid Python syntax."""
    try:
        compile(code, filename, 'exec')
    except SyntaxError as e:
        pytest.fail(f"Invalid Python syntax at line {e.lineno}: {e.msg}\n{code}")


def assert_contains_all(text: str, substrings: list[str]):
    """Assert that text contains all substrings."""
    for s in substrings:
        assert s in text, f"Expected '{s}' in text"


def assert_points_close(actual: Sequence[Point], expected: Sequence[Point], tol: float = 1e-6):
    """Assert two point sequences match within ``tol``."""
    assert len(actual) == len(expected), f"{len(actual)} points, expected {len(expected)}"
    for a, e in zip(actual, expected):
        assert abs(a[0] - e[0]) <= tol and abs(a[1] - e[1]) <= tol, f"{a} != {e}"
