"""
Pytest configuration and fixtures for the isometric diagram compositor.

Provides:
- Inline SVG shape markup (solid cube, flat label, broken markup)
- A ready-made ShapeLibrary and canvas
- On-disk shape library and diagram fixtures
- Logger state reset between tests
"""

import json
import logging
from pathlib import Path
from typing import List

import pytest

from iso_diagram.library.shape_library import ShapeLibrary
from iso_diagram.logging_config import PACKAGE_LOGGER
from iso_diagram.model.types import (
    AttachmentPoint,
    CanvasSize,
    DiagramComponent,
    Point,
    ShapeDefinition,
    ShapeKind,
)

# Project root directory
PROJECT_ROOT = Path(__file__).parent.parent


# ============================================================================
# Shape Markup
# ============================================================================

# 100x100 block with all six placement anchors.
CUBE_SVG = """<svg xmlns="http://www.w3.org/2000/svg" width="100" height="100">
  <path d="M50 0 L100 25 L100 75 L50 100 L0 75 L0 25 Z" fill="#ccc"/>
  <circle id="attach-top" cx="50" cy="0" r="3"/>
  <circle id="attach-bottom" cx="50" cy="100" r="3"/>
  <circle id="attach-front-left" cx="25" cy="75" r="3"/>
  <circle id="attach-front-right" cx="75" cy="75" r="3"/>
  <circle id="attach-back-left" cx="25" cy="25" r="3"/>
  <circle id="attach-back-right" cx="75" cy="25" r="3"/>
</svg>"""

# Same anchors without an xmlns declaration, as hand-written shapes often are.
SLAB_SVG = """<svg width="100" height="50">
  <rect x="0" y="0" width="100" height="50"/>
  <circle id="attach-top" cx="50" cy="0" r="3"/>
  <circle id="attach-bottom" cx="50" cy="50" r="3"/>
  <circle id="attach-front-left" cx="25" cy="40" r="3"/>
  <circle id="attach-front-right" cx="75" cy="40" r="3"/>
  <circle id="attach-back-left" cx="25" cy="10" r="3"/>
  <circle id="attach-back-right" cx="75" cy="10" r="3"/>
</svg>"""

# Flat decoration; its single anchor sits at a negative x.
LABEL_SVG = """<svg xmlns="http://www.w3.org/2000/svg">
  <text x="0" y="0">label</text>
  <circle id="attach-point" cx="-10" cy="5" r="2"/>
</svg>"""

# Flat decoration without its anchor.
BADGE_SVG = """<svg xmlns="http://www.w3.org/2000/svg">
  <rect width="10" height="10"/>
</svg>"""

BROKEN_SVG = "<svg><g></svg>"


# ============================================================================
# Library Fixtures
# ============================================================================

@pytest.fixture
def canvas() -> CanvasSize:
    """Default 1000x1000 canvas."""
    return CanvasSize(1000, 1000)


@pytest.fixture
def library() -> ShapeLibrary:
    """Library with solids cube/slab/broken and flats label/badge."""
    return ShapeLibrary([
        ShapeDefinition("cube", ShapeKind.SOLID, CUBE_SVG),
        ShapeDefinition("slab", ShapeKind.SOLID, SLAB_SVG),
        ShapeDefinition("broken", ShapeKind.SOLID, BROKEN_SVG),
        ShapeDefinition("label", ShapeKind.FLAT, LABEL_SVG, default_attach_face="top"),
        ShapeDefinition("badge", ShapeKind.FLAT, BADGE_SVG, default_attach_face="front-left"),
    ])


@pytest.fixture
def cube_points() -> List[AttachmentPoint]:
    """Anchors of CUBE_SVG in document order."""
    return [
        AttachmentPoint("top", 50.0, 0.0),
        AttachmentPoint("bottom", 50.0, 100.0),
        AttachmentPoint("front-left", 25.0, 75.0),
        AttachmentPoint("front-right", 75.0, 75.0),
        AttachmentPoint("back-left", 25.0, 25.0),
        AttachmentPoint("back-right", 75.0, 25.0),
    ]


@pytest.fixture
def root_component(cube_points) -> DiagramComponent:
    """Placed root cube at the canvas centre."""
    return DiagramComponent(
        id="root",
        shape="cube",
        position="center",
        attachment_points=list(cube_points),
        absolute_position=Point(500.0, 500.0),
    )


# ============================================================================
# On-disk Fixtures
# ============================================================================

@pytest.fixture
def library_dir(tmp_path: Path) -> Path:
    """Shape library directory with a shapes.json manifest."""
    directory = tmp_path / "shapes"
    directory.mkdir()
    (directory / "cube.svg").write_text(CUBE_SVG, encoding="utf-8")
    (directory / "label.svg").write_text(LABEL_SVG, encoding="utf-8")
    manifest = [
        {"name": "cube", "type": "3D", "attachTo": None, "svgFile": "cube.svg"},
        {"name": "label", "type": "2D", "attachTo": "top", "svgFile": "label.svg"},
    ]
    (directory / "shapes.json").write_text(json.dumps(manifest), encoding="utf-8")
    return directory


def component_dict(component_id: str, position: str = "center", relative_to_id=None,
                   shape: str = "cube", attached=None) -> dict:
    """Serialized form of a component, as written by the editor."""
    return {
        "id": component_id,
        "shape": shape,
        "position": position,
        "relativeToId": relative_to_id,
        "attached2DShapes": attached or [],
        "attachmentPoints": [],
        "absolutePosition": {"x": 0, "y": 0},
        "cut": False,
    }


@pytest.fixture
def diagram_dir(tmp_path: Path) -> Path:
    """Directory with two saved diagrams: a tower and a single labelled cube."""
    directory = tmp_path / "diagrams"
    directory.mkdir()
    tower = [
        component_dict("a"),
        component_dict("b", "top", "a"),
        component_dict("c", "front-left", "b"),
    ]
    labelled = [
        component_dict("a", attached=[{"name": "label", "attachedTo": "top"}]),
    ]
    (directory / "tower.json").write_text(json.dumps(tower), encoding="utf-8")
    (directory / "labelled.json").write_text(json.dumps(labelled), encoding="utf-8")
    return directory


# ============================================================================
# Logging
# ============================================================================

@pytest.fixture(autouse=True)
def reset_package_logger():
    """Undo setup_logging() so caplog keeps seeing package records."""
    yield
    logger = logging.getLogger(PACKAGE_LOGGER)
    for handler in list(logger.handlers):
        handler.close()
    logger.handlers.clear()
    logger.filters.clear()
    logger.setLevel(logging.NOTSET)
    logger.propagate = True
