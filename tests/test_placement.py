"""
Unit tests for iso_diagram.compose.placement.

Tests:
- Root and centred placement
- Face-to-face placement through contact anchors
- Negative anchor coordinates
- Fallbacks for missing references, anchors and unknown positions
"""

import pytest

from iso_diagram import diagnostics as diag
from iso_diagram.compose.placement import solve_placement
from iso_diagram.model.types import AttachmentPoint, DiagramComponent, Point


def _child(cube_points, position, relative_to_id="root", points=None):
    return DiagramComponent(
        id="child",
        shape="cube",
        position=position,
        relative_to_id=relative_to_id,
        attachment_points=list(cube_points if points is None else points),
    )


class TestRootPlacement:
    """Tests for components placed at the canvas centre."""

    def test_root_at_center(self, canvas, cube_points):
        """Test the root sits at the canvas centre."""
        root = DiagramComponent("root", "cube", "center", attachment_points=cube_points)
        assert solve_placement(root, [], canvas) == Point(500, 500)

    def test_center_position_with_reference(self, canvas, cube_points, root_component):
        """Test a non-root "center" falls back to the canvas centre and is reported."""
        diagnostics = []
        child = _child(cube_points, "center")
        assert solve_placement(child, [root_component], canvas, diagnostics) == Point(500, 500)
        assert [d.code for d in diagnostics] == [diag.UNKNOWN_POSITION]

    def test_root_with_other_position(self, canvas, cube_points):
        """Test the root is centred whatever its stored position."""
        root = DiagramComponent("root", "cube", "top", attachment_points=cube_points)
        assert solve_placement(root, [], canvas) == Point(500, 500)


class TestFacePlacement:
    """Tests for placement via contact anchors."""

    def test_on_top(self, canvas, cube_points, root_component):
        """Test a cube on top sits 100 units above its reference."""
        diagnostics = []
        result = solve_placement(_child(cube_points, "top"), [root_component], canvas, diagnostics)
        assert result == Point(500, 400)
        assert result.y < root_component.absolute_position.y
        assert diagnostics == []

    def test_front_left(self, canvas, cube_points, root_component):
        """Test front-left meets the new shape's back-right anchor."""
        result = solve_placement(_child(cube_points, "front-left"), [root_component], canvas)
        assert result == Point(450, 550)

    def test_front_right(self, canvas, cube_points, root_component):
        """Test front-right meets the new shape's back-left anchor."""
        result = solve_placement(_child(cube_points, "front-right"), [root_component], canvas)
        assert result == Point(550, 550)

    def test_back_faces(self, canvas, cube_points, root_component):
        """Test back faces meet the opposite front anchors."""
        assert solve_placement(_child(cube_points, "back-left"), [root_component], canvas) \
            == Point(450, 450)
        assert solve_placement(_child(cube_points, "back-right"), [root_component], canvas) \
            == Point(550, 450)

    def test_compound_position(self, canvas, cube_points, root_component):
        """Test a face-plus-anchor token looks up the full token on the reference."""
        reference = DiagramComponent(
            "root", "cube", "center",
            attachment_points=[*cube_points, AttachmentPoint("front-left-2", 10, 90)],
            absolute_position=Point(500, 500),
        )
        result = solve_placement(_child(cube_points, "front-left-2"), [reference], canvas)
        assert result == Point(500 + 10 - 75, 500 + 90 - 25)

    def test_negative_coordinates_normalized(self, canvas):
        """Test anchors with negative coordinates are taken by magnitude."""
        reference = DiagramComponent(
            "root", "cube", "center",
            attachment_points=[AttachmentPoint("top", -50, -10)],
            absolute_position=Point(500, 500),
        )
        child = _child([], "top", points=[AttachmentPoint("bottom", 50, -100)])
        assert solve_placement(child, [reference], canvas) == Point(500, 410)

    def test_result_is_float(self, canvas, cube_points, root_component):
        """Test coordinates are plain floats."""
        result = solve_placement(_child(cube_points, "top"), [root_component], canvas)
        assert type(result.x) is float
        assert type(result.y) is float


class TestFallbacks:
    """Tests for degraded placement."""

    def test_reference_not_processed(self, canvas, cube_points):
        """Test an unknown reference falls back to the centre with an error."""
        diagnostics = []
        result = solve_placement(_child(cube_points, "top", "ghost"), [], canvas, diagnostics)
        assert result == Point(500, 500)
        assert [d.code for d in diagnostics] == [diag.REFERENCE_NOT_FOUND]
        assert diagnostics[0].severity is diag.DiagnosticSeverity.ERROR

    def test_unknown_position(self, canvas, cube_points, root_component):
        """Test a position without contact anchor falls back to the centre."""
        diagnostics = []
        result = solve_placement(_child(cube_points, "bottom"), [root_component], canvas, diagnostics)
        assert result == Point(500, 500)
        assert [d.code for d in diagnostics] == [diag.UNKNOWN_POSITION]

    def test_missing_reference_anchor(self, canvas, cube_points, root_component):
        """Test a missing reference anchor counts as the origin."""
        diagnostics = []
        result = solve_placement(_child(cube_points, "top-9"), [root_component], canvas, diagnostics)
        # origin minus the child's bottom anchor (50, 100)
        assert result == Point(450, 400)
        assert [d.code for d in diagnostics] == [diag.ATTACHMENT_POINT_NOT_FOUND]
        assert diagnostics[0].component_id == "root"

    def test_missing_contact_anchor(self, canvas, root_component):
        """Test a missing contact anchor counts as the origin."""
        diagnostics = []
        result = solve_placement(_child([], "top", points=[]), [root_component], canvas, diagnostics)
        assert result == Point(550, 500)
        assert [d.code for d in diagnostics] == [diag.ATTACHMENT_POINT_NOT_FOUND]
        assert diagnostics[0].component_id == "child"

    @pytest.mark.parametrize("width,height", [(800, 600), (1000, 1000)])
    def test_fallback_uses_canvas(self, cube_points, width, height):
        """Test fallbacks use the current canvas centre."""
        from iso_diagram.model.types import CanvasSize
        result = solve_placement(_child(cube_points, "top", "ghost"), [], CanvasSize(width, height))
        assert result == Point(width / 2, height / 2)
