"""
Unit tests for iso_diagram.editor.session.

Tests:
- Recompilation after every change
- Selection handling
- Cut/paste through the session clipboard
- Save/load through the persistence provider
"""

import json
from pathlib import Path

import pytest

from iso_diagram import diagnostics as diag
from iso_diagram.editor.session import DiagramSession
from iso_diagram.io.persistence import DiagramNotFoundError, FilePersistence
from iso_diagram.io.serialization import InvalidDiagramError
from iso_diagram.model.types import CanvasSize, Point
from iso_diagram.project_config import ProjectConfig


@pytest.fixture
def session(library, tmp_path: Path) -> DiagramSession:
    return DiagramSession(library, persistence=FilePersistence(tmp_path))


def _build(session):
    root = session.add_3d_shape("cube", "center").component.id
    top = session.add_3d_shape("cube", "top").component.id
    session.select(root)
    side = session.add_3d_shape("cube", "front-right").component.id
    return root, top, side


class TestEditing:
    """Tests for editing through the session."""

    def test_starts_empty(self, session):
        """Test a new session has nothing compiled."""
        assert session.components == []
        assert session.markup == ""
        assert session.selection_id is None

    def test_add_selects_and_compiles(self, session):
        """Test adding selects the new shape and recompiles."""
        result = session.add_3d_shape("cube", "center")
        assert result.ok
        assert session.selection_id == result.component.id
        assert session.components[0].absolute_position == Point(500, 500)
        assert result.component.id in session.markup

    def test_add_chains_on_selection(self, session):
        """Test successive adds stack on the latest shape."""
        root, top, side = _build(session)
        by_id = {c.id: c for c in session.components}
        assert by_id[top].relative_to_id == root
        assert by_id[top].absolute_position == Point(500, 400)
        assert by_id[side].absolute_position == Point(550, 550)

    def test_rejected_edit_keeps_state(self, session):
        """Test a rejected edit leaves the components and reports why."""
        session.add_3d_shape("cube", "center")
        before = list(session.components)
        result = session.add_3d_shape("ghost", "top")
        assert not result.ok
        assert session.components == before
        assert session.diagnostics[0].code == diag.SHAPE_NOT_FOUND

    def test_add_2d_shape(self, session):
        """Test a decoration is added to the selection and welded."""
        session.add_3d_shape("cube", "center")
        result = session.add_2d_shape("label")
        assert result.ok
        assert session.selected.attached_2d_shapes[0].attached_to == "top"
        assert "top-label" in session.markup

    def test_remove_selected_clears_selection(self, session):
        """Test removing the selected subtree clears the selection."""
        root, top, side = _build(session)
        session.select(top)
        session.remove_3d_shape()
        assert session.selection_id is None
        assert [c.id for c in session.components] == [root, side]

    def test_remove_other_keeps_selection(self, session):
        """Test removing another component keeps the selection."""
        root, top, side = _build(session)
        session.select(side)
        session.remove_3d_shape(top)
        assert session.selection_id == side

    def test_remove_2d_shape(self, session):
        """Test a decoration is removed by index."""
        session.add_3d_shape("cube", "center")
        session.add_2d_shape("label", "top")
        parent = session.selection_id
        assert session.remove_2d_shape(parent, 0).ok
        assert "top-label" not in session.markup

    def test_select_unknown(self, session):
        """Test selecting an unknown id fails without changing the selection."""
        session.add_3d_shape("cube", "center")
        selected = session.selection_id
        assert session.select("zz") is False
        assert session.selection_id == selected
        assert session.select(None) is True
        assert session.selection_id is None


class TestClipboard:
    """Tests for cut and paste through the session."""

    def test_cut_and_paste(self, session):
        """Test a cut subtree is pasted onto the selection."""
        root, top, side = _build(session)
        assert session.cut(top).ok
        assert session.cut_root.id == top
        session.select(side)
        result = session.paste("top")
        assert result.ok
        moved = next(c for c in session.components if c.id == top)
        assert moved.relative_to_id == side
        assert moved.absolute_position == Point(550, 450)
        assert session.cut_root is None

    def test_paste_without_cut(self, session):
        """Test pasting with nothing cut is rejected."""
        _build(session)
        result = session.paste("top")
        assert [d.code for d in result.diagnostics] == [diag.NO_CUT_SUBTREE]

    def test_cut_root_rejected(self, session):
        """Test cutting the root is rejected."""
        root, _, _ = _build(session)
        result = session.cut(root)
        assert [d.code for d in result.diagnostics] == [diag.CUT_ROOT]
        assert session.cut_root is None

    def test_cancel_cut(self, session):
        """Test cancelling clears the cut subtree."""
        _, top, _ = _build(session)
        session.cut(top)
        assert session.cancel_cut().ok
        assert session.cut_root is None
        assert session.cancel_cut().ok


class TestSettings:
    """Tests for canvas and anchor display settings."""

    def test_canvas_change_recompiles(self, session):
        """Test the root follows a new canvas size."""
        session.add_3d_shape("cube", "center")
        session.set_canvas(CanvasSize(400, 300))
        assert session.components[0].absolute_position == Point(200, 150)

    def test_anchor_display(self, session):
        """Test toggling anchor visibility recompiles."""
        session.add_3d_shape("cube", "center")
        assert 'display="none"' in session.markup
        session.set_show_attachment_points(True)
        assert 'display="none"' not in session.markup

    def test_available_positions(self, session):
        """Test placement choices for the selection."""
        session.add_3d_shape("cube", "center")
        assert session.available_positions()[:2] == ["none", "top"]

    def test_clear(self, session):
        """Test clearing removes everything."""
        _build(session)
        session.clear()
        assert session.components == []
        assert session.markup == ""

    def test_to_svg(self, session):
        """Test the standalone document contains the diagram."""
        session.add_3d_shape("cube", "center")
        svg = session.to_svg()
        assert svg.startswith("<svg")
        assert session.selection_id in svg


class TestPersistence:
    """Tests for save and load."""

    def test_save_and_load(self, session, library, tmp_path: Path):
        """Test a saved diagram loads into another session identically."""
        _build(session)
        assert session.save("tower")
        other = DiagramSession(library, persistence=FilePersistence(tmp_path))
        other.load("tower")
        assert other.components == session.components
        assert other.markup == session.markup
        assert other.selection_id is None

    def test_invalid_load_keeps_state(self, session, tmp_path: Path):
        """Test a failed load leaves the session untouched."""
        _build(session)
        before = list(session.components)
        (tmp_path / "bad.json").write_text(json.dumps([{"shape": "cube"}]), encoding="utf-8")
        with pytest.raises(InvalidDiagramError):
            session.load("bad")
        assert session.components == before

    def test_missing_load(self, session):
        """Test loading an unknown key raises."""
        with pytest.raises(DiagramNotFoundError):
            session.load("nothing")


class TestFromConfig:
    """Tests for building a session from the project configuration."""

    def test_storage_directory(self, library, tmp_path: Path):
        """Test diagrams are saved under the configured storage directory."""
        config = ProjectConfig()
        config.storage.directory = str(tmp_path / "store")
        session = DiagramSession.from_config(config, library)
        session.add_3d_shape("cube", "center")

        assert session.save("network")
        assert (tmp_path / "store" / "network.json").is_file()

    def test_canvas_and_display(self, library):
        """Test canvas size and anchor display come from the config."""
        config = ProjectConfig()
        config.canvas.width = 400
        config.canvas.height = 300
        config.display.show_attachment_points = True
        session = DiagramSession.from_config(config, library)
        session.add_3d_shape("cube", "center")

        assert session.canvas == CanvasSize(400, 300)
        assert session.components[0].absolute_position == Point(200, 150)
        assert 'display="none"' not in session.markup

    def test_library_from_config(self, library_dir):
        """Test the shape library is loaded from the configured directory."""
        config = ProjectConfig()
        config.library.directory = str(library_dir)
        session = DiagramSession.from_config(config)

        assert session.library.get("cube") is not None
        assert session.add_3d_shape("cube", "center").ok
