"""
Tests for the file-level pipeline and the command line entry point.

Tests:
- Saved diagram compiled to an SVG file
- Library directory resolution
- CLI exit codes and sample config creation
"""

import json
import xml.etree.ElementTree as ET
from pathlib import Path

import pytest

import main
from iso_diagram.io.persistence import DiagramNotFoundError
from iso_diagram.io.serialization import InvalidDiagramError
from iso_diagram.library.shape_library import ShapeLibraryError
from iso_diagram.markup.fragment import SVG_NS
from iso_diagram.model.types import CanvasSize
from iso_diagram.pipeline import resolve_library_dir, run_pipeline
from iso_diagram.project_config import CONFIG_FILENAME, ProjectConfig

NS = {"svg": SVG_NS}


@pytest.fixture
def isolated(tmp_path: Path, monkeypatch) -> Path:
    """Working and home directory without any config file."""
    home = tmp_path / "home"
    work = tmp_path / "work"
    home.mkdir()
    work.mkdir()
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.chdir(work)
    return work


def _root(path: Path) -> ET.Element:
    return ET.parse(path).getroot()


class TestResolveLibraryDir:
    """Tests for resolve_library_dir."""

    def test_explicit_wins(self):
        """Test an explicit directory overrides the config."""
        config = ProjectConfig()
        config.library.directory = "configured"
        assert resolve_library_dir("d/a.json", "explicit", config) == Path("explicit")

    def test_configured(self):
        """Test the configured directory is used next."""
        config = ProjectConfig()
        config.library.directory = "configured"
        assert resolve_library_dir("d/a.json", None, config) == Path("configured")

    def test_diagram_directory(self):
        """Test the diagram's own directory is the fallback."""
        assert resolve_library_dir("d/a.json", None, ProjectConfig()) == Path("d")


class TestRunPipeline:
    """Tests for run_pipeline."""

    def test_writes_svg(self, diagram_dir, library_dir, tmp_path: Path):
        """Test a saved diagram compiles into a standalone document."""
        output = tmp_path / "out" / "tower.svg"

        result = run_pipeline(diagram_dir / "tower.json", output, library_dir=library_dir)

        assert result.output_path == output
        assert result.placed == 3
        assert result.compile_result.ok
        groups = _root(output).findall("svg:g", NS)
        assert [g.get("id") for g in groups] == ["a", "b", "c"]
        assert groups[1].get("transform") == "translate(500, 400)"

    @pytest.mark.parametrize("name", ["net.diagram", "(draft) net.json"])
    def test_any_diagram_file_name(self, diagram_dir, library_dir, tmp_path: Path, name):
        """Test diagram files compile whatever their name or suffix."""
        source = diagram_dir / name
        source.write_text((diagram_dir / "tower.json").read_text(encoding="utf-8"),
                          encoding="utf-8")
        output = tmp_path / "net.svg"

        result = run_pipeline(source, output, library_dir=library_dir)

        assert result.placed == 3
        assert output.is_file()

    def test_canvas_override(self, diagram_dir, library_dir, tmp_path: Path):
        """Test the root is centred on an overridden canvas."""
        output = tmp_path / "tower.svg"

        run_pipeline(
            diagram_dir / "tower.json", output,
            library_dir=library_dir, canvas=CanvasSize(400, 300),
        )

        root = _root(output)
        assert root.get("viewBox") == "0 0 400 300"
        assert root.find("svg:g", NS).get("transform") == "translate(200, 150)"

    def test_configured_canvas(self, diagram_dir, library_dir, tmp_path: Path):
        """Test the canvas comes from the configuration."""
        config = ProjectConfig()
        config.canvas.width = 600
        config.canvas.height = 200
        output = tmp_path / "tower.svg"

        run_pipeline(diagram_dir / "tower.json", output, library_dir=library_dir, config=config)

        assert _root(output).get("width") == "600"

    def test_anchor_display(self, diagram_dir, library_dir, tmp_path: Path):
        """Test anchors are hidden unless requested."""
        hidden = tmp_path / "hidden.svg"
        shown = tmp_path / "shown.svg"

        run_pipeline(diagram_dir / "tower.json", hidden, library_dir=library_dir)
        run_pipeline(
            diagram_dir / "tower.json", shown,
            library_dir=library_dir, show_attachment_points=True,
        )

        assert 'display="none"' in hidden.read_text(encoding="utf-8")
        assert 'display="none"' not in shown.read_text(encoding="utf-8")

    def test_invalid_diagram(self, diagram_dir, library_dir, tmp_path: Path):
        """Test a structurally invalid diagram raises before writing."""
        (diagram_dir / "bad.json").write_text(json.dumps([{"id": "a"}]), encoding="utf-8")
        output = tmp_path / "bad.svg"

        with pytest.raises(InvalidDiagramError):
            run_pipeline(diagram_dir / "bad.json", output, library_dir=library_dir)
        assert not output.exists()

    def test_missing_diagram(self, diagram_dir, library_dir, tmp_path: Path):
        """Test a missing diagram file raises DiagramNotFoundError."""
        with pytest.raises(DiagramNotFoundError):
            run_pipeline(diagram_dir / "none.json", tmp_path / "x.svg", library_dir=library_dir)

    def test_missing_library(self, diagram_dir, tmp_path: Path):
        """Test a directory without manifest raises ShapeLibraryError."""
        with pytest.raises(ShapeLibraryError):
            run_pipeline(diagram_dir / "tower.json", tmp_path / "x.svg")


class TestMain:
    """Tests for the command line entry point."""

    def test_success(self, isolated, diagram_dir, library_dir, capsys):
        """Test a successful run prints the output path and counts."""
        output = isolated / "tower.svg"

        main.main([str(diagram_dir / "tower.json"), "-l", str(library_dir), "-o", str(output)])

        assert output.exists()
        assert "3 components" in capsys.readouterr().out

    def test_default_output_name(self, isolated, diagram_dir, library_dir):
        """Test the output is named after the diagram by default."""
        main.main([str(diagram_dir / "labelled.json"), "-l", str(library_dir)])

        assert (isolated / "labelled.svg").exists()

    def test_width_and_height(self, isolated, diagram_dir, library_dir):
        """Test canvas options reach the document."""
        output = isolated / "tower.svg"

        main.main([
            str(diagram_dir / "tower.json"), "-l", str(library_dir), "-o", str(output),
            "--width", "800",
        ])

        root = _root(output)
        assert root.get("viewBox") == "0 0 800 1000"

    def test_invalid_diagram_exit_code(self, isolated, diagram_dir, library_dir):
        """Test an invalid diagram exits with 1."""
        (diagram_dir / "bad.json").write_text("{}", encoding="utf-8")

        with pytest.raises(SystemExit) as exc_info:
            main.main([str(diagram_dir / "bad.json"), "-l", str(library_dir)])
        assert exc_info.value.code == 1

    def test_missing_library_exit_code(self, isolated, diagram_dir):
        """Test a missing shape library exits with 1."""
        with pytest.raises(SystemExit) as exc_info:
            main.main([str(diagram_dir / "tower.json"), "-l", str(isolated / "none")])
        assert exc_info.value.code == 1

    def test_no_arguments(self, isolated):
        """Test the diagram argument is required."""
        with pytest.raises(SystemExit) as exc_info:
            main.main([])
        assert exc_info.value.code == 2

    def test_init_config(self, isolated):
        """Test --init-config writes a loadable sample config."""
        main.main(["--init-config"])

        path = isolated / CONFIG_FILENAME
        assert path.exists()
        assert ProjectConfig.load(path) == ProjectConfig()

    def test_json_log(self, isolated, diagram_dir, library_dir):
        """Test --json-log writes JSON lines tagged with the diagram."""
        log_path = isolated / "run.log.json"

        main.main([
            str(diagram_dir / "tower.json"), "-l", str(library_dir),
            "-o", str(isolated / "t.svg"), "--json-log", str(log_path),
        ])

        records = [json.loads(line) for line in log_path.read_text(encoding="utf-8").splitlines()]
        assert any(r.get("diagram") == "tower.json" for r in records)
