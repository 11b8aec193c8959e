"""
File-level compile pipeline: saved diagram -> standalone SVG.

Steps:
  1. Load the shape library from its manifest directory.
  2. Read and validate the saved diagram.
  3. Compile it on the configured canvas.
  4. Write the standalone SVG document.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Union

from iso_diagram.compose.compiler import CompileResult, compile_diagram
from iso_diagram.io.document import write_svg
from iso_diagram.io.persistence import read_diagram_file
from iso_diagram.io.serialization import deserialize_components
from iso_diagram.library.shape_library import ShapeLibrary
from iso_diagram.logging_config import LogContext
from iso_diagram.model.types import CanvasSize
from iso_diagram.project_config import ProjectConfig

logger = logging.getLogger(__name__)


@dataclass
class PipelineResult:
    """Written SVG file plus the compile result it was made from."""
    output_path: Path
    compile_result: CompileResult

    @property
    def placed(self) -> int:
        return len(self.compile_result.placed_ids)

    @property
    def diagnostics(self) -> int:
        return len(self.compile_result.diagnostics)


def resolve_library_dir(
    diagram_path: Union[str, Path],
    library_dir: Optional[Union[str, Path]],
    config: ProjectConfig,
) -> Path:
    """Explicit directory, else the configured one, else the diagram's directory."""
    if library_dir:
        return Path(library_dir)
    if config.library.directory:
        return Path(config.library.directory)
    return Path(diagram_path).parent


def run_pipeline(
    diagram_path: Union[str, Path],
    output_svg: Optional[Union[str, Path]] = None,
    library_dir: Optional[Union[str, Path]] = None,
    config: Optional[ProjectConfig] = None,
    canvas: Optional[CanvasSize] = None,
    show_attachment_points: Optional[bool] = None,
    library: Optional[ShapeLibrary] = None,
) -> PipelineResult:
    """Compile a saved diagram file to a standalone SVG.

    Args:
        diagram_path: Saved diagram (.json)
        output_svg: Output SVG path (default: from config output settings)
        library_dir: Shape library directory (default: from config, then
            the diagram's own directory)
        config: Project configuration (default: built-in defaults)
        canvas: Canvas size overriding the configured one
        show_attachment_points: Override the configured anchor display
        library: Already loaded shape library; skips loading from disk

    Returns:
        PipelineResult

    Raises:
        ShapeLibraryError: If the shape manifest cannot be read
        PersistenceError: If the diagram file cannot be read
        DiagramLoadError: If the diagram is not valid
    """
    config = config or ProjectConfig()
    diagram_path = Path(diagram_path)
    canvas = canvas or config.canvas.to_canvas()
    if show_attachment_points is None:
        show_attachment_points = config.display.show_attachment_points
    output_path = Path(output_svg) if output_svg else config.output.output_path()

    with LogContext(diagram=diagram_path.name):
        if library is None:
            library = ShapeLibrary.from_directory(
                resolve_library_dir(diagram_path, library_dir, config),
                config.library.manifest,
            )

        text = read_diagram_file(diagram_path)
        components = deserialize_components(text)
        logger.info("Diagram %s: %d components", diagram_path.name, len(components))

        result = compile_diagram(components, canvas, library, show_attachment_points)
        for diagnostic in result.diagnostics:
            logger.debug("%s", diagnostic)

        write_svg(result.markup, canvas, output_path)
        logger.info(
            "Compiled %d/%d components with %d diagnostics -> %s",
            len(result.placed_ids), len(components), len(result.diagnostics), output_path,
        )

    return PipelineResult(output_path=output_path, compile_result=result)
