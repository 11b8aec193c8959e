"""
Editing session: the single writer of a diagram.

DiagramSession owns the mutable cells around the pure editor operations:
the component list, the current selection, canvas size, anchor display and
the last compile result. Every state-changing call replaces the component
list with the editor's new list and recompiles before returning.
"""

import logging
from typing import List, Optional

from iso_diagram.compose.compiler import CompileResult, compile_diagram
from iso_diagram.diagnostics import Diagnostic
from iso_diagram.editor import composition
from iso_diagram.editor.composition import EditResult
from iso_diagram.io.document import render_document
from iso_diagram.io.persistence import FilePersistence
from iso_diagram.io.serialization import deserialize_components, serialize_components
from iso_diagram.library.shape_library import ShapeLibrary
from iso_diagram.markup.attachment import available_attachment_positions
from iso_diagram.model.types import CanvasSize, DiagramComponent
from iso_diagram.project_config import ProjectConfig

logger = logging.getLogger(__name__)

DEFAULT_CANVAS = CanvasSize(1000, 1000)


class DiagramSession:
    """Current diagram state plus the operations a shell drives it with.

    Example:
        session = DiagramSession(library)
        session.add_3d_shape("cube", "center")
        session.add_3d_shape("cube", "top")
        session.add_2d_shape("label", "front-left")
        svg = session.to_svg()
    """

    def __init__(
        self,
        library: ShapeLibrary,
        canvas: CanvasSize = DEFAULT_CANVAS,
        show_attachment_points: bool = False,
        persistence: Optional[FilePersistence] = None,
        components: Optional[List[DiagramComponent]] = None,
    ):
        self.library = library
        self.canvas = canvas
        self.show_attachment_points = show_attachment_points
        self.persistence = persistence or FilePersistence()
        self.components: List[DiagramComponent] = list(components or [])
        self.selection_id: Optional[str] = None
        self.last_edit: Optional[EditResult] = None
        self.last_result = CompileResult()
        self.compile()

    @classmethod
    def from_config(
        cls,
        config: ProjectConfig,
        library: Optional[ShapeLibrary] = None,
    ) -> 'DiagramSession':
        """Session using the configured canvas, anchor display and storage.

        Args:
            config: Project configuration
            library: Already loaded shape library (default: loaded from
                the configured library directory)

        Raises:
            ShapeLibraryError: If the library has to be loaded and cannot be
        """
        if library is None:
            library = ShapeLibrary.from_directory(
                config.library.directory or ".", config.library.manifest,
            )
        return cls(
            library,
            canvas=config.canvas.to_canvas(),
            show_attachment_points=config.display.show_attachment_points,
            persistence=FilePersistence(config.storage.directory or "."),
        )

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    @property
    def markup(self) -> str:
        return self.last_result.markup

    @property
    def selected(self) -> Optional[DiagramComponent]:
        return composition.find_component(self.components, self.selection_id)

    @property
    def cut_root(self) -> Optional[DiagramComponent]:
        return composition.find_cut_root(self.components)

    @property
    def diagnostics(self) -> List[Diagnostic]:
        """Diagnostics of the last edit followed by those of the last compile."""
        edit = self.last_edit.diagnostics if self.last_edit else []
        return [*edit, *self.last_result.diagnostics]

    def compile(self) -> CompileResult:
        self.last_result = compile_diagram(
            self.components, self.canvas, self.library, self.show_attachment_points,
        )
        self.components = self.last_result.components
        return self.last_result

    def _apply(self, result: EditResult) -> EditResult:
        self.last_edit = result
        if result.ok:
            self.components = result.components
            self.compile()
        return result

    def select(self, component_id: Optional[str]) -> bool:
        """Select a component, or clear the selection with None."""
        if component_id is not None and composition.find_component(self.components, component_id) is None:
            logger.warning("Cannot select unknown component %s", component_id)
            return False
        self.selection_id = component_id
        return True

    def set_canvas(self, canvas: CanvasSize) -> CompileResult:
        self.canvas = canvas
        return self.compile()

    def set_show_attachment_points(self, visible: bool) -> CompileResult:
        self.show_attachment_points = visible
        return self.compile()

    def clear(self) -> None:
        self.components = []
        self.selection_id = None
        self.last_edit = None
        self.compile()

    def available_positions(self, component_id: Optional[str] = None) -> List[str]:
        """Placement choices offered for adding next to a component."""
        target = component_id if component_id is not None else self.selection_id
        return available_attachment_positions(composition.find_component(self.components, target))

    # ------------------------------------------------------------------
    # Editing
    # ------------------------------------------------------------------

    def add_3d_shape(
        self,
        shape_name: str,
        position: str = "top",
        attachment_point: Optional[str] = None,
    ) -> EditResult:
        """Add a solid next to the selection and select it."""
        result = self._apply(composition.add_3d_shape(
            self.components, self.library, shape_name, position,
            attachment_point, self.selection_id,
        ))
        if result.ok and result.component is not None:
            self.selection_id = result.component.id
        return result

    def add_2d_shape(self, shape_name: str, attach_to: Optional[str] = None) -> EditResult:
        return self._apply(composition.add_2d_shape(
            self.components, shape_name, attach_to, self.selection_id, self.library,
        ))

    def remove_3d_shape(self, component_id: Optional[str] = None) -> EditResult:
        """Remove a component (default: the selection) and its dependents."""
        target = component_id if component_id is not None else self.selection_id
        result = self._apply(composition.remove_3d_shape(self.components, target))
        if result.ok and self.selected is None:
            self.selection_id = None
        return result

    def remove_2d_shape(self, parent_id: str, index: int) -> EditResult:
        return self._apply(composition.remove_2d_shape(self.components, parent_id, index))

    def cut(self, component_id: Optional[str] = None) -> EditResult:
        target = component_id if component_id is not None else self.selection_id
        return self._apply(composition.cut_3d_shape(self.components, target))

    def cancel_cut(self) -> EditResult:
        cut_root = self.cut_root
        if cut_root is None:
            result = EditResult(list(self.components))
            self.last_edit = result
            return result
        return self._apply(composition.cancel_cut(self.components, cut_root.id))

    def paste(
        self,
        position: str = "top",
        attachment_point: Optional[str] = None,
        target_id: Optional[str] = None,
    ) -> EditResult:
        """Paste the cut subtree onto a target (default: the selection)."""
        cut_root = self.cut_root
        target = target_id if target_id is not None else self.selection_id
        return self._apply(composition.paste_3d_shape(
            self.components,
            cut_root.id if cut_root is not None else None,
            target,
            position,
            attachment_point,
        ))

    # ------------------------------------------------------------------
    # Persistence and output
    # ------------------------------------------------------------------

    def save(self, key: str) -> bool:
        return self.persistence.save(key, serialize_components(self.components))

    def load(self, key: str) -> CompileResult:
        """Replace the diagram with a stored one.

        Raises:
            PersistenceError: If the diagram cannot be read
            DiagramLoadError: If the stored text is not a valid diagram;
                the session is left untouched
        """
        components = deserialize_components(self.persistence.load(key))
        self.components = components
        self.selection_id = None
        self.last_edit = None
        logger.info("Loaded diagram %r with %d components", key, len(components))
        return self.compile()

    def to_svg(self) -> str:
        """Current diagram as a standalone SVG document."""
        return render_document(self.markup, self.canvas)
