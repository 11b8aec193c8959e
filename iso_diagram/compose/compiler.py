"""
Diagram compiler: one forward pass over the component list.

For each component, in list order:
  1. fetch its solid shape markup from the library (skip if absent);
  2. extract fresh attachment points;
  3. place it relative to the already-processed components;
  4. wrap the markup in <g id=component.id transform=translate(x, y)>;
  5. weld its flat decorations;
  6. show or hide the anchor markers;
  7. append the markup to the output and the updated component to the
     processed list.

List order respects dependency order, so a reference is always processed
before the components hanging off it. Input components are never mutated.
"""

import logging
from dataclasses import dataclass, field, replace
from typing import List, Optional, Sequence, Tuple

from iso_diagram import diagnostics as diag
from iso_diagram.compose.placement import solve_placement
from iso_diagram.compose.welder import weld_decorations
from iso_diagram.diagnostics import Diagnostic, DiagnosticSeverity
from iso_diagram.library.shape_library import ShapeLibrary
from iso_diagram.logging_config import log_timing
from iso_diagram.markup.attachment import extract_attachment_points, set_attachment_points_visible
from iso_diagram.markup.fragment import MarkupFragment, MarkupParseError, translate
from iso_diagram.model.types import CanvasSize, DiagramComponent

logger = logging.getLogger(__name__)


@dataclass
class CompileResult:
    """Output of a compile pass.

    Attributes:
        markup: Concatenated <g> fragments, one per placed component
        components: Input components in the same order, placed ones carrying
            fresh attachment points and absolute positions
        diagnostics: Problems met along the way
    """
    markup: str = ""
    components: List[DiagramComponent] = field(default_factory=list)
    diagnostics: List[Diagnostic] = field(default_factory=list)
    placed_ids: List[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not diag.has_errors(self.diagnostics)

    def component(self, component_id: str) -> Optional[DiagramComponent]:
        for component in self.components:
            if component.id == component_id:
                return component
        return None


def compile_component(
    component: DiagramComponent,
    processed: Sequence[DiagramComponent],
    canvas: CanvasSize,
    library: ShapeLibrary,
    show_attachment_points: bool,
    diagnostics: List[Diagnostic],
) -> Optional[Tuple[DiagramComponent, MarkupFragment]]:
    """Compile one component.

    Returns:
        (updated_component, group_fragment), or None when the component
        cannot be placed and must be kept as is
    """
    shape = library.get(component.shape)
    if shape is None:
        diag.report(
            diagnostics, diag.SHAPE_NOT_FOUND,
            f"3D shape {component.shape!r} not found in library",
            component_id=component.id, log=logger,
        )
        return None
    if not shape.is_solid:
        diag.report(
            diagnostics, diag.SHAPE_KIND_MISMATCH,
            f"Shape {component.shape!r} is a 2D shape and cannot be placed on its own",
            component_id=component.id, log=logger,
        )
        return None

    try:
        fragment = MarkupFragment.parse(shape.markup)
    except MarkupParseError as exc:
        diag.report(
            diagnostics, diag.MARKUP_PARSE_ERROR,
            f"3D shape {component.shape!r}: {exc}",
            component_id=component.id, severity=DiagnosticSeverity.ERROR, log=logger,
        )
        return None

    updated = replace(component, attachment_points=extract_attachment_points(fragment))
    position = solve_placement(updated, processed, canvas, diagnostics)
    updated = replace(updated, absolute_position=position)

    group = fragment.to_group(component.id)
    group.set_attribute("transform", translate(position.x, position.y))
    weld_decorations(updated, group, library, diagnostics)
    set_attachment_points_visible(group, show_attachment_points)
    return updated, group


def compile_diagram(
    components: Sequence[DiagramComponent],
    canvas: CanvasSize,
    library: ShapeLibrary,
    show_attachment_points: bool = False,
) -> CompileResult:
    """Compile the whole component list into one SVG fragment.

    Args:
        components: Components in dependency-respecting list order
        canvas: Canvas dimensions (the root sits at its centre)
        library: Shape library
        show_attachment_points: Keep anchor circles visible in the output

    Returns:
        CompileResult; never raises for missing shapes, references or anchors
    """
    result = CompileResult()
    parts: List[str] = []
    placed: List[DiagramComponent] = []

    with log_timing(logger, "Compiling diagram", components=len(components)) as timing:
        for component in components:
            compiled = compile_component(
                component, placed, canvas, library,
                show_attachment_points, result.diagnostics,
            )
            if compiled is None:
                result.components.append(component)
                continue
            updated, group = compiled
            parts.append(group.serialize())
            placed.append(updated)
            result.components.append(updated)
            result.placed_ids.append(updated.id)

        result.markup = "".join(parts)
        timing["placed"] = len(result.placed_ids)
        timing["diagnostics"] = len(result.diagnostics)

    return result
