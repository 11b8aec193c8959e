"""
Decoration welder: fuse flat decorations onto the faces of a solid shape.

Each Attached2DShape becomes a <g id="<attachedTo>-<name>"> child of the
solid's group, translated so the decoration's single `attach-point` anchor
lands on the solid's anchor named by `attached_to`. Anchor coordinates are
normalized the same way the placement solver normalizes them.
"""

import logging
from typing import List, Optional

from iso_diagram import diagnostics as diag
from iso_diagram.diagnostics import Diagnostic, DiagnosticSeverity
from iso_diagram.library.shape_library import ShapeLibrary
from iso_diagram.markup.attachment import (
    FLAT_ANCHOR,
    extract_attachment_points,
    find_point,
    normalized_offset,
)
from iso_diagram.markup.fragment import MarkupFragment, MarkupParseError, translate
from iso_diagram.model.types import Attached2DShape, DiagramComponent, ShapeKind

logger = logging.getLogger(__name__)


def decoration_id(attached: Attached2DShape) -> str:
    return f"{attached.attached_to}-{attached.name}"


def weld_decoration(
    component: DiagramComponent,
    group: MarkupFragment,
    attached: Attached2DShape,
    library: ShapeLibrary,
    diagnostics: List[Diagnostic],
) -> Optional[MarkupFragment]:
    """Weld one decoration onto `group`.

    Returns:
        The appended decoration group, or None if it was skipped
    """
    shape = library.get(attached.name)
    if shape is None:
        diag.report(
            diagnostics, diag.SHAPE_NOT_FOUND,
            f"2D shape {attached.name!r} not found in library",
            component_id=component.id, log=logger,
        )
        return None
    if not shape.is_flat:
        diag.report(
            diagnostics, diag.SHAPE_KIND_MISMATCH,
            f"Shape {attached.name!r} is not a 2D shape and cannot be attached to a face",
            component_id=component.id, log=logger,
        )
        return None

    try:
        fragment = MarkupFragment.parse(shape.markup)
    except MarkupParseError as exc:
        diag.report(
            diagnostics, diag.MARKUP_PARSE_ERROR,
            f"2D shape {attached.name!r}: {exc}",
            component_id=component.id, severity=DiagnosticSeverity.ERROR, log=logger,
        )
        return None

    flat_anchor = find_point(extract_attachment_points(fragment, ShapeKind.FLAT), FLAT_ANCHOR)
    solid_anchor = component.attachment_point(attached.attached_to)
    if flat_anchor is None or solid_anchor is None:
        missing = f"attach-{FLAT_ANCHOR} on {attached.name!r}" if flat_anchor is None \
            else f"attach-{attached.attached_to} on {component.shape!r}"
        diag.report(
            diagnostics, diag.ATTACHMENT_POINT_NOT_FOUND,
            f"Skipping decoration {decoration_id(attached)}: {missing} not found",
            component_id=component.id, log=logger,
        )
        return None

    dx, dy = normalized_offset(solid_anchor, flat_anchor)
    decoration = fragment.to_group(decoration_id(attached))
    decoration.set_attribute("transform", translate(dx, dy))
    group.append_child(decoration)
    return decoration


def weld_decorations(
    component: DiagramComponent,
    group: MarkupFragment,
    library: ShapeLibrary,
    diagnostics: Optional[List[Diagnostic]] = None,
) -> int:
    """Weld every attached decoration of `component`, in z-order.

    Returns:
        Number of decorations welded
    """
    if diagnostics is None:
        diagnostics = []
    welded = 0
    for attached in component.attached_2d_shapes:
        if weld_decoration(component, group, attached, library, diagnostics) is not None:
            welded += 1
    return welded
