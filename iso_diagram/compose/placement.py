"""
Placement solver: absolute canvas position of one component.

A component hangs off its reference component (`relative_to_id`) at a
position token. The reference's anchor named by the full token must
coincide with the new component's diagonally opposite contact anchor:

    result = reference.absolute_position + |reference anchor| - |contact anchor|

The reference must already be resolved; the compiler guarantees this by
processing the component list in order.
"""

import logging
from typing import List, Optional, Sequence

from iso_diagram import diagnostics as diag
from iso_diagram.diagnostics import Diagnostic, DiagnosticSeverity
from iso_diagram.markup.attachment import normalized_offset
from iso_diagram.model.types import AttachmentPoint, CanvasSize, DiagramComponent, Point

logger = logging.getLogger(__name__)


def _find_reference(
    processed: Sequence[DiagramComponent],
    reference_id: str,
) -> Optional[DiagramComponent]:
    for candidate in processed:
        if candidate.id == reference_id:
            return candidate
    return None


def _anchor(
    component: DiagramComponent,
    name: str,
    diagnostics: List[Diagnostic],
) -> Optional[AttachmentPoint]:
    point = component.attachment_point(name)
    if point is None:
        diag.report(
            diagnostics, diag.ATTACHMENT_POINT_NOT_FOUND,
            f"Attachment point {name!r} not found on {component.id} ({component.shape}), using origin",
            component_id=component.id, log=logger,
        )
    return point


def solve_placement(
    component: DiagramComponent,
    processed: Sequence[DiagramComponent],
    canvas: CanvasSize,
    diagnostics: Optional[List[Diagnostic]] = None,
) -> Point:
    """Compute the absolute position of `component`.

    Args:
        component: Component with fresh attachment points
        processed: Components already placed in this compile pass
        canvas: Canvas dimensions
        diagnostics: List to append diagnostics to

    Returns:
        Absolute position; canvas centre for the root and for every case
        where the reference cannot be resolved
    """
    if diagnostics is None:
        diagnostics = []

    if component.is_root:
        return canvas.center

    reference = _find_reference(processed, component.relative_to_id)
    if reference is None:
        diag.report(
            diagnostics, diag.REFERENCE_NOT_FOUND,
            f"Reference {component.relative_to_id} of {component.id} is not placed yet, "
            f"falling back to canvas centre",
            component_id=component.id, severity=DiagnosticSeverity.ERROR, log=logger,
        )
        return canvas.center

    position = component.placement
    if position.contact_anchor is None:
        diag.report(
            diagnostics, diag.UNKNOWN_POSITION,
            f"Cannot attach {component.id} at position {component.position!r}, "
            f"falling back to canvas centre",
            component_id=component.id, log=logger,
        )
        return canvas.center

    reference_anchor = _anchor(reference, position.reference_anchor, diagnostics)
    contact_anchor = _anchor(component, position.contact_anchor, diagnostics)

    dx, dy = normalized_offset(reference_anchor, contact_anchor)
    result = Point(
        float(reference.absolute_position.x + dx),
        float(reference.absolute_position.y + dy),
    )
    logger.debug(
        "Placed %s at (%.2f, %.2f) via %s -> %s of %s",
        component.id, result.x, result.y,
        position.contact_anchor, position.reference_anchor, reference.id,
    )
    return result
