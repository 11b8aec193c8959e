"""
Composition editor: operations over the component list.

Every operation is a pure transformation `(components, params) -> EditResult`.
The input list and its components are never modified; changed components are
copied with `dataclasses.replace`. Invalid input (no selection, unknown id,
index out of range, cutting the root, ...) leaves the list unchanged and is
reported through `EditResult.diagnostics`.

Tree invariants kept by construction:
  - the first component is the root: `relative_to_id is None`, "center";
  - every `relative_to_id` references a component of the same list;
  - removal and cut act on whole dependent subtrees;
  - a component never precedes the component it depends on.
"""

import logging
import uuid
from collections import defaultdict
from dataclasses import dataclass, field, replace
from typing import Dict, List, Optional, Sequence, Set

from iso_diagram import diagnostics as diag
from iso_diagram.diagnostics import Diagnostic, DiagnosticSeverity
from iso_diagram.library.shape_library import ShapeLibrary
from iso_diagram.markup.attachment import attachment_points_from_markup
from iso_diagram.markup.fragment import MarkupParseError
from iso_diagram.model.position import CENTER, Position, resolve_position
from iso_diagram.model.types import Attached2DShape, DiagramComponent

logger = logging.getLogger(__name__)


@dataclass
class EditResult:
    """Outcome of an editor operation.

    Attributes:
        components: The new component list (the input list when rejected)
        diagnostics: Why the operation was rejected, empty on success
        component: The added or pasted component, when there is one
    """
    components: List[DiagramComponent]
    diagnostics: List[Diagnostic] = field(default_factory=list)
    component: Optional[DiagramComponent] = None

    @property
    def ok(self) -> bool:
        return not self.diagnostics

    @property
    def message(self) -> str:
        """User-facing text of the first diagnostic."""
        return self.diagnostics[0].message if self.diagnostics else ""


def _rejected(
    components: Sequence[DiagramComponent],
    code: str,
    message: str,
    component_id: Optional[str] = None,
    severity: DiagnosticSeverity = DiagnosticSeverity.WARNING,
) -> EditResult:
    diagnostics: List[Diagnostic] = []
    diag.report(diagnostics, code, message, component_id, severity, log=logger)
    return EditResult(list(components), diagnostics)


def new_component_id() -> str:
    return f"shape-{uuid.uuid4().hex}"


# ---------------------------------------------------------------------------
# Queries
# ---------------------------------------------------------------------------

def find_component(
    components: Sequence[DiagramComponent],
    component_id: Optional[str],
) -> Optional[DiagramComponent]:
    if component_id is None:
        return None
    for component in components:
        if component.id == component_id:
            return component
    return None


def is_root(components: Sequence[DiagramComponent], component_id: str) -> bool:
    component = find_component(components, component_id)
    return component is not None and component.relative_to_id is None


def find_cut_root(components: Sequence[DiagramComponent]) -> Optional[DiagramComponent]:
    """First cut component in list order, i.e. the root of the cut subtree."""
    for component in components:
        if component.cut:
            return component
    return None


def dependent_ids(components: Sequence[DiagramComponent], component_id: str) -> Set[str]:
    """`component_id` plus every component whose reference chain reaches it."""
    children: Dict[str, List[str]] = defaultdict(list)
    for component in components:
        if component.relative_to_id is not None:
            children[component.relative_to_id].append(component.id)

    closure: Set[str] = set()
    pending = [component_id]
    while pending:
        current = pending.pop()
        if current in closure:
            continue
        closure.add(current)
        pending.extend(children.get(current, ()))
    return closure


# ---------------------------------------------------------------------------
# Add / remove
# ---------------------------------------------------------------------------

def add_3d_shape(
    components: Sequence[DiagramComponent],
    library: ShapeLibrary,
    shape_name: str,
    position: str,
    attachment_point: Optional[str] = None,
    selection_id: Optional[str] = None,
) -> EditResult:
    """Append a new solid component hanging off the selected one.

    The first component of an empty diagram becomes the root at "center"
    whatever position was requested. Otherwise a selection is required and
    the new component's position is `attachment_point` when given (and not
    "none"), else `position`.
    """
    placement = CENTER
    relative_to_id = None
    if components:
        if selection_id is None:
            return _rejected(components, diag.NO_SELECTION,
                             "Please select a 3D shape before adding a new one.")
        if find_component(components, selection_id) is None:
            return _rejected(components, diag.COMPONENT_NOT_FOUND,
                             f"Selected component {selection_id} does not exist.",
                             selection_id)
        placement = resolve_position(position, attachment_point)
        if Position.parse(placement).is_center:
            return _rejected(components, diag.CENTER_NOT_ROOT,
                             "Only the first 3D shape can be placed at the center.",
                             selection_id)
        relative_to_id = selection_id

    shape = library.get(shape_name)
    if shape is None:
        return _rejected(components, diag.SHAPE_NOT_FOUND,
                         f"Shape {shape_name} not found in library.")
    if not shape.is_solid:
        return _rejected(components, diag.SHAPE_KIND_MISMATCH,
                         f"Shape {shape_name} is a 2D shape; attach it to a 3D shape instead.")

    try:
        attachment_points = attachment_points_from_markup(shape.markup)
    except MarkupParseError as exc:
        return _rejected(components, diag.MARKUP_PARSE_ERROR,
                         f"Shape {shape_name} has invalid markup: {exc}",
                         severity=DiagnosticSeverity.ERROR)

    component = DiagramComponent(
        id=new_component_id(),
        shape=shape_name,
        position=placement,
        relative_to_id=relative_to_id,
        attachment_points=attachment_points,
    )
    logger.info("Added %s (%s) at %s of %s", component.id, shape_name, placement, relative_to_id)
    return EditResult([*components, component], component=component)


def add_2d_shape(
    components: Sequence[DiagramComponent],
    shape_name: str,
    attach_to: Optional[str],
    selection_id: Optional[str],
    library: Optional[ShapeLibrary] = None,
) -> EditResult:
    """Attach a flat decoration to a face of the selected component.

    When a library is given the shape is checked to be a 2D shape, and a
    missing `attach_to` falls back to the shape's default attach face.
    """
    if selection_id is None:
        return _rejected(components, diag.NO_SELECTION,
                         "Please select a 3D shape to attach this 2D shape to.")
    selected = find_component(components, selection_id)
    if selected is None:
        return _rejected(components, diag.COMPONENT_NOT_FOUND,
                         f"Selected component {selection_id} does not exist.", selection_id)

    if library is not None:
        shape = library.get(shape_name)
        if shape is None:
            return _rejected(components, diag.SHAPE_NOT_FOUND,
                             f"Shape {shape_name} not found in library.", selection_id)
        if not shape.is_flat:
            return _rejected(components, diag.SHAPE_KIND_MISMATCH,
                             f"Shape {shape_name} is not a 2D shape.", selection_id)
        attach_to = attach_to or shape.default_attach_face

    if not attach_to:
        return _rejected(components, diag.UNKNOWN_POSITION,
                         f"No face given to attach {shape_name} to.", selection_id)

    updated = replace(
        selected,
        attached_2d_shapes=[*selected.attached_2d_shapes, Attached2DShape(shape_name, attach_to)],
    )
    return EditResult([updated if c.id == selection_id else c for c in components],
                      component=updated)


def remove_3d_shape(components: Sequence[DiagramComponent], component_id: str) -> EditResult:
    """Remove a component together with its whole dependent subtree."""
    if find_component(components, component_id) is None:
        return _rejected(components, diag.COMPONENT_NOT_FOUND,
                         f"Component {component_id} does not exist.", component_id)
    removed = dependent_ids(components, component_id)
    logger.info("Removing %s and %d dependent components", component_id, len(removed) - 1)
    return EditResult([c for c in components if c.id not in removed])


def remove_2d_shape(
    components: Sequence[DiagramComponent],
    parent_id: str,
    index: int,
) -> EditResult:
    """Remove one decoration of `parent_id` by its position in z-order."""
    parent = find_component(components, parent_id)
    if parent is None:
        return _rejected(components, diag.COMPONENT_NOT_FOUND,
                         f"Component {parent_id} does not exist.", parent_id)
    if not 0 <= index < len(parent.attached_2d_shapes):
        return _rejected(components, diag.INDEX_OUT_OF_RANGE,
                         f"Component {parent_id} has no 2D shape at index {index}.", parent_id)

    shapes = [s for i, s in enumerate(parent.attached_2d_shapes) if i != index]
    updated = replace(parent, attached_2d_shapes=shapes)
    return EditResult([updated if c.id == parent_id else c for c in components],
                      component=updated)


# ---------------------------------------------------------------------------
# Cut / paste
# ---------------------------------------------------------------------------

def _set_cut(
    components: Sequence[DiagramComponent],
    component_id: str,
    cut: bool,
) -> List[DiagramComponent]:
    members = dependent_ids(components, component_id)
    return [
        replace(c, cut=cut) if c.id in members and c.cut != cut else c
        for c in components
    ]


def cut_3d_shape(components: Sequence[DiagramComponent], component_id: str) -> EditResult:
    """Mark a component and its dependent subtree as cut.

    The root cannot be cut. A previously cut subtree is cancelled first so
    at most one cut subtree exists.
    """
    if find_component(components, component_id) is None:
        return _rejected(components, diag.COMPONENT_NOT_FOUND,
                         f"Component {component_id} does not exist.", component_id)
    if is_root(components, component_id):
        return _rejected(components, diag.CUT_ROOT,
                         "The first 3D shape cannot be cut.", component_id)

    updated = list(components)
    previous = find_cut_root(updated)
    if previous is not None:
        logger.info("Cancelling previous cut of %s", previous.id)
        updated = _set_cut(updated, previous.id, False)

    updated = _set_cut(updated, component_id, True)
    return EditResult(updated, component=find_component(updated, component_id))


def cancel_cut(components: Sequence[DiagramComponent], component_id: str) -> EditResult:
    """Clear the cut flag on a component's dependent subtree."""
    if find_component(components, component_id) is None:
        return _rejected(components, diag.COMPONENT_NOT_FOUND,
                         f"Component {component_id} does not exist.", component_id)
    return EditResult(_set_cut(components, component_id, False))


def paste_3d_shape(
    components: Sequence[DiagramComponent],
    cut_root_id: str,
    target_id: str,
    new_position: str,
    attachment_point: Optional[str] = None,
) -> EditResult:
    """Re-parent the cut subtree rooted at `cut_root_id` under `target_id`.

    Only the cut root's reference and position change; the rest of the
    subtree keeps its internal structure. The subtree is moved in the list
    to just after the last member of the target's own subtree, so no
    component precedes its reference.
    """
    cut_root = find_component(components, cut_root_id)
    if cut_root is None or not cut_root.cut:
        return _rejected(components, diag.NO_CUT_SUBTREE,
                         "There is no cut 3D shape to paste.", cut_root_id)
    if find_component(components, target_id) is None:
        return _rejected(components, diag.COMPONENT_NOT_FOUND,
                         f"Paste target {target_id} does not exist.", target_id)

    moving_ids = dependent_ids(components, cut_root_id)
    if target_id in moving_ids:
        return _rejected(components, diag.PASTE_INTO_CUT_SUBTREE,
                         "A cut 3D shape cannot be pasted onto itself or its dependents.",
                         target_id)

    placement = resolve_position(new_position, attachment_point)
    if Position.parse(placement).is_center:
        return _rejected(components, diag.CENTER_NOT_ROOT,
                         "A pasted 3D shape cannot be placed at the center.", cut_root_id)

    moving: List[DiagramComponent] = []
    staying: List[DiagramComponent] = []
    pasted: Optional[DiagramComponent] = None
    for component in components:
        if component.id not in moving_ids:
            staying.append(component)
        elif component.id == cut_root_id:
            pasted = replace(component, cut=False, relative_to_id=target_id, position=placement)
            moving.append(pasted)
        else:
            moving.append(replace(component, cut=False))

    target_subtree = dependent_ids(staying, target_id)
    insert_at = max(i for i, c in enumerate(staying) if c.id in target_subtree) + 1

    logger.info("Pasted %s (%d components) onto %s at %s",
                cut_root_id, len(moving), target_id, placement)
    return EditResult(staying[:insert_at] + moving + staying[insert_at:], component=pasted)
