"""
Attachment points: named anchor circles inside shape markup.

Shape authors mark anchors with `<circle id="attach-<name>" cx=".." cy=".."/>`.
Contains:
- extract_attachment_points   - anchors of a parsed fragment, document order
- attachment_points_from_markup - same, from raw markup text
- set_attachment_points_visible - show/hide anchor markers in compiled output
- normalized_offset            - the single normalization used for anchor math
- available_attachment_positions / closest_attachment_position - helpers a
  shell uses to offer or pick a placement on a component
"""

import logging
from typing import List, Optional, Sequence, Tuple

import numpy as np

from iso_diagram.markup.fragment import MarkupFragment
from iso_diagram.model.position import NONE_ATTACHMENT, Position
from iso_diagram.model.types import AttachmentPoint, DiagramComponent, Point, ShapeKind

logger = logging.getLogger(__name__)

ATTACH_PREFIX = "attach-"
FLAT_ANCHOR = "point"


def extract_attachment_points(
    fragment: MarkupFragment,
    kind: ShapeKind = ShapeKind.SOLID,
) -> List[AttachmentPoint]:
    """Collect `attach-*` circles of a fragment.

    Circles missing `cx`/`cy`, or with non-numeric values, are skipped.

    Args:
        fragment: Parsed shape markup
        kind: Shape kind; flat shapes are expected to carry exactly one anchor

    Returns:
        AttachmentPoint list in document order, names without the prefix
    """
    points: List[AttachmentPoint] = []
    for circle in fragment.iter_elements("circle"):
        element_id = circle.get("id") or ""
        if not element_id.startswith(ATTACH_PREFIX):
            continue
        cx, cy = circle.get("cx"), circle.get("cy")
        if cx is None or cy is None:
            logger.debug("Anchor %s has no cx/cy, skipped", element_id)
            continue
        try:
            points.append(AttachmentPoint(element_id[len(ATTACH_PREFIX):], float(cx), float(cy)))
        except ValueError:
            logger.warning("Anchor %s has non-numeric coordinates (%r, %r)", element_id, cx, cy)

    if kind is ShapeKind.FLAT and len(points) != 1:
        logger.warning("Flat shape has %d anchors, expected exactly one", len(points))
    return points


def attachment_points_from_markup(
    markup: str,
    kind: ShapeKind = ShapeKind.SOLID,
) -> List[AttachmentPoint]:
    """Parse markup and extract its anchors.

    Raises:
        MarkupParseError: if the markup is not valid SVG
    """
    return extract_attachment_points(MarkupFragment.parse(markup), kind)


def set_attachment_points_visible(fragment: MarkupFragment, visible: bool) -> None:
    """Toggle `display="none"` on every anchor circle of the fragment."""
    for circle in fragment.iter_elements("circle"):
        if not (circle.get("id") or "").startswith(ATTACH_PREFIX):
            continue
        if visible:
            fragment.remove_attribute("display", circle)
        else:
            fragment.set_attribute("display", "none", circle)


def find_point(points: Sequence[AttachmentPoint], name: str) -> Optional[AttachmentPoint]:
    for point in points:
        if point.name == name:
            return point
    return None


def normalized_offset(
    target: Optional[AttachmentPoint],
    source: Optional[AttachmentPoint],
) -> np.ndarray:
    """|target| - |source|, componentwise.

    Shape authors use either sign convention for local coordinates, so both
    anchors are taken by magnitude before differencing. A missing anchor
    counts as the origin.
    """
    t = np.abs([target.x, target.y]) if target else np.zeros(2)
    s = np.abs([source.x, source.y]) if source else np.zeros(2)
    return t - s


# ---------------------------------------------------------------------------
# Shell helpers
# ---------------------------------------------------------------------------

def available_attachment_positions(component: Optional[DiagramComponent]) -> List[str]:
    """Placement tokens offered for attaching onto `component`.

    Always starts with "none". The rest are the component's anchor names cut
    to their first two segments ("front-left-2" -> "front-left", "top-1"
    stays), distinct and in document order.
    """
    if component is None or not component.attachment_points:
        return [NONE_ATTACHMENT]
    names = dict.fromkeys(
        "-".join(point.name.split("-")[:2]) for point in component.attachment_points
    )
    return [NONE_ATTACHMENT, *names]


def closest_attachment_position(
    component: DiagramComponent,
    click: Point,
) -> Tuple[str, str]:
    """Nearest usable anchor of `component` to a point in its local space.

    Bottom and back anchors are ignored since nothing is attached there from
    the front view.

    Returns:
        (position, attachment_point) where attachment_point is the full
        face-plus-anchor token or "none" when the anchor is a plain face
    """
    candidates = [
        p for p in component.attachment_points
        if not p.name.startswith("bottom") and not p.name.startswith("back")
    ]
    if not candidates:
        return "top", NONE_ATTACHMENT

    coords = np.array([[p.x, p.y] for p in candidates], dtype=np.float64)
    distances = np.hypot(coords[:, 0] - click.x, coords[:, 1] - click.y)
    closest = candidates[int(np.argmin(distances))]

    position = Position.parse(closest.name)
    if position.anchor:
        return position.face, position.token
    return position.face, NONE_ATTACHMENT
