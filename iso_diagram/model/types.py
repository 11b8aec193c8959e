"""
Diagram data model.

ShapeDefinition is library-owned and immutable. DiagramComponent is the
positioned instance; its `attachment_points` and `absolute_position` are
derived data refreshed by every compile pass. Editor and compiler never
mutate a component in place: they build changed copies with
`dataclasses.replace` and return a new list.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional

from iso_diagram.model.position import Position


class ShapeKind(Enum):
    """Flat decorations vs. solid (isometric) shapes."""
    FLAT = "2D"
    SOLID = "3D"


@dataclass(frozen=True)
class Point:
    x: float
    y: float


@dataclass(frozen=True)
class CanvasSize:
    width: float
    height: float

    @property
    def center(self) -> Point:
        return Point(self.width / 2, self.height / 2)


@dataclass(frozen=True)
class ShapeDefinition:
    """A named entry of the shape library.

    Attributes:
        name: Unique library key
        kind: FLAT or SOLID
        markup: Raw SVG source with `attach-*` anchor circles
        default_attach_face: Face of a solid a flat shape attaches to by default
        svg_file: File the markup was read from, if any
    """
    name: str
    kind: ShapeKind
    markup: str
    default_attach_face: Optional[str] = None
    svg_file: Optional[str] = None

    @property
    def is_flat(self) -> bool:
        return self.kind is ShapeKind.FLAT

    @property
    def is_solid(self) -> bool:
        return self.kind is ShapeKind.SOLID


@dataclass(frozen=True)
class AttachmentPoint:
    """Named anchor in a shape's local markup coordinates (prefix stripped)."""
    name: str
    x: float
    y: float


@dataclass(frozen=True)
class Attached2DShape:
    """A flat decoration welded onto a face of its owning component."""
    name: str
    attached_to: str


@dataclass
class DiagramComponent:
    """A positioned solid shape instance.

    `relative_to_id` is None only for the tree root, whose position is
    "center". `cut` marks the component as part of the pending clipboard
    subtree.
    """
    id: str
    shape: str
    position: str
    relative_to_id: Optional[str] = None
    attached_2d_shapes: List[Attached2DShape] = field(default_factory=list)
    attachment_points: List[AttachmentPoint] = field(default_factory=list)
    absolute_position: Point = field(default_factory=lambda: Point(0.0, 0.0))
    cut: bool = False

    @property
    def placement(self) -> Position:
        return Position.parse(self.position)

    @property
    def is_root(self) -> bool:
        return self.relative_to_id is None

    def attachment_point(self, name: str) -> Optional[AttachmentPoint]:
        """Cached anchor by name, or None."""
        for point in self.attachment_points:
            if point.name == name:
                return point
        return None
