"""Diagram data model: shapes, anchors, components, placement directives."""

from iso_diagram.model.position import (
    CENTER,
    CONTACT_ANCHORS,
    FACES,
    NONE_ATTACHMENT,
    Position,
    resolve_position,
)
from iso_diagram.model.types import (
    Attached2DShape,
    AttachmentPoint,
    CanvasSize,
    DiagramComponent,
    Point,
    ShapeDefinition,
    ShapeKind,
)

__all__ = [
    "CENTER",
    "CONTACT_ANCHORS",
    "FACES",
    "NONE_ATTACHMENT",
    "Position",
    "resolve_position",
    "Attached2DShape",
    "AttachmentPoint",
    "CanvasSize",
    "DiagramComponent",
    "Point",
    "ShapeDefinition",
    "ShapeKind",
]
