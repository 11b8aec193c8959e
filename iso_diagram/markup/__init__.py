"""SVG markup handling: fragment parsing and attachment point extraction."""

from iso_diagram.markup.attachment import (
    ATTACH_PREFIX,
    FLAT_ANCHOR,
    attachment_points_from_markup,
    available_attachment_positions,
    closest_attachment_position,
    extract_attachment_points,
    normalized_offset,
    set_attachment_points_visible,
)
from iso_diagram.markup.fragment import SVG_NS, MarkupFragment, MarkupParseError

__all__ = [
    "ATTACH_PREFIX",
    "FLAT_ANCHOR",
    "attachment_points_from_markup",
    "available_attachment_positions",
    "closest_attachment_position",
    "extract_attachment_points",
    "normalized_offset",
    "set_attachment_points_visible",
    "SVG_NS",
    "MarkupFragment",
    "MarkupParseError",
]
