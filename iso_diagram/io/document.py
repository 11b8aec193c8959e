"""
Standalone SVG document output.

The compiler produces a concatenation of <g> fragments. This module wraps
them in an <svg> root sized to the canvas (width, height and
viewBox="0 0 W H") using svgwrite, and writes the result to disk.
"""

import copy
import logging
import xml.etree.ElementTree as ET
from pathlib import Path
from typing import List, Optional, Union

import svgwrite

from iso_diagram.markup.fragment import (
    SVG_NS,
    XLINK_NS,
    MarkupFragment,
    format_number,
    local_name,
)
from iso_diagram.model.types import CanvasSize

logger = logging.getLogger(__name__)

_XML_NS = "http://www.w3.org/XML/1998/namespace"


def _plain_attribute(name: str) -> Optional[str]:
    """Prefixed form of a qualified attribute name, None for foreign namespaces."""
    if not name.startswith("{"):
        return name
    namespace, _, local = name[1:].partition("}")
    if namespace == XLINK_NS:
        return f"xlink:{local}"
    if namespace == _XML_NS:
        return f"xml:{local}"
    if namespace == SVG_NS:
        return local
    return None


def _strip_namespaces(element: ET.Element) -> ET.Element:
    """Copy of `element` with unqualified tags and prefixed attribute names.

    svgwrite declares xmlns and xmlns:xlink as plain attributes on its root,
    so appended children must not carry their own namespace qualifiers.
    Editor attributes from other namespaces (inkscape:, sodipodi:) are
    dropped since the document declares no prefix for them.
    """
    plain = copy.deepcopy(element)
    for node in plain.iter():
        if isinstance(node.tag, str):
            node.tag = local_name(node.tag)
        for name in [n for n in node.attrib if n.startswith("{")]:
            value = node.attrib.pop(name)
            plain_name = _plain_attribute(name)
            if plain_name is not None:
                node.attrib[plain_name] = value
    return plain


def parse_compiled_markup(markup: str) -> List[ET.Element]:
    """Top-level elements of a compiled fragment string."""
    if not markup:
        return []
    wrapper = MarkupFragment.parse(f'<svg xmlns="{SVG_NS}">{markup}</svg>')
    return list(wrapper.root)


class DiagramDrawing(svgwrite.Drawing):
    """svgwrite Drawing that also emits pre-built ElementTree children."""

    def __init__(self, filename: str, canvas: CanvasSize, markup: str = "", **extra):
        width = format_number(canvas.width)
        height = format_number(canvas.height)
        super().__init__(
            filename,
            size=(width, height),
            viewBox=f"0 0 {width} {height}",
            debug=False,
            **extra,
        )
        self.canvas = canvas
        self._compiled = [_strip_namespaces(e) for e in parse_compiled_markup(markup)]

    def get_xml(self) -> ET.Element:
        xml = super().get_xml()
        for element in self._compiled:
            xml.append(copy.deepcopy(element))
        return xml


def build_document(markup: str, canvas: CanvasSize, filename: str = "diagram.svg") -> DiagramDrawing:
    """Wrap compiled markup in a canvas-sized <svg> document."""
    return DiagramDrawing(filename, canvas, markup)


def render_document(markup: str, canvas: CanvasSize) -> str:
    """Standalone SVG document text for compiled markup."""
    return build_document(markup, canvas).tostring()


def write_svg(markup: str, canvas: CanvasSize, path: Union[str, Path]) -> Path:
    """Write compiled markup as a standalone SVG file.

    Args:
        markup: Output of the diagram compiler
        canvas: Canvas dimensions
        path: Output file path (parent directories are created)

    Returns:
        Path of the written file
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    dwg = build_document(markup, canvas, str(path))
    dwg.save()
    logger.info("SVG document saved: %s (%sx%s)",
                path, format_number(canvas.width), format_number(canvas.height))
    return path
