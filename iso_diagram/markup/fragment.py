"""
Minimal document-fragment interface over xml.etree.ElementTree.

The compositing code only needs to parse shape markup, find elements by id,
read and write attributes, re-parent children and serialize back to text.
MarkupFragment wraps an ElementTree element with exactly those operations.
"""

import logging
import xml.etree.ElementTree as ET
from typing import Iterator, Optional

logger = logging.getLogger(__name__)

SVG_NS = "http://www.w3.org/2000/svg"
XLINK_NS = "http://www.w3.org/1999/xlink"

ET.register_namespace("", SVG_NS)
ET.register_namespace("xlink", XLINK_NS)


class MarkupParseError(Exception):
    """Shape markup is not well-formed SVG."""


def local_name(tag: str) -> str:
    """Tag name without its `{namespace}` qualifier."""
    return tag.rsplit('}', 1)[-1] if isinstance(tag, str) else ""


def format_number(value: float) -> str:
    """Shortest fixed-point text for an SVG attribute value."""
    text = f"{float(value):.6f}".rstrip('0').rstrip('.')
    return "0" if text in ("-0", "") else text


def translate(x: float, y: float) -> str:
    """SVG `translate(x, y)` transform text."""
    return f"translate({format_number(x)}, {format_number(y)})"


def _qualify(element: ET.Element) -> None:
    """Put unqualified tags of a namespace-less document into the SVG namespace."""
    for node in element.iter():
        if isinstance(node.tag, str) and not node.tag.startswith('{'):
            node.tag = f"{{{SVG_NS}}}{node.tag}"


class MarkupFragment:
    """A parsed SVG element tree."""

    def __init__(self, root: ET.Element):
        self.root = root

    @classmethod
    def parse(cls, markup: str) -> 'MarkupFragment':
        """Parse SVG source text.

        Raises:
            MarkupParseError: if the text is not XML or its root is not <svg>
        """
        try:
            root = ET.fromstring(markup.strip())
        except ET.ParseError as exc:
            raise MarkupParseError(f"Invalid SVG markup: {exc}") from exc

        if local_name(root.tag) != "svg":
            raise MarkupParseError(
                f"Expected <svg> root element, got <{local_name(root.tag)}>"
            )
        _qualify(root)
        return cls(root)

    @classmethod
    def group(cls, element_id: Optional[str] = None) -> 'MarkupFragment':
        """An empty <g> element, optionally with an id."""
        root = ET.Element(f"{{{SVG_NS}}}g")
        if element_id is not None:
            root.set("id", element_id)
        return cls(root)

    def to_group(self, element_id: Optional[str] = None) -> 'MarkupFragment':
        """Move this element's children into a new <g>.

        The <svg> wrapper of a library shape is dropped so the shape can be
        positioned with a transform on the group.
        """
        group = MarkupFragment.group(element_id)
        for child in list(self.root):
            self.root.remove(child)
            group.root.append(child)
        return group

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def iter_elements(self, tag: Optional[str] = None) -> Iterator[ET.Element]:
        """Descendants (and self) in document order, optionally by local tag name."""
        for element in self.root.iter():
            if tag is None or local_name(element.tag) == tag:
                yield element

    def find_by_id(self, element_id: str) -> Optional[ET.Element]:
        for element in self.root.iter():
            if element.get("id") == element_id:
                return element
        return None

    # ------------------------------------------------------------------
    # Attributes and structure
    # ------------------------------------------------------------------

    def get_attribute(self, name: str, element: Optional[ET.Element] = None) -> Optional[str]:
        return (self.root if element is None else element).get(name)

    def set_attribute(self, name: str, value: str, element: Optional[ET.Element] = None) -> None:
        (self.root if element is None else element).set(name, value)

    def remove_attribute(self, name: str, element: Optional[ET.Element] = None) -> None:
        (self.root if element is None else element).attrib.pop(name, None)

    def append_child(self, child: 'MarkupFragment') -> None:
        self.root.append(child.root)

    def serialize(self) -> str:
        return ET.tostring(self.root, encoding="unicode")

    def __str__(self) -> str:
        return self.serialize()
