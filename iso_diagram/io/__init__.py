"""Diagram input/output: serialization, persistence and SVG document output."""

from iso_diagram.io.document import build_document, render_document, write_svg
from iso_diagram.io.persistence import (
    DiagramNotFoundError,
    FilePersistence,
    PersistenceError,
    read_diagram_file,
)
from iso_diagram.io.serialization import (
    DiagramLoadError,
    DiagramParseError,
    InvalidDiagramError,
    deserialize_components,
    serialize_components,
)

__all__ = [
    "build_document",
    "render_document",
    "write_svg",
    "DiagramNotFoundError",
    "FilePersistence",
    "PersistenceError",
    "read_diagram_file",
    "DiagramLoadError",
    "DiagramParseError",
    "InvalidDiagramError",
    "deserialize_components",
    "serialize_components",
]
