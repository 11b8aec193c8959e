"""Shape library."""

from iso_diagram.library.shape_library import (
    DEFAULT_MANIFEST,
    ShapeLibrary,
    ShapeLibraryError,
)

__all__ = [
    "DEFAULT_MANIFEST",
    "ShapeLibrary",
    "ShapeLibraryError",
]
