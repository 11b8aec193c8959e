"""
Shape library: named shape definitions looked up by the editor and compiler.

The library is read-only to the compositing core. It can be built from
ShapeDefinition objects directly or loaded from a local directory holding
SVG files and a JSON manifest:

    [
        {"name": "microservice", "type": "3D", "svgFile": "cubical-base.svg"},
        {"name": "process", "type": "2D", "attachTo": "top", "svgFile": "process2D.svg"}
    ]

An entry may carry its markup inline under "svgContent" instead of "svgFile".
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, Iterable, Iterator, List, Optional, Union

from iso_diagram.model.types import ShapeDefinition, ShapeKind

logger = logging.getLogger(__name__)

DEFAULT_MANIFEST = "shapes.json"


class ShapeLibraryError(Exception):
    """Shape library manifest missing or unreadable."""


class ShapeLibrary:
    """Lookup table of shape definitions by unique name."""

    def __init__(self, definitions: Iterable[ShapeDefinition] = ()):
        self._shapes: Dict[str, ShapeDefinition] = {}
        for definition in definitions:
            self.register(definition)

    def register(self, definition: ShapeDefinition) -> None:
        if definition.name in self._shapes:
            logger.warning("Shape %r defined twice, keeping the last definition", definition.name)
        self._shapes[definition.name] = definition

    def get(self, name: str) -> Optional[ShapeDefinition]:
        return self._shapes.get(name)

    def names(self) -> List[str]:
        return list(self._shapes)

    def solid_shapes(self) -> List[ShapeDefinition]:
        return [s for s in self._shapes.values() if s.is_solid]

    def flat_shapes(self) -> List[ShapeDefinition]:
        return [s for s in self._shapes.values() if s.is_flat]

    def __contains__(self, name: object) -> bool:
        return name in self._shapes

    def __iter__(self) -> Iterator[ShapeDefinition]:
        return iter(self._shapes.values())

    def __len__(self) -> int:
        return len(self._shapes)

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    @classmethod
    def from_directory(
        cls,
        directory: Union[str, Path],
        manifest: str = DEFAULT_MANIFEST,
    ) -> 'ShapeLibrary':
        """Load a library from a directory with a JSON manifest.

        Entries with an unknown type or an unreadable SVG file are skipped
        with an error in the log; the rest of the library still loads.

        Args:
            directory: Directory containing the manifest and SVG files
            manifest: Manifest file name inside `directory`

        Returns:
            ShapeLibrary instance

        Raises:
            ShapeLibraryError: if the manifest is missing or not a JSON list
        """
        directory = Path(directory)
        manifest_path = directory / manifest
        try:
            with open(manifest_path, 'r', encoding='utf-8') as f:
                entries = json.load(f)
        except FileNotFoundError:
            raise ShapeLibraryError(f"Shape manifest not found: {manifest_path}")
        except (OSError, json.JSONDecodeError) as exc:
            raise ShapeLibraryError(f"Cannot read shape manifest {manifest_path}: {exc}") from exc

        if not isinstance(entries, list):
            raise ShapeLibraryError(f"Shape manifest {manifest_path} must contain a JSON list")

        library = cls()
        for entry in entries:
            definition = _definition_from_entry(entry, directory)
            if definition is not None:
                library.register(definition)

        logger.info("Loaded %d shapes from %s", len(library), manifest_path)
        return library


def _definition_from_entry(entry: Any, directory: Path) -> Optional[ShapeDefinition]:
    if not isinstance(entry, dict) or not entry.get("name"):
        logger.error("Skipping manifest entry without a name: %r", entry)
        return None

    name = entry["name"]
    try:
        kind = ShapeKind(entry.get("type", ShapeKind.SOLID.value))
    except ValueError:
        logger.error("Shape %r has unknown type %r", name, entry.get("type"))
        return None

    svg_file = entry.get("svgFile")
    markup = entry.get("svgContent")
    if markup is None:
        if not svg_file:
            logger.error("Shape %r has neither svgFile nor svgContent", name)
            return None
        try:
            markup = (directory / svg_file).read_text(encoding='utf-8')
        except OSError as exc:
            logger.error("Cannot read SVG for shape %r: %s", name, exc)
            return None

    return ShapeDefinition(
        name=name,
        kind=kind,
        markup=markup,
        default_attach_face=entry.get("attachTo") or None,
        svg_file=svg_file,
    )
