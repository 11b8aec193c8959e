"""
Filesystem persistence provider.

Stores serialized diagrams as `<key>.json` files in a base directory.
"""

import logging
import re
from pathlib import Path
from typing import List, Union

logger = logging.getLogger(__name__)

DIAGRAM_SUFFIX = ".json"

_KEY_PATTERN = re.compile(r"^[\w][\w.\- ]*$")


class PersistenceError(Exception):
    """Reading or writing a stored diagram failed."""


class DiagramNotFoundError(PersistenceError):
    """No diagram is stored under the requested key."""


class FilePersistence:
    """Key/value store of diagram texts backed by a directory."""

    def __init__(self, base_dir: Union[str, Path] = "."):
        self.base_dir = Path(base_dir)

    def path_for(self, key: str) -> Path:
        if key.endswith(DIAGRAM_SUFFIX):
            key = key[:-len(DIAGRAM_SUFFIX)]
        if not _KEY_PATTERN.match(key):
            raise PersistenceError(f"Invalid diagram key: {key!r}")
        return self.base_dir / f"{key}{DIAGRAM_SUFFIX}"

    def save(self, key: str, text: str) -> bool:
        """Store `text` under `key`.

        Returns:
            True on success, False if the file could not be written
        """
        try:
            path = self.path_for(key)
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(text, encoding="utf-8")
        except (OSError, PersistenceError) as exc:
            logger.error("Failed to save diagram %r: %s", key, exc)
            return False
        logger.info("Saved diagram %r to %s", key, path)
        return True

    def load(self, key: str) -> str:
        """Read the text stored under `key`.

        Raises:
            DiagramNotFoundError: If nothing is stored under `key`
            PersistenceError: If the file cannot be read
        """
        path = self.path_for(key)
        if not path.is_file():
            raise DiagramNotFoundError(f"Diagram not found: {path}")
        try:
            text = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            raise PersistenceError(f"Cannot read diagram {path}: {exc}") from exc
        logger.info("Loaded diagram %r from %s", key, path)
        return text

    def keys(self) -> List[str]:
        """Keys of all stored diagrams, sorted."""
        if not self.base_dir.is_dir():
            return []
        return sorted(
            p.stem for p in self.base_dir.glob(f"*{DIAGRAM_SUFFIX}")
            if p.is_file() and _KEY_PATTERN.match(p.stem)
        )


def read_diagram_file(path: Union[str, Path]) -> str:
    """Read a diagram file by path, whatever its name or suffix.

    Raises:
        DiagramNotFoundError: If the file does not exist
        PersistenceError: If the file cannot be read
    """
    path = Path(path)
    if not path.is_file():
        raise DiagramNotFoundError(f"Diagram not found: {path}")
    try:
        return path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise PersistenceError(f"Cannot read diagram {path}: {exc}") from exc
