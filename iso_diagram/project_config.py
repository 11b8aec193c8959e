"""
JSON-based project configuration for iso_diagram.

Allows overriding default configuration values through:
1. .isodiagram.json file in the current directory
2. .isodiagram.json file in the diagram file's directory
3. Explicit config file path via CLI

Configuration hierarchy (later overrides earlier):
1. Built-in defaults
2. User config (~/.isodiagram.json)
3. Project config (./.isodiagram.json)
4. CLI arguments

Example .isodiagram.json:
{
    "canvas": {
        "width": 1200,
        "height": 800
    },
    "display": {
        "show_attachment_points": false
    },
    "library": {
        "directory": "shapes",
        "manifest": "shapes.json"
    },
    "output": {
        "file_name": "diagram.svg",
        "output_dir": "out"
    },
    "storage": {
        "directory": "diagrams"
    }
}
"""

import json
import logging
from dataclasses import asdict, dataclass, field, fields
from pathlib import Path
from typing import Any, Dict, Optional, Union

from iso_diagram.model.types import CanvasSize

logger = logging.getLogger(__name__)

# Default config filename
CONFIG_FILENAME = ".isodiagram.json"


@dataclass
class CanvasConfig:
    """Canvas dimensions in user units."""
    width: float = 1000.0
    height: float = 1000.0

    def to_canvas(self) -> CanvasSize:
        return CanvasSize(float(self.width), float(self.height))


@dataclass
class DisplayConfig:
    """Compiled output display options."""
    show_attachment_points: bool = False


@dataclass
class LibraryConfig:
    """Location of the shape library."""
    directory: str = ""
    manifest: str = "shapes.json"


@dataclass
class OutputConfig:
    """Output file configuration."""
    file_name: str = "diagram.svg"
    output_dir: str = ""
    prefix: str = ""
    suffix: str = ""

    def output_path(self, stem: Optional[str] = None) -> Path:
        """Output SVG path, optionally named after a diagram file stem."""
        if stem is None:
            name = Path(self.file_name)
            stem, extension = name.stem, name.suffix or ".svg"
        else:
            extension = ".svg"
        return Path(self.output_dir or ".") / f"{self.prefix}{stem}{self.suffix}{extension}"


@dataclass
class StorageConfig:
    """Base directory of saved diagrams."""
    directory: str = ""


@dataclass
class ProjectConfig:
    """Complete project configuration."""
    canvas: CanvasConfig = field(default_factory=CanvasConfig)
    display: DisplayConfig = field(default_factory=DisplayConfig)
    library: LibraryConfig = field(default_factory=LibraryConfig)
    output: OutputConfig = field(default_factory=OutputConfig)
    storage: StorageConfig = field(default_factory=StorageConfig)

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to dictionary."""
        return asdict(self)

    def to_json(self, indent: int = 2) -> str:
        """Convert configuration to JSON string."""
        return json.dumps(self.to_dict(), indent=indent, ensure_ascii=False)

    def save(self, path: Union[str, Path]) -> None:
        """Save configuration to JSON file.

        Args:
            path: Output file path
        """
        path = Path(path)
        with open(path, 'w', encoding='utf-8') as f:
            f.write(self.to_json())
        logger.info("Configuration saved to %s", path)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'ProjectConfig':
        """Create configuration from dictionary.

        Unknown sections and keys (including "_comment") are ignored.

        Args:
            data: Configuration dictionary

        Returns:
            ProjectConfig instance
        """
        config = cls()

        for section in fields(cls):
            values = data.get(section.name)
            if not isinstance(values, dict):
                continue
            target = getattr(config, section.name)
            for key, value in values.items():
                if not key.startswith('_') and hasattr(target, key):
                    setattr(target, key, value)

        return config

    @classmethod
    def from_json(cls, json_str: str) -> 'ProjectConfig':
        """Create configuration from JSON string.

        Args:
            json_str: JSON configuration string

        Returns:
            ProjectConfig instance
        """
        data = json.loads(json_str)
        return cls.from_dict(data)

    @classmethod
    def load(cls, path: Union[str, Path]) -> 'ProjectConfig':
        """Load configuration from JSON file.

        Args:
            path: Input file path

        Returns:
            ProjectConfig instance

        Raises:
            FileNotFoundError: If file doesn't exist
            json.JSONDecodeError: If file is not valid JSON
        """
        path = Path(path)
        with open(path, 'r', encoding='utf-8') as f:
            data = json.load(f)
        logger.info("Configuration loaded from %s", path)
        return cls.from_dict(data)


def find_config_file(
    diagram_path: Optional[Union[str, Path]] = None,
    explicit_config: Optional[Union[str, Path]] = None,
) -> Optional[Path]:
    """Find configuration file using search hierarchy.

    Search order:
    1. Explicit config path (if provided)
    2. .isodiagram.json in the diagram file's directory
    3. .isodiagram.json in current working directory
    4. ~/.isodiagram.json in user's home directory

    Args:
        diagram_path: Path to the diagram file being processed
        explicit_config: Explicitly specified config path

    Returns:
        Path to config file if found, None otherwise
    """
    if explicit_config:
        explicit = Path(explicit_config)
        if explicit.exists():
            return explicit
        logger.warning("Explicit config not found: %s", explicit)

    if diagram_path:
        diagram_config = Path(diagram_path).parent / CONFIG_FILENAME
        if diagram_config.exists():
            return diagram_config

    cwd_config = Path.cwd() / CONFIG_FILENAME
    if cwd_config.exists():
        return cwd_config

    home_config = Path.home() / CONFIG_FILENAME
    if home_config.exists():
        return home_config

    return None


def load_config(
    diagram_path: Optional[Union[str, Path]] = None,
    explicit_config: Optional[Union[str, Path]] = None,
) -> ProjectConfig:
    """Load configuration with fallback to defaults.

    Args:
        diagram_path: Path to the diagram file being processed
        explicit_config: Explicitly specified config path

    Returns:
        ProjectConfig instance (defaults if no config file found)
    """
    config_path = find_config_file(diagram_path, explicit_config)

    if config_path:
        try:
            return ProjectConfig.load(config_path)
        except (json.JSONDecodeError, IOError) as e:
            logger.error("Failed to load config %s: %s", config_path, e)

    return ProjectConfig()


def merge_configs(base: ProjectConfig, override: ProjectConfig) -> ProjectConfig:
    """Merge two configurations, with override taking precedence.

    Only non-default values from override are applied.

    Args:
        base: Base configuration
        override: Override configuration

    Returns:
        Merged ProjectConfig
    """
    merged = ProjectConfig.from_dict(base.to_dict())
    defaults = ProjectConfig()

    for section in fields(ProjectConfig):
        default_section = getattr(defaults, section.name)
        merged_section = getattr(merged, section.name)
        for key, value in asdict(getattr(override, section.name)).items():
            if value != getattr(default_section, key):
                setattr(merged_section, key, value)

    return merged


def create_sample_config(path: Union[str, Path] = CONFIG_FILENAME) -> None:
    """Create a sample configuration file with documentation.

    Args:
        path: Output file path (default: .isodiagram.json)
    """
    sample = {
        "_comment": "Isometric diagram compositor configuration",
        "_version": "1.0",
        "canvas": {
            "_comment": "Canvas size; the first shape is placed at its centre",
            "width": 1000,
            "height": 1000,
        },
        "display": {
            "_comment": "Keep attach-* anchor circles visible in the output",
            "show_attachment_points": False,
        },
        "library": {
            "_comment": "Directory holding the shape manifest and SVG files",
            "directory": "",
            "manifest": "shapes.json",
        },
        "output": {
            "_comment": "Output file settings",
            "file_name": "diagram.svg",
            "output_dir": "",
            "prefix": "",
            "suffix": "",
        },
        "storage": {
            "_comment": "Directory of saved diagrams",
            "directory": "",
        },
    }

    path = Path(path)
    with open(path, 'w', encoding='utf-8') as f:
        json.dump(sample, f, indent=2, ensure_ascii=False)

    logger.info("Sample configuration created: %s", path)
