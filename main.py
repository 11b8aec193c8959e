"""
Entry point: compile a saved isometric diagram to a standalone SVG.

Usage:
    python main.py <diagram.json> [--library SHAPES_DIR] [--output OUTPUT]

Example:
    python main.py "network.json" --library shapes --output "network.svg"
    python main.py "network.json" --width 1600 --height 900
    python main.py "network.json" --config project.isodiagram.json
    python main.py --init-config                    # write a sample config
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from iso_diagram.io.persistence import PersistenceError
from iso_diagram.io.serialization import DiagramLoadError, InvalidDiagramError
from iso_diagram.library.shape_library import ShapeLibraryError
from iso_diagram.logging_config import configure_default_logging, setup_logging
from iso_diagram.model.types import CanvasSize
from iso_diagram.pipeline import run_pipeline
from iso_diagram.project_config import CONFIG_FILENAME, create_sample_config, load_config

logger = logging.getLogger("iso_diagram.cli")


# ---------------------------------------------------------------------------
# CLI
# ---------------------------------------------------------------------------

def _parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Compile a saved isometric diagram to SVG.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "diagram",
        nargs="?",
        help="Path to the saved diagram (.json).",
    )
    parser.add_argument(
        "--library", "-l",
        default=None,
        help="Shape library directory with shapes.json (default: from config, "
             "then the diagram's directory).",
    )
    parser.add_argument(
        "--output", "-o",
        default=None,
        help="Output SVG path (default: <diagram name>.svg in the configured output directory).",
    )
    parser.add_argument(
        "--config", "-c",
        default=None,
        help=f"Path to a {CONFIG_FILENAME} configuration file.",
    )
    parser.add_argument(
        "--width",
        type=float,
        default=None,
        help="Canvas width (default: from config, 1000).",
    )
    parser.add_argument(
        "--height",
        type=float,
        default=None,
        help="Canvas height (default: from config, 1000).",
    )
    parser.add_argument(
        "--show-attachment-points",
        action="store_true",
        dest="show_attachment_points",
        help="Keep the attach-* anchor markers visible.",
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Debug logging, including every diagnostic.",
    )
    parser.add_argument(
        "--json-log",
        default=None,
        dest="json_log",
        help="Also write JSON-lines logs to this file.",
    )
    parser.add_argument(
        "--init-config",
        action="store_true",
        dest="init_config",
        help=f"Write a sample {CONFIG_FILENAME} to the current directory and exit.",
    )
    args = parser.parse_args(argv)
    if not args.diagram and not args.init_config:
        parser.error("the diagram argument is required")
    return args


def main(argv: Optional[List[str]] = None) -> None:
    args = _parse_args(argv)

    level = logging.DEBUG if args.verbose else logging.INFO
    if args.json_log:
        setup_logging(level=level, json_file=args.json_log)
    else:
        configure_default_logging(verbose=args.verbose)

    if args.init_config:
        create_sample_config(CONFIG_FILENAME)
        return

    config = load_config(diagram_path=args.diagram, explicit_config=args.config)

    canvas = None
    if args.width is not None or args.height is not None:
        canvas = CanvasSize(
            args.width if args.width is not None else float(config.canvas.width),
            args.height if args.height is not None else float(config.canvas.height),
        )

    output = args.output or config.output.output_path(Path(args.diagram).stem)

    try:
        result = run_pipeline(
            args.diagram,
            output,
            library_dir=args.library,
            config=config,
            canvas=canvas,
            show_attachment_points=True if args.show_attachment_points else None,
        )
    except InvalidDiagramError as exc:
        logger.critical("%s", exc)
        for issue in exc.issues:
            logger.error("  %s", issue)
        sys.exit(1)
    except (DiagramLoadError, PersistenceError) as exc:
        logger.critical("Cannot load diagram: %s", exc)
        sys.exit(1)
    except ShapeLibraryError as exc:
        logger.critical("Cannot load shape library: %s", exc)
        sys.exit(1)
    except ValueError as exc:
        logger.critical("Configuration error: %s", exc)
        sys.exit(1)
    except Exception as exc:
        logger.critical("Unexpected error: %s", exc, exc_info=True)
        sys.exit(2)

    print(f"{result.output_path} ({result.placed} components, {result.diagnostics} diagnostics)")


if __name__ == "__main__":
    main()
