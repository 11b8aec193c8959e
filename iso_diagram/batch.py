"""
Batch compilation of saved diagrams to SVG.

Provides:
- Folder-based batch compilation (diagram JSON -> SVG)
- Per-file result tracking and reporting
- Error handling and logging

Files are compiled one after another; the shape library is loaded once and
shared by every file of the batch.

Usage:
    from iso_diagram.batch import batch_compile

    results = batch_compile(
        input_dir="./diagrams",
        output_dir="./svg",
        library_dir="./shapes",
    )
    print(results.summary())
"""

import argparse
import logging
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Dict, List, Optional, Union

from iso_diagram.io.persistence import PersistenceError
from iso_diagram.io.serialization import DiagramLoadError
from iso_diagram.library.shape_library import ShapeLibrary, ShapeLibraryError
from iso_diagram.logging_config import configure_default_logging
from iso_diagram.pipeline import run_pipeline
from iso_diagram.project_config import CONFIG_FILENAME, ProjectConfig, load_config

logger = logging.getLogger(__name__)


@dataclass
class CompileFileResult:
    """Result of a single diagram compilation."""
    input_path: Path
    output_path: Optional[Path] = None
    success: bool = False
    error: Optional[str] = None
    placed: int = 0
    diagnostics: int = 0
    duration_seconds: float = 0.0

    @property
    def status(self) -> str:
        """Get status string."""
        return "OK" if self.success else "FAILED"


@dataclass
class BatchResult:
    """Result of batch compilation."""
    results: List[CompileFileResult] = field(default_factory=list)
    total_duration_seconds: float = 0.0

    @property
    def total(self) -> int:
        """Total number of files processed."""
        return len(self.results)

    @property
    def successful(self) -> int:
        """Number of successful compilations."""
        return sum(1 for r in self.results if r.success)

    @property
    def failed(self) -> int:
        """Number of failed compilations."""
        return sum(1 for r in self.results if not r.success)

    @property
    def success_rate(self) -> float:
        """Success rate as percentage."""
        if self.total == 0:
            return 0.0
        return 100.0 * self.successful / self.total

    def summary(self) -> str:
        """Generate human-readable summary."""
        lines = [
            "Batch Compile Summary",
            "=" * 40,
            f"Total files:     {self.total}",
            f"Successful:      {self.successful}",
            f"Failed:          {self.failed}",
            f"Success rate:    {self.success_rate:.1f}%",
            f"Total time:      {self.total_duration_seconds:.1f}s",
            "",
        ]

        if self.failed > 0:
            lines.append("Failed files:")
            for r in self.results:
                if not r.success:
                    lines.append(f"  - {r.input_path.name}: {r.error}")

        with_diagnostics = [r for r in self.results if r.success and r.diagnostics]
        if with_diagnostics:
            lines.append("Files with diagnostics:")
            for r in with_diagnostics:
                lines.append(f"  - {r.input_path.name}: {r.diagnostics}")

        return "\n".join(lines)

    def to_dict(self) -> Dict:
        """Convert to dictionary for JSON serialization."""
        return {
            'total': self.total,
            'successful': self.successful,
            'failed': self.failed,
            'success_rate': self.success_rate,
            'total_duration_seconds': self.total_duration_seconds,
            'results': [
                {
                    'input': str(r.input_path),
                    'output': str(r.output_path) if r.output_path else None,
                    'success': r.success,
                    'error': r.error,
                    'placed': r.placed,
                    'diagnostics': r.diagnostics,
                    'duration': r.duration_seconds,
                }
                for r in self.results
            ],
        }


def find_diagram_files(
    input_dir: Union[str, Path],
    pattern: str = "*.json",
    recursive: bool = False,
    exclude: Optional[List[str]] = None,
) -> List[Path]:
    """Find saved diagram files in directory.

    Args:
        input_dir: Directory to search
        pattern: Glob pattern for diagram files
        recursive: Search subdirectories if True
        exclude: File names to skip (default: config file and shape manifest)

    Returns:
        Sorted list of diagram file paths
    """
    input_dir = Path(input_dir)

    if not input_dir.exists():
        raise FileNotFoundError(f"Input directory not found: {input_dir}")

    if not input_dir.is_dir():
        raise NotADirectoryError(f"Not a directory: {input_dir}")

    if exclude is None:
        exclude = [CONFIG_FILENAME, "shapes.json"]

    files = input_dir.rglob(pattern) if recursive else input_dir.glob(pattern)
    files = sorted(f for f in set(files) if f.is_file() and f.name not in exclude)

    logger.info("Found %d diagram files in %s", len(files), input_dir)
    return files


def compile_single_file(
    input_path: Path,
    output_dir: Path,
    library: ShapeLibrary,
    config: Optional[ProjectConfig] = None,
    output_prefix: str = "",
    output_suffix: str = "",
) -> CompileFileResult:
    """Compile a single diagram file to SVG.

    Args:
        input_path: Path to the diagram file
        output_dir: Output directory for SVG
        library: Shape library shared by the batch
        config: Project configuration
        output_prefix: Prefix for output filename
        output_suffix: Suffix for output filename

    Returns:
        CompileFileResult with status and details
    """
    start_time = time.perf_counter()

    output_path = output_dir / f"{output_prefix}{input_path.stem}{output_suffix}.svg"
    result = CompileFileResult(input_path=input_path)

    try:
        pipeline_result = run_pipeline(
            input_path,
            output_svg=output_path,
            config=config,
            library=library,
        )
        result.success = True
        result.output_path = pipeline_result.output_path
        result.placed = pipeline_result.placed
        result.diagnostics = pipeline_result.diagnostics

    except (DiagramLoadError, PersistenceError, OSError) as e:
        result.success = False
        result.error = str(e)
        logger.error("Failed to compile %s: %s", input_path.name, e)

    result.duration_seconds = time.perf_counter() - start_time
    return result


def batch_compile(
    input_dir: Union[str, Path],
    output_dir: Optional[Union[str, Path]] = None,
    library_dir: Optional[Union[str, Path]] = None,
    pattern: str = "*.json",
    recursive: bool = False,
    config: Optional[ProjectConfig] = None,
    config_path: Optional[Union[str, Path]] = None,
    output_prefix: str = "",
    output_suffix: str = "",
    progress_callback: Optional[Callable[[int, int, CompileFileResult], None]] = None,
) -> BatchResult:
    """Batch compile saved diagrams to SVG documents.

    Args:
        input_dir: Directory containing diagram files
        output_dir: Output directory (default: same as input)
        library_dir: Shape library directory (default: from config, then
            the input directory)
        pattern: Glob pattern for diagram files
        recursive: Search subdirectories
        config: Project configuration
        config_path: Path to .isodiagram.json config file
        output_prefix: Prefix for output filenames
        output_suffix: Suffix for output filenames
        progress_callback: Called after each file: (current, total, result)

    Returns:
        BatchResult with compilation statistics

    Raises:
        ShapeLibraryError: If the shape library cannot be loaded
    """
    start_time = time.perf_counter()

    input_dir = Path(input_dir)
    output_dir = Path(output_dir) if output_dir else input_dir
    output_dir.mkdir(parents=True, exist_ok=True)

    if config is None and config_path:
        config = load_config(explicit_config=config_path)
    elif config is None:
        config = load_config(diagram_path=input_dir / "diagram.json")

    library_dir = Path(library_dir or config.library.directory or input_dir)
    library = ShapeLibrary.from_directory(library_dir, config.library.manifest)

    diagram_files = find_diagram_files(input_dir, pattern, recursive)

    if not diagram_files:
        logger.warning("No diagram files found in %s", input_dir)
        return BatchResult(total_duration_seconds=time.perf_counter() - start_time)

    logger.info("Starting batch compile: %d files", len(diagram_files))

    results: List[CompileFileResult] = []
    for i, diagram_file in enumerate(diagram_files, 1):
        result = compile_single_file(
            input_path=diagram_file,
            output_dir=output_dir,
            library=library,
            config=config,
            output_prefix=output_prefix,
            output_suffix=output_suffix,
        )
        results.append(result)

        if progress_callback:
            progress_callback(i, len(diagram_files), result)

        logger.info(
            "[%d/%d] %s: %s (%.1fs)",
            i, len(diagram_files), result.input_path.name,
            result.status, result.duration_seconds
        )

    batch_result = BatchResult(
        results=results,
        total_duration_seconds=time.perf_counter() - start_time,
    )

    logger.info(
        "Batch compile complete: %d/%d successful (%.1f%%) in %.1fs",
        batch_result.successful, batch_result.total,
        batch_result.success_rate, batch_result.total_duration_seconds
    )

    return batch_result


def batch_compile_cli(argv: Optional[List[str]] = None) -> int:
    """CLI entry point for batch compilation."""
    parser = argparse.ArgumentParser(
        description="Batch compile saved isometric diagrams to SVG"
    )
    parser.add_argument(
        "input_dir",
        help="Directory containing diagram files"
    )
    parser.add_argument(
        "-o", "--output",
        dest="output_dir",
        help="Output directory (default: same as input)"
    )
    parser.add_argument(
        "-l", "--library",
        dest="library_dir",
        help="Shape library directory"
    )
    parser.add_argument(
        "-p", "--pattern",
        default="*.json",
        help="File pattern (default: *.json)"
    )
    parser.add_argument(
        "-r", "--recursive",
        action="store_true",
        help="Search subdirectories"
    )
    parser.add_argument(
        "-c", "--config",
        dest="config_path",
        help="Path to .isodiagram.json config file"
    )
    parser.add_argument(
        "--prefix",
        default="",
        help="Output filename prefix"
    )
    parser.add_argument(
        "--suffix",
        default="",
        help="Output filename suffix"
    )

    args = parser.parse_args(argv)
    configure_default_logging()

    try:
        result = batch_compile(
            input_dir=args.input_dir,
            output_dir=args.output_dir,
            library_dir=args.library_dir,
            pattern=args.pattern,
            recursive=args.recursive,
            config_path=args.config_path,
            output_prefix=args.prefix,
            output_suffix=args.suffix,
        )

        print("\n" + result.summary())

        return 0 if result.failed == 0 else 1

    except (ShapeLibraryError, FileNotFoundError, NotADirectoryError) as e:
        logger.error("Batch compile failed: %s", e)
        return 1


if __name__ == "__main__":
    import sys
    sys.exit(batch_compile_cli())
