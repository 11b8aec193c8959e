"""
iso_diagram: compositing engine for isometric diagrams.

Solid shapes are snapped to each other through named `attach-*` anchors
and decorated with flat shapes; the component tree is compiled to SVG.
The command-line pipeline is started through main.py.
"""

from iso_diagram.compose import CompileResult, compile_diagram
from iso_diagram.editor import DiagramSession, EditResult
from iso_diagram.library import ShapeLibrary
from iso_diagram.logging_config import (
    setup_logging,
    get_logger,
    configure_default_logging,
    log_timing,
    timed,
    LogContext,
)
from iso_diagram.model import CanvasSize, DiagramComponent, ShapeDefinition, ShapeKind

__all__ = [
    "CompileResult",
    "compile_diagram",
    "DiagramSession",
    "EditResult",
    "ShapeLibrary",
    "CanvasSize",
    "DiagramComponent",
    "ShapeDefinition",
    "ShapeKind",
    "setup_logging",
    "get_logger",
    "configure_default_logging",
    "log_timing",
    "timed",
    "LogContext",
]
