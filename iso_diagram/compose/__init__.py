"""Compositing: placement, decoration welding and whole-diagram compilation."""

from iso_diagram.compose.compiler import CompileResult, compile_component, compile_diagram
from iso_diagram.compose.placement import solve_placement
from iso_diagram.compose.welder import decoration_id, weld_decoration, weld_decorations

__all__ = [
    "CompileResult",
    "compile_component",
    "compile_diagram",
    "solve_placement",
    "decoration_id",
    "weld_decoration",
    "weld_decorations",
]
