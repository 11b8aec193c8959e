"""Composition editing: pure list operations and the editing session."""

from iso_diagram.editor.composition import (
    EditResult,
    add_2d_shape,
    add_3d_shape,
    cancel_cut,
    cut_3d_shape,
    dependent_ids,
    find_component,
    find_cut_root,
    is_root,
    new_component_id,
    paste_3d_shape,
    remove_2d_shape,
    remove_3d_shape,
)
from iso_diagram.editor.session import DiagramSession

__all__ = [
    "EditResult",
    "add_2d_shape",
    "add_3d_shape",
    "cancel_cut",
    "cut_3d_shape",
    "dependent_ids",
    "find_component",
    "find_cut_root",
    "is_root",
    "new_component_id",
    "paste_3d_shape",
    "remove_2d_shape",
    "remove_3d_shape",
    "DiagramSession",
]
