"""
Diagram (de)serialization.

A diagram is stored as a JSON list of components, field for field:

    [
      {
        "id": "shape-...",
        "shape": "cube",
        "position": "center",
        "relativeToId": null,
        "attached2DShapes": [{"name": "label", "attachedTo": "top"}],
        "attachmentPoints": [{"name": "top", "x": 50.0, "y": 0.0}],
        "absolutePosition": {"x": 500.0, "y": 500.0},
        "cut": false
      }
    ]

Loading validates the whole structure before anything is returned; a
partially valid list is never handed to the caller.
"""

import json
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Sequence

from iso_diagram.model.types import Attached2DShape, AttachmentPoint, DiagramComponent, Point

logger = logging.getLogger(__name__)


class DiagramLoadError(Exception):
    """Base class for errors raised while loading a diagram."""


class DiagramParseError(DiagramLoadError):
    """The text is not valid JSON."""


class InvalidDiagramError(DiagramLoadError):
    """The text is JSON but not a valid diagram."""

    def __init__(self, issues: List['ValidationIssue']):
        self.issues = list(issues)
        details = "; ".join(str(issue) for issue in self.issues[:5])
        more = f" (+{len(self.issues) - 5} more)" if len(self.issues) > 5 else ""
        super().__init__(f"File is not a valid diagram: {details}{more}")


class ValidationSeverity(Enum):
    """Severity level of validation issues."""
    WARNING = "warning"
    ERROR = "error"


@dataclass
class ValidationIssue:
    """A single structural problem in a loaded diagram."""
    code: str
    severity: ValidationSeverity
    message: str
    path: str = ""

    def __str__(self) -> str:
        where = f"{self.path}: " if self.path else ""
        return f"[{self.severity.value.upper()}] {self.code}: {where}{self.message}"


@dataclass
class ValidationReport:
    """All issues found in one diagram."""
    issues: List[ValidationIssue] = field(default_factory=list)

    @property
    def errors(self) -> List[ValidationIssue]:
        return [i for i in self.issues if i.severity == ValidationSeverity.ERROR]

    @property
    def is_valid(self) -> bool:
        return not self.errors

    def add(self, code: str, message: str, path: str,
            severity: ValidationSeverity = ValidationSeverity.ERROR) -> None:
        self.issues.append(ValidationIssue(code, severity, message, path))


# ---------------------------------------------------------------------------
# Encoding
# ---------------------------------------------------------------------------

def component_to_dict(component: DiagramComponent) -> Dict[str, Any]:
    return {
        "id": component.id,
        "shape": component.shape,
        "position": component.position,
        "relativeToId": component.relative_to_id,
        "attached2DShapes": [
            {"name": s.name, "attachedTo": s.attached_to}
            for s in component.attached_2d_shapes
        ],
        "attachmentPoints": [
            {"name": p.name, "x": p.x, "y": p.y}
            for p in component.attachment_points
        ],
        "absolutePosition": {
            "x": component.absolute_position.x,
            "y": component.absolute_position.y,
        },
        "cut": component.cut,
    }


def serialize_components(components: Sequence[DiagramComponent], indent: int = 2) -> str:
    """Encode a component list as JSON text."""
    return json.dumps([component_to_dict(c) for c in components],
                      indent=indent, ensure_ascii=False)


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------

def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _is_non_empty_string(value: Any) -> bool:
    return isinstance(value, str) and value != ""


def _validate_component(data: Any, path: str, report: ValidationReport) -> None:
    if not isinstance(data, dict):
        report.add("NOT_AN_OBJECT", "component must be a JSON object", path)
        return

    for key in ("id", "shape", "position"):
        if not _is_non_empty_string(data.get(key)):
            report.add("MISSING_FIELD", f"'{key}' must be a non-empty string", path)

    relative_to_id = data.get("relativeToId")
    if relative_to_id is not None and not isinstance(relative_to_id, str):
        report.add("BAD_TYPE", "'relativeToId' must be a string or null", path)

    shapes = data.get("attached2DShapes")
    if not isinstance(shapes, list):
        report.add("MISSING_FIELD", "'attached2DShapes' must be a list", path)
    else:
        for i, entry in enumerate(shapes):
            if not (isinstance(entry, dict)
                    and isinstance(entry.get("name"), str)
                    and isinstance(entry.get("attachedTo"), str)):
                report.add("BAD_TYPE", "2D shape needs string 'name' and 'attachedTo'",
                           f"{path}.attached2DShapes[{i}]")

    points = data.get("attachmentPoints")
    if not isinstance(points, list):
        report.add("MISSING_FIELD", "'attachmentPoints' must be a list", path)
    else:
        for i, entry in enumerate(points):
            if not (isinstance(entry, dict)
                    and isinstance(entry.get("name"), str)
                    and _is_number(entry.get("x"))
                    and _is_number(entry.get("y"))):
                report.add("BAD_TYPE", "attachment point needs string 'name' and numeric 'x'/'y'",
                           f"{path}.attachmentPoints[{i}]")

    absolute = data.get("absolutePosition")
    if not (isinstance(absolute, dict)
            and _is_number(absolute.get("x"))
            and _is_number(absolute.get("y"))):
        report.add("BAD_TYPE", "'absolutePosition' must have numeric 'x' and 'y'", path)

    cut = data.get("cut", False)
    if not isinstance(cut, bool):
        report.add("BAD_TYPE", "'cut' must be a boolean", path)


def _validate_tree(data: List[Dict[str, Any]], report: ValidationReport) -> None:
    """Check ids and references across components.

    Ids must be unique, every `relativeToId` must name another component and
    exactly one component is the root. A reference to a later component is
    only a warning since the compiler reports it and keeps going.
    """
    index_of: Dict[str, int] = {}
    for i, entry in enumerate(data):
        if entry["id"] in index_of:
            report.add("DUPLICATE_ID", f"id {entry['id']!r} already used by "
                       f"$[{index_of[entry['id']]}]", f"$[{i}]")
        else:
            index_of[entry["id"]] = i

    roots = []
    for i, entry in enumerate(data):
        reference = entry.get("relativeToId")
        if reference is None:
            roots.append(f"$[{i}]")
        elif reference not in index_of:
            report.add("DANGLING_REFERENCE",
                       f"'relativeToId' {reference!r} does not match any component", f"$[{i}]")
        elif index_of[reference] >= i:
            report.add("FORWARD_REFERENCE",
                       f"'relativeToId' {reference!r} does not precede the component",
                       f"$[{i}]", ValidationSeverity.WARNING)

    if data and len(roots) != 1:
        where = ", ".join(roots) if roots else "none"
        report.add("ROOT_COUNT",
                   f"diagram needs exactly one root component, found {len(roots)} ({where})", "$")


def validate_diagram_data(data: Any) -> ValidationReport:
    """Check decoded JSON against the diagram structure.

    Tree checks only run once every component is well formed.
    """
    report = ValidationReport()
    if not isinstance(data, list):
        report.add("NOT_A_LIST", "diagram must be a JSON list of components", "$")
        return report
    for i, entry in enumerate(data):
        _validate_component(entry, f"$[{i}]", report)
    if report.is_valid:
        _validate_tree(data, report)
    return report


# ---------------------------------------------------------------------------
# Decoding
# ---------------------------------------------------------------------------

def component_from_dict(data: Dict[str, Any]) -> DiagramComponent:
    """Build a component from an already validated dict."""
    absolute = data["absolutePosition"]
    return DiagramComponent(
        id=data["id"],
        shape=data["shape"],
        position=data["position"],
        relative_to_id=data.get("relativeToId"),
        attached_2d_shapes=[
            Attached2DShape(s["name"], s["attachedTo"]) for s in data["attached2DShapes"]
        ],
        attachment_points=[
            AttachmentPoint(p["name"], float(p["x"]), float(p["y"]))
            for p in data["attachmentPoints"]
        ],
        absolute_position=Point(float(absolute["x"]), float(absolute["y"])),
        cut=data.get("cut", False),
    )


def deserialize_components(text: str) -> List[DiagramComponent]:
    """Decode and validate a diagram.

    Raises:
        DiagramParseError: If text is not JSON
        InvalidDiagramError: If the JSON does not describe a diagram
    """
    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        raise DiagramParseError(f"Diagram is not valid JSON: {exc}") from exc

    report = validate_diagram_data(data)
    if not report.is_valid:
        logger.warning("Rejected diagram with %d structural errors", len(report.errors))
        raise InvalidDiagramError(report.errors)
    for issue in report.issues:
        logger.warning("Diagram loaded with issue: %s", issue)

    components = [component_from_dict(entry) for entry in data]
    logger.debug("Deserialized %d components", len(components))
    return components
