"""
Diagnostic records for the editor and the compiler.

Neither the Composition Editor nor the Diagram Compiler raises for
data-quality problems (missing shape, dangling reference, missing anchor,
invalid operation). They degrade to a safe default and report what happened
as a list of Diagnostic records next to their result.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, List, Optional

logger = logging.getLogger(__name__)


class DiagnosticSeverity(Enum):
    """Severity level of a diagnostic."""
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"

    @property
    def log_level(self) -> int:
        return {
            DiagnosticSeverity.INFO: logging.INFO,
            DiagnosticSeverity.WARNING: logging.WARNING,
            DiagnosticSeverity.ERROR: logging.ERROR,
        }[self]


# Missing-reference codes
SHAPE_NOT_FOUND = "SHAPE_NOT_FOUND"
SHAPE_KIND_MISMATCH = "SHAPE_KIND_MISMATCH"
MARKUP_PARSE_ERROR = "MARKUP_PARSE_ERROR"
REFERENCE_NOT_FOUND = "REFERENCE_NOT_FOUND"
ATTACHMENT_POINT_NOT_FOUND = "ATTACHMENT_POINT_NOT_FOUND"
UNKNOWN_POSITION = "UNKNOWN_POSITION"

# Invalid-operation codes
NO_SELECTION = "NO_SELECTION"
COMPONENT_NOT_FOUND = "COMPONENT_NOT_FOUND"
INDEX_OUT_OF_RANGE = "INDEX_OUT_OF_RANGE"
CUT_ROOT = "CUT_ROOT"
NO_CUT_SUBTREE = "NO_CUT_SUBTREE"
PASTE_INTO_CUT_SUBTREE = "PASTE_INTO_CUT_SUBTREE"
CENTER_NOT_ROOT = "CENTER_NOT_ROOT"


@dataclass(frozen=True)
class Diagnostic:
    """A single problem found while editing or compiling a diagram."""
    code: str
    severity: DiagnosticSeverity
    message: str
    component_id: Optional[str] = None

    def __str__(self) -> str:
        where = f" ({self.component_id})" if self.component_id else ""
        return f"[{self.severity.value.upper()}] {self.code}{where}: {self.message}"


def report(
    diagnostics: List[Diagnostic],
    code: str,
    message: str,
    component_id: Optional[str] = None,
    severity: DiagnosticSeverity = DiagnosticSeverity.WARNING,
    log: Optional[logging.Logger] = None,
) -> Diagnostic:
    """Append a diagnostic to `diagnostics` and log it.

    Args:
        diagnostics: List collecting diagnostics for the current operation
        code: One of the module-level codes
        message: Human-readable description
        component_id: Component the problem relates to, if any
        severity: Diagnostic severity (default WARNING)
        log: Logger of the reporting module (default: this module's)

    Returns:
        The appended Diagnostic
    """
    diagnostic = Diagnostic(code, severity, message, component_id)
    diagnostics.append(diagnostic)
    (log or logger).log(
        severity.log_level, "%s: %s", code, message,
        extra={"component_id": component_id} if component_id else None,
    )
    return diagnostic


def has_errors(diagnostics: Iterable[Diagnostic]) -> bool:
    """True if any diagnostic has ERROR severity."""
    return any(d.severity == DiagnosticSeverity.ERROR for d in diagnostics)
