"""Unit tests for iso_diagram.diagnostics."""

import logging

from iso_diagram import diagnostics as diag
from iso_diagram.diagnostics import Diagnostic, DiagnosticSeverity


class TestReport:
    """Tests for report() and has_errors()."""

    def test_appends_and_returns(self):
        """Test the diagnostic is appended and returned."""
        collected = []
        d = diag.report(collected, diag.SHAPE_NOT_FOUND, "Shape 'x' not found", "shape-1")
        assert collected == [d]
        assert d.severity is DiagnosticSeverity.WARNING
        assert d.component_id == "shape-1"

    def test_logged_at_severity(self, caplog):
        """Test the diagnostic is logged at its own level with the component id."""
        caplog.set_level(logging.DEBUG, logger="iso_diagram")
        diag.report([], diag.MARKUP_PARSE_ERROR, "bad markup", "shape-2",
                    severity=DiagnosticSeverity.ERROR)
        record = caplog.records[-1]
        assert record.levelno == logging.ERROR
        assert record.component_id == "shape-2"
        assert "MARKUP_PARSE_ERROR" in record.getMessage()

    def test_has_errors(self):
        """Test only ERROR severity counts as an error."""
        warning = Diagnostic(diag.CUT_ROOT, DiagnosticSeverity.WARNING, "w")
        error = Diagnostic(diag.CUT_ROOT, DiagnosticSeverity.ERROR, "e")
        assert not diag.has_errors([warning])
        assert diag.has_errors([warning, error])

    def test_str(self):
        """Test the readable form carries severity, code and component."""
        d = Diagnostic(diag.REFERENCE_NOT_FOUND, DiagnosticSeverity.WARNING, "gone", "b")
        assert str(d) == "[WARNING] REFERENCE_NOT_FOUND (b): gone"
