"""Tests for the terminal formatter."""
from __future__ import annotations

from io import StringIO

from rich.console import Console

from nono_analyzer.constants import MARKER_FAILURE, MARKER_SUCCESS, MARKER_UNKNOWN
from nono_analyzer.models.options import Verbosity
from nono_analyzer.models.support import CheckReport
from nono_analyzer.output.terminal import (
    MISSING_ATTRIBUTE_MESSAGE,
    TerminalFormatter,
    describe_cause,
    explain_feature,
    explain_result,
    result_marker,
)


def _render(verbosity: Verbosity = Verbosity.NORMAL):
    output = StringIO()
    console = Console(file=output, force_terminal=False, width=200)
    return TerminalFormatter(console=console, verbosity=verbosity), output


def _result(report: CheckReport, name: str):
    return next(r for r in report.results if r.package_name == name)


class TestCauseChain:
    """Tests for cause chain explanations."""

    def test_feature_chain(self, check_report) -> None:
        """Test that a feature's cause chain is rendered as nested lines."""
        serde = _result(check_report, "serde")
        std = serde.find_active_feature("std")

        assert explain_feature(std, check_report) == [
            '- Caused by feature flag "std" in crate "serde:1.0.0"',
            '  - Caused by feature flag "default" in crate "serde:1.0.0"',
            '    - Caused by implicitly enabled default feature from "app:0.1.0"',
        ]

    def test_cli_flag_cause(self, check_report) -> None:
        """Test that a CLI flag cause names the flag."""
        alloc = _result(check_report, "app").find_active_feature("alloc")
        record = check_report.causes.get(alloc.cause)
        assert describe_cause(record, check_report) == (
            '- Caused by providing CLI --features flag "alloc"'
        )

    def test_explicit_cause(self, check_report) -> None:
        """Test that an explicit cause names the requesting package."""
        index = check_report.causes.explicit_cause("app@0.1.0")
        record = check_report.causes.get(index)
        assert describe_cause(record, check_report) == '- Explicitly enabled feature from "app:0.1.0"'

    def test_unknown_package_label(self, check_report) -> None:
        """Test that an unknown package id is rendered as UNPRINTABLE."""
        index = check_report.causes.default_cause("ghost@9.9.9")
        record = check_report.causes.get(index)
        assert "UNPRINTABLE" in describe_cause(record, check_report)


class TestExplainResult:
    """Tests for explain_result."""

    def test_gated_feature(self, check_report) -> None:
        """Test that a gated package is explained by its gating feature."""
        lines = explain_result(_result(check_report, "serde"), check_report)
        assert lines[0] == '- Crate supports no_std if "std" feature is deactivated.'
        assert lines[1] == '  - Caused by feature flag "std" in crate "serde:1.0.0"'
        assert len(lines) == 4

    def test_offenses(self, check_report) -> None:
        """Test that offenses are explained with location and suggestion."""
        lines = explain_result(_result(check_report, "leaky"), check_report)
        assert lines == [
            "- Source code contains an explicit `use std::` statement.",
            "  --> /src/leaky/src/lib.rs:2:5",
            "  | use std::fs::File;",
            "  Suggestion: use `core::fs::File` instead",
            f"- {MISSING_ATTRIBUTE_MESSAGE}",
        ]

    def test_trivial_verdicts_have_no_explanation(self, check_report) -> None:
        """Test that compliant packages have no explanation."""
        assert explain_result(_result(check_report, "app"), check_report) == []
        assert explain_result(_result(check_report, "derive"), check_report) == []

    def test_override(self, passing_report) -> None:
        """Test that an override is explained by its reason."""
        lines = explain_result(_result(passing_report, "broken"), passing_report)
        assert lines == ["- Reported compliant by override: vendored fork is no_std"]


class TestMarkers:
    """Tests for result markers."""

    def test_markers(self, check_report, passing_report) -> None:
        """Test that markers follow the compliance verdict."""
        assert result_marker(_result(check_report, "app")) == MARKER_SUCCESS
        assert result_marker(_result(check_report, "serde")) == MARKER_FAILURE
        assert result_marker(_result(passing_report, "broken")) == MARKER_SUCCESS

    def test_unanalyzable_marker(self, passing_report) -> None:
        """Test that an unanalyzable package gets the unknown marker."""
        broken = _result(passing_report, "broken").model_copy(update={"override_reason": None})
        assert result_marker(broken) == MARKER_UNKNOWN


class TestTerminalFormatter:
    """Tests for TerminalFormatter."""

    def test_check_report(self, check_report) -> None:
        """Test that the check report lists packages and the summary."""
        formatter, output = _render()
        formatter.format_check_report(check_report)
        text = output.getvalue()

        assert f"app: {MARKER_SUCCESS}" in text
        assert f"serde: {MARKER_FAILURE}" in text
        assert f"leaky: {MARKER_FAILURE}" in text
        assert "#![no_std]" in text
        assert "Total packages: 4" in text
        assert "Non-compliant: 2" in text
        assert "Packages ignored: 1 (noisy)" in text
        assert "NOT COMPLIANT - 2 package(s) cannot be built without std" in text
        assert "Active features" not in text

    def test_verbose_lists_active_features(self, check_report) -> None:
        """Test that verbose mode lists active features."""
        formatter, output = _render(Verbosity.VERBOSE)
        formatter.format_check_report(check_report)
        assert "Active features: default, std" in output.getvalue()

    def test_quiet_shows_only_failures(self, check_report) -> None:
        """Test that quiet mode shows only failing packages."""
        formatter, output = _render(Verbosity.QUIET)
        formatter.format_check_report(check_report)
        text = output.getvalue()

        assert f"app: {MARKER_SUCCESS}" not in text
        assert f"serde: {MARKER_FAILURE}" in text
        assert "Total packages" not in text
        assert "NOT COMPLIANT" in text

    def test_passing_report(self, passing_report) -> None:
        """Test that a passing report shows the PASS line."""
        formatter, output = _render()
        formatter.format_check_report(passing_report)
        text = output.getvalue()

        assert "Overrides applied: 1" in text
        assert "PASS - All 2 packages are no_std compatible" in text

    def test_empty_report(self) -> None:
        """Test that an empty report says no packages were checked."""
        formatter, output = _render()
        formatter.format_check_report(CheckReport(root_package_id="app@0.1.0"))
        assert "No packages checked" in output.getvalue()

    def test_verify_report(self, verify_report) -> None:
        """Test that the verify report lists every artifact and the status."""
        formatter, output = _render()
        formatter.format_verify_report(verify_report)
        text = output.getvalue()

        assert f"app: {MARKER_FAILURE}" in text
        assert "/target/debug/libapp.rlib references the `std` namespace" in text
        assert f"dep: {MARKER_SUCCESS}" in text
        assert f"odd: {MARKER_UNKNOWN}" in text
        assert "Malformed archive" in text
        assert "NOT COMPLIANT - app links the `std` runtime" in text

    def test_verify_report_quiet_hides_clean_artifacts(self, verify_report) -> None:
        """Test that quiet mode hides clean artifacts."""
        formatter, output = _render(Verbosity.QUIET)
        formatter.format_verify_report(verify_report)
        assert "dep:" not in output.getvalue()

    def test_verify_report_inconclusive_primary(self, inconclusive_verify_report) -> None:
        """Test that an uninspectable primary artifact is not reported as a pass."""
        formatter, output = _render()
        formatter.format_verify_report(inconclusive_verify_report)
        text = output.getvalue()

        assert f"app: {MARKER_UNKNOWN}" in text
        assert "INCONCLUSIVE - could not inspect the artifact of app" in text
        assert "PASS" not in text
