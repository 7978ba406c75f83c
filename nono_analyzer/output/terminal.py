"""Terminal output formatter using Rich."""
from typing import Optional

from rich.console import Console
from rich.markup import escape

from nono_analyzer.constants import MARKER_FAILURE, MARKER_SUCCESS, MARKER_UNKNOWN
from nono_analyzer.models.feature import CauseKind, CauseRecord, Feature
from nono_analyzer.models.options import Verbosity
from nono_analyzer.models.support import (
    CheckReport,
    CheckResult,
    OffenseKind,
    SourceOffense,
    SupportKind,
)
from nono_analyzer.models.verify import (
    ArtifactVerification,
    VerificationStatus,
    VerifyReport,
)

MISSING_ATTRIBUTE_MESSAGE = (
    "Did not find a #![no_std] attribute or a simple conditional attribute like "
    '#![cfg_attr(not(feature = "std"), no_std)] in the crate source. '
    "Crate most likely doesn't support no_std without changes."
)
USE_STD_MESSAGE = "Source code contains an explicit `use {namespace}::` statement."
INDENT = "  "


def result_marker(result: CheckResult) -> str:
    """Pass/fail marker for a package result."""
    if result.compliant_by_itself:
        return MARKER_SUCCESS
    if result.support.kind == SupportKind.UNANALYZABLE:
        return MARKER_UNKNOWN
    return MARKER_FAILURE


def artifact_marker(artifact: ArtifactVerification) -> str:
    if artifact.status == VerificationStatus.CLEAN:
        return MARKER_SUCCESS
    if artifact.status == VerificationStatus.INCONCLUSIVE:
        return MARKER_UNKNOWN
    return MARKER_FAILURE


def describe_cause(record: CauseRecord, report: CheckReport) -> str:
    """One line of a cause chain."""
    if record.kind == CauseKind.FEATURE:
        return (
            f'- Caused by feature flag "{record.feature_name}" '
            f'in crate "{report.package_label(record.package_id)}"'
        )
    if record.kind == CauseKind.DEFAULT:
        return (
            "- Caused by implicitly enabled default feature from "
            f'"{report.package_label(record.package_id)}"'
        )
    if record.kind == CauseKind.EXPLICIT:
        return f'- Explicitly enabled feature from "{report.package_label(record.package_id)}"'
    return f'- Caused by providing CLI --features flag "{record.flag}"'


def explain_feature(feature: Feature, report: CheckReport) -> list[str]:
    """Lines explaining why a feature is active, nearest cause first.

    Each line is indented one level deeper than the previous one.
    """
    lines = [
        f'- Caused by feature flag "{feature.name}" '
        f'in crate "{report.package_label(feature.package_id)}"'
    ]
    for depth, record in enumerate(report.causes.chain(feature.cause), start=1):
        lines.append(INDENT * depth + describe_cause(record, report))
    return lines


def describe_offense(offense: SourceOffense, namespace: str = "std") -> list[str]:
    """Lines describing one source offense."""
    if offense.kind == OffenseKind.MISSING_NO_STD_ATTRIBUTE:
        return [f"- {MISSING_ATTRIBUTE_MESSAGE}"]

    lines = [f"- {USE_STD_MESSAGE.format(namespace=namespace)}"]
    location = offense.location
    if location is not None:
        lines.append(
            f"{INDENT}--> {location.path}:{location.line}:{location.column + 1}"
        )
        if location.source_line:
            lines.append(f"{INDENT}| {location.source_line.strip()}")
    if offense.suggestion:
        lines.append(f"{INDENT}Suggestion: use `{offense.suggestion}` instead")
    return lines


def explain_result(
    result: CheckResult, report: CheckReport, namespace: str = "std"
) -> list[str]:
    """Explanation lines for a package verdict, empty for trivial verdicts."""
    support = result.support
    lines: list[str] = []
    if result.is_overridden:
        lines.append(f"- Reported compliant by override: {result.override_reason}")
        return lines

    if support.kind == SupportKind.ONLY_WITHOUT_FEATURE and result.std_because_feature:
        lines.append(
            f'- Crate supports no_std if "{support.feature}" feature is deactivated.'
        )
        feature = result.find_active_feature(support.feature or "")
        if feature is not None:
            lines.extend(INDENT + line for line in explain_feature(feature, report))
    elif support.kind == SupportKind.SOURCE_OFFENSES:
        for offense in support.offenses:
            lines.extend(describe_offense(offense, namespace))
    elif support.kind == SupportKind.UNANALYZABLE:
        lines.append(f"- Could not analyze crate source: {support.reason}")
    return lines


class TerminalFormatter:
    """Format check and verify results for terminal display using Rich.

    One line per package with a pass/fail marker, followed by indented
    explanation lines for non-trivial verdicts.
    """

    def __init__(
        self,
        console: Optional[Console] = None,
        verbosity: Verbosity = Verbosity.NORMAL,
        namespace: str = "std",
    ) -> None:
        """Initialize the formatter with a Rich console.

        Args:
            console: Optional Rich Console instance. If not provided,
                a new Console will be created.
            verbosity: Output verbosity level.
            namespace: Namespace of the excluded runtime, used in messages.
        """
        self._console = console if console is not None else Console()
        self._verbosity = verbosity
        self._namespace = namespace

    def _line(self, text: str, depth: int = 0, style: Optional[str] = None) -> None:
        markup = escape(INDENT * depth + text)
        if style:
            markup = f"[{style}]{markup}[/{style}]"
        self._console.print(markup, soft_wrap=True, highlight=False)

    def format_check_report(self, report: CheckReport) -> None:
        """Display a check report.

        Args:
            report: The check report to display.
        """
        if self._verbosity == Verbosity.QUIET:
            self._print_quiet_check(report)
            return

        if report.total_packages == 0:
            self._console.print("[yellow]No packages checked[/yellow]")
            return

        for result in report.results:
            self._print_result(result, report)

        self._console.print("")
        self._print_check_summary(report)

    def _print_result(self, result: CheckResult, report: CheckReport) -> None:
        self._line(f"{result.package_name}: {result_marker(result)}")
        for line in explain_result(result, report, self._namespace):
            self._line(line, depth=1)
        if self._verbosity == Verbosity.VERBOSE and result.active_features:
            names = ", ".join(feature.name for feature in result.active_features)
            self._line(f"Active features: {names}", depth=1, style="dim")

    def _print_check_summary(self, report: CheckReport) -> None:
        failures = report.failures
        self._console.print(f"[bold]Total packages:[/bold] {report.total_packages}")
        self._console.print(f"[bold]Non-compliant:[/bold] {len(failures)}")

        ignored = report.ignored_packages_summary
        if ignored and ignored.ignored_count > 0:
            names_str = ", ".join(ignored.ignored_names[:3])
            if len(ignored.ignored_names) > 3:
                names_str += f", ... (+{len(ignored.ignored_names) - 3} more)"
            self._console.print(
                f"[bold]Packages ignored:[/bold] {ignored.ignored_count} ({escape(names_str)})"
            )

        overrides_count = sum(1 for result in report.results if result.is_overridden)
        if overrides_count > 0:
            self._console.print(f"[bold]Overrides applied:[/bold] {overrides_count}")

        self._print_check_status(report)

    def _print_check_status(self, report: CheckReport) -> None:
        if report.has_failures:
            self._console.print(
                f"[red]NOT COMPLIANT[/red] - "
                f"{len(report.failures)} package(s) cannot be built without {self._namespace}"
            )
        else:
            self._console.print(
                f"[green]PASS[/green] - All {report.total_packages} packages are no_std compatible"
            )

    def _print_quiet_check(self, report: CheckReport) -> None:
        """Print only failing packages and the status line."""
        if report.total_packages == 0:
            self._console.print("[yellow]No packages checked[/yellow]")
            return
        for result in report.failures:
            self._print_result(result, report)
        self._print_check_status(report)

    def format_verify_report(self, report: VerifyReport) -> None:
        """Display a verify report.

        Args:
            report: The verify report to display.
        """
        artifacts = report.all_artifacts
        if self._verbosity == Verbosity.QUIET:
            artifacts = [a for a in artifacts if a.status != VerificationStatus.CLEAN]

        for artifact in artifacts:
            self._line(f"{artifact.package_name}: {artifact_marker(artifact)}")
            if artifact.contains_namespace:
                self._line(
                    f"- {artifact.path} references the `{artifact.namespace}` namespace",
                    depth=1,
                )
            elif artifact.status == VerificationStatus.INCONCLUSIVE:
                self._line(f"- Could not inspect {artifact.path}: {artifact.reason}", depth=1)
            elif self._verbosity == Verbosity.VERBOSE:
                self._line(f"- {artifact.path}", depth=1, style="dim")

        if report.primary_contains_namespace:
            self._console.print(
                f"[red]NOT COMPLIANT[/red] - {escape(report.primary.package_name)} "
                f"links the `{escape(report.primary.namespace)}` runtime"
            )
        elif report.primary_inconclusive:
            self._console.print(
                f"[yellow]INCONCLUSIVE[/yellow] - could not inspect the artifact of "
                f"{escape(report.primary.package_name)}"
            )
        else:
            self._console.print(
                f"[green]PASS[/green] - {escape(report.primary.package_name)} "
                f"does not reference `{escape(report.primary.namespace)}`"
            )
