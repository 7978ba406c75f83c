"""Markdown output formatters for check and verify results."""

from datetime import datetime, timezone

from nono_analyzer.models.support import CheckReport
from nono_analyzer.models.verify import VerifyReport
from nono_analyzer.output.terminal import artifact_marker, explain_result, result_marker


def _escape_cell(text: str) -> str:
    return text.replace("|", "\\|").replace("\n", " ")


class CheckMarkdownFormatter:
    """Format check reports as Markdown, suitable for report files."""

    def __init__(self, namespace: str = "std") -> None:
        self._namespace = namespace

    def format_check_report(self, report: CheckReport) -> str:
        """Format a check report as a Markdown string.

        Args:
            report: The check report to format.

        Returns:
            Markdown string representation of the report.
        """
        lines: list[str] = []
        lines.append("# no_std Compliance Report")
        lines.append("")
        timestamp = datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")
        lines.append(f"*Generated: {timestamp}*")
        lines.append("")

        if report.total_packages == 0:
            lines.append("*No packages checked.*")
            return "\n".join(lines)

        lines.extend(self._format_summary(report))
        lines.append("")
        lines.extend(self._format_packages(report))
        lines.append("")

        details = self._format_details(report)
        if details:
            lines.extend(details)
            lines.append("")

        return "\n".join(lines)

    def _format_summary(self, report: CheckReport) -> list[str]:
        status = "**NOT COMPLIANT**" if report.has_failures else "**PASS**"
        lines = [
            "## Summary",
            "",
            f"- **Checked package:** {report.package_label(report.root_package_id)}",
            f"- **Total packages:** {report.total_packages}",
            f"- **Non-compliant:** {len(report.failures)}",
        ]
        ignored = report.ignored_packages_summary
        if ignored and ignored.ignored_count > 0:
            lines.append(
                f"- **Packages ignored:** {ignored.ignored_count} "
                f"({', '.join(ignored.ignored_names)})"
            )
        lines.append(f"- **Status:** {status}")
        return lines

    def _format_packages(self, report: CheckReport) -> list[str]:
        lines = [
            "## Packages",
            "",
            "| Package | Version | Result | Verdict |",
            "|---------|---------|--------|---------|",
        ]
        for result in report.results:
            verdict = result.support.kind.value.replace("_", " ")
            if result.is_overridden:
                verdict += " (override)"
            lines.append(
                f"| {_escape_cell(result.package_name)} | {result.package_version} "
                f"| {result_marker(result)} | {verdict} |"
            )
        return lines

    def _format_details(self, report: CheckReport) -> list[str]:
        lines: list[str] = []
        for result in report.results:
            explanation = explain_result(result, report, self._namespace)
            if not explanation:
                continue
            if not lines:
                lines.extend(["## Details", ""])
            lines.append(f"### {result.package_name}")
            lines.append("")
            lines.append("```")
            lines.extend(explanation)
            lines.append("```")
            lines.append("")
        return lines


class VerifyMarkdownFormatter:
    """Format verify reports as Markdown."""

    def format_verify_report(self, report: VerifyReport) -> str:
        """Format a verify report as a Markdown string."""
        if report.primary_contains_namespace:
            status = "**NOT COMPLIANT**"
        elif report.primary_inconclusive:
            status = "**INCONCLUSIVE**"
        else:
            status = "**PASS**"
        lines = [
            "# no_std Binary Verification Report",
            "",
            f"- **Primary artifact:** `{report.primary.path}`",
            f"- **Status:** {status}",
            "",
            "| Package | Result | Artifact | Note |",
            "|---------|--------|----------|------|",
        ]
        for artifact in report.all_artifacts:
            lines.append(
                f"| {_escape_cell(artifact.package_name)} | {artifact_marker(artifact)} "
                f"| `{artifact.path}` | {_escape_cell(artifact.reason or '')} |"
            )
        lines.append("")
        return "\n".join(lines)
