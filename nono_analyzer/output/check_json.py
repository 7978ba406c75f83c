"""JSON output formatters for check and verify results."""
import json
from datetime import datetime, timezone
from typing import Any, Optional

from nono_analyzer import __version__
from nono_analyzer.models.feature import CauseRecord
from nono_analyzer.models.support import CheckReport, CheckResult, SourceOffense
from nono_analyzer.models.verify import ArtifactVerification, VerifyReport


def _report_metadata() -> dict[str, Any]:
    timestamp = datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")
    return {
        "generated_at": timestamp,
        "tool_version": __version__,
    }


class CheckJsonFormatter:
    """Format check reports as JSON for programmatic processing."""

    def format_check_report(self, report: CheckReport) -> str:
        """Format a check report as a JSON string.

        Args:
            report: The check report to format.

        Returns:
            JSON string representation of the report.
        """
        return json.dumps(self._build_output(report), indent=2, ensure_ascii=False)

    def _build_output(self, report: CheckReport) -> dict[str, Any]:
        return {
            "report_metadata": _report_metadata(),
            "summary": self._build_summary(report),
            "packages": [self._build_package(result, report) for result in report.results],
        }

    def _build_summary(self, report: CheckReport) -> dict[str, Any]:
        ignored_packages = None
        summary = report.ignored_packages_summary
        if summary and summary.ignored_count > 0:
            ignored_packages = {
                "count": summary.ignored_count,
                "names": summary.ignored_names,
            }
        return {
            "root_package": report.package_label(report.root_package_id),
            "total_packages": report.total_packages,
            "non_compliant": len(report.failures),
            "ignored_packages": ignored_packages,
            "overrides_applied": sum(1 for r in report.results if r.is_overridden),
            "status": "not_compliant" if report.has_failures else "pass",
        }

    def _build_package(self, result: CheckResult, report: CheckReport) -> dict[str, Any]:
        support = result.support
        gating = None
        if support.feature is not None:
            feature = result.find_active_feature(support.feature)
            causes: list[dict[str, Any]] = []
            if feature is not None:
                causes = [
                    self._build_cause(record, report)
                    for record in report.causes.chain(feature.cause)
                ]
            gating = {
                "feature": support.feature,
                "active": feature is not None,
                "causes": causes,
            }
        return {
            "name": result.package_name,
            "version": result.package_version,
            "id": result.package_id,
            "compliant": result.compliant_by_itself,
            "verdict": support.kind.value,
            "gating_feature": gating,
            "offenses": [self._build_offense(offense) for offense in support.offenses],
            "reason": support.reason,
            "override_reason": result.override_reason,
            "active_features": [feature.name for feature in result.active_features],
        }

    def _build_cause(self, record: CauseRecord, report: CheckReport) -> dict[str, Any]:
        package: Optional[str] = None
        if record.package_id is not None:
            package = report.package_label(record.package_id)
        return {
            "kind": record.kind.value,
            "package": package,
            "feature": record.feature_name,
            "flag": record.flag,
        }

    def _build_offense(self, offense: SourceOffense) -> dict[str, Any]:
        location = None
        if offense.location is not None:
            location = {
                "path": offense.location.path,
                "line": offense.location.line,
                "column": offense.location.column,
                "end_line": offense.location.end_line,
                "end_column": offense.location.end_column,
                "statement": offense.location.statement,
            }
        return {
            "kind": offense.kind.value,
            "location": location,
            "suggestion": offense.suggestion,
        }


class VerifyJsonFormatter:
    """Format verify reports as JSON."""

    def format_verify_report(self, report: VerifyReport) -> str:
        """Format a verify report as a JSON string.

        Args:
            report: The verify report to format.

        Returns:
            JSON string representation of the report.
        """
        output = {
            "report_metadata": _report_metadata(),
            "summary": {
                "primary_contains_namespace": report.primary_contains_namespace,
                "inconclusive": sum(
                    1 for a in report.all_artifacts if a.reason is not None
                ),
                "status": self._status(report),
            },
            "primary": self._build_artifact(report.primary),
            "dependencies": [self._build_artifact(a) for a in report.dependencies],
        }
        return json.dumps(output, indent=2, ensure_ascii=False)

    def _status(self, report: VerifyReport) -> str:
        if report.primary_contains_namespace:
            return "not_compliant"
        if report.primary_inconclusive:
            return "inconclusive"
        return "pass"

    def _build_artifact(self, artifact: ArtifactVerification) -> dict[str, Any]:
        return {
            "package": artifact.package_name,
            "path": artifact.path,
            "namespace": artifact.namespace,
            "status": artifact.status.value,
            "reason": artifact.reason,
        }
