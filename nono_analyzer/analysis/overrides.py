"""Verdict overrides for packages known to be compliant."""
from __future__ import annotations

from nono_analyzer.models.config import AnalyzerConfig
from nono_analyzer.models.support import CheckResult


def apply_support_overrides(
    results: list[CheckResult],
    config: AnalyzerConfig,
) -> list[CheckResult]:
    """Mark results of overridden packages with the configured reason.

    The analyzed verdict is kept so reports can show what was overridden;
    `CheckResult.compliant_by_itself` treats overridden results as compliant.
    Package name matching is case-sensitive.

    Args:
        results: Per-package check results.
        config: Configuration with the overrides mapping.

    Returns:
        New list of results with override reasons set where configured.
    """
    if not config.overrides:
        return results

    updated: list[CheckResult] = []
    for result in results:
        override = config.overrides.get(result.package_name)
        if override is None:
            updated.append(result)
        else:
            updated.append(result.model_copy(update={"override_reason": override.reason}))
    return updated
