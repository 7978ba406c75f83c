"""Tests for verdict overrides."""
from __future__ import annotations

from nono_analyzer.analysis.overrides import apply_support_overrides
from nono_analyzer.models.config import AnalyzerConfig, SupportOverride
from nono_analyzer.models.support import (
    CheckResult,
    CrateSupport,
    OffenseKind,
    SourceOffense,
)


def _failing(name: str) -> CheckResult:
    return CheckResult(
        package_id=f"{name}@1.0.0",
        package_name=name,
        package_version="1.0.0",
        support=CrateSupport.from_offenses(
            [SourceOffense(kind=OffenseKind.MISSING_NO_STD_ATTRIBUTE)]
        ),
    )


class TestApplySupportOverrides:
    """Tests for apply_support_overrides."""

    def test_no_overrides(self) -> None:
        """Test that results are returned unchanged without overrides."""
        results = [_failing("libc")]
        assert apply_support_overrides(results, AnalyzerConfig()) is results

    def test_override_marks_result_compliant(self) -> None:
        """Test that an override makes only the named package compliant."""
        config = AnalyzerConfig(
            overrides={"libc": SupportOverride(reason="std use is cfg-gated")}
        )
        results = apply_support_overrides([_failing("libc"), _failing("other")], config)

        libc, other = results
        assert libc.override_reason == "std use is cfg-gated"
        assert libc.compliant_by_itself
        assert libc.support.offenses
        assert not other.is_overridden
        assert not other.compliant_by_itself
