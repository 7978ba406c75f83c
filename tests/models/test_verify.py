"""Tests for binary verification models."""

import pytest
from pydantic import ValidationError

from nono_analyzer.models.verify import (
    ArtifactVerification,
    VerificationStatus,
    VerifyReport,
)


def _artifact(status: VerificationStatus, reason: str | None = None) -> ArtifactVerification:
    return ArtifactVerification(
        package_name="app",
        path="/target/debug/libapp.rlib",
        namespace="std",
        status=status,
        reason=reason,
    )


class TestArtifactVerification:
    """Tests for ArtifactVerification."""

    def test_reason_only_when_inconclusive(self) -> None:
        """Test that a reason is required on, and only on, INCONCLUSIVE."""
        with pytest.raises(ValidationError):
            _artifact(VerificationStatus.CLEAN, reason="oops")
        with pytest.raises(ValidationError):
            _artifact(VerificationStatus.INCONCLUSIVE)

    def test_contains_namespace(self) -> None:
        """Test that contains_namespace follows the status."""
        assert _artifact(VerificationStatus.CONTAINS_NAMESPACE).contains_namespace
        assert not _artifact(VerificationStatus.CLEAN).contains_namespace


class TestVerifyReport:
    """Tests for VerifyReport."""

    def test_primary_decides(self) -> None:
        """Test that the primary artifact alone decides the outcome."""
        report = VerifyReport(
            primary=_artifact(VerificationStatus.CLEAN),
            dependencies=[_artifact(VerificationStatus.CONTAINS_NAMESPACE)],
        )
        assert not report.primary_contains_namespace
        assert len(report.all_artifacts) == 2
        assert report.all_artifacts[0] is report.primary

    def test_primary_inconclusive(self) -> None:
        """Test that an uninspectable primary artifact is neither clean nor failing."""
        report = VerifyReport(
            primary=_artifact(VerificationStatus.INCONCLUSIVE, reason="Malformed archive")
        )
        assert report.primary_inconclusive
        assert not report.primary_contains_namespace

        clean = VerifyReport(primary=_artifact(VerificationStatus.CLEAN))
        assert not clean.primary_inconclusive
