"""Report fixtures shared by the output formatter tests."""
from __future__ import annotations

import pytest

from nono_analyzer.models.feature import CauseArena, Feature
from nono_analyzer.models.support import (
    CheckReport,
    CheckResult,
    CrateSupport,
    IgnoredPackagesSummary,
    OffenseKind,
    SourceLocation,
    SourceOffense,
)
from nono_analyzer.models.verify import ArtifactVerification, VerificationStatus, VerifyReport


def _result(name: str, version: str, support: CrateSupport, features=(), override=None) -> CheckResult:
    return CheckResult(
        package_id=f"{name}@{version}",
        package_name=name,
        package_version=version,
        support=support,
        active_features=list(features),
        override_reason=override,
    )


@pytest.fixture
def check_report() -> CheckReport:
    """Report for `app` with one passing, one feature-gated and one leaking dependency.

    `serde`'s `std` feature is enabled by its `default` feature, which `app`
    enables implicitly.
    """
    arena = CauseArena()
    default = Feature(package_id="serde@1.0.0", name="default", cause=arena.default_cause("app@0.1.0"))
    std = Feature(package_id="serde@1.0.0", name="std", cause=arena.feature_cause(default))
    cli = Feature(package_id="app@0.1.0", name="alloc", cause=arena.cli_cause("alloc"))

    location = SourceLocation(
        path="/src/leaky/src/lib.rs",
        line=2,
        column=4,
        end_line=2,
        end_column=16,
        statement="std::fs::File",
        source_line="use std::fs::File;",
    )
    results = [
        _result("app", "0.1.0", CrateSupport.no_offense_detected(), [cli]),
        _result("serde", "1.0.0", CrateSupport.only_without_feature("std"), [default, std]),
        _result(
            "leaky",
            "0.2.0",
            CrateSupport.from_offenses(
                [
                    SourceOffense(kind=OffenseKind.USE_STD_STATEMENT, location=location, suggestion="core::fs::File"),
                    SourceOffense(kind=OffenseKind.MISSING_NO_STD_ATTRIBUTE),
                ]
            ),
        ),
        _result("derive", "1.0.0", CrateSupport.proc_macro()),
    ]
    return CheckReport(
        root_package_id="app@0.1.0",
        results=results,
        causes=arena,
        package_labels={
            "app@0.1.0": "app:0.1.0",
            "serde@1.0.0": "serde:1.0.0",
            "leaky@0.2.0": "leaky:0.2.0",
            "derive@1.0.0": "derive:1.0.0",
        },
        ignored_packages_summary=IgnoredPackagesSummary(ignored_count=1, ignored_names=["noisy"]),
    )


@pytest.fixture
def passing_report() -> CheckReport:
    return CheckReport(
        root_package_id="app@0.1.0",
        results=[
            _result("app", "0.1.0", CrateSupport.no_offense_detected()),
            _result(
                "broken",
                "0.1.0",
                CrateSupport.unanalyzable("Unable to parse 'lib.rs'"),
                override="vendored fork is no_std",
            ),
        ],
        package_labels={"app@0.1.0": "app:0.1.0", "broken@0.1.0": "broken:0.1.0"},
    )


@pytest.fixture
def verify_report() -> VerifyReport:
    return VerifyReport(
        primary=ArtifactVerification(
            package_name="app",
            path="/target/debug/libapp.rlib",
            namespace="std",
            status=VerificationStatus.CONTAINS_NAMESPACE,
        ),
        dependencies=[
            ArtifactVerification(
                package_name="dep",
                path="/target/debug/deps/libdep.rlib",
                namespace="std",
                status=VerificationStatus.CLEAN,
            ),
            ArtifactVerification(
                package_name="odd",
                path="/target/debug/deps/libodd.rlib",
                namespace="std",
                status=VerificationStatus.INCONCLUSIVE,
                reason="Malformed archive",
            ),
        ],
    )


@pytest.fixture
def inconclusive_verify_report() -> VerifyReport:
    """Report whose primary artifact could not be inspected."""
    return VerifyReport(
        primary=ArtifactVerification(
            package_name="app",
            path="/target/debug/libapp.rlib",
            namespace="std",
            status=VerificationStatus.INCONCLUSIVE,
            reason="Malformed archive",
        ),
    )
