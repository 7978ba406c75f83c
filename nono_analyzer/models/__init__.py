"""Pydantic data models for nono-analyzer."""

from nono_analyzer.models.config import AnalyzerConfig, SupportOverride
from nono_analyzer.models.feature import (
    CauseArena,
    CauseKind,
    CauseRecord,
    Feature,
)
from nono_analyzer.models.metadata import (
    Dependency,
    DependencyKind,
    Metadata,
    Package,
    Resolve,
    ResolveNode,
    Target,
)
from nono_analyzer.models.options import CheckOptions, Verbosity
from nono_analyzer.models.support import (
    CheckReport,
    CheckResult,
    CrateSupport,
    IgnoredPackagesSummary,
    OffenseKind,
    SourceLocation,
    SourceOffense,
    SupportKind,
)
from nono_analyzer.models.verify import (
    ArtifactVerification,
    VerificationStatus,
    VerifyReport,
)

__all__ = [
    "AnalyzerConfig",
    "ArtifactVerification",
    "CauseArena",
    "CauseKind",
    "CauseRecord",
    "CheckOptions",
    "CheckReport",
    "CheckResult",
    "CrateSupport",
    "Dependency",
    "DependencyKind",
    "Feature",
    "IgnoredPackagesSummary",
    "Metadata",
    "OffenseKind",
    "Package",
    "Resolve",
    "ResolveNode",
    "SourceLocation",
    "SourceOffense",
    "SupportKind",
    "SupportOverride",
    "Target",
    "VerificationStatus",
    "Verbosity",
    "VerifyReport",
]
