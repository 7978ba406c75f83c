"""Compliance verdict models."""

from __future__ import annotations

from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field, model_validator

from nono_analyzer.models.feature import CauseArena, Feature


class OffenseKind(Enum):
    """Kinds of source-level violations."""

    MISSING_NO_STD_ATTRIBUTE = "missing_no_std_attribute"
    USE_STD_STATEMENT = "use_std_statement"


class SourceLocation(BaseModel):
    """Where an offense was found.

    Lines are 1-based, columns are 0-based character offsets.
    """

    model_config = {"extra": "forbid", "frozen": True}

    path: str = Field(description="Source file path")
    line: int = Field(ge=1)
    column: int = Field(ge=0)
    end_line: int = Field(ge=1)
    end_column: int = Field(ge=0)
    statement: str = Field(description="Source text of the offending use tree")
    source_line: str = Field(default="", description="Full text of the first line")

    @property
    def path_parts(self) -> list[str]:
        """`std::path::PathBuf` -> `["std", "path", "PathBuf"]`."""
        return [part.strip() for part in self.statement.split("::")]


class SourceOffense(BaseModel):
    """One concrete violation."""

    model_config = {"extra": "forbid", "frozen": True}

    kind: OffenseKind
    location: Optional[SourceLocation] = None
    suggestion: Optional[str] = Field(
        default=None, description="Suggested replacement for the offending path"
    )


class SupportKind(Enum):
    """Verdict variants for one package."""

    ONLY_WITHOUT_FEATURE = "only_without_feature"
    PROC_MACRO = "proc_macro"
    SOURCE_OFFENSES = "source_offenses"
    NO_OFFENSE_DETECTED = "no_offense_detected"
    UNANALYZABLE = "unanalyzable"


class CrateSupport(BaseModel):
    """Compliance verdict for one package.

    Only the payload matching `kind` may be set: `feature` for
    ONLY_WITHOUT_FEATURE, `offenses` for SOURCE_OFFENSES and `reason` for
    UNANALYZABLE.
    """

    model_config = {"extra": "forbid", "frozen": True}

    kind: SupportKind
    feature: Optional[str] = None
    offenses: list[SourceOffense] = Field(default_factory=list)
    reason: Optional[str] = None

    @model_validator(mode="after")
    def _check_payload(self) -> CrateSupport:
        if (self.feature is not None) != (self.kind == SupportKind.ONLY_WITHOUT_FEATURE):
            raise ValueError("feature is required for, and only allowed on, only_without_feature")
        if self.offenses and self.kind != SupportKind.SOURCE_OFFENSES:
            raise ValueError("offenses are only allowed on source_offenses")
        if self.kind == SupportKind.SOURCE_OFFENSES and not self.offenses:
            raise ValueError("source_offenses requires at least one offense")
        if (self.reason is not None) != (self.kind == SupportKind.UNANALYZABLE):
            raise ValueError("reason is required for, and only allowed on, unanalyzable")
        return self

    @classmethod
    def only_without_feature(cls, feature: str) -> CrateSupport:
        """Package is no_std unless `feature` is enabled."""
        return cls(kind=SupportKind.ONLY_WITHOUT_FEATURE, feature=feature)

    @classmethod
    def proc_macro(cls) -> CrateSupport:
        """Procedural macros are never linked into the final binary."""
        return cls(kind=SupportKind.PROC_MACRO)

    @classmethod
    def no_offense_detected(cls) -> CrateSupport:
        return cls(kind=SupportKind.NO_OFFENSE_DETECTED)

    @classmethod
    def unanalyzable(cls, reason: str) -> CrateSupport:
        return cls(kind=SupportKind.UNANALYZABLE, reason=reason)

    @classmethod
    def from_offenses(cls, offenses: list[SourceOffense]) -> CrateSupport:
        """SOURCE_OFFENSES for a non-empty list, NO_OFFENSE_DETECTED otherwise."""
        if not offenses:
            return cls.no_offense_detected()
        return cls(kind=SupportKind.SOURCE_OFFENSES, offenses=offenses)

    @property
    def is_authoritative(self) -> bool:
        """True if no further source files need to be inspected."""
        return self.kind in (SupportKind.ONLY_WITHOUT_FEATURE, SupportKind.PROC_MACRO)


class CheckResult(BaseModel):
    """Final per-package record consumed by the reporters."""

    model_config = {"extra": "forbid"}

    package_id: str
    package_name: str
    package_version: str
    support: CrateSupport
    active_features: list[Feature] = Field(default_factory=list)
    override_reason: Optional[str] = Field(
        default=None, description="Reason from a configured verdict override"
    )

    @property
    def is_overridden(self) -> bool:
        return self.override_reason is not None

    def find_active_feature(self, name: str) -> Optional[Feature]:
        """Find an active feature of this package by name."""
        for feature in self.active_features:
            if feature.name == name:
                return feature
        return None

    def is_feature_active(self, name: str) -> bool:
        return self.find_active_feature(name) is not None

    @property
    def compliant_by_itself(self) -> bool:
        """Whether this package alone can be built in no_std mode.

        Overridden results always count as compliant.
        """
        if self.is_overridden:
            return True
        kind = self.support.kind
        if kind in (SupportKind.PROC_MACRO, SupportKind.NO_OFFENSE_DETECTED):
            return True
        if kind == SupportKind.ONLY_WITHOUT_FEATURE:
            return not self.is_feature_active(self.support.feature or "")
        return False

    @property
    def std_because_feature(self) -> bool:
        """True if the package fails only because its gating feature is active."""
        return (
            self.support.kind == SupportKind.ONLY_WITHOUT_FEATURE
            and not self.compliant_by_itself
        )


class IgnoredPackagesSummary(BaseModel):
    """Summary of packages skipped due to the ignored_packages config."""

    model_config = {"extra": "forbid"}

    ignored_count: int = Field(default=0)
    ignored_names: list[str] = Field(default_factory=list)


class CheckReport(BaseModel):
    """Result of a full check run."""

    model_config = {"extra": "forbid"}

    root_package_id: str
    results: list[CheckResult] = Field(default_factory=list)
    causes: CauseArena = Field(default_factory=CauseArena)
    package_labels: dict[str, str] = Field(
        default_factory=dict,
        description="Package id -> `name:version`, for printing cause chains",
    )
    ignored_packages_summary: Optional[IgnoredPackagesSummary] = None

    @property
    def total_packages(self) -> int:
        return len(self.results)

    @property
    def failures(self) -> list[CheckResult]:
        """Results that are not compliant by themselves."""
        return [result for result in self.results if not result.compliant_by_itself]

    @property
    def has_failures(self) -> bool:
        return len(self.failures) > 0

    def package_label(self, package_id: Optional[str]) -> str:
        """Display label for a package id, `UNPRINTABLE` if unknown."""
        if package_id is None:
            return "UNPRINTABLE"
        return self.package_labels.get(package_id, "UNPRINTABLE")
