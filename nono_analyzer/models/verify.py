"""Binary verification models."""

from __future__ import annotations

from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field, model_validator


class VerificationStatus(Enum):
    """Outcome of inspecting one compiled artifact."""

    CONTAINS_NAMESPACE = "contains_namespace"
    CLEAN = "clean"
    INCONCLUSIVE = "inconclusive"


class ArtifactVerification(BaseModel):
    """Verification outcome for one artifact."""

    model_config = {"extra": "forbid"}

    package_name: str
    path: str = Field(description="Path of the inspected artifact")
    namespace: str = Field(description="Namespace that was searched for")
    status: VerificationStatus
    reason: Optional[str] = Field(
        default=None, description="Why the artifact could not be inspected"
    )

    @model_validator(mode="after")
    def _reason_only_when_inconclusive(self) -> ArtifactVerification:
        if (self.reason is not None) != (self.status == VerificationStatus.INCONCLUSIVE):
            raise ValueError("reason is required for, and only allowed on, inconclusive")
        return self

    @property
    def contains_namespace(self) -> bool:
        return self.status == VerificationStatus.CONTAINS_NAMESPACE


class VerifyReport(BaseModel):
    """Result of a verify run: the primary artifact plus dependency artifacts."""

    model_config = {"extra": "forbid"}

    primary: ArtifactVerification
    dependencies: list[ArtifactVerification] = Field(default_factory=list)

    @property
    def primary_contains_namespace(self) -> bool:
        """Exit status is decided by the primary artifact only."""
        return self.primary.contains_namespace

    @property
    def primary_inconclusive(self) -> bool:
        """True if the primary artifact could not be inspected."""
        return self.primary.status == VerificationStatus.INCONCLUSIVE

    @property
    def all_artifacts(self) -> list[ArtifactVerification]:
        return [self.primary, *self.dependencies]
