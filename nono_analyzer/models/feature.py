"""Activated feature models and their cause chains.

A Feature names one activated flag scoped to the package that owns it. Why it
is active is recorded as an index into a CauseArena: each cause record either
terminates the chain (default features, explicit manifest requests, command
line flags) or points back at the parent feature's cause record.
"""
from __future__ import annotations

from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


class CauseKind(Enum):
    """Why a feature is active."""

    FEATURE = "feature"
    DEFAULT = "default"
    EXPLICIT = "explicit"
    CLI_FLAG = "cli_flag"


class CauseRecord(BaseModel):
    """One link of a cause chain.

    FEATURE records name the parent feature and point at the parent's own
    cause via `parent`. All other kinds are root causes.
    """

    model_config = {"extra": "forbid", "frozen": True}

    kind: CauseKind
    package_id: Optional[str] = Field(
        default=None,
        description="Package owning the parent feature (FEATURE) or "
        "the package that requested the feature (DEFAULT, EXPLICIT)",
    )
    feature_name: Optional[str] = Field(
        default=None, description="Parent feature name (FEATURE only)"
    )
    flag: Optional[str] = Field(default=None, description="CLI flag (CLI_FLAG only)")
    parent: Optional[int] = Field(
        default=None, description="Index of the parent feature's cause record"
    )

    @property
    def is_root(self) -> bool:
        """True if the chain terminates at this record."""
        return self.kind != CauseKind.FEATURE


FeatureKey = tuple[str, str]


class Feature(BaseModel):
    """One activated feature flag, scoped to its owning package."""

    model_config = {"extra": "forbid", "frozen": True}

    package_id: str = Field(description="Id of the package owning the feature")
    name: str = Field(description="Feature name")
    cause: int = Field(ge=0, description="Index of the cause record in the arena")

    @property
    def key(self) -> FeatureKey:
        """Identity used for de-duplication: (package id, name)."""
        return (self.package_id, self.name)


class CauseArena(BaseModel):
    """Append-only store of cause records addressed by integer index."""

    model_config = {"extra": "forbid"}

    records: list[CauseRecord] = Field(default_factory=list)

    def add(self, record: CauseRecord) -> int:
        """Store a record and return its index."""
        self.records.append(record)
        return len(self.records) - 1

    def get(self, index: int) -> CauseRecord:
        """Return the record at an index."""
        return self.records[index]

    def default_cause(self, requesting_package_id: str) -> int:
        """Record that `requesting_package_id` implicitly enabled default features."""
        return self.add(
            CauseRecord(kind=CauseKind.DEFAULT, package_id=requesting_package_id)
        )

    def explicit_cause(self, requesting_package_id: str) -> int:
        """Record an explicit feature request in `requesting_package_id`'s manifest."""
        return self.add(
            CauseRecord(kind=CauseKind.EXPLICIT, package_id=requesting_package_id)
        )

    def cli_cause(self, flag: str) -> int:
        """Record a feature requested on the command line."""
        return self.add(CauseRecord(kind=CauseKind.CLI_FLAG, flag=flag))

    def feature_cause(self, parent: Feature) -> int:
        """Record that a feature was activated by `parent`."""
        return self.add(
            CauseRecord(
                kind=CauseKind.FEATURE,
                package_id=parent.package_id,
                feature_name=parent.name,
                parent=parent.cause,
            )
        )

    def chain(self, index: int) -> list[CauseRecord]:
        """Walk a cause chain from `index` back to its root cause.

        Args:
            index: Index of the first record.

        Returns:
            Records ordered from the nearest cause to the root cause.
        """
        chain: list[CauseRecord] = []
        seen: set[int] = set()
        current: Optional[int] = index
        while current is not None and current not in seen:
            seen.add(current)
            record = self.records[current]
            chain.append(record)
            current = record.parent
        return chain

    def root_cause(self, index: int) -> CauseRecord:
        """Return the record terminating the chain that starts at `index`."""
        return self.chain(index)[-1]
