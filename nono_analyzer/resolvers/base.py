"""Metadata provider interface."""

from abc import ABC, abstractmethod
from typing import Sequence

from nono_analyzer.models.metadata import Metadata
from nono_analyzer.models.options import CheckOptions

ALL_FEATURES_ARGS = ("--all-features",)


class MetadataProvider(ABC):
    """Abstract base class for package metadata sources.

    Every check needs two snapshots: one reflecting only the requested
    feature flags (to pick and seed the checked package) and one reflecting
    every possible feature (so every dependency edge that could exist is
    present in the resolve graph).
    """

    @abstractmethod
    def load(self, extra_args: Sequence[str] = ()) -> Metadata:
        """Load a metadata snapshot.

        Args:
            extra_args: Feature selection arguments for the snapshot.

        Returns:
            Parsed metadata snapshot.

        Raises:
            MetadataError: If the metadata cannot be obtained or parsed.
        """

    def requested_metadata(self, options: CheckOptions) -> Metadata:
        """Snapshot for the features requested in `options`."""
        return self.load(options.cargo_feature_args())

    def full_metadata(self) -> Metadata:
        """Snapshot with every feature of every workspace member enabled."""
        return self.load(ALL_FEATURES_ARGS)
