"""Metadata, feature and dependency resolvers package."""

from nono_analyzer.resolvers.base import MetadataProvider
from nono_analyzer.resolvers.dependency import Activation, DependencyGraph
from nono_analyzer.resolvers.features import FeatureResolver, features_from_args
from nono_analyzer.resolvers.metadata import (
    CargoMetadataProvider,
    JsonFileMetadataProvider,
    parse_metadata,
)
from nono_analyzer.resolvers.replacement import (
    NullReplacementAdvisor,
    ReplacementAdvisor,
    RustdocReplacementAdvisor,
)

__all__ = [
    "Activation",
    "CargoMetadataProvider",
    "DependencyGraph",
    "FeatureResolver",
    "JsonFileMetadataProvider",
    "MetadataProvider",
    "NullReplacementAdvisor",
    "ReplacementAdvisor",
    "RustdocReplacementAdvisor",
    "features_from_args",
    "parse_metadata",
]
