"""Compiled-artifact verification for nono-analyzer."""
from nono_analyzer.verify.archive import is_archive, iter_object_members
from nono_analyzer.verify.build import (
    BuildArtifact,
    CargoBuildRunner,
    library_artifact,
    parse_build_messages,
    primary_artifact,
)
from nono_analyzer.verify.dwarf import (
    archive_contains_namespace,
    artifact_contains_namespace,
    object_contains_namespace,
    verify_artifact,
)

__all__ = [
    "BuildArtifact",
    "CargoBuildRunner",
    "archive_contains_namespace",
    "artifact_contains_namespace",
    "is_archive",
    "iter_object_members",
    "library_artifact",
    "object_contains_namespace",
    "parse_build_messages",
    "primary_artifact",
    "verify_artifact",
]
