"""Package metadata models parsed from `cargo metadata` output.

These records form the read-only snapshot every analysis stage works from.
Unknown keys in the JSON document are ignored so newer Cargo releases that
add fields keep parsing.
"""
from __future__ import annotations

from enum import Enum
from pathlib import Path
from typing import Any, Optional

from pydantic import BaseModel, Field, field_validator

TARGET_KIND_LIB = "lib"
TARGET_KIND_BIN = "bin"
TARGET_KIND_PROC_MACRO = "proc-macro"

# Library flavours that produce linkable library code
_LIBRARY_KINDS = {TARGET_KIND_LIB, "rlib", "staticlib", "dylib", "cdylib"}


class DependencyKind(Enum):
    """Kind of a dependency edge."""

    NORMAL = "normal"
    BUILD = "build"
    DEV = "dev"


class Dependency(BaseModel):
    """An edge from a package to another package by name."""

    model_config = {"extra": "ignore", "frozen": True}

    name: str = Field(description="Name of the depended-upon package")
    kind: DependencyKind = Field(
        default=DependencyKind.NORMAL,
        description="normal, build or dev dependency",
    )
    optional: bool = Field(default=False, description="Only enabled through a feature")
    uses_default_features: bool = Field(
        default=True,
        description="Whether the dependency's default features are requested",
    )
    features: list[str] = Field(
        default_factory=list,
        description="Features explicitly requested in the manifest",
    )
    rename: Optional[str] = Field(
        default=None,
        description="Local name when the dependency is renamed in the manifest",
    )

    @field_validator("kind", mode="before")
    @classmethod
    def _null_kind_is_normal(cls, value: Any) -> Any:
        # cargo metadata encodes normal dependencies as `"kind": null`
        return DependencyKind.NORMAL if value is None else value

    @property
    def local_name(self) -> str:
        """Name the declaring package uses for this dependency in its features."""
        return self.rename or self.name


class Target(BaseModel):
    """A build target of a package."""

    model_config = {"extra": "ignore", "frozen": True}

    name: str = Field(description="Target name")
    kind: list[str] = Field(default_factory=list, description="Target kinds")
    src_path: str = Field(description="Path of the target's root source file")

    @property
    def is_library(self) -> bool:
        """True if the target produces linkable library code."""
        return any(kind in _LIBRARY_KINDS for kind in self.kind)

    @property
    def is_binary(self) -> bool:
        """True if the target is an executable."""
        return TARGET_KIND_BIN in self.kind

    @property
    def is_proc_macro(self) -> bool:
        """True if the target is a procedural macro."""
        return TARGET_KIND_PROC_MACRO in self.kind


class Package(BaseModel):
    """One resolved build unit."""

    model_config = {"extra": "ignore", "frozen": True}

    id: str = Field(description="Unique package id")
    name: str = Field(description="Package name")
    version: str = Field(description="Package version")
    dependencies: list[Dependency] = Field(default_factory=list)
    features: dict[str, list[str]] = Field(
        default_factory=dict,
        description="Feature table: feature name -> activated features/dependencies",
    )
    targets: list[Target] = Field(default_factory=list)
    manifest_path: Optional[str] = Field(default=None)

    @property
    def label(self) -> str:
        """Display label in `name:version` form."""
        return f"{self.name}:{self.version}"

    @property
    def is_proc_macro(self) -> bool:
        """True if the package has a procedural-macro target."""
        return any(target.is_proc_macro for target in self.targets)

    def lib_target_sources(self) -> list[str]:
        """Root source files of the library targets."""
        return [target.src_path for target in self.targets if target.is_library]

    def bin_target_sources(self) -> list[str]:
        """Root source files of the binary targets."""
        return [target.src_path for target in self.targets if target.is_binary]

    def entry_source(self) -> Optional[Path]:
        """Entry-point source file checked for the compliance marker.

        The library root wins; binary-only packages use their first binary.
        """
        sources = self.lib_target_sources() or self.bin_target_sources()
        return Path(sources[0]) if sources else None

    def find_dependency(self, local_name: str) -> Optional[Dependency]:
        """Find a dependency by the name used in this package's feature table."""
        for dependency in self.dependencies:
            if dependency.local_name == local_name:
                return dependency
        return None

    @property
    def manifest_dir(self) -> Optional[Path]:
        """Directory containing the package manifest."""
        if self.manifest_path is None:
            return None
        return Path(self.manifest_path).parent


class ResolveNode(BaseModel):
    """One node of the resolve graph."""

    model_config = {"extra": "ignore", "frozen": True}

    id: str
    dependencies: list[str] = Field(default_factory=list)


class Resolve(BaseModel):
    """Resolve graph: package id -> dependency package ids."""

    model_config = {"extra": "ignore", "frozen": True}

    nodes: list[ResolveNode] = Field(default_factory=list)
    root: Optional[str] = None


class Metadata(BaseModel):
    """A full `cargo metadata --format-version 1` snapshot."""

    model_config = {"extra": "ignore", "frozen": True}

    packages: list[Package] = Field(default_factory=list)
    workspace_members: list[str] = Field(default_factory=list)
    resolve: Optional[Resolve] = None
    workspace_root: Optional[str] = None
    target_directory: Optional[str] = None

    def find_package(self, package_id: str) -> Optional[Package]:
        """Find a package by id.

        Args:
            package_id: Package id to look up.

        Returns:
            The package, or None if it is not part of the snapshot.
        """
        for package in self.packages:
            if package.id == package_id:
                return package
        return None

    def workspace_packages(self) -> list[Package]:
        """Packages that are members of the workspace, in member order."""
        by_id = {package.id: package for package in self.packages}
        return [by_id[member] for member in self.workspace_members if member in by_id]
