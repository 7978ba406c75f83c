"""Dependency graph walking over a metadata snapshot.

Maps activated features to the concrete dependency packages that must be
analyzed, and computes the feature seed each of those packages receives.
"""
from __future__ import annotations

from collections import deque
from typing import Iterable, NamedTuple, Optional

import structlog

from nono_analyzer.constants import DEFAULT_FEATURE, DEPENDENCY_FEATURE_PREFIX
from nono_analyzer.exceptions import MetadataError
from nono_analyzer.models.feature import CauseArena, Feature, FeatureKey
from nono_analyzer.models.metadata import Dependency, DependencyKind, Metadata, Package
from nono_analyzer.resolvers.features import FeatureResolver

log = structlog.get_logger("nono_analyzer.resolvers")


class Activation(NamedTuple):
    """A package that is part of the build, with its own active features.

    Attributes:
        package: The activated package.
        features: Active features owned by the package (union of every request).
    """

    package: Package
    features: list[Feature]


class DependencyGraph:
    """Read-only view of packages and the resolve graph of one metadata snapshot."""

    def __init__(self, metadata: Metadata) -> None:
        """Index packages and resolve-graph edges.

        Args:
            metadata: Snapshot to resolve against. Should be the
                `--all-features` snapshot so every possible edge is present.
        """
        self._packages: dict[str, Package] = {pkg.id: pkg for pkg in metadata.packages}
        self._edges: dict[str, list[str]] = {}
        if metadata.resolve is not None:
            for node in metadata.resolve.nodes:
                self._edges[node.id] = list(node.dependencies)

    def find_package(self, package_id: str) -> Optional[Package]:
        return self._packages.get(package_id)

    def dependency_package_id(
        self, package: Package, dependency: Dependency
    ) -> Optional[str]:
        """Resolve a dependency edge to a concrete package id.

        Only packages adjacent to `package` in the resolve graph are
        considered, so other versions of a same-named package elsewhere in the
        graph are never picked.

        Args:
            package: Declaring package.
            dependency: Dependency record of `package`.

        Returns:
            The package id, or None if the package is missing from the resolve
            graph or the dependency was not resolved (e.g. an optional
            dependency absent from the snapshot).
        """
        adjacent = self._edges.get(package.id)
        if adjacent is None:
            return None
        for dep_id in adjacent:
            candidate = self._packages.get(dep_id)
            if candidate is not None and candidate.name == dependency.name:
                return dep_id
        return None

    @staticmethod
    def active_dependencies(
        package: Package, features: Iterable[Feature]
    ) -> list[Dependency]:
        """Dependencies activated for a resolved feature set.

        Args:
            package: Package whose dependencies are inspected.
            features: Resolved active features. Only features owned by
                `package` activate its optional dependencies.

        Returns:
            Normal-kind dependencies, de-duplicated by local name: all
            non-optional ones plus optional ones named by an active feature
            (`name` or `dep:name`).
        """
        feature_names = {f.name for f in features if f.package_id == package.id}

        candidates: list[Dependency] = []
        for dependency in package.dependencies:
            if not dependency.optional:
                candidates.append(dependency)
            elif (
                dependency.local_name in feature_names
                or f"{DEPENDENCY_FEATURE_PREFIX}{dependency.local_name}" in feature_names
            ):
                candidates.append(dependency)

        seen: set[str] = set()
        active: list[Dependency] = []
        for dependency in candidates:
            if dependency.kind != DependencyKind.NORMAL:
                continue
            if dependency.local_name in seen:
                continue
            seen.add(dependency.local_name)
            active.append(dependency)
        return active

    def dependency_packages(
        self, package: Package, dependencies: Iterable[Dependency]
    ) -> list[Package]:
        """Map dependency records to packages, skipping unresolvable ones."""
        packages: list[Package] = []
        for dependency in dependencies:
            dep_id = self.dependency_package_id(package, dependency)
            if dep_id is None:
                continue
            dep_package = self._packages.get(dep_id)
            if dep_package is not None and dep_package not in packages:
                packages.append(dep_package)
        return packages

    def fixed_dependency_features(
        self,
        package: Package,
        dependencies: Iterable[Dependency],
        arena: CauseArena,
    ) -> list[Feature]:
        """Features the manifest of `package` requests on its dependencies.

        These come from `features = [...]` lists and from default features
        that are not switched off, independent of the features active on
        `package` itself.

        Args:
            package: Declaring package.
            dependencies: Dependencies to collect requests for.
            arena: Cause arena receiving EXPLICIT/DEFAULT records.

        Returns:
            Features scoped to the dependency packages.
        """
        requested: list[Feature] = []
        for dependency in dependencies:
            dep_id = self.dependency_package_id(package, dependency)
            if dep_id is None:
                continue
            for name in dependency.features:
                requested.append(
                    Feature(
                        package_id=dep_id,
                        name=name,
                        cause=arena.explicit_cause(package.id),
                    )
                )
            if dependency.uses_default_features:
                requested.append(
                    Feature(
                        package_id=dep_id,
                        name=DEFAULT_FEATURE,
                        cause=arena.default_cause(package.id),
                    )
                )
        return requested

    def collect_activations(
        self,
        root: Package,
        seeds: Iterable[Feature],
        arena: CauseArena,
    ) -> list[Activation]:
        """Find every activated package and the union of its feature requests.

        Works through a queue of package ids. Each package keeps a seed map
        that only grows; whenever it grows the package is queued again, so the
        final feature set of every package is resolved from the requests of
        all activation paths before anything is analyzed.

        Args:
            root: Package being checked.
            seeds: Initial features of the root package.
            arena: Cause arena shared by the whole run.

        Returns:
            Activations in discovery order, root first.

        Raises:
            MetadataError: If the root package is not in the snapshot.
        """
        if self.find_package(root.id) is None:
            raise MetadataError(f"Package '{root.id}' is missing from the metadata")

        resolver = FeatureResolver(self, arena)
        requests: dict[str, dict[FeatureKey, Feature]] = {root.id: {}}
        for feature in seeds:
            requests[root.id].setdefault(feature.key, feature)

        order: list[str] = [root.id]
        active: set[str] = {root.id}
        resolved: dict[str, list[Feature]] = {}
        pending: deque[str] = deque([root.id])
        queued: set[str] = {root.id}

        def schedule(package_id: str) -> None:
            if package_id not in queued:
                queued.add(package_id)
                pending.append(package_id)

        while pending:
            package_id = pending.popleft()
            queued.discard(package_id)
            package = self._packages[package_id]

            features = resolver.resolve(package, list(requests[package_id].values()))
            own = [f for f in features if f.package_id == package_id]
            resolved[package_id] = own

            dependencies = self.active_dependencies(package, own)
            for dep_package in self.dependency_packages(package, dependencies):
                requests.setdefault(dep_package.id, {})
                if dep_package.id not in active:
                    active.add(dep_package.id)
                    order.append(dep_package.id)
                    schedule(dep_package.id)

            outgoing = self.fixed_dependency_features(package, dependencies, arena)
            outgoing.extend(f for f in features if f.package_id != package_id)
            for feature in outgoing:
                bucket = requests.setdefault(feature.package_id, {})
                if feature.key in bucket:
                    continue
                bucket[feature.key] = feature
                # Requests for packages that are not (yet) active wait until an
                # edge activates them.
                if feature.package_id in active:
                    schedule(feature.package_id)

        log.debug(
            "graph.activations_collected",
            root=root.name,
            packages=len(order),
            cause_records=len(arena.records),
        )
        return [Activation(self._packages[pid], resolved[pid]) for pid in order]
