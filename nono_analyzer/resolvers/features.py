"""Transitive feature resolution.

Computes which features are activated by a set of seed features, following
each package's feature table, including cross-package references of the form
`dependency/feature`.
"""
from __future__ import annotations

from typing import TYPE_CHECKING, Iterable, Iterator

from nono_analyzer.constants import (
    DEFAULT_FEATURE,
    DEPENDENCY_FEATURE_PREFIX,
    DEPENDENCY_FEATURE_SEPARATOR,
    WEAK_DEPENDENCY_MARKER,
)
from nono_analyzer.models.feature import CauseArena, Feature, FeatureKey
from nono_analyzer.models.metadata import Package

if TYPE_CHECKING:
    from nono_analyzer.resolvers.dependency import DependencyGraph


def features_from_args(
    package_id: str,
    no_default_features: bool,
    feature_names: Iterable[str],
    arena: CauseArena,
) -> list[Feature]:
    """Build the seed features of the checked package from CLI options.

    Args:
        package_id: Id of the checked package.
        no_default_features: If True, `default` is not activated.
        feature_names: Feature names given with --features.
        arena: Cause arena for the run.

    Returns:
        Seed features, `default` first when enabled.
    """
    seeds: list[Feature] = []
    if not no_default_features:
        seeds.append(
            Feature(
                package_id=package_id,
                name=DEFAULT_FEATURE,
                cause=arena.default_cause(package_id),
            )
        )
    for name in feature_names:
        name = name.strip()
        if not name:
            continue
        seeds.append(
            Feature(package_id=package_id, name=name, cause=arena.cli_cause(name))
        )
    return seeds


class FeatureResolver:
    """Resolves the transitive closure of activated features.

    The resolver holds no state between calls besides the graph it looks
    dependencies up in and the arena it appends cause records to.
    """

    def __init__(self, graph: DependencyGraph, arena: CauseArena) -> None:
        """Initialize the resolver.

        Args:
            graph: Dependency graph used to resolve `dep/feature` references.
            arena: Cause arena receiving one FEATURE record per activation.
        """
        self._graph = graph
        self._arena = arena

    def resolve(self, package: Package, seeds: Iterable[Feature]) -> list[Feature]:
        """Resolve every feature transitively activated by `seeds`.

        Features are de-duplicated by (package id, name); the first one
        inserted keeps its cause chain. Membership is checked against the
        resolved and pending maps, so feature cycles terminate.

        Args:
            package: Package whose feature table is followed.
            seeds: Seed features. Seeds owned by other packages are returned
                unchanged and not expanded.

        Returns:
            Resolved features in resolution order, including features scoped
            to dependencies of `package` (from `dep/feature` references).
        """
        resolved: dict[FeatureKey, Feature] = {}
        unresolved: dict[FeatureKey, Feature] = {}
        for seed in seeds:
            unresolved.setdefault(seed.key, seed)

        while unresolved:
            key = next(iter(unresolved))
            feature = unresolved.pop(key)
            resolved[key] = feature

            if feature.package_id != package.id:
                continue

            for target in package.features.get(feature.name, []):
                for activated in self._activate(package, feature, target):
                    if activated.key in resolved or activated.key in unresolved:
                        continue
                    unresolved[activated.key] = activated

        return list(resolved.values())

    def resolve_for_feature(self, package: Package, feature: Feature) -> list[Feature]:
        """Resolve the closure of a single feature (including itself)."""
        return self.resolve(package, [feature])

    def _activate(
        self, package: Package, parent: Feature, target: str
    ) -> Iterator[Feature]:
        """Turn one feature-table entry into the features it activates."""
        if (
            DEPENDENCY_FEATURE_SEPARATOR in target
            and not target.startswith(DEPENDENCY_FEATURE_PREFIX)
        ):
            dep_name, dep_feature = target.split(DEPENDENCY_FEATURE_SEPARATOR, 1)
            weak = dep_name.endswith(WEAK_DEPENDENCY_MARKER)
            dep_name = dep_name.rstrip(WEAK_DEPENDENCY_MARKER)

            if not weak:
                # `dep/feat` also switches on an optional `dep`
                yield Feature(
                    package_id=package.id,
                    name=dep_name,
                    cause=self._arena.feature_cause(parent),
                )

            dependency = package.find_dependency(dep_name)
            if dependency is None:
                return
            dep_id = self._graph.dependency_package_id(package, dependency)
            if dep_id is None:
                return
            yield Feature(
                package_id=dep_id,
                name=dep_feature,
                cause=self._arena.feature_cause(parent),
            )
            return

        yield Feature(
            package_id=package.id,
            name=target,
            cause=self._arena.feature_cause(parent),
        )
