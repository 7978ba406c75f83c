"""Package filtering for the ignored_packages configuration."""

from __future__ import annotations

from typing import NamedTuple

from nono_analyzer.models.config import AnalyzerConfig
from nono_analyzer.resolvers.dependency import Activation


class FilterResult(NamedTuple):
    """Result of filtering activated packages.

    Attributes:
        activations: Activations left to analyze, in their original order.
        ignored_names: Names of packages that were left out.
    """

    activations: list[Activation]
    ignored_names: list[str]

    @property
    def ignored_count(self) -> int:
        return len(self.ignored_names)


def filter_ignored_packages(
    activations: list[Activation],
    config: AnalyzerConfig,
    root_package_id: str,
) -> FilterResult:
    """Drop activations whose package is listed in ignored_packages.

    Package name matching is case-sensitive. The checked package itself is
    never ignored.

    Args:
        activations: Activated packages, root first.
        config: Configuration with the ignored_packages list.
        root_package_id: Id of the checked package.

    Returns:
        FilterResult with the remaining activations and ignored names.
    """
    if not config.ignored_packages:
        return FilterResult(activations=activations, ignored_names=[])

    ignored_set = set(config.ignored_packages)
    kept: list[Activation] = []
    ignored_names: list[str] = []
    for activation in activations:
        package = activation.package
        if package.id != root_package_id and package.name in ignored_set:
            ignored_names.append(package.name)
        else:
            kept.append(activation)

    return FilterResult(activations=kept, ignored_names=ignored_names)
