"""Orchestration of check and verify runs."""
from __future__ import annotations

from pathlib import Path
from typing import Optional

import structlog
from rich.console import Console
from rich.progress import Progress, SpinnerColumn, TextColumn

from nono_analyzer.analysis.aggregate import get_crate_support
from nono_analyzer.analysis.filtering import filter_ignored_packages
from nono_analyzer.analysis.overrides import apply_support_overrides
from nono_analyzer.constants import DEFAULT_RUNTIME_NAMESPACE
from nono_analyzer.exceptions import PackageSelectionError, VerificationError
from nono_analyzer.models.config import AnalyzerConfig
from nono_analyzer.models.feature import CauseArena
from nono_analyzer.models.metadata import Metadata, Package
from nono_analyzer.models.options import CheckOptions
from nono_analyzer.models.support import (
    CheckReport,
    CheckResult,
    IgnoredPackagesSummary,
)
from nono_analyzer.models.verify import VerifyReport
from nono_analyzer.resolvers.base import MetadataProvider
from nono_analyzer.resolvers.dependency import Activation, DependencyGraph
from nono_analyzer.resolvers.features import features_from_args
from nono_analyzer.resolvers.replacement import (
    NullReplacementAdvisor,
    ReplacementAdvisor,
    RustdocReplacementAdvisor,
)
from nono_analyzer.verify.build import (
    CargoBuildRunner,
    library_artifact,
    primary_artifact,
)
from nono_analyzer.verify.dwarf import verify_artifact

log = structlog.get_logger("nono_analyzer.check")


def select_target_package(
    metadata: Metadata,
    package_name: Optional[str] = None,
    cwd: Optional[Path] = None,
) -> Package:
    """Pick the package to check from the workspace members.

    Args:
        metadata: Snapshot for the requested features.
        package_name: Name given with --package, if any.
        cwd: Working directory. Defaults to the process working directory.

    Returns:
        The selected workspace member.

    Raises:
        PackageSelectionError: If no member matches or the choice is ambiguous.
    """
    members = metadata.workspace_packages()
    candidates = [package.name for package in members]
    if not members:
        raise PackageSelectionError("No workspace member packages found")

    if package_name is not None:
        for package in members:
            if package.name == package_name:
                return package
        raise PackageSelectionError(
            f"Package '{package_name}' is not a workspace member", candidates
        )

    if len(members) == 1:
        return members[0]

    work_dir = (cwd or Path.cwd()).resolve()
    for package in members:
        manifest_dir = package.manifest_dir
        if manifest_dir is not None and manifest_dir.resolve() == work_dir:
            return package

    raise PackageSelectionError(
        "Multiple packages available; select one with --package", candidates
    )


def runtime_namespace(config: AnalyzerConfig) -> str:
    return config.runtime_namespace or DEFAULT_RUNTIME_NAMESPACE


def replacement_advisor(config: AnalyzerConfig) -> ReplacementAdvisor:
    """Advisor for `use` replacements, rustdoc-backed only when configured."""
    if config.suggest_replacements:
        return RustdocReplacementAdvisor()
    return NullReplacementAdvisor()


def _activate(
    provider: MetadataProvider,
    options: CheckOptions,
    arena: CauseArena,
    cwd: Optional[Path],
) -> tuple[Package, list[Activation]]:
    """Select the checked package and walk its activated dependency graph."""
    requested = provider.requested_metadata(options)
    selected = select_target_package(requested, options.package, cwd)

    full = provider.full_metadata()
    graph = DependencyGraph(full)
    root = graph.find_package(selected.id) or selected
    seeds = features_from_args(
        root.id, options.no_default_features, options.feature_names, arena
    )
    return root, graph.collect_activations(root, seeds, arena)


def run_check(
    provider: MetadataProvider,
    options: CheckOptions,
    config: Optional[AnalyzerConfig] = None,
    advisor: Optional[ReplacementAdvisor] = None,
    console: Optional[Console] = None,
    show_progress: bool = True,
    cwd: Optional[Path] = None,
) -> CheckReport:
    """Run a full compliance check.

    Args:
        provider: Source of the two metadata snapshots.
        options: Feature selection and target package.
        config: Analyzer configuration. Defaults to an empty configuration.
        advisor: Replacement advisor. Defaults to the one `config` selects.
        console: Optional Rich Console for progress display.
        show_progress: Whether to show a progress indicator.
        cwd: Working directory used for target selection.

    Returns:
        CheckReport with one result per activated (and not ignored) package,
        checked package first.

    Raises:
        MetadataError: If metadata cannot be obtained.
        PackageSelectionError: If the package to check cannot be determined.
    """
    config = config or AnalyzerConfig()
    advisor = advisor or replacement_advisor(config)
    namespace = runtime_namespace(config)
    arena = CauseArena()

    root, activations = _activate(provider, options, arena, cwd)
    filtered = filter_ignored_packages(activations, config, root.id)

    def analyze(activation: Activation) -> CheckResult:
        package = activation.package
        support = get_crate_support(package, namespace, advisor)
        log.debug(
            "check.package_analyzed",
            package=package.label,
            verdict=support.kind.value,
            features=len(activation.features),
        )
        return CheckResult(
            package_id=package.id,
            package_name=package.name,
            package_version=package.version,
            support=support,
            active_features=activation.features,
        )

    results: list[CheckResult] = []
    if console is not None and show_progress and filtered.activations:
        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            console=console,
            transient=True,
        ) as progress:
            task_id = progress.add_task(
                f"Analyzing {len(filtered.activations)} packages...",
                total=len(filtered.activations),
            )
            for activation in filtered.activations:
                results.append(analyze(activation))
                progress.advance(task_id)
    else:
        results = [analyze(activation) for activation in filtered.activations]

    results = apply_support_overrides(results, config)

    ignored_summary = None
    if filtered.ignored_count > 0:
        ignored_summary = IgnoredPackagesSummary(
            ignored_count=filtered.ignored_count,
            ignored_names=filtered.ignored_names,
        )

    return CheckReport(
        root_package_id=root.id,
        results=results,
        causes=arena,
        package_labels={a.package.id: a.package.label for a in activations},
        ignored_packages_summary=ignored_summary,
    )


def run_verify(
    provider: MetadataProvider,
    options: CheckOptions,
    config: Optional[AnalyzerConfig] = None,
    builder: Optional[CargoBuildRunner] = None,
    cwd: Optional[Path] = None,
) -> VerifyReport:
    """Build the checked package and inspect the produced artifacts.

    The primary artifact decides the outcome; archives of activated
    dependencies are inspected as supporting evidence.

    Args:
        provider: Source of the two metadata snapshots.
        options: Feature selection and target package.
        config: Analyzer configuration. Defaults to an empty configuration.
        builder: Build runner. Defaults to a CargoBuildRunner.
        cwd: Working directory used for target selection.

    Returns:
        VerifyReport for the primary and dependency artifacts.

    Raises:
        MetadataError: If metadata cannot be obtained.
        PackageSelectionError: If the package to check cannot be determined.
        BuildError: If the build fails.
        VerificationError: If the build produced no artifact for the package.
    """
    config = config or AnalyzerConfig()
    builder = builder or CargoBuildRunner()
    namespace = runtime_namespace(config)

    root, activations = _activate(provider, options, CauseArena(), cwd)
    filtered = filter_ignored_packages(activations, config, root.id)
    artifacts = builder.build(root.name, options)

    primary_path = primary_artifact(artifacts, root.id)
    if primary_path is None:
        raise VerificationError(f"The build produced no artifact for '{root.label}'")
    primary = verify_artifact(root.name, primary_path, namespace)

    dependencies = []
    for activation in filtered.activations:
        package = activation.package
        if package.id == root.id:
            continue
        path = library_artifact(artifacts, package.id)
        if path is None:
            log.debug("verify.no_library_artifact", package=package.label)
            continue
        dependencies.append(verify_artifact(package.name, path, namespace))

    return VerifyReport(primary=primary, dependencies=dependencies)
