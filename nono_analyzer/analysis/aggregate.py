"""Combine a package's per-file results into one verdict."""
from __future__ import annotations

from pathlib import Path
from typing import Optional

import structlog

from nono_analyzer.analysis.source import analyze_source_file
from nono_analyzer.constants import DEFAULT_RUNTIME_NAMESPACE
from nono_analyzer.exceptions import SourceAnalysisError
from nono_analyzer.models.metadata import Package
from nono_analyzer.models.support import CrateSupport, SourceOffense, SupportKind
from nono_analyzer.resolvers.replacement import ReplacementAdvisor

log = structlog.get_logger("nono_analyzer.analysis")


def other_source_files(entry: Path) -> list[Path]:
    """Every `*.rs` file below the entry file's directory, except the entry itself.

    Sorted for deterministic offense order.
    """
    entry_resolved = entry.resolve()
    return sorted(
        path
        for path in entry.parent.rglob("*.rs")
        if path.is_file() and path.resolve() != entry_resolved
    )


def get_crate_support_from_source(
    entry: Path,
    namespace: str = DEFAULT_RUNTIME_NAMESPACE,
    advisor: Optional[ReplacementAdvisor] = None,
) -> CrateSupport:
    """Analyze a package's source tree starting at its entry file.

    The entry file is analyzed first; a feature-gated verdict there is
    authoritative. Otherwise every other file is scanned for runtime imports
    only and the findings are appended to the entry file's offenses.

    Raises:
        SourceAnalysisError: If any file cannot be read or parsed.
    """
    entry_support = analyze_source_file(entry, True, namespace, advisor)
    if entry_support.is_authoritative:
        return entry_support

    offenses: list[SourceOffense] = list(entry_support.offenses)
    for path in other_source_files(entry):
        file_support = analyze_source_file(path, False, namespace, advisor)
        if file_support.kind == SupportKind.SOURCE_OFFENSES:
            offenses.extend(file_support.offenses)

    return CrateSupport.from_offenses(offenses)


def get_crate_support(
    package: Package,
    namespace: str = DEFAULT_RUNTIME_NAMESPACE,
    advisor: Optional[ReplacementAdvisor] = None,
) -> CrateSupport:
    """Compute the compliance verdict for one package.

    Procedural macros are compliant without looking at their source. A
    package whose source cannot be analyzed gets an UNANALYZABLE verdict
    instead of aborting the run.

    Args:
        package: Package to analyze.
        namespace: Namespace of the excluded runtime.
        advisor: Suggests replacements for offending imports.

    Returns:
        The package's CrateSupport.
    """
    if package.is_proc_macro:
        return CrateSupport.proc_macro()

    entry = package.entry_source()
    if entry is None:
        log.debug("aggregate.no_entry_point", package=package.name)
        return CrateSupport.no_offense_detected()

    try:
        return get_crate_support_from_source(entry, namespace, advisor)
    except SourceAnalysisError as e:
        log.warning("aggregate.unanalyzable", package=package.name, reason=str(e))
        return CrateSupport.unanalyzable(str(e))
