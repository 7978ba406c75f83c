"""Source analysis logic for nono-analyzer."""
from nono_analyzer.analysis.aggregate import (
    get_crate_support,
    get_crate_support_from_source,
)
from nono_analyzer.analysis.attributes import MarkerKind, NoStdMarker, classify_meta
from nono_analyzer.analysis.filtering import FilterResult, filter_ignored_packages
from nono_analyzer.analysis.overrides import apply_support_overrides
from nono_analyzer.analysis.source import analyze_source, analyze_source_file

__all__ = [
    "FilterResult",
    "MarkerKind",
    "NoStdMarker",
    "analyze_source",
    "analyze_source_file",
    "apply_support_overrides",
    "classify_meta",
    "filter_ignored_packages",
    "get_crate_support",
    "get_crate_support_from_source",
]
