"""Static compliance check of a single Rust source file.

Entry-point files (library or binary roots) must carry a no_std marker;
every file is checked for top-level `use` declarations rooted at the
excluded runtime.
"""
from __future__ import annotations

from pathlib import Path
from typing import Any, Iterator, Optional

import structlog
import tree_sitter_rust
from tree_sitter import Language, Parser

from nono_analyzer.analysis.attributes import MarkerKind, NoStdMarker, classify_attribute
from nono_analyzer.constants import DEFAULT_RUNTIME_NAMESPACE
from nono_analyzer.exceptions import SourceAnalysisError
from nono_analyzer.models.support import (
    CrateSupport,
    OffenseKind,
    SourceLocation,
    SourceOffense,
)
from nono_analyzer.resolvers.replacement import NullReplacementAdvisor, ReplacementAdvisor

log = structlog.get_logger("nono_analyzer.analysis")

RUST_LANGUAGE = Language(tree_sitter_rust.language())


def parse_rust(source: bytes, path: Path) -> Any:
    """Parse Rust source into a tree-sitter root node.

    Tree-sitter recovers from syntax errors, so only errors at the top level
    (where attributes and imports live) make a file unparsable.

    Raises:
        SourceAnalysisError: If the file's top level cannot be parsed.
    """
    tree = Parser(RUST_LANGUAGE).parse(source)
    root = tree.root_node
    if root.type != "source_file":
        raise SourceAnalysisError(f"Unable to parse '{path}'")
    for child in root.children:
        if child.type == "ERROR" or child.is_missing:
            line = child.start_point[0] + 1
            raise SourceAnalysisError(f"Unable to parse '{path}': syntax error at line {line}")
        if child.type in ("inner_attribute_item", "use_declaration") and child.has_error:
            line = child.start_point[0] + 1
            raise SourceAnalysisError(f"Unable to parse '{path}': syntax error at line {line}")
    return root


def crate_markers(root: Any) -> list[NoStdMarker]:
    """Classify every crate-level (inner) attribute of a file."""
    markers: list[NoStdMarker] = []
    for child in root.children:
        if child.type != "inner_attribute_item":
            continue
        for attribute in child.named_children:
            if attribute.type == "attribute":
                markers.append(classify_attribute(attribute))
    return markers


def _leftmost_segment(node: Any) -> Optional[str]:
    """First segment of a (possibly `::`-prefixed) path node."""
    while node is not None and node.type == "scoped_identifier":
        path = node.child_by_field_name("path")
        if path is None:
            node = node.child_by_field_name("name")
            break
        node = path
    if node is None or node.type != "identifier":
        return None
    return node.text.decode("utf-8")


def use_tree_root(argument: Any) -> Optional[str]:
    """Root segment of a use tree that is a path through that segment.

    `std::fs::File`, `std::{fs, io}`, `std::io::*` and `std::fs::File as F`
    all return `std`. Trees without a `root::` path prefix (`use std;`,
    `use std as s;`, `use {std::fs};`) return None and are not inspected.
    """
    kind = argument.type
    if kind == "scoped_identifier":
        return _leftmost_segment(argument)
    if kind == "scoped_use_list":
        return _leftmost_segment(argument.child_by_field_name("path"))
    if kind == "use_as_clause":
        path = argument.child_by_field_name("path")
        if path is not None and path.type == "scoped_identifier":
            return _leftmost_segment(path)
        return None
    if kind == "use_wildcard":
        named = argument.named_children
        return _leftmost_segment(named[0]) if named else None
    return None


def runtime_use_arguments(root: Any, namespace: str) -> Iterator[Any]:
    """Top-level use-tree nodes rooted at `namespace`."""
    for child in root.children:
        if child.type != "use_declaration":
            continue
        argument = child.child_by_field_name("argument")
        if argument is not None and use_tree_root(argument) == namespace:
            yield argument


def _char_column(line: bytes, byte_column: int) -> int:
    return len(line[:byte_column].decode("utf-8", errors="replace"))


def locate(node: Any, path: Path, lines: list[bytes]) -> SourceLocation:
    """Build a SourceLocation for a node."""
    start_row, start_col = node.start_point[0], node.start_point[1]
    end_row, end_col = node.end_point[0], node.end_point[1]
    start_line = lines[start_row] if start_row < len(lines) else b""
    end_line = lines[end_row] if end_row < len(lines) else b""
    return SourceLocation(
        path=str(path),
        line=start_row + 1,
        column=_char_column(start_line, start_col),
        end_line=end_row + 1,
        end_column=_char_column(end_line, end_col),
        statement=node.text.decode("utf-8"),
        source_line=start_line.decode("utf-8", errors="replace").rstrip("\r\n"),
    )


def analyze_source(
    path: Path,
    source: bytes,
    is_entry_point: bool,
    namespace: str = DEFAULT_RUNTIME_NAMESPACE,
    advisor: Optional[ReplacementAdvisor] = None,
) -> CrateSupport:
    """Classify one file's compliance state.

    Args:
        path: Path of the file, used in offense locations.
        source: File contents.
        is_entry_point: True for a library or binary root. Only entry points
            are checked for the no_std marker and may short-circuit with a
            feature-gated verdict.
        namespace: Namespace of the excluded runtime.
        advisor: Suggests replacements for offending imports.

    Returns:
        ONLY_WITHOUT_FEATURE for an entry point with a feature-gated marker,
        otherwise SOURCE_OFFENSES or NO_OFFENSE_DETECTED.

    Raises:
        SourceAnalysisError: If the source is not UTF-8 or cannot be parsed.
    """
    try:
        source.decode("utf-8")
    except UnicodeDecodeError as e:
        raise SourceAnalysisError(f"'{path}' is not valid UTF-8: {e}") from e

    root = parse_rust(source, path)
    advisor = advisor or NullReplacementAdvisor()

    markers = crate_markers(root) if is_entry_point else []
    for marker in markers:
        if marker.kind == MarkerKind.UNLESS_FEATURE and marker.feature is not None:
            return CrateSupport.only_without_feature(marker.feature)

    offenses: list[SourceOffense] = []
    lines = source.split(b"\n")
    for argument in runtime_use_arguments(root, namespace):
        location = locate(argument, path, lines)
        suggestion = advisor.suggest(location.path_parts)
        offenses.append(
            SourceOffense(
                kind=OffenseKind.USE_STD_STATEMENT,
                location=location,
                suggestion="::".join(suggestion) if suggestion else None,
            )
        )

    if is_entry_point and not any(m.kind == MarkerKind.UNCONDITIONAL for m in markers):
        offenses.append(SourceOffense(kind=OffenseKind.MISSING_NO_STD_ATTRIBUTE))

    return CrateSupport.from_offenses(offenses)


def analyze_source_file(
    path: Path,
    is_entry_point: bool,
    namespace: str = DEFAULT_RUNTIME_NAMESPACE,
    advisor: Optional[ReplacementAdvisor] = None,
) -> CrateSupport:
    """Read a file completely, then classify it with analyze_source.

    Raises:
        SourceAnalysisError: If the file cannot be read or parsed.
    """
    try:
        source = path.read_bytes()
    except OSError as e:
        raise SourceAnalysisError(f"Unable to read '{path}': {e}") from e
    log.debug("source.analyze", path=str(path), entry_point=is_entry_point)
    return analyze_source(path, source, is_entry_point, namespace, advisor)
