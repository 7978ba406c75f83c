"""Tests for per-package offense aggregation."""
from __future__ import annotations

from pathlib import Path

from nono_analyzer.analysis.aggregate import (
    get_crate_support,
    get_crate_support_from_source,
    other_source_files,
)
from nono_analyzer.models.support import OffenseKind, SupportKind


class TestOtherSourceFiles:
    """Tests for source file discovery."""

    def test_sorted_and_excludes_entry(self, write_crate) -> None:
        """Test that sibling sources are sorted and exclude the entry file."""
        crate = write_crate(
            "demo",
            {
                "src/lib.rs": "",
                "src/b.rs": "",
                "src/a/mod.rs": "",
                "src/notes.txt": "",
            },
        )
        files = other_source_files(crate / "src" / "lib.rs")
        assert files == [crate / "src" / "a" / "mod.rs", crate / "src" / "b.rs"]


class TestGetCrateSupportFromSource:
    """Tests for aggregating a source tree."""

    def test_clean_tree(self, write_crate) -> None:
        """Test that a no_std tree importing only core has no offense."""
        crate = write_crate(
            "clean",
            {
                "src/lib.rs": "#![no_std]\nmod util;\n",
                "src/util.rs": "use core::fmt;\n",
            },
        )
        support = get_crate_support_from_source(crate / "src" / "lib.rs")
        assert support.kind == SupportKind.NO_OFFENSE_DETECTED

    def test_offenses_from_other_files_are_appended(self, write_crate) -> None:
        """Test that offenses from sibling files follow the entry file's."""
        crate = write_crate(
            "leaky",
            {
                "src/lib.rs": "#![no_std]\nuse std::fs;\n",
                "src/util.rs": "use std::io;\n",
            },
        )
        support = get_crate_support_from_source(crate / "src" / "lib.rs")

        assert support.kind == SupportKind.SOURCE_OFFENSES
        paths = [Path(o.location.path).name for o in support.offenses if o.location]
        assert paths == ["lib.rs", "util.rs"]

    def test_feature_gated_entry_is_authoritative(self, write_crate) -> None:
        """Test that a feature-gated marker decides the verdict for the whole tree."""
        crate = write_crate(
            "gated",
            {
                "src/lib.rs": '#![cfg_attr(not(feature = "std"), no_std)]\n',
                "src/io.rs": "use std::io;\n",
            },
        )
        support = get_crate_support_from_source(crate / "src" / "lib.rs")
        assert support.kind == SupportKind.ONLY_WITHOUT_FEATURE
        assert support.feature == "std"

    def test_non_entry_file_never_reports_missing_marker(self, write_crate) -> None:
        """Test that only the entry file reports a missing marker."""
        crate = write_crate(
            "plain",
            {"src/lib.rs": "pub fn f() {}\n", "src/other.rs": "pub fn g() {}\n"},
        )
        support = get_crate_support_from_source(crate / "src" / "lib.rs")
        assert [o.kind for o in support.offenses] == [OffenseKind.MISSING_NO_STD_ATTRIBUTE]


class TestGetCrateSupport:
    """Tests for the package-level verdict."""

    def test_proc_macro_is_compliant_without_reading_source(
        self, write_crate, make_package
    ) -> None:
        """Test that proc-macro packages are compliant regardless of source."""
        crate = write_crate("derive", {"src/lib.rs": "use std::collections::HashMap;\n"})
        package = make_package(
            "derive", kinds=("proc-macro",), src_path=str(crate / "src" / "lib.rs")
        )
        assert get_crate_support(package).kind == SupportKind.PROC_MACRO

    def test_binary_only_package_uses_main(self, write_crate, make_package) -> None:
        """Test that a binary-only package is analyzed from its main source."""
        crate = write_crate("tool", {"src/main.rs": "#![no_std]\n#![no_main]\n"})
        package = make_package(
            "tool", kinds=("bin",), src_path=str(crate / "src" / "main.rs")
        )
        assert get_crate_support(package).kind == SupportKind.NO_OFFENSE_DETECTED

    def test_package_without_targets(self, make_package) -> None:
        """Test that a package without targets has no offense."""
        package = make_package("empty").model_copy(update={"targets": []})
        assert get_crate_support(package).kind == SupportKind.NO_OFFENSE_DETECTED

    def test_unreadable_source_is_unanalyzable(self, tmp_path: Path, make_package) -> None:
        """Test that a missing entry source makes the package unanalyzable."""
        package = make_package("gone", src_path=str(tmp_path / "gone" / "src" / "lib.rs"))
        support = get_crate_support(package)
        assert support.kind == SupportKind.UNANALYZABLE
        assert "Unable to read" in (support.reason or "")

    def test_unparsable_sibling_is_unanalyzable(self, write_crate, make_package) -> None:
        """Test that a syntax error in any source file makes the package unanalyzable."""
        crate = write_crate(
            "broken",
            {"src/lib.rs": "#![no_std]\n", "src/bad.rs": "}}}\n"},
        )
        package = make_package("broken", src_path=str(crate / "src" / "lib.rs"))
        assert get_crate_support(package).kind == SupportKind.UNANALYZABLE

    def test_custom_namespace(self, write_crate, make_package) -> None:
        """Test that only the configured namespace is flagged."""
        crate = write_crate("ns", {"src/lib.rs": "#![no_std]\nuse std::fs;\n"})
        package = make_package("ns", src_path=str(crate / "src" / "lib.rs"))
        assert get_crate_support(package, "mystd").kind == SupportKind.NO_OFFENSE_DETECTED
