"""Tests for cargo metadata models."""
import json
from pathlib import Path

from nono_analyzer.models.metadata import Dependency, DependencyKind, Metadata, Target

METADATA_DOCUMENT = {
    "packages": [
        {
            "id": "app 0.1.0 (path+file:///work/app)",
            "name": "app",
            "version": "0.1.0",
            "dependencies": [
                {
                    "name": "serde",
                    "kind": None,
                    "optional": True,
                    "uses_default_features": False,
                    "features": ["derive"],
                    "rename": None,
                    "req": "^1",
                },
                {"name": "trybuild", "kind": "dev", "optional": False,
                 "uses_default_features": True, "features": []},
                {"name": "log", "kind": None, "optional": False,
                 "uses_default_features": True, "features": [], "rename": "logging"},
            ],
            "features": {"default": ["std"], "std": ["serde/std"]},
            "targets": [
                {"name": "app", "kind": ["lib"], "src_path": "/work/app/src/lib.rs"},
                {"name": "app", "kind": ["bin"], "src_path": "/work/app/src/main.rs"},
            ],
            "manifest_path": "/work/app/Cargo.toml",
            "edition": "2021",
        }
    ],
    "workspace_members": ["app 0.1.0 (path+file:///work/app)"],
    "resolve": {
        "nodes": [{"id": "app 0.1.0 (path+file:///work/app)", "dependencies": [], "deps": []}],
        "root": "app 0.1.0 (path+file:///work/app)",
    },
    "workspace_root": "/work/app",
    "target_directory": "/work/app/target",
    "version": 1,
}


class TestMetadataParsing:
    """Tests for parsing metadata JSON."""

    def test_parses_document_ignoring_unknown_keys(self) -> None:
        """Test that a metadata document parses with unknown keys ignored."""
        metadata = Metadata.model_validate_json(json.dumps(METADATA_DOCUMENT))

        assert len(metadata.packages) == 1
        package = metadata.packages[0]
        assert package.label == "app:0.1.0"
        assert package.features["std"] == ["serde/std"]
        assert metadata.resolve is not None
        assert metadata.resolve.root == package.id

    def test_null_kind_is_normal(self) -> None:
        """Test that a null dependency kind parses as NORMAL."""
        metadata = Metadata.model_validate(METADATA_DOCUMENT)
        serde, trybuild, log = metadata.packages[0].dependencies

        assert serde.kind == DependencyKind.NORMAL
        assert serde.optional is True
        assert serde.uses_default_features is False
        assert trybuild.kind == DependencyKind.DEV
        assert log.local_name == "logging"

    def test_workspace_packages(self) -> None:
        """Test that workspace members are looked up by id."""
        metadata = Metadata.model_validate(METADATA_DOCUMENT)
        assert [p.name for p in metadata.workspace_packages()] == ["app"]
        assert metadata.find_package("missing") is None


class TestPackageHelpers:
    """Tests for Package target helpers."""

    def test_entry_source_prefers_library(self) -> None:
        """Test that the library target is the entry source."""
        package = Metadata.model_validate(METADATA_DOCUMENT).packages[0]
        assert package.entry_source() == Path("/work/app/src/lib.rs")
        assert package.bin_target_sources() == ["/work/app/src/main.rs"]
        assert package.manifest_dir == Path("/work/app")

    def test_entry_source_falls_back_to_binary(self, make_package) -> None:
        """Test that a binary target is used without a library."""
        package = make_package("tool", kinds=("bin",), src_path="/work/tool/src/main.rs")
        assert package.entry_source() == Path("/work/tool/src/main.rs")

    def test_proc_macro_detection(self, make_package) -> None:
        """Test that proc-macro targets are detected."""
        assert make_package("derive", kinds=("proc-macro",)).is_proc_macro
        assert not make_package("plain").is_proc_macro

    def test_library_kinds(self) -> None:
        """Test that rlib and cdylib targets are libraries."""
        assert Target(name="x", kind=["rlib"], src_path="x").is_library
        assert Target(name="x", kind=["cdylib"], src_path="x").is_library
        assert not Target(name="x", kind=["bin"], src_path="x").is_library

    def test_find_dependency_by_local_name(self, make_package) -> None:
        """Test that dependencies are found by their renamed local name."""
        package = make_package(
            "app", dependencies=[Dependency(name="log", rename="logging")]
        )
        assert package.find_dependency("logging") is not None
        assert package.find_dependency("log") is None
