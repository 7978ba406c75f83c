"""Shared fixtures for nono-analyzer tests."""
from __future__ import annotations

from pathlib import Path
from typing import Any, Callable, Iterable, Optional

import pytest
from click.testing import CliRunner

from nono_analyzer.models.metadata import (
    Dependency,
    Metadata,
    Package,
    Resolve,
    ResolveNode,
    Target,
)


@pytest.fixture
def cli_runner() -> CliRunner:
    """Provide a Click CLI test runner."""
    return CliRunner()


@pytest.fixture
def make_package() -> Callable[..., Package]:
    """Factory for Package records with `name@version` ids."""

    def _make(
        name: str,
        version: str = "0.1.0",
        dependencies: Iterable[Dependency] = (),
        features: Optional[dict[str, list[str]]] = None,
        kinds: Iterable[str] = ("lib",),
        src_path: Optional[str] = None,
        manifest_path: Optional[str] = None,
    ) -> Package:
        return Package(
            id=f"{name}@{version}",
            name=name,
            version=version,
            dependencies=list(dependencies),
            features=features or {},
            targets=[
                Target(
                    name=name,
                    kind=list(kinds),
                    src_path=src_path or f"/src/{name}/src/lib.rs",
                )
            ],
            manifest_path=manifest_path,
        )

    return _make


@pytest.fixture
def make_metadata() -> Callable[..., Metadata]:
    """Factory for Metadata snapshots.

    `edges` maps a package id to the ids of its resolved dependencies; the
    first package is the only workspace member unless `members` is given.
    """

    def _make(
        packages: list[Package],
        edges: Optional[dict[str, list[str]]] = None,
        members: Optional[list[str]] = None,
    ) -> Metadata:
        edges = edges or {}
        return Metadata(
            packages=packages,
            workspace_members=members if members is not None else [packages[0].id],
            resolve=Resolve(
                nodes=[
                    ResolveNode(id=package.id, dependencies=edges.get(package.id, []))
                    for package in packages
                ],
                root=packages[0].id,
            ),
        )

    return _make


@pytest.fixture
def write_crate(tmp_path: Path) -> Callable[..., Path]:
    """Write a crate's source files below tmp_path and return the crate dir.

    Files are given as a mapping of paths relative to the crate directory to
    their contents.
    """

    def _write(name: str, files: dict[str, Any]) -> Path:
        crate_dir = tmp_path / name
        for relative, content in files.items():
            path = crate_dir / relative
            path.parent.mkdir(parents=True, exist_ok=True)
            if isinstance(content, bytes):
                path.write_bytes(content)
            else:
                path.write_text(content, encoding="utf-8")
        return crate_dir

    return _write
