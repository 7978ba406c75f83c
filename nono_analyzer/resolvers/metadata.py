"""`cargo metadata` invocation and parsing."""
from __future__ import annotations

import os
import subprocess
from pathlib import Path
from typing import Optional, Sequence

import structlog
from pydantic import ValidationError

from nono_analyzer.exceptions import MetadataError
from nono_analyzer.models.metadata import Metadata
from nono_analyzer.resolvers.base import ALL_FEATURES_ARGS, MetadataProvider

log = structlog.get_logger("nono_analyzer.metadata")

METADATA_FORMAT_ARGS = ("metadata", "--format-version", "1")


def cargo_executable(cargo: Optional[str] = None) -> str:
    """Cargo executable: explicit value, then $CARGO, then `cargo` on PATH."""
    return cargo or os.environ.get("CARGO") or "cargo"


def parse_metadata(document: str | bytes) -> Metadata:
    """Parse a `cargo metadata --format-version 1` JSON document.

    Args:
        document: Raw JSON text.

    Returns:
        Parsed Metadata.

    Raises:
        MetadataError: If the document is not valid metadata JSON.
    """
    try:
        return Metadata.model_validate_json(document)
    except ValidationError as e:
        raise MetadataError(f"Invalid cargo metadata: {e.error_count()} error(s): {e}") from e


class CargoMetadataProvider(MetadataProvider):
    """Reads metadata by running `cargo metadata`."""

    def __init__(
        self,
        cargo: Optional[str] = None,
        manifest_path: Optional[Path] = None,
        cwd: Optional[Path] = None,
    ) -> None:
        """Initialize the provider.

        Args:
            cargo: Cargo executable. Defaults to $CARGO or `cargo`.
            manifest_path: Optional Cargo.toml to pass as --manifest-path.
            cwd: Working directory for the cargo process.
        """
        self._cargo = cargo_executable(cargo)
        self._manifest_path = manifest_path
        self._cwd = cwd

    def command(self, extra_args: Sequence[str] = ()) -> list[str]:
        """Build the cargo command line for a snapshot."""
        cmd = [self._cargo, *METADATA_FORMAT_ARGS]
        if self._manifest_path is not None:
            cmd.extend(["--manifest-path", str(self._manifest_path)])
        cmd.extend(extra_args)
        return cmd

    def load(self, extra_args: Sequence[str] = ()) -> Metadata:
        cmd = self.command(extra_args)
        log.debug("metadata.run", command=cmd)
        try:
            completed = subprocess.run(
                cmd,
                cwd=self._cwd,
                capture_output=True,
                check=False,
            )
        except OSError as e:
            raise MetadataError(f"Cannot run '{self._cargo}': {e}") from e

        if completed.returncode != 0:
            stderr = completed.stderr.decode("utf-8", errors="replace").strip()
            raise MetadataError(
                f"'{' '.join(cmd)}' failed with exit code {completed.returncode}: {stderr}"
            )
        return parse_metadata(completed.stdout)


class JsonFileMetadataProvider(MetadataProvider):
    """Reads pre-recorded metadata documents from disk.

    The requested and full snapshots may be separate files; when only one
    file is given it serves both.
    """

    def __init__(self, path: Path, full_path: Optional[Path] = None) -> None:
        self._path = path
        self._full_path = full_path or path

    def load(self, extra_args: Sequence[str] = ()) -> Metadata:
        path = self._full_path if tuple(extra_args) == ALL_FEATURES_ARGS else self._path
        try:
            document = path.read_bytes()
        except OSError as e:
            raise MetadataError(f"Cannot read metadata file '{path}': {e}") from e
        return parse_metadata(document)
