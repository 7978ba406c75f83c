"""External `cargo build` invocation and artifact discovery."""
from __future__ import annotations

import json
import subprocess
from pathlib import Path
from typing import Iterable, Optional, Sequence

import structlog
from pydantic import BaseModel, Field, ValidationError

from nono_analyzer.exceptions import BuildError
from nono_analyzer.models.options import CheckOptions
from nono_analyzer.resolvers.metadata import cargo_executable

log = structlog.get_logger("nono_analyzer.build")

BUILD_ARGS = ("build", "--message-format=json")
COMPILER_ARTIFACT = "compiler-artifact"
LIBRARY_SUFFIXES = (".rlib", ".a")


class ArtifactTarget(BaseModel):
    model_config = {"extra": "ignore"}

    name: str
    kind: list[str] = Field(default_factory=list)


class BuildArtifact(BaseModel):
    """Files produced for one target, from a `compiler-artifact` message."""

    model_config = {"extra": "ignore"}

    package_id: str
    target: ArtifactTarget
    filenames: list[str] = Field(default_factory=list)
    executable: Optional[str] = None

    @property
    def library_files(self) -> list[Path]:
        """Produced static archives (`.rlib`, `.a`)."""
        return [Path(f) for f in self.filenames if f.endswith(LIBRARY_SUFFIXES)]


def parse_build_messages(lines: Iterable[str]) -> list[BuildArtifact]:
    """Collect compiler-artifact messages from cargo's JSON message stream.

    Lines that are not JSON (e.g. output of build scripts) and messages of
    other kinds are skipped.
    """
    artifacts: list[BuildArtifact] = []
    for line in lines:
        line = line.strip()
        if not line.startswith("{"):
            continue
        try:
            message = json.loads(line)
        except json.JSONDecodeError:
            continue
        if not isinstance(message, dict) or message.get("reason") != COMPILER_ARTIFACT:
            continue
        try:
            artifacts.append(BuildArtifact.model_validate(message))
        except ValidationError as e:
            log.debug("build.invalid_artifact_message", error=str(e))
    return artifacts


def library_artifact(artifacts: Iterable[BuildArtifact], package_id: str) -> Optional[Path]:
    """Static archive produced for a package's library target, if any."""
    for artifact in artifacts:
        if artifact.package_id != package_id:
            continue
        files = artifact.library_files
        if files:
            return files[0]
    return None


def primary_artifact(artifacts: Sequence[BuildArtifact], package_id: str) -> Optional[Path]:
    """Artifact to verify for the checked package.

    The library archive when the package has one, otherwise the executable of
    its first binary target.
    """
    library = library_artifact(artifacts, package_id)
    if library is not None:
        return library
    for artifact in artifacts:
        if artifact.package_id == package_id and artifact.executable:
            return Path(artifact.executable)
    return None


class CargoBuildRunner:
    """Compiles a package with `cargo build` and reports the produced artifacts."""

    def __init__(
        self,
        cargo: Optional[str] = None,
        manifest_path: Optional[Path] = None,
        cwd: Optional[Path] = None,
    ) -> None:
        self._cargo = cargo_executable(cargo)
        self._manifest_path = manifest_path
        self._cwd = cwd

    def command(self, package_name: str, options: CheckOptions) -> list[str]:
        """Build the cargo command line."""
        cmd = [self._cargo, *BUILD_ARGS]
        if self._manifest_path is not None:
            cmd.extend(["--manifest-path", str(self._manifest_path)])
        cmd.extend(["--package", package_name])
        cmd.extend(options.cargo_feature_args())
        return cmd

    def build(self, package_name: str, options: CheckOptions) -> list[BuildArtifact]:
        """Run the build and return its artifacts.

        Blocks until cargo exits.

        Args:
            package_name: Package to build.
            options: Feature selection, passed through to cargo.

        Returns:
            Artifacts in the order cargo reported them.

        Raises:
            BuildError: If cargo cannot be started or the build fails.
        """
        cmd = self.command(package_name, options)
        log.info("build.run", command=cmd)
        try:
            completed = subprocess.run(
                cmd,
                cwd=self._cwd,
                capture_output=True,
                text=True,
                check=False,
            )
        except OSError as e:
            raise BuildError(f"Cannot run '{self._cargo}': {e}") from e

        if completed.returncode != 0:
            raise BuildError(
                f"'{' '.join(cmd)}' failed with exit code {completed.returncode}: "
                f"{completed.stderr.strip()}"
            )
        artifacts = parse_build_messages(completed.stdout.splitlines())
        log.debug("build.artifacts", count=len(artifacts))
        return artifacts
