"""DWARF namespace search over compiled artifacts.

Rust emits a `DW_TAG_namespace` entry for every module path that contributes
code to an object file, so an artifact that pulls in anything from the
excluded runtime carries a namespace entry named after it.
"""
from __future__ import annotations

import io
import struct
from pathlib import Path
from typing import Optional

import structlog
from elftools.common.exceptions import DWARFError, ELFError
from elftools.construct import ConstructError
from elftools.elf.elffile import ELFFile

from nono_analyzer.exceptions import VerificationError
from nono_analyzer.models.verify import ArtifactVerification, VerificationStatus
from nono_analyzer.verify.archive import is_archive, iter_object_members

log = structlog.get_logger("nono_analyzer.verify")

NAMESPACE_TAG = "DW_TAG_namespace"
NAME_ATTRIBUTE = "DW_AT_name"

# Errors pyelftools raises on corrupt object or debug-info data
MALFORMED_DATA_ERRORS = (
    ELFError,
    DWARFError,
    ConstructError,
    struct.error,
    KeyError,
    IndexError,
    ValueError,
    OverflowError,
    AssertionError,
)


def _die_name(die) -> Optional[str]:
    attribute = die.attributes.get(NAME_ATTRIBUTE)
    if attribute is None:
        return None
    value = attribute.value
    if isinstance(value, bytes):
        return value.decode("utf-8", errors="replace")
    return str(value)


def die_is_namespace(die, namespace: str) -> bool:
    """Check whether a DIE is a namespace entry named `namespace`."""
    return die.tag == NAMESPACE_TAG and _die_name(die) == namespace


def object_contains_namespace(data: bytes, namespace: str) -> bool:
    """Search one object file's debug info for a namespace entry.

    Args:
        data: Contents of an ELF object or executable.
        namespace: Namespace name to look for, e.g. `std`.

    Returns:
        True on the first matching entry, False if there is none or the
        object has no debug info.

    Raises:
        VerificationError: If the object or its debug info is malformed.
    """
    try:
        elf = ELFFile(io.BytesIO(data))
        if not elf.has_dwarf_info():
            return False
        dwarf = elf.get_dwarf_info()
        for cu in dwarf.iter_CUs():
            for die in cu.iter_DIEs():
                if die_is_namespace(die, namespace):
                    return True
    except MALFORMED_DATA_ERRORS as e:
        raise VerificationError(
            f"Malformed object file ({type(e).__name__}): {e}"
        ) from e
    return False


def archive_contains_namespace(path: Path, namespace: str) -> bool:
    """Check every object member of an archive, stopping at the first match.

    Raises:
        VerificationError: If the archive or one of its members is malformed.
    """
    for name, data in iter_object_members(path):
        try:
            if object_contains_namespace(data, namespace):
                log.debug("verify.namespace_found", archive=str(path), member=name)
                return True
        except VerificationError as e:
            raise VerificationError(f"{path}({name}): {e}") from e
    return False


def artifact_contains_namespace(path: Path, namespace: str) -> bool:
    """Like archive_contains_namespace, but also accepts a bare object or executable."""
    if is_archive(path):
        return archive_contains_namespace(path, namespace)
    try:
        data = path.read_bytes()
    except OSError as e:
        raise VerificationError(f"Cannot read '{path}': {e}") from e
    return object_contains_namespace(data, namespace)


def verify_artifact(package_name: str, path: Path, namespace: str) -> ArtifactVerification:
    """Inspect one artifact, downgrading inspection failures to INCONCLUSIVE.

    Args:
        package_name: Package that produced the artifact.
        path: Artifact path.
        namespace: Namespace of the excluded runtime.

    Returns:
        ArtifactVerification for the artifact.
    """
    try:
        found = artifact_contains_namespace(path, namespace)
    except VerificationError as e:
        log.warning(
            "verify.artifact_inconclusive",
            package=package_name,
            path=str(path),
            reason=str(e),
        )
        return ArtifactVerification(
            package_name=package_name,
            path=str(path),
            namespace=namespace,
            status=VerificationStatus.INCONCLUSIVE,
            reason=str(e),
        )

    status = VerificationStatus.CONTAINS_NAMESPACE if found else VerificationStatus.CLEAN
    return ArtifactVerification(
        package_name=package_name,
        path=str(path),
        namespace=namespace,
        status=status,
    )
