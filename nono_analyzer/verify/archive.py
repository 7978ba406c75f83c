"""Static-library archive reading."""
from __future__ import annotations

from pathlib import Path
from typing import Iterator

import arpy

from nono_analyzer.exceptions import VerificationError

AR_MAGIC = b"!<arch>\n"
OBJECT_SUFFIX = ".o"


def is_archive(path: Path) -> bool:
    """Check whether a file starts with the `ar` archive magic."""
    try:
        with open(path, "rb") as f:
            return f.read(len(AR_MAGIC)) == AR_MAGIC
    except OSError as e:
        raise VerificationError(f"Cannot read '{path}': {e}") from e


def _member_name(raw: bytes) -> str:
    return raw.decode("utf-8", errors="replace").strip().rstrip("/")


def iter_object_members(path: Path) -> Iterator[tuple[str, bytes]]:
    """Yield the compiled-object members of an archive.

    Members that are not object files (e.g. `lib.rmeta` in an rlib or the
    symbol table) are skipped.

    Args:
        path: Path to a `.rlib` or `.a` archive.

    Yields:
        (member name, member contents) tuples in archive order.

    Raises:
        VerificationError: If the archive cannot be read or is malformed.
    """
    try:
        with arpy.Archive(str(path)) as archive:
            for member in archive:
                name = _member_name(member.header.name)
                if not name.endswith(OBJECT_SUFFIX):
                    continue
                yield name, member.read()
    except (arpy.ArchiveFormatError, arpy.ArchiveAccessError) as e:
        raise VerificationError(f"Malformed archive '{path}': {e}") from e
    except OSError as e:
        raise VerificationError(f"Cannot read archive '{path}': {e}") from e
