"""Replacement suggestions for `use std::...` statements.

Finding out whether `std::a::B` is also available as `core::a::B` depends on
the local toolchain's documentation, so the lookup sits behind the
ReplacementAdvisor interface and tests use NullReplacementAdvisor or a
RustdocReplacementAdvisor pointed at a temporary doc tree.
"""
from __future__ import annotations

import re
import subprocess
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Callable, Optional, Sequence

import structlog

log = structlog.get_logger("nono_analyzer.replacement")

_IDENTIFIER_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")

# Relative to the directory holding the rustdoc binary
RUST_DOC_HTML_DIR = Path("../share/doc/rust/html")
CORE_CRATE = "core"


class ReplacementAdvisor(ABC):
    """Suggests a replacement path for an import from the excluded runtime."""

    @abstractmethod
    def suggest(self, path_parts: Sequence[str]) -> Optional[list[str]]:
        """Suggest a replacement for an import path.

        Args:
            path_parts: Import path split on `::`, e.g. `["std", "ops", "Add"]`.

        Returns:
            Replacement path parts, or None if no replacement is known.
        """


class NullReplacementAdvisor(ReplacementAdvisor):
    """Never suggests anything."""

    def suggest(self, path_parts: Sequence[str]) -> Optional[list[str]]:
        return None


def _rustup_which_rustdoc() -> Optional[str]:
    """Location of the active toolchain's rustdoc, or None if rustup is unavailable."""
    try:
        completed = subprocess.run(
            ["rustup", "which", "rustdoc"],
            capture_output=True,
            text=True,
            check=False,
        )
    except OSError as e:
        log.debug("replacement.rustup_unavailable", error=str(e))
        return None
    if completed.returncode != 0:
        return None
    return completed.stdout.strip() or None


class RustdocReplacementAdvisor(ReplacementAdvisor):
    """Looks up `core` equivalents in the toolchain's rendered documentation.

    `std::a::B` is suggested as `core::a::B` when `core/a/*.B.html` (an item
    page) or `core/a/B/index.html` (a module page) exists.
    """

    def __init__(
        self,
        doc_root: Optional[Path] = None,
        locate_rustdoc: Callable[[], Optional[str]] = _rustup_which_rustdoc,
    ) -> None:
        """Initialize the advisor.

        Args:
            doc_root: The `share/doc/rust/html` directory. Located through
                `locate_rustdoc` when not given.
            locate_rustdoc: Returns the rustdoc binary path.
        """
        self._doc_root = doc_root
        self._locate_rustdoc = locate_rustdoc
        self._located = doc_root is not None

    def doc_root(self) -> Optional[Path]:
        """The documentation root, located lazily once."""
        if not self._located:
            self._located = True
            rustdoc = self._locate_rustdoc()
            if rustdoc is not None:
                self._doc_root = (Path(rustdoc).parent / RUST_DOC_HTML_DIR).resolve()
        return self._doc_root

    def suggest(self, path_parts: Sequence[str]) -> Optional[list[str]]:
        if len(path_parts) < 2:
            return None
        if not all(_IDENTIFIER_RE.match(part) for part in path_parts):
            return None

        doc_root = self.doc_root()
        if doc_root is None:
            return None

        module_dir = doc_root / CORE_CRATE
        for part in path_parts[1:-1]:
            module_dir = module_dir / part
        item = path_parts[-1]

        replacement = [CORE_CRATE, *path_parts[1:]]
        if any(module_dir.glob(f"*.{item}.html")):
            return replacement
        if (module_dir / item / "index.html").is_file():
            return replacement
        return None
