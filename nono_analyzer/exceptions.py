"""Custom exceptions for nono-analyzer."""
from __future__ import annotations

from typing import Sequence


class NonoAnalyzerError(Exception):
    """Base exception for all nono-analyzer errors."""

    pass


class ConfigurationError(NonoAnalyzerError):
    """Exception raised when configuration is invalid."""

    pass


class MetadataError(NonoAnalyzerError):
    """Exception raised when package metadata cannot be obtained or parsed."""

    pass


class PackageSelectionError(NonoAnalyzerError):
    """Exception raised when the package to check cannot be determined.

    Carries the valid candidate names so the user can pick one.
    """

    def __init__(self, message: str, candidates: Sequence[str] = ()) -> None:
        super().__init__(message)
        self.candidates = list(candidates)


class SourceAnalysisError(NonoAnalyzerError):
    """Exception raised when a source file cannot be read or parsed."""

    pass


class VerificationError(NonoAnalyzerError):
    """Exception raised when a compiled artifact cannot be inspected."""

    pass


class BuildError(NonoAnalyzerError):
    """Exception raised when the external build fails."""

    pass
