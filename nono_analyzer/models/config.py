"""Configuration Pydantic models for nono-analyzer."""
from __future__ import annotations

from typing import Dict, List, Optional

from pydantic import BaseModel, Field


class SupportOverride(BaseModel):
    """Manual verdict override for a package.

    Used when a package is known to build without the runtime even though
    the source check disagrees, e.g. because `std` imports sit behind cfgs.
    """

    model_config = {"extra": "forbid"}

    reason: str = Field(description="Reason for the override")


class AnalyzerConfig(BaseModel):
    """Configuration for nono-analyzer.

    All fields are optional with None defaults to allow partial configuration.
    """

    model_config = {"extra": "forbid"}

    ignored_packages: Optional[List[str]] = Field(
        default=None,
        description="List of package names to leave out of the report.",
    )
    overrides: Optional[Dict[str, SupportOverride]] = Field(
        default=None,
        description="Packages to report as compliant, by package name.",
    )
    runtime_namespace: Optional[str] = Field(
        default=None,
        min_length=1,
        description="Namespace of the excluded runtime (default: std).",
    )
    suggest_replacements: Optional[bool] = Field(
        default=None,
        description="Suggest `core::` replacements for `std::` imports "
        "using the local rustdoc installation.",
    )
