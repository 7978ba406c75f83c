"""Check option models."""

from __future__ import annotations

from enum import Enum
from typing import Literal, Optional

from pydantic import BaseModel, Field


class Verbosity(Enum):
    """Output verbosity levels."""

    QUIET = "quiet"
    NORMAL = "normal"
    VERBOSE = "verbose"


OutputFormat = Literal["terminal", "markdown", "json"]


class CheckOptions(BaseModel):
    """Options shared by the check and verify operations."""

    model_config = {"extra": "forbid"}

    no_default_features: bool = Field(
        default=False, description="Do not activate the `default` feature"
    )
    features: list[str] = Field(
        default_factory=list,
        description="Raw --features values (comma or space separated)",
    )
    package: Optional[str] = Field(
        default=None, description="Package to check when the workspace has several"
    )
    format: OutputFormat = Field(default="terminal", description="Output format")
    verbosity: Verbosity = Field(default=Verbosity.NORMAL)

    @property
    def feature_names(self) -> list[str]:
        """Individual feature names from all --features values."""
        names: list[str] = []
        for raw in self.features:
            for name in raw.replace(",", " ").split():
                if name not in names:
                    names.append(name)
        return names

    def cargo_feature_args(self) -> list[str]:
        """Arguments selecting the same features for a cargo invocation."""
        args: list[str] = []
        if self.no_default_features:
            args.append("--no-default-features")
        if self.feature_names:
            args.extend(["--features", ",".join(self.feature_names)])
        return args
