"""Default configuration values for nono-analyzer."""

from __future__ import annotations

from nono_analyzer.models.config import AnalyzerConfig

# Default configuration file names to search for
DEFAULT_CONFIG_NAMES = [".nono-analyzer.yaml", ".nono-analyzer.yml"]


def get_default_config() -> AnalyzerConfig:
    """Get the default configuration.

    Returns:
        AnalyzerConfig with all defaults (all fields None).
    """
    return AnalyzerConfig()
