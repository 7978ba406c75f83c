"""Configuration handling for nono-analyzer."""
from __future__ import annotations

from nono_analyzer.config.defaults import DEFAULT_CONFIG_NAMES, get_default_config
from nono_analyzer.config.loader import (
    find_config_file,
    load_config,
    load_config_file,
)
from nono_analyzer.models.config import AnalyzerConfig, SupportOverride

__all__ = [
    "AnalyzerConfig",
    "DEFAULT_CONFIG_NAMES",
    "SupportOverride",
    "find_config_file",
    "get_default_config",
    "load_config",
    "load_config_file",
]
