"""Configuration file discovery and loading for nono-analyzer."""
from __future__ import annotations

from pathlib import Path

import structlog
import yaml
from pydantic import ValidationError

from nono_analyzer.config.defaults import DEFAULT_CONFIG_NAMES, get_default_config
from nono_analyzer.exceptions import ConfigurationError
from nono_analyzer.models.config import AnalyzerConfig

log = structlog.get_logger("nono_analyzer.config")


def find_config_file(start_dir: Path | None = None) -> Path | None:
    """Find configuration file in the specified directory.

    Searches for `.nono-analyzer.yaml` first, then `.nono-analyzer.yml`.

    Args:
        start_dir: Directory to search. Defaults to current working directory.

    Returns:
        Path to the configuration file if found, None otherwise.
    """
    search_dir = start_dir or Path.cwd()
    for name in DEFAULT_CONFIG_NAMES:
        candidate = search_dir / name
        if candidate.is_file():
            return candidate
    return None


def load_config_file(path: Path) -> AnalyzerConfig:
    """Load and validate configuration from a YAML file.

    Args:
        path: Path to the configuration file.

    Returns:
        Validated AnalyzerConfig instance. Empty files and files holding only
        comments yield the default configuration.

    Raises:
        ConfigurationError: If the file cannot be read, is not valid YAML,
            is not a mapping, or fails validation.
    """
    try:
        content = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigurationError(
            f"Cannot read configuration file '{path}': {e}"
        ) from e

    try:
        data = yaml.safe_load(content) if content.strip() else None
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Invalid YAML syntax in '{path}': {e}") from e

    if data is None:
        return get_default_config()

    if not isinstance(data, dict):
        raise ConfigurationError(
            f"Invalid configuration in '{path}': "
            f"expected a mapping at root level, got {type(data).__name__}"
        )

    try:
        config = AnalyzerConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigurationError(
            f"Invalid configuration in '{path}': {_format_validation_errors(e)}"
        ) from e

    log.debug("config.loaded", path=str(path))
    return config


def _format_validation_errors(error: ValidationError) -> str:
    """Join pydantic errors as `location: message` pairs."""
    messages: list[str] = []
    for err in error.errors():
        loc = ".".join(str(x) for x in err["loc"]) if err["loc"] else "root"
        messages.append(f"{loc}: {err['msg']}")
    return "; ".join(messages)


def load_config(config_path: str | None = None) -> AnalyzerConfig:
    """Load configuration from an explicit path, the working directory, or defaults.

    Args:
        config_path: Optional path to a configuration file. Click has already
            checked that it exists.

    Returns:
        AnalyzerConfig with loaded or default values.

    Raises:
        ConfigurationError: If the chosen configuration file is invalid.
    """
    if config_path is not None:
        return load_config_file(Path(config_path))

    discovered = find_config_file()
    if discovered is None:
        return get_default_config()
    return load_config_file(discovered)
