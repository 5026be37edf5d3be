"""
Configuration loader — reads ngbuilder.yml into domain models.

The file holds shared ``options`` plus named ``targets``. It is parsed
with PyYAML and validated against the Pydantic schemas in
``ngbuilder.core.models.options``.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from ngbuilder.core.models.options import BuilderConfig

logger = logging.getLogger(__name__)

CONFIG_FILE = "ngbuilder.yml"


class ConfigError(Exception):
    """Raised when the builder configuration is invalid or missing."""


def find_config_file(start_dir: Path | None = None) -> Path | None:
    """Nearest ngbuilder.yml in ``start_dir`` (default: cwd) or an ancestor."""
    origin = (start_dir or Path.cwd()).resolve()
    for directory in (origin, *origin.parents):
        candidate = directory / CONFIG_FILE
        if candidate.is_file():
            return candidate
    return None


def _read_mapping(path: Path) -> dict[str, Any]:
    """Parse ``path`` as YAML; an empty document is an empty mapping."""
    if not path.is_file():
        raise ConfigError(f"Config file not found: {path}")
    try:
        document = yaml.safe_load(path.read_text(encoding="utf-8"))
    except OSError as e:
        raise ConfigError(f"Cannot read {path}: {e}") from e
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e

    document = {} if document is None else document
    if not isinstance(document, dict):
        raise ConfigError(
            f"Expected a YAML mapping in {path}, got {type(document).__name__}"
        )
    return document


def load_config(path: Path | None = None) -> BuilderConfig:
    """Load and validate the builder configuration.

    Args:
        path: Explicit path to ngbuilder.yml. If None, searches upward.

    Raises:
        ConfigError: If the file is missing, unreadable, or fails validation.
    """
    path = path or find_config_file()
    if path is None:
        raise ConfigError(f"No {CONFIG_FILE} found. Create one, or specify --config.")

    logger.debug("Loading builder config from %s", path)
    try:
        config = BuilderConfig.model_validate(_read_mapping(path))
    except ValidationError as e:
        raise ConfigError(f"Invalid builder configuration in {path}: {e}") from e

    logger.info("Loaded %d target(s) from %s", len(config.targets), path)
    return config


def project_root(config_path: Path) -> Path:
    """The directory source patterns and outputs are relative to."""
    return config_path.parent.resolve()
