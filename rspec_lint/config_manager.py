"""Configuration manager for rspec-lint using TOML files."""

from __future__ import annotations

import copy
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

import toml

from . import config
from .errors import ConfigError

logger = logging.getLogger(__name__)

DESCRIBE_CLASS_SECTION = "DescribeClass"
LANGUAGE_SECTION = "Language"
ALL_COPS_SECTION = "AllCops"

DEFAULT_CONFIG: Dict[str, Any] = {
    ALL_COPS_SECTION: {
        "Include": list(config.DEFAULT_INCLUDE),
        "Exclude": list(config.DEFAULT_EXCLUDE),
    },
    DESCRIBE_CLASS_SECTION: {},
    LANGUAGE_SECTION: {},
}


def find_project_config(start: Optional[Path] = None) -> Optional[Path]:
    """Return the nearest ``.rspec-lint.toml`` at or above *start*."""
    current = (start or Path.cwd()).resolve()
    for directory in (current, *current.parents):
        candidate = directory / config.PROJECT_CONFIG_NAME
        if candidate.is_file():
            return candidate
    return None


def read_config_file(path: Path) -> Dict[str, Any]:
    """Decode one TOML config file.

    Raises:
        ConfigError: the file is missing, unreadable or not valid TOML.
    """
    try:
        with open(path, "r", encoding="utf-8") as f:
            return toml.load(f)
    except FileNotFoundError as exc:
        raise ConfigError(f"Config file not found: {path}") from exc
    except (OSError, toml.TomlDecodeError) as exc:
        raise ConfigError(f"Could not read config file {path}: {exc}") from exc


def load_config(path: Optional[Path] = None, start: Optional[Path] = None) -> Dict[str, Any]:
    """Load the effective configuration.

    An explicit *path* must be readable. Otherwise the nearest project file,
    then the global file under ``RSPEC_LINT_HOME``; broken implicit files are
    logged and skipped. Sections found are merged over the defaults.
    """
    if path is not None:
        return merge_config(DEFAULT_CONFIG, read_config_file(path))

    for candidate in (find_project_config(start), config.GLOBAL_CONFIG_FILE):
        if candidate is None or not candidate.is_file():
            continue
        try:
            loaded = read_config_file(candidate)
        except ConfigError as exc:
            logger.warning("Ignoring config: %s", exc)
            continue
        logger.debug("Loaded config from %s", candidate)
        return merge_config(DEFAULT_CONFIG, loaded)

    return copy.deepcopy(DEFAULT_CONFIG)


def merge_config(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """Section-wise merge: keys of *override* sections replace those of *base*."""
    merged = copy.deepcopy(base)
    for section, values in override.items():
        if isinstance(values, dict) and isinstance(merged.get(section), dict):
            merged[section].update(copy.deepcopy(values))
        else:
            merged[section] = copy.deepcopy(values)
    return merged


def rule_config(cfg: Dict[str, Any]) -> Dict[str, Any]:
    section = cfg.get(DESCRIBE_CLASS_SECTION)
    return section if isinstance(section, dict) else {}


def language_config(cfg: Dict[str, Any]) -> Dict[str, Any]:
    section = cfg.get(LANGUAGE_SECTION)
    return section if isinstance(section, dict) else {}


def file_patterns(cfg: Dict[str, Any]) -> tuple[List[str], List[str]]:
    """Return ``(include, exclude)`` glob lists from ``[AllCops]``."""
    section = cfg.get(ALL_COPS_SECTION)
    section = section if isinstance(section, dict) else {}
    include = section.get("Include") or config.DEFAULT_INCLUDE
    exclude = section.get("Exclude") or []
    return [str(p) for p in include], [str(p) for p in exclude]
