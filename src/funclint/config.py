"""
funclint Configuration

Loads rule configuration from a YAML file:

    rules:
      max-func-body-length: [true, 50, {ignore-parameters-to-function-regex: "^(describe|it)$"}]
    exclude_dirs: [node_modules, build]

A rule entry may be:
    true / false            enable with no options / disable
    [true, opt, opt, ...]   leading boolean is the enable flag, the rest are options
    [opt, opt, ...]         options, rule enabled
    50 or {...}             a single options entry, rule enabled
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import yaml

from funclint.errors import ConfigurationError
from funclint.rules import RULES

logger = logging.getLogger(__name__)

CONFIG_ENV_VAR = "FUNCLINT_CONFIG"

# Default configuration file locations (checked in order)
CONFIG_SEARCH_PATHS = [
    Path("funclint.yaml"),
    Path.home() / ".funclint" / "config.yaml",
]

DEFAULT_RULES: Dict[str, List[Any]] = {
    "max-func-body-length": [],
}

DEFAULT_EXCLUDE_DIRS = (
    ".git",
    ".venv",
    "venv",
    "__pycache__",
    ".mypy_cache",
    ".pytest_cache",
    "node_modules",
    "dist",
    "build",
)


@dataclass
class LintConfig:
    """Enabled rules with their raw options, plus file selection settings."""

    rules: Dict[str, List[Any]] = field(default_factory=lambda: {k: list(v) for k, v in DEFAULT_RULES.items()})

    # File extensions handed to the frontends
    source_exts: tuple[str, ...] = (".py", ".json")

    # Directory exclusions
    exclude_dirs: tuple[str, ...] = DEFAULT_EXCLUDE_DIRS

    # Path to loaded config file, or None if using defaults
    config_path: Optional[Path] = None


def should_exclude_path(cfg: LintConfig, path: Path) -> bool:
    """Check if path should be excluded from scanning."""
    return any(d in path.parts for d in cfg.exclude_dirs)


def normalize_rule_entry(rule_name: str, entry: Any) -> Optional[List[Any]]:
    """
    Turn one configured rule entry into an options list.

    Returns:
        Options list, or None if the rule is disabled.
    """
    if entry is None or entry is False:
        return None
    if entry is True:
        return []
    if isinstance(entry, list):
        if entry and isinstance(entry[0], bool):
            return list(entry[1:]) if entry[0] else None
        return list(entry)
    if isinstance(entry, (dict, int, float)):
        return [entry]
    raise ConfigurationError(f"Invalid configuration for rule: {entry!r}", rule_name)


def config_from_dict(data: Dict[str, Any], config_path: Optional[Path] = None) -> LintConfig:
    """Build a LintConfig from a parsed YAML document."""
    if not isinstance(data, dict):
        raise ConfigurationError(f"Configuration must be a mapping, got {type(data).__name__}")

    cfg = LintConfig(config_path=config_path)

    raw_rules = data.get("rules")
    if raw_rules is not None:
        if not isinstance(raw_rules, dict):
            raise ConfigurationError("'rules' must be a mapping of rule name to options")
        cfg.rules = {}
        for rule_name, entry in raw_rules.items():
            if rule_name not in RULES:
                logger.warning("Unknown rule '%s' in configuration - skipping", rule_name)
                continue
            options = normalize_rule_entry(rule_name, entry)
            if options is None:
                logger.debug("Rule '%s' disabled by configuration", rule_name)
                continue
            cfg.rules[rule_name] = options

    exclude_dirs = data.get("exclude_dirs")
    if exclude_dirs is not None:
        if not isinstance(exclude_dirs, list):
            raise ConfigurationError("'exclude_dirs' must be a list")
        cfg.exclude_dirs = tuple(str(d) for d in exclude_dirs)

    return cfg


def find_config_path(explicit_path: Optional[Union[str, Path]] = None) -> Optional[Path]:
    """
    Locate the configuration file.

    An explicit path or $FUNCLINT_CONFIG must exist; the default search
    locations are optional.
    """
    for required in (explicit_path, os.environ.get(CONFIG_ENV_VAR)):
        if required:
            path = Path(required)
            if not path.is_file():
                raise ConfigurationError(f"Config file not found: {path}")
            return path

    for path in CONFIG_SEARCH_PATHS:
        if path.is_file():
            return path
    return None


def load_config(explicit_path: Optional[Union[str, Path]] = None) -> LintConfig:
    """Load configuration from YAML, or defaults when no file is found."""
    config_path = find_config_path(explicit_path)
    if config_path is None:
        logger.debug("No configuration file found - using defaults")
        return LintConfig()

    try:
        with open(config_path, 'r', encoding='utf-8') as f:
            data = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Invalid YAML in {config_path}: {e}") from e

    logger.debug("Loaded configuration from %s", config_path)
    return config_from_dict(data, config_path)
