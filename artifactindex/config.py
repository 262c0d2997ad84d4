#!/usr/bin/env python3

import os
import json
import tomllib
from pathlib import Path

import logging
import sys

import yaml

logger = logging.getLogger("artifactindex")

CONFIG_FILENAMES = ['config.json', 'config.toml', 'config.yaml', 'config.yml']


def get_config_dir() -> Path:
    return Path.home() / '.artifactindex'


def get_config_path():
    """Get the path to the configuration file.

    Checks in order:
    1. ARTIFACTINDEX_CONFIG environment variable
    2. ~/.artifactindex/ directory
    """
    # Check for environment variable override
    if 'ARTIFACTINDEX_CONFIG' in os.environ:
        path = Path(os.environ['ARTIFACTINDEX_CONFIG'])
        if path.exists():
            return path

    config_dir = get_config_dir()
    for filename in CONFIG_FILENAMES:
        path = config_dir / filename
        if path.exists() and path.stat().st_size > 10:  # Not empty/trivial
            return path

    # If no file exists, return default path for saving
    return config_dir / 'config.json'


def _read_config_file(config_path: Path) -> dict:
    suffix = config_path.suffix.lower()
    if suffix == '.toml':
        with open(config_path, 'rb') as f:
            return tomllib.load(f)
    if suffix in ('.yaml', '.yml'):
        with open(config_path, 'r') as f:
            return yaml.safe_load(f) or {}
    # Default to JSON format
    with open(config_path, 'r') as f:
        return json.load(f)


def load_config(config_path=None):
    """Load configuration from file, defaults and environment."""
    config_path = Path(config_path) if config_path else get_config_path()

    # Start with default config
    config = get_default_config()

    if config_path.exists():
        try:
            file_config = _read_config_file(config_path)
            config = merge_configs(config, file_config)
        except (OSError, ValueError, yaml.YAMLError) as e:
            # tomllib.TOMLDecodeError and json.JSONDecodeError are ValueErrors
            logger.error(f"Error loading config from {config_path}: {e}")

    # Apply environment variable overrides
    config = apply_env_overrides(config)

    return config


def save_config(config, config_path=None):
    """Save configuration to file (JSON or YAML; TOML is saved as JSON)."""
    config_path = Path(config_path) if config_path else get_config_path()

    # tomllib is read-only
    if config_path.suffix.lower() == '.toml':
        logger.warning("TOML configuration cannot be written. Saving as JSON instead.")
        config_path = config_path.with_suffix('.json')

    config_path.parent.mkdir(parents=True, exist_ok=True)
    if config_path.suffix.lower() in ('.yaml', '.yml'):
        with open(config_path, 'w') as f:
            yaml.safe_dump(config, f, default_flow_style=False)
    else:
        with open(config_path, 'w') as f:
            json.dump(config, f, indent=2)

    logger.info(f"Configuration saved to {config_path}")
    return config_path


def get_default_config():
    """Get default configuration."""
    return {
        "database": {
            "path": str(get_config_dir() / 'catalog.db'),
        },
        "github": {
            "token": "",
            "rate_limit": {
                "max_retries": 3,
                "max_delay_seconds": 60,
            }
        },
        "publishing": {
            # Logins allowed to publish to any repository
            "admins": [],
        },
        # "group:artifact_name" or "group" -> "organization/repository"
        "claims": {},
        # "group:artifact_name" of libraries that do not follow the
        # standard layout
        "non_standard": [],
        # Additional license aliases, name -> short name
        "licenses": {},
        "conversion": {
            "workers": 1,
        },
        "logging": {
            "level": "INFO",
            "format": "%(levelname)s: %(message)s"
        },
    }


def validate_config(config):
    """
    Check the values the catalog cannot run without.

    Returns:
        list: One message per problem (empty if the config is usable)
    """
    problems = []

    workers = config.get("conversion", {}).get("workers", 1)
    if isinstance(workers, bool) or not isinstance(workers, int) or workers < 1:
        problems.append(f"conversion.workers must be a positive integer, got {workers!r}")

    for section in ("claims", "licenses"):
        if not isinstance(config.get(section, {}), dict):
            problems.append(f"{section} must be a mapping")

    if not isinstance(config.get("non_standard", []), list):
        problems.append("non_standard must be a list")

    admins = config.get("publishing", {}).get("admins", [])
    if not isinstance(admins, list):
        problems.append("publishing.admins must be a list of logins")

    return problems


def configure_logging(config=None, verbose=False, quiet=False):
    """
    Send artifactindex log records to stderr.

    Called once by the command line entry point; library code only
    creates loggers.
    """
    settings = (config or {}).get("logging", {})
    level_name = "DEBUG" if verbose else "ERROR" if quiet else settings.get("level", "INFO")
    level = logging.getLevelName(str(level_name).upper())
    if not isinstance(level, int):
        level = logging.INFO

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(settings.get("format", "%(levelname)s: %(message)s")))

    logger.handlers.clear()
    logger.addHandler(handler)
    logger.setLevel(level)
    logger.propagate = False
    return logger


def merge_configs(base_config, override_config):
    """
    Recursively merge two configuration dictionaries.

    Args:
        base_config (dict): Base configuration
        override_config (dict): Configuration to merge/override with

    Returns:
        dict: Merged configuration
    """
    merged = base_config.copy()

    for key, value in override_config.items():
        if key in merged and isinstance(merged[key], dict) and isinstance(value, dict):
            # Recursively merge nested dictionaries
            merged[key] = merge_configs(merged[key], value)
        else:
            # Override or add new key
            merged[key] = value

    return merged


def apply_env_overrides(config):
    """
    Apply environment variable overrides to configuration.
    Environment variables follow the pattern: ARTIFACTINDEX_SECTION_SUBSECTION_KEY
    For example: ARTIFACTINDEX_CONVERSION_WORKERS=4

    ARTIFACTINDEX_GITHUB_TOKEN, or failing that GITHUB_TOKEN, sets github.token.
    """
    env_prefix = "ARTIFACTINDEX_"

    for env_key, value in os.environ.items():
        if not env_key.startswith(env_prefix):
            continue

        key_parts = env_key[len(env_prefix):].lower().split('_')

        # Convert value
        if value.lower() in ('true', 'yes', 'on'):
            typed_value = True
        elif value.lower() in ('false', 'no', 'off'):
            typed_value = False
        elif value.isdigit():
            typed_value = int(value)
        else:
            typed_value = value

        current_level = config
        i = 0
        while i < len(key_parts):
            # Find the longest key in current_level that is a prefix of the remaining key_parts
            best_match_len = 0
            matched_key = None

            for config_key in current_level.keys():
                config_key_parts_from_key = config_key.split('_')
                if key_parts[i : i + len(config_key_parts_from_key)] == config_key_parts_from_key:
                    if len(config_key_parts_from_key) > best_match_len:
                        best_match_len = len(config_key_parts_from_key)
                        matched_key = config_key

            if matched_key:
                # If we are at the end of the env var, we have found the key to set
                if i + best_match_len == len(key_parts):
                    current_level[matched_key] = typed_value
                    break

                # Otherwise, we descend into the dictionary
                if isinstance(current_level[matched_key], dict):
                    current_level = current_level[matched_key]
                    i += best_match_len
                else:
                    # Path conflict, e.g., env var is longer but we found a non-dict value
                    break
            else:
                # No match found
                break

    github = config.setdefault("github", {})
    if not github.get("token") and os.environ.get("GITHUB_TOKEN"):
        github["token"] = os.environ["GITHUB_TOKEN"]

    return config
