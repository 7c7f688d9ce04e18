"""
Configuration management for the Google Drive MCP Server.

This module handles loading server configuration from YAML files,
environment variables (including a ``.env`` file) and explicit
per-invocation dictionaries.
"""

import base64
import copy
import json
import os
import logging
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from dotenv import load_dotenv

logger = logging.getLogger(__name__)

DEFAULT_PORT = 8081
DEFAULT_BATCH_CONCURRENCY = 10
DEFAULT_TOKEN_URI = "https://oauth2.googleapis.com/token"

DEFAULT_CONFIG: Dict[str, Any] = {
    "name": "google-drive-server",
    "version": "0.1.0",
    "description": "Google Drive tools for MCP clients",
    "transport": {
        "type": "http",
        "host": "0.0.0.0",
        "port": DEFAULT_PORT,
    },
    "logging": {
        "level": "INFO",
        "format": "json",
        "file": None,
    },
    "credentials": {
        "client_id": None,
        "client_secret": None,
        "refresh_token": None,
        "token_uri": DEFAULT_TOKEN_URI,
    },
    "batch": {
        "max_concurrency": DEFAULT_BATCH_CONCURRENCY,
    },
}

# (section, key) -> environment variable
ENV_MAPPINGS: Dict[tuple[str, str], str] = {
    ("credentials", "client_id"): "CLIENT_ID",
    ("credentials", "client_secret"): "CLIENT_SECRET",
    ("credentials", "refresh_token"): "REFRESH_TOKEN",
    ("transport", "type"): "MCP_TRANSPORT",
    ("transport", "host"): "HOST",
    ("transport", "port"): "PORT",
    ("logging", "level"): "LOG_LEVEL",
    ("batch", "max_concurrency"): "GDRIVE_BATCH_MAX_CONCURRENCY",
}

INT_KEYS = {("transport", "port"), ("batch", "max_concurrency")}

# keys accepted in the per-request "config" query parameter
REQUEST_CREDENTIAL_KEYS: Dict[str, str] = {
    "CLIENT_ID": "client_id",
    "CLIENT_SECRET": "client_secret",
    "REFRESH_TOKEN": "refresh_token",
}


def default_config_path() -> Path:
    """Return ``config/server.yaml`` relative to the project root."""
    return Path(__file__).parent.parent.parent / "config" / "server.yaml"


def deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    merged = copy.deepcopy(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def load_yaml_config(config_file: Optional[Path] = None) -> Dict[str, Any]:
    """
    Load configuration from a YAML file.

    Args:
        config_file: Path to YAML config file. Defaults to config/server.yaml

    Returns:
        Parsed configuration, or an empty dict if the file is missing or invalid
    """
    path = Path(config_file) if config_file else default_config_path()
    if not path.exists():
        logger.debug(f"Config file not found: {path}")
        return {}

    try:
        with open(path, "r") as f:
            data = yaml.safe_load(f) or {}
        logger.info(f"Loaded configuration from {path}")
    except (OSError, yaml.YAMLError) as e:
        logger.warning(f"Failed to load config file {path}: {e}")
        return {}

    # server: {name, version, ...} is folded into the top level; empty keys
    # such as "port:" fall through to the defaults
    server_section = data.pop("server", None) or {}
    return _drop_unset(deep_merge(server_section, data))


def apply_env_overrides(config: Dict[str, Any]) -> Dict[str, Any]:
    """
    Apply environment variable overrides to configuration.

    Args:
        config: Base configuration

    Returns:
        Configuration with environment variable overrides applied
    """
    config = copy.deepcopy(config)

    for (section, key), env_var in ENV_MAPPINGS.items():
        env_value = os.getenv(env_var)
        if env_value is None or env_value == "":
            continue
        if (section, key) in INT_KEYS:
            try:
                value: Any = int(env_value)
            except ValueError:
                logger.warning(
                    f"Invalid {env_var} value '{env_value}', using default"
                )
                continue
        else:
            value = env_value
        config.setdefault(section, {})[key] = value

    return config


def _drop_unset(config: Dict[str, Any]) -> Dict[str, Any]:
    """Remove ``None`` leaves so they do not shadow lower-priority sources."""
    cleaned: Dict[str, Any] = {}
    for key, value in config.items():
        if isinstance(value, dict):
            cleaned[key] = _drop_unset(value)
        elif value is not None:
            cleaned[key] = value
    return cleaned


def load_config(
    overrides: Optional[Dict[str, Any]] = None,
    config_file: Optional[Path] = None,
    env_file: Optional[Path] = None,
) -> Dict[str, Any]:
    """
    Build the effective server configuration.

    Precedence, highest first: ``overrides``, environment variables,
    YAML file, built-in defaults.

    Args:
        overrides: Per-invocation configuration dictionary
        config_file: Optional YAML config path
        env_file: Optional ``.env`` path (defaults to ``.env`` in cwd)

    Returns:
        Fully merged configuration dictionary
    """
    load_dotenv(env_file or Path.cwd() / ".env", override=False)

    config = deep_merge(DEFAULT_CONFIG, load_yaml_config(config_file))
    config = apply_env_overrides(config)
    if overrides:
        config = deep_merge(config, _drop_unset(overrides))
    return config


def credentials_configured(config: Dict[str, Any]) -> bool:
    """Check that all three OAuth values are present."""
    creds = config.get("credentials", {})
    return all(
        creds.get(key) for key in ("client_id", "client_secret", "refresh_token")
    )


def parse_request_config(raw: str) -> Dict[str, Any]:
    """
    Decode the ``config`` query parameter sent with an HTTP tool call.

    The value is a JSON object, either plain or base64-encoded (the way
    Smithery sends it), holding any of ``CLIENT_ID``, ``CLIENT_SECRET`` and
    ``REFRESH_TOKEN``. Lowercase keys are accepted too.

    Args:
        raw: Query parameter value

    Returns:
        ``{"credentials": {...}}`` with the values given, or an empty dict
        when the parameter holds no usable credentials
    """
    try:
        data = json.loads(raw)
    except ValueError:
        try:
            padded = raw + "=" * (-len(raw) % 4)
            data = json.loads(base64.urlsafe_b64decode(padded))
        except ValueError:
            logger.warning("Ignoring request config that is neither JSON nor base64 JSON")
            return {}

    if not isinstance(data, dict):
        logger.warning("Ignoring request config that is not a JSON object")
        return {}

    credentials: Dict[str, Any] = {}
    for env_key, key in REQUEST_CREDENTIAL_KEYS.items():
        value = data.get(env_key) or data.get(key)
        if isinstance(value, str) and value:
            credentials[key] = value
    return {"credentials": credentials} if credentials else {}
