"""Configuration loading helpers for the resolvescope CLI.

Brief:
  Reads the YAML config file, validates it against the bundled JSON Schema
  and derives listener settings, honouring the PORT and BIND_ADDRESS
  environment overrides.
"""

from __future__ import annotations

import os
from typing import Any, Dict, Mapping, Optional, Tuple

import yaml

from .config_schema import validate_config

DEFAULT_WEB_HOST = "127.0.0.1"
DEFAULT_WEB_PORT = 8080


def load_config(path: Optional[str]) -> Dict[str, Any]:
    """Brief: Read and validate a YAML config file.

    Inputs:
      - path: Path to the YAML file, or None for an empty configuration.

    Outputs:
      - dict: Parsed configuration mapping.

    Raises:
      - OSError when the file cannot be read.
      - ValueError when the YAML is malformed, is not a mapping, or fails
        schema validation.
    """

    if not path:
        cfg: Dict[str, Any] = {}
    else:
        with open(path, "r", encoding="utf-8") as f:
            try:
                loaded = yaml.safe_load(f)
            except yaml.YAMLError as exc:
                raise ValueError(f"Invalid YAML in {path}: {exc}") from exc
        if loaded is None:
            loaded = {}
        if not isinstance(loaded, dict):
            raise ValueError(f"Configuration in {path} must be a mapping")
        cfg = loaded

    validate_config(cfg, config_path=path)
    return cfg


def read_env_port(
    key: str, fallback: int, environ: Optional[Mapping[str, str]] = None
) -> int:
    """Brief: Read a TCP port from the environment.

    Inputs:
      - key: Environment variable name.
      - fallback: Value used when the variable is unset, blank, not an
        integer, or outside 1-65535.

    Outputs:
      - int port.

    Example:
      >>> read_env_port("PORT", 8080, {"PORT": "9000"})
      9000
      >>> read_env_port("PORT", 8080, {"PORT": "70000"})
      8080
    """

    env = os.environ if environ is None else environ
    value = str(env.get(key, "")).strip()
    if not value:
        return fallback
    try:
        parsed = int(value)
    except ValueError:
        return fallback
    if parsed <= 0 or parsed > 65535:
        return fallback
    return parsed


def read_env_string(
    key: str, fallback: str, environ: Optional[Mapping[str, str]] = None
) -> str:
    """Brief: Read a non-blank string from the environment, else fallback."""

    env = os.environ if environ is None else environ
    value = str(env.get(key, "")).strip()
    return value or fallback


def get_webserver_settings(
    cfg: Mapping[str, Any], environ: Optional[Mapping[str, str]] = None
) -> Tuple[bool, str, int]:
    """Brief: Effective (enabled, host, port) for the HTTP listener.

    Inputs:
      - cfg: Parsed configuration mapping.
      - environ: Optional environment mapping (defaults to os.environ).

    Outputs:
      - Tuple of enabled flag, bind host and port. BIND_ADDRESS and PORT
        override the config values when set to usable values.
    """

    web_cfg = cfg.get("webserver") or {}
    enabled = bool(web_cfg.get("enabled", True))
    host = str(web_cfg.get("host", DEFAULT_WEB_HOST))
    port = int(web_cfg.get("port", DEFAULT_WEB_PORT))
    host = read_env_string("BIND_ADDRESS", host, environ)
    port = read_env_port("PORT", port, environ)
    return enabled, host, port
