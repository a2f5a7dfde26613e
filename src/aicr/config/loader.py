"""Configuration file loading."""

import json
import os
import re
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from aicr.config.settings import Settings
from aicr.errors import ConfigurationError
from aicr.models import EngineMode

CONFIG_FILENAMES = [".aicr.yaml", ".aicr.yml", "aicr.yaml", "aicr.yml", ".aicr.json"]

_ENV_VAR = re.compile(r"\$\{([A-Z0-9_]+)\}")


def _find_config_file(config_path: Path | None = None) -> Path | None:
  """Find config file path, or None if no config exists."""
  if config_path:
    if not config_path.exists():
      raise ConfigurationError(f"Config file not found: {config_path}")
    return config_path

  for filename in CONFIG_FILENAMES:
    path = Path.cwd() / filename
    if path.exists():
      return path

  return None


def load_config(config_path: Path | None = None) -> Settings:
  """Load configuration from file or defaults."""
  path = _find_config_file(config_path)
  if path:
    return _load_from_file(path)
  return Settings()


def _load_from_file(path: Path) -> Settings:
  """Load settings from a YAML or JSON file."""
  try:
    raw = path.read_text(encoding="utf-8")
  except OSError as e:
    raise ConfigurationError(f"Failed to read config file: {path}: {e}") from e

  try:
    if path.suffix.lower() == ".json":
      data = json.loads(raw) if raw.strip() else {}
    else:
      data = yaml.safe_load(raw) or {}
  except (json.JSONDecodeError, yaml.YAMLError) as e:
    raise ConfigurationError(f"Invalid config file {path}: {e}") from e

  if not isinstance(data, dict):
    raise ConfigurationError(f"Config file {path} must contain a mapping at the top level")

  return _parse_config(expand_env(data))


def expand_env(value: Any) -> Any:
  """Replace ${VAR} in string values; unset variables are left as-is."""
  if isinstance(value, dict):
    return {k: expand_env(v) for k, v in value.items()}
  if isinstance(value, list):
    return [expand_env(v) for v in value]
  if isinstance(value, str):
    return _ENV_VAR.sub(lambda m: os.environ.get(m.group(1), m.group(0)), value)
  return value


def _parse_config(data: dict) -> Settings:
  """Parse config dict into Settings."""
  data = dict(data)

  providers = data.get("providers")
  if isinstance(providers, dict) and isinstance(providers.get("default"), str):
    providers = dict(providers)
    data.setdefault("provider", providers.pop("default"))
    data["providers"] = providers

  try:
    if "engine" in data:
      data["engine"] = EngineMode(data["engine"])
    return Settings(**data)
  except (ValueError, TypeError, ValidationError) as e:
    raise ConfigurationError(f"Invalid configuration: {e}") from e
