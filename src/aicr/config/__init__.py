"""Configuration management."""

from aicr.config.loader import load_config
from aicr.config.settings import (
  CacheSettings,
  PolicyConfig,
  PromptSettings,
  ProviderSettings,
  RulesSettings,
  Settings,
)

__all__ = [
  "CacheSettings",
  "PolicyConfig",
  "PromptSettings",
  "ProviderSettings",
  "RulesSettings",
  "Settings",
  "load_config",
]
