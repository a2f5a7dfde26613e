"""Builds configured providers with merged prompt settings."""

import base64
import logging
from pathlib import Path
from typing import Any

from aicr.cache import Cache, build_cache
from aicr.config.settings import Settings
from aicr.errors import ConfigurationError
from aicr.providers.base import ReviewProvider
from aicr.providers.mock import MockProvider
from aicr.providers.registry import ProviderRegistry, get_constructor, list_provider_types

logger = logging.getLogger(__name__)

MOCK_PROVIDER = "mock"
GUIDELINES_PREFIX = "Coding guidelines file content is provided below in base64"


class ProviderFactory:
  """Resolves a provider by name from settings.

  Unknown names fail closed with a `ConfigurationError`. The reserved
  name "mock" needs no configuration.
  """

  def __init__(self, settings: Settings, cache: Cache | None = None):
    self._settings = settings
    self._cache = cache

  def configured_names(self) -> list[str]:
    return list(self._settings.providers.keys())

  def build(self, name: str | None = None) -> ReviewProvider:
    """Construct the named provider, or the settings' default one."""
    name = name or self._settings.provider
    configured = self._settings.providers

    if name == MOCK_PROVIDER and name not in configured:
      return MockProvider()

    if name not in configured:
      available = ", ".join(self.configured_names()) or "none"
      raise ConfigurationError(
        f"Unknown provider '{name}'. Configured providers: {available}",
        public_message=f"Unknown provider '{name}'. Available providers: {available}.",
        context={"provider": name, "available": self.configured_names()},
      )

    provider_settings = configured[name]
    type_name = provider_settings.type or name
    if type_name == MOCK_PROVIDER:
      return MockProvider()

    ProviderRegistry.load_all()
    constructor = get_constructor(type_name)
    if constructor is None:
      known = ", ".join([*list_provider_types(), MOCK_PROVIDER])
      raise ConfigurationError(
        f"Provider '{name}' has unknown type '{type_name}'. Known types: {known}",
        context={"provider": name, "type": type_name},
      )

    options = self.with_prompts(provider_settings.model_dump(exclude_none=True))
    cache = self._cache if self._cache is not None else build_cache(provider_settings.cache)
    logger.debug("Building provider %s (type %s)", name, type_name)
    return constructor(options, cache)

  def with_prompts(self, options: dict[str, Any]) -> dict[str, Any]:
    """Attach global prompt settings, injecting the guidelines file once.

    A missing, unreadable or blank guidelines file is skipped. The
    injected entry is recorded on the settings, so later builds find it
    by its prefix instead of adding it again.
    """
    prompts = self._settings.prompts.model_dump()
    extra = prompts.get("extra") or []
    extra = [extra] if isinstance(extra, str) else list(extra)

    already = any(isinstance(x, str) and x.startswith(GUIDELINES_PREFIX) for x in extra)
    if not already:
      encoded = _read_guidelines(self._settings.guidelines_file)
      if encoded:
        extra.append(f"{GUIDELINES_PREFIX} (decode and follow strictly):\n{encoded}")
        self._settings.prompts.extra = list(extra)

    prompts["extra"] = extra
    return {**options, "prompts": prompts}


def _read_guidelines(path: str | None) -> str | None:
  """Base64 of the guidelines file, or None if there is nothing to inject."""
  if not path or not path.strip():
    return None
  try:
    raw = Path(path).read_bytes()
  except OSError as e:
    logger.debug("Skipping guidelines file %s: %s", path, e)
    return None
  if not raw.strip():
    return None
  return base64.b64encode(raw).decode("ascii")
