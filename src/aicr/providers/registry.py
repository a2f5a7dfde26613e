"""Provider discovery and registration."""

from typing import Any, Callable, Mapping

from aicr.cache import Cache
from aicr.providers.base import ReviewProvider

ProviderConstructor = Callable[[Mapping[str, Any], Cache], ReviewProvider]

_providers: dict[str, ProviderConstructor] = {}


def register_provider(type_name: str, constructor: ProviderConstructor) -> None:
  """Register a provider implementation under a type name."""
  _providers[type_name] = constructor


def get_constructor(type_name: str) -> ProviderConstructor | None:
  return _providers.get(type_name)


def list_provider_types() -> list[str]:
  """List registered provider type names."""
  return list(_providers.keys())


class ProviderRegistry:
  """Registry for lazy provider loading."""

  @staticmethod
  def load_all() -> None:
    """Load all provider modules to trigger registration."""
    from aicr.providers import anthropic, gemini, ollama, openai  # noqa: F401
