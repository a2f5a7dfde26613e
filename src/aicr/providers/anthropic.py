"""Anthropic Claude provider."""

from typing import Any, Mapping

from aicr.cache import Cache
from aicr.providers.base import ReviewProvider
from aicr.providers.llm import LLMProvider, dig
from aicr.providers.registry import register_provider


class AnthropicProvider(LLMProvider):
  """Anthropic Messages API provider."""

  NAME = "anthropic"
  DEFAULT_MODEL = "claude-3-5-sonnet-20240620"
  DEFAULT_ENDPOINT = "https://api.anthropic.com/v1/messages"
  API_KEY_ENV = "ANTHROPIC_API_KEY"
  API_VERSION = "2023-06-01"
  DEFAULT_MAX_TOKENS = 2048

  def headers(self) -> dict[str, str]:
    return {
      **super().headers(),
      "x-api-key": self._api_key or "",
      "anthropic-version": self.API_VERSION,
    }

  def build_payload(self, system_prompt: str, user_prompt: str) -> dict[str, Any]:
    return {
      "model": self._model,
      "max_tokens": int(self._options.get("max_tokens") or self.DEFAULT_MAX_TOKENS),
      "system": system_prompt,
      "messages": [{"role": "user", "content": user_prompt}],
    }

  def response_text(self, data: Any) -> str | None:
    return dig(data, "content", 0, "text")


def _create_anthropic(options: Mapping[str, Any], cache: Cache) -> ReviewProvider:
  return AnthropicProvider(options, cache=cache)


register_provider("anthropic", _create_anthropic)
