"""OpenAI provider."""

from typing import Any, Mapping

from aicr.cache import Cache
from aicr.providers.base import ReviewProvider
from aicr.providers.llm import LLMProvider, dig
from aicr.providers.registry import register_provider


class OpenAIProvider(LLMProvider):
  """OpenAI Chat Completions provider."""

  NAME = "openai"
  DEFAULT_MODEL = "gpt-4o-mini"
  DEFAULT_ENDPOINT = "https://api.openai.com/v1/chat/completions"
  API_KEY_ENV = "OPENAI_API_KEY"

  def headers(self) -> dict[str, str]:
    return {**super().headers(), "Authorization": f"Bearer {self._api_key}"}

  def build_payload(self, system_prompt: str, user_prompt: str) -> dict[str, Any]:
    return {
      "model": self._model,
      "messages": [
        {"role": "system", "content": system_prompt},
        {"role": "user", "content": user_prompt},
      ],
      "temperature": 0.0,
      "response_format": {"type": "json_object"},
    }

  def response_text(self, data: Any) -> str | None:
    return dig(data, "choices", 0, "message", "content")


def _create_openai(options: Mapping[str, Any], cache: Cache) -> ReviewProvider:
  return OpenAIProvider(options, cache=cache)


register_provider("openai", _create_openai)
