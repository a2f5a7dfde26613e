"""Google Gemini provider."""

from typing import Any, Mapping

from aicr.cache import Cache
from aicr.providers.base import ReviewProvider
from aicr.providers.llm import LLMProvider, dig
from aicr.providers.registry import register_provider


class GeminiProvider(LLMProvider):
  """Gemini generateContent provider.

  The API key travels as a query parameter and is kept out of the
  cache key.
  """

  NAME = "gemini"
  DEFAULT_MODEL = "gemini-1.5-pro"
  ENDPOINT_BASE = "https://generativelanguage.googleapis.com/v1beta/models/"
  API_KEY_ENV = "GEMINI_API_KEY"

  def default_endpoint(self) -> str:
    return f"{self.ENDPOINT_BASE}{self._model}:generateContent"

  def query_params(self) -> dict[str, str]:
    return {"key": self._api_key or ""}

  def build_payload(self, system_prompt: str, user_prompt: str) -> dict[str, Any]:
    return {
      "contents": [
        {"role": "user", "parts": [{"text": f"{system_prompt}\n\n{user_prompt}"}]},
      ],
      "generationConfig": {
        "temperature": 0,
        "responseMimeType": "application/json",
      },
    }

  def response_text(self, data: Any) -> str | None:
    return dig(data, "candidates", 0, "content", "parts", 0, "text")


def _create_gemini(options: Mapping[str, Any], cache: Cache) -> ReviewProvider:
  return GeminiProvider(options, cache=cache)


register_provider("gemini", _create_gemini)
