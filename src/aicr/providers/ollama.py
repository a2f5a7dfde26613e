"""Ollama local LLM provider."""

import os
from typing import Any, Mapping

from aicr.cache import Cache
from aicr.providers.base import ReviewProvider
from aicr.providers.llm import LLMProvider, dig
from aicr.providers.registry import register_provider


class OllamaProvider(LLMProvider):
  """Ollama local LLM provider. No API key is needed."""

  NAME = "ollama"
  DEFAULT_MODEL = "llama3.1"
  DEFAULT_HOST = "http://localhost:11434"
  DEFAULT_TIMEOUT = 120.0
  REQUIRES_API_KEY = False

  def default_endpoint(self) -> str:
    host = os.environ.get("OLLAMA_HOST", self.DEFAULT_HOST).rstrip("/")
    return f"{host}/api/generate"

  def build_payload(self, system_prompt: str, user_prompt: str) -> dict[str, Any]:
    return {
      "model": self._model,
      "prompt": f"{system_prompt}\n\n{user_prompt}",
      "stream": False,
      "format": "json",
      "options": {"temperature": 0.0},
    }

  def response_text(self, data: Any) -> str | None:
    return dig(data, "response")


def _create_ollama(options: Mapping[str, Any], cache: Cache) -> ReviewProvider:
  return OllamaProvider(options, cache=cache)


register_provider("ollama", _create_ollama)
