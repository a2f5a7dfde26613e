"""Shared behavior for HTTP-backed LLM providers."""

import logging
import os
from abc import abstractmethod
from typing import Any, Mapping, Sequence

import httpx

from aicr.cache import Cache, NullCache, generate_key
from aicr.config.settings import PolicyConfig
from aicr.errors import ConfigurationError, ProviderError
from aicr.models import DiffChunk, Finding
from aicr.providers.base import ReviewProvider
from aicr.providers.parser import extract_findings_from_text
from aicr.providers.prompt import SYSTEM_PROMPT, build_prompt, merge_additional_prompts

logger = logging.getLogger(__name__)


def dig(data: Any, *path: str | int) -> Any:
  """Walk nested dicts/lists, returning None on any missing step."""
  for step in path:
    try:
      data = data[step]
    except (KeyError, IndexError, TypeError):
      return None
  return data


class LLMProvider(ReviewProvider):
  """Base for providers that send one prompt per review over HTTP.

  Subclasses describe the request and where the model text sits in the
  response; this class composes the prompt, consults the cache, makes
  the call and extracts findings.

  Args:
    options: Provider settings (`api_key`, `model`, `endpoint`,
      `timeout`, `max_tokens`, `prompts`).
    cache: Response cache; defaults to a no-op cache.
    client: Optional preconfigured `httpx.Client`.
  """

  NAME = ""
  DEFAULT_MODEL = ""
  DEFAULT_ENDPOINT = ""
  DEFAULT_TIMEOUT = 60.0
  API_KEY_ENV: str | None = None
  REQUIRES_API_KEY = True

  def __init__(
    self,
    options: Mapping[str, Any] | None = None,
    cache: Cache | None = None,
    client: httpx.Client | None = None,
  ):
    self._options = dict(options or {})
    self._api_key = self._resolve_api_key()
    self._model = self._option_str("model") or self.DEFAULT_MODEL
    self._endpoint = self._option_str("endpoint") or self.default_endpoint()
    timeout = self._options.get("timeout")
    self._timeout = float(timeout) if timeout else self.DEFAULT_TIMEOUT
    self._cache: Cache = cache if cache is not None else NullCache()
    self._client = client

  @property
  def name(self) -> str:
    return self.NAME

  @property
  def model(self) -> str:
    return self._model

  @property
  def endpoint(self) -> str:
    return self._endpoint

  @property
  def timeout(self) -> float:
    return self._timeout

  def default_endpoint(self) -> str:
    return self.DEFAULT_ENDPOINT

  def review_chunks(
    self,
    chunks: Sequence[DiffChunk],
    policy: PolicyConfig | None = None,
  ) -> list[Finding]:
    if not chunks:
      return []

    system_prompt, user_prompt = self.compose_prompts(chunks, policy)
    payload = self.build_payload(system_prompt, user_prompt)
    data = self._post(self._endpoint, payload)

    content = self.response_text(data)
    if not content:
      logger.debug("%s returned no text content", self.name)
      return []
    return extract_findings_from_text(content)

  def compose_prompts(
    self,
    chunks: Sequence[DiffChunk],
    policy: PolicyConfig | None = None,
  ) -> tuple[str, str]:
    """System and user prompts with configured additions merged in."""
    return merge_additional_prompts(SYSTEM_PROMPT, build_prompt(chunks, policy), self._options)

  @abstractmethod
  def build_payload(self, system_prompt: str, user_prompt: str) -> dict[str, Any]:
    """JSON body for the review request."""
    ...

  @abstractmethod
  def response_text(self, data: Any) -> str | None:
    """Model output text from a decoded response body."""
    ...

  def headers(self) -> dict[str, str]:
    return {"Content-Type": "application/json"}

  def query_params(self) -> dict[str, str]:
    return {}

  def close(self) -> None:
    if self._client is not None:
      self._client.close()
      self._client = None

  def _get_client(self) -> httpx.Client:
    if self._client is None:
      self._client = httpx.Client(timeout=self._timeout)
    return self._client

  def _post(self, url: str, payload: dict[str, Any]) -> Any:
    """POST through the cache. Only successful, decoded bodies are cached."""
    key = generate_key("POST", url, payload)
    cached = self._cache.get(key)
    if cached is not None:
      logger.debug("%s cache hit for %s", self.name, key)
      return cached

    context = {"provider": self.name, "model": self._model, "url": url}
    try:
      response = self._get_client().post(
        url,
        json=payload,
        headers=self.headers(),
        params=self.query_params(),
        timeout=self._timeout,
      )
    except httpx.TimeoutException as e:
      raise ProviderError(
        f"{self.name} request timed out after {self._timeout}s: {e}",
        public_message="AI service timed out. Please try again later.",
        context=context,
      ) from e
    except httpx.RequestError as e:
      raise ProviderError(f"{self.name} request failed: {e}", context=context) from e

    if not response.is_success:
      raise ProviderError.from_http_error(response.status_code, self.name, context=context)

    try:
      data = response.json()
    except ValueError as e:
      raise ProviderError.from_parsing_error(self.name, response.text, context) from e

    self._cache.set(key, data)
    return data

  def _resolve_api_key(self) -> str | None:
    key = self._option_str("api_key")
    if not key and self.API_KEY_ENV:
      key = os.environ.get(self.API_KEY_ENV, "")
    # An unexpanded ${VAR} placeholder means the variable was never set
    if key and key.startswith("${"):
      key = ""

    if self.REQUIRES_API_KEY and not key:
      source = f"config providers.{self.NAME}.api_key"
      if self.API_KEY_ENV:
        source += f" or env {self.API_KEY_ENV}"
      raise ConfigurationError(
        f"{type(self).__name__} requires api_key ({source}).",
        public_message=f"Missing API key for provider '{self.NAME}'. Please check your configuration.",
        context={"provider": self.NAME},
      )
    return key or None

  def _option_str(self, key: str) -> str:
    value = self._options.get(key)
    return value if isinstance(value, str) else ""
