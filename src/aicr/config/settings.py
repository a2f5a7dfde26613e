"""Application settings."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from aicr.models import EngineMode

DEFAULT_CACHE_TTL = 3600
DEFAULT_CACHE_MAX_SIZE = 50 * 1024 * 1024


class CacheSettings(BaseModel):
  """Response cache settings for one provider."""

  enabled: bool = False
  directory: str | None = None
  default_ttl: int = DEFAULT_CACHE_TTL
  max_size: int = DEFAULT_CACHE_MAX_SIZE


class ProviderSettings(BaseModel):
  """Connection settings for one configured provider.

  `type` selects the implementation and defaults to the entry's name.
  """

  model_config = ConfigDict(extra="allow")

  type: str | None = None
  api_key: str | None = None
  model: str | None = None
  endpoint: str | None = None
  timeout: float | None = None
  max_tokens: int | None = None
  cache: CacheSettings | None = None


class PromptSettings(BaseModel):
  """Extra prompt text appended to the built-in prompts."""

  system_append: str | list[str] | None = None
  user_append: str | list[str] | None = None
  extra: str | list[str] = Field(default_factory=list)


class PolicyConfig(BaseModel):
  """Review constraints shaped into the prompt."""

  model_config = ConfigDict(frozen=True)

  max_findings_per_file: int = 5
  max_comments: int = 50
  min_severity_to_comment: str = "info"
  consolidate_similar_findings: bool = False
  redact_secrets: bool = True


class RulesSettings(BaseModel):
  """Inline rule definitions and rule files to include."""

  inline: list[dict[str, Any]] = Field(default_factory=list)
  include: list[str] = Field(default_factory=list)


class Settings(BaseModel):
  """Application configuration."""

  model_config = ConfigDict(use_enum_values=False)

  engine: EngineMode = EngineMode.RULES
  provider: str = "mock"
  providers: dict[str, ProviderSettings] = Field(default_factory=dict)
  prompts: PromptSettings = Field(default_factory=PromptSettings)
  guidelines_file: str | None = None
  policy: PolicyConfig = Field(default_factory=PolicyConfig)
  enforce_policy: bool = False
  rules: RulesSettings = Field(default_factory=RulesSettings)
