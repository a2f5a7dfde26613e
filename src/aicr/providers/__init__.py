"""Review providers: LLM backends and the offline mock."""

from aicr.providers.base import ReviewProvider
from aicr.providers.factory import ProviderFactory
from aicr.providers.llm import LLMProvider
from aicr.providers.mock import MockProvider
from aicr.providers.parser import extract_findings_from_text
from aicr.providers.prompt import build_prompt, merge_additional_prompts
from aicr.providers.registry import ProviderRegistry, list_provider_types, register_provider

__all__ = [
  "LLMProvider",
  "MockProvider",
  "ProviderFactory",
  "ProviderRegistry",
  "ReviewProvider",
  "build_prompt",
  "extract_findings_from_text",
  "list_provider_types",
  "merge_additional_prompts",
  "register_provider",
]
