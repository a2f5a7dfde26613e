"""Tests for the provider factory."""

import base64
from pathlib import Path

import pytest
from aicr.cache import NullCache, ResponseCache
from aicr.config.settings import CacheSettings, PromptSettings, ProviderSettings, Settings
from aicr.errors import ConfigurationError
from aicr.providers.factory import GUIDELINES_PREFIX, ProviderFactory
from aicr.providers.mock import MockProvider
from aicr.providers.openai import OpenAIProvider


@pytest.fixture
def settings() -> Settings:
  return Settings(
    provider="openai",
    providers={
      "openai": ProviderSettings(api_key="sk-test"),
      "ollama": ProviderSettings(model="codellama"),
    },
  )


class TestBuild:
  def test_default_provider(self, settings: Settings) -> None:
    provider = ProviderFactory(settings).build()

    assert isinstance(provider, OpenAIProvider)
    assert provider.name == "openai"

  def test_named_provider_gets_options(self, settings: Settings) -> None:
    provider = ProviderFactory(settings).build("ollama")

    assert provider.name == "ollama"
    assert provider.model == "codellama"

  def test_unknown_name_lists_configured(self, settings: Settings) -> None:
    with pytest.raises(ConfigurationError) as exc_info:
      ProviderFactory(settings).build("azure")

    assert str(exc_info.value) == "Unknown provider 'azure'. Configured providers: openai, ollama"
    assert exc_info.value.context["available"] == ["openai", "ollama"]

  def test_unknown_name_with_nothing_configured(self) -> None:
    with pytest.raises(ConfigurationError, match="Configured providers: none"):
      ProviderFactory(Settings()).build("openai")

  def test_mock_needs_no_configuration(self) -> None:
    assert isinstance(ProviderFactory(Settings()).build(), MockProvider)
    assert isinstance(ProviderFactory(Settings()).build("mock"), MockProvider)

  def test_type_selects_implementation(self) -> None:
    settings = Settings(providers={
      "work": ProviderSettings(type="openai", api_key="sk-work", model="gpt-4.1"),
      "offline": ProviderSettings(type="mock"),
    })
    factory = ProviderFactory(settings)

    work = factory.build("work")
    assert isinstance(work, OpenAIProvider)
    assert work.model == "gpt-4.1"
    assert isinstance(factory.build("offline"), MockProvider)

  def test_unknown_type(self) -> None:
    settings = Settings(providers={"x": ProviderSettings(type="bogus")})

    with pytest.raises(ConfigurationError, match="unknown type 'bogus'"):
      ProviderFactory(settings).build("x")

  def test_missing_api_key_surfaces(self, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("OPENAI_API_KEY", raising=False)
    settings = Settings(providers={"openai": ProviderSettings()})

    with pytest.raises(ConfigurationError):
      ProviderFactory(settings).build("openai")


class TestCache:
  def test_injected_cache_is_used(self, settings: Settings, tmp_path: Path) -> None:
    cache = ResponseCache(tmp_path)

    provider = ProviderFactory(settings, cache=cache).build()

    assert provider._cache is cache

  def test_cache_from_provider_settings(self, tmp_path: Path) -> None:
    settings = Settings(providers={
      "openai": ProviderSettings(
        api_key="sk-test",
        cache=CacheSettings(enabled=True, directory=str(tmp_path / "c")),
      ),
    })

    provider = ProviderFactory(settings).build("openai")

    assert isinstance(provider._cache, ResponseCache)

  def test_no_cache_by_default(self, settings: Settings) -> None:
    assert isinstance(ProviderFactory(settings).build()._cache, NullCache)


class TestGuidelines:
  def test_guidelines_injected_once(self, settings: Settings, tmp_path: Path) -> None:
    guidelines = tmp_path / "GUIDELINES.md"
    guidelines.write_text("Prefer early returns.\n")
    settings.guidelines_file = str(guidelines)
    factory = ProviderFactory(settings)

    first = factory.with_prompts({})
    second = factory.with_prompts({})

    (entry,) = first["prompts"]["extra"]
    assert entry.startswith(GUIDELINES_PREFIX)
    encoded = entry.split("\n", 1)[1]
    assert base64.b64decode(encoded).decode() == "Prefer early returns.\n"
    assert second["prompts"]["extra"] == [entry]
    assert settings.prompts.extra == [entry]

  def test_existing_entry_is_not_duplicated(self, settings: Settings, tmp_path: Path) -> None:
    guidelines = tmp_path / "g.md"
    guidelines.write_text("rules")
    settings.guidelines_file = str(guidelines)
    settings.prompts = PromptSettings(extra=[f"{GUIDELINES_PREFIX}: already here"])

    options = ProviderFactory(settings).with_prompts({})

    assert options["prompts"]["extra"] == [f"{GUIDELINES_PREFIX}: already here"]

  @pytest.mark.parametrize("content", [None, "", "   \n"])
  def test_missing_or_blank_file_is_skipped(
    self, settings: Settings, tmp_path: Path, content: str | None
  ) -> None:
    path = tmp_path / "g.md"
    if content is not None:
      path.write_text(content)
    settings.guidelines_file = str(path)

    options = ProviderFactory(settings).with_prompts({"model": "m"})

    assert options["prompts"]["extra"] == []
    assert options["model"] == "m"

  def test_global_prompts_reach_provider_options(self, settings: Settings) -> None:
    settings.prompts = PromptSettings(system_append="Be terse", extra="Mind the tests")

    options = ProviderFactory(settings).with_prompts({})

    assert options["prompts"]["system_append"] == "Be terse"
    assert options["prompts"]["extra"] == ["Mind the tests"]
