"""Tests for the error taxonomy and its logging boundary."""

import logging

import pytest
from aicr.errors import ConfigurationError, ProviderError, ReviewError, log_error


class TestConfigurationError:
  def test_default_public_message(self) -> None:
    err = ConfigurationError("missing api key for openai")

    assert str(err) == "missing api key for openai"
    assert err.public_message == (
      "Configuration error occurred. Please check your configuration file."
    )
    assert err.log_level == logging.WARNING
    assert err.kind == "ConfigurationError"

  def test_custom_public_message_and_context(self) -> None:
    err = ConfigurationError("internal", public_message="Fix it", context={"provider": "x"})

    assert err.public_message == "Fix it"
    assert err.context == {"provider": "x"}

  def test_is_review_error(self) -> None:
    assert isinstance(ConfigurationError("x"), ReviewError)


class TestProviderErrorFromHttp:
  @pytest.mark.parametrize(
    ("status", "public"),
    [
      (500, "AI service temporarily unavailable. Please try again later."),
      (503, "AI service temporarily unavailable. Please try again later."),
      (429, "Rate limit exceeded. Please wait before trying again."),
      (401, "Authentication failed. Please check your API credentials."),
      (403, "Authentication failed. Please check your API credentials."),
      (400, "Invalid request. Please check your configuration."),
      (404, "Invalid request. Please check your configuration."),
      (302, "AI service error occurred. Please try again later."),
    ],
  )
  def test_status_mapping(self, status: int, public: str) -> None:
    err = ProviderError.from_http_error(status, "openai")

    assert err.public_message == public
    assert err.code == status
    assert err.context["status_code"] == status
    assert err.context["provider"] == "openai"
    assert err.log_level == logging.ERROR

  def test_default_internal_message(self) -> None:
    err = ProviderError.from_http_error(502, "gemini")

    assert str(err) == "Provider gemini returned status 502"

  def test_internal_message_and_context_are_kept(self) -> None:
    err = ProviderError.from_http_error(400, "anthropic", "bad schema", {"url": "u"})

    assert str(err) == "bad schema"
    assert err.context["url"] == "u"

  @pytest.mark.parametrize(("status", "retryable"), [(500, True), (429, True), (401, False), (400, False)])
  def test_retryable(self, status: int, retryable: bool) -> None:
    assert ProviderError.from_http_error(status, "p").retryable is retryable


class TestProviderErrorFromParsing:
  def test_keeps_only_length_and_preview(self) -> None:
    content = "secret-token " + "x" * 500

    err = ProviderError.from_parsing_error("ollama", content)

    assert err.context["content_length"] == len(content)
    assert err.context["content_preview"] == content[:100]
    assert content not in str(err)
    assert err.public_message == "Invalid response from AI service. Please try again."


class TestLogError:
  def test_construction_does_not_log(self, caplog: pytest.LogCaptureFixture) -> None:
    with caplog.at_level(logging.DEBUG):
      ProviderError.from_http_error(500, "openai")
      ConfigurationError("nope")

    assert caplog.records == []

  def test_logs_once_at_error_level(self, caplog: pytest.LogCaptureFixture) -> None:
    err = ProviderError.from_http_error(500, "openai")

    with caplog.at_level(logging.DEBUG, logger="aicr.errors"):
      assert log_error(err) is True
      assert log_error(err) is False

    assert len(caplog.records) == 1
    record = caplog.records[0]
    assert record.levelno == logging.ERROR
    assert "ProviderError" in record.getMessage()
    assert '"status_code": 500' in record.getMessage()

  def test_configuration_error_logs_as_warning(self, caplog: pytest.LogCaptureFixture) -> None:
    logger = logging.getLogger("tests.errors")

    with caplog.at_level(logging.DEBUG, logger="tests.errors"):
      log_error(ConfigurationError("bad"), logger)

    assert [r.levelno for r in caplog.records] == [logging.WARNING]
