"""Domain errors with separate internal and public messages."""

import json
import logging
from typing import Any

_logger = logging.getLogger("aicr.errors")

PREVIEW_LENGTH = 100


class ReviewError(Exception):
  """Base class for all review errors.

  The exception message is internal diagnostic detail meant for logs.
  `public_message` is safe to show to end users or post in a comment.
  Constructing an error has no side effects; pass it to `log_error`
  where it is caught or surfaced.
  """

  log_level = logging.ERROR
  default_public_message = "An unexpected review error occurred."

  def __init__(
    self,
    message: str = "",
    *,
    public_message: str = "",
    context: dict[str, Any] | None = None,
    code: int = 0,
  ):
    super().__init__(message)
    self.message = message
    self.public_message = public_message or self.default_public_message
    self.context = dict(context or {})
    self.code = code
    self._logged = False

  @property
  def kind(self) -> str:
    return type(self).__name__


class ConfigurationError(ReviewError):
  """Missing or invalid configuration, fixable by the user."""

  log_level = logging.WARNING
  default_public_message = (
    "Configuration error occurred. Please check your configuration file."
  )


class ProviderError(ReviewError):
  """Remote review service failed or answered with something unusable."""

  log_level = logging.ERROR
  default_public_message = "AI provider error occurred. Please try again later."

  @classmethod
  def from_http_error(
    cls,
    status_code: int,
    provider: str,
    internal_message: str = "",
    context: dict[str, Any] | None = None,
  ) -> "ProviderError":
    """Build an error from an HTTP status, with a sanitized public message."""
    if status_code >= 500:
      public = "AI service temporarily unavailable. Please try again later."
    elif status_code == 429:
      public = "Rate limit exceeded. Please wait before trying again."
    elif status_code in (401, 403):
      public = "Authentication failed. Please check your API credentials."
    elif status_code >= 400:
      public = "Invalid request. Please check your configuration."
    else:
      public = "AI service error occurred. Please try again later."

    return cls(
      internal_message or f"Provider {provider} returned status {status_code}",
      public_message=public,
      context={**(context or {}), "provider": provider, "status_code": status_code},
      code=status_code,
    )

  @classmethod
  def from_parsing_error(
    cls,
    provider: str,
    content: str,
    context: dict[str, Any] | None = None,
  ) -> "ProviderError":
    """Build an error for an undecodable response body.

    Only the length and a short preview of the body are kept.
    """
    return cls(
      f"Failed to parse response from {provider}",
      public_message="Invalid response from AI service. Please try again.",
      context={
        **(context or {}),
        "provider": provider,
        "content_length": len(content),
        "content_preview": content[:PREVIEW_LENGTH],
      },
    )

  @property
  def retryable(self) -> bool:
    """Whether a caller may retry with backoff (5xx and 429)."""
    return self.code >= 500 or self.code == 429


def log_error(exc: ReviewError, logger: logging.Logger | None = None) -> bool:
  """Write one structured log record for an error.

  Returns False when this error instance was already logged.
  """
  if exc._logged:
    return False
  exc._logged = True

  context = {**exc.context, "exception_class": exc.kind, "code": exc.code}
  (logger or _logger).log(
    exc.log_level,
    "[%s] %s - Context: %s",
    exc.kind,
    exc.message,
    json.dumps(context, default=str, sort_keys=True),
  )
  return True
