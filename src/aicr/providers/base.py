"""Base provider protocol."""

from abc import ABC, abstractmethod
from typing import Sequence

from aicr.config.settings import PolicyConfig
from aicr.models import DiffChunk, Finding


class ReviewProvider(ABC):
  """Abstract base for review providers."""

  @abstractmethod
  def review_chunks(
    self,
    chunks: Sequence[DiffChunk],
    policy: PolicyConfig | None = None,
  ) -> list[Finding]:
    """Review diff chunks and return findings."""
    ...

  @property
  @abstractmethod
  def name(self) -> str:
    """Provider name."""
    ...

  @property
  def model(self) -> str:
    """Model identifier, empty when not applicable."""
    return ""

  def close(self) -> None:
    """Release network resources held by the provider."""
