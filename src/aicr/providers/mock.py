"""Offline provider for tests and dry runs."""

from typing import Sequence

from aicr.config.settings import PolicyConfig
from aicr.models import DiffChunk, Finding
from aicr.providers.base import ReviewProvider


class MockProvider(ReviewProvider):
  """Returns canned findings without any network access.

  With no canned responses it reports one info finding on the first
  chunk, so a pipeline can be exercised end to end.
  """

  def __init__(self, responses: Sequence[Finding] | None = None):
    self._responses = list(responses or [])

  @property
  def name(self) -> str:
    return "mock"

  @property
  def model(self) -> str:
    return "mock"

  def review_chunks(
    self,
    chunks: Sequence[DiffChunk],
    policy: PolicyConfig | None = None,
  ) -> list[Finding]:
    if self._responses:
      return [dict(r) for r in self._responses]  # type: ignore[misc]
    if not chunks:
      return []

    first = chunks[0]
    start = int(first.get("start_line") or 1)
    return [{
      "rule_id": "AI.MOCK.CHECK",
      "title": "Mock AI Finding",
      "severity": "info",
      "file": str(first.get("file") or "unknown"),
      "start_line": start,
      "end_line": start,
      "rationale": "Mock provider used for tests.",
      "suggestion": "Consider addressing this mock suggestion.",
      "content": "",
    }]
