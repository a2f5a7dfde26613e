"""Core review orchestration."""

import hashlib
import logging
import re
from collections import Counter
from pathlib import Path
from typing import Any, Iterable, Mapping, Sequence

from aicr.config import PolicyConfig, Settings, load_config
from aicr.errors import ReviewError, log_error
from aicr.models import DiffChunk, EngineMode, Finding, normalize_finding, severity_rank
from aicr.providers import ProviderFactory, ReviewProvider
from aicr.rules import RuleEngine

logger = logging.getLogger(__name__)

_SECRET_ASSIGNMENT = re.compile(
  r"(?i)(password|secret|api[_-]?key)(\s*[:=]\s*)[^'\"\s]{4,}"
)


def merge_findings(*sources: Iterable[Any]) -> list[Finding]:
  """Concatenate findings from several reviewers under one key shape.

  Entries that are not mappings (a model answering `{"findings": ["x"]}`)
  are dropped.
  """
  merged: list[Finding] = []
  for source in sources:
    for finding in source:
      if not isinstance(finding, Mapping):
        logger.debug("Dropping malformed finding: %r", finding)
        continue
      merged.append(normalize_finding(finding))
  return merged


def fingerprint(finding: Finding) -> str:
  """Stable identity of a finding, used for de-duplication."""
  key = "|".join(
    str(finding.get(k, ""))
    for k in ("file_path", "start_line", "end_line", "rule_id", "content")
  )
  return hashlib.sha1(key.encode("utf-8")).hexdigest()


def redact_secrets(text: str) -> str:
  """Mask values assigned to secret-looking keys."""
  return _SECRET_ASSIGNMENT.sub(r"\1\2***", text)


def apply_policy(findings: Sequence[Finding], policy: PolicyConfig) -> list[Finding]:
  """Enforce the policy on findings after the fact.

  Drops findings below the minimum severity and duplicates, caps the
  count per file and overall, and masks secrets in `content`.
  """
  threshold = severity_rank(policy.min_severity_to_comment)
  seen: set[str] = set()
  per_file: Counter[str] = Counter()
  out: list[Finding] = []

  for raw in findings:
    finding = normalize_finding(raw)
    if severity_rank(finding.get("severity", "")) < threshold:
      continue

    fp = fingerprint(finding)
    if fp in seen:
      continue
    seen.add(fp)

    file_path = finding.get("file_path", "")
    if per_file[file_path] >= policy.max_findings_per_file:
      continue
    per_file[file_path] += 1

    if policy.redact_secrets:
      finding["content"] = redact_secrets(str(finding.get("content", "")))
    finding["fingerprint"] = fp  # type: ignore[typeddict-unknown-key]
    out.append(finding)

    if len(out) >= policy.max_comments:
      break

  return out


class ReviewOrchestrator:
  """Runs the rule engine and the configured provider over chunks.

  A provider built from settings is closed after each review; an
  injected one is left to the caller.
  """

  def __init__(
    self,
    settings: Settings | None = None,
    rule_engine: RuleEngine | None = None,
    provider: ReviewProvider | None = None,
  ):
    self.settings = settings or Settings()
    self._rule_engine = rule_engine
    self._provider = provider
    self._owns_provider = provider is None

  @property
  def rule_engine(self) -> RuleEngine:
    if self._rule_engine is None:
      self._rule_engine = RuleEngine.from_config(self.settings.rules.model_dump())
    return self._rule_engine

  @property
  def provider(self) -> ReviewProvider:
    if self._provider is None:
      self._provider = ProviderFactory(self.settings).build()
    return self._provider

  def review(self, chunks: Sequence[DiffChunk]) -> list[Finding]:
    """Review chunks with the configured engines and merge the findings."""
    if not chunks:
      return []

    engine = self.settings.engine
    rule_findings: list[Finding] = []
    provider_findings: list[Finding] = []

    if engine in (EngineMode.RULES, EngineMode.BOTH):
      rule_findings = self.rule_engine.review_chunks(chunks)
      logger.debug("Rule engine produced %d findings", len(rule_findings))

    if engine in (EngineMode.LLM, EngineMode.BOTH):
      provider = self.provider
      try:
        provider_findings = provider.review_chunks(chunks, self.settings.policy)
      except ReviewError as e:
        log_error(e, logger)
        raise
      finally:
        if self._owns_provider:
          provider.close()
      logger.debug("%s produced %d findings", provider.name, len(provider_findings))

    findings = merge_findings(rule_findings, provider_findings)
    if self.settings.enforce_policy:
      findings = apply_policy(findings, self.settings.policy)
    return findings


def run_review(
  chunks: Sequence[DiffChunk],
  engine: EngineMode | None = None,
  provider: str | None = None,
  config_path: Path | None = None,
  enforce_policy: bool | None = None,
) -> list[Finding]:
  """Run a review with the given options."""
  settings = load_config(config_path).model_copy(deep=True)

  if engine:
    settings.engine = engine
  if provider:
    settings.provider = provider
  if enforce_policy is not None:
    settings.enforce_policy = enforce_policy

  return ReviewOrchestrator(settings).review(chunks)
