"""Core domain models for code review."""

from enum import Enum
from typing import Any, Mapping, NotRequired, TypedDict


class Severity(Enum):
  """Issue severity levels."""

  CRITICAL = "critical"
  HIGH = "high"
  MAJOR = "major"
  MEDIUM = "medium"
  MINOR = "minor"
  LOW = "low"
  INFO = "info"


class EngineMode(Enum):
  """Which reviewers take part in a run."""

  RULES = "rules"
  LLM = "llm"
  BOTH = "both"


# Two vocabularies are in use (rule files tend to use info/minor/major/critical,
# models answer with low/medium/high); both map onto the same ladder.
SEVERITY_RANK = {
  Severity.INFO.value: 0,
  Severity.LOW.value: 1,
  Severity.MINOR.value: 1,
  Severity.MEDIUM.value: 2,
  Severity.MAJOR.value: 2,
  Severity.HIGH.value: 3,
  Severity.CRITICAL.value: 4,
}


def severity_rank(severity: Any) -> int:
  """Rank a free-form severity string. Unknown values rank as info."""
  return SEVERITY_RANK.get(str(severity).strip().lower(), 0)


class AddedLine(TypedDict):
  """A line added by the change, with its new-file line number."""

  line: int
  content: str


class DiffChunk(TypedDict):
  """A unit of diff content for one file."""

  file: str
  start_line: int
  unified_diff: NotRequired[str]
  lines: NotRequired[list[AddedLine]]


class Finding(TypedDict, total=False):
  """A single reported issue.

  Rule findings carry `file_path`, provider findings carry `file`.
  `normalize_finding` reconciles the two.
  """

  rule_id: str
  title: str
  severity: str
  file: str
  file_path: str
  start_line: int
  end_line: int
  rationale: str
  suggestion: str
  content: str


FINDING_FIELDS = (
  "rule_id",
  "title",
  "severity",
  "file_path",
  "start_line",
  "end_line",
  "rationale",
  "suggestion",
  "content",
)


def normalize_finding(finding: Mapping[str, Any]) -> Finding:
  """Return a copy of a finding keyed by `file_path` with sane line bounds."""
  out: dict[str, Any] = dict(finding)
  if "file_path" not in out:
    out["file_path"] = str(out.pop("file", "") or "")
  else:
    out.pop("file", None)

  start = _as_int(out.get("start_line"), 1)
  end = _as_int(out.get("end_line"), start)
  out["start_line"] = start
  out["end_line"] = max(start, end)

  for key in FINDING_FIELDS:
    out.setdefault(key, "")
  if not out["title"]:
    out["title"] = out["rule_id"]
  return out  # type: ignore[return-value]


def _as_int(value: Any, default: int) -> int:
  try:
    return int(value)
  except (TypeError, ValueError):
    return default
