"""Rule definitions for deterministic review."""

from dataclasses import dataclass, field
from typing import Any, Iterable, Mapping


def _as_str_tuple(value: Any) -> tuple[str, ...]:
  if value is None:
    return ()
  if isinstance(value, str):
    return (value,)
  if isinstance(value, Iterable):
    return tuple(str(v) for v in value)
  return (str(value),)


@dataclass(frozen=True)
class Rule:
  """A single pattern check applied to added lines.

  `pattern` is an unanchored regular expression searched for in each
  line. `applies_to` holds globs; an empty tuple applies everywhere.

  Example:
    rule = Rule(id="NO_TODO", pattern="TODO", applies_to=("**/*.go",))
  """

  id: str
  pattern: str
  severity: str = "info"
  rationale: str = ""
  applies_to: tuple[str, ...] = field(default_factory=tuple)
  suggestion: str = ""
  enabled: bool = True

  def __post_init__(self) -> None:
    object.__setattr__(self, "id", str(self.id or ""))
    object.__setattr__(self, "pattern", str(self.pattern or ""))
    object.__setattr__(self, "severity", str(self.severity))
    object.__setattr__(self, "rationale", str(self.rationale))
    object.__setattr__(self, "suggestion", str(self.suggestion or ""))
    object.__setattr__(self, "applies_to", _as_str_tuple(self.applies_to))
    object.__setattr__(self, "enabled", bool(self.enabled))

    if not self.id or not self.pattern:
      raise ValueError("Rule must have non-empty id and pattern")

  @classmethod
  def from_dict(cls, data: Mapping[str, Any]) -> "Rule":
    """Build a rule from a configuration mapping."""
    if not isinstance(data, Mapping):
      raise ValueError(f"Rule definition must be a mapping, got {type(data).__name__}")
    return cls(
      id=data.get("id", ""),
      pattern=data.get("pattern", ""),
      severity=data.get("severity", "info"),
      rationale=data.get("rationale", ""),
      applies_to=data.get("applies_to") or (),
      suggestion=data.get("suggestion") or "",
      enabled=data.get("enabled", True),
    )
