"""Rule engine that evaluates pattern rules against added lines."""

import glob as globmod
import json
import logging
import re
from pathlib import Path
from typing import Any, Iterable, Mapping, Sequence

import yaml

from aicr.config.settings import PolicyConfig
from aicr.errors import ConfigurationError
from aicr.models import AddedLine, DiffChunk, Finding
from aicr.rules.base import Rule
from aicr.rules.glob import matches_any

logger = logging.getLogger(__name__)

# Pattern to parse diff hunk headers: @@ -start,count +start,count @@
_HUNK_HEADER = re.compile(r"^@@ -\d+(?:,\d+)? \+(\d+)(?:,\d+)? @@")


def added_lines_from_diff(diff_content: str, start_line: int = 1) -> list[AddedLine]:
  """Collect added lines from a unified diff with new-file line numbers.

  Hunk headers reset the counter; without one, numbering starts at
  `start_line`. Removed lines do not advance the counter. `---`/`+++`
  are file headers only before the first hunk; inside a hunk they are
  a removed or added line whose content starts with `--` or `++`.
  """
  added: list[AddedLine] = []
  current = start_line
  in_hunk = False

  for line in diff_content.split("\n"):
    hunk_match = _HUNK_HEADER.match(line)
    if hunk_match:
      current = int(hunk_match.group(1))
      in_hunk = True
      continue
    if not in_hunk and (line.startswith("+++") or line.startswith("---")):
      continue
    if line.startswith("\\") or line.startswith("-"):
      continue
    if line.startswith("+"):
      added.append({"line": current, "content": line[1:]})
    current += 1

  return added


def added_lines_from_chunk(chunk: Mapping[str, Any]) -> list[AddedLine]:
  """Added lines of a chunk, from its legacy list or its unified diff."""
  entries = chunk.get("lines") or chunk.get("additions")
  if isinstance(entries, list) and entries:
    return [
      {"line": int(e.get("line", 0)), "content": str(e.get("content", ""))}
      for e in entries
      if isinstance(e, Mapping)
    ]
  diff = chunk.get("unified_diff")
  if isinstance(diff, str) and diff:
    return added_lines_from_diff(diff, int(chunk.get("start_line") or 1))
  return []


class RuleEngine:
  """Holds enabled rules and evaluates them per file.

  The engine has no mutable state after loading, so `evaluate` gives
  the same findings, in the same order, for the same input.

  Example:
    engine = RuleEngine([Rule(id="NO_TODO", pattern="TODO")])
    findings = engine.evaluate("main.go", [{"line": 3, "content": "// TODO"}])
  """

  def __init__(self, rules: Iterable[Rule] | None = None):
    self._rules: list[Rule] = []
    for rule in rules or ():
      self.add_rule(rule)

  @property
  def name(self) -> str:
    return "rules"

  @property
  def rules(self) -> tuple[Rule, ...]:
    return tuple(self._rules)

  def add_rule(self, rule: Rule) -> None:
    """Store a rule. Disabled rules are dropped."""
    if rule.enabled:
      self._rules.append(rule)

  def evaluate(self, file_path: str, added_lines: Sequence[Mapping[str, Any]]) -> list[Finding]:
    """Run every applicable rule over the added lines of one file.

    Args:
      file_path: Path of the changed file, matched against `applies_to`.
      added_lines: Entries with `line` and `content` keys.

    Returns:
      One finding per (rule, matching line), in rule then line order.
    """
    findings: list[Finding] = []

    for rule in self._rules:
      if not matches_any(file_path, rule.applies_to):
        continue
      try:
        regex = re.compile(rule.pattern)
      except re.error as e:
        logger.warning("Skipping rule %s: invalid pattern %r (%s)", rule.id, rule.pattern, e)
        continue

      for entry in added_lines:
        line_no = int(entry["line"])
        content = str(entry["content"])
        if regex.search(content):
          findings.append({
            "rule_id": rule.id,
            "title": rule.id,
            "severity": rule.severity,
            "file_path": file_path,
            "start_line": line_no,
            "end_line": line_no,
            "rationale": rule.rationale,
            "suggestion": rule.suggestion,
            "content": content,
          })

    return findings

  def review_chunks(
    self,
    chunks: Sequence[DiffChunk],
    policy: PolicyConfig | None = None,
  ) -> list[Finding]:
    """Evaluate chunks the same way an LLM provider would review them.

    `policy` is accepted for interface parity and not applied here.
    """
    findings: list[Finding] = []
    for chunk in chunks:
      file_path = str(chunk.get("file", ""))
      findings.extend(self.evaluate(file_path, added_lines_from_chunk(chunk)))
    return findings

  @classmethod
  def from_config(cls, rules_config: Mapping[str, Any] | None) -> "RuleEngine":
    """Build an engine from `inline` definitions and `include` rule files.

    Invalid inline rules are configuration errors. Included files that
    cannot be read or parsed, and invalid rules inside them, are skipped.
    """
    engine = cls()
    rules_config = rules_config or {}

    for data in rules_config.get("inline") or []:
      try:
        engine.add_rule(Rule.from_dict(data))
      except ValueError as e:
        raise ConfigurationError(
          f"Invalid inline rule {data!r}: {e}",
          context={"rule": str(data)[:200]},
        ) from e

    for pattern in rules_config.get("include") or []:
      if not isinstance(pattern, str) or not pattern:
        continue
      for file_name in sorted(globmod.glob(pattern, recursive=True)):
        for data in _load_rules_file(Path(file_name)):
          try:
            engine.add_rule(Rule.from_dict(data))
          except ValueError as e:
            logger.warning("Skipping invalid rule in %s: %s", file_name, e)

    return engine


def _load_rules_file(path: Path) -> list[Any]:
  """Read a YAML or JSON rules file into a list of rule mappings."""
  if not path.is_file():
    return []
  try:
    raw = path.read_text(encoding="utf-8")
  except (OSError, UnicodeDecodeError) as e:
    logger.warning("Skipping unreadable rules file %s: %s", path, e)
    return []

  ext = path.suffix.lower()
  if ext in (".yml", ".yaml"):
    data = _parse_yaml(raw)
  elif ext == ".json":
    data = _parse_json(raw)
  else:
    data = _parse_yaml(raw)
    if data is None:
      data = _parse_json(raw)

  if data is None:
    logger.warning("Skipping rules file %s: not valid YAML or JSON", path)
    return []

  if isinstance(data, dict):
    if isinstance(data.get("rules"), list):
      return data["rules"]
    if isinstance(data.get("inline"), list):
      return data["inline"]
    return []
  return data if isinstance(data, list) else []


def _parse_yaml(raw: str) -> Any:
  for candidate in (raw, raw.replace("\\", "\\\\")):
    try:
      data = yaml.safe_load(candidate)
    except yaml.YAMLError:
      continue
    if isinstance(data, (dict, list)):
      return data
  return None


def _parse_json(raw: str) -> Any:
  try:
    data = json.loads(raw)
  except json.JSONDecodeError:
    return None
  return data if isinstance(data, (dict, list)) else None
