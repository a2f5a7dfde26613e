"""Deterministic pattern-rule review engine."""

from aicr.rules.base import Rule
from aicr.rules.engine import RuleEngine, added_lines_from_chunk, added_lines_from_diff
from aicr.rules.glob import glob_match, matches_any

__all__ = [
  "Rule",
  "RuleEngine",
  "added_lines_from_chunk",
  "added_lines_from_diff",
  "glob_match",
  "matches_any",
]
