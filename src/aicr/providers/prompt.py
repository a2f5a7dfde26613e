"""Shared prompt construction for providers."""

from typing import Any, Mapping, Sequence

from aicr.config.settings import PolicyConfig

SYSTEM_PROMPT = (
  "You are a strict assistant that outputs ONLY valid JSON following the requested schema."
)

FINDING_SCHEMA = "rule_id, title, severity, file, start_line, end_line, rationale, suggestion, content"

_PREAMBLE = [
  "You are an AI Code Review bot. Analyze the following UNIFIED DIFFS per file, "
  "considering both added/modified lines (+) and deleted lines (-).",
  "Focus your reasoning primarily on the resulting code state, but consider deletions "
  "for potential regressions, removed validations, or security checks.",
  'Return a JSON object with key "findings" which is an array of objects with keys:',
  FINDING_SCHEMA,
  'If no issues, return {"findings":[]}. Do not include commentary.',
]


def build_prompt(
  chunks: Sequence[Mapping[str, Any]],
  policy: PolicyConfig | None = None,
) -> str:
  """Build the user prompt listing every chunk to review."""
  lines = list(_PREAMBLE)
  if policy is not None:
    lines.extend(policy_constraints(policy))
  lines.append("")

  for chunk in chunks:
    file_path = str(chunk.get("file") or chunk.get("file_path") or "")
    start = _as_int(chunk.get("start_line"), 1)
    lines.append(f"FILE: {file_path} (~{start})")
    lines.append("---")

    diff = chunk.get("unified_diff")
    if isinstance(diff, str) and diff:
      lines.append(diff)
    else:
      # Legacy chunks carry only the added lines
      entries = chunk.get("lines") or chunk.get("additions") or []
      for entry in entries:
        if isinstance(entry, Mapping):
          lines.append(f"+ {_as_int(entry.get('line'), 0)}: {entry.get('content', '')}")
    lines.append("")

  return "\n".join(lines)


def policy_constraints(policy: PolicyConfig) -> list[str]:
  """Instruction lines derived from the review policy."""
  lines = [
    "Constraints:",
    f"- Report at most {policy.max_findings_per_file} findings per file.",
    f"- Only report findings with severity {policy.min_severity_to_comment.lower()} or higher "
    "(info < minor < major < critical).",
  ]
  if policy.consolidate_similar_findings:
    lines.append(
      "- Consolidate similar findings in the same file into a single finding "
      "spanning the affected lines."
    )
  if policy.redact_secrets:
    lines.append(
      "- Never reproduce secrets (API keys, passwords, tokens) verbatim; "
      "replace them with *** in content and suggestion."
    )
  return lines


def merge_additional_prompts(
  system: str,
  user: str,
  options: Mapping[str, Any] | None,
) -> tuple[str, str]:
  """Append configured prompt text to the base prompts.

  `options["prompts"]` may carry `system_append`, `user_append` and
  `extra`, each a string or a list of strings. Blank values are dropped.
  """
  cfg = (options or {}).get("prompts") or {}
  if not isinstance(cfg, Mapping):
    cfg = {}

  system_append = _normalize(cfg.get("system_append"))
  user_append = _normalize(cfg.get("user_append"))
  extra = _normalize(cfg.get("extra"))

  if system_append:
    system = system.rstrip() + "\n\n" + "\n\n".join(system_append)

  user_parts = [user.rstrip()]
  if user_append:
    user_parts.append("\n\n".join(user_append))
  if extra:
    user_parts.append("\n\n".join(extra))
  user = "\n\n".join(p for p in user_parts if p.strip())

  return system, user


def _normalize(value: Any) -> list[str]:
  if value is None:
    return []
  if isinstance(value, str):
    return [value.strip()] if value.strip() else []
  if isinstance(value, (list, tuple)):
    return [v.strip() for v in value if isinstance(v, str) and v.strip()]
  return []


def _as_int(value: Any, default: int) -> int:
  try:
    return int(value)
  except (TypeError, ValueError):
    return default
