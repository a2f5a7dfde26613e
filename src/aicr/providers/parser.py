"""Shared response parsing utilities."""

import json
import logging
import re
from typing import Any

logger = logging.getLogger(__name__)

MAX_RESPONSE_LENGTH = 1_000_000  # 1MB limit for regex processing

_FENCED_BLOCK = re.compile(r"```(?:json)?\s*\n?(.*?)\n?```", re.DOTALL)
_FINDINGS_OBJECT = re.compile(r"\{.*\"findings\".*\}", re.DOTALL)


def _loads_object(text: str) -> dict[str, Any] | None:
  try:
    data = json.loads(text)
  except (json.JSONDecodeError, RecursionError):
    return None
  return data if isinstance(data, dict) else None


def extract_json(text: str) -> dict[str, Any] | None:
  """Extract a JSON object from LLM output, or None.

  Tries the whole text, then a fenced code block, then the first
  brace-delimited span mentioning "findings".
  """
  text = text.strip()

  # Try direct JSON parse first
  data = _loads_object(text)
  if data is not None:
    return data

  if len(text) > MAX_RESPONSE_LENGTH:
    logger.warning(
      "Response too large for extraction (%d bytes, max %d)", len(text), MAX_RESPONSE_LENGTH
    )
    return None

  # Try extracting from markdown code block
  fenced = _FENCED_BLOCK.search(text)
  if fenced:
    data = _loads_object(fenced.group(1).strip())
    if data is not None:
      return data

  # Try finding a findings object in surrounding text
  inline = _FINDINGS_OBJECT.search(text)
  if inline:
    data = _loads_object(inline.group(0))
    if data is not None:
      return data

  return None


def extract_findings_from_text(content: Any) -> list[Any]:
  """Parse model output into its `findings` array.

  Never raises: unparsable text, or JSON without a `findings` list,
  gives an empty list.
  """
  if not isinstance(content, str) or not content.strip():
    return []

  data = extract_json(content)
  if data is None:
    logger.debug("No JSON object found in response: %s...", content[:200])
    return []

  findings = data.get("findings", [])
  return list(findings) if isinstance(findings, list) else []
