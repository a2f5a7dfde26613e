"""Path matching for the `*`, `**` and `?` glob dialect."""

import re
from functools import lru_cache
from typing import Iterable

# Longest token first so `**` is not read as two `*`
_TOKENS = re.compile(r"(\*\*|\*|\?)")

_TRANSLATIONS = {
  "**": ".*",
  "*": "[^/]*",
  "?": ".",
}


@lru_cache(maxsize=512)
def glob_to_regex(pattern: str) -> re.Pattern[str]:
  """Translate a glob into an anchored regular expression.

  `**` matches across separators, `*` stays within one path segment
  and `?` matches exactly one character. Everything else is literal.
  """
  pieces = _TOKENS.split(pattern.replace("\\", "/"))
  translated = "".join(_TRANSLATIONS.get(piece) or re.escape(piece) for piece in pieces)
  return re.compile(f"^{translated}$", re.DOTALL)


def glob_match(pattern: str, path: str) -> bool:
  """Return True if the whole of `path` matches `pattern`."""
  return glob_to_regex(pattern).fullmatch(path.replace("\\", "/")) is not None


def matches_any(path: str, globs: Iterable[str]) -> bool:
  """Match-any-of; an empty collection matches every path."""
  globs = tuple(globs)
  if not globs:
    return True
  return any(glob_match(g, path) for g in globs)
