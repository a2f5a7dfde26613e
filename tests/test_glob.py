"""Tests for glob path matching."""

import pytest
from aicr.rules.glob import glob_match, glob_to_regex, matches_any


class TestGlobMatch:
  @pytest.mark.parametrize(
    ("pattern", "path"),
    [
      ("**/*.go", "a/b.go"),
      ("**/*.go", "a/b/c/d.go"),
      ("src/*.py", "src/app.py"),
      ("*.md", "README.md"),
      ("src/?.py", "src/a.py"),
      ("docs/**", "docs/x/y/z.txt"),
      ("src/app.py", "src/app.py"),
    ],
  )
  def test_matches(self, pattern: str, path: str) -> None:
    assert glob_match(pattern, path)

  @pytest.mark.parametrize(
    ("pattern", "path"),
    [
      ("**/*.go", "a/b.txt"),
      ("src/*.py", "src/pkg/app.py"),
      ("*.md", "docs/README.md"),
      ("src/?.py", "src/ab.py"),
      ("src/app.py", "src/app.pyc"),
      ("app.py", "src/app.py"),
    ],
  )
  def test_does_not_match(self, pattern: str, path: str) -> None:
    assert not glob_match(pattern, path)

  def test_single_star_never_crosses_separator(self) -> None:
    assert not glob_match("a/*", "a/b/c")
    assert glob_match("a/**", "a/b/c")

  def test_double_star_requires_separator_before_name(self) -> None:
    # "**/" consumes a separator, so a top-level file does not match
    assert not glob_match("**/*.go", "b.go")

  def test_empty_pattern_matches_only_empty_path(self) -> None:
    assert glob_match("", "")
    assert not glob_match("", "a")

  def test_backslashes_are_normalized(self) -> None:
    assert glob_match("src\\*.py", "src/app.py")
    assert glob_match("src/*.py", "src\\app.py")

  def test_regex_metacharacters_are_literal(self) -> None:
    assert glob_match("a+b(1).py", "a+b(1).py")
    assert not glob_match("a.py", "abpy")
    assert glob_match("[x].txt", "[x].txt")
    assert not glob_match("[x].txt", "x.txt")

  @pytest.mark.parametrize(
    ("pattern", "path"),
    [
      ("__GLOB__.py", "abc.py"),
      ("__GLOBSTAR__/x.py", "a/b/x.py"),
      ("__QMARK__.py", "a.py"),
    ],
  )
  def test_placeholder_like_text_is_literal(self, pattern: str, path: str) -> None:
    assert not glob_match(pattern, path)
    assert glob_match(pattern, pattern)

  def test_compiled_pattern_is_anchored(self) -> None:
    regex = glob_to_regex("*.py")
    assert regex.pattern.startswith("^")
    assert regex.pattern.endswith("$")


class TestMatchesAny:
  def test_empty_globs_match_everything(self) -> None:
    assert matches_any("any/path.txt", [])

  def test_any_of_semantics(self) -> None:
    assert matches_any("web/app.js", ["**/*.py", "**/*.js"])
    assert not matches_any("web/app.css", ["**/*.py", "**/*.js"])
