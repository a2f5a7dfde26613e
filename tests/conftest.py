"""Pytest fixtures."""

import json
from typing import Any, Callable

import httpx
import pytest
from aicr.models import DiffChunk


@pytest.fixture
def unified_chunk() -> DiffChunk:
  return {
    "file": "src/app.py",
    "start_line": 10,
    "unified_diff": """@@ -10,3 +10,4 @@
 def handler():
-    return None
+    # TODO remove debug
+    print("debug")
     return 42
""",
  }


@pytest.fixture
def legacy_chunk() -> DiffChunk:
  return {
    "file": "a/b.go",
    "start_line": 42,
    "lines": [
      {"line": 42, "content": "// TODO fix"},
      {"line": 43, "content": "return nil"},
    ],
  }


@pytest.fixture
def findings_body() -> str:
  return json.dumps({
    "findings": [
      {
        "rule_id": "AI.SEC.1",
        "title": "Debug output",
        "severity": "minor",
        "file": "src/app.py",
        "start_line": 12,
        "end_line": 12,
        "rationale": "Leftover print",
        "suggestion": "Use logging",
        "content": 'print("debug")',
      }
    ]
  })


@pytest.fixture
def recording_client() -> Callable[..., tuple[httpx.Client, list[httpx.Request]]]:
  """Build an httpx client that answers every request with `body`."""

  def _make(body: Any, status_code: int = 200) -> tuple[httpx.Client, list[httpx.Request]]:
    requests: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
      requests.append(request)
      if isinstance(body, (dict, list)):
        return httpx.Response(status_code, json=body)
      return httpx.Response(status_code, text=body)

    return httpx.Client(transport=httpx.MockTransport(handler)), requests

  return _make
