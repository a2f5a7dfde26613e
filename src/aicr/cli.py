"""CLI interface using Typer."""

import json
import logging
import os
import sys
import traceback
from pathlib import Path
from typing import Any, Optional

import typer
from rich.console import Console

from aicr import __version__
from aicr.errors import ReviewError, log_error
from aicr.log import setup_logging
from aicr.models import EngineMode, Finding, Severity, severity_rank
from aicr.review import run_review

app = typer.Typer(
  name="aicr",
  help="AI-assisted code review over pre-chunked diffs",
  no_args_is_help=False,
)

console = Console()
err_console = Console(stderr=True)

logger = logging.getLogger("aicr.cli")


def _is_debug() -> bool:
  return os.environ.get("AICR_DEBUG", "").lower() in ("1", "true", "yes")


def version_callback(value: bool) -> None:
  if value:
    console.print(f"aicr {__version__}")
    raise typer.Exit()


@app.command()
def main(
  chunks_file: str = typer.Argument(
    "-",
    help="JSON file with diff chunks (a list, or an object with a 'chunks' key); '-' for stdin",
  ),
  engine: str = typer.Option(
    None, "--engine", "-e", help="Review engine: rules (default), llm, both"
  ),
  provider: str = typer.Option(
    None, "--provider", "-p", help="Configured provider name (openai, anthropic, gemini, ollama, mock)"
  ),
  enforce_policy: Optional[bool] = typer.Option(
    None, "--enforce-policy/--no-enforce-policy", help="Filter findings by the configured policy"
  ),
  exit_code: bool = typer.Option(
    False, "--exit-code", help="Exit 1 if any high or critical finding is reported"
  ),
  config: Path = typer.Option(None, "--config", "-c", help="Config file path"),
  debug: bool = typer.Option(False, "--debug", "-d", help="Verbose logging and tracebacks"),
  version: bool = typer.Option(None, "--version", "-v", callback=version_callback, is_eager=True),
) -> None:
  """Review diff chunks with the rule engine and/or an LLM provider.

  Prints the merged findings as JSON.
  """
  show_traceback = debug or _is_debug()
  setup_logging(debug=show_traceback, console=err_console)

  engine_mode = _parse_engine(engine, provider)

  try:
    chunks = _read_chunks(chunks_file)
    findings = run_review(
      chunks,
      engine=engine_mode,
      provider=provider,
      config_path=config,
      enforce_policy=enforce_policy,
    )
  except ReviewError as e:
    log_error(e, logger)
    err_console.print(f"[red]Error:[/red] {e.public_message}")
    if show_traceback:
      err_console.print(traceback.format_exc())
    raise typer.Exit(1) from None
  except (OSError, ValueError) as e:
    err_console.print(f"[red]Error:[/red] {e}")
    if show_traceback:
      err_console.print(traceback.format_exc())
    raise typer.Exit(1) from None

  console.print_json(json.dumps(findings))

  if exit_code and _has_severe_findings(findings):
    raise typer.Exit(1)


def _parse_engine(engine: str | None, provider: str | None) -> EngineMode | None:
  """Parse --engine; --provider alone implies the LLM engine."""
  if engine is None:
    return EngineMode.LLM if provider else None
  try:
    return EngineMode(engine.strip().lower())
  except ValueError:
    valid = ", ".join(m.value for m in EngineMode)
    err_console.print(f"[red]Error:[/red] Invalid engine '{engine}'. Choose one of: {valid}")
    raise typer.Exit(1) from None


def _read_chunks(source: str) -> list[dict[str, Any]]:
  """Load chunks from a JSON file or stdin."""
  raw = sys.stdin.read() if source == "-" else Path(source).read_text(encoding="utf-8")
  data = json.loads(raw) if raw.strip() else []
  if isinstance(data, dict):
    data = data.get("chunks", [])
  if not isinstance(data, list):
    raise ValueError("Chunks input must be a JSON list or an object with a 'chunks' list")
  return [c for c in data if isinstance(c, dict)]


def _has_severe_findings(findings: list[Finding]) -> bool:
  threshold = severity_rank(Severity.HIGH.value)
  return any(severity_rank(f.get("severity", "")) >= threshold for f in findings)


if __name__ == "__main__":
  app()
