"""File-backed response cache for provider HTTP calls."""

import hashlib
import json
import logging
import os
import tempfile
import time
from pathlib import Path
from typing import Any, Callable, Protocol

from aicr.config.settings import DEFAULT_CACHE_MAX_SIZE, DEFAULT_CACHE_TTL, CacheSettings

logger = logging.getLogger(__name__)

_SUFFIX = ".cache"


def generate_key(method: str, url: str, payload: Any = None) -> str:
  """Deterministic key for a request.

  The payload is serialized with sorted keys, so logically equal
  requests hash the same regardless of field insertion order.
  """
  normalized = {
    "method": method.upper(),
    "url": url,
    "params": payload if payload is not None else {},
  }
  encoded = json.dumps(normalized, sort_keys=True, separators=(",", ":"), ensure_ascii=False)
  return "api_" + hashlib.sha256(encoded.encode("utf-8")).hexdigest()


class Cache(Protocol):
  """What providers need from a cache."""

  def get(self, key: str) -> Any | None:
    ...

  def set(self, key: str, value: Any, ttl: int | None = None) -> None:
    ...


class NullCache:
  """Pass-through cache used when caching is not configured."""

  def get(self, key: str) -> Any | None:
    return None

  def set(self, key: str, value: Any, ttl: int | None = None) -> None:
    return None

  def has(self, key: str) -> bool:
    return False

  def delete(self, key: str) -> None:
    return None

  def remember(self, key: str, callback: Callable[[], Any], ttl: int | None = None) -> Any:
    return callback()


class ResponseCache:
  """JSON-file cache with per-entry TTL.

  Each entry lives in its own file named after a hash of the key.
  Expired entries are removed when read. Writes go through a temporary
  file and `os.replace`, so concurrent runs never see a partial entry.
  """

  def __init__(
    self,
    directory: str | Path,
    default_ttl: int = DEFAULT_CACHE_TTL,
    max_size: int = DEFAULT_CACHE_MAX_SIZE,
  ):
    self.directory = Path(directory)
    self.default_ttl = default_ttl
    self.max_size = max_size
    self.directory.mkdir(parents=True, exist_ok=True)

  generate_key = staticmethod(generate_key)

  def get(self, key: str) -> Any | None:
    """Cached value for `key`, or None if absent or expired."""
    path = self._path_for(key)
    entry = self._read(path)
    if entry is None:
      return None
    if entry["expires"] <= time.time():
      self._unlink(path)
      return None
    return entry["value"]

  def set(self, key: str, value: Any, ttl: int | None = None) -> None:
    """Store a JSON-serializable value."""
    now = time.time()
    entry = {
      "key": key,
      "value": value,
      "expires": now + (self.default_ttl if ttl is None else ttl),
      "created": now,
    }
    encoded = json.dumps(entry)
    self._write(self._path_for(key), encoded)
    self._enforce_max_size()

  def delete(self, key: str) -> None:
    self._unlink(self._path_for(key))

  def has(self, key: str) -> bool:
    return self.get(key) is not None

  def remember(self, key: str, callback: Callable[[], Any], ttl: int | None = None) -> Any:
    """Return the cached value, or compute, store and return it."""
    cached = self.get(key)
    if cached is not None:
      return cached
    value = callback()
    self.set(key, value, ttl)
    return value

  def clear(self) -> None:
    for path in self._entries():
      self._unlink(path)

  def clear_expired(self) -> None:
    now = time.time()
    for path in self._entries():
      entry = self._read(path)
      if entry is not None and entry["expires"] <= now:
        self._unlink(path)

  def stats(self) -> dict[str, int]:
    """Entry count, total size in bytes and number of expired entries."""
    entries = size = expired = 0
    now = time.time()
    for path in self._entries():
      size += _file_size(path)
      entry = self._read(path)
      if entry is not None:
        entries += 1
        if entry["expires"] <= now:
          expired += 1
    return {"entries": entries, "size": size, "expired": expired}

  def _path_for(self, key: str) -> Path:
    return self.directory / (hashlib.sha256(key.encode("utf-8")).hexdigest() + _SUFFIX)

  def _entries(self) -> list[Path]:
    if not self.directory.is_dir():
      return []
    return sorted(self.directory.glob("*" + _SUFFIX))

  def _read(self, path: Path) -> dict[str, Any] | None:
    try:
      raw = path.read_text(encoding="utf-8")
    except FileNotFoundError:
      return None
    except OSError as e:
      logger.debug("Cannot read cache entry %s: %s", path, e)
      return None

    try:
      entry = json.loads(raw)
    except json.JSONDecodeError:
      entry = None
    if not _is_entry(entry):
      logger.debug("Removing corrupt cache entry %s", path)
      self._unlink(path)
      return None
    return entry

  def _write(self, path: Path, encoded: str) -> None:
    fd, tmp_name = tempfile.mkstemp(dir=self.directory, prefix=path.name, suffix=".tmp")
    try:
      with os.fdopen(fd, "w", encoding="utf-8") as f:
        f.write(encoded)
      os.replace(tmp_name, path)
    except OSError:
      self._unlink(Path(tmp_name))
      raise

  def _enforce_max_size(self) -> None:
    paths = self._entries()
    total = sum(_file_size(p) for p in paths)
    if total <= self.max_size:
      return

    dated = []
    for path in paths:
      entry = self._read(path)
      if entry is not None:
        created = entry.get("created")
        dated.append((created if isinstance(created, (int, float)) else 0, path))
    dated.sort(key=lambda item: item[0])

    for _, path in dated:
      if total <= self.max_size:
        break
      total -= _file_size(path)
      self._unlink(path)

  @staticmethod
  def _unlink(path: Path) -> None:
    try:
      path.unlink()
    except FileNotFoundError:
      pass


def _is_entry(entry: Any) -> bool:
  if not isinstance(entry, dict) or not {"key", "value", "expires"} <= entry.keys():
    return False
  expires = entry["expires"]
  return isinstance(expires, (int, float)) and not isinstance(expires, bool)


def _file_size(path: Path) -> int:
  try:
    return path.stat().st_size
  except OSError:
    return 0


def build_cache(settings: CacheSettings | None) -> ResponseCache | NullCache:
  """Build the cache a provider should use.

  Caching is a no-op unless it is enabled and a directory is configured.
  """
  if settings is None or not settings.enabled or not settings.directory:
    return NullCache()
  return ResponseCache(settings.directory, settings.default_ttl, settings.max_size)
