"""Flat-file cache for provider payloads, one file per query."""
import base64
import logging
import os
import re
import shutil
import sys
import tempfile
import time
from pathlib import Path
from typing import Optional, Union

from weather_provider import CacheIOError

APP_NAME = "weather-term"
WEATHER_TTL = 900  # 15 minutes
AIR_QUALITY_TTL = 1800  # 30 minutes
CLEARED_MESSAGE = "Cache cleared."

PathLike = Union[str, Path]


def default_cache_root() -> Path:
    """
    Platform cache directory for this tool (not created here).

    Entries always live in a dedicated weather-term subdirectory, also under
    a WEATHER_CACHE_DIR override, so clearing never touches foreign files.
    """
    override = os.environ.get("WEATHER_CACHE_DIR")
    if override:
        return app_cache_dir(override)

    xdg = os.environ.get("XDG_CACHE_HOME")
    if xdg:
        base = Path(xdg)
    elif sys.platform == "darwin":
        base = Path.home() / "Library" / "Caches"
    elif sys.platform.startswith("win") and os.environ.get("LOCALAPPDATA"):
        base = Path(os.environ["LOCALAPPDATA"])
    else:
        base = Path.home() / ".cache"
    return base / APP_NAME


def app_cache_dir(root: Optional[PathLike] = None) -> Path:
    """This tool's own directory under a cache root."""
    if root is None:
        return default_cache_root()
    return Path(root).expanduser() / APP_NAME


def resolve_cache_dir(subdir: str = "", root: Optional[PathLike] = None) -> Path:
    """
    Return a writable cache directory, creating it if absent.

    Raises:
        CacheIOError: If the directory cannot be created
    """
    path = app_cache_dir(root)
    if subdir:
        path = path / subdir
    try:
        path.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        logging.error(f"Cannot create cache directory {path}: {e}")
        raise CacheIOError(path, e) from e
    logging.debug(f"Cache directory: {path}")
    return path


def cache_key(query: str, lang: str = "", kind: str = "") -> str:
    """
    Deterministic, filesystem-safe filename for a query.

    An empty query means IP auto-detection and maps to "auto" so repeated
    runs from one host share a slot per language.
    """
    normalized = re.sub(r"\s+", " ", (query or "").strip().lower()) or "auto"
    encoded = base64.urlsafe_b64encode(normalized.encode("utf-8")).decode("ascii").rstrip("=")
    name = encoded
    if lang:
        name += f"_{lang.strip().lower()}"
    if kind:
        name += f"_{kind}"
    return f"{name}.json"


def is_valid(path: PathLike, ttl: float, now: Optional[float] = None) -> bool:
    """True iff the entry exists and was modified less than ttl seconds ago."""
    try:
        mtime = Path(path).stat().st_mtime
    except OSError:
        return False
    age = (time.time() if now is None else now) - mtime
    logging.debug(f"Cache entry {path}: age {age:.1f}s, TTL {ttl}s")
    return age < ttl


def read(path: PathLike) -> bytes:
    return Path(path).read_bytes()


def write(path: PathLike, payload: bytes) -> None:
    """
    Atomic write: a temp file in the same directory is renamed over the entry.

    Raises:
        CacheIOError: If the entry cannot be written
    """
    path = Path(path)
    tmp_name = None
    try:
        fd, tmp_name = tempfile.mkstemp(prefix=".tmp-", dir=path.parent)
        with os.fdopen(fd, "wb") as f:
            f.write(payload)
        os.replace(tmp_name, path)
        logging.debug(f"Wrote {len(payload)} bytes to cache entry {path}")
    except OSError as e:
        logging.error(f"Cache write failed for {path}: {e}")
        if tmp_name:
            Path(tmp_name).unlink(missing_ok=True)
        raise CacheIOError(path, e) from e


def invalidate(path: PathLike) -> None:
    try:
        Path(path).unlink(missing_ok=True)
    except OSError as e:
        raise CacheIOError(path, e) from e


def clear(root: Optional[PathLike] = None) -> str:
    """Remove every cached entry. Succeeds whether or not the cache exists."""
    root = app_cache_dir(root)
    if root.exists():
        logging.debug(f"Removing cache directory {root}")
        shutil.rmtree(root, ignore_errors=True)
    else:
        logging.debug(f"Cache directory {root} does not exist, nothing to clear")
    return CLEARED_MESSAGE
