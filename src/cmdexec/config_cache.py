# cmdexec/config_cache.py
"""
ConfigCache - read-through, lazily expiring cache of parsed config files.

Entries are immutable (config, loaded_at) snapshots that are replaced as a
whole, never mutated, so a reader can never observe a config paired with
another load's timestamp. There is no background refresh: a get() that finds
an absent or expired entry reloads synchronously.
"""

from __future__ import annotations

import logging
import os
import threading
import time
from collections.abc import Callable
from dataclasses import dataclass

from .command_config import CACHE_TTL_SECS, ExecConfig
from .load_config import load_config

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CacheEntry:
    config: ExecConfig
    loaded_at: float

    def is_fresh(self, now: float, ttl: float) -> bool:
        return now - self.loaded_at < ttl


class ConfigCache:
    """
    Memoizes load_config() per source path for `ttl` seconds.

    Safe to share between threads. The map grows with the number of distinct
    paths and is never evicted automatically.
    """

    def __init__(
        self,
        ttl: float = CACHE_TTL_SECS,
        *,
        loader: Callable[[str], ExecConfig] = load_config,
        clock: Callable[[], float] = time.monotonic,
    ):
        """
        Args:
            ttl: Maximum age in seconds before an entry is reloaded
            loader: Function turning a path into an ExecConfig
            clock: Monotonic time source (injectable for tests)
        """
        if ttl < 0:
            raise ValueError("ttl cannot be negative")
        self._ttl = ttl
        self._loader = loader
        self._clock = clock
        self._entries: dict[str, CacheEntry] = {}
        self._lock = threading.Lock()

    @property
    def ttl(self) -> float:
        return self._ttl

    def get(self, path: str | os.PathLike[str]) -> ExecConfig:
        """
        Return the config for `path`, loading it if absent or expired.

        Raises:
            ConfigLoadError: The file could not be read or parsed
            ConfigValidationError: The file parsed but has the wrong shape
        """
        key = os.fspath(path)
        with self._lock:
            entry = self._entries.get(key)
            now = self._clock()
            if entry is not None and entry.is_fresh(now, self._ttl):
                logger.debug(f"Config cache hit for '{key}' (age={now - entry.loaded_at:.1f}s)")
                return entry.config

            reason = "absent" if entry is None else "expired"
            logger.debug(f"Config cache {reason} for '{key}', loading")
            config = self._loader(key)
            self._entries[key] = CacheEntry(config=config, loaded_at=self._clock())
            return config

    def invalidate(self, path: str | os.PathLike[str] | None = None) -> None:
        """Drop one entry, or every entry when `path` is None."""
        with self._lock:
            if path is None:
                self._entries.clear()
            else:
                self._entries.pop(os.fspath(path), None)

    def __contains__(self, path: object) -> bool:
        if not isinstance(path, (str, os.PathLike)):
            return False
        return os.fspath(path) in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        return f"ConfigCache(ttl={self._ttl}s, entries={len(self._entries)})"
