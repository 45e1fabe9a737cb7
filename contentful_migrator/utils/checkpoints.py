"""
Per-phase checkpoint files.

Each migration phase records its completed units of work in a flat JSON
object (natural key → remote identifier).  The whole map is rewritten after
every unit so an interrupted run loses at most the unit in flight, and a
restarted run skips every key already present.
"""

from __future__ import annotations

import json
import os
from typing import Any, Dict, Iterator, Optional

from .logs import log_message

PHASE_FILES: Dict[str, str] = {
    "assets": "asset_cache.json",
    "linked_entries": "linked_entries_cache.json",
    "blog_posts": "blog_posts_cache.json",
}


class CheckpointError(Exception):
    """Raised when the checkpoint files cannot be prepared at startup."""


class Checkpoint:
    """The in-memory map of one phase, bound to the file it is flushed to."""

    def __init__(self, phase: str, path: str, data: Optional[Dict[str, Any]] = None) -> None:
        self.phase = phase
        self.path = path
        self.data: Dict[str, Any] = data if data is not None else {}

    def __contains__(self, key: object) -> bool:
        return key in self.data

    def __iter__(self) -> Iterator[str]:
        return iter(self.data)

    def __len__(self) -> int:
        return len(self.data)

    def has(self, key: str) -> bool:
        return key in self.data

    def get(self, key: str, default: Any = None) -> Any:
        return self.data.get(key, default)

    def put(self, key: str, value: Any) -> None:
        self.data[key] = value

    def flush(self) -> None:
        """Write the entire map to disk before returning."""
        tmp_path = f"{self.path}.tmp"
        with open(tmp_path, "w", encoding="utf-8") as f:
            json.dump(self.data, f, indent=2, ensure_ascii=False)
        os.replace(tmp_path, self.path)

    def record(self, key: str, value: Any) -> None:
        """Store ``value`` under ``key`` and flush immediately."""
        self.put(key, value)
        self.flush()


class CheckpointStore:
    """
    Locates and loads the checkpoint file of each migration phase.

    :param cache_dir: Directory holding ``asset_cache.json``,
        ``linked_entries_cache.json`` and ``blog_posts_cache.json``.
    """

    def __init__(self, cache_dir: str = ".") -> None:
        self.cache_dir = cache_dir

    def path_for(self, phase: str) -> str:
        try:
            filename = PHASE_FILES[phase]
        except KeyError:
            raise ValueError(f"Unknown checkpoint phase: {phase!r}") from None
        return os.path.join(self.cache_dir, filename)

    def ensure_exists(self) -> None:
        """
        Create an empty checkpoint file for every phase that has none.

        :raises CheckpointError: if a file cannot be created.  Downstream
            phases assume a readable store, so this is fatal for the run.
        """
        for phase in PHASE_FILES:
            path = self.path_for(phase)
            if os.path.exists(path):
                log_message(f"Cache file {os.path.basename(path)} already exists", level="DEBUG")
                continue
            log_message(f"Cache file {os.path.basename(path)} does not exist, creating it...")
            try:
                os.makedirs(self.cache_dir or ".", exist_ok=True)
                Checkpoint(phase, path).flush()
            except OSError as e:
                raise CheckpointError(f"Could not create cache file {path}: {e}") from e

    def load(self, phase: str) -> Checkpoint:
        """
        Read the checkpoint of ``phase``.

        A missing, unreadable or malformed file yields an empty map; absence
        is normal on a first run.
        """
        path = self.path_for(phase)
        data: Dict[str, Any] = {}
        try:
            with open(path, "r", encoding="utf-8") as f:
                loaded = json.load(f)
            if isinstance(loaded, dict):
                data = loaded
                log_message(f"Loaded {phase} cache from {path} ({len(data)} entries)")
            else:
                log_message(f"Cache file {path} does not hold a JSON object. Starting with empty map.", level="WARNING")
        except FileNotFoundError:
            log_message(f"No existing {phase} cache found at {path}")
        except (OSError, json.JSONDecodeError) as e:
            log_message(f"Could not read {path}: {e}. Starting with empty map.", level="WARNING")
        return Checkpoint(phase, path, data)
