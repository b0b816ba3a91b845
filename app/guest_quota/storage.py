"""
Key-value stores backing the guest usage tracker.

The tracker only needs ``read(key)`` and ``write(key, value)`` on text
values, which is the shape of browser local storage. ``JsonFileStore`` keeps
every key in one JSON file on disk; ``InMemoryStore`` is used in tests.
"""

import json
import logging
from pathlib import Path
from threading import Lock
from typing import Callable, Dict, Optional, Protocol

logger = logging.getLogger(__name__)


class KeyValueStore(Protocol):
    """Text key-value store capability."""

    def read(self, key: str) -> Optional[str]:
        ...

    def write(self, key: str, value: str) -> None:
        ...

    def delete(self, key: str) -> None:
        ...

    def prune(self, should_drop: Callable[[str, str], bool]) -> int:
        """Bulk delete; only the service's daily cleanup uses it."""
        ...


class InMemoryStore:
    """Dictionary-backed store."""

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._data: Dict[str, str] = dict(initial or {})

    def read(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def write(self, key: str, value: str) -> None:
        self._data[key] = value

    def delete(self, key: str) -> None:
        self._data.pop(key, None)

    def keys(self) -> list[str]:
        return list(self._data)

    def prune(self, should_drop: Callable[[str, str], bool]) -> int:
        dropped = [k for k, v in self._data.items() if should_drop(k, v)]
        for key in dropped:
            del self._data[key]
        return len(dropped)


class JsonFileStore:
    """
    Store that persists all keys in a single JSON object on disk.

    Reads tolerate a missing or corrupt file by returning nothing. Write
    errors propagate so the caller decides whether they matter.
    """

    def __init__(self, path: Path):
        self.path = path
        self._lock = Lock()

    def read(self, key: str) -> Optional[str]:
        with self._lock:
            value = self._load().get(key)
        return value if isinstance(value, str) else None

    def write(self, key: str, value: str) -> None:
        with self._lock:
            data = self._load()
            data[key] = value
            self._save(data)

    def delete(self, key: str) -> None:
        with self._lock:
            data = self._load()
            if data.pop(key, None) is not None:
                self._save(data)

    def keys(self) -> list[str]:
        with self._lock:
            return list(self._load())

    def prune(self, should_drop: Callable[[str, str], bool]) -> int:
        """Delete every key for which ``should_drop(key, value)`` holds, in one rewrite."""
        with self._lock:
            data = self._load()
            kept = {k: v for k, v in data.items() if not should_drop(k, v)}
            removed = len(data) - len(kept)
            if removed:
                self._save(kept)
            return removed

    def _load(self) -> Dict[str, str]:
        """Load the key map from file."""
        try:
            if self.path.exists():
                with open(self.path, 'r', encoding='utf-8') as f:
                    data = json.load(f)
                if isinstance(data, dict):
                    return data
                logger.warning(f"Ignoring non-object store file: {self.path}")
        except (OSError, json.JSONDecodeError) as e:
            logger.error(f"Error loading store {self.path}: {e}")
        return {}

    def _save(self, data: Dict[str, str]) -> None:
        """Save the key map to file."""
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.path, 'w', encoding='utf-8') as f:
            json.dump(data, f, ensure_ascii=False, indent=2)
