"""
Durable client storage.

A small key/value store standing in for the browser profile's persistent
storage. Values are strings; keys are written at most once by the pipeline.
"""

import json
import logging
import random
import string
from pathlib import Path
from typing import Callable, Dict, Optional

logger = logging.getLogger(__name__)

_BASE36 = string.digits + string.ascii_lowercase


class MemoryStorage:
    """Storage that lives as long as the object."""

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._items: Dict[str, str] = dict(initial or {})

    def get_item(self, key: str) -> Optional[str]:
        return self._items.get(key)

    def set_item(self, key: str, value: str) -> None:
        self._items[key] = value


class JsonFileStorage:
    """Storage persisted as a single JSON object file."""

    def __init__(self, path: Path):
        """Initialize file storage.

        Args:
            path: JSON file holding the stored items
        """
        self.path = Path(path)

    def _load(self) -> Dict[str, str]:
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (FileNotFoundError, json.JSONDecodeError):
            return {}
        return data if isinstance(data, dict) else {}

    def get_item(self, key: str) -> Optional[str]:
        value = self._load().get(key)
        return value if isinstance(value, str) else None

    def set_item(self, key: str, value: str) -> None:
        data = self._load()
        data[key] = value
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(data, indent=2, ensure_ascii=False), encoding="utf-8")


def random_suffix(length: int = 9) -> str:
    """Random lowercase base36 string."""
    return "".join(random.choice(_BASE36) for _ in range(length))


def get_or_create_anonymous_id(storage, key: str, clock: Callable[[], int]) -> str:
    """Read the durable anonymous id, creating it on first use.

    The id is ``anon-<ms>-<random>`` so ids sort by creation time.

    Args:
        storage: Object with ``get_item`` / ``set_item``
        key: Storage key holding the id
        clock: Returns milliseconds since epoch

    Returns:
        The stored anonymous id
    """
    existing = storage.get_item(key)
    if existing:
        return existing

    anonymous_id = f"anon-{clock()}-{random_suffix()}"
    storage.set_item(key, anonymous_id)
    logger.debug(f"Created anonymous id {anonymous_id}")
    return anonymous_id
