"""
Key/value blob storage for the local backing store.
Works like a browser's localStorage: each key holds one JSON string.
"""
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Dict, Optional

from smartstudy.config import settings
from smartstudy.utils.logger import get_logger

logger = get_logger(__name__)


class KeyValueStorage(ABC):
    """Abstract string-per-key storage"""

    @abstractmethod
    def get_item(self, key: str) -> Optional[str]:
        """Stored value, or None if the key was never set"""
        pass

    @abstractmethod
    def set_item(self, key: str, value: str):
        pass

    @abstractmethod
    def remove_item(self, key: str):
        pass


class MemoryStorage(KeyValueStorage):
    """Process-lifetime storage, used for the in-memory store and tests"""

    def __init__(self, initial: Dict[str, str] = None):
        self._items: Dict[str, str] = dict(initial or {})

    def get_item(self, key: str) -> Optional[str]:
        return self._items.get(key)

    def set_item(self, key: str, value: str):
        self._items[key] = value

    def remove_item(self, key: str):
        self._items.pop(key, None)

    def keys(self):
        return list(self._items)


class JSONFileStorage(KeyValueStorage):
    """
    Persists each key as ``<storage_path>/<key>.json``.
    No locking: two processes doing read-modify-write on one key race.
    """

    def __init__(self, storage_path: Path = None):
        """
        Initialize the file storage.

        Args:
            storage_path: Directory for the key files. Uses settings.LOCAL_STORAGE_DIR if not provided.
        """
        self.storage_path = Path(storage_path or settings.LOCAL_STORAGE_DIR)
        self.storage_path.mkdir(parents=True, exist_ok=True)
        logger.info(f"JSONFileStorage initialized at: {self.storage_path}")

    def _get_path(self, key: str) -> Path:
        """Get the file path for a key"""
        return self.storage_path / f"{key}.json"

    def get_item(self, key: str) -> Optional[str]:
        path = self._get_path(key)
        if not path.exists():
            return None
        with open(path, 'r', encoding='utf-8') as f:
            return f.read()

    def set_item(self, key: str, value: str):
        with open(self._get_path(key), 'w', encoding='utf-8') as f:
            f.write(value)

    def remove_item(self, key: str):
        self._get_path(key).unlink(missing_ok=True)
