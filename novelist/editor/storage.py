"""Key-value persistence with expiry for client-side editor state."""
import json
import logging
import time
from pathlib import Path
from typing import Callable, Dict, Optional, Protocol, Tuple, Union

from config import STORE_PATH

logger = logging.getLogger(__name__)

SECONDS_PER_DAY = 24 * 60 * 60

# Store keys
TITLE_KEY = "storyTitle"
PROTAGONIST_KEY = "storyProtagonist"
OUTLINE_KEY = "storyOutline"
ACCESS_GRANTED_KEY = "accessGranted"
HELP_SHOWN_KEY = "helpShown"


class KeyValueStore(Protocol):
    """Opaque string store. Last write wins per key."""

    def get(self, key: str) -> Optional[str]:
        ...

    def set(self, key: str, value: str, ttl_days: Optional[float] = None) -> None:
        ...

    def delete(self, key: str) -> None:
        ...


class MemoryStore:
    """In-process store; entries with an expiry read as missing once it passes."""

    def __init__(self, clock: Callable[[], float] = time.time):
        self._clock = clock
        self._entries: Dict[str, Tuple[str, Optional[float]]] = {}

    def get(self, key: str) -> Optional[str]:
        entry = self._entries.get(key)
        if entry is None:
            return None

        value, expires_at = entry
        if expires_at is not None and expires_at <= self._clock():
            logger.debug(f"Entry {key} expired")
            self.delete(key)
            return None
        return value

    def set(self, key: str, value: str, ttl_days: Optional[float] = None) -> None:
        expires_at = None
        if ttl_days is not None:
            expires_at = self._clock() + ttl_days * SECONDS_PER_DAY
        self._entries[key] = (value, expires_at)

    def delete(self, key: str) -> None:
        self._entries.pop(key, None)


class JsonFileStore(MemoryStore):
    """MemoryStore mirrored to a JSON file after every write."""

    def __init__(self, path: Union[str, Path] = STORE_PATH, clock: Callable[[], float] = time.time):
        super().__init__(clock)
        self.path = Path(path)
        self._load()

    def set(self, key: str, value: str, ttl_days: Optional[float] = None) -> None:
        super().set(key, value, ttl_days)
        self._flush()

    def delete(self, key: str) -> None:
        if key in self._entries:
            super().delete(key)
            self._flush()

    def _load(self) -> None:
        if not self.path.exists():
            return

        try:
            raw = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            logger.warning(f"Ignoring unreadable store file {self.path}: {e}")
            return

        for key, entry in raw.items():
            if not isinstance(entry, dict) or "value" not in entry:
                logger.warning(f"Skipping malformed store entry {key}")
                continue
            self._entries[key] = (entry["value"], entry.get("expires_at"))
        logger.info(f"Loaded {len(self._entries)} entries from {self.path}")

    def _flush(self) -> None:
        data = {
            key: {"value": value, "expires_at": expires_at}
            for key, (value, expires_at) in self._entries.items()
        }
        self.path.write_text(json.dumps(data, indent=2), encoding="utf-8")
