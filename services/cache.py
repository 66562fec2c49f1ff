# services/cache.py
import time
from typing import Any, Callable, Dict, Hashable, Optional, Tuple


class TTLCache:
    """Простий кеш у пам'яті з часом життя запису. Годинник можна підмінити в тестах."""

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self._clock = clock
        self._items: Dict[Hashable, Tuple[float, Any]] = {}

    def get(self, key: Hashable) -> Optional[Any]:
        item = self._items.get(key)
        if item is None:
            return None
        expires_at, value = item
        if self._clock() >= expires_at:
            del self._items[key]
            return None
        return value

    def set(self, key: Hashable, value: Any, ttl: float) -> None:
        self._items[key] = (self._clock() + ttl, value)

    def clear(self) -> None:
        self._items.clear()

    def __len__(self):
        return len(self._items)
