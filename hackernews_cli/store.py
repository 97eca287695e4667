from types import MappingProxyType
from typing import Dict, Generic, Hashable, Mapping, Optional, Tuple, TypeVar

from hackernews_cli.models import Category, Item

K = TypeVar("K", bound=Hashable)
V = TypeVar("V")


class WriteOnceCache(Generic[K, V]):
    """Process-lifetime map: first write wins, nothing is evicted or expired.

    Not synchronized. Callers write from a single thread only.
    """

    def __init__(self) -> None:
        self._entries: Dict[K, V] = {}

    def get(self, key: K) -> Optional[V]:
        return self._entries.get(key)

    def put(self, key: K, value: V) -> None:
        self._entries.setdefault(key, value)

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def view(self) -> Mapping[K, V]:
        """Live, read-only mapping over the entries."""
        return MappingProxyType(self._entries)


class ItemStore(WriteOnceCache[int, Item]):
    pass


class CategoryIndex(WriteOnceCache[Category, Tuple[int, ...]]):
    pass
