from typing import Dict, Iterable, List

from ..config import ReplacePolicy
from .base import MediaItem, is_eligible


class InMemoryInventory:
    """Inventory kept in a list; order of ``items`` is the enumeration order."""

    def __init__(self, items: Iterable[MediaItem] = ()):
        self._items: List[MediaItem] = list(items)
        self.updates: Dict[str, str] = {}

    @property
    def items(self) -> List[MediaItem]:
        return list(self._items)

    def list_candidates(self, policy: ReplacePolicy) -> List[MediaItem]:
        return [item for item in self._items if is_eligible(item, policy)]

    def get_alt_text(self, item_id: str) -> str:
        for item in self._items:
            if item.id == item_id:
                return item.current_alt_text
        raise KeyError(item_id)

    def set_alt_text(self, item_id: str, text: str) -> None:
        for idx, item in enumerate(self._items):
            if item.id == item_id:
                self._items[idx] = MediaItem(item.id, item.url, text)
                self.updates[item_id] = text
                return
        raise KeyError(item_id)
