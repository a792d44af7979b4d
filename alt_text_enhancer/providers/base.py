from dataclasses import dataclass
from typing import Iterable, Protocol

from ..config import GenerationSettings, ReplacePolicy


@dataclass(frozen=True)
class MediaItem:
    id: str
    url: str
    current_alt_text: str = ""

    @property
    def has_alt_text(self) -> bool:
        return bool((self.current_alt_text or "").strip())


class SettingsProvider(Protocol):
    """Protocol for anything that can hand out validated settings."""

    def get_settings(self) -> GenerationSettings:
        ...


class MediaInventory(Protocol):
    """Protocol describing a media library holding images and their alt text."""

    def list_candidates(self, policy: ReplacePolicy) -> Iterable[MediaItem]:
        ...

    def set_alt_text(self, item_id: str, text: str) -> None:
        ...


def is_eligible(item: MediaItem, policy: ReplacePolicy) -> bool:
    if policy is ReplacePolicy.REPLACE_ALL:
        return True
    return not item.has_alt_text
