"""Collaborators the orchestrator talks to: settings and media inventories."""
from .base import MediaInventory, MediaItem, SettingsProvider, is_eligible
from .folder_inventory import FolderInventory
from .memory import InMemoryInventory

__all__ = [
    "MediaInventory",
    "MediaItem",
    "SettingsProvider",
    "is_eligible",
    "FolderInventory",
    "InMemoryInventory",
]
