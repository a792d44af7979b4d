"""Media library backed by a directory of image files.

Alt texts live in a JSON sidecar at the library root, keyed by the POSIX path
of each image relative to that root.
"""
from __future__ import annotations

from typing import Dict, Iterator, List, Optional
from urllib.parse import quote
import json
import os

from ..config import MediaSettings, ReplacePolicy
from ..image_io import is_image_filename, load_image_as_data_url
from ..utils import log
from .base import MediaItem, is_eligible


class FolderInventory:
    def __init__(
        self,
        root: str,
        base_url: Optional[str] = None,
        image_max_size: int = 1024,
        image_quality: int = 90,
        sidecar_name: str = "alt_text.json",
        quiet: bool = False,
    ):
        self.root = os.path.abspath(root)
        self.base_url = base_url
        self.image_max_size = image_max_size
        self.image_quality = image_quality
        self.sidecar_path = os.path.join(self.root, sidecar_name)
        self.quiet = quiet
        self._alt = self._load()

    @classmethod
    def from_settings(cls, root: str, media: MediaSettings, quiet: bool = False) -> "FolderInventory":
        return cls(
            root,
            base_url=media.base_url,
            image_max_size=media.image_max_size,
            image_quality=media.image_quality,
            sidecar_name=media.sidecar_name,
            quiet=quiet,
        )

    def _load(self) -> Dict[str, str]:
        if not os.path.exists(self.sidecar_path):
            return {}
        with open(self.sidecar_path, "r", encoding="utf-8") as f:
            data = json.load(f)
        if not isinstance(data, dict):
            raise ValueError(f"{self.sidecar_path} must contain a JSON object")
        return {str(k): str(v) if v is not None else "" for k, v in data.items()}

    def _save(self) -> None:
        tmp = self.sidecar_path + ".tmp"
        with open(tmp, "w", encoding="utf-8") as f:
            json.dump(self._alt, f, ensure_ascii=False, indent=2, sort_keys=True)
        os.replace(tmp, self.sidecar_path)

    def image_ids(self) -> List[str]:
        ids = []
        for dirpath, dirnames, filenames in os.walk(self.root):
            dirnames.sort()
            for name in sorted(filenames):
                if not is_image_filename(name):
                    continue
                rel = os.path.relpath(os.path.join(dirpath, name), self.root)
                ids.append(rel.replace(os.sep, "/"))
        return ids

    def get_alt_text(self, item_id: str) -> str:
        return self._alt.get(item_id, "")

    def set_alt_text(self, item_id: str, text: str) -> None:
        previous = self._alt.get(item_id)
        self._alt[item_id] = text
        try:
            self._save()
        except OSError:
            # keep memory in line with what is on disk
            if previous is None:
                self._alt.pop(item_id, None)
            else:
                self._alt[item_id] = previous
            raise

    def url_for(self, item_id: str) -> str:
        if self.base_url:
            return self.base_url.rstrip("/") + "/" + quote(item_id)
        path = os.path.join(self.root, *item_id.split("/"))
        try:
            return load_image_as_data_url(path, self.image_max_size, self.image_quality)
        except (OSError, ValueError, RuntimeError) as e:
            # PIL.UnidentifiedImageError is an OSError
            log(f"cannot encode {item_id}: {e}", self.quiet, "WARNING")
            return ""

    def list_candidates(self, policy: ReplacePolicy) -> Iterator[MediaItem]:
        """Yield eligible images in path order, encoding each one lazily."""
        for item_id in self.image_ids():
            current = self.get_alt_text(item_id)
            probe = MediaItem(item_id, "", current)
            if not is_eligible(probe, policy):
                continue
            yield MediaItem(item_id, self.url_for(item_id), current)
