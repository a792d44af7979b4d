import json

import pytest
from PIL import Image

from alt_text_enhancer import FolderInventory, MediaSettings, ReplacePolicy


def make_library(root):
    (root / "sub").mkdir()
    Image.new("RGB", (40, 30), (255, 0, 0)).save(root / "b.png")
    Image.new("RGB", (40, 30), (0, 255, 0)).save(root / "a.jpg")
    Image.new("RGB", (20, 20), (0, 0, 255)).save(root / "sub" / "c.jpg")
    (root / "notes.txt").write_text("not an image")
    (root / "alt_text.json").write_text(json.dumps({"b.png": "A red square"}))


def test_ids_are_sorted_relative_paths(tmp_path):
    make_library(tmp_path)
    inv = FolderInventory(str(tmp_path), base_url="https://cdn.example.com/media/")
    assert inv.image_ids() == ["a.jpg", "b.png", "sub/c.jpg"]


def test_only_missing_policy(tmp_path):
    make_library(tmp_path)
    inv = FolderInventory(str(tmp_path), base_url="https://cdn.example.com/media")
    items = list(inv.list_candidates(ReplacePolicy.ONLY_MISSING))
    assert [i.id for i in items] == ["a.jpg", "sub/c.jpg"]
    assert items[0].url == "https://cdn.example.com/media/a.jpg"
    assert items[1].url == "https://cdn.example.com/media/sub/c.jpg"


def test_replace_all_policy_includes_existing(tmp_path):
    make_library(tmp_path)
    inv = FolderInventory(str(tmp_path), base_url="https://cdn.example.com")
    items = list(inv.list_candidates(ReplacePolicy.REPLACE_ALL))
    assert [i.id for i in items] == ["a.jpg", "b.png", "sub/c.jpg"]
    assert items[1].current_alt_text == "A red square"


def test_inline_data_urls_without_base_url(tmp_path):
    make_library(tmp_path)
    inv = FolderInventory(str(tmp_path), image_max_size=16)
    items = list(inv.list_candidates(ReplacePolicy.ONLY_MISSING))
    assert all(i.url.startswith("data:image/jpeg;base64,") for i in items)


def test_unreadable_image_yields_empty_url(tmp_path, capsys):
    (tmp_path / "broken.jpg").write_bytes(b"not really a jpeg")
    inv = FolderInventory(str(tmp_path))
    items = list(inv.list_candidates(ReplacePolicy.ONLY_MISSING))
    assert items[0].id == "broken.jpg"
    assert items[0].url == ""
    assert "cannot encode broken.jpg" in capsys.readouterr().err


def test_set_alt_text_persists_sidecar(tmp_path):
    make_library(tmp_path)
    inv = FolderInventory(str(tmp_path), base_url="https://x")
    inv.set_alt_text("a.jpg", "A green square")
    data = json.loads((tmp_path / "alt_text.json").read_text(encoding="utf-8"))
    assert data == {"a.jpg": "A green square", "b.png": "A red square"}
    assert FolderInventory(str(tmp_path)).get_alt_text("a.jpg") == "A green square"


def test_failed_save_keeps_previous_text(tmp_path, monkeypatch):
    make_library(tmp_path)
    inv = FolderInventory(str(tmp_path), base_url="https://x")

    def broken_replace(src, dst):
        raise PermissionError("read-only library")

    monkeypatch.setattr("alt_text_enhancer.providers.folder_inventory.os.replace", broken_replace)
    with pytest.raises(OSError):
        inv.set_alt_text("b.png", "A blue square")
    with pytest.raises(OSError):
        inv.set_alt_text("a.jpg", "A green square")
    assert inv.get_alt_text("b.png") == "A red square"
    assert inv.get_alt_text("a.jpg") == ""
    assert json.loads((tmp_path / "alt_text.json").read_text()) == {"b.png": "A red square"}


def test_invalid_sidecar_raises(tmp_path):
    (tmp_path / "alt_text.json").write_text("[1, 2]")
    with pytest.raises(ValueError):
        FolderInventory(str(tmp_path))


def test_from_settings(tmp_path):
    media = MediaSettings(base_url="https://m.example", image_max_size=64, image_quality=70, sidecar_name="alts.json")
    inv = FolderInventory.from_settings(str(tmp_path), media)
    assert inv.base_url == "https://m.example"
    assert inv.sidecar_path.endswith("alts.json")
