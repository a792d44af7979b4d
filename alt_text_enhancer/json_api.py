import os

from .config import load_config, load_media_settings
from .providers.folder_inventory import FolderInventory
from .services.orchestrator import BatchOrchestrator

# request keys forwarded to load_config() as overrides
_SETTING_KEYS = ("api_key", "model", "language", "batch_size", "delay_ms", "replace_mode", "max_attempts", "timeout")


def handle_json_request(req: dict) -> dict:
    """dict-in/dict-out entry point for integrations.

    Supports action 'generate' over a folder library given by 'root'.
    'base_url' is the public URL of that folder, 'api_base_url' the API base.
    """
    action = req.get("action")
    if action != "generate":
        return {"ok": False, "errors": ["unsupported action"]}

    root = req.get("root")
    if not root:
        return {"ok": False, "errors": ["no root provided"]}
    if not os.path.isdir(root):
        return {"ok": False, "errors": [f"root {root!r} is not a directory"]}

    quiet = bool(req.get("quiet", True))
    overrides = {k: req.get(k) for k in _SETTING_KEYS if req.get(k) is not None}
    if req.get("api_base_url"):
        overrides["base_url"] = req["api_base_url"]
    settings = load_config(overrides)
    media = load_media_settings({"base_url": req.get("base_url")})

    try:
        inventory = FolderInventory.from_settings(root, media, quiet=quiet)
    except (OSError, ValueError) as e:
        return {"ok": False, "errors": [f"failed to read media library: {e}"]}

    result = BatchOrchestrator(settings, inventory, quiet=quiet).run()
    resp = {"ok": not result.errors and not result.cancelled}
    resp.update(result.to_dict())
    resp["summary"] = result.summary()
    return resp
