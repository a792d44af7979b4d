import os
import sys
import threading
import time
from typing import Optional


def log(msg: str, quiet: bool = False, level: str = "INFO") -> None:
    """Prefixed diagnostic line on stderr. Warnings and errors ignore ``quiet``."""
    if quiet and level == "INFO":
        return
    print(f"[alt_text_enhancer] {level}: {msg}", file=sys.stderr)


def debug_enabled() -> bool:
    # Unified debug flag: DEBUG first, IMAGE_DEBUG kept for older .env files
    env_dbg = os.environ.get("DEBUG", None)
    if env_dbg is None:
        env_dbg = os.environ.get("IMAGE_DEBUG", "")
    return str(env_dbg).lower() in ("1", "true", "yes")


def wait(seconds: float, cancel: Optional[threading.Event] = None) -> bool:
    """Sleep for ``seconds``.

    Returns False when ``cancel`` was set before or during the wait.
    """
    if cancel is not None and cancel.is_set():
        return False
    if seconds <= 0:
        return True
    seconds = min(seconds, threading.TIMEOUT_MAX)
    if cancel is None:
        time.sleep(seconds)
        return True
    return not cancel.wait(seconds)
