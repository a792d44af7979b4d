from dataclasses import dataclass
from enum import Enum
from typing import Any, Mapping, Optional
import os

from dotenv import load_dotenv, find_dotenv


DEFAULT_MODEL = "gpt-4o-mini"
DEFAULT_LANGUAGE = "en"
DEFAULT_BATCH_SIZE = 10
DEFAULT_DELAY_MS = 1500
DEFAULT_MAX_ATTEMPTS = 6
DEFAULT_TIMEOUT = 60
DEFAULT_ENDPOINT = "https://api.openai.com/v1/chat/completions"

MIN_BATCH_SIZE = 1
MAX_BATCH_SIZE = 50


class ReplacePolicy(str, Enum):
    ONLY_MISSING = "only-missing"
    REPLACE_ALL = "replace-all"

    @classmethod
    def parse(cls, value: Any) -> "ReplacePolicy":
        if isinstance(value, cls):
            return value
        text = str(value or "").strip().lower().replace("_", "-")
        for policy in cls:
            if policy.value == text:
                return policy
        return cls.ONLY_MISSING


@dataclass(frozen=True)
class GenerationSettings:
    credential: str
    model: str = DEFAULT_MODEL
    language: str = DEFAULT_LANGUAGE
    batch_size: int = DEFAULT_BATCH_SIZE
    delay_ms: int = DEFAULT_DELAY_MS
    replace_policy: ReplacePolicy = ReplacePolicy.ONLY_MISSING
    max_attempts: int = DEFAULT_MAX_ATTEMPTS
    endpoint: str = DEFAULT_ENDPOINT
    timeout: int = DEFAULT_TIMEOUT

    def __repr__(self) -> str:
        # keep the credential out of tracebacks and debug dumps
        return (
            f"GenerationSettings(credential={'***' if self.credential else ''!r}, "
            f"model={self.model!r}, language={self.language!r}, batch_size={self.batch_size}, "
            f"delay_ms={self.delay_ms}, replace_policy={self.replace_policy.value!r}, "
            f"max_attempts={self.max_attempts}, endpoint={self.endpoint!r}, timeout={self.timeout})"
        )


@dataclass
class MediaSettings:
    base_url: Optional[str] = None
    image_max_size: int = 1024
    image_quality: int = 90
    sidecar_name: str = "alt_text.json"


def _to_int(value: Any, default: int) -> int:
    if value is None or value == "":
        return default
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


def _text(value: Any) -> str:
    return str(value).strip() if value is not None else ""


def sanitize_settings(raw: Mapping[str, Any]) -> GenerationSettings:
    """Turn raw option values into GenerationSettings.

    This is the only place values from the outside are accepted, so ranges
    are enforced here: batch size is clamped to 1..50, delay to >= 0 and an
    unknown replace mode falls back to only-missing.
    """
    batch_size = _to_int(raw.get("batch_size"), DEFAULT_BATCH_SIZE)
    batch_size = max(MIN_BATCH_SIZE, min(MAX_BATCH_SIZE, batch_size))

    delay_ms = max(0, _to_int(raw.get("delay_ms"), DEFAULT_DELAY_MS))

    max_attempts = _to_int(raw.get("max_attempts"), DEFAULT_MAX_ATTEMPTS)
    if max_attempts <= 0:
        max_attempts = DEFAULT_MAX_ATTEMPTS

    timeout = _to_int(raw.get("timeout"), DEFAULT_TIMEOUT)
    if timeout <= 0:
        timeout = DEFAULT_TIMEOUT

    return GenerationSettings(
        credential=_text(raw.get("api_key")),
        model=_text(raw.get("model")) or DEFAULT_MODEL,
        language=_text(raw.get("language")).lower() or DEFAULT_LANGUAGE,
        batch_size=batch_size,
        delay_ms=delay_ms,
        replace_policy=ReplacePolicy.parse(raw.get("replace_mode")),
        max_attempts=max_attempts,
        endpoint=_endpoint_from_base(_text(raw.get("base_url"))),
        timeout=timeout,
    )


def _endpoint_from_base(base_url: str) -> str:
    if not base_url:
        return DEFAULT_ENDPOINT
    base = base_url.rstrip("/")
    if base.endswith("/chat/completions"):
        return base
    return base + "/chat/completions"


def _find_env_file() -> str:
    # Try find_dotenv(); if it fails to locate a file, search parent directories
    env = find_dotenv(usecwd=True)
    if env:
        return env
    for start in (os.getcwd(), os.path.dirname(__file__)):
        p = os.path.abspath(start)
        while True:
            cand = os.path.join(p, ".env")
            if os.path.exists(cand):
                return cand
            parent = os.path.dirname(p)
            if parent == p:
                break
            p = parent
    return ".env"


def _env_options() -> dict:
    load_dotenv(_find_env_file())
    return {
        "api_key": os.environ.get("OPENAI_API_KEY"),
        "model": os.environ.get("OPENAI_MODEL"),
        "base_url": os.environ.get("OPENAI_BASE_URL"),
        "timeout": os.environ.get("OPENAI_TIMEOUT"),
        "max_attempts": os.environ.get("OPENAI_MAX_RETRIES"),
        "language": os.environ.get("ALT_TEXT_LANGUAGE"),
        "batch_size": os.environ.get("ALT_TEXT_BATCH_SIZE"),
        "delay_ms": os.environ.get("ALT_TEXT_DELAY_MS"),
        "replace_mode": os.environ.get("ALT_TEXT_REPLACE_MODE"),
    }


def load_config(overrides: Optional[Mapping[str, Any]] = None) -> GenerationSettings:
    """Read GenerationSettings from the environment (and .env).

    A missing OPENAI_API_KEY is not an error here; the batch reports it.
    Non-empty ``overrides`` win over the environment (CLI flags).
    """
    options = _env_options()
    for key, value in (overrides or {}).items():
        if value is not None and value != "":
            options[key] = value
    return sanitize_settings(options)


def load_media_settings(overrides: Optional[Mapping[str, Any]] = None) -> MediaSettings:
    load_dotenv(_find_env_file())
    overrides = overrides or {}
    base_url = overrides.get("base_url") or os.environ.get("MEDIA_BASE_URL") or None
    return MediaSettings(
        base_url=base_url,
        image_max_size=_to_int(overrides.get("image_max_size") or os.environ.get("IMAGE_MAX_SIZE"), 1024),
        image_quality=_to_int(overrides.get("image_quality") or os.environ.get("IMAGE_QUALITY"), 90),
    )


class EnvSettingsProvider:
    """SettingsProvider backed by environment variables."""

    def __init__(self, overrides: Optional[Mapping[str, Any]] = None):
        self.overrides = dict(overrides or {})

    def get_settings(self) -> GenerationSettings:
        return load_config(self.overrides)
