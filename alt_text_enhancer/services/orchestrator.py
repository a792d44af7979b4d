"""BatchOrchestrator: walks the inventory and fills in alt text one image at a time."""
from __future__ import annotations

from dataclasses import dataclass, field
from itertools import islice
from typing import Any, Dict, Iterable, Iterator, List, Optional, Tuple, Union
from urllib.parse import urlparse
import threading

from ..config import GenerationSettings
from ..errors import AltTextError, CancelledError, ConfigurationError, MalformedResponseError, ValidationError
from ..invoker import ResilientInvoker
from ..normalizer import normalize_alt_text
from ..providers.base import MediaInventory, MediaItem, SettingsProvider, is_eligible
from ..request_builder import build_request
from ..utils import log, wait


@dataclass(frozen=True)
class Success:
    text: str


@dataclass(frozen=True)
class Skip:
    reason: str


@dataclass(frozen=True)
class Failure:
    kind: str
    message: str


GenerationOutcome = Union[Success, Skip, Failure]


@dataclass(frozen=True)
class BatchResult:
    updated_count: int = 0
    skipped_count: int = 0
    errors: Tuple[str, ...] = field(default_factory=tuple)
    cancelled: bool = False

    def summary(self) -> str:
        return f"Updated {self.updated_count} images. {self.skipped_count} images were skipped."

    def to_dict(self) -> Dict[str, Any]:
        return {
            "updated": self.updated_count,
            "skipped": self.skipped_count,
            "errors": list(self.errors),
            "cancelled": self.cancelled,
        }


def validate_image_url(url: str) -> None:
    if not url:
        raise ValidationError("Unable to determine image URL.")
    if url.startswith("data:"):
        if not url.startswith("data:image/") or "," not in url:
            raise ValidationError("Inline image is not an image data URL.")
        return
    parsed = urlparse(url)
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        raise ValidationError(f"Image URL {url!r} is not an absolute http(s) URL.")


def _chunks(items: Iterable[MediaItem], size: int) -> Iterator[List[MediaItem]]:
    it = iter(items)
    while True:
        chunk = list(islice(it, size))
        if not chunk:
            return
        yield chunk


class BatchOrchestrator:
    def __init__(
        self,
        settings: GenerationSettings,
        inventory: MediaInventory,
        invoker: Optional[ResilientInvoker] = None,
        cancel: Optional[threading.Event] = None,
        quiet: bool = False,
    ):
        self.settings = settings
        self.inventory = inventory
        self.cancel = cancel
        self.quiet = quiet
        self._invoker = invoker

    def _get_invoker(self) -> ResilientInvoker:
        if self._invoker is None:
            self._invoker = ResilientInvoker.from_settings(self.settings, cancel=self.cancel, quiet=self.quiet)
        return self._invoker

    def process_item(self, item: MediaItem) -> GenerationOutcome:
        """Generate alt text for one item; never raises for per-item problems."""
        if not is_eligible(item, self.settings.replace_policy):
            return Skip("already has alt text")
        try:
            validate_image_url(item.url)
            payload = build_request(item.url, self.settings.language, self.settings.model)
            if not wait(self.settings.delay_ms / 1000.0, self.cancel):
                raise CancelledError("Cancelled before the request was sent.")
            content = self._get_invoker().complete(payload, label=f"item {item.id}")
            text = normalize_alt_text(content)
            if not text:
                raise MalformedResponseError("The model returned an empty description.")
        except AltTextError as e:
            return Failure(type(e).__name__, str(e))
        return Success(text)

    def run(self) -> BatchResult:
        settings = self.settings
        if not settings.credential:
            err = ConfigurationError("Generation skipped because the OpenAI API key is not configured.")
            log(str(err), self.quiet, "ERROR")
            return BatchResult(errors=(str(err),))

        updated = 0
        skipped = 0
        errors: List[str] = []
        cancelled = False

        log(
            f"starting batch: model={settings.model}, language={settings.language}, "
            f"policy={settings.replace_policy.value}, delay_ms={settings.delay_ms}",
            self.quiet,
        )
        candidates = self.inventory.list_candidates(settings.replace_policy)
        for batch_no, chunk in enumerate(_chunks(candidates, settings.batch_size), start=1):
            for item in chunk:
                if self.cancel is not None and self.cancel.is_set():
                    cancelled = True
                    break
                outcome = self.process_item(item)
                if isinstance(outcome, Success):
                    try:
                        self.inventory.set_alt_text(item.id, outcome.text)
                    except (OSError, KeyError, ValueError) as e:
                        skipped += 1
                        errors.append(f"item {item.id}: failed to save alt text: {e}")
                        log(errors[-1], self.quiet, "WARNING")
                        continue
                    updated += 1
                elif isinstance(outcome, Skip):
                    skipped += 1
                else:
                    skipped += 1
                    errors.append(f"item {item.id}: {outcome.message}")
                    log(errors[-1], self.quiet, "WARNING")
                    if outcome.kind == CancelledError.__name__:
                        cancelled = True
                        break
            if cancelled:
                break
            log(f"batch {batch_no} done: updated={updated}, skipped={skipped}", self.quiet)

        if cancelled:
            log("batch cancelled before all items were processed", self.quiet, "WARNING")
        return BatchResult(updated, skipped, tuple(errors), cancelled)


def generate_alt_text(
    provider: SettingsProvider,
    inventory: MediaInventory,
    invoker: Optional[ResilientInvoker] = None,
    cancel: Optional[threading.Event] = None,
    quiet: bool = False,
) -> BatchResult:
    """Read settings once from ``provider`` and run a full batch."""
    settings = provider.get_settings()
    return BatchOrchestrator(settings, inventory, invoker=invoker, cancel=cancel, quiet=quiet).run()
