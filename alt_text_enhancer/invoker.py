"""Resilient chat-completion invoker.

One call to :meth:`ResilientInvoker.invoke` is one logical request: the same
payload is POSTed until the API answers 2xx, answers with a status that is
not worth retrying, or the attempt budget runs out.  Only 429 and 5xx are
retried.  Transport failures are returned immediately.

The outcome is always an :class:`InvocationResult`; errors are carried as
values so the retry loop never needs exceptions for flow control.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from email.utils import parsedate_to_datetime
from enum import Enum
from typing import Any, Dict, Optional, Sequence, Tuple
import json
import math
import random
import threading

import requests

from .config import DEFAULT_ENDPOINT, DEFAULT_MAX_ATTEMPTS, DEFAULT_TIMEOUT
from .errors import (
    AltTextError,
    CancelledError,
    EmptyBodyError,
    HttpStatusError,
    MalformedResponseError,
    TransportError,
)
from .request_builder import sanitize_payload
from .utils import debug_enabled, log, wait

BACKOFF_LADDER: Tuple[float, ...] = (0.5, 1.0, 2.0, 4.0, 8.0)
JITTER_RANGE: Tuple[float, float] = (1.0, 1.25)
# Longest single backoff, whatever the server asks for
MAX_RETRY_DELAY = 300.0


class AttemptOutcome(Enum):
    SUCCEEDED = "succeeded"
    RETRYABLE = "retryable"
    TERMINAL = "terminal"


def classify_status(code: int) -> AttemptOutcome:
    if 200 <= code < 300:
        return AttemptOutcome.SUCCEEDED
    if code == 429 or 500 <= code < 600:
        return AttemptOutcome.RETRYABLE
    return AttemptOutcome.TERMINAL


def parse_retry_after(value: Any, now: Optional[datetime] = None) -> Optional[float]:
    """Seconds to wait according to a Retry-After header value.

    Numeric values are seconds (negative ones count as 0).  HTTP dates are
    turned into the time remaining from ``now``; past or unparsable dates
    give None.
    """
    if value is None:
        return None
    if isinstance(value, (list, tuple)):
        if not value:
            return None
        value = value[0]
    text = str(value).strip()
    if not text:
        return None
    try:
        seconds = float(text)
    except ValueError:
        pass
    else:
        if not math.isfinite(seconds):
            return None
        return max(0.0, seconds)
    try:
        when = parsedate_to_datetime(text)
    except (TypeError, ValueError, IndexError):
        return None
    if when is None:
        return None
    if when.tzinfo is None:
        when = when.replace(tzinfo=timezone.utc)
    now = now or datetime.now(timezone.utc)
    diff = (when - now).total_seconds()
    return diff if diff > 0 else None


@dataclass(frozen=True)
class RetryPolicy:
    ladder: Sequence[float] = BACKOFF_LADDER
    jitter_range: Tuple[float, float] = JITTER_RANGE
    max_delay: float = MAX_RETRY_DELAY

    def base_delay(self, attempt: int) -> float:
        """Ladder value for the 1-based ``attempt`` that just failed."""
        idx = min(max(attempt, 1), len(self.ladder)) - 1
        return float(self.ladder[idx])

    def jitter(self) -> float:
        low, high = self.jitter_range
        return random.uniform(low, high)

    def compute_delay(self, attempt: int, retry_after: Optional[float] = None) -> float:
        delay = self.base_delay(attempt)
        if retry_after is not None:
            delay = max(delay, retry_after)
        return min(delay, self.max_delay) * self.jitter()


@dataclass
class RetryState:
    attempt: int
    max_attempts: int
    last_status: Optional[int] = None

    @property
    def exhausted(self) -> bool:
        return self.attempt >= self.max_attempts


@dataclass(frozen=True)
class InvocationResult:
    body: Optional[str] = None
    error: Optional[AltTextError] = None
    attempts: int = 0
    status_code: Optional[int] = None

    @property
    def ok(self) -> bool:
        return self.error is None


def extract_message_content(body: Optional[str]) -> str:
    """Return ``choices[0].message.content`` from a chat-completion body."""
    if not body or not body.strip():
        raise EmptyBodyError("Empty response from the chat completion API.")
    try:
        data = json.loads(body)
    except ValueError as e:
        raise MalformedResponseError(f"Response is not valid JSON: {e}") from e
    try:
        content = data["choices"][0]["message"]["content"]
    except (KeyError, IndexError, TypeError) as e:
        raise MalformedResponseError("Unexpected response format from the chat completion API.") from e
    if not isinstance(content, str):
        raise MalformedResponseError("Unexpected response format from the chat completion API.")
    return content


class ResilientInvoker:
    """POSTs chat-completion payloads with bounded, jittered retries.

    ``session`` may be any object with a ``requests``-compatible ``post``;
    it is injected in tests.  ``cancel`` is checked by every backoff wait.
    """

    def __init__(
        self,
        credential: str,
        endpoint: str = DEFAULT_ENDPOINT,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
        timeout: float = DEFAULT_TIMEOUT,
        policy: Optional[RetryPolicy] = None,
        session: Optional[Any] = None,
        cancel: Optional[threading.Event] = None,
        quiet: bool = False,
    ):
        self._credential = credential
        self.endpoint = endpoint
        self.max_attempts = max_attempts
        self.timeout = timeout
        self.policy = policy or RetryPolicy()
        self.session = session or requests.Session()
        self.cancel = cancel
        self.quiet = quiet

    @classmethod
    def from_settings(cls, settings, **kwargs) -> "ResilientInvoker":
        return cls(
            settings.credential,
            endpoint=settings.endpoint,
            max_attempts=settings.max_attempts,
            timeout=settings.timeout,
            **kwargs,
        )

    def _headers(self) -> Dict[str, str]:
        return {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {self._credential}",
        }

    def _post(self, data: str):
        return self.session.post(self.endpoint, headers=self._headers(), data=data, timeout=self.timeout)

    def invoke(self, payload: Dict[str, Any], max_attempts: Optional[int] = None, label: str = "request") -> InvocationResult:
        limit = self.max_attempts if max_attempts is None else max_attempts
        try:
            limit = int(limit)
        except (TypeError, ValueError):
            limit = DEFAULT_MAX_ATTEMPTS
        state = RetryState(attempt=0, max_attempts=max(1, limit))
        data = json.dumps(payload)

        if debug_enabled():
            log(f"payload for {label}: {json.dumps(sanitize_payload(payload), ensure_ascii=False)}", self.quiet, "DEBUG")

        while True:
            state.attempt += 1
            try:
                resp = self._post(data)
            except requests.RequestException as e:
                log(f"transport failure for {label}: {e}", self.quiet, "WARNING")
                return InvocationResult(
                    error=TransportError(f"Request to the chat completion API failed: {e}"),
                    attempts=state.attempt,
                )

            state.last_status = resp.status_code
            outcome = classify_status(resp.status_code)

            if outcome is AttemptOutcome.SUCCEEDED:
                return InvocationResult(body=resp.text, attempts=state.attempt, status_code=resp.status_code)

            if outcome is AttemptOutcome.TERMINAL:
                return InvocationResult(
                    error=HttpStatusError(resp.status_code),
                    attempts=state.attempt,
                    status_code=resp.status_code,
                )

            if state.exhausted:
                log(
                    f"chat completion for {label} failed with HTTP {state.last_status} "
                    f"after {state.attempt} attempts",
                    self.quiet,
                    "WARNING",
                )
                return InvocationResult(
                    error=HttpStatusError(state.last_status, attempts=state.attempt),
                    attempts=state.attempt,
                    status_code=state.last_status,
                )

            hint = parse_retry_after(resp.headers.get("Retry-After"))
            delay = self.policy.compute_delay(state.attempt, hint)
            log(
                f"retrying chat completion for {label} after {delay:.2f}s "
                f"(attempt {state.attempt + 1} of {state.max_attempts}, last status {state.last_status})",
                self.quiet,
            )
            if not wait(delay, self.cancel):
                return InvocationResult(
                    error=CancelledError("Cancelled while waiting to retry."),
                    attempts=state.attempt,
                    status_code=state.last_status,
                )

    def complete(self, payload: Dict[str, Any], label: str = "request") -> str:
        """Invoke and return the message content, raising the terminal error."""
        result = self.invoke(payload, label=label)
        if result.error is not None:
            raise result.error
        return extract_message_content(result.body)
