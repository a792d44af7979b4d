"""Error taxonomy shared by the invoker and the batch orchestrator."""
from typing import Optional


class AltTextError(Exception):
    """Base class for every error the package reports."""


class ConfigurationError(AltTextError):
    """Missing or unusable configuration; fatal to a whole batch."""


class TransportError(AltTextError):
    """No HTTP response was obtained (DNS, connect, timeout...)."""


class HttpStatusError(AltTextError):
    def __init__(self, code: int, attempts: Optional[int] = None):
        self.code = code
        self.attempts = attempts
        msg = f"HTTP {code} returned by the chat completion API"
        if attempts and attempts > 1:
            msg += f" after {attempts} attempts"
        super().__init__(msg)


class EmptyBodyError(AltTextError):
    pass


class MalformedResponseError(AltTextError):
    pass


class ValidationError(AltTextError):
    """Per-item input problem, e.g. an image URL that cannot be sent."""


class CancelledError(AltTextError):
    pass
