"""Public API for alt_text_enhancer.

Expose a small, explicit set of helpers used by the CLI, integrations and tests.
"""
from importlib.metadata import PackageNotFoundError, version

try:
	__version__ = version("alt_text_enhancer")
except PackageNotFoundError:
	__version__ = "0.0.0"

from .config import (
	EnvSettingsProvider,
	GenerationSettings,
	MediaSettings,
	ReplacePolicy,
	load_config,
	load_media_settings,
	sanitize_settings,
)
from .errors import (
	AltTextError,
	CancelledError,
	ConfigurationError,
	EmptyBodyError,
	HttpStatusError,
	MalformedResponseError,
	TransportError,
	ValidationError,
)
from .invoker import InvocationResult, ResilientInvoker, RetryPolicy, extract_message_content, parse_retry_after
from .json_api import handle_json_request
from .normalizer import normalize_alt_text
from .providers import FolderInventory, InMemoryInventory, MediaInventory, MediaItem, SettingsProvider
from .request_builder import build_request
from .services import BatchOrchestrator, BatchResult, Failure, Skip, Success, generate_alt_text

__all__ = [
	"EnvSettingsProvider",
	"GenerationSettings",
	"MediaSettings",
	"ReplacePolicy",
	"load_config",
	"load_media_settings",
	"sanitize_settings",
	"AltTextError",
	"CancelledError",
	"ConfigurationError",
	"EmptyBodyError",
	"HttpStatusError",
	"MalformedResponseError",
	"TransportError",
	"ValidationError",
	"InvocationResult",
	"ResilientInvoker",
	"RetryPolicy",
	"extract_message_content",
	"parse_retry_after",
	"handle_json_request",
	"normalize_alt_text",
	"FolderInventory",
	"InMemoryInventory",
	"MediaInventory",
	"MediaItem",
	"SettingsProvider",
	"build_request",
	"BatchOrchestrator",
	"BatchResult",
	"Failure",
	"Skip",
	"Success",
	"generate_alt_text",
	"__version__",
]
