import argparse
import json
import sys
import threading
from typing import Optional, Sequence

from .config import load_config, load_media_settings
from .providers.folder_inventory import FolderInventory
from .services.orchestrator import BatchOrchestrator
from .utils import log


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="alt-text-enhancer",
        description="Fill in missing image alt text with an OpenAI-compatible vision model.",
    )
    parser.add_argument("root", help="Media library folder; alt texts are stored in its alt_text.json.")
    parser.add_argument(
        "-b",
        "--base-url",
        dest="base_url",
        help="Public URL of the library folder (MEDIA_BASE_URL). Without it images are sent inline.",
    )
    parser.add_argument("-k", "--OPENAI_API_KEY", dest="api_key", help="Override OPENAI_API_KEY from .env.")
    parser.add_argument("-u", "--OPENAI_BASE_URL", dest="api_base_url", help="Override OPENAI_BASE_URL from .env.")
    parser.add_argument("-m", "--OPENAI_MODEL", dest="model", help="Override OPENAI_MODEL from .env.")
    parser.add_argument("-T", "--OPENAI_TIMEOUT", dest="timeout", type=int, help="Request timeout in seconds.")
    parser.add_argument(
        "-r",
        "--max-retries",
        dest="max_attempts",
        type=int,
        help="Maximum attempts per image (OPENAI_MAX_RETRIES, default 6).",
    )
    parser.add_argument("-l", "--language", dest="language", help="Two-letter language code for the alt text.")
    parser.add_argument("--batch-size", dest="batch_size", type=int, help="Images per progress batch (1-50).")
    parser.add_argument("--delay-ms", dest="delay_ms", type=int, help="Pause between requests in milliseconds.")
    parser.add_argument(
        "--replace-all",
        dest="replace_mode",
        action="store_const",
        const="replace-all",
        help="Regenerate alt text for every image, not only the ones missing it.",
    )
    parser.add_argument(
        "--only-missing",
        dest="replace_mode",
        action="store_const",
        const="only-missing",
        help="Only fill in images without alt text, even if ALT_TEXT_REPLACE_MODE says otherwise.",
    )
    parser.add_argument(
        "--deadline",
        dest="deadline",
        type=float,
        help="Stop the run after this many seconds; finished images keep their alt text.",
    )
    parser.add_argument("--json", dest="as_json", action="store_true", help="Print the result as JSON.")
    parser.add_argument("-q", "--quiet", action="store_true", help="Suppress informational logs.")
    return parser.parse_args(argv)


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = parse_args(argv)
    settings = load_config(
        {
            "api_key": args.api_key,
            "base_url": args.api_base_url,
            "model": args.model,
            "timeout": args.timeout,
            "max_attempts": args.max_attempts,
            "language": args.language,
            "batch_size": args.batch_size,
            "delay_ms": args.delay_ms,
            "replace_mode": args.replace_mode,
        }
    )
    media = load_media_settings({"base_url": args.base_url})

    try:
        inventory = FolderInventory.from_settings(args.root, media, quiet=args.quiet)
    except (OSError, ValueError) as e:
        print(f"Failed to read media library {args.root!r}: {e}", file=sys.stderr)
        return 1

    cancel = threading.Event()
    timer = None
    if args.deadline:
        timer = threading.Timer(args.deadline, cancel.set)
        timer.daemon = True
        timer.start()
        log(f"deadline set to {args.deadline}s", args.quiet)

    try:
        result = BatchOrchestrator(settings, inventory, cancel=cancel, quiet=args.quiet).run()
    except KeyboardInterrupt:
        print("Interrupted.", file=sys.stderr)
        return 130
    finally:
        if timer is not None:
            timer.cancel()

    if args.as_json:
        print(json.dumps(result.to_dict(), ensure_ascii=False, indent=2))
    else:
        print(result.summary())
        for err in result.errors:
            print(f" - {err}")

    if not settings.credential or result.cancelled:
        return 1
    return 0
