import html
import re

from .request_builder import MAX_ALT_TEXT_LENGTH

ELLIPSIS = "..."

_TAG_RE = re.compile(r"<[^>]*>")
_PREFIX_RE = re.compile(r"^(image of|photo of|picture of)\s+", re.IGNORECASE)
_SPACE_RE = re.compile(r"\s+")


def strip_tags(text: str) -> str:
    return _TAG_RE.sub("", text)


def normalize_alt_text(content: str, limit: int = MAX_ALT_TEXT_LENGTH) -> str:
    """Clean model output into alt text.

    Markup is removed, a single leading "Image of"/"Photo of"/"Picture of" is
    dropped and the result is capped at ``limit`` code points (``limit - 3``
    plus "..." when longer).
    """
    if not content:
        return ""
    text = strip_tags(html.unescape(strip_tags(content)))
    text = _SPACE_RE.sub(" ", text).strip()
    text = _PREFIX_RE.sub("", text, count=1)
    if len(text) > limit:
        text = text[: limit - len(ELLIPSIS)] + ELLIPSIS
    return text
