from typing import Any, Dict

from .config import DEFAULT_MODEL

MAX_ALT_TEXT_LENGTH = 120
MAX_OUTPUT_TOKENS = 150

SYSTEM_PROMPT = (
    "You are writing alt text in {language}. Produce a single concise sentence "
    "(max {limit} characters) that accurately and accessibly describes the image "
    "for someone who cannot see it. Do not prefix with \"Image of\", \"Photo of\" "
    "or \"Picture of\"."
)
USER_PROMPT = "Describe the contents of this image for alt text purposes."


def build_request(image_url: str, language: str, model: str = DEFAULT_MODEL) -> Dict[str, Any]:
    """Chat-completion payload asking for alt text of one image."""
    system_prompt = SYSTEM_PROMPT.format(language=language, limit=MAX_ALT_TEXT_LENGTH)
    return {
        "model": model,
        "messages": [
            {
                "role": "system",
                "content": [{"type": "text", "text": system_prompt}],
            },
            {
                "role": "user",
                "content": [
                    {"type": "text", "text": USER_PROMPT},
                    {"type": "image_url", "image_url": {"url": image_url}},
                ],
            },
        ],
        "max_tokens": MAX_OUTPUT_TOKENS,
    }


def sanitize_payload(payload: Dict[str, Any]) -> Dict[str, Any]:
    """Copy of ``payload`` safe for debug output: image URLs become their length."""
    messages = []
    for m in payload.get("messages", []):
        content = m.get("content")
        if isinstance(content, list):
            parts = []
            for c in content:
                t = c.get("type")
                if t == "image_url":
                    url = c.get("image_url", {}).get("url", "")
                    parts.append({"type": "image_url", "len": len(url)})
                else:
                    txt = c.get("text") or ""
                    parts.append({"type": t, "text_snip": txt[:200]})
            messages.append({"role": m.get("role"), "content": parts})
        else:
            messages.append(m)
    out = {k: v for k, v in payload.items() if k != "messages"}
    out["messages"] = messages
    return out
