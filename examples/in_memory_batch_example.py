"""Small example showing `BatchOrchestrator` with an in-memory library and a dummy API.

Run directly to see output:
    python examples/in_memory_batch_example.py
"""
import json

from alt_text_enhancer import BatchOrchestrator, InMemoryInventory, MediaItem, ResilientInvoker, sanitize_settings


class DummyResponse:
    def __init__(self, status_code, text="", headers=None):
        self.status_code = status_code
        self.text = text
        self.headers = headers or {}


class DummySession:
    """Answers 429 once, then describes every image."""

    def __init__(self):
        self.calls = 0

    def post(self, url, headers=None, data=None, timeout=None):
        self.calls += 1
        if self.calls == 2:
            return DummyResponse(429, headers={"Retry-After": "1"})
        url = json.loads(data)["messages"][1]["content"][1]["image_url"]["url"]
        content = f"Image of the file at {url.rsplit('/', 1)[-1]}"
        return DummyResponse(200, json.dumps({"choices": [{"message": {"content": content}}]}))


def main():
    settings = sanitize_settings({"api_key": "demo", "delay_ms": 100})
    inventory = InMemoryInventory(
        [
            MediaItem("1", "https://example.com/beach.jpg"),
            MediaItem("2", "https://example.com/forest.jpg"),
            MediaItem("3", "https://example.com/logo.png", "Company logo"),
        ]
    )
    invoker = ResilientInvoker.from_settings(settings, session=DummySession())
    result = BatchOrchestrator(settings, inventory, invoker=invoker).run()

    print(result.summary())
    for item in inventory.items:
        print(f"{item.id}: {item.current_alt_text!r}")


if __name__ == "__main__":
    main()
