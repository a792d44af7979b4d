import pytest

import alt_text_enhancer.config as cfg_mod
from alt_text_enhancer import EnvSettingsProvider, ReplacePolicy, load_config, load_media_settings, sanitize_settings
from alt_text_enhancer.config import DEFAULT_ENDPOINT
from conftest import REAL_FIND_ENV_FILE


def test_defaults():
    s = sanitize_settings({})
    assert s.credential == ""
    assert s.model == "gpt-4o-mini"
    assert s.language == "en"
    assert s.batch_size == 10
    assert s.delay_ms == 1500
    assert s.replace_policy is ReplacePolicy.ONLY_MISSING
    assert s.max_attempts == 6
    assert s.endpoint == DEFAULT_ENDPOINT
    assert s.timeout == 60


@pytest.mark.parametrize("raw,expected", [("0", 1), (-5, 1), (51, 50), ("999", 50), ("abc", 10), (25, 25)])
def test_batch_size_clamped(raw, expected):
    assert sanitize_settings({"batch_size": raw}).batch_size == expected


@pytest.mark.parametrize("raw,expected", [(-100, 0), ("250", 250), ("x", 1500), (0, 0)])
def test_delay_clamped(raw, expected):
    assert sanitize_settings({"delay_ms": raw}).delay_ms == expected


@pytest.mark.parametrize(
    "raw,expected",
    [
        ("replace-all", ReplacePolicy.REPLACE_ALL),
        ("REPLACE_ALL", ReplacePolicy.REPLACE_ALL),
        ("only-missing", ReplacePolicy.ONLY_MISSING),
        ("greek-only", ReplacePolicy.ONLY_MISSING),
        (None, ReplacePolicy.ONLY_MISSING),
    ],
)
def test_replace_policy_normalized(raw, expected):
    assert sanitize_settings({"replace_mode": raw}).replace_policy is expected


@pytest.mark.parametrize("raw,expected", [(0, 6), (-1, 6), ("nope", 6), (3, 3)])
def test_max_attempts(raw, expected):
    assert sanitize_settings({"max_attempts": raw}).max_attempts == expected


def test_repr_hides_credential():
    s = sanitize_settings({"api_key": "sk-secret-value"})
    assert "sk-secret-value" not in repr(s)


def test_load_config_reads_dotenv(monkeypatch, tmp_path):
    env_file = tmp_path / ".env"
    env_file.write_text(
        "OPENAI_API_KEY=dot-env-key\nOPENAI_MODEL=test-model\nALT_TEXT_BATCH_SIZE=500\nALT_TEXT_REPLACE_MODE=replace-all\n"
    )
    monkeypatch.setattr(cfg_mod, "_find_env_file", lambda: str(env_file))

    s = load_config()
    assert s.credential == "dot-env-key"
    assert s.model == "test-model"
    assert s.batch_size == 50
    assert s.replace_policy is ReplacePolicy.REPLACE_ALL


def test_load_config_finds_env_in_parent(tmp_path, monkeypatch):
    root = tmp_path / "proj"
    sub = root / "a" / "b"
    sub.mkdir(parents=True)
    (root / ".env").write_text("OPENAI_API_KEY=parent-key\nALT_TEXT_LANGUAGE=EL\n")
    monkeypatch.chdir(sub)
    monkeypatch.setattr(cfg_mod, "_find_env_file", REAL_FIND_ENV_FILE)
    # Ensure find_dotenv returns empty to exercise the fallback search
    monkeypatch.setattr(cfg_mod, "find_dotenv", lambda *a, **k: "")

    s = load_config()
    assert s.credential == "parent-key"
    assert s.language == "el"


def test_missing_key_does_not_raise():
    assert load_config().credential == ""


def test_overrides_win_over_env(monkeypatch):
    monkeypatch.setenv("OPENAI_MODEL", "env-model")
    monkeypatch.setenv("ALT_TEXT_DELAY_MS", "10")
    s = load_config({"model": "cli-model", "delay_ms": None, "language": ""})
    assert s.model == "cli-model"
    assert s.delay_ms == 10
    assert s.language == "en"


def test_env_settings_provider(monkeypatch):
    monkeypatch.setenv("OPENAI_API_KEY", "k1")
    provider = EnvSettingsProvider({"batch_size": 3})
    s = provider.get_settings()
    assert s.credential == "k1"
    assert s.batch_size == 3


def test_media_settings(monkeypatch):
    monkeypatch.setenv("MEDIA_BASE_URL", "https://cdn.example.com/media")
    monkeypatch.setenv("IMAGE_MAX_SIZE", "256")
    m = load_media_settings()
    assert m.base_url == "https://cdn.example.com/media"
    assert m.image_max_size == 256
    assert m.image_quality == 90
    assert load_media_settings({"base_url": "https://other"}).base_url == "https://other"
