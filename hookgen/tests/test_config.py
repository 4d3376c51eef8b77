"""Tests for environment-driven settings."""
from pathlib import Path

import pytest
from pydantic import ValidationError

from hookgen.config import Settings


def test_defaults_match_hook_format():
    settings = Settings()
    assert (settings.width, settings.height) == (1080, 1920)
    assert settings.frame_count == 210
    assert settings.tts_voice == "Autonoe"
    assert settings.script_model == "gemini-2.0-flash"


def test_from_env(monkeypatch, tmp_path):
    monkeypatch.setenv("GEMINI_API_KEY", "test-key")
    monkeypatch.setenv("HOOK_FPS", "24")
    monkeypatch.setenv("HOOK_DURATION_SECONDS", "5")
    monkeypatch.setenv("GEMINI_TTS_TEMPERATURE", "0.9")
    monkeypatch.setenv("OUTPUT_DIR", str(tmp_path))
    monkeypatch.delenv("PORT", raising=False)

    settings = Settings.from_env()

    assert settings.gemini_api_key == "test-key"
    assert settings.frame_count == 120
    assert settings.tts_temperature == 0.9
    assert settings.output_dir == Path(tmp_path)
    assert settings.port == 8080


def test_invalid_fps_rejected(monkeypatch):
    monkeypatch.setenv("HOOK_FPS", "0")
    with pytest.raises(ValidationError):
        Settings.from_env()
