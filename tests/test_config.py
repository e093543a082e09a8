import pytest

from shoe_dryer import config


def test_load_settings_reads_environment(monkeypatch):
    monkeypatch.setenv("GEMINI_API_KEY", "abc")
    monkeypatch.setenv("GEMINI_MODEL", "gemini-2.5-pro")
    monkeypatch.setenv("LOG_LEVEL", "debug")
    monkeypatch.setenv("CORS_ENABLED", "false")
    monkeypatch.setenv("MAX_FILE_SIZE_MB", "5")

    settings = config.load_settings()

    assert settings.api_key == "abc"
    assert settings.model_name == "gemini-2.5-pro"
    assert settings.log_level == "DEBUG"
    assert settings.cors_enabled is False
    assert settings.max_file_size_bytes == 5 * 1024 * 1024


def test_defaults_and_key_alias(monkeypatch):
    for name in ("GEMINI_API_KEY", "GEMINI_MODEL", "LOG_LEVEL", "CORS_ENABLED", "MAX_FILE_SIZE_MB"):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("LLM_API_KEY", "alias")

    settings = config.load_settings()

    assert settings.api_key == "alias"
    assert settings.model_name == config.DEFAULT_MODEL == "gemini-2.5-flash"
    assert settings.cors_enabled is True


def test_missing_api_key_fails_startup(monkeypatch):
    monkeypatch.delenv("GEMINI_API_KEY", raising=False)
    monkeypatch.delenv("LLM_API_KEY", raising=False)

    settings = config.load_settings()

    assert settings.api_key is None
    with pytest.raises(RuntimeError, match="GEMINI_API_KEY"):
        config.validate_startup(settings)


def test_present_api_key_passes_startup():
    config.validate_startup(config.Settings(api_key="abc"))
