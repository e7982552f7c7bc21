import logging

import pytest
from pydantic import ValidationError

from sunforge.config.log import load_log_config, setup_loggers
from sunforge.config.settings import Settings, get_gemini_api_key


def test_defaults_from_settings_env():
    settings = Settings()

    assert settings.API_PORT == 3000
    assert settings.INTAKE_MAX_DIMENSION == 2048
    assert settings.INTAKE_JPEG_QUALITY == 85
    assert settings.INFERENCE_PROVIDER == "gemini"
    assert settings.UNKNOWN_ERROR_MESSAGE_LENGTH == 120
    assert settings.PROGRESS_CAP == 95


def test_environment_overrides_settings(monkeypatch):
    monkeypatch.setenv("SUNFORGE_INTAKE_MAX_DIMENSION", "1024")
    monkeypatch.setenv("SUNFORGE_INSPECTION_LOG_LEVEL", "DEBUG")

    settings = Settings()

    assert settings.INTAKE_MAX_DIMENSION == 1024
    assert settings.LOG_LEVELS["inspection"] == "DEBUG"


@pytest.mark.parametrize("quality", ["0", "100"])
def test_invalid_jpeg_quality_is_rejected(monkeypatch, quality):
    monkeypatch.setenv("SUNFORGE_INTAKE_JPEG_QUALITY", quality)

    with pytest.raises(ValidationError):
        Settings()


def test_gemini_api_key_is_read_from_environment(monkeypatch):
    monkeypatch.setenv("GEMINI_API_KEY", "secret")

    assert get_gemini_api_key() == "secret"


def test_log_config_declares_every_logger():
    log_config = load_log_config()

    for logger_name in Settings().LOG_LEVELS:
        assert logger_name in log_config["loggers"]


def test_setup_loggers_applies_environment_levels(monkeypatch):
    monkeypatch.setenv("SUNFORGE_INTAKE_LOG_LEVEL", "error")

    setup_loggers()

    assert logging.getLogger("intake").level == logging.ERROR
    assert logging.getLogger("inspection").level == logging.INFO
