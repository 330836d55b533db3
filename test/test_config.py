from datetime import date

import pytest

from config import MODE_ACTIONS, MODE_LEGACY, PLACEHOLDER_URL, AppConfig, load_config
from errors import ConfigurationError


def test_defaults_when_environment_is_empty():
    cfg = load_config({})
    assert cfg.api_url == PLACEHOLDER_URL
    assert cfg.mode == MODE_ACTIONS
    assert cfg.max_attempts == 3
    assert cfg.timeout_s == 15.0
    assert cfg.pdf_enabled is True
    assert cfg.is_placeholder


def test_values_read_from_environment():
    cfg = load_config({
        "SHIFTS_API_URL": " https://script.google.com/macros/s/x/exec ",
        "SHIFTS_API_MODE": "Legacy",
        "SHIFTS_API_MAX_ATTEMPTS": "5",
        "SHIFTS_API_TIMEOUT": "2.5",
        "INVOICE_PDF_ENABLED": "false",
        "LOG_LEVEL": "debug",
    })
    assert cfg.require_endpoint() == "https://script.google.com/macros/s/x/exec"
    assert cfg.mode == MODE_LEGACY
    assert cfg.max_attempts == 5
    assert cfg.timeout_s == 2.5
    assert cfg.pdf_enabled is False
    assert cfg.log_level == "DEBUG"


def test_bad_values_fall_back_to_defaults():
    cfg = load_config({"SHIFTS_API_MODE": "grpc", "SHIFTS_API_MAX_ATTEMPTS": "zero", "SHIFTS_API_TIMEOUT": "-1"})
    assert cfg.mode == MODE_ACTIONS
    assert cfg.max_attempts == 3
    assert cfg.timeout_s == 15.0


@pytest.mark.parametrize("url", ["", "   ", PLACEHOLDER_URL])
def test_placeholder_endpoint_raises(url):
    with pytest.raises(ConfigurationError):
        AppConfig(api_url=url).require_endpoint()


def test_today_is_a_date():
    assert isinstance(AppConfig().today(), date)
