"""Test CalculatorSettings and logging configuration."""
import logging

from pydantic import ValidationError
import pytest

from infix_calculator.common.config import MAX_TOKENS, CalculatorSettings
from infix_calculator.common.logger import configure_logging, logger


def test_defaults():
    settings = CalculatorSettings()
    assert settings.max_tokens == MAX_TOKENS == 100
    assert settings.log_level == "WARNING"
    assert str(settings.host) == "127.0.0.1"
    assert settings.port == 9000


def test_from_env_overrides():
    settings = CalculatorSettings.from_env({
        "INFIX_CALC_MAX_TOKENS": "250",
        "INFIX_CALC_LOG_LEVEL": "DEBUG",
        "INFIX_CALC_PORT": "9100",
        "UNRELATED": "x",
    })
    assert settings.max_tokens == 250
    assert settings.log_level == "DEBUG"
    assert settings.port == 9100


def test_from_env_unbounded_tokens():
    assert CalculatorSettings.from_env({"INFIX_CALC_MAX_TOKENS": "none"}).max_tokens is None


@pytest.mark.parametrize("environ", [
    {"INFIX_CALC_MAX_TOKENS": "0"},
    {"INFIX_CALC_PORT": "70000"},
    {"INFIX_CALC_HOST": "999.999.999.999"},
])
def test_from_env_invalid(environ):
    with pytest.raises(ValidationError):
        CalculatorSettings.from_env(environ)


def test_from_env_reads_os_environ(monkeypatch):
    monkeypatch.setenv("INFIX_CALC_MAX_TOKENS", "7")
    assert CalculatorSettings.from_env().max_tokens == 7


def test_configure_logging():
    previous = logger.level
    try:
        configure_logging("debug")
        assert logger.level == logging.DEBUG
        configure_logging(logging.ERROR)
        assert logger.level == logging.ERROR
        with pytest.raises(ValueError):
            configure_logging("chatty")
    finally:
        logger.setLevel(previous)


def test_log_level_is_normalized():
    assert CalculatorSettings(log_level=" info ").log_level == "INFO"


@pytest.mark.parametrize("level", ["foo", "", "verbose"])
def test_unknown_log_level_rejected(level):
    with pytest.raises(ValidationError):
        CalculatorSettings(log_level=level)
    with pytest.raises(ValidationError):
        CalculatorSettings.from_env({"INFIX_CALC_LOG_LEVEL": level})


def test_with_overrides_validates():
    settings = CalculatorSettings()
    assert settings.with_overrides(max_tokens=5, log_level="debug").log_level == "DEBUG"
    with pytest.raises(ValidationError):
        settings.with_overrides(log_level="foo")
    with pytest.raises(ValidationError):
        settings.with_overrides(max_tokens=0)
