import logging

from wavcue.logging_utils import resolve_level


def test_explicit_level_wins(monkeypatch):
    monkeypatch.setenv("WAV_CUE_LOG_LEVEL", "ERROR")
    assert resolve_level("debug") == logging.DEBUG


def test_env_fallbacks(monkeypatch):
    monkeypatch.delenv("WAV_CUE_LOG_LEVEL", raising=False)
    monkeypatch.setenv("LOG_LEVEL", "warning")
    assert resolve_level() == logging.WARNING
    monkeypatch.setenv("WAV_CUE_LOG_LEVEL", "ERROR")
    assert resolve_level() == logging.ERROR


def test_unknown_name_defaults_to_info(monkeypatch):
    monkeypatch.delenv("WAV_CUE_LOG_LEVEL", raising=False)
    monkeypatch.delenv("LOG_LEVEL", raising=False)
    assert resolve_level("loud") == logging.INFO
    assert resolve_level() == logging.INFO
