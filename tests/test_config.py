from __future__ import annotations

import importlib

import pytest

from config import get_settings_module


@pytest.mark.parametrize(
    "env,expected",
    [
        ("production", "config.production"),
        ("PROD", "config.production"),
        ("testing", "config.testing"),
        ("test", "config.testing"),
        ("staging", "config.development"),
    ],
)
def test_settings_module_by_name(env, expected):
    assert get_settings_module(env) == expected


def test_settings_module_from_app_env(monkeypatch):
    monkeypatch.setenv("APP_ENV", "testing")

    settings = importlib.import_module(get_settings_module())

    assert settings.TESTING is True
    assert settings.GROQ_API_KEY == ""


def test_default_is_development(monkeypatch):
    monkeypatch.delenv("APP_ENV", raising=False)

    assert get_settings_module() == "config.development"
