"""Settings parsing and production guard tests."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from pictoria.config import Settings


def test_defaults() -> None:
    settings = Settings(_env_file=None, site_url=None)

    assert settings.replicate_model_owner == "gabaal"
    assert settings.training_steps == 1000
    assert settings.trigger_word == "ohwx"
    assert settings.training_bucket == "training_data"
    assert settings.images_bucket == "generated_images"
    assert settings.signed_url_expiry == 3600


def test_environment_overrides(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("TRAINING_STEPS", "1200")
    monkeypatch.setenv("CORS_ORIGINS", "https://a.test, https://b.test")

    settings = Settings(_env_file=None)

    assert settings.training_steps == 1200
    assert settings.cors_origin_list == ["https://a.test", "https://b.test"]


def test_site_url_takes_precedence_over_tunnel_host() -> None:
    settings = Settings(_env_file=None, site_url="https://pictoria.ai/", ngrok_host="https://abc.ngrok.app")
    assert settings.webhook_base_url == "https://pictoria.ai"

    tunnel_only = Settings(_env_file=None, site_url=None, ngrok_host="https://abc.ngrok.app")
    assert tunnel_only.webhook_base_url == "https://abc.ngrok.app"


def test_production_requires_https_webhook_base() -> None:
    with pytest.raises(ValidationError):
        Settings(_env_file=None, env="production", site_url=None, ngrok_host=None)
    with pytest.raises(ValidationError):
        Settings(_env_file=None, env="production", site_url="http://pictoria.ai")

    settings = Settings(_env_file=None, env="production", site_url="https://pictoria.ai")
    assert settings.docs_enabled is False
