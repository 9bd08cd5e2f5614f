"""Testes de Settings e validações de configuração."""

from __future__ import annotations

import pytest

from ivr_navigator.config.settings import Settings, get_settings


class TestDefaults:
    def test_default_values(self) -> None:
        settings = Settings()
        assert settings.service_name == "ivr_navigator"
        assert settings.traversal_mode == "scripted"
        assert settings.max_steps == 20
        assert settings.inter_leg_delay_seconds == 1.0
        assert settings.step_delay_seconds == 2.0
        assert settings.advisor_enabled is False

    def test_urls(self) -> None:
        settings = Settings(ivr_base_url="http://ivr.test/")
        assert settings.ivr_voice_url == "http://ivr.test/twilio/v1/voice"
        assert settings.ivr_status_url == "http://ivr.test/twilio/v1/voice/status"

    def test_env_override(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("MAX_STEPS", "7")
        monkeypatch.setenv("TRAVERSAL_MODE", "exploratory")
        settings = Settings()
        assert settings.max_steps == 7
        assert settings.traversal_mode == "exploratory"

    def test_environment_flags(self) -> None:
        assert Settings(environment="prod").is_production
        assert not Settings(environment="local").is_production


class TestValidation:
    """Métodos validate_* devolvem listas de erros (vazia = OK)."""

    def test_defaults_are_valid(self) -> None:
        settings = Settings()
        assert settings.validate_traversal_config() == []
        assert settings.validate_advisor_config() == []
        assert settings.validate_endpoint_config() == []

    def test_invalid_mode(self) -> None:
        errors = Settings(traversal_mode="random").validate_traversal_config()
        assert len(errors) == 1
        assert "TRAVERSAL_MODE" in errors[0]

    def test_invalid_budget_and_delays(self) -> None:
        errors = Settings(max_steps=0, inter_leg_delay_seconds=-1).validate_traversal_config()
        assert len(errors) == 2

    def test_flow_rx_number_must_be_digits(self) -> None:
        errors = Settings(flow_rx_number="12a4").validate_traversal_config()
        assert errors == ["FLOW_RX_NUMBER deve conter apenas dígitos"]

    def test_assisted_requires_advisor(self) -> None:
        errors = Settings(traversal_mode="assisted").validate_advisor_config()
        assert errors == ["TRAVERSAL_MODE=assisted requer ADVISOR_ENABLED=true"]
        assert Settings(traversal_mode="assisted", advisor_enabled=True).validate_advisor_config() == []

    def test_endpoint_url_scheme(self) -> None:
        assert Settings(ivr_base_url="ivr.test").validate_endpoint_config()

    def test_production_requires_https(self) -> None:
        settings = Settings(environment="production", ivr_base_url="http://ivr.test")
        assert settings.validate_endpoint_config() == ["IVR_BASE_URL deve usar https em production"]


class TestGetSettings:
    def test_is_cached(self) -> None:
        get_settings.cache_clear()
        assert get_settings() is get_settings()
        get_settings.cache_clear()
