"""
tests/test_config.py -- Config selection, AuthSettings construction and startup checks.
"""

from __future__ import annotations

from datetime import timedelta

import pytest

from api import create_app
from api.config import (
    DEV_JWT_SECRET,
    DevelopmentConfig,
    ProductionConfig,
    TestingConfig,
    get_config,
)
from services.exceptions import ConfigFailure
from services.settings import AuthSettings


class TestGetConfig:
    @pytest.mark.parametrize(
        "name, expected",
        [
            ("prod", ProductionConfig),
            ("Production", ProductionConfig),
            ("test", TestingConfig),
            ("testing", TestingConfig),
            ("dev", DevelopmentConfig),
            ("anything-else", DevelopmentConfig),
        ],
    )
    def test_by_name(self, name, expected) -> None:
        assert get_config(name) is expected

    def test_falls_back_to_app_env(self, monkeypatch) -> None:
        monkeypatch.setenv("APP_ENV", "prod")
        assert get_config(None) is ProductionConfig


class TestAuthSettings:
    def test_defaults(self) -> None:
        settings = AuthSettings.from_mapping({"JWT_SECRET": "s3cret"})
        assert settings.access_ttl == timedelta(minutes=15)
        assert settings.refresh_ttl == timedelta(days=7)
        assert settings.access_expires_in == 900
        assert settings.revoke_sessions_on_reuse is False
        assert settings.hash_time_cost is None

    def test_reads_durations_and_cost(self) -> None:
        settings = AuthSettings.from_mapping(
            {
                "JWT_SECRET": "s3cret",
                "ACCESS_TOKEN_EXPIRY": "5m",
                "REFRESH_TOKEN_EXPIRY": "1h30m",
                "PASSWORD_HASH_TIME_COST": "4",
                "REVOKE_SESSIONS_ON_REUSE": "true",
            }
        )
        assert settings.access_expires_in == 300
        assert settings.refresh_ttl == timedelta(hours=1, minutes=30)
        assert settings.hash_time_cost == 4
        assert settings.revoke_sessions_on_reuse is True

    def test_unparseable_duration_falls_back(self, caplog) -> None:
        settings = AuthSettings.from_mapping(
            {"JWT_SECRET": "s3cret", "REFRESH_TOKEN_EXPIRY": "a week"}
        )
        assert settings.refresh_ttl == timedelta(days=7)
        assert "REFRESH_TOKEN_EXPIRY" in caplog.text

    @pytest.mark.parametrize("secret", [None, ""])
    def test_secret_required(self, secret) -> None:
        with pytest.raises(ConfigFailure):
            AuthSettings.from_mapping({"JWT_SECRET": secret})

    def test_frozen(self) -> None:
        settings = AuthSettings(secret="s3cret")
        with pytest.raises(AttributeError):
            settings.secret = "other"


class TestCreateApp:
    def test_testing_app_wires_session_manager(self, db) -> None:
        app = create_app("test")
        manager = app.extensions["session_manager"]
        assert manager.settings.secret == TestingConfig.JWT_SECRET
        assert manager.settings.access_expires_in == 900

    def test_production_refuses_dev_secret(self, db) -> None:
        with pytest.raises(ConfigFailure):
            create_app("prod", overrides={"JWT_SECRET": DEV_JWT_SECRET})

    def test_production_refuses_missing_secret(self, db) -> None:
        with pytest.raises(ConfigFailure):
            create_app("prod", overrides={"JWT_SECRET": ""})

    def test_overrides_reach_settings(self, db) -> None:
        app = create_app("test", overrides={"ACCESS_TOKEN_EXPIRY": "1h"})
        assert app.extensions["session_manager"].settings.access_expires_in == 3600

    def test_root(self, db) -> None:
        resp = create_app("test").test_client().get("/")
        assert resp.status_code == 200
        assert resp.get_json()["health"] == "/api/v1/health"


class TestBooleanFlags:
    @pytest.mark.parametrize("raw", ["on", "yes", "1", "True"])
    def test_reuse_flag_spellings(self, raw) -> None:
        settings = AuthSettings.from_mapping({"JWT_SECRET": "s3cret", "REVOKE_SESSIONS_ON_REUSE": raw})
        assert settings.revoke_sessions_on_reuse is True

    def test_reuse_flag_default_off(self) -> None:
        assert TestingConfig.REVOKE_SESSIONS_ON_REUSE is False
