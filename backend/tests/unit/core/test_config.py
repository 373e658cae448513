from __future__ import annotations

from datetime import timedelta

import pytest
from accounts import create_app
from accounts.core.config import (
    DevelopmentConfig,
    ProductionConfig,
    TestingConfig,
    env_bool,
    get_config,
    parse_duration,
)
from accounts.services.tokens.dto import TokenConfig


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("15m", timedelta(minutes=15)),
        ("10d", timedelta(days=10)),
        ("2h", timedelta(hours=2)),
        ("1w", timedelta(weeks=1)),
        ("45s", timedelta(seconds=45)),
        ("3600", timedelta(seconds=3600)),
        (" 5 M ", timedelta(minutes=5)),
        (90, timedelta(seconds=90)),
        (timedelta(minutes=1), timedelta(minutes=1)),
    ],
)
def test_parse_duration_accepts_units(raw, expected):
    assert parse_duration(raw) == expected


@pytest.mark.parametrize("raw", ["", "ten minutes", "15x", "-5m", "1.5h"])
def test_parse_duration_rejects_garbage(raw):
    with pytest.raises(ValueError, match="Invalid duration"):
        parse_duration(raw)


def test_env_bool(monkeypatch):
    monkeypatch.setenv("SOME_FLAG", "Yes")
    assert env_bool("SOME_FLAG") is True
    monkeypatch.setenv("SOME_FLAG", "0")
    assert env_bool("SOME_FLAG", True) is False
    monkeypatch.delenv("SOME_FLAG")
    assert env_bool("SOME_FLAG", True) is True


@pytest.mark.parametrize(
    ("env", "cls"),
    [
        ("testing", TestingConfig),
        ("production", ProductionConfig),
        ("PRODUCTION ", ProductionConfig),
        ("nonsense", DevelopmentConfig),
    ],
)
def test_get_config_selects_class_from_app_env(monkeypatch, env, cls):
    monkeypatch.setenv("APP_ENV", env)
    assert get_config() is cls


class TestTokenConfigFromMapping:
    BASE = {
        "ACCESS_TOKEN_SECRET": "a" * 32,
        "REFRESH_TOKEN_SECRET": "r" * 32,
        "ACCESS_TOKEN_EXPIRY": "15m",
        "REFRESH_TOKEN_EXPIRY": "10d",
        "JWT_ISSUER": "channel-accounts",
    }

    def test_parses_lifetimes(self):
        cfg = TokenConfig.from_mapping(self.BASE)
        assert cfg.access_ttl == timedelta(minutes=15)
        assert cfg.refresh_ttl == timedelta(days=10)
        assert cfg.algorithm == "HS256"
        assert cfg.issuer == "channel-accounts"

    def test_repr_hides_secrets(self):
        cfg = TokenConfig.from_mapping(self.BASE)
        assert "a" * 32 not in repr(cfg)
        assert "r" * 32 not in repr(cfg)

    def test_rejects_shared_secret(self):
        with pytest.raises(ValueError, match="different secrets"):
            TokenConfig.from_mapping({**self.BASE, "REFRESH_TOKEN_SECRET": "a" * 32})

    def test_rejects_missing_secret(self):
        with pytest.raises(ValueError, match="must be set"):
            TokenConfig.from_mapping({**self.BASE, "ACCESS_TOKEN_SECRET": ""})

    def test_rejects_zero_lifetime(self):
        with pytest.raises(ValueError, match="positive"):
            TokenConfig.from_mapping({**self.BASE, "ACCESS_TOKEN_EXPIRY": "0m"})

    def test_rejects_placeholder_secret(self):
        with pytest.raises(ValueError, match="placeholder"):
            TokenConfig.from_mapping({**self.BASE, "REFRESH_TOKEN_SECRET": "CHANGE_ME_REFRESH"})


def test_create_app_refuses_production_without_secrets():
    class UnsetSecrets(ProductionConfig):
        ACCESS_TOKEN_SECRET = ""
        REFRESH_TOKEN_SECRET = ""
        SQLALCHEMY_DATABASE_URI = "sqlite:///:memory:"

    with pytest.raises(ValueError, match="must be set"):
        create_app(UnsetSecrets)
