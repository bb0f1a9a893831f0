from datetime import datetime, timezone

import pytest
from pydantic import ValidationError

from chillpoints.config import load_settings
from chillpoints.logging_config import build_logging_config
from chillpoints.services.i18n import Translator, format_date, format_relative, negotiate_locale


NOW = datetime(2026, 10, 17, 12, 0, tzinfo=timezone.utc)


def test_translator_interpolates_and_falls_back_to_key():
    t = Translator().t
    assert t("rewards.expiringPoints", count=40) == "40 points expiring soon"
    assert t("rewards.unknown") == "rewards.unknown"


def test_negotiate_locale_uses_quality_order():
    assert negotiate_locale("ar-EG,ar;q=0.9,en;q=0.8") == "en"
    assert negotiate_locale("fr;q=0.4, en-GB;q=0.9") == "en"
    assert negotiate_locale(None, default="en") == "en"


def test_format_date_ordinals():
    assert format_date(datetime(2026, 3, 2)) == "March 2nd, 2026"
    assert format_date(datetime(2026, 3, 11)) == "March 11th, 2026"
    assert format_date(datetime(2026, 3, 23)) == "March 23rd, 2026"


@pytest.mark.parametrize(
    "when, expected",
    [
        (datetime(2026, 10, 17, 12, 0, 10, tzinfo=timezone.utc), "in less than a minute"),
        (datetime(2026, 10, 17, 15, 0, tzinfo=timezone.utc), "in about 3 hours"),
        (datetime(2026, 10, 15, 12, 0, tzinfo=timezone.utc), "2 days ago"),
        (datetime(2027, 1, 15, 12, 0), "in 3 months"),
    ],
)
def test_format_relative(when, expected):
    assert format_relative(when, NOW) == expected


def test_settings_defaults():
    settings = load_settings({})

    assert settings.api.base_url == "http://localhost:5000"
    assert settings.api.retries == 0
    assert settings.cache.stale_seconds == 900
    assert "http://localhost:3000" in settings.ui.cors_origins


def test_settings_from_environment():
    settings = load_settings(
        {
            "CHILLPOINTS_API_BASE_URL": "https://api.staychill.test/",
            "CHILLPOINTS_API_RETRIES": "2",
            "CHILLPOINTS_CORS_ORIGINS": "https://staychill.test, https://admin.staychill.test",
            "CHILLPOINTS_LOG_LEVEL": "debug",
        }
    )

    assert settings.api.base_url == "https://api.staychill.test"
    assert settings.api.retries == 2
    assert settings.ui.cors_origins == ["https://staychill.test", "https://admin.staychill.test"]
    assert settings.log_level == "DEBUG"


@pytest.mark.parametrize(
    "env",
    [
        {"CHILLPOINTS_API_BASE_URL": "ftp://nope"},
        {"CHILLPOINTS_API_TIMEOUT": "0"},
        {"CHILLPOINTS_LOG_LEVEL": "loud"},
    ],
)
def test_invalid_settings_fail_at_load(env):
    with pytest.raises(ValidationError):
        load_settings(env)


def test_session_limits_from_environment():
    settings = load_settings({"CHILLPOINTS_MAX_SESSIONS": "5", "CHILLPOINTS_SESSION_IDLE_SECONDS": "90"})

    assert settings.cache.max_sessions == 5
    assert settings.cache.session_idle_seconds == 90


def test_logging_config_sets_app_level_and_quiets_transport():
    config = build_logging_config("debug")

    assert config["loggers"]["chillpoints"]["level"] == "DEBUG"
    assert config["loggers"]["urllib3"]["level"] == "WARNING"
    assert config["handlers"]["console"]["stream"] == "ext://sys.stdout"
