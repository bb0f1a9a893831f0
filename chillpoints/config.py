import os

from dotenv import load_dotenv
from pydantic import BaseModel, Field, field_validator

# Load .env file with explicit UTF-8 encoding
load_dotenv(encoding="utf-8")


DEFAULT_CORS_ORIGINS = [
    "http://localhost:3000",
    "https://localhost:3000",
    "http://127.0.0.1:3000",
    "https://127.0.0.1:3000",
]


class ApiSettings(BaseModel):
    base_url: str = "http://localhost:5000"
    timeout_seconds: float = Field(default=10.0, gt=0)
    retries: int = Field(default=0, ge=0, le=5)
    retry_backoff_seconds: float = Field(default=1.0, ge=0)
    slow_request_ms: int = Field(default=500, ge=0)

    @field_validator("base_url")
    @classmethod
    def _strip_trailing_slash(cls, v: str) -> str:
        v = v.strip()
        if not v.startswith(("http://", "https://")):
            raise ValueError("base_url must be an http(s) URL")
        return v.rstrip("/")


class CacheSettings(BaseModel):
    stale_seconds: float = Field(default=15 * 60, ge=0)
    max_sessions: int = Field(default=200, ge=1)
    session_idle_seconds: float = Field(default=30 * 60, gt=0)


class UiSettings(BaseModel):
    default_locale: str = "en"
    cors_origins: list[str] = Field(default_factory=lambda: list(DEFAULT_CORS_ORIGINS))


class Settings(BaseModel):
    api: ApiSettings = Field(default_factory=ApiSettings)
    cache: CacheSettings = Field(default_factory=CacheSettings)
    ui: UiSettings = Field(default_factory=UiSettings)
    log_level: str = "INFO"

    @field_validator("log_level")
    @classmethod
    def _known_level(cls, v: str) -> str:
        v = v.upper()
        if v not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"unknown log level: {v}")
        return v


def _env(name: str):
    value = os.getenv(name)
    if value is None or value.strip() == "":
        return None
    return value.strip()


def load_settings(environ: dict | None = None) -> Settings:
    """
    Build Settings from CHILLPOINTS_* environment variables.
    Unset variables keep their defaults; bad values raise ValidationError.
    """
    get = (lambda k: (environ.get(k) or None)) if environ is not None else _env

    api = {
        "base_url": get("CHILLPOINTS_API_BASE_URL"),
        "timeout_seconds": get("CHILLPOINTS_API_TIMEOUT"),
        "retries": get("CHILLPOINTS_API_RETRIES"),
        "retry_backoff_seconds": get("CHILLPOINTS_API_RETRY_BACKOFF"),
        "slow_request_ms": get("CHILLPOINTS_SLOW_REQUEST_MS"),
    }
    cache = {
        "stale_seconds": get("CHILLPOINTS_CACHE_STALE_SECONDS"),
        "max_sessions": get("CHILLPOINTS_MAX_SESSIONS"),
        "session_idle_seconds": get("CHILLPOINTS_SESSION_IDLE_SECONDS"),
    }
    ui = {"default_locale": get("CHILLPOINTS_DEFAULT_LOCALE")}

    origins = get("CHILLPOINTS_CORS_ORIGINS")
    if origins:
        ui["cors_origins"] = [o.strip() for o in origins.split(",") if o.strip()]

    data = {
        "api": {k: v for k, v in api.items() if v is not None},
        "cache": {k: v for k, v in cache.items() if v is not None},
        "ui": {k: v for k, v in ui.items() if v is not None},
    }
    log_level = get("CHILLPOINTS_LOG_LEVEL")
    if log_level:
        data["log_level"] = log_level

    return Settings.model_validate(data)
