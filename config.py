import os
from dataclasses import dataclass


def _get_env(name: str, default: str | None = None) -> str:
    value = os.getenv(name, default)
    if value is None:
        raise RuntimeError(f"Missing required environment variable: {name}")
    return value


def _get_int(name: str, default: str) -> int:
    raw = _get_env(name, default)
    try:
        return int(raw)
    except ValueError as exc:
        raise RuntimeError(f"{name} must be an integer, got {raw!r}") from exc


@dataclass(frozen=True)
class Settings:
    # App
    environment: str = _get_env("ENVIRONMENT", "development")
    log_level: str = _get_env("LOG_LEVEL", "INFO")
    host: str = _get_env("HOST", "127.0.0.1")
    port: int = _get_int("PORT", "8000")

    # DB
    database_url: str = _get_env("DATABASE_URL")

    # AI coach
    openai_api_key: str = _get_env("OPENAI_API_KEY", "")
    openai_model: str = _get_env("OPENAI_MODEL", "gpt-4-turbo-preview")
    openai_base_url: str = _get_env("OPENAI_BASE_URL", "https://api.openai.com/v1")
    openai_timeout_seconds: int = _get_int("OPENAI_TIMEOUT_SECONDS", "30")

    # Billing
    stripe_secret_key: str = _get_env("STRIPE_SECRET_KEY", "")
    stripe_webhook_secret: str = _get_env("STRIPE_WEBHOOK_SECRET", "")

    # Admin endpoints are disabled while the token is empty
    admin_api_token: str = _get_env("ADMIN_API_TOKEN", "")

    # Scheduler
    scheduler_enabled: bool = _get_env("SCHEDULER_ENABLED", "true").lower() == "true"
    scheduler_timezone: str = _get_env("SCHEDULER_TZ", "UTC")
    checkin_hour: int = _get_int("CHECKIN_HOUR", "9")
    weekly_reflection_day: str = _get_env("WEEKLY_REFLECTION_DAY", "mon")

    def __post_init__(self):
        if not 0 <= self.checkin_hour <= 23:
            raise RuntimeError("CHECKIN_HOUR must be between 0 and 23")

    @property
    def billing_configured(self) -> bool:
        return bool(self.stripe_secret_key and self.stripe_webhook_secret)


settings = Settings()
