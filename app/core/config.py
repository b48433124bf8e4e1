import secrets

from pydantic_settings import BaseSettings


def _generate_dev_secret() -> str:
    """Generate a random secret for local development only."""
    return secrets.token_hex(32)


class Settings(BaseSettings):
    # App
    app_name: str = "ChapterFlux"
    environment: str = "development"  # development, production
    log_level: str = ""  # DEBUG, INFO, WARNING, ERROR, CRITICAL (empty = auto based on environment)
    log_to_file: bool = True  # Enable file logging

    # Database (SQLite for local dev, PostgreSQL for production)
    database_url: str = "sqlite:///./chapterflux.db"

    # JWT: no default; must be set via SECRET_KEY env var in production.
    # In development, a random key is generated per-process if not set.
    secret_key: str = ""
    algorithm: str = "HS256"
    access_token_expire_minutes: int = 60 * 24

    # Frontend
    frontend_url: str = "http://localhost:3000"

    # CORS (comma-separated origins, empty = local dev defaults)
    allowed_origins: str = ""

    # Rate limiting (auth endpoints)
    rate_limit_enabled: bool = True

    # Audit logging
    audit_log_enabled: bool = True

    # Reading analytics
    baseline_reading_wpm: int = 150  # average reader used for "hours saved"
    weekly_goal_target: int = 5  # documents per week
    streak_lookback_days: int = 365

    # Data export
    data_export_ttl_hours: int = 24
    data_export_cleanup_minutes: int = 60

    class Config:
        env_file = ".env"
        extra = "ignore"


settings = Settings()

# Validate secret key
_KNOWN_WEAK_KEYS = {"your-secret-key-change-in-production", "changeme", "secret", ""}

if settings.secret_key in _KNOWN_WEAK_KEYS:
    if settings.environment == "production":
        raise RuntimeError(
            "SECRET_KEY is not set or uses a known weak default. "
            "Set a strong SECRET_KEY env var (e.g. `openssl rand -hex 32`)."
        )
    # Development: generate a random key so the app can start
    settings.secret_key = _generate_dev_secret()
