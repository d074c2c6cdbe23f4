"""Application settings and environment variables."""

import os
from typing import Optional

from dotenv import load_dotenv

load_dotenv()  # Load environment variables from .env file


def _env_flag(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


class Settings:
    # Persistence
    PERSISTENCE_BACKEND: str = os.getenv("PERSISTENCE_BACKEND", "mysql")  # mysql, memory
    DB_HOST: str = os.getenv("DB_HOST", "localhost")
    DB_DATABASE: str = os.getenv("DB_NAME", "restaurant_db")
    DB_USER: str = os.getenv("DB_USER", "user")
    DB_PASSWORD: str = os.getenv("DB_PASSWORD", "password")

    # Email delivery
    EMAIL_BACKEND: str = os.getenv("EMAIL_BACKEND", "smtp")  # smtp, http
    SMTP_HOST: str = os.getenv("SMTP_HOST", "smtp.gmail.com")
    SMTP_PORT: int = int(os.getenv("SMTP_PORT", "587"))
    SMTP_SECURE: bool = _env_flag("SMTP_SECURE")
    SMTP_USER: str = os.getenv("SMTP_USER", "")
    SMTP_PASS: str = os.getenv("SMTP_PASS", "")
    SMTP_FROM: str = os.getenv("SMTP_FROM", "inventory@restaurant.com")
    SMTP_TIMEOUT: float = float(os.getenv("SMTP_TIMEOUT", "30"))

    EMAIL_API_BASE_URL: Optional[str] = os.getenv("EMAIL_API_BASE_URL")
    EMAIL_API_TOKEN: Optional[str] = os.getenv("EMAIL_API_TOKEN")

    # Alert recipients
    ADMIN_EMAIL: str = os.getenv("ADMIN_EMAIL", "admin@restaurant.com")
    MANAGER_EMAIL: str = os.getenv("MANAGER_EMAIL", "manager@restaurant.com")

    # Alerting behaviour
    ALERT_INTERVAL_MINUTES: float = float(os.getenv("ALERT_INTERVAL", "60"))
    ALERT_DEBOUNCE_SECONDS: float = float(os.getenv("ALERT_DEBOUNCE_SECONDS", "0.1"))
    ALERT_QUEUE_SIZE: int = int(os.getenv("ALERT_QUEUE_SIZE", "1000"))
    ENABLE_EMAIL_ALERTS: bool = _env_flag("ENABLE_EMAIL_ALERTS")
    ENABLE_REAL_TIME_ALERTS: bool = _env_flag("ENABLE_REAL_TIME_ALERTS")

    # Logging settings
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")  # INFO, DEBUG, WARNING, ERROR, CRITICAL


settings = Settings()
