# sitevisits/core/config.py
import os
from typing import Optional
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import computed_field, field_validator
from dotenv import load_dotenv

load_dotenv()

class Settings(BaseSettings):
    PROJECT_NAME: str = "Site Visits"
    LOGGING_LEVEL: str = os.getenv("LOGGING_LEVEL", "INFO")
    PORT: int = 3000

    # --- Хранилище визитов ---
    # Без DATABASE_URL трекинг и админские агрегаты просто выключены
    DATABASE_URL: Optional[str] = None
    PGSSLMODE: Optional[str] = None
    SQL_ECHO: bool = False
    VISIT_QUEUE_SIZE: int = 1000

    # --- Админка ---
    ADMIN_TOKEN: Optional[str] = None

    # --- Статика сайта ---
    STATIC_DIR: Optional[str] = None

    # --- Telegram / skill-issue ---
    TELEGRAM_BOT_TOKEN: Optional[str] = None
    SKILL_ISSUE_ENABLED: bool = False
    SKILL_ISSUE_CHANCE: float = 0.3
    SKILL_ISSUE_COOLDOWN_MINUTES: float = 5

    @field_validator("DATABASE_URL", "ADMIN_TOKEN", "STATIC_DIR", "TELEGRAM_BOT_TOKEN", mode="before")
    @classmethod
    def _blank_to_none(cls, value):
        # Пустая переменная окружения == не задана
        if isinstance(value, str):
            value = value.strip()
            return value or None
        return value

    # --- URL для async-драйвера SQLAlchemy ---
    @computed_field(return_type=Optional[str])
    @property
    def ASYNC_DATABASE_URL(self) -> Optional[str]:
        """Railway/Heroku отдают postgres://, а SQLAlchemy нужен postgresql+asyncpg://."""
        url = self.DATABASE_URL
        if not url:
            return None
        for prefix in ("postgres://", "postgresql://"):
            if url.startswith(prefix):
                return "postgresql+asyncpg://" + url[len(prefix):]
        return url

    model_config = SettingsConfigDict(
        env_file='.env',
        env_file_encoding='utf-8',
        case_sensitive=False,
        extra='ignore'
    )

settings = Settings()
if not settings.DATABASE_URL:
    print("WARNING: DATABASE_URL is not set. Visit tracking and /admin analytics are disabled.")
if not settings.ADMIN_TOKEN:
    print("WARNING: ADMIN_TOKEN is not set. /admin endpoints will answer 500 until it is configured.")
