"""
Environment configuration for the hostel allocation service.
Uses Pydantic's settings management to handle environment variables
with proper type validation and default values.
"""

import json
from functools import lru_cache
from pathlib import Path
from typing import List, Literal, Union

from dotenv import load_dotenv
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# Load environment variables from .env file if it exists
env_path = Path('.') / '.env'
load_dotenv(dotenv_path=env_path)


class Settings(BaseSettings):
    """Application settings with environment variable support"""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    # Application configuration
    APP_NAME: str = "Hostel Allocation Portal"
    API_VERSION: str = "v1"
    API_V1_STR: str = "/api/v1"
    DEBUG: bool = False
    ENVIRONMENT: str = "development"
    CORS_ORIGINS: List[str] = Field(default=["*"])

    # Document store
    STORE_BACKEND: Literal["memory", "sql"] = "memory"
    DATABASE_URL: str = "sqlite:///./hostel_portal.db"
    DATABASE_ECHO: bool = False
    MAX_LIST_LIMIT: int = 1000

    # Deadline sweep
    PAYMENT_CHECK_TOKEN: str = "default-secure-token"
    REVOKE_WINDOW_POLICY: Literal["deadline", "deadline_plus_grace"] = "deadline_plus_grace"

    # Settings resolver defaults. The allocation path historically fell back to
    # a week-long grace period with auto-revoke on, the admin settings screen to
    # a single day with auto-revoke off.
    SETTINGS_DEFAULT_PROFILE: Literal["allocation", "admin"] = "allocation"
    DEFAULT_PAYMENT_GRACE_PERIOD_HOURS: int = Field(default=168, ge=0)
    DEFAULT_MAX_ROOM_CAPACITY: int = Field(default=4, ge=1)

    # Hostel tree write discipline
    CONCURRENCY_MODE: Literal["none", "lock", "optimistic"] = "none"
    OPTIMISTIC_MAX_ATTEMPTS: int = Field(default=3, ge=1)

    # Background tasks
    CELERY_BROKER_URL: str = "redis://localhost:6379/0"
    CELERY_RESULT_BACKEND: str = "redis://localhost:6379/1"
    ENABLE_PERIODIC_TASKS: bool = True
    DEADLINE_SWEEP_CRON_HOUR: str = "2"
    DEADLINE_SWEEP_CRON_MINUTE: str = "0"

    # Monitoring and logging
    LOG_LEVEL: str = "INFO"
    LOG_DIR: str = "logs"
    LOG_TO_FILE: bool = False

    # Validators
    @field_validator('CORS_ORIGINS', mode='before')
    @classmethod
    def parse_cors_origins(cls, v: Union[str, List[str]]) -> List[str]:
        """Parse CORS_ORIGINS from string to list"""
        if isinstance(v, str):
            # Handle JSON string format from .env
            if v.startswith('[') and v.endswith(']'):
                try:
                    return json.loads(v)
                except json.JSONDecodeError:
                    pass
            return [origin.strip() for origin in v.split(",")]
        return v

    @field_validator('LOG_LEVEL')
    @classmethod
    def normalize_log_level(cls, v: str) -> str:
        return v.upper()

    def is_production(self) -> bool:
        """Check if running in production environment"""
        return self.ENVIRONMENT == "production"

    def is_development(self) -> bool:
        """Check if running in development environment"""
        return self.ENVIRONMENT == "development"


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance"""
    return Settings()


settings = get_settings()
