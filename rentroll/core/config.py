"""
RentRoll Application Configuration
Loads settings from .env file using Pydantic v2 with BaseSettings
"""
from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import List
from functools import lru_cache


class Settings(BaseSettings):
    """Application settings loaded from environment variables"""

    # ==================== Project Info ====================
    PROJECT_NAME: str = "RentRoll API"
    PROJECT_DESCRIPTION: str = "Commercial leasing back office - contracts, tiered rent, occupancy and revenue"
    VERSION: str = "1.0.0"
    API_PREFIX: str = "/api"

    # ==================== Database ====================
    DATABASE_URL: str = "sqlite+aiosqlite:///rentroll_local.db"
    DB_ECHO: bool = False
    DATABASE_POOL_SIZE: int = 5
    DATABASE_MAX_OVERFLOW: int = 10
    DATABASE_POOL_RECYCLE: int = 3600

    # ==================== Document Storage (Supabase) ====================
    SUPABASE_URL: str = ""
    SUPABASE_KEY: str = ""
    STORAGE_BUCKET: str = "rent-roll-documents"
    SIGNED_URL_TTL_SECONDS: int = 3600  # 1 hour

    # ==================== Contract Rules ====================
    DEFAULT_EXPIRING_DAYS: int = 30
    EXPIRY_ALERT_THRESHOLDS: List[int] = [90, 60, 30]
    UNIT_OF_WORK_TIMEOUT_SECONDS: float = 30.0

    # ==================== Scheduler ====================
    SCHEDULER_ENABLED: bool = False
    EXPIRY_CHECK_HOUR: int = 6
    EXPIRY_CHECK_MINUTE: int = 0

    # ==================== CORS ====================
    ALLOWED_ORIGINS: List[str] = [
        "http://localhost:3000",
        "http://localhost:5173",
    ]

    # ==================== Features ====================
    DEBUG: bool = False
    TESTING: bool = False
    LOG_LEVEL: str = "INFO"
    RUN_MIGRATIONS: bool = False

    # ==================== Configuration Loading ====================
    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=True,
        extra="allow",  # Allow extra environment variables
        validate_default=True,
    )

    # ==================== Properties ====================
    @property
    def database_url_async(self) -> str:
        """Convert sync database URL to its async driver equivalent"""
        url = self.DATABASE_URL
        if url.startswith("postgres://"):
            url = url.replace("postgres://", "postgresql://", 1)
        url = url.replace("postgresql+psycopg2://", "postgresql+asyncpg://")
        if url.startswith("postgresql://"):
            url = url.replace("postgresql://", "postgresql+asyncpg://", 1)
        if url.startswith("sqlite:///"):
            url = url.replace("sqlite:///", "sqlite+aiosqlite:///", 1)
        return url

    @property
    def is_sqlite(self) -> bool:
        return self.database_url_async.startswith("sqlite")

    @property
    def storage_configured(self) -> bool:
        """Check if document storage is properly configured"""
        return bool(self.SUPABASE_URL and self.SUPABASE_KEY)


# ==================== Settings Singleton ====================
@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance"""
    return Settings()


# Create default settings instance
settings = get_settings()


# ==================== Helper Functions ====================
def is_production() -> bool:
    """Check if running in production"""
    return not settings.DEBUG and not settings.TESTING and not settings.is_sqlite


def is_testing() -> bool:
    """Check if running in testing mode"""
    return settings.TESTING
