"""
Shiv Shiva Residency Application Configuration
Loads settings from .env file using Pydantic v2 with BaseSettings
"""
from dataclasses import dataclass
from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import List, Tuple
from functools import lru_cache


@dataclass(frozen=True)
class ReminderConfig:
    """Reminder scheduling rules handed explicitly to the reminder service"""
    enabled: bool = True
    reminder_days: Tuple[int, ...] = (3, 1)
    overdue_reminder_interval_days: int = 2
    max_reminders: int = 5
    auto_update_status: bool = True
    late_fee_percent: float = 5.0
    country_code: str = "91"
    residency_name: str = "Shiv Shiva Residency"


class Settings(BaseSettings):
    """Application settings loaded from environment variables"""

    # ==================== Project Info ====================
    PROJECT_NAME: str = "Shiv Shiva Residency API"
    PROJECT_DESCRIPTION: str = "PG Management - Rooms, Tenants, Billing and Reminders"
    VERSION: str = "1.0.0"

    # ==================== Database ====================
    DATABASE_URL: str = "sqlite:///residency_local.db"
    DATABASE_TIMEOUT_SECONDS: int = 10

    # ==================== CORS ====================
    ALLOWED_ORIGINS: List[str] = [
        "http://localhost:3000",
        "http://localhost:5173",
        "http://127.0.0.1:5173",
    ]

    # ==================== Billing ====================
    ELECTRICITY_RATE: float = 12.0  # per unit (kWh)
    BILL_DUE_DAYS: int = 10

    # ==================== Reminders ====================
    REMINDER_ENABLED: bool = True
    REMINDER_DAYS: List[int] = [3, 1]
    OVERDUE_REMINDER_INTERVAL_DAYS: int = 2
    MAX_REMINDERS: int = 5
    AUTO_UPDATE_OVERDUE_STATUS: bool = True
    LATE_FEE_PERCENT: float = 5.0
    WHATSAPP_COUNTRY_CODE: str = "91"

    # Background polling job
    REMINDER_SCHEDULER_ENABLED: bool = True
    REMINDER_POLL_MINUTES: int = 60

    # ==================== Residency details (receipts/messages) ====================
    RESIDENCY_NAME: str = "Shiv Shiva Residency"
    RESIDENCY_ADDRESS: str = ""
    RESIDENCY_PHONE: str = ""

    # ==================== Features ====================
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    # ==================== Configuration Loading ====================
    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=True,
        extra="allow",
        validate_default=True,
    )

    def reminder_config(self) -> ReminderConfig:
        """Build the reminder configuration handed to the reminder service"""
        days = tuple(sorted({d for d in self.REMINDER_DAYS if d > 0}, reverse=True))
        return ReminderConfig(
            enabled=self.REMINDER_ENABLED,
            reminder_days=days or (3, 1),
            overdue_reminder_interval_days=self.OVERDUE_REMINDER_INTERVAL_DAYS,
            max_reminders=self.MAX_REMINDERS,
            auto_update_status=self.AUTO_UPDATE_OVERDUE_STATUS,
            late_fee_percent=self.LATE_FEE_PERCENT,
            country_code=self.WHATSAPP_COUNTRY_CODE,
            residency_name=self.RESIDENCY_NAME,
        )


# ==================== Settings Singleton ====================
@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance"""
    return Settings()


settings = get_settings()


# ==================== Helper Functions ====================
def get_cors_origins() -> List[str]:
    """Get CORS allowed origins"""
    return settings.ALLOWED_ORIGINS


def is_development() -> bool:
    """Check if running in development"""
    return settings.DEBUG or settings.DATABASE_URL.startswith("sqlite")
