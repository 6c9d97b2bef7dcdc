from pydantic_settings import BaseSettings
from typing import Dict, Optional


class Settings(BaseSettings):
    # App
    APP_NAME: str = "TimeClock Pro"
    ENVIRONMENT: str = "development"
    DEBUG: bool = True
    LOG_LEVEL: str = "INFO"

    # Database
    DATABASE_URL: str = "sqlite:///./timeclock.db"

    # Sessions (PIN login tokens)
    SESSION_MAX_AGE_HOURS: int = 24

    # Punch ledger
    PUNCH_DEDUP_SECONDS: int = 30  # double-tap window for self-service punches

    # Geofence defaults, used until an admin saves company settings
    DEFAULT_COMPANY_NAME: str = "TimeClock Pro"
    DEFAULT_GEOFENCE_RADIUS_METERS: float = 500.0

    # External time clock sync (best effort, never blocks a punch)
    EXTERNAL_SYNC_WEBHOOK_URL: Optional[str] = None
    EXTERNAL_SYNC_TIMEOUT: int = 15
    # Local employee name -> name in the external system. Empty = send names as-is.
    EXTERNAL_SYNC_NAME_MAP: Dict[str, str] = {}

    # App URL (frontend kiosk)
    FRONTEND_URL: Optional[str] = None

    class Config:
        env_file = ".env"
        case_sensitive = True


settings = Settings()
