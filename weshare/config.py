from pydantic_settings import BaseSettings
from typing import List, Optional

class Settings(BaseSettings):
    # Database
    PGHOST: Optional[str] = None
    PGDATABASE: Optional[str] = None
    PGUSER: Optional[str] = None
    PGPASSWORD: Optional[str] = None
    PGSSLMODE: str = "require"
    DATABASE_URL: Optional[str] = None

    # Security
    SECRET_KEY: str
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24 * 7

    # Application
    PROJECT_NAME: str = "WeShare Rwanda"
    API_V1_STR: str = "/api/v1"
    ENVIRONMENT: str = "development"
    DEBUG: bool = True
    LOG_LEVEL: str = "INFO"
    CORS_ORIGINS: List[str] = ["http://localhost:3000"]

    # Locale
    TIMEZONE: str = "Africa/Kigali"
    PHONE_REGION: str = "RW"

    # Storage
    STORAGE_ROOT: str = "storage"
    MAX_UPLOAD_BYTES: int = 5 * 1024 * 1024

    # Booking policy
    BOOKING_MIN_LEAD_HOURS: int = 1
    BOOKING_CANCEL_MIN_HOURS: int = 1
    TICKET_MIN_LEAD_HOURS: int = 2
    TICKET_CANCEL_MIN_HOURS: int = 24
    BUS_TRIP_MIN_POST_DAYS: int = 2

    @property
    def database_url(self) -> str:
        if self.DATABASE_URL:
            return self.DATABASE_URL
        return f"postgresql://{self.PGUSER}:{self.PGPASSWORD}@{self.PGHOST}/{self.PGDATABASE}?sslmode={self.PGSSLMODE}"

    class Config:
        env_file = ".env"
        case_sensitive = True

settings = Settings()
