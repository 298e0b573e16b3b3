"""
Application settings for the Workplace Tracker Service.

Values are read from environment variables (and an optional .env file).
Import the module-level ``settings`` instance instead of instantiating
Settings directly.
"""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Service configuration loaded from the environment."""

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    # Application
    APP_NAME: str = "workplace-tracker-service"
    APP_VERSION: str = "1.0.0"
    ENVIRONMENT: str = "development"
    DEBUG: bool = False
    API_PREFIX: str = "/api"

    # Database
    DATABASE_URL: str = "sqlite:///./workplace_tracker.db"
    DATABASE_ECHO: bool = False

    # Security
    JWT_SECRET_KEY: str = "change-me-in-production"
    JWT_ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 12

    # CORS
    CORS_ORIGINS: str = "http://localhost:5173,http://localhost:3000"
    CORS_ALLOW_CREDENTIALS: bool = True
    CORS_ALLOW_METHODS: list[str] = ["*"]
    CORS_ALLOW_HEADERS: list[str] = ["*"]

    # Logging
    LOG_LEVEL: str = "INFO"

    # Redis cache
    REDIS_URL: str = "redis://localhost:6379/0"
    CACHE_ENABLED: bool = True
    SUMMARY_CACHE_TTL: int = 60

    # Kafka
    KAFKA_ENABLED: bool = False
    KAFKA_BOOTSTRAP_SERVERS: str = "localhost:9092"

    # Attendance rules (hours of the local day)
    WORK_START_HOUR: int = 9
    WORK_END_HOUR: int = 17
    LATE_CUTOFF_HOUR: int = 10
    ABSENT_BELOW_HOURS: float = 4.0
    FULL_DAY_HOURS: float = 8.0
    STATS_DEFAULT_DAYS: int = 30

    # Meetings
    MAX_MEETING_HOURS: float = 8.0

    # Misc
    DEFAULT_DEPARTMENT: str = "General"
    DIAGNOSTICS_CAPACITY: int = 20

    @property
    def cors_origins_list(self) -> list[str]:
        return [o.strip() for o in self.CORS_ORIGINS.split(",") if o.strip()]

    @property
    def is_production(self) -> bool:
        return self.ENVIRONMENT.lower() == "production"


settings = Settings()
