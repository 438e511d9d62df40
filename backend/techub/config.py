from pydantic import model_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    DATABASE_URL: str = "sqlite+aiosqlite:///./techub_monitor.db"
    TEST_DATABASE_URL: str = "sqlite+aiosqlite:///:memory:"

    JWT_SECRET_KEY: str = "change-me-in-production"
    JWT_ALGORITHM: str = "HS256"
    SESSION_EXPIRE_HOURS: int = 8

    # Alerting
    ALERT_DEDUP_WINDOW_HOURS: int = 4
    DEFAULT_META_EXCELENTE: float = 98.0
    DEFAULT_META_ATENCAO: float = 80.0

    # Metric computation
    TREND_STABILITY_EPSILON: float = 0.5  # percentage points
    HEATMAP_TOP_N: int = 20
    OPEN_BACKLOG_MAX_DAYS: int = 60

    # Background SLA refresh
    SLA_REFRESH_ENABLED: bool = True
    SLA_REFRESH_INTERVAL_SECONDS: int = 300

    FRONTEND_URL: str = "http://localhost:5173"
    CORS_ORIGINS: str = "http://localhost:5173"

    model_config = {"env_file": ".env", "extra": "ignore"}

    @model_validator(mode="after")
    def _fix_database_url(self):
        """Managed Postgres hands out postgresql:// but asyncpg needs postgresql+asyncpg://."""
        if self.DATABASE_URL.startswith("postgresql://"):
            self.DATABASE_URL = self.DATABASE_URL.replace(
                "postgresql://", "postgresql+asyncpg://", 1,
            )
        return self


settings = Settings()
