from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import field_validator

class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    ENV: str = "local"
    APP_NAME: str = "Don Elmer's Admin API"
    # Comma-separated origins for CORS (e.g. https://admin.donelmers.ph). If empty, uses localhost defaults.
    CORS_ORIGINS: str = ""
    LOG_LEVEL: str = "INFO"

    SECRET_KEY: str
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 30
    REFRESH_TOKEN_EXPIRE_DAYS: int = 7

    DATABASE_URL: str

    @field_validator("DATABASE_URL", mode="after")
    @classmethod
    def normalize_database_url(cls, v: str) -> str:
        """Render and others give postgres://; SQLAlchemy expects postgresql+psycopg2://."""
        if v and v.startswith("postgres://"):
            return "postgresql+psycopg2://" + v[11:]
        return v

    # QR check-in: reservations written just before the QR is generated may lag behind reads
    CHECKIN_LOOKUP_ATTEMPTS: int = 3
    CHECKIN_RETRY_DELAY_SECONDS: float = 1.0

    @field_validator("CHECKIN_LOOKUP_ATTEMPTS", mode="after")
    @classmethod
    def at_least_one_attempt(cls, v: int) -> int:
        if v < 1:
            raise ValueError("CHECKIN_LOOKUP_ATTEMPTS must be >= 1")
        return v


settings = Settings()
