from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    ENV: str = "dev"
    LOG_LEVEL: str = "INFO"

    DATABASE_URL: str = "sqlite:///./booking_engine.db"

    DEFAULT_TIMEZONE: str = "America/Los_Angeles"
    DEFAULT_HORIZON_DAYS: int = 14
    MAX_HORIZON_DAYS: int = 60

    CALENDAR_PROVIDER: str = "mock"
    GOOGLE_CLIENT_ID: str | None = None
    GOOGLE_CLIENT_SECRET: str | None = None
    GOOGLE_CALENDAR_BASE_URL: str = "https://www.googleapis.com/calendar/v3"
    GOOGLE_GMAIL_BASE_URL: str = "https://gmail.googleapis.com/gmail/v1"
    GOOGLE_TOKEN_URL: str = "https://oauth2.googleapis.com/token"
    GOOGLE_API_TIMEOUT_SECONDS: float = 10.0
    EVENT_TIMEZONE: str = "America/New_York"

    NOTIFICATIONS_ENABLED: bool = True


settings = Settings()
