from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application configuration loaded from environment variables."""

    database_url: str = Field(..., alias="DATABASE_URL")

    # Civil timezone of the school; absences are counted against its calendar
    school_timezone: str = Field("America/Chicago", alias="SCHOOL_TIMEZONE")
    recovery_cancel_hours_limit: int = Field(24, alias="RECOVERY_CANCEL_HOURS_LIMIT")

    log_level: str = Field("INFO", alias="LOG_LEVEL")

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"


settings = Settings()
