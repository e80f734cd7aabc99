"""Configuration management."""

from functools import lru_cache
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

LOG_LEVELS = ("CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""
    
    model_config = SettingsConfigDict(
        env_prefix="CALORIE_TRACKER_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )
    
    # Data storage
    data_dir: Path = Field(default=Path("data"))
    db_filename: str = Field(default="tracker.json")
    
    # Daily target used when nothing has been stored yet
    default_calorie_limit: int = Field(default=2000)
    
    # When true, reset() also puts the limit back to the default
    reset_restores_default_limit: bool = Field(default=False)
    
    log_level: str = Field(default="WARNING")
    
    @field_validator("log_level")
    @classmethod
    def check_log_level(cls, value: str) -> str:
        level = value.strip().upper()
        if level not in LOG_LEVELS:
            raise ValueError(f"Unknown log level: {value!r}")
        return level
    
    @property
    def db_path(self) -> Path:
        return self.data_dir / self.db_filename


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
