"""
Centralized Configuration System
Environment-aware settings for the delivery pipeline simulation.
"""
from functools import lru_cache
from typing import Literal

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from src.message_queue.base import Channel


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="allow"
    )
    """
    Simulation configuration.
    Loads from environment variables with sensible defaults.
    Time values are expressed in virtual time units.
    """

    # ============================================
    # DELIVERY RULES
    # ============================================
    max_retry_attempts: int = Field(default=3, ge=0)
    success_probability: float = Field(default=0.8, ge=0.0, le=1.0)
    processing_delay: float = Field(default=2.0, gt=0)
    tick_interval: float = Field(default=1.0, gt=0)

    # ============================================
    # CHANNELS
    # ============================================
    channels: list[Channel] = Field(
        default_factory=lambda: [Channel.EMAIL, Channel.IN_APP, Channel.PUSH]
    )
    channel_endpoints: dict[Channel, str] = Field(
        default_factory=lambda: {
            Channel.EMAIL: "POST /login",
            Channel.IN_APP: "POST /post",
            Channel.PUSH: "POST /friend-req",
        }
    )
    channel_descriptions: dict[Channel, str] = Field(
        default_factory=lambda: {
            Channel.EMAIL: "Authentication emails",
            Channel.IN_APP: "In-app notifications",
            Channel.PUSH: "Push notifications",
        }
    )

    # ============================================
    # LOAD TEST
    # ============================================
    load_test_size: int = Field(default=5, ge=0)
    load_test_stagger: float = Field(default=0.2, ge=0)

    # ============================================
    # OBSERVABILITY
    # ============================================
    activity_log_capacity: int = Field(default=10, ge=1)
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    enable_structured_logging: bool = False  # Set to True for production JSON logs

    # ============================================
    # REAL-TIME DRIVER
    # ============================================
    time_unit_seconds: float = Field(default=1.0, gt=0)
    driver_resolution_seconds: float = Field(default=0.05, gt=0)

    # ============================================
    # ENVIRONMENT
    # ============================================
    environment: Literal["development", "staging", "production"] = "development"

    @model_validator(mode="after")
    def _check_channel_endpoints(self) -> "Settings":
        if not self.channels:
            raise ValueError("At least one channel must be configured")
        missing = [c.value for c in self.channels if not self.channel_endpoints.get(c)]
        if missing:
            raise ValueError(f"Missing endpoint label for channels: {', '.join(missing)}")
        return self


@lru_cache()
def get_settings() -> Settings:
    """
    Singleton pattern for settings.
    Uses LRU cache to ensure only one Settings instance exists.
    """
    return Settings()
