from __future__ import annotations

from functools import lru_cache

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from slots import SlotGrid


class Settings(BaseSettings):
    """
    Clinic scheduler settings.

    Loaded from CLINIC_* environment variables (or a .env file).
    """

    model_config = SettingsConfigDict(
        env_prefix="CLINIC_",
        env_file=".env",
        extra="ignore",
    )

    app_title: str = Field("Clinic Appointment Scheduler", description="Title shown by the HTTP API")
    work_start_hour: int = Field(8, ge=0, le=23, description="First bookable hour of the day")
    work_end_hour: int = Field(18, ge=1, le=24, description="Hour at which the working day ends")
    slot_minutes: int = Field(30, gt=0, description="Length of one appointment slot")
    seed_demo_data: bool = Field(True, description="Load default doctors, patients and demo bookings")
    log_level: str = Field("INFO", description="Root logging level")

    @field_validator("log_level")
    @classmethod
    def normalize_log_level(cls, value: str) -> str:
        level = value.upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Unknown log level: {value}")
        return level

    @model_validator(mode="after")
    def check_working_day(self) -> "Settings":
        if self.work_start_hour >= self.work_end_hour:
            raise ValueError("work_start_hour must be before work_end_hour")
        if self.slot_minutes > (self.work_end_hour - self.work_start_hour) * 60:
            raise ValueError("slot_minutes does not fit in the working day")
        return self

    def slot_grid(self) -> SlotGrid:
        return SlotGrid(
            start_hour=self.work_start_hour,
            end_hour=self.work_end_hour,
            slot_minutes=self.slot_minutes,
        )


@lru_cache()
def get_settings() -> Settings:
    return Settings()
