from typing import Annotated, Any, Literal

from pydantic import BeforeValidator, computed_field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


def parse_tiers(v: Any) -> list[tuple[float, float]] | Any:
    # "2:1.5,4:1.75" in addition to the JSON form pydantic-settings handles
    if isinstance(v, str) and not v.lstrip().startswith("["):
        tiers = []
        for chunk in v.split(","):
            hours, _, multiplier = chunk.partition(":")
            tiers.append((float(hours), float(multiplier)))
        return tiers
    return v


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="SHIFTPLAN_",
        env_file=".env",
        env_ignore_empty=True,
        extra="ignore",
    )

    ENVIRONMENT: Literal["local", "staging", "production"] = "local"
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: Literal["console", "json"] = "console"

    # Planning horizon for feasibility probing (calendar days after the promise)
    FEASIBILITY_HORIZON_DAYS: int = 30
    # Upper bound on how far the working calendar walks looking for working time
    CALENDAR_SEARCH_LIMIT_DAYS: int = 730

    DEFAULT_SHIFT_START: str = "09:00"
    CUSTOM_SHIFT_HOURS: int = 8

    DEFAULT_MAX_OVERTIME_HOURS: float = 4.0
    # (upper bound in hours, multiplier) pairs; hours beyond the last bound
    # are priced at OVERTIME_MAX_MULTIPLIER
    OVERTIME_TIERS: Annotated[
        list[tuple[float, float]] | str, BeforeValidator(parse_tiers)
    ] = [(2.0, 1.5), (4.0, 1.75)]
    OVERTIME_MAX_MULTIPLIER: float = 2.0
    HOLIDAY_OVERTIME_MULTIPLIER: float = 2.5

    QUALITY_ALERT_THRESHOLD: float = 80.0

    @field_validator("DEFAULT_SHIFT_START")
    @classmethod
    def _validate_shift_start(cls, v: str) -> str:
        hours, _, minutes = v.partition(":")
        if not (hours.isdigit() and minutes.isdigit()):
            raise ValueError(f"Expected HH:MM, got {v!r}")
        if int(hours) > 23 or int(minutes) > 59:
            raise ValueError(f"Expected HH:MM, got {v!r}")
        return v

    @field_validator("CUSTOM_SHIFT_HOURS")
    @classmethod
    def _validate_custom_hours(cls, v: int) -> int:
        if not 0 < v <= 24:
            raise ValueError("CUSTOM_SHIFT_HOURS must be between 1 and 24")
        return v

    @computed_field  # type: ignore[prop-decorator]
    @property
    def is_production(self) -> bool:
        return self.ENVIRONMENT == "production"


settings = Settings()  # type: ignore
