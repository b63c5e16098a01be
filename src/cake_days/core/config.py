"""Configuration management.

Loads from TOML config files + environment variables.
Uses pydantic-settings for validation and env var overriding.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, ValidationError, field_validator
from pydantic_settings import BaseSettings

from .calendar import DEFAULT_HOLIDAYS, parse_month_day
from .enums import LogFormat


# ---------------------------------------------------------------------------
# Sub-configs
# ---------------------------------------------------------------------------

class CalendarConfig(BaseModel):
    holidays: list[str] = Field(default_factory=lambda: list(DEFAULT_HOLIDAYS))  # MM-DD

    @field_validator("holidays")
    @classmethod
    def _valid_month_days(cls, value: list[str]) -> list[str]:
        for item in value:
            parse_month_day(item)
        return value


class EngineConfig(BaseModel):
    max_rounds: int = Field(default=5, ge=1)  # Fixed-point ceiling
    batch_ceiling: int = Field(default=2000, ge=1)  # Persons per in-memory run


class PipelineConfig(BaseModel):
    chunk_size: int = Field(default=100, ge=1)  # Records parsed per chunk
    spill_dir: str | None = None  # None = system temp dir
    # Re-run merge/postponement over the consolidated spill output
    reapply_rules_on_consolidation: bool = False


class ObservabilityConfig(BaseModel):
    log_level: str = "WARNING"
    log_format: LogFormat = LogFormat.CONSOLE


# ---------------------------------------------------------------------------
# Top-level settings
# ---------------------------------------------------------------------------

class Settings(BaseSettings):
    """Top-level application settings.

    Loaded from TOML config files, overridden by environment variables.
    """

    calendar: CalendarConfig = Field(default_factory=CalendarConfig)
    engine: EngineConfig = Field(default_factory=EngineConfig)
    pipeline: PipelineConfig = Field(default_factory=PipelineConfig)
    observability: ObservabilityConfig = Field(default_factory=ObservabilityConfig)

    model_config = {"env_prefix": "CAKE_DAYS_", "env_nested_delimiter": "__"}


def load_settings(
    config_path: str | Path | None = None,
    overrides: dict[str, Any] | None = None,
) -> Settings:
    """Load settings from TOML file + env vars.

    Args:
        config_path: Path to TOML config file (optional).
        overrides: Dict of overrides to apply on top.  Nested sections
            are merged key by key rather than replaced.

    Raises:
        ConfigError: If the file is not valid TOML or the values fail
            validation.
    """
    from .errors import ConfigError

    data: dict[str, Any] = {}

    if config_path:
        path = Path(config_path)
        if path.exists():
            import tomli

            try:
                with open(path, "rb") as f:
                    data = tomli.load(f)
            except tomli.TOMLDecodeError as exc:
                raise ConfigError(f"Invalid config file {path}: {exc}") from exc

    if overrides:
        for key, value in overrides.items():
            if isinstance(value, dict) and isinstance(data.get(key), dict):
                data[key] = {**data[key], **value}
            else:
                data[key] = value

    try:
        return Settings(**data)
    except ValidationError as exc:
        raise ConfigError(str(exc)) from exc
