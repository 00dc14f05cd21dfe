import logging
from datetime import tzinfo
from pathlib import Path
from typing import Any
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import Field, field_validator
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
)

from memora.domain.constants import (
    DEFAULT_SECONDS_PER_ITEM,
    MASTERY_MIN_INTERVAL,
    MASTERY_MIN_REPETITION,
)

def config_files() -> list[Path]:
    return [
        Path.home() / ".config/memora/config.toml",
        Path.home() / ".memora.toml",
    ]


class AppConfig(BaseSettings):
    """
    Configuration model for memora.
    Supports loading from:
    1. Config file (~/.config/memora/config.toml or ~/.memora.toml)
    2. Environment variables (MEMORA_*)
    3. Manual overrides (CLI)
    """

    model_config = SettingsConfigDict(
        env_prefix="MEMORA_",
        extra="ignore",
    )

    # Storage
    data_dir: Path = Field(default_factory=lambda: Path.home() / ".local/share/memora")
    items_file: str = "review_items.json"
    history_file: str = "review_history.jsonl"

    # Statistics
    seconds_per_item: float = Field(default=DEFAULT_SECONDS_PER_ITEM, gt=0)
    mastery_min_repetition: int = Field(default=MASTERY_MIN_REPETITION, ge=0)
    mastery_min_interval: int = Field(default=MASTERY_MIN_INTERVAL, ge=1)
    timezone: str | None = None  # None: host local time

    # Sessions
    due_limit: int | None = Field(default=None, gt=0)

    verbose: int = Field(default=1, ge=0, le=3)

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        from pydantic_settings import TomlConfigSettingsSource

        # First existing file wins
        toml_file = next((f for f in config_files() if f.exists()), None)

        if toml_file:
            return (
                init_settings,
                env_settings,
                TomlConfigSettingsSource(settings_cls, toml_file=toml_file),
            )
        return (init_settings, env_settings)

    @field_validator("data_dir", mode="before")
    @classmethod
    def resolve_data_dir(cls, v: Any) -> Path:
        return Path(v).expanduser().resolve()

    @field_validator("timezone")
    @classmethod
    def check_timezone(cls, v: str | None) -> str | None:
        if v is None:
            return None
        try:
            ZoneInfo(v)
        except (ZoneInfoNotFoundError, ValueError) as e:
            raise ValueError(f"Unknown time zone '{v}'") from e
        return v

    @property
    def items_path(self) -> Path:
        return self.data_dir / self.items_file

    @property
    def history_path(self) -> Path:
        return self.data_dir / self.history_file

    @property
    def tz(self) -> tzinfo | None:
        return ZoneInfo(self.timezone) if self.timezone else None

    @property
    def log_level(self) -> int:
        return {0: logging.WARNING, 1: logging.INFO}.get(self.verbose, logging.DEBUG)


def resolve_config(cli_overrides: dict[str, Any] | None = None) -> AppConfig:
    """
    Multi-layered configuration resolution.
    1. Defaults in AppConfig
    2. Config file (if exists)
    3. Environment variables (MEMORA_*)
    4. cli_overrides (non-None values passed from Typer)
    """
    overrides = {k: v for k, v in (cli_overrides or {}).items() if v is not None}
    return AppConfig(**overrides)
