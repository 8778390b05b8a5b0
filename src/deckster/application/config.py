from pathlib import Path
from typing import Any, Literal

from pydantic import Field, field_validator
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
)

from deckster.domain.constants import DEFAULT_QUOTA_BYTES, SESSION_TTL_HOURS


def config_file_path() -> Path:
    return Path.home() / ".config/deckster/config.toml"


class AppConfig(BaseSettings):
    """
    Configuration model for deckster.
    Supports loading from:
    1. Environment variables (DECKSTER_*)
    2. Config file (~/.config/deckster/config.toml)
    3. Manual overrides (CLI)
    """

    model_config = SettingsConfigDict(
        env_prefix="DECKSTER_",
        extra="ignore",
    )

    # Paths
    data_dir: Path = Field(default_factory=lambda: Path.home() / ".local/share/deckster")

    # Storage
    storage_backend: Literal["file", "memory"] = "file"
    storage_quota_bytes: int = DEFAULT_QUOTA_BYTES

    # Sessions
    session_ttl_hours: float = SESSION_TTL_HOURS

    verbose: int = 0  # 1 = info, 2 = debug

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

        toml_file = config_file_path()

        # First source wins: CLI overrides, then env, then the file
        if toml_file.exists():
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

    @property
    def store_path(self) -> Path:
        return self.data_dir / "storage.json"


def resolve_config(cli_overrides: dict[str, Any] | None = None) -> AppConfig:
    """
    Multi-layered configuration resolution.
    1. Defaults in AppConfig
    2. ~/.config/deckster/config.toml (if exists)
    3. Environment variables (DECKSTER_*)
    4. cli_overrides (passed from Typer)
    """
    overrides = {k: v for k, v in (cli_overrides or {}).items() if v is not None}
    return AppConfig(**overrides)
