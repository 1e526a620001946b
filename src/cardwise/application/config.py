from pathlib import Path
from typing import Any, Literal

from pydantic import Field, SecretStr, field_validator
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
)

from cardwise.domain.constants import (
    DEFAULT_EMBEDDING_CACHE_SIZE,
    DEFAULT_EMBEDDING_MODEL,
    DEFAULT_EMBEDDING_THRESHOLD,
    DEFAULT_JUDGE_MODEL,
    DEFAULT_MAX_CONFLICT_RETRIES,
    REQUEST_TIMEOUT,
)


def config_files() -> list[Path]:
    return [
        Path.home() / ".config/cardwise/config.toml",
        Path.home() / ".cardwise.toml",
    ]


class AppConfig(BaseSettings):
    """
    Configuration model for cardwise.
    Supports loading from:
    1. Environment variables (CARDWISE_*)
    2. Config file (~/.config/cardwise/config.toml)
    3. Manual overrides (CLI)
    """

    model_config = SettingsConfigDict(
        env_prefix="CARDWISE_",
        extra="ignore",
    )

    # Scoring backends
    openai_api_key: SecretStr | None = None
    openai_base_url: str | None = None
    embedding_model: str = DEFAULT_EMBEDDING_MODEL
    judge_model: str = DEFAULT_JUDGE_MODEL
    request_timeout: float = REQUEST_TIMEOUT

    # Cascade
    embedding_threshold: float = Field(default=DEFAULT_EMBEDDING_THRESHOLD, ge=0.0, le=1.0)
    embedding_cache_size: int = Field(default=DEFAULT_EMBEDDING_CACHE_SIZE, ge=0)
    on_tier_error: Literal["fallback", "fail"] = "fallback"
    tier_timeout: float | None = Field(default=None, gt=0)

    # Persistence
    store: Literal["memory", "sqlite"] = "memory"
    database_path: Path = Field(
        default_factory=lambda: Path.home() / ".local/share/cardwise/cardwise.db"
    )
    max_conflict_retries: int = Field(default=DEFAULT_MAX_CONFLICT_RETRIES, ge=0)

    # Server
    host: str = "127.0.0.1"
    port: int = 8777
    verbose: int = 1

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

        # Find the first existing file
        toml_file = next((f for f in config_files() if f.exists()), None)

        if toml_file:
            return (
                init_settings,
                env_settings,
                TomlConfigSettingsSource(settings_cls, toml_file=toml_file),
            )
        return (init_settings, env_settings)

    @field_validator("database_path", mode="before")
    @classmethod
    def resolve_database_path(cls, v: Any) -> Path:
        return Path(v).expanduser().resolve()

    @property
    def has_model_backend(self) -> bool:
        return self.openai_api_key is not None and bool(self.openai_api_key.get_secret_value())


def resolve_config(cli_overrides: dict[str, Any] | None = None) -> AppConfig:
    """
    Multi-layered configuration resolution.
    1. Defaults in AppConfig
    2. ~/.config/cardwise/config.toml (if exists)
    3. Environment variables (CARDWISE_*)
    4. cli_overrides (passed from Typer), Nones dropped
    """
    overrides = {k: v for k, v in (cli_overrides or {}).items() if v is not None}
    return AppConfig(**overrides)
