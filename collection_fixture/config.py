"""
Fixture settings - pydantic-settings configuration.

Settings come from, in decreasing precedence: keyword arguments, environment
variables, a ``.env`` file and ``config.json`` in the working directory.
Sections nest with ``__`` in variable names, so ``Data__ConnectionString``
and ``{"Data": {"ConnectionString": ...}}`` set the same value.
"""

from __future__ import annotations

from typing import Optional, Tuple, Type

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, ValidationError
from pydantic_settings import (
    BaseSettings,
    JsonConfigSettingsSource,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
)

from collection_fixture.errors import ConfigurationError


class DataSettings(BaseModel):
    """The ``Data`` section."""

    model_config = ConfigDict(populate_by_name=True)

    connection_string: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("ConnectionString", "connectionstring"),
    )


class Settings(BaseSettings):
    """Settings consumed by the fixture."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        json_file="config.json",
        json_file_encoding="utf-8",
        case_sensitive=False,
        populate_by_name=True,
        extra="ignore",
    )

    data: DataSettings = Field(
        default_factory=DataSettings,
        validation_alias=AliasChoices("Data", "data"),
    )

    @property
    def connection_string(self) -> Optional[str]:
        return self.data.connection_string

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: Type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> Tuple[PydanticBaseSettingsSource, ...]:
        return (
            init_settings,
            env_settings,
            dotenv_settings,
            JsonConfigSettingsSource(settings_cls),
        )


def load_settings() -> Settings:
    """Read settings, reporting unreadable sources as ``ConfigurationError``."""
    try:
        return Settings()
    except ValidationError as exc:
        raise ConfigurationError(f"Invalid fixture settings: {exc}") from exc
    except ValueError as exc:
        # json.JSONDecodeError from a malformed config.json
        raise ConfigurationError(f"Unreadable config.json: {exc}") from exc
