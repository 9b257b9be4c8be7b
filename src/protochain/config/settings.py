"""
Settings configuration using pydantic-settings.

Loads configuration from:
1. Constructor arguments (highest precedence)
2. Environment variables with PROTOCHAIN_ prefix
3. .env file (if PROTOCHAIN_ENV_FILE points at one)
4. Layered YAML config files:
   - Project config: .protochain/config.yaml (highest)
   - User config: ~/.config/protochain/config.yaml
   - Built-in defaults: bundled defaults/config.yaml (lowest)

Nested config uses double underscore delimiter:
  PROTOCHAIN_MERGE__FOLD_CASE=true
  PROTOCHAIN_MERGE__EXTRA_RESERVED_KEYS='["__defineGetter__"]'
  PROTOCHAIN_LOGGING__LEVEL=debug
"""

import logging as _logging
import os as _os
import pathlib as _pathlib
import typing as _typing

import pydantic as _pydantic
import pydantic_settings as _pydantic_settings

import protochain.config.sources as sources
import protochain.config.types as types
import protochain.constants as constants
import protochain.merge as merge


def _get_env_file() -> str | None:
    """Return PROTOCHAIN_ENV_FILE if it names an existing file."""
    if env_file := _os.environ.get("PROTOCHAIN_ENV_FILE"):
        if _pathlib.Path(env_file).exists():
            return env_file
    return None


class Settings(_pydantic_settings.BaseSettings):
    """
    protochain configuration settings.

    All settings can be overridden via environment variables with the
    PROTOCHAIN_ prefix. For nested config, use double underscore:
    PROTOCHAIN_MERGE__FOLD_CASE=true

    Config precedence (highest to lowest):
    1. Constructor arguments
    2. Environment variables (PROTOCHAIN_*)
    3. .env file
    4. Project config (.protochain/config.yaml)
    5. User config (~/.config/protochain/config.yaml)
    6. Built-in defaults
    """

    model_config = _pydantic_settings.SettingsConfigDict(
        env_prefix=constants.ENV_PREFIX,
        env_file=_get_env_file(),
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        extra="allow",
    )

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[_pydantic_settings.BaseSettings],
        init_settings: _pydantic_settings.PydanticBaseSettingsSource,
        env_settings: _pydantic_settings.PydanticBaseSettingsSource,
        dotenv_settings: _pydantic_settings.PydanticBaseSettingsSource,
        file_secret_settings: _pydantic_settings.PydanticBaseSettingsSource,
    ) -> tuple[_pydantic_settings.PydanticBaseSettingsSource, ...]:
        """
        Configure settings sources with precedence:
        1. init_settings (constructor args) — highest
        2. env_settings (PROTOCHAIN_* env vars)
        3. dotenv_settings (.env file)
        4. layered YAML config files
        5. (defaults via Field definitions) — lowest
        """
        return (
            init_settings,
            env_settings,
            dotenv_settings,
            sources.LayeredYamlSettingsSource(settings_cls, _pathlib.Path.cwd()),
            file_secret_settings,
        )

    @classmethod
    def construct_without_dotenv(cls, **kwargs: _typing.Any) -> "Settings":
        """Create Settings without loading any .env file (for test isolation)."""
        return cls(_env_file=None, **kwargs)  # type: ignore[call-arg]

    version: int = _pydantic.Field(default=1, description="Config schema version")

    merge: types.MergeConfig = _pydantic.Field(default_factory=types.MergeConfig)
    """Safe merge settings."""

    logging: types.LoggingConfig = _pydantic.Field(default_factory=types.LoggingConfig)
    """Logging settings."""

    # =========================================================================
    # Helper methods
    # =========================================================================

    def reserved_keys(self) -> frozenset[str]:
        """Effective blocklist: built-in reserved keys plus configured extras."""
        return merge.reserved_keys_from(self.merge.extra_reserved_keys)

    @property
    def log_level(self) -> int:
        """Configured level as a ``logging`` constant."""
        return _logging.getLevelName(self.logging.level.upper())  # type: ignore[no-any-return]

    def get_extra_fields(self) -> dict[str, _typing.Any]:
        """Get unknown fields at the top level of Settings."""
        return dict(self.model_extra) if self.model_extra else {}

    def to_dict(self) -> dict[str, _typing.Any]:
        """Convert settings to dictionary (for JSON/YAML output)."""
        return {
            "version": self.version,
            "merge": {
                "extra_reserved_keys": list(self.merge.extra_reserved_keys),
                "fold_case": self.merge.fold_case,
                "reserved_keys": sorted(self.reserved_keys()),
            },
            "logging": {
                "level": self.logging.level,
            },
            "config_dir": str(sources.get_user_config_dir()),
        }
