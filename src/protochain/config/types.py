"""Configuration type definitions for protochain settings.

These are the config sections nested within the main Settings class:
- MergeConfig: extra reserved keys, case folding
- LoggingConfig: level of the CLI log handler

All types use `extra="allow"` so unknown fields are preserved rather than
dropped, and can be listed with `get_extra_fields()` to spot typos.
"""

import typing as _typing

import pydantic as _pydantic

import protochain.constants as constants


class ConfigBase(_pydantic.BaseModel):
    """
    Base class for all config types.

    Unknown fields are kept so config files can be audited for typos.
    """

    model_config = _pydantic.ConfigDict(extra="allow")

    def get_extra_fields(self) -> dict[str, _typing.Any]:
        """Return fields that were provided but not in the schema."""
        return dict(self.model_extra) if self.model_extra else {}


class MergeConfig(ConfigBase):
    """
    Safe merge settings.

    YAML section: merge.*
    """

    extra_reserved_keys: list[str] = _pydantic.Field(default_factory=list)
    """Keys blocked on top of the built-in reserved keys."""

    fold_case: bool = False
    """Block case variants of reserved keys."""

    @_pydantic.field_validator("extra_reserved_keys")
    @classmethod
    def _strip_blank_keys(cls, value: list[str]) -> list[str]:
        return [key for key in value if key]


class LoggingConfig(ConfigBase):
    """
    Logging settings.

    YAML section: logging.*
    """

    level: _typing.Literal["debug", "info", "warning", "error"] = constants.DEFAULT_LOG_LEVEL  # type: ignore[assignment]
    """Log level."""

    @_pydantic.field_validator("level", mode="before")
    @classmethod
    def _lowercase_level(cls, value: _typing.Any) -> _typing.Any:
        return value.lower() if isinstance(value, str) else value
