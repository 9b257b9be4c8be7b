"""Custom pydantic-settings source for protochain configuration.

Configuration layers (in precedence order, highest first):
1. Environment variables (handled by pydantic-settings)
2. Project config: .protochain/config.yaml under the current directory
3. User config: ~/.config/protochain/config.yaml (or PROTOCHAIN_CONFIG_DIR)
4. Built-in defaults: bundled config.yaml

Config files are user-editable input, so layers are combined with
``safe_merge``: a file cannot introduce reserved keys at the top level or
inside a section. Sections merge one level deep; other values override.

Environment variables:
- PROTOCHAIN_CONFIG_DIR: Override user config directory
"""

import collections.abc as _abc
import logging as _logging
import os as _os
import pathlib as _pathlib
import typing as _typing

import pydantic.fields as _pydantic_fields
import pydantic_settings as _pydantic_settings
import yaml as _yaml

import protochain.errors as errors
import protochain.merge as merge

_logger = _logging.getLogger(__name__)

# Environment variable for overriding user config directory
ENV_CONFIG_DIR = "PROTOCHAIN_CONFIG_DIR"


def layer_config(
    base: _abc.Mapping[str, _typing.Any],
    override: _abc.Mapping[str, _typing.Any],
) -> dict[str, _typing.Any]:
    """
    Lay ``override`` over ``base`` and return a new dict.

    Sections present in both are merged key by key; anything else in
    ``override`` replaces the value in ``base``. Reserved keys in
    ``override`` are dropped at both levels.
    """
    result = dict(base)
    for key, value in merge.safe_merge({}, override).items():
        existing = result.get(key)
        if isinstance(existing, _abc.Mapping) and isinstance(value, _abc.Mapping):
            result[key] = merge.safe_merge(dict(existing), value)
        elif isinstance(value, _abc.Mapping):
            result[key] = merge.safe_merge({}, value)
        else:
            result[key] = value
    return result


class LayeredYamlSettingsSource(_pydantic_settings.PydanticBaseSettingsSource):
    """
    Settings source that loads layered YAML config files.

    Layers (lowest to highest precedence):
    1. Built-in defaults (src/protochain/config/defaults/config.yaml)
    2. User config (~/.config/protochain/config.yaml)
    3. Project config (.protochain/config.yaml)
    """

    def __init__(
        self,
        settings_cls: type[_pydantic_settings.BaseSettings],
        project_root: _pathlib.Path | None = None,
        *,
        user_config_path: _pathlib.Path | None = None,
        builtin_config_path: _pathlib.Path | None = None,
    ) -> None:
        """
        Initialize the settings source.

        Args:
            settings_cls: The Settings class being populated.
            project_root: Directory holding .protochain/config.yaml.
            user_config_path: Override path for user config file (for testing).
            builtin_config_path: Override path for builtin defaults (for testing).
        """
        super().__init__(settings_cls)
        self._project_root = project_root
        self._user_config_path = user_config_path
        self._builtin_config_path = builtin_config_path
        # Layers actually loaded, lowest precedence first
        self._loaded_layers: list[tuple[str, _pathlib.Path]] = []
        self._merged = self._load_config_layers()

    def _load_config_layers(self) -> dict[str, _typing.Any]:
        builtin_path = self._get_builtin_config_path()
        if not builtin_path.exists():
            raise errors.ConfigFileError(
                builtin_path,
                "built-in defaults not found (possible installation problem)",
            )
        builtin_content = self._load_yaml_file(builtin_path)
        if not builtin_content:
            raise errors.ConfigFileError(
                builtin_path,
                "built-in defaults file is empty (possible installation problem)",
            )
        merged = layer_config({}, builtin_content)
        self._loaded_layers.append(("built-in", builtin_path))

        optional_layers: list[tuple[str, _pathlib.Path]] = [
            ("user", self._get_user_config_path()),
        ]
        if self._project_root is not None:
            optional_layers.append(
                ("project", get_project_config_path(self._project_root))
            )

        # Missing optional files are normal
        for name, path in optional_layers:
            if not path.exists():
                continue
            content = self._load_yaml_file(path)
            if content:
                merged = layer_config(merged, content)
                self._loaded_layers.append((name, path))
                _logger.debug("Loaded %s config from %s", name, path)

        return merged

    def get_loaded_layers(self) -> list[tuple[str, _pathlib.Path]]:
        """Return (layer_name, path) for each loaded layer, lowest precedence first."""
        return list(self._loaded_layers)

    def _get_builtin_config_path(self) -> _pathlib.Path:
        if self._builtin_config_path is not None:
            return self._builtin_config_path
        return get_builtin_defaults_path()

    def _get_user_config_path(self) -> _pathlib.Path:
        if self._user_config_path is not None:
            return self._user_config_path
        return get_user_config_path()

    def _load_yaml_file(
        self,
        path: _pathlib.Path,
    ) -> dict[str, _typing.Any] | None:
        """
        Load a YAML file and return its contents as a dict.

        Returns:
            Parsed YAML contents, or None if file is empty.

        Raises:
            ConfigFileError: If the file cannot be read, is malformed YAML,
                or contains non-dict content at the top level.
        """
        try:
            content = path.read_text(encoding="utf-8")
        except OSError as e:
            raise errors.ConfigFileError(path, f"cannot read file: {e}") from e

        try:
            parsed = _yaml.safe_load(content)
        except _yaml.YAMLError as e:
            raise errors.ConfigFileError(path, f"invalid YAML: {e}") from e

        if parsed is None:
            return None

        if not isinstance(parsed, dict):
            type_name = type(parsed).__name__
            raise errors.ConfigFileError(
                path,
                f"config must be a YAML mapping (dict), got {type_name}",
            )

        return parsed

    def get_field_value(
        self,
        field: _pydantic_fields.FieldInfo,  # noqa: ARG002 - required by pydantic-settings interface
        field_name: str,
    ) -> tuple[_typing.Any, str, bool]:
        """
        Get value for a field from the merged layers.

        Returns:
            Tuple of (value, field_name, is_complex).
        """
        value = self._merged.get(field_name)
        if value is None:
            return None, field_name, False
        return value, field_name, isinstance(value, (_abc.Mapping, list))

    def __call__(self) -> dict[str, _typing.Any]:
        """Return the merged config as a plain dict for Pydantic validation."""
        return dict(self._merged)


def get_builtin_defaults_path() -> _pathlib.Path:
    """Get the path to the built-in defaults config file."""
    return _pathlib.Path(__file__).parent / "defaults" / "config.yaml"


def get_user_config_dir() -> _pathlib.Path:
    """
    Get the user config directory.

    Respects PROTOCHAIN_CONFIG_DIR if set, otherwise uses the XDG path.
    """
    config_dir_env = _os.environ.get(ENV_CONFIG_DIR)
    if config_dir_env:
        return _pathlib.Path(config_dir_env)
    return _pathlib.Path.home() / ".config" / "protochain"


def get_user_config_path() -> _pathlib.Path:
    """Get the path to the user config file."""
    return get_user_config_dir() / "config.yaml"


def get_project_config_path(project_root: _pathlib.Path) -> _pathlib.Path:
    """Get the path to the project config file under ``project_root``."""
    return project_root / ".protochain" / "config.yaml"
