"""
Shared pytest fixtures for protochain tests.

This file is automatically loaded by pytest. Fixtures defined here are
available to all test files without explicit imports.

The naive merge variants live here and nowhere else: they exist only to
show what ``safe_merge`` prevents and must never be used on real input.
"""

import collections.abc as _abc
import contextlib as _contextlib
import logging as _logging
import os as _os
import pathlib as _pathlib
import typing as _typing

import click.testing as _click_testing
import pytest as _pytest

import protochain.config as config
import protochain.constants as constants
import protochain.delegation as delegation

MergeFn = _typing.Callable[
    [_abc.MutableMapping[str, _typing.Any], _abc.Mapping[str, _typing.Any]],
    _abc.MutableMapping[str, _typing.Any],
]

UNSAFE_PAYLOAD = '{"safe": 123, "__proto__": {"polluted": "yes"}}'


# =============================================================================
# Isolation
# =============================================================================


@_pytest.fixture(autouse=True)
def _isolate_environment(
    monkeypatch: _pytest.MonkeyPatch,
    tmp_path: _pathlib.Path,
) -> None:
    """Keep real PROTOCHAIN_* variables and config files out of every test."""
    for key in list(_os.environ):
        if key.startswith(constants.ENV_PREFIX):
            monkeypatch.delenv(key)
    monkeypatch.setenv("PROTOCHAIN_CONFIG_DIR", str(tmp_path / "user-config"))
    monkeypatch.chdir(tmp_path)


@_contextlib.contextmanager
def restored_root() -> _typing.Iterator[delegation.Record]:
    """Put the shared delegation root back the way it was on entry."""
    root = delegation.ROOT
    fields = dict(root._fields)
    hidden = set(root._hidden)
    delegate = root.delegate
    try:
        yield root
    finally:
        root._fields.clear()
        root._fields.update(fields)
        root._hidden.clear()
        root._hidden.update(hidden)
        root._delegate = delegate


@_pytest.fixture(autouse=True)
def _restore_root() -> _typing.Iterator[None]:
    with restored_root():
        yield


@_pytest.fixture(autouse=True)
def _reset_package_logger() -> _typing.Iterator[None]:
    """Undo handler changes made by CLI invocations so caplog keeps working."""
    yield
    package_logger = _logging.getLogger("protochain")
    package_logger.handlers.clear()
    package_logger.setLevel(_logging.NOTSET)
    package_logger.propagate = True


# =============================================================================
# Settings and CLI
# =============================================================================


@_pytest.fixture
def user_config_dir() -> _pathlib.Path:
    """User config directory (PROTOCHAIN_CONFIG_DIR), created on demand."""
    path = _pathlib.Path(_os.environ["PROTOCHAIN_CONFIG_DIR"])
    path.mkdir(parents=True, exist_ok=True)
    return path


@_pytest.fixture
def project_config_dir() -> _pathlib.Path:
    """Project config directory (.protochain under the working directory)."""
    path = _pathlib.Path.cwd() / ".protochain"
    path.mkdir(parents=True, exist_ok=True)
    return path


@_pytest.fixture
def clean_settings() -> config.Settings:
    """Settings with built-in defaults only."""
    return config.Settings.construct_without_dotenv()


@_pytest.fixture
def runner() -> _click_testing.CliRunner:
    return _click_testing.CliRunner()


# =============================================================================
# Unsafe merge variants (fixtures only)
# =============================================================================


def _all_enumerable_keys(source: _abc.Mapping[str, _typing.Any]) -> list[str]:
    """Own and inherited enumerable keys, like a for-in loop."""
    if isinstance(source, delegation.Record):
        return list(source.enumerable_keys())
    return list(source)


def _naive_merge(
    target: _abc.MutableMapping[str, _typing.Any],
    source: _abc.Mapping[str, _typing.Any],
) -> _abc.MutableMapping[str, _typing.Any]:
    for key in _all_enumerable_keys(source):
        target[key] = source[key]
    return target


def _naive_deep_merge(
    target: _abc.MutableMapping[str, _typing.Any],
    source: _abc.Mapping[str, _typing.Any],
) -> _abc.MutableMapping[str, _typing.Any]:
    for key in _all_enumerable_keys(source):
        value = source[key]
        existing = target[key] if key in target else None
        if isinstance(existing, _abc.MutableMapping) and isinstance(value, _abc.Mapping):
            _naive_deep_merge(existing, value)
        else:
            target[key] = value
    return target


@_pytest.fixture
def naive_merge() -> MergeFn:
    """
    Unfiltered merge over all enumerable keys, inherited ones included.

    Assigning a ``__proto__`` member rebinds the target's delegate.
    """
    return _naive_merge


@_pytest.fixture
def naive_deep_merge() -> MergeFn:
    """
    Unfiltered recursive merge.

    ``target["__proto__"]`` reads the shared root, so a ``__proto__``
    member gets merged into the root itself.
    """
    return _naive_deep_merge
