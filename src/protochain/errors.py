"""
Exception types for protochain.

The safe merge itself never raises; these cover the delegation model,
payload parsing, and configuration loading.
"""

import pathlib as _pathlib


class ProtochainError(Exception):
    """Base class for all protochain errors."""

    pass


class DelegationCycleError(ProtochainError, TypeError):
    """Raised when setting a delegate would make a record delegate to itself."""

    pass


class PayloadError(ProtochainError, ValueError):
    """Raised when a text payload is not a JSON object."""

    pass


class ConfigFileError(ProtochainError):
    """Error loading or parsing a configuration file."""

    def __init__(self, path: _pathlib.Path, message: str) -> None:
        self.path = path
        super().__init__(f"Error in config file {path}: {message}")
