"""
Shared constants for protochain.

This module provides a single source of truth for the key names and
default values used across multiple modules.
"""

PROTO_KEY = "__proto__"
"""Key whose assignment rebinds a record's delegate."""

CONSTRUCTOR_KEY = "constructor"
"""Key holding the constructor reference on a prototype record."""

PROTOTYPE_KEY = "prototype"
"""Key naming a constructor's shared prototype record."""

RESERVED_KEYS: frozenset[str] = frozenset({PROTO_KEY, CONSTRUCTOR_KEY, PROTOTYPE_KEY})
"""Keys the safe merge never copies into a target.

Writing any of these through a plain assignment can alter the target's
delegation parent or constructor identity instead of setting a data field.
"""

ENV_PREFIX = "PROTOCHAIN_"
"""Prefix for environment variables read by Settings."""

DEFAULT_LOG_LEVEL = "warning"
"""Default level for the CLI log handler."""
