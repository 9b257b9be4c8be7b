"""
Configuration module for protochain.

Uses pydantic-settings for environment variable loading and layered
YAML files for defaults and overrides.
"""

from protochain.config.settings import Settings
from protochain.config.sources import LayeredYamlSettingsSource, layer_config

__all__ = ["LayeredYamlSettingsSource", "Settings", "layer_config"]
