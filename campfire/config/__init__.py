"""Configuration management for Campfire."""

from .schema import (
    CampfireConfig,
    ProtectionConfig,
    ZonesConfig,
    StorageConfig,
    LoggingConfig,
    load_config,
    generate_default_config,
)

__all__ = [
    'CampfireConfig',
    'ProtectionConfig',
    'ZonesConfig',
    'StorageConfig',
    'LoggingConfig',
    'load_config',
    'generate_default_config',
]
