"""
Configuration schema for Campfire.

Supports:
- YAML file loading
- Environment variable substitution (${VAR_NAME})
- Validation with error messages

Example config (campfire.yml):
    version: 1

    protection:
      duration_seconds: 1200
      buffer_distance: 5
      reset_on_death: true

    zones:
      enabled: true

    storage:
      path: ${CAMPFIRE_DATA_DIR}/players.dat
"""

import logging
import os
import re
from pathlib import Path
from dataclasses import dataclass, field, asdict
from typing import Optional, List, Any

import yaml


SUPPORTED_VERSIONS = (1,)

LOG_LEVELS = ('DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL')


def _substitute_env_vars(value: Any) -> Any:
    """
    Substitute ${VAR_NAME} with environment variable values.

    Example:
        ${CAMPFIRE_DATA_DIR} → os.environ.get('CAMPFIRE_DATA_DIR')
    """
    if isinstance(value, str):
        pattern = r'\$\{([^}]+)\}'

        def replace(match):
            var_name = match.group(1)
            env_value = os.environ.get(var_name)
            if env_value is None:
                return match.group(0)  # Keep original if not found
            return env_value

        return re.sub(pattern, replace, value)

    elif isinstance(value, dict):
        return {k: _substitute_env_vars(v) for k, v in value.items()}

    elif isinstance(value, list):
        return [_substitute_env_vars(v) for v in value]

    return value


def _coerce(value: Any, kind: type) -> Any:
    """
    Convert a substituted string to kind; anything unparseable is kept
    as-is for validate() to report.
    """
    if not isinstance(value, str):
        return value
    if kind is bool:
        lowered = value.strip().lower()
        if lowered in ('true', 'yes', 'on', '1'):
            return True
        if lowered in ('false', 'no', 'off', '0'):
            return False
        return value
    try:
        return kind(value)
    except ValueError:
        return value


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


@dataclass
class ProtectionConfig:
    """Protection timing and griefing buffer."""
    duration_seconds: int = 60 * 20
    buffer_distance: float = 5
    reset_on_death: bool = True

    def __post_init__(self):
        self.duration_seconds = _coerce(self.duration_seconds, int)
        self.buffer_distance = _coerce(self.buffer_distance, float)
        self.reset_on_death = _coerce(self.reset_on_death, bool)

    @property
    def duration_minutes(self) -> int:
        return self.duration_seconds // 60


@dataclass
class ZonesConfig:
    """Region-plugin integration."""
    enabled: bool = True

    def __post_init__(self):
        self.enabled = _coerce(self.enabled, bool)


@dataclass
class StorageConfig:
    """Snapshot location."""
    path: str = 'players.dat'

    @property
    def snapshot_path(self) -> Path:
        return Path(self.path).expanduser()


@dataclass
class LoggingConfig:
    """Logging settings."""
    level: str = 'INFO'

    @property
    def level_number(self) -> int:
        return getattr(logging, self.level.upper(), logging.INFO)


@dataclass
class CampfireConfig:
    """Root configuration."""

    version: int = 1
    protection: ProtectionConfig = field(default_factory=ProtectionConfig)
    zones: ZonesConfig = field(default_factory=ZonesConfig)
    storage: StorageConfig = field(default_factory=StorageConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    @classmethod
    def load(cls, path: Path) -> 'CampfireConfig':
        """Load from YAML file with env var substitution."""
        path = Path(path)

        if not path.exists():
            raise FileNotFoundError(f"Config not found: {path}")

        with open(path) as f:
            data = yaml.safe_load(f) or {}

        data = _substitute_env_vars(data)
        return cls.from_dict(data)

    @classmethod
    def from_dict(cls, data: dict) -> 'CampfireConfig':
        """Create from dictionary."""
        return cls(
            version=_coerce(data.get('version', 1), int),
            protection=ProtectionConfig(**(data.get('protection') or {})),
            zones=ZonesConfig(**(data.get('zones') or {})),
            storage=StorageConfig(**(data.get('storage') or {})),
            logging=LoggingConfig(**(data.get('logging') or {})),
        )

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return asdict(self)

    def to_yaml(self) -> str:
        """Convert to YAML string."""
        return yaml.dump(self.to_dict(), default_flow_style=False, sort_keys=False)

    def validate(self) -> List[str]:
        """Validate config. Returns list of errors (empty if valid)."""
        errors = []

        if self.version not in SUPPORTED_VERSIONS:
            errors.append(f"Unsupported config version: {self.version}")

        duration = self.protection.duration_seconds
        if not isinstance(duration, int) or isinstance(duration, bool) or duration <= 0:
            errors.append(f"Invalid duration_seconds: {duration!r}")

        buffer = self.protection.buffer_distance
        if not _is_number(buffer) or buffer < 0:
            errors.append(f"Invalid buffer_distance: {buffer!r}")

        if not isinstance(self.protection.reset_on_death, bool):
            errors.append(f"Invalid reset_on_death: {self.protection.reset_on_death!r}")

        if not isinstance(self.zones.enabled, bool):
            errors.append(f"Invalid zones.enabled: {self.zones.enabled!r}")

        if not self.storage.path:
            errors.append("Storage path not configured")

        if str(self.logging.level).upper() not in LOG_LEVELS:
            errors.append(f"Unknown logging level: {self.logging.level}")

        return errors


def load_config(path: Optional[Path] = None) -> CampfireConfig:
    """Load config from file or return defaults."""
    if path and Path(path).exists():
        return CampfireConfig.load(path)

    search_paths = [
        Path('./campfire.yml'),
        Path('./campfire.yaml'),
        Path.home() / '.campfire' / 'config.yml',
    ]

    for p in search_paths:
        if p.exists():
            return CampfireConfig.load(p)

    return CampfireConfig()


def generate_default_config() -> str:
    """Generate default config as YAML."""
    return """# Campfire Configuration
version: 1

protection:
  # Seconds of protection granted to a new participant (20 min)
  duration_seconds: 1200
  # Blocks around a protected participant that can't be set alight
  buffer_distance: 5
  reset_on_death: true

zones:
  # Pause the timer inside no-PvP / invincible regions
  enabled: true

storage:
  path: players.dat

logging:
  level: INFO
"""
