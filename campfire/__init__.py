"""
Campfire v1.0 - Spawn protection for PvP game servers.

New participants get a period of immunity from player damage and griefing
that counts down in real time, pauses inside safe zones, and can be ended
early with a two-step confirmation.

This package provides:
- core: Protection record and error codes
- store: Record store with a versioned binary snapshot
- config: YAML configuration with environment variable support
- host: Interfaces to the game server, schedulers, in-memory host
- engine: Tick, damage/interaction arbitration, commands
- cli: Command-line interface
"""

__version__ = "1.0.0"

from .core import ProtectionRecord, ErrorCode, CampfireError
from .store import ProtectionStore, SnapshotError, encode_snapshot, decode_snapshot
from .config import CampfireConfig, load_config
from .host import (
    Participant,
    Position,
    Material,
    Block,
    DamageSource,
    DamageEvent,
    InteractEvent,
    MoveEvent,
    CommandSender,
    Host,
    ZoneOracle,
    Scheduler,
)
from .engine import ProtectionEngine, CommandHandler, CommandResult

__all__ = [
    # Version
    '__version__',
    # Core
    'ProtectionRecord',
    'ErrorCode',
    'CampfireError',
    # Store
    'ProtectionStore',
    'SnapshotError',
    'encode_snapshot',
    'decode_snapshot',
    # Config
    'CampfireConfig',
    'load_config',
    # Host
    'Participant',
    'Position',
    'Material',
    'Block',
    'DamageSource',
    'DamageEvent',
    'InteractEvent',
    'MoveEvent',
    'CommandSender',
    'Host',
    'ZoneOracle',
    'Scheduler',
    # Engine
    'ProtectionEngine',
    'CommandHandler',
    'CommandResult',
]
