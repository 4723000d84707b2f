"""Host-facing interfaces and in-process implementations."""

from .base import (
    Position,
    Material,
    Block,
    Participant,
    DamageKind,
    DamageSource,
    DamageEvent,
    InteractEvent,
    MoveEvent,
    CommandSender,
    ZoneFlags,
    Host,
    ZoneOracle,
    Scheduler,
)
from .scheduler import ThreadScheduler, ManualScheduler
from .memory import InMemoryHost, DeliveredMessage, Region, RegionZoneOracle

__all__ = [
    # Interfaces
    'Position',
    'Material',
    'Block',
    'Participant',
    'DamageKind',
    'DamageSource',
    'DamageEvent',
    'InteractEvent',
    'MoveEvent',
    'CommandSender',
    'ZoneFlags',
    'Host',
    'ZoneOracle',
    'Scheduler',
    # Schedulers
    'ThreadScheduler',
    'ManualScheduler',
    # In-memory
    'InMemoryHost',
    'DeliveredMessage',
    'Region',
    'RegionZoneOracle',
]
