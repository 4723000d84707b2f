"""Protection engine and command handling."""

from .engine import (
    ProtectionEngine,
    TickSummary,
    TICK_INTERVAL_SECONDS,
    RESTRICTED_ITEMS,
    RESTRICTED_CONTAINERS,
)
from .commands import CommandHandler, CommandResult, PERMISSION_RESET

__all__ = [
    'ProtectionEngine',
    'TickSummary',
    'TICK_INTERVAL_SECONDS',
    'RESTRICTED_ITEMS',
    'RESTRICTED_CONTAINERS',
    'CommandHandler',
    'CommandResult',
    'PERMISSION_RESET',
]
