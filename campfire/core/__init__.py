"""Core protection state and error types."""

from .record import ProtectionRecord
from .errors import ErrorCode, CampfireError, ERROR_METADATA

__all__ = [
    'ProtectionRecord',
    'ErrorCode',
    'CampfireError',
    'ERROR_METADATA',
]
