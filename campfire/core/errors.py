"""
Error codes for Campfire.

Structured error codes for command replies and log lines.

Format: E{category}{number}
- E1xxx: Command errors
- E2xxx: Persistence errors
- E3xxx: Configuration errors
"""

from enum import Enum
from dataclasses import dataclass
from typing import Optional


class ErrorCode(Enum):
    """Structured error codes."""

    # E1xxx: Command errors
    E1001_NOT_FOUND = "E1001"
    E1002_PERMISSION_DENIED = "E1002"
    E1003_INVALID_STATE = "E1003"
    E1004_NOT_A_PARTICIPANT = "E1004"
    E1005_USAGE = "E1005"

    # E2xxx: Persistence errors
    E2001_SNAPSHOT_LOAD_FAILED = "E2001"
    E2002_SNAPSHOT_SAVE_FAILED = "E2002"
    E2003_SNAPSHOT_CORRUPT = "E2003"

    # E3xxx: Configuration errors
    E3001_INVALID_CONFIG = "E3001"
    E3002_VALIDATION_FAILED = "E3002"


# Error code metadata
ERROR_METADATA = {
    ErrorCode.E1001_NOT_FOUND: {
        'severity': 'info',
        'message': 'Participant not found',
        'recoverable': True,
    },
    ErrorCode.E1002_PERMISSION_DENIED: {
        'severity': 'warning',
        'message': 'Permission denied',
        'recoverable': True,
    },
    ErrorCode.E1003_INVALID_STATE: {
        'severity': 'info',
        'message': 'Command not valid in current protection state',
        'recoverable': True,
    },
    ErrorCode.E1004_NOT_A_PARTICIPANT: {
        'severity': 'info',
        'message': 'Command requires an in-game participant',
        'recoverable': True,
    },
    ErrorCode.E1005_USAGE: {
        'severity': 'info',
        'message': 'Invalid command usage',
        'recoverable': True,
    },
    ErrorCode.E2001_SNAPSHOT_LOAD_FAILED: {
        'severity': 'error',
        'message': 'Failed to load protection snapshot',
        'recoverable': True,
    },
    ErrorCode.E2002_SNAPSHOT_SAVE_FAILED: {
        'severity': 'error',
        'message': 'Failed to save protection snapshot',
        'recoverable': True,
    },
    ErrorCode.E2003_SNAPSHOT_CORRUPT: {
        'severity': 'error',
        'message': 'Protection snapshot is corrupt',
        'recoverable': True,
    },
    ErrorCode.E3001_INVALID_CONFIG: {
        'severity': 'error',
        'message': 'Invalid configuration',
        'recoverable': False,
    },
    ErrorCode.E3002_VALIDATION_FAILED: {
        'severity': 'error',
        'message': 'Configuration validation failed',
        'recoverable': False,
    },
}


@dataclass
class CampfireError:
    """
    Structured error with context.

    Example:
        error = CampfireError(
            code=ErrorCode.E1001_NOT_FOUND,
            context={'target': 'Steve'},
        )
    """
    code: ErrorCode
    context: Optional[dict] = None

    @property
    def severity(self) -> str:
        return ERROR_METADATA.get(self.code, {}).get('severity', 'error')

    @property
    def message(self) -> str:
        base_msg = ERROR_METADATA.get(self.code, {}).get('message', 'Unknown error')
        if self.context:
            return f"{base_msg}: {self.context}"
        return base_msg

    @property
    def recoverable(self) -> bool:
        return ERROR_METADATA.get(self.code, {}).get('recoverable', False)

    def to_dict(self) -> dict:
        return {
            'code': self.code.value,
            'severity': self.severity,
            'message': self.message,
            'recoverable': self.recoverable,
            'context': self.context,
        }
