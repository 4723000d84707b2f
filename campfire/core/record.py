"""
Per-participant protection state.

A ProtectionRecord is plain data. The store owns every record; the engine
mutates records it has just fetched and never keeps a reference across ticks.
"""

from dataclasses import dataclass, asdict


@dataclass
class ProtectionRecord:
    """
    Protection state for one participant.

    Attributes:
        last_updated: Timestamp (seconds) of the last time-accounting update
        elapsed_seconds: Protection time consumed so far
        in_protected_zone: Accounting is paused while True
        active: Protection applies while True
        confirmed_termination: Set by 'terminate', required by 'confirm'
    """
    last_updated: int = 0
    elapsed_seconds: int = 0
    in_protected_zone: bool = False
    active: bool = True
    confirmed_termination: bool = False

    @classmethod
    def fresh(cls, now: int) -> 'ProtectionRecord':
        """Create a record for a new protection episode."""
        return cls(last_updated=int(now))

    def accrue(self, now: int) -> int:
        """
        Add the time since the last update to elapsed_seconds.

        Inactive records and records inside a protected zone never accrue.
        Clock steps backwards count as zero.

        Returns:
            Seconds added
        """
        now = int(now)
        if not self.active or self.in_protected_zone:
            return 0

        delta = max(0, now - self.last_updated)
        self.elapsed_seconds += delta
        self.last_updated = now
        return delta

    def touch(self, now: int):
        """Refresh last_updated without accruing."""
        self.last_updated = int(now)

    def remaining(self, duration_seconds: int) -> int:
        """Seconds of protection left (may be negative once overdue)."""
        return duration_seconds - self.elapsed_seconds

    def request_termination(self) -> bool:
        """Arm the termination flag. Only possible while active."""
        if not self.active:
            return False
        self.confirmed_termination = True
        return True

    def to_dict(self) -> dict:
        return asdict(self)

    def __repr__(self) -> str:
        return (
            f"ProtectionRecord(elapsed={self.elapsed_seconds}, "
            f"active={self.active}, "
            f"zone={self.in_protected_zone}, "
            f"confirmed={self.confirmed_termination})"
        )
