"""
ProtectionStore - owner of every participant's ProtectionRecord.

Storage: a single snapshot file (see snapshot.py), loaded wholesale at
startup and saved wholesale after each tick and at shutdown.
"""

import logging
from pathlib import Path
from typing import Dict, Iterator, List, Optional, Tuple

from ..core.errors import CampfireError, ErrorCode
from ..core.record import ProtectionRecord
from .snapshot import SnapshotError, read_snapshot, write_snapshot

logger = logging.getLogger(__name__)


class ProtectionStore:
    """
    Map of participant id -> ProtectionRecord.

    Usage:
        store = ProtectionStore(Path("players.dat"))
        store.load_snapshot()
        record = store.get_or_create("Steve", now)
        ...
        store.save_snapshot()

    A store without a path is memory-only; load/save are no-ops.
    """

    def __init__(self, path: Optional[Path] = None):
        self.path = Path(path) if path else None
        self._records: Dict[str, ProtectionRecord] = {}
        self.last_error: Optional[CampfireError] = None

    def get(self, participant_id: str) -> Optional[ProtectionRecord]:
        """Get a record without creating it."""
        return self._records.get(participant_id)

    def get_or_create(self, participant_id: str, now: int) -> ProtectionRecord:
        """Get a record, inserting a fresh one if absent."""
        record = self._records.get(participant_id)
        if record is None:
            record = ProtectionRecord.fresh(now)
            self._records[participant_id] = record
        return record

    def reset(self, participant_id: str, now: int) -> ProtectionRecord:
        """Replace the record with a fresh episode, whether or not one existed."""
        record = ProtectionRecord.fresh(now)
        self._records[participant_id] = record
        return record

    def ids(self) -> List[str]:
        return sorted(self._records)

    def items(self) -> Iterator[Tuple[str, ProtectionRecord]]:
        for participant_id in self.ids():
            yield participant_id, self._records[participant_id]

    def __contains__(self, participant_id: str) -> bool:
        return participant_id in self._records

    def __len__(self) -> int:
        return len(self._records)

    def load_snapshot(self) -> bool:
        """
        Replace in-memory records with the snapshot on disk.

        A missing snapshot is not an error: the store starts empty.
        Unreadable or corrupt snapshots are logged and the store starts empty.

        Returns:
            True if a snapshot was loaded
        """
        self._records = {}
        if self.path is None:
            return False

        try:
            self._records = read_snapshot(self.path)
        except FileNotFoundError:
            logger.info(f"No snapshot at {self.path}, starting empty")
            return False
        except SnapshotError as e:
            self._record_error(ErrorCode.E2003_SNAPSHOT_CORRUPT, e)
            return False
        except OSError as e:
            self._record_error(ErrorCode.E2001_SNAPSHOT_LOAD_FAILED, e)
            return False

        logger.info(f"Loaded {len(self._records)} protection records from {self.path}")
        return True

    def save_snapshot(self) -> bool:
        """
        Write all records to disk.

        Failures are logged and never raised; in-memory state is kept.

        Returns:
            True if the snapshot was written
        """
        if self.path is None:
            return False

        try:
            write_snapshot(self.path, self._records)
        except (OSError, SnapshotError) as e:
            self._record_error(ErrorCode.E2002_SNAPSHOT_SAVE_FAILED, e)
            return False

        self.last_error = None
        return True

    def _record_error(self, code: ErrorCode, exc: Exception):
        self.last_error = CampfireError(
            code=code,
            context={'path': str(self.path), 'error': str(exc)},
        )
        logger.error(f"[{code.value}] {self.last_error.message}")
