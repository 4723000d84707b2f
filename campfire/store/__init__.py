"""Protection record storage and the durable snapshot format."""

from .snapshot import (
    MAGIC,
    HEADER_SIZE,
    SNAPSHOT_VERSION,
    SnapshotError,
    SnapshotHeader,
    encode_snapshot,
    decode_snapshot,
    read_snapshot,
    write_snapshot,
)
from .store import ProtectionStore

__all__ = [
    'MAGIC',
    'HEADER_SIZE',
    'SNAPSHOT_VERSION',
    'SnapshotError',
    'SnapshotHeader',
    'encode_snapshot',
    'decode_snapshot',
    'read_snapshot',
    'write_snapshot',
    'ProtectionStore',
]
