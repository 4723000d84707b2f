"""
Durable snapshot format for protection records.

The snapshot is a header followed by one variable-length entry per record.

Header layout (16 bytes):
    Bytes 0-3:   magic         "CMPF"
    Byte 4:      version       Snapshot schema version (1)
    Byte 5:      reserved
    Bytes 6-7:   reserved
    Bytes 8-11:  record_count  Number of entries that follow
    Bytes 12-15: crc32         CRC32 of everything after the header

Entry layout (v1):
    u16     id_len          Length of the UTF-8 participant id
    bytes   id              Participant id
    i64     last_updated    Seconds
    u32     elapsed_seconds
    u8      flags           bit0=in_protected_zone, bit1=active,
                            bit2=confirmed_termination
"""

import os
import struct
import zlib
from dataclasses import dataclass
from pathlib import Path
from typing import Dict

from ..core.record import ProtectionRecord


# Magic bytes: "CMPF"
MAGIC = b'CMPF'

SNAPSHOT_VERSION = 1

HEADER_SIZE = 16

# Entry field formats
ID_LEN_FORMAT = '<H'
ENTRY_FORMAT = '<qIB'
ENTRY_SIZE = struct.calcsize(ENTRY_FORMAT)

MAX_ID_BYTES = 0xFFFF

FLAG_IN_ZONE = 0x01
FLAG_ACTIVE = 0x02
FLAG_CONFIRMED = 0x04


class SnapshotError(ValueError):
    """Raised when a snapshot cannot be encoded or decoded."""


@dataclass
class SnapshotHeader:
    """Snapshot file header."""

    magic: bytes = MAGIC
    version: int = SNAPSHOT_VERSION
    record_count: int = 0
    crc32: int = 0

    # Struct format: 4s=magic, B=version, x=reserved, 2x=reserved,
    #                I=record_count, I=crc32
    FORMAT = '<4sBx2xII'

    def encode(self) -> bytes:
        """Encode header to bytes."""
        return struct.pack(
            self.FORMAT,
            self.magic,
            self.version,
            self.record_count,
            self.crc32,
        )

    @classmethod
    def decode(cls, data: bytes) -> 'SnapshotHeader':
        """Decode header from bytes."""
        if len(data) < HEADER_SIZE:
            raise SnapshotError(f"Header too small: {len(data)} < {HEADER_SIZE}")

        magic, version, count, crc = struct.unpack(cls.FORMAT, data[:HEADER_SIZE])

        if magic != MAGIC:
            raise SnapshotError(f"Invalid magic: {magic!r} (expected {MAGIC!r})")

        if version != SNAPSHOT_VERSION:
            raise SnapshotError(f"Unsupported snapshot version: {version}")

        return cls(magic=magic, version=version, record_count=count, crc32=crc)


def _pack_flags(record: ProtectionRecord) -> int:
    flags = 0
    if record.in_protected_zone:
        flags |= FLAG_IN_ZONE
    if record.active:
        flags |= FLAG_ACTIVE
    if record.confirmed_termination:
        flags |= FLAG_CONFIRMED
    return flags


def _encode_entry(participant_id: str, record: ProtectionRecord) -> bytes:
    raw_id = participant_id.encode('utf-8')
    if len(raw_id) > MAX_ID_BYTES:
        raise SnapshotError(f"Participant id too long: {len(raw_id)} bytes")

    try:
        fixed = struct.pack(
            ENTRY_FORMAT,
            record.last_updated,
            record.elapsed_seconds,
            _pack_flags(record),
        )
    except struct.error as e:
        raise SnapshotError(f"Cannot encode record for {participant_id!r}: {e}") from e

    return struct.pack(ID_LEN_FORMAT, len(raw_id)) + raw_id + fixed


def encode_snapshot(records: Dict[str, ProtectionRecord]) -> bytes:
    """
    Encode a full id -> record mapping.

    Entries are written in sorted id order so equal mappings produce equal
    bytes.
    """
    payload = b''.join(
        _encode_entry(pid, records[pid]) for pid in sorted(records)
    )
    header = SnapshotHeader(
        record_count=len(records),
        crc32=zlib.crc32(payload) & 0xFFFFFFFF,
    )
    return header.encode() + payload


def decode_snapshot(data: bytes) -> Dict[str, ProtectionRecord]:
    """
    Decode a snapshot produced by encode_snapshot().

    Raises:
        SnapshotError: Bad magic, unsupported version, CRC mismatch,
            truncated or trailing data
    """
    header = SnapshotHeader.decode(data)
    payload = data[HEADER_SIZE:]

    if zlib.crc32(payload) & 0xFFFFFFFF != header.crc32:
        raise SnapshotError("CRC mismatch")

    records: Dict[str, ProtectionRecord] = {}
    offset = 0
    id_len_size = struct.calcsize(ID_LEN_FORMAT)

    for index in range(header.record_count):
        if offset + id_len_size > len(payload):
            raise SnapshotError(f"Truncated entry {index}")
        (id_len,) = struct.unpack_from(ID_LEN_FORMAT, payload, offset)
        offset += id_len_size

        if offset + id_len + ENTRY_SIZE > len(payload):
            raise SnapshotError(f"Truncated entry {index}")
        try:
            participant_id = payload[offset:offset + id_len].decode('utf-8')
        except UnicodeDecodeError as e:
            raise SnapshotError(f"Invalid id in entry {index}: {e}") from e
        offset += id_len

        last_updated, elapsed, flags = struct.unpack_from(ENTRY_FORMAT, payload, offset)
        offset += ENTRY_SIZE

        records[participant_id] = ProtectionRecord(
            last_updated=last_updated,
            elapsed_seconds=elapsed,
            in_protected_zone=bool(flags & FLAG_IN_ZONE),
            active=bool(flags & FLAG_ACTIVE),
            confirmed_termination=bool(flags & FLAG_CONFIRMED),
        )

    if offset != len(payload):
        raise SnapshotError(f"Trailing data: {len(payload) - offset} bytes")

    return records


def write_snapshot(path: Path, records: Dict[str, ProtectionRecord]) -> None:
    """Write a snapshot file, replacing any previous one atomically."""
    path = Path(path)
    data = encode_snapshot(records)

    path.parent.mkdir(parents=True, exist_ok=True)
    tmp_path = path.with_name(path.name + '.tmp')
    try:
        with open(tmp_path, 'wb') as f:
            f.write(data)
            f.flush()
            os.fsync(f.fileno())
        os.replace(tmp_path, path)
    except OSError:
        if tmp_path.exists():
            tmp_path.unlink()
        raise


def read_snapshot(path: Path) -> Dict[str, ProtectionRecord]:
    """
    Read a snapshot file.

    Raises:
        FileNotFoundError: No snapshot has been written yet
        SnapshotError: File exists but cannot be decoded
    """
    with open(path, 'rb') as f:
        return decode_snapshot(f.read())


# Verify struct size at module load
_computed_size = struct.calcsize(SnapshotHeader.FORMAT)
assert _computed_size == HEADER_SIZE, \
    f"SnapshotHeader format size mismatch: {_computed_size} != {HEADER_SIZE}"
