"""On-disk record format for LogKV segment files."""

import struct
import zlib
from typing import BinaryIO, NamedTuple, Optional, Tuple

from .errors import CorruptionError


class Record(NamedTuple):
    """A single decoded log record."""

    key: bytes
    value: bytes
    timestamp: int
    is_tombstone: bool


class BinaryFormat:
    """Length-prefixed binary records with a CRC32 checksum.

    Layout of one record (big-endian)::

        kind:u8 | key_size:u32 | value_size:u32 | timestamp:u64 | crc32:u32
        key bytes | value bytes

    The checksum covers the first four header fields plus key and value.
    Tombstones are marked by ``kind`` so that empty values stay storable.
    """

    # Format identifier (1 byte) written at the start of every segment
    FORMAT_ID = b"\x02"

    KIND_VALUE = 0
    KIND_TOMBSTONE = 1

    _PREFIX = struct.Struct(">BIIQ")
    _CRC = struct.Struct(">I")
    HEADER_SIZE = _PREFIX.size + _CRC.size

    def get_format_identifier(self) -> bytes:
        """Get the format identifier byte."""
        return self.FORMAT_ID

    def _encode(self, kind: int, key: bytes, value: bytes, timestamp: int) -> bytes:
        prefix = self._PREFIX.pack(kind, len(key), len(value), timestamp)
        crc = zlib.crc32(prefix + key + value)
        return prefix + self._CRC.pack(crc) + key + value

    def encode_record(self, key: bytes, value: bytes, timestamp: int) -> bytes:
        """Encode a live key/value record."""
        return self._encode(self.KIND_VALUE, key, value, timestamp)

    def encode_tombstone(self, key: bytes, timestamp: int) -> bytes:
        """Encode a deletion marker for ``key``."""
        return self._encode(self.KIND_TOMBSTONE, key, b"", timestamp)

    def value_offset(self, key_size: int) -> int:
        """Offset of the value bytes relative to the start of a record."""
        return self.HEADER_SIZE + key_size

    def read_record(self, file: BinaryIO) -> Optional[Tuple[Record, int]]:
        """Read the next record from ``file``.

        Returns
        -------
            ``(record, record_size)``, or None at end of file. A record cut
            short by a crash is treated as end of file.

        Raises
        ------
            CorruptionError: if the checksum or record kind is invalid.

        """
        header = file.read(self.HEADER_SIZE)
        if len(header) < self.HEADER_SIZE:
            return None

        prefix = header[: self._PREFIX.size]
        kind, key_size, value_size, timestamp = self._PREFIX.unpack(prefix)
        (crc,) = self._CRC.unpack(header[self._PREFIX.size :])

        body = file.read(key_size + value_size)
        if len(body) < key_size + value_size:
            return None

        if zlib.crc32(prefix + body) != crc:
            offset = file.tell() - len(body) - self.HEADER_SIZE
            raise CorruptionError(f"checksum mismatch at offset {offset}")
        if kind not in (self.KIND_VALUE, self.KIND_TOMBSTONE):
            raise CorruptionError(f"unknown record kind {kind}")

        record = Record(
            key=body[:key_size],
            value=body[key_size:],
            timestamp=timestamp,
            is_tombstone=kind == self.KIND_TOMBSTONE,
        )
        return record, self.HEADER_SIZE + key_size + value_size


def get_format_by_identifier(identifier: bytes) -> BinaryFormat:
    """Get the format for a segment's identifier byte.

    Raises
    ------
        CorruptionError: if the identifier is not a known format.

    """
    if identifier == BinaryFormat.FORMAT_ID:
        return BinaryFormat()
    raise CorruptionError(f"unknown segment format {identifier!r}")
