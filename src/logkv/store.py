"""Implementation of the LogKV ordered key-value store."""

# -*- coding: utf-8 -*-
import bisect
import logging
import threading
import time
from pathlib import Path
from typing import BinaryIO, Dict, List, NamedTuple, Optional

from .errors import (
    CorruptionError,
    InvalidArgumentError,
    NotFoundError,
    StoreIOError,
)
from .formats import BinaryFormat, get_format_by_identifier
from .rotation import RotationStrategy, build_rotation

try:
    import fcntl
except ImportError:  # Windows
    fcntl = None

logger = logging.getLogger(__name__)


class KeyDirEntry(NamedTuple):
    """Location of the live value for a key."""

    file_id: int
    value_pos: int
    value_size: int


class LogKV:
    """An ordered, log-structured key/value store.

    Writes are appended to segment files; an in-memory key directory maps every
    live key to the segment and offset of its latest value and keeps the keys
    in byte order, so that cursors can seek and step in both directions.
    """

    DEFAULT_MAX_FILE_SIZE = 4 * 1024 * 1024
    LOCK_FILE = "LOCK"
    SEGMENT_GLOB = "data_*.log"

    def __init__(
        self,
        path: str,
        create_if_missing: bool = True,
        error_if_exists: bool = False,
        rotation_strategy: Optional[RotationStrategy] = None,
    ):
        """Open the store at ``path``.

        Args:
        ----
            path: Directory holding the store's files.
            create_if_missing: Create the directory if it does not exist.
            error_if_exists: Fail if the directory already holds a store.
            rotation_strategy: When to start a new segment. Defaults to
                size-based rotation at ``DEFAULT_MAX_FILE_SIZE`` bytes.

        Raises:
        ------
            InvalidArgumentError: if the path conflicts with the open flags.
            CorruptionError: if an existing segment cannot be decoded.
            StoreIOError: if the files cannot be created, read or locked.

        """
        self.path = Path(path)
        self.format = BinaryFormat()
        self.rotation_strategy = rotation_strategy or build_rotation(
            self.DEFAULT_MAX_FILE_SIZE
        )

        self.keydir: Dict[bytes, KeyDirEntry] = {}
        self._sorted_keys: List[bytes] = []

        self.active_file: Optional[BinaryIO] = None
        self.active_file_id: int = 0
        self.active_file_path: Optional[Path] = None
        self.active_file_entry_count: int = 0

        self._readers: Dict[int, BinaryIO] = {}
        self._lock_file: Optional[BinaryIO] = None
        self._lock = threading.RLock()
        self._closed = False

        try:
            self._prepare_directory(create_if_missing, error_if_exists)
            self._acquire_lock()
            self._initialize()
        except OSError as e:
            self.close()
            raise StoreIOError(f"{self.path}: {e.strerror or e}") from e
        except Exception:
            self.close()
            raise

    def _segment_path(self, file_id: int) -> Path:
        return self.path / f"data_{file_id}.log"

    def _segment_ids(self) -> List[int]:
        ids = []
        for segment in self.path.glob(self.SEGMENT_GLOB):
            try:
                ids.append(int(segment.stem.split("_")[1]))
            except (IndexError, ValueError):
                logger.warning("Ignoring unrecognized file %s", segment)
        return sorted(ids)

    def _prepare_directory(self, create_if_missing: bool, error_if_exists: bool):
        if self.path.exists():
            if not self.path.is_dir():
                raise InvalidArgumentError(f"{self.path}: not a directory")
            if error_if_exists and self._segment_ids():
                raise InvalidArgumentError(
                    f"{self.path}: exists (error_if_exists is true)"
                )
            return

        if not create_if_missing:
            raise InvalidArgumentError(
                f"{self.path}: does not exist (create_if_missing is false)"
            )
        logger.debug("Creating store directory %s", self.path)
        self.path.mkdir(parents=True, exist_ok=True)

    def _acquire_lock(self):
        lock_path = self.path / self.LOCK_FILE
        self._lock_file = open(lock_path, "a+b")
        if fcntl is None:
            return
        try:
            fcntl.flock(self._lock_file.fileno(), fcntl.LOCK_EX | fcntl.LOCK_NB)
        except OSError as e:
            self._lock_file.close()
            self._lock_file = None
            raise StoreIOError(f"lock {lock_path}: already held by process") from e

    def _initialize(self):
        """Replay existing segments or create the first one."""
        segment_ids = self._segment_ids()
        if not segment_ids:
            logger.debug("No existing segments found, creating new one")
            self._create_new_data_file()
            return

        valid_end = 0
        for file_id in segment_ids:
            valid_end = self._replay_segment(file_id)
        self._sorted_keys = sorted(self.keydir)

        # Drop a torn trailing record so that later appends stay readable
        last_path = self._segment_path(segment_ids[-1])
        if last_path.stat().st_size > valid_end:
            logger.warning(
                "Truncating torn record at %s:%d", last_path.name, valid_end
            )
            with open(last_path, "r+b") as f:
                f.truncate(valid_end)

        self.active_file_id = segment_ids[-1]
        self.active_file_path = last_path
        self._open_active_file()
        if valid_end == 0:
            # Segment created but never stamped with its format id
            logger.warning("Stamping empty segment %s", last_path.name)
            self.active_file.write(self.format.get_format_identifier())
            self.active_file.flush()
        logger.debug(
            "Recovered %d keys from %d segments", len(self.keydir), len(segment_ids)
        )

    def _replay_segment(self, file_id: int) -> int:
        """Apply one segment to the key directory.

        Returns
        -------
            The offset just past the last complete record.

        """
        segment_path = self._segment_path(file_id)
        with open(segment_path, "rb") as f:
            identifier = f.read(1)
            if not identifier:
                return 0
            data_format = get_format_by_identifier(identifier)
            entry_count = 0

            while True:
                record_pos = f.tell()
                try:
                    result = data_format.read_record(f)
                except CorruptionError as e:
                    raise CorruptionError(f"{segment_path.name}: {e.message}") from e
                if result is None:
                    break

                record, _ = result
                entry_count += 1
                if record.is_tombstone:
                    self.keydir.pop(record.key, None)
                    continue

                self.keydir[record.key] = KeyDirEntry(
                    file_id=file_id,
                    value_pos=record_pos + data_format.value_offset(len(record.key)),
                    value_size=len(record.value),
                )

        self.active_file_entry_count = entry_count
        return record_pos

    def _create_new_data_file(self):
        """Seal the active segment and start a new one."""
        if self.active_file is not None:
            self.active_file.close()

        self.active_file_id += 1
        self.active_file_path = self._segment_path(self.active_file_id)
        self._open_active_file()

        self.active_file.write(self.format.get_format_identifier())
        self.active_file.flush()
        self.active_file_entry_count = 0
        logger.debug("Started segment %s", self.active_file_path.name)

    def _open_active_file(self):
        if self.active_file:
            self.active_file.close()
        self.active_file = open(self.active_file_path, "a+b")
        self.active_file.seek(0, 2)

    def _check_open(self):
        if self._closed:
            raise InvalidArgumentError("database is closed")

    def _append(self, record: bytes) -> int:
        """Append an encoded record to the active segment and return its offset."""
        if self.active_file_entry_count and self.rotation_strategy.should_rotate(
            self.active_file.tell(), self.active_file_entry_count
        ):
            self._create_new_data_file()

        record_pos = self.active_file.tell()
        self.active_file.write(record)
        self.active_file.flush()
        self.active_file_entry_count += 1
        return record_pos

    def _read_value(self, entry: KeyDirEntry) -> bytes:
        reader = self._readers.get(entry.file_id)
        if reader is None:
            reader = open(self._segment_path(entry.file_id), "rb")
            self._readers[entry.file_id] = reader
        reader.seek(entry.value_pos)
        value = reader.read(entry.value_size)
        if len(value) < entry.value_size:
            raise CorruptionError(
                f"data_{entry.file_id}.log: truncated value at {entry.value_pos}"
            )
        return value

    def get(self, key: bytes) -> bytes:
        """Return the value stored for ``key``.

        Raises
        ------
            NotFoundError: if the key does not exist.

        """
        with self._lock:
            self._check_open()
            entry = self.keydir.get(key)
            if entry is None:
                raise NotFoundError()
            try:
                return self._read_value(entry)
            except OSError as e:
                raise StoreIOError(f"data_{entry.file_id}.log: {e}") from e

    def put(self, key: bytes, value: bytes) -> None:
        """Store ``value`` under ``key``, replacing any previous value."""
        with self._lock:
            self._check_open()
            timestamp = int(time.time() * 1000)
            record = self.format.encode_record(key, value, timestamp)
            try:
                record_pos = self._append(record)
            except OSError as e:
                raise StoreIOError(f"{self.active_file_path}: {e}") from e

            if key not in self.keydir:
                bisect.insort(self._sorted_keys, key)
            self.keydir[key] = KeyDirEntry(
                file_id=self.active_file_id,
                value_pos=record_pos + self.format.value_offset(len(key)),
                value_size=len(value),
            )
            logger.debug(
                "Wrote record: key=%r, pos=%d, size=%d", key, record_pos, len(record)
            )

    def delete(self, key: bytes) -> None:
        """Remove ``key``. Deleting a missing key is not an error."""
        with self._lock:
            self._check_open()
            if key not in self.keydir:
                return

            timestamp = int(time.time() * 1000)
            try:
                self._append(self.format.encode_tombstone(key, timestamp))
            except OSError as e:
                raise StoreIOError(f"{self.active_file_path}: {e}") from e

            del self.keydir[key]
            index = bisect.bisect_left(self._sorted_keys, key)
            del self._sorted_keys[index]
            logger.debug("Deleted key: %r", key)

    def iterator(self) -> "Cursor":
        """Create a cursor over a snapshot of the current key order.

        The cursor starts out invalid; position it with one of the seek
        methods first.
        """
        with self._lock:
            self._check_open()
            return Cursor(self, list(self._sorted_keys), dict(self.keydir))

    def close(self) -> None:
        """Close the store and release its lock. Safe to call twice."""
        with self._lock:
            if self.active_file is not None:
                self.active_file.close()
                self.active_file = None
            for reader in self._readers.values():
                reader.close()
            self._readers.clear()
            if self._lock_file is not None:
                if fcntl is not None:
                    fcntl.flock(self._lock_file.fileno(), fcntl.LOCK_UN)
                self._lock_file.close()
                self._lock_file = None
                logger.debug("Closed database %s", self.path)
            self._closed = True

    def __enter__(self) -> "LogKV":
        return self

    def __exit__(self, exc_type, exc_value, traceback) -> None:
        self.close()


class Cursor:
    """A bidirectional cursor over a snapshot of a store's keys.

    Mirrors the LevelDB iterator contract: ``next``/``prev``/``key``/``value``
    require a valid position, and stepping past either end invalidates it.
    """

    def __init__(
        self, store: LogKV, keys: List[bytes], entries: Dict[bytes, KeyDirEntry]
    ):
        self._store = store
        self._keys = keys
        self._entries = entries
        self._pos = -1
        self._closed = False

    def valid(self) -> bool:
        return not self._closed and 0 <= self._pos < len(self._keys)

    def _check_valid(self):
        if not self.valid():
            raise InvalidArgumentError("cursor is not positioned on a key")

    def seek_to_first(self) -> None:
        self._pos = 0

    def seek_to_last(self) -> None:
        self._pos = len(self._keys) - 1

    def seek(self, target: bytes) -> None:
        """Position at the first key greater than or equal to ``target``."""
        self._pos = bisect.bisect_left(self._keys, target)

    def next(self) -> None:
        self._check_valid()
        self._pos += 1

    def prev(self) -> None:
        self._check_valid()
        self._pos -= 1

    def key(self) -> bytes:
        self._check_valid()
        return self._keys[self._pos]

    def value(self) -> bytes:
        self._check_valid()
        entry = self._entries[self._keys[self._pos]]
        with self._store._lock:
            self._store._check_open()
            return self._store._read_value(entry)

    def close(self) -> None:
        self._closed = True
        self._keys = []
        self._entries = {}

    def __enter__(self) -> "Cursor":
        return self

    def __exit__(self, exc_type, exc_value, traceback) -> None:
        self.close()
