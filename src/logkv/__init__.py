"""LogKV: an ordered, log-structured key/value store."""

# -*- coding: utf-8 -*-
from .errors import (
    CorruptionError,
    InvalidArgumentError,
    NotFoundError,
    StoreError,
    StoreIOError,
)
from .rotation import (
    CompositeRotation,
    EntryCountRotation,
    RotationStrategy,
    SizeBasedRotation,
    build_rotation,
)
from .store import Cursor, LogKV

__all__ = [
    "LogKV",
    "Cursor",
    "StoreError",
    "NotFoundError",
    "CorruptionError",
    "InvalidArgumentError",
    "StoreIOError",
    "RotationStrategy",
    "SizeBasedRotation",
    "EntryCountRotation",
    "CompositeRotation",
    "build_rotation",
]
