"""When to seal the active segment and start a new one.

The store asks its strategy before every append, passing the active
segment's size and record count. Limits are combined with
``build_rotation``, which is how the shell turns its configuration into a
strategy.
"""

from abc import ABC, abstractmethod
from typing import List, Optional, Sequence


class RotationStrategy(ABC):
    """Decides whether the active segment is full."""

    @abstractmethod
    def should_rotate(self, file_size: int, entry_count: int) -> bool:
        """Return True if the next record belongs in a new segment."""


class SizeBasedRotation(RotationStrategy):
    """Seal a segment once it holds ``max_size_bytes`` bytes."""

    def __init__(self, max_size_bytes: int):
        if max_size_bytes <= 0:
            raise ValueError("max_size_bytes must be positive")
        self.max_size_bytes = max_size_bytes

    def should_rotate(self, file_size: int, entry_count: int) -> bool:
        return file_size >= self.max_size_bytes

    def __repr__(self) -> str:
        return f"SizeBasedRotation({self.max_size_bytes})"


class EntryCountRotation(RotationStrategy):
    """Seal a segment once it holds ``max_entries`` records, tombstones included."""

    def __init__(self, max_entries: int):
        if max_entries <= 0:
            raise ValueError("max_entries must be positive")
        self.max_entries = max_entries

    def should_rotate(self, file_size: int, entry_count: int) -> bool:
        return entry_count >= self.max_entries

    def __repr__(self) -> str:
        return f"EntryCountRotation({self.max_entries})"


class CompositeRotation(RotationStrategy):
    """Seal a segment as soon as any member strategy says so."""

    def __init__(self, strategies: Sequence[RotationStrategy]):
        if not strategies:
            raise ValueError("at least one strategy is required")
        self.strategies: List[RotationStrategy] = list(strategies)

    def should_rotate(self, file_size: int, entry_count: int) -> bool:
        return any(
            strategy.should_rotate(file_size, entry_count)
            for strategy in self.strategies
        )

    def __repr__(self) -> str:
        return f"CompositeRotation({self.strategies!r})"


def build_rotation(
    max_file_size: int, max_entries: Optional[int] = None
) -> RotationStrategy:
    """Build the strategy for a size limit and an optional record limit.

    Args:
    ----
        max_file_size: Segment size in bytes at which to rotate.
        max_entries: Record count at which to rotate, or None for no limit.

    """
    by_size = SizeBasedRotation(max_file_size)
    if max_entries is None:
        return by_size
    return CompositeRotation([by_size, EntryCountRotation(max_entries)])
