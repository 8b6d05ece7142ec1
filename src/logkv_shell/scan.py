"""Bounded key range scans over a store cursor.

Both scans treat their bounds as inclusive and yield keys only. The caller
owns the cursor and is responsible for closing it.
"""

from typing import Iterator, Optional

from logkv import Cursor


def ascending_keys(
    cursor: Cursor, start: Optional[bytes] = None, end: Optional[bytes] = None
) -> Iterator[bytes]:
    """Yield keys in ``[start, end]`` from smallest to largest."""
    if start is not None:
        cursor.seek(start)
    else:
        cursor.seek_to_first()

    while cursor.valid():
        key = cursor.key()
        if end is not None and key > end:
            break
        yield key
        cursor.next()


def seek_at_or_before(cursor: Cursor, target: bytes) -> None:
    """Position ``cursor`` on the largest key less than or equal to ``target``.

    The store only seeks forward to the first key >= target, so step back one
    key when that lands past an exact match. Leaves the cursor invalid if every
    key is greater than ``target``.
    """
    cursor.seek(target)
    if not cursor.valid():
        cursor.seek_to_last()
    elif cursor.key() > target:
        cursor.prev()


def descending_keys(
    cursor: Cursor, start: Optional[bytes] = None, end: Optional[bytes] = None
) -> Iterator[bytes]:
    """Yield keys in ``[end, start]`` from largest to smallest.

    ``start`` is the upper bound here: the reverse scan begins at it and walks
    down to ``end``.
    """
    if start is not None:
        seek_at_or_before(cursor, start)
    else:
        cursor.seek_to_last()

    while cursor.valid():
        key = cursor.key()
        if end is not None and key < end:
            break
        yield key
        cursor.prev()
