"""Shared fixtures for the LogKV tests."""

import pytest

from logkv import LogKV


@pytest.fixture
def store(tmp_path):
    """An open, empty store that is closed after the test."""
    db = LogKV(str(tmp_path / "db"))
    yield db
    db.close()


@pytest.fixture
def abcd_store(store):
    """A store holding keys a, b, c and d."""
    for key in (b"d", b"b", b"a", b"c"):
        store.put(key, b"value-" + key)
    return store
