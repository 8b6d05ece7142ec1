"""Exceptions raised by the LogKV store.

Every error carries a status code so that callers can print it the same way
LevelDB prints a ``Status``: ``"<Code>: <message>"``.
"""


class StoreError(Exception):
    """Base class for all store errors."""

    code = "Error"

    def __init__(self, message: str = ""):
        """Initialize the error with a human-readable message."""
        super().__init__(message)
        self.message = message

    def __str__(self) -> str:
        return f"{self.code}: {self.message}"


class NotFoundError(StoreError):
    """The requested key does not exist."""

    code = "NotFound"


class CorruptionError(StoreError):
    """A data file failed validation while being read."""

    code = "Corruption"


class InvalidArgumentError(StoreError):
    """The store was opened or used with invalid arguments."""

    code = "Invalid argument"


class StoreIOError(StoreError):
    """An operating system call on the store's files failed."""

    code = "IO error"
