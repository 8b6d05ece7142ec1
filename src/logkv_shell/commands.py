"""Command table and dispatcher for the LogKV shell.

Every handler receives the open store and the raw text following the command
word, and pulls its own arguments out of that text with a Tokenizer.
"""

import logging
from dataclasses import dataclass
from typing import Callable, List, Optional, Sequence, Tuple

import click

from logkv import LogKV, StoreError

from .scan import ascending_keys, descending_keys
from .tokenizer import Tokenizer

logger = logging.getLogger(__name__)

ENCODING = "utf-8"

INVALID_KEY = "Invalid key specified."

Handler = Callable[[LogKV, str], None]


@dataclass(frozen=True)
class Command:
    """A shell command: its name, usage hint, description and handler."""

    name: str
    usage: str
    description: str
    handler: Handler

    def help_line(self) -> str:
        return f"{self.name:<5} {self.usage:<20} {self.description}"


def encode(text: str) -> bytes:
    # Undecodable input bytes arrive as surrogates and go back out unchanged
    return text.encode(ENCODING, errors="surrogateescape")


def decode(data: bytes) -> str:
    return data.decode(ENCODING, errors="backslashreplace")


def printable(text: str) -> str:
    """Render user input for the terminal, escaping raw bytes."""
    return decode(encode(text))


def ordered_bounds(
    start: Optional[str], end: Optional[str]
) -> Tuple[Optional[bytes], Optional[bytes]]:
    """Encode optional range bounds, putting a pair in ascending key order."""
    low = encode(start) if start is not None else None
    high = encode(end) if end is not None else None
    if low is not None and high is not None and low > high:
        low, high = high, low
    return low, high


def delete_key(store: LogKV, args: str) -> None:
    """Delete <key> from the store."""
    key = Tokenizer(args).next_argument()
    if key is None:
        click.echo(INVALID_KEY)
        return

    try:
        store.delete(encode(key))
    except StoreError as e:
        click.echo(f"Error deleting '{printable(key)}' from database: {e}")


def get_value(store: LogKV, args: str) -> None:
    """Print the value of <key>."""
    key = Tokenizer(args).next_argument()
    if key is None:
        click.echo(INVALID_KEY)
        return

    try:
        value = store.get(encode(key))
    except StoreError as e:
        click.echo(f"Error reading '{printable(key)}' from database: {e}")
        return
    click.echo(decode(value))


def set_value(store: LogKV, args: str) -> None:
    """Set the <value> of <key>; a missing value stores an empty string."""
    tokens = Tokenizer(args)
    key = tokens.next_argument()
    value = tokens.next_argument()

    if key is None:
        click.echo(INVALID_KEY)
        return
    if value is None:
        value = ""

    try:
        store.put(encode(key), encode(value))
    except StoreError as e:
        click.echo(f"Error inserting '{printable(key)}' into database: {e}")


def list_keys(store: LogKV, args: str) -> None:
    """Print keys in [start, end] in ascending order."""
    tokens = Tokenizer(args)
    start, end = ordered_bounds(tokens.next_argument(), tokens.next_argument())

    try:
        with store.iterator() as cursor:
            for key in ascending_keys(cursor, start, end):
                click.echo(decode(key))
    except StoreError as e:
        click.echo(f"Error listing keys: {e}")


def reverse_list_keys(store: LogKV, args: str) -> None:
    """Print keys in [start, end] in descending order."""
    tokens = Tokenizer(args)
    start, end = ordered_bounds(tokens.next_argument(), tokens.next_argument())
    if start is not None and end is not None:
        # A bounded reverse scan walks down from the larger key
        start, end = end, start

    try:
        with store.iterator() as cursor:
            for key in descending_keys(cursor, start, end):
                click.echo(decode(key))
    except StoreError as e:
        click.echo(f"Error listing keys: {e}")


def show_help(store: LogKV, args: str) -> None:
    """Print usage for one command, or for all of them."""
    name = Tokenizer(args).next_argument()
    match = find_command(COMMANDS, name) if name is not None else None

    if match is not None:
        click.echo(match.help_line())
        return

    for command in COMMANDS:
        click.echo(command.help_line())


COMMANDS: Tuple[Command, ...] = (
    Command("del", "<key>", "Deletes <key> from the database.", delete_key),
    Command("get", "<key>", "Prints the value of <key>.", get_value),
    Command(
        "list",
        "[start] [end]",
        "Prints out keys in the range [start, end] inclusive, in either bound order.",
        list_keys,
    ),
    Command(
        "rlist",
        "[start] [end]",
        "Prints out keys in the range [start, end] inclusive in reverse key order.",
        reverse_list_keys,
    ),
    Command("set", "<key> <value>", "Sets the <value> of <key>.", set_value),
    Command("help", "[command]", "Shows help about the specified command.", show_help),
)


def find_command(commands: Sequence[Command], name: str) -> Optional[Command]:
    """Return the first command called exactly ``name``."""
    for command in commands:
        if command.name == name:
            return command
    return None


class Dispatcher:
    """Routes command lines to handlers.

    Args:
    ----
        store: The open store handed to every handler.
        commands: The command table, searched in order.

    """

    def __init__(self, store: LogKV, commands: Sequence[Command] = COMMANDS):
        self.store = store
        self.commands = tuple(commands)

    def dispatch(self, line: str) -> bool:
        """Run the command on a trimmed, non-empty ``line``.

        Returns:
        -------
            bool: True if the command word was recognized.

        """
        word = line.split()[0]
        command = find_command(self.commands, word)
        if command is None:
            click.echo(f"Unrecognized command '{printable(word)}'.")
            return False

        logger.debug("Dispatching %s", command.name)
        args = line[line.find(word) + len(word) :]
        command.handler(self.store, args)
        return True

    def complete(self, prefix: str) -> List[str]:
        """Return the command names starting with ``prefix``, in table order."""
        return [
            command.name
            for command in self.commands
            if command.name.startswith(prefix)
        ]
