"""Line editors that feed the shell.

``PromptEditor`` is the interactive terminal editor with history and command
name completion. ``StreamEditor`` reads from a plain text stream and is used
when stdin is not a terminal.
"""

import logging
import sys
from pathlib import Path
from typing import Callable, Iterable, List, Optional, TextIO

import click
from prompt_toolkit import PromptSession
from prompt_toolkit.completion import Completer, Completion
from prompt_toolkit.history import FileHistory, InMemoryHistory

logger = logging.getLogger(__name__)


class CommandCompleter(Completer):
    """Completes the input against command names.

    Args:
    ----
        complete: Returns the command names matching a prefix.

    """

    def __init__(self, complete: Callable[[str], List[str]]):
        self._complete = complete

    def get_completions(self, document, complete_event) -> Iterable[Completion]:
        prefix = document.text_before_cursor
        for name in self._complete(prefix):
            yield Completion(name, start_position=-len(prefix))


class _RecordedHistoryMixin:
    """History that only stores lines handed to ``record``.

    The prompt session appends raw input on accept; the shell records the
    trimmed line itself instead.
    """

    def append_string(self, string: str) -> None:
        pass

    def record(self, line: str) -> None:
        super().append_string(line)


class RecordedInMemoryHistory(_RecordedHistoryMixin, InMemoryHistory):
    pass


class RecordedFileHistory(_RecordedHistoryMixin, FileHistory):
    pass


class PromptEditor:
    """Interactive editor built on prompt_toolkit.

    Args:
    ----
        complete: Command name lookup used for tab completion.
        history_file: Where to persist history; in memory when None.

    """

    def __init__(
        self,
        complete: Callable[[str], List[str]],
        history_file: Optional[Path] = None,
    ):
        if history_file is not None:
            try:
                history_file.parent.mkdir(parents=True, exist_ok=True)
                self.history = RecordedFileHistory(str(history_file))
            except OSError as e:
                logger.warning("Could not open history file %s: %s", history_file, e)
                self.history = RecordedInMemoryHistory()
        else:
            self.history = RecordedInMemoryHistory()

        self.session = PromptSession(
            history=self.history,
            completer=CommandCompleter(complete),
            complete_while_typing=False,
        )

    def read_line(self, prompt: str) -> Optional[str]:
        """Read one line; None on end of input or interrupt."""
        try:
            return self.session.prompt(prompt)
        except (EOFError, KeyboardInterrupt):
            return None

    def add_history(self, line: str) -> None:
        try:
            self.history.record(line)
        except OSError as e:
            logger.warning("Could not write history: %s", e)


class StreamEditor:
    """Reads lines from a text stream, printing the prompt before each one."""

    def __init__(self, stream: Optional[TextIO] = None):
        self.stream = stream if stream is not None else sys.stdin
        self.history: List[str] = []

    def read_line(self, prompt: str) -> Optional[str]:
        click.echo(prompt, nl=False)
        line = self.stream.readline()
        if not line:
            return None
        return line.rstrip("\r\n")

    def add_history(self, line: str) -> None:
        self.history.append(line)
