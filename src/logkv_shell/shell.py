"""Read-eval-print loop for the LogKV shell."""

import logging
from typing import Optional, Protocol

from .commands import Dispatcher

logger = logging.getLogger(__name__)

DEFAULT_PROMPT = "> "


class LineEditor(Protocol):
    """What the shell needs from a line editor."""

    def read_line(self, prompt: str) -> Optional[str]:
        ...

    def add_history(self, line: str) -> None:
        ...


class Shell:
    """Reads command lines from an editor and dispatches them.

    Args:
    ----
        dispatcher: Routes each line to its command handler.
        editor: Supplies input lines and records history.
        prompt: Shown before every line is read.

    """

    def __init__(
        self,
        dispatcher: Dispatcher,
        editor: LineEditor,
        prompt: str = DEFAULT_PROMPT,
    ):
        self.dispatcher = dispatcher
        self.editor = editor
        self.prompt = prompt

    def handle_line(self, line: str) -> None:
        """Process one raw input line."""
        line = line.strip()
        if not line:
            return

        self.dispatcher.dispatch(line)
        self.editor.add_history(line)

    def run(self) -> None:
        """Loop until the editor reports end of input."""
        while True:
            line = self.editor.read_line(self.prompt)
            if line is None:
                logger.debug("End of input")
                return
            self.handle_line(line)
