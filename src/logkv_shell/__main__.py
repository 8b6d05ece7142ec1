"""Command-line entry point for the LogKV shell.

Opens (or creates) the store given on the command line and runs an
interactive prompt against it until end of input.
"""

import logging
import sys
from typing import Optional, Tuple

import click

from logkv import LogKV, StoreError, build_rotation

from .commands import Dispatcher
from .config import ShellConfig
from .editor import PromptEditor, StreamEditor
from .shell import Shell

logger = logging.getLogger(__name__)


def make_editor(
    dispatcher: Dispatcher, history_file: Optional[str], config: ShellConfig
):
    """Pick the interactive editor for terminals, a stream reader otherwise."""
    if sys.stdin.isatty():
        return PromptEditor(
            dispatcher.complete, history_file=config.get_history_file(history_file)
        )
    # Raw bytes that are not UTF-8 survive as surrogates
    stdin = click.get_text_stream("stdin", encoding="utf-8", errors="surrogateescape")
    return StreamEditor(stdin)


@click.command()
@click.argument("database", nargs=-1, metavar="DATABASE")
@click.option("--debug", is_flag=True, help="Log store and dispatch activity")
@click.option("--history-file", help="File to keep command history in")
@click.option("--prompt", help="Prompt shown before each command")
@click.pass_context
def cli(
    ctx,
    database: Tuple[str, ...],
    debug: bool,
    history_file: Optional[str],
    prompt: Optional[str],
):
    """LogKV shell - inspect and edit an ordered key-value store."""
    if len(database) != 1:
        click.echo(f"Usage: {ctx.info_name} <database>")
        ctx.exit(1)
    path = database[0]

    config = ShellConfig()
    debug = debug or config.get_debug_mode()
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.WARNING,
        format="%(asctime)s %(name)s %(levelname)s: %(message)s",
    )

    try:
        store = LogKV(
            path,
            create_if_missing=True,
            rotation_strategy=build_rotation(
                config.get_max_file_size(), config.get_max_entries()
            ),
        )
    except StoreError as e:
        click.echo(f"Error opening database '{path}': {e}")
        ctx.exit(1)

    with store:
        dispatcher = Dispatcher(store)
        editor = make_editor(dispatcher, history_file, config)
        Shell(dispatcher, editor, prompt=config.get_prompt(prompt)).run()
    logger.debug("Closed %s", path)


if __name__ == "__main__":
    cli()
