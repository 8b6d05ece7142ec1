"""Interactive shell for inspecting and editing a LogKV store."""

# -*- coding: utf-8 -*-
from .commands import COMMANDS, Command, Dispatcher
from .shell import Shell
from .tokenizer import ParseError, Tokenizer, parse_token

__all__ = [
    "COMMANDS",
    "Command",
    "Dispatcher",
    "Shell",
    "ParseError",
    "Tokenizer",
    "parse_token",
]
