"""--tokens dump of the lexer output to stderr."""

from __future__ import annotations

import sys
from collections.abc import Sequence
from typing import TextIO

from smalilsp.tokens import Token


def dump_tokens(tokens: Sequence[Token], *, file: TextIO = sys.stderr) -> None:
    """Print one token per row: ``line:col-line:col TYPE 'content'``."""
    for token in tokens:
        start = token.span.start
        end = token.span.end
        where = f"{start.line + 1}:{start.column + 1}-{end.line + 1}:{end.column + 1}"
        file.write(f"{where:<16} {token.type.name:<14} {token.content!r}\n")
