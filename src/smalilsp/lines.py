"""Grouping of the token stream into logical lines."""

from __future__ import annotations

from collections.abc import Sequence

from smalilsp.tokens import Token, TokenType


def trim_line(tokens: Sequence[Token]) -> list[Token]:
    """Drop comments and leading/trailing spaces, keeping interior spaces."""
    out: list[Token] = []
    pending: list[Token] = []

    for token in tokens:
        if token.type is TokenType.COMMENT:
            continue
        if token.type is TokenType.SPACE:
            # Only kept once a non-space token follows
            if out:
                pending.append(token)
            continue
        out.extend(pending)
        pending.clear()
        out.append(token)

    return out


class LineAssembler:
    """Buffer tokens and hand back a trimmed line at each newline.

    ``feed`` returns the finished line when *token* is a ``NEWLINE`` and the
    trimmed line is non-empty, otherwise ``None``. ``flush`` does the same for
    a last line with no trailing newline.
    """

    def __init__(self) -> None:
        self._buffer: list[Token] = []

    def feed(self, token: Token) -> list[Token] | None:
        if token.type is not TokenType.NEWLINE:
            self._buffer.append(token)
            return None
        return self.flush()

    def flush(self) -> list[Token] | None:
        line = trim_line(self._buffer)
        self._buffer = []
        return line or None
