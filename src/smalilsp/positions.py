"""Conversion between absolute text offsets and editor line/column positions.

Offsets always count code points (Python ``str`` indices). Columns are
counted in the units of an *encoding*: ``"utf-32"`` counts code points and is
what the lexer stamps on tokens, ``"utf-16"`` is the editor-protocol default,
``"utf-8"`` counts bytes.
"""

from __future__ import annotations

from bisect import bisect_right

from smalilsp.tokens import Position, Span

UTF8 = "utf-8"
UTF16 = "utf-16"
UTF32 = "utf-32"

ENCODINGS = (UTF8, UTF16, UTF32)


def _units(ch: str, encoding: str) -> int:
    """Return how many column units *ch* occupies in *encoding*."""
    if encoding == UTF32:
        return 1
    if encoding == UTF16:
        return 2 if ord(ch) > 0xFFFF else 1
    if encoding == UTF8:
        return len(ch.encode("utf-8", "surrogatepass"))
    raise ValueError(f"unknown position encoding: {encoding!r}")


def _measure(text: str, encoding: str) -> int:
    if encoding == UTF32:
        return len(text)
    return sum(_units(ch, encoding) for ch in text)


def offset_to_position(offset: int, text: str, encoding: str = UTF32) -> Position:
    """Return the position of *offset* in *text*.

    The line is the number of ``\\n`` strictly before the offset; the column is
    the distance from the preceding ``\\n`` (or start of text). Offsets outside
    the text are clamped to it.
    """
    offset = max(0, min(offset, len(text)))
    line = text.count("\n", 0, offset)
    line_start = text.rfind("\n", 0, offset) + 1
    column = _measure(text[line_start:offset], encoding)
    return Position(line, column, offset)


def position_to_offset(line: int, column: int, text: str, encoding: str = UTF32) -> int:
    """Return the offset of (*line*, *column*) in *text*.

    A line past the last one maps to the end of the text; a column past the
    end of its line is clamped to the line end.
    """
    lines = text.split("\n")
    if line >= len(lines):
        return len(text)

    line_start = sum(len(prev) + 1 for prev in lines[:line])
    target = lines[line]

    if encoding == UTF32:
        return line_start + min(max(column, 0), len(target))

    consumed = 0
    index = 0
    for ch in target:
        width = _units(ch, encoding)
        if consumed + width > column:
            break
        consumed += width
        index += 1
    return line_start + index


def span_to_encoding(span: Span, text: str, encoding: str) -> Span:
    """Re-measure a code point span in another column encoding."""
    if encoding == UTF32:
        return span
    return Span(
        offset_to_position(span.start.offset, text, encoding),
        offset_to_position(span.end.offset, text, encoding),
    )


class LineIndex:
    """Precomputed line starts for repeated offset lookups on one text."""

    def __init__(self, text: str) -> None:
        self._text = text
        self._starts = [0]
        start = text.find("\n")
        while start != -1:
            self._starts.append(start + 1)
            start = text.find("\n", start + 1)

    @property
    def line_count(self) -> int:
        return len(self._starts)

    def position(self, offset: int) -> Position:
        """Code point position of *offset*, equal to ``offset_to_position``."""
        offset = max(0, min(offset, len(self._text)))
        line = bisect_right(self._starts, offset) - 1
        return Position(line, offset - self._starts[line], offset)

    def span(self, start: int, end: int) -> Span:
        return Span(self.position(start), self.position(end))
