"""Token types and data structures."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto


class TokenType(Enum):
    # Declaration order is match priority: on equal-length matches the
    # earlier type wins.

    # Structural
    NEWLINE = auto()  # \n or \r\n
    COMMENT = auto()  # # to end of line

    # Declaration keywords
    VISIBILITY = auto()  # public, private, protected
    MODIFIER = auto()  # static, final, constructor, ...

    SPACE = auto()  # spaces/tabs

    # Typed operands
    CLASS = auto()  # Lpkg/Name;
    REGISTER = auto()  # v0, p1

    METHOD = auto()  # .method, .end method
    FIELD = auto()  # .field, .end field
    LABEL = auto()  # :goto_0
    DIRECTIVE = auto()  # .class, .super, .locals, ...

    # Instruction mnemonics
    INVOKE = auto()
    CHECK_CAST = auto()
    NEW_INSTANCE = auto()
    CONST_STRING = auto()
    CONST_INT = auto()
    CONST = auto()
    IF = auto()
    IGET = auto()
    SGET = auto()
    IPUT = auto()
    SPUT = auto()
    MOVE = auto()
    RETURN = auto()

    STRING = auto()  # "..."
    NUMBER = auto()  # -0x10, 42
    MACRO = auto()  # {{name}}

    # Punctuation
    BRACE = auto()  # { }
    PAREN = auto()  # ( )

    BUILTIN_TYPE = auto()  # V Z B S C I J F D

    # Call/field syntax
    METHOD_CALL = auto()  # ->name(
    METHOD_NAME = auto()  # name(
    FIELD_NAME = auto()  # name:

    ARRAY_OP = auto()  # [
    RANGE_OP = auto()  # ..
    COMMA_OP = auto()  # ,

    ERROR = auto()  # unrecognized character


@dataclass(frozen=True, slots=True)
class Position:
    """Editor position: 0-based line and column, plus 0-based code point offset."""

    line: int
    column: int
    offset: int


@dataclass(frozen=True, slots=True)
class Span:
    """Source range from start to end position."""

    start: Position
    end: Position


@dataclass(frozen=True, slots=True)
class Token:
    """A single lexer token and the exact source text it covers."""

    type: TokenType
    content: str
    span: Span
