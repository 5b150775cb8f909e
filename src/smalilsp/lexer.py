"""Smali lexer: converts source text into a total, flat token stream.

Every character of the input belongs to exactly one token, so concatenating
token contents reproduces the source. Characters no pattern accepts become
one-character ``ERROR`` tokens; the lexer never raises.
"""

from __future__ import annotations

import re

from smalilsp.positions import LineIndex
from smalilsp.tokens import Token, TokenType

VISIBILITIES = ("public", "private", "protected")

MODIFIERS = (
    "static",
    "constructor",
    "final",
    "synthetic",
    "abstract",
    "native",
    "synchronized",
    "declared-synchronized",
    "bridge",
    "varargs",
    "transient",
    "volatile",
    "interface",
    "enum",
    "annotation",
    "strictfp",
)

DIRECTIVES = (
    "class",
    "super",
    "source",
    "implements",
    "locals",
    "local",
    "end local",
    "restart local",
    "registers",
    "line",
    "prologue",
    "epilogue",
    "goto",
    "param",
    "end param",
    "annotation",
    "end annotation",
    "subannotation",
    "end subannotation",
    "enum",
    "catch",
    "catchall",
    "packed-switch",
    "end packed-switch",
    "sparse-switch",
    "end sparse-switch",
    "array-data",
    "end array-data",
)

METHOD_DIRECTIVES = ("method", "end method")
FIELD_DIRECTIVES = ("field", "end field")

INSTRUCTIONS = (
    "invoke-direct",
    "invoke-static",
    "invoke-virtual",
    "invoke-interface",
    "invoke-super",
    "check-cast",
    "new-instance",
    "const-string",
    "const/4",
    "const/16",
    "const",
    "const-class",
    "if-eq",
    "if-ne",
    "if-lt",
    "if-ge",
    "if-gt",
    "if-le",
    "if-eqz",
    "if-nez",
    "iget",
    "iget-object",
    "sget",
    "sget-object",
    "iput",
    "iput-object",
    "sput",
    "sput-object",
    "move",
    "move-result",
    "move-result-object",
    "return",
    "return-void",
    "return-object",
    "return-wide",
)


def _alternation(words: tuple[str, ...]) -> str:
    # Longest first: re alternation takes the first branch that matches.
    return "|".join(re.escape(w) for w in sorted(words, key=len, reverse=True))


_FIELD_KINDS = r"(?:-(?:object|string|wide|boolean|byte|char|short))?"

_PATTERNS: tuple[tuple[TokenType, re.Pattern[str]], ...] = tuple(
    (tt, re.compile(pattern))
    for tt, pattern in (
        (TokenType.NEWLINE, r"\r?\n"),
        (TokenType.COMMENT, r"#[^\r\n]*"),
        (TokenType.VISIBILITY, _alternation(VISIBILITIES)),
        (TokenType.MODIFIER, _alternation(MODIFIERS)),
        (TokenType.SPACE, r"[ \t]+"),
        (TokenType.CLASS, r"L[a-zA-Z0-9$_\-./]*;"),
        (TokenType.REGISTER, r"[pv]\d+"),
        (TokenType.METHOD, r"\.(?:" + _alternation(METHOD_DIRECTIVES) + ")"),
        (TokenType.FIELD, r"\.(?:" + _alternation(FIELD_DIRECTIVES) + ")"),
        (TokenType.LABEL, r":[a-zA-Z0-9_]+"),
        (TokenType.DIRECTIVE, r"\.(?:" + _alternation(DIRECTIVES) + ")"),
        (TokenType.INVOKE, r"invoke-(?:direct|static|virtual|interface|super)(?:/range)?"),
        (TokenType.CHECK_CAST, r"check-cast"),
        (TokenType.NEW_INSTANCE, r"new-instance"),
        (TokenType.CONST_STRING, r"const-string(?:/jumbo)?"),
        (TokenType.CONST_INT, r"const/(?:4|16|high16)"),
        (TokenType.CONST, r"const(?:-class)?"),
        (TokenType.IF, r"if-(?:lt|le|gt|ge|eq|ne)z?"),
        (TokenType.IGET, r"iget" + _FIELD_KINDS),
        (TokenType.SGET, r"sget" + _FIELD_KINDS),
        (TokenType.IPUT, r"iput" + _FIELD_KINDS),
        (TokenType.SPUT, r"sput" + _FIELD_KINDS),
        (TokenType.MOVE, r"move(?:-result(?:-object|-wide)?|-object|-wide|-exception)?(?:/from16|/16)?"),
        (TokenType.RETURN, r"return(?:-(?:void|object|wide))?"),
        (TokenType.STRING, r'"(?:[^"\\\r\n]|\\.)*"'),
        (TokenType.NUMBER, r"-?(?:0x[0-9a-fA-F]+|\d+)"),
        (TokenType.MACRO, r"\{\{[a-zA-Z0-9_/]*\}\}"),
        (TokenType.BRACE, r"[{}]"),
        (TokenType.PAREN, r"[()]"),
        (TokenType.BUILTIN_TYPE, r"[VZBSCIJFD]"),
        (TokenType.METHOD_CALL, r"->[a-zA-Z0-9$<>_]+\("),
        (TokenType.METHOD_NAME, r"[a-zA-Z0-9$<>_]+\("),
        (TokenType.FIELD_NAME, r"[a-zA-Z0-9$_]+:"),
        (TokenType.ARRAY_OP, r"\["),
        (TokenType.RANGE_OP, r"\.\."),
        (TokenType.COMMA_OP, r","),
    )
)


class Lexer:
    """Tokenize smali source text into a list of Token objects."""

    def __init__(self, source: str) -> None:
        self._source = source
        self._pos = 0
        self._index = LineIndex(source)
        self._tokens: list[Token] = []

    def tokenize(self) -> list[Token]:
        """Tokenize the full source and return the token list."""
        while self._pos < len(self._source):
            self._lex_next()
        return self._tokens

    def _lex_next(self) -> None:
        start = self._pos
        best: tuple[TokenType, int] | None = None

        for tt, pattern in _PATTERNS:
            m = pattern.match(self._source, start)
            # Strictly longer only, so the earlier type keeps a tie.
            if m is not None and (best is None or m.end() > best[1]):
                best = (tt, m.end())

        if best is None:
            best = (TokenType.ERROR, start + 1)

        self._emit(best[0], start, best[1])

    def _emit(self, tt: TokenType, start: int, end: int) -> None:
        self._tokens.append(Token(tt, self._source[start:end], self._index.span(start, end)))
        self._pos = end


def tokenize(source: str) -> list[Token]:
    """Convenience wrapper: tokenize *source* and return the token list."""
    return Lexer(source).tokenize()
