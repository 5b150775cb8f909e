"""Validation engine: fans tokens and lines out to independent validators."""

from __future__ import annotations

from collections.abc import Callable, Iterable, Sequence
from typing import Protocol

from smalilsp.diagnostics import Diagnostic
from smalilsp.header import HeaderValidator
from smalilsp.lexer import tokenize
from smalilsp.lines import LineAssembler
from smalilsp.method import MethodValidator
from smalilsp.tokens import Token


class Validator(Protocol):
    """A structural rule fed by the token stream.

    Validators never see each other's diagnostics, only their own state.
    """

    def on_token(self, token: Token) -> list[Diagnostic]: ...

    def on_line(self, line: Sequence[Token]) -> list[Diagnostic]: ...

    def on_end(self) -> list[Diagnostic]: ...


# Registration order is dispatch order.
RULES: dict[str, Callable[[], Validator]] = {
    "header": HeaderValidator,
    "method": MethodValidator,
}


def create_validators(rules: Iterable[str] | None = None) -> list[Validator]:
    """Instantiate fresh validators for *rules* (default: every registered rule)."""
    if rules is None:
        names = list(RULES)
    else:
        names = list(rules)
        unknown = [name for name in names if name not in RULES]
        if unknown:
            raise ValueError(
                f"unknown rule(s): {', '.join(unknown)} (available: {', '.join(RULES)})"
            )
    return [RULES[name]() for name in names]


def run(tokens: Iterable[Token], validators: Sequence[Validator]) -> list[Diagnostic]:
    """Stream *tokens* through *validators* and collect their diagnostics.

    A line is dispatched when its terminating newline arrives, before that
    newline token itself; every token, spaces and newlines included, reaches
    ``on_token``.
    """
    diagnostics: list[Diagnostic] = []
    assembler = LineAssembler()

    for token in tokens:
        line = assembler.feed(token)
        if line is not None:
            for validator in validators:
                diagnostics.extend(validator.on_line(line))
        for validator in validators:
            diagnostics.extend(validator.on_token(token))

    line = assembler.flush()
    if line is not None:
        for validator in validators:
            diagnostics.extend(validator.on_line(line))

    for validator in validators:
        diagnostics.extend(validator.on_end())

    return diagnostics


def validate(source: str, rules: Iterable[str] | None = None) -> list[Diagnostic]:
    """Tokenize and validate *source*, returning diagnostics in emission order."""
    return run(tokenize(source), create_validators(rules))
