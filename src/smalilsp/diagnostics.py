"""Diagnostic records and the builders validators use to create them."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from enum import IntEnum

from smalilsp.tokens import Span, Token


class Severity(IntEnum):
    # Values match the editor protocol's DiagnosticSeverity.
    ERROR = 1
    WARNING = 2
    INFORMATION = 3
    HINT = 4

    @classmethod
    def from_name(cls, name: str) -> Severity:
        """Look up a severity by case-insensitive name (``"error"``, ``"hint"``, ...)."""
        try:
            return cls[name.strip().upper()]
        except KeyError:
            raise ValueError(f"unknown severity: {name!r}") from None


@dataclass(frozen=True, slots=True)
class Diagnostic:
    """A reported issue with a source range, severity and plain-text message."""

    span: Span
    severity: Severity
    message: str


def token_diagnostic(token: Token, message: str, severity: Severity = Severity.ERROR) -> Diagnostic:
    """Diagnostic covering a single token."""
    return Diagnostic(token.span, severity, message)


def line_diagnostic(
    tokens: Sequence[Token], message: str, severity: Severity = Severity.ERROR
) -> Diagnostic:
    """Diagnostic covering the first through the last of *tokens*."""
    return Diagnostic(Span(tokens[0].span.start, tokens[-1].span.end), severity, message)


def already_declared(
    original: Sequence[Token],
    duplicate: Sequence[Token],
    entity: str,
    verb: str = "declared",
) -> list[Diagnostic]:
    """Hint at the original declaration paired with an Error at the duplicate.

    ``already_declared(first, second, "Class")`` yields "Class declared
    here." on *first* and "Class already declared." on *second*.
    """
    return [
        line_diagnostic(original, f"{entity} {verb} here.", Severity.HINT),
        line_diagnostic(duplicate, f"{entity} already {verb}.", Severity.ERROR),
    ]


def sort_diagnostics(diagnostics: Sequence[Diagnostic]) -> list[Diagnostic]:
    """Return *diagnostics* in source order (emission order is not positional)."""
    return sorted(diagnostics, key=lambda d: (d.span.start.offset, d.span.end.offset))
