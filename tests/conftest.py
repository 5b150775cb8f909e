"""Shared test fixtures and helpers."""

from __future__ import annotations

import pytest

from smalilsp.diagnostics import Diagnostic, Severity
from smalilsp.engine import validate
from smalilsp.lexer import tokenize
from smalilsp.tokens import Token, TokenType

HEADER = ".class public Lcom/example/Foo;\n.super Ljava/lang/Object;\n"

SAMPLE = """\
# Example class
.class public final Lcom/example/Counter;
.super Ljava/lang/Object;
.source "Counter.java"

.implements Ljava/lang/Runnable;

# instance fields
.field private count:I

.method static constructor <clinit>()V
    .locals 0

    return-void
.end method

.method public constructor <init>()V
    .locals 0

    invoke-direct {p0}, Ljava/lang/Object;-><init>()V

    return-void
.end method

.method public getName()Ljava/lang/String;
    .locals 1

    const-string v0, "counter"

    return-object v0
.end method

.method public run()V
    .locals 1

    iget v0, p0, Lcom/example/Counter;->count:I

    if-eqz v0, :cond_0

    const/4 v0, 0x0

    iput v0, p0, Lcom/example/Counter;->count:I

    :cond_0
    return-void
.end method
"""


@pytest.fixture
def lex():
    """Return a helper that tokenizes source."""

    def _lex(source: str) -> list[Token]:
        return tokenize(source)

    return _lex


@pytest.fixture
def check():
    """Return a helper that validates source, optionally limited to some rules."""

    def _check(source: str, rules: list[str] | None = None) -> list[Diagnostic]:
        return validate(source, rules)

    return _check


def assert_types(tokens: list[Token], expected: list[TokenType]) -> None:
    """Assert that the token types match the expected list."""
    actual = [t.type for t in tokens]
    assert actual == expected, f"Expected {expected}, got {actual}"


def assert_contents(tokens: list[Token], expected: list[str]) -> None:
    """Assert that the token contents match the expected list."""
    actual = [t.content for t in tokens]
    assert actual == expected, f"Expected {expected}, got {actual}"


def of_severity(diags: list[Diagnostic], severity: Severity) -> list[Diagnostic]:
    """Return the diagnostics with the given severity."""
    return [d for d in diags if d.severity == severity]


def messages(diags: list[Diagnostic]) -> list[str]:
    return [d.message for d in diags]
