"""File header rules: ``.class``, ``.super``, ``.source`` and ``.implements``."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from smalilsp.diagnostics import (
    Diagnostic,
    already_declared,
    line_diagnostic,
    token_diagnostic,
)
from smalilsp.tokens import Token, TokenType


@dataclass
class HeaderState:
    """Header lines seen so far in one validation run."""

    top_line: list[Token] | None = None
    class_line: list[Token] | None = None
    super_line: list[Token] | None = None
    source_line: list[Token] | None = None
    last_token: Token | None = None
    blank_line: bool = False


class HeaderValidator:
    """Checks the shape and uniqueness of the class header directives."""

    def __init__(self) -> None:
        self.state = HeaderState()

    def on_token(self, token: Token) -> list[Diagnostic]:
        state = self.state
        if (
            token.type is TokenType.NEWLINE
            and state.last_token is not None
            and state.last_token.type is TokenType.NEWLINE
        ):
            state.blank_line = True
        if token.type is not TokenType.SPACE:
            state.last_token = token
        return []

    def on_line(self, line: Sequence[Token]) -> list[Diagnostic]:
        state = self.state
        line = list(line)
        diags: list[Diagnostic] = []

        if line[0].type is TokenType.DIRECTIVE:
            directive = line[0].content
            if directive == ".class":
                if state.class_line is not None:
                    diags.extend(already_declared(state.class_line, line, "Class"))
                else:
                    diags.extend(_check_class(line))
                    state.class_line = line
            elif directive == ".super":
                if state.super_line is not None:
                    diags.extend(already_declared(state.super_line, line, "Super"))
                else:
                    diags.extend(_check_simple(line))
                    state.super_line = line
            elif directive == ".source":
                if state.source_line is not None:
                    diags.extend(already_declared(state.source_line, line, "Source"))
                else:
                    diags.extend(_check_simple(line))
                    state.source_line = line
            elif directive == ".implements":
                diags.extend(_check_simple(line))

        if state.top_line is None:
            state.top_line = line

        return diags

    def on_end(self) -> list[Diagnostic]:
        state = self.state
        diags: list[Diagnostic] = []
        if state.top_line is None:
            return diags

        if state.class_line is None:
            diags.append(line_diagnostic(state.top_line, "Missing class directive."))
        if state.super_line is None:
            diags.append(
                line_diagnostic(
                    state.top_line,
                    "Missing super directive.\nExtend 'Ljava/lang/Object;' by default.",
                )
            )
        return diags


def _check_class(line: list[Token]) -> list[Diagnostic]:
    """``.class [visibility] [modifiers] Lclass/Name;``"""
    diags: list[Diagnostic] = []
    visibility: Token | None = None
    modifiers: dict[str, Token] = {}
    class_token: Token | None = None

    for idx, token in enumerate(line[1:], start=1):
        if idx == 1 and token.type is not TokenType.SPACE:
            diags.append(token_diagnostic(token, "Space expected."))

        if class_token is not None:
            if token.type is not TokenType.SPACE:
                diags.append(token_diagnostic(token, "New line expected."))
            continue

        if token.type is TokenType.SPACE:
            continue
        if token.type is TokenType.VISIBILITY:
            if visibility is not None:
                diags.extend(
                    already_declared([visibility], [token], "Visibility modifier", "defined")
                )
            else:
                visibility = token
        elif token.type is TokenType.MODIFIER:
            name = token.content
            if name == "static":
                diags.append(token_diagnostic(token, "Class cannot be defined as static."))
            elif name in modifiers:
                diags.extend(
                    already_declared(
                        [modifiers[name]], [token], f"{name.capitalize()} modifier", "defined"
                    )
                )
            else:
                modifiers[name] = token
        elif token.type is TokenType.CLASS:
            class_token = token
        else:
            diags.append(token_diagnostic(token, "Class modifier expected."))

    if class_token is None:
        diags.append(line_diagnostic(line, "Usage: '.class [visibility] [modifiers] Lclass/Name;'"))

    return diags


def _check_simple(line: list[Token]) -> list[Diagnostic]:
    """``.super``/``.implements Lclass/Name;`` and ``.source "File.java"``."""
    directive = line[0].content
    is_source = directive == ".source"

    if len(line) < 3:
        operand = '"FileName"' if is_source else "Lclass/Name;"
        return [line_diagnostic(line, f"Usage: '{directive} {operand}'")]

    diags: list[Diagnostic] = []
    if line[1].type is not TokenType.SPACE:
        diags.append(token_diagnostic(line[1], "Space expected."))

    operand = line[2]
    if is_source and operand.type is not TokenType.STRING:
        diags.append(token_diagnostic(operand, "String expected."))
    elif not is_source and operand.type is not TokenType.CLASS:
        diags.append(token_diagnostic(operand, "Class expected."))

    for token in line[3:]:
        diags.append(token_diagnostic(token, "New line expected."))

    return diags
