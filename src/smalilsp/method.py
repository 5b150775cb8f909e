"""Method block rules: declaration shape, nesting, constructors and returns."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from enum import Enum, auto

from smalilsp.diagnostics import (
    Diagnostic,
    Severity,
    already_declared,
    line_diagnostic,
    token_diagnostic,
)
from smalilsp.tokens import Token, TokenType

RETURN_TYPE_EXPECTED = "Return type expected.\n'V' for void."
END_METHOD_MISPLACED = "'.end method' directive must be at the end of a method block."

# Methods with these modifiers have no body to return from.
_BODILESS = frozenset({"abstract", "native"})


class ReturnKind(Enum):
    NONE = auto()  # could not be parsed from the declaration
    VOID = auto()
    BUILTIN = auto()
    CLASS = auto()  # class or array reference


@dataclass(frozen=True, slots=True)
class ReturnType:
    kind: ReturnKind = ReturnKind.NONE
    tokens: tuple[Token, ...] = ()


@dataclass
class MethodDeclaration:
    """The method block currently tracked by the validator."""

    is_open: bool
    line: list[Token]
    return_type: ReturnType = field(default_factory=ReturnType)
    saw_return: bool = False
    has_body: bool = True


@dataclass
class MethodState:
    current: MethodDeclaration | None = None
    static_constructor: list[Token] | None = None
    instance_constructor: list[Token] | None = None


class _Stage(Enum):
    MODIFIERS = auto()
    PARAMS = auto()
    RETURN_TYPE = auto()
    DONE = auto()


class MethodValidator:
    """Checks ``.method``/``.end method`` blocks and their return instructions."""

    def __init__(self) -> None:
        self.state = MethodState()

    def on_token(self, token: Token) -> list[Diagnostic]:
        current = self.state.current
        if token.type is TokenType.RETURN and current is not None and current.is_open:
            return _check_return(token, current)
        return []

    def on_line(self, line: Sequence[Token]) -> list[Diagnostic]:
        if line[0].type is not TokenType.METHOD:
            return []
        if line[0].content == ".method":
            return self._open(list(line))
        return self._close(list(line))

    def on_end(self) -> list[Diagnostic]:
        return []

    # ------------------------------------------------------------------
    # Block boundaries
    # ------------------------------------------------------------------

    def _open(self, line: list[Token]) -> list[Diagnostic]:
        state = self.state
        parsed, return_type, modifiers = self._parse_declaration(line)

        diags: list[Diagnostic] = []
        if state.current is not None and state.current.is_open:
            diags.append(
                line_diagnostic(state.current.line, "Method block starts here.", Severity.HINT)
            )
            diags.append(
                line_diagnostic(line, "'.method' directive cannot be inside a method block.")
            )
        else:
            diags.extend(parsed)

        state.current = MethodDeclaration(
            is_open=True,
            line=line,
            return_type=return_type,
            has_body=not _BODILESS.intersection(modifiers),
        )
        return diags

    def _close(self, line: list[Token]) -> list[Diagnostic]:
        state = self.state
        current = state.current

        if current is None:
            return [line_diagnostic(line, END_METHOD_MISPLACED)]

        if not current.is_open:
            return [
                line_diagnostic(current.line, "Method block ends here.", Severity.HINT),
                line_diagnostic(line, END_METHOD_MISPLACED),
            ]

        diags: list[Diagnostic] = []
        if current.has_body and not current.saw_return:
            diags.append(
                line_diagnostic(current.line, "No return instruction found in method block.")
            )

        state.current = MethodDeclaration(is_open=False, line=line)
        return diags

    # ------------------------------------------------------------------
    # Declaration line
    # ------------------------------------------------------------------

    def _parse_declaration(
        self, line: list[Token]
    ) -> tuple[list[Diagnostic], ReturnType, dict[str, Token]]:
        """Scan ``.method <modifiers> name(<params>)<return>``.

        Returns the diagnostics, the declared return type and the modifier
        tokens by name.
        """
        diags: list[Diagnostic] = []
        stage = _Stage.MODIFIERS
        visibility: Token | None = None
        modifiers: dict[str, Token] = {}
        array_prefix: list[Token] = []
        return_type = ReturnType()
        was_space = False
        # Set once the current stage has reported a bad token
        flagged = False

        for token in line[1:]:
            if stage is _Stage.MODIFIERS:
                if token.type is TokenType.SPACE:
                    if token.content != " ":
                        diags.append(token_diagnostic(token, "Single space expected."))
                else:
                    if not was_space:
                        diags.append(token_diagnostic(token, "Space expected."))

                    if token.type is TokenType.VISIBILITY:
                        if visibility is not None:
                            diags.extend(
                                already_declared([visibility], [token], "Visibility modifier")
                            )
                        else:
                            visibility = token
                    elif token.type is TokenType.MODIFIER:
                        name = token.content
                        if name in modifiers:
                            diags.extend(
                                already_declared(
                                    [modifiers[name]], [token], f"{name.capitalize()} modifier"
                                )
                            )
                        else:
                            modifiers[name] = token
                    elif token.type is TokenType.METHOD_NAME:
                        diags.extend(_check_constructor_name(token, modifiers))
                        stage = _Stage.PARAMS
                        flagged = False
                    else:
                        diags.append(token_diagnostic(token, "Method modifier expected."))

            elif stage is _Stage.PARAMS:
                if token.type is TokenType.PAREN and token.content == ")":
                    stage = _Stage.RETURN_TYPE
                    flagged = False
                elif token.type not in (
                    TokenType.BUILTIN_TYPE,
                    TokenType.CLASS,
                    TokenType.ARRAY_OP,
                ):
                    diags.append(token_diagnostic(token, "')' expected."))
                    flagged = True

            elif stage is _Stage.RETURN_TYPE:
                if token.type is TokenType.ARRAY_OP:
                    array_prefix.append(token)
                elif token.type in (TokenType.BUILTIN_TYPE, TokenType.CLASS):
                    return_type = _return_type(array_prefix, token)
                    stage = _Stage.DONE
                else:
                    diags.append(token_diagnostic(token, RETURN_TYPE_EXPECTED))
                    flagged = True

            elif token.type is not TokenType.SPACE:
                diags.append(token_diagnostic(token, "New line expected."))

            was_space = token.type is TokenType.SPACE

        if stage is _Stage.MODIFIERS:
            diags.append(line_diagnostic(line, "Method name expected."))
        elif stage is _Stage.PARAMS and not flagged:
            diags.append(token_diagnostic(line[-1], "')' expected."))
        elif stage is _Stage.RETURN_TYPE and not flagged:
            diags.append(token_diagnostic(line[-1], RETURN_TYPE_EXPECTED))

        diags.extend(self._check_constructor_unique(line, modifiers))
        return diags, return_type, modifiers

    def _check_constructor_unique(
        self, line: list[Token], modifiers: dict[str, Token]
    ) -> list[Diagnostic]:
        state = self.state
        if "constructor" not in modifiers:
            return []

        if "static" in modifiers:
            if state.static_constructor is not None:
                return already_declared(
                    state.static_constructor, line, "Static constructor", "defined"
                )
            state.static_constructor = line
        else:
            if state.instance_constructor is not None:
                return already_declared(state.instance_constructor, line, "Constructor", "defined")
            state.instance_constructor = line
        return []


def _return_type(array_prefix: list[Token], token: Token) -> ReturnType:
    tokens = (*array_prefix, token)
    if array_prefix or token.type is TokenType.CLASS:
        return ReturnType(ReturnKind.CLASS, tokens)
    if token.content == "V":
        return ReturnType(ReturnKind.VOID, tokens)
    return ReturnType(ReturnKind.BUILTIN, tokens)


def _check_constructor_name(name_token: Token, modifiers: dict[str, Token]) -> list[Diagnostic]:
    """Match ``<init>``/``<clinit>`` names against the constructor modifiers."""
    name = name_token.content.removesuffix("(")
    constructor = modifiers.get("constructor")
    static = modifiers.get("static")

    if constructor is not None:
        if static is not None:
            if name != "<clinit>":
                return [
                    token_diagnostic(
                        constructor, "Constructor modifier declared here.", Severity.HINT
                    ),
                    token_diagnostic(static, "Static modifier declared here.", Severity.HINT),
                    token_diagnostic(name_token, "Static constructor must be named '<clinit>'."),
                ]
        elif name != "<init>":
            return [
                token_diagnostic(constructor, "Constructor modifier declared here.", Severity.HINT),
                token_diagnostic(name_token, "Non-static constructor must be named '<init>'."),
            ]
    elif name == "<init>":
        return [token_diagnostic(name_token, "'<init>' is reserved for non-static constructors.")]
    elif name == "<clinit>":
        return [token_diagnostic(name_token, "'<clinit>' is reserved for static constructors.")]

    return []


def _check_return(token: Token, method: MethodDeclaration) -> list[Diagnostic]:
    method.saw_return = True
    declared = method.return_type

    if declared.kind is ReturnKind.NONE:
        return [
            token_diagnostic(
                token,
                "Unable to get return type from method declaration.",
                Severity.INFORMATION,
            )
        ]

    # Builtin non-void returns are not cross-checked.
    if declared.kind is ReturnKind.VOID:
        expected = "return-void"
    elif declared.kind is ReturnKind.CLASS:
        expected = "return-object"
    else:
        return []

    if token.content == expected:
        return []
    return [
        line_diagnostic(declared.tokens, "Return type declared here.", Severity.HINT),
        token_diagnostic(token, f"'{expected}' expected."),
    ]
