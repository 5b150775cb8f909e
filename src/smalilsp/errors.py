"""Error types and compiler-style rendering of diagnostics."""

from __future__ import annotations

from smalilsp.diagnostics import Diagnostic, Severity


class SmaliError(Exception):
    """Base class for request-level failures (never raised by validation)."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class DocumentError(SmaliError):
    """A document request could not be served."""


class DocumentNotFoundError(DocumentError):
    def __init__(self, uri: str) -> None:
        self.uri = uri
        super().__init__(f"Unable to get document: {uri}")


class MissingRangeError(DocumentError):
    def __init__(self, uri: str) -> None:
        self.uri = uri
        super().__init__(f"Unable to get range to update: {uri}")


class ConfigError(SmaliError):
    """Invalid value in a config file or on the command line."""


_LABELS = {
    Severity.ERROR: "error",
    Severity.WARNING: "warning",
    Severity.INFORMATION: "info",
    Severity.HINT: "hint",
}


def format_diagnostic(diagnostic: Diagnostic, source: str, filename: str = "input.smali") -> str:
    """Render *diagnostic* with the offending source line and carets.

    Additional message lines are rendered as ``= note:`` lines.
    """
    # Lines end at "\n" only, as in positions.py
    lines = source.split("\n")
    start = diagnostic.span.start
    end = diagnostic.span.end
    line_idx = start.line
    col = start.column + 1

    if 0 <= line_idx < len(lines):
        source_line = lines[line_idx].removesuffix("\r")
    else:
        source_line = ""

    # Underline the full span when on one line, otherwise to end of line
    if end.line == start.line:
        underline_len = max(1, end.column - start.column)
    else:
        underline_len = max(1, len(source_line) - col + 1)

    pad = " " * (col - 1)
    carets = "^" * underline_len

    line_num = str(line_idx + 1)
    gutter_width = len(line_num) + 1

    blank_gutter = " " * gutter_width + "|"
    line_gutter = f"{line_num:>{gutter_width - 1}} |"

    headline, *notes = diagnostic.message.split("\n")
    result = (
        f"{_LABELS[diagnostic.severity]}: {headline}\n"
        f"{' ' * gutter_width}--> {filename}:{line_idx + 1}:{col}\n"
        f"{blank_gutter}\n"
        f"{line_gutter} {source_line}\n"
        f"{blank_gutter} {pad}{carets}"
    )
    for note in notes:
        result += f"\n{' ' * gutter_width}= note: {note}"
    return result
