"""Smali source analysis and language server."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterable

    from smalilsp.diagnostics import Diagnostic

__version__ = "0.1.0"


def validate(source: str, rules: Iterable[str] | None = None) -> list[Diagnostic]:
    """Tokenize and validate smali source, returning its diagnostics."""
    from smalilsp.engine import validate as _validate

    return _validate(source, rules)
