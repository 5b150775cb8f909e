"""LSP server for smali: diagnostics and keyword completion."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from urllib.parse import unquote

from lsprotocol.types import (
    INITIALIZED,
    TEXT_DOCUMENT_COMPLETION,
    TEXT_DOCUMENT_DID_CHANGE,
    TEXT_DOCUMENT_DID_CLOSE,
    TEXT_DOCUMENT_DID_OPEN,
    TEXT_DOCUMENT_DID_SAVE,
    CompletionItem,
    CompletionItemKind,
    CompletionList,
    CompletionOptions,
    CompletionParams,
    Diagnostic,
    DiagnosticSeverity,
    DidChangeTextDocumentParams,
    DidCloseTextDocumentParams,
    DidOpenTextDocumentParams,
    DidSaveTextDocumentParams,
    InitializedParams,
    LogMessageParams,
    MessageType,
    Position,
    PositionEncodingKind,
    PublishDiagnosticsParams,
    Range,
    ShowMessageParams,
    TextDocumentContentChangePartial,
    TextDocumentSyncKind,
)
from pygls.lsp.server import LanguageServer

from smalilsp import __version__
from smalilsp.diagnostics import Diagnostic as SmaliDiagnostic
from smalilsp.diagnostics import Severity
from smalilsp.documents import DocumentStore, EditRange
from smalilsp.engine import validate
from smalilsp.errors import DocumentError
from smalilsp.lexer import (
    DIRECTIVES,
    FIELD_DIRECTIVES,
    INSTRUCTIONS,
    METHOD_DIRECTIVES,
    MODIFIERS,
    VISIBILITIES,
)
from smalilsp.positions import span_to_encoding

logger = logging.getLogger(__name__)


class SmaliLanguageServer(LanguageServer):
    """Language server owning its own document registry and rule selection."""

    def __init__(
        self,
        *args,
        rules: Iterable[str] | None = None,
        min_severity: Severity = Severity.HINT,
        **kwargs,
    ) -> None:
        super().__init__(*args, **kwargs)
        self.documents = DocumentStore()
        self.rules: tuple[str, ...] | None = tuple(rules) if rules is not None else None
        self.min_severity = min_severity


server = SmaliLanguageServer(
    "smali-lsp", __version__, text_document_sync_kind=TextDocumentSyncKind.Incremental
)


def _filename(uri: str) -> str:
    return unquote(uri.rsplit("/", 1)[-1] if "/" in uri else uri)


def _client_encoding(ls: LanguageServer) -> str:
    return PositionEncodingKind(ls.workspace.position_encoding).value


def _log(ls: LanguageServer, message: str) -> None:
    ls.window_log_message(LogMessageParams(type=MessageType.Info, message=message))


def _show_error(ls: LanguageServer, message: str) -> None:
    ls.window_show_message(ShowMessageParams(type=MessageType.Error, message=message))


def to_lsp_diagnostic(diagnostic: SmaliDiagnostic, source: str, encoding: str) -> Diagnostic:
    """Convert a core diagnostic, re-measuring its range in the client encoding."""
    span = span_to_encoding(diagnostic.span, source, encoding)
    return Diagnostic(
        range=Range(
            start=Position(line=span.start.line, character=span.start.column),
            end=Position(line=span.end.line, character=span.end.column),
        ),
        message=diagnostic.message,
        severity=DiagnosticSeverity(int(diagnostic.severity)),
        source="smali",
    )


def _validate(ls: SmaliLanguageServer, uri: str) -> None:
    """Validate the stored text of *uri* and publish its diagnostics."""
    filename = _filename(uri)
    _log(ls, f"[validator] Validating {filename}")

    try:
        snapshot = ls.documents.snapshot(uri)
    except DocumentError as exc:
        logger.warning("validation skipped: %s", exc.message)
        _show_error(ls, "Unable to get current document for validation")
        return

    found = validate(snapshot.text, ls.rules)

    if not ls.documents.is_current(snapshot):
        logger.debug("dropping stale diagnostics for %s", uri)
        return

    encoding = _client_encoding(ls)
    diagnostics = [
        to_lsp_diagnostic(d, snapshot.text, encoding)
        for d in found
        if d.severity <= ls.min_severity
    ]
    ls.text_document_publish_diagnostics(
        PublishDiagnosticsParams(uri=uri, diagnostics=diagnostics, version=snapshot.version)
    )
    logger.debug("published %d diagnostic(s) for %s", len(diagnostics), uri)
    _log(ls, f"[validator] Successfully validated {filename}")


@server.feature(INITIALIZED)
def initialized(ls: SmaliLanguageServer, params: InitializedParams) -> None:
    ls.window_show_message(
        ShowMessageParams(type=MessageType.Info, message="Initialized smali-lsp")
    )


@server.feature(TEXT_DOCUMENT_DID_OPEN)
def did_open(ls: SmaliLanguageServer, params: DidOpenTextDocumentParams) -> None:
    doc = params.text_document
    ls.documents.open(doc.uri, doc.text, doc.version)
    _validate(ls, doc.uri)


@server.feature(TEXT_DOCUMENT_DID_CHANGE)
def did_change(ls: SmaliLanguageServer, params: DidChangeTextDocumentParams) -> None:
    uri = params.text_document.uri
    version = params.text_document.version
    encoding = _client_encoding(ls)

    for change in params.content_changes:
        try:
            if isinstance(change, TextDocumentContentChangePartial):
                r = change.range
                edit_range = EditRange(r.start.line, r.start.character, r.end.line, r.end.character)
                ls.documents.apply_change(uri, edit_range, change.text, version, encoding)
            else:
                ls.documents.replace(uri, change.text, version)
        except DocumentError as exc:
            logger.error("cannot apply change: %s", exc.message)
            _show_error(ls, exc.message)
            break

    _validate(ls, uri)


@server.feature(TEXT_DOCUMENT_DID_CLOSE)
def did_close(ls: SmaliLanguageServer, params: DidCloseTextDocumentParams) -> None:
    uri = params.text_document.uri
    ls.documents.close(uri)
    ls.text_document_publish_diagnostics(PublishDiagnosticsParams(uri=uri, diagnostics=[]))


@server.feature(TEXT_DOCUMENT_DID_SAVE)
def did_save(ls: SmaliLanguageServer, params: DidSaveTextDocumentParams) -> None:
    logger.info("saved %s", params.text_document.uri)


def completion_items() -> list[CompletionItem]:
    """Directive, modifier and instruction keywords known to the lexer."""
    items = [
        CompletionItem(label=f".{name}", kind=CompletionItemKind.Keyword)
        for name in (*DIRECTIVES, *METHOD_DIRECTIVES, *FIELD_DIRECTIVES)
    ]
    items.extend(
        CompletionItem(label=word, kind=CompletionItemKind.Keyword)
        for word in (*VISIBILITIES, *MODIFIERS)
    )
    items.extend(
        CompletionItem(label=mnemonic, kind=CompletionItemKind.Operator)
        for mnemonic in INSTRUCTIONS
    )
    return items


@server.feature(TEXT_DOCUMENT_COMPLETION, CompletionOptions(trigger_characters=["."]))
def completion(ls: SmaliLanguageServer, params: CompletionParams) -> CompletionList:
    return CompletionList(is_incomplete=False, items=completion_items())


def start(
    rules: Iterable[str] | None = None,
    min_severity: Severity = Severity.HINT,
    tcp: tuple[str, int] | None = None,
) -> None:
    """Configure the module server and serve on stdio, or TCP when *tcp* is given."""
    server.rules = tuple(rules) if rules is not None else None
    server.min_severity = min_severity
    if tcp is not None:
        logger.info("starting smali-lsp %s on %s:%d", __version__, *tcp)
        server.start_tcp(*tcp)
    else:
        logger.info("starting smali-lsp %s on stdio", __version__)
        server.start_io()
