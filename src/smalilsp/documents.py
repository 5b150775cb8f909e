"""Open-document registry used by the language server.

Edits arrive as editor ranges and are translated to offsets with the
position helpers before the stored text is spliced. Every mutation bumps a
private revision counter; callers validate a ``snapshot`` and check
``is_current`` before publishing so a stale result never replaces a newer one.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass

from smalilsp.errors import DocumentNotFoundError, MissingRangeError
from smalilsp.positions import UTF32, position_to_offset

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class EditRange:
    """Editor range of an incremental change (0-based lines and columns)."""

    start_line: int
    start_column: int
    end_line: int
    end_column: int


@dataclass
class Document:
    uri: str
    text: str
    version: int | None = None  # as reported by the client
    revision: int = 0


@dataclass(frozen=True, slots=True)
class Snapshot:
    uri: str
    text: str
    version: int | None
    revision: int


class DocumentStore:
    """Documents keyed by URI, with one writer at a time."""

    def __init__(self) -> None:
        self._documents: dict[str, Document] = {}
        self._lock = threading.Lock()

    def __contains__(self, uri: str) -> bool:
        return uri in self._documents

    def __len__(self) -> int:
        return len(self._documents)

    def open(self, uri: str, text: str, version: int | None = None) -> None:
        """Register *uri*; an already open document keeps its stored text."""
        with self._lock:
            if uri not in self._documents:
                self._documents[uri] = Document(uri, text, version)
                logger.debug("opened %s (version %s)", uri, version)

    def close(self, uri: str) -> None:
        with self._lock:
            if self._documents.pop(uri, None) is not None:
                logger.debug("closed %s", uri)

    def get_text(self, uri: str) -> str:
        with self._lock:
            return self._get(uri).text

    def snapshot(self, uri: str) -> Snapshot:
        """Consistent copy of the current text and revision of *uri*."""
        with self._lock:
            doc = self._get(uri)
            return Snapshot(doc.uri, doc.text, doc.version, doc.revision)

    def is_current(self, snapshot: Snapshot) -> bool:
        """True while the document is open and unchanged since *snapshot*."""
        with self._lock:
            doc = self._documents.get(snapshot.uri)
            return doc is not None and doc.revision == snapshot.revision

    def replace(self, uri: str, text: str, version: int | None = None) -> None:
        """Replace the whole text of *uri*."""
        with self._lock:
            doc = self._get(uri)
            doc.text = text
            self._touch(doc, version)

    def apply_change(
        self,
        uri: str,
        edit_range: EditRange | None,
        text: str,
        version: int | None = None,
        encoding: str = UTF32,
    ) -> None:
        """Splice *text* over *edit_range* in the stored text of *uri*.

        Columns of *edit_range* are measured in *encoding* units.
        """
        with self._lock:
            doc = self._get(uri)
            if edit_range is None:
                raise MissingRangeError(uri)

            current = doc.text
            start = position_to_offset(
                edit_range.start_line, edit_range.start_column, current, encoding
            )
            end = position_to_offset(edit_range.end_line, edit_range.end_column, current, encoding)
            doc.text = current[:start] + text + current[max(start, end) :]
            self._touch(doc, version)

    def _get(self, uri: str) -> Document:
        doc = self._documents.get(uri)
        if doc is None:
            raise DocumentNotFoundError(uri)
        return doc

    @staticmethod
    def _touch(doc: Document, version: int | None) -> None:
        doc.revision += 1
        if version is not None:
            doc.version = version
