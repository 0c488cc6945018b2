"""rdf_complete_ls.server
~~~~~~~~~~~~~~~~~~~~~~~
Language server that puts the completion engine behind LSP:

* every open document gets a :class:`DocumentBuffer` + completer
* incremental ``didChange`` edits are replayed into the buffer, so typed
  characters drive the state machine exactly as in an editor widget
* ``textDocument/completion`` returns the suggestion list of the open session
* vocabulary terms are loaded in the background via aiohttp
"""
from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Any, Dict, Optional

from lsprotocol import types
from pygls.server import LanguageServer

from .host import DocumentBuffer, offset_at, position_at
from .registry import CompletionRegistry
from .resolver import TermIndex
from .suggestions import CompletionData, CompletionKind

# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------

LOG_PATH = Path.home() / ".cache/rdf-complete-ls/server.log"

log = logging.getLogger("rdf_complete_ls.server")


def _configure_logging() -> None:
    LOG_PATH.parent.mkdir(parents=True, exist_ok=True)
    logging.basicConfig(
        level=logging.DEBUG,
        format="%(levelname)s %(asctime)s [%(name)s] %(message)s",
        handlers=[
            logging.FileHandler(LOG_PATH, mode="w", encoding="utf-8"),
            logging.StreamHandler(sys.stderr),        # still visible in the client's LSP log
        ],
    )

# ---------------------------------------------------------------------------
# Language-server class
# ---------------------------------------------------------------------------

TRIGGER_CHARACTERS = ["@", ":", "_", "?", "$", "<"]

_ITEM_KINDS = {
    CompletionKind.KEYWORD: types.CompletionItemKind.Keyword,
    CompletionKind.QNAME: types.CompletionItemKind.Value,
    CompletionKind.BLANK_NODE: types.CompletionItemKind.Reference,
    CompletionKind.NEW_BLANK_NODE: types.CompletionItemKind.Reference,
    CompletionKind.VARIABLE: types.CompletionItemKind.Variable,
    CompletionKind.DECLARATION: types.CompletionItemKind.Snippet,
}


class RdfCompletionLanguageServer(LanguageServer):
    """One LSP instance per client/workspace."""

    def __init__(self) -> None:
        super().__init__("rdf-complete-ls", "0.1.0")
        self.terms = TermIndex()
        self.registry = CompletionRegistry(self.terms)
        self.preload_vocabularies = True
        self._documents: Dict[str, DocumentBuffer] = {}

    def apply_options(self, options: Optional[Dict[str, Any]]) -> None:
        """Read the client's ``initializationOptions``."""
        options = options or {}
        self.registry.configure(options.get("syntaxes") or {})
        self.preload_vocabularies = bool(options.get("preloadVocabularies", True))
        self.terms.remote = bool(options.get("remoteVocabularies", True))


ls = RdfCompletionLanguageServer()

# ---------------------------------------------------------------------------
# INITIALIZE
# ---------------------------------------------------------------------------


@ls.feature(types.INITIALIZE)
def on_initialize(ls: RdfCompletionLanguageServer, params: types.InitializeParams):
    log.info("initialize: client %s", params.client_info)
    ls.apply_options(params.initialization_options)


@ls.feature(types.INITIALIZED)
def on_initialized(ls: RdfCompletionLanguageServer, params: types.InitializedParams):
    if ls.preload_vocabularies:
        ls.registry.preload()

# ---------------------------------------------------------------------------
# Document lifecycle
# ---------------------------------------------------------------------------


def open_document(ls: RdfCompletionLanguageServer, uri: str, text: str, language_id: Optional[str] = None) -> Optional[DocumentBuffer]:
    """Create the buffer + completer for *uri*; ``None`` if the syntax is unknown."""
    name = ls.registry.syntax_for(language_id, uri)
    if name is None:
        log.debug("no syntax for %s (languageId=%r)", uri, language_id)
        return None

    buf = DocumentBuffer(text)
    completer = ls.registry.create(name, buf)
    if completer is None:
        return None
    buf.attach(completer)
    ls._documents[uri] = buf
    log.debug("opened %s as %s", uri, name)
    return buf


def apply_change(buf: DocumentBuffer, change: types.TextDocumentContentChangeEvent) -> None:
    if isinstance(change, types.TextDocumentContentChangeEvent_Type1):
        start = offset_at(buf.text, change.range.start.line, change.range.start.character)
        end = offset_at(buf.text, change.range.end.line, change.range.end.character)
        buf.edit(start, end, change.text)
    else:
        # whole-document replacement: structural
        buf.edit(0, len(buf.text), change.text)


@ls.feature(types.TEXT_DOCUMENT_DID_OPEN)
def did_open(ls: RdfCompletionLanguageServer, params: types.DidOpenTextDocumentParams):
    doc = params.text_document
    open_document(ls, doc.uri, doc.text, doc.language_id)


@ls.feature(types.TEXT_DOCUMENT_DID_CHANGE)
def did_change(ls: RdfCompletionLanguageServer, params: types.DidChangeTextDocumentParams):
    buf = ls._documents.get(params.text_document.uri)
    if buf is None:
        return
    for change in params.content_changes:
        try:
            apply_change(buf, change)
        except Exception as exc:
            log.debug("change ignored on %s: %s", params.text_document.uri, exc)


@ls.feature(types.TEXT_DOCUMENT_DID_CLOSE)
def did_close(ls: RdfCompletionLanguageServer, params: types.DidCloseTextDocumentParams):
    ls._documents.pop(params.text_document.uri, None)

# ---------------------------------------------------------------------------
# COMPLETION – the suggestion list of the open session
# ---------------------------------------------------------------------------


def _to_item(data: CompletionData, edit_range: types.Range) -> types.CompletionItem:
    return types.CompletionItem(
        label=data.display_text,
        kind=_ITEM_KINDS.get(data.kind, types.CompletionItemKind.Text),
        detail=data.insertion_text if data.insertion_text != data.display_text else None,
        documentation=data.description or None,
        filter_text=data.insertion_text,
        text_edit=types.TextEdit(range=edit_range, new_text=data.insertion_text),
    )


def completion_items(buf: DocumentBuffer, position: types.Position) -> Optional[types.CompletionList]:
    if buf.completer is None or not buf.session_open:
        return None

    caret = offset_at(buf.text, position.line, position.character)
    start = buf.completer.start_offset
    if caret < start:
        return None

    start_line, start_char = position_at(buf.text, start)
    edit_range = types.Range(
        start=types.Position(line=start_line, character=start_char),
        end=position,
    )
    items = [_to_item(data, edit_range) for data in buf.suggestions]
    # the engine narrows/ends the session on every keystroke
    return types.CompletionList(is_incomplete=True, items=items)


@ls.feature(
    types.TEXT_DOCUMENT_COMPLETION,
    types.CompletionOptions(trigger_characters=TRIGGER_CHARACTERS),
)
def completion(
    ls: RdfCompletionLanguageServer,
    params: types.CompletionParams,
) -> Optional[types.CompletionList]:
    trig = getattr(params.context, "trigger_character", None)
    log.debug("completion: trigger_char=%r pos=%s", trig, params.position)

    buf = ls._documents.get(params.text_document.uri)
    if buf is None:
        return None
    try:
        return completion_items(buf, params.position)
    except Exception as exc:
        log.debug("completion failed on %s: %s", params.text_document.uri, exc)
        return None

# ---------------------------------------------------------------------------
# Entrypoint
# ---------------------------------------------------------------------------


def start_io() -> None:
    """Run the language server on stdio."""
    _configure_logging()
    ls.start_io(sys.stdin.buffer, sys.stdout.buffer)


if __name__ == "__main__":
    start_io()
