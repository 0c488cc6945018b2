"""Tests for the LSP adapter in rdf_complete_ls.server (no stdio involved)."""
from __future__ import annotations

from types import SimpleNamespace

from lsprotocol import types

from rdf_complete_ls import server
from rdf_complete_ls.registry import CompletionRegistry
from rdf_complete_ls.resolver import TermIndex

DECL = "@prefix ex: <http://example.org/> .\n"


def _fake_ls(terms):
    return SimpleNamespace(registry=CompletionRegistry(terms), _documents={})


def _type(buf, line, character, text):
    pos = types.Position(line=line, character=character)
    server.apply_change(
        buf, types.TextDocumentContentChangeEvent_Type1(range=types.Range(start=pos, end=pos), text=text)
    )


def test_open_document_picks_syntax(terms):
    fake = _fake_ls(terms)

    buf = server.open_document(fake, "file:///a.ttl", DECL, "turtle")

    assert fake._documents["file:///a.ttl"] is buf
    assert buf.completer.profile.name == "Turtle"
    assert server.open_document(fake, "file:///a.txt", "", "plaintext") is None


def test_completion_replaces_token_from_session_start(terms):
    fake = _fake_ls(terms)
    buf = server.open_document(fake, "file:///a.ttl", DECL, "turtle")

    for i, c in enumerate("ex:"):
        _type(buf, 1, i, c)

    result = server.completion_items(buf, types.Position(line=1, character=3))

    assert result.is_incomplete
    by_label = {item.label: item for item in result.items}
    item = by_label["ex:Person"]
    assert item.kind is types.CompletionItemKind.Value
    assert item.text_edit.new_text == "ex:Person"
    assert item.text_edit.range.start == types.Position(line=1, character=0)
    assert by_label["a"].kind is types.CompletionItemKind.Keyword


def test_no_session_means_no_completion(terms):
    fake = _fake_ls(terms)
    buf = server.open_document(fake, "file:///a.ttl", DECL, "turtle")

    assert server.completion_items(buf, types.Position(line=1, character=0)) is None


def test_full_text_change_is_structural(terms):
    fake = _fake_ls(terms)
    buf = server.open_document(fake, "file:///q.rq", "SELECT ", "sparql")
    _type(buf, 0, 7, "?")
    assert buf.session_open

    server.apply_change(buf, types.TextDocumentContentChangeEvent_Type2(text="SELECT ?a ?b WHERE {}"))

    assert not buf.session_open
    assert buf.completer.variables == ["?a", "?b"]


def test_initialization_options():
    fake = SimpleNamespace(
        registry=CompletionRegistry(TermIndex(remote=False)),
        terms=TermIndex(),
        preload_vocabularies=True,
    )

    server.RdfCompletionLanguageServer.apply_options(
        fake,
        {"syntaxes": {".trig": "Turtle"}, "preloadVocabularies": False, "remoteVocabularies": False},
    )

    assert fake.registry.syntax_for(path="x.trig") == "Turtle"
    assert fake.preload_vocabularies is False
    assert fake.terms.remote is False
