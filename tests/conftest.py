"""Shared fixtures: an offline term index and a buffer factory."""
from __future__ import annotations

from typing import Callable, Tuple

import pytest

from rdf_complete_ls.completer import CompletionStateMachine
from rdf_complete_ls.host import DocumentBuffer
from rdf_complete_ls.registry import CompletionRegistry
from rdf_complete_ls.resolver import NamespaceTerm, TermIndex

EX = "http://example.org/"


@pytest.fixture
def terms() -> TermIndex:
    index = TermIndex(remote=False)
    index.add_terms(EX, [
        NamespaceTerm(EX, "Person", "A person."),
        NamespaceTerm(EX, "knows"),
        NamespaceTerm(EX, "name", "The name of something."),
    ])
    return index


@pytest.fixture
def make_buffer(terms) -> Callable[..., Tuple[DocumentBuffer, CompletionStateMachine]]:
    """``make_buffer("Turtle", "text")`` → (buffer, attached completer), caret at the end."""
    registry = CompletionRegistry(terms)

    def _make(syntax: str, text: str = ""):
        buf = DocumentBuffer(text)
        completer = buf.attach(registry.create(syntax, buf))
        return buf, completer

    return _make
