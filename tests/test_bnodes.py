"""Unit tests for rdf_complete_ls.bnodes."""
from __future__ import annotations

from rdf_complete_ls.bnodes import BlankNodeIdAllocator


def test_starts_at_zero():
    alloc = BlankNodeIdAllocator()
    assert alloc.get_next_id() == "autos0"
    assert alloc.get_next_id() == "autos1"


def test_checked_ids_are_skipped():
    alloc = BlankNodeIdAllocator()
    alloc.check_id("autos3")
    alloc.check_id("_:autos1")

    assert int(alloc.get_next_id()[len("autos"):]) >= 4


def test_foreign_labels_are_ignored():
    alloc = BlankNodeIdAllocator()
    alloc.check_id("_:b12")
    alloc.check_id("autosX")
    assert alloc.get_next_id() == "autos0"


def test_never_repeats_an_issued_id():
    alloc = BlankNodeIdAllocator()
    issued = {alloc.get_next_id() for _ in range(5)}
    alloc.check_id("autos2")  # lower than what's been issued; no rewind
    assert alloc.get_next_id() not in issued
