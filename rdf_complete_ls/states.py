"""rdf_complete_ls.states
~~~~~~~~~~~~~~~~~~~~~~
Completion states shared by the engine and the per-syntax profiles.
"""
from __future__ import annotations

import enum

__all__ = ["CompletionState"]


class CompletionState(enum.Enum):
    NONE = "None"
    DISABLED = "Disabled"
    INSERTED = "Inserted"
    DECLARATION = "Declaration"
    BASE = "Base"
    PREFIX = "Prefix"
    KEYWORD_OR_QNAME = "KeywordOrQName"
    QNAME = "QName"
    BNODE = "BNode"
    URI = "Uri"
    LITERAL = "Literal"
    LONG_LITERAL = "LongLiteral"
    ALTERNATE_LITERAL = "AlternateLiteral"
    ALTERNATE_LONG_LITERAL = "AlternateLongLiteral"
    COMMENT = "Comment"
    VARIABLE = "Variable"
