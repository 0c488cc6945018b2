"""rdf_complete_ls.suggestions
~~~~~~~~~~~~~~~~~~~~~~~~~~~~
Entries placed in a suggestion list, and factories for each kind.
"""
from __future__ import annotations

import enum
from dataclasses import dataclass

__all__ = [
    "CompletionKind",
    "CompletionData",
    "keyword",
    "qname",
    "blank_node",
    "new_blank_node",
    "variable",
    "base_declaration",
    "default_prefix_declaration",
    "prefix_declaration",
    "directive",
]

DEFAULT_PRIORITY = 1.0


class CompletionKind(enum.Enum):
    KEYWORD = "keyword"
    QNAME = "qname"
    BLANK_NODE = "blank-node"
    NEW_BLANK_NODE = "new-blank-node"
    VARIABLE = "variable"
    DECLARATION = "declaration"


@dataclass(frozen=True, eq=False)
class CompletionData:
    kind: CompletionKind
    display_text: str
    insertion_text: str
    description: str = ""
    priority: float = DEFAULT_PRIORITY

    def __lt__(self, other: "CompletionData") -> bool:
        return (self.priority, self.insertion_text) < (other.priority, other.insertion_text)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, CompletionData):
            return NotImplemented
        return (self.kind, self.insertion_text) == (other.kind, other.insertion_text)

    def __hash__(self) -> int:
        return hash((self.kind, self.insertion_text))


def keyword(word: str, description: str = "") -> CompletionData:
    return CompletionData(CompletionKind.KEYWORD, word, word, description)


def qname(name: str, description: str = "") -> CompletionData:
    return CompletionData(CompletionKind.QNAME, name, name, description)


def blank_node(label: str) -> CompletionData:
    return CompletionData(CompletionKind.BLANK_NODE, label, label, "Blank node used elsewhere in this document")


def new_blank_node(node_id: str) -> CompletionData:
    return CompletionData(
        CompletionKind.NEW_BLANK_NODE,
        "New Blank Node",
        f"_:{node_id}",
        "Inserts a new blank node ID which is not used elsewhere in this document",
    )


def variable(name: str) -> CompletionData:
    return CompletionData(CompletionKind.VARIABLE, name, name, "Variable used elsewhere in this query")


# ---------------------------------------------------------------------------
# Declaration templates – "turtle" style (@prefix … .) or "sparql" style (PREFIX …)
# ---------------------------------------------------------------------------


def base_declaration(style: str = "turtle") -> CompletionData:
    if style == "sparql":
        text = "BASE <Enter Base URI here>"
    else:
        text = "@base <Enter Base URI here> ."
    return CompletionData(CompletionKind.DECLARATION, text, text, "Base URI Declaration")


def default_prefix_declaration(style: str = "turtle") -> CompletionData:
    if style == "sparql":
        text = "PREFIX : <Enter Default Namespace URI here>"
    else:
        text = "@prefix : <Enter Default Namespace URI here> ."
    return CompletionData(CompletionKind.DECLARATION, text, text, "Default Namespace Declaration")


def prefix_declaration(prefix: str, uri: str, style: str = "turtle", description: str = "") -> CompletionData:
    if style == "sparql":
        text = f"PREFIX {prefix}: <{uri}>"
    else:
        text = f"@prefix {prefix}: <{uri}> ."
    return CompletionData(
        CompletionKind.DECLARATION, text, text, description or f"Namespace Declaration for {uri}"
    )


def directive(name: str, template: str, description: str = "") -> CompletionData:
    """Any other ``@name …`` directive (Notation3's ``@keywords``, ``@forAll`` …)."""
    return CompletionData(CompletionKind.DECLARATION, f"@{name}", template, description)
