"""Token report and symbol table for a lexical scan of source text."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Iterable, NamedTuple


class TokenKind(Enum):
    KEYWORD = 1
    IDENTIFIER = 2
    CHAR_CONSTANT = 3
    INT_CONSTANT = 4
    STRING_LITERAL = 5
    PUNCTUATOR = 6
    SINGLE_COMMENT = 7
    MULTI_COMMENT = 8


_LABELS = {
    TokenKind.KEYWORD: "KEYWORD",
    TokenKind.IDENTIFIER: "IDENTIFIER",
    TokenKind.CHAR_CONSTANT: "CHAR CONST",
    TokenKind.INT_CONSTANT: "INTEGER CONST",
    TokenKind.STRING_LITERAL: "STRING",
    TokenKind.PUNCTUATOR: "PUNCTUATOR",
    TokenKind.SINGLE_COMMENT: "SINGLE LINE COMMENT",
    TokenKind.MULTI_COMMENT: "MULTILINE COMMENT",
}

_QUOTED = {TokenKind.CHAR_CONSTANT, TokenKind.STRING_LITERAL}


@dataclass(frozen=True)
class Token:
    """A lexeme together with its kind."""

    kind: TokenKind
    text: str

    @property
    def value(self) -> str:
        """The text, without surrounding quotes for character and string constants."""
        return self.text[1:-1] if self.kind in _QUOTED else self.text


def format_token(token: Token) -> str:
    """Render a token as ``<LABEL, code, text>``."""
    return f"<{_LABELS[token.kind]}, {token.kind.value}, {token.value}>"


class _Entry(NamedTuple):
    name: str
    kind: str
    value: str


class LexSymbolTable:
    """Symbol table whose entries are listed newest first."""

    def __init__(self) -> None:
        self._entries: list[_Entry] = []

    def __contains__(self, name: object) -> bool:
        return any(entry.name == name for entry in self._entries)

    def add(self, name: str, kind: str, value: str) -> None:
        """Add an entry in front of the existing ones."""
        self._entries.insert(0, _Entry(name, kind, value))

    def render(self) -> str:
        """Text of the symbol table file."""
        lines = []
        for entry in self._entries:
            if entry.kind == "Integer":
                continue
            if entry.kind == "Identifier":
                lines.append(f"Name: {entry.name}, Type: {entry.kind}\n")
            else:
                lines.append(
                    f"Name: {entry.name}, Type: {entry.kind}, Value: {entry.value}\n"
                )
        return "".join(lines)


def process_tokens(tokens: Iterable[Token]) -> tuple[list[str], LexSymbolTable]:
    """Format each token and collect identifiers and constants."""
    table = LexSymbolTable()
    report = []
    for token in tokens:
        if token.kind is TokenKind.IDENTIFIER and token.text not in table:
            table.add(token.text, "Identifier", "")
        elif token.kind is TokenKind.INT_CONSTANT and token.text not in table:
            table.add(token.text, "Integer Constant", "")
        elif token.kind is TokenKind.CHAR_CONSTANT and token.value not in table:
            table.add(token.value, "Char Constant", token.value)
        report.append(format_token(token))
    return report, table