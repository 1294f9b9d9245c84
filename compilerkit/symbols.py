"""Symbol types, symbols and scoped symbol tables for the translator."""

from __future__ import annotations

import warnings
from dataclasses import dataclass, field
from typing import Iterator, Optional

VOID_SIZE = 0
FUNC_SIZE = 0
CHAR_SIZE = 1
INT_SIZE = 4
POINTER_SIZE = 4
FLOAT_SIZE = 8

_FLOAT_ALIGNMENT = 8

_BASIC_SIZES = {
    "void": VOID_SIZE,
    "char": CHAR_SIZE,
    "integer": INT_SIZE,
    "float": FLOAT_SIZE,
    "ptr": POINTER_SIZE,
    "func": FUNC_SIZE,
}

_PLAIN_NAMES = {"void", "char", "integer", "float", "func", "block"}


class RedeclarationWarning(UserWarning):
    """A name was declared twice in the same scope."""


@dataclass
class SymbolType:
    """A type; arrays and pointers carry the type of their elements."""

    kind: str
    element: Optional[SymbolType] = None
    width: int = 1


def compute_size(symbol_type: SymbolType) -> int:
    """Size in bytes of a type, or -1 for a type with no known size."""
    if symbol_type.kind == "arr":
        if symbol_type.element is None:
            raise ValueError("array type has no element type")
        return symbol_type.width * compute_size(symbol_type.element)
    return _BASIC_SIZES.get(symbol_type.kind, -1)


def type_name(symbol_type: Optional[SymbolType]) -> str:
    """Readable name of a type such as ``arr(10,integer)``."""
    if symbol_type is None:
        return "null"
    kind = symbol_type.kind
    if kind in _PLAIN_NAMES:
        return kind
    if kind == "ptr":
        return f"ptr({type_name(symbol_type.element)})"
    if kind == "arr":
        return f"arr({symbol_type.width},{type_name(symbol_type.element)})"
    return "NA"


def _default_type() -> SymbolType:
    return SymbolType("integer", None, 0)


@dataclass(eq=False)
class Symbol:
    """An entry of a symbol table."""

    name: str
    type: SymbolType = field(default_factory=_default_type)
    val: str = "-"
    offset: int = 0
    nested: Optional[SymbolTable] = None
    size: int = field(init=False)

    def __post_init__(self) -> None:
        self.size = compute_size(self.type)

    def update(self, symbol_type: SymbolType) -> Symbol:
        """Give the symbol a new type and recompute its size."""
        self.type = symbol_type
        self.size = compute_size(symbol_type)
        return self


@dataclass
class Label:
    """A named jump target with the jumps still waiting for its address."""

    name: str
    addr: int = -1
    nextlist: list[int] = field(default_factory=list)


def _align(offset: int, alignment: int) -> int:
    return (offset + alignment - 1) & ~(alignment - 1)


def _spaces(n: int) -> str:
    return " " * max(n, 0)


class SymbolTable:
    """Symbols of one scope, linked to the scope that encloses it."""

    def __init__(self, name: str = "NULL", parent: Optional[SymbolTable] = None) -> None:
        self.name = name
        self.parent = parent
        self.count = 0
        self.table: list[Symbol] = []

    def __iter__(self) -> Iterator[Symbol]:
        return iter(self.table)

    def __len__(self) -> int:
        return len(self.table)

    def _find_local(self, name: str) -> Optional[Symbol]:
        return next((symbol for symbol in self.table if symbol.name == name), None)

    def has_in_scope(self, name: str) -> bool:
        """Whether this scope itself, not an enclosing one, declares ``name``."""
        return self._find_local(name) is not None

    def lookup_identifier(self, name: str) -> Optional[Symbol]:
        """Find ``name`` here or in an enclosing scope; None if absent."""
        table: Optional[SymbolTable] = self
        while table is not None:
            found = table._find_local(name)
            if found is not None:
                return found
            table = table.parent
        return None

    def lookup_declarator(self, name: str) -> Symbol:
        """Declare ``name`` in this scope.

        A second declaration in the same scope warns and returns the
        existing symbol.
        """
        existing = self._find_local(name)
        if existing is not None:
            warnings.warn(
                f"Redeclaration of variable '{name}' in the same scope",
                RedeclarationWarning,
                stacklevel=2,
            )
            return existing
        symbol = Symbol(name)
        self.table.append(symbol)
        return symbol

    def lookup(self, name: str) -> Symbol:
        """Declare ``name`` in this scope, warning on redeclaration."""
        existing = self._find_local(name)
        if existing is not None:
            warnings.warn(
                f"Redeclaration of variable '{name}' in the same scope",
                RedeclarationWarning,
                stacklevel=2,
            )
            return existing
        symbol = Symbol(name)
        self.table.append(symbol)
        return symbol

    def update_offsets(self) -> None:
        """Lay out symbol offsets here and in every nested table."""
        offset = 0
        nested_tables: list[SymbolTable] = []
        for position, symbol in enumerate(self.table):
            if symbol.type.kind == "float":
                offset = _align(offset, _FLOAT_ALIGNMENT)
            if position == 0:
                symbol.offset = 0
            else:
                symbol.offset = offset
            offset = symbol.offset + symbol.size
            if symbol.nested is not None:
                nested_tables.append(symbol.nested)
        for nested in nested_tables:
            nested.update_offsets()

    def render(self) -> str:
        """Text of this table followed by the tables nested in it."""
        parent_name = "NULL" if self.parent is None else self.parent.name
        parts = [
            "**" * 60 + "\n",
            f"Name: {self.name}{_spaces(53 - len(self.name))} Parent Table: {parent_name}\n",
            "__" * 60 + "\n",
            "Name" + _spaces(36)
            + "Type" + _spaces(16)
            + "Init Value" + _spaces(7)
            + "Size" + _spaces(11)
            + "Offset" + _spaces(9)
            + "Nested\n",
            _spaces(100) + "\n",
        ]
        nested_tables: list[SymbolTable] = []
        for symbol in self.table:
            kind = type_name(symbol.type)
            size = str(symbol.size)
            offset = str(symbol.offset)
            nested = "NULL" if symbol.nested is None else symbol.nested.name
            parts.append(
                symbol.name + _spaces(40 - len(symbol.name))
                + kind + _spaces(20 - len(kind))
                + symbol.val + _spaces(20 - len(symbol.val))
                + size + _spaces(15 - len(size))
                + offset + _spaces(15 - len(offset))
                + nested + "\n"
            )
            if symbol.nested is not None:
                nested_tables.append(symbol.nested)
        parts.append("--" * 60 + "\n\n")
        parts.extend(nested.render() for nested in nested_tables)
        return "".join(parts)