import pytest

from compilerkit.symbols import (
    CHAR_SIZE,
    FLOAT_SIZE,
    INT_SIZE,
    POINTER_SIZE,
    Label,
    RedeclarationWarning,
    Symbol,
    SymbolTable,
    SymbolType,
    compute_size,
    type_name,
)


@pytest.mark.parametrize(
    "kind, size",
    [("void", 0), ("func", 0), ("char", 1), ("integer", 4), ("ptr", 4), ("float", 8)],
)
def test_compute_size_basic(kind, size):
    assert compute_size(SymbolType(kind)) == size


def test_compute_size_array_multiplies_element():
    arr = SymbolType("arr", SymbolType("float"), 10)
    assert compute_size(arr) == 10 * FLOAT_SIZE


def test_compute_size_nested_array():
    inner = SymbolType("arr", SymbolType("char"), 3)
    outer = SymbolType("arr", inner, 5)
    assert compute_size(outer) == 5 * 3 * CHAR_SIZE


def test_compute_size_unknown_is_minus_one():
    assert compute_size(SymbolType("block")) == -1


def test_type_name_forms():
    assert type_name(None) == "null"
    assert type_name(SymbolType("integer")) == "integer"
    assert type_name(SymbolType("ptr", SymbolType("char"))) == "ptr(char)"
    assert type_name(SymbolType("arr", SymbolType("integer"), 10)) == "arr(10,integer)"
    assert type_name(SymbolType("block")) == "block"
    assert type_name(SymbolType("weird")) == "NA"


def test_symbol_defaults():
    symbol = Symbol("x")
    assert symbol.type.kind == "integer"
    assert symbol.size == INT_SIZE
    assert symbol.val == "-"
    assert symbol.offset == 0
    assert symbol.nested is None


def test_symbol_update_changes_size():
    symbol = Symbol("p")
    returned = symbol.update(SymbolType("ptr", SymbolType("float")))
    assert returned is symbol
    assert symbol.size == POINTER_SIZE
    assert type_name(symbol.type) == "ptr(float)"


def test_label_default_address():
    label = Label("loop")
    assert label.addr == -1
    assert label.nextlist == []


def test_lookup_identifier_searches_parents():
    outer = SymbolTable("Global")
    inner = SymbolTable("inner", outer)
    declared = outer.lookup("a")
    assert inner.lookup_identifier("a") is declared
    assert inner.lookup_identifier("missing") is None
    assert not inner.has_in_scope("a")
    assert outer.has_in_scope("a")


def test_inner_declaration_shadows_outer():
    outer = SymbolTable("Global")
    inner = SymbolTable("inner", outer)
    outer_a = outer.lookup_declarator("a")
    inner_a = inner.lookup_declarator("a")
    assert inner.lookup_identifier("a") is inner_a
    assert outer.lookup_identifier("a") is outer_a


@pytest.mark.parametrize("method", ["lookup", "lookup_declarator"])
def test_redeclaration_warns_and_returns_existing(method):
    table = SymbolTable("Global")
    first = getattr(table, method)("v")
    with pytest.warns(RedeclarationWarning, match="'v'"):
        second = getattr(table, method)("v")
    assert second is first
    assert len(table) == 1


def test_update_offsets_layout_invariants():
    table = SymbolTable("Global")
    table.lookup("a")
    table.lookup("c").update(SymbolType("char"))
    table.lookup("f").update(SymbolType("float"))
    table.lookup("n")
    table.update_offsets()
    symbols = list(table)
    assert symbols[0].offset == 0
    for before, after in zip(symbols, symbols[1:]):
        assert after.offset >= before.offset + before.size
    assert symbols[2].offset % 8 == 0
    assert symbols[3].offset == symbols[2].offset + FLOAT_SIZE


def test_update_offsets_recurses_into_nested():
    outer = SymbolTable("Global")
    inner = SymbolTable("func", outer)
    inner.lookup("x")
    inner.lookup("y")
    fn = outer.lookup("func")
    fn.update(SymbolType("func"))
    fn.nested = inner
    outer.update_offsets()
    assert [s.offset for s in inner] == [0, INT_SIZE]


def test_render_contains_header_rows_and_nested():
    outer = SymbolTable("Global")
    inner = SymbolTable("func", outer)
    inner.lookup("x")
    fn = outer.lookup("func")
    fn.update(SymbolType("func"))
    fn.nested = inner
    text = outer.render()
    lines = text.split("\n")
    assert lines[0] == "**" * 60
    assert lines[1].startswith("Name: Global")
    assert lines[1].endswith(" Parent Table: NULL")
    assert "Parent Table: Global" in text
    row = next(line for line in lines if line.startswith("func "))
    assert row.startswith("func".ljust(40) + "func")
    assert row.endswith("func")
    assert text.index("Name: Global") < text.index("Name: func")
    assert text.endswith("--" * 60 + "\n\n")