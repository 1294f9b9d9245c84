"""Quadruples, backpatching and three-address code generation."""

from __future__ import annotations

import heapq
from dataclasses import dataclass, field
from typing import Iterable, Optional, Union

from compilerkit.symbols import Label, Symbol, SymbolTable, SymbolType

_BINARY_OPS = frozenset({"+", "-", "*", "/", "%", "|", "^", "&", ">>", "<<"})
_RELATIONAL_OPS = frozenset({"==", "!=", "<=", "<", ">", ">="})

_CONVERSIONS = {
    ("float", "integer"): "float2int",
    ("float", "char"): "float2char",
    ("integer", "float"): "int2float",
    ("integer", "char"): "int2char",
    ("char", "integer"): "char2int",
    ("char", "double"): "char2double",
}

Operand = Union[str, int, float]


def format_float(x: float) -> str:
    """Shortest general form of ``x`` with six significant digits."""
    return f"{x:g}"


def _as_text(value: Operand) -> str:
    if isinstance(value, bool):
        return str(int(value))
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        return format_float(value)
    return value


def make_list(index: int) -> list[int]:
    """A jump list holding one instruction index."""
    return [index]


def merge_lists(first: Iterable[int], second: Iterable[int]) -> list[int]:
    """Merge two ordered jump lists into one ordered list."""
    return list(heapq.merge(first, second))


@dataclass
class Quad:
    """One three-address instruction."""

    res: str
    arg1: str = ""
    op: str = "="
    arg2: str = ""

    def render(self) -> str:
        """The instruction as plain three-address code."""
        op, res, arg1, arg2 = self.op, self.res, self.arg1, self.arg2
        if op in _BINARY_OPS:
            return f"{res} = {arg1} {op} {arg2}"
        if op in _RELATIONAL_OPS:
            return f"if {arg1} {op} {arg2} goto {res}"
        simple = {
            "goto": f"goto {res}",
            "=": f"{res} = {arg1}",
            "=&": f"{res} = &{arg1}",
            "=*": f"{res} = *{arg1}",
            "*=": f"*{res} = {arg1}",
            "uminus": f"{res} = -{arg1}",
            "~": f"{res} = ~{arg1}",
            "!": f"{res} = !{arg1}",
            "=[]": f"{res} = {arg1}[{arg2}]",
            "[]=": f"{res}[{arg1}] = {arg2}",
            "return": f"return {res}",
            "param": f"param {res}",
            "call": f"{res} = call {arg1}, {arg2}",
            "Label": f"{res}: ",
        }
        return simple.get(op, f"Unknown operator: {op}")

    def render_formatted(self) -> str:
        """The instruction as an indented C-like statement."""
        op, res, arg1, arg2 = self.op, self.res, self.arg1, self.arg2
        if op in _BINARY_OPS:
            body = f"{res} = {arg1} {op} {arg2};"
        elif op in _RELATIONAL_OPS:
            body = f"if ({arg1} {op} {arg2}) goto L{res};"
        else:
            statements = {
                "goto": f"goto L{res};",
                "=": f"{res} = {arg1};",
                "=&": f"{res} = &{arg1};",
                "=*": f"{res} = *{arg1};",
                "*=": f"*{res} = {arg1};",
                "uminus": f"{res} = -{arg1};",
                "~": f"{res} = ~{arg1};",
                "!": f"{res} = !{arg1};",
                "=[]": f"{res} = {arg1}[{arg2}];",
                "[]=": f"{res}[{arg1}] = {arg2};",
                "return": f"return {res};",
                "param": f"param {res};",
                "call": f"{res} = call {arg1}, {arg2};",
                "Label": f"{res}: ",
            }
            body = statements.get(op, f"Unknown operator: {op}")
        return "    " + body


@dataclass
class Expression:
    """An expression with its place and pending jump lists."""

    loc: Optional[Symbol] = None
    type: str = ""
    truelist: list[int] = field(default_factory=list)
    falselist: list[int] = field(default_factory=list)
    nextlist: list[int] = field(default_factory=list)


class Translator:
    """Holds the quad array and symbol tables during translation."""

    def __init__(self) -> None:
        self.quads: list[Quad] = []
        self.global_table = SymbolTable("Global")
        self.current = self.global_table
        self.parent_table: Optional[SymbolTable] = None
        self.labels: list[Label] = []
        self.loop_name = ""
        self.table_count = 0

    def next_instr(self) -> int:
        """Index the next emitted quad will get."""
        return len(self.quads)

    def emit(self, op: str, res: str, arg1: Operand = "", arg2: str = "") -> Quad:
        """Append a quad; numeric first arguments are written out as text."""
        quad = Quad(res, _as_text(arg1), op, arg2)
        self.quads.append(quad)
        return quad

    def gentemp(self, symbol_type: SymbolType, init: str = "") -> Symbol:
        """Create a fresh temporary in the current table."""
        name = f"t{self.current.count}"
        self.current.count += 1
        symbol = Symbol(name, symbol_type, val=init)
        self.current.table.append(symbol)
        return symbol

    def backpatch(self, indices: Iterable[int], addr: int) -> None:
        """Point every jump in ``indices`` at ``addr``."""
        target = str(addr)
        for index in indices:
            self.quads[index].res = target

    def change_table(self, table: SymbolTable) -> None:
        """Make ``table`` the current symbol table."""
        self.current = table

    def find_label(self, name: str) -> Optional[Label]:
        """The label called ``name``, or None."""
        return next((label for label in self.labels if label.name == name), None)

    def bool_to_int(self, expr: Expression) -> bool:
        """Materialise a boolean expression as an integer temporary.

        Returns whether a conversion took place.
        """
        if expr.type != "bool":
            return False
        expr.loc = self.gentemp(SymbolType("integer"))
        self.backpatch(expr.truelist, self.next_instr())
        self.emit("=", expr.loc.name, 1)
        expr.nextlist = make_list(self.next_instr())
        self.emit("goto", "")
        self.backpatch(expr.falselist, self.next_instr())
        self.emit("=", expr.loc.name, 0)
        expr.nextlist = merge_lists(expr.nextlist, make_list(self.next_instr()))
        self.emit("goto", "")
        return True

    def int_to_bool(self, expr: Expression) -> Expression:
        """Give a non-boolean expression true and false jump lists."""
        if expr.type != "bool":
            if expr.loc is None:
                raise ValueError("expression has no location")
            expr.falselist = make_list(self.next_instr())
            self.emit("==", "", expr.loc.name, "0")
            expr.truelist = make_list(self.next_instr())
            self.emit("goto", "")
        return expr

    def convert_type(self, symbol: Symbol, target: str) -> Symbol:
        """Convert ``symbol`` to the type named ``target`` through a temporary.

        A temporary is always created; the original symbol comes back when
        no conversion applies.
        """
        temp = self.gentemp(SymbolType(target))
        function = _CONVERSIONS.get((symbol.type.kind, target))
        if function is None:
            return symbol
        self.emit("=", temp.name, f"{function}({symbol.name})")
        return temp

    def convert_if_needed(self, symbol: Symbol, target_type: SymbolType) -> Symbol:
        """Convert ``symbol`` unless it already has the target kind."""
        if symbol.type.kind == target_type.kind:
            return symbol
        return self.convert_type(symbol, target_type.kind)

    def dominant_type(self, first: SymbolType, second: SymbolType) -> SymbolType:
        """Float if either type is float, integer otherwise."""
        if first.kind == "float" or second.kind == "float":
            return SymbolType("float")
        return SymbolType("integer")

    def render_declaration(self, symbol: Symbol) -> str:
        """A declaration line for ``symbol``."""
        symbol_type = symbol.type
        kind = symbol_type.kind
        if kind in ("arr", "ptr"):
            if symbol_type.element is None:
                raise ValueError(f"{kind} type of {symbol.name!r} has no element type")
            element = symbol_type.element.kind
            prefix = "integer" if kind == "arr" and element == "integer" else element + " "
        else:
            prefix = kind + " "
        text = "    " + prefix + symbol.name
        if kind == "arr":
            text += f"[{symbol_type.width}]"
        if kind == "ptr":
            text += "*"
        if symbol.val != "-":
            text += f" = {symbol.val}"
        return text + ";"

    def _declarations(self) -> list[str]:
        lines: list[str] = []
        printed: set[str] = set()
        for symbol in self.global_table.table:
            if not symbol.name.startswith("t") and symbol.type.kind != "func":
                lines.append(self.render_declaration(symbol))
                printed.add(symbol.name)
        for quad in self.quads:
            for name, assume in ((quad.res, True), (quad.arg1, False), (quad.arg2, False)):
                if not name.startswith("t") or name in printed:
                    continue
                found = self.global_table.lookup_identifier(name)
                if found is not None:
                    lines.append(self.render_declaration(found))
                    printed.add(name)
                elif assume:
                    lines.append(f"    int {name};")
                    printed.add(name)
        return lines

    def render(self) -> str:
        """Quad table followed by the three-address code listing."""
        lines = [
            "QUAD ARRAY REPRESENTATION:",
            "**" * 60,
            f"{'Index':<8}{'op':<12}{'arg1':<12}{'arg2':<12}{'result':<12}",
            "--" * 50,
        ]
        lines.extend(
            f"{index:<8}{quad.op:<12}{quad.arg1:<12}{quad.arg2:<12}{quad.res:<12}"
            for index, quad in enumerate(self.quads)
        )
        lines += ["", "THREE ADDRESS CODE : ", "**" * 60, "void main()", "{"]
        lines.extend(self._declarations())
        lines.append("")
        lines.extend(
            f"L{index}: {quad.render_formatted()}" for index, quad in enumerate(self.quads)
        )
        lines += ["}", "**" * 65]
        return "\n".join(lines) + "\n"