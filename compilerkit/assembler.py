"""Two-pass assembler for a simple SIC machine."""

from __future__ import annotations

import argparse
import re
import sys
from dataclasses import dataclass, field
from itertools import chain
from pathlib import Path
from typing import Iterator, Mapping

from compilerkit.hexutil import hex_to_int, int_to_hex, pad_end, pad_start

_ADDRESS_WIDTH = 7
_LISTING_WIDTH = 35
_TEXT_RECORD_LIMIT = 60
_INDEX_BIT = 0x8000
_MARK_HEADER = " ^     ^ "
_FIELD_SEPARATOR = re.compile(r" +")


def parse_optab(text: str) -> dict[str, str]:
    """Parse an operation table of ``MNEMONIC  OPCODE`` lines."""
    optab: dict[str, str] = {}
    for line in text.splitlines():
        if not line.strip():
            continue
        mnemonic, _, rest = line.partition(" ")
        optab[mnemonic] = rest.lstrip(" ")
    return optab


def split_line(line: str, start: int = 0) -> tuple[str, str, str]:
    """Split a source line into (label, opcode, operand) from ``start``.

    A line beginning with ``.`` is a comment and gives ``(".", "", "")``.
    """
    if line.startswith("."):
        return (".", "", "")
    parts = _FIELD_SEPARATOR.split(line[start:])
    if len(parts) > 1 and parts[-1] == "":
        parts.pop()
    if len(parts) > 3:
        raise ValueError(f"too many fields in line: {line!r}")
    fields = parts + [""] * (3 - len(parts))
    return fields[0], fields[1], fields[2]


def _quoted_content(operand: str) -> str:
    return operand[2:].split("'", 1)[0]


def _is_literal(operand: str, letter: str) -> bool:
    return operand[:1].upper() == letter and operand[1:2] == "'"


def constant_object_code(operand: str) -> str:
    """Object code of a BYTE or WORD operand."""
    if _is_literal(operand, "C"):
        return "".join(int_to_hex(ord(ch)) for ch in _quoted_content(operand))
    if _is_literal(operand, "X"):
        return _quoted_content(operand)
    try:
        value = int(operand)
    except ValueError:
        raise ValueError(f"invalid constant operand: {operand!r}") from None
    return pad_start(int_to_hex(value), 6, "0")


def byte_operand_length(operand: str) -> int:
    """Number of bytes a BYTE operand occupies."""
    if _is_literal(operand, "X"):
        return (len(_quoted_content(operand)) + 1) // 2
    if _is_literal(operand, "C"):
        return len(_quoted_content(operand))
    return 0


def _format_symtab(symbols: Mapping[str, int]) -> str:
    return "\n".join(
        f"{pad_end(name, 10, ' ')}     {int_to_hex(address)}"
        for name, address in sorted(symbols.items())
    )


@dataclass
class PassOneResult:
    """Intermediate file, symbol table and program extent from pass one."""

    intermediate: list[str]
    symbols: dict[str, int]
    start_address: int
    program_length: int
    symtab_text: str
    warnings: list[str] = field(default_factory=list)


@dataclass
class AssemblyResult:
    """Everything pass two produces."""

    first_pass: PassOneResult
    listing: list[str]
    object_program: list[str]
    readable: list[str]


class _TextRecords:
    """Collects object code into text records of bounded length."""

    def __init__(self, start: str) -> None:
        self.start = start
        self.body = ""
        self.marks = _MARK_HEADER
        self.records: list[tuple[str, str]] = []

    def _mark(self, code: str) -> None:
        self.marks += "^" + " " * (len(code) - 1)

    def add(self, location: str, code: str) -> None:
        if not self.start and code:
            self.start = location
        if not code or len(self.body) + len(code) > _TEXT_RECORD_LIMIT:
            self.flush()
            self.body = code
            self.marks = _MARK_HEADER
            self.start = ""
            if code:
                self.start = location
                self._mark(code)
        else:
            self.body += code
            self._mark(code)

    def flush(self) -> None:
        if not self.body:
            return
        size = pad_start(int_to_hex(len(self.body) // 2), 2, "0")
        record = "T" + pad_start(self.start, 6, "0") + size + self.body
        self.records.append((record, self.marks))


class Assembler:
    """Assembles source text with a given operation table."""

    def __init__(self, optab: Mapping[str, str]) -> None:
        self.optab = dict(optab)

    def pass_one(self, source: str) -> PassOneResult:
        """Assign addresses, build the symbol table and intermediate lines."""
        lines: Iterator[str] = (line for line in source.splitlines() if line.strip())

        def next_line() -> str:
            try:
                return next(lines)
            except StopIteration:
                raise ValueError("source ends before END") from None

        intermediate: list[str] = []
        symbols: dict[str, int] = {}
        warnings: list[str] = []

        line = next_line()
        label, opcode, operand = split_line(line)
        if opcode == "START":
            locctr = hex_to_int(operand)
            start_address = locctr
            intermediate.append(pad_end(operand, _ADDRESS_WIDTH, " ") + line)
            line = next_line()
            label, opcode, operand = split_line(line)
        else:
            locctr = start_address = 0

        while opcode != "END":
            if label == ".":
                intermediate.append(line)
                line = next_line()
                label, opcode, operand = split_line(line)
                continue
            if label:
                if label in symbols:
                    warnings.append(f"Duplicate Label found: {label}")
                else:
                    symbols[label] = locctr

            address = int_to_hex(locctr)
            if opcode in self.optab or opcode == "WORD":
                locctr += 3
            elif opcode == "BYTE":
                locctr += byte_operand_length(operand)
            elif opcode == "RESW":
                locctr += 3 * int(operand)
            elif opcode == "RESB":
                locctr += int(operand)
            else:
                warnings.append(f"Error: Invalid opcode {opcode}")

            intermediate.append(pad_end(address, _ADDRESS_WIDTH, " ") + line)
            line = next_line()
            label, opcode, operand = split_line(line)

        intermediate.append(line)
        return PassOneResult(
            intermediate=intermediate,
            symbols=symbols,
            start_address=start_address,
            program_length=locctr - start_address,
            symtab_text=_format_symtab(symbols),
            warnings=warnings,
        )

    def _object_code(self, opcode: str, operand: str, symbols: Mapping[str, int]) -> str:
        if opcode in self.optab:
            code = self.optab[opcode]
            if operand in symbols:
                return code + int_to_hex(symbols[operand])
            if operand.endswith(",X"):
                base = operand[:-2]
                return code + int_to_hex(symbols.get(base, 0) + _INDEX_BIT)
            return pad_end(code, 6, "0")
        if opcode in ("BYTE", "WORD"):
            return constant_object_code(operand)
        return ""

    def pass_two(self, first_pass: PassOneResult) -> AssemblyResult:
        """Generate the listing, object program and annotated object program."""
        lines = iter(first_pass.intermediate)
        try:
            first_line = next(lines)
        except StopIteration:
            raise ValueError("intermediate file is empty") from None

        listing: list[str] = []
        object_program: list[str] = []
        readable: list[str] = []

        label, opcode, operand = split_line(first_line, _ADDRESS_WIDTH)
        if opcode == "START":
            listing.append(first_line)
            name = pad_end(label, 6, " ")
            start = pad_start(operand, 6, "0")
            length = pad_start(int_to_hex(first_pass.program_length), 6, "0")
            header = "H" + name + start + length
            object_program.append(header)
            readable.extend([header, " ^     ^     ^"])
            records = _TextRecords(start)
            remaining: Iterator[str] = lines
        else:
            records = _TextRecords("")
            remaining = chain([first_line], lines)

        end_line = None
        for line in remaining:
            location = line[:4]
            label, opcode, operand = split_line(line, _ADDRESS_WIDTH)
            if opcode == "END":
                end_line = line
                break
            if label == ".":
                listing.append(line)
                continue
            code = self._object_code(opcode, operand, first_pass.symbols)
            listing.append(pad_end(line, _LISTING_WIDTH, " ") + code)
            records.add(location, code)

        if end_line is not None:
            listing.append(end_line)
        records.flush()
        for record, marks in records.records:
            object_program.append(record)
            readable.extend([record, marks])

        end_record = "E" + pad_start(int_to_hex(first_pass.start_address), 6, "0")
        object_program.append(end_record)
        readable.extend([end_record, " ^"])

        return AssemblyResult(
            first_pass=first_pass,
            listing=listing,
            object_program=object_program,
            readable=readable,
        )

    def assemble(self, source: str) -> AssemblyResult:
        """Run both passes over ``source``."""
        return self.pass_two(self.pass_one(source))


def _write_lines(path: Path, lines: list[str]) -> None:
    path.write_text("".join(f"{line}\n" for line in lines))


def main(argv: list[str] | None = None) -> int:
    """Assemble a source file and write the pass outputs."""
    parser = argparse.ArgumentParser(description="Two-pass SIC assembler")
    parser.add_argument("--optab", default="optab.txt", help="operation table file")
    parser.add_argument("--input", default="sample_input.txt", help="assembly source")
    parser.add_argument("--output-dir", default=".", help="directory for outputs")
    args = parser.parse_args(argv)

    out = Path(args.output_dir)
    try:
        assembler = Assembler(parse_optab(Path(args.optab).read_text()))
        source = Path(args.input).read_text()

        print("Started Pass 1")
        first = assembler.pass_one(source)
        for warning in first.warnings:
            print(warning)
        _write_lines(out / "intermediate.txt", first.intermediate)
        (out / "symtab.txt").write_text(first.symtab_text)
        print("Pass 1 completed")

        print("Started Pass 2")
        result = assembler.pass_two(first)
        _write_lines(out / "final.txt", result.listing)
        _write_lines(out / "output.o", result.object_program)
        _write_lines(out / "readable_output.txt", result.readable)
        print("Completed Pass 2")
    except (OSError, ValueError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())