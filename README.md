# compilerkit

Small compiler-construction tools written in plain Python, with no third-party
dependencies:

- **`compilerkit.assembler`** is a two-pass assembler for the SIC machine. It builds
  a symbol table and an intermediate listing. It then produces H/T/E object records
  and an annotated copy of those records.
- **`compilerkit.hexutil`** holds the hexadecimal and padding helpers the assembler
  uses: `int_to_hex`, `hex_to_int`, `pad_start` and `pad_end`.
- **`compilerkit.lexreport`** turns a stream of already-classified tokens into a token
  report and a symbol-table listing.
- **`compilerkit.symbols`** provides symbol types, symbols and scoped symbol tables.
  It computes sizes, lays out offsets with 8-byte float alignment and renders the
  tables as text.
- **`compilerkit.quads`** provides quadruples and a `Translator`. The `Translator`
  generates temporaries, backpatches jumps, converts between bool and int, coerces
  types and renders three-address code.

## Installation

```
pip install .
```

To run the tests:

```
pip install .[test]
pytest
```

## The assembler from the command line

```
compilerkit-asm [--optab optab.txt] [--input sample_input.txt] [--output-dir .]
```

**Inputs**

- `--optab` names the operation table, which defaults to `optab.txt`. Each line
  holds a mnemonic and its opcode separated by spaces, for example `LDA 00`. Blank
  lines are ignored.
- `--input` names the source program, which defaults to `sample_input.txt`. Each
  statement is written as `LABEL OPCODE OPERAND`:
  - Lines starting with `.` are comments.
  - A leading space means the statement has no label.
  - Blank lines are skipped.

**Outputs**

These files are written to `--output-dir`, which defaults to the current directory:

- `intermediate.txt` is the source with the location counter of each line.
- `symtab.txt` lists every label with its address, sorted by name.
- `final.txt` is the listing with object code appended to each line.
- `output.o` holds the header, text and end records.
- `readable_output.txt` holds the same records with `^` markers under the fields.

Duplicate labels and unknown opcodes are reported on standard output, and assembly
continues. If a file cannot be read, or the source ends without `END`, the command
prints an error to standard error and exits with status 1.

The supported directives are `START`, `END`, `BYTE` (`C'...'`, `X'...'` or a
decimal number), `WORD`, `RESW` and `RESB`. Indexed addressing is written as
`BUFFER,X`. Text records hold at most 60 hexadecimal digits.

## The assembler as a library

```python
from pathlib import Path
from compilerkit.assembler import Assembler, parse_optab

optab = parse_optab(Path("optab.txt").read_text())
result = Assembler(optab).assemble(Path("sample_input.txt").read_text())
print("\n".join(result.object_program))
```

You can also call `Assembler.pass_one` and `Assembler.pass_two` one at a time:

- `pass_one` returns a `PassOneResult`, which holds the intermediate lines, the
  symbols, the start address, the program length, the symbol-table text and any
  warnings.
- `pass_two` returns an `AssemblyResult`, which holds the listing, the object
  program and the readable records.

The helpers `split_line`, `constant_object_code` and `byte_operand_length` are also
public.

## Token reports

```python
from compilerkit.lexreport import Token, TokenKind, process_tokens

report, table = process_tokens([
    Token(TokenKind.KEYWORD, "integer"),
    Token(TokenKind.IDENTIFIER, "x"),
    Token(TokenKind.CHAR_CONSTANT, "'a'"),
])
print("\n".join(report))   # <KEYWORD, 1, integer> ...
print(table.render())
```

`process_tokens` adds each identifier, integer constant and character constant to a
`LexSymbolTable` the first time it appears. `LexSymbolTable.render` lists the entries
newest first.

## Symbol tables and three-address code

```python
from compilerkit.quads import Translator
from compilerkit.symbols import SymbolType

tr = Translator()
t = tr.gentemp(SymbolType("integer"), "")
tr.emit("+", t.name, "a", "b")
print(tr.render())
print(tr.global_table.render())
```

`Translator.render` prints the quad array twice: first as a table, then as labelled
C-like three-address code. `SymbolTable.update_offsets` assigns offsets, and
`SymbolTable.render` prints a table followed by the tables nested in it.
`SymbolTable.lookup` and `SymbolTable.lookup_declarator` issue a
`RedeclarationWarning` when a name is declared twice in the same scope.

## What is not included

- There is no lexer. `compilerkit.lexreport` works on `Token` values that the caller
  has already produced.
- There is no parser for a source language. `Translator` supplies the operations a
  parser would call (`emit`, `gentemp`, `backpatch`, `bool_to_int`, `int_to_bool`,
  `convert_type` and so on), but nothing here reads program text and drives them.
- The only command is `compilerkit-asm`.