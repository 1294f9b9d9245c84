import pytest

from compilerkit.assembler import (
    Assembler,
    byte_operand_length,
    constant_object_code,
    main,
    parse_optab,
    split_line,
)
from compilerkit.hexutil import hex_to_int, int_to_hex, pad_end

OPTAB_TEXT = "LDA 00\nSTA 0C\nLDCH 50\nRSUB 4C\n"

SAMPLE = "\n".join(
    [
        "COPY    START   1000",
        "FIRST   LDA     ALPHA",
        "        STA     BETA",
        "        LDCH    BUF,X",
        "        RSUB",
        ". a comment line",
        "ALPHA   WORD    5",
        "BETA    RESW    1",
        "BUF     BYTE    C'EOF'",
        "HEX     BYTE    X'F1'",
        "        END     FIRST",
    ]
) + "\n"


@pytest.fixture
def assembler():
    return Assembler(parse_optab(OPTAB_TEXT))


@pytest.fixture
def result(assembler):
    return assembler.assemble(SAMPLE)


def _text_records(result):
    return [r for r in result.object_program if r.startswith("T")]


def test_parse_optab():
    assert parse_optab("LDA 00\nSTA     0C\n\n") == {"LDA": "00", "STA": "0C"}


def test_split_line_fields():
    assert split_line("FIRST   LDA     ALPHA") == ("FIRST", "LDA", "ALPHA")
    assert split_line("        RSUB") == ("", "RSUB", "")
    assert split_line(". anything here at all") == (".", "", "")


def test_split_line_from_offset():
    assert split_line("1000   FIRST   LDA     ALPHA", 7) == ("FIRST", "LDA", "ALPHA")


def test_split_line_too_many_fields():
    with pytest.raises(ValueError):
        split_line("A B C D")


def test_byte_operand_length():
    assert byte_operand_length("C'EOF'") == len("EOF")
    assert byte_operand_length("X'F1'") == len("F1") // 2
    assert byte_operand_length("42") == 0


def test_constant_object_code_character_round_trip():
    code = constant_object_code("C'EOF'")
    assert bytes.fromhex(code).decode() == "EOF"


def test_constant_object_code_hex_and_number():
    assert constant_object_code("X'F1'") == "F1"
    code = constant_object_code("5")
    assert len(code) == 6
    assert hex_to_int(code) == 5


def test_constant_object_code_invalid():
    with pytest.raises(ValueError):
        constant_object_code("abc")


def test_pass_one_addresses(assembler):
    first = assembler.pass_one(SAMPLE)
    symbols = first.symbols
    assert first.start_address == hex_to_int("1000")
    assert symbols["FIRST"] == first.start_address
    assert symbols["BETA"] - symbols["ALPHA"] == 3
    assert symbols["BUF"] - symbols["BETA"] == 3
    assert symbols["HEX"] - symbols["BUF"] == byte_operand_length("C'EOF'")
    end = symbols["HEX"] + byte_operand_length("X'F1'")
    assert first.program_length == end - first.start_address
    assert first.warnings == []


def test_pass_one_symtab_sorted(assembler):
    first = assembler.pass_one(SAMPLE)
    names = [line.split()[0] for line in first.symtab_text.splitlines()]
    assert names == sorted(first.symbols)
    for line in first.symtab_text.splitlines():
        name, address = line.split()
        assert hex_to_int(address) == first.symbols[name]


def test_pass_one_keeps_comment(assembler):
    first = assembler.pass_one(SAMPLE)
    assert ". a comment line" in first.intermediate
    assert first.intermediate[-1] == "        END     FIRST"


def test_duplicate_label_and_invalid_opcode(assembler):
    source = "P START 1000\nA LDA A\nA STA A\n        FOO     A\n        END\n"
    first = assembler.pass_one(source)
    assert any("Duplicate Label found" in w for w in first.warnings)
    assert any("Error: Invalid opcode" in w for w in first.warnings)


def test_missing_end_raises(assembler):
    with pytest.raises(ValueError):
        assembler.pass_one("P START 1000\n        LDA     X\n")


def test_header_record(result):
    header = result.object_program[0]
    assert header[0] == "H"
    assert header[1:7].rstrip() == "COPY"
    assert hex_to_int(header[7:13]) == result.first_pass.start_address
    assert hex_to_int(header[13:19]) == result.first_pass.program_length


def test_end_record(result):
    end = result.object_program[-1]
    assert end[0] == "E"
    assert hex_to_int(end[1:]) == result.first_pass.start_address


def test_text_records_split_at_reserved_storage(result):
    symbols = result.first_pass.symbols
    records = _text_records(result)
    assert len(records) == 2
    first_body = (
        "00" + int_to_hex(symbols["ALPHA"])
        + "0C" + int_to_hex(symbols["BETA"])
        + "50" + int_to_hex(symbols["BUF"] + hex_to_int("8000"))
        + pad_end("4C", 6, "0")
        + constant_object_code("5")
    )
    assert records[0][9:] == first_body
    assert hex_to_int(records[0][1:7]) == result.first_pass.start_address
    assert records[1][9:] == constant_object_code("C'EOF'") + "F1"
    assert hex_to_int(records[1][1:7]) == symbols["BUF"]
    for record in records:
        assert hex_to_int(record[7:9]) == len(record[9:]) // 2


def test_readable_marks_align(result):
    readable = result.readable
    assert readable[1] == " ^     ^     ^"
    assert readable[-1] == " ^"
    for i, line in enumerate(readable):
        if line.startswith("T"):
            marks = readable[i + 1]
            assert marks.startswith(" ^     ^ ")
            assert len(marks) == len(line)
            assert marks[9] == "^"


def test_listing(result):
    symbols = result.first_pass.symbols
    assert ". a comment line" in result.listing
    lda = [line for line in result.listing if " LDA " in line][0]
    assert lda.endswith("00" + int_to_hex(symbols["ALPHA"]))
    assert result.listing[-1] == "        END     FIRST"


def test_long_records_are_split(assembler):
    values = list(range(1, 26))
    body_lines = [f"        WORD    {v}" for v in values]
    source = "\n".join(["P       START   1000", *body_lines, "        END"]) + "\n"
    result = assembler.assemble(source)
    bodies = [r[9:] for r in _text_records(result)]
    assert "".join(bodies) == "".join(constant_object_code(str(v)) for v in values)
    assert all(len(b) <= 60 for b in bodies)
    assert all(len(b) == 60 for b in bodies[:-1])


def test_program_without_start(assembler):
    result = assembler.assemble("        LDA     NOWHERE\n        END\n")
    assert result.first_pass.start_address == 0
    assert not any(r.startswith("H") for r in result.object_program)
    assert [r[9:] for r in _text_records(result)] == [pad_end("00", 6, "0")]


def test_main_writes_outputs(tmp_path):
    optab = tmp_path / "optab.txt"
    optab.write_text(OPTAB_TEXT)
    source = tmp_path / "input.txt"
    source.write_text(SAMPLE)
    status = main(
        ["--optab", str(optab), "--input", str(source), "--output-dir", str(tmp_path)]
    )
    assert status == 0
    object_lines = (tmp_path / "output.o").read_text().splitlines()
    assert object_lines[0].startswith("H")
    assert object_lines[-1].startswith("E")
    assert (tmp_path / "symtab.txt").read_text().splitlines()[0].startswith("ALPHA")


def test_main_missing_file(tmp_path):
    status = main(["--optab", str(tmp_path / "absent.txt"), "--output-dir", str(tmp_path)])
    assert status == 1