"""Detokenizer for WBASS2 Z80 assembler source files."""

from __future__ import annotations

from msxconverter.decoder import DecoderResult

INSTRUCTIONS = (
    "LD", "JR", "DJNZ", "CALL", "RET", "JP", "INC", "DEC",
    "PUSH", "POP", "RST", "IN", "OUT", "IM", "EX", "ADD", "ADC", "SUB", "SBC",
    "AND", "XOR", "OR", "CP", "RLC", "RRC", "RL", "RR", "SLA", "SRA", "???",
    "SRL", "BIT", "RES", "SET", "CPD", "CPDR", "CPI", "CPIR", "IND", "INDR",
    "INI", "INIR", "LDD", "LDDR", "LDI", "LDIR", "OUTD", "OTDR", "OUTI",
    "OTIR", "NEG", "RETI", "RETN", "RLD", "RRD", "CCF", "CPL", "DAA", "DI",
    "EI", "EXX", "HALT", "NOP", "RLA", "RLCA", "RRA", "RRCA", "SCF", "ORG",
    "EQU", "END", "DB", "DW", "DS", "DM", "DEFB", "DEFW", "DEFS", "DEFM",
    "GLOBAL", "INCLUDE",
)
REGISTERS = (
    "A", "B", "C", "D", "E", "H", "L", "I", "R", "BC", "DE",
    "HL", "SP", "IX", "IY", "AF",
)
CONDITIONS = ("NZ", "Z", "NC", "C", "PO", "PE", "P", "M", "$")
LOGIC_OPERATORS = ("AND", "XOR", "OR", "MOD")
SPECIAL_CHARS = (",", ")", "(", "+", "-", "*", "/", "^")

_COMMENT = 0x01
_QUOTE = 0x22
_LABEL_REF = 0xC0
_NUMBER_TOKENS = (0xE0, 0xE1, 0xE2)
_END_OF_TOKENS = 0xFF
_LABEL_FIELD = 8
_LABEL_MAX_CHARS = 6
_MNEMONIC_COLUMN = 8
_OPERAND_COLUMN = 14
_COMMENT_COLUMN = 30


def decode_wbass2(data: bytes) -> DecoderResult:
    """Turn a tokenized WBASS2 source file into assembler text."""
    if not data or data[0] != 0xFD:
        raise ValueError("invalid WBASS2 file")

    beglabel = find_label_offset(data)
    if beglabel is None:
        raise ValueError("invalid WBASS2 file structure")

    parts: list[str] = []
    offset = 1
    try:
        while offset < len(data):
            length = data[offset]
            offset += 1
            if length == _END_OF_TOKENS:
                break
            if length == 0:
                parts.append("\n")
                continue
            line, offset = parse_line(length, data, offset, beglabel)
            parts.append(line)
    except IndexError as exc:
        raise ValueError("truncated or corrupt WBASS2 file") from exc

    return DecoderResult(text="".join(parts), is_text=True)


def find_label_offset(data: bytes) -> int | None:
    """Return the offset of the label table, or None if the token area never ends."""
    i = 1
    while i < len(data):
        c = data[i]
        if c == _END_OF_TOKENS:
            return i + 1
        i += (c & 127) + 1
    return None


def format_number(c: int, number: int) -> str:
    """Render a number constant in the notation its token selects."""
    if c == 0xE0:
        return str(number)
    if c == 0xE1:
        return f"&H{number:04X}" if number > 256 else f"&H{number:02X}"
    if c == 0xE2:
        return f"&B{number:08b}" if number <= 256 else f"&B{number:016b}"
    raise ValueError(f"not a number token: {c:#04x}")


def _label_name(data: bytes, beglabel: int, label: int) -> bytes:
    start = beglabel + _LABEL_FIELD * label
    name = bytearray()
    for i in range(start, start + _LABEL_MAX_CHARS):
        char = data[i] & 0x7F
        if char == 0:
            break
        name.append(char)
    return bytes(name)


def _pad_to(line: bytearray, column: int) -> None:
    line += b" " * (column - len(line))


def _take(data: bytes, offset: int, count: int) -> bytes:
    chunk = data[offset : offset + count]
    if len(chunk) < count:
        raise IndexError("data ends inside a line")
    return chunk


def parse_line(length: int, data: bytes, offset: int, beglabel: int) -> tuple[str, int]:
    """Decode one tokenized line; return its text and the offset after it."""
    line = bytearray()

    if length & 128:
        length &= 127
        label = data[offset] | data[offset + 1] << 8
        offset += 2
        length = (length - 2) & 0xFF
        line += _label_name(data, beglabel, label)
        line += b":"
        if length == 0:
            line += b"\n"
            return line.decode("latin-1"), offset

    c = data[offset]
    offset += 1
    length = (length - 1) & 0xFF

    if c == _COMMENT:
        if line:
            _pad_to(line, _MNEMONIC_COLUMN)
        line += b";"
        line += _take(data, offset, length)
        offset += length
        length = 0
    elif c > 127:
        _pad_to(line, _MNEMONIC_COLUMN)
        line += INSTRUCTIONS[c - 128].encode()
        if length > 0:
            _pad_to(line, _OPERAND_COLUMN)

    endline = offset + (length & 127)
    needspace = False
    while offset < endline:
        c = data[offset]
        offset += 1
        length = (length - 1) & 0xFF

        if c == _COMMENT:
            if len(line) > _OPERAND_COLUMN:
                line += b" "
                _pad_to(line, _COMMENT_COLUMN)
            line += b";"
            line += _take(data, offset, length)
            offset += length
            length = 0
        elif 1 < c < 28:
            line += SPECIAL_CHARS[c // 2 - 1].encode()
            needspace = False
        elif c == _QUOTE:
            end = data.find(_QUOTE, offset, endline)
            if end != -1:
                line += b'"'
                line += data[offset : end + 1]
                offset = end + 1
        elif c == _LABEL_REF:
            label = data[offset] | data[offset + 1] << 8
            offset += 2
            length = (length - 2) & 0xFF
            line += _label_name(data, beglabel, label)
        elif c in _NUMBER_TOKENS:
            if needspace:
                line += b" "
            number = data[offset] | data[offset + 1] << 8
            offset += 2
            length = (length - 2) & 0xFF
            line += format_number(c, number).encode()
            needspace = True
        elif c >= 128:
            if needspace:
                line += b" "
            if c >= 153:
                value = LOGIC_OPERATORS[c - 153]
            elif c >= 144:
                value = CONDITIONS[c - 144]
            else:
                value = REGISTERS[c - 128]
            line += value.encode()
            needspace = True

    line += b"\n"
    return line.decode("latin-1"), offset