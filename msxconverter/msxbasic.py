"""Detokenizer for tokenized MSX Basic listings."""

from __future__ import annotations

from msxconverter.decoder import DecoderResult

# Tokens starting at 0x81.
TOKENS = (
    "END", "FOR", "NEXT", "DATA", "INPUT", "DIM", "READ", "LET", "GOTO", "RUN",
    "IF", "RESTORE", "GOSUB", "RETURN", "REM", "STOP", "PRINT", "CLEAR", "LIST",
    "NEW", "ON", "WAIT", "DEF", "POKE", "CONT", "CSAVE", "CLOAD", "OUT", "LPRINT",
    "LLIST", "CLS", "WIDTH", "ELSE", "TRON", "TROFF", "SWAP", "ERASE", "ERROR",
    "RESUME", "DELETE", "AUTO", "RENUM", "DEFSTR", "DEFINT", "DEFSNG", "DEFDBL",
    "LINE", "OPEN", "FIELD", "GET", "PUT", "CLOSE", "LOAD", "MERGE", "FILES",
    "LSET", "RSET", "SAVE", "LFILES", "CIRCLE", "COLOR", "DRAW", "PAINT", "BEEP",
    "PLAY", "PSET", "PRESET", "SOUND", "SCREEN", "VPOKE", "SPRITE", "VDP", "BASE",
    "CALL", "TIME", "KEY", "MAX", "MOTOR", "BLOAD", "BSAVE", "DSKO$",
    "SET", "NAME", "KILL", "IPL", "COPY", "CMD", "LOCATE",
    "TO", "THEN", "TAB(", "STEP", "USR", "FN", "SPC(", "NOT", "ERL", "ERR",
    "STRING$", "USING", "INSTR", "'", "VARPTR", "CSRLIN", "ATTR$", "DSKI$", "OFF",
    "INKEY$", "POINT", ">", "=", "<", "+", "-", "*", "/", "^", "AND", "OR", "XOR",
    "EQV", "IMP", "MOD", "\\",
)

# Function tokens that follow a 0xFF prefix, starting at 0x81.
FUNCTION_TOKENS = (
    "LEFT$", "RIGHT$", "MID$", "SGN", "INT", "ABS", "SQR", "RND", "SIN", "LOG",
    "EXP", "COS", "TAN", "ATN", "FRE", "INP", "POS", "LEN", "STR$", "VAL", "ASC",
    "CHR$", "PEEK", "VPEEK", "SPACES$", "OCT$", "HEX$", "LPOS", "BIN$", "CINT",
    "CSNG", "CDBL", "FIX", "STICK", "STRIG", "PDL", "PAD", "DSKF", "FPOS", "CVI",
    "CVS", "CVD", "EOF", "LOC", "LOF", "MKI$", "MK$", "MKD$",
)

_TOKEN_BASE = 0x81
_QUOTE = 0x22
_COLON = 0x3A


def decode_msx_basic(data: bytes) -> DecoderResult:
    """Turn a tokenized MSX Basic program into its text listing."""
    if not data or data[0] != 0xFF:
        raise ValueError("invalid MSX Basic file")
    try:
        text = _detokenize(data)
    except IndexError as exc:
        raise ValueError("truncated MSX Basic file") from exc
    return DecoderResult(text=text, is_text=True)


def _detokenize(data: bytes) -> str:
    out = bytearray()
    size = len(data)
    offset = 1

    while offset + 4 <= size:
        offset += 2  # address of the next line
        line_number = data[offset] | data[offset + 1] << 8
        offset += 2
        out += f"{line_number} ".encode()

        while offset < size and data[offset] != 0x00:
            token = data[offset]
            if token in (0x0E, 0x1C):
                out += str(data[offset + 1] | data[offset + 2] << 8).encode()
                offset += 2
            elif token == 0x0F:
                out += str(data[offset + 1]).encode()
                offset += 1
            elif token == 0x1D:
                if offset + 5 > size:
                    raise IndexError("float constant runs past end of data")
                out += bcd_to_string(data[offset + 1 : offset + 5]).encode()
                offset += 4
            elif token == _COLON:
                following = data[offset + 1] if offset + 1 < size else None
                if following == 0x8F:
                    offset += 1  # ":REM'" is shown as just "'"
                elif following != 0xA1:  # ":ELSE" is shown as "ELSE"
                    out.append(token)
            elif token == 0xFF:
                offset += 1
                if offset < size:
                    index = data[offset] - _TOKEN_BASE
                    if not 0 <= index < len(FUNCTION_TOKENS):
                        raise ValueError(f"unknown function token {data[offset]:#04x}")
                    out += FUNCTION_TOKENS[index].encode()
            elif token >= 0x80:
                index = token - _TOKEN_BASE
                if 0 <= index < len(TOKENS):
                    out += TOKENS[index].encode()
                else:
                    out += f"-{token}-".encode()
            elif token == _QUOTE:
                out.append(token)
                offset += 1
                while True:
                    char = data[offset]
                    out.append(char)
                    if char == _QUOTE or data[offset + 1] == 0:
                        break
                    offset += 1
            elif token >= 0x20:
                out.append(token)
            elif 17 <= token <= 26:
                out += str(token - 17).encode()
            offset += 1

        if offset < size and data[offset] == 0x00:
            out += b"\n"
            offset += 1

        if offset + 2 <= size and data[offset] == 0 and data[offset + 1] == 0:
            break

    return out.decode("latin-1")


def bcd_to_string(b: bytes) -> str:
    """Render a 4-byte MSX BCD single-precision value as Basic shows it."""
    if len(b) != 4:
        return ""

    sign = "-" if b[0] & 0x80 else ""
    exponent = (b[0] & 0x7F) - 64
    mantissa = f"{b[1]:02X}{b[2]:02X}{b[3]:02X}"
    pointed = remove_trailing_zeros(mantissa[:1] + "." + mantissa[1:])

    if exponent == -64:
        return "0!"
    if -63 <= exponent < -1:
        return f"{sign}{pointed}E{exponent - 1:03d}"
    if exponent == -1:
        return sign + remove_trailing_zeros(".0" + mantissa)
    if 0 <= exponent < 15:
        return sign + remove_trailing_zeros(_shift_point_right(mantissa, exponent))
    if 15 <= exponent <= 63:
        return f"{sign}{pointed}E+{exponent - 1:02d}"
    return "XXX"


def _shift_point_right(mantissa: str, shift: int) -> str:
    if len(mantissa) <= shift:
        return mantissa + "0" * (shift - len(mantissa)) + "!"
    return mantissa[:shift] + "." + mantissa[shift:]


def remove_trailing_zeros(num_str: str) -> str:
    """Strip trailing zeros and then a dangling decimal point."""
    return num_str.rstrip("0").removesuffix(".")