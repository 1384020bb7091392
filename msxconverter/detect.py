"""Detection of the input file type."""

from __future__ import annotations

import os

_SEPARATORS = {"/", os.sep} | ({os.altsep} if os.altsep else set())

_EXTENSION_TYPES = {
    "GE5": "SC5",
    "SC5": "SC5",
    "SR5": "SC5",
    "SC7": "SC7",
    "SR7": "SC7",
    "SC8": "SC8",
    "PIC": "SC8",
    "SR8": "SC8",
    "S10": "S10",
    "SCA": "S10",
    "S12": "S12",
    "SCC": "S12",
    "SRS": "S12",
}


def _upper_extension(path: str) -> str:
    cut = max(path.rfind(sep) for sep in _SEPARATORS)
    base = path[cut + 1 :]
    dot = base.rfind(".")
    ext = base[dot:] if dot >= 0 else ""
    return ext.lstrip(".").upper()


def detect_format(data: bytes, input_file_name: str, file_type: str | None) -> str:
    """Work out the file type from an explicit type, the data and the file name."""
    if file_type:
        return file_type
    if not data:
        return "unknown"

    first = data[0]
    if first == 0xFF:
        return "BAS"
    if first == 0xFD:
        return "WB2"
    if first == 0xFE:
        if len(data) >= 7:
            return _EXTENSION_TYPES.get(_upper_extension(input_file_name), "unknown")
        return "unknown"
    return _upper_extension(input_file_name)