"""Reading input files and writing decoded output."""

from __future__ import annotations

import os
from pathlib import Path

# Decoded listings may hold any byte value; latin-1 keeps them one to one.
TEXT_ENCODING = "latin-1"

_SEPARATORS = {"/", os.sep} | ({os.altsep} if os.altsep else set())


def _extension(path: str) -> str:
    """Return the extension of the last path element, including the dot."""
    cut = max(path.rfind(sep) for sep in _SEPARATORS)
    base = path[cut + 1 :]
    dot = base.rfind(".")
    return base[dot:] if dot >= 0 else ""


def read_input(filename: str | os.PathLike[str]) -> bytes:
    """Return the whole content of a file."""
    return Path(filename).read_bytes()


def write_text(file_name: str | os.PathLike[str], data: str) -> None:
    """Write decoded text to a file, byte for byte."""
    Path(file_name).write_bytes(data.encode(TEXT_ENCODING))


def write_bytes(file_name: str | os.PathLike[str], data: bytes) -> None:
    """Write binary data to a file."""
    Path(file_name).write_bytes(data)


def generate_output_filename(input_file: str, extension: str) -> str:
    """Replace the extension of ``input_file`` with ``extension``."""
    ext = _extension(input_file)
    stem = input_file[: len(input_file) - len(ext)] if ext else input_file
    return stem + extension