"""Shared configuration and result types for the decoders."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Config:
    """Options that influence how a file is decoded."""

    output_format: str = "png"
    double_image_size: bool = False
    verbose_output: bool = False
    extra_data: bytes | None = None


@dataclass(frozen=True)
class DecoderResult:
    """Outcome of a decoder: either text or an encoded binary buffer."""

    text: str = ""
    buffer: bytes = b""
    is_text: bool = False