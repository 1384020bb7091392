"""Decoders for MSX screen dumps and Dynamic Publisher stamp files."""

from __future__ import annotations

import io

from PIL import Image

from msxconverter.decoder import Config, DecoderResult

Color = tuple[int, int, int]

COLOR_3BITS = (0x00, 0x24, 0x49, 0x6D, 0x92, 0xB6, 0xDB, 0xFF)
COLOR_2BITS = (0x00, 0x55, 0xAA, 0xFF)
COLOR_5BITS = (
    0, 8, 16, 24, 33, 41, 49, 57,
    66, 74, 82, 90, 99, 107, 115, 123,
    132, 140, 148, 156, 165, 173, 181, 189,
    198, 206, 214, 222, 231, 239, 247, 255,
)
DEFAULT_PALETTE = bytes((
    0x00, 0x00, 0x00, 0x00, 0x11, 0x06, 0x33, 0x07,
    0x17, 0x01, 0x27, 0x03, 0x51, 0x01, 0x27, 0x06,
    0x71, 0x01, 0x73, 0x03, 0x61, 0x06, 0x64, 0x06,
    0x11, 0x04, 0x65, 0x02, 0x55, 0x05, 0x77, 0x07,
))

SCREEN_WIDTH = 256
SCREEN_WIDTH_7 = 512
SCREEN_HEIGHT = 212
HEIGHT_192 = 192
PALETTE_OFFSET_5 = 0x7680
PALETTE_OFFSET = 0xFA80

_HEADER_SIZE = 7
_PALETTE_SIZE = 32
_STP_PALETTE: list[Color] = [(0, 0, 0), (255, 255, 255)]


def get_palette(data: bytes, palette_offset: int) -> list[Color]:
    """Read 16 palette entries (2 bytes each, 3 bits per channel) at ``palette_offset``."""
    if palette_offset < 0 or palette_offset + _PALETTE_SIZE > len(data):
        raise ValueError("palette data out of range")
    chunk = data[palette_offset : palette_offset + _PALETTE_SIZE]
    palette = []
    for low, high in zip(chunk[0::2], chunk[1::2]):
        raw = low | high << 8
        palette.append(
            (
                COLOR_3BITS[(raw >> 4) & 0b111],
                COLOR_3BITS[(raw >> 8) & 0b111],
                COLOR_3BITS[raw & 0b111],
            )
        )
    return palette


def calculate_height(end_address: int, width: int) -> int:
    """Return 192 or 212 lines depending on how far the data reaches."""
    end_line = (end_address & 0xFFFF) // width
    return HEIGHT_192 if end_line <= HEIGHT_192 else SCREEN_HEIGHT


def _read_header(data: bytes) -> tuple[int, int, bytes]:
    if len(data) < _HEADER_SIZE:
        raise ValueError("file too short for a screen header")
    begin = int.from_bytes(data[1:3], "little")
    end = int.from_bytes(data[3:5], "little")
    return begin, end, bytes(data[_HEADER_SIZE:])


def _clamp(value: int, low: int = 0, high: int = 31) -> int:
    return max(low, min(value, high))


def _trunc_div(value: int, divisor: int) -> int:
    """Integer division rounding toward zero."""
    quotient = abs(value) // divisor
    return quotient if value >= 0 else -quotient


def _signed6(value: int) -> int:
    return value - 64 if value > 31 else value


def _select_palette(
    pixels: bytes, config: Config, begin: int, end: int, palette_offset: int
) -> list[Color]:
    if end >= palette_offset:
        return get_palette(pixels, palette_offset - begin)
    if config.extra_data is not None:
        return get_palette(config.extra_data, 0)
    return get_palette(DEFAULT_PALETTE, 0)


def _paletted(width: int, height: int, indices: bytes, palette: list[Color]) -> Image.Image:
    img = Image.frombytes("P", (width, height), bytes(indices))
    img.putpalette([channel for rgb in palette for channel in rgb])
    return img


def _encode_png(img: Image.Image, double: bool) -> DecoderResult:
    if img.width <= 0 or img.height <= 0:
        raise ValueError("invalid image size")
    if double:
        img = img.resize((img.width * 2, img.height * 2), Image.Resampling.NEAREST)
    buffer = io.BytesIO()
    img.save(buffer, format="PNG")
    return DecoderResult(buffer=buffer.getvalue(), is_text=False)


def _decode_nibbles(data: bytes, config: Config, width: int, palette_offset: int) -> DecoderResult:
    begin, end, pixels = _read_header(data)
    half = width // 2
    height = calculate_height(end, half)
    palette = _select_palette(pixels, config, begin, end, palette_offset)

    end = min(end, height * half)
    count = max(end - begin, 0)
    if len(pixels) < count:
        raise ValueError("truncated screen data")

    indices = bytearray(width * height)
    for addr, value in enumerate(pixels[:count], start=begin):
        pos = addr * 2
        indices[pos] = value >> 4
        indices[pos + 1] = value & 0x0F
    return _encode_png(_paletted(width, height, indices, palette), config.double_image_size)


def _decode_direct(data: bytes, config: Config, width: int) -> DecoderResult:
    begin, end, pixels = _read_header(data)
    height = calculate_height(end, width)

    end = min(end, height * width)
    count = max(end - begin, 0)
    if len(pixels) < count:
        raise ValueError("truncated screen data")

    rgba = bytearray(width * height * 4)
    for addr, value in enumerate(pixels[:count], start=begin):
        pos = addr * 4
        rgba[pos : pos + 4] = bytes(
            (
                COLOR_3BITS[(value >> 2) & 0b111],
                COLOR_3BITS[(value >> 5) & 0b111],
                COLOR_2BITS[value & 0b11],
                255,
            )
        )
    img = Image.frombytes("RGBA", (width, height), bytes(rgba))
    return _encode_png(img, config.double_image_size)


def _decode_yae_yjk(
    data: bytes, config: Config, width: int, palette_offset: int, is_yae: bool
) -> DecoderResult:
    begin, end, pixels = _read_header(data)
    height = calculate_height(end, width)

    palette: list[Color] | None = None
    if palette_offset > 0:
        palette = _select_palette(pixels, config, begin, end, palette_offset)

    total = width * height
    if len(pixels) < total:
        raise ValueError("truncated screen data")

    rgba = bytearray(total * 4)
    for idx in range(0, total, 4):
        group = pixels[idx : idx + 4]
        k = _signed6((group[0] & 7) + ((group[1] & 7) << 3))
        j = _signed6((group[2] & 7) + ((group[3] & 7) << 3))
        for i, value in enumerate(group):
            y = value >> 3
            if is_yae and palette is not None and y & 1:
                colour = palette[y >> 1]
            else:
                colour = (
                    COLOR_5BITS[_clamp(y + j)],
                    COLOR_5BITS[_clamp(y + k)],
                    COLOR_5BITS[_clamp(5 * y // 4 - _trunc_div(j, 2) - _trunc_div(k, 4))],
                )
            pos = (idx + i) * 4
            rgba[pos : pos + 4] = bytes((*colour, 255))

    img = Image.frombytes("RGBA", (width, height), bytes(rgba))
    return _encode_png(img, config.double_image_size)


def decode_screen5(data: bytes, config: Config) -> DecoderResult:
    """Decode a SCREEN 5 dump (256 wide, 4 bits per pixel) to PNG."""
    return _decode_nibbles(data, config, SCREEN_WIDTH, PALETTE_OFFSET_5)


def decode_screen7(data: bytes, config: Config) -> DecoderResult:
    """Decode a SCREEN 7 dump (512 wide, 4 bits per pixel) to PNG."""
    return _decode_nibbles(data, config, SCREEN_WIDTH_7, PALETTE_OFFSET)


def decode_screen8(data: bytes, config: Config) -> DecoderResult:
    """Decode a SCREEN 8 dump (256 colours, GRB 3-3-2) to PNG."""
    return _decode_direct(data, config, SCREEN_WIDTH)


def decode_screen10(data: bytes, config: Config) -> DecoderResult:
    """Decode a SCREEN 10 dump (YJK mixed with palette colours) to PNG."""
    return _decode_yae_yjk(data, config, SCREEN_WIDTH, PALETTE_OFFSET, True)


def decode_screen12(data: bytes, config: Config) -> DecoderResult:
    """Decode a SCREEN 12 dump (pure YJK) to PNG."""
    return _decode_yae_yjk(data, config, SCREEN_WIDTH, 0, False)


def decode_stp(data: bytes, config: Config) -> DecoderResult:
    """Decode a Dynamic Publisher stamp to a monochrome PNG."""
    if len(data) < 4:
        raise ValueError("invalid STP file")
    width = int.from_bytes(data[0:2], "little")
    height = int.from_bytes(data[2:4], "little")
    pixels = data[4:]

    if len(pixels) < (width * height + 3) // 4:
        raise ValueError("incomplete STP pixel data")

    indices = bytes(
        1 - ((pixels[idx >> 2] >> (6 - 2 * (idx & 3))) & 0x01)
        for idx in range(width * height)
    )

    # Pixels are meant for a 512x212 screen, so every line is shown twice
    # to keep the aspect ratio.
    rows = (indices[y * width : (y + 1) * width] for y in range(height))
    doubled = b"".join(row + row for row in rows)

    img = _paletted(width, height * 2, doubled, _STP_PALETTE)
    return _encode_png(img, config.double_image_size)