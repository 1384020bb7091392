import io

import pytest
from PIL import Image

from msxconverter.decoder import Config
from msxconverter.images import (
    DEFAULT_PALETTE,
    HEIGHT_192,
    PALETTE_OFFSET_5,
    SCREEN_HEIGHT,
    SCREEN_WIDTH,
    SCREEN_WIDTH_7,
    calculate_height,
    decode_screen5,
    decode_screen7,
    decode_screen8,
    decode_screen10,
    decode_screen12,
    decode_stp,
    get_palette,
)

PNG_SIGNATURE = b"\x89PNG\r\n\x1a\n"
RED_PALETTE = b"\x70\x00" + bytes(30)


def _header(begin, end):
    return b"\xFE" + begin.to_bytes(2, "little") + end.to_bytes(2, "little") + b"\x00\x00"


def _open(result):
    assert result.is_text is False
    assert result.buffer.startswith(PNG_SIGNATURE)
    return Image.open(io.BytesIO(result.buffer))


# --- helpers ---------------------------------------------------------------

@pytest.mark.parametrize(
    "end, width, expected",
    [
        (0, SCREEN_WIDTH, HEIGHT_192),
        (HEIGHT_192 * SCREEN_WIDTH, SCREEN_WIDTH, HEIGHT_192),
        ((HEIGHT_192 + 1) * SCREEN_WIDTH, SCREEN_WIDTH, SCREEN_HEIGHT),
        (0xFFFF, 128, SCREEN_HEIGHT),
    ],
)
def test_calculate_height(end, width, expected):
    assert calculate_height(end, width) == expected


def test_default_palette_extremes():
    palette = get_palette(DEFAULT_PALETTE, 0)
    assert len(palette) == 16
    assert palette[0] == (0x00, 0x00, 0x00)
    assert palette[15] == (0xFF, 0xFF, 0xFF)


def test_palette_offset_is_respected():
    data = bytes(10) + DEFAULT_PALETTE
    assert get_palette(data, 10) == get_palette(DEFAULT_PALETTE, 0)


def test_palette_out_of_range():
    with pytest.raises(ValueError):
        get_palette(bytes(31), 0)
    with pytest.raises(ValueError):
        get_palette(DEFAULT_PALETTE, -1)


# --- screen 5 / 7 ------------------------------------------------------------

def test_screen5_nibbles_and_default_palette():
    data = _header(0, 2) + b"\x12\x34"
    img = _open(decode_screen5(data, Config()))
    assert img.size == (SCREEN_WIDTH, HEIGHT_192)
    assert img.mode == "P"
    assert [img.getpixel((x, 0)) for x in range(5)] == [1, 2, 3, 4, 0]
    rgb = img.convert("RGB")
    default = get_palette(DEFAULT_PALETTE, 0)
    assert rgb.getpixel((0, 0)) == default[1]
    assert rgb.getpixel((3, 0)) == default[4]


def test_screen5_extra_palette():
    data = _header(0, 1) + b"\x00"
    img = _open(decode_screen5(data, Config(extra_data=RED_PALETTE)))
    assert img.convert("RGB").getpixel((0, 0)) == get_palette(RED_PALETTE, 0)[0]


def test_screen5_palette_from_file():
    pixels = bytearray(PALETTE_OFFSET_5 + 32)
    pixels[PALETTE_OFFSET_5 : PALETTE_OFFSET_5 + 2] = b"\x70\x00"
    data = _header(0, PALETTE_OFFSET_5 + 32) + bytes(pixels)
    img = _open(decode_screen5(data, Config(extra_data=DEFAULT_PALETTE)))
    assert img.size == (SCREEN_WIDTH, SCREEN_HEIGHT)
    assert img.convert("RGB").getpixel((10, 10)) == get_palette(RED_PALETTE, 0)[0]


def test_screen5_double_size():
    data = _header(0, 4) + b"\x12\x34\x56\x78"
    single = _open(decode_screen5(data, Config())).convert("RGB")
    double = _open(decode_screen5(data, Config(double_image_size=True))).convert("RGB")
    assert double.size == (SCREEN_WIDTH * 2, HEIGHT_192 * 2)
    for x in range(9):
        for dx in (0, 1):
            for dy in (0, 1):
                assert double.getpixel((2 * x + dx, dy)) == single.getpixel((x, 0))


def test_screen5_truncated():
    with pytest.raises(ValueError):
        decode_screen5(_header(0, 10) + b"\x12", Config())


def test_header_too_short():
    with pytest.raises(ValueError):
        decode_screen5(b"\xFE\x00\x00", Config())


def test_screen7_width_and_nibbles():
    data = _header(0, 1) + b"\x5A"
    img = _open(decode_screen7(data, Config()))
    assert img.size == (SCREEN_WIDTH_7, HEIGHT_192)
    assert img.getpixel((0, 0)) == 0x5
    assert img.getpixel((1, 0)) == 0xA


# --- screen 8 ----------------------------------------------------------------

def test_screen8_colours_and_unset_pixels():
    data = _header(0, 2) + b"\xFF\x00"
    img = _open(decode_screen8(data, Config()))
    assert img.size == (SCREEN_WIDTH, HEIGHT_192)
    assert img.mode == "RGBA"
    assert img.getpixel((0, 0)) == (0xFF, 0xFF, 0xFF, 255)
    assert img.getpixel((1, 0))[3] == 255
    assert img.getpixel((1, 0))[:3] == get_palette(DEFAULT_PALETTE, 0)[0]
    assert img.getpixel((2, 0))[3] == 0


def test_screen8_begin_offset_places_pixels():
    data = _header(SCREEN_WIDTH + 1, SCREEN_WIDTH + 2) + b"\xFF"
    img = _open(decode_screen8(data, Config()))
    assert img.getpixel((1, 1))[3] == 255
    assert img.getpixel((0, 1))[3] == 0
    assert img.getpixel((0, 0))[3] == 0


# --- screen 10 / 12 -----------------------------------------------------------

def test_screen12_all_zero_is_black():
    data = _header(0, 0) + bytes(SCREEN_WIDTH * HEIGHT_192)
    img = _open(decode_screen12(data, Config()))
    assert img.size == (SCREEN_WIDTH, HEIGHT_192)
    colors = img.getcolors()
    assert len(colors) == 1
    assert colors[0][1][:3] == get_palette(DEFAULT_PALETTE, 0)[0]


def test_screen12_uniform_input_gives_uniform_image():
    data = _header(0, 0) + bytes([0x80]) * (SCREEN_WIDTH * HEIGHT_192)
    img = _open(decode_screen12(data, Config()))
    assert len(img.getcolors()) == 1


def test_screen12_truncated():
    with pytest.raises(ValueError):
        decode_screen12(_header(0, 0) + bytes(100), Config())


def test_screen10_odd_y_uses_extra_palette():
    data = _header(0, 0) + bytes([0x08]) * (SCREEN_WIDTH * HEIGHT_192)
    img = _open(decode_screen10(data, Config(extra_data=RED_PALETTE)))
    expected = get_palette(RED_PALETTE, 0)[0] + (255,)
    assert img.getpixel((0, 0)) == expected
    assert img.getpixel((SCREEN_WIDTH - 1, HEIGHT_192 - 1)) == expected


def test_screen10_odd_y_uses_default_palette():
    data = _header(0, 0) + bytes([0x18]) * (SCREEN_WIDTH * HEIGHT_192)
    img = _open(decode_screen10(data, Config()))
    assert img.getpixel((5, 5)) == get_palette(DEFAULT_PALETTE, 0)[1] + (255,)


def test_screen10_double_size():
    data = _header(0, 0) + bytes(SCREEN_WIDTH * HEIGHT_192)
    img = _open(decode_screen10(data, Config(double_image_size=True)))
    assert img.size == (SCREEN_WIDTH * 2, HEIGHT_192 * 2)


# --- STP ---------------------------------------------------------------------

def _stp(width, height, pixels):
    return width.to_bytes(2, "little") + height.to_bytes(2, "little") + pixels


def test_stp_pixels_and_line_doubling():
    img = _open(decode_stp(_stp(4, 1, bytes([0b01000100])), Config()))
    assert img.size == (4, 2)
    rgb = img.convert("RGB")
    row0 = [rgb.getpixel((x, 0)) for x in range(4)]
    row1 = [rgb.getpixel((x, 1)) for x in range(4)]
    assert row0 == row1
    assert row0[0] == row0[2]
    assert row0[1] == row0[3]
    assert row0[0] != row0[1]


def test_stp_zero_bits_are_white_and_set_bits_black():
    white = _open(decode_stp(_stp(4, 1, b"\x00"), Config())).convert("RGB")
    black = _open(decode_stp(_stp(4, 1, b"\x55"), Config())).convert("RGB")
    assert white.getpixel((0, 0)) == (255, 255, 255)
    assert black.getpixel((3, 1)) == get_palette(DEFAULT_PALETTE, 0)[0]


def test_stp_double_size():
    img = _open(decode_stp(_stp(4, 2, b"\x00\x55"), Config(double_image_size=True)))
    assert img.size == (8, 8)
    rgb = img.convert("RGB")
    assert rgb.getpixel((0, 0)) == rgb.getpixel((7, 3))
    assert rgb.getpixel((0, 4)) == rgb.getpixel((7, 7))
    assert rgb.getpixel((0, 0)) != rgb.getpixel((0, 4))


@pytest.mark.parametrize(
    "data",
    [
        b"",
        b"\x04\x00\x01",
        _stp(8, 1, b"\x00"),
        _stp(0, 0, b""),
    ],
)
def test_stp_invalid(data):
    with pytest.raises(ValueError):
        decode_stp(data, Config())