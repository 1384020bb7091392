from PIL import Image
import pytest

from msxconverter.cli import decode_data, main
from msxconverter.decoder import Config
from msxconverter.images import DEFAULT_PALETTE, get_palette
from msxconverter.msxbasic import decode_msx_basic

BASIC_PROGRAM = bytes([0xFF, 0x00, 0x80, 0x0A, 0x00, 0x91, 0x00, 0x00, 0x00])
WBASS2_PROGRAM = bytes([0xFD, 0x06, 0x80, 0x80, 0x02, 0xE0, 0x01, 0x00, 0xFF, 0xFF])
EMPTY_SCREEN = bytes([0xFE, 0x00, 0x00, 0x00, 0x00, 0x00, 0x00])


def test_no_arguments_prints_usage(capsys):
    assert main([]) == 1
    assert "Usage: msxconverter" in capsys.readouterr().out


def test_unsupported_type(tmp_path, capsys):
    source = tmp_path / "prog.bas"
    source.write_bytes(BASIC_PROGRAM)
    assert main(["-t", "XYZ", str(source)]) == 1
    assert "unsupported type passed: XYZ" in capsys.readouterr().out


def test_basic_to_stdout(tmp_path, capsys):
    source = tmp_path / "prog.bas"
    source.write_bytes(BASIC_PROGRAM)
    assert main([str(source)]) == 0
    assert capsys.readouterr().out == decode_msx_basic(BASIC_PROGRAM).text


def test_wbass2_to_output_file(tmp_path):
    source = tmp_path / "prog.asm"
    target = tmp_path / "prog.txt"
    source.write_bytes(WBASS2_PROGRAM)
    assert main([str(source), str(target)]) == 0
    assert target.read_text(encoding="latin-1") == "        LD    A,1\n"


def test_type_flag_overrides_detection(tmp_path):
    source = tmp_path / "prog.dat"
    target = tmp_path / "out.txt"
    source.write_bytes(WBASS2_PROGRAM)
    assert main(["-t", "WB2", str(source), str(target)]) == 0
    assert target.read_text(encoding="latin-1") == "        LD    A,1\n"


def test_image_written_next_to_input(tmp_path):
    source = tmp_path / "pic.sc8"
    source.write_bytes(EMPTY_SCREEN)
    assert main([str(source)]) == 0
    with Image.open(tmp_path / "pic.png") as img:
        assert img.size == (256, 192)


def test_double_flag(tmp_path):
    source = tmp_path / "pic.sc8"
    source.write_bytes(EMPTY_SCREEN)
    assert main(["-double", str(source)]) == 0
    with Image.open(tmp_path / "pic.png") as img:
        assert img.size == (2 * 256, 2 * 192)


def test_extra_palette_file(tmp_path):
    source = tmp_path / "pic.sc5"
    palette_file = tmp_path / "pic.pal"
    target = tmp_path / "out.png"
    palette_data = bytes(reversed(DEFAULT_PALETTE))
    source.write_bytes(EMPTY_SCREEN)
    palette_file.write_bytes(palette_data)
    assert main([f"{source},{palette_file}", str(target)]) == 0
    expected = [channel for rgb in get_palette(palette_data, 0) for channel in rgb]
    with Image.open(target) as img:
        assert img.getpalette()[: len(expected)] == expected


def test_missing_input(tmp_path, capsys):
    assert main([str(tmp_path / "missing.bas")]) == 1
    assert "Error reading input" in capsys.readouterr().err


def test_undecodable_input(tmp_path, capsys):
    source = tmp_path / "data.xyz"
    source.write_bytes(b"\x01\x02")
    assert main([str(source)]) == 1
    assert "unknown file format: XYZ" in capsys.readouterr().err


def test_decode_data_basic():
    assert decode_data(BASIC_PROGRAM, "BAS", Config()) == decode_msx_basic(BASIC_PROGRAM)


def test_decode_data_unknown_type():
    with pytest.raises(ValueError, match="unknown file format"):
        decode_data(b"\x00", "unknown", Config())