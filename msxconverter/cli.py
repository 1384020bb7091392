"""Command line entry point: convert MSX files to text or PNG."""

from __future__ import annotations

import argparse
import sys
from collections.abc import Callable, Sequence

from msxconverter import images
from msxconverter.decoder import Config, DecoderResult
from msxconverter.detect import detect_format
from msxconverter.fileutils import (
    generate_output_filename,
    read_input,
    write_bytes,
    write_text,
)
from msxconverter.msxbasic import decode_msx_basic
from msxconverter.wbass2 import decode_wbass2

VALID_TYPES = frozenset({"SC5", "SC7", "SC8", "S10", "S12", "STP", "WB2", "BAS"})

_USAGE = "Usage: msxconverter [options] inputfile(s) [outputfile]"

_IMAGE_DECODERS: dict[str, Callable[[bytes, Config], DecoderResult]] = {
    "SC5": images.decode_screen5,
    "SC7": images.decode_screen7,
    "SC8": images.decode_screen8,
    "S10": images.decode_screen10,
    "S12": images.decode_screen12,
    "STP": images.decode_stp,
}


def decode_data(data: bytes, file_type: str, config: Config) -> DecoderResult:
    """Run the decoder that belongs to ``file_type``."""
    if file_type == "BAS":
        return decode_msx_basic(data)
    if file_type == "WB2":
        return decode_wbass2(data)
    decoder = _IMAGE_DECODERS.get(file_type)
    if decoder is None:
        raise ValueError(f"unknown file format: {file_type}")
    return decoder(data, config)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="msxconverter", allow_abbrev=False, add_help=False
    )
    parser.add_argument(
        "-t", "--t", dest="file_type", default="",
        help="Specify the file type (e.g., BAS, WB2, SC5, SC7, SC8, S10, S12, STP)",
    )
    parser.add_argument(
        "-format", "--format", dest="output_format", default="png",
        help="Specify the output format (e.g., png, jpg)",
    )
    parser.add_argument(
        "-double", "--double", dest="double", action="store_true",
        help="Double the image size",
    )
    parser.add_argument(
        "-verbose", "--verbose", dest="verbose", action="store_true",
        help="Verbose output",
    )
    parser.add_argument("files", nargs="*", help="inputfile(s) [outputfile]")
    return parser


def _write_output(output_file: str, decoded: DecoderResult, input_file: str) -> None:
    if output_file:
        if decoded.is_text:
            write_text(output_file, decoded.text)
        else:
            write_bytes(output_file, decoded.buffer)
        return
    if decoded.is_text:
        sys.stdout.write(decoded.text)
    else:
        write_bytes(generate_output_filename(input_file, ".png"), decoded.buffer)


def _fail(message: str) -> int:
    print(message, file=sys.stderr)
    return 1


def main(argv: Sequence[str] | None = None) -> int:
    """Parse the command line, convert the input and write the result."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    bad_type = bool(args.file_type) and args.file_type not in VALID_TYPES
    if not args.files or bad_type:
        print(_USAGE)
        parser.print_help(sys.stderr)
        if bad_type:
            print()
            print("Error: unsupported type passed:", args.file_type)
        return 1

    inputs = args.files[0].split(",")
    output_file = args.files[1] if len(args.files) > 1 else ""

    try:
        data = read_input(inputs[0])
    except OSError as exc:
        return _fail(f"Error reading input: {exc}")

    palette = None
    if len(inputs) > 1:
        try:
            palette = read_input(inputs[1])
        except OSError as exc:
            return _fail(f"Error reading palette input: {exc}")

    config = Config(
        output_format=args.output_format,
        double_image_size=args.double,
        verbose_output=args.verbose,
        extra_data=palette,
    )

    file_type = detect_format(data, inputs[0], args.file_type)
    if not file_type:
        return _fail("Error: could not detect format of input file")

    try:
        decoded = decode_data(data, file_type, config)
    except ValueError as exc:
        return _fail(f"Error decoding data: {exc}")

    try:
        _write_output(output_file, decoded, inputs[0])
    except OSError as exc:
        return _fail(f"Error writing output: {exc}")
    return 0


if __name__ == "__main__":
    sys.exit(main())