# msxconverter

A command-line tool that turns MSX files into formats a modern computer can
open:

- Tokenized MSX-BASIC programs become plain-text listings.
- Tokenized WBASS2 assembler sources become plain-text assembly.
- BLOAD screen dumps for SCREEN 5, 7, 8, 10 and 12 become PNG images.
- Dynamic Publisher stamps (`STP`) become monochrome PNG images.

## Installation

```
pip install .
```

## Usage

```
msxconverter [options] inputfile[,palettefile] [outputfile]
```

Options:

- `-t TYPE`: force the file type, one of `BAS`, `WB2`, `SC5`, `SC7`, `SC8`,
  `S10`, `S12`, `STP`. Any other value prints the usage and an error.
  Without it, the type is detected from the first byte of the file and its
  extension (see below).
- `-format FORMAT`: accepted and passed to the decoders (default `png`).
  Images are always written as PNG.
- `-double`: double the width and height of the produced image.
- `-verbose`: accepted and passed to the decoders; it does not change the
  output.

Each option may also be written with two dashes (`--double`).

If an output file is given, the result is written there. Without one, text
results are printed to standard output and images are written next to the
input file, with its extension replaced by `.png`.

For SCREEN 5, 7 and 10, the palette is read from the dump itself when the dump
reaches the palette area in video memory. Otherwise a palette file given after
a comma is used, and failing that the default MSX2 palette. SCREEN 8 and 12
carry no palette.

Errors while reading, decoding or writing are reported on standard error and
the command exits with status 1.

### Examples

Print a BASIC listing:

```
msxconverter GAME.BAS
```

Convert a SCREEN 5 picture with its palette file, at double size:

```
msxconverter -double TITLE.SC5,TITLE.PL5 title.png
```

Convert a file whose extension does not reveal its type:

```
msxconverter -t SC8 PICTURE.BIN picture.png
```

## Type detection

Files beginning with `0xFF` are MSX-BASIC, files beginning with `0xFD` are
WBASS2. Files beginning with `0xFE` (BLOAD header) are recognised by their
extension, case-insensitively:

| Type | Extensions          |
|------|---------------------|
| SC5  | GE5, SC5, SR5       |
| SC7  | SC7, SR7            |
| SC8  | SC8, PIC, SR8       |
| S10  | S10, SCA            |
| S12  | S12, SCC, SRS       |

Any other file is typed by its upper-cased extension; `STP` stamps are found
this way. A type that has no decoder ends in an "unknown file format" error.

## Use from Python

```python
from msxconverter.decoder import Config
from msxconverter.cli import decode_data

with open("TITLE.SC5", "rb") as f:
    result = decode_data(f.read(), "SC5", Config(double_image_size=True))

with open("title.png", "wb") as f:
    f.write(result.buffer)
```

`decode_data` returns a `DecoderResult`: `is_text` tells whether `text` holds
a listing or `buffer` holds PNG bytes. Invalid or truncated input raises
`ValueError`. The individual decoders are `msxconverter.msxbasic.decode_msx_basic`,
`msxconverter.wbass2.decode_wbass2` and, in `msxconverter.images`,
`decode_screen5`, `decode_screen7`, `decode_screen8`, `decode_screen10`,
`decode_screen12` and `decode_stp`. `msxconverter.detect.detect_format`
applies the detection rules above.

## Limitations

- Only PNG output is produced; other values of `-format` are ignored.
- Conversion goes one way only: nothing is converted back into MSX formats.

## Running the tests

```
pip install .[test]
pytest
```