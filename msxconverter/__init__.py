"""Convert MSX screen dumps, stamps, BASIC programs and WBASS2 sources to PNG and text."""

__version__ = "0.1.0"