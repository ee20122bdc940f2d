"""
mathbox_dis: Atari math box microcode disassembler
==================================================
Decodes the 256-word microcode of the Atari math box (the 2901 bit-slice
coprocessor of Red Baron, Battlezone and Tempest) into a register-transfer
listing.  You will want the math box schematics and a 2901 data sheet at
hand to make sense of the output.

Architecture:
    ┌──────────┐    ┌──────────┐    ┌──────────┐    ┌─────────────┐    ┌─────────┐
    │  PROMs   │───>│   rom    │───>│  fields  │───>│ instruction │───>│ listing │
    │ (7 files)│    │ (image)  │    │ (decode) │    │  + alu      │    │ (text)  │
    └──────────┘    └──────────┘    └──────────┘    └─────────────┘    └─────────┘

    - rom.py:         PROM readers, nibble interleave, dispatch table
    - fields.py:      24-bit word -> control fields
    - alu.py:         64-entry 2901 function/select expression table
    - instruction.py: destination, jump and flag columns of one word
    - listing.py:     address walk, text/JSON/CSV output
"""

__version__ = "1.0.0"

from .alu import ALU_TABLE, render_alu
from .fields import DecodedFields, decode_word
from .instruction import LOAD_ADDRESS_MARKER, RenderedInstruction, disassemble_word
from .listing import ListingRow, format_listing, format_output, iter_rows
from .rom import (MicrocodeImage, ROM_SETS, RomSet, RomSourceError, SourceOpenError,
                  SourceReadError, load_image)


def disassemble_roms(rom_dir=".", rom_set="mathbox", output: str = "txt") -> str:
    """Read a PROM set from ``rom_dir`` and return its disassembly.

    Args:
        rom_dir: Directory holding the PROM images.
        rom_set: Name of a ``ROM_SETS`` profile, or a ``RomSet``.
        output: 'txt' (default), 'json' or 'csv'.

    Raises:
        SourceOpenError, SourceReadError: a PROM image is missing or short.
    """
    image = load_image(rom_dir, rom_set)
    return format_output(image, output)
