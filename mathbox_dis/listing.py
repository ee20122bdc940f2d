"""
Listing Formatter: walks the microcode image and writes the disassembly.

Text listing layout:

                            jump
  entry  addr   hex    hsl  addr   function
  -----  ----  ------  ---  -----  ---------------------------------

One row per address, ascending.  A blank line follows each word that ends a
command sequence.  The same rows can be exported as JSON or CSV records.
"""

from __future__ import annotations
import csv
import io
import json
import logging
from dataclasses import dataclass
from typing import Any, Dict, Iterator, List, Optional

from .instruction import RenderedInstruction, disassemble_word
from .rom import MicrocodeImage

__all__ = ['LISTING_HEADER', 'ListingRow', 'OUTPUT_FORMATS', 'format_listing',
           'format_output', 'iter_rows', 'rows_to_records']

log = logging.getLogger(__name__)


LISTING_HEADER = (
    "                          jump\n"
    "entry  addr   hex    hsl  addr   function\n"
    "-----  ----  ------  ---  -----  ---------------------------------\n"
)

OUTPUT_FORMATS = ('txt', 'json', 'csv')

CSV_FIELDS = ['address', 'entry', 'word', 'flags', 'jump', 'function', 'eos']


@dataclass(frozen=True)
class ListingRow:
    address: int
    word: int
    entry: Optional[int]
    instruction: RenderedInstruction

    def __str__(self):
        label = f"{self.entry:03x}->  " if self.entry is not None else " " * 7
        return f"{label}{self.address:03x}:  {self.word:06x}  {self.instruction}".rstrip()


def iter_rows(image: MicrocodeImage) -> Iterator[ListingRow]:
    """Yield one disassembled row per microcode address, in address order."""
    for addr, word in enumerate(image.words):
        yield ListingRow(addr, word, image.entry_at(addr), disassemble_word(word))


def format_listing(image: MicrocodeImage) -> str:
    """Return the full text listing of ``image``."""
    lines = [LISTING_HEADER]
    sequences = 0
    for row in iter_rows(image):
        lines.append(str(row) + "\n")
        if row.instruction.eos:
            lines.append("\n")
            sequences += 1
    log.debug("Listing has %d command sequences", sequences)
    return "".join(lines)


def rows_to_records(rows) -> List[Dict[str, Any]]:
    """Flatten rows to plain dicts for JSON/CSV export."""
    records = []
    for row in rows:
        ins = row.instruction
        records.append({
            'address': f"{row.address:03x}",
            'entry': f"{row.entry:03x}" if row.entry is not None else "",
            'word': f"{row.word:06x}",
            'flags': ins.flags.replace(" ", ""),
            'jump': ins.jump.strip(),
            'function': ins.function,
            'eos': ins.eos,
        })
    return records


def format_output(image: MicrocodeImage, fmt: str = 'txt') -> str:
    """Render ``image`` as a text listing, JSON or CSV."""
    if fmt == 'txt':
        return format_listing(image)

    records = rows_to_records(iter_rows(image))
    if fmt == 'json':
        return json.dumps(records, indent=2) + "\n"
    if fmt == 'csv':
        buf = io.StringIO()
        writer = csv.DictWriter(buf, fieldnames=CSV_FIELDS, lineterminator="\n")
        writer.writeheader()
        writer.writerows(records)
        return buf.getvalue()
    raise ValueError(f"unknown output format: {fmt}")
