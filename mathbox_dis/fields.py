"""
Field Decoder for Atari math box microcode words.

Each microcode word is 24 bits wide, assembled from six 4-bit PROMs.
Bit 0 is the least significant bit.

  23  20 19  16 15  12 11 10   8  7  6   4  3  2  1  0
 ┌──────┬──────┬──────┬──┬─────┬──┬─────┬──┬──┬──┬──┐
 │  a   │  b   │ sel  │H │  f  │L │  d  │S │J │M │C │
 └──────┴──────┴──────┴──┴─────┴──┴─────┴──┴──┴──┴──┘

  a, b   2901 register file A and B addresses
  sel    2901 source operand select (I0-I2), see sh/sl below
  f      2901 ALU function (I3-I5)
  d      2901 destination control (I6-I8)
  H      halt, ends the current math box command
  L      load the jump address latch from bits 16-23
  S      makes the jump conditional
  J      jump
  M      select bit 1 is multiplexed, giving two alternate sources
  C      2901 carry in

The select field has two readings.  sl is bits 12-14.  sh takes bits 12-13
and uses bit 15 in place of bit 14.  The disassembly prints both when they
differ.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Dict, Optional, Tuple

__all__ = ['DecodedFields', 'FIELD_LAYOUT', 'WORD_MASK', 'decode_word', 'extract_fields']


WORD_BITS = 24
WORD_MASK = (1 << WORD_BITS) - 1

# Format: name -> (shift, width)
FIELD_LAYOUT: Dict[str, Tuple[int, int]] = {
    'a':  (20, 4),
    'b':  (16, 4),
    'sl': (12, 3),
    'h':  (11, 1),
    'f':  ( 8, 3),
    'l':  ( 7, 1),
    'd':  ( 4, 3),
    's':  ( 3, 1),
    'j':  ( 2, 1),
    'm':  ( 1, 1),
    'c':  ( 0, 1),
}

SH_SHIFT = 12
SH_MASK = 0b1011
JUMP_SHIFT = 16
JUMP_MASK = 0xff


def extract_fields(layout: Dict[str, Tuple[int, int]], word: int) -> Dict[str, int]:
    """Slice ``word`` into named unsigned fields per ``layout``."""
    return {name: (word >> shift) & ((1 << width) - 1)
            for name, (shift, width) in layout.items()}


@dataclass(frozen=True)
class DecodedFields:
    """Control fields of one microcode word."""
    a: int
    b: int
    f: int
    sh: int
    sl: int
    d: int
    h: bool
    s: bool
    l: bool
    j: bool
    m: bool
    c: bool
    jump_address: Optional[int] = None

    @property
    def eos(self) -> bool:
        """End of sequence: the listing separates the next word with a blank line."""
        return self.h or (self.j and not self.s)

    @property
    def show_y(self) -> bool:
        """The Y bus is sampled (halt result or sign test), so name it as a destination."""
        return self.h or (self.j and self.s)

    @property
    def carry(self) -> int:
        return int(self.c)


def _high_select(word: int) -> int:
    sh = (word >> SH_SHIFT) & SH_MASK
    if sh > 7:
        sh -= 4
    return sh


def decode_word(word: int) -> DecodedFields:
    """Decode a 24-bit microcode word.  Bits above 23 are ignored."""
    word &= WORD_MASK
    raw = extract_fields(FIELD_LAYOUT, word)
    l = bool(raw['l'])
    return DecodedFields(
        a=raw['a'],
        b=raw['b'],
        f=raw['f'],
        sh=_high_select(word),
        sl=raw['sl'],
        d=raw['d'],
        h=bool(raw['h']),
        s=bool(raw['s']),
        l=l,
        j=bool(raw['j']),
        m=bool(raw['m']),
        c=bool(raw['c']),
        jump_address=(word >> JUMP_SHIFT) & JUMP_MASK if l else None,
    )
