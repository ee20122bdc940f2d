"""
Instruction Assembler: one microcode word -> one line of disassembly.

A rendered instruction has three columns:

  flags     "HSL", each letter or a blank
  jump      " (->xxx) " conditional jump, "  ->xxx  " unconditional,
            blank when J is clear
  function  destination prefix + ALU expression(s), e.g.
            "R5 = (R3 + q + 1)"

The function column lists the alternate sources the word can select:
the sh/sl readings of the select field, comma separated, and when M is
set the second half after " ? " uses the source with select bit 1 flipped.
"""

from __future__ import annotations
from dataclasses import dataclass
from types import MappingProxyType
from typing import Mapping, Tuple

from .alu import render_alu
from .fields import DecodedFields, WORD_MASK, decode_word

__all__ = ['DESTINATIONS', 'LOAD_ADDRESS_MARKER', 'RenderedInstruction',
           'disassemble_word', 'render_instruction']


# Address-only cycle: only the jump latch is loaded, the ALU is idle.
LOAD_ADDRESS_MASK = 0xfffb
LOAD_ADDRESS_PATTERN = 0x0090
LOAD_ADDRESS_MARKER = "--load addr--"

UNKNOWN_TARGET = "???"
BLANK_JUMP = " " * 9


# ──────────────────────────────────────────────
# Destination prefixes
# ──────────────────────────────────────────────
# Key: (show_y, d).  {a} and {b} take a single hex digit.

DESTINATIONS: Mapping[Tuple[bool, int], str] = MappingProxyType({
    (False, 0): "q = (",
    (False, 1): "y = (",
    (False, 2): "R{b:x} = (",
    (False, 3): "R{b:x} = (",
    (False, 4): "q = 1/2 * q, R{b:x} = 1/2 * (",
    (False, 5): "R{b:x} = 1/2 * (",
    (False, 6): "q = 2 * q, R{b:x} = 2 * (",
    (False, 7): "R{b:x} = 2 * (",

    (True, 0): "y = q = (",
    (True, 1): "y = (",
    (True, 2): "y = R{a:x}, R{b:x} = (",
    (True, 3): "y = R{b:x} = (",
    (True, 4): "q = 1/2 * q, R{b:x} = 1/2 * (y = ",
    (True, 5): "R{b:x} = 1/2 * (y = ",
    (True, 6): "q = 2 * q, R{b:x} = 2 * (y = ",
    (True, 7): "R{b:x} = 2 * (y = ",
})


@dataclass(frozen=True)
class RenderedInstruction:
    """The printable columns of one microcode word."""
    flags: str
    jump: str
    function: str
    eos: bool

    def __str__(self):
        return f"{self.flags}{self.jump}{self.function}"


def is_load_address(word: int) -> bool:
    return (word & LOAD_ADDRESS_MASK) == LOAD_ADDRESS_PATTERN


def _flag_column(fields: DecodedFields) -> str:
    return ("H" if fields.h else " ") + \
           ("S" if fields.s else " ") + \
           ("L" if fields.l else " ")


def _jump_column(fields: DecodedFields) -> str:
    if not fields.j:
        return BLANK_JUMP
    # Without L the target is whatever an earlier word latched
    if fields.jump_address is None:
        target = UNKNOWN_TARGET
    else:
        target = f"{fields.jump_address:03x}"
    if fields.s:
        return f" (->{target}) "
    return f"  ->{target}  "


def _function_column(fields: DecodedFields) -> str:
    f, a, b, c = fields.f, fields.a, fields.b, fields.carry
    sh, sl = fields.sh, fields.sl

    parts = [DESTINATIONS[(fields.show_y, fields.d)].format(a=a, b=b)]
    parts.append(render_alu(f, sh, a, b, c))
    if sh != sl:
        parts.append(", " + render_alu(f, sl, a, b, c))

    if fields.m:
        parts.append(" ? " + render_alu(f, sh ^ 2, a, b, c))
        if sh != sl:
            parts.append(", " + render_alu(f, sl ^ 2, a, b, c))

    parts.append(")")
    return "".join(parts)


def render_instruction(word: int, fields: DecodedFields) -> RenderedInstruction:
    """Assemble the columns of ``word`` from its already decoded ``fields``."""
    if is_load_address(word):
        function = LOAD_ADDRESS_MARKER
    else:
        function = _function_column(fields)
    return RenderedInstruction(
        flags=_flag_column(fields),
        jump=_jump_column(fields),
        function=function,
        eos=fields.eos,
    )


def disassemble_word(word: int) -> RenderedInstruction:
    """Decode and render one 24-bit microcode word."""
    word &= WORD_MASK
    return render_instruction(word, decode_word(word))
