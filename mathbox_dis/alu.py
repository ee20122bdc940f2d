"""
ALU Expression Renderer for the math box 2901.

The 2901 function field (I3-I5) and source select field (I0-I2) together
pick one of 64 operations.  Each is rendered as a symbolic expression over:

  Ra, Rb   register file entries addressed by the a and b fields
  q        the 2901 Q register
  d        the external data input

Additive functions add a carry suffix: the R + S family shows "+ 1" when
carry in is set, the subtract families show "- 1" when carry in is clear.

Reference: AMD Am2901 data sheet, tables 1-3 (source operand, ALU function,
and the source/function combination table).
"""

from __future__ import annotations
from dataclasses import dataclass
from types import MappingProxyType
from typing import Dict, Mapping, Tuple

__all__ = ['ALU_TABLE', 'AluTemplate', 'render_alu', 'carry_suffix']


# ──────────────────────────────────────────────
# Carry suffix families
# ──────────────────────────────────────────────

SUFFIX_NONE = 'none'
SUFFIX_PLUS = 'plus'     # R + S, shows "+ 1" when carry in is set
SUFFIX_MINUS = 'minus'   # S - R and R - S, shows "- 1" when carry in is clear

_SUFFIXES: Dict[str, Tuple[str, str]] = {
    SUFFIX_NONE:  ("",     ""),
    SUFFIX_PLUS:  ("",     " + 1"),
    SUFFIX_MINUS: (" - 1", ""),
}


def carry_suffix(family: str, c: int) -> str:
    """Return the carry suffix of ``family`` for carry in ``c`` (0 or 1)."""
    return _SUFFIXES[family][c & 1]


@dataclass(frozen=True)
class AluTemplate:
    """One (function, select) entry: expression text plus its carry family."""
    text: str
    suffix: str = SUFFIX_NONE

    def render(self, a: int, b: int, c: int) -> str:
        return self.text.format(a=a, b=b) + carry_suffix(self.suffix, c)


# ──────────────────────────────────────────────
# Function/select table
# ──────────────────────────────────────────────
# Key: (f << 3) | s.  Register placeholders take a single hex digit.

_entries: Dict[int, AluTemplate] = {}


def _fn(f: int, suffix: str, *texts: str):
    """Register the eight select entries of ALU function ``f``."""
    if len(texts) != 8:
        raise ValueError(f"function {f}: expected 8 select entries, got {len(texts)}")
    for s, text in enumerate(texts):
        _entries[(f << 3) | s] = AluTemplate(text, suffix)


# R + S
_fn(0, SUFFIX_PLUS,
    "R{a:x} + q", "R{a:x} + R{b:x}", "q", "R{b:x}",
    "R{a:x}", "d + R{a:x}", "d + q", "d")

# S - R
_fn(1, SUFFIX_MINUS,
    "q - R{a:x}", "R{b:x} - R{a:x}", "q", "R{b:x}",
    "R{a:x}", "R{a:x} - d", "q - d", "-d")

# R - S
_fn(2, SUFFIX_MINUS,
    "R{a:x} - q", "R{a:x} - R{b:x}", "-q", "-R{b:x}",
    "-R{a:x}", "d - R{a:x}", "d - q", "d")

# R OR S
_fn(3, SUFFIX_NONE,
    "R{a:x} | q", "R{a:x} | R{b:x}", "q", "R{b:x}",
    "R{a:x}", "d | R{a:x}", "d | q", "d")

# R AND S
_fn(4, SUFFIX_NONE,
    "R{a:x} & q", "R{a:x} & R{b:x}", "0", "0",
    "0", "d & R{a:x}", "d & q", "0")

# /R AND S
_fn(5, SUFFIX_NONE,
    "!R{a:x} & q", "!R{a:x} & R{b:x}", "q", "R{b:x}",
    "R{a:x}", "!d & R{a:x}", "!d & q", "0")

# R XOR S
_fn(6, SUFFIX_NONE,
    "R{a:x} ^ q", "R{a:x} ^ R{b:x}", "q", "R{b:x}",
    "R{a:x}", "d ^ R{a:x}", "d ^ q", "d")

# R XNOR S
# Selects 5 and 6 render with '&' rather than '^'.  Kept as found in the
# reference listing until checked against a board.
_fn(7, SUFFIX_NONE,
    "!R{a:x} ^ q", "!R{a:x} ^ R{b:x}", "!q", "!R{b:x}",
    "!R{a:x}", "!d & R{a:x}", "!d & q", "!d")

ALU_TABLE: Mapping[int, AluTemplate] = MappingProxyType(_entries)


def render_alu(f: int, s: int, a: int, b: int, c: int) -> str:
    """Render the ALU expression for function ``f`` and source select ``s``.

    Args:
        f: ALU function code (0-7).
        s: Source select code (0-7).
        a: Register file A address (0-15).
        b: Register file B address (0-15).
        c: Carry in (0 or 1).

    Returns:
        The expression text, e.g. ``render_alu(0, 0, 3, 5, 1) == "R3 + q + 1"``.
    """
    if not (0 <= f <= 7 and 0 <= s <= 7):
        raise ValueError(f"ALU function/select out of range: f={f} s={s}")
    if not (0 <= a <= 15 and 0 <= b <= 15):
        raise ValueError(f"register address out of range: a={a} b={b}")
    return ALU_TABLE[(f << 3) | s].render(a, b, c)
