"""
Word Store: reads the math box PROMs and builds the microcode image.

The microcode is held in six 256 x 4 PROMs.  PROM i supplies bits
4*i .. 4*i+3 of every 24-bit word.  A seventh, 32 x 8 PROM maps each of
the 32 math box command codes to its entry address in the microcode.

PROM images may be raw binary dumps (one byte per location) or Intel HEX
files (.hex, .ihx).
"""

from __future__ import annotations
import logging
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Dict, Iterable, Mapping, Optional, Sequence, Tuple, Union

from intelhex import IntelHex, IntelHexError

from .fields import WORD_MASK

__all__ = ['DISPATCH_SIZE', 'MICROCODE_SIZE', 'MicrocodeImage', 'ROM_SETS', 'RomSet',
           'RomSourceError', 'SourceOpenError', 'SourceReadError',
           'build_dispatch', 'combine_nibbles', 'load_image', 'read_rom']

log = logging.getLogger(__name__)


MICROCODE_SIZE = 256      # words
DISPATCH_SIZE = 32        # command codes
NIBBLES_PER_WORD = 6

INTEL_HEX_SUFFIXES = ('.hex', '.ihx')


# ──────────────────────────────────────────────
# Errors
# ──────────────────────────────────────────────

class RomSourceError(Exception):
    """Raised when a PROM image cannot be used.  Carries the source name."""
    def __init__(self, message: str, source: str = ""):
        self.source = source
        super().__init__(f"{message}: {source}" if source else message)


class SourceOpenError(RomSourceError):
    """The PROM image could not be opened."""


class SourceReadError(RomSourceError):
    """The PROM image holds fewer bytes than the PROM has locations."""


# ──────────────────────────────────────────────
# ROM set profiles
# ──────────────────────────────────────────────

@dataclass(frozen=True)
class RomSet:
    """File names of one set of math box PROMs."""
    dispatch: str
    microcode: Tuple[str, ...]
    description: str = ""

    def __post_init__(self):
        if len(self.microcode) != NIBBLES_PER_WORD:
            raise ValueError(f"expected {NIBBLES_PER_WORD} microcode PROMs, "
                             f"got {len(self.microcode)}")


# Microcode PROMs are listed least significant nibble first.
ROM_SETS: Dict[str, RomSet] = {
    "mathbox": RomSet(
        dispatch="036174-01.b1",
        microcode=(
            "036175-01.m1",
            "036176-01.l1",
            "036177-01.k1",
            "036178-01.j1",
            "036179-01.h1",
            "036180-01.f1",
        ),
        description="Atari math box (Red Baron, Battlezone, Tempest)",
    ),
}

DEFAULT_ROM_SET = "mathbox"


# ──────────────────────────────────────────────
# Microcode image
# ──────────────────────────────────────────────

@dataclass(frozen=True)
class MicrocodeImage:
    """The 256 microcode words and the dispatch entry points.

    ``entries`` maps a microcode address to the command code that
    dispatches there.  Addresses no command reaches are absent.
    """
    words: Tuple[int, ...]
    entries: Mapping[int, int] = field(default_factory=dict)

    def __post_init__(self):
        words = tuple(self.words)
        if len(words) != MICROCODE_SIZE:
            raise ValueError(f"microcode image must hold {MICROCODE_SIZE} words, got {len(words)}")
        for addr, w in enumerate(words):
            if not 0 <= w <= WORD_MASK:
                raise ValueError(f"word at {addr:03x} is not a 24-bit value: {w:#x}")
        for addr, code in self.entries.items():
            if not 0 <= addr < MICROCODE_SIZE:
                raise ValueError(f"entry address out of range: {addr:#x}")
            if not 0 <= code < DISPATCH_SIZE:
                raise ValueError(f"dispatch code out of range: {code:#x}")
        object.__setattr__(self, 'words', words)
        object.__setattr__(self, 'entries', MappingProxyType(dict(self.entries)))

    def __len__(self):
        return len(self.words)

    def __getitem__(self, addr: int) -> int:
        return self.words[addr]

    def entry_at(self, addr: int) -> Optional[int]:
        return self.entries.get(addr)


def combine_nibbles(proms: Sequence[bytes]) -> Tuple[int, ...]:
    """OR each PROM byte, shifted to its 4-bit lane, into the word.

    The bytes are not masked, so a stray high nibble lands in the next lane
    up.  Anything above bit 23 is dropped.
    """
    if len(proms) != NIBBLES_PER_WORD:
        raise ValueError(f"expected {NIBBLES_PER_WORD} microcode PROMs, got {len(proms)}")
    words = [0] * MICROCODE_SIZE
    for i, data in enumerate(proms):
        if len(data) < MICROCODE_SIZE:
            raise ValueError(f"microcode PROM {i} holds {len(data)} bytes, need {MICROCODE_SIZE}")
        for addr in range(MICROCODE_SIZE):
            words[addr] |= data[addr] << (4 * i)
    return tuple(w & WORD_MASK for w in words)


def build_dispatch(table: Iterable[int]) -> Dict[int, int]:
    """Map entry address -> command code.  A later code replaces an earlier one."""
    entries: Dict[int, int] = {}
    for code, addr in enumerate(table):
        entries[addr] = code
    return entries


# ──────────────────────────────────────────────
# PROM file readers
# ──────────────────────────────────────────────

def _read_intel_hex(path: Path, size: int) -> bytes:
    ih = IntelHex()
    try:
        with open(path, 'r', encoding='ascii') as f:
            ih.loadhex(f)
    except OSError as e:
        raise SourceOpenError(f"error opening PROM image ({e.strerror})", str(path)) from e
    except (IntelHexError, UnicodeDecodeError) as e:
        raise SourceReadError(f"error reading PROM image ({e})", str(path)) from e

    present = set(ih.addresses())
    missing = [addr for addr in range(size) if addr not in present]
    if missing:
        raise SourceReadError(f"PROM image has no data at {len(missing)} of {size} locations "
                              f"(first {missing[0]:#05x})", str(path))
    return bytes(ih.tobinarray(start=0, size=size))


def _read_binary(path: Path, size: int) -> bytes:
    try:
        with open(path, 'rb') as f:
            data = f.read(size)
    except OSError as e:
        raise SourceOpenError(f"error opening PROM image ({e.strerror})", str(path)) from e
    if len(data) < size:
        raise SourceReadError(f"error reading PROM image, {len(data)} of {size} bytes",
                              str(path))
    return data


def read_rom(path: Union[str, Path], size: int) -> bytes:
    """Read the first ``size`` locations of a PROM image.

    Raises:
        SourceOpenError: the file does not exist or cannot be opened.
        SourceReadError: the file is short, or is malformed Intel HEX.
    """
    path = Path(path)
    if path.suffix.lower() in INTEL_HEX_SUFFIXES:
        data = _read_intel_hex(path, size)
    else:
        data = _read_binary(path, size)
    log.debug("Read %d bytes from %s", size, path)
    return data


def load_image(rom_dir: Union[str, Path] = ".",
               rom_set: Union[str, RomSet] = DEFAULT_ROM_SET) -> MicrocodeImage:
    """Read a full PROM set from ``rom_dir`` and build the microcode image.

    Every PROM is read before anything is returned, so a failure leaves
    nothing half built.
    """
    if isinstance(rom_set, str):
        try:
            rom_set = ROM_SETS[rom_set]
        except KeyError:
            raise ValueError(f"unknown ROM set: {rom_set}") from None
    rom_dir = Path(rom_dir)

    dispatch = read_rom(rom_dir / rom_set.dispatch, DISPATCH_SIZE)
    proms = [read_rom(rom_dir / fn, MICROCODE_SIZE) for fn in rom_set.microcode]

    image = MicrocodeImage(words=combine_nibbles(proms), entries=build_dispatch(dispatch))
    log.info("Loaded %d microcode words, %d dispatch entries from %s",
             len(image), len(image.entries), rom_dir)
    return image
