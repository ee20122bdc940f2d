"""
Shared fixtures: synthetic math box PROM sets written to a temp directory.
"""
import sys
import os
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import pytest
from mathbox_dis.rom import ROM_SETS, MICROCODE_SIZE, DISPATCH_SIZE


MATHBOX = ROM_SETS["mathbox"]


def _split_nibbles(words):
    """Split 24-bit words into the six per-PROM byte images."""
    return [bytes((w >> (4 * i)) & 0x0f for w in words) for i in range(6)]


@pytest.fixture
def write_rom_set(tmp_path):
    """Return a factory that writes a PROM set and returns its directory."""
    def _write(words=None, dispatch=None, directory=None):
        directory = directory or tmp_path
        if words is None:
            words = [(addr * 0x010203) & 0xffffff for addr in range(MICROCODE_SIZE)]
        if dispatch is None:
            dispatch = [code * 8 for code in range(DISPATCH_SIZE)]
        (directory / MATHBOX.dispatch).write_bytes(bytes(dispatch))
        for fn, data in zip(MATHBOX.microcode, _split_nibbles(words)):
            (directory / fn).write_bytes(data)
        return directory
    return _write
