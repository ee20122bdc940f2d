#!/usr/bin/env python3
"""
mathdis: Atari math box microcode disassembler CLI

Usage:
    python mathdis.py [rom_dir] [-o listing.txt] [--rom-set mathbox]
                      [--format txt|json|csv] [--dispatch FILE]
                      [--microcode F0 F1 F2 F3 F4 F5] [-v] [--log-file PATH]

The PROM set is read from rom_dir (default: current directory).  File names
come from the --rom-set profile and can be overridden one by one.

Exit codes:
    0  success
    1  usage error
    2  a PROM image could not be opened
    3  a PROM image is short or malformed

Examples:
    python mathdis.py roms/ -o mathbox.lst
    python mathdis.py roms/ --format json -o mathbox.json
    python mathdis.py --microcode m1.bin l1.bin k1.bin j1.bin h1.bin f1.bin
"""

import argparse
import dataclasses
import logging
import os
import sys

# Allow running from project root or as module
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from mathbox_dis import __version__
from mathbox_dis.listing import OUTPUT_FORMATS, format_output
from mathbox_dis.log_setup import setup_logging
from mathbox_dis.rom import (DEFAULT_ROM_SET, ROM_SETS, SourceOpenError,
                             SourceReadError, load_image)

EXIT_OK = 0
EXIT_USAGE = 1
EXIT_OPEN = 2
EXIT_READ = 3


class _ArgumentParser(argparse.ArgumentParser):
    """Bad arguments exit with EXIT_USAGE instead of argparse's 2."""

    def error(self, message):
        self.print_usage(sys.stderr)
        self.exit(EXIT_USAGE, f"{self.prog}: error: {message}\n")


def build_parser() -> argparse.ArgumentParser:
    parser = _ArgumentParser(
        prog="mathdis",
        description="Atari math box microcode disassembler",
        epilog="ROM sets: " + ", ".join(ROM_SETS.keys()),
    )
    parser.add_argument("rom_dir", nargs="?", default=".",
                        help="Directory holding the PROM images (default: .)")
    parser.add_argument("-o", "--output", help="Output listing file (default: stdout)")
    parser.add_argument("--rom-set", default=DEFAULT_ROM_SET,
                        choices=list(ROM_SETS.keys()),
                        help=f"PROM file name profile (default: {DEFAULT_ROM_SET})")
    parser.add_argument("--dispatch", default=None,
                        help="Dispatch PROM file name, overrides the ROM set")
    parser.add_argument("--microcode", nargs=6, default=None, metavar="FILE",
                        help="Six microcode PROM file names, least significant "
                             "nibble first, override the ROM set")
    parser.add_argument("--format", choices=OUTPUT_FORMATS, default="txt",
                        help="Output format (default: txt)")
    parser.add_argument("--verbose", "-v", action="count", default=0,
                        help="Log progress to stderr (-v info, -vv debug)")
    parser.add_argument("--log-file", default=None,
                        help="Also write a full debug log to this file")
    parser.add_argument("--version", action="version",
                        version=f"mathdis {__version__}")
    return parser


def _console_level(verbose: int) -> int:
    if verbose >= 2:
        return logging.DEBUG
    if verbose == 1:
        return logging.INFO
    return logging.WARNING


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    log = setup_logging(console_level=_console_level(args.verbose), log_file=args.log_file)

    rom_set = ROM_SETS[args.rom_set]
    if args.dispatch:
        rom_set = dataclasses.replace(rom_set, dispatch=args.dispatch)
    if args.microcode:
        rom_set = dataclasses.replace(rom_set, microcode=tuple(args.microcode))
    log.info("ROM set: %s (%s)", args.rom_set, rom_set.description)

    # Nothing is written until every PROM has been read.
    try:
        image = load_image(args.rom_dir, rom_set)
    except SourceOpenError as e:
        log.error("%s", e)
        return EXIT_OPEN
    except SourceReadError as e:
        log.error("%s", e)
        return EXIT_READ

    result = format_output(image, args.format)

    if args.output:
        try:
            with open(args.output, "w", encoding="utf-8", newline="") as f:
                f.write(result)
        except OSError as e:
            log.error("Cannot write %s: %s", args.output, e.strerror)
            return EXIT_USAGE
        log.info("Output: %s (%s)", args.output, args.format)
    else:
        sys.stdout.write(result)

    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
