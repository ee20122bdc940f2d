"""
mathdis CLI tests: exit codes, output destinations and ROM set overrides.
"""
import sys
import os
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import json
import logging

import pytest
import mathdis
from mathbox_dis.listing import LISTING_HEADER
from mathbox_dis.rom import MICROCODE_SIZE, ROM_SETS


MATHBOX = ROM_SETS["mathbox"]


class TestExitCodes:

    def test_success_to_stdout(self, write_rom_set, capsys):
        rom_dir = write_rom_set()
        assert mathdis.main([str(rom_dir)]) == mathdis.EXIT_OK
        out = capsys.readouterr().out
        assert out.startswith(LISTING_HEADER)
        assert "0ff:" in out

    def test_missing_prom(self, tmp_path, capsys):
        rom_dir = tmp_path / "roms"
        rom_dir.mkdir()
        log_file = tmp_path / "mathdis.log"
        assert mathdis.main([str(rom_dir), "--log-file", str(log_file)]) == mathdis.EXIT_OPEN
        captured = capsys.readouterr()
        assert captured.out == ""
        assert captured.err
        assert MATHBOX.dispatch in log_file.read_text(encoding="utf-8")

    def test_short_prom(self, write_rom_set, capsys):
        rom_dir = write_rom_set()
        (rom_dir / MATHBOX.microcode[5]).write_bytes(bytes(100))
        assert mathdis.main([str(rom_dir)]) == mathdis.EXIT_READ
        assert capsys.readouterr().out == ""

    def test_short_prom_writes_no_output_file(self, write_rom_set):
        rom_dir = write_rom_set()
        (rom_dir / MATHBOX.microcode[0]).write_bytes(bytes(1))
        out = rom_dir / "out.lst"
        assert mathdis.main([str(rom_dir), "-o", str(out)]) == mathdis.EXIT_READ
        assert not out.exists()

    def test_binary_dump_named_hex(self, write_rom_set, capsys):
        rom_dir = write_rom_set()
        (rom_dir / "dispatch.hex").write_bytes(bytes(range(256)) * 2)
        assert mathdis.main([str(rom_dir), "--dispatch", "dispatch.hex"]) == mathdis.EXIT_READ
        assert capsys.readouterr().out == ""

    def test_usage_error(self, capsys):
        with pytest.raises(SystemExit) as exc:
            mathdis.main(["--no-such-option"])
        assert exc.value.code == mathdis.EXIT_USAGE
        assert "usage:" in capsys.readouterr().err

    def test_bad_format_is_usage_error(self):
        with pytest.raises(SystemExit) as exc:
            mathdis.main([".", "--format", "xml"])
        assert exc.value.code == mathdis.EXIT_USAGE

    def test_version(self, capsys):
        with pytest.raises(SystemExit) as exc:
            mathdis.main(["--version"])
        assert exc.value.code == 0
        assert "mathdis" in capsys.readouterr().out


class TestOutput:

    def test_output_file(self, write_rom_set):
        rom_dir = write_rom_set()
        out = rom_dir / "mathbox.lst"
        assert mathdis.main([str(rom_dir), "-o", str(out)]) == 0
        text = out.read_text(encoding="utf-8")
        assert text.startswith(LISTING_HEADER)

    def test_json_format(self, write_rom_set, capsys):
        rom_dir = write_rom_set()
        assert mathdis.main([str(rom_dir), "--format", "json"]) == 0
        data = json.loads(capsys.readouterr().out)
        assert len(data) == MICROCODE_SIZE

    def test_log_file(self, write_rom_set, tmp_path):
        rom_dir = write_rom_set()
        log_file = tmp_path / "logs" / "mathdis.log"
        assert mathdis.main([str(rom_dir), "-o", str(rom_dir / "x.lst"),
                             "--log-file", str(log_file)]) == 0
        log_text = log_file.read_text(encoding="utf-8")
        assert "Loaded 256 microcode words" in log_text


class TestRomSetOverrides:

    def test_dispatch_override(self, write_rom_set, capsys):
        rom_dir = write_rom_set()
        (rom_dir / MATHBOX.dispatch).rename(rom_dir / "dispatch.bin")
        assert mathdis.main([str(rom_dir), "--dispatch", "dispatch.bin"]) == 0

    def test_microcode_override(self, write_rom_set, capsys):
        rom_dir = write_rom_set()
        names = []
        for i, fn in enumerate(MATHBOX.microcode):
            new = f"ucode{i}.bin"
            (rom_dir / fn).rename(rom_dir / new)
            names.append(new)
        assert mathdis.main([str(rom_dir), "--microcode", *names]) == 0

    def test_microcode_override_needs_six(self):
        with pytest.raises(SystemExit) as exc:
            mathdis.main([".", "--microcode", "a", "b"])
        assert exc.value.code == mathdis.EXIT_USAGE


class TestVerbosity:

    @pytest.mark.parametrize("verbose,level", [
        (0, logging.WARNING),
        (1, logging.INFO),
        (2, logging.DEBUG),
        (3, logging.DEBUG),
    ])
    def test_console_level(self, verbose, level):
        assert mathdis._console_level(verbose) == level
