"""Tests for the command line entry point."""

import pytest
from chip8.__main__ import main, build_parser


def rom(*words: int) -> bytes:
    return b"".join(w.to_bytes(2, "big") for w in words)


class TestCLI:
    """CLI tests."""

    def test_prints_screen_and_registers(self, tmp_path, capsys):
        """A clean run prints the screen then a register line."""
        path = tmp_path / "zero.ch8"
        path.write_bytes(rom(0x6007, 0xA050, 0xD115, 0x1206))
        assert main([str(path)]) == 0
        lines = capsys.readouterr().out.splitlines()
        assert lines[0].startswith("####....")
        assert len(lines) == 34
        assert lines[32].startswith("V0=07 V1=00")
        assert "PC=0206" in lines[33]
        assert "cycles=4" in lines[33]

    def test_error_exit_code(self, tmp_path, capsys):
        """A fatal machine error exits 1 and reports on stderr."""
        path = tmp_path / "bad.ch8"
        path.write_bytes(rom(0x5121))
        assert main([str(path)]) == 1
        assert "UnknownOpcode" in capsys.readouterr().err

    def test_missing_rom(self, tmp_path, capsys):
        """An unreadable ROM exits 2."""
        assert main([str(tmp_path / "nope.ch8")]) == 2
        assert "ROMReadError" in capsys.readouterr().err

    def test_options(self, tmp_path, capsys):
        """Flags map onto runner options."""
        path = tmp_path / "keys.ch8"
        path.write_bytes(rom(0x600A, 0xE0A1, 0x6101, 0x1206))
        assert main([str(path), "--key", "a", "--cycles", "10", "--seed", "1", "--extended"]) == 0
        out = capsys.readouterr().out
        assert "V1=01" in out

    def test_bad_key_rejected(self):
        """Keys must be a single hex digit."""
        with pytest.raises(SystemExit):
            build_parser().parse_args(["rom.ch8", "--key", "10"])
