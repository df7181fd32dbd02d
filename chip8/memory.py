"""Memory model for the CHIP-8 virtual machine."""

import logging
from typing import Iterable

from .errors import MemoryAccessError, ROMTooLarge

logger = logging.getLogger(__name__)

MEMORY_SIZE = 4096
PROGRAM_START = 0x200
FONTSET_START = 0x050
FONT_GLYPH_SIZE = 5
MAX_ROM_SIZE = MEMORY_SIZE - PROGRAM_START

FONTSET = (
    0xF0, 0x90, 0x90, 0x90, 0xF0,  # 0
    0x20, 0x60, 0x20, 0x20, 0x70,  # 1
    0xF0, 0x10, 0xF0, 0x80, 0xF0,  # 2
    0xF0, 0x10, 0xF0, 0x10, 0xF0,  # 3
    0x90, 0x90, 0xF0, 0x10, 0x10,  # 4
    0xF0, 0x80, 0xF0, 0x10, 0xF0,  # 5
    0xF0, 0x80, 0xF0, 0x90, 0xF0,  # 6
    0xF0, 0x10, 0x20, 0x40, 0x40,  # 7
    0xF0, 0x90, 0xF0, 0x90, 0xF0,  # 8
    0xF0, 0x90, 0xF0, 0x10, 0xF0,  # 9
    0xF0, 0x90, 0xF0, 0x90, 0x90,  # A
    0xE0, 0x90, 0xE0, 0x90, 0xE0,  # B
    0xF0, 0x80, 0x80, 0x80, 0xF0,  # C
    0xE0, 0x90, 0x90, 0x90, 0xE0,  # D
    0xF0, 0x80, 0xF0, 0x80, 0xF0,  # E
    0xF0, 0x80, 0xF0, 0x80, 0x80,  # F
)


class Memory:
    """4 KiB byte-addressable memory with the font table burned in."""

    def __init__(self, size: int = MEMORY_SIZE):
        self.size = size
        self._data = bytearray(size)
        self.load_fontset()

    def load_fontset(self) -> None:
        """Copy the hex digit glyphs to FONTSET_START."""
        self._data[FONTSET_START:FONTSET_START + len(FONTSET)] = bytes(FONTSET)

    def _check_bounds(self, addr: int) -> None:
        """Check if address is within valid range."""
        if addr < 0 or addr >= self.size:
            raise MemoryAccessError(f"Memory address out of range: {addr:#06x}")

    def read(self, addr: int) -> int:
        """Read byte from memory address."""
        self._check_bounds(addr)
        return self._data[addr]

    def write(self, addr: int, value: int) -> None:
        """Write byte to memory address, keeping only the low 8 bits."""
        self._check_bounds(addr)
        self._data[addr] = value & 0xFF

    def read_word(self, addr: int) -> int:
        """Read a big-endian 16-bit word."""
        self._check_bounds(addr + 1)
        return self.read(addr) << 8 | self._data[addr + 1]

    def read_range(self, addr: int, count: int) -> bytes:
        """Read `count` consecutive bytes starting at `addr`."""
        if count <= 0:
            return b""
        self._check_bounds(addr)
        self._check_bounds(addr + count - 1)
        return bytes(self._data[addr:addr + count])

    def load(self, data: Iterable[int], start: int = PROGRAM_START) -> int:
        """Copy program bytes into memory starting at `start`.

        Returns:
            Number of bytes loaded
        """
        data = bytes(data)
        available = self.size - start
        if len(data) > available:
            raise ROMTooLarge(
                f"ROM is {len(data)} bytes, only {available} bytes available at {start:#05x}",
                addr=start,
            )
        self._data[start:start + len(data)] = data
        logger.debug("Loaded %d bytes at %#05x", len(data), start)
        return len(data)

    def get_watched(self, addresses: list[int]) -> dict[str, int]:
        """Get values at watched addresses as string-keyed dict."""
        result = {}
        for addr in addresses:
            if 0 <= addr < self.size:
                result[str(addr)] = self._data[addr]
        return result

    def clear(self) -> None:
        """Zero all memory and burn the font table back in."""
        self._data[:] = bytes(self.size)
        self.load_fontset()
