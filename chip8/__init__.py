"""CHIP-8 Virtual Machine Core Package."""

from .machine import Chip8
from .runner import run_rom, RunOptions, RunResult
from .display import VIDEO_WIDTH, VIDEO_HEIGHT
from .errors import (
    Chip8Error,
    LoadError,
    ROMTooLarge,
    ROMReadError,
    Chip8RuntimeError,
    DecodeError,
    UnknownOpcode,
    MemoryAccessError,
    StackOverflow,
    StackUnderflow,
    InvalidKey,
    MachineHalted,
)

__all__ = [
    "Chip8",
    "run_rom",
    "RunOptions",
    "RunResult",
    "VIDEO_WIDTH",
    "VIDEO_HEIGHT",
    "Chip8Error",
    "LoadError",
    "ROMTooLarge",
    "ROMReadError",
    "Chip8RuntimeError",
    "DecodeError",
    "UnknownOpcode",
    "MemoryAccessError",
    "StackOverflow",
    "StackUnderflow",
    "InvalidKey",
    "MachineHalted",
]
