"""Custom exceptions for the CHIP-8 virtual machine."""

from dataclasses import dataclass
from typing import Optional


@dataclass
class ErrorInfo:
    """Structured error information for API responses."""
    type: str
    message: str
    step: int
    addr: int
    opcode: Optional[int] = None

    def to_dict(self) -> dict:
        return {
            "type": self.type,
            "message": self.message,
            "step": self.step,
            "addr": self.addr,
            "opcode": self.opcode,
        }


class Chip8Error(Exception):
    """Base exception for all CHIP-8 errors."""

    def __init__(
        self,
        message: str,
        step: int = 0,
        addr: int = 0,
        opcode: Optional[int] = None,
    ):
        super().__init__(message)
        self.message = message
        self.step = step
        self.addr = addr
        self.opcode = opcode

    def to_error_info(self) -> ErrorInfo:
        return ErrorInfo(
            type=self.__class__.__name__,
            message=self.message,
            step=self.step,
            addr=self.addr,
            opcode=self.opcode,
        )


class LoadError(Chip8Error):
    """Program could not be loaded into memory."""
    pass


class ROMTooLarge(LoadError):
    """ROM does not fit between 0x200 and the end of memory."""
    pass


class ROMReadError(LoadError):
    """ROM file could not be read."""
    pass


class Chip8RuntimeError(Chip8Error):
    """Error during program execution."""
    pass


class DecodeError(Chip8RuntimeError):
    """Opcode could not be decoded."""
    pass


class UnknownOpcode(DecodeError):
    """Opcode matches no instruction."""
    pass


class MemoryAccessError(Chip8RuntimeError):
    """Memory address out of bounds."""
    pass


class StackOverflow(Chip8RuntimeError):
    """CALL with all 16 stack frames in use."""
    pass


class StackUnderflow(Chip8RuntimeError):
    """RET with an empty stack."""
    pass


class InvalidKey(Chip8RuntimeError):
    """Keypad index outside 0x0-0xF."""
    pass


class MachineHalted(Chip8RuntimeError):
    """Cycle requested after a fatal error."""
    pass
