"""Opcode decoder for the CHIP-8 instruction set."""

from dataclasses import dataclass
from typing import Optional

from .errors import UnknownOpcode


# Mnemonics of the base instruction set
VALID_MNEMONICS = {
    "CLS",
    "RET",
    "JP",
    "CALL",
    "SE_BYTE",
    "SNE_BYTE",
    "SE_REG",
    "LD_BYTE",
    "ADD_BYTE",
    "LD_REG",
    "OR",
    "AND",
    "XOR",
    "ADD_REG",
    "SUB",
    "SHR",
    "SHL",
    "SNE_REG",
    "LD_I",
    "RND",
    "DRW",
    "SKNP",
    "LD_VX_DT",
    "LD_DT",
    "LD_ST",
    "ADD_I",
    "LD_F",
    "LD_B",
    "LD_MEM",
    "LD_REGS",
}

# Standard opcodes only decoded when the machine runs with extended=True
EXTENDED_MNEMONICS = {"SUBN", "JP_V0", "SKP", "LD_VX_K"}

_ALU_OPS = {
    0x0: "LD_REG",
    0x1: "OR",
    0x2: "AND",
    0x3: "XOR",
    0x4: "ADD_REG",
    0x5: "SUB",
    0x6: "SHR",
    0xE: "SHL",
}

_MISC_OPS = {
    0x07: "LD_VX_DT",
    0x15: "LD_DT",
    0x18: "LD_ST",
    0x1E: "ADD_I",
    0x29: "LD_F",
    0x33: "LD_B",
    0x55: "LD_MEM",
    0x65: "LD_REGS",
}


@dataclass(frozen=True)
class Instruction:
    """Decoded instruction: a mnemonic tag plus every operand field."""
    opcode: int
    mnemonic: str
    addr: int = 0

    @property
    def x(self) -> int:
        return (self.opcode & 0x0F00) >> 8

    @property
    def y(self) -> int:
        return (self.opcode & 0x00F0) >> 4

    @property
    def n(self) -> int:
        return self.opcode & 0x000F

    @property
    def kk(self) -> int:
        return self.opcode & 0x00FF

    @property
    def nnn(self) -> int:
        return self.opcode & 0x0FFF


def _classify(opcode: int, extended: bool) -> Optional[str]:
    """Return the mnemonic for `opcode`, or None if it is not an instruction."""
    group = opcode & 0xF000
    low_nibble = opcode & 0x000F
    low_byte = opcode & 0x00FF

    if group == 0x0000:
        if opcode == 0x00E0:
            return "CLS"
        if opcode == 0x00EE:
            return "RET"
        return None
    if group == 0x1000:
        return "JP"
    if group == 0x2000:
        return "CALL"
    if group == 0x3000:
        return "SE_BYTE"
    if group == 0x4000:
        return "SNE_BYTE"
    if group == 0x5000:
        return "SE_REG" if low_nibble == 0 else None
    if group == 0x6000:
        return "LD_BYTE"
    if group == 0x7000:
        return "ADD_BYTE"
    if group == 0x8000:
        if extended and low_nibble == 0x7:
            return "SUBN"
        return _ALU_OPS.get(low_nibble)
    if group == 0x9000:
        return "SNE_REG" if low_nibble == 0 else None
    if group == 0xA000:
        return "LD_I"
    if group == 0xB000:
        return "JP_V0" if extended else None
    if group == 0xC000:
        return "RND"
    if group == 0xD000:
        return "DRW"
    if group == 0xE000:
        if low_byte == 0xA1:
            return "SKNP"
        if extended and low_byte == 0x9E:
            return "SKP"
        return None
    # 0xF000
    if extended and low_byte == 0x0A:
        return "LD_VX_K"
    return _MISC_OPS.get(low_byte)


def decode(opcode: int, addr: int = 0, extended: bool = False) -> Instruction:
    """Decode a 16-bit opcode.

    Args:
        opcode: Instruction word, high byte first
        addr: Address the word was fetched from (for error context)
        extended: Also accept 8xy7, Bnnn, Ex9E and Fx0A

    Raises:
        UnknownOpcode: If the word matches no instruction
    """
    mnemonic = _classify(opcode & 0xFFFF, extended)
    if mnemonic is None:
        raise UnknownOpcode(
            f"Unknown opcode {opcode:#06x} at {addr:#05x}",
            addr=addr,
            opcode=opcode,
        )
    return Instruction(opcode=opcode, mnemonic=mnemonic, addr=addr)
