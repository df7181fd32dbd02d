"""Ensure every mnemonic has a dedicated behavioral test."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable

import pytest

from chip8 import Chip8
from chip8.decoder import VALID_MNEMONICS, EXTENDED_MNEMONICS, decode
from chip8.instructions import INSTRUCTION_EXECUTORS


def rom(*words: int) -> bytes:
    return b"".join(w.to_bytes(2, "big") for w in words)


def expect_reg(reg: int, value: int) -> Callable:
    def _check(machine):
        assert machine.registers[reg] == value

    return _check


def expect_pc(value: int) -> Callable:
    def _check(machine):
        assert machine.pc == value

    return _check


def expect_index(value: int) -> Callable:
    def _check(machine):
        assert machine.index == value

    return _check


def expect_mem(addr: int, data: bytes) -> Callable:
    def _check(machine):
        assert machine.memory.read_range(addr, len(data)) == data

    return _check


def expect_pixel(x: int, y: int, value: int) -> Callable:
    def _check(machine):
        assert machine.get_pixel_at(x, y) == value

    return _check


def expect_delay(value: int) -> Callable:
    def _check(machine):
        assert machine.delay_timer == value

    return _check


def expect_sound(value: int) -> Callable:
    def _check(machine):
        assert machine.sound_timer == value

    return _check


@dataclass
class InstructionCase:
    mnemonic: str
    words: tuple
    checker: Callable
    cycles: int = 0
    extended: bool = False
    keys: list = field(default_factory=list)


INSTRUCTION_CASES = [
    InstructionCase("CLS", (0xA050, 0xD005, 0x00E0), expect_pixel(0, 0, 0)),
    InstructionCase("RET", (0x2204, 0x1202, 0x00EE), expect_pc(0x202)),
    InstructionCase("JP", (0x1300,), expect_pc(0x300)),
    InstructionCase("CALL", (0x2300,), expect_pc(0x300)),
    InstructionCase("SE_BYTE", (0x3000,), expect_pc(0x204)),
    InstructionCase("SNE_BYTE", (0x4001,), expect_pc(0x204)),
    InstructionCase("SE_REG", (0x5010,), expect_pc(0x204)),
    InstructionCase("LD_BYTE", (0x6A42,), expect_reg(0xA, 0x42)),
    InstructionCase("ADD_BYTE", (0x6A42, 0x7A01), expect_reg(0xA, 0x43)),
    InstructionCase("LD_REG", (0x6142, 0x8010), expect_reg(0, 0x42)),
    InstructionCase("OR", (0x600C, 0x6103, 0x8011), expect_reg(0, 0x0F)),
    InstructionCase("AND", (0x600C, 0x6106, 0x8012), expect_reg(0, 0x04)),
    InstructionCase("XOR", (0x600C, 0x6106, 0x8013), expect_reg(0, 0x0A)),
    InstructionCase("ADD_REG", (0x60F0, 0x6120, 0x8014), expect_reg(0xF, 1)),
    InstructionCase("SUB", (0x6005, 0x6103, 0x8015), expect_reg(0, 2)),
    InstructionCase("SHR", (0x6003, 0x8006), expect_reg(0, 1)),
    InstructionCase("SHL", (0x6003, 0x800E), expect_reg(0, 6)),
    InstructionCase("SNE_REG", (0x6101, 0x9010), expect_pc(0x206)),
    InstructionCase("LD_I", (0xA321,), expect_index(0x321)),
    InstructionCase("RND", (0x60FF, 0xC000), expect_reg(0, 0)),
    InstructionCase("DRW", (0xA050, 0xD005), expect_pixel(3, 0, 0xFF)),
    InstructionCase("SKNP", (0xE0A1,), expect_pc(0x204)),
    InstructionCase("LD_VX_DT", (0x6007, 0xF015, 0xF107), expect_reg(1, 6)),
    InstructionCase("LD_DT", (0x6007, 0xF015), expect_delay(6)),
    InstructionCase("LD_ST", (0x6007, 0xF018), expect_sound(6)),
    InstructionCase("ADD_I", (0xA100, 0x6010, 0xF01E), expect_index(0x110)),
    InstructionCase("LD_F", (0x6001, 0xF029), expect_index(0x055)),
    InstructionCase("LD_B", (0x60FF, 0xA300, 0xF033), expect_mem(0x300, bytes([2, 5, 5]))),
    InstructionCase("LD_MEM", (0x6001, 0x6102, 0xA300, 0xF155), expect_mem(0x300, bytes([1, 2]))),
    InstructionCase("LD_REGS", (0xA050, 0xF165), expect_reg(1, 0x90)),
    InstructionCase("SUBN", (0x6003, 0x6105, 0x8017), expect_reg(0, 2), extended=True),
    InstructionCase("JP_V0", (0x6002, 0xB300), expect_pc(0x302), extended=True),
    InstructionCase("SKP", (0xE09E,), expect_pc(0x204), extended=True, keys=[0]),
    InstructionCase("LD_VX_K", (0xF50A,), expect_reg(5, 0xC), extended=True, keys=[0xC]),
]


@pytest.mark.parametrize("case", INSTRUCTION_CASES, ids=lambda case: case.mnemonic)
def test_all_instructions_have_behavioral_tests(case: InstructionCase):
    assert decode(case.words[-1], extended=case.extended).mnemonic == case.mnemonic
    machine = Chip8(seed=0, extended=case.extended)
    machine.load(rom(*case.words))
    for key in case.keys:
        machine.set_key(key, True)
    for _ in range(case.cycles or len(case.words)):
        machine.cycle()
    case.checker(machine)


def test_instruction_case_coverage_matches_mnemonics():
    covered = {case.mnemonic for case in INSTRUCTION_CASES}
    assert covered == VALID_MNEMONICS | EXTENDED_MNEMONICS


def test_every_mnemonic_has_an_executor():
    assert set(INSTRUCTION_EXECUTORS) == VALID_MNEMONICS | EXTENDED_MNEMONICS
