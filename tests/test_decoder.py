"""Tests for the opcode decoder."""

import pytest
from chip8.decoder import decode, Instruction, VALID_MNEMONICS, EXTENDED_MNEMONICS
from chip8.errors import UnknownOpcode, DecodeError


class TestDecoder:
    """Decoder tests."""

    @pytest.mark.parametrize("opcode,mnemonic", [
        (0x00E0, "CLS"),
        (0x00EE, "RET"),
        (0x1ABC, "JP"),
        (0x2ABC, "CALL"),
        (0x3A12, "SE_BYTE"),
        (0x4A12, "SNE_BYTE"),
        (0x5AB0, "SE_REG"),
        (0x6A12, "LD_BYTE"),
        (0x7A12, "ADD_BYTE"),
        (0x8AB0, "LD_REG"),
        (0x8AB1, "OR"),
        (0x8AB2, "AND"),
        (0x8AB3, "XOR"),
        (0x8AB4, "ADD_REG"),
        (0x8AB5, "SUB"),
        (0x8AB6, "SHR"),
        (0x8ABE, "SHL"),
        (0x9AB0, "SNE_REG"),
        (0xAABC, "LD_I"),
        (0xCA12, "RND"),
        (0xDAB5, "DRW"),
        (0xEAA1, "SKNP"),
        (0xFA07, "LD_VX_DT"),
        (0xFA15, "LD_DT"),
        (0xFA18, "LD_ST"),
        (0xFA1E, "ADD_I"),
        (0xFA29, "LD_F"),
        (0xFA33, "LD_B"),
        (0xFA55, "LD_MEM"),
        (0xFA65, "LD_REGS"),
    ])
    def test_base_opcodes(self, opcode, mnemonic):
        """Every base instruction decodes to its mnemonic."""
        assert decode(opcode).mnemonic == mnemonic

    def test_base_table_is_complete(self):
        """The parametrized table above covers every base mnemonic."""
        assert len(VALID_MNEMONICS) == 30

    def test_operand_fields(self):
        """Operand fields are sliced from the opcode nibbles."""
        instr = decode(0xD7A5, addr=0x204)
        assert instr == Instruction(opcode=0xD7A5, mnemonic="DRW", addr=0x204)
        assert instr.x == 0x7
        assert instr.y == 0xA
        assert instr.n == 0x5
        assert instr.kk == 0xA5
        assert instr.nnn == 0x7A5

    @pytest.mark.parametrize("opcode", [
        0x0000, 0x0123, 0x00E1, 0x00FF,
        0x5AB1, 0x9AB1,
        0x8AB7, 0x8AB8, 0x8ABF,
        0xB123,
        0xEA9E, 0xEAA2,
        0xFA0A, 0xFA00, 0xFAFF,
    ])
    def test_unknown_opcodes(self, opcode):
        """Anything outside the base table is a decode error."""
        with pytest.raises(UnknownOpcode) as exc_info:
            decode(opcode, addr=0x2F0)
        assert exc_info.value.opcode == opcode
        assert exc_info.value.addr == 0x2F0
        assert isinstance(exc_info.value, DecodeError)

    @pytest.mark.parametrize("opcode,mnemonic", [
        (0x8AB7, "SUBN"),
        (0xB123, "JP_V0"),
        (0xEA9E, "SKP"),
        (0xFA0A, "LD_VX_K"),
    ])
    def test_extended_opcodes(self, opcode, mnemonic):
        """The four standard extras decode only when enabled."""
        assert decode(opcode, extended=True).mnemonic == mnemonic
        assert mnemonic in EXTENDED_MNEMONICS

    def test_extended_still_rejects_garbage(self):
        """Extended mode does not widen the table beyond the four extras."""
        for opcode in (0x0000, 0x8AB8, 0xEAA2, 0xFAFF):
            with pytest.raises(UnknownOpcode):
                decode(opcode, extended=True)

    def test_extended_keeps_base(self):
        """Base instructions decode the same in extended mode."""
        assert decode(0x8AB5, extended=True).mnemonic == "SUB"
        assert decode(0xEAA1, extended=True).mnemonic == "SKNP"
