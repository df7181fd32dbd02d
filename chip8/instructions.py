"""Instruction execution for the CHIP-8 virtual machine."""

import random
from typing import Callable, Optional

from .cpu import CPU, NUM_KEYS
from .decoder import Instruction
from .errors import MemoryAccessError
from .display import Framebuffer
from .memory import Memory, FONTSET_START, FONT_GLYPH_SIZE


class Devices:
    """Framebuffer and random source the instructions write to and draw from."""

    def __init__(self, screen: Optional[Framebuffer] = None, rng: Optional[random.Random] = None):
        self.screen = screen if screen is not None else Framebuffer()
        self.rng = rng if rng is not None else random.Random()

    def random_byte(self) -> int:
        """Uniform byte in 0-255."""
        return self.rng.getrandbits(8)


# Instruction executor type
InstructionExecutor = Callable[[Instruction, CPU, Memory, Devices], Optional[int]]


def _skip_if(cpu: CPU, condition: bool) -> Optional[int]:
    """Return the address past the next instruction if `condition` holds."""
    if condition:
        return cpu.pc + 2
    return None


def execute_cls(instr: Instruction, cpu: CPU, mem: Memory, dev: Devices) -> Optional[int]:
    """00E0: clear the screen"""
    dev.screen.clear()
    return None


def execute_ret(instr: Instruction, cpu: CPU, mem: Memory, dev: Devices) -> Optional[int]:
    """00EE: SP -= 1; PC := STACK[SP]"""
    return cpu.pop()


def execute_jp(instr: Instruction, cpu: CPU, mem: Memory, dev: Devices) -> Optional[int]:
    """1nnn: PC := nnn"""
    return instr.nnn


def execute_call(instr: Instruction, cpu: CPU, mem: Memory, dev: Devices) -> Optional[int]:
    """2nnn: STACK[SP] := PC; SP += 1; PC := nnn"""
    cpu.push(cpu.pc)
    return instr.nnn


def execute_se_byte(instr: Instruction, cpu: CPU, mem: Memory, dev: Devices) -> Optional[int]:
    """3xkk: skip if Vx == kk"""
    return _skip_if(cpu, cpu.v[instr.x] == instr.kk)


def execute_sne_byte(instr: Instruction, cpu: CPU, mem: Memory, dev: Devices) -> Optional[int]:
    """4xkk: skip if Vx != kk"""
    return _skip_if(cpu, cpu.v[instr.x] != instr.kk)


def execute_se_reg(instr: Instruction, cpu: CPU, mem: Memory, dev: Devices) -> Optional[int]:
    """5xy0: skip if Vx == Vy"""
    return _skip_if(cpu, cpu.v[instr.x] == cpu.v[instr.y])


def execute_ld_byte(instr: Instruction, cpu: CPU, mem: Memory, dev: Devices) -> Optional[int]:
    """6xkk: Vx := kk"""
    cpu.set_reg(instr.x, instr.kk)
    return None


def execute_add_byte(instr: Instruction, cpu: CPU, mem: Memory, dev: Devices) -> Optional[int]:
    """7xkk: Vx := Vx + kk, no carry"""
    cpu.set_reg(instr.x, cpu.v[instr.x] + instr.kk)
    return None


def execute_ld_reg(instr: Instruction, cpu: CPU, mem: Memory, dev: Devices) -> Optional[int]:
    """8xy0: Vx := Vy"""
    cpu.set_reg(instr.x, cpu.v[instr.y])
    return None


def execute_or(instr: Instruction, cpu: CPU, mem: Memory, dev: Devices) -> Optional[int]:
    """8xy1: Vx := Vx OR Vy"""
    cpu.set_reg(instr.x, cpu.v[instr.x] | cpu.v[instr.y])
    return None


def execute_and(instr: Instruction, cpu: CPU, mem: Memory, dev: Devices) -> Optional[int]:
    """8xy2: Vx := Vx AND Vy"""
    cpu.set_reg(instr.x, cpu.v[instr.x] & cpu.v[instr.y])
    return None


def execute_xor(instr: Instruction, cpu: CPU, mem: Memory, dev: Devices) -> Optional[int]:
    """8xy3: Vx := Vx XOR Vy"""
    cpu.set_reg(instr.x, cpu.v[instr.x] ^ cpu.v[instr.y])
    return None


def execute_add_reg(instr: Instruction, cpu: CPU, mem: Memory, dev: Devices) -> Optional[int]:
    """8xy4: Vx := Vx + Vy, then VF := carry"""
    total = cpu.v[instr.x] + cpu.v[instr.y]
    cpu.set_reg(instr.x, total)
    cpu.set_flag(1 if total > 0xFF else 0)
    return None


def execute_sub(instr: Instruction, cpu: CPU, mem: Memory, dev: Devices) -> Optional[int]:
    """8xy5: Vx := Vx - Vy, then VF := NOT borrow"""
    vx, vy = cpu.v[instr.x], cpu.v[instr.y]
    cpu.set_reg(instr.x, vx - vy)
    cpu.set_flag(1 if vx > vy else 0)
    return None


def execute_shr(instr: Instruction, cpu: CPU, mem: Memory, dev: Devices) -> Optional[int]:
    """8xy6: VF := Vx LSB, then Vx := Vx >> 1"""
    vx = cpu.v[instr.x]
    cpu.set_flag(vx & 0x1)
    cpu.set_reg(instr.x, vx >> 1)
    return None


def execute_shl(instr: Instruction, cpu: CPU, mem: Memory, dev: Devices) -> Optional[int]:
    """8xyE: VF := Vx MSB, then Vx := Vx << 1"""
    vx = cpu.v[instr.x]
    cpu.set_flag((vx & 0x80) >> 7)
    cpu.set_reg(instr.x, vx << 1)
    return None


def execute_subn(instr: Instruction, cpu: CPU, mem: Memory, dev: Devices) -> Optional[int]:
    """8xy7: Vx := Vy - Vx, then VF := NOT borrow"""
    vx, vy = cpu.v[instr.x], cpu.v[instr.y]
    cpu.set_reg(instr.x, vy - vx)
    cpu.set_flag(1 if vy > vx else 0)
    return None


def execute_sne_reg(instr: Instruction, cpu: CPU, mem: Memory, dev: Devices) -> Optional[int]:
    """9xy0: skip if Vx != Vy"""
    return _skip_if(cpu, cpu.v[instr.x] != cpu.v[instr.y])


def execute_ld_i(instr: Instruction, cpu: CPU, mem: Memory, dev: Devices) -> Optional[int]:
    """Annn: I := nnn"""
    cpu.set_index(instr.nnn)
    return None


def execute_jp_v0(instr: Instruction, cpu: CPU, mem: Memory, dev: Devices) -> Optional[int]:
    """Bnnn: PC := nnn + V0"""
    return (instr.nnn + cpu.v[0]) & 0xFFFF


def execute_rnd(instr: Instruction, cpu: CPU, mem: Memory, dev: Devices) -> Optional[int]:
    """Cxkk: Vx := random byte AND kk"""
    cpu.set_reg(instr.x, dev.random_byte() & instr.kk)
    return None


def execute_drw(instr: Instruction, cpu: CPU, mem: Memory, dev: Devices) -> Optional[int]:
    """Dxyn: XOR n-byte sprite at MEM[I] onto (Vx, Vy), VF := collision"""
    x, y = cpu.v[instr.x], cpu.v[instr.y]
    cpu.set_flag(0)
    sprite = mem.read_range(cpu.index, instr.n)
    if dev.screen.draw_sprite(x, y, sprite):
        cpu.set_flag(1)
    return None


def execute_skp(instr: Instruction, cpu: CPU, mem: Memory, dev: Devices) -> Optional[int]:
    """Ex9E: skip if key Vx is pressed"""
    return _skip_if(cpu, cpu.is_pressed(cpu.v[instr.x]))


def execute_sknp(instr: Instruction, cpu: CPU, mem: Memory, dev: Devices) -> Optional[int]:
    """ExA1: skip if key Vx is not pressed"""
    return _skip_if(cpu, not cpu.is_pressed(cpu.v[instr.x]))


def execute_ld_vx_dt(instr: Instruction, cpu: CPU, mem: Memory, dev: Devices) -> Optional[int]:
    """Fx07: Vx := DT"""
    cpu.set_reg(instr.x, cpu.delay_timer)
    return None


def execute_ld_vx_k(instr: Instruction, cpu: CPU, mem: Memory, dev: Devices) -> Optional[int]:
    """Fx0A: wait for a key press, Vx := key"""
    for key in range(NUM_KEYS):
        if cpu.keypad[key]:
            cpu.set_reg(instr.x, key)
            return None
    # Nothing pressed: run this instruction again next cycle
    return instr.addr


def execute_ld_dt(instr: Instruction, cpu: CPU, mem: Memory, dev: Devices) -> Optional[int]:
    """Fx15: DT := Vx"""
    cpu.delay_timer = cpu.v[instr.x]
    return None


def execute_ld_st(instr: Instruction, cpu: CPU, mem: Memory, dev: Devices) -> Optional[int]:
    """Fx18: ST := Vx"""
    cpu.sound_timer = cpu.v[instr.x]
    return None


def execute_add_i(instr: Instruction, cpu: CPU, mem: Memory, dev: Devices) -> Optional[int]:
    """Fx1E: I := I + Vx, no flag"""
    target = cpu.index + cpu.v[instr.x]
    if target > 0xFFFF:
        raise MemoryAccessError(f"Index register overflow: {cpu.index:#06x} + {cpu.v[instr.x]:#04x}")
    cpu.set_index(target)
    return None


def execute_ld_f(instr: Instruction, cpu: CPU, mem: Memory, dev: Devices) -> Optional[int]:
    """Fx29: I := address of the font glyph for Vx"""
    cpu.set_index(FONTSET_START + FONT_GLYPH_SIZE * cpu.v[instr.x])
    return None


def execute_ld_b(instr: Instruction, cpu: CPU, mem: Memory, dev: Devices) -> Optional[int]:
    """Fx33: MEM[I..I+2] := BCD(Vx)"""
    value = cpu.v[instr.x]
    mem.write(cpu.index, value // 100)
    mem.write(cpu.index + 1, (value // 10) % 10)
    mem.write(cpu.index + 2, value % 10)
    return None


def execute_ld_mem(instr: Instruction, cpu: CPU, mem: Memory, dev: Devices) -> Optional[int]:
    """Fx55: MEM[I+i] := Vi for i in 0..x"""
    for i in range(instr.x + 1):
        mem.write(cpu.index + i, cpu.v[i])
    return None


def execute_ld_regs(instr: Instruction, cpu: CPU, mem: Memory, dev: Devices) -> Optional[int]:
    """Fx65: Vi := MEM[I+i] for i in 0..x"""
    for i in range(instr.x + 1):
        cpu.set_reg(i, mem.read(cpu.index + i))
    return None


# Instruction dispatch table
INSTRUCTION_EXECUTORS: dict[str, InstructionExecutor] = {
    "CLS": execute_cls,
    "RET": execute_ret,
    "JP": execute_jp,
    "CALL": execute_call,
    "SE_BYTE": execute_se_byte,
    "SNE_BYTE": execute_sne_byte,
    "SE_REG": execute_se_reg,
    "LD_BYTE": execute_ld_byte,
    "ADD_BYTE": execute_add_byte,
    "LD_REG": execute_ld_reg,
    "OR": execute_or,
    "AND": execute_and,
    "XOR": execute_xor,
    "ADD_REG": execute_add_reg,
    "SUB": execute_sub,
    "SHR": execute_shr,
    "SHL": execute_shl,
    "SUBN": execute_subn,
    "SNE_REG": execute_sne_reg,
    "LD_I": execute_ld_i,
    "JP_V0": execute_jp_v0,
    "RND": execute_rnd,
    "DRW": execute_drw,
    "SKP": execute_skp,
    "SKNP": execute_sknp,
    "LD_VX_DT": execute_ld_vx_dt,
    "LD_VX_K": execute_ld_vx_k,
    "LD_DT": execute_ld_dt,
    "LD_ST": execute_ld_st,
    "ADD_I": execute_add_i,
    "LD_F": execute_ld_f,
    "LD_B": execute_ld_b,
    "LD_MEM": execute_ld_mem,
    "LD_REGS": execute_ld_regs,
}


def execute_instruction(
    instr: Instruction,
    cpu: CPU,
    mem: Memory,
    dev: Devices,
) -> Optional[int]:
    """Execute a single decoded instruction.

    Returns:
        New PC value if the instruction transfers control, None otherwise
    """
    executor = INSTRUCTION_EXECUTORS.get(instr.mnemonic)
    if executor is None:
        raise ValueError(f"No executor for mnemonic: {instr.mnemonic}")
    return executor(instr, cpu, mem, dev)
