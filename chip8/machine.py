"""The CHIP-8 machine: owns all state and drives the fetch-decode-execute cycle."""

import logging
import random
from pathlib import Path
from typing import Optional, Union

from .cpu import CPU
from .decoder import Instruction, decode
from .display import Framebuffer
from .errors import Chip8RuntimeError, MachineHalted, ROMReadError
from .instructions import Devices, execute_instruction
from .memory import Memory, PROGRAM_START

logger = logging.getLogger(__name__)


class Chip8:
    """A single CHIP-8 virtual machine.

    The host calls `cycle()` in its own loop; each call executes exactly one
    instruction and decrements both timers once. Keys are written with
    `set_key()` and the screen is read back with `get_pixel_at()`.

    Args:
        rng: Random source for the RND instruction
        seed: Seed for a fresh random source when `rng` is not given
        extended: Also accept the standard 8xy7, Bnnn, Ex9E and Fx0A opcodes
    """

    def __init__(
        self,
        rng: Optional[random.Random] = None,
        seed: Optional[int] = None,
        extended: bool = False,
    ):
        self.extended = extended
        self.cpu = CPU(start_address=PROGRAM_START)
        self.memory = Memory()
        self.devices = Devices(Framebuffer(), rng if rng is not None else random.Random(seed))
        self.last_instruction: Optional[Instruction] = None

    @property
    def screen(self) -> Framebuffer:
        return self.devices.screen

    @property
    def registers(self) -> list[int]:
        return self.cpu.v

    @property
    def index(self) -> int:
        return self.cpu.index

    @property
    def pc(self) -> int:
        return self.cpu.pc

    @property
    def sp(self) -> int:
        return self.cpu.sp

    @property
    def halted(self) -> bool:
        return self.cpu.halted

    @property
    def delay_timer(self) -> int:
        return self.cpu.delay_timer

    @delay_timer.setter
    def delay_timer(self, value: int) -> None:
        self.cpu.delay_timer = value & 0xFF

    @property
    def sound_timer(self) -> int:
        return self.cpu.sound_timer

    @sound_timer.setter
    def sound_timer(self, value: int) -> None:
        self.cpu.sound_timer = value & 0xFF

    @property
    def sound_active(self) -> bool:
        """True while the host should be playing a tone."""
        return self.cpu.sound_timer > 0

    def seed(self, value: int) -> None:
        """Reseed the random source used by RND."""
        self.devices.rng.seed(value)

    def reset(self) -> None:
        """Return to power-on state. The random source is kept."""
        self.cpu.reset()
        self.memory.clear()
        self.screen.clear()
        self.last_instruction = None

    def load(self, data: bytes) -> int:
        """Copy program bytes into memory at 0x200.

        Raises:
            ROMTooLarge: If the program does not fit in memory
        """
        return self.memory.load(data, start=PROGRAM_START)

    def load_rom(self, path: Union[str, Path]) -> int:
        """Read a ROM file and load it at 0x200."""
        try:
            data = Path(path).read_bytes()
        except OSError as e:
            raise ROMReadError(f"Cannot read ROM {path}: {e}") from e
        logger.debug("Read ROM %s (%d bytes)", path, len(data))
        return self.load(data)

    def set_key(self, index: int, pressed) -> None:
        """Set key `index` (0x0-0xF) to pressed or released."""
        self.cpu.set_key(index, pressed)

    def get_pixel_at(self, row: int, col: int) -> int:
        """Return pixel byte at (row + col*64) mod 2048."""
        return self.screen.get_pixel_at(row, col)

    def cycle(self) -> None:
        """Execute one instruction, then tick both timers.

        Raises:
            MachineHalted: If an earlier cycle failed
            Chip8RuntimeError: On decode or bounds failures; the machine halts
        """
        if self.cpu.halted:
            raise MachineHalted("Machine halted after a fatal error", addr=self.cpu.pc)

        addr = self.cpu.pc
        opcode = None
        try:
            # Fetch
            opcode = self.memory.read_word(addr)
            self.cpu.pc = addr + 2

            # Decode
            instr = decode(opcode, addr=addr, extended=self.extended)
            self.last_instruction = instr

            # Execute
            new_pc = execute_instruction(instr, self.cpu, self.memory, self.devices)
            if new_pc is not None:
                self.cpu.pc = new_pc
        except Chip8RuntimeError as e:
            self.cpu.halted = True
            e.addr = addr
            if e.opcode is None:
                e.opcode = opcode
            raise

        self.cpu.tick_timers()

    def get_state(self) -> dict:
        """Get register, timer and keypad state as a dictionary."""
        state = self.cpu.get_state()
        state["keypad"] = list(self.cpu.keypad)
        state["halted"] = self.cpu.halted
        return state
