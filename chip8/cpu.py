"""CPU state model for the CHIP-8 virtual machine."""

from .errors import InvalidKey, StackOverflow, StackUnderflow
from .memory import PROGRAM_START

NUM_REGISTERS = 16
STACK_DEPTH = 16
NUM_KEYS = 16
FLAG = 0xF


class CPU:
    """Registers, call stack, timers and keypad state."""

    def __init__(self, start_address: int = PROGRAM_START):
        self.start_address = start_address
        self.reset()

    def reset(self) -> None:
        """Return CPU to power-on state."""
        self.v: list[int] = [0] * NUM_REGISTERS
        self.index: int = 0
        self.pc: int = self.start_address
        self.stack: list[int] = [0] * STACK_DEPTH
        self.sp: int = 0
        self.delay_timer: int = 0
        self.sound_timer: int = 0
        self.keypad: list[int] = [0] * NUM_KEYS
        self.halted: bool = False

    def set_reg(self, reg: int, value: int) -> None:
        """Set Vx, truncated to 8 bits."""
        self.v[reg] = value & 0xFF

    def set_flag(self, value: int) -> None:
        """Set VF."""
        self.v[FLAG] = value & 0xFF

    def set_index(self, value: int) -> None:
        """Set I, truncated to 16 bits."""
        self.index = value & 0xFFFF

    def push(self, addr: int) -> None:
        """Store a return address and advance SP."""
        if self.sp >= STACK_DEPTH:
            raise StackOverflow(f"Stack overflow: {STACK_DEPTH} frames in use")
        self.stack[self.sp] = addr
        self.sp += 1

    def pop(self) -> int:
        """Drop SP and return the address stored there."""
        if self.sp == 0:
            raise StackUnderflow("Return with empty stack")
        self.sp -= 1
        return self.stack[self.sp]

    def tick_timers(self) -> None:
        """Decrement each nonzero timer by one."""
        if self.delay_timer > 0:
            self.delay_timer -= 1
        if self.sound_timer > 0:
            self.sound_timer -= 1

    def set_key(self, key: int, pressed) -> None:
        """Record key press state; any truthy value counts as pressed."""
        if key < 0 or key >= NUM_KEYS:
            raise InvalidKey(f"Key index out of range: {key}")
        self.keypad[key] = 1 if pressed else 0

    def is_pressed(self, key: int) -> bool:
        if key < 0 or key >= NUM_KEYS:
            raise InvalidKey(f"Key index out of range: {key}")
        return self.keypad[key] != 0

    def get_state(self) -> dict:
        """Get current register state as dictionary."""
        return {
            "v": list(self.v),
            "index": self.index,
            "pc": self.pc,
            "sp": self.sp,
            "stack": list(self.stack[:self.sp]),
            "delay_timer": self.delay_timer,
            "sound_timer": self.sound_timer,
        }
