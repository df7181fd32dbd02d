"""Headless ROM runner with tracing for the CHIP-8 virtual machine."""

import logging
from dataclasses import dataclass, field
from typing import Optional

from .errors import Chip8Error, ErrorInfo
from .machine import Chip8

logger = logging.getLogger(__name__)


@dataclass
class RunOptions:
    """Options for ROM execution."""
    max_cycles: int = 1000
    seed: Optional[int] = None
    extended: bool = False
    keys: list[int] = field(default_factory=list)
    stop_on_idle_loop: bool = True
    trace: bool = False
    trace_watch: list[int] = field(default_factory=list)
    trace_include_index: bool = False
    trace_include_timers: bool = False


@dataclass
class TraceRow:
    """State after a single cycle."""
    cycle: int
    addr: int
    opcode: int
    mnemonic: str
    v: list[int]
    mem: dict[str, int]
    index: Optional[int] = None
    delay_timer: Optional[int] = None
    sound_timer: Optional[int] = None

    def to_dict(self, include_index: bool, include_timers: bool) -> dict:
        result = {
            "cycle": self.cycle,
            "addr": self.addr,
            "opcode": self.opcode,
            "mnemonic": self.mnemonic,
            "v": self.v,
            "mem": self.mem,
        }
        if include_index:
            result["index"] = self.index
        if include_timers:
            result["delay_timer"] = self.delay_timer
            result["sound_timer"] = self.sound_timer
        return result


@dataclass
class RunResult:
    """Result of ROM execution."""
    status: str  # "ok" | "error"
    cycles_executed: int
    final_state: dict
    screen: list[str]
    sound_active: bool
    trace_watch: list[int]
    trace: list[dict]
    error: Optional[ErrorInfo] = None

    def to_dict(self) -> dict:
        result = {
            "status": self.status,
            "cycles_executed": self.cycles_executed,
            "final_state": self.final_state,
            "screen": self.screen,
            "sound_active": self.sound_active,
            "trace_watch": self.trace_watch,
            "trace": self.trace,
        }
        if self.error:
            result["error"] = self.error.to_dict()
        return result


def _is_idle_loop(machine: Chip8, addr: int) -> bool:
    """True if the last instruction was a jump to its own address."""
    instr = machine.last_instruction
    return instr is not None and instr.mnemonic == "JP" and instr.nnn == addr


def run_rom(rom: bytes, options: Optional[RunOptions] = None) -> RunResult:
    """Load a ROM and run it for a bounded number of cycles.

    Args:
        rom: Raw program bytes, loaded at 0x200
        options: Execution options

    Returns:
        RunResult with execution status, final state, screen and trace
    """
    if options is None:
        options = RunOptions()

    trace_rows: list[dict] = []
    error_info: Optional[ErrorInfo] = None
    cycles_executed = 0

    machine = Chip8(seed=options.seed, extended=options.extended)

    try:
        machine.load(rom)
        for key in options.keys:
            machine.set_key(key, True)

        while cycles_executed < options.max_cycles:
            addr = machine.pc
            machine.cycle()
            cycles_executed += 1

            instr = machine.last_instruction
            if options.trace and instr is not None:
                row = TraceRow(
                    cycle=cycles_executed,
                    addr=addr,
                    opcode=instr.opcode,
                    mnemonic=instr.mnemonic,
                    v=list(machine.registers),
                    mem=machine.memory.get_watched(options.trace_watch),
                    index=machine.index if options.trace_include_index else None,
                    delay_timer=machine.delay_timer if options.trace_include_timers else None,
                    sound_timer=machine.sound_timer if options.trace_include_timers else None,
                )
                trace_rows.append(row.to_dict(
                    include_index=options.trace_include_index,
                    include_timers=options.trace_include_timers,
                ))

            if options.stop_on_idle_loop and _is_idle_loop(machine, addr):
                logger.debug("Idle loop at %#05x after %d cycles", addr, cycles_executed)
                break

    except Chip8Error as e:
        # Attach context to error
        e.step = cycles_executed
        logger.error("%s at cycle %d: %s", e.__class__.__name__, e.step, e.message)
        error_info = e.to_error_info()

    return RunResult(
        status="ok" if error_info is None else "error",
        cycles_executed=cycles_executed,
        final_state=machine.get_state(),
        screen=machine.screen.to_text().split("\n"),
        sound_active=machine.sound_active,
        trace_watch=options.trace_watch,
        trace=trace_rows,
        error=error_info,
    )
