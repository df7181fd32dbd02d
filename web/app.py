"""FastAPI web adapter for the CHIP-8 virtual machine."""

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field
from typing import Optional
import base64
import binascii
import logging

from chip8 import run_rom, RunOptions
from chip8.memory import MAX_ROM_SIZE

logger = logging.getLogger(__name__)


# Constants
MAX_CYCLES = 1_000_000


# Request/Response models
class RunOptionsModel(BaseModel):
    max_cycles: int = Field(default=1000, ge=1, le=MAX_CYCLES)
    seed: Optional[int] = None
    extended: bool = False
    keys: list[int] = Field(default_factory=list)
    stop_on_idle_loop: bool = True
    trace: bool = False
    trace_watch: list[int] = Field(default_factory=list)
    trace_include_index: bool = False
    trace_include_timers: bool = False


class RunRequest(BaseModel):
    rom_base64: str
    options: Optional[RunOptionsModel] = None


class ErrorResponse(BaseModel):
    type: str
    message: str
    step: int
    addr: int
    opcode: Optional[int] = None


class FinalState(BaseModel):
    v: list[int]
    index: int
    pc: int
    sp: int
    stack: list[int]
    delay_timer: int
    sound_timer: int
    keypad: list[int]
    halted: bool


class RunResponse(BaseModel):
    status: str
    cycles_executed: int
    final_state: FinalState
    screen: list[str]
    sound_active: bool
    trace_watch: list[int]
    trace: list[dict]
    error: Optional[ErrorResponse] = None


# Create FastAPI app
app = FastAPI(
    title="CHIP-8 Virtual Machine",
    description="Web API for running CHIP-8 ROMs headless with tracing",
    version="0.1.0",
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.post("/api/run", response_model=RunResponse)
def run_code(request: RunRequest):
    """Run a CHIP-8 ROM.

    Args:
        request: Base64 ROM bytes and execution options

    Returns:
        Execution result with final state, screen and trace
    """
    try:
        rom = base64.b64decode(request.rom_base64, validate=True)
    except (binascii.Error, ValueError):
        raise HTTPException(status_code=400, detail="rom_base64 is not valid base64")

    # Validate ROM size
    if len(rom) > MAX_ROM_SIZE:
        raise HTTPException(
            status_code=400,
            detail=f"ROM size exceeds limit of {MAX_ROM_SIZE} bytes",
        )

    opts = request.options or RunOptionsModel()
    for key in opts.keys:
        if not 0 <= key <= 0xF:
            raise HTTPException(status_code=400, detail=f"Invalid key: {key}")

    run_opts = RunOptions(
        max_cycles=opts.max_cycles,
        seed=opts.seed,
        extended=opts.extended,
        keys=opts.keys,
        stop_on_idle_loop=opts.stop_on_idle_loop,
        trace=opts.trace,
        trace_watch=opts.trace_watch,
        trace_include_index=opts.trace_include_index,
        trace_include_timers=opts.trace_include_timers,
    )

    # Execute ROM on a fresh machine
    result = run_rom(rom, options=run_opts)
    if result.error is not None:
        logger.info("ROM stopped with %s after %d cycles", result.error.type, result.cycles_executed)

    return result.to_dict()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8080)
