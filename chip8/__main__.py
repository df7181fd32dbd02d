"""Command line entry point: run a ROM headless and print the screen."""

import argparse
import logging
import sys
from pathlib import Path
from typing import Optional

from .runner import run_rom, RunOptions


def _key(value: str) -> int:
    key = int(value, 16)
    if not 0 <= key <= 0xF:
        raise argparse.ArgumentTypeError(f"key must be 0-F, got {value}")
    return key


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="chip8", description="Run a CHIP-8 ROM headless")
    parser.add_argument("rom", help="input rom file")
    parser.add_argument("-n", "--cycles", type=int, default=1000, help="maximum cycles to run")
    parser.add_argument("-s", "--seed", type=int, default=None, help="seed for the RND instruction")
    parser.add_argument("-k", "--key", type=_key, action="append", default=[],
                        help="hex key (0-F) held down for the whole run, repeatable")
    parser.add_argument("--extended", action="store_true",
                        help="accept 8xy7, Bnnn, Ex9E and Fx0A")
    parser.add_argument("--no-idle-stop", action="store_true",
                        help="keep running after a jump-to-self loop")
    parser.add_argument("-v", "--verbose", action="store_true", help="debug logging")
    return parser


def main(argv: Optional[list[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="[%(levelname)s] %(name)s: %(message)s",
    )

    try:
        rom = Path(args.rom).read_bytes()
    except OSError as e:
        print(f"error: ROMReadError: cannot read {args.rom}: {e}", file=sys.stderr)
        return 2

    options = RunOptions(
        max_cycles=args.cycles,
        seed=args.seed,
        extended=args.extended,
        keys=args.key,
        stop_on_idle_loop=not args.no_idle_stop,
    )
    result = run_rom(rom, options)

    print("\n".join(result.screen))
    state = result.final_state
    print(" ".join(f"V{i:X}={v:02X}" for i, v in enumerate(state["v"])))
    print(f"I={state['index']:04X} PC={state['pc']:04X} SP={state['sp']} "
          f"DT={state['delay_timer']} ST={state['sound_timer']} cycles={result.cycles_executed}")

    if result.error is not None:
        print(f"error: {result.error.type}: {result.error.message}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
