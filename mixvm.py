#!/usr/bin/env python3
"""
mixvm — MIX Virtual Machine runner

Usage:
    python mixvm.py <program.mix> [--set ADDR=VALUE ...] [--dump START:END]
                                  [--max-steps N] [--memory-size N]
                                  [--break ADDR ...] [--trace] [--json] [-v|-q]

The program file holds machine words (opcode, operand, ...) separated by
whitespace or commas; '#' starts a comment.

Exit status:
    0  HALT
    1  machine error, or unreadable / malformed program
    2  internal error
    3  step budget exhausted
    4  breakpoint hit

Examples:
    python mixvm.py copy.mix --set 10=123 --dump 10:12
    python mixvm.py loop.mix --max-steps 500 --trace
    python mixvm.py add.mix --set 10=5 --set 11=7 --json
"""

import argparse
import json
import logging
import sys
from pathlib import Path

from mix_vm import __version__, MixEmulator, StopReason, MixError, ProgramFormatError
from mix_vm.mem.memory import MEMORY_SIZE

log = logging.getLogger('mixvm')

DEFAULT_MAX_STEPS = 1_000_000

EXIT_CODES = {
    StopReason.HALT: 0,
    StopReason.TIMEOUT: 3,
    StopReason.BREAK: 4,
}


def parse_int_arg(value: str) -> int:
    """Parse an integer argument that may be hex (0x...), $ prefix, or decimal."""
    value = value.strip()
    if value.startswith("0x") or value.startswith("0X"):
        return int(value, 16)
    if value.startswith("$"):
        return int(value[1:], 16)
    return int(value)


def non_negative_int(value: str) -> int:
    """argparse type for counts where 0 means unlimited."""
    try:
        count = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"not an integer: {value!r}") from None
    if count < 0:
        raise argparse.ArgumentTypeError(f"must not be negative, got {count}")
    return count


def parse_assignment(value: str):
    """ADDR=VALUE → (addr, value)."""
    addr, sep, word = value.partition("=")
    if not sep:
        raise argparse.ArgumentTypeError(f"expected ADDR=VALUE, got {value!r}")
    try:
        return parse_int_arg(addr), parse_int_arg(word)
    except ValueError:
        raise argparse.ArgumentTypeError(f"bad number in {value!r}") from None


def parse_range(value: str):
    """START:END (inclusive) → (start, end)."""
    start, sep, end = value.partition(":")
    try:
        start = parse_int_arg(start)
        end = parse_int_arg(end) if sep else start
    except ValueError:
        raise argparse.ArgumentTypeError(f"bad range {value!r}") from None
    if end < start:
        raise argparse.ArgumentTypeError(f"range end before start: {value!r}")
    return start, end


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="mixvm",
        description="Run a MIX word program to HALT",
    )
    parser.add_argument("program", help="Program word file")
    parser.add_argument("--set", dest="data", action="append", default=[],
                        type=parse_assignment, metavar="ADDR=VALUE",
                        help="Poke a memory cell after loading (repeatable)")
    parser.add_argument("--dump", type=parse_range, metavar="START:END",
                        help="Dump memory cells START..END after the run")
    parser.add_argument("--max-steps", type=non_negative_int, default=DEFAULT_MAX_STEPS,
                        help=f"Step budget, 0 for unlimited (default: {DEFAULT_MAX_STEPS})")
    parser.add_argument("--memory-size", type=int, default=MEMORY_SIZE,
                        help=f"Memory size in words (default: {MEMORY_SIZE})")
    parser.add_argument("--break", dest="breakpoints", action="append", default=[],
                        type=parse_int_arg, metavar="ADDR",
                        help="Stop before executing at ADDR (repeatable)")
    parser.add_argument("--trace", action="store_true",
                        help="Print the instruction trace after the run")
    parser.add_argument("--json", action="store_true",
                        help="Print final state as JSON")
    parser.add_argument("--verbose", "-v", action="store_true",
                        help="Log every executed instruction")
    parser.add_argument("--quiet", "-q", action="store_true",
                        help="Only log errors")
    parser.add_argument("--version", action="version",
                        version=f"mixvm {__version__}")
    return parser


def _state_dict(emu: MixEmulator, reason, dump_range) -> dict:
    snap = emu.state.snapshot()
    result = {
        "stop": reason.value if reason is not None else "ERROR",
        "steps": emu.steps,
        "registers": {
            "A": snap.A,
            "X": snap.X,
            "I": list(snap.I),
            "comparison": snap.comparison,
            "location": snap.location,
        },
    }
    if dump_range:
        start, end = dump_range
        result["memory"] = {str(addr): emu.state.read(addr)
                            for addr in range(start, end + 1)}
    return result


def main(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.quiet:
        level = logging.ERROR
    elif args.verbose:
        level = logging.DEBUG
    else:
        level = logging.INFO
    logging.basicConfig(
        level=level,
        format='%(asctime)s [%(levelname)s] %(message)s',
        datefmt='%H:%M:%S',
    )

    if args.memory_size <= 0:
        parser.error("--memory-size must be positive")
    if args.dump and not (0 <= args.dump[0] and args.dump[1] < args.memory_size):
        parser.error(f"--dump range outside 0..{args.memory_size - 1}")

    emu = MixEmulator(memory_size=args.memory_size)
    emu.enable_trace(args.trace)
    for addr in args.breakpoints:
        emu.add_breakpoint(addr)

    reason = None
    try:
        emu.load_program(Path(args.program))
        for addr, value in args.data:
            emu.state.write(addr, value)
        reason = emu.run(max_steps=args.max_steps or None)
        status = EXIT_CODES[reason]
    except OSError as e:
        print(f"Error reading {args.program}: {e}", file=sys.stderr)
        return 1
    except ProgramFormatError as e:
        print(f"Program format error: {e}", file=sys.stderr)
        return 1
    except MixError as e:
        where = f" at {e.address:04}" if e.address is not None else ""
        print(f"Machine error: {e.kind.value}{where}: {e}", file=sys.stderr)
        status = 1
    except Exception as e:
        print(f"Internal error: {e}", file=sys.stderr)
        if args.verbose:
            import traceback
            traceback.print_exc()
        return 2

    if args.trace:
        print(emu.get_trace())

    if args.json:
        print(json.dumps(_state_dict(emu, reason, args.dump), indent=2))
    else:
        if reason is not None:
            print(f"Stopped: {reason.value} after {emu.steps} steps")
        print(emu.state.regs.display())
        if args.dump:
            start, end = args.dump
            print("Memory:")
            print(emu.state.mem.dump(start, end - start + 1))

    return status


if __name__ == "__main__":
    sys.exit(main())
