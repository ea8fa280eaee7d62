"""
MIX Virtual Machine — Main Emulator Class

Integrates:
  - Machine state (machine.py: registers + memory)
  - Opcode decoder (cpu/decoder.py)
  - Instruction handlers (cpu/alu.py)

Execution model (one step):
  1. Fetch opcode word at PC            → OutOfRange if PC is off the end
  2. Decode to Opcode                   → UnknownOpcode, nothing changed
  3. HLT: PC += 1, report HALT
  4. Fetch operand word at PC + 1       → OutOfRange
  5. Execute handler with operand as a direct address
  6. PC += 2 unless the handler jumped

A step that raises leaves PC and every register as they were. run()
never catches a MixError: the first one ends the run and reaches the
caller unchanged.

Stop reasons returned by run():
  - HALT:     HLT executed
  - TIMEOUT:  caller's max_steps budget used up
  - BREAK:    breakpoint address reached (instruction not yet executed)
"""

import logging
from enum import Enum
from pathlib import Path
from typing import Iterable, List, Optional, Set, Union

from .machine import MachineState
from .mem.memory import MEMORY_SIZE, ProgramFormatError, parse_words
from .cpu.decoder import Instruction, decode_opcode
from .cpu import alu

log = logging.getLogger('mix_vm.emu')


class StopReason(Enum):
    HALT = 'HALT'
    TIMEOUT = 'TIMEOUT'
    BREAK = 'BREAK'


class MixEmulator:
    """MIX virtual machine.

    Usage:
        emu = MixEmulator()
        emu.load_program([1, 10, 2, 12, 0])
        emu.state.write(10, 123)
        reason = emu.run()          # StopReason.HALT
        emu.state.read(12)          # 123
    """

    def __init__(self, state: Optional[MachineState] = None,
                 memory_size: int = MEMORY_SIZE):
        self.state = state if state is not None else MachineState(memory_size)

        self.halted = False
        self.steps = 0

        self._breakpoints: Set[int] = set()
        self._resume_from: Optional[int] = None

        self._trace = False
        self._trace_output: List[str] = []

    # ══════════════════════════════════════════════
    # Loading
    # ══════════════════════════════════════════════

    def load_program(self, program: Union[str, Path, Iterable[int]]):
        """Load a program at address 0.

        Accepts a list of words, a Path to a word file, or word-file text.
        """
        if isinstance(program, Path):
            try:
                text = program.read_text(encoding="utf-8")
            except UnicodeDecodeError as e:
                raise ProgramFormatError(
                    f"{program}: not a text word file ({e.reason} at byte {e.start})") from None
            words = parse_words(text)
        elif isinstance(program, str):
            words = parse_words(program)
        else:
            words = list(program)
        self.state.load_program(words)
        log.info("Loaded %d words", len(words))

    # ══════════════════════════════════════════════
    # Execution
    # ══════════════════════════════════════════════

    def step(self) -> Optional[StopReason]:
        """Execute one instruction. Returns HALT when halted, else None."""
        if self.halted:
            return StopReason.HALT

        # Any executed step consumes the resume marker
        self._resume_from = None

        state = self.state
        pc = state.regs.location

        opcode = decode_opcode(state.read(pc), pc)

        if not opcode.has_operand:
            state.regs.location = pc + 1
            self.halted = True
            self.steps += 1
            self._record(pc, Instruction(opcode))
            log.info("HALT at %04d after %d steps", pc, self.steps)
            return StopReason.HALT

        instr = Instruction(opcode, state.read(pc + 1))

        if not alu.execute(state, instr.opcode, instr.address):
            state.regs.location = pc + 2

        self.steps += 1
        self._record(pc, instr)
        return None

    def run(self, max_steps: Optional[int] = None) -> StopReason:
        """Step until HALT, a breakpoint, or max_steps instructions.

        MixError from any step propagates to the caller.
        """
        executed = 0
        while max_steps is None or executed < max_steps:
            pc = self.state.regs.location
            if (pc in self._breakpoints and not self.halted
                    and pc != self._resume_from):
                self._resume_from = pc
                log.info("BREAK at %04d", pc)
                return StopReason.BREAK

            reason = self.step()
            if reason is not None:
                return reason
            executed += 1

        log.warning("Step budget of %d exhausted at %04d",
                    max_steps, self.state.regs.location)
        return StopReason.TIMEOUT

    # ══════════════════════════════════════════════
    # Breakpoint API
    # ══════════════════════════════════════════════

    def add_breakpoint(self, addr: int):
        """Stop run() when PC reaches addr, before executing there."""
        self._breakpoints.add(addr)

    def remove_breakpoint(self, addr: int):
        self._breakpoints.discard(addr)

    def clear_breakpoints(self):
        self._breakpoints.clear()

    # ══════════════════════════════════════════════
    # Trace / Debug
    # ══════════════════════════════════════════════

    def _record(self, pc: int, instr: Instruction):
        if self._trace:
            self._trace_output.append(
                f"{pc:04}: {str(instr):9s} | {self.state.regs.summary()}")
        if log.isEnabledFor(logging.DEBUG):
            log.debug("%04d: %-9s %s", pc, instr, self.state.regs.summary())

    def enable_trace(self, enable: bool = True):
        """Enable instruction trace recording."""
        self._trace = enable

    def get_trace(self) -> str:
        return '\n'.join(self._trace_output)

    def clear_trace(self):
        self._trace_output.clear()

    def reset(self):
        """Full emulator reset: zeroed state, no breakpoints, empty trace."""
        self.state.reset()
        self.halted = False
        self.steps = 0
        self._resume_from = None
        self._breakpoints.clear()
        self._trace_output.clear()
