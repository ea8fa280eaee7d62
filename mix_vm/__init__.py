"""
MIX Virtual Machine
===================
A word-oriented virtual machine in the spirit of Knuth's MIX: a 32-bit
accumulator, an extension register, six index registers, a comparison
flag, a program counter and 4000 words of bounds-checked memory, driven
by ten opcodes.

Architecture:
    ┌────────────┐    ┌──────────────┐    ┌─────────────┐    ┌────────────┐
    │ word file  │───>│ MachineState │<───│ MixEmulator │───>│  cpu.alu   │
    │  / [ints]  │    │  regs + mem  │    │ step / run  │    │  handlers  │
    └────────────┘    └──────────────┘    └─────────────┘    └────────────┘

    - errors.py:       ErrorKind enum + MixError family
    - cpu/regs.py:     register file, 32-bit word wrapping
    - mem/memory.py:   4000-word memory, word-file parser, dump
    - machine.py:      MachineState (the only owner of regs + memory)
    - cpu/decoder.py:  Opcode enum, Instruction record
    - cpu/alu.py:      word arithmetic + one handler per opcode
    - emu.py:          fetch/decode/execute loop, breakpoints, trace
"""

__version__ = "0.1.0"

from .errors import (ErrorKind, MixError, OutOfRange, IndexOutOfRange,
                     DivideByZero, ProgramTooLarge, UnknownOpcode)
from .machine import MachineState, RegisterSnapshot
from .mem.memory import MEMORY_SIZE, Memory, ProgramFormatError, parse_words
from .cpu.regs import Registers, WORD_BITS, WORD_MIN, WORD_MAX, to_word
from .cpu.decoder import Opcode, Instruction
from .emu import MixEmulator, StopReason


def run_program(words, *, memory_size: int = MEMORY_SIZE, data=None,
                max_steps: int = None) -> MixEmulator:
    """Load words at address 0, poke optional {addr: value} data, run.

    Returns the emulator so callers can inspect the final state. Machine
    errors propagate.
    """
    emu = MixEmulator(memory_size=memory_size)
    emu.load_program(words)
    for addr, value in (data or {}).items():
        emu.state.write(addr, value)
    emu.run(max_steps=max_steps)
    return emu
