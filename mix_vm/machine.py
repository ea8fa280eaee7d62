"""
MIX Virtual Machine — Machine State

MachineState owns one register file and one memory and is the only way
the instruction handlers and the execution loop touch either. There is
no module-level machine: every operation takes the state it works on,
so independent machines can run side by side.

Register names accepted by read_register()/write_register():
  'A', 'X', 'I1'..'I6'   (case-insensitive)
"""

from dataclasses import dataclass
from typing import Iterable, Tuple

from .cpu.regs import Registers, to_word
from .mem.memory import Memory, MEMORY_SIZE
from .errors import OutOfRange

__all__ = ['MachineState', 'RegisterSnapshot']


@dataclass(frozen=True)
class RegisterSnapshot:
    """Immutable copy of the register file."""
    A: int
    X: int
    I: Tuple[int, ...]
    comparison: int
    location: int


class MachineState:
    """Registers + memory with bounds-checked accessors."""

    def __init__(self, memory_size: int = MEMORY_SIZE):
        self.regs = Registers()
        self.mem = Memory(memory_size)

    @property
    def memory_size(self) -> int:
        return self.mem.size

    # --- Memory ---

    def read(self, address: int) -> int:
        return self.mem.read(address)

    def write(self, address: int, value: int):
        self.mem.write(address, value)

    def load_program(self, words: Iterable[int]):
        self.mem.load_program(words)

    # --- Registers ---

    def _resolve(self, name: str):
        """Map a register name to 'A', 'X' or a 0-based index selector."""
        key = name.strip().upper()
        if key in ('A', 'X'):
            return key
        if key.startswith('I') and key[1:].isdigit():
            return int(key[1:]) - 1
        raise ValueError(f"Unknown register: {name!r}")

    def read_register(self, name: str) -> int:
        reg = self._resolve(name)
        if reg == 'A':
            return self.regs.A
        if reg == 'X':
            return self.regs.X
        return self.regs.read_index(reg)

    def write_register(self, name: str, value: int):
        reg = self._resolve(name)
        if reg == 'A':
            self.regs.A = to_word(value)
        elif reg == 'X':
            self.regs.X = to_word(value)
        else:
            self.regs.write_index(reg, value)

    def read_index(self, index: int) -> int:
        return self.regs.read_index(index)

    def write_index(self, index: int, value: int):
        self.regs.write_index(index, value)

    def set_program_counter(self, address: int):
        if not 0 <= address < self.mem.size:
            raise OutOfRange(
                f"Program counter {address} outside 0..{self.mem.size - 1}",
                address=address)
        self.regs.location = address

    def set_comparison(self, value: int):
        self.regs.comparison = to_word(value)

    # --- Inspection ---

    @property
    def accumulator(self) -> int:
        return self.regs.A

    @property
    def extension(self) -> int:
        return self.regs.X

    @property
    def index_registers(self) -> Tuple[int, ...]:
        return tuple(self.regs.I)

    @property
    def comparison(self) -> int:
        return self.regs.comparison

    @property
    def program_counter(self) -> int:
        return self.regs.location

    def snapshot(self) -> RegisterSnapshot:
        r = self.regs
        return RegisterSnapshot(r.A, r.X, tuple(r.I), r.comparison, r.location)

    def reset(self):
        self.regs.reset()
        self.mem.clear()
