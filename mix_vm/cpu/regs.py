"""
MIX Virtual Machine — CPU Register Set

Register model:
  A           — accumulator, target of LDA/STA/ADD/SUB/DIV
  X           — extension register (held in state, no instruction uses it)
  I1..I6      — index registers (held in state, direct addressing only)
  comparison  — signed result of the last CMP (A - M)
  location    — program counter, index of the next word to fetch

All registers hold signed 32-bit words. Writes wrap into range the same
way the arithmetic does (two's complement), so a register can never hold
a value memory could not.
"""

from typing import List

from ..errors import IndexOutOfRange

WORD_BITS = 32
WORD_MIN = -(1 << (WORD_BITS - 1))
WORD_MAX = (1 << (WORD_BITS - 1)) - 1
_WORD_MASK = (1 << WORD_BITS) - 1

INDEX_REGISTER_COUNT = 6


def to_word(value: int) -> int:
    """Wrap an arbitrary int into a signed 32-bit word."""
    value &= _WORD_MASK
    if value > WORD_MAX:
        value -= 1 << WORD_BITS
    return value


class Registers:
    """MIX register file."""

    __slots__ = ('A', 'X', 'I', 'comparison', 'location')

    def __init__(self):
        self.A: int = 0              # Accumulator
        self.X: int = 0              # Extension
        self.I: List[int] = [0] * INDEX_REGISTER_COUNT
        self.comparison: int = 0     # Last CMP result
        self.location: int = 0       # Program counter

    # --- Index registers ---

    @staticmethod
    def _check_index(index: int):
        if not 0 <= index < INDEX_REGISTER_COUNT:
            raise IndexOutOfRange(
                f"Index register selector {index} outside 0..{INDEX_REGISTER_COUNT - 1}",
                address=index)

    def read_index(self, index: int) -> int:
        """Read index register by 0-based selector (0 → I1)."""
        self._check_index(index)
        return self.I[index]

    def write_index(self, index: int, value: int):
        self._check_index(index)
        self.I[index] = to_word(value)

    # --- Sign tests used by the conditional jumps ---

    @property
    def zero(self) -> bool:
        return self.A == 0

    @property
    def negative(self) -> bool:
        return self.A < 0

    # --- Display ---

    def display(self) -> str:
        """Format register state for dumps."""
        lines = [
            "Registers:",
            f"A: {self.A:05}",
            f"X: {self.X:05}",
            f"Comparison: {self.comparison}",
            f"Location: {self.location}",
        ]
        for i, value in enumerate(self.I):
            lines.append(f"I{i + 1}: {value:05}")
        return '\n'.join(lines)

    def summary(self) -> str:
        """One-line register state for trace output."""
        return (f"A={self.A} X={self.X} CMP={self.comparison} "
                f"LOC={self.location:04}")

    def reset(self):
        """Zero every register."""
        self.A = 0
        self.X = 0
        self.I = [0] * INDEX_REGISTER_COUNT
        self.comparison = 0
        self.location = 0
