"""
MIX Virtual Machine — Bounded Word Memory

Memory is a flat list of signed 32-bit words, 4000 cells by default,
every cell zero at power-on. Addresses are checked, never masked: an
access outside [0, size) raises OutOfRange and touches nothing.

Program images are plain sequences of words (opcode, operand, opcode,
operand, ..., 0). parse_words() reads them from the text word-file
format used by the CLI:

    # copy cell 10 to cell 12
    1 10      # LDA 10
    2 12      # STA 12
    0         # HLT

Words are separated by whitespace and/or commas, '#' comments run to end
of line, decimal (optionally signed) and 0x-prefixed hex are accepted.
"""

import re
from typing import Iterable, List, Tuple

from ..cpu.regs import to_word
from ..errors import OutOfRange, ProgramTooLarge

MEMORY_SIZE = 4000

_WORD_RE = re.compile(r'^[+-]?(0[xX][0-9a-fA-F]+|\d+)$')


class ProgramFormatError(ValueError):
    """Raised when a word file contains something that is not a word."""
    def __init__(self, message: str, line_num: int = 0, token: str = ""):
        self.line_num = line_num
        self.token = token
        super().__init__(f"Line {line_num}: {message}" if line_num else message)


def parse_words(text: str) -> List[int]:
    """Parse word-file text into a list of ints."""
    words = []
    for line_num, line in enumerate(text.splitlines(), start=1):
        line = line.split('#', 1)[0]
        for token in line.replace(',', ' ').split():
            if not _WORD_RE.match(token):
                raise ProgramFormatError(f"Not a word: {token!r}", line_num, token)
            words.append(int(token, 0) if 'x' in token.lower() else int(token, 10))
    return words


class Memory:
    """Fixed-size word-addressable memory."""

    def __init__(self, size: int = MEMORY_SIZE):
        if size <= 0:
            raise ValueError(f"Memory size must be positive, got {size}")
        self.size = size
        self._mem: List[int] = [0] * size

    # --- Core read/write ---

    def check_address(self, addr: int):
        """Raise OutOfRange unless 0 <= addr < size."""
        if not 0 <= addr < self.size:
            raise OutOfRange(
                f"Memory address {addr} outside 0..{self.size - 1}", address=addr)

    def read(self, addr: int) -> int:
        self.check_address(addr)
        return self._mem[addr]

    def write(self, addr: int, value: int):
        """Write one word; the value wraps to 32 bits."""
        self.check_address(addr)
        self._mem[addr] = to_word(value)

    # --- Bulk load ---

    def load_program(self, words: Iterable[int]):
        """Write words sequentially from address 0.

        The length is checked before the first write, so an oversized
        program leaves memory untouched.
        """
        words = list(words)
        if len(words) > self.size:
            raise ProgramTooLarge(
                f"Program of {len(words)} words does not fit in {self.size}-word memory",
                value=len(words))
        for addr, word in enumerate(words):
            self._mem[addr] = to_word(word)

    def clear(self):
        self._mem = [0] * self.size

    # --- Snapshots ---

    def snapshot(self, start: int = 0, end: int = None) -> Tuple[int, ...]:
        """Capture memory state (inclusive end, default last cell).

        Both ends are bounds-checked like any other memory read.
        """
        if end is None:
            end = self.size - 1
        self.check_address(start)
        self.check_address(end)
        if end < start:
            raise ValueError(f"Snapshot end {end} before start {start}")
        return tuple(self._mem[start:end + 1])

    # --- Dump ---

    def dump(self, start: int = 0, length: int = None) -> str:
        """Decimal dump, ten words per row, rows labelled by address.

        start must be a valid address; the range is clipped at the end of
        memory.
        """
        self.check_address(start)
        if length is None:
            length = self.size - start
        if length < 0:
            raise ValueError(f"Dump length must not be negative, got {length}")
        end = min(start + length, self.size)
        lines = []
        for row in range(start - start % 10, end, 10):
            cells = ' '.join(f'{self._mem[addr]:05}'
                             for addr in range(max(row, start), min(row + 10, end)))
            lines.append(f'{max(row, start):04}: {cells}')
        return '\n'.join(lines)
