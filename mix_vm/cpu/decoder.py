"""
MIX Virtual Machine — Opcode Decoder

Instruction encoding is fixed: one opcode word, then (for every opcode
except HLT) one operand word holding a direct memory address.

    word[pc]      opcode
    word[pc + 1]  operand address   (absent for HLT)

The instruction set is the closed Opcode enum below. decode_opcode()
turns a fetched word into an Opcode or raises UnknownOpcode; it never
guesses or skips.
"""

from dataclasses import dataclass
from enum import IntEnum
from typing import Optional

from ..errors import UnknownOpcode


class Opcode(IntEnum):
    HLT = 0   # halt
    LDA = 1   # A <- M
    STA = 2   # M <- A
    ADD = 3   # A <- A + M
    SUB = 4   # A <- A - M
    DIV = 5   # A <- A / M  (truncating)
    JMP = 6   # PC <- addr
    JZ = 7    # PC <- addr if A == 0
    JL = 8    # PC <- addr if A < 0
    CMP = 9   # comparison <- A - M

    @property
    def has_operand(self) -> bool:
        return self is not Opcode.HLT


@dataclass(frozen=True)
class Instruction:
    """A decoded instruction: opcode plus operand address (None for HLT)."""
    opcode: Opcode
    address: Optional[int] = None

    def __str__(self) -> str:
        if self.address is None:
            return self.opcode.name
        return f"{self.opcode.name:4s} {self.address:04}"


def decode_opcode(word: int, pc: int) -> Opcode:
    """Map a fetched word to its Opcode.

    Raises UnknownOpcode (carrying the word and its address) when the
    word names no instruction.
    """
    try:
        return Opcode(word)
    except ValueError:
        raise UnknownOpcode(f"Unknown opcode {word} at {pc:04}",
                            address=pc, opcode=word) from None
