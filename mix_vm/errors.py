"""
MIX Virtual Machine — Error Taxonomy

Every fault the machine can raise is a MixError subclass bound to one
ErrorKind. Callers branch on the class (or on err.kind); the message text
is for humans only.

  OutOfRange       memory / program-counter address outside [0, size)
  IndexOutOfRange  index-register selector outside [0, 6)
  DivideByZero     DIV operand cell holds 0
  ProgramTooLarge  load_program() given more words than memory holds
  UnknownOpcode    fetched word is not a defined opcode

All of them are raised before any state is touched, so a caught error
leaves the machine exactly as it was before the failing operation.
"""

from enum import Enum
from typing import Optional

__all__ = [
    'ErrorKind', 'MixError', 'OutOfRange', 'IndexOutOfRange',
    'DivideByZero', 'ProgramTooLarge', 'UnknownOpcode',
]


class ErrorKind(Enum):
    OUT_OF_RANGE = 'OutOfRange'
    INDEX_OUT_OF_RANGE = 'IndexOutOfRange'
    DIVIDE_BY_ZERO = 'DivideByZero'
    PROGRAM_TOO_LARGE = 'ProgramTooLarge'
    UNKNOWN_OPCODE = 'UnknownOpcode'


class MixError(Exception):
    """Base for all machine faults."""

    kind: ErrorKind = None

    def __init__(self, message: str, address: Optional[int] = None,
                 opcode: Optional[int] = None, value: Optional[int] = None):
        self.address = address
        self.opcode = opcode
        self.value = value
        super().__init__(message)


class OutOfRange(MixError):
    kind = ErrorKind.OUT_OF_RANGE


class IndexOutOfRange(MixError):
    kind = ErrorKind.INDEX_OUT_OF_RANGE


class DivideByZero(MixError):
    kind = ErrorKind.DIVIDE_BY_ZERO


class ProgramTooLarge(MixError):
    """`value` carries the rejected program length."""
    kind = ErrorKind.PROGRAM_TOO_LARGE


class UnknownOpcode(MixError):
    """`opcode` is the fetched word, `address` where it was fetched from."""
    kind = ErrorKind.UNKNOWN_OPCODE
