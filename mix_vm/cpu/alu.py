"""
MIX Virtual Machine — ALU Operations + Instruction Handlers

Word arithmetic is 32-bit two's complement: every result wraps into
[WORD_MIN, WORD_MAX]. Division truncates toward zero (-7 / 2 == -3), not
toward negative infinity as Python's // does, and WORD_MIN / -1 wraps
back to WORD_MIN.

Each handler has the signature

    handler(state, address) -> bool

and returns True only when it has set the program counter itself. Every
handler reads and checks all of its inputs before writing anything, so
a handler that raises leaves the machine unchanged.
"""

from typing import Callable, Dict

from .regs import to_word
from .decoder import Opcode
from ..errors import DivideByZero


# ══════════════════════════════════════════════
# Word arithmetic
# ══════════════════════════════════════════════

def add_word(a: int, b: int) -> int:
    return to_word(a + b)


def sub_word(a: int, b: int) -> int:
    return to_word(a - b)


def div_word(a: int, b: int) -> int:
    """Truncating division. Caller guarantees b != 0."""
    q = abs(a) // abs(b)
    if (a < 0) != (b < 0):
        q = -q
    return to_word(q)


# ══════════════════════════════════════════════
# Instruction handlers
# ══════════════════════════════════════════════

def op_hlt(state, address) -> bool:
    # HLT never reaches dispatch; the loop stops on it first.
    return False


def op_lda(state, address: int) -> bool:
    state.regs.A = state.read(address)
    return False


def op_sta(state, address: int) -> bool:
    state.write(address, state.regs.A)
    return False


def op_add(state, address: int) -> bool:
    value = state.read(address)
    state.regs.A = add_word(state.regs.A, value)
    return False


def op_sub(state, address: int) -> bool:
    value = state.read(address)
    state.regs.A = sub_word(state.regs.A, value)
    return False


def op_div(state, address: int) -> bool:
    value = state.read(address)
    if value == 0:
        raise DivideByZero(f"Division by zero (cell {address:04} holds 0)",
                           address=address)
    state.regs.A = div_word(state.regs.A, value)
    return False


def op_jmp(state, address: int) -> bool:
    state.set_program_counter(address)
    return True


def op_jz(state, address: int) -> bool:
    if state.regs.zero:
        state.set_program_counter(address)
        return True
    return False


def op_jl(state, address: int) -> bool:
    if state.regs.negative:
        state.set_program_counter(address)
        return True
    return False


def op_cmp(state, address: int) -> bool:
    value = state.read(address)
    state.set_comparison(sub_word(state.regs.A, value))
    return False


HANDLERS: Dict[Opcode, Callable] = {
    Opcode.HLT: op_hlt,
    Opcode.LDA: op_lda,
    Opcode.STA: op_sta,
    Opcode.ADD: op_add,
    Opcode.SUB: op_sub,
    Opcode.DIV: op_div,
    Opcode.JMP: op_jmp,
    Opcode.JZ:  op_jz,
    Opcode.JL:  op_jl,
    Opcode.CMP: op_cmp,
}

# Adding an Opcode without a handler must fail at import, not at run time
_missing = set(Opcode) - set(HANDLERS)
if _missing:
    raise ImportError(f"No handler for opcodes: {sorted(op.name for op in _missing)}")
del _missing


def execute(state, opcode: Opcode, address: int) -> bool:
    """Run one instruction's semantics. Returns True if PC was redirected."""
    return HANDLERS[opcode](state, address)
