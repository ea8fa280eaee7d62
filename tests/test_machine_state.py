"""
MIX Virtual Machine — Machine State Tests

Registers, bounded memory, program loading and the word-file parser.
Nothing here executes instructions; see test_instructions.py and
test_emulator_core.py for that.
"""

import sys
import os
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import pytest

from mix_vm import (MachineState, RegisterSnapshot, Memory, ProgramFormatError,
                    parse_words, OutOfRange, IndexOutOfRange, ProgramTooLarge, ErrorKind,
                    MEMORY_SIZE, WORD_MIN, WORD_MAX, to_word)


# ═══════════════════════════════════════════════
# Creation
# ═══════════════════════════════════════════════

class TestCreate:

    def test_everything_zero(self):
        state = MachineState()
        assert state.accumulator == 0
        assert state.extension == 0
        assert state.index_registers == (0, 0, 0, 0, 0, 0)
        assert state.comparison == 0
        assert state.program_counter == 0
        assert state.memory_size == MEMORY_SIZE == 4000
        assert all(w == 0 for w in state.mem.snapshot())

    def test_instances_are_independent(self):
        a = MachineState()
        b = MachineState()
        a.write(5, 99)
        a.write_register('A', 7)
        assert b.read(5) == 0
        assert b.accumulator == 0


# ═══════════════════════════════════════════════
# Memory access
# ═══════════════════════════════════════════════

class TestMemoryAccess:

    @pytest.mark.parametrize("addr,value", [
        (0, 1), (1, -1), (1999, 123456), (3999, WORD_MAX), (42, WORD_MIN),
    ])
    def test_write_read_round_trip(self, addr, value):
        state = MachineState()
        state.write(addr, value)
        assert state.read(addr) == value

    @pytest.mark.parametrize("addr", [-1, 4000, 4001, 10**6])
    def test_read_out_of_range(self, addr):
        state = MachineState()
        with pytest.raises(OutOfRange) as exc:
            state.read(addr)
        assert exc.value.kind is ErrorKind.OUT_OF_RANGE
        assert exc.value.address == addr

    @pytest.mark.parametrize("addr", [-1, 4000])
    def test_write_out_of_range_mutates_nothing(self, addr):
        state = MachineState()
        before = state.mem.snapshot()
        with pytest.raises(OutOfRange):
            state.write(addr, 77)
        assert state.mem.snapshot() == before

    def test_write_wraps_to_word(self):
        state = MachineState()
        state.write(0, WORD_MAX + 1)
        assert state.read(0) == WORD_MIN
        state.write(1, 1 << 32)
        assert state.read(1) == 0

    def test_small_memory_bounds(self):
        state = MachineState(memory_size=20)
        state.write(19, 1)
        with pytest.raises(OutOfRange):
            state.write(20, 1)

    def test_memory_size_must_be_positive(self):
        with pytest.raises(ValueError):
            Memory(0)


# ═══════════════════════════════════════════════
# Program counter
# ═══════════════════════════════════════════════

class TestProgramCounter:

    def test_set_in_range(self):
        state = MachineState()
        state.set_program_counter(3999)
        assert state.program_counter == 3999

    @pytest.mark.parametrize("addr", [-1, 4000, 5000])
    def test_set_out_of_range_keeps_old_value(self, addr):
        state = MachineState()
        state.set_program_counter(17)
        with pytest.raises(OutOfRange):
            state.set_program_counter(addr)
        assert state.program_counter == 17


# ═══════════════════════════════════════════════
# Registers
# ═══════════════════════════════════════════════

class TestRegisters:

    def test_a_and_x(self):
        state = MachineState()
        state.write_register('A', -5)
        state.write_register('x', 9)
        assert state.read_register('a') == -5
        assert state.read_register('X') == 9
        assert state.accumulator == -5
        assert state.extension == 9

    def test_index_registers_by_name(self):
        state = MachineState()
        for n in range(1, 7):
            state.write_register(f'I{n}', n * 10)
        assert state.index_registers == (10, 20, 30, 40, 50, 60)
        assert state.read_register('I6') == 60
        assert state.read_index(0) == 10

    @pytest.mark.parametrize("name", ['I0', 'I7', 'I99'])
    def test_index_name_out_of_range(self, name):
        state = MachineState()
        with pytest.raises(IndexOutOfRange):
            state.read_register(name)
        with pytest.raises(IndexOutOfRange):
            state.write_register(name, 1)
        assert state.index_registers == (0,) * 6

    @pytest.mark.parametrize("index", [-1, 6, 7])
    def test_index_selector_out_of_range(self, index):
        state = MachineState()
        with pytest.raises(IndexOutOfRange) as exc:
            state.write_index(index, 5)
        assert exc.value.kind is ErrorKind.INDEX_OUT_OF_RANGE
        with pytest.raises(IndexOutOfRange):
            state.read_index(index)
        assert state.index_registers == (0,) * 6

    def test_unknown_register_name(self):
        state = MachineState()
        with pytest.raises(ValueError):
            state.read_register('B')

    def test_register_write_wraps(self):
        state = MachineState()
        state.write_register('A', WORD_MAX + 2)
        assert state.accumulator == WORD_MIN + 1

    def test_snapshot_is_a_copy(self):
        state = MachineState()
        state.write_index(2, 4)
        snap = state.snapshot()
        state.write_index(2, 8)
        assert snap.I[2] == 4
        assert snap.location == 0

    def test_display_format(self):
        state = MachineState()
        state.write_register('A', 123)
        state.write_register('I1', 7)
        text = state.regs.display()
        assert "A: 00123" in text
        assert "X: 00000" in text
        assert "Comparison: 0" in text
        assert "Location: 0" in text
        assert "I1: 00007" in text
        assert "I6: 00000" in text

    def test_reset(self):
        state = MachineState()
        state.write(3, 3)
        state.write_register('A', 3)
        state.set_program_counter(3)
        state.reset()
        assert state.read(3) == 0
        assert state.snapshot() == RegisterSnapshot(0, 0, (0,) * 6, 0, 0)


# ═══════════════════════════════════════════════
# Program loading
# ═══════════════════════════════════════════════

class TestLoadProgram:

    def test_words_land_at_matching_index(self):
        state = MachineState()
        state.load_program([1, 10, 2, 12, 0])
        assert [state.read(i) for i in range(5)] == [1, 10, 2, 12, 0]

    def test_full_memory_fits(self):
        state = MachineState()
        words = list(range(4000))
        state.load_program(words)
        assert state.read(0) == 0
        assert state.read(3999) == 3999
        assert state.mem.snapshot() == tuple(words)

    def test_one_word_too_many(self):
        state = MachineState()
        state.write(0, 55)
        with pytest.raises(ProgramTooLarge) as exc:
            state.load_program([7] * 4001)
        assert exc.value.kind is ErrorKind.PROGRAM_TOO_LARGE
        assert exc.value.value == 4001
        assert state.read(0) == 55
        assert state.read(3999) == 0

    def test_accepts_any_iterable(self):
        state = MachineState()
        state.load_program(iter([9, 8]))
        assert state.read(1) == 8


# ═══════════════════════════════════════════════
# Snapshots and dumps
# ═══════════════════════════════════════════════

class TestDump:

    def test_snapshot_range(self):
        mem = Memory(50)
        mem.write(3, 1)
        mem.write(40, -2)
        assert mem.snapshot(3, 4) == (1, 0)
        assert mem.snapshot(40) == (-2,) + (0,) * 9

    @pytest.mark.parametrize("start,end", [(-1, 2), (0, 50), (45, 60)])
    def test_snapshot_out_of_range(self, start, end):
        mem = Memory(50)
        with pytest.raises(OutOfRange):
            mem.snapshot(start, end)

    def test_snapshot_end_before_start(self):
        with pytest.raises(ValueError):
            Memory(50).snapshot(5, 4)

    @pytest.mark.parametrize("start", [-1, 20])
    def test_dump_start_out_of_range(self, start):
        mem = Memory(20)
        mem.write(19, 77)
        with pytest.raises(OutOfRange) as exc:
            mem.dump(start, 2)
        assert exc.value.address == start

    def test_dump_negative_length(self):
        with pytest.raises(ValueError):
            Memory(20).dump(0, -1)

    def test_dump_rows_of_ten(self):
        mem = Memory(30)
        mem.write(0, 1)
        mem.write(11, 42)
        lines = mem.dump(0, 20).split('\n')
        assert len(lines) == 2
        assert lines[0].startswith("0000: 00001 00000")
        assert lines[1] == "0010: 00000 00042" + " 00000" * 8

    def test_dump_unaligned_start(self):
        mem = Memory()
        mem.write(12, 7)
        assert mem.dump(12, 3) == "0012: 00007 00000 00000"

    def test_dump_clipped_to_memory(self):
        mem = Memory(12)
        assert mem.dump(10, 10) == "0010: 00000 00000"


# ═══════════════════════════════════════════════
# Word files
# ═══════════════════════════════════════════════

class TestParseWords:

    def test_whitespace_commas_comments(self):
        text = """
        # header comment
        1, 10   # LDA
        2 12
        0
        """
        assert parse_words(text) == [1, 10, 2, 12, 0]

    def test_signed_and_hex(self):
        assert parse_words("-5 +3 0x1F -0x10 007") == [-5, 3, 31, -16, 7]

    def test_empty(self):
        assert parse_words("# nothing\n\n") == []

    def test_bad_token_reports_line(self):
        with pytest.raises(ProgramFormatError) as exc:
            parse_words("1 10\nLDA 10\n")
        assert exc.value.line_num == 2
        assert exc.value.token == "LDA"
        assert isinstance(exc.value, ValueError)


def test_to_word_wraps_both_ways():
    assert to_word(WORD_MAX) == WORD_MAX
    assert to_word(WORD_MAX + 1) == WORD_MIN
    assert to_word(WORD_MIN - 1) == WORD_MAX
    assert to_word(-1) == -1
