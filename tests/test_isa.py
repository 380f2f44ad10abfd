"""
tests.test_isa
==============
Opcode table, arity table, register encoding and image packing.
"""

import pytest

from synvm.isa import (
    ARITY, DEST_OPS, MEMORY_SIZE, OPCODE_NAMES, OPCODES, Op,
    decode_reg, decode_words, encode_reg, encode_words, instruction_size,
    is_register_word,
)


class TestOpcodes:
    EXPECTED = {
        "HALT": 0, "SET": 1, "PUSH": 2, "POP": 3, "EQ": 4, "GT": 5,
        "JMP": 6, "JT": 7, "JF": 8, "ADD": 9, "MULT": 10, "MOD": 11,
        "AND": 12, "OR": 13, "NOT": 14, "RMEM": 15, "WMEM": 16,
        "CALL": 17, "RET": 18, "OUT": 19, "IN": 20, "NOOP": 21,
    }

    def test_numeric_values(self):
        assert OPCODES == self.EXPECTED

    def test_names_roundtrip(self):
        for name, code in OPCODES.items():
            assert OPCODE_NAMES[code] == name

    def test_every_opcode_has_an_arity(self):
        assert set(ARITY) == set(Op)


class TestArity:
    @pytest.mark.parametrize("arity, ops", [
        (0, [Op.HALT, Op.NOOP, Op.RET]),
        (1, [Op.OUT, Op.JMP, Op.PUSH, Op.POP, Op.CALL, Op.IN]),
        (2, [Op.JT, Op.JF, Op.SET, Op.NOT, Op.RMEM, Op.WMEM]),
        (3, [Op.ADD, Op.EQ, Op.GT, Op.AND, Op.OR, Op.MULT, Op.MOD]),
    ])
    def test_arity_groups(self, arity, ops):
        for op in ops:
            assert ARITY[op] == arity, op.name
            assert instruction_size(op) == arity + 1

    def test_jumps_and_output_do_not_write_registers(self):
        for op in (Op.JMP, Op.JT, Op.JF, Op.CALL, Op.OUT, Op.PUSH, Op.WMEM):
            assert op not in DEST_OPS


class TestRegisters:
    def test_encode(self):
        assert encode_reg("R0") == 32768
        assert encode_reg("r7") == 32775

    def test_decode(self):
        assert decode_reg(32771) == "R3"

    @pytest.mark.parametrize("name", ["R8", "X1", "R", "Rx"])
    def test_bad_names(self, name):
        with pytest.raises(ValueError):
            encode_reg(name)

    def test_decode_rejects_literals(self):
        with pytest.raises(ValueError):
            decode_reg(5)

    def test_register_range(self):
        assert not is_register_word(32767)
        assert is_register_word(32768)
        assert is_register_word(32775)
        assert not is_register_word(32776)


class TestImageFormat:
    def test_little_endian(self):
        assert encode_words([0x0102, 0x8000]) == b"\x02\x01\x00\x80"

    def test_decode(self):
        assert decode_words(b"\x02\x01\x00\x80") == (0x0102, 0x8000)

    def test_memory_capacity_is_reference_value(self):
        assert MEMORY_SIZE == 32767
