"""
tests.test_decoder
==================
Operand classification and instruction decoding.
"""

import pytest

from synvm.decoder import (
    Instruction, Literal, Register, decode_instruction, decode_operand,
)
from synvm.errors import AddressOutOfRange, InvalidOperandEncoding, UnknownOpcode
from synvm.isa import Op, encode_words
from synvm.memory import Memory

R0, R1 = 32768, 32769


def _memory(words, capacity=64):
    mem = Memory(capacity)
    mem.load(encode_words(words))
    return mem


class TestOperands:
    @pytest.mark.parametrize("word", [0, 1, 12345, 32767])
    def test_literals(self, word):
        assert decode_operand(word) == Literal(word)

    @pytest.mark.parametrize("word, index", [(32768, 0), (32771, 3), (32775, 7)])
    def test_registers(self, word, index):
        assert decode_operand(word) == Register(index)

    @pytest.mark.parametrize("word", [32776, 40000, 65535])
    def test_invalid(self, word):
        with pytest.raises(InvalidOperandEncoding) as exc:
            decode_operand(word, pc=12)
        assert exc.value.word == word
        assert exc.value.pc == 12


class TestDecodeInstruction:
    def test_three_operands(self):
        ins, nxt = decode_instruction(_memory([9, R0, R1, 4]), 0)
        assert ins.op is Op.ADD
        assert ins.operands == (Register(0), Register(1), Literal(4))
        assert nxt == 4

    def test_no_operands(self):
        ins, nxt = decode_instruction(_memory([21, 18]), 1)
        assert ins == Instruction(Op.RET)
        assert nxt == 2

    def test_consumes_exactly_arity(self):
        # SET R0, 7 followed by an OUT that must not be consumed
        ins, nxt = decode_instruction(_memory([1, R0, 7, 19, 65]), 0)
        assert len(ins.operands) == 2
        assert nxt == 3

    @pytest.mark.parametrize("word", [22, 23, 100, 32767, 32768, 65535])
    def test_unknown_opcode(self, word):
        with pytest.raises(UnknownOpcode) as exc:
            decode_instruction(_memory([21, word]), 1)
        assert exc.value.word == word
        assert exc.value.pc == 1

    def test_bad_operand_reports_instruction_pc(self):
        with pytest.raises(InvalidOperandEncoding) as exc:
            decode_instruction(_memory([21, 19, 32776]), 1)
        assert exc.value.pc == 1

    def test_operands_past_end_of_memory(self):
        with pytest.raises(AddressOutOfRange):
            decode_instruction(_memory([1, R0], capacity=2), 0)


class TestInstruction:
    def test_arity_enforced(self):
        with pytest.raises(ValueError):
            Instruction(Op.ADD, (Register(0), Literal(1)))

    def test_str(self):
        ins = Instruction(Op.ADD, (Register(0), Register(1), Literal(4)))
        assert str(ins) == "ADD R0, R1, 4"
        assert str(Instruction(Op.HALT)) == "HALT"
