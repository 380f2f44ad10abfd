"""
synvm Decoder — turns memory words into structured instructions.

Operand words are only *classified* here (Literal vs Register); resolving a
Register to its current contents happens at execution time in the VM.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple, Union

from synvm.errors import InvalidOperandEncoding, UnknownOpcode
from synvm.isa import ARITY, NUM_REGISTERS, REGISTER_BASE, WORD_MASK, Op
from synvm.memory import Memory


# ── Operands ──────────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class Literal:
    value: int

    def __str__(self):
        return str(self.value)


@dataclass(frozen=True)
class Register:
    index: int

    def __str__(self):
        return f"R{self.index}"


Operand = Union[Literal, Register]


def decode_operand(word: int, pc: Optional[int] = None) -> Operand:
    """0–32767 → Literal, 32768–32775 → Register 0–7, anything else fails."""
    if 0 <= word <= WORD_MASK:
        return Literal(word)
    if REGISTER_BASE <= word < REGISTER_BASE + NUM_REGISTERS:
        return Register(word - REGISTER_BASE)
    raise InvalidOperandEncoding(word, pc)


# ── Instructions ──────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class Instruction:
    op: Op
    operands: Tuple[Operand, ...] = ()

    def __post_init__(self):
        if len(self.operands) != ARITY[self.op]:
            raise ValueError(
                f"{self.op.name} takes {ARITY[self.op]} operands, "
                f"got {len(self.operands)}"
            )

    def __str__(self):
        if not self.operands:
            return self.op.name
        return f"{self.op.name} " + ", ".join(str(o) for o in self.operands)


def decode_opcode(word: int, pc: Optional[int] = None) -> Op:
    try:
        return Op(word)
    except ValueError:
        raise UnknownOpcode(word, pc) from None


def decode_instruction(memory: Memory, pc: int) -> Tuple[Instruction, int]:
    """Decode the instruction at ``pc``.

    Returns the instruction and the address just past its last operand.
    Reading beyond the end of memory raises AddressOutOfRange.
    """
    start = pc
    op = decode_opcode(memory.read(pc, start), start)
    pc += 1
    operands = []
    for _ in range(ARITY[op]):
        operands.append(decode_operand(memory.read(pc, start), start))
        pc += 1
    return Instruction(op, tuple(operands)), pc
