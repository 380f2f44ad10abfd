"""synvm Virtual Machine — executes 16-bit word images.

State owned by one VirtualMachine instance:
  memory     fixed-capacity word store (synvm.memory.Memory)
  registers  R0–R7, 15-bit words
  stack      unbounded LIFO of words (PUSH/POP and CALL/RET return addresses)
  pc         address of the next word to decode

A run ends on HALT, RET with an empty stack, the pc running off the end of
memory, or end of input on IN.  Any other problem raises a VMError subclass
and stops the run where it happened.
"""
from __future__ import annotations

import logging
from enum import Enum
from typing import List, Optional, TextIO

from synvm.console import CharOutput, LineInput
from synvm.decoder import Instruction, Operand, Register, decode_instruction
from synvm.errors import (
    AddressOutOfRange,
    DivisionByZero,
    InvalidDestination,
    NonCharacterValue,
    StackUnderflow,
)
from synvm.isa import DEST_OPS, MAX_CHAR, MEMORY_SIZE, NUM_REGISTERS, WORD_MASK, WORD_MODULUS, Op
from synvm.memory import Memory

log = logging.getLogger(__name__)


class StopReason(Enum):
    HALT          = "halt"            # HALT executed
    RETURN        = "return"          # RET with an empty stack
    END_OF_MEMORY = "end_of_memory"   # pc advanced past the last cell
    END_OF_INPUT  = "end_of_input"    # IN found no more input


# ── VM ─────────────────────────────────────────────────────────────────────────

class VirtualMachine:
    def __init__(self, image: Optional[bytes] = None, *,
                 stdin: Optional[TextIO] = None,
                 stdout: Optional[TextIO] = None,
                 memory_size: int = MEMORY_SIZE):
        self.memory = Memory(memory_size)
        self.registers: List[int] = [0] * NUM_REGISTERS
        self.stack: List[int] = []
        self.pc = 0
        self.steps = 0

        self.input = LineInput(stdin)
        self.output = CharOutput(stdout)

        if image is not None:
            self.load(image)

    def load(self, image: bytes) -> int:
        """Populate memory from a little-endian image. Returns words loaded."""
        return self.memory.load(image)

    # ── Operand access ───────────────────────────────────────────────────────

    def value(self, arg: Operand) -> int:
        if isinstance(arg, Register):
            return self.registers[arg.index]
        return arg.value

    def _dest(self, ins: Instruction, pc: int) -> int:
        arg = ins.operands[0]
        if not isinstance(arg, Register):
            raise InvalidDestination(
                f"{ins.op.name} cannot write to literal {arg.value}", pc)
        return arg.index

    def _jump(self, target: int, pc: int):
        if not self.memory.contains(target):
            raise AddressOutOfRange(target, pc)
        self.pc = target

    # ── Main loop ─────────────────────────────────────────────────────────────

    def run(self) -> StopReason:
        log.debug("Run started at pc=%d", self.pc)
        while True:
            reason = self.step()
            if reason is not None:
                break
        log.debug("Run stopped: %s after %d steps (pc=%d)",
                  reason.value, self.steps, self.pc)
        return reason

    # ── Single-step execution ─────────────────────────────────────────────────

    def step(self) -> Optional[StopReason]:
        """Execute one instruction; returns a StopReason when the run is over."""
        if self.pc >= len(self.memory):
            return StopReason.END_OF_MEMORY

        pc = self.pc
        ins, self.pc = decode_instruction(self.memory, pc)
        self.steps += 1
        op = ins.op
        dest = self._dest(ins, pc) if op in DEST_OPS else None
        R = self.registers

        # ── HALT / NOOP ────────────────────────────────────────────────────────
        if op == Op.HALT:
            return StopReason.HALT

        elif op == Op.NOOP:
            pass

        # ── Register / stack ───────────────────────────────────────────────────
        elif op == Op.SET:
            R[dest] = self.value(ins.operands[1])

        elif op == Op.PUSH:
            self.stack.append(self.value(ins.operands[0]))

        elif op == Op.POP:
            if not self.stack:
                raise StackUnderflow("POP on an empty stack", pc)
            R[dest] = self.stack.pop()

        # ── Comparison ─────────────────────────────────────────────────────────
        elif op == Op.EQ:
            _, b, c = ins.operands
            R[dest] = 1 if self.value(b) == self.value(c) else 0

        elif op == Op.GT:
            _, b, c = ins.operands
            R[dest] = 1 if self.value(b) > self.value(c) else 0

        # ── Control flow ───────────────────────────────────────────────────────
        elif op == Op.JMP:
            self._jump(self.value(ins.operands[0]), pc)

        elif op == Op.JT:
            a, b = ins.operands
            if self.value(a) != 0:
                self._jump(self.value(b), pc)

        elif op == Op.JF:
            a, b = ins.operands
            if self.value(a) == 0:
                self._jump(self.value(b), pc)

        elif op == Op.CALL:
            target = self.value(ins.operands[0])
            self.stack.append(self.pc)
            self._jump(target, pc)

        elif op == Op.RET:
            if not self.stack:
                return StopReason.RETURN
            self._jump(self.stack.pop(), pc)

        # ── Arithmetic ─────────────────────────────────────────────────────────
        elif op == Op.ADD:
            _, b, c = ins.operands
            R[dest] = (self.value(b) + self.value(c)) % WORD_MODULUS

        elif op == Op.MULT:
            _, b, c = ins.operands
            R[dest] = (self.value(b) * self.value(c)) % WORD_MODULUS

        elif op == Op.MOD:
            _, b, c = ins.operands
            divisor = self.value(c)
            if divisor == 0:
                raise DivisionByZero("MOD by zero", pc)
            R[dest] = self.value(b) % divisor

        # ── Bitwise ────────────────────────────────────────────────────────────
        elif op == Op.AND:
            _, b, c = ins.operands
            R[dest] = self.value(b) & self.value(c) & WORD_MASK

        elif op == Op.OR:
            _, b, c = ins.operands
            R[dest] = (self.value(b) | self.value(c)) & WORD_MASK

        elif op == Op.NOT:
            R[dest] = ~self.value(ins.operands[1]) & WORD_MASK

        # ── Memory ─────────────────────────────────────────────────────────────
        elif op == Op.RMEM:
            R[dest] = self.memory.read(self.value(ins.operands[1]), pc)

        elif op == Op.WMEM:
            a, b = ins.operands
            self.memory.write(self.value(a), self.value(b), pc)

        # ── I/O ────────────────────────────────────────────────────────────────
        elif op == Op.OUT:
            code = self.value(ins.operands[0])
            if code > MAX_CHAR:
                raise NonCharacterValue(code, pc)
            self.output.write(chr(code))

        elif op == Op.IN:
            ch = self.input.next_char()
            if ch is None:
                return StopReason.END_OF_INPUT
            code = ord(ch)
            if code > WORD_MASK:
                raise NonCharacterValue(code, pc)
            R[dest] = code

        return None
