"""
synvm.errors
============
Failure taxonomy for loading, decoding and executing images.

Every VM failure is fatal to the run: nothing is retried or rolled back,
the exception propagates out of ``VirtualMachine.run()`` as raised.
End of input on ``IN`` is *not* an error; it stops the run normally.
"""

from __future__ import annotations

from typing import Optional


class VMError(Exception):
    """Base class for all VM failures.

    ``pc`` is the address of the instruction that failed, or ``None`` when
    the failure happened outside the run loop (image loading).
    """

    def __init__(self, message: str, pc: Optional[int] = None) -> None:
        super().__init__(message)
        self.message = message
        self.pc = pc

    def __str__(self) -> str:
        if self.pc is None:
            return self.message
        return f"{self.message} (pc={self.pc})"


# ─────────────────────────────────────────────────────────────────────────────
# Loading
# ─────────────────────────────────────────────────────────────────────────────

class LoadError(VMError):
    """Raised when an image is not a whole number of words."""


# ─────────────────────────────────────────────────────────────────────────────
# Decoding
# ─────────────────────────────────────────────────────────────────────────────

class DecodeError(VMError):
    pass


class UnknownOpcode(DecodeError):
    """Raised when the opcode word is not in the opcode table."""

    def __init__(self, word: int, pc: Optional[int] = None) -> None:
        super().__init__(f"unknown opcode {word}", pc)
        self.word = word


class InvalidOperandEncoding(DecodeError):
    """Raised for operand words above the register range (> 32775)."""

    def __init__(self, word: int, pc: Optional[int] = None) -> None:
        super().__init__(f"invalid operand encoding {word}", pc)
        self.word = word


# ─────────────────────────────────────────────────────────────────────────────
# Execution
# ─────────────────────────────────────────────────────────────────────────────

class ExecutionError(VMError):
    pass


class StackUnderflow(ExecutionError):
    """Raised by POP on an empty stack."""


class DivisionByZero(ExecutionError):
    """Raised by MOD with a zero divisor."""


class NonCharacterValue(ExecutionError):
    """Raised when a value cannot be exchanged as a single character."""

    def __init__(self, value: int, pc: Optional[int] = None) -> None:
        super().__init__(f"{value} is not a single character", pc)
        self.value = value


class InvalidDestination(ExecutionError):
    """Raised when a literal sits in an operand slot that is written to."""


class AddressOutOfRange(ExecutionError):
    """Raised for a memory access or control transfer outside memory."""

    def __init__(self, address: int, pc: Optional[int] = None) -> None:
        super().__init__(f"address {address} out of range", pc)
        self.address = address


# ─────────────────────────────────────────────────────────────────────────────
# Input
# ─────────────────────────────────────────────────────────────────────────────

class InputError(VMError):
    """Raised when reading the input stream fails (not on end of input)."""
