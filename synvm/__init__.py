"""
synvm
=====
Virtual machine for a 16-bit word-oriented instruction set: 8 registers,
an unbounded stack, 0x7FFF words of memory and 22 opcodes.

Exports:
    VirtualMachine  — load an image and run it
    StopReason      — why a successful run ended
    VMError         — base class of every load/decode/execution failure
    assemble        — text source → image bytes
"""

__version__ = "1.0.0"

from .assembler import AssemblerError, assemble
from .errors import VMError
from .vm import StopReason, VirtualMachine

__all__ = ["VirtualMachine", "StopReason", "VMError", "assemble", "AssemblerError"]
