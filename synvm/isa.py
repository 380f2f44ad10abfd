"""synvm ISA — opcode table, operand encoding and word constants.

Word layout:
  0–32767       literal value (15 bits)
  32768–32775   register R0–R7
  32776–65535   invalid

Every instruction is one opcode word followed by a fixed number of operand
words (0–3, see ARITY).  Images are headerless little-endian word pairs.
"""
import struct
from enum import IntEnum


# ── Word constants ─────────────────────────────────────────────────────────────
WORD_MODULUS  = 32768
WORD_MASK     = 0x7FFF
REGISTER_BASE = 32768
NUM_REGISTERS = 8

# Reference capacity is 0x7FFF words, one short of the 15-bit address space.
# Kept as-is so images built against it behave identically.
MEMORY_SIZE = 0x7FFF

# Largest value Out can emit as a single character
MAX_CHAR = 0xFF


# ── Opcodes ────────────────────────────────────────────────────────────────────
class Op(IntEnum):
    HALT = 0
    SET  = 1
    PUSH = 2
    POP  = 3
    EQ   = 4
    GT   = 5
    JMP  = 6
    JT   = 7
    JF   = 8
    ADD  = 9
    MULT = 10
    MOD  = 11
    AND  = 12
    OR   = 13
    NOT  = 14
    RMEM = 15
    WMEM = 16
    CALL = 17
    RET  = 18
    OUT  = 19
    IN   = 20
    NOOP = 21


# Operand word count per opcode
ARITY: dict[Op, int] = {
    Op.HALT: 0, Op.NOOP: 0, Op.RET: 0,
    Op.OUT:  1, Op.JMP:  1, Op.PUSH: 1, Op.POP: 1, Op.CALL: 1, Op.IN: 1,
    Op.JT:   2, Op.JF:   2, Op.SET:  2, Op.NOT: 2, Op.RMEM: 2, Op.WMEM: 2,
    Op.ADD:  3, Op.EQ:   3, Op.GT:   3, Op.AND: 3, Op.OR:   3, Op.MULT: 3,
    Op.MOD:  3,
}

# Opcodes whose first operand is written to, and so must name a register
DEST_OPS = frozenset({
    Op.SET, Op.POP, Op.EQ, Op.GT, Op.ADD, Op.MULT, Op.MOD,
    Op.AND, Op.OR, Op.NOT, Op.RMEM, Op.IN,
})

OPCODES: dict[str, int] = {op.name: op.value for op in Op}
OPCODE_NAMES: dict[int, str] = {v: k for k, v in OPCODES.items()}


def instruction_size(op: Op) -> int:
    """Words occupied by an instruction: opcode plus its operands."""
    return 1 + ARITY[op]


# ── Register encoding ──────────────────────────────────────────────────────────
def is_register_word(word: int) -> bool:
    return REGISTER_BASE <= word < REGISTER_BASE + NUM_REGISTERS


def encode_reg(name: str) -> int:
    """'R3' → 32771"""
    prefix, tail = name[:1].upper(), name[1:]
    if prefix != "R" or not tail.isdigit():
        raise ValueError(f"Unknown register: {name!r}")
    n = int(tail)
    if not 0 <= n < NUM_REGISTERS:
        raise ValueError(f"Register index {n} out of range (0–{NUM_REGISTERS - 1})")
    return REGISTER_BASE + n


def decode_reg(code: int) -> str:
    if not is_register_word(code):
        raise ValueError(f"{code} is not a register word")
    return f"R{code - REGISTER_BASE}"


# ── Binary image format ────────────────────────────────────────────────────────
WORD_SIZE = 2  # bytes


def encode_words(words) -> bytes:
    """Pack words as a headerless little-endian image."""
    words = list(words)
    return struct.pack(f"<{len(words)}H", *words)


def decode_words(data: bytes) -> tuple:
    """Unpack a little-endian image; the caller checks for an odd length."""
    count = len(data) // WORD_SIZE
    return struct.unpack_from(f"<{count}H", data, 0)
