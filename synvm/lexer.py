"""synvm Lexer — tokenizes assembly source."""
from __future__ import annotations
import re
from dataclasses import dataclass
from enum import Enum, auto
from typing import List

from synvm.isa import OPCODES, NUM_REGISTERS


class TT(Enum):
    """Token types."""
    DIRECTIVE   = auto()   # .WORD  .STRING
    LABEL_DEF   = auto()   # loop:  @loop:
    LABEL_REF   = auto()   # @loop
    MNEMONIC    = auto()   # SET  ADD  OUT  ...
    REG         = auto()   # R0 … R7
    INTEGER     = auto()   # 42  0xFF  0b1010  'A'
    STRING      = auto()   # "hello"
    COMMA       = auto()
    NEWLINE     = auto()
    EOF         = auto()
    IDENT       = auto()   # bare identifiers


@dataclass
class Token:
    type: TT
    value: object
    line: int
    col: int

    def __repr__(self):
        return f"Token({self.type.name}, {self.value!r}, {self.line}:{self.col})"


_DIRECTIVES = {".WORD", ".STRING"}

_ESCAPES = {"n": "\n", "t": "\t", "r": "\r", "0": "\0", "\\": "\\", "'": "'", '"': '"'}

_TOKEN_SPEC = [
    ("COMMENT",   r'[;#][^\n]*'),
    ("CHAR",      r"'(?:\\.|[^'\\\n])'"),
    ("STRING",    r'"(?:\\.|[^"\\\n])*"'),
    ("HEX",       r'0[xX][0-9A-Fa-f]+'),
    ("BIN",       r'0[bB][01]+'),
    ("INT",       r'-?\d+'),
    ("LABEL_DEF", r'@?[A-Za-z_][A-Za-z0-9_]*[ \t]*:'),
    ("LABEL_REF", r'@[A-Za-z_][A-Za-z0-9_]*'),
    ("DIRECTIVE", r'\.[A-Za-z_][A-Za-z0-9_]*'),
    ("WORD",      r'[A-Za-z_][A-Za-z0-9_]*'),
    ("COMMA",     r','),
    ("NEWLINE",   r'\n'),
    ("SKIP",      r'[ \t\r]+'),
    ("MISMATCH",  r'.'),
]

_MASTER_RE = re.compile(
    '|'.join(f'(?P<{name}>{pat})' for name, pat in _TOKEN_SPEC)
)

_REGISTERS = {f"R{i}" for i in range(NUM_REGISTERS)}
_MNEMONICS = set(OPCODES.keys())


def _unescape(body: str) -> str:
    out = []
    i = 0
    while i < len(body):
        ch = body[i]
        if ch == "\\" and i + 1 < len(body):
            nxt = body[i + 1]
            if nxt not in _ESCAPES:
                raise SyntaxError(f"Unknown escape sequence \\{nxt}")
            out.append(_ESCAPES[nxt])
            i += 2
        else:
            out.append(ch)
            i += 1
    return "".join(out)


def tokenize(source: str) -> List[Token]:
    tokens: List[Token] = []
    line = 1
    line_start = 0

    for mo in _MASTER_RE.finditer(source):
        kind = mo.lastgroup
        val  = mo.group()
        col  = mo.start() - line_start + 1

        if kind in ("SKIP", "COMMENT"):
            continue
        elif kind == "NEWLINE":
            tokens.append(Token(TT.NEWLINE, "\n", line, col))
            line += 1
            line_start = mo.end()
        elif kind == "DIRECTIVE":
            up = val.upper()
            if up not in _DIRECTIVES:
                raise SyntaxError(f"Unknown directive {val!r} at line {line}, col {col}")
            tokens.append(Token(TT.DIRECTIVE, up, line, col))
        elif kind == "LABEL_DEF":
            name = val.rstrip(":").strip().lstrip("@")
            tokens.append(Token(TT.LABEL_DEF, name, line, col))
        elif kind == "LABEL_REF":
            tokens.append(Token(TT.LABEL_REF, val[1:], line, col))
        elif kind == "HEX":
            tokens.append(Token(TT.INTEGER, int(val, 16), line, col))
        elif kind == "BIN":
            tokens.append(Token(TT.INTEGER, int(val, 2), line, col))
        elif kind == "INT":
            tokens.append(Token(TT.INTEGER, int(val, 10), line, col))
        elif kind == "CHAR":
            tokens.append(Token(TT.INTEGER, ord(_unescape(val[1:-1])), line, col))
        elif kind == "STRING":
            tokens.append(Token(TT.STRING, _unescape(val[1:-1]), line, col))
        elif kind == "WORD":
            up = val.upper()
            if up in _MNEMONICS:
                tokens.append(Token(TT.MNEMONIC, up, line, col))
            elif up in _REGISTERS:
                tokens.append(Token(TT.REG, up, line, col))
            else:
                tokens.append(Token(TT.IDENT, val, line, col))
        elif kind == "COMMA":
            tokens.append(Token(TT.COMMA, ",", line, col))
        elif kind == "MISMATCH":
            raise SyntaxError(f"Unexpected character {val!r} at line {line}, col {col}")

    tokens.append(Token(TT.EOF, None, line, 0))
    return tokens
