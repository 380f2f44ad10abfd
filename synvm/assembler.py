"""synvm Assembler — assembles text source into a binary image.

Source format:
  label:                 define a label at the current word address (@label: too)
  SET R0, 'A'            mnemonic + operands, separated by commas or spaces
  JMP @label             label reference
  .WORD 1, 2, 0x8000     raw words
  .STRING "hi\\n"        one word per character
  ; comment  # comment

Layout: headerless little-endian words starting at address 0.
"""
from __future__ import annotations
from dataclasses import dataclass
from typing import Dict, List

from synvm.lexer import tokenize, TT, Token
from synvm.isa import ARITY, OPCODES, WORD_MASK, Op, encode_reg, encode_words, instruction_size


# ── AST nodes ─────────────────────────────────────────────────────────────────

@dataclass
class Directive:
    name: str
    args: List[object]
    line: int

    @property
    def size(self) -> int:
        if self.name == ".STRING":
            return sum(len(a) for a in self.args)
        return len(self.args)


@dataclass
class LabelDef:
    name: str
    line: int


@dataclass
class Instruction:
    mnemonic: str
    operands: List[Token]
    line: int

    @property
    def size(self) -> int:
        return instruction_size(Op[self.mnemonic])


# ── Parser ─────────────────────────────────────────────────────────────────────

class AssemblerError(Exception):
    pass


class ParseError(AssemblerError):
    pass


class Parser:
    def __init__(self, tokens: List[Token]):
        self.tokens = tokens
        self._pos   = 0

    def _peek(self) -> Token:
        if self._pos >= len(self.tokens):
            return Token(TT.EOF, None, 0, 0)
        return self.tokens[self._pos]

    def _next(self) -> Token:
        t = self._peek()
        self._pos += 1
        return t

    def _skip_newlines(self):
        while self._pos < len(self.tokens) and self.tokens[self._pos].type == TT.NEWLINE:
            self._pos += 1

    def _rest_of_line(self) -> List[Token]:
        items = []
        while self._pos < len(self.tokens):
            nxt = self.tokens[self._pos]
            if nxt.type in (TT.NEWLINE, TT.EOF):
                break
            self._pos += 1
            if nxt.type != TT.COMMA:
                items.append(nxt)
        return items

    def parse(self):
        nodes = []
        self._pos = 0

        while True:
            self._skip_newlines()
            t = self._peek()
            if t.type == TT.EOF:
                break
            if t.type == TT.LABEL_DEF:
                self._next()
                nodes.append(LabelDef(t.value, t.line))
            elif t.type == TT.DIRECTIVE:
                nodes.append(self._parse_directive())
            elif t.type == TT.MNEMONIC:
                self._next()
                nodes.append(Instruction(t.value, self._rest_of_line(), t.line))
            else:
                raise ParseError(
                    f"Unexpected {t.type.name} ({t.value!r}) at line {t.line}"
                )

        return nodes

    def _parse_directive(self) -> Directive:
        t    = self._next()
        args = self._rest_of_line()
        want = TT.STRING if t.value == ".STRING" else None
        for a in args:
            if want is TT.STRING and a.type != TT.STRING:
                raise ParseError(f".STRING expects string literals at line {t.line}")
            if want is None and a.type not in (TT.INTEGER, TT.REG, TT.LABEL_REF):
                raise ParseError(f".WORD expects numbers or labels at line {t.line}")
        if t.value == ".STRING":
            return Directive(t.value, [a.value for a in args], t.line)
        return Directive(t.value, args, t.line)


# ── Assembler ──────────────────────────────────────────────────────────────────

def _resolve(tok: Token, labels: Dict[str, int], limit: int = WORD_MASK) -> int:
    if tok.type == TT.INTEGER:
        if not 0 <= tok.value <= limit:
            raise AssemblerError(f"Value {tok.value} out of range (0–{limit})")
        return tok.value
    if tok.type == TT.REG:
        return encode_reg(tok.value)
    if tok.type == TT.LABEL_REF:
        if tok.value not in labels:
            raise AssemblerError(f"Undefined label: @{tok.value}")
        return labels[tok.value]
    raise AssemblerError(f"Invalid operand {tok.value!r}")


def _char_word(ch: str) -> int:
    if ord(ch) > WORD_MASK:
        raise AssemblerError(f"Character {ch!r} does not fit in a word")
    return ord(ch)


def _encode_instruction(node: Instruction, labels: Dict[str, int]) -> List[int]:
    """Encode one instruction as its opcode word plus operand words."""
    op = Op(OPCODES[node.mnemonic])
    if len(node.operands) != ARITY[op]:
        raise AssemblerError(
            f"{op.name} takes {ARITY[op]} operand(s), got {len(node.operands)}"
        )
    return [op.value] + [_resolve(t, labels) for t in node.operands]


def assemble_words(source: str) -> List[int]:
    """Assemble source → list of memory words."""
    tokens = tokenize(source)
    nodes  = Parser(tokens).parse()

    # ── Pass 1: collect labels (word address from 0) ─────────────────────────
    labels: Dict[str, int] = {}
    pc = 0
    for node in nodes:
        if isinstance(node, LabelDef):
            if node.name in labels:
                raise AssemblerError(f"Line {node.line}: duplicate label {node.name}")
            labels[node.name] = pc
        else:
            pc += node.size

    # ── Pass 2: emit words ───────────────────────────────────────────────────
    words: List[int] = []
    for node in nodes:
        try:
            if isinstance(node, Instruction):
                words.extend(_encode_instruction(node, labels))
            elif isinstance(node, Directive):
                if node.name == ".STRING":
                    for s in node.args:
                        words.extend(_char_word(ch) for ch in s)
                else:
                    # raw words may use the full 16 bits
                    words.extend(_resolve(t, labels, 0xFFFF) for t in node.args)
        except AssemblerError as e:
            raise AssemblerError(f"Line {node.line}: {e}")

    return words


def assemble(source: str) -> bytes:
    """Assemble source → image bytes."""
    return encode_words(assemble_words(source))
