"""Shared fixtures: build a VM from raw words or assembly source."""

from __future__ import annotations

import io

import pytest

from synvm.assembler import assemble
from synvm.isa import encode_words
from synvm.vm import VirtualMachine


def _build(image: bytes, stdin: str, **kwargs):
    out = io.StringIO()
    vm = VirtualMachine(image, stdin=io.StringIO(stdin), stdout=out, **kwargs)
    return vm, out


@pytest.fixture
def make_vm():
    """make_vm(words, stdin="") → (vm, captured_output)"""
    def factory(words, stdin: str = "", **kwargs):
        return _build(encode_words(words), stdin, **kwargs)
    return factory


@pytest.fixture
def asm_vm():
    """asm_vm(source, stdin="") → (vm, captured_output)"""
    def factory(source: str, stdin: str = "", **kwargs):
        return _build(assemble(source), stdin, **kwargs)
    return factory
