"""
tests.test_console
==================
Line-buffered input adapter and unbuffered output sink.
"""

import io

import pytest

from synvm.console import CharOutput, LineInput
from synvm.errors import InputError


class _CountingStream:
    """Text stream stand-in that records readline() calls."""

    def __init__(self, lines):
        self._lines = list(lines)
        self.calls = 0

    def readline(self):
        self.calls += 1
        return self._lines.pop(0) if self._lines else ""


class _BrokenStream:
    def readline(self):
        raise OSError("device gone")


def _bytes_stream(data):
    return io.TextIOWrapper(io.BytesIO(data), encoding="utf-8")


class _FlushTracker(io.StringIO):
    flushes = 0

    def flush(self):
        self.flushes += 1
        super().flush()


class TestLineInput:
    def test_characters_in_order_including_terminator(self):
        inp = LineInput(io.StringIO("ab\ncd"))
        chars = [inp.next_char() for _ in range(6)]
        assert chars == ["a", "b", "\n", "c", "d", None]
        assert inp.lines_read == 2

    def test_reads_a_line_only_when_buffer_is_exhausted(self):
        stream = _CountingStream(["go north\n", "look\n"])
        inp = LineInput(stream)
        assert inp.next_char() == "g"
        assert stream.calls == 1
        for _ in range(len("o north\n")):
            inp.next_char()
        assert stream.calls == 1
        assert inp.next_char() == "l"
        assert stream.calls == 2

    def test_pending(self):
        inp = LineInput(io.StringIO("abc\n"))
        inp.next_char()
        assert inp.pending == "bc\n"

    def test_end_of_input_is_none_not_error(self):
        inp = LineInput(io.StringIO(""))
        assert inp.next_char() is None
        assert inp.next_char() is None

    def test_read_failure_is_input_error(self):
        inp = LineInput(_BrokenStream())
        with pytest.raises(InputError, match="device gone"):
            inp.next_char()

    def test_undecodable_bytes_are_input_error(self):
        inp = LineInput(_bytes_stream(b"\xff\n"))
        with pytest.raises(InputError):
            inp.next_char()


class TestCharOutput:
    def test_each_write_is_flushed(self):
        stream = _FlushTracker()
        out = CharOutput(stream)
        out.write("a")
        out.write("b")
        assert stream.getvalue() == "ab"
        assert stream.flushes == 2
        assert out.count == 2
