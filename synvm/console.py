"""synvm console — line-buffered character input and unbuffered output.

``IN`` consumes one character at a time, but the host is asked for input a
whole line at a time.  The line terminator is handed to the program like any
other character.  An empty read means end of input.
"""
from __future__ import annotations

import logging
import sys
from typing import Optional, TextIO

from synvm.errors import InputError

log = logging.getLogger(__name__)


class LineInput:
    """One-line lookahead buffer over a text stream."""

    def __init__(self, stream: Optional[TextIO] = None):
        self.stream = stream if stream is not None else sys.stdin
        self._line = ""
        self._pos = 0
        self.lines_read = 0

    @property
    def pending(self) -> str:
        """Characters of the current line not yet handed out."""
        return self._line[self._pos:]

    def next_char(self) -> Optional[str]:
        """Next input character, or None once the stream is exhausted.

        Blocks on the underlying stream when the buffered line is used up.
        """
        if self._pos >= len(self._line):
            try:
                line = self.stream.readline()
            except (OSError, UnicodeDecodeError) as e:
                raise InputError(f"failed to read input: {e}") from e
            self._line, self._pos = line, 0
            if not line:
                log.debug("End of input after %d lines", self.lines_read)
                return None
            self.lines_read += 1
        ch = self._line[self._pos]
        self._pos += 1
        return ch


class CharOutput:
    """Writes one character per call and flushes immediately."""

    def __init__(self, stream: Optional[TextIO] = None):
        self.stream = stream if stream is not None else sys.stdout
        self.count = 0

    def write(self, ch: str):
        self.stream.write(ch)
        self.stream.flush()
        self.count += 1
