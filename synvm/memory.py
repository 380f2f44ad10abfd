"""
synvm Memory — fixed-capacity word store and image loader.

The image is written in address order from 0.  Words past the end of
memory are dropped with a warning rather than failing the load.
"""

import logging
from typing import List, Optional

from synvm.errors import AddressOutOfRange, LoadError
from synvm.isa import MEMORY_SIZE, WORD_SIZE, decode_words

log = logging.getLogger(__name__)


class Memory:
    """Word-addressable memory, zero-initialised.

    Reads and writes outside ``0..capacity-1`` raise AddressOutOfRange.
    Words are stored as given, so a cell copied with RMEM/WMEM keeps any
    register encoding it held.
    """

    def __init__(self, capacity: int = MEMORY_SIZE):
        self.capacity = capacity
        self._words: List[int] = [0] * capacity

    def __len__(self) -> int:
        return self.capacity

    def contains(self, addr: int) -> bool:
        return 0 <= addr < self.capacity

    # --- Core read/write ---

    def read(self, addr: int, pc: Optional[int] = None) -> int:
        if not self.contains(addr):
            raise AddressOutOfRange(addr, pc)
        return self._words[addr]

    def write(self, addr: int, value: int, pc: Optional[int] = None):
        if not self.contains(addr):
            raise AddressOutOfRange(addr, pc)
        self._words[addr] = value

    def snapshot(self, start: int = 0, length: int = None) -> List[int]:
        """Copy of a range of cells, for inspection."""
        end = self.capacity if length is None else min(start + length, self.capacity)
        return self._words[start:end]

    # --- Bulk load ---

    def load(self, data: bytes) -> int:
        """Load a little-endian image at address 0; returns words written.

        Raw words are stored unmasked: an image may legitimately contain
        register-encoded operand words (32768–32775).
        """
        if len(data) % WORD_SIZE:
            raise LoadError(
                f"image is {len(data)} bytes, not a whole number of "
                f"{WORD_SIZE}-byte words"
            )
        words = decode_words(data)
        if len(words) > self.capacity:
            log.warning("Image has %d words, memory holds %d; truncating",
                        len(words), self.capacity)
            words = words[:self.capacity]
        self._words[:len(words)] = words
        log.debug("Loaded %d words", len(words))
        return len(words)
