"""5x10 bitmap glyphs (M+ gothic 10r subset) for axis labels."""

from __future__ import annotations

from typing import Dict, Tuple

import numpy as np

GLYPH_WIDTH = 5
GLYPH_HEIGHT = 10
GLYPH_ADVANCE = 6

# one byte per glyph row, MSB is the leftmost pixel
_GLYPH_ROWS: Dict[str, Tuple[int, ...]] = {
    " ": (0x00, 0x00, 0x00, 0x00, 0x00, 0x00, 0x00, 0x00, 0x00, 0x00),
    '"': (0x50, 0x50, 0x50, 0x50, 0x00, 0x00, 0x00, 0x00, 0x00, 0x00),
    "'": (0x20, 0x20, 0x20, 0x20, 0x00, 0x00, 0x00, 0x00, 0x00, 0x00),
    "-": (0x00, 0x00, 0x00, 0x00, 0xF0, 0x00, 0x00, 0x00, 0x00, 0x00),
    ".": (0x00, 0x00, 0x00, 0x00, 0x00, 0x00, 0x00, 0x40, 0x00, 0x00),
    "0": (0x00, 0x60, 0x90, 0xB0, 0xD0, 0x90, 0x90, 0x60, 0x00, 0x00),
    "1": (0x00, 0x20, 0x60, 0xA0, 0x20, 0x20, 0x20, 0x20, 0x00, 0x00),
    "2": (0x00, 0x60, 0x90, 0x10, 0x20, 0x40, 0x80, 0xF0, 0x00, 0x00),
    "3": (0x00, 0xF0, 0x10, 0x20, 0x60, 0x10, 0x90, 0x60, 0x00, 0x00),
    "4": (0x00, 0x20, 0x60, 0xA0, 0xA0, 0xF0, 0x20, 0x20, 0x00, 0x00),
    "5": (0x00, 0xF0, 0x80, 0xE0, 0x10, 0x10, 0x90, 0x60, 0x00, 0x00),
    "6": (0x00, 0x60, 0x80, 0xE0, 0x90, 0x90, 0x90, 0x60, 0x00, 0x00),
    "7": (0x00, 0xF0, 0x10, 0x20, 0x20, 0x40, 0x40, 0x40, 0x00, 0x00),
    "8": (0x00, 0x60, 0x90, 0x90, 0x60, 0x90, 0x90, 0x60, 0x00, 0x00),
    "9": (0x00, 0x60, 0x90, 0x90, 0x90, 0x70, 0x10, 0x60, 0x00, 0x00),
    "H": (0x00, 0x90, 0x90, 0x90, 0xF0, 0x90, 0x90, 0x90, 0x00, 0x00),
    "z": (0x00, 0x00, 0x00, 0xF0, 0x20, 0x40, 0x80, 0xF0, 0x00, 0x00),
}

_BLANK = np.zeros((GLYPH_HEIGHT, GLYPH_WIDTH), dtype=bool)
_MASKS: Dict[str, np.ndarray] = {}


def glyph_mask(ch: str) -> np.ndarray:
    """Return a (10, 5) boolean mask for ``ch``; unknown characters are blank."""
    mask = _MASKS.get(ch)
    if mask is None:
        rows = _GLYPH_ROWS.get(ch)
        if rows is None:
            return _BLANK
        bits = np.array(rows, dtype=np.uint8)[:, None] & (0x80 >> np.arange(GLYPH_WIDTH))
        mask = bits.astype(bool)
        _MASKS[ch] = mask
    return mask
