"""RGB frame buffer that accumulates spectrogram columns and axis overlays.

Layout (image coordinates, origin top-left)::

    +----------+-----------------------------------------+
    | margin_x |  block 0 | block 1 | ...  (column_step   |  rows 0 .. output_width-1
    |  labels  |          |         |       px each)      |  (row 0 = highest freq)
    +----------+-----------------------------------------+
    |          |  time labels (margin_y rows)             |
    +----------+-----------------------------------------+

Magnitude sequences arrive lowest frequency first and are stored reversed, so
that element ``output_width - 1 - p`` lands on row ``p``.
"""

from __future__ import annotations

from typing import Optional, Sequence

import numpy as np

from wavspa.render.font import GLYPH_ADVANCE, GLYPH_HEIGHT, GLYPH_WIDTH, glyph_mask
from wavspa.render.quantize import IntensityQuantizer, QuantizationPolicy

HLINE_TINT = (0xFF, 0x00, 0x00)
HLINE_LABEL = (0xFF, 0x00, 0x00)
VLINE_TINT = (0x40, 0x40, 0xFF)
VLINE_LABEL = (0x80, 0x80, 0xFF)


class FrameBuffer:
    def __init__(
        self,
        block_count: int,
        output_width: int,
        *,
        column_step: int = 1,
        margin_x: int = 0,
        margin_y: int = 0,
        quantizer: Optional[IntensityQuantizer] = None,
    ):
        if block_count < 1 or output_width < 1:
            raise ValueError("too small")
        if column_step < 1:
            raise ValueError("column step must be >= 1")
        if margin_x < 0 or margin_y < 0:
            raise ValueError("margins must be >= 0")

        self.block_count = int(block_count)
        self.output_width = int(output_width)
        self.column_step = int(column_step)
        self.margin_x = int(margin_x)
        self.margin_y = int(margin_y)
        self.quantizer = quantizer

        self._power_quantizer: Optional[IntensityQuantizer] = None
        self._amplitude_quantizer: Optional[IntensityQuantizer] = None
        self._next_column = 0
        self.buf = np.zeros((self.height, self.width, 3), dtype=np.uint8)

    @property
    def width(self) -> int:
        return self.margin_x + self.block_count * self.column_step

    @property
    def height(self) -> int:
        return self.output_width + self.margin_y

    @property
    def filled(self) -> bool:
        return self._next_column >= self.block_count

    def _check_column(self, column: int) -> None:
        if column < 0 or column >= self.block_count:
            raise ValueError(f"invalid column number {column} (0..{self.block_count - 1})")

    def _x(self, column: int) -> int:
        return self.margin_x + column * self.column_step

    def put_column(self, column: int, pixels: np.ndarray) -> None:
        """Write one block's pixels, lowest frequency first, as ``column_step`` image columns."""
        self._check_column(column)
        if column < self._next_column:
            raise ValueError(f"column {column} written out of order (next free column is {self._next_column})")
        pixels = np.asarray(pixels, dtype=np.uint8)
        if pixels.shape != (self.output_width, 3):
            raise ValueError(
                f"invalid data length {pixels.shape[0] if pixels.ndim else 0} (expected {self.output_width})"
            )
        x = self._x(column)
        self.buf[: self.output_width, x : x + self.column_step] = pixels[::-1, None, :]
        self._next_column = column + 1

    def _legacy_quantizer(self, policy: QuantizationPolicy) -> IntensityQuantizer:
        if policy is QuantizationPolicy.LUMINANCE_SCALE:
            if self._power_quantizer is None:
                self._power_quantizer = IntensityQuantizer(policy)
            return self._power_quantizer
        if self._amplitude_quantizer is None:
            self._amplitude_quantizer = IntensityQuantizer(policy)
        return self._amplitude_quantizer

    def draw_power(self, column: int, magnitudes: Sequence[float]) -> None:
        quantizer = self.quantizer or self._legacy_quantizer(QuantizationPolicy.LUMINANCE_SCALE)
        self.put_column(column, quantizer.quantize_column(magnitudes))

    def draw_amplitude(self, column: int, magnitudes: Sequence[float]) -> None:
        quantizer = self.quantizer or self._legacy_quantizer(QuantizationPolicy.CLAMP_RANGE)
        self.put_column(column, quantizer.quantize_column(magnitudes))

    def _add_tint(self, region: np.ndarray, tint) -> np.ndarray:
        summed = region.astype(np.int16) + np.array(tint, dtype=np.int16)
        return np.minimum(summed, 0xFF).astype(np.uint8)

    def put_string(self, row: int, col: int, text: str, color) -> None:
        """Draw ``text`` with its top-left corner at (row, col), clipped to the image."""
        color = np.array(color, dtype=np.uint8)
        for ch in text:
            mask = glyph_mask(ch)
            r0, r1 = max(row, 0), min(row + GLYPH_HEIGHT, self.height)
            c0, c1 = max(col, 0), min(col + GLYPH_WIDTH, self.width)
            if r0 < r1 and c0 < c1:
                sub = mask[r0 - row : r1 - row, c0 - col : c1 - col]
                self.buf[r0:r1, c0:c1][sub] = color
            col += GLYPH_ADVANCE

    def draw_hline(self, position: int, label: str) -> None:
        """Frequency gridline: red rule across the full width at row ``position``."""
        if position < 0 or position >= self.output_width:
            raise ValueError(f"invalid row number {position}")
        self.buf[position] = self._add_tint(self.buf[position], HLINE_TINT)
        self.put_string(position - 11, 4, label, HLINE_LABEL)

    def draw_vline(self, column: int, label: str) -> None:
        """Time gridline: blue rule down the full height at block ``column``."""
        self._check_column(column)
        x = self._x(column)
        self.buf[:, x] = self._add_tint(self.buf[:, x], VLINE_TINT)
        self.put_string(self.output_width + 14, x + 4, label, VLINE_LABEL)

    def serialize(self) -> bytes:
        """Raw row-major RGB raster, ``width * height * 3`` bytes."""
        if not self.filled:
            raise ValueError(f"frame buffer incomplete: column {self.block_count - 1} not written yet")
        return self.buf.tobytes()
