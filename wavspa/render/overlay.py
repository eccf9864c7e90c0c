"""Frequency and time gridlines drawn into the frame buffer margins."""

from __future__ import annotations

from typing import List

from wavspa.render.framebuffer import FrameBuffer
from wavspa.render.scale import ScaleMapper

FREQ_MARGIN_PX = 50
TIME_MARGIN_PX = 30
TIME_GRID_SECONDS = 10


def time_label(seconds: int) -> str:
    """Format elapsed seconds as ``M'SS"`` or ``S"`` below one minute."""
    m, s = divmod(int(seconds), 60)
    if m == 0:
        return '%d"' % s
    return "%d'%02d\"" % (m, s)


def freq_label(freq: float) -> str:
    return f"{int(freq)}Hz"


class GridOverlay:
    """Draw axis annotations once every data column has been written."""

    def __init__(self, mapper: ScaleMapper):
        self.mapper = mapper

    def frequency_ticks(self) -> List[tuple]:
        """Return ``(position, freq)`` for every visible gridline.

        Steps outward from the basis frequency in both directions and stops on
        each side as soon as a step leaves the image. Ticks that map outside
        ``[0, output_width)`` before that point are skipped, not clipped.
        """
        mapper = self.mapper
        width = mapper.output_width
        basis = mapper.config.basis_freq
        ticks = []

        freq = mapper.next_lower(basis)
        while True:
            pos = mapper.position(freq)
            if pos >= width:
                break
            if pos >= 0:
                ticks.append((pos, freq))
            freq = mapper.next_lower(freq)

        freq = basis
        while True:
            pos = mapper.position(freq)
            if pos <= 0:
                break
            if pos < width:
                ticks.append((pos, freq))
            freq = mapper.next_higher(freq)

        return ticks

    def draw_frequency_grid(self, fb: FrameBuffer) -> int:
        ticks = self.frequency_ticks()
        for pos, freq in ticks:
            fb.draw_hline(pos, freq_label(freq))
        return len(ticks)

    @staticmethod
    def time_ticks(sample_rate: int, block_size: int, block_count: int) -> List[tuple]:
        """Return ``(column, elapsed_seconds)`` for every time gridline."""
        ticks = [(0, 0)]
        counter = 0
        elapsed = 0
        for col in range(block_count):
            counter += block_size
            if counter >= sample_rate:
                elapsed += 1
                counter -= sample_rate
                if elapsed % TIME_GRID_SECONDS == 0:
                    ticks.append((col, elapsed))
        return ticks

    def draw_time_grid(self, fb: FrameBuffer, sample_rate: int, block_size: int, block_count: int) -> int:
        ticks = self.time_ticks(sample_rate, block_size, block_count)
        for col, elapsed in ticks:
            fb.draw_vline(col, time_label(elapsed))
        return len(ticks)
