"""Sliding-window FFT engine producing per-block magnitude columns."""

from __future__ import annotations

from typing import Any, Dict, Optional, Tuple

import numpy as np  # type: ignore

from wavspa.dsp.windowing import make_window, normalize_window_name
from wavspa.errors import ConfigError
from wavspa.render.scale import ScaleMode
from wavspa.util.math import db10, db20, round_half_away


def bin_groups(
    fft_size: int,
    sample_rate: float,
    lo_freq: float,
    hi_freq: float,
    output_width: int,
    mode: ScaleMode,
) -> Tuple[np.ndarray, np.ndarray]:
    """Return (first_bin, bin_count) for every output position, lowest first.

    Output position i covers rfft bins ``[first_bin[i], first_bin[i] + bin_count[i])``;
    the boundaries advance linearly or geometrically from ``lo_freq`` to
    ``hi_freq`` and every group holds at least one bin.
    """
    pos = fft_size * (lo_freq / sample_rate)
    if mode is ScaleMode.LOG:
        factor = (hi_freq / lo_freq) ** (1.0 / output_width)
        edges = pos * factor ** np.arange(output_width + 1)
    else:
        step = (fft_size * ((hi_freq - lo_freq) / sample_rate)) / output_width
        edges = pos + step * np.arange(output_width + 1)
    edges = round_half_away(edges).astype(np.int64)
    heads = edges[:-1]
    counts = np.diff(edges)
    counts = np.where(counts <= 0, 1, counts)
    return heads, counts


def _group_mean(values: np.ndarray, heads: np.ndarray, counts: np.ndarray) -> np.ndarray:
    csum = np.concatenate(([0.0], np.cumsum(values)))
    return (csum[heads + counts] - csum[heads]) / counts


class FFTEngine:
    """Windowed real FFT over the most recent ``fft_size`` samples.

    Each fed block is shifted into the right end of the analysis buffer, so
    blocks shorter than ``fft_size`` overlap with their predecessors.
    """

    def __init__(
        self,
        fft_size: int,
        output_width: int,
        *,
        window: str = "flat_top",
        scale_mode: ScaleMode = ScaleMode.LOG,
        freq_range: Tuple[float, float] = (200.0, 8000.0),
    ):
        if fft_size < 2:
            raise ConfigError("FFT size must be >= 2")
        if output_width > fft_size // 2:
            raise ConfigError(f"output width {output_width} exceeds half the FFT size ({fft_size // 2})")
        self.fft_size = int(fft_size)
        self.output_width = int(output_width)
        self.window_name = normalize_window_name(window)
        self.scale_mode = ScaleMode.parse(scale_mode)
        self.lo_freq, self.hi_freq = float(freq_range[0]), float(freq_range[1])
        if self.lo_freq > self.hi_freq:
            raise ConfigError("low frequency exceeds high frequency")

        self.window = make_window(self.window_name, self.fft_size)
        self.data = np.zeros(self.fft_size, dtype=np.float64)
        self.used = 0
        self.sample_rate: float = 0.0
        self._heads = np.zeros(0, dtype=np.int64)
        self._counts = np.zeros(0, dtype=np.int64)
        self._spectrum: Optional[np.ndarray] = None

    def set_sample_rate(self, sample_rate: float) -> None:
        if self.hi_freq > sample_rate / 2.0:
            raise ConfigError(
                f"high frequency {self.hi_freq:g} Hz exceeds Nyquist ({sample_rate / 2.0:g} Hz)"
            )
        self.sample_rate = float(sample_rate)
        self._heads, self._counts = bin_groups(
            self.fft_size, self.sample_rate, self.lo_freq, self.hi_freq, self.output_width, self.scale_mode
        )

    def prepare(self, source) -> None:
        self.set_sample_rate(source.sample_rate)
        self.reset()

    def reset(self) -> None:
        self.data[:] = 0.0
        self.used = 0
        self._spectrum = None

    def feed(self, block: np.ndarray) -> None:
        block = np.asarray(block, dtype=np.float64)
        n = block.size
        if n >= self.fft_size:
            self.data[:] = block[-self.fft_size :]
        elif n:
            self.data[:-n] = self.data[n:]
            self.data[-n:] = block
        self.used = min(self.used + n, self.fft_size)
        self._spectrum = None

    def _magnitudes(self) -> np.ndarray:
        if not self.sample_rate:
            raise RuntimeError("sample rate not set; call prepare() first")
        if self._spectrum is None:
            self._spectrum = np.abs(np.fft.rfft(self.data * self.window, n=self.fft_size))
        return self._spectrum

    def power(self) -> np.ndarray:
        """Mean of 10*log10(|X|^2) over each output position's bins."""
        mag = self._magnitudes()
        return _group_mean(db10(mag * mag), self._heads, self._counts)

    def amplitude(self) -> np.ndarray:
        """Mean of 20*log10(|X| / samples_used), i.e. dB relative to full scale."""
        mag = self._magnitudes()
        base = float(max(self.used, 1))
        return _group_mean(db20(mag / base), self._heads, self._counts)

    def describe(self) -> Dict[str, Any]:
        return {
            "FFT size": f"{self.fft_size} samples",
            "window func": self.window_name,
        }
