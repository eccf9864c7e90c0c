"""Gabor (Morlet) wavelet engine evaluated at the start of every block."""

from __future__ import annotations

import math
from typing import Any, Dict, List, Tuple

import numpy as np

from wavspa.errors import ConfigError, EngineError
from wavspa.render.scale import ScaleConfig, ScaleMapper, ScaleMode
from wavspa.util.math import db20

GABOR_THRESHOLD = 0.01
MIN_OUTPUT_WIDTH = 32
MIN_SAMPLE_RATE = 100.0
# keeps wavelet power on roughly the same scale as the FFT power output
POWER_GAIN = 256.0


class WaveletEngine:
    """Continuous wavelet transform over the whole signal.

    The signal is loaded once in :meth:`prepare`; each :meth:`feed` moves the
    analysis point to the first sample of the fed block. Kernels are truncated
    where the Gaussian envelope falls below ``GABOR_THRESHOLD``.
    """

    def __init__(
        self,
        sigma: float,
        output_width: int,
        *,
        scale_mode: ScaleMode = ScaleMode.LOG,
        freq_range: Tuple[float, float] = (200.0, 8000.0),
    ):
        if sigma <= 0:
            raise ConfigError("sigma must be > 0")
        if output_width < MIN_OUTPUT_WIDTH:
            raise ConfigError(f"output width must be >= {MIN_OUTPUT_WIDTH} for the wavelet engine")
        self.sigma = float(sigma)
        self.output_width = int(output_width)
        self.scale_mode = ScaleMode.parse(scale_mode)
        self.lo_freq, self.hi_freq = float(freq_range[0]), float(freq_range[1])
        if self.lo_freq <= 0:
            raise ConfigError("low frequency must be > 0 for the wavelet engine")
        if self.lo_freq >= self.hi_freq:
            raise ConfigError("low frequency must be below high frequency")

        self.wk0 = self.sigma * math.sqrt(-2.0 * math.log(GABOR_THRESHOLD))
        self.wk1 = 1.0 / math.sqrt(2.0 * math.pi * self.sigma * self.sigma)
        self.wk2 = 2.0 * self.sigma * self.sigma

        self.freqs = np.asarray(
            ScaleMapper(
                ScaleConfig(self.lo_freq, self.hi_freq, self.output_width, mode=self.scale_mode)
            ).bin_frequencies(),
            dtype=np.float64,
        )
        self.sample_rate: float = 0.0
        self.half_widths = np.zeros(self.output_width, dtype=np.int64)
        self._kernels: List[np.ndarray] = []
        self.signal = np.zeros(0, dtype=np.float64)
        self.position = -1
        self._next_position = 0
        self._coeffs = np.zeros(self.output_width, dtype=np.complex128)
        self._dirty = True

    def set_sample_rate(self, sample_rate: float) -> None:
        if sample_rate <= MIN_SAMPLE_RATE:
            raise ConfigError(f"sample rate must exceed {MIN_SAMPLE_RATE:g} Hz for the wavelet engine")
        if self.hi_freq > sample_rate / 2.0:
            raise ConfigError(
                f"high frequency {self.hi_freq:g} Hz exceeds Nyquist ({sample_rate / 2.0:g} Hz)"
            )
        self.sample_rate = float(sample_rate)
        self.half_widths = ((1.0 / self.freqs) * self.wk0 * self.sample_rate).astype(np.int64)
        self._kernels = []
        for freq, dx in zip(self.freqs, self.half_widths):
            t = (np.arange(-dx, dx + 1, dtype=np.float64) / self.sample_rate) * freq
            envelope = self.wk1 * np.exp(-t * (t / self.wk2))
            self._kernels.append(envelope * np.exp(2j * np.pi * t))

    def load(self, samples: np.ndarray) -> None:
        self.signal = np.asarray(samples, dtype=np.float64).reshape(-1)
        self.position = -1
        self._next_position = 0
        self._dirty = True

    def prepare(self, source) -> None:
        self.set_sample_rate(source.sample_rate)
        self.load(source.read_all())
        source.rewind()

    def feed(self, block: np.ndarray) -> None:
        self.position = self._next_position
        self._next_position += int(np.asarray(block).size)
        self._dirty = True

    def _transform(self) -> np.ndarray:
        if not self._dirty:
            return self._coeffs
        pos = self.position
        n = self.signal.size
        if pos < 0 or pos >= n:
            raise EngineError(f"analysis position {pos} outside signal of {n} samples")
        for i, (dx, kernel) in enumerate(zip(self.half_widths, self._kernels)):
            st = -dx if dx < pos else -pos
            ed = dx if dx < (n - pos) else n - (pos + 1)
            seg = self.signal[pos + st : pos + ed + 1]
            self._coeffs[i] = np.dot(kernel[st + dx : ed + dx + 1], seg)
        self._dirty = False
        return self._coeffs

    def power(self) -> np.ndarray:
        return (np.abs(self._transform()) / self.freqs) * POWER_GAIN

    def amplitude(self) -> np.ndarray:
        coeffs = self._transform()
        base = np.maximum(self.half_widths, 1) * 2.0
        return db20(np.abs(coeffs) / np.sqrt(base))

    def describe(self) -> Dict[str, Any]:
        return {
            "sigma": self.sigma,
            "kernel span": f"{int(self.half_widths.max()) * 2 + 1 if self.half_widths.size else 0} samples",
        }
