"""Magnitude to 8-bit tinted RGB quantization."""

from __future__ import annotations

from enum import Enum
from typing import Tuple

import numpy as np

from wavspa.errors import ConfigError
from wavspa.util.math import round_half_away

Pixel = Tuple[int, int, int]

DEFAULT_CEIL = -10.0
DEFAULT_FLOOR = -90.0
DEFAULT_LUMINANCE = 3.5


class QuantizationPolicy(str, Enum):
    CLAMP_RANGE = "clamp"
    LUMINANCE_SCALE = "luminance"

    @classmethod
    def parse(cls, value) -> "QuantizationPolicy":
        if isinstance(value, cls):
            return value
        text = str(value).strip().lower()
        aliases = {"clamp_range": "clamp", "luminance_scale": "luminance"}
        try:
            return cls(aliases.get(text, text))
        except ValueError as exc:
            raise ConfigError(f"unknown quantization policy '{value}'") from exc


def tint(levels: np.ndarray) -> np.ndarray:
    """Expand brightness levels (0..255) into blue-green (v/3, v, v/2) pixels."""
    v = np.asarray(levels, dtype=np.int32)
    out = np.empty(v.shape + (3,), dtype=np.uint8)
    out[..., 0] = v // 3
    out[..., 1] = v
    out[..., 2] = v // 2
    return out


class IntensityQuantizer:
    """Convert magnitudes into brightness levels under one policy.

    CLAMP_RANGE maps ``[floor, ceil]`` linearly onto ``[0, 255]``.
    LUMINANCE_SCALE multiplies by ``luminance`` and clamps. Non-finite
    values become 0 under either policy and are counted in ``anomalies``.
    """

    def __init__(
        self,
        policy: QuantizationPolicy = QuantizationPolicy.CLAMP_RANGE,
        *,
        ceil: float = DEFAULT_CEIL,
        floor: float = DEFAULT_FLOOR,
        luminance: float = DEFAULT_LUMINANCE,
    ):
        self.policy = QuantizationPolicy.parse(policy)
        if self.policy is QuantizationPolicy.CLAMP_RANGE and not ceil > floor:
            raise ConfigError(f"ceil ({ceil}) must be greater than floor ({floor})")
        self.ceil = float(ceil)
        self.floor = float(floor)
        self.range = self.ceil - self.floor
        self.luminance = float(luminance)
        self.anomalies = 0

    def levels(self, values) -> np.ndarray:
        x = np.asarray(values, dtype=np.float64)
        finite = np.isfinite(x)
        bad = int(x.size - np.count_nonzero(finite))
        if bad:
            self.anomalies += bad
            x = np.where(finite, x, 0.0)

        if self.policy is QuantizationPolicy.CLAMP_RANGE:
            with np.errstate(invalid="ignore"):
                v = np.floor(255.0 * (x - self.floor) / self.range)
            v = np.where(x >= self.ceil, 255.0, v)
            v = np.where(x <= self.floor, 0.0, v)
        else:
            v = np.clip(round_half_away(x * self.luminance), 0.0, 255.0)

        if bad:
            v = np.where(finite, v, 0.0)
        return v.astype(np.int32)

    def quantize(self, x: float) -> Pixel:
        r, g, b = tint(self.levels([x]))[0]
        return int(r), int(g), int(b)

    def quantize_column(self, values) -> np.ndarray:
        """Quantize a whole magnitude sequence into an ``(n, 3)`` uint8 array."""
        return tint(self.levels(values))
