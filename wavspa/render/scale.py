"""Frequency axis mapping between Hz and pixel positions."""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from wavspa.errors import ConfigError
from wavspa.util.math import round_half_away


class ScaleMode(str, Enum):
    LOG = "log"
    LINEAR = "linear"

    @classmethod
    def parse(cls, value) -> "ScaleMode":
        if isinstance(value, cls):
            return value
        text = str(value).strip().lower()
        aliases = {"logscale": "log", "linearscale": "linear"}
        try:
            return cls(aliases.get(text, text))
        except ValueError as exc:
            raise ConfigError(f"unknown scale mode '{value}'") from exc


DEFAULT_BASIS_FREQ = 440.0


def default_grid_step(mode: ScaleMode) -> float:
    return 2.0 if mode is ScaleMode.LOG else 2000.0


@dataclass(frozen=True)
class ScaleConfig:
    lo_freq: float
    hi_freq: float
    output_width: int
    mode: ScaleMode = ScaleMode.LOG
    grid_step: Optional[float] = None
    basis_freq: float = DEFAULT_BASIS_FREQ

    def __post_init__(self) -> None:
        object.__setattr__(self, "mode", ScaleMode.parse(self.mode))
        if self.grid_step is None:
            object.__setattr__(self, "grid_step", default_grid_step(self.mode))
        if self.output_width < 1:
            raise ConfigError("output width must be >= 1")
        if self.hi_freq <= self.lo_freq:
            raise ConfigError(
                f"invalid frequency range {self.lo_freq}-{self.hi_freq} Hz (high must exceed low)"
            )
        if self.mode is ScaleMode.LOG:
            if self.lo_freq <= 0:
                raise ConfigError("low frequency must be > 0 for a log scale")
            if self.grid_step <= 1.0:
                raise ConfigError("grid step must be > 1 for a log scale")
        else:
            if self.lo_freq < 0:
                raise ConfigError("low frequency must be >= 0")
            if self.grid_step <= 0.0:
                raise ConfigError("grid step must be > 0 for a linear scale")
        if self.basis_freq <= 0:
            raise ConfigError("basis frequency must be > 0")


class ScaleMapper:
    """Map frequencies onto the frequency axis of the output image.

    Positions count from the high-frequency end: ``position(hi_freq) == 0``
    and ``position(lo_freq) == output_width``. Values outside the configured
    range map outside ``[0, output_width]`` and are left for the caller to
    clip or skip.
    """

    def __init__(self, config: ScaleConfig):
        self.config = config
        self.output_width = config.output_width
        self.lo_freq = float(config.lo_freq)
        self.hi_freq = float(config.hi_freq)
        self.freq_width = self.hi_freq - self.lo_freq
        if config.mode is ScaleMode.LOG:
            self.log_step = (self.hi_freq / self.lo_freq) ** (1.0 / self.output_width)
            self.log_base = math.log(self.log_step)
        else:
            self.log_step = None
            self.log_base = None

    @property
    def logscale(self) -> bool:
        return self.config.mode is ScaleMode.LOG

    def _scale(self, freq: float) -> float:
        if self.logscale:
            return 1.0 - (math.log(freq / self.lo_freq) / self.log_base) / self.output_width
        return 1.0 - (freq - self.lo_freq) / self.freq_width

    def position(self, freq: float) -> int:
        return int(round_half_away(self._scale(freq) * self.output_width))

    def next_higher(self, freq: float) -> float:
        if self.logscale:
            return freq * self.config.grid_step
        return freq + self.config.grid_step

    def next_lower(self, freq: float) -> float:
        if self.logscale:
            return freq / self.config.grid_step
        return freq - self.config.grid_step

    def bin_frequencies(self):
        """Lower edge frequency of every output bin, lowest first."""
        W = self.output_width
        if self.logscale:
            return [self.lo_freq * (self.log_step ** i) for i in range(W)]
        step = self.freq_width / W
        return [self.lo_freq + step * i for i in range(W)]
