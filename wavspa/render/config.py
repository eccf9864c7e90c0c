"""Job configuration shared by the CLI, presets and the pipeline driver."""

from __future__ import annotations

from dataclasses import asdict, dataclass
from enum import Enum
from typing import Any, Dict, Optional, Tuple

from wavspa.errors import ConfigError
from wavspa.render.quantize import DEFAULT_CEIL, DEFAULT_FLOOR, DEFAULT_LUMINANCE, QuantizationPolicy
from wavspa.render.scale import DEFAULT_BASIS_FREQ, ScaleConfig, ScaleMode


class TransformMode(str, Enum):
    POWER = "power"
    AMPLITUDE = "amplitude"

    @classmethod
    def parse(cls, value) -> "TransformMode":
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError as exc:
            raise ConfigError(f"unknown transform mode '{value}'") from exc


ENGINES = ("fft", "wavelet")


@dataclass
class RenderConfig:
    engine: str = "fft"
    unit_time: int = 100  # milliseconds per block
    fft_size: int = 16384
    sigma: float = 24.0
    output_width: int = 240
    window_function: str = "flat_top"
    scale_mode: ScaleMode = ScaleMode.LOG
    transform_mode: TransformMode = TransformMode.POWER
    freq_range: Tuple[float, float] = (200.0, 8000.0)
    ceil: float = DEFAULT_CEIL
    floor: float = DEFAULT_FLOOR
    luminance: float = DEFAULT_LUMINANCE
    quantization: Optional[QuantizationPolicy] = None
    column_step: int = 1
    basis_freq: Optional[float] = None
    grid_step: Optional[float] = None
    draw_freq_grid: bool = False
    draw_time_grid: bool = False

    def __post_init__(self) -> None:
        self.scale_mode = ScaleMode.parse(self.scale_mode)
        self.transform_mode = TransformMode.parse(self.transform_mode)
        if self.quantization is not None:
            self.quantization = QuantizationPolicy.parse(self.quantization)
        self.freq_range = (float(self.freq_range[0]), float(self.freq_range[1]))

    @classmethod
    def from_preset(cls, preset, **overrides: Any) -> "RenderConfig":
        """Build a config from a ``RenderPreset``; keyword overrides win."""
        values: Dict[str, Any] = {
            "engine": preset.engine,
            "unit_time": preset.unit_time,
            "output_width": preset.output_width,
            "freq_range": (preset.lo_freq, preset.hi_freq),
            "scale_mode": preset.scale_mode,
            "transform_mode": preset.transform_mode,
            "ceil": preset.ceil,
            "floor": preset.floor,
            "luminance": preset.luminance,
            "column_step": preset.column_step,
        }
        if preset.fft_size is not None:
            values["fft_size"] = preset.fft_size
        if preset.window_function is not None:
            values["window_function"] = preset.window_function
        if preset.sigma is not None:
            values["sigma"] = preset.sigma
        values.update(overrides)
        return cls(**values)

    @property
    def lo_freq(self) -> float:
        return self.freq_range[0]

    @property
    def hi_freq(self) -> float:
        return self.freq_range[1]

    def validate(self) -> "RenderConfig":
        if self.engine not in ENGINES:
            raise ConfigError(f"unknown engine '{self.engine}' (expected one of {', '.join(ENGINES)})")
        if self.unit_time <= 0:
            raise ConfigError("unit time must be > 0")
        if self.output_width < 1:
            raise ConfigError("output width must be >= 1")
        if self.column_step < 1:
            raise ConfigError("column step must be >= 1")
        if self.hi_freq <= self.lo_freq:
            raise ConfigError(f"invalid frequency range {self.lo_freq:g}-{self.hi_freq:g} Hz")
        if self.ceil <= self.floor:
            raise ConfigError(f"ceil ({self.ceil:g}) must be greater than floor ({self.floor:g})")
        if self.engine == "fft" and self.fft_size < 2:
            raise ConfigError("FFT size must be >= 2")
        if self.engine == "wavelet" and self.sigma <= 0:
            raise ConfigError("sigma must be > 0")
        self.scale_config()
        return self

    def scale_config(self) -> ScaleConfig:
        return ScaleConfig(
            lo_freq=self.lo_freq,
            hi_freq=self.hi_freq,
            output_width=self.output_width,
            mode=self.scale_mode,
            grid_step=self.grid_step,
            basis_freq=self.basis_freq if self.basis_freq is not None else DEFAULT_BASIS_FREQ,
        )

    def effective_policy(self) -> QuantizationPolicy:
        """Explicit policy, else the legacy pairing (power: luminance, amplitude: clamp)."""
        if self.quantization is not None:
            return self.quantization
        if self.transform_mode is TransformMode.POWER:
            return QuantizationPolicy.LUMINANCE_SCALE
        return QuantizationPolicy.CLAMP_RANGE

    def as_dict(self) -> Dict[str, Any]:
        payload = asdict(self)
        payload["scale_mode"] = self.scale_mode.value
        payload["transform_mode"] = self.transform_mode.value
        payload["quantization"] = self.quantization.value if self.quantization else None
        payload["freq_range"] = list(self.freq_range)
        return payload
