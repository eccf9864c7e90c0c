"""Render preset dataclasses and helpers."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional

from wavspa.errors import ConfigError
from wavspa.render.config import ENGINES


@dataclass
class RenderPreset:
    name: str
    engine: str
    unit_time: int  # milliseconds
    output_width: int
    lo_freq: float
    hi_freq: float
    scale_mode: str = "log"
    transform_mode: str = "power"
    fft_size: Optional[int] = None
    window_function: Optional[str] = None
    sigma: Optional[float] = None
    ceil: float = -10.0
    floor: float = -90.0
    luminance: float = 3.5
    column_step: int = 1


def default_presets(engine: str) -> Dict[str, RenderPreset]:
    if engine == "fft":
        presets = [
            RenderPreset(
                name="default",
                engine="fft",
                unit_time=100,
                output_width=240,
                lo_freq=200.0,
                hi_freq=8000.0,
                fft_size=16384,
                window_function="flat_top",
            ),
            RenderPreset(
                name="32k",
                engine="fft",
                unit_time=50,
                output_width=360,
                lo_freq=200.0,
                hi_freq=16000.0,
                fft_size=32768,
                window_function="flat_top",
            ),
            RenderPreset(
                name="cd",
                engine="fft",
                unit_time=50,
                output_width=480,
                lo_freq=50.0,
                hi_freq=22000.0,
                fft_size=32768,
                window_function="flat_top",
            ),
            RenderPreset(
                name="highreso",
                engine="fft",
                unit_time=50,
                output_width=640,
                lo_freq=200.0,
                hi_freq=32000.0,
                fft_size=131072,
                window_function="flat_top",
            ),
        ]
    elif engine == "wavelet":
        presets = [
            RenderPreset(
                name="default",
                engine="wavelet",
                unit_time=100,
                output_width=240,
                lo_freq=200.0,
                hi_freq=8000.0,
                sigma=24.0,
            ),
            RenderPreset(
                name="cd",
                engine="wavelet",
                unit_time=50,
                output_width=480,
                lo_freq=50.0,
                hi_freq=22050.0,
                sigma=24.0,
            ),
        ]
    else:
        raise ConfigError(f"unknown engine '{engine}' (expected one of {', '.join(ENGINES)})")
    return {p.name.lower(): p for p in presets}


def get_preset(engine: str, name: str) -> RenderPreset:
    presets = default_presets(engine)
    key = str(name).strip().lower()
    if key not in presets:
        raise ConfigError(
            f"unknown {engine} preset '{name}' (available: {', '.join(sorted(presets))})"
        )
    return presets[key]


def serialize_presets(engine: Optional[str] = None) -> Dict[str, Any]:
    """Return ordered JSON-serializable description of built-in presets."""

    engines = [engine] if engine else list(ENGINES)
    payload: Dict[str, Any] = {}
    for name in engines:
        ordered = sorted(default_presets(name).values(), key=lambda p: p.name.lower())
        payload[name] = [
            {
                "name": preset.name,
                "unit_time_ms": preset.unit_time,
                "output_width": preset.output_width,
                "freq_range": [preset.lo_freq, preset.hi_freq],
                "scale_mode": preset.scale_mode,
                "transform_mode": preset.transform_mode,
                "fft_size": preset.fft_size,
                "window_function": preset.window_function,
                "sigma": preset.sigma,
                "ceil": preset.ceil,
                "floor": preset.floor,
                "luminance": preset.luminance,
                "column_step": preset.column_step,
            }
            for preset in ordered
        ]
    return {"presets": payload}
