"""Window function tables for the FFT engine."""

from __future__ import annotations

from typing import Callable, Dict

import numpy as np
from scipy.signal import windows

from wavspa.errors import ConfigError

# Un-normalized flat top (peak 4.64); keeps power levels comparable with
# presets tuned for it.
FLAT_TOP_COEFFS = (1.0, 1.93, 1.29, 0.388, 0.032)

_WINDOWS: Dict[str, Callable[[int], np.ndarray]] = {
    "rectangular": lambda n: windows.boxcar(n),
    "hamming": lambda n: windows.hamming(n, sym=True),
    "hann": lambda n: windows.hann(n, sym=True),
    "blackman": lambda n: windows.blackman(n, sym=True),
    "blackman_nuttall": lambda n: windows.nuttall(n, sym=True),
    "flat_top": lambda n: windows.general_cosine(n, FLAT_TOP_COEFFS, sym=True),
}

WINDOW_NAMES = tuple(_WINDOWS)


def normalize_window_name(name: str) -> str:
    key = str(name).strip().lower().replace("-", "_")
    if key not in _WINDOWS:
        raise ConfigError(f"unknown window function '{name}' (expected one of {', '.join(WINDOW_NAMES)})")
    return key


def make_window(name: str, size: int) -> np.ndarray:
    """Return the symmetric window ``name`` of ``size`` samples as float64."""
    if size < 2:
        raise ConfigError("window size must be >= 2")
    return np.asarray(_WINDOWS[normalize_window_name(name)](size), dtype=np.float64)
