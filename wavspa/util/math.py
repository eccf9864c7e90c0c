"""Numeric helper functions used across DSP and rendering logic."""

import numpy as np


def db10(x: np.ndarray) -> np.ndarray:
    """Return 10 * log10(x) with floor to keep inputs positive."""
    return 10.0 * np.log10(np.maximum(x, 1e-20))


def db20(x: np.ndarray) -> np.ndarray:
    """Return 20 * log10(x) with the same floor as db10."""
    return 20.0 * np.log10(np.maximum(x, 1e-20))


def round_half_away(x):
    """Round half away from zero (2.5 -> 3, -2.5 -> -3), scalar or array."""
    return np.sign(x) * np.floor(np.abs(x) + 0.5)
