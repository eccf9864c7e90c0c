import math

import numpy as np
import pytest

from wavspa.errors import ConfigError
from wavspa.render.quantize import IntensityQuantizer, QuantizationPolicy, tint


def _clamp(ceil: float = -10.0, floor: float = -90.0) -> IntensityQuantizer:
    return IntensityQuantizer(QuantizationPolicy.CLAMP_RANGE, ceil=ceil, floor=floor)


def test_clamp_endpoints() -> None:
    q = _clamp()
    assert q.quantize(-90.0) == (0, 0, 0)
    assert q.quantize(-10.0) == (85, 255, 127)
    assert q.quantize(-200.0) == (0, 0, 0)
    assert q.quantize(30.0) == (85, 255, 127)


def test_clamp_is_monotonic_inside_range() -> None:
    q = _clamp()
    levels = q.levels(np.linspace(-90.0, -10.0, num=401))
    assert levels[0] == 0
    assert levels[-1] == 255
    assert np.all(np.diff(levels) >= 0)


def test_clamp_midpoint_uses_floor_division() -> None:
    q = _clamp()
    # 255 * 40 / 80 = 127.5
    assert q.levels([-50.0])[0] == 127
    assert q.quantize(-50.0) == (42, 127, 63)


def test_luminance_scale_clamps_to_byte_range() -> None:
    q = IntensityQuantizer(QuantizationPolicy.LUMINANCE_SCALE, luminance=3.5)
    assert q.levels([10.0])[0] == 35
    assert q.levels([1000.0])[0] == 255
    assert q.levels([-5.0])[0] == 0
    levels = q.levels(np.linspace(-1e6, 1e6, num=101))
    assert levels.min() >= 0 and levels.max() <= 255


@pytest.mark.parametrize("policy", list(QuantizationPolicy))
def test_non_finite_values_render_black_and_are_counted(policy: QuantizationPolicy) -> None:
    q = IntensityQuantizer(policy)
    pixels = q.quantize_column([math.nan, math.inf, -math.inf, -10.0])
    assert pixels.shape == (4, 3)
    assert pixels[:3].sum() == 0
    assert q.anomalies == 3


def test_tint_uses_integer_division() -> None:
    out = tint(np.array([255, 0, 100]))
    assert out.tolist() == [[85, 255, 127], [0, 0, 0], [33, 100, 50]]


def test_clamp_requires_ceil_above_floor() -> None:
    with pytest.raises(ConfigError):
        _clamp(ceil=-90.0, floor=-90.0)
    # luminance ignores the thresholds
    IntensityQuantizer(QuantizationPolicy.LUMINANCE_SCALE, ceil=-90.0, floor=-10.0)


def test_policy_parsing() -> None:
    assert QuantizationPolicy.parse("clamp") is QuantizationPolicy.CLAMP_RANGE
    assert QuantizationPolicy.parse("Luminance") is QuantizationPolicy.LUMINANCE_SCALE
    with pytest.raises(ConfigError):
        QuantizationPolicy.parse("gamma")
