import numpy as np
import pytest

from wavspa.errors import ConfigError
from wavspa.render.scale import ScaleConfig, ScaleMapper, ScaleMode


def _mapper(mode: ScaleMode, lo: float = 200.0, hi: float = 8000.0, width: int = 240, **kwargs) -> ScaleMapper:
    return ScaleMapper(ScaleConfig(lo, hi, width, mode=mode, **kwargs))


@pytest.mark.parametrize("mode", [ScaleMode.LOG, ScaleMode.LINEAR])
def test_position_is_non_increasing_across_range(mode: ScaleMode) -> None:
    mapper = _mapper(mode)
    freqs = np.linspace(200.0, 8000.0, num=997)
    positions = [mapper.position(f) for f in freqs]
    assert all(b <= a for a, b in zip(positions, positions[1:]))


@pytest.mark.parametrize("mode", [ScaleMode.LOG, ScaleMode.LINEAR])
def test_position_endpoints(mode: ScaleMode) -> None:
    mapper = _mapper(mode)
    assert abs(mapper.position(200.0) - 240) <= 1
    assert abs(mapper.position(8000.0)) <= 1


def test_log_position_of_geometric_midpoint_is_centre() -> None:
    mapper = _mapper(ScaleMode.LOG, lo=100.0, hi=10000.0, width=200)
    assert mapper.position(1000.0) == 100


def test_grid_stepping_multiplies_on_log_and_adds_on_linear() -> None:
    log_mapper = _mapper(ScaleMode.LOG)
    assert log_mapper.next_higher(440.0) == pytest.approx(880.0)
    assert log_mapper.next_lower(440.0) == pytest.approx(220.0)

    lin_mapper = _mapper(ScaleMode.LINEAR)
    assert lin_mapper.next_higher(440.0) == pytest.approx(2440.0)
    assert lin_mapper.next_lower(2440.0) == pytest.approx(440.0)

    custom = _mapper(ScaleMode.LINEAR, grid_step=500.0)
    assert custom.next_higher(1000.0) == pytest.approx(1500.0)


def test_bin_frequencies_start_at_low_edge() -> None:
    mapper = _mapper(ScaleMode.LOG, width=8)
    freqs = mapper.bin_frequencies()
    assert len(freqs) == 8
    assert freqs[0] == pytest.approx(200.0)
    assert all(b > a for a, b in zip(freqs, freqs[1:]))
    assert freqs[-1] < 8000.0


def test_mode_parsing_accepts_long_names() -> None:
    assert ScaleMode.parse("logscale") is ScaleMode.LOG
    assert ScaleMode.parse("LINEAR") is ScaleMode.LINEAR
    with pytest.raises(ConfigError):
        ScaleMode.parse("mel")


@pytest.mark.parametrize(
    "kwargs",
    [
        dict(lo_freq=8000.0, hi_freq=200.0, output_width=10),
        dict(lo_freq=200.0, hi_freq=200.0, output_width=10),
        dict(lo_freq=0.0, hi_freq=200.0, output_width=10, mode=ScaleMode.LOG),
        dict(lo_freq=200.0, hi_freq=800.0, output_width=0),
        dict(lo_freq=200.0, hi_freq=800.0, output_width=10, grid_step=1.0),
        dict(lo_freq=200.0, hi_freq=800.0, output_width=10, mode=ScaleMode.LINEAR, grid_step=0.0),
    ],
)
def test_invalid_scale_config_is_rejected(kwargs) -> None:
    with pytest.raises(ConfigError):
        ScaleConfig(**kwargs)


def test_linear_scale_allows_zero_low_frequency() -> None:
    mapper = _mapper(ScaleMode.LINEAR, lo=0.0, hi=1000.0, width=100)
    assert mapper.position(0.0) == 100
    assert mapper.position(500.0) == 50
