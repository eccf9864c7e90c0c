import numpy as np
import pytest

from wavspa.dsp.fft import FFTEngine, bin_groups
from wavspa.dsp.wavelet import WaveletEngine
from wavspa.dsp.windowing import WINDOW_NAMES, make_window, normalize_window_name
from wavspa.errors import ConfigError, EngineError
from wavspa.render.scale import ScaleMode


class _ArraySource:
    def __init__(self, samples: np.ndarray, sample_rate: int = 8000):
        self.samples = np.asarray(samples, dtype=np.float64)
        self.sample_rate = sample_rate
        self.channels = 1
        self.frames = self.samples.size
        self.rewound = False

    def read_all(self) -> np.ndarray:
        return self.samples.copy()

    def rewind(self) -> None:
        self.rewound = True


def _sine(freq: float, n: int, sample_rate: int = 8000, amp: float = 1.0) -> np.ndarray:
    t = np.arange(n) / float(sample_rate)
    return amp * np.sin(2.0 * np.pi * freq * t)


def test_bin_groups_cover_range_with_non_empty_groups() -> None:
    for mode in ScaleMode:
        heads, counts = bin_groups(1024, 8000.0, 100.0, 3900.0, 64, mode)
        assert heads.size == counts.size == 64
        assert np.all(counts >= 1)
        assert np.all(np.diff(heads) >= 0)
        assert heads[0] == round(1024 * 100.0 / 8000.0)
        assert heads[-1] + counts[-1] <= 1024 // 2 + 1


def test_fft_power_peaks_at_tone() -> None:
    engine = FFTEngine(1024, 64, window="hann", freq_range=(100.0, 3900.0))
    engine.prepare(_ArraySource(np.zeros(4096)))
    engine.feed(_sine(1000.0, 1024))
    power = engine.power()
    assert power.shape == (64,)
    heads, counts = engine._heads, engine._counts
    expected = int(np.nonzero((heads <= 128) & (128 < heads + counts))[0][0])
    assert abs(int(np.argmax(power)) - expected) <= 1


def test_fft_amplitude_is_relative_to_samples_used() -> None:
    engine = FFTEngine(1024, 512, window="rectangular", scale_mode=ScaleMode.LINEAR, freq_range=(0.0, 4000.0))
    engine.set_sample_rate(8000)
    engine.feed(_sine(1000.0, 1024))
    amp = engine.amplitude()
    # one bin per position; a bin-centred full-scale tone has |X| = N / 2
    assert amp[128] == pytest.approx(20.0 * np.log10(0.5), abs=1e-6)
    assert int(np.argmax(amp)) == 128


def test_fft_feed_slides_buffer() -> None:
    engine = FFTEngine(16, 4, window="hann", freq_range=(1000.0, 3000.0))
    engine.set_sample_rate(8000)
    engine.feed(np.ones(4))
    assert engine.used == 4
    assert engine.data[-4:].tolist() == [1.0] * 4
    assert engine.data[:-4].sum() == 0.0
    engine.feed(np.full(4, 2.0))
    assert engine.data[-8:].tolist() == [1.0] * 4 + [2.0] * 4
    engine.feed(np.arange(40.0))
    assert engine.used == 16
    assert engine.data.tolist() == list(np.arange(24.0, 40.0))


def test_fft_config_errors() -> None:
    with pytest.raises(ConfigError):
        FFTEngine(64, 33)
    with pytest.raises(ConfigError):
        FFTEngine(1024, 64, freq_range=(4000.0, 200.0))
    with pytest.raises(ConfigError):
        FFTEngine(1024, 64, window="kaiser")
    engine = FFTEngine(1024, 64, freq_range=(200.0, 8000.0))
    with pytest.raises(ConfigError):
        engine.set_sample_rate(8000)


def test_window_tables() -> None:
    assert "flat_top" in WINDOW_NAMES
    assert normalize_window_name("Blackman-Nuttall") == "blackman_nuttall"
    flat = make_window("flat_top", 101)
    assert flat[50] == pytest.approx(1.0 + 1.93 + 1.29 + 0.388 + 0.032)
    assert np.allclose(flat, flat[::-1])
    assert np.all(make_window("rectangular", 8) == 1.0)


def _wavelet(width: int = 32, lo: float = 500.0, hi: float = 2000.0) -> WaveletEngine:
    return WaveletEngine(24.0, width, freq_range=(lo, hi))


def test_wavelet_peaks_at_tone() -> None:
    engine = _wavelet()
    tone = engine.freqs[16]
    source = _ArraySource(_sine(tone, 8000))
    engine.prepare(source)
    assert source.rewound
    for _ in range(6):
        engine.feed(np.zeros(800))
    assert engine.position == 4000
    assert int(np.argmax(engine.amplitude())) == 16
    assert int(np.argmax(engine.power())) == 16


def test_wavelet_kernel_half_widths_shrink_with_frequency() -> None:
    engine = _wavelet()
    engine.set_sample_rate(8000)
    assert engine.half_widths[0] > engine.half_widths[-1]
    assert engine.freqs[0] == pytest.approx(500.0)


def test_wavelet_position_past_signal_raises() -> None:
    engine = _wavelet()
    engine.prepare(_ArraySource(np.zeros(100)))
    engine.feed(np.zeros(100))
    engine.power()
    engine.feed(np.zeros(100))
    with pytest.raises(EngineError):
        engine.power()


def test_wavelet_config_errors() -> None:
    with pytest.raises(ConfigError):
        WaveletEngine(24.0, 16)
    with pytest.raises(ConfigError):
        WaveletEngine(0.0, 32)
    with pytest.raises(ConfigError):
        WaveletEngine(24.0, 32, freq_range=(0.0, 1000.0))
    engine = _wavelet(hi=8000.0)
    with pytest.raises(ConfigError):
        engine.set_sample_rate(8000)
    with pytest.raises(ConfigError):
        _wavelet().set_sample_rate(100)
