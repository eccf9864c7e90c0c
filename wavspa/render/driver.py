"""Pipeline driver that turns a sample source into an encoded spectrogram."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Callable, Optional, Union

import numpy as np

from wavspa.dsp.base import TransformEngine
from wavspa.dsp.fft import FFTEngine
from wavspa.dsp.wavelet import WaveletEngine
from wavspa.errors import EngineError, PipelineIOError, UnsupportedInputError, WavspaError
from wavspa.io.png import encode_png
from wavspa.io.wav import WavSource
from wavspa.render.config import RenderConfig, TransformMode
from wavspa.render.framebuffer import FrameBuffer
from wavspa.render.overlay import FREQ_MARGIN_PX, TIME_MARGIN_PX, GridOverlay
from wavspa.render.quantize import IntensityQuantizer
from wavspa.render.scale import ScaleMapper
from wavspa.util.logging import get_logger

logger = get_logger(__name__)

Encoder = Callable[[int, int, bytes, str], bytes]
ProgressCallback = Callable[[int, int], None]


def build_engine(config: RenderConfig) -> TransformEngine:
    """Instantiate the transform engine selected by ``config.engine``."""
    if config.engine == "wavelet":
        return WaveletEngine(
            config.sigma,
            config.output_width,
            scale_mode=config.scale_mode,
            freq_range=config.freq_range,
        )
    return FFTEngine(
        config.fft_size,
        config.output_width,
        window=config.window_function,
        scale_mode=config.scale_mode,
        freq_range=config.freq_range,
    )


class PipelineDriver:
    """Bind one render job to its source, engine and encoder."""

    def __init__(
        self,
        config: RenderConfig,
        source,
        engine: TransformEngine,
        encoder: Encoder = encode_png,
        progress: Optional[ProgressCallback] = None,
    ):
        self.config = config
        self.source = source
        self.engine = engine
        self.encoder = encoder
        self.progress = progress
        self.block_size = 0
        self.block_count = 0
        self.framebuffer: Optional[FrameBuffer] = None
        self.quantizer: Optional[IntensityQuantizer] = None

    def _check_input(self) -> None:
        channels = int(self.source.channels)
        if channels != 1:
            raise UnsupportedInputError(f"input has {channels} channels; only mono input is supported")

        self.block_size = int(self.source.sample_rate) * int(self.config.unit_time) // 1000
        if self.block_size < 1:
            raise UnsupportedInputError(
                f"unit time {self.config.unit_time} ms is shorter than one sample at {self.source.sample_rate} Hz"
            )
        self.block_count = int(self.source.frames) // self.block_size
        if self.block_count < 1:
            raise UnsupportedInputError(
                f"input holds {self.source.frames} samples, fewer than one block of {self.block_size}"
            )

    def _prepare_engine(self) -> None:
        try:
            self.engine.prepare(self.source)
        except WavspaError:
            raise
        except Exception as exc:
            raise EngineError(f"engine setup failed: {exc}") from exc

    def _allocate(self) -> FrameBuffer:
        cfg = self.config
        self.quantizer = IntensityQuantizer(
            cfg.effective_policy(),
            ceil=cfg.ceil,
            floor=cfg.floor,
            luminance=cfg.luminance,
        )
        return FrameBuffer(
            self.block_count,
            cfg.output_width,
            column_step=cfg.column_step,
            margin_x=FREQ_MARGIN_PX if cfg.draw_freq_grid else 0,
            margin_y=TIME_MARGIN_PX if cfg.draw_time_grid else 0,
            quantizer=self.quantizer,
        )

    def _log_summary(self, fb: FrameBuffer) -> None:
        cfg = self.config
        details = ", ".join(f"{key}={value}" for key, value in self.engine.describe().items())
        logger.info(
            "rendering %d blocks of %d samples at %d Hz (%s, %s, %s scale, %g-%g Hz) into %dx%d",
            self.block_count,
            self.block_size,
            self.source.sample_rate,
            cfg.engine,
            cfg.transform_mode.value,
            cfg.scale_mode.value,
            cfg.lo_freq,
            cfg.hi_freq,
            fb.width,
            fb.height,
            extra={"block_count": self.block_count},
        )
        if details:
            logger.info("engine parameters: %s", details)
        logger.debug("render config: %s", cfg.as_dict())

    def _magnitudes(self, block: np.ndarray) -> np.ndarray:
        try:
            self.engine.feed(block)
            if self.config.transform_mode is TransformMode.POWER:
                values = self.engine.power()
            else:
                values = self.engine.amplitude()
        except WavspaError:
            raise
        except Exception as exc:
            raise EngineError(f"engine failed: {exc}") from exc
        values = np.asarray(values, dtype=np.float64).reshape(-1)
        if values.size != self.config.output_width:
            raise EngineError(
                f"engine returned {values.size} values, expected {self.config.output_width}"
            )
        return values

    def render(self) -> FrameBuffer:
        """Fill a frame buffer with every block and its requested overlays."""
        self.config.validate()
        self._check_input()
        self._prepare_engine()
        fb = self._allocate()
        self.framebuffer = fb
        self._log_summary(fb)

        for col in range(self.block_count):
            block = self.source.read(self.block_size)
            if len(block) != self.block_size:
                raise PipelineIOError(
                    f"short read at block {col}: got {len(block)} of {self.block_size} samples"
                )
            values = self._magnitudes(block)
            if self.config.transform_mode is TransformMode.POWER:
                fb.draw_power(col, values)
            else:
                fb.draw_amplitude(col, values)
            logger.debug("block %d/%d done", col + 1, self.block_count)
            if self.progress is not None:
                self.progress(col + 1, self.block_count)

        if self.config.draw_freq_grid or self.config.draw_time_grid:
            overlay = GridOverlay(ScaleMapper(self.config.scale_config()))
            if self.config.draw_freq_grid:
                count = overlay.draw_frequency_grid(fb)
                logger.debug("drew %d frequency gridlines", count)
            if self.config.draw_time_grid:
                count = overlay.draw_time_grid(fb, self.source.sample_rate, self.block_size, self.block_count)
                logger.debug("drew %d time gridlines", count)

        if self.quantizer is not None and self.quantizer.anomalies:
            logger.warning(
                "%d non-finite magnitudes rendered as black",
                self.quantizer.anomalies,
                extra={"anomalies": self.quantizer.anomalies},
            )
        return fb

    def run(self, output_path: Union[str, Path]) -> Path:
        """Render, encode and write the image; returns the written path."""
        fb = self.render()
        dest = Path(output_path)
        data = self.encoder(fb.width, fb.height, fb.serialize(), "RGB")
        tmp = dest.with_name(dest.name + ".part")
        try:
            with open(tmp, "wb") as fh:
                fh.write(data)
            os.replace(tmp, dest)
        except OSError as exc:
            if tmp.exists():
                tmp.unlink()
            raise PipelineIOError(f"cannot write {dest}: {exc}") from exc
        logger.info("wrote %s (%d bytes)", dest, len(data), extra={"output": str(dest)})
        return dest


def render_file(config: RenderConfig, input_path: Union[str, Path], output_path: Union[str, Path], progress=None) -> Path:
    """Open ``input_path``, render it with the configured engine and write ``output_path``."""
    config.validate()
    engine = build_engine(config)
    with WavSource(input_path) as source:
        logger.info(
            "input %s: %d Hz, %s-bit, %d channel(s), %d samples",
            input_path,
            source.sample_rate,
            source.sample_size or "?",
            source.channels,
            source.frames,
            extra={"input": str(input_path)},
        )
        driver = PipelineDriver(config, source, engine, progress=progress)
        return driver.run(output_path)
