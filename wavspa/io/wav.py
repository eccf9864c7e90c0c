"""PCM sample source backed by soundfile."""

from __future__ import annotations

import re
from pathlib import Path
from typing import Optional, Union

import numpy as np
import soundfile as sf

from wavspa.errors import PipelineIOError

_SUBTYPE_BITS = {
    "PCM_S8": 8,
    "PCM_U8": 8,
    "PCM_16": 16,
    "PCM_24": 24,
    "PCM_32": 32,
    "FLOAT": 32,
    "DOUBLE": 64,
    "ULAW": 8,
    "ALAW": 8,
}


def subtype_bits(subtype: str) -> Optional[int]:
    if subtype in _SUBTYPE_BITS:
        return _SUBTYPE_BITS[subtype]
    match = re.search(r"(\d+)$", subtype or "")
    return int(match.group(1)) if match else None


class WavSource:
    """Sequential block reader over a sound file.

    Samples are returned as float64 normalised to ``[-1.0, 1.0)``; mono files
    yield 1-D arrays, multi-channel files ``(frames, channels)`` arrays.
    """

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)
        try:
            self._fh = sf.SoundFile(str(self.path), mode="r")
        except (RuntimeError, OSError) as exc:
            raise PipelineIOError(f"cannot open {self.path}: {exc}") from exc

    @property
    def sample_rate(self) -> int:
        return int(self._fh.samplerate)

    @property
    def channels(self) -> int:
        return int(self._fh.channels)

    @property
    def frames(self) -> int:
        """Total samples per channel."""
        return int(self._fh.frames)

    @property
    def subtype(self) -> str:
        return str(self._fh.subtype)

    @property
    def sample_size(self) -> Optional[int]:
        """Bits per sample, when the encoding has a fixed width."""
        return subtype_bits(self.subtype)

    @property
    def bytes_per_sec(self) -> Optional[int]:
        bits = self.sample_size
        if bits is None:
            return None
        return self.sample_rate * self.channels * bits // 8

    @property
    def eof(self) -> bool:
        return self._fh.tell() >= self.frames

    def read(self, n: int) -> np.ndarray:
        try:
            return self._fh.read(frames=int(n), dtype="float64", always_2d=False)
        except (RuntimeError, OSError) as exc:
            raise PipelineIOError(f"read failed on {self.path}: {exc}") from exc

    def read_all(self) -> np.ndarray:
        self.rewind()
        return self.read(self.frames)

    def rewind(self) -> None:
        self._fh.seek(0)

    def close(self) -> None:
        self._fh.close()

    def __enter__(self) -> "WavSource":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()
