"""Lossless PNG encoding of raw RGB rasters via Pillow."""

from __future__ import annotations

import io

from PIL import Image

_MODES = {"RGB": 3}


def encode_png(width: int, height: int, raw: bytes, pixel_format: str = "RGB") -> bytes:
    """Encode ``raw`` (row-major, one byte per channel) as a PNG byte stream."""
    mode = str(pixel_format).upper()
    if mode not in _MODES:
        raise ValueError(f"unsupported pixel format '{pixel_format}'")
    expected = width * height * _MODES[mode]
    if len(raw) != expected:
        raise ValueError(f"raster is {len(raw)} bytes, expected {expected} for {width}x{height} {mode}")
    image = Image.frombytes(mode, (width, height), bytes(raw))
    out = io.BytesIO()
    image.save(out, format="PNG", optimize=False)
    return out.getvalue()
